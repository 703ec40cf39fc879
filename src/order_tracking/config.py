"""
Store Configuration Module
"""

import os
from dataclasses import dataclass, field
from typing import Dict

from dotenv import load_dotenv


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class StoreConfig:
    """
    Immutable configuration for the Shopify order store.

    Built once at process start and passed to the store client and resolver.
    """

    store_url: str
    access_token: str = field(repr=False)
    api_version: str = "2024-10"
    request_timeout: float = 15.0
    max_attempts: int = 4
    rate_limit_backoff: float = 2.0
    page_delay: float = 0.5
    scan_max_pages: int = 20
    scan_page_size: int = 250
    graphql_candidate_limit: int = 5
    free_text_search: bool = True
    resolution_timeout: float = 60.0

    def __post_init__(self):
        for prop in ("store_url", "access_token"):
            if not getattr(self, prop):
                raise ValueError(f"StoreConfig: {prop} is required")
        if self.max_attempts < 1:
            raise ValueError("StoreConfig: max_attempts must be at least 1")
        # frozen dataclass, so bypass __setattr__ to normalize the URL
        object.__setattr__(self, "store_url", self.store_url.rstrip("/"))

    @property
    def base_url(self) -> str:
        """REST base URL for the configured API version."""
        return f"{self.store_url}/admin/api/{self.api_version}"

    @property
    def graphql_url(self) -> str:
        return f"{self.base_url}/graphql.json"

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "X-Shopify-Access-Token": self.access_token,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    @classmethod
    def from_env(cls) -> "StoreConfig":
        """
        Build the configuration from the process environment.

        A `.env` file in the working directory is loaded first when present.

        Raises:
            ValueError: If the store URL or access token is missing
        """
        load_dotenv()
        return cls(
            store_url=os.getenv("SHOPIFY_STORE_URL", ""),
            access_token=os.getenv("SHOPIFY_API_TOKEN", ""),
            api_version=os.getenv("SHOPIFY_API_VERSION", "2024-10"),
            request_timeout=float(os.getenv("SHOPIFY_REQUEST_TIMEOUT", "15")),
            max_attempts=int(os.getenv("SHOPIFY_MAX_ATTEMPTS", "4")),
            rate_limit_backoff=float(os.getenv("SHOPIFY_RATE_LIMIT_BACKOFF", "2")),
            page_delay=float(os.getenv("SHOPIFY_PAGE_DELAY", "0.5")),
            scan_max_pages=int(os.getenv("SHOPIFY_SCAN_MAX_PAGES", "20")),
            scan_page_size=int(os.getenv("SHOPIFY_SCAN_PAGE_SIZE", "250")),
            free_text_search=_env_bool("SHOPIFY_FREE_TEXT_SEARCH", True),
            resolution_timeout=float(os.getenv("RESOLUTION_TIMEOUT", "60")),
        )
