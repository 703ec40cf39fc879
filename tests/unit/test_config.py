"""
Store configuration tests.
"""

import pytest

from order_tracking.config import StoreConfig

pytestmark = pytest.mark.unit

ENV_VARS = [
    "SHOPIFY_STORE_URL",
    "SHOPIFY_API_TOKEN",
    "SHOPIFY_API_VERSION",
    "SHOPIFY_MAX_ATTEMPTS",
    "SHOPIFY_FREE_TEXT_SEARCH",
    "RESOLUTION_TIMEOUT",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


def test_from_env(clean_env):
    clean_env.setenv("SHOPIFY_STORE_URL", "https://loja.myshopify.com/")
    clean_env.setenv("SHOPIFY_API_TOKEN", "shpat_abc")
    clean_env.setenv("SHOPIFY_MAX_ATTEMPTS", "6")
    clean_env.setenv("SHOPIFY_FREE_TEXT_SEARCH", "false")

    config = StoreConfig.from_env()

    assert config.store_url == "https://loja.myshopify.com"
    assert config.api_version == "2024-10"
    assert config.max_attempts == 6
    assert config.free_text_search is False
    assert config.base_url == "https://loja.myshopify.com/admin/api/2024-10"
    assert config.graphql_url.endswith("/admin/api/2024-10/graphql.json")
    assert config.headers["X-Shopify-Access-Token"] == "shpat_abc"


def test_missing_token_is_rejected(clean_env):
    clean_env.setenv("SHOPIFY_STORE_URL", "https://loja.myshopify.com")

    with pytest.raises(ValueError, match="access_token is required"):
        StoreConfig.from_env()


def test_retry_budget_must_allow_one_attempt():
    with pytest.raises(ValueError):
        StoreConfig(store_url="https://x", access_token="t", max_attempts=0)


def test_config_is_immutable_and_hides_token():
    config = StoreConfig(store_url="https://x", access_token="shpat_secret")

    with pytest.raises(AttributeError):
        config.api_version = "2025-01"
    assert "shpat_secret" not in repr(config)
