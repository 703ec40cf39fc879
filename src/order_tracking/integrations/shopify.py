"""
Shopify Order Store Integration

Read-only access to orders and customers via the Shopify Admin REST and
GraphQL APIs.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import aiohttp

from ..config import StoreConfig
from ..exceptions import RateLimitedError, StoreTransportError
from .base import BaseOrderStore, Customer, Fulfillment, LineItem, Order, OrderPage

logger = logging.getLogger(__name__)

# Static document: the search term only ever travels as a variable.
ORDER_SEARCH_QUERY = """
query OrderSearch($first: Int!, $query: String!) {
  orders(first: $first, query: $query, sortKey: CREATED_AT, reverse: true) {
    edges {
      node {
        id
        legacyResourceId
      }
    }
  }
}
"""

RATE_LIMIT_STATUS = 429
THROTTLED_CODE = "THROTTLED"


def build_search_term(term: str, exact: bool) -> str:
    """
    Build a Shopify search-syntax term for the orders query.

    The value is always quoted and escaped so customer input cannot add
    extra search clauses.

    Args:
        term: Text typed by the customer
        exact: Qualify the term with the tracking_number index field

    Returns:
        Search-syntax string, e.g. tracking_number:"BR123"
    """
    escaped = term.replace("\\", "\\\\").replace('"', '\\"')
    if exact:
        return f'tracking_number:"{escaped}"'
    return f'"{escaped}"'


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (ValueError, TypeError, AttributeError):
        return None


def _clean_params(params: Optional[Dict[str, Any]]) -> Dict[str, str]:
    return {k: str(v) for k, v in (params or {}).items() if v is not None}


@dataclass
class StoreResponse:
    """Decoded store response."""

    status: int
    data: Any = None
    next_cursor: Optional[str] = None


class ShopifyOrderStore(BaseOrderStore):
    """
    Shopify order store using the Admin API.

    Rate limiting (HTTP 429 or a THROTTLED GraphQL error) is retried after a
    fixed back-off, at most config.max_attempts times, then RateLimitedError
    is raised. Any other failure is logged and reported as "no data".
    """

    def __init__(self, config: StoreConfig):
        super().__init__()
        self.config = config
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create an aiohttp session carrying the store credentials."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers=self.config.headers,
                timeout=self._timeout,
            )
        return self._session

    # ==================== Transport ====================

    def _get_api_url(self, endpoint: str) -> str:
        """Build the full REST URL."""
        return f"{self.config.base_url}/{endpoint}"

    async def _send(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> StoreResponse:
        """Perform one HTTP round-trip. Raises StoreTransportError on failure."""
        session = await self._get_session()

        try:
            async with session.request(
                method, url, params=_clean_params(params), json=payload
            ) as response:
                if response.status >= 400:
                    return StoreResponse(status=response.status)

                data = await response.json(content_type=None)
                return StoreResponse(
                    status=response.status,
                    data=data,
                    next_cursor=self._next_cursor(response),
                )
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise StoreTransportError(f"{method} {url}: {e.__class__.__name__}: {e}") from e

    async def _request(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Optional[StoreResponse]:
        """
        Send a request, retrying while the store rate limits it.

        Returns:
            The successful response, or None when the call failed

        Raises:
            RateLimitedError: If every attempt was rate limited
        """
        max_attempts = self.config.max_attempts
        backoff = self.config.rate_limit_backoff

        for attempt in range(1, max_attempts + 1):
            try:
                response = await self._send(method, url, params=params, payload=payload)
            except StoreTransportError as e:
                logger.error(f"❌ Shopify request failed: {e}")
                return None

            if not self._is_throttled(response):
                break

            if attempt < max_attempts:
                logger.warning(
                    f"⏳ Shopify rate limit on {method} {url} "
                    f"(attempt {attempt}/{max_attempts}), retrying in {backoff}s"
                )
                await asyncio.sleep(backoff)
        else:
            logger.error(f"❌ Shopify rate limit persisted on {method} {url} after {max_attempts} attempts")
            raise RateLimitedError(url, max_attempts)

        if response.status >= 400:
            if response.status != 404:
                logger.error(f"Shopify {method} {url} returned HTTP {response.status}")
            return None

        return response

    @staticmethod
    def _is_throttled(response: StoreResponse) -> bool:
        if response.status == RATE_LIMIT_STATUS:
            return True
        if isinstance(response.data, dict):
            for error in response.data.get("errors") or []:
                if isinstance(error, dict):
                    if (error.get("extensions") or {}).get("code") == THROTTLED_CODE:
                        return True
        return False

    @staticmethod
    def _next_cursor(response: aiohttp.ClientResponse) -> Optional[str]:
        """Extract the page_info token from a rel="next" Link header."""
        link = response.links.get("next")
        if not link:
            return None
        url = link.get("url")
        if url is None:
            return None
        return url.query.get("page_info")

    # ==================== Operations ====================

    async def filtered_fetch(self, filters: Dict[str, Any]) -> List[Order]:
        """Fetch orders matching REST filters."""
        response = await self._request("GET", self._get_api_url("orders.json"), params=filters)
        if response is None or not isinstance(response.data, dict):
            return []
        return [self._parse_order(o) for o in response.data.get("orders") or []]

    async def fetch_by_id(self, order_id: str) -> Optional[Order]:
        """Fetch a single order by its numeric id."""
        url = self._get_api_url(f"orders/{quote(str(order_id), safe='')}.json")
        response = await self._request("GET", url)
        if response is None or not isinstance(response.data, dict):
            return None

        order_data = response.data.get("order")
        if not order_data:
            return None
        return self._parse_order(order_data)

    async def customer_search(self, term: str, limit: int = 1) -> List[Customer]:
        """Fuzzy customer search by free-text term."""
        response = await self._request(
            "GET", self._get_api_url("customers/search.json"), params={"query": term, "limit": limit}
        )
        if response is None or not isinstance(response.data, dict):
            return []

        return [
            self._parse_customer(c)
            for c in response.data.get("customers") or []
            if c.get("id") is not None
        ]

    async def graphql_candidate_search(
        self,
        term: str,
        exact: bool,
        first: Optional[int] = None,
    ) -> List[str]:
        """Ask the store's order search index for candidate order ids."""
        first = first or self.config.graphql_candidate_limit
        payload = {
            "query": ORDER_SEARCH_QUERY,
            "variables": {"first": first, "query": build_search_term(term, exact)},
        }

        response = await self._request("POST", self.config.graphql_url, payload=payload)
        if response is None or not isinstance(response.data, dict):
            return []

        if response.data.get("errors"):
            logger.error(f"Shopify GraphQL search returned errors: {response.data['errors']}")
            return []

        edges = ((response.data.get("data") or {}).get("orders") or {}).get("edges") or []
        ids = []
        for edge in edges:
            node = edge.get("node") or {}
            order_id = node.get("legacyResourceId") or str(node.get("id", "")).rsplit("/", 1)[-1]
            if order_id and order_id not in ids:
                ids.append(order_id)

        return ids[:first]

    async def fetch_page(
        self,
        cursor: Optional[str],
        page_size: int,
        fields: Optional[List[str]] = None,
    ) -> OrderPage:
        """Fetch one page of orders, newest first."""
        params: Dict[str, Any] = {"limit": page_size}
        if fields:
            params["fields"] = ",".join(fields)
        # Shopify rejects filters other than limit/fields alongside page_info
        if cursor:
            params["page_info"] = cursor
        else:
            params["status"] = "any"

        response = await self._request("GET", self._get_api_url("orders.json"), params=params)
        if response is None or not isinstance(response.data, dict):
            return OrderPage()

        orders = [self._parse_order(o) for o in response.data.get("orders") or []]
        return OrderPage(orders=orders, next_cursor=response.next_cursor)

    # ==================== Parsing ====================

    def _parse_fulfillment(self, data: Dict[str, Any]) -> Fulfillment:
        tracking_urls = data.get("tracking_urls") or []
        return Fulfillment(
            tracking_number=data.get("tracking_number"),
            tracking_numbers=[n for n in data.get("tracking_numbers") or [] if n],
            tracking_company=data.get("tracking_company"),
            tracking_url=data.get("tracking_url") or (tracking_urls[0] if tracking_urls else None),
            status=data.get("shipment_status") or data.get("status"),
            created_at=_parse_datetime(data.get("created_at")),
        )

    def _parse_customer(self, data: Dict[str, Any]) -> Customer:
        return Customer(
            id=str(data.get("id")),
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
            email=data.get("email"),
        )

    def _parse_order(self, order_data: Dict[str, Any]) -> Order:
        """Parse Shopify order data into an Order."""
        customer_data = order_data.get("customer") or {}
        customer = self._parse_customer(customer_data)

        items = []
        for item in order_data.get("line_items") or []:
            items.append(LineItem(
                title=item.get("title") or item.get("name") or "Unknown",
                quantity=item.get("quantity", 1),
                price=item.get("price"),
                sku=item.get("sku"),
            ))

        return Order(
            id=str(order_data.get("id", "")),
            name=order_data.get("name", ""),
            created_at=_parse_datetime(order_data.get("created_at")),
            email=order_data.get("email") or customer_data.get("email"),
            customer_id=customer.id if customer_data.get("id") is not None else None,
            customer_name=customer.full_name,
            financial_status=order_data.get("financial_status"),
            fulfillment_status=order_data.get("fulfillment_status"),
            cancelled_at=_parse_datetime(order_data.get("cancelled_at")),
            fulfillments=[self._parse_fulfillment(f) for f in order_data.get("fulfillments") or []],
            line_items=items,
            total_price=order_data.get("total_price"),
            total_discounts=order_data.get("total_discounts"),
            currency=order_data.get("currency"),
            shipping_address=order_data.get("shipping_address") or {},
        )
