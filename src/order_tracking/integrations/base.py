"""
Base Order Store Integration

Order data model and the abstract read-only store interface the resolver
works against. Store integrations (Shopify today) must inherit from
BaseOrderStore.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

import aiohttp


@dataclass
class Fulfillment:
    """A shipment belonging to an order."""

    tracking_number: Optional[str] = None
    tracking_numbers: List[str] = field(default_factory=list)
    tracking_company: Optional[str] = None
    tracking_url: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class LineItem:
    """Represents an item in an order."""

    title: str
    quantity: int
    price: Optional[str] = None
    sku: Optional[str] = None


@dataclass
class Customer:
    """A store customer, from customer search or embedded in an order."""

    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None

    @property
    def full_name(self) -> Optional[str]:
        name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return name or None


@dataclass
class Order:
    """Standardized read-only view of a store order."""

    id: str
    name: str
    created_at: Optional[datetime] = None
    email: Optional[str] = None
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    financial_status: Optional[str] = None
    fulfillment_status: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    fulfillments: List[Fulfillment] = field(default_factory=list)
    line_items: List[LineItem] = field(default_factory=list)
    total_price: Optional[str] = None
    total_discounts: Optional[str] = None
    currency: Optional[str] = None
    shipping_address: Dict[str, Any] = field(default_factory=dict)


@dataclass
class OrderPage:
    """One page of a paginated order listing."""

    orders: List[Order] = field(default_factory=list)
    next_cursor: Optional[str] = None


class BaseOrderStore(ABC):
    """
    Abstract base class for order store integrations.

    All operations are read-only. Integrations must implement:
    - filtered_fetch(): Orders matching REST filters
    - fetch_by_id(): A single order by id
    - graphql_candidate_search(): Candidate order ids from the store's search index
    - customer_search(): Customers matching a free-text term
    - fetch_page(): One page of the order listing plus the next-page cursor
    """

    def __init__(self):
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create an aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def close(self):
        """Close the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    @abstractmethod
    async def filtered_fetch(self, filters: Dict[str, Any]) -> List[Order]:
        """
        Fetch orders matching query-parameter filters.

        Args:
            filters: REST filters such as name, email, customer_id, status, limit

        Returns:
            Matching orders; an empty list when there are none
        """
        pass

    @abstractmethod
    async def fetch_by_id(self, order_id: str) -> Optional[Order]:
        pass

    @abstractmethod
    async def graphql_candidate_search(
        self,
        term: str,
        exact: bool,
        first: Optional[int] = None,
    ) -> List[str]:
        """
        Ask the store's search index for candidate order ids.

        Args:
            term: Text to search for
            exact: Match the indexed tracking number field instead of free text
            first: Maximum number of candidates

        Returns:
            Candidate order ids, possibly empty
        """
        pass

    @abstractmethod
    async def customer_search(self, term: str, limit: int = 1) -> List[Customer]:
        pass

    @abstractmethod
    async def fetch_page(
        self,
        cursor: Optional[str],
        page_size: int,
        fields: Optional[List[str]] = None,
    ) -> OrderPage:
        """
        Fetch one page of the order listing.

        Args:
            cursor: Opaque next-page cursor from the previous page, None for the first
            page_size: Orders per page
            fields: Optional field projection

        Returns:
            OrderPage with the orders and the next cursor (None on the last page)
        """
        pass
