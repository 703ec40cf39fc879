"""
Tiered Resolver

Runs an ordered chain of lookup tiers for a classified query and returns the
first acceptable order. A tier that yields no acceptable candidate abstains
and the next tier runs; tiers never run concurrently and their results are
never merged.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import AsyncGenerator, List, Optional, Sequence

from .classifier import IdentifierClass, Query, is_short_order_number
from .config import StoreConfig
from .exceptions import InvalidQueryError, ResolutionTimeoutError
from .integrations.base import BaseOrderStore, Order
from .scanner import PaginationScanner
from .validator import has_tracking

logger = logging.getLogger(__name__)

MIN_TRACKING_LENGTH = 6


class Tier(str, Enum):
    EMAIL = "email"
    TAX_ID = "tax_id"
    ORDER_NUMBER = "order_number"
    TRACKING_SEARCH = "tracking_search"
    TRACKING_FREE_TEXT = "tracking_free_text"
    TRACKING_SCAN = "tracking_scan"

    @property
    def is_tracking(self) -> bool:
        """Whether the order was matched on a tracking code."""
        return self in (Tier.TRACKING_SEARCH, Tier.TRACKING_FREE_TEXT, Tier.TRACKING_SCAN)


@dataclass(frozen=True)
class ResolutionResult:
    """Zero or one order, tagged with the tier that produced it."""

    order: Optional[Order] = None
    tier: Optional[Tier] = None

    @property
    def found(self) -> bool:
        return self.order is not None

    @classmethod
    def not_found(cls) -> "ResolutionResult":
        return cls()


class LookupTier(ABC):
    """
    One strategy in the resolution chain.

    Subclasses implement:
    - applies(): Whether the tier should run for a query
    - candidates(): Async stream of candidate orders, fetched lazily
    """

    tier: Tier
    requires_validation: bool = False

    def __init__(self, store: BaseOrderStore):
        self.store = store

    @abstractmethod
    def applies(self, query: Query) -> bool:
        pass

    @abstractmethod
    def candidates(self, query: Query) -> AsyncGenerator[Order, None]:
        pass


class EmailTier(LookupTier):
    """Exact email filter; the store's own match is authoritative."""

    tier = Tier.EMAIL

    def applies(self, query: Query) -> bool:
        return query.identifier_class is IdentifierClass.EMAIL

    async def candidates(self, query: Query) -> AsyncGenerator[Order, None]:
        for order in await self.store.filtered_fetch({"email": query.raw, "status": "any", "limit": 1}):
            yield order


class TaxIdTier(LookupTier):
    """Find the customer owning a CPF, then their most recent order."""

    tier = Tier.TAX_ID

    def applies(self, query: Query) -> bool:
        return query.identifier_class is IdentifierClass.TAX_ID

    async def candidates(self, query: Query) -> AsyncGenerator[Order, None]:
        customers = await self.store.customer_search(query.digits_only, limit=1)
        if not customers:
            logger.info("No customer matched the tax id")
            return

        orders = await self.store.filtered_fetch(
            {"customer_id": customers[0].id, "status": "any", "limit": 1}
        )
        for order in orders:
            yield order


def order_name_for(query: Query) -> str:
    """Canonical "#NNNN" order name for a query."""
    if query.raw.startswith("#"):
        return query.raw
    return f"#{query.digits_only}"


class OrderNumberTier(LookupTier):
    """
    Exact order name match, also tried as a fallback for short digit strings.

    An email that did not match is never retried as an order number: the
    digits in "ana1@..." would otherwise resolve to someone else's order #1.
    """

    tier = Tier.ORDER_NUMBER

    def applies(self, query: Query) -> bool:
        if query.identifier_class is IdentifierClass.ORDER_NUMBER:
            return True
        return (
            query.identifier_class is not IdentifierClass.EMAIL
            and is_short_order_number(query.digits_only)
        )

    async def candidates(self, query: Query) -> AsyncGenerator[Order, None]:
        orders = await self.store.filtered_fetch(
            {"name": order_name_for(query), "status": "any", "limit": 1}
        )
        for order in orders:
            yield order


class TrackingTier(LookupTier):
    """Base for tiers that match on tracking codes; always validated."""

    requires_validation = True

    def applies(self, query: Query) -> bool:
        if query.identifier_class is IdentifierClass.EMAIL:
            return False
        return len(query.raw) >= MIN_TRACKING_LENGTH


class TrackingSearchTier(TrackingTier):
    """
    Ask the store's search index for a handful of candidate ids, then fetch
    each full order for validation.

    With exact=True the tracking_number index field is searched; with
    exact=False the term is searched as free text, the way a person would
    type it into the store admin.
    """

    def __init__(self, store: BaseOrderStore, exact: bool = True, limit: int = 5):
        super().__init__(store)
        self.exact = exact
        self.limit = limit
        self.tier = Tier.TRACKING_SEARCH if exact else Tier.TRACKING_FREE_TEXT

    async def candidates(self, query: Query) -> AsyncGenerator[Order, None]:
        ids = await self.store.graphql_candidate_search(query.raw, exact=self.exact, first=self.limit)
        logger.info(f"Tracking search ({'exact' if self.exact else 'free text'}) returned {len(ids)} candidates")

        for order_id in ids:
            order = await self.store.fetch_by_id(order_id)
            if order is not None:
                yield order


class TrackingScanTier(TrackingTier):
    """Exhaustive, page-bounded scan of recent orders."""

    tier = Tier.TRACKING_SCAN

    def __init__(self, store: BaseOrderStore, scanner: PaginationScanner, max_pages: int, page_size: int):
        super().__init__(store)
        self.scanner = scanner
        self.max_pages = max_pages
        self.page_size = page_size

    async def candidates(self, query: Query) -> AsyncGenerator[Order, None]:
        order = await self.scanner.scan(query.raw, self.max_pages, self.page_size)
        if order is not None:
            yield order


class TieredResolver:
    """
    Resolves a query against the store through an ordered list of tiers.

    Tracking-based candidates are only returned when has_tracking() confirms
    the exact searched code is on the order.
    """

    def __init__(self, tiers: Sequence[LookupTier], timeout: Optional[float] = None):
        self.tiers: List[LookupTier] = list(tiers)
        self.timeout = timeout

    @classmethod
    def for_store(cls, store: BaseOrderStore, config: StoreConfig) -> "TieredResolver":
        """Build the standard tier chain for a store."""
        tiers: List[LookupTier] = [
            EmailTier(store),
            TaxIdTier(store),
            OrderNumberTier(store),
            TrackingSearchTier(store, exact=True, limit=config.graphql_candidate_limit),
        ]
        if config.free_text_search:
            tiers.append(TrackingSearchTier(store, exact=False, limit=config.graphql_candidate_limit))
        tiers.append(TrackingScanTier(
            store,
            PaginationScanner(store, page_delay=config.page_delay),
            max_pages=config.scan_max_pages,
            page_size=config.scan_page_size,
        ))
        return cls(tiers, timeout=config.resolution_timeout)

    async def resolve_text(self, text: str) -> ResolutionResult:
        """
        Classify and resolve raw query text.

        Raises:
            InvalidQueryError: If the text is empty or blank
        """
        query = Query.from_text(text)
        if query.is_blank:
            raise InvalidQueryError("Query text is required")
        return await self.resolve(query)

    async def resolve(self, query: Query) -> ResolutionResult:
        """
        Resolve a classified query.

        Raises:
            ResolutionTimeoutError: If the resolver timeout elapses
            RateLimitedError: If the store kept rate limiting a call
        """
        if self.timeout is None:
            return await self._run_tiers(query)

        try:
            return await asyncio.wait_for(self._run_tiers(query), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.error(f"⏱️ Resolution of a {query.identifier_class.value} query timed out after {self.timeout}s")
            raise ResolutionTimeoutError(f"Resolution exceeded {self.timeout}s") from e

    async def _run_tiers(self, query: Query) -> ResolutionResult:
        logger.info(f"🔍 Resolving {query.identifier_class.value} query")
        for lookup in self.tiers:
            if not lookup.applies(query):
                continue

            logger.debug(f"Trying tier {lookup.tier.value}")
            candidates = lookup.candidates(query)
            try:
                async for order in candidates:
                    if lookup.requires_validation and not has_tracking(order, query.raw):
                        logger.info(f"Candidate {order.name} rejected: tracking code not on order")
                        continue
                    logger.info(f"✅ Resolved to {order.name} via {lookup.tier.value} tier")
                    return ResolutionResult(order=order, tier=lookup.tier)
            finally:
                await candidates.aclose()

            logger.info(f"Tier {lookup.tier.value} abstained")

        logger.info("No tier matched the query")
        return ResolutionResult.not_found()
