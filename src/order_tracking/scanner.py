"""
Pagination Scanner

Last-resort walk over the order listing, validating every order against the
searched tracking code. Bounded by a page budget.
"""

import asyncio
import logging
from typing import Optional

from .integrations.base import BaseOrderStore, Order
from .validator import has_tracking

logger = logging.getLogger(__name__)

SCAN_FIELDS = [
    "id",
    "name",
    "email",
    "created_at",
    "cancelled_at",
    "financial_status",
    "fulfillment_status",
    "fulfillments",
    "customer",
    "line_items",
    "total_price",
    "total_discounts",
    "currency",
    "shipping_address",
]


class PaginationScanner:
    """Scans successive order pages for a validated tracking match."""

    def __init__(self, store: BaseOrderStore, page_delay: float = 0.5):
        """
        Args:
            store: Order store to page through
            page_delay: Seconds to wait between page fetches to stay under the rate limit
        """
        self.store = store
        self.page_delay = page_delay

    async def scan(self, searched: str, max_pages: int, page_size: int) -> Optional[Order]:
        """
        Walk up to max_pages pages looking for an order carrying `searched`.

        Returns:
            The first validated order, or None when the budget or the listing runs out
        """
        cursor: Optional[str] = None
        scanned = 0

        for page_number in range(1, max_pages + 1):
            if page_number > 1 and self.page_delay > 0:
                await asyncio.sleep(self.page_delay)

            page = await self.store.fetch_page(cursor, page_size, fields=SCAN_FIELDS)
            scanned += len(page.orders)

            for order in page.orders:
                if has_tracking(order, searched):
                    logger.info(f"✅ Scan matched {order.name} on page {page_number} ({scanned} orders scanned)")
                    return order

            logger.debug(f"Scan page {page_number}: {len(page.orders)} orders, no match")

            if not page.next_cursor:
                logger.info(f"Scan reached the end of the listing after {page_number} pages ({scanned} orders)")
                return None
            cursor = page.next_cursor

        logger.info(f"Scan budget of {max_pages} pages exhausted ({scanned} orders scanned)")
        return None
