"""
Pytest configuration and shared fixtures for the test suite.

This module provides:
- src/ on the Python path so tests run without an installed package
- Custom pytest markers for test categorization
- An in-memory fake order store for resolver and scanner tests
- Order factories
"""

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

# Add src to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from order_tracking.integrations.base import (  # noqa: E402
    BaseOrderStore,
    Customer,
    Fulfillment,
    LineItem,
    Order,
    OrderPage,
)


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external dependencies"
    )
    config.addinivalue_line(
        "markers", "integration: Tests that run against a local fake Shopify server"
    )


# ============================================================================
# Fake Store
# ============================================================================

class FakeOrderStore(BaseOrderStore):
    """
    In-memory order store.

    Orders are kept newest first, the way the store lists them. Every call is
    recorded in `calls` as (operation, argument) tuples.
    """

    def __init__(
        self,
        orders: Optional[List[Order]] = None,
        customers: Optional[Dict[str, List[Customer]]] = None,
        tracking_index: Optional[Dict[str, List[str]]] = None,
        free_text_index: Optional[Dict[str, List[str]]] = None,
    ):
        super().__init__()
        self.orders = list(orders or [])
        self.customers = customers or {}
        self.tracking_index = tracking_index or {}
        self.free_text_index = free_text_index or {}
        self.calls: List[tuple] = []

    def operations(self) -> List[str]:
        return [call[0] for call in self.calls]

    async def filtered_fetch(self, filters: Dict[str, Any]) -> List[Order]:
        self.calls.append(("filtered_fetch", dict(filters)))
        matches = self.orders
        if "email" in filters:
            matches = [o for o in matches if o.email == filters["email"]]
        if "name" in filters:
            matches = [o for o in matches if o.name == filters["name"]]
        if "customer_id" in filters:
            matches = [o for o in matches if o.customer_id == filters["customer_id"]]
        return matches[: int(filters.get("limit", 50))]

    async def fetch_by_id(self, order_id: str) -> Optional[Order]:
        self.calls.append(("fetch_by_id", order_id))
        return next((o for o in self.orders if o.id == order_id), None)

    async def graphql_candidate_search(self, term: str, exact: bool, first: Optional[int] = None) -> List[str]:
        self.calls.append(("graphql_candidate_search", (term, exact)))
        index = self.tracking_index if exact else self.free_text_index
        return index.get(term, [])[: first or 5]

    async def customer_search(self, term: str, limit: int = 1) -> List[Customer]:
        self.calls.append(("customer_search", term))
        return self.customers.get(term, [])[:limit]

    async def fetch_page(self, cursor: Optional[str], page_size: int, fields: Optional[List[str]] = None) -> OrderPage:
        self.calls.append(("fetch_page", cursor))
        offset = int(cursor) if cursor else 0
        end = offset + page_size
        next_cursor = str(end) if end < len(self.orders) else None
        return OrderPage(orders=self.orders[offset:end], next_cursor=next_cursor)


# ============================================================================
# Order Factories
# ============================================================================

def make_order(
    order_id: str,
    name: Optional[str] = None,
    email: Optional[str] = None,
    customer_id: Optional[str] = None,
    fulfillments: Optional[List[Fulfillment]] = None,
    **kwargs,
) -> Order:
    return Order(
        id=order_id,
        name=name or f"#{order_id}",
        email=email,
        customer_id=customer_id,
        fulfillments=fulfillments or [],
        **kwargs,
    )


def shipped(tracking_number: Optional[str] = None, **kwargs) -> Fulfillment:
    return Fulfillment(tracking_number=tracking_number, **kwargs)


def filler_orders(count: int, start: int = 5000) -> List[Order]:
    """Orders shipped with unrelated tracking codes."""
    return [
        make_order(str(start + i), fulfillments=[shipped(f"XX{start + i:09d}BR")])
        for i in range(count)
    ]


@pytest.fixture
def sample_order() -> Order:
    return make_order(
        "1001",
        name="#1024",
        email="cliente@example.com",
        customer_id="77",
        customer_name="Maria Silva",
        financial_status="paid",
        fulfillment_status="fulfilled",
        currency="BRL",
        total_price="199.90",
        total_discounts="10.00",
        line_items=[LineItem(title="Camiseta", quantity=2, price="94.95")],
        shipping_address={"city": "São Paulo", "province_code": "SP"},
        fulfillments=[
            shipped(
                "AA000000001BR",
                tracking_numbers=["AA000000001BR"],
                tracking_company="Correios",
                tracking_url="https://rastreamento.correios.com.br/app/index.php?objeto=AA000000001BR",
            )
        ],
    )
