"""
Pydantic models for the order tracking API.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..integrations.base import Fulfillment, Order
from ..resolver import Tier
from ..validator import matching_fulfillments

DEFAULT_CUSTOMER_NAME = "Cliente"


class LineItemSummary(BaseModel):
    title: str
    quantity: int
    price: Optional[str] = None


class OrderSummary(BaseModel):
    """Order projection shown to the customer on the tracking page."""

    name: str = Field(..., description="Human order number, e.g. #1024")
    created_at: Optional[datetime] = None
    status: str = Field(..., description="processando, enviado or cancelado")
    tracking_number: Optional[str] = None
    tracking_company: Optional[str] = None
    tracking_url: Optional[str] = None
    customer_name: str = DEFAULT_CUSTOMER_NAME
    financial_status: Optional[str] = None
    line_items: List[LineItemSummary] = Field(default_factory=list)
    total_discounts: Optional[str] = None
    total_price: Optional[str] = None
    currency: Optional[str] = None
    shipping_address: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_order(cls, order: Order, query: str, tier: Optional[Tier] = None) -> "OrderSummary":
        """
        Project an order for display.

        When the order was found by its tracking code, the fulfillment
        carrying that code is shown. Otherwise the query says nothing about
        shipments and the most recent fulfillment with a tracking number is
        used.
        """
        fulfillment = None
        if tier is not None and tier.is_tracking:
            fulfillment = next(iter(matching_fulfillments(order, query)), None)
        if fulfillment is None:
            fulfillment = latest_tracked_fulfillment(order)

        tracking_number = None
        if fulfillment is not None:
            tracking_number = fulfillment.tracking_number or next(iter(fulfillment.tracking_numbers), None)

        return cls(
            name=order.name,
            created_at=order.created_at,
            status=order_status_label(order, tracking_number),
            tracking_number=tracking_number,
            tracking_company=fulfillment.tracking_company if fulfillment else None,
            tracking_url=fulfillment.tracking_url if fulfillment else None,
            customer_name=order.customer_name or DEFAULT_CUSTOMER_NAME,
            financial_status=order.financial_status,
            line_items=[
                LineItemSummary(title=item.title, quantity=item.quantity, price=item.price)
                for item in order.line_items
            ],
            total_discounts=order.total_discounts,
            total_price=order.total_price,
            currency=order.currency,
            shipping_address=order.shipping_address,
        )


def latest_tracked_fulfillment(order: Order) -> Optional[Fulfillment]:
    return next(
        (f for f in reversed(order.fulfillments) if f.tracking_number or f.tracking_numbers),
        None,
    )


def order_status_label(order: Order, tracking_number: Optional[str]) -> str:
    """
    A tracking number only counts as shipped while the store reports no
    fulfillment status; a partially fulfilled order is still processing.
    """
    if order.cancelled_at:
        return "cancelado"
    if order.fulfillment_status == "fulfilled":
        return "enviado"
    if order.fulfillment_status is None and tracking_number:
        return "enviado"
    return "processando"
