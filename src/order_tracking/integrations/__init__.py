"""
Order Store Integrations

Read-only access to the external e-commerce order store.
"""

from .base import BaseOrderStore, Customer, Fulfillment, LineItem, Order, OrderPage
from .shopify import ShopifyOrderStore

__all__ = [
    "BaseOrderStore",
    "Customer",
    "Fulfillment",
    "LineItem",
    "Order",
    "OrderPage",
    "ShopifyOrderStore",
]
