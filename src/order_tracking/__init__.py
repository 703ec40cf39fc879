"""
Order Tracking Lookup

Resolves a customer's free-text query (email, CPF, order number or tracking
code) into a single order held by a Shopify store.
"""

from .classifier import IdentifierClass, Query, classify
from .config import StoreConfig
from .resolver import ResolutionResult, Tier, TieredResolver

__all__ = [
    "IdentifierClass",
    "Query",
    "classify",
    "StoreConfig",
    "ResolutionResult",
    "Tier",
    "TieredResolver",
]
