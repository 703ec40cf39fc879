"""
HTTP API for order tracking lookups.
"""

from .routes import router

__all__ = ["router"]
