"""
Order lookup exceptions.
"""


class OrderLookupError(Exception):
    """Base exception for order lookup failures."""


class InvalidQueryError(OrderLookupError):
    """Raised when the query text is empty or blank."""


class StoreTransportError(OrderLookupError):
    """Raised by the store transport when a call fails; absorbed by the client."""


class RateLimitedError(OrderLookupError):
    """Raised when the store keeps rate limiting after the retry budget is spent."""

    def __init__(self, url: str, attempts: int):
        self.url = url
        self.attempts = attempts
        super().__init__(f"Store rate limit persisted after {attempts} attempts ({url})")


class ResolutionTimeoutError(OrderLookupError):
    """Raised when a resolution exceeds its overall deadline."""
