"""
Identifier Classifier

Decides what kind of identifier a customer typed: an email address, a CPF
(the 11-digit Brazilian individual tax id), an order number or, failing all
of those, a shipment tracking code.
"""

import re
from dataclasses import dataclass
from enum import Enum

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
NON_DIGITS = re.compile(r"\D+")

TAX_ID_LENGTH = 11
MAX_ORDER_NUMBER_DIGITS = 5


class IdentifierClass(str, Enum):
    EMAIL = "email"
    TAX_ID = "tax_id"
    ORDER_NUMBER = "order_number"
    TRACKING_CODE = "tracking_code"
    UNKNOWN = "unknown"


def only_digits(text: str) -> str:
    """Strip every non-digit character."""
    return NON_DIGITS.sub("", text or "")


def is_short_order_number(digits: str) -> bool:
    return 0 < len(digits) <= MAX_ORDER_NUMBER_DIGITS


def classify(raw: str) -> IdentifierClass:
    """
    Classify raw query text.

    Checks run in priority order, so an 11-digit email local part is still an
    email and a "#" prefix always means an order number.

    Args:
        raw: Text as typed by the customer

    Returns:
        The identifier class; blank text is UNKNOWN
    """
    text = (raw or "").strip()
    if not text:
        return IdentifierClass.UNKNOWN

    if EMAIL_PATTERN.match(text):
        return IdentifierClass.EMAIL

    digits = only_digits(text)
    if len(digits) == TAX_ID_LENGTH:
        return IdentifierClass.TAX_ID

    if text.startswith("#") or is_short_order_number(digits):
        return IdentifierClass.ORDER_NUMBER

    return IdentifierClass.TRACKING_CODE


@dataclass(frozen=True)
class Query:
    """A classified customer query."""

    raw: str
    digits_only: str
    identifier_class: IdentifierClass

    @classmethod
    def from_text(cls, text: str) -> "Query":
        raw = (text or "").strip()
        return cls(
            raw=raw,
            digits_only=only_digits(raw),
            identifier_class=classify(raw),
        )

    @property
    def is_blank(self) -> bool:
        return self.identifier_class is IdentifierClass.UNKNOWN
