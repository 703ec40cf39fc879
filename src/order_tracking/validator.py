"""
Tracking Validator

Decides whether an order really carries a searched tracking code. Search
indexes can be stale or fuzzy, so every tracking-based candidate goes
through has_tracking() before it is returned.
"""

from typing import List, Optional

from .integrations.base import Fulfillment, Order


def normalize(value: Optional[str]) -> str:
    return (value or "").strip().casefold()


def fulfillment_matches(fulfillment: Fulfillment, searched: str) -> bool:
    """
    Check one fulfillment against an already-normalized searched string.

    Carriers expose the same shipment as the primary number, as an entry of
    the numbers list, or only inside the tracking URL. URL matches are plain
    substring matches, so a short code can match an unrelated URL.
    """
    if not searched:
        return False
    if normalize(fulfillment.tracking_number) == searched:
        return True
    if any(normalize(number) == searched for number in fulfillment.tracking_numbers):
        return True
    return searched in normalize(fulfillment.tracking_url)


def matching_fulfillments(order: Order, searched: str) -> List[Fulfillment]:
    target = normalize(searched)
    return [f for f in order.fulfillments if fulfillment_matches(f, target)]


def has_tracking(order: Optional[Order], searched: str) -> bool:
    """Return True if any fulfillment of the order carries the searched code."""
    if order is None:
        return False
    target = normalize(searched)
    return any(fulfillment_matches(f, target) for f in order.fulfillments)
