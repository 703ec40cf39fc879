"""
Tracking validation tests.
"""

import pytest

from conftest import make_order, shipped
from order_tracking.validator import has_tracking, matching_fulfillments

pytestmark = pytest.mark.unit


def test_primary_tracking_number_matches():
    order = make_order("1", fulfillments=[shipped("BR123456789XX")])
    assert has_tracking(order, "BR123456789XX")


def test_match_is_trimmed_and_case_insensitive():
    order = make_order("1", fulfillments=[shipped("  br123456789xx ")])
    assert has_tracking(order, " BR123456789XX")


def test_tracking_numbers_list_matches():
    order = make_order("1", fulfillments=[
        shipped(None),
        shipped("OTHER000001", tracking_numbers=["OTHER000001", "BR123456789XX"]),
    ])
    assert has_tracking(order, "br123456789xx")


def test_tracking_url_substring_matches():
    order = make_order("1", fulfillments=[
        shipped(None, tracking_url="https://www.linkcorreios.com.br/?id=BR123456789XX"),
    ])
    assert has_tracking(order, "BR123456789XX")


def test_short_code_inside_unrelated_url_is_accepted():
    # substring matching on URLs is deliberately loose
    order = make_order("1", fulfillments=[
        shipped(None, tracking_url="https://carrier.example/track?id=99123456"),
    ])
    assert has_tracking(order, "123456")


def test_partial_number_does_not_match_fields():
    order = make_order("1", fulfillments=[shipped("BR123456789XX", tracking_numbers=["BR123456789XX"])])
    assert not has_tracking(order, "BR123456")


def test_order_without_fulfillments():
    assert not has_tracking(make_order("1"), "BR123456789XX")


def test_blank_search_never_matches():
    order = make_order("1", fulfillments=[shipped("", tracking_url="https://carrier.example/")])
    assert not has_tracking(order, "   ")


def test_none_order():
    assert not has_tracking(None, "BR123456789XX")


def test_matching_fulfillments_returns_only_matches():
    wanted = shipped("BR2")
    order = make_order("1", fulfillments=[shipped("BR1"), wanted])
    assert matching_fulfillments(order, "br2") == [wanted]
