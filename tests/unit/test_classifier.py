"""
Identifier classification tests.
"""

import pytest

from order_tracking.classifier import IdentifierClass, Query, classify, only_digits

pytestmark = pytest.mark.unit


@pytest.mark.parametrize("raw", [
    "cliente@example.com",
    "  Cliente.Nome+loja@mail.com.br ",
    "12345678901@example.com",
])
def test_email_addresses(raw):
    assert classify(raw) is IdentifierClass.EMAIL


@pytest.mark.parametrize("raw", ["12345678901", "123.456.789-01", " 123 456 789 01 "])
def test_eleven_digits_is_tax_id(raw):
    assert classify(raw) is IdentifierClass.TAX_ID


@pytest.mark.parametrize("raw", ["1024", "#1024", "#123456", "1", "Pedido 98765"])
def test_order_numbers(raw):
    assert classify(raw) is IdentifierClass.ORDER_NUMBER


@pytest.mark.parametrize("raw", [
    "BR123456789XX",
    "123456",
    "1234567890",
    "123456789012",
    "LB-REF-CODE",
    "not@an email",
])
def test_everything_else_is_tracking_code(raw):
    assert classify(raw) is IdentifierClass.TRACKING_CODE


@pytest.mark.parametrize("raw", ["", "   ", None])
def test_blank_is_unknown(raw):
    assert classify(raw) is IdentifierClass.UNKNOWN


def test_email_without_dot_after_at_is_not_email():
    assert classify("someone@localhost") is not IdentifierClass.EMAIL


def test_classification_is_deterministic():
    assert {classify("BR123456789XX") for _ in range(5)} == {IdentifierClass.TRACKING_CODE}


def test_only_digits():
    assert only_digits("#10-24a") == "1024"
    assert only_digits("") == ""
    assert only_digits(None) == ""


def test_query_from_text_strips_and_classifies():
    query = Query.from_text("  #1024 ")

    assert query.raw == "#1024"
    assert query.digits_only == "1024"
    assert query.identifier_class is IdentifierClass.ORDER_NUMBER
    assert not query.is_blank


def test_blank_query():
    assert Query.from_text("  ").is_blank
