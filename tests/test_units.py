import json
from decimal import Decimal

import pytest

from defect_portal.workflow import (
    MALFORMED_ITEM,
    MISSING_ITEM,
    Ok,
    ValidationFailure,
    as_text,
    optional_id,
    parse_item_selection,
)


def test_as_text_defaults_for_blanks():
    assert as_text(None, "0") == "0"
    assert as_text("", "0") == "0"
    assert as_text(None) == ""


def test_as_text_decimal_drops_trailing_zeros():
    assert as_text(Decimal("12.00")) == "12"
    assert as_text(Decimal("480.50")) == "480.5"
    assert as_text(Decimal("0.00"), "0") == "0"


def test_as_text_passthrough():
    assert as_text(501) == "501"
    assert as_text("600") == "600"


@pytest.mark.parametrize("value", [None, "", "   ", "null", "NULL"])
def test_optional_id_blank_and_null_sentinel(value):
    assert optional_id(value) is None


def test_optional_id_keeps_real_ids():
    assert optional_id("4") == "4"
    assert optional_id(" 5 ") == "5"


def test_parse_item_selection_json_struct():
    raw = json.dumps(
        {"itemId": "501", "quantity": "12", "width": "600", "length": "2400", "amount": "480.5"}
    )
    result = parse_item_selection(raw)
    assert isinstance(result, Ok)
    selection, has_details = result.value
    assert has_details is True
    assert selection.item_id == "501"
    assert selection.quantity == "12"
    assert selection.amount == "480.5"


def test_parse_item_selection_numbers_and_nulls_become_text():
    result = parse_item_selection('{"itemId": 501, "quantity": 3, "width": null}')
    assert isinstance(result, Ok)
    selection, _ = result.value
    assert selection.item_id == "501"
    assert selection.quantity == "3"
    assert selection.width == ""


def test_parse_item_selection_bare_id():
    result = parse_item_selection("502")
    assert isinstance(result, Ok)
    selection, has_details = result.value
    assert selection.item_id == "502"
    assert has_details is False


@pytest.mark.parametrize("raw", [None, "", "   "])
def test_parse_item_selection_missing(raw):
    assert parse_item_selection(raw) == ValidationFailure(MISSING_ITEM)


@pytest.mark.parametrize("raw", ['{"itemId": "501"', "[1, 2]", '{"itemId": {"nested": 1}}'])
def test_parse_item_selection_malformed(raw):
    assert parse_item_selection(raw) == ValidationFailure(MALFORMED_ITEM)


def test_parse_item_selection_struct_without_item_id():
    assert parse_item_selection('{"quantity": "1"}') == ValidationFailure(MISSING_ITEM)
