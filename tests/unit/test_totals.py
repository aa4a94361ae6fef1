from decimal import Decimal

import pytest

from quoteforge.pricing.totals import Totals, compute_totals, to_decimal


def D(s: str) -> Decimal:
    return Decimal(s)


def test_percent_discount_on_taxable_order():
    totals = compute_totals(
        [{"unit_price": 100, "quantity": 2, "is_taxable": True}],
        {"type": "percent", "value": 10},
        0.1,
    )
    assert totals.subtotal == D("200.000")
    assert totals.discount_amount == D("20.000")
    assert totals.taxable_base == D("180.000")
    assert totals.vat_amount == D("18.000")
    assert totals.grand_total == D("198.000")


def test_amount_discount_is_prorated_by_taxable_share_of_subtotal():
    totals = compute_totals(
        [
            {"unit_price": 50, "quantity": 1, "is_taxable": True},
            {"unit_price": 50, "quantity": 1, "is_taxable": False},
        ],
        {"type": "amount", "value": 20},
        0.05,
    )
    assert totals.subtotal == D("100.000")
    assert totals.discount_amount == D("20.000")
    assert totals.taxable_base == D("40.000")
    assert totals.vat_amount == D("2.000")
    assert totals.grand_total == D("82.000")


def test_proration_ignores_line_count():
    # One cheap taxable line and two expensive exempt ones: a per-line ratio would give 1/3.
    totals = compute_totals(
        [
            {"unit_price": 10, "quantity": 1, "is_taxable": True},
            {"unit_price": 45, "quantity": 1, "is_taxable": False},
            {"unit_price": 45, "quantity": 1, "is_taxable": False},
        ],
        {"type": "amount", "value": 50},
        0.1,
    )
    assert totals.taxable_base == D("5.000")
    assert totals.vat_amount == D("0.500")
    assert totals.grand_total == D("50.500")


def test_amount_discount_clamps_to_subtotal():
    totals = compute_totals(
        [{"unit_price": 100, "quantity": 1, "is_taxable": True}],
        {"type": "amount", "value": 500},
        0.1,
    )
    assert totals.subtotal == D("100.000")
    assert totals.discount_amount == D("100.000")
    assert totals.taxable_base == D("0.000")
    assert totals.grand_total == totals.vat_amount


def test_no_discount_taxes_only_taxable_lines():
    totals = compute_totals(
        [
            {"unit_price": "12.345", "quantity": 2},
            {"unit_price": 10, "quantity": 1, "is_taxable": False},
        ],
        {"type": "none", "value": 99},
        0.1,
    )
    assert totals.subtotal == D("34.690")
    assert totals.discount_amount == D("0.000")
    assert totals.taxable_base == D("24.690")
    assert totals.vat_amount == D("2.469")
    assert totals.grand_total == D("37.159")


def test_empty_order_is_all_zero():
    totals = compute_totals([], {"type": "percent", "value": 10}, 0.1)
    assert totals == Totals(*(D("0.000"),) * 5)


def test_zero_priced_items_do_not_divide_by_zero():
    totals = compute_totals(
        [{"unit_price": 0, "quantity": 5, "is_taxable": True}],
        {"type": "amount", "value": 3},
        0.1,
    )
    assert totals.subtotal == D("0.000")
    assert totals.discount_amount == D("0.000")
    assert totals.taxable_base == D("0.000")


@pytest.mark.parametrize("bad", [None, "abc", float("nan"), float("inf"), "", True])
def test_bad_numeric_input_counts_as_zero(bad):
    totals = compute_totals(
        [
            {"unit_price": bad, "quantity": 3},
            {"unit_price": 10, "quantity": bad},
            {"unit_price": 5, "quantity": 2},
        ],
        {"type": "percent", "value": bad},
        bad,
    )
    assert totals.subtotal == D("10.000")
    assert totals.discount_amount == D("0.000")
    assert totals.vat_amount == D("0.000")
    assert totals.grand_total == D("10.000")


def test_missing_discount_and_fields():
    totals = compute_totals([{"product_name": "x"}], None, None)
    assert totals.grand_total == D("0.000")


@pytest.mark.parametrize(
    "items,discount,vat",
    [
        ([{"unit_price": 33.333, "quantity": 3}], {"type": "percent", "value": 33.3}, 0.15),
        ([{"unit_price": 1, "quantity": 1, "is_taxable": False}], {"type": "amount", "value": 0.5}, 0.2),
        ([{"unit_price": 7.5, "quantity": 4}, {"unit_price": 2, "quantity": 9, "is_taxable": False}], {"type": "percent", "value": 100}, 0.1),
        ([{"unit_price": 0.001, "quantity": 1}], {"type": "amount", "value": 1}, 1),
    ],
)
def test_totals_bounds(items, discount, vat):
    t = compute_totals(items, discount, vat)
    assert D("0") <= t.taxable_base <= t.subtotal
    assert D("0") <= t.discount_amount <= t.subtotal
    assert t.grand_total >= t.subtotal - t.discount_amount >= D("0")
    for value in (t.subtotal, t.discount_amount, t.taxable_base, t.vat_amount, t.grand_total):
        assert value.as_tuple().exponent == -3


def test_json_form_keeps_three_places():
    t = compute_totals([{"unit_price": 1.5, "quantity": 2}], {"type": "none", "value": 0}, 0)
    assert t.as_json()["subtotal"] == "3.000"
    assert Totals.from_json(t.as_json()) == t


def test_to_decimal_passes_decimals_through():
    assert to_decimal(D("1.2345")) == D("1.2345")
    assert to_decimal(" 2.5 ") == D("2.5")
