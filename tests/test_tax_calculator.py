"""Tests for GST totals."""

from gstbill.services.tax_calculator import (
    InvoiceTotals,
    TaxRates,
    coerce_amount,
    compute_totals,
)


def test_intrastate_example() -> None:
    totals = compute_totals(
        [{"description": "Steel rod", "quantity": 2, "unit_price": 100}],
        TaxRates(cgst_rate=9, sgst_rate=9, igst_rate=0),
    )
    assert totals == InvoiceTotals(
        subtotal=200, cgst_amount=18, sgst_amount=18, igst_amount=0, total_tax=36, grand_total=236
    )


def test_blank_description_excluded() -> None:
    items = [
        {"description": "Cement", "quantity": 3, "unit_price": 50},
        {"description": "   ", "quantity": 10, "unit_price": 1000},
        {"description": None, "quantity": 1, "unit_price": 1},
    ]
    totals = compute_totals(items, TaxRates(igst_rate=18))
    assert totals.subtotal == 150
    assert totals.igst_amount == 27
    assert totals.grand_total == 177


def test_malformed_numbers_become_zero() -> None:
    items = [
        {"description": "A", "quantity": "abc", "unit_price": 10},
        {"description": "B", "quantity": "2", "unit_price": "12.5"},
        {"description": "C", "quantity": None, "unit_price": float("nan")},
    ]
    assert compute_totals(items).subtotal == 25
    assert coerce_amount("") == 0.0
    assert coerce_amount(True) == 0.0


def test_missing_rates_default_to_zero() -> None:
    totals = compute_totals([{"description": "X", "quantity": 1, "unit_price": 99.99}])
    assert totals.total_tax == 0
    assert totals.grand_total == 99.99
    assert TaxRates.of(None, "9", "bad") == TaxRates(cgst_rate=0, sgst_rate=9, igst_rate=0)


def test_rates_not_compounded() -> None:
    totals = compute_totals(
        [{"description": "X", "quantity": 1, "unit_price": 1000}],
        TaxRates(cgst_rate=9, sgst_rate=9, igst_rate=18),
    )
    assert totals.cgst_amount == 90
    assert totals.sgst_amount == 90
    assert totals.igst_amount == 180


def test_idempotent_and_exact_identity() -> None:
    items = [
        {"description": "Widget", "quantity": 3, "unit_price": 33.33},
        {"description": "Gadget", "quantity": 0.7, "unit_price": 19.99},
        {"description": "Bolt", "quantity": 1234, "unit_price": 0.07},
    ]
    rates = TaxRates(cgst_rate=2.5, sgst_rate=2.5, igst_rate=0.1)

    first = compute_totals(items, rates)
    second = compute_totals(items, rates)

    assert first == second
    assert first.total_tax == first.cgst_amount + first.sgst_amount + first.igst_amount
    assert first.grand_total == first.subtotal + first.total_tax


def test_no_rounding_until_display() -> None:
    totals = compute_totals(
        [{"description": "X", "quantity": 1, "unit_price": 10.555}],
        TaxRates(cgst_rate=9),
    )
    assert totals.cgst_amount == 10.555 * (9 / 100)
    assert totals.rounded().cgst_amount == round(10.555 * 0.09, 2)


def test_accepts_objects_with_attributes() -> None:
    class Row:
        description = "Pipe"
        quantity = 4
        unit_price = 25

    assert compute_totals([Row()]).subtotal == 100
