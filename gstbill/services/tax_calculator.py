"""GST totals for an invoice.

CGST, SGST and IGST are applied independently (not compounded) to the
subtotal. Nothing is rounded here: display layers round to 2 decimals,
so recomputing from the same inputs always yields identical floats.
"""
import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional


def coerce_amount(value: Any) -> float:
    """Coerce user-entered numeric input to float, 0.0 when invalid."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number):
        return 0.0
    return number


def _field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def is_billable(item: Any) -> bool:
    """Items with a blank description are kept out of totals."""
    description = _field(item, "description")
    return isinstance(description, str) and description.strip() != ""


def line_amount(item: Any) -> float:
    return coerce_amount(_field(item, "quantity")) * coerce_amount(_field(item, "unit_price"))


@dataclass(frozen=True)
class TaxRates:
    """GST rates as percentages. Missing rates count as 0."""
    cgst_rate: float = 0.0
    sgst_rate: float = 0.0
    igst_rate: float = 0.0

    @classmethod
    def of(cls, cgst_rate: Any = None, sgst_rate: Any = None, igst_rate: Any = None) -> "TaxRates":
        return cls(
            cgst_rate=coerce_amount(cgst_rate),
            sgst_rate=coerce_amount(sgst_rate),
            igst_rate=coerce_amount(igst_rate),
        )


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: float
    cgst_amount: float
    sgst_amount: float
    igst_amount: float
    total_tax: float
    grand_total: float

    def rounded(self) -> "InvoiceTotals":
        """Copy rounded to 2 decimals, for display only."""
        return InvoiceTotals(
            subtotal=round_for_display(self.subtotal),
            cgst_amount=round_for_display(self.cgst_amount),
            sgst_amount=round_for_display(self.sgst_amount),
            igst_amount=round_for_display(self.igst_amount),
            total_tax=round_for_display(self.total_tax),
            grand_total=round_for_display(self.grand_total),
        )


def round_for_display(value: float) -> float:
    return round(value, 2)


def compute_totals(items: Iterable[Any], rates: Optional[TaxRates] = None) -> InvoiceTotals:
    """
    Compute invoice totals from line items and GST rates.

    Items may be ORM rows, pydantic models or plain dicts exposing
    ``description``, ``quantity`` and ``unit_price``.
    """
    rates = rates or TaxRates()

    # Left-to-right accumulation, so the result does not depend on the interpreter's sum()
    subtotal = 0.0
    for item in items:
        if is_billable(item):
            subtotal = subtotal + line_amount(item)

    cgst = subtotal * (rates.cgst_rate / 100)
    sgst = subtotal * (rates.sgst_rate / 100)
    igst = subtotal * (rates.igst_rate / 100)
    total_tax = cgst + sgst + igst

    return InvoiceTotals(
        subtotal=subtotal,
        cgst_amount=cgst,
        sgst_amount=sgst,
        igst_amount=igst,
        total_tax=total_tax,
        grand_total=subtotal + total_tax,
    )
