"""Stateless GST calculations used while an invoice is being edited."""
from fastapi import APIRouter, Query

from gstbill.schemas.invoice import (
    AmountInWordsResponse,
    InvoiceTotalsResponse,
    TotalsRequest,
    TotalsResponse,
)
from gstbill.services.amount_in_words import amount_to_words
from gstbill.services.tax_calculator import TaxRates, compute_totals

router = APIRouter()


@router.post("/totals", response_model=TotalsResponse)
async def calculate_totals(body: TotalsRequest):
    """Subtotal, CGST/SGST/IGST and grand total. Values are not rounded."""
    totals = compute_totals(body.items, TaxRates.of(body.cgst_rate, body.sgst_rate, body.igst_rate))
    return TotalsResponse(
        totals=InvoiceTotalsResponse.model_validate(totals),
        amount_in_words=amount_to_words(totals.grand_total),
    )


@router.get("/amount-in-words", response_model=AmountInWordsResponse)
async def get_amount_in_words(amount: float = Query(..., ge=0)):
    """Rupee amount in Indian-English words."""
    return AmountInWordsResponse(amount=amount, words=amount_to_words(amount))
