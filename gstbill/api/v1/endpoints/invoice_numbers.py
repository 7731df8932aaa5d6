"""API endpoints for invoice number proposal and live validation."""
from fastapi import APIRouter, HTTPException, status

from gstbill.api.deps import Invoices
from gstbill.core.exceptions import CompanyProfileMissingError
from gstbill.schemas.numbering import (
    InvoiceNumberProposal,
    InvoiceNumberValidateRequest,
    InvoiceNumberValidation,
)

router = APIRouter()


@router.get("/next", response_model=InvoiceNumberProposal)
async def propose_invoice_number(invoices: Invoices):
    """Propose the next invoice number for the current financial year."""
    try:
        session = await invoices.open_numbering_session()
    except CompanyProfileMissingError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.message)

    return InvoiceNumberProposal(
        acronym=session.acronym,
        fiscal_year=session.fiscal_year,
        prefix=session.prefix,
        highest_sequence=session.highest,
        suggested_sequence=session.sequence_digits,
        invoice_number=str(session.invoice_number),
        degraded=session.degraded,
    )


@router.post("/validate", response_model=InvoiceNumberValidation)
async def validate_invoice_number(body: InvoiceNumberValidateRequest, invoices: Invoices):
    """
    Validate the operator's sequence field.

    Always 200: an invalid number is reported in the body, never as an error.
    """
    try:
        acronym = await invoices.require_acronym()
    except CompanyProfileMissingError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.message)

    result = await invoices.allocator.validate(acronym, body.sequence)
    return InvoiceNumberValidation(valid=result.valid, candidate=result.candidate, message=result.message)
