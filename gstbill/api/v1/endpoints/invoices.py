"""API endpoints for tax invoices."""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from gstbill.api.deps import Invoices
from gstbill.core.exceptions import (
    CompanyProfileMissingError,
    InvoiceNotFoundError,
    InvoiceNumberRejectedError,
)
from gstbill.models.invoice import InvoiceStatus
from gstbill.schemas.invoice import (
    InvoiceBrief,
    InvoiceCreate,
    InvoiceListResponse,
    InvoicePrintData,
    InvoiceResponse,
    InvoiceUpdate,
)

router = APIRouter()


@router.post("", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
async def create_invoice(invoice_in: InvoiceCreate, invoices: Invoices):
    """
    Create a new tax invoice.

    The number is ACRONYM/FY/SEQ; send ``invoice_sequence`` to override the
    proposed sequence. Returns 409 with the validation message when the
    number is a duplicate or not above the highest issued this year.
    """
    try:
        invoice = await invoices.create_invoice(invoice_in)
    except CompanyProfileMissingError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.message)
    except InvoiceNumberRejectedError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)

    return InvoiceResponse.model_validate(invoice)


@router.get("", response_model=InvoiceListResponse)
async def list_invoices(
    invoices: Invoices,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    status: Optional[InvoiceStatus] = None,
    search: Optional[str] = None,
):
    """List invoices, newest first."""
    rows, total = await invoices.list_invoices(skip=skip, limit=limit, search=search, status=status)
    return InvoiceListResponse(
        items=[InvoiceBrief.model_validate(inv) for inv in rows],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.get("/{invoice_id}", response_model=InvoiceResponse)
async def get_invoice(invoice_id: UUID, invoices: Invoices):
    """Get invoice by ID, with recomputed totals and amount in words."""
    try:
        invoice = await invoices.get_invoice(invoice_id)
    except InvoiceNotFoundError:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return InvoiceResponse.model_validate(invoice)


@router.put("/{invoice_id}", response_model=InvoiceResponse)
async def update_invoice(invoice_id: UUID, invoice_in: InvoiceUpdate, invoices: Invoices):
    """Update an invoice. The invoice number cannot be changed."""
    try:
        invoice = await invoices.update_invoice(invoice_id, invoice_in)
    except InvoiceNotFoundError:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return InvoiceResponse.model_validate(invoice)


@router.post("/{invoice_id}/cancel", response_model=InvoiceResponse)
async def cancel_invoice(invoice_id: UUID, invoices: Invoices):
    """Mark an invoice as cancelled. Its number stays used."""
    try:
        invoice = await invoices.cancel_invoice(invoice_id)
    except InvoiceNotFoundError:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return InvoiceResponse.model_validate(invoice)


@router.get("/{invoice_id}/print-data", response_model=InvoicePrintData)
async def get_invoice_print_data(invoice_id: UUID, invoices: Invoices):
    """Finished invoice structure for the PDF renderer."""
    try:
        return await invoices.build_print_data(invoice_id)
    except InvoiceNotFoundError:
        raise HTTPException(status_code=404, detail="Invoice not found")
