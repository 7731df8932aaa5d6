"""Pydantic schemas for tax invoices, totals and print data."""
from datetime import datetime, date
from typing import Optional, List, Any
from uuid import UUID
from pydantic import BaseModel, Field, field_validator

from gstbill.schemas.base import BaseResponseSchema, BaseCreateSchema, BaseUpdateSchema
from gstbill.models.invoice import InvoiceStatus
from gstbill.services.tax_calculator import coerce_amount


# ==================== Line Items ====================

class InvoiceItemBase(BaseModel):
    """Line item as entered. Bad quantity/price input becomes 0."""
    description: str = Field("", max_length=500)
    quantity: float = 0.0
    unit_price: float = 0.0
    hsn_code: Optional[str] = Field(None, max_length=8)
    uom: Optional[str] = Field(None, max_length=10)

    @field_validator("quantity", "unit_price", mode="before")
    @classmethod
    def coerce_numeric(cls, v: Any) -> float:
        return coerce_amount(v)

    @field_validator("description", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> str:
        return v if v is not None else ""


class InvoiceItemCreate(InvoiceItemBase):
    pass


class InvoiceItemResponse(BaseResponseSchema):
    id: UUID
    position: int
    description: str
    quantity: float
    unit_price: float
    hsn_code: Optional[str] = None
    uom: Optional[str] = None


# ==================== Totals ====================

class TaxRatesInput(BaseModel):
    cgst_rate: Optional[float] = None
    sgst_rate: Optional[float] = None
    igst_rate: Optional[float] = None

    @field_validator("cgst_rate", "sgst_rate", "igst_rate", mode="before")
    @classmethod
    def coerce_rate(cls, v: Any) -> Optional[float]:
        if v is None:
            return None
        return coerce_amount(v)


class InvoiceTotalsResponse(BaseResponseSchema):
    subtotal: float
    cgst_amount: float
    sgst_amount: float
    igst_amount: float
    total_tax: float
    grand_total: float


class TotalsRequest(TaxRatesInput):
    items: List[InvoiceItemBase] = []


class TotalsResponse(BaseModel):
    totals: InvoiceTotalsResponse
    amount_in_words: str


class AmountInWordsResponse(BaseModel):
    amount: float
    words: str


# ==================== Invoice ====================

class InvoicePartyFields(TaxRatesInput):
    """Fields shared by create and update."""
    invoice_date: Optional[date] = None
    due_date: Optional[date] = None
    date_of_supply: Optional[date] = None

    billed_to_name: Optional[str] = Field(None, max_length=200)
    billed_to_address: Optional[str] = None
    billed_to_gstin: Optional[str] = Field(None, max_length=15)
    billed_to_state: Optional[str] = Field(None, max_length=100)
    billed_to_code: Optional[str] = Field(None, max_length=2)

    shipped_to_name: Optional[str] = Field(None, max_length=200)
    shipped_to_address: Optional[str] = None
    shipped_to_gstin: Optional[str] = Field(None, max_length=15)
    shipped_to_state: Optional[str] = Field(None, max_length=100)
    shipped_to_code: Optional[str] = Field(None, max_length=2)

    transport_mode: Optional[str] = Field(None, max_length=50)
    vehicle_no: Optional[str] = Field(None, max_length=30)
    place_of_supply: Optional[str] = Field(None, max_length=100)
    order_number: Optional[str] = Field(None, max_length=50)
    tax_on_reverse_charge: Optional[bool] = None
    gr_lr_no: Optional[str] = Field(None, max_length=50)
    eway_bill_no: Optional[str] = Field(None, max_length=20)

    bank_name: Optional[str] = Field(None, max_length=100)
    account_name: Optional[str] = Field(None, max_length=200)
    account_number: Optional[str] = Field(None, max_length=30)
    ifsc_code: Optional[str] = Field(None, max_length=11)

    terms_and_conditions: Optional[str] = None
    jurisdiction: Optional[str] = Field(None, max_length=100)


class InvoiceCreate(InvoicePartyFields, BaseCreateSchema):
    """
    New invoice. ``invoice_sequence`` is the operator-edited 3-digit part of
    the number; omitted means take the proposed next number.
    """
    invoice_sequence: Optional[str] = Field(None, max_length=10, examples=["007"])
    status: InvoiceStatus = InvoiceStatus.DRAFT
    items: List[InvoiceItemCreate] = []


class InvoiceUpdate(InvoicePartyFields, BaseUpdateSchema):
    """Everything except the invoice number, which is frozen."""
    status: Optional[InvoiceStatus] = None
    items: Optional[List[InvoiceItemCreate]] = None


class InvoiceResponse(BaseResponseSchema):
    id: UUID
    invoice_number: str
    status: str
    invoice_date: date
    due_date: Optional[date] = None
    date_of_supply: Optional[date] = None

    billed_to_name: str
    billed_to_address: Optional[str] = None
    billed_to_gstin: Optional[str] = None
    billed_to_state: Optional[str] = None
    billed_to_code: Optional[str] = None

    shipped_to_name: Optional[str] = None
    shipped_to_address: Optional[str] = None
    shipped_to_gstin: Optional[str] = None
    shipped_to_state: Optional[str] = None
    shipped_to_code: Optional[str] = None

    transport_mode: Optional[str] = None
    vehicle_no: Optional[str] = None
    place_of_supply: Optional[str] = None
    order_number: Optional[str] = None
    tax_on_reverse_charge: bool = False
    gr_lr_no: Optional[str] = None
    eway_bill_no: Optional[str] = None

    cgst_rate: float
    sgst_rate: float
    igst_rate: float

    bank_name: Optional[str] = None
    account_name: Optional[str] = None
    account_number: Optional[str] = None
    ifsc_code: Optional[str] = None

    terms_and_conditions: Optional[str] = None
    jurisdiction: Optional[str] = None

    items: List[InvoiceItemResponse] = []
    totals: InvoiceTotalsResponse
    amount_in_words: str

    created_at: datetime
    updated_at: datetime


class InvoiceBrief(BaseResponseSchema):
    """Invoice row for listings."""
    id: UUID
    invoice_number: str
    invoice_date: date
    status: str
    billed_to_name: str
    grand_total: float


class InvoiceListResponse(BaseModel):
    items: List[InvoiceBrief]
    total: int
    skip: int = 0
    limit: int = 50


# ==================== Print Data ====================

class PrintParty(BaseModel):
    name: str = ""
    address: Optional[str] = None
    gstin: Optional[str] = None
    state: Optional[str] = None
    state_code: Optional[str] = None


class PrintLine(BaseModel):
    sr_no: int
    description: str
    hsn_code: Optional[str] = None
    uom: Optional[str] = None
    quantity: float
    rate: float
    amount: float


class PrintBank(BaseModel):
    bank_name: Optional[str] = None
    account_name: Optional[str] = None
    account_number: Optional[str] = None
    ifsc_code: Optional[str] = None


class InvoicePrintData(BaseModel):
    """Finished structure handed to the PDF renderer. Amounts rounded to 2 decimals."""
    title: str = "TAX INVOICE"
    invoice_number: str
    invoice_date: date
    seller: PrintParty
    billed_to: PrintParty
    shipped_to: PrintParty
    transport_mode: Optional[str] = None
    vehicle_no: Optional[str] = None
    date_of_supply: Optional[date] = None
    place_of_supply: Optional[str] = None
    order_number: Optional[str] = None
    gr_lr_no: Optional[str] = None
    eway_bill_no: Optional[str] = None
    tax_on_reverse_charge: bool = False
    lines: List[PrintLine]
    cgst_rate: float
    sgst_rate: float
    igst_rate: float
    totals: InvoiceTotalsResponse
    amount_in_words: str
    bank: PrintBank
    terms_and_conditions: Optional[str] = None
    jurisdiction: Optional[str] = None
