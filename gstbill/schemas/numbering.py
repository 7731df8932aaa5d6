"""Schemas for invoice number proposal and validation."""
from typing import Optional
from pydantic import BaseModel, Field

from gstbill.schemas.base import BaseCreateSchema


class InvoiceNumberProposal(BaseModel):
    acronym: str
    fiscal_year: str = Field(..., examples=["24-25"])
    prefix: str = Field(..., examples=["AGT/24-25/"])
    highest_sequence: int
    suggested_sequence: str = Field(..., examples=["008"])
    invoice_number: str = Field(..., examples=["AGT/24-25/008"])
    degraded: bool = Field(False, description="True when existing numbers came from the local cache")


class InvoiceNumberValidateRequest(BaseCreateSchema):
    sequence: str = Field("", description="Raw sequence field input")


class InvoiceNumberValidation(BaseModel):
    valid: bool
    candidate: str
    message: Optional[str] = None
