"""Pydantic schemas for the company profile."""
from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import Field

from gstbill.schemas.base import BaseResponseSchema, BaseUpdateSchema


class CompanyUpdate(BaseUpdateSchema):
    """Create-or-update payload; company_name is required on first save."""
    company_name: Optional[str] = Field(None, min_length=1, max_length=200)
    invoice_prefix: Optional[str] = Field(None, max_length=20, pattern=r"^[A-Za-z0-9]*$")
    address: Optional[str] = None
    gstin: Optional[str] = Field(None, max_length=15)
    state: Optional[str] = Field(None, max_length=100)
    state_code: Optional[str] = Field(None, max_length=2)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)
    jurisdiction: Optional[str] = Field(None, max_length=100)


class CompanyResponse(BaseResponseSchema):
    id: UUID
    company_name: str
    invoice_prefix: Optional[str] = None
    acronym: str = Field("", description="Acronym actually used in invoice numbers")
    address: Optional[str] = None
    gstin: Optional[str] = None
    state: Optional[str] = None
    state_code: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    jurisdiction: Optional[str] = None
    created_at: datetime
    updated_at: datetime
