from fastapi import APIRouter

from gstbill.api.v1.endpoints import (
    # Company Profile
    company,
    # Invoicing
    invoice_numbers,
    invoices,
    # Calculations
    calculations,
)

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(company.router, prefix="/company", tags=["Company"])
api_router.include_router(invoice_numbers.router, prefix="/invoice-numbers", tags=["Invoice Numbers"])
api_router.include_router(invoices.router, prefix="/invoices", tags=["Invoices"])
api_router.include_router(calculations.router, prefix="/calculations", tags=["Calculations"])
