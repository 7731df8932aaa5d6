"""Domain exceptions raised by the service layer.

Endpoints translate these into HTTP responses; services never raise
``HTTPException`` themselves.
"""
from typing import Any, Dict, Optional


class BillingError(Exception):
    """Base class for billing errors."""
    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class InvoiceNotFoundError(BillingError):
    """Raised when an invoice id does not exist."""
    def __init__(self, invoice_id: Any):
        super().__init__(f"Invoice not found: {invoice_id}", error_code="INVOICE_NOT_FOUND")


class CompanyProfileMissingError(BillingError):
    """Raised when invoice numbering needs a company profile that is not set up."""
    def __init__(self, message: str = "Company profile must be set up before creating invoices."):
        super().__init__(message, error_code="COMPANY_PROFILE_MISSING")


class InvoiceNumberRejectedError(BillingError):
    """Raised when an invoice number fails the duplicate/ordering check at commit."""
    def __init__(self, message: str, invoice_number: Optional[str] = None):
        super().__init__(message, error_code="INVOICE_NUMBER_REJECTED", details={"invoice_number": invoice_number})
        self.invoice_number = invoice_number


class InvoiceNumberStateError(BillingError):
    """Raised on an illegal numbering session transition."""
    pass


class InvoiceNumberSourceError(BillingError):
    """Raised when the list of existing invoice numbers cannot be fetched."""
    pass
