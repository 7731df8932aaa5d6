from gstbill.models.company import Company
from gstbill.models.invoice import TaxInvoice, InvoiceItem, InvoiceStatus

__all__ = ["Company", "TaxInvoice", "InvoiceItem", "InvoiceStatus"]
