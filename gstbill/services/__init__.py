# Services module
from gstbill.services.amount_in_words import amount_to_words
from gstbill.services.financial_year import fiscal_year_label
from gstbill.services.tax_calculator import compute_totals, InvoiceTotals, TaxRates
from gstbill.services.company_service import CompanyService, derive_acronym
from gstbill.services.invoice_number_service import InvoiceNumberAllocator, InvoiceNumberSession
