from typing import Annotated
import logging

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from gstbill.config import settings
from gstbill.database import get_db
from gstbill.services.invoice_number_service import InvoiceNumberAllocator
from gstbill.services.invoice_number_source import (
    DatabaseInvoiceNumberSource,
    InvoiceNumberSource,
    RemoteInvoiceNumberSource,
    get_invoice_number_cache,
)
from gstbill.services.invoice_service import InvoiceService


logger = logging.getLogger(__name__)

DB = Annotated[AsyncSession, Depends(get_db)]


def get_invoice_number_source(db: DB) -> InvoiceNumberSource:
    """Remote invoice store when configured, otherwise this service's own database."""
    if settings.INVOICE_BACKEND_URL:
        return RemoteInvoiceNumberSource(
            settings.INVOICE_BACKEND_URL,
            timeout=settings.INVOICE_BACKEND_TIMEOUT,
        )
    return DatabaseInvoiceNumberSource(db)


def get_allocator(
    source: Annotated[InvoiceNumberSource, Depends(get_invoice_number_source)],
) -> InvoiceNumberAllocator:
    return InvoiceNumberAllocator(source, get_invoice_number_cache())


def get_invoice_service(
    db: DB,
    allocator: Annotated[InvoiceNumberAllocator, Depends(get_allocator)],
) -> InvoiceService:
    return InvoiceService(db, allocator)


Allocator = Annotated[InvoiceNumberAllocator, Depends(get_allocator)]
Invoices = Annotated[InvoiceService, Depends(get_invoice_service)]
