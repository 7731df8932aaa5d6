"""
Sources of already-issued invoice numbers.

The allocator only ever reads this list. Two sources are supported:

- ``DatabaseInvoiceNumberSource``: invoices persisted by this service
- ``RemoteInvoiceNumberSource``: a REST invoice store (``GET /api/v1/invoices``)

``LocalInvoiceNumberCache`` remembers the last good listing so numbering can
degrade to it when a source fails.
"""
import logging
import threading
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Any, List, Optional

import httpx
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from gstbill.core.exceptions import InvoiceNumberSourceError
from gstbill.models.invoice import TaxInvoice


logger = logging.getLogger(__name__)


class InvoiceNumberSource(ABC):
    """Lists every invoice number issued so far."""

    @abstractmethod
    async def list_invoice_numbers(self) -> List[str]:
        """
        Raises:
            InvoiceNumberSourceError: If the listing cannot be fetched
        """
        pass


class DatabaseInvoiceNumberSource(InvoiceNumberSource):
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_invoice_numbers(self) -> List[str]:
        try:
            result = await self.db.execute(select(TaxInvoice.invoice_number))
        except SQLAlchemyError as e:
            raise InvoiceNumberSourceError(f"Could not list invoice numbers: {e}") from e
        return [number for number in result.scalars().all() if number]


class RemoteInvoiceNumberSource(InvoiceNumberSource):
    """Lists invoice numbers from a REST invoice store."""

    LIST_PATH = "/api/v1/invoices"

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def list_invoice_numbers(self) -> List[str]:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            try:
                response = await client.get(self.LIST_PATH)
                response.raise_for_status()
                body = response.json()
            except httpx.HTTPStatusError as e:
                raise InvoiceNumberSourceError(
                    f"Invoice store returned HTTP {e.response.status_code}",
                    details={"response": e.response.text},
                ) from e
            except httpx.HTTPError as e:
                raise InvoiceNumberSourceError(f"Invoice store unreachable: {e}") from e
            except ValueError as e:
                raise InvoiceNumberSourceError("Invoice store returned invalid JSON") from e

        return self.parse_listing(body)

    @staticmethod
    def parse_listing(body: Any) -> List[str]:
        """Accepts a bare list or ``{"data": [...]}`` of invoices or numbers."""
        if isinstance(body, dict):
            body = body.get("data")
        if not isinstance(body, list):
            raise InvoiceNumberSourceError("Unexpected invoice listing shape")

        numbers = []
        for entry in body:
            if isinstance(entry, str):
                number = entry
            elif isinstance(entry, dict):
                number = entry.get("invoiceNumber") or entry.get("invoice_number") or ""
            else:
                continue
            number = str(number).strip()
            if number:
                numbers.append(number)
        return numbers


class LocalInvoiceNumberCache:
    """Last known invoice numbers, kept in process memory."""

    def __init__(self):
        self._numbers: List[str] = []
        self._lock = threading.Lock()

    def store(self, numbers: List[str]) -> None:
        with self._lock:
            self._numbers = list(numbers)

    def remember(self, number: str) -> None:
        with self._lock:
            if number not in self._numbers:
                self._numbers.append(number)

    def snapshot(self) -> List[str]:
        with self._lock:
            return list(self._numbers)

    def clear(self) -> None:
        with self._lock:
            self._numbers = []


@lru_cache()
def get_invoice_number_cache() -> LocalInvoiceNumberCache:
    return LocalInvoiceNumberCache()
