"""Invoice Service for creating, editing and printing tax invoices.

Numbering for a new invoice goes through an ``InvoiceNumberSession``:
propose, apply the operator's sequence, re-check against a fresh listing,
then insert. The unique constraint on ``invoice_number`` is the last word;
a violation is reported like any other duplicate.
"""
import logging
from datetime import date
from typing import Optional, List, Tuple
from uuid import UUID

from sqlalchemy import select, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from gstbill.config import settings
from gstbill.core.exceptions import (
    CompanyProfileMissingError,
    InvoiceNotFoundError,
    InvoiceNumberRejectedError,
)
from gstbill.models.company import Company
from gstbill.models.invoice import TaxInvoice, InvoiceItem, InvoiceStatus
from gstbill.schemas.invoice import (
    InvoiceCreate,
    InvoiceUpdate,
    InvoiceItemCreate,
    InvoicePrintData,
    InvoiceTotalsResponse,
    PrintBank,
    PrintLine,
    PrintParty,
)
from gstbill.services.company_service import CompanyService, resolve_acronym
from gstbill.services.financial_year import india_today
from gstbill.services.invoice_number_service import (
    DUPLICATE_MESSAGE,
    SEQUENCE_WIDTH,
    InvoiceNumberAllocator,
    InvoiceNumberSession,
    NumberingState,
    sanitize_sequence_input,
)
from gstbill.services.tax_calculator import is_billable, line_amount, round_for_display


logger = logging.getLogger(__name__)

SHIPPING_FIELDS = ("name", "address", "gstin", "state", "code")


def clean_items(items: List[InvoiceItemCreate]) -> List[InvoiceItem]:
    """Drop blank-description rows and number the rest."""
    return [
        InvoiceItem(
            position=position,
            description=item.description.strip(),
            quantity=item.quantity,
            unit_price=item.unit_price,
            hsn_code=item.hsn_code or None,
            uom=item.uom or None,
        )
        for position, item in enumerate(i for i in items if is_billable(i))
    ]


class InvoiceService:
    """Service for invoice management."""

    def __init__(self, db: AsyncSession, allocator: InvoiceNumberAllocator):
        self.db = db
        self.allocator = allocator

    async def get_company(self) -> Optional[Company]:
        return await CompanyService(self.db).get_profile()

    async def require_acronym(self) -> str:
        acronym = resolve_acronym(await self.get_company())
        if not acronym:
            raise CompanyProfileMissingError()
        return acronym

    async def open_numbering_session(self, today: Optional[date] = None) -> InvoiceNumberSession:
        acronym = await self.require_acronym()
        return await self.allocator.open_session(acronym, today)

    async def create_invoice(self, data: InvoiceCreate, today: Optional[date] = None) -> TaxInvoice:
        """
        Create and persist a new invoice.

        Raises:
            CompanyProfileMissingError: If no acronym can be resolved
            InvoiceNumberRejectedError: If the number is a duplicate or not above the highest
        """
        today = today or india_today()
        session = await self.open_numbering_session(today)

        if data.invoice_sequence is not None:
            if sanitize_sequence_input(data.invoice_sequence) is None:
                raise InvoiceNumberRejectedError(
                    f"Invoice no. must be at most {SEQUENCE_WIDTH} digits.",
                    invoice_number=f"{session.prefix}{data.invoice_sequence}",
                )
            session.edit(data.invoice_sequence)
            if session.state == NumberingState.INVALID:
                raise InvoiceNumberRejectedError(session.validation.message, session.validation.candidate)

        validation = await self.allocator.prepare_commit(session)
        if not validation.valid:
            raise InvoiceNumberRejectedError(validation.message, validation.candidate)

        invoice_number = str(session.invoice_number)
        company = await self.get_company()
        invoice = TaxInvoice(
            invoice_number=invoice_number,
            status=data.status.value,
            invoice_date=data.invoice_date or today,
            items=clean_items(data.items),
        )
        self._apply_fields(invoice, data)

        # Defaults for a new invoice
        invoice.cgst_rate = settings.DEFAULT_CGST_RATE if data.cgst_rate is None else data.cgst_rate
        invoice.sgst_rate = settings.DEFAULT_SGST_RATE if data.sgst_rate is None else data.sgst_rate
        invoice.igst_rate = settings.DEFAULT_IGST_RATE if data.igst_rate is None else data.igst_rate
        if data.terms_and_conditions is None:
            invoice.terms_and_conditions = settings.DEFAULT_TERMS_AND_CONDITIONS
        if data.jurisdiction is None and company is not None:
            invoice.jurisdiction = company.jurisdiction
        if not invoice.shipped_to_name:
            self._copy_billing_to_shipping(invoice)

        if not invoice.items:
            logger.info("Invoice %s saved without billable items", invoice_number)

        self.db.add(invoice)
        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            session.mark_rejected(DUPLICATE_MESSAGE)
            logger.warning("Invoice number %s rejected by unique constraint", invoice_number)
            raise InvoiceNumberRejectedError(DUPLICATE_MESSAGE, invoice_number)

        session.mark_committed()
        self.allocator.remember(invoice_number)
        logger.info("Invoice %s created (degraded numbering: %s)", invoice_number, session.degraded)
        return invoice

    async def get_invoice(self, invoice_id: UUID) -> TaxInvoice:
        result = await self.db.execute(
            select(TaxInvoice).where(TaxInvoice.id == invoice_id)
        )
        invoice = result.scalar_one_or_none()
        if not invoice:
            raise InvoiceNotFoundError(invoice_id)
        return invoice

    async def list_invoices(
        self,
        skip: int = 0,
        limit: int = 50,
        search: Optional[str] = None,
        status: Optional[InvoiceStatus] = None,
    ) -> Tuple[List[TaxInvoice], int]:
        query = select(TaxInvoice)
        count_query = select(func.count(TaxInvoice.id))

        filters = []
        if status:
            filters.append(TaxInvoice.status == status.value)
        if search:
            filters.append(or_(
                TaxInvoice.invoice_number.ilike(f"%{search}%"),
                TaxInvoice.billed_to_name.ilike(f"%{search}%"),
            ))
        if filters:
            query = query.where(*filters)
            count_query = count_query.where(*filters)

        total = (await self.db.execute(count_query)).scalar() or 0

        query = query.order_by(TaxInvoice.invoice_date.desc(), TaxInvoice.invoice_number.desc())
        result = await self.db.execute(query.offset(skip).limit(limit))
        return list(result.scalars().all()), total

    async def update_invoice(self, invoice_id: UUID, data: InvoiceUpdate) -> TaxInvoice:
        """Update an existing invoice. The invoice number never changes."""
        invoice = await self.get_invoice(invoice_id)
        self._apply_fields(invoice, data)

        for rate_field in ("cgst_rate", "sgst_rate", "igst_rate"):
            if rate_field in data.model_fields_set:
                setattr(invoice, rate_field, getattr(data, rate_field) or 0.0)
        if data.status is not None:
            invoice.status = data.status.value
        if data.invoice_date is not None:
            invoice.invoice_date = data.invoice_date
        if data.items is not None:
            invoice.items = clean_items(data.items)

        await self.db.flush()
        logger.info("Invoice %s updated", invoice.invoice_number)
        return invoice

    async def cancel_invoice(self, invoice_id: UUID) -> TaxInvoice:
        invoice = await self.get_invoice(invoice_id)
        invoice.status = InvoiceStatus.CANCELLED.value
        await self.db.flush()
        logger.info("Invoice %s cancelled", invoice.invoice_number)
        return invoice

    async def build_print_data(self, invoice_id: UUID) -> InvoicePrintData:
        """Assemble everything the PDF renderer prints for one invoice."""
        invoice = await self.get_invoice(invoice_id)
        company = await self.get_company()

        lines = [
            PrintLine(
                sr_no=index,
                description=item.description,
                hsn_code=item.hsn_code,
                uom=item.uom,
                quantity=item.quantity,
                rate=item.unit_price,
                amount=round_for_display(line_amount(item)),
            )
            for index, item in enumerate((i for i in invoice.items if is_billable(i)), start=1)
        ]

        seller = PrintParty()
        if company is not None:
            seller = PrintParty(
                name=company.company_name,
                address=company.address,
                gstin=company.gstin,
                state=company.state,
                state_code=company.state_code,
            )

        totals = invoice.totals
        return InvoicePrintData(
            invoice_number=invoice.invoice_number,
            invoice_date=invoice.invoice_date,
            seller=seller,
            billed_to=self._party(invoice, "billed_to"),
            shipped_to=self._party(invoice, "shipped_to"),
            transport_mode=invoice.transport_mode,
            vehicle_no=invoice.vehicle_no,
            date_of_supply=invoice.date_of_supply,
            place_of_supply=invoice.place_of_supply,
            order_number=invoice.order_number,
            gr_lr_no=invoice.gr_lr_no,
            eway_bill_no=invoice.eway_bill_no,
            tax_on_reverse_charge=bool(invoice.tax_on_reverse_charge),
            lines=lines,
            cgst_rate=invoice.cgst_rate,
            sgst_rate=invoice.sgst_rate,
            igst_rate=invoice.igst_rate,
            totals=InvoiceTotalsResponse.model_validate(totals.rounded()),
            amount_in_words=invoice.amount_in_words,
            bank=PrintBank(
                bank_name=invoice.bank_name,
                account_name=invoice.account_name,
                account_number=invoice.account_number,
                ifsc_code=invoice.ifsc_code,
            ),
            terms_and_conditions=invoice.terms_and_conditions,
            jurisdiction=invoice.jurisdiction,
        )

    # ==================== Helpers ====================

    @staticmethod
    def _apply_fields(invoice: TaxInvoice, data) -> None:
        """Copy explicitly sent plain fields (not number, items, rates, status)."""
        skip = {
            "invoice_sequence", "items", "status", "invoice_date",
            "cgst_rate", "sgst_rate", "igst_rate",
        }
        for field in data.model_fields_set - skip:
            value = getattr(data, field)
            if field == "tax_on_reverse_charge":
                value = bool(value)
            elif field == "billed_to_name":
                value = value or ""
            setattr(invoice, field, value)

    @staticmethod
    def _copy_billing_to_shipping(invoice: TaxInvoice) -> None:
        for suffix in SHIPPING_FIELDS:
            setattr(invoice, f"shipped_to_{suffix}", getattr(invoice, f"billed_to_{suffix}"))

    @staticmethod
    def _party(invoice: TaxInvoice, side: str) -> PrintParty:
        return PrintParty(
            name=getattr(invoice, f"{side}_name") or "",
            address=getattr(invoice, f"{side}_address"),
            gstin=getattr(invoice, f"{side}_gstin"),
            state=getattr(invoice, f"{side}_state"),
            state_code=getattr(invoice, f"{side}_code"),
        )
