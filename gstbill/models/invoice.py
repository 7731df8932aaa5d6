"""Tax invoice models.

Amounts (subtotal, tax, grand total) are deliberately not stored: they are
recomputed from the items and rates on every read.
"""
import uuid
from datetime import datetime, date, timezone
from enum import Enum
from typing import Optional, List

from sqlalchemy import String, Boolean, DateTime, ForeignKey, Integer, Text, Float, Date
from sqlalchemy import Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gstbill.database import Base
from gstbill.db_types import UUIDType


class InvoiceStatus(str, Enum):
    """Invoice status enumeration."""
    DRAFT = "DRAFT"
    ISSUED = "ISSUED"
    PAID = "PAID"
    CANCELLED = "CANCELLED"


class TaxInvoice(Base):
    """GST tax invoice."""
    __tablename__ = "tax_invoices"
    __table_args__ = (
        Index("ix_tax_invoices_invoice_date", "invoice_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4
    )

    # Invoice Identification (frozen once inserted)
    invoice_number: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
        index=True,
        comment="ACRONYM/FY/SEQ e.g., AGT/24-25/001"
    )
    status: Mapped[str] = mapped_column(
        String(20),
        default=InvoiceStatus.DRAFT.value,
        nullable=False,
        index=True,
        comment="DRAFT, ISSUED, PAID, CANCELLED"
    )

    # Dates
    invoice_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    date_of_supply: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # Billed To
    billed_to_name: Mapped[str] = mapped_column(String(200), default="", nullable=False)
    billed_to_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    billed_to_gstin: Mapped[Optional[str]] = mapped_column(String(15), nullable=True)
    billed_to_state: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    billed_to_code: Mapped[Optional[str]] = mapped_column(String(2), nullable=True)

    # Shipped To
    shipped_to_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    shipped_to_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    shipped_to_gstin: Mapped[Optional[str]] = mapped_column(String(15), nullable=True)
    shipped_to_state: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    shipped_to_code: Mapped[Optional[str]] = mapped_column(String(2), nullable=True)

    # Transport & Supply
    transport_mode: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    vehicle_no: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    place_of_supply: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    order_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    tax_on_reverse_charge: Mapped[bool] = mapped_column(Boolean, default=False)
    gr_lr_no: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    eway_bill_no: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    # Tax Rates (percentages, applied independently to the subtotal)
    cgst_rate: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    sgst_rate: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    igst_rate: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)

    # Selected Bank Account
    bank_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    account_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    account_number: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    ifsc_code: Mapped[Optional[str]] = mapped_column(String(11), nullable=True)

    terms_and_conditions: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    jurisdiction: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    # Relationships
    items: Mapped[List["InvoiceItem"]] = relationship(
        "InvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceItem.position",
        lazy="selectin",
    )

    @property
    def totals(self):
        """Totals recomputed from the current items and rates."""
        from gstbill.services.tax_calculator import compute_totals, TaxRates
        rates = TaxRates.of(self.cgst_rate, self.sgst_rate, self.igst_rate)
        return compute_totals(self.items, rates)

    @property
    def grand_total(self) -> float:
        return self.totals.grand_total

    @property
    def amount_in_words(self) -> str:
        from gstbill.services.amount_in_words import amount_to_words
        return amount_to_words(self.grand_total)

    def __repr__(self) -> str:
        return f"<TaxInvoice({self.invoice_number})>"


class InvoiceItem(Base):
    """Invoice line item."""
    __tablename__ = "invoice_items"

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4
    )
    invoice_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType(as_uuid=True),
        ForeignKey("tax_invoices.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    description: Mapped[str] = mapped_column(String(500), default="", nullable=False)
    hsn_code: Mapped[Optional[str]] = mapped_column(String(8), nullable=True)
    uom: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    quantity: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    unit_price: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)

    invoice: Mapped["TaxInvoice"] = relationship("TaxInvoice", back_populates="items")

    def __repr__(self) -> str:
        return f"<InvoiceItem({self.description!r} x {self.quantity})>"
