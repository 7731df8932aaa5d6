"""Tests for invoice number proposal, validation and the numbering session."""

from datetime import date
from typing import List

import pytest

from gstbill.core.exceptions import InvoiceNumberSourceError, InvoiceNumberStateError
from gstbill.services.invoice_number_service import (
    DUPLICATE_MESSAGE,
    InvoiceNumber,
    InvoiceNumberAllocator,
    InvoiceNumberSession,
    NumberingState,
    highest_sequence,
    sanitize_sequence_input,
    validate_sequence,
)
from gstbill.services.invoice_number_source import InvoiceNumberSource, LocalInvoiceNumberCache


PREFIX = "ACM/24-25/"
EXISTING = ["ACM/24-25/001", "ACM/24-25/005", "ACM/23-24/042", "XYZ/24-25/099", "ACM/24-25/ABC"]


class StaticSource(InvoiceNumberSource):
    def __init__(self, numbers: List[str]):
        self.numbers = numbers
        self.calls = 0

    async def list_invoice_numbers(self) -> List[str]:
        self.calls += 1
        return list(self.numbers)


class FailingSource(InvoiceNumberSource):
    async def list_invoice_numbers(self) -> List[str]:
        raise InvoiceNumberSourceError("Invoice store unreachable")


# ==================== Pure helpers ====================

def test_highest_sequence_only_counts_exact_prefix() -> None:
    assert highest_sequence(EXISTING, PREFIX) == 5
    assert highest_sequence(EXISTING, "ACM/23-24/") == 42
    assert highest_sequence(EXISTING, "NEW/24-25/") == 0
    assert highest_sequence([], PREFIX) == 0


def test_sanitize_sequence_input() -> None:
    assert sanitize_sequence_input("0a7") == "07"
    assert sanitize_sequence_input(" 12 ") == "12"
    assert sanitize_sequence_input("") == ""
    assert sanitize_sequence_input(None) == ""
    assert sanitize_sequence_input("1234") is None


def test_duplicate_is_rejected() -> None:
    result = validate_sequence(PREFIX, "005", EXISTING)
    assert not result.valid
    assert result.candidate == "ACM/24-25/005"
    assert result.message == DUPLICATE_MESSAGE


def test_duplicate_check_ignores_case() -> None:
    result = validate_sequence(PREFIX, "7", ["acm/24-25/007"])
    assert result.message == DUPLICATE_MESSAGE


def test_duplicate_reported_before_ordering() -> None:
    # 001 is both a duplicate and below the highest
    result = validate_sequence(PREFIX, "1", EXISTING)
    assert result.message == DUPLICATE_MESSAGE


def test_not_above_highest_is_rejected() -> None:
    result = validate_sequence(PREFIX, "3", EXISTING)
    assert not result.valid
    assert result.message == "Invoice no. must be > 005."


def test_above_highest_is_accepted() -> None:
    result = validate_sequence(PREFIX, "12", EXISTING)
    assert result.valid
    assert result.candidate == "ACM/24-25/012"
    assert result.message is None


def test_empty_entry_skips_ordering() -> None:
    assert validate_sequence(PREFIX, "", EXISTING).valid


def test_invoice_number_parse() -> None:
    number = InvoiceNumber.parse("AGT/24-25/007")
    assert number.acronym == "AGT"
    assert number.fiscal_year == "24-25"
    assert number.sequence_value == 7
    assert str(number) == "AGT/24-25/007"
    assert InvoiceNumber.parse("AGT-24-25-007") is None
    assert InvoiceNumber.parse("AGT/24-25/X1").sequence_value is None


# ==================== Session ====================

def test_proposal_is_highest_plus_one() -> None:
    session = InvoiceNumberSession("ACM", "24-25")
    proposed = session.propose(EXISTING)

    assert session.state == NumberingState.EDITABLE
    assert str(proposed) == "ACM/24-25/006"
    assert session.highest == 5


def test_proposal_for_new_year_starts_at_one() -> None:
    session = InvoiceNumberSession("ACM", "25-26")
    assert str(session.propose(EXISTING)) == "ACM/25-26/001"


def test_proposal_never_collides_with_existing() -> None:
    for highest in (0, 1, 9, 10, 99, 998):
        existing = [f"ACM/24-25/{n:03d}" for n in range(1, highest + 1)]
        session = InvoiceNumberSession("ACM", "24-25")
        proposed = session.propose(existing)
        assert str(proposed) not in existing
        assert proposed.sequence_value == highest + 1


def test_edit_transitions() -> None:
    session = InvoiceNumberSession("ACM", "24-25")
    session.propose(EXISTING)

    assert session.edit("3").valid is False
    assert session.state == NumberingState.INVALID

    assert session.edit("9").valid is True
    assert session.state == NumberingState.VALID
    assert str(session.invoice_number) == "ACM/24-25/009"


def test_over_long_edit_leaves_session_unchanged() -> None:
    session = InvoiceNumberSession("ACM", "24-25")
    session.propose(EXISTING)
    session.edit("9")

    session.edit("1234")

    assert session.sequence_digits == "9"
    assert session.state == NumberingState.VALID


def test_prepare_commit_rejects_empty_sequence() -> None:
    session = InvoiceNumberSession("ACM", "24-25")
    session.propose(EXISTING)
    session.edit("")

    result = session.prepare_commit()

    assert not result.valid
    assert result.message == "Invoice no. must be > 005."
    assert session.state == NumberingState.INVALID


def test_prepare_commit_sees_numbers_issued_meanwhile() -> None:
    session = InvoiceNumberSession("ACM", "24-25")
    session.propose(EXISTING)

    result = session.prepare_commit(EXISTING + ["ACM/24-25/006"])

    assert not result.valid
    assert result.message == DUPLICATE_MESSAGE


def test_prepare_commit_keeps_invalid_result() -> None:
    session = InvoiceNumberSession("ACM", "24-25")
    session.propose(EXISTING)
    invalid = session.edit("2")

    assert session.prepare_commit(EXISTING) is invalid


def test_commit_requires_valid_state() -> None:
    session = InvoiceNumberSession("ACM", "24-25")
    session.propose(EXISTING)
    session.edit("2")

    with pytest.raises(InvoiceNumberStateError):
        session.mark_committed()

    session.edit("8")
    session.prepare_commit(EXISTING)
    session.mark_committed()
    assert session.state == NumberingState.COMMITTED

    with pytest.raises(InvoiceNumberStateError):
        session.edit("9")


def test_rejected_by_store_is_recoverable() -> None:
    session = InvoiceNumberSession("ACM", "24-25")
    session.propose(EXISTING)
    session.prepare_commit(EXISTING)

    session.mark_rejected(DUPLICATE_MESSAGE)
    assert session.state == NumberingState.INVALID

    assert session.edit("20").valid
    assert session.state == NumberingState.VALID


def test_abandon_is_terminal() -> None:
    session = InvoiceNumberSession("ACM", "24-25")
    session.propose([])
    session.abandon()

    assert session.state == NumberingState.ABANDONED
    with pytest.raises(InvoiceNumberStateError):
        session.abandon()


# ==================== Allocator ====================

async def test_allocator_proposes_for_financial_year() -> None:
    allocator = InvoiceNumberAllocator(StaticSource(EXISTING), LocalInvoiceNumberCache())

    session = await allocator.open_session("ACM", today=date(2025, 2, 15))

    assert session.fiscal_year == "24-25"
    assert str(session.invoice_number) == "ACM/24-25/006"
    assert session.degraded is False


async def test_allocator_validate() -> None:
    allocator = InvoiceNumberAllocator(StaticSource(EXISTING), LocalInvoiceNumberCache())
    today = date(2024, 10, 1)

    assert (await allocator.validate("ACM", "5", today)).message == DUPLICATE_MESSAGE
    assert (await allocator.validate("ACM", "3", today)).message == "Invoice no. must be > 005."
    assert (await allocator.validate("ACM", "7", today)).valid

    too_long = await allocator.validate("ACM", "1234", today)
    assert not too_long.valid
    assert too_long.message == "Invoice no. must be at most 3 digits."


async def test_allocator_rereads_source_before_commit() -> None:
    source = StaticSource(EXISTING)
    allocator = InvoiceNumberAllocator(source, LocalInvoiceNumberCache())
    session = await allocator.open_session("ACM", today=date(2025, 1, 1))

    source.numbers = EXISTING + ["ACM/24-25/006"]
    result = await allocator.prepare_commit(session)

    assert source.calls == 2
    assert result.message == DUPLICATE_MESSAGE


async def test_allocator_falls_back_to_cache() -> None:
    cache = LocalInvoiceNumberCache()
    await InvoiceNumberAllocator(StaticSource(EXISTING), cache).existing_numbers()

    allocator = InvoiceNumberAllocator(FailingSource(), cache)
    session = await allocator.open_session("ACM", today=date(2025, 1, 1))

    assert session.degraded is True
    assert str(session.invoice_number) == "ACM/24-25/006"


async def test_allocator_with_nothing_cached_proposes_one() -> None:
    allocator = InvoiceNumberAllocator(FailingSource(), LocalInvoiceNumberCache())

    session = await allocator.open_session("ACM", today=date(2025, 1, 1))

    assert session.degraded is True
    assert str(session.invoice_number) == "ACM/24-25/001"


async def test_remembered_numbers_survive_outage() -> None:
    cache = LocalInvoiceNumberCache()
    allocator = InvoiceNumberAllocator(FailingSource(), cache)
    allocator.remember("ACM/24-25/001")

    result = await allocator.validate("ACM", "1", date(2025, 1, 1))

    assert result.message == DUPLICATE_MESSAGE
