"""
Invoice Number Allocation

FORMAT:
    {ACRONYM}/{FY}/{SEQ}   e.g. AGT/24-25/007

- ACRONYM: company invoice prefix (or derived from the company name)
- FY: Indian financial year label (April-March)
- SEQ: 3-digit zero-padded sequence, continuous within (ACRONYM, FY)

The next number is max(existing SEQ under the prefix) + 1. The operator may
override the sequence, but never with a duplicate or with a value at or below
the current highest. Existing numbers are re-read right before commit, and the
database unique constraint stays the final authority.

USAGE:
    allocator = InvoiceNumberAllocator(source)
    session = await allocator.open_session("AGT")
    session.edit("12")
    validation = await allocator.prepare_commit(session)
    if validation.valid:
        ... persist str(session.invoice_number) ...
        session.mark_committed()
"""
import logging
import re
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from gstbill.core.exceptions import InvoiceNumberSourceError, InvoiceNumberStateError
from gstbill.services.financial_year import fiscal_year_label, india_today
from gstbill.services.invoice_number_source import (
    InvoiceNumberSource,
    LocalInvoiceNumberCache,
    get_invoice_number_cache,
)


logger = logging.getLogger(__name__)

SEPARATOR = "/"
SEQUENCE_WIDTH = 3
DUPLICATE_MESSAGE = "Invoice number already exists."

_DIGITS = re.compile(r"[0-9]+")
_NON_DIGITS = re.compile(r"[^0-9]")


def ordering_message(highest: int) -> str:
    return f"Invoice no. must be > {str(highest).zfill(SEQUENCE_WIDTH)}."


def build_prefix(acronym: str, fiscal_year: str) -> str:
    return f"{acronym}{SEPARATOR}{fiscal_year}{SEPARATOR}"


@dataclass(frozen=True)
class InvoiceNumber:
    """Invoice number kept as its two owned parts: prefix and sequence."""
    prefix: str
    sequence: str

    @classmethod
    def parse(cls, value: str) -> Optional["InvoiceNumber"]:
        """Split ``ACRONYM/FY/SEQ``; None for anything else."""
        parts = value.split(SEPARATOR)
        if len(parts) != 3:
            return None
        return cls(prefix=f"{parts[0]}{SEPARATOR}{parts[1]}{SEPARATOR}", sequence=parts[2])

    @property
    def acronym(self) -> str:
        return self.prefix.split(SEPARATOR)[0]

    @property
    def fiscal_year(self) -> str:
        return self.prefix.split(SEPARATOR)[1]

    @property
    def sequence_value(self) -> Optional[int]:
        if _DIGITS.fullmatch(self.sequence):
            return int(self.sequence)
        return None

    def __str__(self) -> str:
        return f"{self.prefix}{self.sequence}"


@dataclass(frozen=True)
class NumberValidation:
    valid: bool
    candidate: str
    message: Optional[str] = None


class NumberingState(str, Enum):
    """Life of one create-invoice numbering session."""
    PROPOSING = "PROPOSING"
    EDITABLE = "EDITABLE"
    VALID = "VALID"
    INVALID = "INVALID"
    COMMITTED = "COMMITTED"
    ABANDONED = "ABANDONED"


TERMINAL_STATES = (NumberingState.COMMITTED, NumberingState.ABANDONED)


def highest_sequence(existing_numbers: Iterable[str], prefix: str) -> int:
    """Highest numeric sequence among numbers with exactly this prefix, 0 if none."""
    highest = 0
    for number in existing_numbers:
        if not number.startswith(prefix):
            continue
        suffix = number[len(prefix):]
        if _DIGITS.fullmatch(suffix):
            highest = max(highest, int(suffix))
    return highest


def sanitize_sequence_input(raw: Optional[str]) -> Optional[str]:
    """Keep digits only; None when the result is longer than the sequence field."""
    digits = _NON_DIGITS.sub("", raw or "")
    if len(digits) > SEQUENCE_WIDTH:
        return None
    return digits


def validate_sequence(
    prefix: str,
    entered_digits: str,
    existing_numbers: Iterable[str],
    highest: Optional[int] = None,
) -> NumberValidation:
    """
    Check an operator-entered sequence against existing invoice numbers.

    Duplicates are reported before ordering. An empty entry is not subject
    to the ordering rule.
    """
    existing = list(existing_numbers)
    candidate = f"{prefix}{entered_digits.zfill(SEQUENCE_WIDTH)}"

    candidate_key = candidate.lower()
    if any(number.lower() == candidate_key for number in existing):
        return NumberValidation(valid=False, candidate=candidate, message=DUPLICATE_MESSAGE)

    if highest is None:
        highest = highest_sequence(existing, prefix)
    if entered_digits != "" and int(entered_digits) <= highest:
        return NumberValidation(valid=False, candidate=candidate, message=ordering_message(highest))

    return NumberValidation(valid=True, candidate=candidate)


class InvoiceNumberSession:
    """
    Numbering state for one create-invoice flow.

    Editing an already committed invoice never goes through a session:
    its number is frozen.
    """

    def __init__(self, acronym: str, fiscal_year: str):
        self.acronym = acronym
        self.fiscal_year = fiscal_year
        self.prefix = build_prefix(acronym, fiscal_year)
        self.state = NumberingState.PROPOSING
        self.sequence_digits = ""
        self.highest = 0
        self.known_numbers: List[str] = []
        self.validation: Optional[NumberValidation] = None
        self.degraded = False

    @property
    def invoice_number(self) -> InvoiceNumber:
        return InvoiceNumber(self.prefix, self.sequence_digits.zfill(SEQUENCE_WIDTH))

    @property
    def suggested_sequence(self) -> str:
        return str(self.highest + 1).zfill(SEQUENCE_WIDTH)

    def _require(self, *states: NumberingState) -> None:
        if self.state not in states:
            allowed = ", ".join(s.value for s in states)
            raise InvoiceNumberStateError(
                f"Numbering session is {self.state.value}; expected one of: {allowed}"
            )

    def propose(self, existing_numbers: Iterable[str]) -> InvoiceNumber:
        """PROPOSING → EDITABLE with sequence highest + 1."""
        self._require(NumberingState.PROPOSING)
        self.known_numbers = list(existing_numbers)
        self.highest = highest_sequence(self.known_numbers, self.prefix)
        self.sequence_digits = self.suggested_sequence
        self.state = NumberingState.EDITABLE
        return self.invoice_number

    def edit(self, raw: Optional[str]) -> NumberValidation:
        """
        Apply one edit of the sequence field and revalidate.

        Input over 3 digits is refused and leaves the session unchanged.
        """
        self._require(NumberingState.EDITABLE, NumberingState.VALID, NumberingState.INVALID)
        digits = sanitize_sequence_input(raw)
        if digits is None:
            return self.validation or validate_sequence(
                self.prefix, self.sequence_digits, self.known_numbers, self.highest
            )

        self.sequence_digits = digits
        self.validation = validate_sequence(self.prefix, digits, self.known_numbers, self.highest)
        self.state = NumberingState.VALID if self.validation.valid else NumberingState.INVALID
        return self.validation

    def prepare_commit(self, latest_numbers: Optional[Iterable[str]] = None) -> NumberValidation:
        """
        Final duplicate/ordering check before the invoice is persisted.

        Checks the padded sequence, so an empty field is rejected here.
        A failure moves the session to INVALID.
        """
        self._require(NumberingState.EDITABLE, NumberingState.VALID, NumberingState.INVALID)
        if self.state == NumberingState.INVALID and self.validation is not None:
            return self.validation

        if latest_numbers is not None:
            self.known_numbers = list(latest_numbers)
            self.highest = highest_sequence(self.known_numbers, self.prefix)

        padded = self.sequence_digits.zfill(SEQUENCE_WIDTH)
        self.validation = validate_sequence(self.prefix, padded, self.known_numbers, self.highest)
        self.state = NumberingState.VALID if self.validation.valid else NumberingState.INVALID
        return self.validation

    def mark_committed(self) -> None:
        self._require(NumberingState.VALID)
        self.state = NumberingState.COMMITTED

    def mark_rejected(self, message: str) -> NumberValidation:
        """The store refused the number (e.g. unique constraint); recoverable."""
        self._require(NumberingState.VALID, NumberingState.EDITABLE)
        self.validation = NumberValidation(valid=False, candidate=str(self.invoice_number), message=message)
        self.state = NumberingState.INVALID
        return self.validation

    def abandon(self) -> None:
        if self.state in TERMINAL_STATES:
            raise InvoiceNumberStateError(f"Numbering session already {self.state.value}")
        self.state = NumberingState.ABANDONED


class InvoiceNumberAllocator:
    """
    Proposes and validates invoice numbers against an invoice number source.

    When the source fails, numbering falls back to the last listing held in
    the local cache (or to nothing, proposing 001) instead of blocking.
    """

    def __init__(
        self,
        source: InvoiceNumberSource,
        cache: Optional[LocalInvoiceNumberCache] = None,
    ):
        self.source = source
        self.cache = cache or get_invoice_number_cache()

    async def existing_numbers(self) -> Tuple[List[str], bool]:
        """
        Returns:
            (invoice numbers, degraded) where degraded means the cache was used
        """
        try:
            numbers = await self.source.list_invoice_numbers()
        except InvoiceNumberSourceError as e:
            cached = self.cache.snapshot()
            logger.warning(
                "Invoice number listing failed (%s); falling back to %d cached numbers",
                e.message, len(cached),
            )
            return cached, True

        self.cache.store(numbers)
        return numbers, False

    async def open_session(self, acronym: str, today: Optional[date] = None) -> InvoiceNumberSession:
        """Start a create-invoice flow with a proposed number."""
        fiscal_year = fiscal_year_label(today or india_today())
        session = InvoiceNumberSession(acronym, fiscal_year)
        numbers, degraded = await self.existing_numbers()
        session.degraded = degraded
        session.propose(numbers)
        return session

    async def validate(self, acronym: str, raw_sequence: str, today: Optional[date] = None) -> NumberValidation:
        """Stateless variant of a single edit: propose, then apply ``raw_sequence``."""
        session = await self.open_session(acronym, today)
        if sanitize_sequence_input(raw_sequence) is None:
            return NumberValidation(
                valid=False,
                candidate=f"{session.prefix}{raw_sequence}",
                message=f"Invoice no. must be at most {SEQUENCE_WIDTH} digits.",
            )
        return session.edit(raw_sequence)

    async def prepare_commit(self, session: InvoiceNumberSession) -> NumberValidation:
        """Re-read existing numbers and run the final check on ``session``."""
        numbers, degraded = await self.existing_numbers()
        session.degraded = session.degraded or degraded
        return session.prepare_commit(numbers)

    def remember(self, invoice_number: str) -> None:
        self.cache.remember(invoice_number)
