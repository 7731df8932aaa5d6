"""
Indian financial year helpers.

Indian financial year: April to March
- Feb 2025 → FY 24-25
- Apr 2025 → FY 25-26

The label is the numbering namespace of invoice numbers (ACRONYM/FY/SEQ).
"""
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Tuple

# India has a fixed UTC+05:30 offset (no DST)
IST = timezone(timedelta(hours=5, minutes=30), name="IST")

FY_START_MONTH = 4


def fiscal_year_start(on: date) -> int:
    """Calendar year in which the financial year containing ``on`` starts."""
    return on.year if on.month >= FY_START_MONTH else on.year - 1


def fiscal_year_label(on: date) -> str:
    """
    Get financial year label for a date.

    Args:
        on: Any date (or datetime)

    Returns:
        Financial year string, e.g., "24-25"
    """
    fy_start = fiscal_year_start(on)
    return f"{fy_start % 100:02d}-{(fy_start + 1) % 100:02d}"


def fiscal_year_bounds(on: date) -> Tuple[date, date]:
    """First and last day (April 1, March 31) of the financial year containing ``on``."""
    fy_start = fiscal_year_start(on)
    return date(fy_start, FY_START_MONTH, 1), date(fy_start + 1, FY_START_MONTH - 1, 31)


def india_today(now: Optional[datetime] = None) -> date:
    """Today's date in India, which decides the FY around midnight on March 31."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(IST).date()


def current_fiscal_year_label(now: Optional[datetime] = None) -> str:
    return fiscal_year_label(india_today(now))
