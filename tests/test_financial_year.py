"""Tests for Indian financial year labels."""

import re
from datetime import date, datetime, timedelta, timezone

import pytest

from gstbill.services.financial_year import (
    current_fiscal_year_label,
    fiscal_year_bounds,
    fiscal_year_label,
    india_today,
)


@pytest.mark.parametrize(
    "on, expected",
    [
        (date(2025, 2, 15), "24-25"),
        (date(2025, 3, 31), "24-25"),
        (date(2025, 4, 1), "25-26"),
        (date(2025, 6, 10), "25-26"),
        (date(2025, 12, 31), "25-26"),
        (date(2026, 1, 1), "25-26"),
    ],
)
def test_fiscal_year_label(on: date, expected: str) -> None:
    assert fiscal_year_label(on) == expected


def test_label_wraps_at_century() -> None:
    assert fiscal_year_label(date(2099, 5, 1)) == "99-00"
    assert fiscal_year_label(date(2100, 2, 1)) == "99-00"
    assert fiscal_year_label(date(2000, 1, 1)) == "99-00"


def test_label_shape_for_every_month() -> None:
    for year in (1999, 2009, 2024, 2099):
        for month in range(1, 13):
            label = fiscal_year_label(date(year, month, 1))
            assert re.fullmatch(r"\d{2}-\d{2}", label)
            first, second = (int(part) for part in label.split("-"))
            assert second == (first + 1) % 100


def test_accepts_datetime() -> None:
    assert fiscal_year_label(datetime(2025, 4, 1, 0, 0)) == "25-26"


def test_fiscal_year_bounds() -> None:
    assert fiscal_year_bounds(date(2025, 2, 15)) == (date(2024, 4, 1), date(2025, 3, 31))
    assert fiscal_year_bounds(date(2025, 4, 1)) == (date(2025, 4, 1), date(2026, 3, 31))


def test_india_today_crosses_into_new_year_before_utc() -> None:
    # 20:00 UTC on March 31 is already April 1 in India
    now = datetime(2025, 3, 31, 20, 0, tzinfo=timezone.utc)
    assert india_today(now) == date(2025, 4, 1)
    assert current_fiscal_year_label(now) == "25-26"
    assert current_fiscal_year_label(now - timedelta(hours=2)) == "24-25"
