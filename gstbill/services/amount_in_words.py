"""Rupee amounts in Indian-English words (crore / lakh / thousand / hundred).

Only the integer rupee part is written out; paise are dropped, as is usual
for the "amount in words" line of a tax invoice.
"""
import math
from typing import List

from gstbill.services.tax_calculator import coerce_amount

ONES = [
    "", "ONE", "TWO", "THREE", "FOUR", "FIVE", "SIX", "SEVEN", "EIGHT", "NINE",
    "TEN", "ELEVEN", "TWELVE", "THIRTEEN", "FOURTEEN", "FIFTEEN", "SIXTEEN",
    "SEVENTEEN", "EIGHTEEN", "NINETEEN",
]
TENS = ["", "", "TWENTY", "THIRTY", "FORTY", "FIFTY", "SIXTY", "SEVENTY", "EIGHTY", "NINETY"]

# Order matters: each group takes the quotient of the remainder left by the previous one
GROUPS = (
    (10_000_000, "CRORE"),
    (100_000, "LAKH"),
    (1_000, "THOUSAND"),
    (100, "HUNDRED"),
)

MAX_AMOUNT = 999_999_999
ZERO_WORDS = "ZERO RUPEES ONLY."
TOO_LARGE = "NUMBER TOO LARGE"
SUFFIX = "RUPEES ONLY."


def _below_hundred(n: int) -> List[str]:
    if n > 19:
        words = [TENS[n // 10]]
        if n % 10:
            words.append(ONES[n % 10])
        return words
    return [ONES[n]] if n else []


def amount_to_words(amount: float) -> str:
    """
    Convert a rupee amount to words.

    >>> amount_to_words(236)
    'TWO HUNDRED AND THIRTY SIX RUPEES ONLY.'

    Returns ``"NUMBER TOO LARGE"`` above 99,99,99,999 instead of raising.

    Raises:
        ValueError: If amount is negative
    """
    value = coerce_amount(amount)
    if value < 0:
        raise ValueError(f"Amount must not be negative: {amount}")
    if math.isinf(value):
        return TOO_LARGE

    n = int(round(value, 2))
    if n == 0:
        return ZERO_WORDS
    if n > MAX_AMOUNT:
        return TOO_LARGE

    words: List[str] = []
    for divisor, suffix in GROUPS:
        quotient, n = divmod(n, divisor)
        if quotient:
            words.extend(_below_hundred(quotient))
            words.append(suffix)

    if n and words:
        words.append("AND")
    words.extend(_below_hundred(n))

    return f"{' '.join(words)} {SUFFIX}"
