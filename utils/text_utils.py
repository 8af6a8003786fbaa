"""
Text processing utilities for price and currency extraction.
"""
import math
import re
from dataclasses import dataclass
from typing import Any, Optional


# Currency symbol -> ISO code
CURRENCY_SYMBOLS = {
    "$": "USD",
    "€": "EUR",
    "£": "GBP",
    "¥": "JPY",
    "₹": "INR",
    "₩": "KRW",
    "₽": "RUB",
}

_SYMBOL_RE = re.compile("[" + re.escape("".join(CURRENCY_SYMBOLS)) + "]")
_CODE_RE = re.compile(r"(?<![A-Za-z])(USD|EUR|GBP|JPY|INR|KRW|RUB)(?![A-Za-z])", re.IGNORECASE)

# First integer or decimal with at most two fractional digits
_AMOUNT_RE = re.compile(r"\d+(?:\.\d{1,2})?")


@dataclass(frozen=True)
class ParsedPrice:
    """Amount and currency code parsed from a price string."""
    amount: Optional[float]
    currency: str = ""


def currency_from_text(text: Optional[str]) -> str:
    """
    Infer an ISO currency code from free text.

    A known currency symbol wins; otherwise a bare code such as "eur"
    is accepted case-insensitively. Returns "" when nothing matches.
    """
    if not text:
        return ""

    match = _SYMBOL_RE.search(text)
    if match:
        return CURRENCY_SYMBOLS[match.group(0)]

    match = _CODE_RE.search(text)
    if match:
        return match.group(1).upper()

    return ""


def extract_price(raw: Any) -> Optional[float]:
    """
    Extract a numeric price from a raw value.

    Numbers are used as-is (rounded to cents). Text has thousands
    separators and spaces removed, then the first number is taken:
    - "$4.25"    -> 4.25
    - "1,234.5"  -> 1234.5
    - "€ 3"      -> 3.0
    - "free"     -> None
    """
    if raw is None or isinstance(raw, bool):
        return None

    if isinstance(raw, (int, float)):
        try:
            value = float(raw)
        except OverflowError:
            return None
        if not math.isfinite(value) or value < 0:
            return None
        return round(value, 2)

    cleaned = re.sub(r"[, ]", "", str(raw))
    match = _AMOUNT_RE.search(cleaned)
    if not match:
        return None

    value = float(match.group(0))
    # Digit runs past the float range come back as inf
    if not math.isfinite(value):
        return None
    return value


def parse_price(text: Any) -> ParsedPrice:
    """Parse both amount and currency from a price string."""
    if text is None:
        return ParsedPrice(amount=None)
    return ParsedPrice(
        amount=extract_price(text),
        currency=currency_from_text(str(text)),
    )
