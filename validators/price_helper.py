from __future__ import annotations

import logging
import math
import re
from typing import Iterable, Optional

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "₹"

# "Rs." / "INR." style abbreviations: the dot belongs to the word, not the number.
_ABBREV_DOT_RE = re.compile(r"(?<=[A-Za-z])\.")
_NON_NUMERIC_RE = re.compile(r"[^0-9.]")
_LEADING_DECIMAL_RE = re.compile(r"\d+(?:\.\d*)?|\.\d+")
# str(float) output for very large or small values: "1.2345678901234568e+16", "1e-05"
_FLOAT_EXP_RE = re.compile(r"\d+(?:\.\d*)?[eE][+-]?\d+")


def parse_price(text: Optional[str]) -> Optional[float]:
    """Parse a currency-formatted string, returning ``None`` when no price is present.

    Handles "₹1,299", "Rs. 1,299.50", "1299". Only the leading valid decimal
    is used, so "1.2.3" parses as 1.2.
    """
    if not text:
        return None

    s = str(text).strip()
    if _FLOAT_EXP_RE.fullmatch(s):
        value = float(s)
        return value if math.isfinite(value) else None

    cleaned = _NON_NUMERIC_RE.sub("", _ABBREV_DOT_RE.sub("", str(text)))
    m = _LEADING_DECIMAL_RE.match(cleaned)
    if not m:
        return None

    value = float(m.group(0))
    if not math.isfinite(value):
        return None
    return value


def extract_price(text: Optional[str]) -> float:
    """Numeric price of ``text``; 0 when it cannot be parsed (0 means unknown, not free)."""
    value = parse_price(text)
    if value is None:
        if text:
            logger.debug("No price in %r, using 0", text)
        return 0.0
    return value


def _group_en_in(digits: str) -> str:
    # 12345678 -> 1,23,45,678
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def format_price(value: float, currency: str = DEFAULT_CURRENCY) -> str:
    sign = "-" if value < 0 else ""
    whole, _, frac = f"{abs(value):.3f}".partition(".")
    frac = frac.rstrip("0")
    out = _group_en_in(whole)
    if frac:
        out = f"{out}.{frac}"
    return f"{sign}{currency}{out}"


def calculate_total(prices: Iterable[float]) -> float:
    return float(sum(prices, 0.0))
