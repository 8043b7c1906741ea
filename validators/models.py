from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

NAME_DISPLAY_LEN = 50


@dataclass(frozen=True)
class PricedItem:
    """Name/price pair scraped from a listing, product page or cart.

    ``price`` is ``None`` when the raw text held no parsable price; use
    ``amount`` wherever a number is needed (unknown collapses to 0).
    """

    name: str
    price: Optional[float] = None
    raw_price_text: str = ""

    @property
    def amount(self) -> float:
        return self.price if self.price is not None else 0.0

    @property
    def has_price(self) -> bool:
        return self.price is not None

    def short_name(self, length: int = NAME_DISPLAY_LEN) -> str:
        return self.name.strip()[:length]


@dataclass(frozen=True)
class OrderViolation:
    position: int
    current_item: PricedItem
    previous_item: PricedItem


@dataclass(frozen=True)
class SortReport:
    total_items: int
    violations: Tuple[OrderViolation, ...] = ()

    @property
    def is_sorted(self) -> bool:
        return not self.violations


class VerdictStatus(str, Enum):
    MATCH = "MATCH"
    PRICE_MISMATCH = "PRICE_MISMATCH"
    NOT_FOUND = "NOT_FOUND"


@dataclass(frozen=True)
class ReconciliationVerdict:
    status: VerdictStatus
    expected: PricedItem
    actual: Optional[PricedItem]
    message: str


@dataclass(frozen=True)
class ReconciliationResult:
    verdicts: Tuple[ReconciliationVerdict, ...] = field(default_factory=tuple)

    @property
    def passed(self) -> bool:
        return all(v.status is VerdictStatus.MATCH for v in self.verdicts)

    @property
    def matches(self) -> Tuple[ReconciliationVerdict, ...]:
        return tuple(v for v in self.verdicts if v.status is VerdictStatus.MATCH)

    @property
    def mismatches(self) -> Tuple[ReconciliationVerdict, ...]:
        return tuple(v for v in self.verdicts if v.status is not VerdictStatus.MATCH)


@dataclass(frozen=True)
class TotalComparison:
    displayed_total: float
    calculated_total: float
    expected_total: float
    tolerance_ratio: float

    @property
    def tolerance(self) -> float:
        return self.expected_total * self.tolerance_ratio

    @property
    def is_displayed_within(self) -> bool:
        return abs(self.displayed_total - self.expected_total) <= self.tolerance

    @property
    def is_calculated_within(self) -> bool:
        return abs(self.calculated_total - self.expected_total) <= self.tolerance

    @property
    def passed(self) -> bool:
        # Either side is enough: the cart page total may include fees the line items lack.
        return self.is_displayed_within or self.is_calculated_within
