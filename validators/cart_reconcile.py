from __future__ import annotations

import logging
from typing import List, Optional, Protocol, Sequence

from validators.models import (
    PricedItem,
    ReconciliationResult,
    ReconciliationVerdict,
    TotalComparison,
    VerdictStatus,
)
from validators.price_helper import format_price

logger = logging.getLogger(__name__)

NAME_PREFIX_LEN = 20
DEFAULT_PRICE_TOLERANCE = 100.0

# Totals on a sorted listing vs. cart totals that may carry taxes and delivery.
SORT_PAGE_TOTAL_TOLERANCE = 0.10
CART_TOTAL_TOLERANCE = 0.15


class NameMatcher(Protocol):
    def __call__(self, expected_name: str, actual_name: str) -> bool: ...


def prefix_name_match(expected_name: str, actual_name: str, prefix_len: int = NAME_PREFIX_LEN) -> bool:
    """Loose name match between listing and cart titles.

    True when the first ``prefix_len`` chars of either name (case-insensitive)
    occur anywhere in the other. Listing and cart truncate titles at different
    lengths, hence both directions. Short or shared prefixes can match the
    wrong product.
    """
    exp = (expected_name or "").lower()
    act = (actual_name or "").lower()
    if not exp or not act:
        return False
    return exp[:prefix_len] in act or act[:prefix_len] in exp


def _find_first(expected: PricedItem, actual: Sequence[PricedItem], matcher: NameMatcher) -> Optional[PricedItem]:
    # First hit wins; duplicates of the same title are not disambiguated.
    for item in actual:
        if matcher(expected.name, item.name):
            return item
    return None


def reconcile(
    expected: Sequence[PricedItem],
    actual: Sequence[PricedItem],
    *,
    matcher: NameMatcher = prefix_name_match,
    price_tolerance: float = DEFAULT_PRICE_TOLERANCE,
) -> ReconciliationResult:
    verdicts: List[ReconciliationVerdict] = []
    for exp in expected:
        found = _find_first(exp, actual, matcher)
        if found is None:
            verdicts.append(
                ReconciliationVerdict(
                    status=VerdictStatus.NOT_FOUND,
                    expected=exp,
                    actual=None,
                    message=f'Product "{exp.name}" not found in cart',
                )
            )
            continue

        diff = abs(found.amount - exp.amount)
        # Expected 0 means the price was never captured: do not fail on it.
        if diff < price_tolerance or exp.amount == 0:
            verdicts.append(
                ReconciliationVerdict(
                    status=VerdictStatus.MATCH,
                    expected=exp,
                    actual=found,
                    message=f'"{found.short_name()}" at {format_price(found.amount)}',
                )
            )
        else:
            verdicts.append(
                ReconciliationVerdict(
                    status=VerdictStatus.PRICE_MISMATCH,
                    expected=exp,
                    actual=found,
                    message=(
                        f"Price mismatch: Expected {format_price(exp.amount)}, "
                        f"Got {format_price(found.amount)}"
                    ),
                )
            )

    result = ReconciliationResult(verdicts=tuple(verdicts))
    logger.info(
        "Cart reconcile: expected=%d actual=%d matches=%d mismatches=%d",
        len(expected),
        len(actual),
        len(result.matches),
        len(result.mismatches),
    )
    return result


def compare_total(
    displayed: float,
    calculated: float,
    expected: float,
    tolerance_ratio: float,
) -> TotalComparison:
    if not 0 <= tolerance_ratio <= 1:
        raise ValueError(f"tolerance_ratio must be within [0, 1], got {tolerance_ratio!r}")
    return TotalComparison(
        displayed_total=displayed,
        calculated_total=calculated,
        expected_total=expected,
        tolerance_ratio=tolerance_ratio,
    )


def describe_total(cmp: TotalComparison) -> str:
    return (
        f"Displayed: {format_price(cmp.displayed_total)}, "
        f"Calculated: {format_price(cmp.calculated_total)}, "
        f"Expected: {format_price(cmp.expected_total)}"
    )
