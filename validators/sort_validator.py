from __future__ import annotations

import logging
from typing import List, Sequence

from validators.models import OrderViolation, PricedItem, SortReport
from validators.price_helper import format_price

logger = logging.getLogger(__name__)


def validate_ascending(items: Sequence[PricedItem]) -> SortReport:
    """Check that prices never go down between neighbours.

    Every item is compared with the item right before it, so a single dip
    can flag several consecutive pairs. Ties are in order. Unknown prices
    count as 0 and are not skipped, so an unparsed card between priced
    cards shows up as a violation.
    """
    items = list(items)
    violations: List[OrderViolation] = []
    for i in range(1, len(items)):
        prev, cur = items[i - 1], items[i]
        if cur.amount < prev.amount:
            violations.append(OrderViolation(position=i + 1, current_item=cur, previous_item=prev))

    report = SortReport(total_items=len(items), violations=tuple(violations))
    if report.is_sorted:
        logger.info("Sort check: %d items in ascending order", report.total_items)
    else:
        logger.warning(
            "Sort check: %d violation(s) in %d items", len(report.violations), report.total_items
        )
    return report


def describe_violation(v: OrderViolation) -> str:
    return (
        f'Position {v.position}: "{v.current_item.short_name()}" ({format_price(v.current_item.amount)})'
        f' < "{v.previous_item.short_name()}" ({format_price(v.previous_item.amount)})'
    )


def violation_details(report: SortReport) -> List[str]:
    return [describe_violation(v) for v in report.violations]
