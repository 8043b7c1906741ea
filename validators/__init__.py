from validators.cart_reconcile import (
    CART_TOTAL_TOLERANCE,
    SORT_PAGE_TOTAL_TOLERANCE,
    NameMatcher,
    compare_total,
    prefix_name_match,
    reconcile,
)
from validators.models import (
    OrderViolation,
    PricedItem,
    ReconciliationResult,
    ReconciliationVerdict,
    SortReport,
    TotalComparison,
    VerdictStatus,
)
from validators.price_helper import calculate_total, extract_price, format_price, parse_price
from validators.sort_validator import validate_ascending, violation_details

__all__ = [
    "CART_TOTAL_TOLERANCE",
    "SORT_PAGE_TOTAL_TOLERANCE",
    "NameMatcher",
    "OrderViolation",
    "PricedItem",
    "ReconciliationResult",
    "ReconciliationVerdict",
    "SortReport",
    "TotalComparison",
    "VerdictStatus",
    "calculate_total",
    "compare_total",
    "extract_price",
    "format_price",
    "parse_price",
    "prefix_name_match",
    "reconcile",
    "validate_ascending",
    "violation_details",
]
