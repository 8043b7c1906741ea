import pytest

from validators.cart_reconcile import (
    CART_TOTAL_TOLERANCE,
    SORT_PAGE_TOTAL_TOLERANCE,
    compare_total,
    describe_total,
    prefix_name_match,
    reconcile,
)
from validators.models import PricedItem, VerdictStatus


def item(name, price):
    return PricedItem(name=name, price=price)


def test_prefix_match_within_tolerance_is_match():
    result = reconcile([item("Nike Air Shoes", 1500)], [item("Nike Air Shoes Running", 1550)])
    assert result.passed
    assert [v.status for v in result.verdicts] == [VerdictStatus.MATCH]
    assert result.verdicts[0].actual.name == "Nike Air Shoes Running"


def test_missing_product_is_not_found():
    result = reconcile([item("Puma Sneakers", 2000)], [item("Nike Air Shoes", 1500)])
    assert not result.passed
    v = result.verdicts[0]
    assert v.status is VerdictStatus.NOT_FOUND
    assert v.actual is None
    assert "Puma Sneakers" in v.message


def test_price_outside_tolerance_is_mismatch():
    result = reconcile([item("Nike Air Shoes", 1500)], [item("Nike Air Shoes", 1600)])
    assert not result.passed
    v = result.verdicts[0]
    assert v.status is VerdictStatus.PRICE_MISMATCH
    assert v.message == "Price mismatch: Expected ₹1,500, Got ₹1,600"


def test_tolerance_is_strict_less_than():
    assert reconcile([item("Shoe", 1000)], [item("Shoe", 1099.99)]).passed
    assert not reconcile([item("Shoe", 1000)], [item("Shoe", 1100)]).passed


@pytest.mark.parametrize("expected_price", [0, None])
def test_uncaptured_expected_price_always_matches(expected_price):
    result = reconcile([item("Nike Air Shoes", expected_price)], [item("Nike Air Shoes", 99999)])
    assert result.passed
    assert result.verdicts[0].status is VerdictStatus.MATCH


def test_first_match_wins_over_better_price():
    actual = [item("Nike Air Shoes Black", 5000), item("Nike Air Shoes White", 1500)]
    result = reconcile([item("Nike Air Shoes", 1500)], actual)
    assert result.verdicts[0].status is VerdictStatus.PRICE_MISMATCH
    assert result.verdicts[0].actual.name == "Nike Air Shoes Black"


def test_each_expected_item_is_evaluated():
    expected = [item("Puma Sneakers", 2000), item("Nike Air Shoes", 1500), item("Adidas Runner", 900)]
    actual = [item("Nike Air Shoes", 1500), item("Adidas Runner Pro", 2000)]
    result = reconcile(expected, actual)
    assert [v.status for v in result.verdicts] == [
        VerdictStatus.NOT_FOUND,
        VerdictStatus.MATCH,
        VerdictStatus.PRICE_MISMATCH,
    ]
    assert len(result.matches) == 1
    assert len(result.mismatches) == 2
    assert not result.passed


def test_empty_expected_passes():
    assert reconcile([], [item("anything", 1)]).passed


def test_prefix_match_both_directions_and_case():
    long_name = "CAMPUS Men's Running Shoes Lightweight Mesh"
    assert prefix_name_match(long_name, "campus men's running")
    assert prefix_name_match("campus men's running", long_name)
    assert prefix_name_match("nike", "NIKE AIR")
    assert not prefix_name_match("Puma Sneakers", "Nike Air Shoes")


def test_prefix_match_only_uses_first_twenty_chars():
    # differ after char 20: still a match
    assert prefix_name_match("Sparx Men Sports Shoe SM-123", "Sparx Men Sports Sho")
    # same product words, different start: no match
    assert not prefix_name_match("Men Sports Shoe by Sparx", "Sparx Men Sports Shoe")


def test_empty_names_never_match():
    assert not prefix_name_match("", "Nike")
    assert not prefix_name_match("Nike", "")


def test_custom_matcher_is_used():
    def exact(expected_name, actual_name):
        return expected_name == actual_name

    actual = [item("Nike Air Shoes Running", 1500)]
    assert reconcile([item("Nike Air Shoes", 1500)], actual).passed
    assert not reconcile([item("Nike Air Shoes", 1500)], actual, matcher=exact).passed


def test_custom_price_tolerance():
    result = reconcile([item("Shoe", 1000)], [item("Shoe", 1040)], price_tolerance=25)
    assert result.verdicts[0].status is VerdictStatus.PRICE_MISMATCH


def test_compare_total_within_and_outside():
    ok = compare_total(1080, 1080, 1000, 0.1)
    assert ok.is_displayed_within
    assert ok.is_calculated_within
    assert ok.passed

    bad = compare_total(1200, 1200, 1000, 0.1)
    assert not bad.is_displayed_within
    assert not bad.is_calculated_within
    assert not bad.passed


def test_compare_total_either_side_passes():
    cmp = compare_total(1300, 1050, 1000, SORT_PAGE_TOTAL_TOLERANCE)
    assert not cmp.is_displayed_within
    assert cmp.is_calculated_within
    assert cmp.passed


def test_compare_total_cart_tolerance_absorbs_fees():
    cmp = compare_total(1140, 1000, 1000, CART_TOTAL_TOLERANCE)
    assert cmp.is_displayed_within
    assert cmp.tolerance == pytest.approx(150)


def test_compare_total_rejects_bad_ratio():
    with pytest.raises(ValueError):
        compare_total(1, 1, 1, 1.5)
    with pytest.raises(ValueError):
        compare_total(1, 1, 1, -0.1)


def test_describe_total():
    assert describe_total(compare_total(1080, 1050, 1000, 0.1)) == (
        "Displayed: ₹1,080, Calculated: ₹1,050, Expected: ₹1,000"
    )
