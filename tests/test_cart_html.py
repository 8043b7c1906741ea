from pathlib import Path

from validators.cart_html import parse_cart_html, parse_cart_total
from validators.cart_reconcile import reconcile
from validators.models import PricedItem, VerdictStatus

FIXTURES = Path(__file__).resolve().parent / "fixtures"


def _load(name):
    return (FIXTURES / name).read_text(encoding="utf-8")


def test_parse_ok_fixture():
    items = parse_cart_html(_load("cart_sample_ok.html"))
    assert [(it.name, it.price) for it in items] == [
        ("Nike Air Shoes Running For Men", 1550),
        ("Puma Running Sneakers (Black)", 1999),
    ]
    assert items[0].raw_price_text == "₹1,550"
    assert parse_cart_total(_load("cart_sample_ok.html")) == 3549


def test_bad_fixture_reconciles_with_mismatches():
    items = parse_cart_html(_load("cart_sample_bad.html"))
    expected = [PricedItem("Nike Air Shoes", 1500), PricedItem("Puma Running Sneakers", 2000)]
    statuses = [v.status for v in reconcile(expected, items).verdicts]
    assert statuses == [VerdictStatus.PRICE_MISMATCH, VerdictStatus.NOT_FOUND]


def test_missing_price_is_unknown():
    html = """
    <div><a class="_2Kn22P">First</a><div class="_30jeq3 _1_WHN1">₹499</div></div>
    <div><div class="_36ESq6">Second</div></div>
    """
    items = parse_cart_html(html)
    assert items[0].price == 499
    assert items[1].name == "Second"
    assert items[0].has_price
    assert items[1].price is None
    assert not items[1].has_price
    assert items[1].amount == 0


def test_long_names_truncated():
    html = f'<a class="s1Q9rs">{"x" * 80}</a>'
    assert len(parse_cart_html(html)[0].name) == 50


def test_empty_html():
    assert parse_cart_html("") == []
    assert parse_cart_total("") == 0


def test_price_stays_with_its_own_cart_line():
    html = """
    <div class="line"><a class="_2Kn22P">First</a></div>
    <div class="line">
      <a class="_2Kn22P">Second</a>
      <div class="_3fSRat"><span class="_2-ut7f">₹499</span></div>
    </div>
    """
    items = parse_cart_html(html)
    assert [(it.name, it.price) for it in items] == [("First", None), ("Second", 499)]


def test_flat_markup_pairs_price_with_preceding_name():
    html = (
        '<a class="s1Q9rs">First</a><div class="_30jeq3 _1_WHN1">₹100</div>'
        '<a class="s1Q9rs">Second</a><div class="_30jeq3 _1_WHN1">₹200</div>'
    )
    assert [(it.name, it.price) for it in parse_cart_html(html)] == [("First", 100), ("Second", 200)]
