import pytest

from validators.price_helper import calculate_total, extract_price, format_price, parse_price


@pytest.mark.parametrize(
    "text, expected",
    [
        ("₹1,299", 1299),
        ("Rs. 1,299.50", 1299.5),
        ("Rs. 45.50", 45.5),
        ("Rs.45", 45),
        ("1299", 1299),
        ("  ₹ 12,34,567 ", 1234567),
        ("1.2.3", 1.2),
        (".5", 0.5),
    ],
)
def test_extract_price_formats(text, expected):
    assert extract_price(text) == expected


@pytest.mark.parametrize("text", ["", None, "no price", "₹", "Rs.", "..."])
def test_extract_price_unparsable_is_zero(text):
    assert extract_price(text) == 0
    assert parse_price(text) is None


def test_extract_price_is_idempotent():
    for text in ["₹1,299", "Rs. 45.50", "1.2.3", "nothing", "12345678901234567", "0.00001"]:
        value = extract_price(text)
        assert extract_price(str(value)) == value


def test_extract_price_reads_exponent_form():
    assert extract_price("1.2345678901234568e+16") == 1.2345678901234568e16
    assert extract_price("1e-05") == 0.00001
    assert extract_price("1e999") == 0


def test_parse_price_keeps_genuine_zero():
    assert parse_price("₹0") == 0
    assert parse_price("₹0") is not None


@pytest.mark.parametrize(
    "value, expected",
    [
        (1299, "₹1,299"),
        (100000, "₹1,00,000"),
        (12345678, "₹1,23,45,678"),
        (45.5, "₹45.5"),
        (999, "₹999"),
        (0, "₹0"),
    ],
)
def test_format_price_en_in_grouping(value, expected):
    assert format_price(value) == expected


def test_format_price_round_trips_numerically():
    for value in (1299, 1299.5, 100000):
        assert extract_price(format_price(value)) == value


def test_format_price_custom_currency():
    assert format_price(1500, currency="Rs. ") == "Rs. 1,500"


def test_calculate_total():
    assert calculate_total([]) == 0
    assert calculate_total([10, 20, 30]) == 60
    assert calculate_total(p for p in (1.5, 2.5)) == 4.0
