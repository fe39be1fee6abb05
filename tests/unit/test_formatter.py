"""
Unit tests -- metric labels and value formatting.
"""
import pytest

from src.insights.catalog import get_metric_keys
from src.insights.formatter import format_value, group_indian, metric_label, to_fixed


def test_currency_rounds_with_indian_grouping():
    assert format_value("AOV", 1234.9) == "₹1,235"


def test_currency_lakh_grouping():
    assert format_value("GMV", 1234567) == "₹12,34,567"
    assert format_value("ASP", 999.4) == "₹999"


def test_percent_one_decimal():
    assert format_value("CR", 2.456) == "2.5%"
    assert format_value("Cart Page %", 35) == "35.0%"


def test_percent_rounds_half_up():
    assert format_value("ATC", 2.25) == "2.3%"


def test_decimal_two_places():
    assert format_value("TPC", 1.5) == "1.50"
    assert format_value("ITO", 2) == "2.00"


def test_counts_grouped_without_decimals():
    assert format_value("Sessions", 1234567.4) == "12,34,567"
    assert format_value("Delivered orders", 1200) == "1,200"


def test_unknown_metric_uses_integer_format():
    assert format_value("Mystery", 100000) == "1,00,000"


def test_none_is_na():
    assert format_value("GMV", None) == "N/A"


@pytest.mark.parametrize("metric", get_metric_keys() + ["growth", "Unknown"])
def test_na_text_never_throws(metric):
    assert format_value(metric, "N/A") == "N/A"


def test_numeric_string_is_coerced():
    assert format_value("CR", "3.14") == "3.1%"


@pytest.mark.parametrize("number,expected", [
    (0, "0"),
    (999, "999"),
    (1000, "1,000"),
    (100000, "1,00,000"),
    (12345678, "1,23,45,678"),
    (-1234567, "-12,34,567"),
])
def test_group_indian(number, expected):
    assert group_indian(number) == expected


def test_to_fixed():
    assert to_fixed(12.0, 1) == "12.0"
    assert to_fixed(0.125, 2) == "0.13"


def test_labels():
    assert metric_label("Delivered orders") == "Orders"
    assert metric_label("CR") == "Conversion Rate"
    assert metric_label("ATC2P") == "ATC2P"
    assert metric_label("not-a-metric") == "not-a-metric"
