import math

from fincraft.utils.numbers import (
    format_number,
    is_provided,
    js_number_str,
    parse_leading_float,
    round_money,
)


def test_is_provided():
    assert is_provided(0)
    assert is_provided("42")
    assert is_provided(12.5)
    for missing in (None, "", "  ", "abc", float("nan"), float("inf"), True):
        assert not is_provided(missing)


def test_format_number():
    assert format_number(30.0) == "30"
    assert format_number(2.5) == "2.5"
    assert format_number(1250000, thousands=True) == "1,250,000"


def test_parse_leading_float():
    assert parse_leading_float("35") == 35.0
    assert parse_leading_float(" 12.5 percent") == 12.5
    assert parse_leading_float(40) == 40.0
    assert math.isnan(parse_leading_float("about 30"))


def test_js_number_str():
    assert js_number_str(35.0) == "35"
    assert js_number_str(12.5) == "12.5"
    assert js_number_str(float("nan")) == "NaN"


def test_round_money_half_up():
    assert round_money(2.675) == 2.68
    assert round_money(0.125) == 0.13
