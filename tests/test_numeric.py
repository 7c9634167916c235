from __future__ import annotations

import math

import pytest

from signal_engine.utils.numeric import round_half_up, round_price, to_float, to_int, to_lots


@pytest.mark.parametrize("raw, expected", [
    ("1,234.5", 1234.5),
    (" 42 ", 42.0),
    ("--", 0.0),
    ("", 0.0),
    (None, 0.0),
    (True, 0.0),
    (float("nan"), 0.0),
    (float("inf"), 0.0),
    (7, 7.0),
])
def test_to_float_coerces_unparseable_to_zero(raw, expected):
    assert to_float(raw) == expected


def test_to_int_truncates():
    assert to_int("12.9") == 12
    assert to_int("-3.7") == -3
    assert to_int("abc") == 0


def test_round_half_up_goes_towards_positive_infinity():
    assert round_half_up(2.5) == 3
    assert round_half_up(-2.5) == -2
    assert round_half_up(1.4999) == 1
    assert round_half_up(-1.5001) == -2


def test_round_price_uses_exact_binary_value():
    assert round_price(0.125) == 0.13
    assert round_price(-0.125) == -0.13
    # 2.675 is stored slightly below the midpoint
    assert round_price(2.675) == 2.67
    assert round_price(12.3456, 1) == 12.3
    assert math.isnan(round_price(float("nan")))


def test_to_lots():
    assert to_lots(1_500_000) == 1500
    assert to_lots(2_500) == 3
    assert to_lots(-2_500) == -2
    assert to_lots(499) == 0
