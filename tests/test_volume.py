"""
Tests for timber volume arithmetic.
"""

import pytest

from timber_market.analytics import (
    calculate_cubic_meters,
    parse_decimal,
    parse_integer,
    round_half_up,
)


class TestCalculateCubicMeters:
    """Volume of a batch of logs."""

    def test_reference_batch(self):
        # avg diameter 15 cm, 4 m, 100 pcs: 7.0686 m³
        assert calculate_cubic_meters(10, 20, 4, 100) == 7.069

    def test_typical_post_batch(self):
        assert calculate_cubic_meters(14, 18, 4, 175) == 14.074

    def test_equal_diameters(self):
        assert calculate_cubic_meters(20, 20, 5, 10) == 1.571

    def test_string_inputs_are_read_leniently(self):
        assert calculate_cubic_meters("10", "20cm", "4 m", "100") == 7.069

    @pytest.mark.parametrize("args", [
        (None, 20, 4, 100),
        (10, None, 4, 100),
        (10, 20, None, 100),
        (10, 20, 4, None),
        ("", 20, 4, 100),
        ("abc", 20, 4, 100),
        (10**400, 20, 4, 100),
        (10, 20, 4, 10**400),
    ])
    def test_missing_or_unreadable_input_gives_zero(self, args):
        assert calculate_cubic_meters(*args) == 0.0

    @pytest.mark.parametrize("args", [
        (0, 0, 4, 100),
        (-10, -20, 4, 100),
        (10, 20, 0, 100),
        (10, 20, -4, 100),
        (10, 20, 4, 0),
        (10, 20, 4, -5),
    ])
    def test_non_positive_dimensions_give_zero(self, args):
        assert calculate_cubic_meters(*args) == 0.0

    def test_fractional_quantity_is_truncated(self):
        assert calculate_cubic_meters(10, 20, 4, 100.9) == calculate_cubic_meters(10, 20, 4, 100)


class TestParsing:
    """Lenient form value parsing."""

    def test_parse_decimal(self):
        assert parse_decimal(12) == 12.0
        assert parse_decimal("12.5") == 12.5
        assert parse_decimal(" 12.5cm") == 12.5
        assert parse_decimal(".5") == 0.5

    def test_parse_decimal_rejects(self):
        assert parse_decimal(None) is None
        assert parse_decimal("") is None
        assert parse_decimal("cm12") is None
        assert parse_decimal(True) is None
        assert parse_decimal(float("nan")) is None
        assert parse_decimal(float("inf")) is None

    def test_ints_too_large_for_a_float(self):
        assert parse_decimal(10**400) is None
        assert parse_decimal(-(10**400)) is None
        assert parse_integer(10**400) is None
        assert parse_decimal("1" * 400) is None

    def test_parse_integer(self):
        assert parse_integer("175 pcs") == 175
        assert parse_integer(3.9) == 3
        assert parse_integer("x") is None


class TestRoundHalfUp:
    """Conventional rounding for displayed figures."""

    def test_halves_round_up(self):
        assert round_half_up(6.25, 1) == 6.3
        assert round_half_up(0.0005, 3) == 0.001
        assert round_half_up(2.5, 0) == 3.0

    def test_plain_rounding(self):
        assert round_half_up(33.3333, 1) == 33.3
        assert round_half_up(66.6666, 1) == 66.7

    def test_unreadable_value_gives_zero(self):
        assert round_half_up("abc", 2) == 0.0
        assert round_half_up(10**400, 2) == 0.0
