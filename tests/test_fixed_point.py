"""
Test suite for fixed_point module

Tests parsing, formatting and arithmetic of scaled-integer decimals.
Results must be exact and overflow must never wrap.
"""

import pytest

from payments_engine.fixed_point import (
    FixedDecimal, Money, OverflowMode, fixed_decimal_type,
    FixedPointParseError, InvalidFormatError, PrecisionExceededError,
    InvalidNumberFormatError, FixedPointOverflowError
)


MONEY_MAX_TEXT = "17014118346046923173168730371588410.5727"
MONEY_MIN_TEXT = "-17014118346046923173168730371588410.5728"


class TestParsing:
    """Test text to value conversion"""

    def test_round_trip_large_value(self):
        """Test a large value survives parse and format unchanged"""
        num = Money.parse("792281625142643375935.0335")
        assert num.to_string() == "792281625142643375935.0335"

    def test_round_trip_negative_value(self):
        num = Money.parse("-792281625142643375935.0335")
        assert str(num) == "-792281625142643375935.0335"

    def test_small_negative_value_is_padded(self):
        assert Money.parse("-0.23").to_string() == "-0.2300"

    def test_many_integer_digits(self):
        num = Money.parse("11111111111111111111111111111111111.0001")
        assert num.to_string() == "11111111111111111111111111111111111.0001"

    def test_fraction_is_right_padded(self):
        """Test the fractional part is scaled to full precision"""
        assert Money.parse("1").raw == 10000
        assert Money.parse("1.5").raw == 15000
        assert Money.parse("0.0001").raw == 1
        assert Money.parse("2.0").to_string() == "2.0000"

    def test_missing_integer_or_fraction_digits(self):
        assert Money.parse(".5").to_string() == "0.5000"
        assert Money.parse("5.").to_string() == "5.0000"
        assert Money.parse("-.5").to_string() == "-0.5000"
        assert Money.parse("+3.25").to_string() == "3.2500"

    def test_width_bounds(self):
        """Test the extreme representable values parse exactly"""
        assert Money.parse(MONEY_MAX_TEXT).raw == Money.max_raw()
        assert Money.parse(MONEY_MIN_TEXT).raw == Money.min_raw()
        assert Money.parse(MONEY_MAX_TEXT).to_string() == MONEY_MAX_TEXT

    def test_value_beyond_width_is_rejected(self):
        with pytest.raises(InvalidNumberFormatError):
            Money.parse("17014118346046923173168730371588410.5728")
        with pytest.raises(InvalidNumberFormatError):
            Money.parse("-17014118346046923173168730371588410.5729")

    def test_very_long_digit_strings(self):
        """Test huge digit counts are out of range, not an int() limit error"""
        for text in ["9" * 5000, "-" + "9" * 5000, "9" * 36 + ".5"]:
            with pytest.raises(FixedPointParseError):
                Money.parse(text)
        with pytest.raises(InvalidNumberFormatError, match="does not fit 128 bits"):
            Money.parse("1" * 5000)

    def test_leading_zeros_are_ignored(self):
        assert Money.parse("0" * 5000 + "1.5") == Money.parse("1.5")
        assert Money.parse("-" + "0" * 50 + "2") == Money.parse("-2")
        assert Money.parse("-0").is_zero()

    def test_too_many_separators(self):
        with pytest.raises(InvalidFormatError):
            Money.parse("1.2.3")

    def test_empty_and_digitless_text(self):
        for text in ["", ".", "-", "-."]:
            with pytest.raises(InvalidFormatError):
                Money.parse(text)

    def test_precision_exceeded(self):
        """Test more fractional digits than the scale are refused, not rounded"""
        with pytest.raises(PrecisionExceededError) as exc_info:
            Money.parse("1.23456")

        assert exc_info.value.precision == 4
        assert exc_info.value.requested_precision == 5
        assert "supported precision 4" in str(exc_info.value)

    def test_non_digit_input(self):
        for text in ["abc", "1e5", "1_000", " 1", "1.-5", "12a.5", "0x10"]:
            with pytest.raises(InvalidNumberFormatError):
                Money.parse(text)

    def test_parse_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            Money.parse("not a number")
        assert issubclass(FixedPointParseError, ValueError)


class TestFormatting:
    """Test value to text conversion"""

    def test_zero(self):
        assert Money.zero().to_string() == "0.0000"

    def test_sign_follows_raw_value(self):
        assert Money.from_raw(-1).to_string() == "-0.0001"
        assert Money.from_raw(1).to_string() == "0.0001"
        assert Money.from_raw(-123456).to_string() == "-12.3456"

    def test_scale_zero_renders_without_point(self):
        Whole = fixed_decimal_type(64, 0, name="Whole")
        assert Whole.parse("42").to_string() == "42"
        assert Whole.parse("-7").to_string() == "-7"
        with pytest.raises(PrecisionExceededError):
            Whole.parse("4.2")

    def test_repr(self):
        assert repr(Money.parse("1.5")) == "Money('1.5000')"


class TestArithmetic:
    """Test exact arithmetic and comparisons"""

    def test_add_and_subtract(self):
        a = Money.parse("100.50")
        b = Money.parse("50.25")

        assert a + b == Money.parse("150.75")
        assert a - b == Money.parse("50.25")
        assert b - a == Money.parse("-50.25")
        assert -a == Money.parse("-100.5")
        assert abs(Money.parse("-3")) == Money.parse("3")

    def test_repeated_cycles_are_exact(self):
        """Test no representation error accumulates"""
        total = Money.zero()
        tenth = Money.parse("0.1")
        for _ in range(10):
            total = total + tenth
        assert total == Money.parse("1")

        for _ in range(1000):
            total = total + tenth
            total = total - tenth
        assert total == Money.parse("1.0000")

    def test_comparison(self):
        small = Money.parse("1.0001")
        large = Money.parse("1.0002")

        assert small < large
        assert large > small
        assert small <= Money.parse("1.0001")
        assert large >= small
        assert small != large

    def test_state_checks(self):
        assert Money.zero().is_zero()
        assert Money.parse("0.0000").is_zero()
        assert Money.parse("0.0001").is_positive()
        assert Money.parse("-0.0001").is_negative()
        assert not Money.zero().is_negative()

    def test_values_are_hashable(self):
        assert len({Money.parse("1"), Money.parse("1.0000"), Money.parse("2")}) == 2

    def test_addition_overflow_raises(self):
        """Test overflow fails instead of wrapping"""
        top = Money.from_raw(Money.max_raw())
        with pytest.raises(FixedPointOverflowError):
            top + Money.from_raw(1)

        bottom = Money.from_raw(Money.min_raw())
        with pytest.raises(FixedPointOverflowError):
            bottom - Money.from_raw(1)
        with pytest.raises(FixedPointOverflowError):
            -bottom

    def test_out_of_range_construction_raises(self):
        with pytest.raises(FixedPointOverflowError):
            Money(Money.max_raw() + 1)

    def test_raw_must_be_int(self):
        with pytest.raises(TypeError):
            Money(1.5)
        with pytest.raises(TypeError):
            Money(True)

    def test_mixed_types_rejected(self):
        """Test values of different widths or scales never mix"""
        Cents = fixed_decimal_type(64, 2, name="Cents")

        with pytest.raises(ValueError, match="Cannot add Money and Cents"):
            Money.zero() + Cents.zero()
        with pytest.raises(ValueError, match="Cannot compare"):
            Money.zero() < Cents.zero()
        assert Money.zero() != Cents.zero()


class TestFixedDecimalType:
    """Test instantiation of fixed-point types"""

    def test_type_parameters(self):
        Small = fixed_decimal_type(16, 2)

        assert Small.__name__ == "FixedDecimal16x2"
        assert issubclass(Small, FixedDecimal)
        assert Small.max_raw() == 32767
        assert Small.min_raw() == -32768
        assert Small.parse("327.67").raw == 32767
        with pytest.raises(InvalidNumberFormatError):
            Small.parse("327.68")

    def test_money_parameters(self):
        assert Money.WIDTH == 128
        assert Money.SCALE == 4
        assert Money.OVERFLOW is OverflowMode.RAISE

    def test_saturating_type_clamps(self):
        """Test saturating instantiations clamp at the width bounds"""
        Sat = fixed_decimal_type(8, 2, overflow=OverflowMode.SATURATE)

        assert Sat(127) + Sat(1) == Sat(127)
        assert Sat(-128) - Sat(1) == Sat(-128)
        assert -Sat(-128) == Sat(127)
        assert str(Sat(127)) == "1.27"

    def test_invalid_parameters(self):
        with pytest.raises(ValueError):
            fixed_decimal_type(1, 2)
        with pytest.raises(ValueError):
            fixed_decimal_type(32, -1)
