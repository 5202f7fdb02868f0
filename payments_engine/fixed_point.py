"""
Fixed-Point Decimal Module

Exact decimal arithmetic backed by a scaled integer of fixed bit width.
A value is stored as ``raw * 10^-scale``; the raw integer must always fit
the signed range of the configured width. Overflow is reported, never
wrapped. NEVER uses float for monetary values.
"""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional, Type
import re


_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")


class OverflowMode(Enum):
    """What arithmetic does when a result leaves the width's range"""
    RAISE = "raise"        # Fail with FixedPointOverflowError
    SATURATE = "saturate"  # Clamp to the nearest bound


class FixedPointParseError(ValueError):
    """Base class for text that cannot become a fixed-point value"""

    def __init__(self, message: str, text: Optional[str] = None):
        super().__init__(message)
        self.text = text


class InvalidFormatError(FixedPointParseError):
    """Text is not shaped like a decimal number (e.g. two separators)"""


class PrecisionExceededError(FixedPointParseError):
    """Fractional part carries more digits than the scale can hold"""

    def __init__(self, precision: int, requested_precision: int, text: Optional[str] = None):
        super().__init__(
            f"exceeded precision while parsing: supported precision {precision}, "
            f"parsed precision {requested_precision}",
            text
        )
        self.precision = precision
        self.requested_precision = requested_precision


class InvalidNumberFormatError(FixedPointParseError):
    """Digits are malformed or the value does not fit the width"""


class FixedPointOverflowError(ArithmeticError):
    """Raised when a raw value falls outside the width's signed range"""


@dataclass(frozen=True)
class FixedDecimal:
    """
    Immutable fixed-point decimal.

    Concrete types are produced by ``fixed_decimal_type``; every subclass
    fixes WIDTH (bits of the signed backing integer), SCALE (fractional
    digits) and OVERFLOW. Values of different subclasses never mix.
    """
    raw: int

    WIDTH: ClassVar[int] = 128
    SCALE: ClassVar[int] = 4
    OVERFLOW: ClassVar[OverflowMode] = OverflowMode.RAISE

    def __post_init__(self):
        if isinstance(self.raw, bool) or not isinstance(self.raw, int):
            raise TypeError(f"{type(self).__name__} raw value must be int, got {type(self.raw).__name__}")
        if not self.min_raw() <= self.raw <= self.max_raw():
            raise FixedPointOverflowError(
                f"{self.raw} does not fit a signed {self.WIDTH}-bit {type(self).__name__}"
            )

    # ---------- type parameters ----------
    @classmethod
    def min_raw(cls) -> int:
        return -(1 << (cls.WIDTH - 1))

    @classmethod
    def max_raw(cls) -> int:
        return (1 << (cls.WIDTH - 1)) - 1

    @classmethod
    def exponent(cls) -> int:
        return 10 ** cls.SCALE

    # ---------- construction ----------
    @classmethod
    def zero(cls) -> "FixedDecimal":
        return cls(0)

    @classmethod
    def from_raw(cls, raw: int) -> "FixedDecimal":
        """Build a value from an already scaled integer"""
        return cls(raw)

    @classmethod
    def parse(cls, text: str) -> "FixedDecimal":
        """
        Parse decimal text such as ``"12.5"`` or ``"-0.23"``.

        The fractional part is right-padded with zeros to SCALE digits and
        glued to the integer part; the result is read as one signed integer.

        Raises:
            InvalidFormatError: Empty text, no digits or more than one separator
            PrecisionExceededError: More fractional digits than SCALE
            InvalidNumberFormatError: Non-digit characters or out of range
        """
        if not isinstance(text, str) or not text:
            raise InvalidFormatError("invalid fixed-point format: empty value", text)

        parts = text.split(".")
        if len(parts) > 2:
            raise InvalidFormatError(f"invalid fixed-point format: {text!r}", text)

        integer_part = parts[0]
        fractional_part = parts[1] if len(parts) == 2 else ""
        if not integer_part.lstrip("+-") and not fractional_part:
            raise InvalidFormatError(f"invalid fixed-point format: {text!r}", text)

        requested_precision = len(fractional_part)
        if requested_precision > cls.SCALE:
            raise PrecisionExceededError(cls.SCALE, requested_precision, text)

        digits = integer_part + fractional_part + "0" * (cls.SCALE - requested_precision)
        if not _INTEGER_PATTERN.fullmatch(digits):
            raise InvalidNumberFormatError(f"invalid number format: {text!r}", text)

        # Leading zeros and over-long digit strings never reach int()
        sign = digits[0] if digits[0] in "+-" else ""
        significant = digits.lstrip("+-").lstrip("0") or "0"
        if len(significant) > len(str(cls.max_raw())):
            raise InvalidNumberFormatError(
                f"invalid number format: {text[:32]!r}... does not fit {cls.WIDTH} bits", text
            )

        raw = int(sign + significant)
        if not cls.min_raw() <= raw <= cls.max_raw():
            raise InvalidNumberFormatError(
                f"invalid number format: {text!r} does not fit {cls.WIDTH} bits", text
            )
        return cls(raw)

    # ---------- formatting ----------
    def to_string(self) -> str:
        """Render as sign, integer part, '.', zero-padded fraction"""
        integer_part, fractional_part = divmod(abs(self.raw), self.exponent())
        sign = "-" if self.raw < 0 else ""
        if self.SCALE == 0:
            return f"{sign}{integer_part}"
        return f"{sign}{integer_part}.{fractional_part:0{self.SCALE}d}"

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"{type(self).__name__}('{self.to_string()}')"

    # ---------- arithmetic ----------
    def _check_compatible(self, other, verb: str) -> None:
        if type(other) is not type(self):
            other_name = type(other).__name__
            raise ValueError(f"Cannot {verb} {type(self).__name__} and {other_name}")

    def _result(self, raw: int) -> "FixedDecimal":
        if self.OVERFLOW is OverflowMode.SATURATE:
            raw = max(self.min_raw(), min(self.max_raw(), raw))
        return type(self)(raw)

    def __add__(self, other: "FixedDecimal") -> "FixedDecimal":
        self._check_compatible(other, "add")
        return self._result(self.raw + other.raw)

    def __sub__(self, other: "FixedDecimal") -> "FixedDecimal":
        self._check_compatible(other, "subtract")
        return self._result(self.raw - other.raw)

    def __neg__(self) -> "FixedDecimal":
        return self._result(-self.raw)

    def __abs__(self) -> "FixedDecimal":
        return self._result(abs(self.raw))

    # ---------- comparison ----------
    def __lt__(self, other: "FixedDecimal") -> bool:
        self._check_compatible(other, "compare")
        return self.raw < other.raw

    def __le__(self, other: "FixedDecimal") -> bool:
        self._check_compatible(other, "compare")
        return self.raw <= other.raw

    def __gt__(self, other: "FixedDecimal") -> bool:
        self._check_compatible(other, "compare")
        return self.raw > other.raw

    def __ge__(self, other: "FixedDecimal") -> bool:
        self._check_compatible(other, "compare")
        return self.raw >= other.raw

    def is_zero(self) -> bool:
        return self.raw == 0

    def is_positive(self) -> bool:
        return self.raw > 0

    def is_negative(self) -> bool:
        return self.raw < 0


def fixed_decimal_type(
    width: int,
    scale: int,
    name: Optional[str] = None,
    overflow: OverflowMode = OverflowMode.RAISE
) -> Type[FixedDecimal]:
    """
    Create a fixed-point type for a backing width and scale.

    Args:
        width: Bits of the signed backing integer (at least 2)
        scale: Number of fractional decimal digits (0 or more)
        name: Class name; defaults to ``FixedDecimal<width>x<scale>``
        overflow: Behaviour of arithmetic results outside the range

    Returns:
        A FixedDecimal subclass
    """
    if width < 2:
        raise ValueError("width must be at least 2 bits")
    if scale < 0:
        raise ValueError("scale must not be negative")

    type_name = name or f"FixedDecimal{width}x{scale}"
    return type(type_name, (FixedDecimal,), {
        "WIDTH": width,
        "SCALE": scale,
        "OVERFLOW": overflow,
        "__module__": __name__,
        "__qualname__": type_name,
    })


MONEY_WIDTH = 128
MONEY_SCALE = 4

# Monetary amounts: signed 128-bit, four fractional digits
Money = fixed_decimal_type(MONEY_WIDTH, MONEY_SCALE, name="Money")
