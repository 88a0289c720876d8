"""Checked integer wrapper for reserve and share arithmetic.

SafeInt makes pool math fail loudly instead of producing values a
fixed-width unsigned ledger could never hold:
- Division by zero raises DivisionByZero
- Subtraction below zero raises Underflow
- Values above 2**256 - 1 raise Uint256Overflow when stored

Intermediate products (e.g. reserve_a * reserve_b) may exceed 256 bits;
only values that are persisted as pool state are bounds-checked, via
to_uint256().

Usage pattern:
    from pairswap.safe_int import S

    def shares_for(amount: int, supply: int, reserve: int) -> int:
        return (S(amount) * supply // reserve).to_uint256()
"""

from __future__ import annotations

from math import isqrt

UINT256_MAX = 2**256 - 1


class SafeIntError(ArithmeticError):
    """Base class for checked arithmetic errors."""

    pass


class DivisionByZero(SafeIntError):
    """Division by zero."""

    pass


class Underflow(SafeIntError):
    """Subtraction would produce a negative result."""

    pass


class Uint256Overflow(SafeIntError):
    """Value is negative or exceeds the uint256 maximum."""

    pass


class SafeInt:
    """Non-negative integer with checked arithmetic.

    Construction rejects negative values, so every SafeInt in a calculation
    is a valid unsigned quantity. Addition and multiplication never wrap
    (Python ints are unbounded); the uint256 bound is enforced when a
    result is converted back with to_uint256().

    Attributes:
        value: The underlying integer value (read-only)
    """

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeInt) -> None:
        """Wrap an int or copy another SafeInt.

        Raises:
            TypeError: If value is not an int (bools are rejected too)
            Underflow: If value is negative
        """
        if isinstance(value, SafeInt):
            self._value = value._value
            return
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"SafeInt requires int, got {type(value).__name__}")
        if value < 0:
            raise Underflow(f"Negative value: {value}")
        self._value = value

    @property
    def value(self) -> int:
        """The underlying integer value."""
        return self._value

    def __repr__(self) -> str:
        return f"SafeInt({self._value})"

    def __str__(self) -> str:
        return str(self._value)

    def __hash__(self) -> int:
        return hash(self._value)

    # --- Arithmetic ---

    def __add__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value + _extract_value(other))

    def __radd__(self, other: int) -> SafeInt:
        return SafeInt(other + self._value)

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        """Subtract other from self.

        Raises:
            Underflow: If other is larger than self
        """
        other_val = _extract_value(other)
        if other_val > self._value:
            raise Underflow(f"Underflow: {self._value} - {other_val}")
        return SafeInt(self._value - other_val)

    def __rsub__(self, other: int) -> SafeInt:
        if self._value > other:
            raise Underflow(f"Underflow: {other} - {self._value}")
        return SafeInt(other - self._value)

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value * _extract_value(other))

    def __rmul__(self, other: int) -> SafeInt:
        return SafeInt(other * self._value)

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        """Floor division.

        Raises:
            DivisionByZero: If other is zero
        """
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivisionByZero(f"Division by zero: {self._value} // 0")
        return SafeInt(self._value // other_val)

    # --- Comparison ---

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SafeInt):
            return self._value == other._value
        if isinstance(other, int):
            return self._value == other
        return NotImplemented

    def __lt__(self, other: SafeInt | int) -> bool:
        return self._value < _extract_value(other)

    def __le__(self, other: SafeInt | int) -> bool:
        return self._value <= _extract_value(other)

    def __gt__(self, other: SafeInt | int) -> bool:
        return self._value > _extract_value(other)

    def __ge__(self, other: SafeInt | int) -> bool:
        return self._value >= _extract_value(other)

    def __int__(self) -> int:
        return self._value

    def __bool__(self) -> bool:
        return self._value != 0

    # --- Named operations ---

    def ceiling_div(self, other: SafeInt | int) -> SafeInt:
        """Division rounding up.

        Raises:
            DivisionByZero: If other is zero
        """
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivisionByZero(f"Ceiling division by zero: {self._value}")
        return SafeInt(-(-self._value // other_val))

    def sqrt(self) -> SafeInt:
        """Integer square root, rounded down."""
        return SafeInt(isqrt(self._value))

    def min(self, other: SafeInt | int) -> SafeInt:
        """Return the smaller of self and other."""
        return SafeInt(min(self._value, _extract_value(other)))

    def to_uint256(self) -> int:
        """Convert to int, validating the uint256 upper bound.

        Raises:
            Uint256Overflow: If value exceeds 2**256 - 1
        """
        if self._value > UINT256_MAX:
            raise Uint256Overflow(f"Value exceeds uint256 max: {self._value}")
        return self._value


def _extract_value(x: SafeInt | int) -> int:
    if isinstance(x, SafeInt):
        return x._value
    return x


def require_uint256(value: int, name: str = "value") -> int:
    """Validate that a raw int fits in uint256 and return it.

    Raises:
        TypeError: If value is not an int
        Uint256Overflow: If value is negative or above 2**256 - 1
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be int, got {type(value).__name__}")
    if value < 0 or value > UINT256_MAX:
        raise Uint256Overflow(f"{name} out of uint256 range: {value}")
    return value


# Convenience alias for concise code
S = SafeInt
