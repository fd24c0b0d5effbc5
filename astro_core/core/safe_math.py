"""Checked integer arithmetic over the signed 128-bit Amount domain.

Every function is stateless and operates on plain Python ints. Python ints are
arbitrary precision, so each result is computed exactly first and then checked
against the domain bounds; a value outside the domain is never truncated or
wrapped, it raises.

Rounding is explicit:
- ``safe_div`` truncates toward zero (not Python's floor).
- ``mul_div_down`` / ``mul_div_up`` floor / ceil a non-negative quotient.
"""

from __future__ import annotations

from .errors import (
    ArithmeticOverflowError,
    ArithmeticUnderflowError,
    DivisionByZeroError,
    InvalidAmountError,
)

# Domain constants
I128_MIN: int = -(1 << 127)
I128_MAX: int = (1 << 127) - 1
PRECISION: int = 1_000_000_000_000_000_000  # 1e18
ONE_TOKEN: int = 10_000_000  # 7 decimals


# -- Guards ------------------------------------------------------------------

def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def require_amount(name: str, value: int, *, allow_negative: bool = True) -> int:
    """Reject non-ints and values outside the Amount domain."""
    _require_int(name, value)
    if not (I128_MIN <= value <= I128_MAX):
        raise InvalidAmountError(f"{name} outside the 128-bit amount domain: {value}")
    if not allow_negative and value < 0:
        raise InvalidAmountError(f"{name} must be non-negative: {value}")
    return value


def _checked(value: int) -> int:
    if value > I128_MAX:
        raise ArithmeticOverflowError(f"result exceeds amount domain: {value}")
    if value < I128_MIN:
        raise ArithmeticUnderflowError(f"result below amount domain: {value}")
    return value


# -- Basic operations --------------------------------------------------------

def safe_add(a: int, b: int) -> int:
    require_amount("a", a)
    require_amount("b", b)
    return _checked(a + b)


def safe_sub(a: int, b: int) -> int:
    """``a - b``; a negative result is an underflow, not a signed delta."""
    require_amount("a", a)
    require_amount("b", b)
    result = a - b
    if result < 0:
        raise ArithmeticUnderflowError(f"subtraction underflow: {a} - {b}")
    return _checked(result)


def safe_mul(a: int, b: int) -> int:
    require_amount("a", a)
    require_amount("b", b)
    result = a * b
    if not (I128_MIN <= result <= I128_MAX):
        raise ArithmeticOverflowError(f"multiplication overflow: {a} * {b}")
    return result


def safe_div(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    require_amount("a", a)
    require_amount("b", b)
    if b == 0:
        raise DivisionByZeroError(f"division by zero: {a} / 0")
    q = abs(a) // abs(b)
    if (a < 0) != (b < 0):
        q = -q
    if q > I128_MAX:
        # Only reachable for I128_MIN / -1.
        raise ArithmeticOverflowError(f"division overflow: {a} / {b}")
    return q


# -- Multiply-then-divide ----------------------------------------------------

def _mul_div_operands(a: int, b: int, c: int) -> tuple[int, int]:
    require_amount("a", a, allow_negative=False)
    require_amount("b", b, allow_negative=False)
    require_amount("c", c, allow_negative=False)
    if c == 0:
        raise DivisionByZeroError(f"mul_div by zero: ({a} * {b}) / 0")
    # The product may exceed the domain; only the quotient has to fit.
    return divmod(a * b, c)


def mul_div_down(a: int, b: int, c: int) -> int:
    """``floor(a * b / c)`` without intermediate (phantom) overflow."""
    q, _ = _mul_div_operands(a, b, c)
    return _checked(q)


def mul_div_up(a: int, b: int, c: int) -> int:
    """``ceil(a * b / c)`` without intermediate (phantom) overflow."""
    q, r = _mul_div_operands(a, b, c)
    if r:
        q += 1
    return _checked(q)
