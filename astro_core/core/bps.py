"""
Basis-point arithmetic (1 bps = 1/10_000).

Rounding policy:
- fee-style extraction rounds UP (``apply_bps_round_up``), so the protocol never
  receives less than its entitled share;
- amounts paid out to a counterparty round DOWN (``apply_bps``), so pooled
  liquidity never leaks dust.
"""

from __future__ import annotations

from .errors import InvalidBpsError
from .safe_math import _require_int, mul_div_down, mul_div_up, require_amount, safe_sub


BPS_DENOMINATOR = 10_000


def validate_bps(bps: int, name: str = "bps") -> int:
    _require_int(name, bps)
    if not (0 <= bps <= BPS_DENOMINATOR):
        raise InvalidBpsError(f"{name} must be in [0, {BPS_DENOMINATOR}]: {bps}")
    return bps


def validate_split(*parts: int) -> None:
    """Require a set of bps fields to describe exactly 100%."""
    for i, v in enumerate(parts):
        validate_bps(v, name=f"parts[{i}]")
    total = sum(parts)
    if total != BPS_DENOMINATOR:
        raise InvalidBpsError(f"bps must sum to {BPS_DENOMINATOR}, got {total}")


def apply_bps(amount: int, bps: int) -> int:
    """
    ``floor(amount * bps / 10_000)``.

    Example: apply_bps(1000, 500) == 50 (5% of 1000).
    """
    require_amount("amount", amount, allow_negative=False)
    validate_bps(bps)
    return mul_div_down(amount, bps, BPS_DENOMINATOR)


def apply_bps_round_up(amount: int, bps: int) -> int:
    """
    ``ceil(amount * bps / 10_000)``; at least 1 whenever ``amount * bps > 0``.

    Reserved for protocol fee extraction.
    """
    require_amount("amount", amount, allow_negative=False)
    validate_bps(bps)
    return mul_div_up(amount, bps, BPS_DENOMINATOR)


def calculate_bps(part: int, total: int) -> int:
    """
    Ratio of ``part`` to ``total`` in basis points, rounded down.

    Example: calculate_bps(50, 1000) == 500.
    """
    require_amount("part", part, allow_negative=False)
    require_amount("total", total, allow_negative=False)
    bps = mul_div_down(part, BPS_DENOMINATOR, total)
    if bps > BPS_DENOMINATOR:
        raise InvalidBpsError(f"part exceeds total: {part} > {total}")
    return bps


def sub_bps(amount: int, bps: int) -> int:
    """``amount`` minus ``apply_bps(amount, bps)``; sub_bps(1000, 500) == 950."""
    return safe_sub(amount, apply_bps(amount, bps))
