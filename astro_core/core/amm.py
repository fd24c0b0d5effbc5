"""
Constant Product Market Maker (CPMM) math.

Pure functions over caller-supplied reserves. Nothing here persists state: the
caller commits the returned reserves only after checking the K invariant.

Rounding (consensus-critical):
- the swap fee is taken from the *input* and rounds UP:
      fee = ceil(amount_in * fee_bps / 10_000)
- the output paid to the trader rounds DOWN:
      amount_out = floor(reserve_out * net_in / (reserve_in + net_in))
- the exact-out inverse rounds the required input UP at both steps.

With these directions, x' * y' >= x * y holds after integer truncation for
every swap, which is what ``verify_k_invariant`` checks.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from ..state.reserves import Amount, ReserveState
from .bps import BPS_DENOMINATOR, apply_bps_round_up, validate_bps
from .errors import DivisionByZeroError, InsufficientBalanceError, InvalidAmountError, InvalidBpsError
from .safe_math import (
    PRECISION,
    mul_div_down,
    mul_div_up,
    require_amount,
    safe_add,
    safe_mul,
    safe_sub,
)


def _require_positive(name: str, value: int) -> None:
    require_amount(name, value)
    if value <= 0:
        raise InvalidAmountError(f"{name} must be positive: {value}")


# -- Swap formulas -----------------------------------------------------------

def get_amount_out(amount_in: Amount, reserve_in: Amount, reserve_out: Amount, fee_bps: int) -> Amount:
    """
    Output of an exact-in swap.

        fee     = ceil(amount_in * fee_bps / 10_000)
        net_in  = amount_in - fee
        out     = floor(reserve_out * net_in / (reserve_in + net_in))

    May return 0 for dust trades; callers enforce their own minimum output.
    """
    _require_positive("amount_in", amount_in)
    _require_positive("reserve_in", reserve_in)
    _require_positive("reserve_out", reserve_out)
    validate_bps(fee_bps, name="fee_bps")

    fee = apply_bps_round_up(amount_in, fee_bps)
    net_in = safe_sub(amount_in, fee)
    if net_in == 0:
        return 0
    return mul_div_down(reserve_out, net_in, safe_add(reserve_in, net_in))


def get_amount_in(amount_out: Amount, reserve_in: Amount, reserve_out: Amount, fee_bps: int) -> Amount:
    """
    Minimum gross input that yields at least ``amount_out``.

        net_in    = ceil(reserve_in * amount_out / (reserve_out - amount_out))
        amount_in = ceil(net_in * 10_000 / (10_000 - fee_bps))

    Since the exact-in fee is ``ceil(amount_in * fee_bps / 10_000)``, the net input
    actually credited is ``floor(amount_in * (10_000 - fee_bps) / 10_000) >= net_in``.
    """
    _require_positive("amount_out", amount_out)
    _require_positive("reserve_in", reserve_in)
    _require_positive("reserve_out", reserve_out)
    validate_bps(fee_bps, name="fee_bps")
    if fee_bps == BPS_DENOMINATOR:
        raise InvalidBpsError("cannot compute input with a 100% fee")
    if amount_out >= reserve_out:
        raise InsufficientBalanceError(
            f"cannot drain full reserve: amount_out ({amount_out}) >= reserve_out ({reserve_out})"
        )

    net_in = mul_div_up(reserve_in, amount_out, safe_sub(reserve_out, amount_out))
    return mul_div_up(net_in, BPS_DENOMINATOR, BPS_DENOMINATOR - fee_bps)


def quote(amount_a: Amount, reserve_a: Amount, reserve_b: Amount) -> Amount:
    """Proportional value of ``amount_a`` in asset b: floor(amount_a * reserve_b / reserve_a)."""
    _require_positive("amount_a", amount_a)
    require_amount("reserve_a", reserve_a, allow_negative=False)
    require_amount("reserve_b", reserve_b, allow_negative=False)
    return mul_div_down(amount_a, reserve_b, reserve_a)


def sqrt(value: int) -> int:
    """Floor integer square root (exact for perfect squares)."""
    require_amount("value", value, allow_negative=False)
    return math.isqrt(value)


# -- Reserve updates ---------------------------------------------------------

def update_reserves_add(
    reserve_0: Amount, reserve_1: Amount, amount_0: Amount, amount_1: Amount
) -> tuple[Amount, Amount]:
    require_amount("amount_0", amount_0, allow_negative=False)
    require_amount("amount_1", amount_1, allow_negative=False)
    return safe_add(reserve_0, amount_0), safe_add(reserve_1, amount_1)


def update_reserves_sub(
    reserve_0: Amount, reserve_1: Amount, amount_0: Amount, amount_1: Amount
) -> tuple[Amount, Amount]:
    require_amount("amount_0", amount_0, allow_negative=False)
    require_amount("amount_1", amount_1, allow_negative=False)
    return safe_sub(reserve_0, amount_0), safe_sub(reserve_1, amount_1)


def update_reserves_swap(
    reserve_0: Amount,
    reserve_1: Amount,
    amount_in: Amount,
    amount_out: Amount,
    zero_for_one: bool,
) -> tuple[Amount, Amount]:
    """
    Apply a swap. ``zero_for_one=True`` means reserve_0 receives the input and
    reserve_1 pays the output; ``False`` is the reverse direction.
    """
    require_amount("amount_in", amount_in, allow_negative=False)
    require_amount("amount_out", amount_out, allow_negative=False)
    if zero_for_one:
        return safe_add(reserve_0, amount_in), safe_sub(reserve_1, amount_out)
    return safe_sub(reserve_0, amount_out), safe_add(reserve_1, amount_in)


# -- Invariant ---------------------------------------------------------------

def calculate_k(reserve_0: Amount, reserve_1: Amount) -> int:
    return safe_mul(reserve_0, reserve_1)


def verify_k_invariant(new_r0: Amount, new_r1: Amount, old_r0: Amount, old_r1: Amount) -> bool:
    """True iff the constant product did not decrease."""
    return calculate_k(new_r0, new_r1) >= calculate_k(old_r0, old_r1)


# -- Price helpers -----------------------------------------------------------

def calculate_price(reserve_base: Amount, reserve_quote: Amount) -> int:
    """Spot price of base in quote units, scaled by PRECISION."""
    require_amount("reserve_base", reserve_base, allow_negative=False)
    require_amount("reserve_quote", reserve_quote, allow_negative=False)
    if reserve_base == 0:
        raise DivisionByZeroError("reserve_base is zero")
    return mul_div_down(reserve_quote, PRECISION, reserve_base)


def calculate_slippage_bps(price_before: int, price_after: int) -> int:
    """Absolute price move in bps, rounded down. A zero starting price reports 0."""
    require_amount("price_before", price_before, allow_negative=False)
    require_amount("price_after", price_after, allow_negative=False)
    if price_before == 0:
        return 0
    return mul_div_down(abs(price_after - price_before), BPS_DENOMINATOR, price_before)


# -- Swap execution over a ReserveState -------------------------------------

@dataclass(frozen=True)
class SwapResult:
    amount_in: Amount
    amount_out: Amount
    fee: Amount
    reserves: ReserveState
    k_before: int
    k_after: int

    @property
    def k_ok(self) -> bool:
        return self.k_after >= self.k_before


def _finish_swap(
    reserves: ReserveState, amount_in: Amount, amount_out: Amount, fee_bps: int, zero_for_one: bool
) -> SwapResult:
    new_r0, new_r1 = update_reserves_swap(
        reserves.reserve_0, reserves.reserve_1, amount_in, amount_out, zero_for_one
    )
    return SwapResult(
        amount_in=amount_in,
        amount_out=amount_out,
        fee=apply_bps_round_up(amount_in, fee_bps),
        reserves=ReserveState(new_r0, new_r1),
        k_before=calculate_k(reserves.reserve_0, reserves.reserve_1),
        k_after=calculate_k(new_r0, new_r1),
    )


def swap_exact_in(
    reserves: ReserveState, amount_in: Amount, fee_bps: int, zero_for_one: bool = True
) -> SwapResult:
    """
    Quote and apply an exact-in swap. The whole ``amount_in`` (fee included)
    stays in the pool. The caller must check ``result.k_ok`` before committing.
    """
    reserve_in, reserve_out = reserves.oriented(zero_for_one)
    amount_out = get_amount_out(amount_in, reserve_in, reserve_out, fee_bps)
    return _finish_swap(reserves, amount_in, amount_out, fee_bps, zero_for_one)


def swap_exact_out(
    reserves: ReserveState, amount_out: Amount, fee_bps: int, zero_for_one: bool = True
) -> SwapResult:
    """
    Quote and apply an exact-out swap. Reserves move by the *requested*
    ``amount_out`` even if the paid input would buy slightly more.
    """
    reserve_in, reserve_out = reserves.oriented(zero_for_one)
    amount_in = get_amount_in(amount_out, reserve_in, reserve_out, fee_bps)
    return _finish_swap(reserves, amount_in, amount_out, fee_bps, zero_for_one)
