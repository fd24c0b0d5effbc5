"""
Liquidity sizing for constant-product pools (Uniswap-v2 style).

First deposit:
    lp = floor(sqrt(amount_0 * amount_1)) - MIN_LIQUIDITY
    (MIN_LIQUIDITY is minted to nobody and stays locked forever)

Subsequent deposits:
    lp = min(floor(amount_0 * lp_supply / reserve_0), floor(amount_1 * lp_supply / reserve_1))

Withdrawals:
    amount_i = floor(lp_amount * reserve_i / lp_supply)

Every share handed to a counterparty rounds down.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from ..state.reserves import Amount, ReserveState
from .amm import quote, update_reserves_add, update_reserves_sub
from .errors import BelowMinimumError, InsufficientBalanceError, InvalidAmountError
from .safe_math import mul_div_down, require_amount, safe_add, safe_sub

# LP minted to nobody on the first deposit; never burnable
MIN_LIQUIDITY = 1000


@dataclass(frozen=True)
class DepositAmounts:
    amount_0_used: Amount
    amount_1_used: Amount
    amount_0_refund: Amount
    amount_1_refund: Amount


@dataclass(frozen=True)
class MintResult:
    lp_minted: Amount
    amount_0_used: Amount
    amount_1_used: Amount
    reserves: ReserveState
    lp_supply: Amount


@dataclass(frozen=True)
class BurnResult:
    amount_0_out: Amount
    amount_1_out: Amount
    reserves: ReserveState
    lp_supply: Amount


def optimal_deposit(
    amount_0_desired: Amount,
    amount_1_desired: Amount,
    reserve_0: Amount,
    reserve_1: Amount,
) -> DepositAmounts:
    """
    Ratio-preserving deposit amounts and refunds.

    An empty pool takes everything as offered.
    """
    for name, v in (("amount_0_desired", amount_0_desired), ("amount_1_desired", amount_1_desired)):
        require_amount(name, v)
        if v <= 0:
            raise InvalidAmountError(f"{name} must be positive: {v}")
    require_amount("reserve_0", reserve_0, allow_negative=False)
    require_amount("reserve_1", reserve_1, allow_negative=False)

    if reserve_0 == 0 or reserve_1 == 0:
        return DepositAmounts(amount_0_desired, amount_1_desired, 0, 0)

    amount_1_optimal = quote(amount_0_desired, reserve_0, reserve_1)
    if amount_1_optimal <= amount_1_desired:
        used_0, used_1 = amount_0_desired, amount_1_optimal
    else:
        used_0, used_1 = quote(amount_1_desired, reserve_1, reserve_0), amount_1_desired

    if used_0 <= 0 or used_1 <= 0:
        raise BelowMinimumError(f"deposit too small for pool ratio: ({used_0}, {used_1})")

    return DepositAmounts(
        amount_0_used=used_0,
        amount_1_used=used_1,
        amount_0_refund=safe_sub(amount_0_desired, used_0),
        amount_1_refund=safe_sub(amount_1_desired, used_1),
    )


def compute_lp_mint(
    reserve_0: Amount,
    reserve_1: Amount,
    amount_0: Amount,
    amount_1: Amount,
    lp_supply: Amount,
) -> Amount:
    """
    LP tokens to mint for a deposit of (amount_0, amount_1).

    Raises:
        InvalidAmountError: non-positive deposit or negative state
        BelowMinimumError: deposit mints nothing (or cannot cover MIN_LIQUIDITY)
    """
    for name, v in (("reserve_0", reserve_0), ("reserve_1", reserve_1), ("lp_supply", lp_supply)):
        require_amount(name, v, allow_negative=False)
    for name, v in (("amount_0", amount_0), ("amount_1", amount_1)):
        require_amount(name, v)
        if v <= 0:
            raise InvalidAmountError(f"{name} must be positive: {v}")

    if lp_supply == 0:
        # Geometric mean; the product itself may exceed the amount domain.
        root = math.isqrt(amount_0 * amount_1)
        if root <= MIN_LIQUIDITY:
            raise BelowMinimumError(
                f"insufficient initial liquidity: sqrt(amount_0*amount_1)={root} <= {MIN_LIQUIDITY}"
            )
        return root - MIN_LIQUIDITY

    if reserve_0 == 0 or reserve_1 == 0:
        raise InvalidAmountError("cannot add liquidity to an empty pool with outstanding LP supply")

    lp = min(
        mul_div_down(amount_0, lp_supply, reserve_0),
        mul_div_down(amount_1, lp_supply, reserve_1),
    )
    if lp <= 0:
        raise BelowMinimumError(f"deposit too small, mints {lp} LP")
    return lp


def compute_lp_burn(
    lp_amount: Amount,
    reserve_0: Amount,
    reserve_1: Amount,
    lp_supply: Amount,
) -> tuple[Amount, Amount]:
    """Underlying amounts returned for burning ``lp_amount`` (floor rounding)."""
    require_amount("lp_amount", lp_amount)
    if lp_amount <= 0:
        raise InvalidAmountError(f"lp_amount must be positive: {lp_amount}")
    for name, v in (("reserve_0", reserve_0), ("reserve_1", reserve_1), ("lp_supply", lp_supply)):
        require_amount(name, v, allow_negative=False)
    if lp_amount > lp_supply:
        raise InsufficientBalanceError(f"cannot burn more LP than supply: {lp_amount} > {lp_supply}")

    return (
        mul_div_down(lp_amount, reserve_0, lp_supply),
        mul_div_down(lp_amount, reserve_1, lp_supply),
    )


def add_liquidity(
    reserves: ReserveState,
    lp_supply: Amount,
    amount_0_desired: Amount,
    amount_1_desired: Amount,
) -> MintResult:
    """Size a deposit, mint LP and return the post-deposit reserves and supply."""
    deposit = optimal_deposit(amount_0_desired, amount_1_desired, reserves.reserve_0, reserves.reserve_1)
    minted = compute_lp_mint(
        reserves.reserve_0,
        reserves.reserve_1,
        deposit.amount_0_used,
        deposit.amount_1_used,
        lp_supply,
    )
    new_r0, new_r1 = update_reserves_add(
        reserves.reserve_0, reserves.reserve_1, deposit.amount_0_used, deposit.amount_1_used
    )
    # The first mint also creates the locked MIN_LIQUIDITY.
    new_supply = safe_add(lp_supply, minted if lp_supply else minted + MIN_LIQUIDITY)
    return MintResult(
        lp_minted=minted,
        amount_0_used=deposit.amount_0_used,
        amount_1_used=deposit.amount_1_used,
        reserves=ReserveState(new_r0, new_r1),
        lp_supply=new_supply,
    )


def remove_liquidity(reserves: ReserveState, lp_supply: Amount, lp_amount: Amount) -> BurnResult:
    amount_0_out, amount_1_out = compute_lp_burn(lp_amount, reserves.reserve_0, reserves.reserve_1, lp_supply)
    new_r0, new_r1 = update_reserves_sub(reserves.reserve_0, reserves.reserve_1, amount_0_out, amount_1_out)
    return BurnResult(
        amount_0_out=amount_0_out,
        amount_1_out=amount_1_out,
        reserves=ReserveState(new_r0, new_r1),
        lp_supply=safe_sub(lp_supply, lp_amount),
    )
