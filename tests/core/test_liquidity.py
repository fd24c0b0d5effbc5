# [TESTER] v1

from __future__ import annotations

import pytest

from astro_core.core.errors import BelowMinimumError, InsufficientBalanceError, InvalidAmountError
from astro_core.core.liquidity import (
    MIN_LIQUIDITY,
    add_liquidity,
    compute_lp_burn,
    compute_lp_mint,
    optimal_deposit,
    remove_liquidity,
)
from astro_core.core.safe_math import I128_MAX
from astro_core.state.reserves import ReserveState


def test_first_mint_with_product_wider_than_amount_domain() -> None:
    amount_0, amount_1 = 10**30, 7 * 10**9 + 1
    assert amount_0 * amount_1 > I128_MAX

    lp = compute_lp_mint(reserve_0=0, reserve_1=0, amount_0=amount_0, amount_1=amount_1, lp_supply=0)

    root = lp + MIN_LIQUIDITY
    assert root * root <= amount_0 * amount_1 < (root + 1) * (root + 1)


def test_first_mint_exact_geometric_mean() -> None:
    # 9 * 2**130 = (3 * 2**65) ** 2
    lp = compute_lp_mint(0, 0, 3 << 90, 3 << 40, 0)
    assert lp == (3 << 65) - MIN_LIQUIDITY


def test_initial_mint_must_cover_lock() -> None:
    with pytest.raises(BelowMinimumError):
        compute_lp_mint(0, 0, 1000, 1000, 0)
    assert compute_lp_mint(0, 0, 1001, 1001, 0) == 1


def test_subsequent_mint_takes_min_share() -> None:
    assert compute_lp_mint(1000, 2000, 100, 300, 1000) == 100
    with pytest.raises(BelowMinimumError):
        compute_lp_mint(10**9, 10**9, 1, 1, 1000)
    with pytest.raises(InvalidAmountError):
        compute_lp_mint(1000, 1000, 0, 10, 1000)


def test_optimal_deposit() -> None:
    d = optimal_deposit(100, 300, 1000, 2000)
    assert (d.amount_0_used, d.amount_1_used, d.amount_0_refund, d.amount_1_refund) == (100, 200, 0, 100)

    d = optimal_deposit(100, 150, 1000, 2000)
    assert (d.amount_0_used, d.amount_1_used, d.amount_0_refund, d.amount_1_refund) == (75, 150, 25, 0)

    d = optimal_deposit(7, 9, 0, 0)
    assert (d.amount_0_used, d.amount_1_used) == (7, 9)


def test_compute_lp_burn_rounds_down() -> None:
    assert compute_lp_burn(1, 1000, 999, 3) == (333, 333)
    with pytest.raises(InsufficientBalanceError):
        compute_lp_burn(4, 1000, 1000, 3)


def test_add_then_remove_liquidity() -> None:
    minted = add_liquidity(ReserveState(0, 0), 0, 10**6, 10**6)
    assert minted.lp_minted == 10**6 - MIN_LIQUIDITY
    assert minted.lp_supply == 10**6
    assert minted.reserves == ReserveState(10**6, 10**6)

    burned = remove_liquidity(minted.reserves, minted.lp_supply, minted.lp_minted)
    assert (burned.amount_0_out, burned.amount_1_out) == (10**6 - MIN_LIQUIDITY, 10**6 - MIN_LIQUIDITY)
    # The locked liquidity stays behind.
    assert burned.reserves == ReserveState(MIN_LIQUIDITY, MIN_LIQUIDITY)
    assert burned.lp_supply == MIN_LIQUIDITY


def test_second_deposit_is_proportional() -> None:
    first = add_liquidity(ReserveState(0, 0), 0, 10**6, 4 * 10**6)
    second = add_liquidity(first.reserves, first.lp_supply, 1000, 10_000)
    assert (second.amount_0_used, second.amount_1_used) == (1000, 4000)
    assert second.lp_minted == 1000 * first.lp_supply // 10**6
