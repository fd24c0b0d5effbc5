# [TESTER] v1

from __future__ import annotations

import pytest

from astro_core.core.errors import (
    BelowMinimumError,
    InsufficientBalanceError,
    InvalidAmountError,
    InvalidTimestampError,
    TokenNotFoundError,
)
from astro_core.core.rewards import (
    accrue,
    add_reward_token,
    claim,
    compound,
    estimate_apr_bps,
    notify_reward_amount,
    pending_rewards,
    set_reward_rate,
    stake,
    unstake,
)
from astro_core.core.safe_math import PRECISION, mul_div_down
from astro_core.state.staking import RewardPool, StakingConfig, StakingPool, UserStake

STAKE_TOKEN = "ASTRO"
USDC = "USDC"
XLM = "XLM"


def _pool(**rates: int) -> StakingPool:
    pool = StakingPool(staking_token=STAKE_TOKEN)
    for token, rate in rates.items():
        pool = add_reward_token(pool, token, now=0, reward_rate=rate)
    return pool


# ---------------------------------------------------------------------------
# accrue
# ---------------------------------------------------------------------------

class TestAccrue:
    def test_growth_matches_formula(self):
        pool = RewardPool(reward_rate=7)
        out = accrue(pool, total_staked=3 * 10**7, now=100)
        assert out.reward_per_token_stored == mul_div_down(7 * 100, PRECISION, 3 * 10**7)
        assert out.last_update_time == 100

    def test_same_timestamp_is_noop(self):
        once = accrue(RewardPool(reward_rate=5), 1000, 50)
        assert accrue(once, 1000, 50) == once

    def test_zero_stake_queues_emission(self):
        out = accrue(RewardPool(reward_rate=10), 0, 100)
        assert out.reward_per_token_stored == 0
        assert out.queued_rewards == 1000
        assert out.total_rewards == 1000

    def test_queued_rewards_released_with_stake(self):
        pool = RewardPool(reward_rate=0, queued_rewards=1000, last_update_time=100)
        out = accrue(pool, 500, 100)
        assert out.reward_per_token_stored == 2 * PRECISION
        assert out.queued_rewards == 0

    def test_clock_cannot_go_backwards(self):
        with pytest.raises(InvalidTimestampError):
            accrue(RewardPool(last_update_time=10), 1, 5)


# ---------------------------------------------------------------------------
# stake / unstake / claim
# ---------------------------------------------------------------------------

class TestSingleStaker:
    def test_claim_matches_accumulator_growth(self):
        rate, elapsed, staked = 7, 100, 3 * 10**7
        pool, alice = stake(_pool(USDC=rate), UserStake(), staked, now=0)

        pool, alice, claimed = claim(pool, alice, now=elapsed)

        growth = mul_div_down(rate * elapsed, PRECISION, staked)
        assert pool.reward_pools[USDC].reward_per_token_stored == growth
        assert claimed == {USDC: mul_div_down(staked, growth, PRECISION)}
        assert alice.checkpoint(USDC).accrued_rewards == 0
        assert alice.last_claim_time == elapsed

    def test_second_claim_at_same_time_is_empty(self):
        pool, alice = stake(_pool(USDC=10), UserStake(), 1000, now=0)
        pool, alice, first = claim(pool, alice, now=10)
        pool, alice, second = claim(pool, alice, now=10)
        assert first == {USDC: 100}
        assert second == {USDC: 0}

    def test_unstake_keeps_accrued_rewards(self):
        pool, alice = stake(_pool(USDC=10), UserStake(), 1000, now=0)
        pool, alice = unstake(pool, alice, 1000, now=10)
        assert pool.total_staked == 0
        assert alice.staked_amount == 0
        assert alice.checkpoint(USDC).accrued_rewards == 100
        assert not alice.is_empty

        pool, alice, claimed = claim(pool, alice, now=20)
        assert claimed == {USDC: 100}
        assert alice.is_empty

    def test_rewards_emitted_before_first_stake_go_to_first_staker(self):
        pool, alice = stake(_pool(USDC=10), UserStake(), 500, now=100)
        assert pending_rewards(pool, alice, now=100) == {USDC: 1000}

    def test_pending_rewards_does_not_mutate(self):
        pool, alice = stake(_pool(USDC=10), UserStake(), 1000, now=0)
        before = pool
        assert pending_rewards(pool, alice, now=30) == {USDC: 300}
        assert pool == before


class TestGuards:
    def test_stake_must_be_positive(self):
        with pytest.raises(InvalidAmountError):
            stake(_pool(), UserStake(), 0, now=0)

    def test_stake_minimum(self):
        config = StakingConfig(min_stake_amount=100)
        with pytest.raises(BelowMinimumError):
            stake(_pool(), UserStake(), 99, now=0, config=config)

    def test_stake_cap(self):
        config = StakingConfig(max_stake_per_user=1000)
        pool, alice = stake(_pool(), UserStake(), 600, now=0, config=config)
        with pytest.raises(InvalidAmountError):
            stake(pool, alice, 401, now=1, config=config)

    def test_unstake_more_than_staked(self):
        pool, alice = stake(_pool(), UserStake(), 100, now=0)
        with pytest.raises(InsufficientBalanceError):
            unstake(pool, alice, 101, now=1)

    def test_claim_unknown_token(self):
        pool, alice = stake(_pool(USDC=1), UserStake(), 100, now=0)
        with pytest.raises(TokenNotFoundError):
            claim(pool, alice, now=1, tokens=["DOGE"])

    def test_claim_rejects_bare_token_string(self):
        pool, alice = stake(_pool(USDC=1), UserStake(), 100, now=0)
        with pytest.raises(TypeError):
            claim(pool, alice, now=1, tokens="USDC")
        _, _, claimed = claim(pool, alice, now=1, tokens=["USDC"])
        assert claimed == {USDC: 1}

    def test_failed_operation_leaves_inputs_untouched(self):
        pool, alice = stake(_pool(USDC=1), UserStake(), 100, now=0)
        with pytest.raises(InsufficientBalanceError):
            unstake(pool, alice, 1000, now=50)
        assert pool.reward_pools[USDC].last_update_time == 0
        assert alice.staked_amount == 100


# ---------------------------------------------------------------------------
# Multiple stakers and tokens
# ---------------------------------------------------------------------------

def test_lump_sum_split_pro_rata() -> None:
    pool = _pool()
    pool, user1 = stake(pool, UserStake(), 75_000_000_000, now=0)
    pool, user2 = stake(pool, UserStake(), 25_000_000_000, now=0)

    pool = notify_reward_amount(pool, USDC, 100_000_000_000, now=1)

    assert pending_rewards(pool, user1, now=1) == {USDC: 75_000_000_000}
    assert pending_rewards(pool, user2, now=1) == {USDC: 25_000_000_000}


def test_lump_sum_with_no_stakers_is_queued() -> None:
    pool = notify_reward_amount(_pool(), USDC, 5000, now=0)
    assert pool.reward_pools[USDC].queued_rewards == 5000

    pool, alice = stake(pool, UserStake(), 10, now=1)
    assert pending_rewards(pool, alice, now=1) == {USDC: 5000}


def test_equal_stakers_get_equal_rewards_across_token_activity() -> None:
    pool = _pool(USDC=10, XLM=5)
    pool, alice = stake(pool, UserStake(), 1000, now=0)
    pool, bob = stake(pool, UserStake(), 1000, now=0)

    # Activity on the XLM ledger only.
    pool, bob, _ = claim(pool, bob, now=50, tokens=[XLM])
    pool = notify_reward_amount(pool, XLM, 12_345, now=60)
    pool = set_reward_rate(pool, XLM, 50, now=70)

    pool, alice, alice_claim = claim(pool, alice, now=100, tokens=[USDC])
    pool, bob, bob_claim = claim(pool, bob, now=100, tokens=[USDC])
    assert alice_claim == bob_claim == {USDC: 500}


def test_token_added_later_pays_only_from_registration() -> None:
    pool, alice = stake(_pool(), UserStake(), 1000, now=0)
    pool = add_reward_token(pool, USDC, now=100, reward_rate=10)
    assert pending_rewards(pool, alice, now=200) == {USDC: 1000}


def test_add_reward_token_is_idempotent() -> None:
    pool = _pool(USDC=10)
    assert add_reward_token(pool, USDC, now=5, reward_rate=99) is pool


def test_set_reward_rate_accrues_old_rate_first() -> None:
    pool, alice = stake(_pool(USDC=10), UserStake(), 1000, now=0)
    pool = set_reward_rate(pool, USDC, 20, now=10)
    assert pending_rewards(pool, alice, now=20) == {USDC: 10 * 10 + 20 * 10}


def test_late_joiner_does_not_share_earlier_rewards() -> None:
    pool, alice = stake(_pool(USDC=10), UserStake(), 1000, now=0)
    pool, bob = stake(pool, UserStake(), 1000, now=100)
    assert pending_rewards(pool, alice, now=200) == {USDC: 1000 + 500}
    assert pending_rewards(pool, bob, now=200) == {USDC: 500}


# ---------------------------------------------------------------------------
# compound / apr
# ---------------------------------------------------------------------------

def test_compound_restakes_staking_token_rewards() -> None:
    pool, alice = stake(_pool(), UserStake(), 1000, now=0)
    pool = notify_reward_amount(pool, STAKE_TOKEN, 1000, now=1)
    pool = notify_reward_amount(pool, USDC, 500, now=1)

    pool, alice, claimed, compounded = compound(pool, alice, now=2)

    assert compounded == 1000
    assert claimed == {USDC: 500}
    assert alice.staked_amount == 2000
    assert pool.total_staked == 2000
    assert alice.checkpoint(STAKE_TOKEN).accrued_rewards == 0


def test_compound_without_staking_token_rewards_is_plain_claim() -> None:
    pool, alice = stake(_pool(USDC=1), UserStake(), 1000, now=0)
    pool, alice, claimed, compounded = compound(pool, alice, now=10)
    assert compounded == 0
    assert claimed == {USDC: 10}
    assert alice.staked_amount == 1000


def test_estimate_apr_bps() -> None:
    pool, _ = stake(_pool(USDC=1), UserStake(), 10_000, now=0)
    assert estimate_apr_bps(pool, USDC, period=1000) == 1000
    assert estimate_apr_bps(_pool(USDC=1), USDC) == 0


def test_estimate_apr_bps_counts_credited_rewards() -> None:
    pool, _ = stake(_pool(USDC=1), UserStake(), 10_000, now=0)
    pool = notify_reward_amount(pool, USDC, 500, now=100)
    # 100 accrued + 500 injected, then 1000 projected
    assert pool.reward_pools[USDC].total_rewards == 600
    assert estimate_apr_bps(pool, USDC, period=1000) == 1600
