"""
Multi-token reward-per-token staking ledger.

A pure state machine in the style of the functional core: every operation takes
immutable records (``StakingPool``, ``UserStake``) plus the caller's clock and
returns new records, or raises. Nothing is mutated, so a failed operation
leaves the caller's state exactly as it was.

Per reward token the accumulator grows as

    reward_per_token_stored += floor(released * PRECISION / total_staked)

where ``released`` is ``elapsed * reward_rate`` plus any rewards queued while
nothing was staked. A user's share is settled per token:

    pending = floor(staked_amount * (reward_per_token_stored - paid) / PRECISION)

``accrue`` always runs before any checkpoint is read or written, so the
accumulator is monotonically non-decreasing. This module never transfers
tokens; ``claim`` / ``compound`` return the amounts the caller must pay out.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, Optional

from ..state.reserves import Amount, TokenId
from ..state.staking import RewardCheckpoint, RewardPool, StakingConfig, StakingPool, UserStake
from .bps import BPS_DENOMINATOR
from .errors import (
    BelowMinimumError,
    InsufficientBalanceError,
    InvalidAmountError,
    InvalidTimestampError,
    TokenNotFoundError,
)
from .safe_math import PRECISION, mul_div_down, require_amount, safe_add, safe_mul, safe_sub

log = logging.getLogger(__name__)

SECONDS_PER_YEAR = 365 * 24 * 60 * 60


def _require_time(now: int) -> None:
    if not isinstance(now, int) or isinstance(now, bool):
        raise TypeError("now must be an int")
    if now < 0:
        raise InvalidTimestampError(f"now must be non-negative: {now}")


def _require_positive(name: str, value: int) -> None:
    require_amount(name, value)
    if value <= 0:
        raise InvalidAmountError(f"{name} must be positive: {value}")


# -- Per-token kernel --------------------------------------------------------

def accrue(pool: RewardPool, total_staked: Amount, now: int) -> RewardPool:
    """
    Bring one reward accumulator up to ``now``.

    With nothing staked the accumulator is left alone and the emission is queued
    instead of lost. A second call at the same ``now`` is a no-op.
    """
    _require_time(now)
    require_amount("total_staked", total_staked, allow_negative=False)
    if now < pool.last_update_time:
        raise InvalidTimestampError(f"clock moved backwards: {now} < {pool.last_update_time}")

    elapsed = now - pool.last_update_time
    emitted = safe_mul(elapsed, pool.reward_rate)
    total_rewards = safe_add(pool.total_rewards, emitted)

    if total_staked == 0:
        return replace(
            pool,
            last_update_time=now,
            queued_rewards=safe_add(pool.queued_rewards, emitted),
            total_rewards=total_rewards,
        )

    released = safe_add(emitted, pool.queued_rewards)
    delta = mul_div_down(released, PRECISION, total_staked)
    return replace(
        pool,
        reward_per_token_stored=safe_add(pool.reward_per_token_stored, delta),
        last_update_time=now,
        queued_rewards=0,
        total_rewards=total_rewards,
    )


def earned(checkpoint: RewardCheckpoint, staked_amount: Amount, reward_per_token_stored: int) -> Amount:
    """Accrued plus not-yet-settled rewards for one token (read-only)."""
    growth = safe_sub(reward_per_token_stored, checkpoint.reward_per_token_paid)
    return safe_add(checkpoint.accrued_rewards, mul_div_down(staked_amount, growth, PRECISION))


def settle(checkpoint: RewardCheckpoint, staked_amount: Amount, reward_per_token_stored: int) -> RewardCheckpoint:
    """Move pending rewards into ``accrued_rewards`` and advance the checkpoint."""
    return RewardCheckpoint(
        reward_per_token_paid=reward_per_token_stored,
        accrued_rewards=earned(checkpoint, staked_amount, reward_per_token_stored),
    )


# -- Pool-wide helpers -------------------------------------------------------

def _reward_pool(pool: StakingPool, token: TokenId) -> RewardPool:
    try:
        return pool.reward_pools[token]
    except KeyError:
        raise TokenNotFoundError(f"unknown reward token: {token}") from None


def _resolve_tokens(pool: StakingPool, tokens: Optional[Iterable[TokenId]]) -> list[TokenId]:
    if tokens is None:
        return pool.reward_tokens
    if isinstance(tokens, str):
        raise TypeError(f"tokens must be an iterable of token ids, not a str: {tokens!r}")
    resolved = sorted(set(tokens))
    for token in resolved:
        _reward_pool(pool, token)
    return resolved


def _accrue_tokens(pool: StakingPool, tokens: Iterable[TokenId], now: int) -> StakingPool:
    reward_pools = dict(pool.reward_pools)
    for token in tokens:
        reward_pools[token] = accrue(reward_pools[token], pool.total_staked, now)
    return replace(pool, reward_pools=reward_pools)


def _settle_tokens(pool: StakingPool, user: UserStake, tokens: Iterable[TokenId]) -> UserStake:
    checkpoints = dict(user.checkpoints)
    for token in tokens:
        rpt = pool.reward_pools[token].reward_per_token_stored
        checkpoints[token] = settle(user.checkpoint(token), user.staked_amount, rpt)
    return replace(user, checkpoints=checkpoints)


def update(pool: StakingPool, user: UserStake, now: int) -> tuple[StakingPool, UserStake]:
    """Accrue every reward token and settle ``user`` against it."""
    tokens = pool.reward_tokens
    pool = _accrue_tokens(pool, tokens, now)
    return pool, _settle_tokens(pool, user, tokens)


# -- Reward token management -------------------------------------------------

def add_reward_token(pool: StakingPool, token: TokenId, now: int, reward_rate: int = 0) -> StakingPool:
    """Register a reward token; already registered tokens are left untouched."""
    _require_time(now)
    if not isinstance(token, str) or not token:
        raise ValueError("token must be a non-empty string")
    if token in pool.reward_pools:
        return pool
    require_amount("reward_rate", reward_rate, allow_negative=False)
    log.debug("reward token added token=%s rate=%d now=%d", token, reward_rate, now)
    return pool.with_reward_pool(token, RewardPool(last_update_time=now, reward_rate=reward_rate))


def set_reward_rate(pool: StakingPool, token: TokenId, reward_rate: int, now: int) -> StakingPool:
    """Change the emission rate; everything up to ``now`` accrues at the old rate."""
    require_amount("reward_rate", reward_rate, allow_negative=False)
    reward_pool = accrue(_reward_pool(pool, token), pool.total_staked, now)
    log.debug("reward rate token=%s %d -> %d now=%d", token, reward_pool.reward_rate, reward_rate, now)
    return pool.with_reward_pool(token, replace(reward_pool, reward_rate=reward_rate))


def notify_reward_amount(pool: StakingPool, token: TokenId, amount: Amount, now: int) -> StakingPool:
    """
    Inject a lump sum of ``token`` rewards, split pro rata over the current stake.

    Unknown tokens are registered on first injection. With nothing staked the
    amount is queued and released to the first stakers.
    """
    _require_positive("amount", amount)
    pool = add_reward_token(pool, token, now)
    reward_pool = accrue(pool.reward_pools[token], pool.total_staked, now)

    if pool.total_staked == 0:
        reward_pool = replace(reward_pool, queued_rewards=safe_add(reward_pool.queued_rewards, amount))
    else:
        delta = mul_div_down(amount, PRECISION, pool.total_staked)
        reward_pool = replace(
            reward_pool,
            reward_per_token_stored=safe_add(reward_pool.reward_per_token_stored, delta),
        )
    reward_pool = replace(reward_pool, total_rewards=safe_add(reward_pool.total_rewards, amount))

    log.debug("rewards injected token=%s amount=%d total_staked=%d", token, amount, pool.total_staked)
    return pool.with_reward_pool(token, reward_pool)


# -- Staking operations ------------------------------------------------------

def _add_stake(
    pool: StakingPool,
    user: UserStake,
    amount: Amount,
    now: int,
    config: Optional[StakingConfig],
) -> tuple[StakingPool, UserStake]:
    pool, user = update(pool, user, now)
    new_amount = safe_add(user.staked_amount, amount)
    if config is not None and config.max_stake_per_user and new_amount > config.max_stake_per_user:
        raise InvalidAmountError(
            f"stake exceeds max_stake_per_user: {new_amount} > {config.max_stake_per_user}"
        )
    user = replace(user, staked_amount=new_amount, stake_time=now)
    pool = replace(pool, total_staked=safe_add(pool.total_staked, amount))
    return pool, user


def stake(
    pool: StakingPool,
    user: UserStake,
    amount: Amount,
    now: int,
    config: Optional[StakingConfig] = None,
) -> tuple[StakingPool, UserStake]:
    """
    Add ``amount`` of the staking token to ``user``'s principal.

    Raises:
        InvalidAmountError: amount <= 0, or the user cap would be exceeded
        BelowMinimumError: amount under ``config.min_stake_amount``
    """
    _require_positive("amount", amount)
    if config is not None and amount < config.min_stake_amount:
        raise BelowMinimumError(f"stake below minimum: {amount} < {config.min_stake_amount}")

    pool, user = _add_stake(pool, user, amount, now, config)
    log.debug("stake amount=%d user_total=%d total_staked=%d", amount, user.staked_amount, pool.total_staked)
    return pool, user


def unstake(pool: StakingPool, user: UserStake, amount: Amount, now: int) -> tuple[StakingPool, UserStake]:
    """Withdraw principal. Accrued rewards stay claimable after a full exit."""
    _require_positive("amount", amount)
    if amount > user.staked_amount:
        raise InsufficientBalanceError(f"unstake exceeds stake: {amount} > {user.staked_amount}")

    pool, user = update(pool, user, now)
    user = replace(user, staked_amount=safe_sub(user.staked_amount, amount))
    pool = replace(pool, total_staked=safe_sub(pool.total_staked, amount))
    log.debug("unstake amount=%d user_total=%d total_staked=%d", amount, user.staked_amount, pool.total_staked)
    return pool, user


def claim(
    pool: StakingPool,
    user: UserStake,
    now: int,
    tokens: Optional[Iterable[TokenId]] = None,
) -> tuple[StakingPool, UserStake, dict[TokenId, Amount]]:
    """
    Settle and zero out ``user``'s accrued rewards for ``tokens`` (all when omitted).

    Returns the new records and ``{token: amount}`` for the caller to transfer.
    """
    resolved = _resolve_tokens(pool, tokens)
    pool = _accrue_tokens(pool, resolved, now)
    user = _settle_tokens(pool, user, resolved)

    claimed: dict[TokenId, Amount] = {}
    checkpoints = dict(user.checkpoints)
    for token in resolved:
        cp = checkpoints[token]
        claimed[token] = cp.accrued_rewards
        checkpoints[token] = replace(cp, accrued_rewards=0)
    user = replace(user, checkpoints=checkpoints, last_claim_time=now)

    log.debug("claim tokens=%s amounts=%s", resolved, [claimed[t] for t in resolved])
    return pool, user, claimed


def compound(
    pool: StakingPool,
    user: UserStake,
    now: int,
    config: Optional[StakingConfig] = None,
) -> tuple[StakingPool, UserStake, dict[TokenId, Amount], Amount]:
    """
    Claim everything, then re-stake the rewards paid in the staking token.

    Returns ``(pool, user, claimed, compounded)`` where ``claimed`` holds only the
    other reward tokens (to be transferred normally). The minimum stake amount
    does not apply to compounded rewards; the per-user cap does.
    """
    pool, user, claimed = claim(pool, user, now)
    compounded = claimed.pop(pool.staking_token, 0)
    if compounded > 0:
        pool, user = _add_stake(pool, user, compounded, now, config)
    log.debug("compound restaked=%d other=%s", compounded, sorted(claimed))
    return pool, user, claimed, compounded


# -- Views -------------------------------------------------------------------

def pending_rewards(pool: StakingPool, user: UserStake, now: int) -> dict[TokenId, Amount]:
    """Claimable amount per reward token as of ``now``, without changing any state."""
    tokens = pool.reward_tokens
    accrued = _accrue_tokens(pool, tokens, now)
    return {
        token: earned(
            user.checkpoint(token),
            user.staked_amount,
            accrued.reward_pools[token].reward_per_token_stored,
        )
        for token in tokens
    }


def estimate_apr_bps(pool: StakingPool, token: TokenId, period: int = SECONDS_PER_YEAR) -> int:
    """
    Rewards relative to total stake, in bps.

    Counts everything credited to ``token`` so far (lump sums and accrued
    emission, ``total_rewards``) plus the emission projected over ``period``.
    Assumes reward and staking token are valued 1:1; 0 when nothing is staked.
    """
    reward_pool = _reward_pool(pool, token)
    _require_positive("period", period)
    if pool.total_staked == 0:
        return 0
    rewards = safe_add(reward_pool.total_rewards, safe_mul(reward_pool.reward_rate, period))
    return mul_div_down(rewards, BPS_DENOMINATOR, pool.total_staked)
