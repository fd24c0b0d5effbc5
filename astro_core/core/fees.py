"""
Fee distribution (deterministic, integer-only).

Incoming protocol fees are split three ways (treasury, staking, burn) by a
``DistributionConfig`` whose shares sum to exactly 10_000 bps. Each share is
rounded down and the rounding dust goes to the treasury, so the parts always
add back up to the amount being distributed.

The staking share is credited into the reward ledger in the same step; the
treasury and burn shares are returned for the caller to transfer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from ..state.distribution import FeeDistributorState
from ..state.reserves import Amount, TokenId
from ..state.staking import StakingPool
from .bps import apply_bps, validate_split
from .errors import BelowMinimumError, InvalidAmountError
from .rewards import notify_reward_amount
from .safe_math import ONE_TOKEN, require_amount, safe_add, safe_sub

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class DistributionConfig:
    treasury_bps: int = 5000
    staking_bps: int = 3000
    burn_bps: int = 2000
    min_distribution: Amount = ONE_TOKEN

    def __post_init__(self) -> None:
        validate_split(self.treasury_bps, self.staking_bps, self.burn_bps)
        require_amount("min_distribution", self.min_distribution, allow_negative=False)


@dataclass(frozen=True)
class DistributionSplit:
    treasury_amount: Amount
    staking_amount: Amount
    burn_amount: Amount

    @property
    def total(self) -> Amount:
        return self.treasury_amount + self.staking_amount + self.burn_amount


@dataclass(frozen=True)
class DistributionResult:
    token: TokenId
    total_amount: Amount
    split: DistributionSplit


def split_amount(amount: Amount, config: DistributionConfig) -> DistributionSplit:
    """
    Split ``amount`` by ``config``; shares round down, dust goes to the treasury.

    Example: 10_000 at 5000/3000/2000 -> (5000, 3000, 2000).
    """
    require_amount("amount", amount, allow_negative=False)
    staking = apply_bps(amount, config.staking_bps)
    burn = apply_bps(amount, config.burn_bps)
    # treasury = floor share + dust
    treasury = safe_sub(amount, safe_add(staking, burn))
    return DistributionSplit(treasury_amount=treasury, staking_amount=staking, burn_amount=burn)


def receive_fees(state: FeeDistributorState, token: TokenId, amount: Amount) -> FeeDistributorState:
    """Record fees collected in ``token``, to be split by a later ``distribute``."""
    require_amount("amount", amount)
    if amount <= 0:
        raise InvalidAmountError(f"amount must be positive: {amount}")
    pending = dict(state.pending)
    pending[token] = safe_add(state.pending_for(token), amount)
    return replace(state, pending=pending)


def distribute(
    state: FeeDistributorState,
    token: TokenId,
    config: DistributionConfig,
) -> tuple[FeeDistributorState, DistributionResult]:
    """
    Split all pending fees of ``token``.

    Raises:
        BelowMinimumError: pending amount below ``config.min_distribution``
    """
    amount = state.pending_for(token)
    if amount < config.min_distribution:
        raise BelowMinimumError(
            f"pending fees for {token} below minimum: {amount} < {config.min_distribution}"
        )

    split = split_amount(amount, config)
    pending = dict(state.pending)
    pending[token] = 0
    totals = dict(state.total_distributed)
    totals[token] = safe_add(state.distributed_for(token), amount)

    log.debug(
        "distribute token=%s amount=%d treasury=%d staking=%d burn=%d",
        token, amount, split.treasury_amount, split.staking_amount, split.burn_amount,
    )
    return (
        FeeDistributorState(pending=pending, total_distributed=totals),
        DistributionResult(token=token, total_amount=amount, split=split),
    )


def distribute_all(
    state: FeeDistributorState,
    config: DistributionConfig,
) -> tuple[FeeDistributorState, list[DistributionResult]]:
    """Distribute every token whose pending fees meet the minimum; others stay pending."""
    results: list[DistributionResult] = []
    for token in sorted(state.pending):
        amount = state.pending_for(token)
        if amount == 0 or amount < config.min_distribution:
            continue
        state, result = distribute(state, token, config)
        results.append(result)
    return state, results


def distribute_to_staking(
    state: FeeDistributorState,
    staking_pool: StakingPool,
    token: TokenId,
    config: DistributionConfig,
    now: int,
) -> tuple[FeeDistributorState, StakingPool, DistributionResult]:
    """
    ``distribute`` and credit the staking share into the reward ledger as one step.

    If either half fails nothing is returned, so the caller commits neither.
    """
    state, result = distribute(state, token, config)
    if result.split.staking_amount > 0:
        staking_pool = notify_reward_amount(staking_pool, token, result.split.staking_amount, now)
    return state, staking_pool, result
