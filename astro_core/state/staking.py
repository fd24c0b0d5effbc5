"""
Staking ledger records.

One ``StakingPool`` holds the principal of a single staking token and one
``RewardPool`` per reward token. Each ``UserStake`` carries a
``RewardCheckpoint`` per reward token, so adding a reward token never rewrites
existing checkpoints: a missing checkpoint reads as zero.

All records are immutable; the reward kernel returns new ones.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Mapping

from .reserves import Amount, TokenId


def _require_non_negative(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0:
        raise ValueError(f"{name} must be non-negative: {value}")


@dataclass(frozen=True)
class RewardPool:
    """Accumulator state for one reward token."""

    reward_per_token_stored: int = 0
    last_update_time: int = 0
    reward_rate: int = 0
    # Emitted or injected while nothing was staked; released on the next accrual with stake.
    queued_rewards: Amount = 0
    total_rewards: Amount = 0  # lifetime emitted + injected

    def __post_init__(self) -> None:
        for name, v in (
            ("reward_per_token_stored", self.reward_per_token_stored),
            ("last_update_time", self.last_update_time),
            ("reward_rate", self.reward_rate),
            ("queued_rewards", self.queued_rewards),
            ("total_rewards", self.total_rewards),
        ):
            _require_non_negative(name, v)


@dataclass(frozen=True)
class RewardCheckpoint:
    reward_per_token_paid: int = 0
    accrued_rewards: Amount = 0

    def __post_init__(self) -> None:
        _require_non_negative("reward_per_token_paid", self.reward_per_token_paid)
        _require_non_negative("accrued_rewards", self.accrued_rewards)


EMPTY_CHECKPOINT = RewardCheckpoint()


@dataclass(frozen=True)
class UserStake:
    staked_amount: Amount = 0
    checkpoints: Mapping[TokenId, RewardCheckpoint] = field(default_factory=dict)
    stake_time: int = 0
    last_claim_time: int = 0

    def __post_init__(self) -> None:
        _require_non_negative("staked_amount", self.staked_amount)
        _require_non_negative("stake_time", self.stake_time)
        _require_non_negative("last_claim_time", self.last_claim_time)

    def checkpoint(self, token: TokenId) -> RewardCheckpoint:
        return self.checkpoints.get(token, EMPTY_CHECKPOINT)

    def with_checkpoint(self, token: TokenId, checkpoint: RewardCheckpoint) -> "UserStake":
        checkpoints = dict(self.checkpoints)
        checkpoints[token] = checkpoint
        return replace(self, checkpoints=checkpoints)

    @property
    def is_empty(self) -> bool:
        """Zero principal and nothing left to claim; the record is inert."""
        return self.staked_amount == 0 and all(
            cp.accrued_rewards == 0 for cp in self.checkpoints.values()
        )


@dataclass(frozen=True)
class StakingPool:
    staking_token: TokenId
    total_staked: Amount = 0
    reward_pools: Mapping[TokenId, RewardPool] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.staking_token, str) or not self.staking_token:
            raise ValueError("staking_token must be a non-empty string")
        _require_non_negative("total_staked", self.total_staked)

    @property
    def reward_tokens(self) -> list[TokenId]:
        """Registered reward tokens in deterministic (sorted) order."""
        return sorted(self.reward_pools)

    def with_reward_pool(self, token: TokenId, reward_pool: RewardPool) -> "StakingPool":
        pools = dict(self.reward_pools)
        pools[token] = reward_pool
        return replace(self, reward_pools=pools)


@dataclass(frozen=True)
class StakingConfig:
    min_stake_amount: Amount = 1
    max_stake_per_user: Amount = 0  # 0 = unlimited

    def __post_init__(self) -> None:
        _require_non_negative("max_stake_per_user", self.max_stake_per_user)
        if not isinstance(self.min_stake_amount, int) or isinstance(self.min_stake_amount, bool):
            raise TypeError("min_stake_amount must be an int")
        if self.min_stake_amount <= 0:
            raise ValueError(f"min_stake_amount must be positive: {self.min_stake_amount}")
