"""
Ledger records for the accounting core
"""

from .reserves import Amount, ReserveState, TokenId
from .staking import RewardCheckpoint, RewardPool, StakingConfig, StakingPool, UserStake
from .distribution import FeeDistributorState

__all__ = [
    "Amount",
    "TokenId",
    "ReserveState",
    "RewardCheckpoint",
    "RewardPool",
    "StakingConfig",
    "StakingPool",
    "UserStake",
    "FeeDistributorState",
]
