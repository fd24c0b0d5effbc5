"""
Core accounting algorithms
"""

from .errors import (
    AccountingError,
    ArithmeticOverflowError,
    ArithmeticUnderflowError,
    BelowMinimumError,
    DivisionByZeroError,
    ErrorKind,
    InsufficientBalanceError,
    InvalidAmountError,
    InvalidBpsError,
    InvalidTimestampError,
    TokenNotFoundError,
)
from .safe_math import (
    I128_MAX,
    I128_MIN,
    PRECISION,
    mul_div_down,
    mul_div_up,
    safe_add,
    safe_div,
    safe_mul,
    safe_sub,
)
from .bps import BPS_DENOMINATOR, apply_bps, apply_bps_round_up, calculate_bps, sub_bps
from .amm import (
    SwapResult,
    calculate_k,
    get_amount_in,
    get_amount_out,
    quote,
    sqrt,
    swap_exact_in,
    swap_exact_out,
    update_reserves_add,
    update_reserves_sub,
    update_reserves_swap,
    verify_k_invariant,
)
from .liquidity import MIN_LIQUIDITY, add_liquidity, compute_lp_burn, compute_lp_mint, remove_liquidity
from .rewards import accrue, claim, compound, notify_reward_amount, pending_rewards, stake, unstake
from .fees import DistributionConfig, DistributionSplit, distribute, split_amount

__all__ = [
    "AccountingError",
    "ArithmeticOverflowError",
    "ArithmeticUnderflowError",
    "BelowMinimumError",
    "DivisionByZeroError",
    "ErrorKind",
    "InsufficientBalanceError",
    "InvalidAmountError",
    "InvalidBpsError",
    "InvalidTimestampError",
    "TokenNotFoundError",
    "I128_MAX",
    "I128_MIN",
    "PRECISION",
    "mul_div_down",
    "mul_div_up",
    "safe_add",
    "safe_div",
    "safe_mul",
    "safe_sub",
    "BPS_DENOMINATOR",
    "apply_bps",
    "apply_bps_round_up",
    "calculate_bps",
    "sub_bps",
    "SwapResult",
    "calculate_k",
    "get_amount_in",
    "get_amount_out",
    "quote",
    "sqrt",
    "swap_exact_in",
    "swap_exact_out",
    "update_reserves_add",
    "update_reserves_sub",
    "update_reserves_swap",
    "verify_k_invariant",
    "MIN_LIQUIDITY",
    "add_liquidity",
    "compute_lp_burn",
    "compute_lp_mint",
    "remove_liquidity",
    "accrue",
    "claim",
    "compound",
    "notify_reward_amount",
    "pending_rewards",
    "stake",
    "unstake",
    "DistributionConfig",
    "DistributionSplit",
    "distribute",
    "split_amount",
]
