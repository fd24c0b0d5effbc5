"""
Fee distributor bookkeeping: fees received but not yet split, and lifetime totals.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from .reserves import Amount, TokenId


@dataclass(frozen=True)
class FeeDistributorState:
    pending: Mapping[TokenId, Amount] = field(default_factory=dict)
    total_distributed: Mapping[TokenId, Amount] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for table_name, table in (("pending", self.pending), ("total_distributed", self.total_distributed)):
            for token, amount in table.items():
                if not isinstance(amount, int) or isinstance(amount, bool):
                    raise TypeError(f"{table_name}[{token}] must be an int")
                if amount < 0:
                    raise ValueError(f"{table_name}[{token}] must be non-negative: {amount}")

    def pending_for(self, token: TokenId) -> Amount:
        return self.pending.get(token, 0)

    def distributed_for(self, token: TokenId) -> Amount:
        return self.total_distributed.get(token, 0)

    @property
    def tokens(self) -> list[TokenId]:
        """Tokens that have ever received fees, sorted."""
        return sorted(set(self.pending) | set(self.total_distributed))
