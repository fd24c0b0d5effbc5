"""
Two-asset reserve state for a constant-product pool.

The caller owns persistence; AMM helpers take a ``ReserveState`` (or its two
ints) and hand back a new one.
"""

from __future__ import annotations

from dataclasses import dataclass

# Type aliases
Amount = int  # Non-negative integer in the signed 128-bit domain
TokenId = str  # Opaque token identifier (contract address, asset code, ...)


@dataclass(frozen=True)
class ReserveState:
    reserve_0: Amount
    reserve_1: Amount

    def __post_init__(self) -> None:
        for name, v in (("reserve_0", self.reserve_0), ("reserve_1", self.reserve_1)):
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
            if v < 0:
                raise ValueError(f"{name} must be non-negative: {v}")

    @property
    def k(self) -> int:
        """Constant product (unbounded; see ``amm.calculate_k`` for the checked form)."""
        return self.reserve_0 * self.reserve_1

    def as_tuple(self) -> tuple[Amount, Amount]:
        return self.reserve_0, self.reserve_1

    def oriented(self, zero_for_one: bool) -> tuple[Amount, Amount]:
        """Return ``(reserve_in, reserve_out)`` for a swap direction."""
        if zero_for_one:
            return self.reserve_0, self.reserve_1
        return self.reserve_1, self.reserve_0
