"""Exception types for the accounting core.

Every arithmetic or ledger operation raises one of these at the point of
detection. Nothing in ``astro_core`` catches them: the caller aborts the
whole transaction.

``AccountingError`` subclasses ``ValueError``.
"""

from __future__ import annotations

from enum import Enum, unique


@unique
class ErrorKind(Enum):
    """Error kinds; values are the stable numeric codes exposed to callers."""
    INVALID_AMOUNT = 200
    INVALID_BPS = 204
    INVALID_TIMESTAMP = 205
    BELOW_MINIMUM = 206
    INSUFFICIENT_BALANCE = 400
    TOKEN_NOT_FOUND = 401
    OVERFLOW = 500
    UNDERFLOW = 501
    DIVISION_BY_ZERO = 502


class AccountingError(ValueError):
    """Base class; ``kind`` identifies the failure category."""

    kind: ErrorKind

    @property
    def code(self) -> int:
        return self.kind.value


class ArithmeticOverflowError(AccountingError):
    """Raised when a result exceeds the maximum of the Amount domain."""

    kind = ErrorKind.OVERFLOW


class ArithmeticUnderflowError(AccountingError):
    """Raised when a result would be negative (or below the domain minimum)."""

    kind = ErrorKind.UNDERFLOW


class DivisionByZeroError(AccountingError):
    kind = ErrorKind.DIVISION_BY_ZERO


class InvalidAmountError(AccountingError):
    """Raised for negative, non-positive where positive is required, or out-of-domain amounts."""

    kind = ErrorKind.INVALID_AMOUNT


class InvalidBpsError(AccountingError):
    """Raised for a basis-point value outside [0, 10_000] or a split not summing to 10_000."""

    kind = ErrorKind.INVALID_BPS


class InsufficientBalanceError(AccountingError):
    kind = ErrorKind.INSUFFICIENT_BALANCE


class BelowMinimumError(AccountingError):
    kind = ErrorKind.BELOW_MINIMUM


class InvalidTimestampError(AccountingError):
    """Raised when the caller's clock moves backwards."""

    kind = ErrorKind.INVALID_TIMESTAMP


class TokenNotFoundError(AccountingError):
    kind = ErrorKind.TOKEN_NOT_FOUND
