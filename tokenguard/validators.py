"""Guard clauses for transfer inputs.

Each validator returns ``None`` for valid input and raises a subclass of
:class:`InvariantViolation` otherwise.  They never retry and never touch
remote state.
"""

from __future__ import annotations

from numbers import Integral

from .constants import MAX_BASIS_POINTS


class InvariantViolation(ValueError):
    """Base class for caller-input violations."""

    reason = "invariant_violation"


class NonPositiveAmount(InvariantViolation):
    reason = "non_positive_amount"

    def __init__(self, amount: int) -> None:
        self.amount = amount
        super().__init__(f"Amount must be positive, got {amount}")


class InsufficientBalance(InvariantViolation):
    reason = "insufficient_balance"

    def __init__(self, transfer_amount: int, balance: int) -> None:
        self.transfer_amount = transfer_amount
        self.balance = balance
        super().__init__(
            f"Insufficient balance. Transfer: {transfer_amount}, Balance: {balance}"
        )


class FeeRateOutOfRange(InvariantViolation):
    reason = "fee_rate_out_of_range"

    def __init__(self, rate: object) -> None:
        self.rate = rate
        super().__init__(
            f"Fee basis points must be between 0 and {MAX_BASIS_POINTS}, got {rate!r}"
        )


def validate_positive_amount(amount: int) -> None:
    if amount <= 0:
        raise NonPositiveAmount(amount)


def validate_sufficient_balance(transfer_amount: int, balance: int) -> None:
    if transfer_amount > balance:
        raise InsufficientBalance(transfer_amount, balance)


def validate_fee_basis_points(rate: int) -> None:
    if isinstance(rate, bool) or not isinstance(rate, Integral):
        raise FeeRateOutOfRange(rate)
    if rate < 0 or rate > MAX_BASIS_POINTS:
        raise FeeRateOutOfRange(rate)


__all__ = [
    "FeeRateOutOfRange",
    "InsufficientBalance",
    "InvariantViolation",
    "NonPositiveAmount",
    "validate_fee_basis_points",
    "validate_positive_amount",
    "validate_sufficient_balance",
]
