from __future__ import annotations

import pytest

from tokenguard.validators import (
    FeeRateOutOfRange,
    InsufficientBalance,
    InvariantViolation,
    NonPositiveAmount,
    validate_fee_basis_points,
    validate_positive_amount,
    validate_sufficient_balance,
)


def test_positive_amount():
    validate_positive_amount(1)
    for bad in (0, -5):
        with pytest.raises(NonPositiveAmount) as excinfo:
            validate_positive_amount(bad)
        assert excinfo.value.amount == bad
        assert excinfo.value.reason == "non_positive_amount"


def test_sufficient_balance_allows_exact_balance():
    validate_sufficient_balance(100, 100)
    validate_sufficient_balance(0, 0)


def test_insufficient_balance_message():
    with pytest.raises(InsufficientBalance) as excinfo:
        validate_sufficient_balance(101, 100)
    assert str(excinfo.value) == "Insufficient balance. Transfer: 101, Balance: 100"
    assert excinfo.value.transfer_amount == 101
    assert excinfo.value.balance == 100


@pytest.mark.parametrize("rate", [0, 1000, 10_000])
def test_fee_basis_points_accepts_range(rate):
    validate_fee_basis_points(rate)


@pytest.mark.parametrize("rate", [-1, 10_001, 1.5, "100", None])
def test_fee_basis_points_rejects(rate):
    with pytest.raises(FeeRateOutOfRange):
        validate_fee_basis_points(rate)


def test_violations_are_value_errors():
    assert issubclass(InvariantViolation, ValueError)
    for exc_type in (NonPositiveAmount, InsufficientBalance, FeeRateOutOfRange):
        assert issubclass(exc_type, InvariantViolation)
