"""Fixed-point conversions and fee/cap arithmetic for the policy token.

All ledger-side quantities are plain ``int`` base units.  ``Decimal`` is only
used at the human-facing boundary when converting token amounts, so fee and
cap decisions never pass through a floating-point intermediate.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from numbers import Integral
from typing import Union

from .constants import DECIMALS, MAX_BASIS_POINTS, WALLET_CAP_TOKENS
from .validators import validate_fee_basis_points

TokenAmount = Union[Decimal, str, int, float]

# Wide enough for u64/u128 magnitudes scaled by 10**18 without context rounding.
_PRECISION = 96


@dataclass(frozen=True, slots=True)
class TransferOutcome:
    """Fee/net split of a single transfer, all values in base units."""

    amount: int
    fee: int
    net: int


def _to_decimal(tokens: TokenAmount) -> Decimal:
    if isinstance(tokens, bool):
        raise TypeError("token amount must be numeric, got bool")
    if isinstance(tokens, Decimal):
        value = tokens
    elif isinstance(tokens, (int, float, str)):
        # floats go through str() so 0.1 stays 0.1 instead of its binary expansion
        try:
            value = Decimal(str(tokens).strip())
        except InvalidOperation as exc:
            raise ValueError(f"invalid token amount: {tokens!r}") from exc
    else:
        raise TypeError(f"unsupported token amount type: {type(tokens).__name__}")
    if not value.is_finite():
        raise ValueError(f"token amount must be finite, got {tokens!r}")
    return value


def _require_decimals(decimals: int) -> int:
    if isinstance(decimals, bool) or not isinstance(decimals, Integral):
        raise TypeError("decimals must be an integer")
    if decimals < 0:
        raise ValueError(f"decimals must be non-negative, got {decimals}")
    return int(decimals)


def _require_base_units(value: int, field: str = "amount") -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise TypeError(f"{field} must be an integer number of base units")
    if value < 0:
        raise ValueError(f"{field} must be non-negative, got {value}")
    return int(value)


def tokens_to_base_units(tokens: TokenAmount, decimals: int = DECIMALS) -> int:
    """Scale ``tokens`` by ``10**decimals`` and round half-up to an integer.

    Accepts ``Decimal`` and decimal strings for exact input; floats are taken
    at their shortest ``repr`` value.
    """

    places = _require_decimals(decimals)
    value = _to_decimal(tokens)
    if value < 0:
        raise ValueError(f"token amount must be non-negative, got {tokens!r}")
    with localcontext() as ctx:
        # wide enough that scaleb never rounds before the half-up step
        ctx.prec = max(_PRECISION, len(value.as_tuple().digits) + places + 1)
        scaled = value.scaleb(places)
        return int(scaled.to_integral_value(rounding=ROUND_HALF_UP))


def base_units_to_decimal(base_units: int, decimals: int = DECIMALS) -> Decimal:
    places = _require_decimals(decimals)
    units = _require_base_units(base_units, "base_units")
    with localcontext() as ctx:
        ctx.prec = max(_PRECISION, len(str(units)) + 1)
        return Decimal(units).scaleb(-places)


def base_units_to_tokens(base_units: int, decimals: int = DECIMALS) -> float:
    """Return ``base_units`` as a float token amount.

    Magnitudes beyond 2**53 base units lose precision in the float result; use
    :func:`base_units_to_decimal` when the exact value matters.
    """

    return float(base_units_to_decimal(base_units, decimals))


def calculate_fee(amount: int, fee_basis_points: int) -> int:
    """``floor(amount * fee_basis_points / 10000)`` in integer arithmetic."""

    units = _require_base_units(amount)
    validate_fee_basis_points(fee_basis_points)
    return units * int(fee_basis_points) // MAX_BASIS_POINTS


def calculate_net_amount(amount: int, fee_basis_points: int) -> int:
    return _require_base_units(amount) - calculate_fee(amount, fee_basis_points)


def split_transfer(amount: int, fee_basis_points: int) -> TransferOutcome:
    fee = calculate_fee(amount, fee_basis_points)
    return TransferOutcome(amount=int(amount), fee=fee, net=int(amount) - fee)


def exceeds_wallet_cap(
    amount: int,
    cap_tokens: TokenAmount = WALLET_CAP_TOKENS,
    decimals: int = DECIMALS,
) -> bool:
    """True when ``amount`` is strictly above the cap; the cap itself is allowed."""

    units = _require_base_units(amount)
    return units > tokens_to_base_units(cap_tokens, decimals)


def post_transfer_exceeds_cap(
    balance: int,
    amount: int,
    fee_basis_points: int,
    cap_tokens: TokenAmount = WALLET_CAP_TOKENS,
    decimals: int = DECIMALS,
) -> bool:
    """Check whether crediting the post-fee part of ``amount`` breaks the cap."""

    current = _require_base_units(balance, "balance")
    net = calculate_net_amount(amount, fee_basis_points)
    return exceeds_wallet_cap(current + net, cap_tokens, decimals)


__all__ = [
    "TokenAmount",
    "TransferOutcome",
    "base_units_to_decimal",
    "base_units_to_tokens",
    "calculate_fee",
    "calculate_net_amount",
    "exceeds_wallet_cap",
    "post_transfer_exceeds_cap",
    "split_transfer",
    "tokens_to_base_units",
]
