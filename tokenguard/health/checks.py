"""The fixed battery of health checks run against the deployed policy.

A check returns a :class:`CheckOutcome` for every answer the ledger can give,
including "account missing".  Anything it raises is treated by the aggregator
as a failure of that check.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Sequence, TypeVar

from solders.pubkey import Pubkey

from ..constants import DECIMALS, LAMPORTS_PER_SOL, SOL_DECIMALS
from ..config.schema import HealthThresholds, LedgerSettings
from ..ledger.addresses import associated_token_address, hook_config_address
from ..ledger.client import AccountNotFoundError, LedgerQueryClient
from ..resilience.retry import RetryPolicy, retry_async
from ..tokenmath import base_units_to_decimal, base_units_to_tokens, exceeds_wallet_cap
from ..validators import InvariantViolation
from .report import CheckValue
from .status import HealthStatus

T = TypeVar("T")


@dataclass(frozen=True)
class HealthTargets:
    """Addresses the battery inspects."""

    mint: Pubkey
    operator: Pubkey
    config_account: Pubkey
    operator_token_account: Pubkey

    @classmethod
    def from_settings(cls, ledger: LedgerSettings) -> "HealthTargets":
        mint = ledger.mint
        operator = ledger.operator_pubkey()
        config_account, _ = hook_config_address(mint, ledger.program)
        return cls(
            mint=mint,
            operator=operator,
            config_account=config_account,
            operator_token_account=associated_token_address(operator, mint),
        )


def _is_retryable(exc: Exception) -> bool:
    return not isinstance(exc, (AccountNotFoundError, InvariantViolation))


@dataclass
class CheckContext:
    client: LedgerQueryClient
    targets: HealthTargets
    thresholds: HealthThresholds
    retry_policy: RetryPolicy
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep
    decimals: int = DECIMALS

    async def query(self, label: str, operation: Callable[[], Awaitable[T]]) -> T:
        return await retry_async(
            operation,
            self.retry_policy,
            sleep=self.sleep,
            label=label,
            retryable=_is_retryable,
        )


@dataclass
class CheckOutcome:
    value: CheckValue
    status: HealthStatus = HealthStatus.HEALTHY
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    # warnings that are reported without raising the status
    notices: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class HealthCheck:
    name: str
    run: Callable[[CheckContext], Awaitable[CheckOutcome]]
    failure_message: str
    essential: bool = True
    default_value: CheckValue = False


async def check_rpc_connection(ctx: CheckContext) -> CheckOutcome:
    await ctx.query("getSlot", ctx.client.check_connectivity)
    return CheckOutcome(value=True)


async def check_mint_exists(ctx: CheckContext) -> CheckOutcome:
    exists = await ctx.query("getAccountInfo", lambda: ctx.client.account_exists(ctx.targets.mint))
    if not exists:
        return CheckOutcome(
            value=False,
            status=HealthStatus.CRITICAL,
            errors=["Mint account does not exist"],
        )
    return CheckOutcome(value=True)


async def check_operator_balance(ctx: CheckContext) -> CheckOutcome:
    lamports = await ctx.query("getBalance", lambda: ctx.client.get_balance(ctx.targets.operator))
    sol = base_units_to_tokens(lamports, SOL_DECIMALS)
    minimum = ctx.thresholds.min_operator_balance_lamports
    if lamports < minimum:
        return CheckOutcome(
            value=sol,
            status=HealthStatus.WARNING,
            warnings=[
                f"Burner authority SOL balance is low: {sol} SOL "
                f"(minimum {minimum / LAMPORTS_PER_SOL} SOL)"
            ],
        )
    return CheckOutcome(value=sol)


async def check_withheld_tokens(ctx: CheckContext) -> CheckOutcome:
    try:
        amount = await ctx.query(
            "getTokenAccountBalance",
            lambda: ctx.client.get_token_account_balance(ctx.targets.operator_token_account),
        )
    except AccountNotFoundError:
        return CheckOutcome(
            value=0,
            notices=["Burner token account does not exist yet (normal on first run)"],
        )
    threshold = base_units_to_decimal(ctx.thresholds.withheld_warning_threshold, ctx.decimals)
    if exceeds_wallet_cap(amount, threshold, ctx.decimals):
        return CheckOutcome(
            value=amount,
            status=HealthStatus.WARNING,
            warnings=[
                f"Withheld tokens accumulating ({amount} base units), burner may not be running"
            ],
        )
    return CheckOutcome(value=amount)


async def check_config_account(ctx: CheckContext) -> CheckOutcome:
    exists = await ctx.query(
        "getAccountInfo", lambda: ctx.client.account_exists(ctx.targets.config_account)
    )
    if not exists:
        return CheckOutcome(
            value=False,
            status=HealthStatus.CRITICAL,
            errors=["Hook config PDA does not exist"],
        )
    return CheckOutcome(value=True)


DEFAULT_CHECKS: Sequence[HealthCheck] = (
    HealthCheck("rpc_connection", check_rpc_connection, "RPC connection failed"),
    HealthCheck("mint_exists", check_mint_exists, "Failed to check mint"),
    HealthCheck(
        "operator_balance",
        check_operator_balance,
        "Failed to check burner authority balance",
        default_value=0.0,
    ),
    HealthCheck(
        "withheld_tokens_balance",
        check_withheld_tokens,
        "Failed to check withheld tokens",
        essential=False,
        default_value=0,
    ),
    HealthCheck("config_account_exists", check_config_account, "Failed to check hook config"),
)


__all__ = [
    "CheckContext",
    "CheckOutcome",
    "DEFAULT_CHECKS",
    "HealthCheck",
    "HealthTargets",
    "check_config_account",
    "check_mint_exists",
    "check_operator_balance",
    "check_rpc_connection",
    "check_withheld_tokens",
]
