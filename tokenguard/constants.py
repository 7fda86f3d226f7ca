from __future__ import annotations

# Policy parameters of the deployed mint and transfer hook.
WALLET_CAP_TOKENS = 5
DECIMALS = 9
TRANSFER_FEE_BASIS_POINTS = 1000  # 10%
TOTAL_SUPPLY_TOKENS = 1000

MAX_BASIS_POINTS = 10_000
U64_MAX = 2**64 - 1

SOL_DECIMALS = 9
LAMPORTS_PER_SOL = 10**SOL_DECIMALS

__all__ = [
    "DECIMALS",
    "LAMPORTS_PER_SOL",
    "MAX_BASIS_POINTS",
    "SOL_DECIMALS",
    "TOTAL_SUPPLY_TOKENS",
    "TRANSFER_FEE_BASIS_POINTS",
    "U64_MAX",
    "WALLET_CAP_TOKENS",
]
