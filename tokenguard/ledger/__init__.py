"""Ledger query collaborator: JSON-RPC adapter and address helpers."""

from .addresses import (
    InvalidAddressError,
    associated_token_address,
    derive_program_address,
    hook_config_address,
    keypair_from_base58,
    parse_pubkey,
)
from .client import AccountNotFoundError, LedgerQueryClient, LedgerRpcError, SolanaRpcClient

__all__ = [
    "AccountNotFoundError",
    "InvalidAddressError",
    "LedgerQueryClient",
    "LedgerRpcError",
    "SolanaRpcClient",
    "associated_token_address",
    "derive_program_address",
    "hook_config_address",
    "keypair_from_base58",
    "parse_pubkey",
]
