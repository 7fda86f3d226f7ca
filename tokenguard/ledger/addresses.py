"""Address parsing and program-derived address helpers backed by ``solders``."""

from __future__ import annotations

from typing import Iterable

import base58
from solders.keypair import Keypair
from solders.pubkey import Pubkey

TOKEN_2022_PROGRAM_ID = Pubkey.from_string("TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb")
ASSOCIATED_TOKEN_PROGRAM_ID = Pubkey.from_string("ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL")

HOOK_CONFIG_SEED = b"config"
EXTRA_ACCOUNT_METAS_SEED = b"extra-account-metas"
KEYPAIR_LENGTH = 64


class InvalidAddressError(ValueError):
    """Raised when a base58 address or key cannot be decoded."""


def parse_pubkey(value: str | Pubkey, field: str = "address") -> Pubkey:
    if isinstance(value, Pubkey):
        return value
    try:
        return Pubkey.from_string(str(value).strip())
    except Exception as exc:
        raise InvalidAddressError(f"Invalid {field}: {value}") from exc


def keypair_from_base58(secret: str) -> Keypair:
    # never echo the secret itself
    try:
        raw = base58.b58decode(secret.strip())
    except ValueError as exc:
        raise InvalidAddressError("Invalid keypair format: not base58") from exc
    if len(raw) != KEYPAIR_LENGTH:
        raise InvalidAddressError(f"Invalid keypair format: expected {KEYPAIR_LENGTH} bytes, got {len(raw)}")
    try:
        return Keypair.from_bytes(raw)
    except ValueError as exc:
        raise InvalidAddressError("Invalid keypair format: inconsistent key bytes") from exc


def derive_program_address(seeds: Iterable[bytes], program_id: Pubkey) -> tuple[Pubkey, int]:
    return Pubkey.find_program_address(list(seeds), program_id)


def hook_config_address(mint: Pubkey, program_id: Pubkey) -> tuple[Pubkey, int]:
    return derive_program_address([HOOK_CONFIG_SEED, bytes(mint)], program_id)


def extra_account_metas_address(mint: Pubkey, program_id: Pubkey) -> tuple[Pubkey, int]:
    return derive_program_address([EXTRA_ACCOUNT_METAS_SEED, bytes(mint)], program_id)


def associated_token_address(
    owner: Pubkey,
    mint: Pubkey,
    token_program_id: Pubkey = TOKEN_2022_PROGRAM_ID,
) -> Pubkey:
    address, _ = derive_program_address(
        [bytes(owner), bytes(token_program_id), bytes(mint)],
        ASSOCIATED_TOKEN_PROGRAM_ID,
    )
    return address


__all__ = [
    "ASSOCIATED_TOKEN_PROGRAM_ID",
    "InvalidAddressError",
    "TOKEN_2022_PROGRAM_ID",
    "associated_token_address",
    "derive_program_address",
    "extra_account_metas_address",
    "hook_config_address",
    "keypair_from_base58",
    "parse_pubkey",
]
