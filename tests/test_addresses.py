from __future__ import annotations

import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from tokenguard.ledger.addresses import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    TOKEN_2022_PROGRAM_ID,
    InvalidAddressError,
    associated_token_address,
    extra_account_metas_address,
    hook_config_address,
    keypair_from_base58,
    parse_pubkey,
)


def test_parse_pubkey_round_trip():
    key = Pubkey.new_unique()
    assert parse_pubkey(str(key)) == key
    assert parse_pubkey(key) is key


def test_parse_pubkey_rejects_garbage():
    with pytest.raises(InvalidAddressError) as excinfo:
        parse_pubkey("not-a-key", "mint_address")
    assert "mint_address" in str(excinfo.value)


def test_keypair_from_base58():
    keypair = Keypair()
    assert keypair_from_base58(str(keypair)).pubkey() == keypair.pubkey()


def test_keypair_error_does_not_echo_secret():
    secret = "definitely-not-a-valid-secret"
    with pytest.raises(InvalidAddressError) as excinfo:
        keypair_from_base58(secret)
    assert secret not in str(excinfo.value)


def test_hook_pdas_match_seed_layout():
    mint = Pubkey.new_unique()
    program = Pubkey.new_unique()
    assert hook_config_address(mint, program) == Pubkey.find_program_address([b"config", bytes(mint)], program)
    assert extra_account_metas_address(mint, program) == Pubkey.find_program_address(
        [b"extra-account-metas", bytes(mint)], program
    )
    assert hook_config_address(mint, program)[0] != extra_account_metas_address(mint, program)[0]


def test_associated_token_address_uses_token_2022():
    owner = Pubkey.new_unique()
    mint = Pubkey.new_unique()
    expected, _ = Pubkey.find_program_address(
        [bytes(owner), bytes(TOKEN_2022_PROGRAM_ID), bytes(mint)],
        ASSOCIATED_TOKEN_PROGRAM_ID,
    )
    assert associated_token_address(owner, mint) == expected
