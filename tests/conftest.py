from __future__ import annotations

import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from tests.fakes.fake_ledger import FakeClock, FakeSleep


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock(start=1_000.0)


@pytest.fixture
def fake_sleep() -> FakeSleep:
    return FakeSleep()


@pytest.fixture
def operator_keypair() -> Keypair:
    return Keypair()


@pytest.fixture
def mint_pubkey() -> Pubkey:
    return Pubkey.new_unique()


@pytest.fixture
def program_pubkey() -> Pubkey:
    return Pubkey.new_unique()


@pytest.fixture
def ledger_env(operator_keypair: Keypair, mint_pubkey: Pubkey, program_pubkey: Pubkey) -> dict[str, str]:
    return {
        "RPC_URL": "http://127.0.0.1:8899",
        "MINT_ADDRESS": str(mint_pubkey),
        "BURNER_AUTHORITY_KEY": str(operator_keypair),
        "PROGRAM_ID": str(program_pubkey),
    }


@pytest.fixture(autouse=True)
def clear_ledger_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "RPC_URL",
        "MINT_ADDRESS",
        "BURNER_AUTHORITY_KEY",
        "PROGRAM_ID",
        "HEALTH_THRESHOLDS_FILE",
        "ALERT_STATE_PATH",
        "ALERT_LOG_PATH",
        "ALERT_MIN_INTERVAL_SEC",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
