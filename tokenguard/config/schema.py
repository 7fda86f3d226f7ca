from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator
from solders.pubkey import Pubkey

from ..constants import LAMPORTS_PER_SOL
from ..ledger.addresses import keypair_from_base58, parse_pubkey
from ..resilience.retry import RetryPolicy, RetryStrategy


class LedgerSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    rpc_url: str = Field(..., min_length=1)
    mint_address: str
    burner_authority_key: SecretStr
    program_id: str
    commitment: str = "confirmed"
    timeout_sec: float = Field(10.0, gt=0.0)
    min_delay_ms: float = Field(0.0, ge=0.0)

    @field_validator("rpc_url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError("rpc_url must be an http(s) URL")
        return value

    @field_validator("mint_address", "program_id")
    @classmethod
    def _check_pubkey(cls, value: str) -> str:
        return str(parse_pubkey(value))

    @field_validator("burner_authority_key")
    @classmethod
    def _check_keypair(cls, value: SecretStr) -> SecretStr:
        keypair_from_base58(value.get_secret_value())
        return value

    @property
    def mint(self) -> Pubkey:
        return parse_pubkey(self.mint_address)

    @property
    def program(self) -> Pubkey:
        return parse_pubkey(self.program_id)

    def operator_pubkey(self) -> Pubkey:
        return keypair_from_base58(self.burner_authority_key.get_secret_value()).pubkey()


class HealthThresholds(BaseModel):
    model_config = ConfigDict(frozen=True)

    # 0.01 SOL keeps the sweeper able to pay for a few transactions
    min_operator_balance_lamports: int = Field(LAMPORTS_PER_SOL // 100, ge=0)
    withheld_warning_threshold: int = Field(1000, ge=0)


class RetrySettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(3, ge=1)
    initial_delay: float = Field(1.0, ge=0.0)
    max_delay: float = Field(10.0, ge=0.0)
    strategy: RetryStrategy = RetryStrategy.EXPONENTIAL

    def to_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.max_attempts,
            initial_delay=self.initial_delay,
            max_delay=self.max_delay,
            strategy=self.strategy,
        )


class AlertSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    min_interval_sec: float = Field(3600.0, ge=0.0)
    state_path: Path = Path("data/alert_state.json")
    log_path: Path | None = None


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    ledger: LedgerSettings
    health: HealthThresholds = Field(default_factory=HealthThresholds)
    retry: RetrySettings = Field(default_factory=RetrySettings)
    alerts: AlertSettings = Field(default_factory=AlertSettings)
    log_level: str = "INFO"


__all__ = [
    "AlertSettings",
    "HealthThresholds",
    "LedgerSettings",
    "RetrySettings",
    "Settings",
]
