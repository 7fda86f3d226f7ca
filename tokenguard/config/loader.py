from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import ValidationError

from ..util.env import MissingEnvError, get_optional_env, load_env_file, validate_required_env_vars
from .schema import AlertSettings, Settings

REQUIRED_ENV_VARS: tuple[str, ...] = ("RPC_URL", "MINT_ADDRESS", "BURNER_AUTHORITY_KEY", "PROGRAM_ID")

_LEDGER_ENV = {
    "rpc_url": "RPC_URL",
    "mint_address": "MINT_ADDRESS",
    "burner_authority_key": "BURNER_AUTHORITY_KEY",
    "program_id": "PROGRAM_ID",
    "commitment": "RPC_COMMITMENT",
    "timeout_sec": "RPC_TIMEOUT_SEC",
    "min_delay_ms": "RPC_MIN_DELAY_MS",
}
_HEALTH_ENV = {
    "min_operator_balance_lamports": "HEALTH_MIN_OPERATOR_BALANCE_LAMPORTS",
    "withheld_warning_threshold": "HEALTH_WITHHELD_WARN_THRESHOLD",
}
_RETRY_ENV = {
    "max_attempts": "HEALTH_RETRY_ATTEMPTS",
    "initial_delay": "HEALTH_RETRY_INITIAL_DELAY_SEC",
    "max_delay": "HEALTH_RETRY_MAX_DELAY_SEC",
    "strategy": "HEALTH_RETRY_STRATEGY",
}
_ALERT_ENV = {
    "min_interval_sec": "ALERT_MIN_INTERVAL_SEC",
    "state_path": "ALERT_STATE_PATH",
    "log_path": "ALERT_LOG_PATH",
}


class ConfigError(RuntimeError):
    """Configuration is missing or invalid; carries one entry per problem."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "invalid configuration")


def load_yaml(path: Path | str) -> dict[str, Any]:
    cfg_path = Path(path)
    with cfg_path.open("r", encoding="utf-8") as handle:
        payload = yaml.safe_load(handle) or {}
    if not isinstance(payload, dict):
        raise TypeError(f"Configuration root must be a mapping, got {type(payload)!r}")
    return payload


def _pick(env: Mapping[str, str], mapping: Mapping[str, str]) -> dict[str, str]:
    picked: dict[str, str] = {}
    for field, name in mapping.items():
        raw = env.get(name)
        if raw is not None and raw.strip():
            picked[field] = raw.strip()
    return picked


def _format_validation_error(exc: ValidationError) -> list[str]:
    errors: list[str] = []
    for entry in exc.errors():
        location = ".".join(str(part) for part in entry.get("loc", ()))
        message = str(entry.get("msg") or "invalid")
        errors.append(f"{location}: {message}" if location else message)
    return errors


def load_settings(
    environ: Mapping[str, str] | None = None,
    env_file: str | Path | None = ".env",
) -> Settings:
    """Build :class:`Settings` from the environment, a ``.env`` file and YAML overrides.

    Process environment wins over the ``.env`` file; explicit ``HEALTH_*``
    variables win over the thresholds file. Raises :class:`ConfigError`
    listing every missing or invalid entry.
    """

    env: dict[str, str] = dict(os.environ if environ is None else environ)
    if env_file:
        load_env_file(env_file, env)

    try:
        validate_required_env_vars(REQUIRED_ENV_VARS, env)
    except MissingEnvError as exc:
        raise ConfigError([f"Missing required environment variable: {name}" for name in exc.names]) from exc

    health: dict[str, Any] = {}
    thresholds_file = get_optional_env("HEALTH_THRESHOLDS_FILE", "", env)
    if thresholds_file:
        try:
            health.update(load_yaml(thresholds_file))
        except (OSError, TypeError, yaml.YAMLError) as exc:
            raise ConfigError([f"HEALTH_THRESHOLDS_FILE {thresholds_file}: {exc}"]) from exc
    health.update(_pick(env, _HEALTH_ENV))
    retry = _pick(env, _RETRY_ENV)
    if "strategy" in retry:
        retry["strategy"] = retry["strategy"].lower()

    raw: dict[str, Any] = {
        "ledger": _pick(env, _LEDGER_ENV),
        "health": health,
        "retry": retry,
        "alerts": _pick(env, _ALERT_ENV),
    }
    log_level = get_optional_env("LOG_LEVEL", "", env)
    if log_level:
        raw["log_level"] = log_level.upper()
    try:
        return Settings.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(_format_validation_error(exc)) from exc


def load_alert_settings(
    environ: Mapping[str, str] | None = None,
    env_file: str | Path | None = ".env",
) -> AlertSettings:
    """Alert settings alone, so monitoring keeps working when ledger config is broken."""

    env: dict[str, str] = dict(os.environ if environ is None else environ)
    if env_file:
        load_env_file(env_file, env)
    try:
        return AlertSettings.model_validate(_pick(env, _ALERT_ENV))
    except ValidationError as exc:
        raise ConfigError(_format_validation_error(exc)) from exc


__all__ = ["ConfigError", "REQUIRED_ENV_VARS", "load_alert_settings", "load_settings", "load_yaml"]
