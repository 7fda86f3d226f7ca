from .loader import ConfigError, REQUIRED_ENV_VARS, load_alert_settings, load_settings, load_yaml
from .schema import AlertSettings, HealthThresholds, LedgerSettings, RetrySettings, Settings

__all__ = [
    "AlertSettings",
    "ConfigError",
    "HealthThresholds",
    "LedgerSettings",
    "REQUIRED_ENV_VARS",
    "RetrySettings",
    "Settings",
    "load_alert_settings",
    "load_settings",
    "load_yaml",
]
