"""Config – 12-factor settings and loaders."""

from audit_ingest.config.settings import (
    DotenvSettingsLoader,
    EnvSettingsLoader,
    IngestSettings,
    Settings,
    SettingsLoader,
)
from audit_ingest.config.validation import (
    ConfigError,
    InvalidSettingValueError,
)

__all__ = [
    "ConfigError",
    "DotenvSettingsLoader",
    "EnvSettingsLoader",
    "IngestSettings",
    "InvalidSettingValueError",
    "Settings",
    "SettingsLoader",
]
