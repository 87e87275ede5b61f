"""Config settings – 12-factor env-based configuration."""
from audit_ingest.config.settings.base import Settings, parse_duration
from audit_ingest.config.settings.ingest import IngestSettings
from audit_ingest.config.settings.loaders import DotenvSettingsLoader, EnvSettingsLoader, SettingsLoader

__all__ = [
    "DotenvSettingsLoader",
    "EnvSettingsLoader",
    "IngestSettings",
    "Settings",
    "SettingsLoader",
    "parse_duration",
]
