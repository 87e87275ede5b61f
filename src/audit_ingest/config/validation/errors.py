"""Config validation – errors raised while loading IngestSettings."""
from audit_ingest.kernel.errors import ApplicationError


class ConfigError(ApplicationError):
    """Settings could not be built from the environment."""
    default_code = "config_error"


class InvalidSettingValueError(ConfigError):
    """A setting parsed but is out of range, e.g. ``BATCH_SIZE=0``."""
    default_code = "invalid_setting_value"

    def __init__(self, setting_name: str, value: object, reason: str) -> None:
        super().__init__(f"{setting_name}={value!r} rejected: {reason}")
        self.setting_name = setting_name
        self.value = value
        self.reason = reason


__all__ = ["ConfigError", "InvalidSettingValueError"]
