"""
Process-level settings read from the environment.

    SOUNDCRAFT_SAMPLE_RATE  decode rate for loaded files, 0 keeps the native rate
    SOUNDCRAFT_CONFIG       YAML analysis config (default: config/default_config.yaml)
    MAX_FILE_SIZE_MB        refuse to decode larger inputs
    LOG_LEVEL               DEBUG, INFO, WARNING, ERROR
    LOG_JSON                JSON console logs (true/1/yes)
    LOG_FILE                rotating JSON log file

Analysis parameters live in the YAML config, not here.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from soundcraft.core.errors import ConfigurationError


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer", data={"value": raw}, cause=e)
    if value < 0:
        raise ConfigurationError(f"{name} must not be negative", data={"value": value})
    return value


def _env_bool(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


def _env_log_level() -> Optional[LogLevel]:
    raw = os.getenv("LOG_LEVEL", "").strip().upper()
    if not raw:
        return None
    try:
        return LogLevel(raw)
    except ValueError as e:
        raise ConfigurationError("LOG_LEVEL is not a known level", data={"value": raw}, cause=e)


@dataclass
class Settings:
    sample_rate: int = field(default_factory=lambda: _env_int("SOUNDCRAFT_SAMPLE_RATE", 0))
    max_file_size_mb: int = field(default_factory=lambda: _env_int("MAX_FILE_SIZE_MB", 100))
    config_path: Optional[str] = field(default_factory=lambda: os.getenv("SOUNDCRAFT_CONFIG") or None)

    # None leaves the level to logging-config.yaml
    log_level: Optional[LogLevel] = field(default_factory=_env_log_level)
    log_json: bool = field(default_factory=lambda: _env_bool("LOG_JSON"))
    log_file: Optional[str] = field(default_factory=lambda: os.getenv("LOG_FILE") or None)

    @property
    def target_sample_rate(self) -> Optional[int]:
        """Rate handed to the decoder; None keeps each file's native rate."""
        return self.sample_rate or None

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Forget cached settings; the next get_settings() re-reads the environment."""
    global _settings
    _settings = None
