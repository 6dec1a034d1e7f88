"""Per-component log levels from logging-config.yaml.

Lookup order for a component such as ``cli``:

1. ``LOG_LEVEL_CLI`` / ``LOG_JSON_FORMAT_CLI`` environment variables
2. ``LOG_LEVEL`` / ``LOG_JSON_FORMAT`` (every component)
3. the ``components`` section of the YAML file
4. ``default_level`` (or INFO when there is no file)
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

CONFIG_FILENAME = "logging-config.yaml"

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def _find_config_file(start: Path, max_depth: int = 5) -> Optional[Path]:
    directory = start
    for _ in range(max_depth):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        directory = directory.parent
    return None


def _env_override(prefix: str, component: str) -> Optional[str]:
    suffix = component.upper().replace("-", "_")
    value = os.getenv(f"{prefix}_{suffix}")
    if value is None:
        value = os.getenv(prefix)
    return value or None


class LoggingConfig:
    """Parsed logging-config.yaml with environment overrides applied on read."""

    _instance: Optional["LoggingConfig"] = None

    def __init__(self, config_path: Optional[str] = None):
        path = Path(config_path) if config_path else _find_config_file(Path(__file__).parent)

        raw: Dict[str, Any] = {}
        if path is not None and path.is_file():
            with open(path, encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}

        self.default_level: str = str(raw.get("default_level", "INFO")).upper()
        self._components: Dict[str, Any] = raw.get("components") or {}
        self._modules: Dict[str, str] = raw.get("modules") or {}

    @classmethod
    def get_instance(cls) -> "LoggingConfig":
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def _component(self, component: str) -> Dict[str, Any]:
        entry = self._components.get(component)
        # "cli: DEBUG" is shorthand for "cli: {level: DEBUG}"
        if isinstance(entry, str):
            return {"level": entry}
        return entry if isinstance(entry, dict) else {}

    def get_level(self, component: str = "default") -> str:
        """Level name (DEBUG, INFO, ...) for ``component``."""
        override = _env_override("LOG_LEVEL", component)
        if override:
            return override.upper()
        return str(self._component(component).get("level", self.default_level)).upper()

    def get_json_format(self, component: str = "default") -> bool:
        """Whether console output for ``component`` should be JSON."""
        override = _env_override("LOG_JSON_FORMAT", component)
        if override:
            return override.lower() in _TRUTHY
        return bool(self._component(component).get("json_format", False))

    def get_module_level(self, module_name: str) -> Optional[str]:
        """Level override for a fully qualified logger name, if any."""
        level = self._modules.get(module_name)
        return level.upper() if level else None

    @property
    def module_levels(self) -> Dict[str, str]:
        return {name: str(level).upper() for name, level in self._modules.items()}


def get_logging_config() -> LoggingConfig:
    """Process-wide LoggingConfig, loaded on first use."""
    return LoggingConfig.get_instance()
