"""YAML file holding the analysis and effects constants.

Values are addressed with dotted paths (``pitch.min_freq``). Turning the raw
sections into typed dataclasses is AnalysisConfig.from_config's job.
"""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from soundcraft.core.errors import ConfigurationError

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[3] / "config" / "default_config.yaml"

_MISSING = object()


def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.is_file():
        raise ConfigurationError(f"Configuration file not found: {path}", data={"config_path": str(path)})

    try:
        with open(path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}", data={"config_path": str(path)}, cause=e) from e

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigurationError(
            f"Top level of {path} must be a mapping",
            data={"config_path": str(path), "type": type(loaded).__name__},
        )
    return loaded


class Config:
    """
    Parsed config file.

    ``Config()`` reads config/default_config.yaml, ``Config(path)`` a custom
    file and ``Config(data={...})`` wraps an already parsed mapping.
    """

    def __init__(self, config_path: Optional[str] = None, data: Optional[Dict[str, Any]] = None):
        if data is not None:
            self._data: Dict[str, Any] = dict(data)
        else:
            self._data = _read_yaml(Path(config_path) if config_path else DEFAULT_CONFIG_PATH)

    def get(self, key_path: str, default: Any = None) -> Any:
        node: Any = self._data
        for key in key_path.split("."):
            node = node.get(key, _MISSING) if isinstance(node, dict) else _MISSING
            if node is _MISSING:
                return default
        return node

    def set(self, key_path: str, value: Any) -> None:
        *parents, leaf = key_path.split(".")
        node = self._data
        for key in parents:
            child = node.get(key)
            if not isinstance(child, dict):
                child = node[key] = {}
            node = child
        node[leaf] = value

    def section(self, name: str) -> Dict[str, Any]:
        """Top-level mapping ``name``; empty when absent or not a mapping."""
        value = self._data.get(name)
        return value if isinstance(value, dict) else {}

    def save(self, output_path: str) -> None:
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(self._data, f, default_flow_style=False, sort_keys=False)

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._data)
