"""Root logger wiring for the CLI and embedding applications."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from .correlation import CorrelationLogFilter
from .formatters import ConsoleFormatter, JSONFormatter, StructuredLogAdapter
from .logging_config import get_logging_config

# librosa pulls these in and they log at DEBUG on import
_NOISY_LIBRARIES = ("numba", "matplotlib", "audioread")

_configured = False


def _make_handler(handler: logging.Handler, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler.setLevel(level)
    handler.addFilter(CorrelationLogFilter())
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    json_format: Optional[bool] = None,
    component: str = "default",
    force: bool = False,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
) -> None:
    """
    Install console (and optionally file) handlers on the root logger.

    Missing ``level`` / ``json_format`` come from logging-config.yaml for
    ``component``. The file handler always writes JSON lines and rotates
    at ``max_bytes``. Repeated calls are no-ops unless ``force`` is set.
    """
    global _configured
    if _configured and not force:
        return

    config = get_logging_config()
    level_name = (level or config.get_level(component)).upper()
    numeric_level = logging.getLevelName(level_name)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
    if json_format is None:
        json_format = config.get_json_format(component)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(numeric_level)

    console_formatter = JSONFormatter() if json_format else ConsoleFormatter()
    root.addHandler(_make_handler(logging.StreamHandler(sys.stderr), numeric_level, console_formatter))

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        root.addHandler(_make_handler(file_handler, numeric_level, JSONFormatter()))

    for module_name, module_level in config.module_levels.items():
        logging.getLogger(module_name).setLevel(module_level)
    for name in _NOISY_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)

    _configured = True


def get_logger(name: str) -> StructuredLogAdapter:
    """Adapter for ``name`` that accepts ``data=`` on every log call."""
    return StructuredLogAdapter(logging.getLogger(name))
