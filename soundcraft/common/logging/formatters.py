"""Log record formatters and the ``data=`` adapter.

Analysis code logs numpy values freely (pitch estimates, frame energies,
stage timings), so both formatters know how to render numpy scalars and
arrays without the caller converting them first.
"""

import json
import logging
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import numpy as np

# Package prefixes that carry no information in a component name
_STRIPPED_PREFIXES = ("soundcraft", "modules")

# Arrays longer than this are summarised instead of dumped into the log
_MAX_ARRAY_ITEMS = 16


def _to_jsonable(value: Any) -> Any:
    """``json.dumps`` default hook for the types analysis code emits."""
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, np.ndarray):
        if value.size <= _MAX_ARRAY_ITEMS:
            return value.tolist()
        return {"shape": list(value.shape), "dtype": str(value.dtype)}
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    return repr(value)


def _record_context(record: logging.LogRecord) -> dict[str, Any]:
    # Filled in by CorrelationLogFilter; absent when the filter is not attached
    context = {}
    for key in ("correlation_id", "session_id"):
        value = getattr(record, key, None)
        if value:
            context[key] = value
    return context


class JSONFormatter(logging.Formatter):
    """
    One JSON object per record.

    Fields: timestamp, level, component, logger, message, the request
    context (correlation_id / session_id), ``data`` from the adapter and
    exception details. ``extra_fields`` are merged in at the top level.
    """

    def __init__(
        self,
        include_path: bool = False,
        extra_fields: dict[str, Any] | None = None,
    ):
        super().__init__()
        self.include_path = include_path
        self.extra_fields = dict(extra_fields or {})

    @staticmethod
    def _extract_component(logger_name: str) -> str:
        """
        Short component name for a logger.

        Examples:
            soundcraft.modules.analysis.tasks.clarity -> analysis.tasks.clarity
            soundcraft.common.primitives.vocoder -> common.primitives.vocoder
            __main__ -> main
        """
        if logger_name == "__main__":
            return "main"

        parts = logger_name.split(".")
        for prefix in _STRIPPED_PREFIXES:
            if parts and parts[0] == prefix:
                parts = parts[1:]
        return ".".join(parts) or logger_name

    @staticmethod
    def _exception_block(exc_info) -> dict[str, Any]:
        exc_type, exc_value, _ = exc_info
        return {
            "type": exc_type.__name__ if exc_type else None,
            "message": str(exc_value) if exc_value is not None else None,
            "traceback": traceback.format_exception(*exc_info),
        }

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, timezone.utc)
        entry: dict[str, Any] = {
            "timestamp": created.isoformat(),
            "level": record.levelname,
            "component": self._extract_component(record.name),
            "logger": record.name,
            "message": (record.getMessage() or "").strip(),
        }
        if self.include_path:
            entry["path"] = f"{record.pathname}:{record.lineno}"

        entry.update(_record_context(record))

        data = getattr(record, "structured_data", None)
        if data:
            entry["data"] = data
        if record.exc_info:
            entry["exception"] = self._exception_block(record.exc_info)

        entry.update(self.extra_fields)
        return json.dumps(entry, ensure_ascii=False, default=_to_jsonable)


class ConsoleFormatter(logging.Formatter):
    """
    Human-readable single-line output for terminals.

    ``2024-05-01 12:00:00 INFO  [3f2a9c1d] analysis.tasks.pitch: Pitch detected pitch_hz=221.3``
    """

    def __init__(self, datefmt: str = "%Y-%m-%d %H:%M:%S"):
        super().__init__(datefmt=datefmt)

    @staticmethod
    def _render_value(value: Any) -> str:
        if isinstance(value, (float, np.floating)):
            return f"{float(value):.4g}"
        if isinstance(value, (dict, list, tuple, np.ndarray)):
            return json.dumps(value, default=_to_jsonable)
        return str(value)

    def format(self, record: logging.LogRecord) -> str:
        context = _record_context(record)
        tag = f" [{context['correlation_id']}]" if "correlation_id" in context else ""
        line = (
            f"{self.formatTime(record, self.datefmt)} {record.levelname:<5}{tag} "
            f"{JSONFormatter._extract_component(record.name)}: {record.getMessage()}"
        )

        data = getattr(record, "structured_data", None)
        if data:
            pairs = " ".join(f"{k}={self._render_value(v)}" for k, v in data.items())
            line = f"{line} {pairs}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


class StructuredLogAdapter(logging.LoggerAdapter):
    """
    Logger adapter taking a ``data`` mapping next to the message.

        logger = get_logger(__name__)
        logger.info("Pitch detected", data={"pitch_hz": 221.3, "method": "hps"})
    """

    def __init__(self, logger: logging.Logger, extra: dict | None = None):
        super().__init__(logger, extra or {})

    def process(self, msg, kwargs):
        data = kwargs.pop("data", None)
        extra = {**self.extra, **(kwargs.get("extra") or {})}
        if data:
            extra["structured_data"] = data
        kwargs["extra"] = extra
        return msg, kwargs
