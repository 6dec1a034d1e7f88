"""
Error hierarchy for soundcraft.

Every error logs itself once, when constructed, with the structured ``data``
it carries. The active correlation / session IDs are captured at the same
moment so the error can be serialised after the request context has ended.

    SoundCraftError
    ├── AudioProcessingError
    │   ├── AudioLoadError       decode failure, surfaced verbatim to the caller
    │   └── InvalidAudioError    samples / sample rate cannot form a buffer
    ├── TransformError
    │   └── PitchShiftError      vocoder failure; the effects chain recovers from it
    ├── AnalysisError
    │   └── TaskExecutionError
    ├── ConfigurationError
    ├── InvalidParameterError
    └── NoAudioLoadedError

Degenerate input (an empty buffer, silence) is not an error: components
return their zero or empty result instead.
"""

import logging
from typing import Any, Dict, Optional

from soundcraft.common.logging import get_logger
from soundcraft.common.logging.correlation import get_correlation_id, get_session_id

logger = get_logger(__name__)


class SoundCraftError(Exception):
    """Base class. Subclasses may lower ``log_level`` for recoverable failures."""

    log_level: int = logging.ERROR

    def __init__(
        self,
        message: str,
        data: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.data = dict(data or {})
        self.cause = cause
        self.correlation_id = get_correlation_id()
        self.session_id = get_session_id()

        payload = {"error_type": type(self).__name__, **self.data}
        if cause is not None:
            payload["cause"] = f"{type(cause).__name__}: {cause}"
        logger.log(self.log_level, message, data=payload)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly form used by the CLI batch output."""
        return {
            "error": type(self).__name__,
            "message": self.message,
            "data": self.data,
            "correlation_id": self.correlation_id,
            "session_id": self.session_id,
            "cause": str(self.cause) if self.cause is not None else None,
        }


class AudioProcessingError(SoundCraftError):
    """Loading or buffer construction failed."""


class AudioLoadError(AudioProcessingError):
    """An audio file or byte stream could not be decoded."""


class InvalidAudioError(AudioProcessingError):
    pass


class TransformError(SoundCraftError):
    """Numeric failure inside a waveform transform."""


class PitchShiftError(TransformError):
    log_level = logging.WARNING


class AnalysisError(SoundCraftError):
    pass


class TaskExecutionError(AnalysisError):
    """An analysis task reported failure, or a stage was wired without its inputs."""


class ConfigurationError(SoundCraftError):
    """Config file unreadable or holding values of the wrong shape."""


class InvalidParameterError(SoundCraftError):
    """Effect or analysis parameter outside its accepted domain."""


class NoAudioLoadedError(SoundCraftError):
    """Session operation requested before any buffer was loaded."""

    log_level = logging.WARNING
