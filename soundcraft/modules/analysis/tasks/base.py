"""
Task layer building blocks.

A task reads an AudioContext and returns a TaskResult subclass. The
context owns the buffer, the analysis constants and the whole-buffer
spectrum, which is computed once and shared by every task that needs it.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Union

import numpy as np

from soundcraft.common.logging import get_logger
from soundcraft.common.primitives import Spectrum, analyze_spectrum
from soundcraft.common.types import SampleBuffer
from soundcraft.modules.analysis.config import AnalysisConfig

logger = get_logger(__name__)

# (stage, fraction done in [0, 1], message)
ProgressCallback = Callable[[str, float, str], None]


@dataclass
class AudioContext:
    """
    Everything a task may look at for one clip.

    Attributes:
        buffer: Mono, read-only samples
        config: Analysis constants
        file_path: Source label for logs
        progress_callback: Receives stage progress from the pipeline
    """
    buffer: SampleBuffer
    config: AnalysisConfig = field(default_factory=AnalysisConfig)
    file_path: Optional[str] = None
    progress_callback: Optional[ProgressCallback] = None
    _spectrum: Optional[Spectrum] = field(default=None, init=False, repr=False)

    @property
    def y(self) -> np.ndarray:
        return self.buffer.samples

    @property
    def sr(self) -> int:
        return self.buffer.sample_rate

    @property
    def duration_sec(self) -> float:
        return self.buffer.duration_sec

    @property
    def spectrum(self) -> Spectrum:
        """Magnitude spectrum of the whole buffer, cached after first use."""
        if self._spectrum is None:
            self._spectrum = analyze_spectrum(self.y, self.sr)
        return self._spectrum

    def report_progress(self, stage: str, progress: float, message: str = "") -> None:
        if self.progress_callback is not None:
            self.progress_callback(stage, progress, message)


def create_audio_context(
    y: Union[np.ndarray, SampleBuffer],
    sr: int,
    config: Optional[AnalysisConfig] = None,
    file_path: Optional[str] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> AudioContext:
    """
    Wrap samples (or an existing SampleBuffer) for task execution.

    ``sr`` is ignored when ``y`` is already a SampleBuffer.

        >>> buffer = AudioLoader().load("voice.wav")
        >>> ctx = create_audio_context(buffer, buffer.sample_rate)
        >>> PitchDetectionTask().execute(ctx).pitch_hz
    """
    buffer = y if isinstance(y, SampleBuffer) else SampleBuffer.from_array(y, sr)
    return AudioContext(
        buffer=buffer,
        config=config if config is not None else AnalysisConfig(),
        file_path=file_path,
        progress_callback=progress_callback,
    )


@dataclass
class TaskResult:
    """
    Common fields of every task output.

    Subclasses give these fields defaults and append their own outputs.
    ``processing_time_sec`` is filled in by BaseTask.execute_timed.
    """
    success: bool
    task_name: str
    processing_time_sec: float
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': self.success,
            'task_name': self.task_name,
            'processing_time_sec': round(self.processing_time_sec, 6),
            'error': self.error,
        }


class BaseTask(ABC):
    """
    One analysis step over an AudioContext.

        class LoudnessTask(BaseTask):
            def execute(self, context):
                return LoudnessResult(rms=compute_rms(context.y))
    """

    @property
    def name(self) -> str:
        return self.__class__.__name__

    @abstractmethod
    def execute(self, context: AudioContext) -> TaskResult:
        """Run the task. May raise; execute_timed converts that to a failed result."""

    def execute_timed(self, context: AudioContext) -> TaskResult:
        """
        execute() with timing.

        An exception from execute() is logged and returned as a TaskResult
        with ``success=False`` and the exception text in ``error``.
        """
        started = time.perf_counter()
        try:
            result = self.execute(context)
        except Exception as e:
            logger.warning(
                f"{self.name} failed",
                data={"task": self.name, "error_type": type(e).__name__, "error": str(e)},
            )
            result = TaskResult(success=False, task_name=self.name, processing_time_sec=0.0, error=str(e))
        result.processing_time_sec = time.perf_counter() - started
        return result

    def __repr__(self) -> str:
        return f"<{self.name}>"
