"""Loudness Task - RMS and normalized amplitude of a clip."""

from dataclasses import dataclass
from typing import Dict, Any, Optional

from .base import AudioContext, TaskResult, BaseTask
from soundcraft.common.primitives import compute_rms, normalized_amplitude


@dataclass
class LoudnessResult(TaskResult):
    """
    Result of loudness measurement.

    Attributes:
        rms: Root-mean-square amplitude
        amplitude: RMS normalized to [0, 1]
    """
    success: bool = True
    task_name: str = "Loudness"
    processing_time_sec: float = 0.0
    error: Optional[str] = None

    rms: float = 0.0
    amplitude: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        base = super().to_dict()
        base.update({
            'rms': float(self.rms),
            'amplitude': float(self.amplitude),
        })
        return base


class LoudnessTask(BaseTask):
    """Measure how loud the clip is."""

    @property
    def name(self) -> str:
        return "Loudness"

    def execute(self, context: AudioContext) -> LoudnessResult:
        ceiling = context.config.amplitude.ceiling
        return LoudnessResult(
            rms=compute_rms(context.y),
            amplitude=normalized_amplitude(context.y, ceiling=ceiling),
        )
