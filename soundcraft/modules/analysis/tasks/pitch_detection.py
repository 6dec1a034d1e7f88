"""
Pitch Detection Task - Fundamental frequency of a whole clip.

Harmonic product spectrum over the shared context spectrum, with the
autocorrelation estimator for clips too short for fine frequency bins.
"""

from dataclasses import dataclass
from typing import Dict, Any, Optional

from .base import AudioContext, TaskResult, BaseTask
from soundcraft.common.primitives import detect_pitch, uses_hps


@dataclass
class PitchDetectionResult(TaskResult):
    """
    Result of pitch detection.

    Attributes:
        pitch_hz: Fundamental frequency (0.0 = none found)
        method: 'hps', 'autocorrelation' or 'none'
    """
    success: bool = True
    task_name: str = "PitchDetection"
    processing_time_sec: float = 0.0
    error: Optional[str] = None

    pitch_hz: float = 0.0
    method: str = "none"

    def to_dict(self) -> Dict[str, Any]:
        base = super().to_dict()
        base.update({
            'pitch_hz': float(self.pitch_hz),
            'method': self.method,
        })
        return base


class PitchDetectionTask(BaseTask):
    """Detect the dominant fundamental frequency of the context buffer."""

    @property
    def name(self) -> str:
        return "PitchDetection"

    def execute(self, context: AudioContext) -> PitchDetectionResult:
        config = context.config.pitch
        if context.buffer.is_empty:
            return PitchDetectionResult(pitch_hz=0.0, method="none")

        spectrum = context.spectrum
        pitch = detect_pitch(
            context.y,
            context.sr,
            min_freq=config.min_freq,
            max_freq=config.max_freq,
            n_harmonics=config.n_harmonics,
            amplification=config.amplification,
            min_hps=config.min_hps,
            min_relative_salience=config.min_relative_salience,
            max_bin_width_hz=config.max_bin_width_hz,
            spectrum=spectrum,
        )

        if pitch <= 0:
            method = "none"
        elif uses_hps(spectrum, config.max_bin_width_hz):
            method = "hps"
        else:
            method = "autocorrelation"
        return PitchDetectionResult(pitch_hz=pitch, method=method)
