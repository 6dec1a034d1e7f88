"""
Clarity Task - How clean and articulate a clip sounds.

Two sub-scores, both in [0, 1]:
- snr: signal power against the residual energy left below the noise
  floor after noise reduction, on a log scale
- distinctness: mean spacing between spectral peaks, so widely spread
  partials read as clearer than a smeared spectrum

clarity = snr_weight * snr + distinctness_weight * distinctness
"""

import numpy as np
from dataclasses import dataclass
from typing import Dict, Any, Optional

from .base import AudioContext, TaskResult, BaseTask
from soundcraft.common.primitives import (
    Spectrum,
    analyze_spectrum,
    find_spectral_peaks,
    reduce_noise,
    signal_power,
)
from soundcraft.modules.analysis.config import ClarityConfig, NoiseReductionConfig


def _clamp01(x: float) -> float:
    return float(min(1.0, max(0.0, x)))


def snr_score(
    y: np.ndarray,
    config: Optional[ClarityConfig] = None,
    noise_config: Optional[NoiseReductionConfig] = None,
) -> float:
    """
    Log-scaled signal-to-noise score.

    Noise power is the energy of noise-reduced samples whose magnitude is
    still under noise_floor, averaged over the full clip length.

    Returns:
        Score in [0, 1] (0.0 for empty input)
    """
    config = config or ClarityConfig()
    noise_config = noise_config or NoiseReductionConfig()
    y = np.asarray(y, dtype=np.float32)
    if len(y) == 0:
        return 0.0

    power = signal_power(y)
    cleaned = reduce_noise(
        y,
        config.noise_reduction_amount,
        mode=noise_config.mode,
        attenuation=noise_config.attenuation,
        energy_factor=noise_config.energy_factor,
        fixed_scale=noise_config.fixed_scale,
        ceiling=noise_config.ceiling,
    ).astype(np.float64)

    residual = cleaned[np.abs(cleaned) < config.noise_floor]
    noise_power = float(np.sum(residual ** 2)) / len(y)

    snr = power / (noise_power + config.epsilon)
    return _clamp01(np.log10(snr + 1.0) / 2.0)


def distinctness_score(spectrum: Spectrum, config: Optional[ClarityConfig] = None) -> float:
    """
    Mean gap between consecutive spectral peaks, normalized.

    Returns:
        Score in [0, 1]; 0.0 with fewer than two peaks
    """
    config = config or ClarityConfig()
    peaks = find_spectral_peaks(spectrum, config.peak_min_magnitude)
    if len(peaks) < 2:
        return 0.0
    mean_gap = float(np.mean(np.abs(np.diff(peaks))))
    return _clamp01(mean_gap / config.peak_spacing_norm_hz)


def compute_clarity(
    y: np.ndarray,
    sr: int,
    config: Optional[ClarityConfig] = None,
    noise_config: Optional[NoiseReductionConfig] = None,
    spectrum: Optional[Spectrum] = None,
) -> float:
    """
    Combined clarity score in [0, 1].

    Args:
        y: Audio samples
        sr: Sample rate
        config: Clarity constants
        noise_config: Noise gate used for the SNR estimate
        spectrum: Precomputed spectrum of y

    Returns:
        Clarity (0.0 for empty input)
    """
    config = config or ClarityConfig()
    if len(y) == 0 or sr <= 0:
        return 0.0
    if spectrum is None:
        spectrum = analyze_spectrum(y, sr)

    snr = snr_score(y, config, noise_config)
    distinct = distinctness_score(spectrum, config)
    return _clamp01(config.snr_weight * snr + config.distinctness_weight * distinct)


@dataclass
class ClarityResult(TaskResult):
    """
    Result of clarity scoring.

    Attributes:
        clarity: Combined score
        snr_score: Noise sub-score
        distinctness_score: Peak-spacing sub-score
    """
    success: bool = True
    task_name: str = "Clarity"
    processing_time_sec: float = 0.0
    error: Optional[str] = None

    clarity: float = 0.0
    snr_score: float = 0.0
    distinctness_score: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        base = super().to_dict()
        base.update({
            'clarity': float(self.clarity),
            'snr_score': float(self.snr_score),
            'distinctness_score': float(self.distinctness_score),
        })
        return base


class ClarityTask(BaseTask):
    """Score clarity of the context buffer."""

    @property
    def name(self) -> str:
        return "Clarity"

    def execute(self, context: AudioContext) -> ClarityResult:
        config = context.config.clarity
        if context.buffer.is_empty:
            return ClarityResult()

        snr = snr_score(context.y, config, context.config.noise_reduction)
        distinct = distinctness_score(context.spectrum, config)
        clarity = _clamp01(config.snr_weight * snr + config.distinctness_weight * distinct)

        return ClarityResult(
            clarity=clarity,
            snr_score=snr,
            distinctness_score=distinct,
        )
