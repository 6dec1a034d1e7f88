"""
Filtering Primitives - Noise gate, gain with hard clipping, peak normalization.

Every function returns a new array of the same length as its input.
"""

import numpy as np
from enum import Enum

from .energy import compute_rms


class NoiseThresholdMode(Enum):
    """How the noise gate threshold scales with the amount."""
    ADAPTIVE = "adaptive"  # amount * RMS of the buffer itself
    FIXED = "fixed"        # amount * constant scale


def noise_threshold(
    y: np.ndarray,
    amount: float,
    mode: NoiseThresholdMode = NoiseThresholdMode.ADAPTIVE,
    energy_factor: float = 0.5,
    fixed_scale: float = 0.02,
    ceiling: float = 0.02,
) -> float:
    """
    Gate threshold for a given reduction amount.

    Monotonic in amount and never above ceiling.

    Args:
        y: Audio samples
        amount: Reduction amount in percent, clamped to [0, 100]
        mode: ADAPTIVE (scaled by buffer RMS) or FIXED
        energy_factor: RMS multiplier in ADAPTIVE mode
        fixed_scale: Threshold at 100% in FIXED mode
        ceiling: Upper bound on the threshold

    Returns:
        Threshold in absolute amplitude units
    """
    amount = float(np.clip(amount, 0.0, 100.0))
    if mode == NoiseThresholdMode.ADAPTIVE:
        base = compute_rms(y) * energy_factor
    else:
        base = fixed_scale
    return float(min(ceiling, (amount / 100.0) * base))


def reduce_noise(
    y: np.ndarray,
    amount: float,
    mode: NoiseThresholdMode = NoiseThresholdMode.ADAPTIVE,
    attenuation: float = 0.5,
    energy_factor: float = 0.5,
    fixed_scale: float = 0.02,
    ceiling: float = 0.02,
) -> np.ndarray:
    """
    Attenuate samples whose magnitude falls below the gate threshold.

    Samples at or above the threshold pass through unchanged, so
    amount == 0 is the identity and the RMS never increases.

    Args:
        y: Audio samples
        amount: Reduction amount in percent (0-100)
        mode: Threshold mode
        attenuation: Factor applied below threshold, 0 <= attenuation < 1
        energy_factor: RMS multiplier in ADAPTIVE mode
        fixed_scale: Threshold at 100% in FIXED mode
        ceiling: Upper bound on the threshold

    Returns:
        Gated copy of y (float32)
    """
    if not 0.0 <= attenuation < 1.0:
        raise ValueError(f"attenuation must be in [0, 1), got {attenuation}")

    y = np.array(y, dtype=np.float32, copy=True)
    if len(y) == 0:
        return y

    threshold = noise_threshold(
        y, amount, mode=mode, energy_factor=energy_factor,
        fixed_scale=fixed_scale, ceiling=ceiling,
    )
    below = np.abs(y) < threshold
    y[below] *= np.float32(attenuation)
    return y


def adjust_volume(y: np.ndarray, gain: float, max_gain: float = 3.0) -> np.ndarray:
    """
    Linear gain followed by hard clipping to [-1, 1].

    Args:
        y: Audio samples
        gain: Requested gain, clamped to [0, max_gain]
        max_gain: Upper gain bound

    Returns:
        Scaled and clipped copy of y (float32)

    Raises:
        ValueError: If gain is NaN or infinite
    """
    if not np.isfinite(gain):
        raise ValueError(f"gain must be finite, got {gain}")

    effective_gain = float(np.clip(gain, 0.0, max_gain))
    y = np.asarray(y, dtype=np.float32)
    return np.clip(y * np.float32(effective_gain), -1.0, 1.0).astype(np.float32)


def normalize_peak(y: np.ndarray, headroom: float = 0.95) -> np.ndarray:
    """
    Scale so the peak absolute amplitude equals headroom.

    Silent input is returned unchanged.

    Args:
        y: Audio samples
        headroom: Target peak

    Returns:
        Normalized copy of y
    """
    y = np.array(y, dtype=np.float64, copy=True)
    if len(y) == 0:
        return y
    peak = float(np.max(np.abs(y)))
    if peak <= 0.0:
        return y
    return y * (headroom / peak)
