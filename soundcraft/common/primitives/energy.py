"""
Energy Primitives - RMS, signal power and normalized loudness.

All functions are pure mathematical operations on numpy arrays and
return 0.0 for empty input instead of dividing by zero.
"""

import numpy as np


# RMS at which normalized amplitude saturates to 1.0
DEFAULT_AMPLITUDE_CEILING = 0.5


def signal_power(y: np.ndarray) -> float:
    """Mean squared amplitude (0.0 for empty input)."""
    y = np.asarray(y, dtype=np.float64)
    if len(y) == 0:
        return 0.0
    return float(np.mean(y ** 2))


def compute_rms(y: np.ndarray) -> float:
    """
    Root-mean-square amplitude of the whole block.

    Args:
        y: Audio samples

    Returns:
        sqrt(mean(y^2)), 0.0 for empty input
    """
    return float(np.sqrt(signal_power(y)))


def normalized_amplitude(y: np.ndarray, ceiling: float = DEFAULT_AMPLITUDE_CEILING) -> float:
    """
    Perceptual loudness in [0, 1].

    RMS divided by a fixed ceiling and clamped, so any block louder than
    the ceiling reads as 1.0. Scaling the input up never lowers the value.

    Args:
        y: Audio samples
        ceiling: RMS mapped to 1.0

    Returns:
        Normalized amplitude in [0, 1]
    """
    if ceiling <= 0:
        raise ValueError(f"ceiling must be positive, got {ceiling}")
    rms = compute_rms(y)
    if not np.isfinite(rms):
        return 0.0
    return float(min(1.0, rms / ceiling))


def frame_energies(y: np.ndarray, frame_length: int) -> np.ndarray:
    """
    Mean squared amplitude of consecutive non-overlapping frames.

    The trailing partial frame is dropped.

    Args:
        y: Audio samples
        frame_length: Samples per frame

    Returns:
        Energy per frame (n_frames,)
    """
    y = np.ascontiguousarray(y, dtype=np.float64)
    if frame_length <= 0 or len(y) < frame_length:
        return np.zeros(0, dtype=np.float64)

    n_frames = len(y) // frame_length
    frames = y[:n_frames * frame_length].reshape(n_frames, frame_length)
    return np.mean(frames ** 2, axis=1)
