"""
Vocoder Primitives - Phase-vocoder pitch shifting.

Frames are read from the input at a hop scaled by the pitch factor and
written at a fixed synthesis hop, so the output holds len(y) / factor
samples. Each frame's bins are moved to k * factor and their phases are
advanced from the measured (true) bin frequencies, which keeps overlapping
frames phase-continuous.

State (the running synthesis phase) lives in local arrays of one call.
"""

import numpy as np

from soundcraft.core.errors import PitchShiftError

from .filtering import normalize_peak
from .spectral import complex_spectrum, inverse_spectrum
from .windowing import hann_window


IDENTITY_TOLERANCE = 1e-3


def pitch_factor(semitones: float) -> float:
    """Frequency ratio for a shift in semitones (2^(s/12))."""
    return float(2.0 ** (semitones / 12.0))


def shifted_length(n: int, semitones: float) -> int:
    """Number of output samples for an n-sample input."""
    if abs(semitones) < IDENTITY_TOLERANCE:
        return int(n)
    return int(round(n / pitch_factor(semitones)))


def _wrap_phase(phase: np.ndarray) -> np.ndarray:
    """Wrap to [-pi, pi)."""
    return (phase + np.pi) % (2.0 * np.pi) - np.pi


def _shift_frames(
    y: np.ndarray,
    factor: float,
    n_out: int,
    window_size: int,
    hop: int,
) -> np.ndarray:
    n = len(y)
    n_bins = window_size // 2 + 1
    window = hann_window(window_size).astype(np.float64)

    # Radians per sample at each bin centre
    omega = 2.0 * np.pi * np.arange(n_bins) / window_size

    targets = np.round(np.arange(n_bins) * factor).astype(np.int64)
    valid = targets < n_bins
    src_bins = np.flatnonzero(valid)
    dst_bins = targets[valid]

    padded = np.concatenate([y, np.zeros(window_size, dtype=np.float64)])
    output = np.zeros(n_out + window_size, dtype=np.float64)

    synth_phase = np.zeros(n_bins, dtype=np.float64)
    prev_phase = None
    prev_start = 0

    m = 0
    while m * hop < n_out:
        start = min(int(round(m * hop * factor)), n - 1)
        frame = padded[start:start + window_size] * window

        X = complex_spectrum(frame)
        magnitude = np.abs(X)
        phase = np.angle(X)

        analysis_hop = start - prev_start
        if prev_phase is None or analysis_hop <= 0:
            true_freq = omega
        else:
            deviation = _wrap_phase(phase - prev_phase - omega * analysis_hop)
            true_freq = omega + deviation / analysis_hop

        shifted_mag = np.zeros(n_bins, dtype=np.float64)
        np.add.at(shifted_mag, dst_bins, magnitude[src_bins])

        if prev_phase is None:
            synth_phase[dst_bins] = phase[src_bins]
        else:
            advance = np.zeros(n_bins, dtype=np.float64)
            advance[dst_bins] = true_freq[src_bins] * factor * hop
            synth_phase = synth_phase + advance

        Y = shifted_mag * np.exp(1j * synth_phase)
        out_frame = np.real(inverse_spectrum(Y, window_size)) * window

        pos = m * hop
        output[pos:pos + window_size] += out_frame

        prev_phase = phase
        prev_start = start
        m += 1

    return output[:n_out] / window_size


def pitch_shift(
    y: np.ndarray,
    semitones: float,
    sr: int,
    window_size: int = 2048,
    hop_divisor: int = 8,
    max_semitones: float = 24.0,
    headroom: float = 0.95,
) -> np.ndarray:
    """
    Shift pitch by a number of semitones with a phase vocoder.

    Output length is round(len(y) / 2^(s/12)); the sample rate is unchanged.
    A shift below IDENTITY_TOLERANCE returns an unmodified copy. Non-silent
    output is peak-normalized to headroom.

    Args:
        y: Audio samples (mono)
        semitones: Shift amount, clamped to [-max_semitones, max_semitones]
        sr: Sample rate (carried through, not used by the transform)
        window_size: Analysis/synthesis window, power of two
        hop_divisor: Synthesis hop is window_size // hop_divisor
        max_semitones: Clamp bound
        headroom: Target peak of the output

    Returns:
        Shifted samples (float32)

    Raises:
        PitchShiftError: If the transform fails or yields non-finite samples
    """
    y = np.asarray(y, dtype=np.float64)

    if not np.isfinite(semitones):
        raise PitchShiftError(
            f"Semitone shift must be finite, got {semitones}",
            data={"semitones": str(semitones)},
        )
    semitones = float(np.clip(semitones, -max_semitones, max_semitones))

    if abs(semitones) < IDENTITY_TOLERANCE or len(y) == 0:
        return y.astype(np.float32, copy=True)

    if window_size < 2 or window_size & (window_size - 1):
        raise PitchShiftError(
            f"Window size must be a power of two, got {window_size}",
            data={"window_size": window_size},
        )

    factor = pitch_factor(semitones)
    n_out = max(1, shifted_length(len(y), semitones))
    hop = max(1, window_size // hop_divisor)

    try:
        shifted = _shift_frames(y, factor, n_out, window_size, hop)
        shifted = normalize_peak(shifted, headroom=headroom)
    except Exception as e:
        raise PitchShiftError(
            f"Pitch shift by {semitones:+.2f} semitones failed: {e}",
            data={"semitones": semitones, "n_samples": len(y), "sample_rate": sr},
            cause=e,
        ) from e

    if not np.all(np.isfinite(shifted)):
        raise PitchShiftError(
            "Pitch shift produced non-finite samples",
            data={"semitones": semitones, "n_samples": len(y), "sample_rate": sr},
        )

    return shifted.astype(np.float32)
