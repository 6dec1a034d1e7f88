"""
Pitch Primitives - Harmonic product spectrum with an autocorrelation fallback.

HPS works on the magnitude spectrum and needs fine frequency resolution;
short frames (coarse bins) go through time-domain autocorrelation instead.
Both estimators return 0.0 when no pitch is found.
"""

from typing import Optional

import numpy as np
import scipy.signal

from .spectral import Spectrum, analyze_spectrum, find_peak_indices


def harmonic_product_spectrum(
    magnitudes: np.ndarray,
    n_harmonics: int = 3,
    amplification: float = 1e5,
) -> np.ndarray:
    """
    Harmonic product spectrum.

    hps[i] = m[i] * m[2i] * ... * m[n_harmonics * i] with m = magnitudes *
    amplification. Harmonics that fall past the last bin are skipped, so
    upper bins keep their own (amplified) magnitude.

    Args:
        magnitudes: Magnitude spectrum
        n_harmonics: Number of harmonics multiplied (including the fundamental)
        amplification: Scale applied before multiplying

    Returns:
        HPS array, same length as magnitudes
    """
    m = np.asarray(magnitudes, dtype=np.float64) * amplification
    n = len(m)
    hps = m.copy()
    if n == 0:
        return hps

    base_idx = np.arange(n)
    for h in range(2, n_harmonics + 1):
        idx = base_idx * h
        valid = idx < n
        hps[valid] *= m[idx[valid]]

    return hps


def detect_pitch_hps(
    spectrum: Spectrum,
    min_freq: float = 50.0,
    max_freq: float = 500.0,
    n_harmonics: int = 3,
    amplification: float = 1e5,
    min_hps: float = 1e-3,
    min_relative_salience: float = 0.05,
) -> float:
    """
    Fundamental frequency from a magnitude spectrum.

    Candidates are strict local maxima of the HPS above min_hps whose own
    bin carries at least min_relative_salience of the strongest magnitude.
    The strongest candidate inside [min_freq, max_freq] wins; otherwise the
    strongest candidate overall.

    Args:
        spectrum: Magnitude spectrum
        min_freq: Lower bound of the preferred voice range (Hz)
        max_freq: Upper bound of the preferred voice range (Hz)
        n_harmonics: Harmonics in the product
        amplification: Magnitude scale before the product
        min_hps: HPS salience floor
        min_relative_salience: Fundamental bin floor relative to max magnitude

    Returns:
        Pitch in Hz, 0.0 if there are no candidates
    """
    if spectrum.is_empty:
        return 0.0

    mags = spectrum.magnitudes
    peak_mag = float(np.max(mags))
    if peak_mag <= 0.0:
        return 0.0

    hps = harmonic_product_spectrum(mags, n_harmonics=n_harmonics, amplification=amplification)
    candidates = find_peak_indices(hps, min_hps)
    candidates = candidates[mags[candidates] >= min_relative_salience * peak_mag]
    if len(candidates) == 0:
        return 0.0

    # Stable so equal HPS values keep ascending frequency order
    order = np.argsort(-hps[candidates], kind='stable')
    ranked = spectrum.frequencies[candidates[order]]

    in_range = ranked[(ranked >= min_freq) & (ranked <= max_freq)]
    if len(in_range) > 0:
        return float(in_range[0])
    return float(ranked[0])


def autocorrelation(y: np.ndarray) -> np.ndarray:
    """
    Raw (unnormalized) autocorrelation for non-negative lags.

    r[lag] = sum(y[i] * y[i + lag])

    Args:
        y: Audio samples

    Returns:
        r of length len(y)
    """
    y = np.asarray(y, dtype=np.float64)
    if len(y) == 0:
        return np.zeros(0, dtype=np.float64)
    full = scipy.signal.correlate(y, y, mode='full', method='auto')
    return full[len(y) - 1:]


def autocorrelation_peak_lag(y: np.ndarray, min_lag: int, max_lag: int) -> int:
    """
    Lag in [min_lag, max_lag] with the largest positive autocorrelation.

    Args:
        y: Audio samples
        min_lag: Shortest lag considered (>= 1)
        max_lag: Longest lag considered, capped at len(y) - 1

    Returns:
        Best lag, or 0 when no lag has positive correlation
    """
    min_lag = max(1, int(min_lag))
    max_lag = min(int(max_lag), len(y) - 1)
    if max_lag < min_lag:
        return 0

    r = autocorrelation(y)[min_lag:max_lag + 1]
    best = int(np.argmax(r))
    if r[best] <= 0.0:
        return 0
    return min_lag + best


def detect_pitch_autocorrelation(
    y: np.ndarray,
    sr: int,
    min_freq: float = 50.0,
    max_freq: float = 500.0,
) -> float:
    """
    Pitch from the autocorrelation peak between sr/max_freq and sr/min_freq.

    Args:
        y: Audio samples
        sr: Sample rate
        min_freq: Lowest detectable pitch (Hz)
        max_freq: Highest detectable pitch (Hz)

    Returns:
        Pitch in Hz, 0.0 if no periodicity is found
    """
    if sr <= 0 or len(y) < 2:
        return 0.0
    lag = autocorrelation_peak_lag(y, int(sr / max_freq), int(sr / min_freq))
    if lag == 0:
        return 0.0
    return float(sr / lag)


def uses_hps(spectrum: Spectrum, max_bin_width_hz: float = 10.0) -> bool:
    """True when ``spectrum`` is fine enough for the HPS estimator."""
    return not spectrum.is_empty and spectrum.bin_width_hz <= max_bin_width_hz


def detect_pitch(
    y: np.ndarray,
    sr: int,
    min_freq: float = 50.0,
    max_freq: float = 500.0,
    n_harmonics: int = 3,
    amplification: float = 1e5,
    min_hps: float = 1e-3,
    min_relative_salience: float = 0.05,
    max_bin_width_hz: float = 10.0,
    spectrum: Optional[Spectrum] = None,
) -> float:
    """
    Estimate the fundamental frequency of a sample block.

    HPS over the whole block, falling back to autocorrelation when the
    block is too short for a usable spectrum (empty, or bins wider than
    max_bin_width_hz). Pass ``spectrum`` to reuse an already computed
    spectrum of ``y``.

    Returns:
        Pitch in Hz (0.0 for silence, empty input or sr <= 0)
    """
    y = np.asarray(y, dtype=np.float32)
    if sr <= 0 or len(y) == 0:
        return 0.0

    if spectrum is None:
        spectrum = analyze_spectrum(y, sr)
    if not uses_hps(spectrum, max_bin_width_hz):
        return detect_pitch_autocorrelation(y, sr, min_freq=min_freq, max_freq=max_freq)

    return detect_pitch_hps(
        spectrum,
        min_freq=min_freq,
        max_freq=max_freq,
        n_harmonics=n_harmonics,
        amplification=amplification,
        min_hps=min_hps,
        min_relative_salience=min_relative_salience,
    )
