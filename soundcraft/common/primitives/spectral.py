"""
Spectral Primitives - Power-of-two FFT magnitude spectrum and peak picking.

The magnitude spectrum is the foundation for pitch detection, clarity
scoring and phoneme banding. The complex helpers are shared with the
phase vocoder so that analysis and resynthesis use one transform.

Contract of analyze_spectrum():
    - window the whole block, then keep the first 2^k samples
      (largest power of two <= len); no zero padding
    - magnitude[i] = |X[i]| / (n_fft / 2), first n_fft / 2 bins only
    - NaN magnitudes become 0
    - blocks shorter than MIN_FFT_SIZE give an empty Spectrum
"""

import numpy as np
import scipy.fft
from dataclasses import dataclass

from .windowing import apply_window


MIN_FFT_SIZE = 32


@dataclass(frozen=True, eq=False)
class Spectrum:
    """
    Magnitude spectrum of one sample block.

    Attributes:
        frequencies: Bin centre frequencies in Hz, ascending (n_fft / 2,)
        magnitudes: Non-negative magnitudes, same length
        fft_size: Transform size used (0 for an empty spectrum)
        sample_rate: Sample rate of the analysed block
    """
    frequencies: np.ndarray
    magnitudes: np.ndarray
    fft_size: int = 0
    sample_rate: int = 0

    @classmethod
    def empty(cls, sample_rate: int = 0) -> 'Spectrum':
        return cls(
            frequencies=np.zeros(0, dtype=np.float64),
            magnitudes=np.zeros(0, dtype=np.float64),
            fft_size=0,
            sample_rate=sample_rate,
        )

    def __len__(self) -> int:
        return int(self.frequencies.shape[0])

    @property
    def is_empty(self) -> bool:
        return len(self) == 0

    @property
    def bin_width_hz(self) -> float:
        """Frequency resolution (0.0 for an empty spectrum)."""
        if self.fft_size == 0:
            return 0.0
        return self.sample_rate / self.fft_size

    def dominant_frequency(self) -> float:
        """Frequency of the strongest bin (0.0 if empty)."""
        if self.is_empty:
            return 0.0
        return float(self.frequencies[int(np.argmax(self.magnitudes))])

    def top_bins(self, k: int = 5) -> list:
        """Strongest k bins as (frequency, magnitude) pairs, strongest first."""
        if self.is_empty or k <= 0:
            return []
        order = np.argsort(-self.magnitudes, kind='stable')[:k]
        return [(float(self.frequencies[i]), float(self.magnitudes[i])) for i in order]

    def to_dict(self) -> dict:
        return {
            'frequencies': self.frequencies.tolist(),
            'magnitudes': self.magnitudes.tolist(),
            'fft_size': self.fft_size,
            'sample_rate': self.sample_rate,
        }


def largest_power_of_two(n: int) -> int:
    """Largest power of two <= n (0 for n < 1)."""
    if n < 1:
        return 0
    return 1 << (int(n).bit_length() - 1)


def analyze_spectrum(y: np.ndarray, sr: int) -> Spectrum:
    """
    Compute the magnitude spectrum of a sample block.

    Args:
        y: Sample block (mono)
        sr: Sample rate in Hz

    Returns:
        Spectrum with n_fft / 2 bins, or Spectrum.empty() for blocks
        shorter than MIN_FFT_SIZE or a non-positive sample rate
    """
    y = np.asarray(y, dtype=np.float32)
    if sr <= 0 or len(y) < MIN_FFT_SIZE:
        return Spectrum.empty(sample_rate=max(int(sr), 0))

    windowed = apply_window(y)
    n_fft = largest_power_of_two(len(windowed))
    signal = windowed[:n_fft]

    phasors = scipy.fft.fft(signal.astype(np.float64))
    half = n_fft // 2

    frequencies = np.arange(half, dtype=np.float64) * sr / n_fft
    magnitudes = np.abs(phasors[:half]) / half
    magnitudes = np.nan_to_num(magnitudes, nan=0.0, posinf=0.0, neginf=0.0)

    return Spectrum(
        frequencies=frequencies,
        magnitudes=magnitudes,
        fft_size=n_fft,
        sample_rate=int(sr),
    )


def complex_spectrum(frame: np.ndarray) -> np.ndarray:
    """Complex one-sided spectrum (n // 2 + 1 bins) of a windowed frame."""
    return scipy.fft.rfft(np.asarray(frame, dtype=np.float64))


def inverse_spectrum(X: np.ndarray, n: int) -> np.ndarray:
    """Real time-domain frame of length n from a one-sided spectrum."""
    return scipy.fft.irfft(X, n=n)


def find_peak_indices(values: np.ndarray, min_value: float = 0.0) -> np.ndarray:
    """
    Indices of strict local maxima above min_value, ascending.

    values[i] > values[i-1] and values[i] > values[i+1] and values[i] > min_value;
    the first and last element are never peaks.

    Args:
        values: 1-D array
        min_value: Salience floor

    Returns:
        Integer index array
    """
    values = np.asarray(values)
    if len(values) < 3:
        return np.zeros(0, dtype=np.int64)

    mid = values[1:-1]
    mask = (mid > values[:-2]) & (mid > values[2:]) & (mid > min_value)
    return np.flatnonzero(mask) + 1


def find_spectral_peaks(spectrum: Spectrum, min_magnitude: float = 0.001) -> np.ndarray:
    """
    Frequencies of local magnitude maxima above min_magnitude, ascending.

    Args:
        spectrum: Magnitude spectrum
        min_magnitude: Salience floor

    Returns:
        Peak frequencies in Hz
    """
    if spectrum.is_empty:
        return np.zeros(0, dtype=np.float64)
    idx = find_peak_indices(spectrum.magnitudes, min_magnitude)
    return spectrum.frequencies[idx]
