"""
Primitives - Pure math functions (numpy/scipy only).

- windowing  - Hann window
- spectral   - Magnitude spectrum, peak picking
- energy     - RMS, normalized amplitude
- filtering  - Noise gate, volume, peak normalization
- pitch      - HPS and autocorrelation pitch
- vocoder    - Phase-vocoder pitch shift
"""

from .windowing import hann_window, apply_window
from .spectral import (
    MIN_FFT_SIZE,
    Spectrum,
    analyze_spectrum,
    complex_spectrum,
    inverse_spectrum,
    find_peak_indices,
    find_spectral_peaks,
    largest_power_of_two,
)
from .energy import compute_rms, signal_power, normalized_amplitude, frame_energies
from .filtering import (
    NoiseThresholdMode,
    noise_threshold,
    reduce_noise,
    adjust_volume,
    normalize_peak,
)
from .pitch import (
    harmonic_product_spectrum,
    detect_pitch_hps,
    autocorrelation,
    autocorrelation_peak_lag,
    detect_pitch_autocorrelation,
    uses_hps,
    detect_pitch,
)
from .vocoder import pitch_factor, shifted_length, pitch_shift

__all__ = [
    'hann_window',
    'apply_window',
    'MIN_FFT_SIZE',
    'Spectrum',
    'analyze_spectrum',
    'complex_spectrum',
    'inverse_spectrum',
    'find_peak_indices',
    'find_spectral_peaks',
    'largest_power_of_two',
    'compute_rms',
    'signal_power',
    'normalized_amplitude',
    'frame_energies',
    'NoiseThresholdMode',
    'noise_threshold',
    'reduce_noise',
    'adjust_volume',
    'normalize_peak',
    'harmonic_product_spectrum',
    'detect_pitch_hps',
    'autocorrelation',
    'autocorrelation_peak_lag',
    'detect_pitch_autocorrelation',
    'uses_hps',
    'detect_pitch',
    'pitch_factor',
    'shifted_length',
    'pitch_shift',
]
