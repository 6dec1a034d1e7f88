"""
Pytest configuration for soundcraft tests.

Automatically adds project root to sys.path so that 'from soundcraft...'
and 'import main' work without installing the package.
Defines markers and shared fixtures.
"""
import sys
import numpy as np
import pytest
from pathlib import Path
from typing import Tuple

import soundfile as sf

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


# =============================================================================
# Pytest Markers
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "invariant: Mathematical invariant tests")
    config.addinivalue_line("markers", "e2e: End-to-end integration tests")
    config.addinivalue_line("markers", "slow: Slow tests")


# =============================================================================
# Signal helpers
# =============================================================================

def make_sine(
    freq: float,
    sr: int = 16000,
    duration: float = 1.0,
    amplitude: float = 0.5,
) -> np.ndarray:
    """Pure sine as float32."""
    t = np.arange(int(sr * duration)) / sr
    return (amplitude * np.sin(2 * np.pi * freq * t)).astype(np.float32)


# =============================================================================
# Shared Fixtures
# =============================================================================

@pytest.fixture
def project_root() -> Path:
    """Return project root path."""
    return PROJECT_ROOT


@pytest.fixture
def sine_220() -> Tuple[np.ndarray, int]:
    """1 second 220 Hz sine at 16 kHz, amplitude 0.5."""
    sr = 16000
    return make_sine(220.0, sr=sr), sr


@pytest.fixture
def sine_sweep() -> Tuple[np.ndarray, int]:
    """1 second linear sweep 100 -> 1000 Hz at 16 kHz, constant amplitude 0.3."""
    from scipy.signal import chirp

    sr = 16000
    t = np.arange(sr) / sr
    y = 0.3 * chirp(t, f0=100.0, t1=1.0, f1=1000.0, method='linear')
    return y.astype(np.float32), sr


@pytest.fixture
def noisy_voice_like() -> Tuple[np.ndarray, int]:
    """2 seconds of a 180 Hz harmonic tone with light noise at 22.05 kHz."""
    rng = np.random.default_rng(42)
    sr = 22050
    t = np.arange(int(2.0 * sr)) / sr
    y = (
        0.30 * np.sin(2 * np.pi * 180 * t) +
        0.15 * np.sin(2 * np.pi * 360 * t) +
        0.08 * np.sin(2 * np.pi * 540 * t) +
        0.01 * rng.standard_normal(len(t))
    ).astype(np.float32)
    return y, sr


@pytest.fixture
def silence() -> Tuple[np.ndarray, int]:
    """1 second of digital silence at 16 kHz."""
    sr = 16000
    return np.zeros(sr, dtype=np.float32), sr


@pytest.fixture
def sample_buffer(sine_220):
    """SampleBuffer over the 220 Hz sine."""
    from soundcraft.common.types import SampleBuffer

    y, sr = sine_220
    return SampleBuffer.from_array(y, sr)


@pytest.fixture
def wav_file(tmp_path, sine_220) -> Path:
    """220 Hz sine written as a 16-bit WAV file."""
    y, sr = sine_220
    path = tmp_path / "sine_220.wav"
    sf.write(str(path), y, sr, subtype='PCM_16')
    return path


@pytest.fixture
def stereo_wav_file(tmp_path) -> Path:
    """Stereo WAV: 220 Hz on the left channel, silence on the right."""
    sr = 16000
    left = make_sine(220.0, sr=sr, amplitude=0.8)
    stereo = np.stack([left, np.zeros_like(left)], axis=1)
    path = tmp_path / "stereo.wav"
    sf.write(str(path), stereo, sr, subtype='PCM_16')
    return path
