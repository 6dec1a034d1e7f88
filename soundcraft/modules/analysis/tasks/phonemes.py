"""
Phoneme Task - Coarse vowel-like symbols from frame frequencies.

The clip is cut into non-overlapping fixed-duration frames. Frames louder
than the energy threshold get a frequency estimate (dominant FFT bin or
autocorrelation peak), which is looked up in an ordered band table. The
result keeps first occurrences only, up to max_symbols.

This is not phoneme recognition; symbols are labels for frequency bands.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional, Tuple

from .base import AudioContext, TaskResult, BaseTask
from soundcraft.common.logging import get_logger
from soundcraft.common.primitives import analyze_spectrum, autocorrelation_peak_lag, frame_energies
from soundcraft.modules.analysis.config import FrequencyMethod, PhonemeConfig

logger = get_logger(__name__)


def frame_frequency(frame: np.ndarray, sr: int, config: PhonemeConfig) -> Optional[float]:
    """
    Frequency estimate of one frame.

    Returns:
        Frequency in Hz, or None when the frame gives no estimate
    """
    if config.method == FrequencyMethod.DOMINANT_BIN:
        spectrum = analyze_spectrum(frame, sr)
        if spectrum.is_empty:
            return None
        return spectrum.dominant_frequency()

    lag = autocorrelation_peak_lag(frame, config.min_lag, len(frame) // 2 - 1)
    if lag == 0:
        return None
    return sr / lag


def classify_phonemes(
    y: np.ndarray,
    sr: int,
    config: Optional[PhonemeConfig] = None,
) -> Tuple[str, ...]:
    """
    Coarse phoneme symbols for a clip.

    Args:
        y: Audio samples
        sr: Sample rate
        config: Alphabet preset and thresholds

    Returns:
        Deduplicated symbols in first-occurrence order, at most
        config.max_symbols long; config.fallback when nothing matched
    """
    config = config or PhonemeConfig()
    symbols = _collect_symbols(np.asarray(y, dtype=np.float32), sr, config)
    if not symbols:
        return config.fallback
    return tuple(symbols)


def _collect_symbols(y: np.ndarray, sr: int, config: PhonemeConfig) -> List[str]:
    if sr <= 0:
        return []
    frame_len = int(sr * config.frame_duration_sec)
    if frame_len <= 0 or len(y) <= frame_len:
        return []

    # Only frames that start strictly before len(y) - frame_len are used
    n_frames = (len(y) - frame_len - 1) // frame_len + 1
    energies = frame_energies(y[:n_frames * frame_len], frame_len)

    symbols: List[str] = []
    analysed = 0
    for idx in np.flatnonzero(energies > config.energy_threshold):
        if config.max_frames is not None and analysed >= config.max_frames:
            break
        analysed += 1

        start = int(idx) * frame_len
        freq = frame_frequency(y[start:start + frame_len], sr, config)
        if freq is None:
            continue

        band = config.band_for(freq)
        if band is None or band.symbol in symbols:
            continue
        symbols.append(band.symbol)
        if len(symbols) >= config.max_symbols:
            break

    return symbols


@dataclass
class PhonemeResult(TaskResult):
    """
    Result of phoneme classification.

    Attributes:
        phonemes: Detected symbols (or the fallback)
        used_fallback: True when no frame matched a band
        expressive: True when any symbol is flagged expressive
    """
    success: bool = True
    task_name: str = "Phonemes"
    processing_time_sec: float = 0.0
    error: Optional[str] = None

    phonemes: Tuple[str, ...] = field(default_factory=tuple)
    used_fallback: bool = False
    expressive: bool = False

    def to_dict(self) -> Dict[str, Any]:
        base = super().to_dict()
        base.update({
            'phonemes': list(self.phonemes),
            'used_fallback': self.used_fallback,
            'expressive': self.expressive,
        })
        return base


class PhonemeTask(BaseTask):
    """Classify coarse phonemes of the context buffer."""

    @property
    def name(self) -> str:
        return "Phonemes"

    def execute(self, context: AudioContext) -> PhonemeResult:
        config = context.config.phonemes
        symbols = _collect_symbols(context.y, context.sr, config)
        used_fallback = not symbols
        phonemes = config.fallback if used_fallback else tuple(symbols)

        if used_fallback:
            logger.debug("No voiced frames matched a band, using fallback",
                         data={"fallback": list(config.fallback)})

        expressive_symbols = config.expressive_symbols
        return PhonemeResult(
            phonemes=phonemes,
            used_fallback=used_fallback,
            expressive=any(p in expressive_symbols for p in phonemes),
        )
