"""
Analysis module configuration.

Centralized constants for all analysis tasks, effects and the phase vocoder.
Every value here is an empirical tuning default and can be overridden from
YAML through AnalysisConfig.from_config(). Phoneme band tables and emotion
prototypes are plain data so new alphabets or emotions need no code changes.
"""

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from soundcraft.common.primitives.filtering import NoiseThresholdMode
from soundcraft.core.errors import ConfigurationError


class PhonemeAlphabet(Enum):
    """Phoneme symbol set presets."""
    VOWEL = "vowel"    # a e i o u r, dominant FFT bin per frame
    COARSE = "coarse"  # ah ee oo, autocorrelation per frame


class FrequencyMethod(Enum):
    """How a phoneme frame's frequency is estimated."""
    DOMINANT_BIN = "dominant_bin"
    AUTOCORRELATION = "autocorrelation"


@dataclass
class PitchConfig:
    """Configuration for pitch detection."""
    min_freq: float = 50.0
    max_freq: float = 500.0
    n_harmonics: int = 3
    amplification: float = 1e5
    min_hps: float = 1e-3
    # Fundamental bin must carry this share of the strongest magnitude
    min_relative_salience: float = 0.05
    # Coarser spectra go through autocorrelation
    max_bin_width_hz: float = 10.0


@dataclass
class AmplitudeConfig:
    """Configuration for normalized amplitude."""
    ceiling: float = 0.5


@dataclass
class NoiseReductionConfig:
    """Configuration for the noise gate."""
    mode: NoiseThresholdMode = NoiseThresholdMode.ADAPTIVE
    attenuation: float = 0.5
    energy_factor: float = 0.5
    fixed_scale: float = 0.02
    ceiling: float = 0.02

    def __post_init__(self):
        if isinstance(self.mode, str):
            self.mode = NoiseThresholdMode(self.mode)
        if not 0.0 <= self.attenuation < 1.0:
            raise ConfigurationError(
                f"Noise attenuation must be in [0, 1), got {self.attenuation}",
                data={"attenuation": self.attenuation},
            )


@dataclass
class ClarityConfig:
    """Configuration for clarity scoring."""
    noise_reduction_amount: float = 50.0
    noise_floor: float = 0.01
    epsilon: float = 1e-10
    snr_weight: float = 0.6
    distinctness_weight: float = 0.4
    peak_min_magnitude: float = 0.001
    peak_spacing_norm_hz: float = 1000.0


@dataclass
class VocoderConfig:
    """Configuration for the phase-vocoder pitch shifter."""
    window_size: int = 2048
    hop_divisor: int = 8
    max_semitones: float = 24.0
    headroom: float = 0.95

    def __post_init__(self):
        if self.window_size < 2 or self.window_size & (self.window_size - 1):
            raise ConfigurationError(
                f"Vocoder window size must be a power of two, got {self.window_size}",
                data={"window_size": self.window_size},
            )
        if self.hop_divisor < 1:
            raise ConfigurationError(
                f"Vocoder hop divisor must be >= 1, got {self.hop_divisor}",
                data={"hop_divisor": self.hop_divisor},
            )

    @property
    def hop_size(self) -> int:
        return max(1, self.window_size // self.hop_divisor)


@dataclass
class EffectsConfig:
    """Parameter bounds enforced by the effects chain."""
    max_semitones: float = 12.0
    max_gain: float = 3.0


@dataclass(frozen=True)
class PhonemeBand:
    """Half-open frequency band [low, high) mapped to a symbol."""
    low: float
    high: float
    symbol: str
    expressive: bool = False

    def contains(self, freq: float) -> bool:
        return self.low <= freq < self.high


VOWEL_BANDS: Tuple[PhonemeBand, ...] = (
    PhonemeBand(150.0, 300.0, "r"),
    PhonemeBand(300.0, 600.0, "u"),
    PhonemeBand(600.0, 1000.0, "o", expressive=True),
    PhonemeBand(1000.0, 1400.0, "e", expressive=True),
    PhonemeBand(1400.0, float("inf"), "i", expressive=True),
    PhonemeBand(0.0, 150.0, "a", expressive=True),
)

COARSE_BANDS: Tuple[PhonemeBand, ...] = (
    PhonemeBand(80.0, 300.0, "ah"),
    PhonemeBand(300.0, 600.0, "ee"),
    PhonemeBand(600.0, 1000.0, "oo"),
)


@dataclass
class PhonemeConfig:
    """Configuration for frame-wise phoneme classification."""
    frame_duration_sec: float = 0.03
    energy_threshold: float = 0.025
    method: FrequencyMethod = FrequencyMethod.DOMINANT_BIN
    bands: Tuple[PhonemeBand, ...] = VOWEL_BANDS
    max_symbols: int = 5
    fallback: Tuple[str, ...] = ("a",)
    max_frames: Optional[int] = None
    # Shortest autocorrelation lag considered (AUTOCORRELATION only)
    min_lag: int = 10

    def __post_init__(self):
        if isinstance(self.method, str):
            self.method = FrequencyMethod(self.method)
        self.bands = tuple(self.bands)
        self.fallback = tuple(self.fallback)

    @property
    def expressive_symbols(self) -> frozenset:
        return frozenset(b.symbol for b in self.bands if b.expressive)

    def band_for(self, freq: float) -> Optional[PhonemeBand]:
        """First band containing freq, None if no band matches."""
        for band in self.bands:
            if band.contains(freq):
                return band
        return None

    @classmethod
    def for_alphabet(cls, alphabet: PhonemeAlphabet) -> 'PhonemeConfig':
        """Get config preset for a phoneme alphabet."""
        presets = {
            PhonemeAlphabet.VOWEL: cls(
                frame_duration_sec=0.03,
                energy_threshold=0.025,
                method=FrequencyMethod.DOMINANT_BIN,
                bands=VOWEL_BANDS,
                max_symbols=5,
                fallback=("a",),
            ),
            PhonemeAlphabet.COARSE: cls(
                frame_duration_sec=0.02,
                energy_threshold=0.01,
                method=FrequencyMethod.AUTOCORRELATION,
                bands=COARSE_BANDS,
                max_symbols=5,
                fallback=("ah",),
                min_lag=10,
            ),
        }
        return presets[alphabet]


@dataclass(frozen=True)
class EmotionPrototype:
    """Feature ranges typical of one emotion label."""
    label: str
    pitch_range: Tuple[float, float]
    amplitude_range: Tuple[float, float]
    clarity_range: Tuple[float, float]
    phonemes: Tuple[str, ...]


# Amplitude ranges are on the normalized scale (RMS / 0.5)
DEFAULT_EMOTIONS: Tuple[EmotionPrototype, ...] = (
    EmotionPrototype("sad", (160.0, 180.0), (0.0, 0.04), (0.5, 0.6), ("e", "a")),
    EmotionPrototype("disgust", (180.0, 200.0), (0.06, 0.12), (0.35, 0.5), ("o", "r")),
    EmotionPrototype("happy", (290.0, 320.0), (0.12, 0.24), (0.55, 0.7), ("i", "e")),
    EmotionPrototype("angry", (260.0, 300.0), (0.04, 0.6), (0.65, 0.8), ("a", "r")),
    EmotionPrototype("fear", (340.0, 360.0), (0.2, 0.3), (0.4, 0.55), ("i", "u")),
    EmotionPrototype("neutral", (200.0, 250.0), (0.04, 0.12), (0.45, 0.65), ("a", "o")),
)


@dataclass
class SentimentConfig:
    """Configuration for prototype-matching sentiment."""
    prototypes: Tuple[EmotionPrototype, ...] = DEFAULT_EMOTIONS
    pitch_weight: float = 0.60
    amplitude_weight: float = 0.25
    clarity_weight: float = 0.14
    phoneme_weight: float = 0.01
    pitch_decay_hz: float = 15.0
    amplitude_decay: float = 0.04
    clarity_decay: float = 0.1
    base_confidence: float = 0.9
    confidence_span: float = 0.1

    def __post_init__(self):
        self.prototypes = tuple(self.prototypes)
        if not self.prototypes:
            raise ConfigurationError("Sentiment catalog must not be empty")
        # A voice matching a prototype on every feature scores exactly 1
        total = self.pitch_weight + self.amplitude_weight + self.clarity_weight + self.phoneme_weight
        if abs(total - 1.0) >= 1e-9:
            raise ConfigurationError(
                f"Sentiment feature weights must sum to 1, got {total}",
                data={
                    "pitch_weight": self.pitch_weight,
                    "amplitude_weight": self.amplitude_weight,
                    "clarity_weight": self.clarity_weight,
                    "phoneme_weight": self.phoneme_weight,
                },
            )


@dataclass
class SummaryConfig:
    """Thresholds for the one-line summary."""
    high_pitch_hz: float = 320.0
    elevated_pitch_hz: float = 240.0
    loud_amplitude: float = 0.2
    moderate_amplitude: float = 0.06


@dataclass
class AnalysisConfig:
    """Configuration for the voice analysis pipeline and effects chain."""
    pitch: PitchConfig = field(default_factory=PitchConfig)
    amplitude: AmplitudeConfig = field(default_factory=AmplitudeConfig)
    noise_reduction: NoiseReductionConfig = field(default_factory=NoiseReductionConfig)
    clarity: ClarityConfig = field(default_factory=ClarityConfig)
    vocoder: VocoderConfig = field(default_factory=VocoderConfig)
    effects: EffectsConfig = field(default_factory=EffectsConfig)
    phonemes: PhonemeConfig = field(default_factory=PhonemeConfig)
    sentiment: SentimentConfig = field(default_factory=SentimentConfig)
    summary: SummaryConfig = field(default_factory=SummaryConfig)

    @classmethod
    def for_alphabet(cls, alphabet: PhonemeAlphabet) -> 'AnalysisConfig':
        """Default config with a phoneme alphabet preset."""
        return cls(phonemes=PhonemeConfig.for_alphabet(alphabet))

    @classmethod
    def from_config(cls, config, alphabet: Optional[PhonemeAlphabet] = None) -> 'AnalysisConfig':
        """
        Build from a YAML-backed Config.

        Each top-level section overrides the matching dataclass field by
        field; unknown sections and keys raise ConfigurationError. The
        phoneme section may name an ``alphabet`` preset, and the sentiment
        section may replace the prototype catalog with an ``emotions`` list.

        Args:
            config: soundcraft.core.config.Config instance
            alphabet: Phoneme preset overriding the YAML choice

        Returns:
            AnalysisConfig
        """
        unknown_sections = set(config.to_dict()) - {f.name for f in fields(cls)}
        if unknown_sections:
            raise ConfigurationError(
                f"Unknown config sections: {sorted(unknown_sections)}",
                data={"unknown": sorted(unknown_sections)},
            )

        phoneme_section = dict(config.section('phonemes'))
        yaml_alphabet = phoneme_section.pop('alphabet', None)
        if alphabet is None and yaml_alphabet is not None:
            try:
                alphabet = PhonemeAlphabet(yaml_alphabet)
            except ValueError as e:
                raise ConfigurationError(
                    f"Unknown phoneme alphabet: {yaml_alphabet}",
                    data={"alphabet": yaml_alphabet},
                    cause=e,
                ) from e
        phonemes = PhonemeConfig.for_alphabet(alphabet or PhonemeAlphabet.VOWEL)
        if 'bands' in phoneme_section:
            phoneme_section['bands'] = tuple(
                _parse_band(b) for b in phoneme_section['bands']
            )
        phonemes = _override(phonemes, phoneme_section, 'phonemes')

        sentiment_section = dict(config.section('sentiment'))
        if 'emotions' in sentiment_section:
            sentiment_section['prototypes'] = tuple(
                _parse_emotion(e) for e in sentiment_section.pop('emotions')
            )

        return cls(
            pitch=_override(PitchConfig(), config.section('pitch'), 'pitch'),
            amplitude=_override(AmplitudeConfig(), config.section('amplitude'), 'amplitude'),
            noise_reduction=_override(
                NoiseReductionConfig(), config.section('noise_reduction'), 'noise_reduction'
            ),
            clarity=_override(ClarityConfig(), config.section('clarity'), 'clarity'),
            vocoder=_override(VocoderConfig(), config.section('vocoder'), 'vocoder'),
            effects=_override(EffectsConfig(), config.section('effects'), 'effects'),
            phonemes=phonemes,
            sentiment=_override(SentimentConfig(), sentiment_section, 'sentiment'),
            summary=_override(SummaryConfig(), config.section('summary'), 'summary'),
        )


def _override(instance, values: Dict[str, Any], section: str):
    """Copy of a config dataclass with selected fields replaced."""
    if not values:
        return instance
    known = {f.name for f in fields(instance)}
    unknown = set(values) - known
    if unknown:
        raise ConfigurationError(
            f"Unknown keys in '{section}' section: {sorted(unknown)}",
            data={"section": section, "unknown": sorted(unknown)},
        )
    return replace(instance, **values)


def _parse_band(raw: Dict[str, Any]) -> PhonemeBand:
    high = raw.get('high')
    return PhonemeBand(
        low=float(raw.get('low', 0.0)),
        high=float('inf') if high is None else float(high),
        symbol=str(raw['symbol']),
        expressive=bool(raw.get('expressive', False)),
    )


def _parse_emotion(raw: Dict[str, Any]) -> EmotionPrototype:
    return EmotionPrototype(
        label=str(raw['label']),
        pitch_range=tuple(float(v) for v in raw['pitch_range']),
        amplitude_range=tuple(float(v) for v in raw['amplitude_range']),
        clarity_range=tuple(float(v) for v in raw['clarity_range']),
        phonemes=tuple(str(p) for p in raw.get('phonemes', ())),
    )


COARSE_ANALYSIS = AnalysisConfig.for_alphabet(PhonemeAlphabet.COARSE)
