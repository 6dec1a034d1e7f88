"""
Sentiment Task - Heuristic emotion label from acoustic features.

Each EmotionPrototype scores a weighted sum of per-feature matches:
full weight inside the prototype's range, decaying linearly to zero over a
fixed width outside it. Phonemes contribute the share of detected symbols
that belong to the prototype. The best-scoring prototype wins; ties keep
catalog order.

The label is a guess from four numbers, not a trained model.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, Optional, Sequence, Tuple

from .base import AudioContext, TaskResult, BaseTask
from soundcraft.modules.analysis.config import EmotionPrototype, SentimentConfig, SummaryConfig


@dataclass(frozen=True)
class SentimentResult:
    """
    Winning emotion.

    Attributes:
        label: Emotion label
        confidence: Reporting confidence in [0.9, 1.0]
        scores: Raw score of every prototype, by label
    """
    label: str
    confidence: float
    scores: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'label': self.label,
            'confidence': float(self.confidence),
            'scores': {k: float(v) for k, v in self.scores.items()},
        }


def range_match(value: float, bounds: Tuple[float, float], decay: float) -> float:
    """
    1.0 inside [low, high], falling linearly to 0.0 at decay outside.

    Args:
        value: Feature value
        bounds: (low, high) inclusive range
        decay: Distance at which the match reaches zero

    Returns:
        Match in [0, 1]
    """
    low, high = bounds
    if low <= value <= high:
        return 1.0
    distance = min(abs(value - low), abs(value - high))
    if decay <= 0:
        return 0.0
    return max(0.0, 1.0 - distance / decay)


def score_prototype(
    prototype: EmotionPrototype,
    pitch: float,
    amplitude: float,
    clarity: float,
    phonemes: Sequence[str],
    config: SentimentConfig,
) -> float:
    """Weighted match of one prototype (0 to sum of weights)."""
    score = config.pitch_weight * range_match(pitch, prototype.pitch_range, config.pitch_decay_hz)
    score += config.amplitude_weight * range_match(
        amplitude, prototype.amplitude_range, config.amplitude_decay
    )
    score += config.clarity_weight * range_match(
        clarity, prototype.clarity_range, config.clarity_decay
    )
    matching = sum(1 for p in phonemes if p in prototype.phonemes)
    score += config.phoneme_weight * (matching / max(1, len(phonemes)))
    return score


def classify_sentiment(
    pitch: float,
    amplitude: float,
    clarity: float,
    phonemes: Sequence[str],
    config: Optional[SentimentConfig] = None,
) -> SentimentResult:
    """
    Pick the best-matching emotion prototype.

    Args:
        pitch: Pitch in Hz
        amplitude: Normalized amplitude [0, 1]
        clarity: Clarity [0, 1]
        phonemes: Detected phoneme symbols
        config: Prototype catalog and weights

    Returns:
        SentimentResult (ties resolved in catalog order)
    """
    config = config or SentimentConfig()

    scores: Dict[str, float] = {}
    best: Optional[EmotionPrototype] = None
    best_score = float('-inf')
    for prototype in config.prototypes:
        score = score_prototype(prototype, pitch, amplitude, clarity, phonemes, config)
        scores[prototype.label] = score
        if score > best_score:
            best, best_score = prototype, score

    confidence = config.base_confidence + config.confidence_span * min(1.0, max(0.0, best_score))
    return SentimentResult(label=best.label, confidence=confidence, scores=scores)


def build_summary(
    pitch: float,
    amplitude: float,
    phonemes: Sequence[str],
    label: str,
    expressive_symbols: frozenset = frozenset(),
    config: Optional[SummaryConfig] = None,
) -> str:
    """
    One-line description of a clip.

    "<Label>, <soft|moderate|loud>, <steady|elevated|high-pitched> speech
    with <expressive|sharp> tones"
    """
    config = config or SummaryConfig()

    if pitch > config.high_pitch_hz:
        pitch_desc = "high-pitched"
    elif pitch > config.elevated_pitch_hz:
        pitch_desc = "elevated"
    else:
        pitch_desc = "steady"

    if amplitude > config.loud_amplitude:
        amp_desc = "loud"
    elif amplitude > config.moderate_amplitude:
        amp_desc = "moderate"
    else:
        amp_desc = "soft"

    tone_desc = "expressive" if any(p in expressive_symbols for p in phonemes) else "sharp"
    label = label or "neutral"

    return f"{label[:1].upper()}{label[1:]}, {amp_desc}, {pitch_desc} speech with {tone_desc} tones"


@dataclass
class SentimentTaskResult(TaskResult):
    """
    Result of sentiment classification.

    Attributes:
        sentiment: Winning emotion with per-label scores
    """
    success: bool = True
    task_name: str = "Sentiment"
    processing_time_sec: float = 0.0
    error: Optional[str] = None

    sentiment: Optional[SentimentResult] = None

    def to_dict(self) -> Dict[str, Any]:
        base = super().to_dict()
        base['sentiment'] = self.sentiment.to_dict() if self.sentiment else None
        return base


class SentimentTask(BaseTask):
    """
    Classify sentiment from features computed by earlier tasks.

    Features are passed in explicitly because they come from other tasks'
    results, not from the audio context.
    """

    def __init__(self, pitch: float, amplitude: float, clarity: float, phonemes: Sequence[str]):
        self.pitch = pitch
        self.amplitude = amplitude
        self.clarity = clarity
        self.phonemes = tuple(phonemes)

    @property
    def name(self) -> str:
        return "Sentiment"

    def execute(self, context: AudioContext) -> SentimentTaskResult:
        sentiment = classify_sentiment(
            self.pitch, self.amplitude, self.clarity, self.phonemes,
            config=context.config.sentiment,
        )
        return SentimentTaskResult(sentiment=sentiment)
