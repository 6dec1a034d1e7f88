"""
Layer 2: TASKS - Voice analysis tasks

Tasks combine primitives to solve specific analysis problems.
Each task:
- Takes an AudioContext (buffer + lazily cached spectrum)
- Returns a TaskResult subclass
- Contains business logic
- Is reusable and testable

Usage:
    from soundcraft.modules.analysis.tasks import create_audio_context, PitchDetectionTask

    context = create_audio_context(y, sr=22050)
    pitch = PitchDetectionTask().execute(context)
"""

from .base import (
    AudioContext,
    TaskResult,
    BaseTask,
    create_audio_context,
    ProgressCallback,
)

from .pitch_detection import (
    PitchDetectionResult,
    PitchDetectionTask,
)

from .loudness import (
    LoudnessResult,
    LoudnessTask,
)

from .clarity import (
    ClarityResult,
    ClarityTask,
    compute_clarity,
    snr_score,
    distinctness_score,
)

from .phonemes import (
    PhonemeResult,
    PhonemeTask,
    classify_phonemes,
)

from .sentiment import (
    SentimentResult,
    SentimentTaskResult,
    SentimentTask,
    classify_sentiment,
    build_summary,
    range_match,
)

__all__ = [
    # Base
    'AudioContext',
    'TaskResult',
    'BaseTask',
    'create_audio_context',
    'ProgressCallback',
    # Pitch
    'PitchDetectionResult',
    'PitchDetectionTask',
    # Loudness
    'LoudnessResult',
    'LoudnessTask',
    # Clarity
    'ClarityResult',
    'ClarityTask',
    'compute_clarity',
    'snr_score',
    'distinctness_score',
    # Phonemes
    'PhonemeResult',
    'PhonemeTask',
    'classify_phonemes',
    # Sentiment
    'SentimentResult',
    'SentimentTaskResult',
    'SentimentTask',
    'classify_sentiment',
    'build_summary',
    'range_match',
]
