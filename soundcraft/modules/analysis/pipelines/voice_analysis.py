"""
Voice Analysis Pipeline - Complete feature report of a single clip.

pitch -> loudness -> clarity -> phonemes -> sentiment -> summary
"""

import json
from dataclasses import dataclass, field
from typing import Dict, Any, Optional, Tuple

from .base import Pipeline, PipelineContext, PipelineStage, TaskStage
from soundcraft.common.logging import get_logger
from soundcraft.common.types import SampleBuffer
from soundcraft.modules.analysis.config import AnalysisConfig
from soundcraft.modules.analysis.tasks import (
    BaseTask,
    ClarityTask,
    LoudnessTask,
    PhonemeTask,
    PitchDetectionTask,
    SentimentResult,
    SentimentTask,
    build_summary,
    create_audio_context,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class FeatureReport:
    """
    Complete analysis result for a clip.

    Combines results from all analysis tasks.
    """
    pitch_hz: float
    amplitude: float
    clarity: float
    phonemes: Tuple[str, ...]
    sentiment: SentimentResult
    summary: str
    duration_sec: float
    sample_rate: int
    processing_time_sec: float = 0.0
    stage_times: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'pitch_hz': float(self.pitch_hz),
            'amplitude': float(self.amplitude),
            'clarity': float(self.clarity),
            'phonemes': list(self.phonemes),
            'sentiment': self.sentiment.to_dict(),
            'summary': self.summary,
            'duration_sec': float(self.duration_sec),
            'sample_rate': int(self.sample_rate),
            'processing_time_sec': float(self.processing_time_sec),
        }

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_context(cls, context: PipelineContext) -> 'FeatureReport':
        """Create from pipeline context."""
        pitch_result = context.get_result('pitch')
        loudness_result = context.get_result('loudness')
        clarity_result = context.get_result('clarity')
        phoneme_result = context.get_result('phonemes')
        sentiment_result = context.get_result('sentiment')
        buffer = context.audio_context.buffer

        return cls(
            pitch_hz=pitch_result.pitch_hz,
            amplitude=loudness_result.amplitude,
            clarity=clarity_result.clarity,
            phonemes=tuple(phoneme_result.phonemes),
            sentiment=sentiment_result.sentiment,
            summary=context.get_result('summary', ''),
            duration_sec=buffer.duration_sec,
            sample_rate=buffer.sample_rate,
            processing_time_sec=context.total_time,
            stage_times=dict(context.stage_times),
        )


class PitchStage(TaskStage):
    """Stage that detects pitch."""

    def __init__(self):
        super().__init__('pitch')

    def build_task(self, context: PipelineContext) -> BaseTask:
        return PitchDetectionTask()


class LoudnessStage(TaskStage):
    """Stage that measures amplitude."""

    def __init__(self):
        super().__init__('loudness')

    def build_task(self, context: PipelineContext) -> BaseTask:
        return LoudnessTask()


class ClarityStage(TaskStage):
    """Stage that scores clarity."""

    def __init__(self):
        super().__init__('clarity')

    def build_task(self, context: PipelineContext) -> BaseTask:
        return ClarityTask()


class PhonemeStage(TaskStage):
    """Stage that classifies phonemes."""

    def __init__(self):
        super().__init__('phonemes')

    def build_task(self, context: PipelineContext) -> BaseTask:
        return PhonemeTask()


class SentimentStage(TaskStage):
    """Stage that classifies sentiment from the earlier stage results."""

    def __init__(self):
        super().__init__('sentiment')

    def build_task(self, context: PipelineContext) -> BaseTask:
        return SentimentTask(
            pitch=context.require('pitch').pitch_hz,
            amplitude=context.require('loudness').amplitude,
            clarity=context.require('clarity').clarity,
            phonemes=context.require('phonemes').phonemes,
        )


class SummaryStage(PipelineStage):
    """Stage that writes the one-line summary."""

    @property
    def name(self) -> str:
        return 'summary'

    def process(self, context: PipelineContext) -> PipelineContext:
        config = context.audio_context.config
        summary = build_summary(
            pitch=context.require('pitch').pitch_hz,
            amplitude=context.require('loudness').amplitude,
            phonemes=context.require('phonemes').phonemes,
            label=context.require('sentiment').sentiment.label,
            expressive_symbols=config.phonemes.expressive_symbols,
            config=config.summary,
        )
        context.set_result('summary', summary)
        return context


class VoiceAnalysisPipeline(Pipeline):
    """
    Full voice analysis pipeline.

    Usage:
        pipeline = VoiceAnalysisPipeline()
        report = pipeline.analyze(buffer)
        print(report.summary)
    """

    def __init__(self, config: Optional[AnalysisConfig] = None, **kwargs):
        self.config = config or AnalysisConfig()
        super().__init__(
            stages=[
                PitchStage(),
                LoudnessStage(),
                ClarityStage(),
                PhonemeStage(),
                SentimentStage(),
                SummaryStage(),
            ],
            name="VoiceAnalysis",
            **kwargs,
        )

    def analyze(self, buffer: SampleBuffer, source: Optional[str] = None) -> FeatureReport:
        """
        Analyze one clip.

        Args:
            buffer: Mono sample buffer
            source: Optional label for logs (file name, upload id)

        Returns:
            FeatureReport

        Raises:
            TaskExecutionError: If a task fails unexpectedly
        """
        audio_context = create_audio_context(buffer, buffer.sample_rate, config=self.config,
                                             file_path=source)
        context = self.run(PipelineContext(audio_context=audio_context, source=source))
        report = FeatureReport.from_context(context)
        logger.info(
            "Analysis complete",
            data={
                "source": context.label,
                "pitch_hz": round(report.pitch_hz, 2),
                "amplitude": round(report.amplitude, 4),
                "clarity": round(report.clarity, 4),
                "phonemes": list(report.phonemes),
                "sentiment": report.sentiment.label,
            },
        )
        return report
