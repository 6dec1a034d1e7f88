"""
Layer 3: PIPELINES - Stage composition over tasks.

Usage:
    from soundcraft.modules.analysis.pipelines import VoiceAnalysisPipeline

    report = VoiceAnalysisPipeline().analyze(buffer)
"""

from .base import Pipeline, PipelineContext, PipelineStage, TaskStage
from .voice_analysis import (
    FeatureReport,
    VoiceAnalysisPipeline,
    PitchStage,
    LoudnessStage,
    ClarityStage,
    PhonemeStage,
    SentimentStage,
    SummaryStage,
)

__all__ = [
    'Pipeline',
    'PipelineContext',
    'PipelineStage',
    'TaskStage',
    'FeatureReport',
    'VoiceAnalysisPipeline',
    'PitchStage',
    'LoudnessStage',
    'ClarityStage',
    'PhonemeStage',
    'SentimentStage',
    'SummaryStage',
]
