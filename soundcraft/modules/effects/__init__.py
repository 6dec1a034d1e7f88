"""Effects - noise reduction, pitch shift and volume over SampleBuffers."""

from .chain import EffectParameters, EffectsChain, EffectsResult

__all__ = [
    'EffectParameters',
    'EffectsChain',
    'EffectsResult',
]
