"""Session - request-scoped state for one loaded clip."""

from .session import AnalysisSession, AudioSource

__all__ = [
    'AnalysisSession',
    'AudioSource',
]
