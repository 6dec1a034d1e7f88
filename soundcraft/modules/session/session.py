"""
Analysis Session - request-scoped holder of one active buffer.

A session is a plain value: callers create one per user/request and pass
it around. Loading replaces the active buffer. With load_async() several
loads may be in flight; only the most recently started one is allowed to
install its buffer, older results are dropped when they arrive.
"""

import asyncio
import contextvars
import functools
import uuid
from pathlib import Path
from typing import Callable, Optional, TypeVar, Union

from soundcraft.common.logging import get_logger, request_context
from soundcraft.common.primitives import Spectrum, analyze_spectrum
from soundcraft.common.types import SampleBuffer
from soundcraft.core.adapters import AudioLoader, encode_wav, write_wav
from soundcraft.core.errors import NoAudioLoadedError
from soundcraft.modules.analysis.config import AnalysisConfig
from soundcraft.modules.analysis.pipelines import FeatureReport, VoiceAnalysisPipeline
from soundcraft.modules.effects import EffectParameters, EffectsChain, EffectsResult

logger = get_logger(__name__)

T = TypeVar('T')

AudioSource = Union[str, Path, bytes, SampleBuffer]


class AnalysisSession:
    """
    One user's working state: the loaded clip and the services acting on it.

    Usage:
        session = AnalysisSession()
        await session.load_async("voice.wav")
        report = await session.analyze_async()
        result = await session.apply_effects_async(EffectParameters(gain=1.5))
        wav_bytes = session.export_wav(result.buffer)
    """

    def __init__(
        self,
        config: Optional[AnalysisConfig] = None,
        loader: Optional[AudioLoader] = None,
        session_id: Optional[str] = None,
    ):
        self.config = config or AnalysisConfig()
        self.loader = loader or AudioLoader()
        self.pipeline = VoiceAnalysisPipeline(self.config)
        self.effects = EffectsChain(self.config)
        self.session_id = session_id or uuid.uuid4().hex[:12]

        self._generation = 0
        self._buffer: Optional[SampleBuffer] = None
        self._source: Optional[str] = None

    @property
    def buffer(self) -> Optional[SampleBuffer]:
        """Active buffer (None until a load completes)."""
        return self._buffer

    @property
    def source(self) -> Optional[str]:
        """Label of the active buffer's origin."""
        return self._source

    @property
    def has_audio(self) -> bool:
        return self._buffer is not None

    @property
    def generation(self) -> int:
        """Number of loads started so far."""
        return self._generation

    def _require_buffer(self) -> SampleBuffer:
        if self._buffer is None:
            raise NoAudioLoadedError(
                "No audio loaded in session",
                data={"session_id": self.session_id},
            )
        return self._buffer

    def _decode(self, source: AudioSource, suffix: str) -> SampleBuffer:
        if isinstance(source, SampleBuffer):
            return source
        if isinstance(source, (bytes, bytearray)):
            return self.loader.load_bytes(bytes(source), suffix=suffix)
        return self.loader.load(source)

    @staticmethod
    def _describe(source: AudioSource, suffix: str) -> str:
        if isinstance(source, SampleBuffer):
            return repr(source)
        if isinstance(source, (bytes, bytearray)):
            return f"<{len(source)} bytes{suffix}>"
        return Path(source).name

    def _install(self, buffer: SampleBuffer, label: str) -> None:
        self._buffer = buffer
        self._source = label
        logger.info("Audio loaded", data={"source": label, **buffer.to_dict()})

    async def _in_thread(self, fn: Callable[..., T], *args) -> T:
        """Run fn in the default executor with the caller's context vars."""
        loop = asyncio.get_running_loop()
        ctx = contextvars.copy_context()
        return await loop.run_in_executor(None, functools.partial(ctx.run, fn, *args))

    def load(self, source: AudioSource, suffix: str = '.wav') -> SampleBuffer:
        """
        Decode and install a new active buffer.

        Args:
            source: File path, encoded bytes or an existing SampleBuffer
            suffix: Container hint for bytes input

        Returns:
            The installed buffer

        Raises:
            AudioLoadError: If decoding fails (the previous buffer is kept)
        """
        with request_context(session_id=self.session_id):
            self._generation += 1
            buffer = self._decode(source, suffix)
            self._install(buffer, self._describe(source, suffix))
            return buffer

    async def load_async(self, source: AudioSource, suffix: str = '.wav') -> Optional[SampleBuffer]:
        """
        Decode off the event loop and install the buffer if still current.

        Starting another load before this one finishes supersedes it: the
        superseded result (or error) is discarded and None is returned.

        Returns:
            The installed buffer, or None if superseded

        Raises:
            AudioLoadError: If decoding of the current load fails
        """
        with request_context(session_id=self.session_id):
            self._generation += 1
            generation = self._generation
            label = self._describe(source, suffix)

            try:
                buffer = await self._in_thread(self._decode, source, suffix)
            except Exception:
                if generation != self._generation:
                    logger.info(
                        "Superseded load failed, ignoring",
                        data={"source": label, "generation": generation},
                    )
                    return None
                raise

            if generation != self._generation:
                logger.info(
                    "Discarding superseded load",
                    data={"source": label, "generation": generation, "current": self._generation},
                )
                return None

            self._install(buffer, label)
            return buffer

    def clear(self) -> None:
        """Drop the active buffer and supersede pending loads."""
        self._generation += 1
        self._buffer = None
        self._source = None

    def analyze(self) -> FeatureReport:
        """
        Analyze the active buffer.

        Raises:
            NoAudioLoadedError: If nothing is loaded
        """
        with request_context(session_id=self.session_id):
            buffer = self._require_buffer()
            return self.pipeline.analyze(buffer, source=self._source)

    async def analyze_async(self) -> FeatureReport:
        """analyze() in a worker thread."""
        with request_context(session_id=self.session_id):
            buffer = self._require_buffer()
            return await self._in_thread(self.pipeline.analyze, buffer, self._source)

    def apply_effects(self, params: Optional[EffectParameters] = None) -> EffectsResult:
        """
        Run the effects chain on the active buffer.

        The active buffer itself is not replaced.

        Raises:
            NoAudioLoadedError: If nothing is loaded
            InvalidParameterError: If a parameter is not finite
        """
        with request_context(session_id=self.session_id):
            buffer = self._require_buffer()
            return self.effects.apply(buffer, params)

    async def apply_effects_async(self, params: Optional[EffectParameters] = None) -> EffectsResult:
        """apply_effects() in a worker thread."""
        with request_context(session_id=self.session_id):
            buffer = self._require_buffer()
            return await self._in_thread(self.effects.apply, buffer, params)

    def spectrum(self) -> Spectrum:
        """
        Magnitude spectrum of the active buffer (for display).

        Raises:
            NoAudioLoadedError: If nothing is loaded
        """
        buffer = self._require_buffer()
        return analyze_spectrum(buffer.samples, buffer.sample_rate)

    def export_wav(self, buffer: Optional[SampleBuffer] = None) -> bytes:
        """
        16-bit PCM WAV of a buffer (the active one by default).

        Raises:
            NoAudioLoadedError: If buffer is None and nothing is loaded
        """
        return encode_wav(buffer if buffer is not None else self._require_buffer())

    def save_wav(self, path: Union[str, Path], buffer: Optional[SampleBuffer] = None) -> Path:
        """Write export_wav() output to path."""
        return write_wav(buffer if buffer is not None else self._require_buffer(), path)

    def __repr__(self) -> str:
        return f"AnalysisSession(id={self.session_id}, buffer={self._buffer!r})"
