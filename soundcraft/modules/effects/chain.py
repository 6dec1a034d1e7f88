"""
Effects Chain - noise reduction -> pitch shift -> volume.

Each transform clamps its own parameter, so EffectParameters accepts any
finite number. A failed pitch shift is the one recoverable error: the chain
logs it and continues with the unshifted buffer.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import numpy as np

from soundcraft.common.logging import get_logger
from soundcraft.common.primitives import adjust_volume, pitch_shift, reduce_noise
from soundcraft.common.primitives.vocoder import IDENTITY_TOLERANCE
from soundcraft.common.types import SampleBuffer
from soundcraft.core.errors import InvalidParameterError, PitchShiftError
from soundcraft.modules.analysis.config import AnalysisConfig

logger = get_logger(__name__)


@dataclass(frozen=True)
class EffectParameters:
    """
    User-facing effect settings.

    Attributes:
        noise_reduction_amount: 0-100 percent
        pitch_shift_semitones: -12..12 semitones
        gain: 0-3 linear gain
    """
    noise_reduction_amount: float = 50.0
    pitch_shift_semitones: float = 0.0
    gain: float = 1.0

    def validate(self) -> None:
        """
        Reject values no transform can clamp.

        Raises:
            InvalidParameterError: If any parameter is NaN or infinite
        """
        for name in ('noise_reduction_amount', 'pitch_shift_semitones', 'gain'):
            value = getattr(self, name)
            try:
                finite = bool(np.isfinite(value))
            except TypeError:
                finite = False
            if not finite:
                raise InvalidParameterError(
                    f"Effect parameter {name} must be a finite number, got {value!r}",
                    data={"parameter": name, "value": repr(value)},
                )

    def to_dict(self) -> Dict[str, float]:
        return {
            'noise_reduction_amount': float(self.noise_reduction_amount),
            'pitch_shift_semitones': float(self.pitch_shift_semitones),
            'gain': float(self.gain),
        }


@dataclass
class EffectsResult:
    """
    Processed buffer plus what happened on the way.

    Attributes:
        buffer: Output buffer (input sample rate)
        parameters: Parameters that were applied
        pitch_shift_applied: A non-zero shift succeeded
        pitch_shift_failed: The vocoder failed and the shift was skipped
        error: Message of the recovered pitch shift failure
        processing_time_sec: Wall time of the whole chain
    """
    buffer: SampleBuffer
    parameters: EffectParameters
    pitch_shift_applied: bool = False
    pitch_shift_failed: bool = False
    error: Optional[str] = None
    processing_time_sec: float = 0.0
    stage_times: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'buffer': self.buffer.to_dict(),
            'parameters': self.parameters.to_dict(),
            'pitch_shift_applied': self.pitch_shift_applied,
            'pitch_shift_failed': self.pitch_shift_failed,
            'error': self.error,
            'processing_time_sec': self.processing_time_sec,
        }


class EffectsChain:
    """
    Applies noise reduction, pitch shift and volume in that order.

    Usage:
        chain = EffectsChain()
        result = chain.apply(buffer, EffectParameters(pitch_shift_semitones=3))
        wav = encode_wav(result.buffer)
    """

    def __init__(self, config: Optional[AnalysisConfig] = None):
        self.config = config or AnalysisConfig()

    def reduce_noise(self, buffer: SampleBuffer, amount: float) -> SampleBuffer:
        nr = self.config.noise_reduction
        y = reduce_noise(
            buffer.samples,
            amount,
            mode=nr.mode,
            attenuation=nr.attenuation,
            energy_factor=nr.energy_factor,
            fixed_scale=nr.fixed_scale,
            ceiling=nr.ceiling,
        )
        return buffer.with_samples(y)

    def shift_pitch(self, buffer: SampleBuffer, semitones: float) -> SampleBuffer:
        """
        Pitch-shift a buffer.

        Raises:
            PitchShiftError: If the vocoder fails
        """
        limit = self.config.effects.max_semitones
        semitones = float(np.clip(semitones, -limit, limit))
        voc = self.config.vocoder
        y = pitch_shift(
            buffer.samples,
            semitones,
            buffer.sample_rate,
            window_size=voc.window_size,
            hop_divisor=voc.hop_divisor,
            max_semitones=voc.max_semitones,
            headroom=voc.headroom,
        )
        return buffer.with_samples(y)

    def adjust_volume(self, buffer: SampleBuffer, gain: float) -> SampleBuffer:
        """
        Apply gain with hard clipping.

        Raises:
            InvalidParameterError: If gain is not finite
        """
        try:
            y = adjust_volume(buffer.samples, gain, max_gain=self.config.effects.max_gain)
        except ValueError as e:
            raise InvalidParameterError(
                str(e), data={"parameter": "gain", "value": repr(gain)}, cause=e
            ) from e
        return buffer.with_samples(y)

    def apply(self, buffer: SampleBuffer, params: Optional[EffectParameters] = None) -> EffectsResult:
        """
        Run the full chain.

        Args:
            buffer: Input audio
            params: Effect settings (defaults when None)

        Returns:
            EffectsResult; pitch_shift_failed is set when the vocoder failed
            and the unshifted buffer was used instead

        Raises:
            InvalidParameterError: If a parameter is NaN or infinite
        """
        params = params or EffectParameters()
        params.validate()

        start = time.time()
        stage_times: Dict[str, float] = {}

        t = time.time()
        current = self.reduce_noise(buffer, params.noise_reduction_amount)
        stage_times['noise_reduction'] = time.time() - t

        shift_applied = False
        shift_failed = False
        error = None
        if abs(params.pitch_shift_semitones) >= IDENTITY_TOLERANCE:
            t = time.time()
            try:
                current = self.shift_pitch(current, params.pitch_shift_semitones)
                shift_applied = True
            except PitchShiftError as e:
                shift_failed = True
                error = e.message
                logger.warning(
                    "Pitch shift failed, continuing with unshifted audio",
                    data={"semitones": params.pitch_shift_semitones, "error": e.message},
                )
            stage_times['pitch_shift'] = time.time() - t

        t = time.time()
        current = self.adjust_volume(current, params.gain)
        stage_times['volume'] = time.time() - t

        elapsed = time.time() - start
        logger.info(
            "Effects applied",
            data={
                **params.to_dict(),
                "n_in": len(buffer),
                "n_out": len(current),
                "pitch_shift_failed": shift_failed,
                "processing_time_sec": round(elapsed, 4),
            },
        )

        return EffectsResult(
            buffer=current,
            parameters=params,
            pitch_shift_applied=shift_applied,
            pitch_shift_failed=shift_failed,
            error=error,
            processing_time_sec=elapsed,
            stage_times=stage_times,
        )
