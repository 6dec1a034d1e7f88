"""
Value types shared by every layer.

SampleBuffer is the only carrier of audio between components. It is a frozen
dataclass over a read-only float32 array: transforms never mutate a buffer,
they build a new one with ``with_samples()``.
"""

from dataclasses import dataclass
from typing import Any, Dict

import numpy as np

from soundcraft.core.errors import InvalidAudioError


@dataclass(frozen=True, eq=False)
class SampleBuffer:
    """
    Mono single-precision audio tagged with its sample rate.

    Invariants:
        samples.ndim == 1, dtype float32, read-only
        sample_rate > 0

    Attributes:
        samples: Amplitude samples, nominally in [-1, 1]
        sample_rate: Sample rate in Hz
    """
    samples: np.ndarray
    sample_rate: int

    @classmethod
    def from_array(cls, y: np.ndarray, sr: int) -> 'SampleBuffer':
        """
        Build a buffer from any array-like signal.

        Multi-channel input is mixed down to mono (channels on axis 0 as
        librosa returns them, or on the last axis as soundfile does).

        Raises:
            InvalidAudioError: If sr is not a positive integer or the
                array has more than two dimensions
        """
        try:
            sr_int = int(sr)
        except (TypeError, ValueError) as e:
            raise InvalidAudioError(f"Invalid sample rate: {sr!r}", cause=e)
        if sr_int <= 0 or sr_int != sr:
            raise InvalidAudioError(
                f"Sample rate must be a positive integer, got {sr!r}",
                data={"sample_rate": sr},
            )

        y = np.asarray(y)
        if y.ndim == 2:
            channel_axis = 0 if y.shape[0] < y.shape[1] else 1
            y = np.mean(y, axis=channel_axis)
        elif y.ndim > 2:
            raise InvalidAudioError(
                f"Expected mono or stereo audio, got shape {y.shape}",
                data={"shape": list(y.shape)},
            )

        samples = np.array(y, dtype=np.float32, copy=True).reshape(-1)
        samples.flags.writeable = False
        return cls(samples=samples, sample_rate=sr_int)

    def with_samples(self, y: np.ndarray) -> 'SampleBuffer':
        """New buffer with different samples and this buffer's sample rate."""
        return SampleBuffer.from_array(y, self.sample_rate)

    def copy(self) -> 'SampleBuffer':
        """Independent copy of this buffer."""
        return self.with_samples(self.samples)

    def __len__(self) -> int:
        return int(self.samples.shape[0])

    @property
    def is_empty(self) -> bool:
        return len(self) == 0

    @property
    def duration_sec(self) -> float:
        """Duration in seconds."""
        return len(self) / self.sample_rate

    @property
    def peak(self) -> float:
        """Peak absolute amplitude (0.0 for an empty buffer)."""
        if self.is_empty:
            return 0.0
        return float(np.max(np.abs(self.samples)))

    def to_dict(self) -> Dict[str, Any]:
        """Buffer metadata (samples excluded)."""
        return {
            'n_samples': len(self),
            'sample_rate': self.sample_rate,
            'duration_sec': self.duration_sec,
            'peak': self.peak,
        }

    def __repr__(self) -> str:
        return f"SampleBuffer(n={len(self)}, sr={self.sample_rate})"
