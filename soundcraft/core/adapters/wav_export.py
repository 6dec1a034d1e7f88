"""
WAV export - 16-bit PCM mono RIFF encoding.

Samples are clipped to [-1, 1] and quantized asymmetrically so both rails
are reachable: negative values scale by 0x8000, positive by 0x7FFF.
"""

import io
from pathlib import Path
from typing import Union

import numpy as np
import soundfile as sf

from soundcraft.common.logging import get_logger
from soundcraft.common.types import SampleBuffer

logger = get_logger(__name__)


def quantize_pcm16(samples: np.ndarray) -> np.ndarray:
    """
    Float samples to int16 PCM.

    Args:
        samples: Float samples (any range; clipped to [-1, 1])

    Returns:
        int16 array, same length
    """
    s = np.clip(np.asarray(samples, dtype=np.float64), -1.0, 1.0)
    scaled = np.where(s < 0, s * 0x8000, s * 0x7FFF)
    return np.trunc(scaled).astype(np.int16)


def encode_wav(buffer: SampleBuffer) -> bytes:
    """
    Encode a buffer as a 16-bit PCM mono WAV file.

    Output is a little-endian RIFF container with a 44-byte header
    ('fmt ' chunk, PCM, 1 channel) followed by the 'data' chunk.

    Args:
        buffer: Audio to encode

    Returns:
        Complete WAV file contents
    """
    pcm = quantize_pcm16(buffer.samples)
    out = io.BytesIO()
    sf.write(out, pcm, buffer.sample_rate, format='WAV', subtype='PCM_16')
    return out.getvalue()


def write_wav(buffer: SampleBuffer, path: Union[str, Path]) -> Path:
    """
    Write a buffer to disk as 16-bit PCM mono WAV.

    Args:
        buffer: Audio to write
        path: Destination (parent directories are created)

    Returns:
        Path written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = encode_wav(buffer)
    path.write_bytes(data)
    logger.info(
        f"Wrote {path.name}",
        data={"path": str(path), "bytes": len(data), **buffer.to_dict()},
    )
    return path
