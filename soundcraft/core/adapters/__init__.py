"""Adapters - decode audio into SampleBuffers and encode them back to WAV."""

from .loader import AudioLoader
from .wav_export import encode_wav, write_wav, quantize_pcm16

__all__ = [
    'AudioLoader',
    'encode_wav',
    'write_wav',
    'quantize_pcm16',
]
