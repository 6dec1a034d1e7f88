"""Tests for 16-bit PCM WAV export."""

import io
import struct

import numpy as np
import pytest
import soundfile as sf


@pytest.mark.unit
class TestQuantize:
    """Tests for quantize_pcm16()."""

    def test_rails_and_halves(self):
        from soundcraft.core.adapters import quantize_pcm16

        pcm = quantize_pcm16(np.array([1.0, -1.0, 0.5, -0.5, 0.0]))
        np.testing.assert_array_equal(pcm, [32767, -32768, 16383, -16384, 0])
        assert pcm.dtype == np.int16

    def test_out_of_range_is_clipped(self):
        from soundcraft.core.adapters import quantize_pcm16

        pcm = quantize_pcm16(np.array([2.5, -7.0]))
        np.testing.assert_array_equal(pcm, [32767, -32768])


@pytest.mark.unit
class TestEncodeWav:
    """Tests for encode_wav() / write_wav()."""

    def test_riff_header(self, sample_buffer):
        from soundcraft.core.adapters import encode_wav

        data = encode_wav(sample_buffer)

        assert data[:4] == b'RIFF'
        assert data[8:12] == b'WAVE'
        assert data[12:16] == b'fmt '
        fmt_tag, channels, sample_rate = struct.unpack('<HHI', data[20:28])
        assert fmt_tag == 1
        assert channels == 1
        assert sample_rate == sample_buffer.sample_rate
        assert len(data) >= 44 + 2 * len(sample_buffer)

    def test_samples_survive_quantization(self, sample_buffer):
        from soundcraft.core.adapters import encode_wav, quantize_pcm16

        decoded, sr = sf.read(io.BytesIO(encode_wav(sample_buffer)), dtype='int16')

        assert sr == sample_buffer.sample_rate
        np.testing.assert_array_equal(decoded, quantize_pcm16(sample_buffer.samples))

    def test_empty_buffer(self):
        from soundcraft.common.types import SampleBuffer
        from soundcraft.core.adapters import encode_wav

        data = encode_wav(SampleBuffer.from_array(np.zeros(0), 8000))
        assert data[:4] == b'RIFF'
        assert sf.info(io.BytesIO(data)).frames == 0

    def test_write_wav_creates_parents(self, sample_buffer, tmp_path):
        from soundcraft.core.adapters import write_wav

        path = write_wav(sample_buffer, tmp_path / "a" / "b" / "out.wav")

        assert path.exists()
        info = sf.info(str(path))
        assert info.subtype == 'PCM_16'
        assert info.frames == len(sample_buffer)
