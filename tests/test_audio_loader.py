"""Tests for AudioLoader (files and in-memory uploads)."""

import io

import numpy as np
import pytest
import soundfile as sf

from soundcraft.core.errors import AudioLoadError


@pytest.fixture
def loader():
    from soundcraft.core.adapters import AudioLoader

    return AudioLoader(sample_rate=None, max_file_size_mb=100)


@pytest.mark.unit
class TestLoadFile:
    """Tests for AudioLoader.load()."""

    def test_load_wav(self, loader, wav_file, sine_220):
        y, sr = sine_220
        buffer = loader.load(wav_file)

        assert buffer.sample_rate == sr
        assert len(buffer) == len(y)
        assert buffer.samples.dtype == np.float32
        np.testing.assert_allclose(buffer.samples, y, atol=1e-4)

    def test_stereo_is_mixed_down(self, loader, stereo_wav_file):
        buffer = loader.load(stereo_wav_file)

        assert buffer.samples.ndim == 1
        assert buffer.peak == pytest.approx(0.4, abs=1e-3)

    def test_offset_and_duration(self, loader, wav_file):
        buffer = loader.load(wav_file, duration=0.25, offset=0.5)
        assert len(buffer) == 4000

    def test_resample_through_librosa(self, wav_file):
        from soundcraft.core.adapters import AudioLoader

        buffer = AudioLoader(sample_rate=8000).load(wav_file)

        assert buffer.sample_rate == 8000
        assert abs(len(buffer) - 8000) <= 1

    def test_missing_file(self, loader, tmp_path):
        with pytest.raises(AudioLoadError) as exc_info:
            loader.load(tmp_path / "nope.wav")
        assert "not found" in exc_info.value.message

    def test_unsupported_format(self, loader, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello")

        with pytest.raises(AudioLoadError) as exc_info:
            loader.load(path)
        assert exc_info.value.data['suffix'] == ".txt"

    def test_corrupt_file(self, loader, tmp_path):
        path = tmp_path / "broken.wav"
        path.write_bytes(b"RIFF\x00\x00\x00\x00garbage")

        with pytest.raises(AudioLoadError) as exc_info:
            loader.load(path)
        assert exc_info.value.cause is not None

    def test_size_limit(self, wav_file):
        from soundcraft.core.adapters import AudioLoader

        with pytest.raises(AudioLoadError):
            AudioLoader(max_file_size_mb=0).load(wav_file)

    def test_validate_file(self, loader, wav_file, tmp_path):
        assert loader.validate_file(wav_file)
        assert not loader.validate_file(tmp_path / "missing.wav")

    def test_get_duration(self, loader, wav_file):
        assert loader.get_duration(wav_file) == pytest.approx(1.0)

    @pytest.mark.parametrize("name,supported", [
        ("a.wav", True),
        ("a.MP3", True),
        ("a.flac", True),
        ("a.m4a", True),
        ("a.txt", False),
        ("a", False),
    ])
    def test_is_supported_format(self, name, supported):
        from soundcraft.core.adapters import AudioLoader

        assert AudioLoader.is_supported_format(name) is supported


@pytest.mark.unit
class TestLoadBytes:
    """Tests for AudioLoader.load_bytes()."""

    def test_wav_bytes(self, loader, wav_file):
        buffer = loader.load_bytes(wav_file.read_bytes(), suffix='.wav')

        assert buffer.sample_rate == 16000
        assert len(buffer) == 16000

    def test_suffix_without_dot(self, loader, wav_file):
        assert len(loader.load_bytes(wav_file.read_bytes(), suffix='WAV')) == 16000

    def test_flac_bytes(self, loader, sine_220):
        y, sr = sine_220
        out = io.BytesIO()
        sf.write(out, y, sr, format='FLAC')

        buffer = loader.load_bytes(out.getvalue(), suffix='.flac')
        assert len(buffer) == len(y)

    def test_empty_bytes(self, loader):
        with pytest.raises(AudioLoadError):
            loader.load_bytes(b"", suffix='.wav')

    def test_garbage_bytes(self, loader):
        with pytest.raises(AudioLoadError):
            loader.load_bytes(b"definitely not audio", suffix='.wav')

    def test_unsupported_suffix(self, loader):
        with pytest.raises(AudioLoadError):
            loader.load_bytes(b"1234", suffix='.exe')

    def test_header_only_wav_is_empty(self, loader):
        out = io.BytesIO()
        sf.write(out, np.zeros(0, dtype=np.float32), 16000, format='WAV', subtype='PCM_16')

        with pytest.raises(AudioLoadError) as exc_info:
            loader.load_bytes(out.getvalue())
        assert "empty" in exc_info.value.message
