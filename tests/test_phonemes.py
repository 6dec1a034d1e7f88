"""Tests for frame-wise phoneme classification."""

from dataclasses import replace

import pytest
import numpy as np

from conftest import make_sine


def _segments(*freqs, sr=16000, seconds=0.3):
    """Concatenated sine segments (0.3 s = 10 frames of 30 ms at 16 kHz)."""
    return np.concatenate([make_sine(f, sr=sr, duration=seconds) for f in freqs])


@pytest.mark.unit
class TestVowelAlphabet:
    """Dominant-bin classification with the vowel band table."""

    @pytest.mark.parametrize("freq,symbol", [
        (440.0, "u"),
        (700.0, "o"),
        (1200.0, "e"),
        (2500.0, "i"),
    ])
    def test_single_tone(self, freq, symbol):
        from soundcraft.modules.analysis.tasks import classify_phonemes

        y = make_sine(freq, sr=16000)
        assert classify_phonemes(y, 16000) == (symbol,)

    def test_first_occurrence_order(self):
        from soundcraft.modules.analysis.tasks import classify_phonemes

        y = _segments(440.0, 1200.0, 700.0, 440.0)
        assert classify_phonemes(y, 16000) == ("u", "e", "o")

    def test_silence_uses_fallback(self, silence):
        from soundcraft.modules.analysis.tasks import classify_phonemes

        y, sr = silence
        assert classify_phonemes(y, sr) == ("a",)

    def test_max_symbols_cap(self):
        from soundcraft.modules.analysis.config import PhonemeConfig
        from soundcraft.modules.analysis.tasks import classify_phonemes

        config = replace(PhonemeConfig(), max_symbols=2)
        y = _segments(440.0, 1200.0, 700.0)
        assert classify_phonemes(y, 16000, config) == ("u", "e")

    def test_max_frames_limits_scan(self):
        from soundcraft.modules.analysis.config import PhonemeConfig
        from soundcraft.modules.analysis.tasks import classify_phonemes

        config = replace(PhonemeConfig(), max_frames=1)
        y = _segments(440.0, 1200.0)
        assert classify_phonemes(y, 16000, config) == ("u",)

    def test_quiet_frames_are_skipped(self):
        from soundcraft.modules.analysis.tasks import classify_phonemes

        quiet = make_sine(1200.0, sr=16000, duration=0.3, amplitude=0.05)
        loud = make_sine(440.0, sr=16000, duration=0.3)
        assert classify_phonemes(np.concatenate([quiet, loud]), 16000) == ("u",)

    def test_last_full_frame_is_not_analysed(self):
        """Frames start strictly before len - frame_length."""
        from soundcraft.modules.analysis.tasks import classify_phonemes

        frame = 480
        y = np.concatenate([np.zeros(frame, dtype=np.float32), make_sine(440.0, duration=0.03)])
        assert len(y) == 2 * frame
        assert classify_phonemes(y, 16000) == ("a",)

    def test_clip_shorter_than_frame(self):
        from soundcraft.modules.analysis.tasks import classify_phonemes

        assert classify_phonemes(make_sine(440.0, duration=0.01), 16000) == ("a",)
        assert classify_phonemes(np.zeros(0), 16000) == ("a",)


@pytest.mark.unit
class TestCoarseAlphabet:
    """Autocorrelation classification with the coarse band table."""

    def test_400hz_is_ee(self):
        from soundcraft.modules.analysis.config import PhonemeAlphabet, PhonemeConfig
        from soundcraft.modules.analysis.tasks import classify_phonemes

        config = PhonemeConfig.for_alphabet(PhonemeAlphabet.COARSE)
        y = make_sine(400.0, sr=8000)
        assert classify_phonemes(y, 8000, config) == ("ee",)

    def test_silence_uses_coarse_fallback(self):
        from soundcraft.modules.analysis.config import PhonemeAlphabet, PhonemeConfig
        from soundcraft.modules.analysis.tasks import classify_phonemes

        config = PhonemeConfig.for_alphabet(PhonemeAlphabet.COARSE)
        assert classify_phonemes(np.zeros(8000), 8000, config) == ("ah",)

    def test_uncorrelated_frame_has_no_frequency(self):
        from soundcraft.modules.analysis.config import PhonemeAlphabet, PhonemeConfig
        from soundcraft.modules.analysis.tasks.phonemes import frame_frequency

        config = PhonemeConfig.for_alphabet(PhonemeAlphabet.COARSE)
        frame = np.zeros(160, dtype=np.float32)
        frame[0] = 1.0

        assert frame_frequency(frame, 8000, config) is None

    def test_loud_uncorrelated_frames_are_skipped(self):
        from soundcraft.modules.analysis.config import PhonemeAlphabet, PhonemeConfig
        from soundcraft.modules.analysis.tasks import classify_phonemes

        # 20 ms frames at 8 kHz; a +1/-1 click per frame clears the energy
        # threshold but correlates at no lag past 1
        config = PhonemeConfig.for_alphabet(PhonemeAlphabet.COARSE)
        y = np.zeros(8000, dtype=np.float32)
        y[0::160] = 1.0
        y[1::160] = -1.0

        assert classify_phonemes(y, 8000, config) == ("ah",)


@pytest.mark.unit
class TestBandTable:
    """Tests for PhonemeConfig band lookup."""

    @pytest.mark.parametrize("freq,symbol", [
        (100.0, "a"),
        (150.0, "r"),
        (299.9, "r"),
        (300.0, "u"),
        (999.0, "o"),
        (1000.0, "e"),
        (8000.0, "i"),
    ])
    def test_vowel_bands(self, freq, symbol):
        from soundcraft.modules.analysis.config import PhonemeConfig

        assert PhonemeConfig().band_for(freq).symbol == symbol

    def test_coarse_gap_has_no_band(self):
        from soundcraft.modules.analysis.config import PhonemeAlphabet, PhonemeConfig

        config = PhonemeConfig.for_alphabet(PhonemeAlphabet.COARSE)
        assert config.band_for(50.0) is None
        assert config.band_for(1500.0) is None

    def test_expressive_symbols(self):
        from soundcraft.modules.analysis.config import PhonemeAlphabet, PhonemeConfig

        assert PhonemeConfig().expressive_symbols == frozenset({"a", "e", "i", "o"})
        assert PhonemeConfig.for_alphabet(PhonemeAlphabet.COARSE).expressive_symbols == frozenset()


@pytest.mark.unit
class TestPhonemeTask:
    """Tests for PhonemeTask."""

    def test_fallback_flag(self, silence):
        from soundcraft.modules.analysis.tasks import PhonemeTask, create_audio_context

        y, sr = silence
        result = PhonemeTask().execute(create_audio_context(y, sr))

        assert result.phonemes == ("a",)
        assert result.used_fallback
        assert result.expressive

    def test_detected_symbols(self):
        from soundcraft.modules.analysis.tasks import PhonemeTask, create_audio_context

        result = PhonemeTask().execute(create_audio_context(make_sine(440.0), 16000))

        assert result.phonemes == ("u",)
        assert not result.used_fallback
        assert not result.expressive
        assert result.to_dict()['phonemes'] == ["u"]
