"""Tests for YAML config, environment settings and AnalysisConfig building."""

import pytest

from soundcraft.core.errors import ConfigurationError


@pytest.fixture
def clean_settings(monkeypatch):
    """Reset the settings singleton around a test."""
    from soundcraft.core.config import reset_settings

    for var in ("SOUNDCRAFT_SAMPLE_RATE", "MAX_FILE_SIZE_MB", "SOUNDCRAFT_CONFIG",
                "LOG_LEVEL", "LOG_JSON", "LOG_FILE"):
        monkeypatch.delenv(var, raising=False)
    reset_settings()
    yield monkeypatch
    reset_settings()


@pytest.mark.unit
class TestConfig:
    """Tests for the YAML-backed Config."""

    def test_default_file_loads(self):
        from soundcraft.core.config import DEFAULT_CONFIG_PATH, Config

        assert DEFAULT_CONFIG_PATH.exists()
        config = Config()
        assert config.get('pitch.min_freq') == 50.0
        assert config.get('phonemes.alphabet') == "vowel"

    def test_get_set_dot_path(self):
        from soundcraft.core.config import Config

        config = Config(data={'a': {'b': 1}})
        assert config.get('a.b') == 1
        assert config.get('a.c', 'fallback') == 'fallback'
        assert config.get('a.b.c') is None

        config.set('x.y.z', 3)
        assert config.get('x.y.z') == 3
        assert config.section('x') == {'y': {'z': 3}}
        assert config.section('missing') == {}

    def test_save_round_trip(self, tmp_path):
        from soundcraft.core.config import Config

        config = Config(data={'pitch': {'min_freq': 70.0}})
        path = tmp_path / "cfg" / "custom.yaml"
        config.save(str(path))

        assert Config(str(path)).get('pitch.min_freq') == 70.0

    def test_missing_file(self, tmp_path):
        from soundcraft.core.config import Config

        with pytest.raises(ConfigurationError):
            Config(str(tmp_path / "absent.yaml"))

    def test_invalid_yaml(self, tmp_path):
        from soundcraft.core.config import Config

        path = tmp_path / "bad.yaml"
        path.write_text("pitch: [unclosed")
        with pytest.raises(ConfigurationError):
            Config(str(path))

    def test_top_level_must_be_mapping(self, tmp_path):
        from soundcraft.core.config import Config

        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigurationError):
            Config(str(path))

    def test_empty_file_is_empty_config(self, tmp_path):
        from soundcraft.core.config import Config

        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert Config(str(path)).to_dict() == {}


@pytest.mark.unit
class TestAnalysisConfigFromYaml:
    """Tests for AnalysisConfig.from_config()."""

    def test_default_file_matches_builtin_defaults(self):
        from soundcraft.core.config import Config
        from soundcraft.modules.analysis.config import AnalysisConfig

        assert AnalysisConfig.from_config(Config()) == AnalysisConfig()

    def test_section_override(self):
        from soundcraft.core.config import Config
        from soundcraft.common.primitives import NoiseThresholdMode
        from soundcraft.modules.analysis.config import AnalysisConfig

        config = Config(data={
            'pitch': {'min_freq': 80.0},
            'noise_reduction': {'mode': 'fixed'},
            'vocoder': {'window_size': 1024},
        })
        analysis = AnalysisConfig.from_config(config)

        assert analysis.pitch.min_freq == 80.0
        assert analysis.pitch.max_freq == 500.0
        assert analysis.noise_reduction.mode == NoiseThresholdMode.FIXED
        assert analysis.vocoder.hop_size == 128

    def test_alphabet_selection(self):
        from soundcraft.core.config import Config
        from soundcraft.modules.analysis.config import AnalysisConfig, FrequencyMethod, PhonemeAlphabet

        yaml_coarse = AnalysisConfig.from_config(Config(data={'phonemes': {'alphabet': 'coarse'}}))
        assert yaml_coarse.phonemes.method == FrequencyMethod.AUTOCORRELATION
        assert yaml_coarse.phonemes.fallback == ("ah",)

        forced = AnalysisConfig.from_config(
            Config(data={'phonemes': {'alphabet': 'coarse'}}), alphabet=PhonemeAlphabet.VOWEL
        )
        assert forced.phonemes.fallback == ("a",)

    def test_custom_bands_and_emotions(self):
        from soundcraft.core.config import Config
        from soundcraft.modules.analysis.config import AnalysisConfig

        config = Config(data={
            'phonemes': {'bands': [
                {'low': 0, 'high': 500, 'symbol': 'lo', 'expressive': True},
                {'low': 500, 'symbol': 'hi'},
            ]},
            'sentiment': {'emotions': [
                {'label': 'calm', 'pitch_range': [0, 400],
                 'amplitude_range': [0, 1], 'clarity_range': [0, 1]},
            ]},
        })
        analysis = AnalysisConfig.from_config(config)

        assert analysis.phonemes.band_for(10000.0).symbol == "hi"
        assert analysis.phonemes.expressive_symbols == frozenset({"lo"})
        assert [p.label for p in analysis.sentiment.prototypes] == ["calm"]

    def test_yaml_bands_and_emotions_drive_classifiers(self, tmp_path):
        import numpy as np

        from conftest import make_sine
        from soundcraft.core.config import Config
        from soundcraft.modules.analysis.config import AnalysisConfig
        from soundcraft.modules.analysis.tasks import classify_phonemes, classify_sentiment

        path = tmp_path / "custom.yaml"
        path.write_text(
            "phonemes:\n"
            "  bands:\n"
            "    - {low: 0, high: 1000, symbol: lo, expressive: true}\n"
            "    - {low: 1000, symbol: hi}\n"
            "sentiment:\n"
            "  emotions:\n"
            "    - {label: calm, pitch_range: [0, 400], amplitude_range: [0, 1],\n"
            "       clarity_range: [0, 1], phonemes: [lo]}\n"
            "    - {label: excited, pitch_range: [400, 600], amplitude_range: [0, 1],\n"
            "       clarity_range: [0, 1], phonemes: [hi]}\n"
        )
        analysis = AnalysisConfig.from_config(Config(str(path)))

        y = np.concatenate([make_sine(440.0, duration=0.3), make_sine(2500.0, duration=0.3)])
        assert classify_phonemes(y, 16000, analysis.phonemes) == ("lo", "hi")

        assert classify_sentiment(300.0, 0.1, 0.5, ("lo",), analysis.sentiment).label == "calm"
        assert classify_sentiment(500.0, 0.1, 0.5, ("hi",), analysis.sentiment).label == "excited"

    def test_unknown_section_rejected(self):
        from soundcraft.core.config import Config
        from soundcraft.modules.analysis.config import AnalysisConfig

        with pytest.raises(ConfigurationError) as exc_info:
            AnalysisConfig.from_config(Config(data={'audio': {'sample_rate': 0}}))
        assert exc_info.value.data['unknown'] == ['audio']

    def test_unknown_key_rejected(self):
        from soundcraft.core.config import Config
        from soundcraft.modules.analysis.config import AnalysisConfig

        with pytest.raises(ConfigurationError) as exc_info:
            AnalysisConfig.from_config(Config(data={'pitch': {'min_frequency': 10}}))
        assert exc_info.value.data['unknown'] == ['min_frequency']

    def test_unknown_alphabet_rejected(self):
        from soundcraft.core.config import Config
        from soundcraft.modules.analysis.config import AnalysisConfig

        with pytest.raises(ConfigurationError):
            AnalysisConfig.from_config(Config(data={'phonemes': {'alphabet': 'klingon'}}))

    @pytest.mark.parametrize("section,values", [
        ('vocoder', {'window_size': 1000}),
        ('vocoder', {'hop_divisor': 0}),
        ('noise_reduction', {'attenuation': 1.0}),
    ])
    def test_invalid_values_rejected(self, section, values):
        from soundcraft.core.config import Config
        from soundcraft.modules.analysis.config import AnalysisConfig

        with pytest.raises(ConfigurationError):
            AnalysisConfig.from_config(Config(data={section: values}))


@pytest.mark.unit
class TestSettings:
    """Tests for environment-driven Settings."""

    def test_defaults(self, clean_settings):
        from soundcraft.core.config import get_settings

        settings = get_settings()
        assert settings.target_sample_rate is None
        assert settings.max_file_size_mb == 100
        assert settings.log_level is None
        assert settings.log_json is False
        assert settings.config_path is None

    def test_environment_overrides(self, clean_settings):
        from soundcraft.core.config import LogLevel, get_settings, reset_settings

        clean_settings.setenv("SOUNDCRAFT_SAMPLE_RATE", "22050")
        clean_settings.setenv("MAX_FILE_SIZE_MB", "5")
        clean_settings.setenv("LOG_LEVEL", "debug")
        clean_settings.setenv("LOG_JSON", "true")
        reset_settings()

        settings = get_settings()
        assert settings.target_sample_rate == 22050
        assert settings.max_file_size_bytes == 5 * 1024 * 1024
        assert settings.log_level == LogLevel.DEBUG
        assert settings.log_json is True

    @pytest.mark.parametrize("var,value", [
        ("SOUNDCRAFT_SAMPLE_RATE", "fast"),
        ("MAX_FILE_SIZE_MB", "-1"),
        ("LOG_LEVEL", "LOUD"),
    ])
    def test_malformed_environment(self, clean_settings, var, value):
        from soundcraft.core.config import Settings

        clean_settings.setenv(var, value)
        with pytest.raises(ConfigurationError):
            Settings()

    def test_loader_uses_settings(self, clean_settings):
        from soundcraft.core.adapters import AudioLoader
        from soundcraft.core.config import reset_settings

        clean_settings.setenv("SOUNDCRAFT_SAMPLE_RATE", "8000")
        clean_settings.setenv("MAX_FILE_SIZE_MB", "1")
        reset_settings()

        loader = AudioLoader()
        assert loader.sample_rate == 8000
        assert loader.max_file_size_bytes == 1024 * 1024
