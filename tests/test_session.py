"""Tests for AnalysisSession (sync and async operations)."""

import asyncio
import time

import numpy as np
import pytest

from conftest import make_sine
from soundcraft.core.errors import AudioLoadError, NoAudioLoadedError


class FakeLoader:
    """Loader stub keyed by file name; 'slow' names take a while, 'bad' names fail."""

    def load(self, path):
        from soundcraft.common.types import SampleBuffer

        name = str(path)
        if 'slow' in name:
            time.sleep(0.2)
        if 'bad' in name:
            raise AudioLoadError(f"cannot decode {name}")
        freq = 440.0 if 'fast' in name else 220.0
        return SampleBuffer.from_array(make_sine(freq), 16000)

    def load_bytes(self, data, suffix='.wav'):
        from soundcraft.common.types import SampleBuffer

        return SampleBuffer.from_array(np.frombuffer(data, dtype=np.float32), 16000)


@pytest.mark.unit
class TestSessionSync:
    """Synchronous session operations."""

    def test_operations_require_audio(self):
        from soundcraft.modules.session import AnalysisSession

        session = AnalysisSession(loader=FakeLoader())

        assert not session.has_audio
        with pytest.raises(NoAudioLoadedError):
            session.analyze()
        with pytest.raises(NoAudioLoadedError):
            session.apply_effects()
        with pytest.raises(NoAudioLoadedError):
            session.spectrum()
        with pytest.raises(NoAudioLoadedError):
            session.export_wav()

    def test_error_carries_session_id(self):
        from soundcraft.modules.session import AnalysisSession

        session = AnalysisSession(loader=FakeLoader(), session_id="abc123")
        with pytest.raises(NoAudioLoadedError) as exc_info:
            session.analyze()

        assert exc_info.value.session_id == "abc123"
        assert exc_info.value.correlation_id is not None

    def test_load_analyze_export(self, wav_file):
        from soundcraft.modules.session import AnalysisSession

        session = AnalysisSession()
        buffer = session.load(wav_file)

        assert session.has_audio
        assert session.source == wav_file.name
        assert buffer.sample_rate == 16000

        report = session.analyze()
        assert abs(report.pitch_hz - 220.0) <= 5.0

        data = session.export_wav()
        assert data[:4] == b'RIFF' and data[8:12] == b'WAVE'

    def test_effects_do_not_replace_active_buffer(self):
        from soundcraft.modules.effects import EffectParameters
        from soundcraft.modules.session import AnalysisSession

        session = AnalysisSession(loader=FakeLoader())
        original = session.load("voice.wav")
        result = session.apply_effects(EffectParameters(pitch_shift_semitones=12))

        assert len(result.buffer) == len(original) // 2
        assert session.buffer is original
        assert session.export_wav(result.buffer) != session.export_wav()

    def test_failed_load_keeps_previous_buffer(self):
        from soundcraft.modules.session import AnalysisSession

        session = AnalysisSession(loader=FakeLoader())
        first = session.load("voice.wav")

        with pytest.raises(AudioLoadError):
            session.load("bad.wav")
        assert session.buffer is first

    def test_load_from_bytes_and_buffer(self, sample_buffer):
        from soundcraft.modules.session import AnalysisSession

        session = AnalysisSession(loader=FakeLoader())
        session.load(make_sine(300.0).tobytes())
        assert len(session.buffer) == 16000
        assert session.source.startswith("<64000 bytes")

        session.load(sample_buffer)
        assert session.buffer is sample_buffer

    def test_clear(self):
        from soundcraft.modules.session import AnalysisSession

        session = AnalysisSession(loader=FakeLoader())
        session.load("voice.wav")
        session.clear()

        assert not session.has_audio
        assert session.source is None

    def test_save_wav(self, tmp_path):
        import soundfile as sf
        from soundcraft.modules.session import AnalysisSession

        session = AnalysisSession(loader=FakeLoader())
        session.load("voice.wav")
        path = session.save_wav(tmp_path / "out" / "voice.wav")

        info = sf.info(str(path))
        assert info.samplerate == 16000
        assert info.channels == 1
        assert info.subtype == 'PCM_16'


@pytest.mark.unit
class TestSessionAsync:
    """Async operations and superseded loads."""

    def test_load_and_analyze_async(self):
        from soundcraft.modules.session import AnalysisSession

        session = AnalysisSession(loader=FakeLoader())

        async def run():
            buffer = await session.load_async("voice.wav")
            report = await session.analyze_async()
            effects = await session.apply_effects_async()
            return buffer, report, effects

        buffer, report, effects = asyncio.run(run())

        assert buffer is session.buffer
        assert abs(report.pitch_hz - 220.0) <= 5.0
        assert len(effects.buffer) == len(buffer)

    def test_latest_load_wins(self):
        from soundcraft.modules.session import AnalysisSession

        session = AnalysisSession(loader=FakeLoader())

        async def run():
            return await asyncio.gather(
                session.load_async("slow.wav"),
                session.load_async("fast.wav"),
            )

        slow, fast = asyncio.run(run())

        assert slow is None
        assert fast is session.buffer
        assert session.source == "fast.wav"
        assert session.generation == 2

    def test_superseded_failure_is_ignored(self):
        from soundcraft.modules.session import AnalysisSession

        session = AnalysisSession(loader=FakeLoader())

        async def run():
            return await asyncio.gather(
                session.load_async("slow_bad.wav"),
                session.load_async("voice.wav"),
            )

        bad, good = asyncio.run(run())

        assert bad is None
        assert good is session.buffer

    def test_current_failure_propagates(self):
        from soundcraft.modules.session import AnalysisSession

        session = AnalysisSession(loader=FakeLoader())

        with pytest.raises(AudioLoadError):
            asyncio.run(session.load_async("bad.wav"))
        assert not session.has_audio

    def test_clear_supersedes_pending_load(self):
        from soundcraft.modules.session import AnalysisSession

        session = AnalysisSession(loader=FakeLoader())

        async def run():
            pending = asyncio.ensure_future(session.load_async("slow.wav"))
            await asyncio.sleep(0)
            session.clear()
            return await pending

        assert asyncio.run(run()) is None
        assert not session.has_audio
