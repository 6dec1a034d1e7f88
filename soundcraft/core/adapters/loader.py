"""Audio file loading and validation."""

import io
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

import librosa
import numpy as np
import soundfile as sf

from soundcraft.common.logging import get_logger
from soundcraft.common.types import SampleBuffer
from soundcraft.core.config.settings import get_settings
from soundcraft.core.errors import AudioLoadError

logger = get_logger(__name__)


class AudioLoader:
    """Decodes audio files and byte streams into mono SampleBuffers."""

    SUPPORTED_FORMATS = {'.wav', '.mp3', '.ogg', '.flac', '.m4a', '.aac'}

    # Containers libsndfile reads directly; others go through librosa
    SOUNDFILE_FORMATS = {'.wav', '.flac', '.ogg'}

    def __init__(self, sample_rate: Optional[int] = None, max_file_size_mb: Optional[int] = None):
        """
        Initialize audio loader.

        Args:
            sample_rate: Target sample rate (None keeps the native rate)
            max_file_size_mb: Reject larger inputs (default from settings)
        """
        settings = get_settings()
        self.sample_rate = sample_rate if sample_rate is not None else settings.target_sample_rate
        if max_file_size_mb is None:
            max_file_size_mb = settings.max_file_size_mb
        self.max_file_size_bytes = max_file_size_mb * 1024 * 1024

    @classmethod
    def is_supported_format(cls, file_path: Union[str, Path]) -> bool:
        """
        Check if file format is supported.

        Args:
            file_path: Path to audio file

        Returns:
            True if format is supported
        """
        suffix = Path(file_path).suffix.lower()
        return suffix in cls.SUPPORTED_FORMATS

    def load(
        self,
        file_path: Union[str, Path],
        duration: Optional[float] = None,
        offset: float = 0.0,
    ) -> SampleBuffer:
        """
        Load audio file.

        Args:
            file_path: Path to audio file
            duration: Duration to load in seconds (None = entire file)
            offset: Start offset in seconds

        Returns:
            Mono SampleBuffer

        Raises:
            AudioLoadError: If the file is missing, unsupported, too large
                or cannot be decoded
        """
        file_path = Path(file_path)

        if not file_path.exists():
            raise AudioLoadError(
                f"Audio file not found: {file_path}",
                data={"path": str(file_path)},
            )

        if not self.is_supported_format(file_path):
            raise AudioLoadError(
                f"Unsupported format: {file_path.suffix}. "
                f"Supported: {', '.join(sorted(self.SUPPORTED_FORMATS))}",
                data={"path": str(file_path), "suffix": file_path.suffix},
            )

        size = file_path.stat().st_size
        self._check_size(size, str(file_path))

        logger.info(f"Loading audio: {file_path.name}", data={"size_bytes": size})

        try:
            if file_path.suffix.lower() in self.SOUNDFILE_FORMATS and self.sample_rate is None:
                y, sr = self._read_soundfile(str(file_path), duration, offset)
            else:
                y, sr = librosa.load(
                    str(file_path),
                    sr=self.sample_rate,
                    duration=duration,
                    offset=offset,
                    mono=True,
                )
        except AudioLoadError:
            raise
        except Exception as e:
            raise AudioLoadError(
                f"Failed to load audio file {file_path.name}: {e}",
                data={"path": str(file_path)},
                cause=e,
            ) from e

        buffer = self._to_buffer(y, sr, file_path.name)
        logger.info(
            f"Loaded {file_path.name}: {buffer.duration_sec:.2f}s, {buffer.sample_rate}Hz",
            data=buffer.to_dict(),
        )
        return buffer

    def load_bytes(self, data: bytes, suffix: str = '.wav') -> SampleBuffer:
        """
        Decode an in-memory audio file (e.g. an upload).

        libsndfile containers are read straight from memory; anything else
        is spooled to a temporary file so librosa can pick a backend.

        Args:
            data: Encoded file contents
            suffix: Container hint such as '.wav' or '.mp3'

        Returns:
            Mono SampleBuffer

        Raises:
            AudioLoadError: If the data is empty, too large or undecodable
        """
        suffix = suffix.lower() if suffix.startswith('.') else f'.{suffix.lower()}'
        if not data:
            raise AudioLoadError("Empty audio data", data={"suffix": suffix})
        if suffix not in self.SUPPORTED_FORMATS:
            raise AudioLoadError(
                f"Unsupported format: {suffix}",
                data={"suffix": suffix},
            )
        self._check_size(len(data), f"<bytes{suffix}>")

        try:
            if suffix in self.SOUNDFILE_FORMATS and self.sample_rate is None:
                y, sr = self._read_soundfile(io.BytesIO(data), None, 0.0)
            else:
                y, sr = self._load_via_tempfile(data, suffix)
        except AudioLoadError:
            raise
        except Exception as e:
            raise AudioLoadError(
                f"Failed to decode {suffix} data: {e}",
                data={"suffix": suffix, "size_bytes": len(data)},
                cause=e,
            ) from e

        return self._to_buffer(y, sr, f"<bytes{suffix}>")

    def get_duration(self, file_path: Union[str, Path]) -> float:
        """
        Get audio file duration without loading entire file.

        Raises:
            AudioLoadError: If the file is missing or unreadable
        """
        file_path = Path(file_path)

        if not file_path.exists():
            raise AudioLoadError(
                f"Audio file not found: {file_path}",
                data={"path": str(file_path)},
            )

        try:
            return float(librosa.get_duration(path=str(file_path)))
        except Exception as e:
            raise AudioLoadError(
                f"Failed to get audio duration: {e}",
                data={"path": str(file_path)},
                cause=e,
            ) from e

    def validate_file(self, file_path: Union[str, Path]) -> bool:
        """
        Validate that audio file can be loaded.

        Returns:
            True if the first second decodes
        """
        try:
            self.load(file_path, duration=1.0)
            return True
        except AudioLoadError as e:
            logger.warning(f"File validation failed for {file_path}: {e.message}")
            return False

    def _check_size(self, size: int, name: str) -> None:
        if size > self.max_file_size_bytes:
            raise AudioLoadError(
                f"Audio input too large: {size / 1024 / 1024:.1f} MB",
                data={"source": name, "size_bytes": size, "limit_bytes": self.max_file_size_bytes},
            )

    @staticmethod
    def _read_soundfile(source, duration: Optional[float], offset: float):
        with sf.SoundFile(source) as f:
            sr = f.samplerate
            start = int(round(offset * sr))
            if start:
                f.seek(min(start, f.frames))
            frames = -1 if duration is None else int(round(duration * sr))
            y = f.read(frames=frames, dtype='float32', always_2d=False)
        return y, sr

    def _load_via_tempfile(self, data: bytes, suffix: str):
        fd, tmp_path = tempfile.mkstemp(suffix=suffix)
        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(data)
            return librosa.load(tmp_path, sr=self.sample_rate, mono=True)
        finally:
            os.unlink(tmp_path)

    @staticmethod
    def _to_buffer(y: np.ndarray, sr: int, name: str) -> SampleBuffer:
        y = np.asarray(y)
        if y.size == 0:
            raise AudioLoadError(
                f"Decoded audio is empty: {name}",
                data={"source": name},
            )
        # soundfile returns (frames, channels)
        if y.ndim == 2:
            y = np.mean(y, axis=1)
        return SampleBuffer.from_array(y, int(sr))
