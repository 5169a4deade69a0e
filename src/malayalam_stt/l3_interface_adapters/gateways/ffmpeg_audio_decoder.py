"""Gateway: audio decoder — decodes any container ffmpeg understands, via a subprocess."""

from __future__ import annotations

import logging
import shutil
import subprocess  # noqa: S404 -- intentional: shells out to ffmpeg with a fixed arg list, not shell=True
from pathlib import Path

import numpy as np

from malayalam_stt.l1_entities.audio_constants import SAMPLE_RATE
from malayalam_stt.l1_entities.errors import CorruptDataError, UnsupportedFormatError

log = logging.getLogger('mstt.decoder')

_FFMPEG_TIMEOUT = 300  # seconds

# ffmpeg stderr fragments that mean "not a format/codec we can read at all".
_UNSUPPORTED_MARKERS = (
    'unknown input format',
    'could not find codec parameters',
    'decoder not found',
    'not currently supported',
    'does not contain any stream',
)


def ffmpeg_available() -> bool:
    return shutil.which('ffmpeg') is not None


class FfmpegAudioDecoder:
    """Decodes compressed audio bytes to float32 mono PCM by piping them through ffmpeg.

    The ffmpeg process is the decoding context: ``subprocess.run`` reaps it on
    success, on a non-zero exit and on timeout.
    """

    def decode(self, raw: bytes, target_sample_rate: int = SAMPLE_RATE) -> np.ndarray:
        if not raw:
            raise CorruptDataError('Audio buffer is empty')

        if not ffmpeg_available():
            raise UnsupportedFormatError(
                'ffmpeg is required but not found on PATH.\n  macOS:  brew install ffmpeg\n  Debian: apt install ffmpeg'
            )

        cmd = [
            'ffmpeg',
            '-i',
            'pipe:0',
            '-ar',
            str(target_sample_rate),
            '-ac',
            '1',
            '-f',
            'f32le',
            '-v',
            'error',
            'pipe:1',
        ]

        try:
            result = subprocess.run(cmd, input=raw, capture_output=True, timeout=_FFMPEG_TIMEOUT)  # noqa: S603
        except subprocess.TimeoutExpired as exc:
            raise CorruptDataError(f'ffmpeg timed out after {_FFMPEG_TIMEOUT}s decoding {len(raw)} bytes') from exc
        except OSError as exc:
            raise UnsupportedFormatError(f'Failed to launch ffmpeg: {exc}') from exc

        if result.returncode != 0:
            stderr = result.stderr.decode('utf-8', errors='replace').strip()
            log.warning('ffmpeg exited with code %d: %s', result.returncode, stderr)
            if any(marker in stderr.lower() for marker in _UNSUPPORTED_MARKERS):
                raise UnsupportedFormatError(f'Unsupported audio format: {stderr}')
            raise CorruptDataError(f'ffmpeg exited with code {result.returncode}: {stderr}')

        if not result.stdout:
            raise CorruptDataError('ffmpeg produced no audio output')

        usable = len(result.stdout) - len(result.stdout) % 4
        audio = np.frombuffer(result.stdout[:usable], dtype=np.float32)
        if len(audio) == 0:
            raise CorruptDataError('Audio appears to be empty')
        return audio.copy()


def read_audio_file(path: Path) -> bytes:
    """Read an audio file into memory for upload. Raises UnsupportedFormatError if missing or unreadable."""
    if not path.exists() or not path.is_file():
        raise UnsupportedFormatError(f'Audio file not found: {path}')
    try:
        return path.read_bytes()
    except OSError as exc:
        raise UnsupportedFormatError(f'Cannot read audio file {path}: {exc}') from exc
