"""Gateway: sounddevice microphone recorder — implements AudioCapture port."""

from __future__ import annotations

import io
import logging
import queue
import wave

import numpy as np
import sounddevice as sd

from malayalam_stt.l1_entities.audio_constants import CHANNELS, SAMPLE_RATE
from malayalam_stt.l1_entities.errors import (
    AlreadyRecordingError,
    DeviceUnavailableError,
    PermissionDeniedError,
)
from malayalam_stt.l2_use_cases.ports.audio_capture import InputDevice

log = logging.getLogger('mstt.capture')

_PERMISSION_MARKERS = ('permission', 'access denied', 'not authorized', 'unauthorized')


def encode_wav(samples: np.ndarray, sample_rate: int, channels: int = 1) -> bytes:
    """Encode float32 samples in [-1, 1] as a 16-bit PCM WAV byte buffer."""
    pcm = np.clip(np.asarray(samples, dtype=np.float32), -1.0, 1.0)
    buf = io.BytesIO()
    with wave.open(buf, 'wb') as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(2)  # int16
        wf.setframerate(sample_rate)
        wf.writeframes((pcm * 32767).astype(np.int16).tobytes())
    return buf.getvalue()


def _parse_device(device_id: str | None) -> int | str | None:
    if device_id is None or device_id == '':
        return None
    return int(device_id) if device_id.isdigit() else device_id


def _classify(exc: Exception) -> Exception:
    message = str(exc)
    if any(marker in message.lower() for marker in _PERMISSION_MARKERS):
        return PermissionDeniedError(f'Microphone access denied: {message}')
    return DeviceUnavailableError(f'Input device unavailable: {message}')


class SounddeviceAudioCapture:
    """Wraps sounddevice.InputStream; one stream per recording session."""

    def __init__(self, sample_rate: int = SAMPLE_RATE, channels: int = CHANNELS) -> None:
        self._sample_rate = sample_rate
        self._channels = channels
        self._stream: sd.InputStream | None = None
        self._queue: queue.Queue[np.ndarray] = queue.Queue()

    @property
    def is_recording(self) -> bool:
        return self._stream is not None

    def start(self, device_id: str | None = None) -> None:
        if self._stream is not None:
            raise AlreadyRecordingError('A recording is already in progress')

        self._queue = queue.Queue()

        def _callback(indata, frames, time_info, status):
            if status:
                log.warning('PortAudio status: %s', status)
            self._queue.put(indata.copy())

        stream = None
        try:
            stream = sd.InputStream(
                samplerate=self._sample_rate,
                channels=self._channels,
                dtype='float32',
                device=_parse_device(device_id),
                callback=_callback,
            )
            stream.start()
        except (sd.PortAudioError, ValueError) as e:
            if stream is not None:
                stream.close()
            log.error('Failed to open input stream: %s', e, exc_info=True)
            raise _classify(e) from e
        self._stream = stream

    def stop(self) -> bytes | None:
        if self._stream is None:
            return None
        stream, self._stream = self._stream, None
        try:
            stream.stop()
        except sd.PortAudioError as e:
            log.error('Failed to stop input stream: %s', e, exc_info=True)
            raise DeviceUnavailableError(f'Input device failed while stopping: {e}') from e
        finally:
            stream.close()

        chunks = []
        while not self._queue.empty():
            try:
                chunks.append(self._queue.get_nowait())
            except queue.Empty:
                break
        if chunks:
            audio = np.concatenate(chunks)
        else:
            audio = np.zeros((0, self._channels), dtype=np.float32)
        log.debug('Captured %d frames', len(audio))
        return encode_wav(audio.reshape(-1), self._sample_rate, self._channels)

    def list_devices(self) -> list[InputDevice]:
        try:
            devices = sd.query_devices()
            default_in = sd.default.device[0]
        except sd.PortAudioError as e:
            raise DeviceUnavailableError(f'Cannot query audio devices: {e}') from e
        return [
            InputDevice(index=idx, name=dev['name'], is_default=idx == default_in)
            for idx, dev in enumerate(devices)
            if dev['max_input_channels'] > 0
        ]
