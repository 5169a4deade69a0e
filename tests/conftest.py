"""Shared test fixtures and protocol-conforming fakes."""

from __future__ import annotations

import numpy as np
import pytest

from malayalam_stt.l1_entities.config import AppConfig, RetryConfig
from malayalam_stt.l1_entities.errors import ModelLoadError
from malayalam_stt.l1_entities.history import HistoryStore, TranscriptResult
from malayalam_stt.l1_entities.model_state import ModelPhase, ModelStatus
from malayalam_stt.l2_use_cases.ports.audio_capture import InputDevice
from malayalam_stt.l2_use_cases.transcription_orchestrator import TranscriptionOrchestrator
from malayalam_stt.l2_use_cases.utils.progress_channel import ProgressChannel
from malayalam_stt.l4_frameworks_and_drivers.config import build_app_config

# --- Protocol-conforming Fakes ---


class FakeTranscriber:
    """Fake Transcriber for gateway tests."""

    def __init__(self, text: str = 'നമസ്കാരം', fail_load: Exception | None = None):
        self.text = text
        self.fail_load = fail_load
        self.load_model_calls: list[str] = []
        self.transcribe_calls: list[tuple[np.ndarray, str]] = []
        self.closed = False

    def load_model(self, model_path: str) -> None:
        self.load_model_calls.append(model_path)
        if self.fail_load is not None:
            raise self.fail_load

    def transcribe(self, audio: np.ndarray, language: str) -> str:
        self.transcribe_calls.append((audio, language))
        return self.text

    def close(self) -> None:
        self.closed = True


class FakeModelResolver:
    """Fake ModelResolver: returns '/models/<name>.bin' and optionally reports progress."""

    def __init__(self, progress_steps: list[int] | None = None):
        self.progress_steps = progress_steps or []
        self.resolve_calls: list[str] = []

    def resolve(self, model_name: str, on_progress=None) -> str:
        self.resolve_calls.append(model_name)
        if on_progress is not None:
            for step in self.progress_steps:
                on_progress(step)
        return f'/models/{model_name}.bin'


class FakeModelGateway:
    """Fake ModelGateway whose loads fail a configurable number of times."""

    def __init__(self, text: str = 'നമസ്കാരം', load_failures: int = 0, language: str = 'ml'):
        self.status = ModelStatus()
        self.progress = ProgressChannel()
        self.text = text
        self.load_failures = load_failures
        self.load_calls = 0
        self.transcribe_calls: list[tuple[np.ndarray, int, str]] = []
        self.set_language_calls: list[str] = []
        self.transcribe_error: Exception | None = None
        self._language = language
        self._loaded = False

    @property
    def language(self) -> str:
        return self._language

    async def ensure_loaded(self) -> None:
        if self._loaded:
            return
        self.load_calls += 1
        if self.load_failures > 0:
            self.load_failures -= 1
            self.status.phase = ModelPhase.FAILED
            raise ModelLoadError('weights unavailable')
        self._loaded = True
        self.status.phase = ModelPhase.READY

    async def transcribe(self, samples: np.ndarray, sample_rate: int, language: str) -> TranscriptResult:
        self.transcribe_calls.append((samples, sample_rate, language))
        if self.transcribe_error is not None:
            raise self.transcribe_error
        return TranscriptResult(text=self.text, language=language)

    def set_language(self, language: str) -> None:
        self.set_language_calls.append(language)
        if language != self._language:
            self._language = language
            self._loaded = False
            self.status.phase = ModelPhase.UNLOADED

    def close(self) -> None:
        self._loaded = False


class FakeAudioCapture:
    """Fake AudioCapture that returns canned bytes on stop."""

    def __init__(self, recorded: bytes = b'RIFF-fake-wav', start_error: Exception | None = None):
        self.recorded = recorded
        self.start_error = start_error
        self.start_calls: list[str | None] = []
        self.stop_calls = 0
        self._recording = False

    @property
    def is_recording(self) -> bool:
        return self._recording

    def start(self, device_id: str | None = None) -> None:
        self.start_calls.append(device_id)
        if self.start_error is not None:
            raise self.start_error
        self._recording = True

    def stop(self) -> bytes | None:
        self.stop_calls += 1
        if not self._recording:
            return None
        self._recording = False
        return self.recorded

    def list_devices(self) -> list[InputDevice]:
        return [InputDevice(index=0, name='Built-in Microphone', is_default=True), InputDevice(index=3, name='USB Mic')]


class FakeAudioDecoder:
    """Fake AudioDecoder returning fixed samples (or raising)."""

    def __init__(self, samples: np.ndarray | None = None, error: Exception | None = None):
        self.samples = samples if samples is not None else np.array([0.0, 0.25, -0.5, 0.1], dtype=np.float32)
        self.error = error
        self.decode_calls: list[tuple[bytes, int]] = []

    def decode(self, raw: bytes, target_sample_rate: int) -> np.ndarray:
        self.decode_calls.append((raw, target_sample_rate))
        if self.error is not None:
            raise self.error
        return self.samples.copy()


class FakePlaybackStore:
    """Fake PlaybackStore keeping handles in a dict."""

    def __init__(self):
        self.handles: dict[int, bytes] = {}
        self.released: list[int] = []

    def create(self, sample_id: int, raw: bytes, suffix: str = '') -> str:
        self.handles[sample_id] = raw
        return f'mem://{sample_id}{suffix}'

    def release(self, sample_id: int) -> None:
        if sample_id in self.handles:
            del self.handles[sample_id]
            self.released.append(sample_id)

    def close(self) -> None:
        for sample_id in list(self.handles):
            self.release(sample_id)


class RecordingSleep:
    """Async sleep stand-in that records the requested delays without waiting."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def make_orchestrator(
    gateway: FakeModelGateway | None = None,
    capture: FakeAudioCapture | None = None,
    decoder: FakeAudioDecoder | None = None,
    playback: FakePlaybackStore | None = None,
    capacity: int = 10,
    sleep: RecordingSleep | None = None,
    clock=None,
) -> TranscriptionOrchestrator:
    playback = playback or FakePlaybackStore()
    history = HistoryStore(capacity=capacity, on_release=lambda entry: playback.release(entry.id))
    kwargs = {}
    if clock is not None:
        kwargs['clock'] = clock
    return TranscriptionOrchestrator(
        gateway=gateway or FakeModelGateway(),
        capture=capture or FakeAudioCapture(),
        decoder=decoder or FakeAudioDecoder(),
        history=history,
        playback=playback,
        retry=RetryConfig(base_delay=1.0, max_delay=10.0, max_retries=3),
        sleep=sleep or RecordingSleep(),
        **kwargs,
    )


# --- Standard Fixtures ---


@pytest.fixture
def default_config() -> AppConfig:
    return build_app_config({})


@pytest.fixture
def fake_gateway() -> FakeModelGateway:
    return FakeModelGateway()


@pytest.fixture
def fake_capture() -> FakeAudioCapture:
    return FakeAudioCapture()


@pytest.fixture
def fake_decoder() -> FakeAudioDecoder:
    return FakeAudioDecoder()


@pytest.fixture
def fake_playback() -> FakePlaybackStore:
    return FakePlaybackStore()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def sample_config_yaml(tmp_path):
    content = """\
transcription:
  model: "small"
  models:
    en: "base"
  language: "ml"
history:
  max_entries: 5
retry:
  max_retries: 2
"""
    p = tmp_path / 'config.yaml'
    p.write_text(content, encoding='utf-8')
    return p
