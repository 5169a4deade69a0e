"""Use case: drive one audio submission from capture to history.

Stages: IDLE -> CAPTURING -> DECODING -> TRANSCRIBING -> IDLE. Every stage
error returns the pipeline to IDLE with the error stored in the session.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import PurePath

from malayalam_stt.l1_entities.audio_constants import SAMPLE_RATE
from malayalam_stt.l1_entities.config import RetryConfig
from malayalam_stt.l1_entities.errors import (
    BusyError,
    ModelLoadError,
    ModelUnavailableError,
    NotRecordingError,
    PlaybackStoreError,
    SpeechAppError,
)
from malayalam_stt.l1_entities.history import AudioSample, HistoryEntry, HistoryStore, TranscriptResult
from malayalam_stt.l1_entities.session_state import PipelineStage, SessionState
from malayalam_stt.l2_use_cases.ports.audio_capture import AudioCapture
from malayalam_stt.l2_use_cases.ports.audio_decoder import AudioDecoder
from malayalam_stt.l2_use_cases.ports.model_gateway import ModelGateway
from malayalam_stt.l2_use_cases.ports.playback_store import PlaybackStore
from malayalam_stt.l2_use_cases.utils.audio_processing import peak_normalize
from malayalam_stt.l2_use_cases.utils.progress_channel import ProgressChannel

log = logging.getLogger('mstt.orchestrator')

UNRECOGNIZED_TEXT = 'വാക്ക് തിരിച്ചറിഞ്ഞില്ല'

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class PipelineResult:
    """Outcome of one user intent — a new history entry, an error, or neither."""

    entry: HistoryEntry | None = None
    error: SpeechAppError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class TranscriptionOrchestrator:
    """Serialises submissions through decode, normalise, recognise and history append.

    Only one submission may be in flight; others are refused with BusyError.
    Model load failures are retried with exponential backoff until
    ``retry.max_retries`` is exhausted, after which loads stay refused until
    ``retry_model_load()`` is called.
    """

    def __init__(
        self,
        gateway: ModelGateway,
        capture: AudioCapture,
        decoder: AudioDecoder,
        history: HistoryStore,
        playback: PlaybackStore,
        *,
        retry: RetryConfig | None = None,
        unrecognized_text: str = UNRECOGNIZED_TEXT,
        sleep: Sleep = asyncio.sleep,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._gateway = gateway
        self._capture = capture
        self._decoder = decoder
        self._playback = playback
        self._retry = retry or RetryConfig(base_delay=1.0, max_delay=10.0, max_retries=3)
        self._unrecognized_text = unrecognized_text
        self._sleep = sleep
        self._clock = clock

        self.state = SessionState(model=gateway.status, history=history)

        self._attempt = 0
        self._model_unavailable = False
        self._load_task: asyncio.Task | None = None
        self._last_sample_id = 0

    @property
    def history(self) -> HistoryStore:
        return self.state.history

    @property
    def language(self) -> str:
        return self._gateway.language

    @property
    def progress(self) -> ProgressChannel:
        return self._gateway.progress

    @property
    def retry_attempt(self) -> int:
        return self._attempt

    @property
    def model_unavailable(self) -> bool:
        return self._model_unavailable

    # --- Capture ---

    async def start_recording(self, device_id: str | None = None) -> PipelineResult:
        if self.state.processing:
            return PipelineResult(error=BusyError('A submission is already being processed'))
        try:
            await asyncio.to_thread(self._capture.start, device_id)
        except SpeechAppError as e:
            log.warning('Recording could not start: %s', e)
            return self._fail(e)
        self.state.recording = True
        self.state.stage = PipelineStage.CAPTURING
        self.state.last_error = None
        log.info('Recording started (device=%s)', device_id or 'default')
        return PipelineResult()

    # --- Submissions ---

    async def submit_recording(self) -> PipelineResult:
        """Stop the active recording and run it through the pipeline."""
        if self.state.processing:
            return PipelineResult(error=BusyError('A submission is already being processed'))
        self._begin()
        try:
            raw = await asyncio.to_thread(self._capture.stop)
            self.state.recording = False
            if raw is None:
                raise NotRecordingError('Nothing was recorded')
            log.info('Recording stopped: %d bytes captured', len(raw))
            entry = await self._run_pipeline(raw, source='recording', suffix='.wav')
        except SpeechAppError as e:
            return self._fail(e)
        finally:
            self._end()
        return PipelineResult(entry=entry)

    async def submit_upload(self, raw: bytes, name: str = 'upload') -> PipelineResult:
        """Run uploaded audio bytes through the pipeline."""
        if self.state.processing:
            return PipelineResult(error=BusyError('A submission is already being processed'))
        self._begin()
        try:
            log.info('Upload received: %s (%d bytes)', name, len(raw))
            entry = await self._run_pipeline(raw, source=name, suffix=PurePath(name).suffix)
        except SpeechAppError as e:
            return self._fail(e)
        finally:
            self._end()
        return PipelineResult(entry=entry)

    async def _run_pipeline(self, raw: bytes, *, source: str, suffix: str) -> HistoryEntry:
        self.state.stage = PipelineStage.DECODING
        samples = await asyncio.to_thread(self._decoder.decode, raw, SAMPLE_RATE)
        samples = peak_normalize(samples)
        log.debug('Decoded %d samples (%.2fs)', len(samples), len(samples) / SAMPLE_RATE)

        self.state.stage = PipelineStage.TRANSCRIBING
        await self.ensure_model()
        result = await self._gateway.transcribe(samples, SAMPLE_RATE, self._gateway.language)
        if not result.text.strip():
            result = TranscriptResult(text=self._unrecognized_text, language=result.language)
            log.info('No speech recognised; using placeholder text')

        sample_id = self._next_sample_id()
        try:
            playback_uri = self._playback.create(sample_id, raw, suffix or '.bin')
        except OSError as e:
            log.error('Cannot store audio for playback: %s', e, exc_info=True)
            raise PlaybackStoreError(f'Cannot store audio for playback: {e}') from e
        sample = AudioSample(id=sample_id, raw=raw, source=source, playback_uri=playback_uri)
        entry = HistoryEntry.create(sample, result)
        evicted = self.history.append(entry)
        if evicted:
            log.debug('Evicted %d history entries', len(evicted))
        self.state.current_transcript = result
        log.info('Transcribed %s -> %d chars [%s]', source, len(result.text), result.language)
        return entry

    # --- Model loading with backoff ---

    async def ensure_model(self) -> None:
        """Make sure the model is ready, retrying load failures with backoff.

        Concurrent callers share one backoff sequence; cancelling one caller
        leaves the shared sequence running for the others.
        Raises ModelUnavailableError once retries are exhausted.
        """
        if self._model_unavailable:
            raise ModelUnavailableError('Model unavailable; retry loading to try again')
        if self._load_task is None:
            self._load_task = asyncio.ensure_future(self._load_with_backoff())
        await asyncio.shield(self._load_task)

    async def _load_with_backoff(self) -> None:
        try:
            while True:
                try:
                    await self._gateway.ensure_loaded()
                except ModelLoadError as e:
                    if self._attempt >= self._retry.max_retries:
                        self._model_unavailable = True
                        log.error('Model load failed after %d retries: %s', self._attempt, e)
                        raise ModelUnavailableError(f'Model unavailable after {self._attempt} retries: {e}') from e
                    delay = self._retry.delay_for(self._attempt)
                    self._attempt += 1
                    log.warning(
                        'Model load failed (%s); retry %d/%d in %.1fs',
                        e,
                        self._attempt,
                        self._retry.max_retries,
                        delay,
                    )
                    await self._sleep(delay)
                else:
                    self._attempt = 0
                    return
        finally:
            self._load_task = None

    async def preload_model(self) -> PipelineResult:
        """Warm the model up ahead of the first submission."""
        try:
            await self.ensure_model()
        except SpeechAppError as e:
            self.state.last_error = e
            return PipelineResult(error=e)
        return PipelineResult()

    async def retry_model_load(self) -> PipelineResult:
        """Explicit user retry: reset the attempt counter and load again.

        A load already in flight is joined as-is, counter included.
        """
        if self._load_task is not None:
            log.info('Manual model reload requested; joining the load in progress')
            return await self.preload_model()
        self._attempt = 0
        self._model_unavailable = False
        self.state.last_error = None
        log.info('Manual model reload requested')
        return await self.preload_model()

    def set_language(self, language: str) -> PipelineResult:
        if self.state.processing:
            return PipelineResult(error=BusyError('Cannot change language while processing'))
        if language != self._gateway.language:
            self._gateway.set_language(language)
            self._attempt = 0
            self._model_unavailable = False
            log.info('Language set to %s', language)
        return PipelineResult()

    # --- History intents ---

    def delete_entry(self, entry_id: int) -> bool:
        return self.history.delete(entry_id)

    def edit_transcript(self, entry_id: int, text: str) -> bool:
        return self.history.edit_transcript(entry_id, text)

    # --- Helpers ---

    def _begin(self) -> None:
        self.state.processing = True
        self.state.last_error = None

    def _end(self) -> None:
        self.state.processing = False
        self.state.stage = self._resting_stage()

    def _fail(self, error: SpeechAppError) -> PipelineResult:
        if not isinstance(error, (ModelLoadError, ModelUnavailableError)):
            log.error('Submission failed: %s: %s', type(error).__name__, error)
        self.state.last_error = error
        self.state.recording = self._capture.is_recording
        self.state.stage = self._resting_stage()
        return PipelineResult(error=error)

    def _resting_stage(self) -> PipelineStage:
        # An open microphone outlives a failed or finished submission.
        return PipelineStage.CAPTURING if self._capture.is_recording else PipelineStage.IDLE

    def _next_sample_id(self) -> int:
        sample_id = max(int(self._clock() * 1000), self._last_sample_id + 1)
        self._last_sample_id = sample_id
        return sample_id
