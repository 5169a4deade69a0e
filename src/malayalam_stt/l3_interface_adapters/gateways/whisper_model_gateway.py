"""Gateway: whisper model lifecycle — implements ModelGateway port.

Owns the one loaded transcriber for the process. The handle is cached until
the language changes; loads are single-flight and never retried here.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

import numpy as np

from malayalam_stt.l1_entities.audio_constants import SAMPLE_RATE
from malayalam_stt.l1_entities.config import TranscriptionConfig
from malayalam_stt.l1_entities.errors import ModelLoadError, ModelNotReadyError, TranscribeError
from malayalam_stt.l1_entities.history import TranscriptResult
from malayalam_stt.l1_entities.model_state import ModelPhase, ModelStatus
from malayalam_stt.l2_use_cases.ports.model_resolver import ModelResolver
from malayalam_stt.l2_use_cases.ports.transcriber import Transcriber
from malayalam_stt.l2_use_cases.utils.audio_processing import resample_linear
from malayalam_stt.l2_use_cases.utils.progress_channel import ProgressChannel

log = logging.getLogger('mstt.model')


class WhisperModelGateway:
    """Resolves, loads and caches a whisper transcriber for the configured language."""

    def __init__(
        self,
        config: TranscriptionConfig,
        resolver: ModelResolver,
        transcriber_factory: Callable[[], Transcriber],
        language: str | None = None,
    ) -> None:
        self._config = config
        self._resolver = resolver
        self._transcriber_factory = transcriber_factory
        self._language = language or config.language

        self.status = ModelStatus()
        self.progress = ProgressChannel()
        self.progress.subscribe(self._track_progress)

        self._transcriber: Transcriber | None = None
        self._loaded_language: str | None = None
        self._inflight: asyncio.Task | None = None

    @property
    def language(self) -> str:
        return self._language

    @property
    def is_loaded(self) -> bool:
        return self._transcriber is not None and self._loaded_language == self._language

    def _track_progress(self, percent: int) -> None:
        self.status.progress = percent

    async def ensure_loaded(self) -> None:
        while not self.is_loaded:
            if self._inflight is None:
                self._inflight = asyncio.ensure_future(self._load(self._language))
            await asyncio.shield(self._inflight)

    async def _load(self, language: str) -> None:
        model_name = self._config.model_for_language(language)
        self.status.phase = ModelPhase.LOADING
        self.status.name = model_name
        self.status.error = ''
        self.progress.reset()
        log.info('Loading model %s for language %s', model_name, language)

        transcriber: Transcriber | None = None
        try:
            model_path = await asyncio.to_thread(self._resolver.resolve, model_name, self.progress.emit)
            transcriber = self._transcriber_factory()
            await asyncio.to_thread(transcriber.load_model, model_path)
        except asyncio.CancelledError:
            if transcriber is not None:
                transcriber.close()
            self.status.phase = ModelPhase.UNLOADED
            log.warning('Model load for %s cancelled', model_name)
            raise
        except Exception as e:
            if transcriber is not None:
                transcriber.close()
            self.status.phase = ModelPhase.FAILED
            self.status.error = str(e)
            log.error('Model load failed: %s', e, exc_info=True)
            raise ModelLoadError(f'Failed to load model {model_name}: {e}') from e
        finally:
            self._inflight = None

        if language != self._language:
            # Reconfigured while loading; the next ensure_loaded() loads again.
            transcriber.close()
            self.status.phase = ModelPhase.UNLOADED
            return

        self._discard()
        self._transcriber = transcriber
        self._loaded_language = language
        self.progress.emit(100)
        self.status.phase = ModelPhase.READY
        log.info('Model %s ready', model_name)

    async def transcribe(self, samples: np.ndarray, sample_rate: int, language: str) -> TranscriptResult:
        if not self.is_loaded or language != self._loaded_language:
            raise ModelNotReadyError(f'Model for {language!r} is not loaded')
        audio = resample_linear(samples, sample_rate, SAMPLE_RATE)
        transcriber = self._transcriber
        try:
            text = await asyncio.to_thread(transcriber.transcribe, audio, language)
        except Exception as e:
            log.error('Transcription failed: %s', e, exc_info=True)
            raise TranscribeError(f'Transcription failed: {e}') from e
        return TranscriptResult(text=text.strip(), language=language)

    def set_language(self, language: str) -> None:
        if language == self._language:
            return
        log.info('Language changed %s -> %s; discarding cached model', self._language, language)
        self._language = language
        self._discard()
        if self._inflight is None:
            self.status.phase = ModelPhase.UNLOADED
            self.status.progress = 0

    def close(self) -> None:
        self._discard()
        self.status.phase = ModelPhase.UNLOADED

    def _discard(self) -> None:
        if self._transcriber is not None:
            self._transcriber.close()
        self._transcriber = None
        self._loaded_language = None
