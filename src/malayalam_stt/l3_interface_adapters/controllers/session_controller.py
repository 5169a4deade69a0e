"""SessionController — forwards UI intents to the orchestrator and tracks UI-side choices."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from malayalam_stt.l1_entities.errors import BusyError, UnsupportedFormatError
from malayalam_stt.l1_entities.history import HistoryEntry, HistoryStore
from malayalam_stt.l1_entities.language import SUPPORTED_LANGUAGES, Language, find_language
from malayalam_stt.l1_entities.session_state import SessionState
from malayalam_stt.l2_use_cases.ports.audio_capture import AudioCapture, InputDevice
from malayalam_stt.l2_use_cases.transcription_orchestrator import PipelineResult, TranscriptionOrchestrator
from malayalam_stt.l2_use_cases.utils.progress_channel import ProgressChannel
from malayalam_stt.l3_interface_adapters.gateways.ffmpeg_audio_decoder import read_audio_file

log = logging.getLogger('mstt.controller')


class SessionController:
    """Bridge between the TUI and the transcription use case.

    Owns the selected input device and validates language tags. The App (L4)
    delegates every state change to this controller.
    """

    def __init__(
        self,
        orchestrator: TranscriptionOrchestrator,
        capture: AudioCapture,
        device_id: str | None = None,
    ) -> None:
        self._orchestrator = orchestrator
        self._capture = capture
        self.device_id = device_id

    @property
    def state(self) -> SessionState:
        return self._orchestrator.state

    @property
    def history(self) -> HistoryStore:
        return self._orchestrator.history

    @property
    def model_progress(self) -> ProgressChannel:
        return self._orchestrator.progress

    @property
    def language(self) -> Language:
        tag = self._orchestrator.language
        return find_language(tag) or Language(code=tag, name=tag)

    # --- Devices ---

    def list_devices(self) -> list[InputDevice]:
        return self._capture.list_devices()

    def select_device(self, device_id: str | None) -> None:
        self.device_id = device_id or None
        log.info('Input device set to %s', self.device_id or 'default')

    # --- Recording / upload ---

    async def toggle_recording(self) -> PipelineResult:
        """Start recording when idle; otherwise stop and submit the recording."""
        if self.state.recording:
            return await self._orchestrator.submit_recording()
        return await self._orchestrator.start_recording(self.device_id)

    async def upload_file(self, path: Path) -> PipelineResult:
        if self.state.processing:
            return PipelineResult(error=BusyError('A submission is already being processed'))
        try:
            raw = await asyncio.to_thread(read_audio_file, path)
        except UnsupportedFormatError as e:
            log.warning('Upload rejected: %s', e)
            self.state.last_error = e
            return PipelineResult(error=e)
        return await self._orchestrator.submit_upload(raw, path.name)

    # --- Language ---

    def change_language(self, code: str) -> PipelineResult:
        lang = find_language(code)
        if lang is None:
            supported = ', '.join(known.code for known in SUPPORTED_LANGUAGES)
            raise ValueError(f'Unsupported language {code!r}; choose one of: {supported}')
        return self._orchestrator.set_language(lang.code)

    def cycle_language(self) -> PipelineResult:
        codes = [lang.code for lang in SUPPORTED_LANGUAGES]
        current = self.language.code
        nxt = codes[(codes.index(current) + 1) % len(codes)] if current in codes else codes[0]
        return self.change_language(nxt)

    # --- Model ---

    async def preload_model(self) -> PipelineResult:
        return await self._orchestrator.preload_model()

    async def retry_model_load(self) -> PipelineResult:
        return await self._orchestrator.retry_model_load()

    # --- History ---

    def delete_entry(self, entry_id: int) -> bool:
        return self._orchestrator.delete_entry(entry_id)

    def edit_transcript(self, entry_id: int, text: str) -> bool:
        return self._orchestrator.edit_transcript(entry_id, text)

    def entry(self, entry_id: int) -> HistoryEntry | None:
        return self.history.get(entry_id)

    def playback_uri(self, entry_id: int) -> str | None:
        entry = self.history.get(entry_id)
        return entry.sample.playback_uri if entry is not None else None
