"""Dependency container — composition root for wiring all layers together."""

from __future__ import annotations

from malayalam_stt.l1_entities.config import AppConfig
from malayalam_stt.l1_entities.history import HistoryEntry, HistoryStore
from malayalam_stt.l2_use_cases.ports.audio_capture import AudioCapture
from malayalam_stt.l2_use_cases.ports.audio_decoder import AudioDecoder
from malayalam_stt.l2_use_cases.ports.model_gateway import ModelGateway
from malayalam_stt.l2_use_cases.ports.model_resolver import ModelResolver
from malayalam_stt.l2_use_cases.ports.playback_store import PlaybackStore
from malayalam_stt.l2_use_cases.ports.transcriber import Transcriber
from malayalam_stt.l2_use_cases.transcription_orchestrator import TranscriptionOrchestrator
from malayalam_stt.l3_interface_adapters.controllers.session_controller import SessionController
from malayalam_stt.l3_interface_adapters.gateways.ffmpeg_audio_decoder import FfmpegAudioDecoder
from malayalam_stt.l3_interface_adapters.gateways.hf_model_resolver import HfModelResolver
from malayalam_stt.l3_interface_adapters.gateways.sounddevice_audio_capture import SounddeviceAudioCapture
from malayalam_stt.l3_interface_adapters.gateways.subprocess_whisper_transcriber import SubprocessWhisperTranscriber
from malayalam_stt.l3_interface_adapters.gateways.temp_file_playback_store import TempFilePlaybackStore
from malayalam_stt.l3_interface_adapters.gateways.whisper_model_gateway import WhisperModelGateway
from malayalam_stt.l3_interface_adapters.gateways.whisper_transcriber import WhisperTranscriber


class DependencyContainer:
    """Creates and wires all concrete instances. Easy to override for testing.

    ``in_process=True`` runs whisper inside this process (headless batch mode);
    the TUI keeps it in a spawned subprocess so a native crash cannot take the
    terminal down with it.
    """

    def __init__(
        self,
        config: AppConfig,
        *,
        in_process: bool = False,
        language: str | None = None,
        device_id: str | None = None,
    ) -> None:
        self.config = config
        self._in_process = in_process

        self.model_resolver: ModelResolver = HfModelResolver()
        self.gateway: ModelGateway = WhisperModelGateway(
            config.transcription,
            self.model_resolver,
            self._make_transcriber,
            language=language,
        )
        self.audio_capture: AudioCapture = SounddeviceAudioCapture(
            sample_rate=config.capture.sample_rate,
            channels=config.capture.channels,
        )
        self.audio_decoder: AudioDecoder = FfmpegAudioDecoder()
        self.playback: PlaybackStore = TempFilePlaybackStore()
        self.history = HistoryStore(capacity=config.history.max_entries, on_release=self._release_playback)

        self.orchestrator = TranscriptionOrchestrator(
            gateway=self.gateway,
            capture=self.audio_capture,
            decoder=self.audio_decoder,
            history=self.history,
            playback=self.playback,
            retry=config.retry,
            unrecognized_text=config.transcription.unrecognized_text,
        )
        self.controller = SessionController(
            self.orchestrator,
            self.audio_capture,
            device_id=device_id if device_id is not None else config.capture.device,
        )

    def _make_transcriber(self) -> Transcriber:
        if self._in_process:
            return WhisperTranscriber()
        return SubprocessWhisperTranscriber()

    def _release_playback(self, entry: HistoryEntry) -> None:
        self.playback.release(entry.id)

    def close(self) -> None:
        """Stop any live recording and release the model and playback files."""
        self.audio_capture.stop()
        self.gateway.close()
        self.history.clear()
        self.playback.close()
