"""SpeechApp — record or upload audio, browse and edit the transcript history."""

from __future__ import annotations

import logging
import subprocess  # noqa: S404 -- used for fire-and-forget OS audio player launch
import sys
from pathlib import Path

from textual.app import App as TextualApp
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import OptionList, Static

from malayalam_stt.l1_entities.config import AppConfig
from malayalam_stt.l1_entities.errors import (
    AudioDecodeError,
    BusyError,
    CaptureError,
    ModelUnavailableError,
    PermissionDeniedError,
    SpeechAppError,
)
from malayalam_stt.l3_interface_adapters.controllers.session_controller import SessionController
from malayalam_stt.l4_frameworks_and_drivers.messages import (
    ModelLoadFinished,
    ModelLoadProgress,
    PipelineFinished,
)
from malayalam_stt.l4_frameworks_and_drivers.widgets.download_modal import DownloadModal
from malayalam_stt.l4_frameworks_and_drivers.widgets.edit_modal import EditModal
from malayalam_stt.l4_frameworks_and_drivers.widgets.help_modal import HelpModal
from malayalam_stt.l4_frameworks_and_drivers.widgets.history_panel import HistoryPanel
from malayalam_stt.l4_frameworks_and_drivers.widgets.status_bar import StatusBar
from malayalam_stt.l4_frameworks_and_drivers.widgets.transcript_panel import TranscriptPanel
from malayalam_stt.l4_frameworks_and_drivers.widgets.upload_modal import UploadModal

log = logging.getLogger('mstt.app')

_HELP_KEYS = [
    ('r', 'Start recording / stop and transcribe'),
    ('u', 'Upload an audio file'),
    ('e', 'Edit the selected transcript'),
    ('x', 'Delete the selected entry'),
    ('o', 'Play the selected recording'),
    ('c', 'Copy the transcript panel'),
    ('g', 'Switch language'),
    ('y', 'Retry loading the model'),
    ('Tab', 'Switch panel focus'),
    ('h', 'Toggle this help'),
    ('q', 'Quit'),
]


def describe_error(error: SpeechAppError) -> str:
    """User-facing one-liner for a pipeline error."""
    if isinstance(error, PermissionDeniedError):
        return f'Microphone permission denied: {error}'
    if isinstance(error, CaptureError):
        return f'Recording failed: {error}'
    if isinstance(error, AudioDecodeError):
        return f'Could not decode audio: {error}'
    if isinstance(error, ModelUnavailableError):
        return 'Model unavailable. Press y to retry loading.'
    return f'{type(error).__name__}: {error}'


def _opener() -> str:
    if sys.platform == 'darwin':
        return 'open'
    if sys.platform == 'win32':
        return 'explorer'
    return 'xdg-open'


class SpeechApp(TextualApp):
    """TUI shell. Every state change goes through the SessionController."""

    CSS_PATH = 'app.tcss'

    BINDINGS = [
        Binding('r', 'toggle_record', 'Record'),
        Binding('u', 'upload', 'Upload'),
        Binding('e', 'edit_entry', 'Edit', show=False),
        Binding('x', 'delete_entry', 'Delete', show=False),
        Binding('o', 'open_audio', 'Play', show=False),
        Binding('g', 'cycle_language', 'Language', show=False),
        Binding('y', 'retry_model', 'Retry model', show=False),
        Binding('h', 'show_help', 'Help', priority=True),
        Binding('q', 'quit_app', 'Quit', priority=True),
        Binding('tab', 'focus_next', 'Switch Panel', show=False),
    ]

    def __init__(
        self,
        config: AppConfig,
        controller: SessionController,
        *,
        preload: bool = True,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self._config = config
        self._controller = controller
        self._preload = preload
        self._download_modal: DownloadModal | None = None
        self._unsubscribe_progress = None

    def _build_header_text(self) -> str:
        lang = self._controller.language
        return f'  malayalam-stt | {lang.name} [{lang.code}]'

    def compose(self) -> ComposeResult:
        yield Static(self._build_header_text(), id='header')
        with Horizontal(id='main-panels'):
            yield TranscriptPanel(id='transcript-panel')
            yield HistoryPanel(id='history-panel')
        yield StatusBar(id='status-bar')

    def on_mount(self) -> None:
        bar = self.query_one('#status-bar', StatusBar)
        bar.history_max = self._controller.history.capacity
        bar.keybinding_hints = r'\[r] record  \[u] upload  \[g] lang  \[h] help  \[q] quit'
        self._unsubscribe_progress = self._controller.model_progress.subscribe(
            lambda percent: self.post_message(ModelLoadProgress(percent, self._controller.state.model.name))
        )
        self._refresh_status_bar()
        self.set_interval(0.2, self._refresh_status_bar)
        if self._preload:
            self._run_model_worker(retry=False)

    def on_unmount(self) -> None:
        if self._unsubscribe_progress is not None:
            self._unsubscribe_progress()
            self._unsubscribe_progress = None

    def _refresh_status_bar(self) -> None:
        try:
            bar = self.query_one('#status-bar', StatusBar)
        except Exception:  # noqa: S110 -- TUI race guard; widget may not exist during shutdown  # pragma: no cover
            return
        state = self._controller.state
        bar.model_phase = state.model.phase.value
        bar.model_progress = state.model.progress
        bar.model_name = state.model.name
        bar.recording = state.recording
        bar.stage = state.stage.value
        bar.language = self._controller.language.name
        bar.history_count = len(self._controller.history)
        bar.refresh()

    def _refresh_history(self) -> None:
        self.query_one('#history-panel', HistoryPanel).show_entries(self._controller.history.entries)
        self._refresh_status_bar()

    # --- Message Handlers ---

    def on_model_load_progress(self, message: ModelLoadProgress) -> None:
        bar = self.query_one('#status-bar', StatusBar)
        bar.model_progress = message.percent
        if message.percent >= 100:
            self._dismiss_download_modal()
            return
        if self._download_modal is None:
            self._download_modal = DownloadModal(model_name=message.model_name, percent=message.percent)
            self.push_screen(self._download_modal, callback=self._on_download_modal_closed)
        else:
            self._download_modal.update_progress(message.percent)

    def _on_download_modal_closed(self, _result: None) -> None:
        self._download_modal = None

    def _dismiss_download_modal(self) -> None:
        if self._download_modal is not None:
            modal, self._download_modal = self._download_modal, None
            if self.screen is modal:
                modal.dismiss()

    def on_model_load_finished(self, message: ModelLoadFinished) -> None:
        self._refresh_status_bar()
        self._dismiss_download_modal()
        if message.result.ok:
            self.notify(f'Model ready: {self._controller.state.model.name}', timeout=3)
            return
        self.notify(describe_error(message.result.error), severity='error', timeout=8)

    def on_pipeline_finished(self, message: PipelineFinished) -> None:
        result = message.result
        self._refresh_status_bar()
        if result.error is not None:
            if isinstance(result.error, BusyError):
                self.notify('Still processing the previous submission. Please wait.', severity='warning', timeout=3)
            else:
                self.notify(describe_error(result.error), severity='error', timeout=8)
            self._dismiss_download_modal()
            return
        if message.intent == 'record':
            self.notify('Recording… press r to stop and transcribe', timeout=3)
            return
        if result.entry is not None:
            self._refresh_history()
            panel = self.query_one('#transcript-panel', TranscriptPanel)
            panel.show_transcript(result.entry.edited_text, subtitle=result.entry.sample.source)

    def on_option_list_option_highlighted(self, event: OptionList.OptionHighlighted) -> None:
        if event.option_list.id != 'history-panel' or event.option.id is None:
            return
        entry = self._controller.entry(int(event.option.id))
        if entry is not None:
            stamp = entry.sample.captured_at.strftime('%H:%M:%S')
            panel = self.query_one('#transcript-panel', TranscriptPanel)
            panel.show_transcript(entry.edited_text, subtitle=f'{entry.sample.source} · {stamp}')

    # --- Workers ---

    def _run_pipeline_worker(self, intent: str, job) -> None:
        async def _pipeline_task() -> None:
            result = await job()
            self.post_message(PipelineFinished(result, intent))

        self.run_worker(_pipeline_task, group='pipeline')

    def _run_model_worker(self, *, retry: bool) -> None:
        async def _model_task() -> None:
            if retry:
                result = await self._controller.retry_model_load()
            else:
                result = await self._controller.preload_model()
            self.post_message(ModelLoadFinished(result))

        self.run_worker(_model_task, group='model')

    # --- Actions ---

    def action_toggle_record(self) -> None:
        intent = 'stop' if self._controller.state.recording else 'record'
        self._run_pipeline_worker(intent, self._controller.toggle_recording)

    def action_upload(self) -> None:
        self.push_screen(UploadModal(), callback=self._on_upload_path)

    def _on_upload_path(self, path: Path | None) -> None:
        if path is None:
            return
        self.notify(f'Transcribing {path.name}…', timeout=3)
        self._run_pipeline_worker('upload', lambda: self._controller.upload_file(path))

    def _selected_entry_id(self) -> int | None:
        entry_id = self.query_one('#history-panel', HistoryPanel).selected_entry_id
        if entry_id is None:
            self.notify('No history entry selected', severity='warning', timeout=2)
        return entry_id

    def action_edit_entry(self) -> None:
        entry_id = self._selected_entry_id()
        if entry_id is None:
            return
        entry = self._controller.entry(entry_id)
        if entry is None:
            return

        def _on_edited(text: str | None) -> None:
            if text is None:
                return
            if self._controller.edit_transcript(entry_id, text):
                self._refresh_history()
                self.query_one('#transcript-panel', TranscriptPanel).show_transcript(text)

        self.push_screen(EditModal(entry.edited_text), callback=_on_edited)

    def action_delete_entry(self) -> None:
        entry_id = self._selected_entry_id()
        if entry_id is None:
            return
        if self._controller.delete_entry(entry_id):
            self._refresh_history()
            if not self._controller.history.entries:
                self.query_one('#transcript-panel', TranscriptPanel).clear_transcript()
            self.notify('Entry deleted', timeout=2)

    def action_open_audio(self) -> None:
        entry_id = self._selected_entry_id()
        if entry_id is None:
            return
        uri = self._controller.playback_uri(entry_id)
        if not uri:
            self.notify('No audio for this entry', severity='warning', timeout=2)
            return
        try:
            subprocess.Popen([_opener(), uri])  # noqa: S603 -- fixed arg list, not shell=True
        except OSError as e:
            log.error('Cannot launch audio player: %s', e, exc_info=True)
            self.notify(f'Cannot open audio: {e}', severity='error', timeout=5)

    def action_cycle_language(self) -> None:
        result = self._controller.cycle_language()
        if result.error is not None:
            self.notify('Cannot change language while processing', severity='warning', timeout=3)
            return
        self.query_one('#header', Static).update(self._build_header_text())
        self._refresh_status_bar()
        self.notify(f'Language: {self._controller.language.name}. The model reloads on next use.', timeout=3)

    def action_retry_model(self) -> None:
        self._run_model_worker(retry=True)

    def action_show_help(self) -> None:
        if isinstance(self.screen, HelpModal):
            self.screen.dismiss()
            return
        self.push_screen(HelpModal(_HELP_KEYS, self._controller.language.name))

    def action_quit_app(self) -> None:
        self.exit()
