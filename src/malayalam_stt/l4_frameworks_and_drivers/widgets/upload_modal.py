"""Upload modal — path input for picking an audio file to transcribe."""

from __future__ import annotations

from pathlib import Path

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Input, Static


class UploadModal(ModalScreen[Path | None]):
    """Prompts for an audio file path. Enter → Path, Escape → None."""

    DEFAULT_CSS = """
    UploadModal {
        align: center middle;
    }

    UploadModal > Vertical {
        width: 70;
        height: auto;
        background: $surface;
        border: thick $primary;
        padding: 1 2;
    }

    UploadModal > Vertical > #upload-title {
        text-style: bold;
        margin-bottom: 1;
    }

    UploadModal > Vertical > #upload-hint {
        color: $text-muted;
        margin-top: 1;
        text-align: center;
    }
    """

    BINDINGS = [('escape', 'cancel', 'Cancel')]

    def __init__(self, initial: str = '', **kwargs) -> None:
        super().__init__(**kwargs)
        self._initial = initial

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static('Upload audio file', id='upload-title')
            yield Input(value=self._initial, placeholder='/path/to/audio.mp3', id='upload-input')
            yield Static('Any format ffmpeg can read · Enter to transcribe · Escape to cancel', id='upload-hint')

    def on_input_submitted(self, event: Input.Submitted) -> None:
        text = event.value.strip()
        self.dismiss(Path(text).expanduser() if text else None)

    def action_cancel(self) -> None:
        self.dismiss(None)
