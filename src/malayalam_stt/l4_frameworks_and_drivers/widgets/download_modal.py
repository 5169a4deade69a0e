"""Download modal — shown while the whisper model downloads or loads."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import ProgressBar, Static


def _status_text(percent: int) -> str:
    return f'Fetching and loading the speech model… {percent}%'


class DownloadModal(ModalScreen[None]):
    """Progress overlay for a model load. Escape hides it; loading continues in the background."""

    DEFAULT_CSS = """
    DownloadModal {
        align: center middle;
        background: $background 60%;
    }

    #dl-box {
        width: 56;
        height: auto;
        border: round $accent;
        background: $panel;
        padding: 1 2;
    }

    #dl-status {
        text-style: bold;
        width: 100%;
        content-align: center middle;
    }

    #dl-bar {
        margin: 1 0;
        width: 100%;
    }

    #dl-detail {
        width: 100%;
        content-align: center middle;
        color: $text-muted;
    }
    """

    BINDINGS = [('escape', 'dismiss', 'Hide')]

    def __init__(self, model_name: str = '', percent: int = 0, **kwargs) -> None:
        super().__init__(**kwargs)
        self.model_name = model_name
        self.percent = percent

    def compose(self) -> ComposeResult:
        with Vertical(id='dl-box'):
            yield Static(_status_text(self.percent), id='dl-status')
            yield ProgressBar(total=100, show_eta=False, id='dl-bar')
            yield Static(f'model: {self.model_name} · Escape hides this window', id='dl-detail')

    def on_mount(self) -> None:
        self.query_one('#dl-bar', ProgressBar).update(progress=self.percent)

    def update_progress(self, percent: int) -> None:
        self.percent = percent
        if not self.is_mounted:
            return  # on_mount picks up the latest value
        self.query_one('#dl-status', Static).update(_status_text(percent))
        self.query_one('#dl-bar', ProgressBar).update(progress=percent)
