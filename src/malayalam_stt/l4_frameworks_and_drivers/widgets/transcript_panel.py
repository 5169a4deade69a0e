"""Transcript panel — shows the latest (or selected) transcript."""

from __future__ import annotations

import pyperclip
from rich.text import Text
from textual.binding import Binding
from textual.widgets import Static

_PLACEHOLDER = '[dim]Press r to record or u to upload an audio file.[/dim]'


class TranscriptPanel(Static, can_focus=True):
    """Focusable panel holding one transcript; `c` copies it to the clipboard."""

    DEFAULT_CSS = """
    TranscriptPanel {
        border: solid $primary;
        padding: 1 2;
        height: 1fr;
    }
    TranscriptPanel:focus {
        border: solid $accent;
    }
    """

    BINDINGS = [Binding('c', 'copy_content', 'Copy', show=False)]

    def __init__(self, title: str = 'Transcript', **kwargs) -> None:
        super().__init__(_PLACEHOLDER, **kwargs)
        self.border_title = title
        self.transcript_text = ''

    def show_transcript(self, text: str, subtitle: str = '') -> None:
        self.transcript_text = text
        self.border_subtitle = subtitle
        # Transcripts are plain text; brackets must not be read as markup.
        self.update(Text(text) if text else _PLACEHOLDER)

    def clear_transcript(self) -> None:
        self.show_transcript('')

    def action_copy_content(self) -> None:
        """Copy the transcript text to the system clipboard."""
        if not self.transcript_text:
            self.app.notify('No transcript to copy', severity='warning', timeout=2)
            return
        pyperclip.copy(self.transcript_text)
        self.app.notify('Transcript copied', timeout=2)
