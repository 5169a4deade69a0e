"""Edit modal — multi-line editor for correcting a history transcript."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Static, TextArea


class EditModal(ModalScreen[str | None]):
    """Ctrl+S → return the edited text, Escape → None."""

    DEFAULT_CSS = """
    EditModal {
        align: center middle;
    }

    EditModal > Vertical {
        width: 80%;
        max-width: 100;
        height: auto;
        background: $surface;
        border: thick $primary;
        padding: 1 2;
    }

    EditModal > Vertical > #edit-title {
        text-style: bold;
        margin-bottom: 1;
    }

    EditModal > Vertical > #edit-input {
        height: 10;
    }

    EditModal > Vertical > #edit-hint {
        color: $text-muted;
        margin-top: 1;
        text-align: center;
    }
    """

    BINDINGS = [
        Binding('escape', 'cancel', 'Cancel'),
        Binding('ctrl+s', 'save', 'Save', priority=True),
    ]

    def __init__(self, text: str = '', **kwargs) -> None:
        super().__init__(**kwargs)
        self._text = text

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static('Edit transcript', id='edit-title')
            yield TextArea(self._text, id='edit-input')
            yield Static('Ctrl+S to save · Escape to cancel', id='edit-hint')

    def action_save(self) -> None:
        self.dismiss(self.query_one('#edit-input', TextArea).text)

    def action_cancel(self) -> None:
        self.dismiss(None)
