"""Help modal — keybinding table plus the status bar legend."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Markdown, Static

_STATUS_LEGEND = (
    ('✓ / ⟳ N% / ✗', 'Model ready / loading (download and load progress) / failed'),
    ('● Rec 00:00', 'Recording, with elapsed time'),
    ('⟳ Decoding… / ⟳ Transcribing…', 'Submission in progress; new submissions are refused'),
    ('history N/M', 'Entries kept; the oldest is dropped past M'),
)


def build_help_markdown(keys: list[tuple[str, str]], language: str) -> str:
    lines = [f'**Language:** {language}', '', '### Keybindings', '| Key | Action |', '|-----|--------|']
    lines.extend(f'| `{key}` | {action} |' for key, action in keys)
    lines.extend(['', '### Status Bar', '| Indicator | Meaning |', '|-----------|---------|'])
    lines.extend(f'| `{ind}` | {meaning} |' for ind, meaning in _STATUS_LEGEND)
    return '\n'.join(lines)


class HelpModal(ModalScreen[None]):
    DEFAULT_CSS = """
    HelpModal {
        align: center middle;
        background: $background 60%;
    }

    #help-box {
        width: 76;
        max-height: 85%;
        height: auto;
        border: round $accent;
        background: $panel;
        padding: 0 2;
    }

    #help-body {
        height: auto;
        margin: 1 0;
    }

    #help-hint {
        width: 100%;
        content-align: center middle;
        color: $text-muted;
    }
    """

    BINDINGS = [
        ('escape', 'dismiss', 'Close'),
        ('h', 'dismiss', 'Close'),
    ]

    def __init__(self, keys: list[tuple[str, str]], language: str, **kwargs) -> None:
        super().__init__(**kwargs)
        self._body_md = build_help_markdown(keys, language)

    def compose(self) -> ComposeResult:
        with VerticalScroll(id='help-box'):
            yield Markdown(self._body_md, id='help-body')
            yield Static('Escape or h closes this help', id='help-hint')
