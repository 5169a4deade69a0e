"""Status bar — bottom bar showing model state, recording timer, pipeline stage and keybinding hints."""

from __future__ import annotations

import time

from rich.cells import cell_len
from textual.reactive import reactive
from textual.widgets import Static


def with_hints(left: str, hints: str, width: int) -> str:
    """Pad *left* so *hints* end at *width*; hints are dropped when they do not fit."""
    if not hints:
        return left
    # hints are markup, so an escaped bracket occupies one cell on screen
    gap = width - cell_len(left) - cell_len(hints.replace(r'\[', '['))
    return f'{left}{" " * gap}{hints}' if gap >= 2 else left


class StatusBar(Static):
    """Bottom status bar mirroring SessionState for the user."""

    DEFAULT_CSS = """
    StatusBar {
        dock: bottom;
        height: 1;
        padding: 0 1;
        background: $boost;
        color: $text-muted;
    }
    """

    model_phase: reactive[str] = reactive('unloaded')
    model_progress: reactive[int] = reactive(0)
    model_name: reactive[str] = reactive('')
    recording: reactive[bool] = reactive(False)
    stage: reactive[str] = reactive('idle')
    language: reactive[str] = reactive('')
    history_count: reactive[int] = reactive(0)
    history_max: reactive[int] = reactive(10)
    keybinding_hints: reactive[str] = reactive('')

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._record_start: float | None = None

    def watch_recording(self, value: bool) -> None:
        """Restart the timer on each recording=True transition; clear it on stop."""
        self._record_start = time.monotonic() if value else None

    def watch_model_progress(self, value: int) -> None:
        """Re-render immediately when load progress changes."""
        self.refresh()

    def _format_elapsed(self, now: float) -> str:
        if self._record_start is None:
            return '00:00'
        elapsed = int(now - self._record_start)
        minutes, secs = divmod(elapsed, 60)
        return f'{minutes:02d}:{secs:02d}'

    def _model_icon(self) -> str:
        if self.model_phase == 'ready':
            return f'✓ {self.model_name}' if self.model_name else '✓ Model ready'
        if self.model_phase == 'loading':
            return f'⟳ Loading {self.model_name}… {self.model_progress}%'
        if self.model_phase == 'failed':
            return '✗ Model failed'
        return '○ Model not loaded'

    def render(self) -> str:
        now = time.monotonic()

        if self.recording:
            status_icon = f'● Rec {self._format_elapsed(now)}'
        elif self.stage == 'decoding':
            status_icon = '⟳ Decoding…'
        elif self.stage == 'transcribing':
            status_icon = '⟳ Transcribing…'
        else:
            status_icon = '○ Idle'

        left_parts = [self._model_icon(), status_icon]
        if self.language:
            left_parts.append(self.language)
        left_parts.append(f'history {self.history_count}/{self.history_max}')
        left = ' │ '.join(left_parts)

        return with_hints(left, self.keybinding_hints, (self.size.width or 80) - 2)
