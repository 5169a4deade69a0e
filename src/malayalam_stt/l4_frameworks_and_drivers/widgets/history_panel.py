"""History panel — OptionList of past transcriptions, newest first."""

from __future__ import annotations

from rich.text import Text
from textual.widgets import OptionList
from textual.widgets.option_list import Option

from malayalam_stt.l1_entities.history import HistoryEntry

_PREVIEW_CHARS = 60


def format_entry(entry: HistoryEntry) -> Text:
    """One-line label: capture time, source and the (edited) transcript preview."""
    stamp = entry.sample.captured_at.strftime('%H:%M:%S')
    preview = entry.edited_text.replace('\n', ' ')
    if len(preview) > _PREVIEW_CHARS:
        preview = preview[: _PREVIEW_CHARS - 1] + '…'
    label = Text()
    label.append(f'{stamp} ', style='dim')
    label.append(f'[{entry.sample.source}] ', style='cyan')
    label.append(preview)
    if entry.edited_text != entry.transcript.text:
        label.append(' (edited)', style='italic dim')
    return label


class HistoryPanel(OptionList):
    """Selectable list of history entries. Option ids are the entry ids."""

    DEFAULT_CSS = """
    HistoryPanel {
        border: solid $primary;
        height: 1fr;
    }
    HistoryPanel:focus {
        border: solid $accent;
    }
    """

    def __init__(self, title: str = 'History', **kwargs) -> None:
        super().__init__(**kwargs)
        self.border_title = title

    def show_entries(self, entries: list[HistoryEntry]) -> None:
        """Rebuild the list, keeping the current selection when it still exists."""
        selected = self.selected_entry_id
        self.clear_options()
        self.add_options([Option(format_entry(entry), id=str(entry.id)) for entry in entries])
        self.border_subtitle = f'{len(entries)}'
        if not entries:
            return
        ids = [entry.id for entry in entries]
        self.highlighted = ids.index(selected) if selected in ids else 0

    @property
    def selected_entry_id(self) -> int | None:
        if self.highlighted is None or self.option_count == 0:
            return None
        option = self.get_option_at_index(self.highlighted)
        return int(option.id) if option.id is not None else None
