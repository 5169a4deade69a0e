"""L1 entities: recordings, transcripts and the bounded recording history."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class TranscriptResult(BaseModel):
    """Text returned by the recognition model for one submission."""

    model_config = ConfigDict(frozen=True)

    text: str
    language: str


class AudioSample(BaseModel):
    """One captured or uploaded audio buffer. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: int
    raw: bytes = Field(repr=False)
    source: str = 'recording'  # 'recording' or the uploaded file name
    playback_uri: str = ''  # revocable handle for playback, released with the entry
    captured_at: datetime = Field(default_factory=datetime.now)


class HistoryEntry(BaseModel):
    """A recording paired with its transcript. Only ``edited_text`` ever changes."""

    model_config = ConfigDict(validate_assignment=True)

    sample: AudioSample
    transcript: TranscriptResult
    edited_text: str

    @property
    def id(self) -> int:
        return self.sample.id

    @classmethod
    def create(cls, sample: AudioSample, transcript: TranscriptResult) -> HistoryEntry:
        return cls(sample=sample, transcript=transcript, edited_text=transcript.text)


class HistoryStore:
    """Most-recent-first, size-bounded list of history entries.

    ``on_release`` is called for every entry that leaves the store (eviction
    or delete) so the owner can free its playback handle.
    """

    def __init__(
        self,
        capacity: int = 10,
        on_release: Callable[[HistoryEntry], None] | None = None,
    ) -> None:
        if capacity < 1:
            raise ValueError(f'History capacity must be positive, got {capacity}')
        self._capacity = capacity
        self._on_release = on_release
        self._entries: list[HistoryEntry] = []

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def entries(self) -> list[HistoryEntry]:
        """Snapshot of the entries, newest first."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(list(self._entries))

    def get(self, entry_id: int) -> HistoryEntry | None:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def append(self, entry: HistoryEntry) -> list[HistoryEntry]:
        """Insert *entry* at the front. Returns entries evicted from the back."""
        self._entries.insert(0, entry)
        evicted: list[HistoryEntry] = []
        while len(self._entries) > self._capacity:
            evicted.append(self._entries.pop())
        for old in evicted:
            self._release(old)
        return evicted

    def delete(self, entry_id: int) -> bool:
        """Remove the entry with *entry_id*. Returns False if it was not present."""
        for idx, entry in enumerate(self._entries):
            if entry.id == entry_id:
                del self._entries[idx]
                self._release(entry)
                return True
        return False

    def edit_transcript(self, entry_id: int, text: str) -> bool:
        """Replace ``edited_text`` of the matching entry. Returns False if absent."""
        entry = self.get(entry_id)
        if entry is None:
            return False
        entry.edited_text = text
        return True

    def clear(self) -> None:
        """Drop every entry, releasing all playback handles."""
        entries, self._entries = self._entries, []
        for entry in entries:
            self._release(entry)

    def _release(self, entry: HistoryEntry) -> None:
        if self._on_release is not None:
            self._on_release(entry)
