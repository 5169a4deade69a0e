"""Port: revocable playback handles for recorded audio."""

from __future__ import annotations

from typing import Protocol


class PlaybackStore(Protocol):
    """Creates and releases handles the presentation layer can play back."""

    def create(self, sample_id: int, raw: bytes, suffix: str = '') -> str:
        """Store *raw* and return a URI for it."""
        ...

    def release(self, sample_id: int) -> None:
        """Invalidate the handle for *sample_id*. No-op if already released."""
        ...

    def close(self) -> None:
        """Release every outstanding handle."""
        ...
