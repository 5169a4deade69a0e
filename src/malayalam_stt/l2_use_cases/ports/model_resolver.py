"""Port: whisper model resolution."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol


class ModelResolver(Protocol):
    """Abstract model resolver — maps model name to local file path."""

    def resolve(self, model_name: str, on_progress: Callable[[int], None] | None = None) -> str:
        """Resolve a model name to a usable local path. Raises on failure."""
        ...
