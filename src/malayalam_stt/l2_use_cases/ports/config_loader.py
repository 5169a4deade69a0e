"""Port: configuration source."""

from __future__ import annotations

from typing import Protocol


class ConfigLoader(Protocol):
    """Reads user configuration as a raw mapping; validation happens against defaults in L4."""

    def load_raw(
        self,
        config_path: str | None = None,
        overrides: dict | None = None,
    ) -> dict:
        """Return the user's settings merged with *overrides*, unvalidated."""
        ...
