"""Port: speech-to-text transcription engine."""

from __future__ import annotations

from typing import Protocol

import numpy as np


class Transcriber(Protocol):
    """Abstract transcription engine. Zero framework types leak through."""

    def load_model(self, model_path: str) -> None:
        """Load the transcription model from the given path."""
        ...

    def transcribe(self, audio: np.ndarray, language: str) -> str:
        """Transcribe a 16 kHz mono float32 buffer into plain text."""
        ...

    def close(self) -> None:
        """Release underlying resources."""
        ...
