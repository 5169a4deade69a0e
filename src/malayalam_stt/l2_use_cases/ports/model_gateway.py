"""Port: lazily loaded speech-recognition model."""

from __future__ import annotations

from typing import Protocol

import numpy as np

from malayalam_stt.l1_entities.history import TranscriptResult
from malayalam_stt.l1_entities.model_state import ModelStatus
from malayalam_stt.l2_use_cases.utils.progress_channel import ProgressChannel


class ModelGateway(Protocol):
    """Fixed-signature facade over whatever inference library does the recognition."""

    status: ModelStatus
    progress: ProgressChannel

    @property
    def language(self) -> str: ...

    async def ensure_loaded(self) -> None:
        """Load the model for the current language if needed. Raises ModelLoadError."""
        ...

    async def transcribe(self, samples: np.ndarray, sample_rate: int, language: str) -> TranscriptResult:
        """Run recognition. Raises ModelNotReadyError or TranscribeError."""
        ...

    def set_language(self, language: str) -> None:
        """Change the language; a different tag discards the cached model."""
        ...

    def close(self) -> None:
        """Release the cached model."""
        ...
