"""L1 entity: lifecycle of the speech-recognition model."""

from __future__ import annotations

import enum

from pydantic import BaseModel


class ModelPhase(enum.Enum):
    UNLOADED = 'unloaded'
    LOADING = 'loading'
    READY = 'ready'
    FAILED = 'failed'


class ModelStatus(BaseModel):
    """Mutable model status. Owned and updated by the model gateway only."""

    phase: ModelPhase = ModelPhase.UNLOADED
    progress: int = 0  # 0..100 within the current load attempt
    name: str = ''  # model currently loaded or being loaded
    error: str = ''

    @property
    def ready(self) -> bool:
        return self.phase is ModelPhase.READY
