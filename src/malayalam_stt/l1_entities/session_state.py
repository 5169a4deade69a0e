"""Session state entity — everything the presentation layer renders."""

from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict, Field

from malayalam_stt.l1_entities.errors import SpeechAppError
from malayalam_stt.l1_entities.history import HistoryStore, TranscriptResult
from malayalam_stt.l1_entities.model_state import ModelStatus


class PipelineStage(enum.Enum):
    IDLE = 'idle'
    CAPTURING = 'capturing'
    DECODING = 'decoding'
    TRANSCRIBING = 'transcribing'


class SessionState(BaseModel):
    """Mutable top-level state for one session."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    model: ModelStatus = Field(default_factory=ModelStatus)
    history: HistoryStore = Field(default_factory=HistoryStore)
    stage: PipelineStage = PipelineStage.IDLE
    recording: bool = False
    processing: bool = False
    last_error: SpeechAppError | None = None
    current_transcript: TranscriptResult | None = None
