"""Textual Message subclasses — contracts between workers and the App."""

from __future__ import annotations

from textual.message import Message

from malayalam_stt.l2_use_cases.transcription_orchestrator import PipelineResult


class ModelLoadProgress(Message):
    """Posted from the model progress channel (download or load percentage)."""

    def __init__(self, percent: int, model_name: str) -> None:
        super().__init__()
        self.percent = percent
        self.model_name = model_name


class ModelLoadFinished(Message):
    """Posted when a warm-up or manual model load completes, successfully or not."""

    def __init__(self, result: PipelineResult) -> None:
        super().__init__()
        self.result = result


class PipelineFinished(Message):
    """Posted when a recording or upload submission finishes."""

    def __init__(self, result: PipelineResult, intent: str) -> None:
        super().__init__()
        self.result = result
        self.intent = intent  # 'record', 'stop' or 'upload'
