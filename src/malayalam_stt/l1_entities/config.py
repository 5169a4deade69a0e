"""Configuration Pydantic models — pure schema, no infrastructure defaults."""

from __future__ import annotations

from pydantic import BaseModel, Field


class TranscriptionConfig(BaseModel):
    model: str
    models: dict[str, str] = Field(default_factory=dict)
    language: str
    unrecognized_text: str

    def model_for_language(self, language: str) -> str:
        """Resolve model name for a language tag. Checks full tag, then primary subtag, then default."""
        key = language.lower()
        if key in self.models:
            return self.models[key]
        prefix = key.split('-')[0]
        if prefix in self.models:
            return self.models[prefix]
        return self.model


class CaptureConfig(BaseModel):
    sample_rate: int
    channels: int
    device: str | None = None


class HistoryConfig(BaseModel):
    max_entries: int = Field(gt=0)


class RetryConfig(BaseModel):
    base_delay: float = Field(gt=0)  # seconds
    max_delay: float = Field(gt=0)
    max_retries: int = Field(ge=0)

    def delay_for(self, attempt: int) -> float:
        """Exponential backoff delay in seconds for a zero-based retry *attempt*."""
        return min(self.base_delay * 2**attempt, self.max_delay)


class AppConfig(BaseModel):
    transcription: TranscriptionConfig
    capture: CaptureConfig
    history: HistoryConfig
    retry: RetryConfig
