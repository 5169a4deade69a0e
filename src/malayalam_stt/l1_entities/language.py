"""L1 entity: languages offered for transcription."""

from __future__ import annotations

from pydantic import BaseModel


class Language(BaseModel):
    code: str
    name: str


SUPPORTED_LANGUAGES: tuple[Language, ...] = (
    Language(code='ml', name='Malayalam'),
    Language(code='en', name='English'),
    Language(code='hi', name='Hindi'),
)


def find_language(code: str) -> Language | None:
    """Look up a supported language by tag, ignoring case and region subtags."""
    key = code.lower().split('-')[0]
    for lang in SUPPORTED_LANGUAGES:
        if lang.code == key:
            return lang
    return None
