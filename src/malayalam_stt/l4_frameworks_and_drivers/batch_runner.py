"""Batch runner — headless transcribe-one-file through the same pipeline as the TUI."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

from malayalam_stt.l1_entities.config import AppConfig
from malayalam_stt.l4_frameworks_and_drivers.container import DependencyContainer


def _err(msg: str) -> None:
    print(msg, file=sys.stderr, flush=True)


def run_batch(
    audio_path: Path,
    config: AppConfig,
    language: str | None = None,
    container: DependencyContainer | None = None,
) -> None:
    """Transcribe *audio_path* and print the text on stdout. Blocks until done.

    Exits with status 1 when any stage fails.
    """
    container = container or DependencyContainer(config, in_process=True, language=language)
    controller = container.controller
    model_name = config.transcription.model_for_language(controller.language.code)

    _err(f'Loading audio: {audio_path}')
    _err(f'Whisper model: {model_name} [{controller.language.name}]')

    last_reported = -1

    def _on_progress(percent: int) -> None:
        nonlocal last_reported
        # Report in 10% steps; the channel already guarantees monotonic values.
        if percent == 100 or percent // 10 > last_reported // 10:
            last_reported = percent
            _err(f'  Loading {model_name}: {percent}%')

    unsubscribe = container.gateway.progress.subscribe(_on_progress)
    try:
        result = asyncio.run(controller.upload_file(audio_path))
    finally:
        unsubscribe()
        container.close()

    if not result.ok:
        _err(f'Error: {type(result.error).__name__}: {result.error}')
        raise SystemExit(1)

    entry = result.entry
    _err(f'Transcription complete: {len(entry.transcript.text)} characters.')
    print(entry.transcript.text)
