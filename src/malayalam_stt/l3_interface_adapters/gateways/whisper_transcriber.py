"""Gateway: whisper.cpp transcriber — implements Transcriber port in-process."""

from __future__ import annotations

import contextlib
import os

import numpy as np
from pywhispercpp.model import Model

_C_STREAMS = (1, 2)  # stdout, stderr


@contextlib.contextmanager
def _silenced_fds(fds: tuple[int, ...] = _C_STREAMS):
    """Point the given file descriptors at /dev/null for the duration of the block.

    whisper.cpp writes load and timing logs with C fprintf, which Python's
    sys.stdout redirection cannot catch and which would corrupt the TUI.
    """
    devnull = os.open(os.devnull, os.O_WRONLY)
    saved = [os.dup(fd) for fd in fds]
    try:
        for fd in fds:
            os.dup2(devnull, fd)
        yield
    finally:
        for fd, original in zip(fds, saved):
            os.dup2(original, fd)
            os.close(original)
        os.close(devnull)


def join_segments(segments) -> str:
    """Collapse whisper segments into one line of text, dropping empty pieces."""
    parts = (seg.text.strip() for seg in segments)
    return ' '.join(p for p in parts if p)


class WhisperTranscriber:
    """pywhispercpp adapter: one loaded model, mono 16 kHz float32 in, text out."""

    def __init__(self, n_threads: int | None = None) -> None:
        self._model: Model | None = None
        self._n_threads = n_threads

    @property
    def loaded(self) -> bool:
        return self._model is not None

    def load_model(self, model_path: str) -> None:
        params: dict = {'print_progress': False, 'print_realtime': False}
        if self._n_threads:
            params['n_threads'] = self._n_threads
        with _silenced_fds():
            self._model = Model(model_path, **params)

    def transcribe(self, audio: np.ndarray, language: str) -> str:
        if self._model is None:
            raise RuntimeError('Model not loaded. Call load_model() first.')
        samples = np.ascontiguousarray(audio, dtype=np.float32)
        if samples.size == 0:
            return ''
        with _silenced_fds():
            segments = self._model.transcribe(samples, language=language, translate=False)
        return join_segments(segments)

    def close(self) -> None:
        """Release the model; whisper.cpp logs on teardown too, so keep it silenced."""
        model, self._model = self._model, None
        if model is not None:
            with _silenced_fds():
                del model
