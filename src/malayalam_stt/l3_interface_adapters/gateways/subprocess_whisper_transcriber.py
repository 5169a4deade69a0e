"""Gateway: whisper transcriber hosted in a spawned child process — implements Transcriber port.

whisper.cpp holds the GIL for a whole inference call. Hosting it in a child
keeps the asyncio loop (and the Textual UI) responsive while it runs.
"""

from __future__ import annotations

import contextlib
import multiprocessing as mp
import os
from multiprocessing.connection import Connection
from typing import Any

import numpy as np

LOAD_TIMEOUT = 120  # seconds
TRANSCRIBE_TIMEOUT = 300  # seconds


def _child_main(model_path: str, conn: Any) -> None:
    """Child process: load the model, answer requests until a ``None`` request arrives.

    C-level stdout and stderr are discarded for the whole life of the child.
    """
    devnull = os.open(os.devnull, os.O_WRONLY)
    for fd in (1, 2):
        os.dup2(devnull, fd)
    os.close(devnull)

    from malayalam_stt.l3_interface_adapters.gateways.whisper_transcriber import (  # noqa: PLC0415 -- deferred: child process only
        WhisperTranscriber,
    )

    transcriber = WhisperTranscriber()
    try:
        transcriber.load_model(model_path)
    except Exception as e:
        conn.send({'ok': False, 'error': f'{type(e).__name__}: {e}'})
        conn.close()
        return
    conn.send({'ok': True})

    try:
        while (request := conn.recv()) is not None:
            try:
                text = transcriber.transcribe(request['audio'], request['language'])
            except Exception as e:
                conn.send({'ok': False, 'error': f'{type(e).__name__}: {e}'})
            else:
                conn.send({'ok': True, 'text': text})
    except EOFError:
        pass  # parent went away
    finally:
        transcriber.close()
        conn.close()


class SubprocessWhisperTranscriber:
    """Transcriber whose model lives in a ``spawn`` child process.

    Talks over a ``multiprocessing.Pipe``; a Queue would need the resource
    tracker, which cannot start once Textual has replaced sys.stderr.
    Any failure while loading tears the child down before raising.
    """

    def __init__(self, load_timeout: float = LOAD_TIMEOUT, transcribe_timeout: float = TRANSCRIBE_TIMEOUT) -> None:
        self._load_timeout = load_timeout
        self._transcribe_timeout = transcribe_timeout
        self._process: Any = None  # SpawnProcess
        self._conn: Connection | None = None

    def load_model(self, model_path: str) -> None:
        self.close()
        ctx = mp.get_context('spawn')
        parent_conn, child_conn = ctx.Pipe(duplex=True)
        self._process = ctx.Process(target=_child_main, args=(model_path, child_conn), daemon=True)
        self._process.start()
        child_conn.close()
        self._conn = parent_conn
        try:
            self._reply(self._load_timeout, 'model load')
        except RuntimeError:
            self.close()
            raise

    def transcribe(self, audio: np.ndarray, language: str) -> str:
        if self._conn is None:
            raise RuntimeError('Model not loaded. Call load_model() first.')
        self._conn.send({'audio': np.ascontiguousarray(audio, dtype=np.float32), 'language': language})
        return self._reply(self._transcribe_timeout, 'transcription').get('text', '')

    def _reply(self, timeout: float, what: str) -> dict:
        try:
            if not self._conn.poll(timeout=timeout):
                raise RuntimeError(f'Timed out after {timeout:.0f}s waiting for {what}')
            reply = self._conn.recv()
        except (EOFError, OSError) as e:
            raise RuntimeError(f'Whisper process exited unexpectedly during {what}') from e
        if not reply.get('ok'):
            raise RuntimeError(f'Whisper process {what} failed: {reply.get("error", "unknown error")}')
        return reply

    def close(self) -> None:
        conn, self._conn = self._conn, None
        if conn is not None:
            with contextlib.suppress(OSError, ValueError):
                conn.send(None)
            with contextlib.suppress(OSError):
                conn.close()
        process, self._process = self._process, None
        if process is not None:
            process.join(timeout=5)
            if process.is_alive():
                process.terminate()
                process.join(timeout=1)
