"""Gateway: playback handles backed by temporary files — implements PlaybackStore port."""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path

log = logging.getLogger('mstt.playback')


class TempFilePlaybackStore:
    """Writes each sample to a private temp directory and hands out its file URI.

    Releasing a handle deletes the file, so a released URI no longer plays.
    """

    def __init__(self, base_dir: Path | None = None) -> None:
        self._dir = Path(tempfile.mkdtemp(prefix='mstt-playback-', dir=base_dir))
        self._files: dict[int, Path] = {}

    @property
    def directory(self) -> Path:
        return self._dir

    def create(self, sample_id: int, raw: bytes, suffix: str = '') -> str:
        path = self._dir / f'{sample_id}{suffix}'
        path.write_bytes(raw)
        self._files[sample_id] = path
        return path.as_uri()

    def path_for(self, sample_id: int) -> Path | None:
        return self._files.get(sample_id)

    def release(self, sample_id: int) -> None:
        path = self._files.pop(sample_id, None)
        if path is None:
            return
        path.unlink(missing_ok=True)
        log.debug('Released playback handle %s', path.name)

    def close(self) -> None:
        for sample_id in list(self._files):
            self.release(sample_id)
        shutil.rmtree(self._dir, ignore_errors=True)
