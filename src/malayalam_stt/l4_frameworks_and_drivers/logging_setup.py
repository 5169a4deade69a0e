"""File-based debug logging setup."""

from __future__ import annotations

import logging
from pathlib import Path

LOG_FILE_NAME = 'mstt_debug.log'


def setup_file_logging(log_dir: Path) -> Path:
    """Send everything under the ``mstt`` logger to a debug file in *log_dir*.

    Safe to call more than once; a handler for the same file is only added once.
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / LOG_FILE_NAME
    root = logging.getLogger('mstt')
    root.setLevel(logging.DEBUG)
    for handler in root.handlers:
        if isinstance(handler, logging.FileHandler) and Path(handler.baseFilename) == log_path.resolve():
            return log_path
    handler = logging.FileHandler(log_path, encoding='utf-8')
    handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)s %(name)s %(message)s'))
    root.addHandler(handler)
    logging.getLogger('mstt.app').info('Debug logging started → %s', log_path)
    return log_path
