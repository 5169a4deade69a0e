"""Port: compressed audio to PCM decoding."""

from __future__ import annotations

from typing import Protocol

import numpy as np


class AudioDecoder(Protocol):
    """Abstract decoder backed by a host decoding facility."""

    def decode(self, raw: bytes, target_sample_rate: int) -> np.ndarray:
        """Decode *raw* into mono float32 PCM. Raises UnsupportedFormatError or CorruptDataError."""
        ...
