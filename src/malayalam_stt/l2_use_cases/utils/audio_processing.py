"""Pure sample-buffer helpers used between decoding and recognition."""

from __future__ import annotations

import numpy as np


def peak_normalize(samples: np.ndarray) -> np.ndarray:
    """Scale *samples* so the loudest one sits at full scale.

    Silence (peak of zero) is returned unchanged.
    """
    audio = np.asarray(samples, dtype=np.float32)
    if audio.size == 0:
        return audio
    peak = float(np.max(np.abs(audio)))
    if peak == 0.0:
        return audio
    return (audio / peak).astype(np.float32)


def resample_linear(samples: np.ndarray, src_rate: int, dst_rate: int) -> np.ndarray:
    """Linear-interpolation resample from *src_rate* to *dst_rate*."""
    audio = np.asarray(samples, dtype=np.float32)
    if src_rate == dst_rate or audio.size == 0:
        return audio
    if src_rate <= 0 or dst_rate <= 0:
        raise ValueError(f'Sample rates must be positive, got {src_rate} -> {dst_rate}')
    duration = audio.size / src_rate
    n_out = max(int(round(duration * dst_rate)), 1)
    src_t = np.arange(audio.size, dtype=np.float64) / src_rate
    dst_t = np.arange(n_out, dtype=np.float64) / dst_rate
    return np.interp(dst_t, src_t, audio).astype(np.float32)
