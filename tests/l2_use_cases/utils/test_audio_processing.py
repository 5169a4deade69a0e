"""Tests for peak normalisation and linear resampling."""

from __future__ import annotations

import numpy as np
import pytest

from malayalam_stt.l2_use_cases.utils.audio_processing import peak_normalize, resample_linear


class TestPeakNormalize:
    def test_scales_to_full_scale(self):
        out = peak_normalize(np.array([0.2, -0.5, 0.1], dtype=np.float32))
        np.testing.assert_allclose(out, [0.4, -1.0, 0.2], rtol=1e-6)
        assert out.dtype == np.float32

    def test_idempotent_on_normalized_input(self):
        once = peak_normalize(np.array([0.3, -0.9, 0.45], dtype=np.float32))
        twice = peak_normalize(once)
        np.testing.assert_array_equal(once, twice)

    def test_silence_is_left_alone(self):
        silence = np.zeros(16000, dtype=np.float32)
        with np.errstate(all='raise'):
            out = peak_normalize(silence)
        np.testing.assert_array_equal(out, silence)

    def test_empty_input(self):
        assert peak_normalize(np.array([], dtype=np.float32)).size == 0


class TestResampleLinear:
    def test_same_rate_is_passthrough(self):
        audio = np.array([0.1, 0.2], dtype=np.float32)
        np.testing.assert_array_equal(resample_linear(audio, 16000, 16000), audio)

    def test_downsample_length(self):
        audio = np.zeros(48000, dtype=np.float32)
        assert resample_linear(audio, 48000, 16000).shape == (16000,)

    def test_upsample_interpolates(self):
        out = resample_linear(np.array([0.0, 1.0], dtype=np.float32), 1, 2)
        np.testing.assert_allclose(out, [0.0, 0.5, 1.0, 1.0])

    def test_rejects_bad_rate(self):
        with pytest.raises(ValueError):
            resample_linear(np.ones(4, dtype=np.float32), 0, 16000)
