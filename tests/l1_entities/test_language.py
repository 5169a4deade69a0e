"""Tests for supported-language lookup."""

from __future__ import annotations

import pytest

from malayalam_stt.l1_entities.language import SUPPORTED_LANGUAGES, find_language


def test_malayalam_is_first():
    assert SUPPORTED_LANGUAGES[0].code == 'ml'


@pytest.mark.parametrize(
    ('tag', 'expected'),
    [('ml', 'Malayalam'), ('ML-IN', 'Malayalam'), ('en-US', 'English'), ('hi', 'Hindi')],
)
def test_find_language(tag, expected):
    assert find_language(tag).name == expected


def test_unknown_language():
    assert find_language('ta') is None
