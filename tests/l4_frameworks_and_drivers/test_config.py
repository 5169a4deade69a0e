"""Tests for L4 config defaults and the build_app_config factory."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from malayalam_stt.l2_use_cases.transcription_orchestrator import UNRECOGNIZED_TEXT
from malayalam_stt.l4_frameworks_and_drivers.config import APP_CONFIG_DEFAULTS, build_app_config


class TestBuildAppConfig:
    def test_defaults(self):
        cfg = build_app_config({})
        assert cfg.transcription.model == 'tiny'
        assert cfg.transcription.models == {}
        assert cfg.transcription.language == 'ml'
        assert cfg.transcription.unrecognized_text == UNRECOGNIZED_TEXT
        assert cfg.capture.sample_rate == 16000
        assert cfg.capture.channels == 1
        assert cfg.capture.device is None
        assert cfg.history.max_entries == 10
        assert (cfg.retry.base_delay, cfg.retry.max_delay, cfg.retry.max_retries) == (1.0, 10.0, 3)

    def test_partial_overrides_keep_siblings(self):
        cfg = build_app_config({'transcription': {'models': {'en': 'base'}}, 'retry': {'max_retries': 5}})
        assert cfg.transcription.models == {'en': 'base'}
        assert cfg.transcription.model == 'tiny'
        assert cfg.retry.max_retries == 5
        assert cfg.retry.base_delay == 1.0

    def test_defaults_not_mutated(self):
        build_app_config({'transcription': {'models': {'hi': 'small'}}})
        assert APP_CONFIG_DEFAULTS['transcription']['models'] == {}

    def test_invalid_value_rejected(self):
        with pytest.raises(ValidationError):
            build_app_config({'history': {'max_entries': 0}})

    def test_from_yaml_fixture(self, sample_config_yaml):
        from malayalam_stt.l3_interface_adapters.gateways.yaml_config_loader import YamlConfigLoader

        cfg = build_app_config(YamlConfigLoader().load_raw(str(sample_config_yaml)))
        assert cfg.transcription.model_for_language('en') == 'base'
        assert cfg.transcription.model_for_language('ml') == 'small'
        assert cfg.history.max_entries == 5
