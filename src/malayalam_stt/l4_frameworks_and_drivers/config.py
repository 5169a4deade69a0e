"""Built-in configuration defaults — lives in L4, not domain."""

from __future__ import annotations

import copy

from malayalam_stt.l1_entities.config import AppConfig
from malayalam_stt.l2_use_cases.transcription_orchestrator import UNRECOGNIZED_TEXT
from malayalam_stt.l3_interface_adapters.gateways.yaml_config_loader import deep_merge

APP_CONFIG_DEFAULTS: dict = {
    'transcription': {
        'model': 'tiny',
        'models': {},
        'language': 'ml',
        'unrecognized_text': UNRECOGNIZED_TEXT,
    },
    'capture': {
        'sample_rate': 16000,
        'channels': 1,
        'device': None,
    },
    'history': {
        'max_entries': 10,
    },
    'retry': {
        'base_delay': 1.0,
        'max_delay': 10.0,
        'max_retries': 3,
    },
}


def build_app_config(raw: dict) -> AppConfig:
    """Merge *raw* user overrides on top of defaults, then validate."""
    merged = copy.deepcopy(APP_CONFIG_DEFAULTS)
    deep_merge(merged, raw)
    return AppConfig.model_validate(merged)
