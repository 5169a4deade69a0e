"""Gateway: YAML configuration file reader — implements ConfigLoader port."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

import yaml

from malayalam_stt.l3_interface_adapters.gateways.paths import DEFAULT_CONFIG_PATHS

log = logging.getLogger('mstt.config')


class YamlConfigLoader:
    """Reads the first YAML config it finds and returns it unvalidated.

    An explicit path must exist; otherwise *search_paths* are tried in order and
    a missing file simply yields an empty mapping.
    """

    def __init__(self, search_paths: Sequence[Path] = tuple(DEFAULT_CONFIG_PATHS)) -> None:
        self._search_paths = tuple(search_paths)

    def load_raw(
        self,
        config_path: str | None = None,
        overrides: dict | None = None,
    ) -> dict:
        if config_path is not None:
            path = Path(config_path)
            if not path.exists():
                raise FileNotFoundError(f'Config file not found: {path}')
        else:
            path = next((p for p in self._search_paths if p.exists()), None)

        data = _read_yaml(path) if path is not None else {}
        if overrides:
            deep_merge(data, overrides)
        return data


def _read_yaml(path: Path) -> dict:
    try:
        data = yaml.safe_load(path.read_text(encoding='utf-8')) or {}
    except yaml.YAMLError as e:
        raise ValueError(f'Invalid YAML in {path}: {e}') from e
    if not isinstance(data, dict):
        raise ValueError(f'Config root in {path} must be a mapping, got {type(data).__name__}')
    log.info('Loaded config from %s', path)
    return data


def deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (mutates base)."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            deep_merge(base[key], value)
        else:
            base[key] = value
    return base
