#!/usr/bin/env python3
"""
FXCURO CONFIGURATION
--------------------
Tunable knobs of the pipeline. Defaults mirror the behaviour expected by
the upload service; a YAML file may override any of them.

Author: FxCuro Team
Date: 2026-01-16
"""

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Dict, List, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from fxcuro.core.errors import ConfigError

logger = logging.getLogger("fxcuro.config")


def _default_identifier_fixes() -> Dict[str, str]:
    # Corrupted identifiers commonly produced by copy/paste of French sources
    return {
        "émettrePart iculeDepuisSource": "emettreParticuleDepuisSource",
        "émettreParticuleDepuisSource": "emettreParticuleDepuisSource",
        "mettreÀJour": "mettreAJour",
    }


@dataclass
class PipelineConfig:
    """Every threshold used by the healing stages."""
    doc_comment_min_length: int = 200
    doc_comment_markers: List[str] = field(default_factory=lambda: ["EFFET", "DESCRIPTION"])
    identifier_fixes: Dict[str, str] = field(default_factory=_default_identifier_fixes)
    classifier_threshold: int = 1
    trig_cache_size: int = 4096
    trig_min_calls: int = 2
    max_source_bytes: int = 1024 * 1024


def load_config(path: Optional[str] = None) -> PipelineConfig:
    """
    Builds a PipelineConfig, optionally overridden by a YAML mapping.

    Raises:
        ConfigError: unreadable file, non-mapping document or unknown key.
    """
    if not path:
        return PipelineConfig()

    config_path = Path(path)
    try:
        data = YAML(typ='safe').load(config_path.read_text(encoding='utf-8'))
    except (OSError, YAMLError) as e:
        raise ConfigError(f"Unable to read configuration {config_path}: {e}")

    if data is None:
        return PipelineConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration {config_path} must be a mapping")

    known = {f.name for f in fields(PipelineConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

    config = PipelineConfig(**data)
    if config.classifier_threshold < 1 or config.trig_cache_size < 1:
        raise ConfigError("classifier_threshold and trig_cache_size must be >= 1")

    logger.debug(f"Loaded configuration from {config_path}")
    return config
