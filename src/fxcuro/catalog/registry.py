#!/usr/bin/env python3
"""
FXCURO MODULE CATALOG
---------------------
Immutable registry of the utilities the ModuleInjector may prepend, plus
the generated-code templates (scaffolds, polyfills, epilogue). Both are
packaged YAML resources loaded once and handed to the pipeline by
reference, so callers can substitute their own catalog.

Author: FxCuro Team
Date: 2026-01-16
"""

import re
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, Optional, Pattern, Tuple

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from fxcuro.core.errors import CatalogError

logger = logging.getLogger("fxcuro.catalog")

CATALOG_DIR = Path(__file__).resolve().parent
MODULES_FILE = CATALOG_DIR / "modules.yaml"
TEMPLATES_FILE = CATALOG_DIR / "templates.yaml"


@dataclass(frozen=True)
class CatalogEntry:
    name: str
    identifier: str             # Presence of this name means "already defined"
    detector: Pattern
    source: str
    description: str = ""

    def detects(self, text: str) -> bool:
        return self.detector.search(text) is not None


@dataclass(frozen=True)
class ModuleCatalog:
    entries: Tuple[CatalogEntry, ...]

    def __iter__(self):
        return iter(self.entries)

    def __len__(self):
        return len(self.entries)

    def names(self):
        return [e.name for e in self.entries]

    def get(self, name: str) -> Optional[CatalogEntry]:
        for entry in self.entries:
            if entry.name == name:
                return entry
        return None


@dataclass(frozen=True)
class Scaffold:
    domain: str
    class_name: Optional[str]   # None: derived from the filename
    head: str
    tail: str


@dataclass(frozen=True)
class TemplateSet:
    raf_polyfill: str
    trig_cache: str
    base_effect: str
    lifecycle: Dict[str, str]
    epilogue: str
    scaffolds: Dict[str, Scaffold]


def _read_yaml(path: Path) -> Any:
    try:
        return YAML(typ='safe').load(path.read_text(encoding='utf-8'))
    except (OSError, YAMLError) as e:
        raise CatalogError(f"Failed to load {path.name}: {e}")


def build_catalog(raw_entries: Any) -> ModuleCatalog:
    """Validates a list of mappings into a ModuleCatalog."""
    if not isinstance(raw_entries, list):
        raise CatalogError("Catalog 'modules' must be a list")

    entries = []
    seen = set()
    for raw in raw_entries:
        if not isinstance(raw, dict):
            raise CatalogError(f"Catalog entry must be a mapping, got {type(raw).__name__}")
        missing = [k for k in ("name", "detect", "source") if not raw.get(k)]
        if missing:
            raise CatalogError(f"Catalog entry {raw.get('name', '?')} lacks {', '.join(missing)}")
        if raw["name"] in seen:
            raise CatalogError(f"Duplicate catalog entry '{raw['name']}'")
        try:
            detector = re.compile(raw["detect"], re.IGNORECASE)
        except re.error as e:
            raise CatalogError(f"Invalid detector for {raw['name']}: {e}")
        seen.add(raw["name"])
        entries.append(CatalogEntry(
            name=raw["name"],
            identifier=raw.get("identifier") or raw["name"],
            detector=detector,
            source=raw["source"],
            description=raw.get("description", ""),
        ))
    return ModuleCatalog(tuple(entries))


def load_catalog(path: Optional[str] = None) -> ModuleCatalog:
    catalog_path = Path(path) if path else MODULES_FILE
    data = _read_yaml(catalog_path)
    if not isinstance(data, dict) or "modules" not in data:
        raise CatalogError(f"{catalog_path.name} must define a 'modules' list")
    catalog = build_catalog(data["modules"])
    logger.debug(f"Loaded {len(catalog)} catalog entries from {catalog_path}")
    return catalog


def load_templates(path: Optional[str] = None) -> TemplateSet:
    templates_path = Path(path) if path else TEMPLATES_FILE
    data = _read_yaml(templates_path)
    required = ["raf_polyfill", "trig_cache", "base_effect", "lifecycle", "epilogue", "scaffolds"]
    if not isinstance(data, dict) or any(k not in data for k in required):
        raise CatalogError(f"{templates_path.name} must define {', '.join(required)}")

    scaffolds = {}
    for domain, raw in data["scaffolds"].items():
        if not isinstance(raw, dict) or "head" not in raw or "tail" not in raw:
            raise CatalogError(f"Scaffold '{domain}' needs head and tail")
        scaffolds[domain] = Scaffold(domain, raw.get("class_name"), raw["head"], raw["tail"])
    if "generic" not in scaffolds:
        raise CatalogError("A 'generic' scaffold is required")

    return TemplateSet(
        raf_polyfill=data["raf_polyfill"],
        trig_cache=data["trig_cache"],
        base_effect=data["base_effect"],
        lifecycle=dict(data["lifecycle"]),
        epilogue=data["epilogue"],
        scaffolds=scaffolds,
    )
