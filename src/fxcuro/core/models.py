#!/usr/bin/env python3
"""
FXCURO CORE MODELS
------------------
Defines the fundamental data structures used across the FxCuro engine:
the input unit, the descriptor metadata, the classification verdict and
the tagged pipeline result (Success / Fallback).

Author: FxCuro Team
Date: 2026-01-16
"""

from dataclasses import dataclass, field
from typing import Optional, Any, Dict, List, Union


@dataclass(frozen=True)
class SourceUnit:
    """
    The raw script handed to the pipeline.

    The filename is only used to derive a class name for generic scaffolds.
    """
    text: str                       # The untouched upload, byte for byte
    filename: str = "effect.js"     # Original file name (never read from disk)


@dataclass
class EffectMetadata:
    """
    Fields captured from an `export const X = { id, name, description }`
    descriptor block. Populated only when the descriptor is recognized.
    """
    object_name: str
    effect_id: str
    effect_name: str
    description: str
    category: Optional[str] = None      # Mined from **CATÉGORIE :** markup
    effect_type: Optional[str] = None   # Mined from **EFFET DEMANDÉ :** markup

    def to_dict(self) -> Dict[str, Any]:
        return {
            "objectName": self.object_name,
            "id": self.effect_id,
            "name": self.effect_name,
            "description": self.description,
            "category": self.category,
            "effectType": self.effect_type,
        }


@dataclass
class ClassificationResult:
    """
    Verdict of the TemplateClassifier.

    `detected` is the scanned domain that won (physics/dom included) while
    `domain` is the scaffold family actually used.
    """
    domain: str = "generic"
    detected: str = "generic"
    evidence: Dict[str, List[str]] = field(default_factory=dict)


@dataclass
class Success:
    """A run whose output was accepted by the Validator."""
    code: str
    change_log: List[str] = field(default_factory=list)
    metadata: Optional[EffectMetadata] = None
    report: Optional[Any] = None        # MinerReport (advisory)

    valid = True
    error = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "changeLog": list(self.change_log),
            "metadata": self.metadata.to_dict() if self.metadata else None,
            "valid": True,
            "error": None,
            "report": self.report.to_dict() if self.report is not None else None,
        }


@dataclass
class Fallback:
    """
    A run that could not be completed. The original text is returned
    byte-identical together with the reason.
    """
    original_code: str
    error: str
    metadata: Optional[EffectMetadata] = None

    valid = False
    report = None

    @property
    def code(self) -> str:
        return self.original_code

    @property
    def change_log(self) -> List[str]:
        return []

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.original_code,
            "changeLog": [],
            "metadata": self.metadata.to_dict() if self.metadata else None,
            "valid": False,
            "error": self.error,
            "report": None,
        }


PipelineResult = Union[Success, Fallback]
