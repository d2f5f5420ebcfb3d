#!/usr/bin/env python3
"""
FXCURO HEALING CONTEXT
----------------------
A state-management object that acts as the 'Medical Record' for a script
undergoing repair. Stages are stateless; everything a run discovers lives
here.

Author: FxCuro Team
Date: 2026-01-16
"""

from dataclasses import dataclass, field
from typing import List, Optional, Any

from fxcuro.core.models import EffectMetadata, ClassificationResult


@dataclass
class HealContext:
    """
    Maintains the state of a single pipeline run.

    Initialized by the HealingPipeline and enriched by each stage in order.
    """
    raw_text: str                          # The initial raw input, never mutated
    filename: str = "effect.js"            # Only used to name generic scaffolds
    code: str = ""                         # Working copy rewritten by each stage
    change_log: List[str] = field(default_factory=list)  # Ordered notes
    metadata: Optional[EffectMetadata] = None
    has_descriptions: bool = False         # Documentation blocks were removed
    injected: List[str] = field(default_factory=list)    # Utilities prepended
    classification: Optional[ClassificationResult] = None
    report: Any = None                     # MinerReport once mined

    def log(self, notes: List[str]):
        self.change_log.extend(notes)
