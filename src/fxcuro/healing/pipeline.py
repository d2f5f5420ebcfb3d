#!/usr/bin/env python3
"""
FXCURO HEALING PIPELINE - The Chief Surgeon
-------------------------------------------
Central coordinator of the rewriting stages. Raw text flows through a
strict, linear sequence of text-in/text-out surgeons; the Validator is the
only gate that can stop a run, in which case the untouched original is
returned as a Fallback.

The pipeline keeps no per-run state: everything a run learns lives in its
HealContext, so one instance can serve many threads.

Author: FxCuro Team
Date: 2026-01-16
"""

import logging
from typing import Optional, Union

from fxcuro.analysis.miner import DescriptionMiner
from fxcuro.catalog.registry import ModuleCatalog, TemplateSet, load_catalog, load_templates
from fxcuro.core.config import PipelineConfig
from fxcuro.core.models import SourceUnit, Success, Fallback, PipelineResult
from fxcuro.healing.classifier import TemplateClassifier
from fxcuro.healing.context import HealContext
from fxcuro.healing.extractor import SourceExtractor
from fxcuro.healing.injector import ModuleInjector
from fxcuro.healing.normalizer import Normalizer
from fxcuro.healing.optimizer import PerformanceRewriter
from fxcuro.healing.repairer import AutoRepairer
from fxcuro.healing.shims import CompatibilityShim
from fxcuro.healing.structurer import StructureFormatter
from fxcuro.validator.validator import EffectValidator

logger = logging.getLogger("fxcuro.pipeline")


class HealingPipeline:
    """
    The Orchestrator: ensures extraction, repair, enrichment and validation
    happen in a strictly defined order.
    """

    def __init__(self, catalog: Optional[ModuleCatalog] = None,
                 templates: Optional[TemplateSet] = None,
                 config: Optional[PipelineConfig] = None):
        """
        Args:
            catalog: Utility registry used by the ModuleInjector. Defaults to
                the packaged catalog.
            templates: Generated-code templates. Defaults to the packaged set.
            config: Thresholds and tunables.
        """
        self.config = config or PipelineConfig()
        self.catalog = catalog if catalog is not None else load_catalog()
        self.templates = templates if templates is not None else load_templates()

        self.validator = EffectValidator(self.config.max_source_bytes)
        self.extractor = SourceExtractor(self.config.doc_comment_min_length,
                                         self.config.doc_comment_markers)
        self.normalizer = Normalizer(self.config.identifier_fixes)
        self.repairer = AutoRepairer(self.validator)
        self.injector = ModuleInjector(self.catalog)
        self.shim = CompatibilityShim(self.templates)
        self.optimizer = PerformanceRewriter(self.templates, self.config.trig_cache_size,
                                             self.config.trig_min_calls)
        self.classifier = TemplateClassifier(self.templates, self.config.classifier_threshold)
        self.structurer = StructureFormatter(self.templates)
        self.miner = DescriptionMiner()

    def run(self, source: Union[SourceUnit, str], filename: str = "effect.js") -> PipelineResult:
        """
        Executes the full sequence. Never raises: any internal failure turns
        into a Fallback carrying the original text.
        """
        unit = source if isinstance(source, SourceUnit) else SourceUnit(source, filename)
        context = HealContext(raw_text=unit.text, filename=unit.filename)

        if len(unit.text.encode("utf-8")) > self.config.max_source_bytes:
            return Fallback(unit.text, f"Source exceeds {self.config.max_source_bytes} bytes")

        try:
            self._heal(context)
        except Exception as e:
            logger.error(f"Pipeline failure on {unit.filename}: {e}")
            return Fallback(unit.text, f"Internal pipeline error: {e}", context.metadata)

        # --- PHASE 9: VALIDATION GATE ---
        valid, error = self.validator.validate(context.code)
        if not valid:
            # The Fallback hands back the original, so its error must describe it
            raw_valid, raw_error = self.validator.validate(unit.text)
            error = f"Healed output rejected: {error}" if raw_valid else raw_error
            logger.info(f"{unit.filename}: validation failed, returning original ({error})")
            return Fallback(unit.text, error, context.metadata)

        # --- PHASE 10: ADVISORY MINING ---
        context.report = self._mine(context)

        return Success(
            code=context.code,
            change_log=list(context.change_log),
            metadata=context.metadata,
            report=context.report,
        )

    def _heal(self, context: HealContext):
        # --- PHASE 1: TRIAGE (descriptor + documentation removal) ---
        extraction = self.extractor.extract(context.raw_text)
        context.code = extraction.code
        context.metadata = extraction.metadata
        context.has_descriptions = extraction.has_descriptions
        context.log(extraction.notes)

        # --- PHASE 2: NORMALIZATION ---
        context.code, notes = self.normalizer.normalize(context.code)
        context.log(notes)

        # --- PHASE 3: SYNTAX REPAIR ---
        context.code, notes = self.repairer.repair(context.code)
        context.log(notes)

        # --- PHASE 4: UTILITY INJECTION ---
        context.code, injected = self.injector.inject(context.code)
        context.injected = injected
        context.log([f"Injected {name}" for name in injected])

        # --- PHASE 5: COMPATIBILITY ---
        context.code, notes = self.shim.apply(context.code)
        context.log(notes)

        # --- PHASE 6: PERFORMANCE ---
        context.code, notes = self.optimizer.optimize(context.code)
        context.log(notes)

        # --- PHASE 7: CLASSIFICATION & SCAFFOLDING ---
        context.code, context.classification, notes = self.classifier.wrap(context.code, context.filename)
        context.log(notes)

        # --- PHASE 8: STRUCTURAL CONTRACT ---
        context.code, notes = self.structurer.format(context.code)
        context.log(notes)

    def _mine(self, context: HealContext):
        try:
            return self.miner.mine(context.code, context.filename, context.metadata)
        except Exception as e:
            logger.warning(f"Description mining failed for {context.filename}: {e}")
            return self.miner.empty_report()
