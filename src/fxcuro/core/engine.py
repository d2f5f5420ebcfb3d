#!/usr/bin/env python3
"""
FXCURO ENGINE - The High Orchestrator
-------------------------------------
The EffectEngine drives uploaded scripts through the healing pipeline at
file and directory level. It ensures atomic persistence, batch recursion
safety and workspace integrity; a failing file never aborts a batch.

Author: FxCuro Team
Date: 2026-01-16
"""

import os
import time
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, Any, List, Optional, Callable

from fxcuro.catalog.registry import load_catalog, load_templates
from fxcuro.core.config import PipelineConfig
from fxcuro.core.models import SourceUnit
from fxcuro.enhance.offline import OfflineEnhancer
from fxcuro.healing.pipeline import HealingPipeline

logger = logging.getLogger("fxcuro.engine")

OUTPUT_SUFFIX = ".fx.js"


class EffectEngine:
    """
    Principal orchestrator for effect normalization.
    Maintains workspace state and coordinates the pipeline with safety gates
    for recursion depth and atomic write operations.
    """

    def __init__(self, workspace_path: str, catalog_path: Optional[str] = None,
                 config: Optional[PipelineConfig] = None):
        self.workspace = Path(workspace_path).resolve()
        self.config = config or PipelineConfig()

        # Catalog problems surface here, before any file is touched
        catalog = load_catalog(catalog_path)
        self.pipeline = HealingPipeline(catalog, load_templates(), self.config)
        self.enhancer = OfflineEnhancer(self.pipeline.validator)

        self._ensure_workspace()

    def _ensure_workspace(self):
        """Validates/Creates target workspace to prevent OS path errors."""
        if not self.workspace.exists():
            logger.info(f"Creating missing workspace: {self.workspace}")
            self.workspace.mkdir(parents=True, exist_ok=True)

    def output_path_for(self, source: Path, out_dir: Optional[Path] = None) -> Path:
        name = source.name
        stem = name[:-3] if name.endswith(".js") else source.stem
        target_dir = out_dir if out_dir else source.parent
        return target_dir / f"{stem}{OUTPUT_SUFFIX}"

    def process_file(self, relative_path: str, dry_run: bool = True,
                     out_dir: Optional[str] = None,
                     enhance_level: Optional[int] = None) -> Dict[str, Any]:
        """
        Runs one script through the pipeline and optionally persists the
        normalized artifact next to it (or into out_dir). With an
        enhance_level, valid output also goes through the offline enhancer.
        """
        full_path = (self.workspace / relative_path).resolve()

        if not full_path.exists():
            return self._file_error(relative_path, "FILE_NOT_FOUND", f"Path missing: {full_path}")

        try:
            # Phase 1: Read (BOM-aware)
            raw_text = full_path.read_text(encoding='utf-8-sig')

            # Phase 2: Healing pipeline
            result = self.pipeline.run(SourceUnit(raw_text, full_path.name))
        except Exception as e:
            logger.error(f"Error processing {relative_path}: {str(e)}")
            return self._file_error(relative_path, "ENGINE_ERROR", str(e))

        change_log = list(result.change_log)
        content = result.code
        enhancement = None
        # Phase 3: Optional enhancement (SUCCESS only)
        if result.valid and enhance_level is not None:
            enhancement = self.enhancer.enhance(result.code, enhance_level)
            content = enhancement.code
            change_log.append(f"Enhanced offline at level {enhance_level}")
            change_log.extend(f"Enhanced: {step}" for step in enhancement.applied)

        # Phase 4: Result construction
        is_modified = result.valid and raw_text != content
        classification = None
        if result.valid and result.report is not None:
            classification = result.report.category

        report = {
            "file_path": str(relative_path),
            "success": result.valid,
            "status": self._derive_status(is_modified, dry_run, result.valid),
            "category": classification or "Unknown",
            "effect_id": result.metadata.effect_id if result.metadata else None,
            "change_log": change_log,
            "error": result.error,
            "written": False,
            "output_path": None,
            "healed_content": content if is_modified else None,
            "result": result,
            "enhancement": enhancement,
            "timestamp": time.time(),
        }

        # Phase 5: Persistence (never for fallbacks)
        if not dry_run and result.valid:
            target = self.output_path_for(full_path, Path(out_dir).resolve() if out_dir else None)
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                self._atomic_write(target, content)
                report["written"] = True
                report["output_path"] = str(target)
            except IOError as e:
                report["write_error"] = str(e)
                report["success"] = False

        return report

    def discover(self, extension: str = ".js", max_depth: int = 10) -> List[Path]:
        """Lists candidate scripts, skipping symlinks and previously generated artifacts."""
        patterns = {f"*{extension.lower()}", f"*{extension.upper()}"}
        found = set()
        for p in patterns:
            for f in self.workspace.rglob(p):
                if not f.is_file() or f.is_symlink() or f.name.endswith(OUTPUT_SUFFIX):
                    continue
                if len(f.relative_to(self.workspace).parts) > max_depth:
                    continue
                found.add(f)
        return sorted(found)

    def scan_directory(self, extension: str = ".js", dry_run: bool = True,
                       out_dir: Optional[str] = None, max_depth: int = 10, workers: int = 1,
                       progress_callback: Optional[Callable[[int, int], None]] = None) -> List[Dict[str, Any]]:
        """
        Recursively discovers and processes all scripts with safety gates.
        Reports come back in discovery order whatever the worker count.
        """
        try:
            max_depth = int(max_depth)
        except (ValueError, TypeError):
            logger.warning(f"Invalid max_depth '{max_depth}'. Falling back to default: 10")
            max_depth = 10

        all_files = self.discover(extension, max_depth)
        total_files = len(all_files)
        rel_paths = [str(f.relative_to(self.workspace)) for f in all_files]

        def _one(rel_path: str) -> Dict[str, Any]:
            try:
                return self.process_file(rel_path, dry_run=dry_run, out_dir=out_dir)
            except Exception as e:
                logger.error(f"Critical error in scan loop for {rel_path}: {str(e)}")
                return self._file_error(rel_path, "ENGINE_ERROR", str(e))

        reports = []
        with ThreadPoolExecutor(max_workers=max(1, int(workers))) as pool:
            for processed, report in enumerate(pool.map(_one, rel_paths), start=1):
                reports.append(report)
                if progress_callback:
                    progress_callback(processed, total_files)

        return reports

    def generate_summary(self, reports: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Batch metrics for the final report panel."""
        if not reports:
            return {
                "total_files": 0, "success_rate": 0, "successful": 0, "fallbacks": 0,
                "system_errors": 0, "written_to_disk": 0
            }

        total = len(reports)
        successful = sum(1 for r in reports if r.get('success', False))
        writes = sum(1 for r in reports if r.get('written', False))
        fallbacks = sum(1 for r in reports if r.get('status') == "FALLBACK")
        system_errors = sum(1 for r in reports if r.get('status') in ("ENGINE_ERROR", "FILE_NOT_FOUND"))

        return {
            "total_files": total,
            "success_rate": successful / total,
            "successful": successful,
            "fallbacks": fallbacks,
            "written_to_disk": writes,
            "system_errors": system_errors,
            "summary_timestamp": time.strftime("%Y-%m-%d %H:%M:%S")
        }

    def _derive_status(self, modified: bool, dry: bool, valid: bool) -> str:
        if not valid: return "FALLBACK"
        if not modified: return "UNCHANGED"
        if dry: return "PREVIEW"
        return "HEALED"

    def _atomic_write(self, target_path: Path, content: str):
        if not os.access(target_path.parent, os.W_OK):
            raise PermissionError(f"No write access to {target_path.parent}")
        temp_file = target_path.with_name(target_path.name + '.fxcuro.tmp')
        try:
            temp_file.write_text(content, encoding='utf-8')
            os.replace(temp_file, target_path)
        except Exception as e:
            if temp_file.exists(): temp_file.unlink()
            raise IOError(f"Atomic write failed: {str(e)}")

    def _file_error(self, path: str, status: str, error: str) -> Dict[str, Any]:
        return {
            "file_path": path, "status": status, "error": error,
            "success": False, "written": False, "category": "Unknown",
            "change_log": [], "healed_content": None, "result": None, "enhancement": None,
        }
