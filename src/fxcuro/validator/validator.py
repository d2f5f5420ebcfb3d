#!/usr/bin/env python3
"""
FXCURO VALIDATOR - The Judge
----------------------------
The Validator is the final safety gate of the FxCuro pipeline. It hands the
healed script, untouched, to an embedded V8 isolate as the body of
`new Function(...)`: the engine compiles it (never calls it) and its
SyntaxError, if any, becomes the 'Self-Abort' signal that collapses a run
to its untouched original.

Top-level `return` statements are accepted, exactly as in a function body.

Author: FxCuro Team
Date: 2026-01-16
"""

import json
import logging
import threading
from typing import Tuple

from py_mini_racer import MiniRacer, JSEvalException

# Standardized logging for audit trails
logger = logging.getLogger("fxcuro.validator")

# The source travels as a JSON string literal, so it can never escape the
# Function constructor into the surrounding script.
COMPILE_CHECK = (
    "(function (source) {"
    " try { new Function(source); return ''; }"
    " catch (e) { return String(e) || 'SyntaxError'; }"
    "})(%s)"
)


class EffectValidator:
    """
    Syntactic gate of the pipeline. Returns (is_valid, error_message).
    """

    def __init__(self, max_source_bytes: int = 1024 * 1024):
        self.max_source_bytes = max_source_bytes
        # One isolate per worker thread
        self._local = threading.local()

    def _context(self) -> MiniRacer:
        ctx = getattr(self._local, "ctx", None)
        if ctx is None:
            ctx = self._local.ctx = MiniRacer()
        return ctx

    def validate(self, code: str) -> Tuple[bool, str]:
        if len(code.encode("utf-8")) > self.max_source_bytes:
            return False, f"Source exceeds {self.max_source_bytes} bytes"

        try:
            message = self._context().eval(COMPILE_CHECK % json.dumps(code))
        except JSEvalException as e:
            # Engine-level failure (out of memory, termination)
            logger.debug(f"Engine aborted: {e}")
            return False, f"Engine aborted: {e}"

        if message:
            logger.debug(f"Validation failed: {message}")
            return False, str(message)
        return True, ""
