#!/usr/bin/env python3
"""
FXCURO COMPATIBILITY SHIM
-------------------------
Rule library that makes scripts survive older or headless environments:
a guarded requestAnimationFrame polyfill and a WebGL context fallback
chain. Each rule returns (code, message); an empty message means the rule
did not apply.

Author: FxCuro Team
Date: 2026-01-16
"""

import re
from typing import List, Tuple

from fxcuro.catalog.registry import TemplateSet
from fxcuro.healing.fences import fence, strip_fenced
from fxcuro.healing.lexer import JsLexer

RAF_ASSIGNMENT = re.compile(r"window\.requestAnimationFrame\s*=(?!=)")
# Plain identifier chains only; call results are not re-evaluated
WEBGL_CONTEXT = re.compile(
    r"(?<![\w$.\)\]])([A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*)*)\.getContext\(\s*(['\"])webgl\2\s*\)"
)


class CompatibilityShim:
    """
    The rule registry runs in order against every script.
    """

    def __init__(self, templates: TemplateSet):
        self.templates = templates
        self.lexer = JsLexer()

        # Registry of active rules to be executed against every script
        self.active_rules = [
            self._rule_raf_polyfill,
            self._rule_webgl_fallback,
        ]

    def apply(self, code: str) -> Tuple[str, List[str]]:
        notes = []
        for rule in self.active_rules:
            code, msg = rule(code)
            if msg:
                notes.append(msg)
        return code, notes

    def _rule_raf_polyfill(self, code: str) -> Tuple[str, str]:
        """
        Policy: scripts that schedule frames get a guarded polyfill.
        """
        user_text = strip_fenced(code)
        if "requestAnimationFrame" not in self.lexer.mask(user_text):
            return code, ""
        if RAF_ASSIGNMENT.search(code):
            return code, ""
        return fence("raf-polyfill", self.templates.raf_polyfill) + "\n" + code, \
            "Added requestAnimationFrame polyfill"

    def _rule_webgl_fallback(self, code: str) -> Tuple[str, str]:
        """
        Policy: a WebGL context request falls back to experimental-webgl, then 2d.
        """
        if "experimental-webgl" in code:
            return code, ""

        def _chain(match):
            target, quote = match.group(1), match.group(2)
            return (f"({target}.getContext({quote}webgl{quote}) || "
                    f"{target}.getContext({quote}experimental-webgl{quote}) || "
                    f"{target}.getContext({quote}2d{quote}))")

        updated = self.lexer.sub_code(WEBGL_CONTEXT, _chain, code)
        if updated == code:
            return code, ""
        return updated, "Added WebGL context fallback chain"
