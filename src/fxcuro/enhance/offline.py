#!/usr/bin/env python3
"""
FXCURO OFFLINE ENHANCER
-----------------------
Deterministic stand-in for the remote rewrite service. Used when the remote
call is unavailable: stamps a level header and applies two syntactic
touch-ups, each only where it cannot change what the script does at parse
time. Also builds the prompt payload handed to the remote collaborator.

Author: FxCuro Team
Date: 2026-01-16
"""

import re
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from fxcuro.healing.lexer import JsLexer
from fxcuro.validator.validator import EffectValidator

logger = logging.getLogger("fxcuro.enhance")

LEVELS: Dict[int, Dict[str, str]] = {
    1: {"name": "Standard", "focus": "Performance, colours, animation timing"},
    2: {"name": "Professional", "focus": "Advanced performance, contextual adaptation, synchronisation"},
    3: {"name": "Premium", "focus": "Predictive interaction, creative variations, signature style"},
}

VAR_DECL = re.compile(r"\bvar\s+([A-Za-z_$][\w$]*)")
FUNCTION_DECL = re.compile(r"^function\s+([A-Za-z_$][\w$]*)\s*\(", re.MULTILINE)


@dataclass
class EnhancementResult:
    code: str
    level: int
    applied: List[str] = field(default_factory=list)
    stats: Dict[str, int] = field(default_factory=dict)


def level_info(level: int) -> Dict[str, str]:
    if level not in LEVELS:
        raise ValueError(f"Invalid enhancement level: {level}")
    return LEVELS[level]


def build_enhancement_prompt(code: str, level: int) -> str:
    """Payload for the remote rewrite collaborator."""
    info = level_info(level)
    return (
        f"Enhance the following visual effect at the {info['name']} level.\n"
        f"Focus: {info['focus']}.\n"
        "Keep the lifecycle contract: constructor(config), initialize(canvas, element), "
        "animate(deltaTime). Return only valid JavaScript.\n\n"
        f"CODE TO ENHANCE:\n{code}"
    )


class OfflineEnhancer:

    def __init__(self, validator: Optional[EffectValidator] = None):
        self.lexer = JsLexer()
        self.validator = validator or EffectValidator()

    def enhance(self, code: str, level: int = 1) -> EnhancementResult:
        info = level_info(level)
        applied = []

        touched = self._let_for_single_vars(code)
        if touched != code:
            applied.append("var -> let")
        touched2 = self._function_expressions(touched)
        if touched2 != touched:
            applied.append("function declarations -> const function expressions")

        # Touch-ups are dropped wholesale if they break the parse
        if applied and not self.validator.validate(touched2)[0]:
            logger.warning("Offline touch-ups produced invalid code; keeping original body")
            touched2, applied = code, []

        header = f"// FxCuro {info['name']} enhancement (level {level}, offline)\n// Focus: {info['focus']}\n\n"
        enhanced = header + touched2
        return EnhancementResult(
            code=enhanced,
            level=level,
            applied=applied,
            stats={
                "lines_added": enhanced.count("\n") - code.count("\n"),
                "size_delta": len(enhanced) - len(code),
                "level": level,
            },
        )

    def _declared_once_and_not_used_before(self, masked: str, name: str, decl_start: int) -> bool:
        declarations = re.findall(rf"\b(?:var|let|const|function|class)\s+{re.escape(name)}\b", masked)
        if len(declarations) != 1:
            return False
        return re.search(rf"(?<![.\w$]){re.escape(name)}\b", masked[:decl_start]) is None

    def _top_level(self, masked: str, index: int) -> bool:
        before = masked[:index]
        if before.count("{") != before.count("}"):
            return False
        # Loop headers keep var so the counter stays visible after the loop
        return not before.rstrip().endswith("(")

    def _let_for_single_vars(self, code: str) -> str:
        masked = self.lexer.mask(code)
        for match in reversed(list(VAR_DECL.finditer(masked))):
            if not self._top_level(masked, match.start()):
                continue
            if self._declared_once_and_not_used_before(masked, match.group(1), match.start()):
                code = code[:match.start()] + "let" + code[match.start() + 3:]
        return code

    def _function_expressions(self, code: str) -> str:
        masked = self.lexer.mask(code)
        for match in reversed(list(FUNCTION_DECL.finditer(masked))):
            name = match.group(1)
            if not self._top_level(masked, match.start()):
                continue
            if not self._declared_once_and_not_used_before(masked, name, match.start()):
                continue
            close = self._function_end(masked, match.end() - 1)
            if close == -1:
                continue
            code = (code[:match.start()] + f"const {name} = " + code[match.start():close + 1]
                    + ";" + code[close + 1:])
        return code

    def _function_end(self, masked: str, paren_index: int) -> int:
        params_end = self.lexer.find_block_end(masked, paren_index, masked=masked)
        if params_end == -1:
            return -1
        brace = masked.find("{", params_end)
        if brace == -1:
            return -1
        return self.lexer.find_block_end(masked, brace, masked=masked)


def offline_enhancement(code: str, level: int = 1) -> EnhancementResult:
    return OfflineEnhancer().enhance(code, level)
