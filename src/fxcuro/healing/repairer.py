#!/usr/bin/env python3
"""
FXCURO AUTO-REPAIRER - Field Surgery
------------------------------------
Heuristic syntax repair for scripts that do not parse. The parser is asked
first; only when it rejects the code are the bracket-closing and
declaration heuristics applied. Cosmetic call-head cleanup always runs.

Author: FxCuro Team
Date: 2026-01-16
"""

import re
import logging
from typing import List, Tuple, Optional

from fxcuro.healing.lexer import JsLexer
from fxcuro.validator.validator import EffectValidator

logger = logging.getLogger("fxcuro.repairer")

EMPTY_CALL = re.compile(r"\b([A-Za-z_$][\w$]*)\(\s+\)")
BARE_ASSIGNMENT = re.compile(r"^([ \t]*)([A-Za-z_$][\w$]*)[ \t]*=(?!=)")
# Line endings that leave a statement open onto the next line
CONTINUATION = (",", "(", "[", "=", "+", "-", "*", "/", "%", "&", "|", "^", "?", ":", "<", ">", ".")
RESERVED = {
    "this", "super", "window", "document", "globalThis", "self", "module",
    "exports", "true", "false", "null", "undefined", "return", "if", "else",
    "for", "while", "do", "switch", "case", "break", "continue", "new",
}


class AutoRepairer:
    """Never raises: every heuristic degrades to a no-op on surprise."""

    def __init__(self, validator: Optional[EffectValidator] = None):
        self.lexer = JsLexer()
        self.validator = validator or EffectValidator()

    def repair(self, code: str) -> Tuple[str, List[str]]:
        notes: List[str] = []
        try:
            code = self._normalize_empty_calls(code, notes)

            valid, _ = self.validator.validate(code)
            if valid:
                return code, notes

            code = self._declare_implicit_globals(code, notes)
            code = self._close_brackets(code, notes)
        except Exception as e:
            logger.warning(f"Repair heuristics aborted: {e}")
        return code, notes

    def _normalize_empty_calls(self, code: str, notes: List[str]) -> str:
        updated = self.lexer.sub_code(EMPTY_CALL, r"\1()", code)
        if updated != code:
            notes.append("Normalized empty call parentheses")
        return updated

    def bracket_balance(self, code: str) -> Tuple[int, int]:
        """(open parens - close parens, open braces - close braces) outside literals."""
        masked = self.lexer.mask(code)
        return (masked.count("(") - masked.count(")"),
                masked.count("{") - masked.count("}"))

    def _close_brackets(self, code: str, notes: List[str]) -> str:
        open_literal = self.lexer.unterminated(code)
        if open_literal is not None:
            # Closers appended now would land inside the literal
            line = code.count("\n", 0, open_literal.start) + 1
            notes.append(f"Unterminated {open_literal.kind.replace('_', ' ')} on line {line} (left untouched)")
            return code

        parens, braces = self.bracket_balance(code)
        if parens <= 0 and braces <= 0:
            if parens < 0 or braces < 0:
                notes.append("Detected surplus closing brackets (left untouched)")
            return code

        closers = ")" * max(parens, 0)
        if braces > 0:
            closers += "\n" + "}" * braces
        notes.append(f"Appended {max(parens, 0)} ')' and {max(braces, 0)} '}}'")
        return code.rstrip() + closers + "\n"

    def _declare_implicit_globals(self, code: str, notes: List[str]) -> str:
        masked = self.lexer.mask(code)
        lines = code.split("\n")
        masked_lines = masked.split("\n")

        braces = 0
        nesting = 0          # open ( and [
        continued = False    # previous line left its statement open
        seen = set()
        for idx, masked_line in enumerate(masked_lines):
            if braces == 0 and nesting == 0 and not continued:
                match = BARE_ASSIGNMENT.match(masked_line)
                if match:
                    name = match.group(2)
                    if name not in seen and name not in RESERVED and not self._is_declared(masked, name):
                        indent = match.group(1)
                        lines[idx] = indent + "let " + lines[idx][len(indent):]
                        notes.append(f"Declared implicit global '{name}' with let")
                    seen.add(name)
            braces = max(braces + masked_line.count("{") - masked_line.count("}"), 0)
            nesting = max(nesting + masked_line.count("(") + masked_line.count("[")
                          - masked_line.count(")") - masked_line.count("]"), 0)
            stripped = masked_line.rstrip()
            if stripped:
                continued = stripped.endswith(CONTINUATION) and not stripped.endswith(("++", "--"))
        return "\n".join(lines)

    def _is_declared(self, masked: str, name: str) -> bool:
        pattern = rf"\b(?:var|let|const|function|class)\s+{re.escape(name)}\b"
        return re.search(pattern, masked) is not None
