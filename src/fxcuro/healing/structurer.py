#!/usr/bin/env python3
"""
FXCURO STRUCTURE FORMATTER - The Reconstructive Surgeon
-------------------------------------------------------
Brings a script up to the lifecycle contract without touching user logic:
it only prepends, inserts or appends.

  1. BaseEffect contract when a class extends it but nothing defines it
  2. initialize()/animate() synthesized inside the main class when missing
  3. dual export epilogue (CommonJS + window binding + bootstrap helper)

Author: FxCuro Team
Date: 2026-01-16
"""

import re
from typing import List, Optional, Tuple

from fxcuro.catalog.registry import TemplateSet
from fxcuro.healing.fences import fence, fenced_spans
from fxcuro.healing.lexer import JsLexer

CLASS_HEAD = re.compile(r"\bclass\s+([A-Za-z_$][\w$]*)(\s+extends\s+([\w$.]+))?\s*\{")
METHOD_DEF = r"(?<![.\w$])(?:async\s+)?{name}\s*\([^()]*\)\s*\{{"

# Generated regions whose classes still count as the script's own
OWN_FENCES = {"scaffold-head"}


class StructureFormatter:

    def __init__(self, templates: TemplateSet):
        self.templates = templates
        self.lexer = JsLexer()

    def format(self, code: str) -> Tuple[str, List[str]]:
        notes: List[str] = []

        code = self._ensure_base_effect(code, notes)
        main = self.find_main_class(code)
        if main is None:
            return code, notes

        code = self._ensure_lifecycle(code, main, notes)
        code = self._ensure_epilogue(code, main[0], notes)
        return code, notes

    def _ensure_base_effect(self, code: str, notes: List[str]) -> str:
        masked = self.lexer.mask(code)
        if not re.search(r"\bextends\s+BaseEffect\b", masked):
            return code
        if re.search(r"\bclass\s+BaseEffect\b", masked):
            return code
        notes.append("Added BaseEffect contract")
        return fence("BaseEffect", self.templates.base_effect) + "\n" + code

    def _top_level_classes(self, code: str):
        masked = self.lexer.mask(code)
        foreign = [(s, e) for name, s, e in fenced_spans(code) if name not in OWN_FENCES]

        depth = 0
        last = 0
        classes = []
        for match in CLASS_HEAD.finditer(masked):
            segment = masked[last:match.start()]
            depth += segment.count("{") - segment.count("}")
            last = match.start()
            if depth != 0:
                continue
            if any(s <= match.start() < e for s, e in foreign):
                continue
            classes.append(match)
        return classes

    def find_main_class(self, code: str) -> Optional[Tuple[str, int, Optional[str]]]:
        """
        (name, index of the opening brace, parent) of the class that receives
        the lifecycle: the first one extending BaseEffect, otherwise the last
        top-level class.
        """
        classes = self._top_level_classes(code)
        if not classes:
            return None
        chosen = next((m for m in classes if m.group(3) == "BaseEffect"), classes[-1])
        return chosen.group(1), chosen.end() - 1, chosen.group(3)

    def _ensure_lifecycle(self, code: str, main: Tuple[str, int, Optional[str]],
                          notes: List[str]) -> str:
        name, open_index, parent = main
        if parent:
            # Inherited lifecycle methods are left to the parent class
            return code

        masked = self.lexer.mask(code)
        close_index = self.lexer.find_block_end(masked, open_index, masked=masked)
        if close_index == -1:
            return code
        body = masked[open_index:close_index]

        inserts = []
        for method in ("initialize", "animate"):
            if re.search(METHOD_DEF.format(name=method), body):
                continue
            block = fence(f"lifecycle-{method}", self.templates.lifecycle[method])
            inserts.append("\n".join("  " + line if line else line for line in block.rstrip("\n").split("\n")))
            notes.append(f"Synthesized {method}() in {name}")

        if not inserts:
            return code
        insertion = "\n" + "\n".join(inserts) + "\n"
        return code[:open_index + 1] + insertion + code[open_index + 1:]

    def _ensure_epilogue(self, code: str, class_name: str, notes: List[str]) -> str:
        if re.search(r"\bmodule\.exports\b", self.lexer.mask(code)):
            return code
        notes.append(f"Appended export epilogue for {class_name}")
        epilogue = self.templates.epilogue.replace("__CLASS__", class_name)
        return code.rstrip("\n") + "\n\n" + fence("epilogue", epilogue)
