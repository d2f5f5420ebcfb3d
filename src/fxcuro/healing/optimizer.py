#!/usr/bin/env python3
"""
FXCURO PERFORMANCE REWRITER
---------------------------
Semantics-preserving micro-optimizations for hot paths:
  * array-length caching in loops inside render/draw functions
  * memoized trigonometry through a bounded LRU cache

Author: FxCuro Team
Date: 2026-01-16
"""

import re
from typing import List, Tuple

from fxcuro.catalog.registry import TemplateSet
from fxcuro.healing.fences import fence, strip_fenced
from fxcuro.healing.lexer import JsLexer

RENDER_HEAD = re.compile(
    r"\b(?:function\s+)?((?:render|draw)[\w$]*)\s*(?:=\s*function\s*)?\([^()]*\)\s*\{",
    re.IGNORECASE,
)
LENGTH_LOOP = re.compile(
    r"for\s*\(\s*(let|var)\s+([A-Za-z_$][\w$]*)\s*=\s*0\s*;\s*"
    r"\2\s*<\s*([A-Za-z_$][\w$.]*)\.length\s*;\s*\2\s*\+\+\s*\)"
)
MUTATORS = re.compile(r"\.(?:push|pop|shift|unshift|splice)\s*\(")
TRIG_CALL = re.compile(r"\bMath\.(sin|cos)\b(?=\s*\()")


class PerformanceRewriter:

    def __init__(self, templates: TemplateSet, cache_size: int = 4096, min_trig_calls: int = 2):
        self.templates = templates
        self.cache_size = cache_size
        self.min_trig_calls = min_trig_calls
        self.lexer = JsLexer()

    def optimize(self, code: str) -> Tuple[str, List[str]]:
        notes = []
        code, cached = self._cache_loop_lengths(code)
        if cached:
            notes.append(f"Cached array length in {cached} render loop(s)")
        code, rewritten = self._memoize_trig(code)
        if rewritten:
            notes.append(f"Routed {rewritten} trig call(s) through TrigCache")
        return code, notes

    def _render_bodies(self, masked: str) -> List[Tuple[int, int]]:
        bodies = []
        for match in RENDER_HEAD.finditer(masked):
            open_index = match.end() - 1
            close_index = self.lexer.find_block_end(masked, open_index, masked=masked)
            if close_index != -1:
                bodies.append((open_index, close_index))
        return bodies

    def _loop_body(self, masked: str, header_end: int) -> str:
        k = header_end
        while k < len(masked) and masked[k].isspace():
            k += 1
        if k < len(masked) and masked[k] == "{":
            end = self.lexer.find_block_end(masked, k, masked=masked)
            return masked[k:] if end == -1 else masked[k:end + 1]
        end = masked.find(";", k)
        return masked[k:] if end == -1 else masked[k:end + 1]

    def _cache_loop_lengths(self, code: str) -> Tuple[str, int]:
        masked = self.lexer.mask(code)
        targets = {}
        for start, end in self._render_bodies(masked):
            for loop in LENGTH_LOOP.finditer(masked, start, end):
                if MUTATORS.search(self._loop_body(masked, loop.end())):
                    continue
                targets[loop.start()] = loop

        for pos in sorted(targets, reverse=True):
            loop = targets[pos]
            keyword, var, collection = loop.group(1), loop.group(2), loop.group(3)
            cache = f"__len_{var}"
            header = (f"for ({keyword} {var} = 0, {cache} = {collection}.length; "
                      f"{var} < {cache}; {var}++)")
            code = code[:loop.start()] + header + code[loop.end():]
        return code, len(targets)

    def _memoize_trig(self, code: str) -> Tuple[str, int]:
        if re.search(r"\bTrigCache\b", code):
            return code, 0
        calls = len(TRIG_CALL.findall(self.lexer.mask(strip_fenced(code))))
        if calls < self.min_trig_calls:
            return code, 0

        code = self.lexer.sub_code(TRIG_CALL, r"TrigCache.\1", code)
        cache = self.templates.trig_cache.replace("__CACHE_SIZE__", str(self.cache_size))
        return fence("TrigCache", cache) + "\n" + code, calls
