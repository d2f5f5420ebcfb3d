#!/usr/bin/env python3
"""
FXCURO LEXER - Token Region Scanner
-----------------------------------
Splits raw script text into regions (code, string, template, regex,
comments) without building a syntax tree. Every healing stage relies on
these regions so that braces, keywords and `//` sequences living inside
strings or comments are never mistaken for structure.

Author: FxCuro Team
Date: 2026-01-16
"""

import re
from bisect import bisect_right
from dataclasses import dataclass
from typing import List, Optional, Callable, Union, Pattern, Tuple

# Words after which a '/' opens a regex literal rather than a division
REGEX_KEYWORDS = {
    "return", "typeof", "instanceof", "in", "of", "new", "delete", "void",
    "throw", "case", "do", "else", "yield", "await",
}

COMMENT_KINDS = ("line_comment", "block_comment")


@dataclass(frozen=True)
class Span:
    """A contiguous region [start, end) of a single kind."""
    kind: str
    start: int
    end: int
    closed: bool = True      # False when the literal or comment runs off its end

    def text(self, source: str) -> str:
        return source[self.start:self.end]


class JsLexer:
    """
    Region scanner for loosely written scripts.

    Unterminated quoted strings stop at the end of their line; unterminated
    templates and block comments run to the end of the file. Both come back
    with `closed=False`.
    """

    def scan(self, text: str) -> List[Span]:
        spans: List[Span] = []
        n = len(text)
        i = 0
        code_start = 0
        prev: Optional[str] = None   # Last significant code character
        word = ""                    # Last identifier-like word
        dotted = False               # That word was a property name (`a.in`)

        def flush(end: int):
            if end > code_start:
                spans.append(Span("code", code_start, end))

        while i < n:
            c = text[i]

            if c in "\"'":
                flush(i)
                end, closed = self._skip_string(text, i)
                spans.append(Span("string", i, end, closed))
                i = code_start = end
                prev, word = ")", ""
                continue

            if c == "`":
                flush(i)
                end, closed = self._skip_template(text, i)
                spans.append(Span("template", i, end, closed))
                i = code_start = end
                prev, word = ")", ""
                continue

            if c == "/":
                nxt = text[i + 1] if i + 1 < n else ""
                if nxt == "/":
                    flush(i)
                    end = text.find("\n", i)
                    end = n if end == -1 else end
                    spans.append(Span("line_comment", i, end))
                    i = code_start = end
                    continue
                if nxt == "*":
                    flush(i)
                    end = text.find("*/", i + 2)
                    closed = end != -1
                    end = end + 2 if closed else n
                    spans.append(Span("block_comment", i, end, closed))
                    i = code_start = end
                    continue
                if self._regex_allowed(prev, word, dotted):
                    end = self._skip_regex(text, i)
                    if end is not None:
                        flush(i)
                        spans.append(Span("regex", i, end))
                        i = code_start = end
                        prev, word = ")", ""
                        continue
                prev, word = "/", ""
                i += 1
                continue

            if c.isspace():
                i += 1
                continue

            if c.isalnum() or c in "_$":
                j = i
                while j < n and (text[j].isalnum() or text[j] in "_$"):
                    j += 1
                dotted = prev == "."
                word = text[i:j]
                prev = "a"
                i = j
                continue

            prev, word = c, ""
            i += 1

        flush(n)
        return spans

    # --- Region skippers ---
    # Each returns (end index, terminated?)

    def _skip_string(self, text: str, i: int) -> Tuple[int, bool]:
        quote = text[i]
        j = i + 1
        n = len(text)
        while j < n:
            c = text[j]
            if c == "\\":
                j += 2
                continue
            if c == quote:
                return j + 1, True
            if c == "\n":
                return j, False
            j += 1
        return n, False

    def _skip_template(self, text: str, i: int) -> Tuple[int, bool]:
        j = i + 1
        n = len(text)
        while j < n:
            c = text[j]
            if c == "\\":
                j += 2
                continue
            if c == "`":
                return j + 1, True
            if c == "$" and j + 1 < n and text[j + 1] == "{":
                j, closed = self._skip_expression(text, j + 2)
                if not closed:
                    return n, False
                continue
            j += 1
        return n, False

    def _skip_expression(self, text: str, j: int) -> Tuple[int, bool]:
        """Skips a `${ ... }` body, returning the index after its closing brace."""
        depth = 1
        n = len(text)
        while j < n:
            c = text[j]
            if c in "\"'":
                j, _ = self._skip_string(text, j)
                continue
            if c == "`":
                j, closed = self._skip_template(text, j)
                if not closed:
                    return n, False
                continue
            if text.startswith("//", j):
                end = text.find("\n", j)
                j = n if end == -1 else end
                continue
            if text.startswith("/*", j):
                end = text.find("*/", j + 2)
                j = n if end == -1 else end + 2
                continue
            if c == "{":
                depth += 1
            elif c == "}":
                depth -= 1
                if depth == 0:
                    return j + 1, True
            j += 1
        return n, False

    def _skip_regex(self, text: str, i: int) -> Optional[int]:
        j = i + 1
        n = len(text)
        in_class = False
        while j < n:
            c = text[j]
            if c == "\n":
                return None
            if c == "\\":
                j += 2
                continue
            if c == "[":
                in_class = True
            elif c == "]":
                in_class = False
            elif c == "/" and not in_class:
                j += 1
                while j < n and (text[j].isalnum() or text[j] == "_"):
                    j += 1
                return j
            j += 1
        return None

    def _regex_allowed(self, prev: Optional[str], word: str, dotted: bool = False) -> bool:
        if prev is None:
            return True
        if prev == "a":
            # `o.in / 2` divides a property, it does not open a regex
            return word in REGEX_KEYWORDS and not dotted
        return prev not in ")]}"

    def unterminated(self, text: str, spans: Optional[List[Span]] = None) -> Optional[Span]:
        """First string, template or block comment that never closes, if any."""
        spans = spans if spans is not None else self.scan(text)
        return next((s for s in spans if not s.closed), None)

    # --- Derived views ---

    def mask(self, text: str, spans: Optional[List[Span]] = None) -> str:
        """
        Same-length copy of `text` where every non-code region is blanked.
        Newlines are preserved so line numbers and offsets still line up.
        """
        spans = spans if spans is not None else self.scan(text)
        chars = list(text)
        for span in spans:
            if span.kind == "code":
                continue
            for k in range(span.start, span.end):
                if chars[k] != "\n":
                    chars[k] = " "
        return "".join(chars)

    def comments(self, text: str) -> List[Span]:
        return [s for s in self.scan(text) if s.kind in COMMENT_KINDS]

    def in_code(self, spans: List[Span], index: int) -> bool:
        # Spans are sorted and cover the whole text
        pos = bisect_right([s.start for s in spans], index) - 1
        if pos < 0:
            return False
        span = spans[pos]
        return span.start <= index < span.end and span.kind == "code"

    def find_block_end(self, text: str, open_index: int, masked: Optional[str] = None) -> int:
        """
        Index of the bracket closing the one at `open_index`, or -1 when the
        block never closes.
        """
        masked = masked if masked is not None else self.mask(text)
        opener = masked[open_index]
        closer = {"{": "}", "(": ")", "[": "]"}.get(opener)
        if closer is None:
            return -1
        depth = 0
        for k in range(open_index, len(masked)):
            ch = masked[k]
            if ch == opener:
                depth += 1
            elif ch == closer:
                depth -= 1
                if depth == 0:
                    return k
        return -1

    def collapse_blank_lines(self, text: str, max_blank: int = 1) -> str:
        """Shrinks runs of blank lines in code regions to `max_blank`."""
        run = re.compile(r"\n(?:[ \t]*\n){%d,}" % (max_blank + 1))
        parts = []
        for span in self.scan(text):
            chunk = span.text(text)
            if span.kind == "code":
                chunk = run.sub("\n" * (max_blank + 1), chunk)
            parts.append(chunk)
        return "".join(parts)

    def sub_code(self, pattern: Union[str, Pattern], repl: Union[str, Callable],
                 text: str, count: int = 0) -> str:
        """
        `re.sub` restricted to matches that start inside a code region.
        """
        regex = re.compile(pattern) if isinstance(pattern, str) else pattern
        spans = self.scan(text)
        done = [0]

        def _replace(match):
            if count and done[0] >= count:
                return match.group(0)
            if not self.in_code(spans, match.start()):
                return match.group(0)
            done[0] += 1
            return repl(match) if callable(repl) else match.expand(repl)

        return regex.sub(_replace, text)
