#!/usr/bin/env python3
"""
FXCURO SOURCE EXTRACTOR - Triage
--------------------------------
First contact with an upload. Detaches the descriptor object some authors
wrap around their effect (`export const X = { id, name, description }`),
captures its fields as metadata and removes documentation-sized comments
so that later stages only see executable code.

Author: FxCuro Team
Date: 2026-01-16
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from fxcuro.core.models import EffectMetadata
from fxcuro.healing.lexer import JsLexer, Span

DESCRIPTOR_PATTERN = re.compile(
    r"export\s+const\s+(\w+)\s*=\s*\{\s*"
    r"id\s*:\s*[\"']([^\"']+)[\"']\s*,?\s*"
    r"name\s*:\s*[\"']([^\"']+)[\"']\s*,?\s*"
    r"description\s*:\s*`([^`]+)`\s*"
    r"([^}]*)\}\s*;?[ \t]*\n?"
)

CATEGORY_KEYS = r"CAT[ÉE]GORIE|CATEGORY"
EFFECT_TYPE_KEYS = r"EFFET\s+DEMAND[ÉE]|EFFECT\s+TYPE"

FENCE_MARKER = re.compile(r"</?fxcuro:")


@dataclass
class Extraction:
    code: str
    metadata: Optional[EffectMetadata] = None
    has_descriptions: bool = False
    notes: List[str] = field(default_factory=list)


class SourceExtractor:
    """
    Separates the executable code from the prose around it.
    A missing descriptor is a normal outcome, not an error.
    """

    def __init__(self, min_doc_length: int = 200, markers: Optional[List[str]] = None):
        self.min_doc_length = min_doc_length
        self.markers = markers if markers is not None else ["EFFET", "DESCRIPTION"]
        self.lexer = JsLexer()

    def extract(self, text: str) -> Extraction:
        result = Extraction(code=text)

        code, metadata = self._detach_descriptor(text)
        if metadata:
            result.metadata = metadata
            result.notes.append(f"Extracted descriptor '{metadata.object_name}' ({metadata.effect_id})")

        code, removed = self._strip_documentation(code)
        if removed:
            result.has_descriptions = True
            result.notes.append(f"Removed {removed} documentation comment block(s)")

        result.code = self.lexer.collapse_blank_lines(code).strip()
        return result

    def _detach_descriptor(self, text: str) -> Tuple[str, Optional[EffectMetadata]]:
        match = DESCRIPTOR_PATTERN.search(text)
        if not match:
            return text, None

        description = match.group(4).strip()
        metadata = EffectMetadata(
            object_name=match.group(1),
            effect_id=match.group(2),
            effect_name=match.group(3),
            description=description,
            category=self._mine_field(description, CATEGORY_KEYS),
            effect_type=self._mine_field(description, EFFECT_TYPE_KEYS),
        )
        return text[:match.start()] + text[match.end():], metadata

    def _mine_field(self, description: str, keys: str) -> Optional[str]:
        """Reads `**KEY :** value` or `KEY: value` markup from the description."""
        patterns = [
            rf"\*\*\s*(?:{keys})\s*:?\s*\*\*\s*:?\s*([^\n*]+)",
            rf"^\s*(?:{keys})\s*:\s*([^\n]+)",
        ]
        for pattern in patterns:
            found = re.search(pattern, description, re.IGNORECASE | re.MULTILINE)
            if found and found.group(1).strip():
                return found.group(1).strip()
        return None

    def _comment_blocks(self, text: str) -> List[Tuple[int, int]]:
        """
        Groups comments into blocks: consecutive line comments separated
        only by a line break count as one block.
        """
        blocks: List[List[Span]] = []
        for span in self.lexer.comments(text):
            if blocks:
                last = blocks[-1][-1]
                gap = text[last.end:span.start]
                if (span.kind == last.kind == "line_comment"
                        and gap.strip() == "" and gap.count("\n") == 1):
                    blocks[-1].append(span)
                    continue
            blocks.append([span])
        return [(b[0].start, b[-1].end) for b in blocks]

    def _is_documentation(self, block: str) -> bool:
        if FENCE_MARKER.search(block):
            return False
        if len(block) > self.min_doc_length:
            return True
        return any(marker in block for marker in self.markers)

    def _strip_documentation(self, text: str) -> Tuple[str, int]:
        removed = 0
        # Walk backwards so earlier offsets stay valid
        for start, end in reversed(self._comment_blocks(text)):
            if not self._is_documentation(text[start:end]):
                continue
            before = text[start - 1] if start > 0 else "\n"
            after = text[end] if end < len(text) else "\n"
            filler = " " if not before.isspace() and not after.isspace() else ""
            text = text[:start] + filler + text[end:]
            removed += 1
        return text, removed
