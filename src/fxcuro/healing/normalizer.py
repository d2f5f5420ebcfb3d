#!/usr/bin/env python3
"""
FXCURO NORMALIZER
-----------------
Turns module-flavoured uploads into plain scripts: strips import/export
syntax and repairs identifiers known to be mangled by copy/paste.

Author: FxCuro Team
Date: 2026-01-16
"""

import re
from typing import Dict, List, Tuple, Optional

from fxcuro.healing.lexer import JsLexer

IMPORT_FROM = re.compile(r"^[ \t]*import\s+[\w$\s{},*]+?\s+from\s*[\"'][^\"'\n]+[\"'][ \t]*;?[ \t]*\n?", re.MULTILINE)
IMPORT_BARE = re.compile(r"^[ \t]*import\s*[\"'][^\"'\n]+[\"'][ \t]*;?[ \t]*\n?", re.MULTILINE)
EXPORT_LIST = re.compile(r"^[ \t]*export\s*\{[^}]*\}\s*(?:from\s*[\"'][^\"'\n]+[\"'])?[ \t]*;?[ \t]*\n?", re.MULTILINE)
EXPORT_DEFAULT = re.compile(r"\bexport\s+default\s+")
EXPORT_PREFIX = re.compile(r"\bexport\s+(?=(?:const|let|var|function|class|async)\b)")


class Normalizer:
    """Module syntax stripper and identifier fixer."""

    def __init__(self, identifier_fixes: Optional[Dict[str, str]] = None):
        self.identifier_fixes = identifier_fixes or {}
        self.lexer = JsLexer()

    def normalize(self, code: str) -> Tuple[str, List[str]]:
        notes = []
        original = code

        for pattern, label in [
            (IMPORT_FROM, "import statements"),
            (IMPORT_BARE, "side-effect imports"),
            (EXPORT_LIST, "export lists"),
            (EXPORT_DEFAULT, "'export default'"),
            (EXPORT_PREFIX, "'export' keywords"),
        ]:
            updated = self.lexer.sub_code(pattern, "", code)
            if updated != code:
                notes.append(f"Removed {label}")
                code = updated

        # Longest corrupted forms first so overlapping keys resolve predictably
        for broken in sorted(self.identifier_fixes, key=len, reverse=True):
            if broken in code:
                code = code.replace(broken, self.identifier_fixes[broken])
                notes.append(f"Fixed identifier '{broken}'")

        code = self.lexer.collapse_blank_lines(code)
        if code != original and not notes:
            notes.append("Collapsed blank lines")
        return code, notes
