#!/usr/bin/env python3
"""
FXCURO FENCES
-------------
Every block of generated code is wrapped in a pair of marker comments:

    // <fxcuro:NAME>
    ...generated code...
    // </fxcuro:NAME>

Stages strip these regions before looking at user vocabulary, so code
the pipeline wrote itself never triggers new detections on a later run.

Author: FxCuro Team
Date: 2026-01-16
"""

import re
from typing import Iterable, List, Tuple

FENCED_REGION = re.compile(r"[ \t]*// <fxcuro:([\w-]+)>\n.*?// </fxcuro:\1>[ \t]*\n?", re.DOTALL)
LEADING_REGION = re.compile(r"\s*// <fxcuro:([\w-]+)>\n.*?// </fxcuro:\1>[ \t]*\n?", re.DOTALL)


def fence(name: str, body: str) -> str:
    return f"// <fxcuro:{name}>\n{body.rstrip()}\n// </fxcuro:{name}>\n"


def strip_fenced(code: str, keep: Iterable[str] = ()) -> str:
    """User-authored text only; regions named in `keep` survive."""
    kept = set(keep)
    return FENCED_REGION.sub(lambda m: m.group(0) if m.group(1) in kept else "", code)


def fenced_spans(code: str) -> List[Tuple[str, int, int]]:
    return [(m.group(1), m.start(), m.end()) for m in FENCED_REGION.finditer(code)]


def split_prelude(code: str) -> Tuple[str, str]:
    """
    Separates the generated blocks stacked at the top of the file from the
    rest of the code.
    """
    end = 0
    while True:
        match = LEADING_REGION.match(code, end)
        if not match:
            break
        end = match.end()
    return code[:end], code[end:]
