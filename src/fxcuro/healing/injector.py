#!/usr/bin/env python3
"""
FXCURO MODULE INJECTOR
----------------------
Prepends the catalog utilities a script appears to need. Detection runs on
user-authored text only; an entry is skipped when its identifier already
appears anywhere in the code, which makes repeated runs insert nothing.

Author: FxCuro Team
Date: 2026-01-16
"""

import re
from typing import List, Tuple

from fxcuro.catalog.registry import ModuleCatalog
from fxcuro.healing.fences import fence, strip_fenced


class ModuleInjector:

    def __init__(self, catalog: ModuleCatalog):
        self.catalog = catalog

    def inject(self, code: str) -> Tuple[str, List[str]]:
        user_text = strip_fenced(code)
        blocks = []
        injected = []

        for entry in self.catalog:
            if not entry.detects(user_text):
                continue
            if re.search(rf"\b{re.escape(entry.identifier)}\b", code):
                continue
            blocks.append(fence(entry.name, entry.source))
            injected.append(entry.name)

        if not blocks:
            return code, []
        return "".join(blocks) + "\n" + code, injected
