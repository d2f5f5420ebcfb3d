#!/usr/bin/env python3
"""
FXCURO TEMPLATE CLASSIFIER
--------------------------
Infers the behavioural domain of a script from its vocabulary and, when the
script has no class or function entry point, wraps it verbatim inside the
matching lifecycle scaffold.

Author: FxCuro Team
Date: 2026-01-16
"""

import re
from typing import Dict, List, Tuple

from fxcuro.catalog.registry import TemplateSet
from fxcuro.core.models import ClassificationResult
from fxcuro.healing.fences import fence, split_prelude, strip_fenced
from fxcuro.healing.lexer import JsLexer

# Scanned in this order; the first domain reaching the threshold wins
DOMAIN_KEYWORDS: List[Tuple[str, List[str]]] = [
    ("particles", ["particle", "particule", "emitter", "spark", "firework", "confetti", "explosion"]),
    ("webgl", ["webgl", "shader", "gl_", "vertex", "fragment", "three."]),
    ("canvas", ["getcontext", "canvas", "ctx.", "fillrect", "drawimage", "strokestyle", "fillstyle"]),
    ("physics", ["gravity", "velocity", "friction", "collision", "mass", "force", "spring"]),
    ("animation", ["requestanimationframe", "animate", "tween", "easing", "keyframe", "transition", "rotation"]),
    ("dom", ["document.", "queryselector", "getelementbyid", "classlist", "innerhtml", "addeventlistener"]),
]

# Scanned domains without a dedicated scaffold
SCAFFOLD_DOMAIN = {"physics": "generic", "dom": "generic"}

ENTRY_POINT = re.compile(r"\bclass\s+[A-Za-z_$]|\bfunction\b")


def class_name_from_filename(filename: str) -> str:
    """'my-cool_fx.js' -> 'MyCoolFxEffect'."""
    stem = (filename or "").rsplit("/", 1)[-1].rsplit("\\", 1)[-1]
    if "." in stem:
        stem = stem.rsplit(".", 1)[0]
    words = [w for w in re.split(r"[^A-Za-z0-9]+", stem) if w]
    name = "".join(w[0].upper() + w[1:] for w in words)
    if not name:
        return "CustomEffect"
    if name[0].isdigit():
        name = "Fx" + name
    if not name.endswith("Effect"):
        name += "Effect"
    return name


class TemplateClassifier:

    def __init__(self, templates: TemplateSet, threshold: int = 1):
        self.templates = templates
        self.threshold = threshold
        self.lexer = JsLexer()

    def classify(self, code: str) -> ClassificationResult:
        text = strip_fenced(code).lower()
        evidence: Dict[str, List[str]] = {}
        winner = None
        for domain, keywords in DOMAIN_KEYWORDS:
            hits = 0
            matched = []
            for keyword in keywords:
                count = text.count(keyword)
                if count:
                    hits += count
                    matched.append(keyword)
            evidence[domain] = matched
            if winner is None and hits >= self.threshold:
                winner = domain

        detected = winner or "generic"
        return ClassificationResult(
            domain=SCAFFOLD_DOMAIN.get(detected, detected),
            detected=detected,
            evidence=evidence,
        )

    def has_entry_point(self, code: str) -> bool:
        # An existing scaffold is an entry point of its own
        own = strip_fenced(code, keep=("scaffold-head",))
        return ENTRY_POINT.search(self.lexer.mask(own)) is not None

    def wrap(self, code: str, filename: str = "effect.js") -> Tuple[str, ClassificationResult, List[str]]:
        verdict = self.classify(code)
        if self.has_entry_point(code):
            return code, verdict, []

        scaffold = self.templates.scaffolds.get(verdict.domain) or self.templates.scaffolds["generic"]
        class_name = scaffold.class_name or class_name_from_filename(filename)
        head = scaffold.head.replace("__CLASS__", class_name)
        tail = scaffold.tail.replace("__CLASS__", class_name)

        prelude, user_code = split_prelude(code)
        wrapped = (prelude + fence("scaffold-head", head)
                   + user_code.strip("\n") + "\n"
                   + fence("scaffold-tail", tail))
        note = f"Wrapped code in {class_name} ({verdict.domain} scaffold)"
        return wrapped, verdict, [note]
