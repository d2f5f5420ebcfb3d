#!/usr/bin/env python3
"""
FXCURO DESCRIPTION MINER
------------------------
Advisory analysis of a healed effect. Derives a category, a parameter
table with variation presets, the physical phenomena the code appears to
simulate and a rough performance tier. It never blocks a run and never
modifies code.

Author: FxCuro Team
Date: 2026-01-16
"""

import re
import logging
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional, Tuple

from fxcuro.core.models import EffectMetadata
from fxcuro.healing.fences import strip_fenced
from fxcuro.healing.lexer import JsLexer

logger = logging.getLogger("fxcuro.miner")

NUMBER = r"-?\d+(?:\.\d+)?"

# Category registry; 'levels' is how many enhancement levels make sense
CATEGORIES: Dict[str, Dict[str, Any]] = {
    "ui_ux": {"name": "User Interface (UI/UX)", "icon": "🎯", "levels": 1,
              "words": ["button", "menu", "navigation", "loading", "hover", "ripple"]},
    "transitions": {"name": "Basic Transitions", "icon": "⚡", "levels": 1,
                    "words": ["fade", "slide", "wipe", "transition"]},
    "text": {"name": "Text Effects", "icon": "📝", "levels": 2,
             "words": ["text", "font", "typography", "typewriter", "letter"]},
    "images": {"name": "Image Effects", "icon": "🖼️", "levels": 2,
               "words": ["image", "photo", "gallery", "slideshow", "parallax", "zoom"]},
    "audio": {"name": "Audio Effects", "icon": "🔊", "levels": 2,
              "words": ["audio", "sound", "music", "voice"]},
    "particles": {"name": "Particles & Simulation", "icon": "✨", "levels": 6,
                  "words": ["particle", "particule", "fire", "smoke", "snow", "magic", "physics", "explosion"]},
    "motion_3d": {"name": "3D Motion", "icon": "🎮", "levels": 6,
                  "words": ["3d", "camera", "render", "rotation", "transform", "matrix", "perspective"]},
    "video": {"name": "Video & Post-Production", "icon": "🎬", "levels": 6,
              "words": ["video", "morphing", "grading", "composite", "chroma"]},
}

KEYWORD_PATTERNS = [
    r"particle|particule", r"3d|three|webgl", r"animation|animate", r"button|bouton|hover",
    r"text|texte|font", r"image|img|photo", r"video|film", r"audio|sound|music",
    r"fire|feu|flame", r"smoke|fumee", r"snow|neige", r"magic|magie",
    r"camera|perspective", r"transition|fade|slide", r"loading|preloader", r"menu|navigation",
]

TECHNICAL_PATTERNS = [
    ("3d_math", r"Math\.(?:sin|cos|tan)|TrigCache|matrix|transform|rotate|perspective"),
    ("particle_system", r"particle|array.*push"),
    ("webgl", r"webgl|gl\.|shader|vertex|fragment"),
    ("animation", r"requestAnimationFrame|setInterval|transition|animate"),
    ("physics", r"velocity|acceleration|gravity|physics"),
    ("interaction", r"addEventListener|onclick|hover|mouseover"),
    ("rendering", r"canvas|ctx\.|getContext|drawImage|fillRect"),
]

PHENOMENA = [
    ("Gravitation", "Newtonian gravity (F = m * g)", ["gravity", "gravit"]),
    ("Newtonian mechanics", "Second law of motion (F = m * a)", ["velocity", "acceleration", "force", "mass"]),
    ("Harmonic motion", "Hooke's law (F = -k * x)", ["spring", "elastic", "oscillat"]),
    ("Damping", "Friction and drag losses", ["friction", "drag", "damping"]),
    ("Fluid dynamics", "Navier-Stokes style advection", ["smoke", "fluid", "turbulence", "vortex", "wind"]),
    ("Elastic collision", "Momentum conservation on impact", ["collision", "bounce", "collide"]),
    ("Procedural noise", "Perlin / simplex noise fields", ["noise", "perlin", "simplex"]),
    ("Periodic motion", "Trigonometric oscillation", ["math.sin", "math.cos", "trigcache", "wave", "orbit"]),
    ("Colour theory", "RGB / HSL colour spaces", ["hsl", "rgb", "hue", "saturation"]),
    ("Projective geometry", "Perspective projection", ["perspective", "projection", "camera", "fov"]),
]

OPTIMIZATION_MARKERS = ["TrigCache", "__len_", "ParticlePool", "AnimationFrameManager", "requestAnimationFrame"]
HEAVY_MARKERS = ["getImageData", "putImageData", "shadowBlur", "createRadialGradient", "filter ="]


@dataclass
class Parameter:
    name: str
    default: Optional[float]
    min: float
    max: float
    unit: str = ""
    description: str = ""
    source: str = "code"      # 'description', 'config', 'fallback' or 'constant'


@dataclass
class Variation:
    name: str
    parameter: str
    min: float
    max: float
    description: str


@dataclass
class MinerReport:
    name: str = "Effect"
    category: str = "Unclassified"
    category_key: str = ""
    icon: str = "❔"
    confidence: float = 0.0
    keywords: List[str] = field(default_factory=list)
    patterns: List[str] = field(default_factory=list)
    parameters: List[Parameter] = field(default_factory=list)
    variations: List[Variation] = field(default_factory=list)
    scientific_basis: List[Dict[str, Any]] = field(default_factory=list)
    complexity: str = "low"
    performance_tier: str = "light"
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_markdown(self) -> str:
        lines = [
            f"# {self.name}",
            "",
            f"**Category:** {self.icon} {self.category} ({self.confidence:.0%} confidence)",
            f"**Complexity:** {self.complexity}",
            f"**Performance tier:** {self.performance_tier}",
            "",
        ]
        if self.parameters:
            lines += ["## Parameters", "",
                      "| Name | Default | Range | Unit | Source |",
                      "|---|---|---|---|---|"]
            for p in self.parameters:
                default = "-" if p.default is None else _fmt(p.default)
                lines.append(f"| {p.name} | {default} | {_fmt(p.min)} - {_fmt(p.max)} | {p.unit or '-'} | {p.source} |")
            lines.append("")
        if self.variations:
            lines += ["## Variations", ""]
            for v in self.variations:
                lines.append(f"- **{v.name}**: {_fmt(v.min)} - {_fmt(v.max)} ({v.description})")
            lines.append("")
        if self.scientific_basis:
            lines += ["## Scientific basis", ""]
            for item in self.scientific_basis:
                lines.append(f"- **{item['phenomenon']}** - {item['principle']} "
                             f"(evidence: {', '.join(item['evidence'])})")
            lines.append("")
        if self.recommendations:
            lines += ["## Recommendations", ""]
            lines += [f"- {r}" for r in self.recommendations]
            lines.append("")
        return "\n".join(lines)


def _fmt(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


def infer_range(value: float) -> Tuple[float, float]:
    """Fractions live in [0, 1]; other defaults get [0, 2x] (mirrored when negative)."""
    if value == 0 or (0 < value < 1):
        return 0.0, 1.0
    if value < 0:
        return 2 * value, 0.0
    return 0.0, 2 * value


class DescriptionMiner:

    def __init__(self):
        self.lexer = JsLexer()

    def empty_report(self) -> MinerReport:
        return MinerReport()

    def mine(self, code: str, filename: str = "effect.js",
             metadata: Optional[EffectMetadata] = None) -> MinerReport:
        user_code = strip_fenced(code)
        name = metadata.effect_name if metadata else filename.rsplit(".", 1)[0]
        description = metadata.description if metadata else ""

        keywords = self._keywords(f"{filename} {user_code} {description}".lower())
        patterns = [label for label, rx in TECHNICAL_PATTERNS if re.search(rx, user_code, re.IGNORECASE)]
        complexity = self.evaluate_complexity(user_code, patterns)
        key = self._categorize(filename.lower(), keywords, patterns)
        category = CATEGORIES[key]

        report = MinerReport(
            name=name,
            category=category["name"],
            category_key=key,
            icon=category["icon"],
            confidence=self._confidence(keywords, patterns, complexity),
            keywords=keywords,
            patterns=patterns,
            complexity=complexity,
            performance_tier=self.performance_tier(user_code),
            recommendations=self._recommendations(category),
        )
        if metadata and metadata.category:
            report.category = metadata.category
            report.category_key = self._match_category(metadata.category) or key
            report.icon = CATEGORIES[report.category_key]["icon"]
            report.confidence = 1.0

        report.parameters = self.extract_parameters(user_code, description)
        report.variations = [v for p in report.parameters for v in self.variations_for(p)]
        report.scientific_basis = self.scientific_basis(f"{user_code}\n{description}")
        return report

    # --- Categorization ---

    def _keywords(self, text: str) -> List[str]:
        found: List[str] = []
        for pattern in KEYWORD_PATTERNS:
            for match in re.findall(pattern, text):
                if match not in found:
                    found.append(match)
        return found

    def _has(self, keywords: List[str], key: str) -> bool:
        return any(word in k for k in keywords for word in CATEGORIES[key]["words"])

    def _categorize(self, name: str, keywords: List[str], patterns: List[str]) -> str:
        advanced_3d = ("webgl" in patterns or "3d_math" in patterns
                       or any(w in k for k in keywords for w in ("webgl", "three", "3d")))

        if self._has(keywords, "ui_ux") or "interaction" in patterns:
            return "ui_ux"
        if any(w in name for w in CATEGORIES["transitions"]["words"]) or self._has(keywords, "transitions"):
            return "transitions"
        if self._has(keywords, "text") and not advanced_3d:
            return "text"
        if self._has(keywords, "images") and not advanced_3d:
            return "images"
        if self._has(keywords, "audio"):
            return "audio"
        if self._has(keywords, "particles") or "particle_system" in patterns or "physics" in patterns:
            return "particles"
        if self._has(keywords, "motion_3d") or advanced_3d:
            return "motion_3d"
        if self._has(keywords, "video"):
            return "video"
        return "text"

    def _match_category(self, label: str) -> Optional[str]:
        lowered = label.lower()
        for key, category in CATEGORIES.items():
            if any(word in lowered for word in category["words"]):
                return key
        return None

    def evaluate_complexity(self, code: str, patterns: List[str]) -> str:
        score = min(len(code) / 1000, 10)
        score += len(patterns) * 2
        score += len(re.findall(r"function|class|if|for|while", code)) * 0.5
        score += len(re.findall(r"Math\.", code))
        if score < 5:
            return "low"
        if score < 15:
            return "medium"
        if score < 30:
            return "high"
        return "very_high"

    def _confidence(self, keywords: List[str], patterns: List[str], complexity: str) -> float:
        confidence = 0.5
        confidence += min(len(keywords) * 0.05, 0.3)
        confidence += min(len(patterns) * 0.08, 0.2)
        confidence += {"low": 0.1, "medium": 0.15, "high": 0.2, "very_high": 0.25}[complexity]
        return round(min(confidence, 1.0), 2)

    def _recommendations(self, category: Dict[str, Any]) -> List[str]:
        if category["levels"] == 1:
            return ["Already complete at the standard level",
                    "No major enhancement needed"]
        if category["levels"] <= 2:
            return ["Moderate enhancements possible",
                    "Professional level recommended for finer results"]
        return ["Large enhancement potential",
                "All levels available; premium level recommended"]

    # --- Parameters ---

    def extract_parameters(self, code: str, description: str = "") -> List[Parameter]:
        params: Dict[str, Parameter] = {}

        for match in re.finditer(r"\*\*([^*]+)\*\*\s*\(([^)]+)\)\s*-\s*(.+)", description):
            name, span, text = match.group(1).strip(), match.group(2), match.group(3).strip()
            bounds = re.match(r"\s*([0-9.]+)\s*-\s*([0-9.]+)\s*(.*)", span)
            if not bounds or name in params:
                continue
            try:
                low, high = float(bounds.group(1)), float(bounds.group(2))
            except ValueError:
                continue
            params[name] = Parameter(name, None, low, high, bounds.group(3).strip(), text, "description")

        masked = self.lexer.mask(code)
        for match in re.finditer(r"\b(?:options|config|defaults|settings)\s*=\s*(?:Object\.assign\(\s*)?\{", masked):
            close = self.lexer.find_block_end(masked, match.end() - 1, masked=masked)
            if close == -1:
                continue
            body = code[match.end():close]
            for field_match in re.finditer(rf"([A-Za-z_$][\w$]*)\s*:\s*({NUMBER})\b", body):
                self._add_numeric(params, field_match.group(1), field_match.group(2), "config")

        for match in re.finditer(rf"\b(?:config|options)\.([A-Za-z_$][\w$]*)\s*\|\|\s*({NUMBER})\b", masked):
            self._add_numeric(params, match.group(1), match.group(2), "fallback")

        for match in re.finditer(rf"\b(?:const|let|var)\s+([A-Z][A-Z0-9_]+)\s*=\s*({NUMBER})\b", masked):
            self._add_numeric(params, match.group(1), match.group(2), "constant")

        return list(params.values())

    def _add_numeric(self, params: Dict[str, Parameter], name: str, raw: str, source: str):
        if name in params:
            return
        value = float(raw)
        low, high = infer_range(value)
        params[name] = Parameter(name, value, low, high, source=source)

    def variations_for(self, param: Parameter) -> List[Variation]:
        span = param.max - param.min
        return [
            Variation(f"{param.name}_soft", param.name,
                      round(param.min + span * 0.1, 4), round(param.max - span * 0.1, 4),
                      f"Gentle variation of {param.name}"),
            Variation(f"{param.name}_extreme", param.name, param.min, param.max,
                      f"Full-range variation of {param.name}"),
        ]

    # --- Science & performance ---

    def scientific_basis(self, text: str) -> List[Dict[str, Any]]:
        lowered = text.lower()
        basis = []
        for phenomenon, principle, words in PHENOMENA:
            evidence = [w for w in words if w in lowered]
            if evidence:
                basis.append({"phenomenon": phenomenon, "principle": principle, "evidence": evidence})
        return basis

    def performance_tier(self, code: str) -> str:
        masked = self.lexer.mask(code)
        loops = len(re.findall(r"\b(?:for|while)\s*\(", masked))
        nested = len(re.findall(r"\bfor\s*\([^)]*\)\s*\{[^}]*\bfor\s*\(", masked))
        heavy = sum(code.count(marker) for marker in HEAVY_MARKERS)
        optimized = sum(1 for marker in OPTIMIZATION_MARKERS if marker in code)

        score = len(code) / 2000 + loops * 0.5 + nested * 2 + heavy * 1.5 - optimized
        if score < 2:
            return "light"
        if score < 5:
            return "moderate"
        if score < 9:
            return "heavy"
        return "extreme"
