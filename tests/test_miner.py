import os
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

import pytest
from fxcuro.analysis.miner import DescriptionMiner, Parameter, infer_range
from fxcuro.core.models import EffectMetadata

SOURCE = (
    "const config = { count: 120, gravity: 0.4, drift: -2 };\n"
    "const size = config.size || 3;\n"
    "const MAX_SPEED = 8;\n"
)


@pytest.fixture
def miner():
    return DescriptionMiner()


def by_name(params):
    return {p.name: p for p in params}


def test_parameters_from_every_source(miner):
    """
    PARAMETER TEST: Description markup, config literals, fallbacks and constants.
    """
    params = miner.extract_parameters(SOURCE, "**speed** (1-10 px/s) - Particle speed")
    assert [p.name for p in params] == ["speed", "count", "gravity", "drift", "size", "MAX_SPEED"]

    found = by_name(params)
    assert (found["speed"].min, found["speed"].max, found["speed"].unit) == (1.0, 10.0, "px/s")
    assert found["speed"].source == "description"
    assert found["speed"].default is None
    assert (found["count"].min, found["count"].max) == (0.0, 240.0)
    assert (found["gravity"].min, found["gravity"].max) == (0.0, 1.0)
    assert (found["drift"].min, found["drift"].max) == (-4.0, 0.0)
    assert found["size"].source == "fallback"
    assert found["MAX_SPEED"].source == "constant"


def test_parameters_ignore_strings_and_comments(miner):
    code = "const s = 'config = { hidden: 5 }';\n// const LIMIT = 9;\n"
    assert miner.extract_parameters(code) == []


@pytest.mark.parametrize("value,expected", [
    (0, (0.0, 1.0)),
    (0.5, (0.0, 1.0)),
    (1, (0.0, 2.0)),
    (5, (0.0, 10.0)),
    (-3, (-6.0, 0.0)),
])
def test_infer_range(value, expected):
    assert infer_range(value) == expected


def test_variations_soft_and_extreme(miner):
    soft, extreme = miner.variations_for(Parameter("count", 120.0, 0.0, 240.0))
    assert soft.name == "count_soft"
    assert (soft.min, soft.max) == (24.0, 216.0)
    assert extreme.name == "count_extreme"
    assert (extreme.min, extreme.max) == (0.0, 240.0)


def test_scientific_basis(miner):
    basis = miner.scientific_basis("p.vy += gravity; p.vx *= friction; Math.sin(t)")
    phenomena = [item["phenomenon"] for item in basis]
    assert "Gravitation" in phenomena
    assert "Damping" in phenomena
    assert "Periodic motion" in phenomena
    assert "Fluid dynamics" not in phenomena


def test_category_from_code(miner):
    report = miner.mine("const particles = []; particles.push(1);", "sparks.js")
    assert report.category_key == "particles"
    assert report.category == "Particles & Simulation"
    assert "particle_system" in report.patterns
    assert 0.5 <= report.confidence <= 1.0


def test_descriptor_category_wins(miner):
    """
    OVERRIDE TEST: A category declared in the descriptor is trusted over inference.
    """
    metadata = EffectMetadata("Fire", "fire-01", "Flammes", "Campfire", category="particules")
    report = miner.mine("button.addEventListener('click', go);", "fire.js", metadata)
    assert report.category == "particules"
    assert report.category_key == "particles"
    assert report.confidence == 1.0
    assert report.name == "Flammes"


def test_generated_code_is_ignored(miner):
    code = "// <fxcuro:PointerManager>\nconst PointerManager = { hover: 1 };\n// </fxcuro:PointerManager>\nlet n = 1;"
    report = miner.mine(code, "plain.js")
    assert "interaction" not in report.patterns


def test_performance_tiers(miner):
    assert miner.performance_tier("let a = 1;") == "light"
    heavy = ("for (let y = 0; y < h; y++) { for (let x = 0; x < w; x++) { "
             "ctx.getImageData(x, y, 1, 1); ctx.putImageData(d, x, y); } }")
    assert miner.performance_tier(heavy) == "heavy"


def test_markdown_report(miner):
    report = miner.mine(SOURCE + "p.vy += gravity;", "snow.js")
    markdown = report.to_markdown()
    assert markdown.startswith("# snow")
    assert "## Parameters" in markdown
    assert "| count | 120 | 0 - 240 | - | config |" in markdown
    assert "## Variations" in markdown
    assert "**count_soft**" in markdown
    assert "## Scientific basis" in markdown


def test_empty_report_serializes(miner):
    data = miner.empty_report().to_dict()
    assert data["category"] == "Unclassified"
    assert data["parameters"] == []
