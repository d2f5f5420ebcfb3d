import os
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

import json

import pytest
from py_mini_racer import MiniRacer
from fxcuro.catalog.registry import build_catalog
from fxcuro.core.config import PipelineConfig
from fxcuro.core.models import SourceUnit, Success, Fallback
from fxcuro.healing.pipeline import HealingPipeline
from fxcuro.validator.validator import EffectValidator

PARTICLES = (
    "const particles = [];\n"
    "for (let i = 0; i < 50; i++) {\n"
    "  particles.push({ x: Math.random() * 100, y: 0 });\n"
    "}\n"
)

MISSING_BRACES = (
    "function outer() {\n"
    "  function inner() {\n"
    "    if (ready) {\n"
    "      run();\n"
)

DESCRIBED = (
    'export const Spark = { id: "a-1", name: "Spark", description: `Small sparks` }\n'
    "let n = 1;\n"
)

WIDE_DECLARATION = (
    "const width = 300,\n"
    "  height = 150;\n"
    "function draw() {\n"
    "  ctx.fillRect(0, 0, width, height);\n"
)

CORPUS = [
    "var x = 1; function foo( ) { return x }",
    MISSING_BRACES,
    PARTICLES,
    DESCRIBED,
    "const gl = canvas.getContext('webgl');\nrequestAnimationFrame(draw);",
    "function render() {\n  for (var i = 0; i < items.length; i++) { ctx.fillRect(Math.sin(i), Math.cos(i), 2, 2); }\n}",
    "class Orbit {\n  update(dt) { this.a = (this.a || 0) + dt; }\n}\n",
    "import { a } from './a.js';\nexport default class Glow extends BaseEffect {}\n",
    "const s = 'never closed;\nlet y = 2;\n",
    "function tick() { return 1 }\nconst label = `score",
    "class Orb {\n  radius = 4;\n  animate() { return this.cfg?.speed ?? 1; }\n}\n",
    WIDE_DECLARATION,
    "",
]


@pytest.fixture(scope="module")
def pipeline():
    return HealingPipeline()


def test_empty_call_is_normalized(pipeline):
    """
    SCENARIO: Whitespace-only call parentheses collapse and nothing else moves.
    """
    result = pipeline.run("var x = 1; function foo( ) { return x }")
    assert isinstance(result, Success)
    assert "foo()" in result.code
    assert "foo( )" not in result.code
    assert "Normalized empty call parentheses" in result.change_log


def test_missing_closing_braces_are_healed(pipeline):
    result = pipeline.run(MISSING_BRACES)
    assert result.valid is True
    assert result.code.rstrip().endswith("}}}")


def test_particle_script_is_scaffolded(pipeline):
    """
    SCENARIO: Free-standing particle code ends up inside the particle scaffold.
    """
    result = pipeline.run(PARTICLES)
    assert result.valid is True
    assert "class ParticleSystemEffect" in result.code
    assert "ParticlePool" in result.code
    assert "module.exports = ParticleSystemEffect;" in result.code
    assert "Wrapped code in ParticleSystemEffect (particles scaffold)" in result.change_log
    # Utilities stay at top level, ahead of the class
    assert result.code.index("const ParticlePool") < result.code.index("class ParticleSystemEffect")


def test_unrecoverable_script_falls_back(pipeline):
    source = "const msg = 'hello;\nconsole.log(msg);\n"
    result = pipeline.run(source)
    assert isinstance(result, Fallback)
    assert result.valid is False
    assert result.code == source
    assert result.error
    assert result.change_log == []


def test_unterminated_template_falls_back(pipeline):
    source = "function tick() { return 1 }\nconst label = `score"
    result = pipeline.run(source)
    assert isinstance(result, Fallback)
    assert result.code == source


def test_modern_syntax_is_kept(pipeline):
    source = "class Orb {\n  radius = 4;\n  animate() { return this.cfg?.speed ?? 1; }\n}\n"
    result = pipeline.run(source)
    assert isinstance(result, Success), result.error
    assert "radius = 4;" in result.code
    assert "this.cfg?.speed ?? 1" in result.code


def test_multiline_declaration_with_missing_brace(pipeline):
    """
    SCENARIO: A continuation line is never mistaken for an implicit global.
    """
    result = pipeline.run(WIDE_DECLARATION)
    assert isinstance(result, Success), result.error
    assert "let height" not in result.code
    assert "Appended 0 ')' and 1 '}'" in result.change_log


def test_fallback_error_describes_original(pipeline):
    source = "const msg = 'hello;\nconsole.log(msg);\n"
    result = pipeline.run(source)
    assert result.error == EffectValidator().validate(source)[1]


def test_fallback_error_blames_healing_when_original_parses(monkeypatch):
    pipeline = HealingPipeline()
    monkeypatch.setattr(pipeline.structurer, "format", lambda code: (code + "\n}", []))
    source = "let a = 1;"
    result = pipeline.run(source)
    assert isinstance(result, Fallback)
    assert result.code == source
    assert result.error.startswith("Healed output rejected: SyntaxError")


def test_descriptor_is_lifted_into_metadata(pipeline):
    result = pipeline.run(DESCRIBED)
    assert result.valid is True
    assert result.metadata.effect_id == "a-1"
    assert result.metadata.effect_name == "Spark"
    assert "export const Spark" not in result.code
    assert 'id: "a-1"' not in result.code


@pytest.mark.parametrize("source", CORPUS)
def test_valid_results_really_parse(pipeline, source):
    """
    INVARIANT TEST: A Success always compiles in a fresh engine, on its own terms.
    """
    result = pipeline.run(source)
    if result.valid:
        # Raises on a SyntaxError; no validator code involved
        assert MiniRacer().eval("new Function(%s); 'compiled'" % json.dumps(result.code)) == "compiled"
    else:
        assert result.code == source


@pytest.mark.parametrize("source", CORPUS)
def test_second_run_is_stable(pipeline, source):
    """
    IDEMPOTENCE TEST: Feeding a result back in injects nothing new.
    """
    first = pipeline.run(source)
    if not first.valid:
        return
    second = pipeline.run(first.code)
    assert second.valid is True
    assert not [entry for entry in second.change_log if entry.startswith("Injected")]
    assert second.code.strip() == first.code.strip()


def test_runs_are_deterministic(pipeline):
    first = pipeline.run(SourceUnit(PARTICLES, "sparks.js"))
    second = pipeline.run(SourceUnit(PARTICLES, "sparks.js"))
    assert first.code == second.code
    assert first.change_log == second.change_log


def test_fallback_is_byte_identical(pipeline):
    source = "\ufeff  const a = 'x;\r\n\tlet b = {\r\n"
    result = pipeline.run(source)
    assert result.valid is False
    assert result.code == source


def test_oversize_input_falls_back():
    pipeline = HealingPipeline(config=PipelineConfig(max_source_bytes=16))
    source = "const value = 1234567890;"
    result = pipeline.run(source)
    assert result.valid is False
    assert result.code == source
    assert "exceeds" in result.error


def test_catalog_is_substitutable():
    catalog = build_catalog([
        {"name": "Sparkle", "detect": "sparkle", "source": "const Sparkle = { on: true };\n"},
    ])
    pipeline = HealingPipeline(catalog=catalog)
    result = pipeline.run("function go() { sparkle(Math.random()); }")
    assert result.valid is True
    assert "Injected Sparkle" in result.change_log
    assert "MathUtils" not in result.code


def test_internal_failure_becomes_fallback(monkeypatch):
    pipeline = HealingPipeline()

    def explode(code):
        raise RuntimeError("boom")

    monkeypatch.setattr(pipeline.normalizer, "normalize", explode)
    result = pipeline.run("let a = 1;")
    assert result.valid is False
    assert result.code == "let a = 1;"
    assert "boom" in result.error


def test_miner_failure_is_advisory(monkeypatch):
    pipeline = HealingPipeline()

    def explode(*args, **kwargs):
        raise ValueError("miner down")

    monkeypatch.setattr(pipeline.miner, "mine", explode)
    result = pipeline.run(PARTICLES)
    assert result.valid is True
    assert result.report.category == "Unclassified"


def test_to_dict_shape(pipeline):
    success = pipeline.run(DESCRIBED).to_dict()
    assert set(success) == {"code", "changeLog", "metadata", "valid", "error", "report"}
    assert success["valid"] is True
    assert success["metadata"]["id"] == "a-1"

    fallback = pipeline.run("const s = 'x;\n").to_dict()
    assert fallback["valid"] is False
    assert fallback["report"] is None
    assert fallback["changeLog"] == []
