import os
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

import pytest
from fxcuro.validator.validator import EffectValidator


@pytest.fixture
def validator():
    return EffectValidator()


@pytest.mark.parametrize("code", [
    "var x = 1; function foo() { return x }",
    "class A { constructor(config = {}) { this.c = config; } animate(dt = 16) {} }",
    "const f = (a, b) => a + b; let s = `sum ${f(1, 2)}`;",
    "return 42;",
    "const r = /[a-z]+/gi; r.test('abc');",
    "const tag = String.raw`x\\n`;",
])
def test_accepts_valid_scripts(validator, code):
    """
    GATE TEST: Well-formed scripts pass, including top-level return.
    """
    valid, error = validator.validate(code)
    assert valid is True, error
    assert error == ""


@pytest.mark.parametrize("code", [
    "function bad( {",
    "const s = 'unterminated;\nconst y = 2;",
    "if (x) { }}",
    "import x from 'y';",
])
def test_rejects_broken_scripts(validator, code):
    valid, error = validator.validate(code)
    assert valid is False
    assert error


@pytest.mark.parametrize("code", [
    "const c = a?.b;",
    "const d = value ?? 10;",
    "class Orb { radius = 4; #phase = 0; animate() { return this.#phase; } }",
    "try { run(); } catch { reset(); }",
    "const merged = { ...base, speed: 2 ** 3 };",
])
def test_accepts_modern_syntax(validator, code):
    valid, error = validator.validate(code)
    assert valid is True, error


@pytest.mark.parametrize("code", [
    "function tick() { return 1 }\nconst label = `score",
    "const label = `score ${points`;",
    "const a = `line1\nline2 ${ oops( }`;\nconst b = 1;",
])
def test_template_literals_are_checked_as_written(validator, code):
    """
    GATE TEST: Broken template literals are rejected, not papered over.
    """
    valid, error = validator.validate(code)
    assert valid is False
    assert "SyntaxError" in error


def test_source_cannot_escape_the_function_body(validator):
    valid, _ = validator.validate("}); globalThis.leaked = 1; (function () {")
    assert valid is False
    assert validator._context().eval("typeof globalThis.leaked") == "undefined"


def test_oversize_input_rejected():
    validator = EffectValidator(max_source_bytes=10)
    valid, error = validator.validate("const abcdef = 123456;")
    assert valid is False
    assert "exceeds" in error


def test_error_carries_engine_message(validator):
    valid, error = validator.validate("const a = 1;\nconst b = ;\n")
    assert valid is False
    assert error.startswith("SyntaxError")
    assert "Unexpected token" in error
