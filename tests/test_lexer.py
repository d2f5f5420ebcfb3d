import os
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

import pytest
from fxcuro.healing.lexer import JsLexer


@pytest.fixture
def lexer():
    return JsLexer()


def kinds(lexer, text):
    return [(s.kind, s.text(text)) for s in lexer.scan(text) if s.kind != "code"]


def test_spans_cover_whole_text(lexer):
    """
    COVERAGE TEST: Regions are contiguous and reproduce the input exactly.
    """
    text = "const a = 'x'; // note\nlet b = `t${a}`; /* c */ const r = /ab+c/g;"
    spans = lexer.scan(text)
    assert "".join(s.text(text) for s in spans) == text
    for left, right in zip(spans, spans[1:]):
        assert left.end == right.start


def test_braces_inside_strings_are_not_code(lexer):
    text = 'const s = "{{{"; const t = \'}\'; function f() {}'
    masked = lexer.mask(text)
    assert masked.count("{") == 1
    assert masked.count("}") == 1
    assert len(masked) == len(text)


def test_comment_markers_inside_strings(lexer):
    text = 'const url = "http://example.com"; // real comment'
    comments = lexer.comments(text)
    assert len(comments) == 1
    assert comments[0].text(text) == "// real comment"


@pytest.mark.parametrize("text,expected", [
    ("const r = /a\\/b/g;", [("regex", "/a\\/b/g")]),
    ("x = a / b / c;", []),
    ("return /[/]+/.test(s);", [("regex", "/[/]+/")]),
    ("const half = (w) / 2;", []),
    ("if (ok) /x/.exec(s);", []),
    ("const r = o.in / 2 + o.of / 3;", []),
    ("const n = cfg?.new / 4;", []),
])
def test_regex_versus_division(lexer, text, expected):
    """
    AMBIGUITY TEST: '/' is a regex only where an operand is expected.
    """
    assert kinds(lexer, text) == expected


def test_template_with_nested_expression(lexer):
    text = "const s = `a ${ {k: '}'}.k } b`; const n = 1;"
    found = kinds(lexer, text)
    assert found[0][0] == "template"
    assert found[0][1] == "`a ${ {k: '}'}.k } b`"


def test_unterminated_string_stops_at_newline(lexer):
    text = "const s = 'oops;\nconst y = 2;"
    spans = lexer.scan(text)
    string = next(s for s in spans if s.kind == "string")
    assert string.text(text) == "'oops;"
    assert string.closed is False
    assert "const y = 2;" in lexer.mask(text)


def test_unterminated_block_comment_runs_to_end(lexer):
    text = "a = 1; /* never closed\n b = 2;"
    spans = lexer.scan(text)
    assert spans[-1].kind == "block_comment"
    assert spans[-1].end == len(text)
    assert spans[-1].closed is False


@pytest.mark.parametrize("text,closed", [
    ("const s = `done ${a} here`;", True),
    ("const label = `score", False),
    ("const label = `score ${points", False),
    ("const label = `outer ${ `inner` ", False),
    ("const s = 'a\\'\nb';", False),
])
def test_literal_termination_is_recorded(lexer, text, closed):
    """
    TERMINATION TEST: Literals running off the end are flagged, never passed off as closed.
    """
    literal = next(s for s in lexer.scan(text) if s.kind in ("string", "template"))
    assert literal.closed is closed
    assert (lexer.unterminated(text) is None) is closed


def test_mask_preserves_newlines(lexer):
    text = "/* one\ntwo */\nx"
    masked = lexer.mask(text)
    assert masked.count("\n") == text.count("\n")
    assert masked.endswith("x")


def test_find_block_end(lexer):
    text = "function f() { if (a) { return '}'; } }"
    open_index = text.index("{")
    assert lexer.find_block_end(text, open_index) == len(text) - 1
    assert lexer.find_block_end("{ {", 0) == -1


def test_sub_code_skips_strings_and_comments(lexer):
    text = "Math.sin(a); const s = 'Math.sin(b)'; // Math.sin(c)"
    updated = lexer.sub_code(r"Math\.sin", "TrigCache.sin", text)
    assert updated.startswith("TrigCache.sin(a)")
    assert "'Math.sin(b)'" in updated
    assert "// Math.sin(c)" in updated


def test_collapse_blank_lines_leaves_templates(lexer):
    text = "a = 1;\n\n\n\nb = `x\n\n\n\ny`;"
    collapsed = lexer.collapse_blank_lines(text)
    assert collapsed.startswith("a = 1;\n\nb")
    assert "`x\n\n\n\ny`" in collapsed
