import os
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

import pytest
from fxcuro.enhance.offline import (
    OfflineEnhancer, build_enhancement_prompt, level_info, offline_enhancement,
)
from fxcuro.validator.validator import EffectValidator


def test_header_and_touch_ups():
    code = "var speed = 2;\nfunction tick() { return speed; }\n"
    result = offline_enhancement(code, 1)

    assert result.code.startswith("// FxCuro Standard enhancement (level 1, offline)\n// Focus: ")
    assert "let speed = 2;" in result.code
    assert "const tick = function tick() { return speed; };" in result.code
    assert result.applied == ["var -> let", "function declarations -> const function expressions"]
    assert result.stats["level"] == 1
    assert EffectValidator().validate(result.code)[0] is True


def test_loop_counters_keep_var():
    """
    HOISTING TEST: A loop counter read after the loop stays function-scoped.
    """
    code = "for (var i = 0; i < 3; i++) {}\nconsole.log(i);\n"
    result = OfflineEnhancer().enhance(code, 2)
    assert result.code.endswith(code)
    assert result.applied == []


def test_function_used_before_declaration_is_kept():
    code = "tick();\nfunction tick() { return 1; }\n"
    result = OfflineEnhancer().enhance(code, 3)
    assert "const tick" not in result.code
    assert result.code.endswith(code)


def test_nested_declarations_untouched():
    code = "function outer() {\n  var inner = 1;\n  return inner;\n}\nouter();\n"
    result = OfflineEnhancer().enhance(code)
    assert "var inner = 1;" in result.code


@pytest.mark.parametrize("level,name", [(1, "Standard"), (2, "Professional"), (3, "Premium")])
def test_levels(level, name):
    assert level_info(level)["name"] == name
    prompt = build_enhancement_prompt("let a = 1;", level)
    assert name in prompt
    assert prompt.endswith("CODE TO ENHANCE:\nlet a = 1;")


def test_invalid_level():
    with pytest.raises(ValueError):
        offline_enhancement("let a = 1;", 7)
