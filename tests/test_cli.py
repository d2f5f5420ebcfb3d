import os
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

import pytest
from fxcuro.cli import main as cli_main
from fxcuro.cli.main import FxCuroCLI

PARTICLES = (
    "const config = { count: 40, gravity: 0.2 };\n"
    "const particles = [];\n"
    "for (let i = 0; i < config.count; i++) {\n"
    "  particles.push({ x: i, vy: 0 });\n"
    "}\n"
)


@pytest.fixture
def project(tmp_path):
    (tmp_path / "sparks.js").write_text(PARTICLES, encoding="utf-8")
    (tmp_path / "wave.js").write_text("function wave(t) {\n  return Math.sin(t);\n}\n", encoding="utf-8")
    return tmp_path


def test_scan_is_read_only(project):
    code = FxCuroCLI().run(["scan", str(project)])
    assert code == 0
    assert not list(project.glob("*.fx.js"))


def test_fix_all_writes_artifacts(project):
    code = FxCuroCLI().run(["fix", str(project), "--yes-all"])
    assert code == 0
    assert (project / "sparks.fx.js").exists()
    assert (project / "wave.fx.js").exists()


def test_fix_single_file(project):
    code = FxCuroCLI().run(["fix", str(project / "wave.js"), "-y", "--out", str(project / "dist")])
    assert code == 0
    assert (project / "dist" / "wave.fx.js").exists()


def test_batch_fix_requires_confirm(project, monkeypatch):
    """
    SAFETY TEST: Anything other than CONFIRM cancels a batch write.
    """
    monkeypatch.setattr(cli_main.console, "input", lambda prompt="": "yes")
    code = FxCuroCLI().run(["fix", str(project)])
    assert code == 1
    assert not list(project.glob("*.fx.js"))


def test_fallback_sets_exit_code(project):
    (project / "broken.js").write_text("const s = 'open;\n", encoding="utf-8")
    assert FxCuroCLI().run(["scan", str(project)]) == 2


def test_missing_path(tmp_path):
    assert FxCuroCLI().run(["scan", str(tmp_path / "nowhere")]) == 1


def test_report_markdown(project, capsys):
    code = FxCuroCLI().run(["report", str(project / "sparks.js"), "--markdown"])
    assert code == 0
    out = capsys.readouterr().out
    assert "# sparks" in out
    assert "## Parameters" in out


def test_bad_config_is_reported(project):
    config = project / "fxcuro.yaml"
    config.write_text("nonsense: true\n", encoding="utf-8")
    assert FxCuroCLI().run(["--config", str(config), "scan", str(project)]) == 1


def test_no_arguments_prints_help(capsys):
    assert FxCuroCLI().run([]) == 0
    assert "fxcuro" in capsys.readouterr().out


def test_enhance_writes_enhanced_artifact(project):
    code = FxCuroCLI().run(["enhance", str(project / "wave.js"), "--level", "2", "--write"])
    assert code == 0
    written = (project / "wave.fx.js").read_text(encoding="utf-8")
    assert written.startswith("// FxCuro Professional enhancement (level 2, offline)")


def test_enhance_prompt(project, capsys):
    code = FxCuroCLI().run(["enhance", str(project / "sparks.js"), "--prompt", "--level", "3"])
    assert code == 0
    out = capsys.readouterr().out
    assert "Premium" in out
    assert "CODE TO ENHANCE:" in out
    assert not list(project.glob("*.fx.js"))


def test_enhance_refuses_fallback(project):
    (project / "broken.js").write_text("const s = 'open;\n", encoding="utf-8")
    assert FxCuroCLI().run(["enhance", str(project / "broken.js"), "--write"]) == 2
    assert not (project / "broken.fx.js").exists()
