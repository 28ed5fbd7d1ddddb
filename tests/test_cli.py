"""Tests for the check / fix / rules commands."""

from __future__ import annotations

import json
import shutil
from pathlib import Path

import pytest
from click.testing import CliRunner

from canvaslint.cli import cli
from canvaslint.commands.check_cmd import run_check
from canvaslint.commands.fix_cmd import run_fix
from canvaslint.commands.rules_cmd import run_rules
from canvaslint.config import CONFIG_FILENAME
from canvaslint.errors import ConfigError, DocumentError
from canvaslint.models import EDGE, load_document
from canvaslint.registry import Registry
from canvaslint.rules import BUILTIN_RULES


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


@pytest.fixture
def canvas_file(tmp_path: Path, fixture_canvas_path: Path) -> Path:
    """A writable copy of the sample canvas in its own directory."""
    target = tmp_path / "board" / "canvas.json"
    target.parent.mkdir(parents=True)
    shutil.copy(fixture_canvas_path, target)
    return target


def test_run_check_json(canvas_file: Path, capsys) -> None:
    exit_code = run_check(canvas_file, output_json=True)

    assert exit_code == 1
    output = json.loads(capsys.readouterr().out)
    assert output["summary"]["errors"] == 2
    assert output["summary"]["warnings"] == 1
    assert output["summary"]["fixable"] == 2
    assert {d["ruleId"] for d in output["diagnostics"]} == {
        "structural/no-dangling-refs",
        "structural/valid-resource-refs",
        "visual/nodes-aligned",
    }
    first = output["diagnostics"][0]
    assert first["targets"] == [{"type": "relation", "id": "e2", "path": ["data", 0, "start"]}]
    assert first["fix"]["changes"] == [{"type": "delete", "target": {"type": "relation", "id": "e2"}}]


def test_run_check_table_goes_to_stderr(canvas_file: Path, capsys) -> None:
    run_check(canvas_file)
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "2 error(s)" in captured.err
    assert "1 warning(s)" in captured.err


def test_run_check_uses_nearby_config(canvas_file: Path, capsys) -> None:
    _write(
        canvas_file.parent / CONFIG_FILENAME,
        """
[rules]
"visual/nodes-aligned" = ["warn", { threshold = 2 }]
"nope/missing" = "error"
""",
    )
    exit_code = run_check(canvas_file, output_json=True)
    output = json.loads(capsys.readouterr().out)

    # n2 is 3px off, beyond the configured threshold
    assert output["diagnostics"] == []
    assert output["unknownRules"] == ["nope/missing"]
    assert exit_code == 0


def test_run_check_fail_on_warning(canvas_file: Path, tmp_path: Path, capsys) -> None:
    config = tmp_path / "warn-only.toml"
    _write(config, '[rules]\n"visual/nodes-aligned" = "warn"\n')

    assert run_check(canvas_file, config, fail_on="error", output_json=True) == 0
    assert run_check(canvas_file, config, fail_on="warning", output_json=True) == 1


def test_run_check_writes_overlay(canvas_file: Path, tmp_path: Path) -> None:
    overlay_path = tmp_path / "overlay.json"
    run_check(canvas_file, overlay_path=overlay_path, output_json=True)

    overlay = load_document(overlay_path.read_text(encoding="utf-8"))
    assert overlay.nodes
    assert all(n.id.startswith("canvaslint-") for n in overlay.nodes)


def test_run_check_rejects_bad_input(tmp_path: Path) -> None:
    broken = tmp_path / "broken.json"
    _write(broken, "{not json")
    with pytest.raises(DocumentError, match="broken.json"):
        run_check(broken)

    good = tmp_path / "good.json"
    _write(good, '{"ocif": "https://canvasprotocol.org/ocif/v0.6"}')
    bad_config = tmp_path / "bad.toml"
    _write(bad_config, '[rules]\n"visual/nodes-aligned" = "loud"\n')
    with pytest.raises(ConfigError):
        run_check(good, bad_config)


def test_run_fix_in_place(canvas_file: Path, capsys) -> None:
    exit_code = run_fix(canvas_file, output_json=True)

    assert exit_code == 0
    output = json.loads(capsys.readouterr().out)
    assert [d["ruleId"] for d in output["applied"]] == ["structural/no-dangling-refs", "visual/nodes-aligned"]
    assert [d["ruleId"] for d in output["remaining"]] == ["structural/valid-resource-refs"]
    assert output["output"] == str(canvas_file)

    fixed = load_document(canvas_file.read_text(encoding="utf-8"))
    assert [r.id for r in fixed.relations] == ["e1"]
    assert fixed.nodes[1].position == (100, 200)
    assert fixed.extra == {"x-editor": {"zoom": 1.5}}


def test_run_fix_dry_run_and_output(canvas_file: Path, tmp_path: Path, capsys) -> None:
    original = canvas_file.read_text(encoding="utf-8")

    run_fix(canvas_file, dry_run=True)
    assert canvas_file.read_text(encoding="utf-8") == original
    assert "Would apply" in capsys.readouterr().err

    out = tmp_path / "fixed.json"
    run_fix(canvas_file, output_path=out)
    assert canvas_file.read_text(encoding="utf-8") == original
    assert [r.id for r in load_document(out.read_text(encoding="utf-8")).relations] == ["e1"]


@pytest.mark.parametrize("indent", [None, 4])
def test_run_fix_keeps_source_indentation(tmp_path: Path, indent: int | None) -> None:
    raw = {
        "ocif": "https://canvasprotocol.org/ocif/v0.6",
        "nodes": [{"id": "a", "position": [0, 0]}],
        "relations": [{"id": "e1", "data": [{"type": EDGE, "start": "a", "end": "ghost"}]}],
    }
    expected = {"ocif": raw["ocif"], "nodes": raw["nodes"], "relations": []}
    separators = (",", ":") if indent is None else None
    canvas = tmp_path / "canvas.json"
    _write(canvas, json.dumps(raw, indent=indent, separators=separators) + "\n")

    assert run_fix(canvas, output_json=True) == 0
    assert canvas.read_text(encoding="utf-8") == json.dumps(expected, indent=indent, separators=separators) + "\n"


def test_run_rules_json(capsys) -> None:
    assert run_rules(output_json=True) == 0
    rules = json.loads(capsys.readouterr().out)
    assert [r["id"] for r in rules] == [r.id for r in BUILTIN_RULES]
    assert rules[0]["target"] == "relation"


def test_run_rules_with_empty_registry(capsys) -> None:
    assert run_rules(output_json=True, registry=Registry()) == 0
    assert json.loads(capsys.readouterr().out) == []


def test_cli_check_exit_codes(canvas_file: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["check", str(canvas_file), "--json"])
    assert result.exit_code == 1
    assert '"ruleId"' in result.output


def test_cli_global_config_option(canvas_file: Path, tmp_path: Path) -> None:
    config = tmp_path / "quiet.toml"
    _write(config, '[rules]\n"structural/unique-ids" = "error"\n')

    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(config), "check", str(canvas_file)])
    assert result.exit_code == 0


def test_cli_reports_library_errors(tmp_path: Path) -> None:
    broken = tmp_path / "broken.json"
    _write(broken, "[]")

    runner = CliRunner()
    result = runner.invoke(cli, ["check", str(broken)])
    assert result.exit_code == 1
    assert "document must be a JSON object" in result.output


def test_cli_fix_and_rules(canvas_file: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["fix", str(canvas_file)])
    assert result.exit_code == 0

    result = runner.invoke(cli, ["rules"])
    assert result.exit_code == 0


def test_cli_version() -> None:
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "canvaslint" in result.output
