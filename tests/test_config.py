from __future__ import annotations

from pathlib import Path

import pytest

from canvaslint.config import (
    CONFIG_FILENAME,
    LintConfig,
    RuleSetting,
    find_config,
    load_config,
    parse_rule_config,
    recommended_config,
)
from canvaslint.errors import ConfigError
from canvaslint.rules import BUILTIN_RULES


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


@pytest.mark.parametrize(
    "value,expected",
    [
        ("off", RuleSetting(enabled=False)),
        ("warn", RuleSetting(enabled=True, severity="warning")),
        ("error", RuleSetting(enabled=True, severity="error")),
        (["warn", {"threshold": 8}], RuleSetting(enabled=True, severity="warning", options={"threshold": 8})),
        (["error"], RuleSetting(enabled=True, severity="error")),
        (["off", {"threshold": 1}], RuleSetting(enabled=False, options={"threshold": 1})),
    ],
)
def test_parse_rule_config(value, expected) -> None:
    assert parse_rule_config(value) == expected


@pytest.mark.parametrize("value", ["loud", 2, None, [], ["warn", 5], ["warn", {}, {}], ["info"]])
def test_parse_rule_config_rejects(value) -> None:
    with pytest.raises(ConfigError):
        parse_rule_config(value)


def test_from_dict_keeps_rule_order_and_merges_settings() -> None:
    config = LintConfig.from_dict(
        {
            "rules": {"b/second": ["warn", {"padding": 2}], "a/first": "error"},
            "settings": {"padding": 10, "threshold": 3},
        }
    )
    assert list(config.rules) == ["b/second", "a/first"]
    assert config.merged_options(config.rules["b/second"]) == {"padding": 2, "threshold": 3}
    assert config.merged_options(config.rules["a/first"]) == {"padding": 10, "threshold": 3}


def test_from_dict_names_the_bad_rule() -> None:
    with pytest.raises(ConfigError, match="visual/nodes-aligned"):
        LintConfig.from_dict({"rules": {"visual/nodes-aligned": "sometimes"}})


def test_load_config_from_toml(tmp_path: Path) -> None:
    path = tmp_path / CONFIG_FILENAME
    _write(
        path,
        """
[rules]
"structural/no-dangling-refs" = "error"
"visual/nodes-aligned" = ["warn", { threshold = 8 }]
"visual/no-overlapping-nodes" = "off"

[settings]
padding = 12
""",
    )
    config = load_config(path)
    assert config.rules["visual/nodes-aligned"] == RuleSetting(True, "warning", {"threshold": 8})
    assert config.rules["visual/no-overlapping-nodes"].enabled is False
    assert config.settings == {"padding": 12}


def test_load_config_reports_toml_errors(tmp_path: Path) -> None:
    path = tmp_path / CONFIG_FILENAME
    _write(path, "[rules\n")
    with pytest.raises(ConfigError):
        load_config(path)


def test_find_config_walks_up(tmp_path: Path) -> None:
    _write(tmp_path / CONFIG_FILENAME, "[rules]\n")
    document = tmp_path / "boards" / "q3" / "plan.json"
    _write(document, "{}")

    assert find_config(document) == (tmp_path / CONFIG_FILENAME).resolve()
    assert find_config(tmp_path / "boards") == (tmp_path / CONFIG_FILENAME).resolve()


def test_recommended_config_enables_every_builtin_rule() -> None:
    config = recommended_config()
    assert list(config.rules) == [r.id for r in BUILTIN_RULES]
    assert all(s.enabled for s in config.rules.values())
    assert config.rules["structural/unique-ids"].severity == "error"
    assert config.rules["visual/nodes-aligned"].severity == "warning"
