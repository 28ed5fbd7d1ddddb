"""Lint configuration: which rules run, at what severity, with what options."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from .errors import ConfigError

CONFIG_FILENAME = "canvaslint.toml"

_LEVELS = {"warn": "warning", "error": "error"}


@dataclass(frozen=True)
class RuleSetting:
    """A parsed rule configuration entry."""

    enabled: bool
    severity: str = "error"
    options: Mapping[str, Any] = field(default_factory=dict)


def parse_rule_config(value: Any) -> RuleSetting:
    """Parse `"off" | "warn" | "error" | [level, options]`."""
    if value == "off":
        return RuleSetting(enabled=False)
    if isinstance(value, str) and value in _LEVELS:
        return RuleSetting(enabled=True, severity=_LEVELS[value])

    if isinstance(value, (list, tuple)) and 1 <= len(value) <= 2:
        level = value[0]
        options = value[1] if len(value) == 2 else {}
        if not isinstance(options, Mapping):
            raise ConfigError(f"rule options must be a table, got {options!r}")
        if level == "off":
            return RuleSetting(enabled=False, options=dict(options))
        if isinstance(level, str) and level in _LEVELS:
            return RuleSetting(enabled=True, severity=_LEVELS[level], options=dict(options))

    raise ConfigError(f"invalid rule configuration {value!r}; expected off, warn, error or [level, options]")


@dataclass(frozen=True)
class LintConfig:
    """Rule settings keyed by rule id, plus global settings shared by every rule.

    Rules run in the order of `rules`.
    """

    rules: Mapping[str, RuleSetting] = field(default_factory=dict)
    settings: Mapping[str, Any] = field(default_factory=dict)

    def merged_options(self, setting: RuleSetting) -> dict[str, Any]:
        """Global settings overlaid with the rule's own options."""
        merged = dict(self.settings)
        merged.update(setting.options)
        return merged

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> LintConfig:
        rules_raw = data.get("rules", {})
        if not isinstance(rules_raw, Mapping):
            raise ConfigError("'rules' must be a table of rule id -> setting")
        settings = data.get("settings", {})
        if not isinstance(settings, Mapping):
            raise ConfigError("'settings' must be a table")

        rules: dict[str, RuleSetting] = {}
        for rule_id, value in rules_raw.items():
            try:
                rules[str(rule_id)] = parse_rule_config(value)
            except ConfigError as e:
                raise ConfigError(f"rule {rule_id!r}: {e}") from e
        return cls(rules=rules, settings=dict(settings))

    @classmethod
    def coerce(cls, config: LintConfig | Mapping[str, Any]) -> LintConfig:
        if isinstance(config, LintConfig):
            return config
        return cls.from_dict(config)


def load_config(path: Path) -> LintConfig:
    """
    Load a lint configuration from TOML.

        [rules]
        "structural/no-dangling-refs" = "error"
        "visual/nodes-aligned" = ["warn", { threshold = 8 }]

        [settings]
        padding = 12
    """
    import tomllib

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"{path}: {e}") from e
    return LintConfig.from_dict(data)


def find_config(start: Path) -> Path | None:
    """Find a canvaslint.toml by walking up from `start`."""
    cur = start.resolve()
    if cur.is_file():
        cur = cur.parent
    for p in (cur, *cur.parents):
        candidate = p / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def recommended_config() -> LintConfig:
    """Every built-in rule at its default severity."""
    from .rules import BUILTIN_RULES

    rules = {
        rule.id: RuleSetting(enabled=True, severity="warning" if rule.meta.severity == "warning" else "error")
        for rule in BUILTIN_RULES
    }
    return LintConfig(rules=rules)
