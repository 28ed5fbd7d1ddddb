"""
Rule registry for rule id → rule lookup.

A registry is an ordinary value owned by whoever runs checks. It is meant
to be filled once at startup and only read afterwards.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from .rules.base import Rule


class Registry:
    """Mapping of rule id to rule definition."""

    def __init__(self, rules: Iterable["Rule"] = ()):
        self._rules: dict[str, "Rule"] = {}
        for rule in rules:
            self.register(rule)

    def register(self, rule: "Rule") -> None:
        """
        Register a rule by its id, replacing any rule already using that id.

        Args:
            rule: Rule definition to register
        """
        from .rules.base import RULE_TYPES

        if not isinstance(rule, RULE_TYPES):
            raise TypeError(f"not a rule: {rule!r}")
        self._rules[rule.id] = rule

    def lookup(self, rule_id: str) -> "Rule | None":
        """
        Look up a rule by id.

        Returns:
            Rule definition, or None if not registered
        """
        return self._rules.get(rule_id)

    def list_all(self) -> list["Rule"]:
        """All registered rules, in registration order."""
        return list(self._rules.values())

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._rules

    def __len__(self) -> int:
        return len(self._rules)


def default_registry() -> Registry:
    """A new registry holding the built-in rules."""
    from .rules import BUILTIN_RULES

    return Registry(BUILTIN_RULES)
