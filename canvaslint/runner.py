"""Rule runner: evaluate configured rules against a document."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping

from .config import LintConfig
from .diagnostics import ANNOTATION_TYPES, Diagnostic
from .index import GraphIndex
from .models import Document
from .overlay import create_overlay
from .registry import Registry, default_registry
from .rules.base import DocumentRule, NodeRule, RelationRule, ResourceRule, Rule

logger = logging.getLogger(__name__)


@dataclass
class CheckResult:
    """Diagnostics from one check run and the overlay drawn from them."""

    diagnostics: list[Diagnostic]
    overlay: Document
    unknown_rules: list[str] = field(default_factory=list)

    def by_severity(self, severity: str) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == severity]


def check(
    document: Document,
    config: LintConfig | Mapping[str, Any],
    *,
    registry: Registry | None = None,
) -> CheckResult:
    """
    Run every enabled rule in `config` against the document.

    Rules run in configuration order; within a rule, elements are visited in
    collection order. A rule that raises on one element produces nothing for
    that element and the run carries on. Unknown rule ids are logged and
    skipped.

    Args:
        document: Document to check (never modified)
        config: LintConfig, or a mapping with `rules` and optional `settings`
        registry: Rules to draw from (defaults to the built-in rules)
    """
    config = LintConfig.coerce(config)
    if registry is None:
        registry = default_registry()

    diagnostics: list[Diagnostic] = []
    unknown: list[str] = []

    for rule_id, setting in config.rules.items():
        if not setting.enabled:
            continue

        rule = registry.lookup(rule_id)
        if rule is None:
            logger.warning(f"Unknown rule: {rule_id}")
            unknown.append(rule_id)
            continue

        ctx = GraphIndex(document, config.merged_options(setting))
        for diagnostic in run_rule(rule, document, ctx):
            diagnostics.append(replace(diagnostic, rule_id=rule_id, severity=setting.severity))

    return CheckResult(diagnostics=diagnostics, overlay=create_overlay(diagnostics), unknown_rules=unknown)


def run_rule(rule: Rule, document: Document, ctx: GraphIndex) -> list[Diagnostic]:
    """Dispatch a rule over the collection it targets."""
    if isinstance(rule, NodeRule):
        return _run_over(rule, "node", document.nodes, ctx)
    if isinstance(rule, RelationRule):
        return _run_over(rule, "relation", document.relations, ctx)
    if isinstance(rule, ResourceRule):
        return _run_over(rule, "resource", document.resources, ctx)
    if isinstance(rule, DocumentRule):
        try:
            return _validated(rule.check(document, ctx))
        except Exception:
            logger.exception(f"Error in rule {rule.id} on canvas")
            return []
    raise TypeError(f"unsupported rule type: {type(rule).__name__}")


def _run_over(rule: NodeRule | RelationRule | ResourceRule, kind: str, elements: Iterable[Any], ctx: GraphIndex) -> list[Diagnostic]:
    diagnostics: list[Diagnostic] = []
    for element in elements:
        try:
            if rule.filter is not None and not rule.filter(element, ctx):
                continue
            results = _validated(rule.check(element, ctx))
        except Exception:
            logger.exception(f"Error in rule {rule.id} on {kind} {element.id}")
            continue
        diagnostics.extend(results)
    return diagnostics


def _validated(results: Iterable[Any]) -> list[Diagnostic]:
    """Collect a rule's output, rejecting anything the overlay cannot draw."""
    collected = list(results)
    for item in collected:
        if not isinstance(item, Diagnostic):
            raise TypeError(f"rule returned {type(item).__name__}, expected Diagnostic")
        for annotation in item.visual:
            if not isinstance(annotation, ANNOTATION_TYPES):
                raise TypeError(f"unsupported visual annotation: {annotation!r}")
    return collected
