"""Rule contract.

A rule targets exactly one kind of thing: every node, every relation, every
resource, or the document as a whole. The four rule classes form a closed
set and the runner dispatches over all of them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, ClassVar, Union

from ..diagnostics import Category, Diagnostic, Severity
from ..index import GraphIndex
from ..models import Document, Node, Relation, Resource


@dataclass(frozen=True)
class RuleMeta:
    description: str
    category: Category
    severity: Severity
    fixable: bool = False
    docs: str | None = None


@dataclass(frozen=True)
class NodeRule:
    target: ClassVar[str] = "node"

    id: str
    meta: RuleMeta
    check: Callable[[Node, GraphIndex], list[Diagnostic]]
    filter: Callable[[Node, GraphIndex], bool] | None = None


@dataclass(frozen=True)
class RelationRule:
    target: ClassVar[str] = "relation"

    id: str
    meta: RuleMeta
    check: Callable[[Relation, GraphIndex], list[Diagnostic]]
    filter: Callable[[Relation, GraphIndex], bool] | None = None


@dataclass(frozen=True)
class ResourceRule:
    target: ClassVar[str] = "resource"

    id: str
    meta: RuleMeta
    check: Callable[[Resource, GraphIndex], list[Diagnostic]]
    filter: Callable[[Resource, GraphIndex], bool] | None = None


@dataclass(frozen=True)
class DocumentRule:
    target: ClassVar[str] = "canvas"

    id: str
    meta: RuleMeta
    check: Callable[[Document, GraphIndex], list[Diagnostic]]


Rule = Union[NodeRule, RelationRule, ResourceRule, DocumentRule]

RULE_TYPES: tuple[type, ...] = (NodeRule, RelationRule, ResourceRule, DocumentRule)


def _element_rule(rule_cls):
    def factory(
        rule_id: str,
        *,
        description: str,
        category: Category,
        severity: Severity,
        fixable: bool = False,
        docs: str | None = None,
        filter=None,
    ):
        meta = RuleMeta(description=description, category=category, severity=severity, fixable=fixable, docs=docs)

        def decorator(check) -> Rule:
            return rule_cls(id=rule_id, meta=meta, check=check, filter=filter)

        return decorator

    factory.__doc__ = f"Build a {rule_cls.__name__} from a check function."
    return factory


node_rule = _element_rule(NodeRule)
relation_rule = _element_rule(RelationRule)
resource_rule = _element_rule(ResourceRule)


def document_rule(
    rule_id: str,
    *,
    description: str,
    category: Category,
    severity: Severity,
    fixable: bool = False,
    docs: str | None = None,
):
    """Build a DocumentRule from a check function."""
    meta = RuleMeta(description=description, category=category, severity=severity, fixable=fixable, docs=docs)

    def decorator(check) -> DocumentRule:
        return DocumentRule(id=rule_id, meta=meta, check=check)

    return decorator
