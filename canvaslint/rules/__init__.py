"""Built-in rules."""

from .base import (
    DocumentRule,
    NodeRule,
    RelationRule,
    ResourceRule,
    Rule,
    RuleMeta,
    document_rule,
    node_rule,
    relation_rule,
    resource_rule,
)
from .structural import no_dangling_refs, unique_ids, valid_resource_refs
from .visual import no_overlapping_nodes, nodes_aligned, parent_contains_children

BUILTIN_RULES: list[Rule] = [
    # Structural
    no_dangling_refs,
    unique_ids,
    valid_resource_refs,
    # Visual
    nodes_aligned,
    no_overlapping_nodes,
    parent_contains_children,
]

__all__ = [
    "BUILTIN_RULES",
    "DocumentRule",
    "NodeRule",
    "RelationRule",
    "ResourceRule",
    "Rule",
    "RuleMeta",
    "document_rule",
    "node_rule",
    "relation_rule",
    "resource_rule",
    "no_dangling_refs",
    "unique_ids",
    "valid_resource_refs",
    "nodes_aligned",
    "no_overlapping_nodes",
    "parent_contains_children",
]
