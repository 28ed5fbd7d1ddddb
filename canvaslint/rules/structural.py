"""Structural rules: references and identity."""

from __future__ import annotations

from ..diagnostics import DeleteChange, Diagnostic, DiagnosticTarget, Fix, Highlight, Related, SetChange
from ..index import GraphIndex
from ..models import (
    Document,
    EdgeExtension,
    GroupExtension,
    HyperedgeExtension,
    Node,
    ParentChildExtension,
    Relation,
)
from ..overlay import node_bounds
from .base import document_rule, node_rule, relation_rule

# How dangling group / hyperedge / parent-child references are repaired.
#   none             report only
#   prune            drop the dangling reference, keep the relation
#   delete-relation  delete the whole relation
MEMBER_REPAIRS = ("none", "prune", "delete-relation")


def _exists(ctx: GraphIndex, ref: str | None) -> bool:
    if not isinstance(ref, str):
        return False
    return ctx.get_node(ref) is not None or ctx.get_relation(ref) is not None


def _delete_relation(relation: Relation) -> Fix:
    return Fix(
        description="Remove this relation",
        changes=(DeleteChange(DiagnosticTarget("relation", relation.id)),),
        safe=False,
    )


def _prune_list(relation: Relation, index: int, key: str, keep: list[str]) -> Fix:
    return Fix(
        description=f"Drop dangling entries from {key}",
        changes=(SetChange(DiagnosticTarget("relation", relation.id, ("data", index, key)), keep),),
        safe=False,
    )


def _member_repair(ctx: GraphIndex) -> str:
    repair = ctx.option("member_repair", "none")
    if repair not in MEMBER_REPAIRS:
        raise ValueError(f"member_repair must be one of {', '.join(MEMBER_REPAIRS)}, got {repair!r}")
    return repair


def _check_list_refs(relation: Relation, index: int, key: str, label: str, refs: tuple[str, ...], ctx: GraphIndex, repair: str) -> list[Diagnostic]:
    dangling = [ref for ref in refs if not _exists(ctx, ref)]
    if not dangling:
        return []

    fix = None
    if repair == "prune":
        fix = _prune_list(relation, index, key, [ref for ref in refs if _exists(ctx, ref)])
    elif repair == "delete-relation":
        fix = _delete_relation(relation)

    return [
        Diagnostic(
            message=f'{label} "{ref}" does not exist',
            targets=(DiagnosticTarget("relation", relation.id, ("data", index, key)),),
            fix=fix,
        )
        for ref in dangling
    ]


@relation_rule(
    "structural/no-dangling-refs",
    description="All ID references must point to existing elements",
    category="structural",
    severity="error",
    fixable=True,
)
def no_dangling_refs(relation: Relation, ctx: GraphIndex) -> list[Diagnostic]:
    """Edge ends, group members, hyperedge ends and parent/child ids must exist.

    Edges with a dangling end are deleted by their fix. Other relation kinds
    are repaired according to the `member_repair` option.
    """
    diagnostics: list[Diagnostic] = []
    repair = _member_repair(ctx)

    for index, ext in enumerate(relation.data):
        view = ext.typed()

        if isinstance(view, EdgeExtension):
            for end, ref in (("start", view.start), ("end", view.end)):
                if not _exists(ctx, ref):
                    diagnostics.append(
                        Diagnostic(
                            message=f'Edge {end} "{ref}" does not exist',
                            targets=(DiagnosticTarget("relation", relation.id, ("data", index, end)),),
                            fix=_delete_relation(relation),
                        )
                    )

        elif isinstance(view, GroupExtension):
            diagnostics.extend(_check_list_refs(relation, index, "members", "Group member", view.members, ctx, repair))

        elif isinstance(view, HyperedgeExtension):
            diagnostics.extend(_check_list_refs(relation, index, "ends", "Hyperedge end", view.ends, ctx, repair))

        elif isinstance(view, ParentChildExtension):
            if view.parent is not None and not _exists(ctx, view.parent):
                fix = None
                if repair == "prune":
                    # Without a parent the child hangs off the canvas root
                    fix = Fix(
                        description="Attach the child to the canvas root",
                        changes=(DeleteChange(DiagnosticTarget("relation", relation.id, ("data", index, "parent"))),),
                        safe=False,
                    )
                elif repair == "delete-relation":
                    fix = _delete_relation(relation)
                diagnostics.append(
                    Diagnostic(
                        message=f'Parent "{view.parent}" does not exist',
                        targets=(DiagnosticTarget("relation", relation.id, ("data", index, "parent")),),
                        fix=fix,
                    )
                )

            if not _exists(ctx, view.child):
                # A parent-child relation without its child has nothing left to prune
                fix = _delete_relation(relation) if repair != "none" else None
                diagnostics.append(
                    Diagnostic(
                        message=f'Child "{view.child}" does not exist',
                        targets=(DiagnosticTarget("relation", relation.id, ("data", index, "child")),),
                        fix=fix,
                    )
                )

    return diagnostics


@document_rule(
    "structural/unique-ids",
    description="All IDs must be unique across nodes, relations, and resources",
    category="structural",
    severity="error",
)
def unique_ids(document: Document, ctx: GraphIndex) -> list[Diagnostic]:
    """Report every occurrence of an id after its first.

    A pair of colliding elements yields one diagnostic; n elements sharing
    an id yield n - 1. The first occurrence is listed as related.
    """
    diagnostics: list[Diagnostic] = []
    first_seen: dict[str, str] = {}  # id -> kind of first occurrence

    elements = (
        [("node", n) for n in document.nodes]
        + [("relation", r) for r in document.relations]
        + [("resource", r) for r in document.resources]
    )
    for kind, element in elements:
        first_kind = first_seen.get(element.id)
        if first_kind is None:
            first_seen[element.id] = kind
            continue
        diagnostics.append(
            Diagnostic(
                message=f'Duplicate ID "{element.id}" (also used by {first_kind})',
                targets=(DiagnosticTarget(kind, element.id),),
                related=(Related(DiagnosticTarget(first_kind, element.id), "First use of this ID"),),
            )
        )

    return diagnostics


def _has_resource(node: Node, ctx: GraphIndex) -> bool:
    return node.resource is not None


@node_rule(
    "structural/valid-resource-refs",
    description="Node resource references must point to existing resources",
    category="structural",
    severity="error",
    filter=_has_resource,
)
def valid_resource_refs(node: Node, ctx: GraphIndex) -> list[Diagnostic]:
    if ctx.get_resource(node.resource) is not None:
        return []
    visual = (Highlight(bounds=node_bounds(node), style="error"),) if node.position is not None else ()
    return [
        Diagnostic(
            message=f'Resource "{node.resource}" does not exist',
            targets=(DiagnosticTarget("node", node.id, ("resource",)),),
            visual=visual,
        )
    ]
