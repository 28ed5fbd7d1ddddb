"""Visual rules: layout and geometry."""

from __future__ import annotations

from dataclasses import dataclass

from ..diagnostics import (
    Diagnostic,
    DiagnosticTarget,
    Fix,
    Guideline,
    Highlight,
    MoveChange,
    Rect,
    Related,
    ResizeChange,
)
from ..index import GraphIndex
from ..models import Document, Node, ParentChildExtension
from .base import document_rule, node_rule


@dataclass(frozen=True)
class Bounds:
    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    def contains(self, other: Bounds) -> bool:
        return (
            self.left <= other.left
            and self.right >= other.right
            and self.top <= other.top
            and self.bottom >= other.bottom
        )

    def intersection(self, other: Bounds) -> Bounds | None:
        """Overlapping region, or None when the boxes only touch or are apart."""
        left, top = max(self.left, other.left), max(self.top, other.top)
        right, bottom = min(self.right, other.right), min(self.bottom, other.bottom)
        if right <= left or bottom <= top:
            return None
        return Bounds(left, top, right, bottom)

    def to_rect(self) -> Rect:
        return Rect(x=self.left, y=self.top, width=self.width, height=self.height)

    @classmethod
    def union(cls, boxes: list[Bounds]) -> Bounds:
        return cls(
            left=min(b.left for b in boxes),
            top=min(b.top for b in boxes),
            right=max(b.right for b in boxes),
            bottom=max(b.bottom for b in boxes),
        )


def node_box(node: Node) -> Bounds:
    """Bounds of a positioned node; a node without a size is a point."""
    x, y = node.position[0], node.position[1]
    width, height = (node.size[0], node.size[1]) if node.size else (0, 0)
    return Bounds(left=x, top=y, right=x + width, bottom=y + height)


def _earlier_nodes(node: Node, document: Document) -> list[Node]:
    earlier = []
    for other in document.nodes:
        if other is node:
            break
        earlier.append(other)
    return earlier


def _later_nodes(node: Node, document: Document) -> list[Node]:
    for index, other in enumerate(document.nodes):
        if other is node:
            return list(document.nodes[index + 1:])
    return []


def _is_positioned(node: Node, ctx: GraphIndex) -> bool:
    return node.position is not None


def _is_boxed(node: Node, ctx: GraphIndex) -> bool:
    return node.position is not None and node.size is not None


# -----------------------------------------------------------------------------
# nodes-aligned
# -----------------------------------------------------------------------------

_VERTICAL_EDGES = (("left", "left"), ("left", "right"), ("right", "left"), ("right", "right"))
_HORIZONTAL_EDGES = (("top", "top"), ("top", "bottom"), ("bottom", "top"), ("bottom", "bottom"))


@dataclass(frozen=True)
class _Match:
    edge: str
    other_edge: str
    other_id: str
    diff: float
    target: float


def _best_match(box: Bounds, others: list[Node], pairs, threshold: float) -> _Match | None:
    best: _Match | None = None
    for other in others:
        other_box = node_box(other)
        for edge, other_edge in pairs:
            target = getattr(other_box, other_edge)
            diff = abs(getattr(box, edge) - target)
            if 0 < diff <= threshold and (best is None or diff < best.diff):
                best = _Match(edge, other_edge, other.id, diff, target)
    return best


@node_rule(
    "visual/nodes-aligned",
    description="Detect nodes that are almost aligned on any edge",
    category="visual",
    severity="warning",
    fixable=True,
    filter=_is_positioned,
)
def nodes_aligned(node: Node, ctx: GraphIndex) -> list[Diagnostic]:
    """Nodes whose edges nearly line up with an earlier node's edges.

    Only the later node of a pair is reported and moved, so fixing both
    diagnostics of a pair cannot swap the two nodes' coordinates. Both axes
    are folded into one move because a move sets the whole position.
    Option `threshold` (default 5) is the largest offset treated as a near
    miss.
    """
    threshold = float(ctx.option("threshold", 5))
    others = [n for n in _earlier_nodes(node, ctx.document) if n.position is not None]
    if not others:
        return []

    box = node_box(node)
    vertical = _best_match(box, others, _VERTICAL_EDGES, threshold)
    horizontal = _best_match(box, others, _HORIZONTAL_EDGES, threshold)
    if vertical is None and horizontal is None:
        return []

    x, y = node.position[0], node.position[1]
    messages: list[str] = []
    guides: list[Guideline] = []
    descriptions: list[str] = []

    if vertical is not None:
        x = vertical.target if vertical.edge == "left" else vertical.target - box.width
        messages.append(f'{vertical.edge} edge is {vertical.diff:.1f}px off from {vertical.other_edge} edge of "{vertical.other_id}"')
        guides.append(Guideline(orientation="vertical", position=vertical.target, style="snap"))
        descriptions.append(f"{vertical.edge} edge to x={vertical.target}")

    if horizontal is not None:
        y = horizontal.target if horizontal.edge == "top" else horizontal.target - box.height
        messages.append(f'{horizontal.edge} edge is {horizontal.diff:.1f}px off from {horizontal.other_edge} edge of "{horizontal.other_id}"')
        guides.append(Guideline(orientation="horizontal", position=horizontal.target, style="snap"))
        descriptions.append(f"{horizontal.edge} edge to y={horizontal.target}")

    related = tuple(
        Related(DiagnosticTarget("node", m.other_id), "Alignment reference")
        for m in (vertical, horizontal)
        if m is not None
    )
    return [
        Diagnostic(
            message="; ".join(messages),
            targets=(DiagnosticTarget("node", node.id, ("position",)),),
            severity="warning",
            visual=tuple(guides),
            fix=Fix(
                description="Align " + " and ".join(descriptions),
                changes=(MoveChange(node.id, (x, y, *node.position[2:])),),
                safe=True,
            ),
            related=related,
        )
    ]


# -----------------------------------------------------------------------------
# no-overlapping-nodes
# -----------------------------------------------------------------------------


@node_rule(
    "visual/no-overlapping-nodes",
    description="Detect overlapping node bounding boxes",
    category="visual",
    severity="warning",
    filter=_is_boxed,
)
def no_overlapping_nodes(node: Node, ctx: GraphIndex) -> list[Diagnostic]:
    """One diagnostic per overlapping pair, reported on the earlier node."""
    box = node_box(node)
    if box.width == 0 or box.height == 0:
        return []

    diagnostics: list[Diagnostic] = []
    for other in _later_nodes(node, ctx.document):
        if other.position is None or other.size is None:
            continue
        other_box = node_box(other)
        if other_box.width == 0 or other_box.height == 0:
            continue

        overlap = box.intersection(other_box)
        if overlap is None:
            continue

        area = overlap.width * overlap.height
        diagnostics.append(
            Diagnostic(
                message=f'Node overlaps with "{other.id}" ({area:.0f}px² overlap)',
                targets=(DiagnosticTarget("node", node.id), DiagnosticTarget("node", other.id)),
                severity="warning",
                visual=(Highlight(bounds=overlap.to_rect(), style="warning"),),
                related=(
                    Related(DiagnosticTarget("node", node.id), "Overlapping node"),
                    Related(DiagnosticTarget("node", other.id), "Overlapping node"),
                ),
            )
        )
    return diagnostics


# -----------------------------------------------------------------------------
# parent-contains-children
# -----------------------------------------------------------------------------


@document_rule(
    "visual/parent-contains-children",
    description="Parent nodes must contain all their child nodes",
    category="visual",
    severity="warning",
    fixable=True,
)
def parent_contains_children(document: Document, ctx: GraphIndex) -> list[Diagnostic]:
    """Parents that do not enclose their children are grown to fit them.

    Option `padding` (default 10) is the margin kept around the children.
    """
    padding = float(ctx.option("padding", 10))

    children_of: dict[str, list[str]] = {}
    for relation in document.relations:
        for ext in relation.data:
            view = ext.typed()
            if isinstance(view, ParentChildExtension) and view.parent and view.child:
                children_of.setdefault(view.parent, []).append(view.child)

    diagnostics: list[Diagnostic] = []
    for parent_id, child_ids in children_of.items():
        parent = ctx.get_node(parent_id)
        if parent is None or parent.position is None or parent.size is None:
            continue
        parent_box = node_box(parent)

        boxes: list[tuple[str, Bounds]] = []
        for child_id in child_ids:
            child = ctx.get_node(child_id)
            if child is not None and child.position is not None and child.size is not None:
                boxes.append((child_id, node_box(child)))
        if not boxes:
            continue

        outside = [child_id for child_id, b in boxes if not parent_box.contains(b)]
        if not outside:
            continue

        required = Bounds.union([b for _, b in boxes])
        new_position = (required.left - padding, required.top - padding, *parent.position[2:])
        new_size = (required.width + padding * 2, required.height + padding * 2, *parent.size[2:])

        diagnostics.append(
            Diagnostic(
                message=f'Parent "{parent_id}" does not contain {len(outside)} child node(s): {", ".join(outside)}',
                targets=(DiagnosticTarget("node", parent_id),)
                + tuple(DiagnosticTarget("node", child_id) for child_id in outside),
                severity="warning",
                visual=(Highlight(bounds=parent_box.to_rect(), style="warning"),),
                fix=Fix(
                    description="Resize parent to contain all children",
                    changes=(MoveChange(parent_id, new_position), ResizeChange(parent_id, new_size)),
                    safe=True,
                ),
            )
        )
    return diagnostics
