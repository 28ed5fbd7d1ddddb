"""Diagnostics, targets, visual annotations and fixes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Literal, Union

from .models import ELEMENT_TYPES, Collection, Coordinates, Node, Relation, Resource

Severity = Literal["error", "warning", "info", "hint"]
Category = Literal["structural", "visual", "semantic", "consistency"]
ElementKind = Literal["node", "relation", "resource", "canvas"]
AnnotationStyle = Literal["error", "warning", "info"]
GuidelineStyle = Literal["snap", "align", "distribute"]

SEVERITIES: tuple[str, ...] = ("error", "warning", "info", "hint")
ELEMENT_KINDS: tuple[str, ...] = ("node", "relation", "resource", "canvas")
ANNOTATION_STYLES: tuple[str, ...] = ("error", "warning", "info")
GUIDELINE_STYLES: tuple[str, ...] = ("snap", "align", "distribute")

# Element kind -> document collection holding it
KIND_COLLECTIONS: dict[str, Collection] = {
    "node": "nodes",
    "relation": "relations",
    "resource": "resources",
}

PathSegment = Union[str, int]

# Scalar fields addressable by a one-segment path, per element kind
SCALAR_FIELDS: dict[str, frozenset[str]] = {
    "node": frozenset({"position", "size", "resource", "resourceFit", "rotation", "relation"}),
    "relation": frozenset({"node"}),
    "resource": frozenset(),
}
REPRESENTATION_FIELDS = frozenset({"location", "mimeType", "content"})


def _is_index(segment: Any) -> bool:
    return isinstance(segment, int) and not isinstance(segment, bool) and segment >= 0


def validate_path(kind: str, path: tuple[PathSegment, ...]) -> None:
    """Reject paths outside the addressable fields of an element kind.

    Addressable:
        node      position | size | resource | resourceFit | rotation | relation
                  data/<i>[/<key>[/<j>]]
        relation  node | data/<i>[/<key>[/<j>]]
        resource  representations/<i>[/location|mimeType|content]
        canvas    (no path)
    """
    if kind not in ELEMENT_KINDS:
        raise ValueError(f"unknown element kind: {kind!r}")
    if not path:
        return
    if kind == "canvas":
        raise ValueError("canvas targets cannot carry a property path")

    head, rest = path[0], path[1:]
    if head in SCALAR_FIELDS[kind]:
        if rest:
            raise ValueError(f"{kind} field {head!r} has no sub-fields: {path!r}")
        return

    if head == "data" and kind in ("node", "relation"):
        if not 1 <= len(rest) <= 3 or not _is_index(rest[0]):
            raise ValueError(f"extension paths look like data/<index>[/<key>[/<index>]]: {path!r}")
        if len(rest) >= 2 and (not isinstance(rest[1], str) or rest[1] == "type"):
            raise ValueError(f"extension key must be a string other than 'type': {path!r}")
        if len(rest) == 3 and not _is_index(rest[2]):
            raise ValueError(f"list index must be a non-negative integer: {path!r}")
        return

    if head == "representations" and kind == "resource":
        if not 1 <= len(rest) <= 2 or not _is_index(rest[0]):
            raise ValueError(f"representation paths look like representations/<index>[/<field>]: {path!r}")
        if len(rest) == 2 and rest[1] not in REPRESENTATION_FIELDS:
            raise ValueError(f"unknown representation field {rest[1]!r}")
        return

    raise ValueError(f"{path!r} is not an addressable {kind} path")


@dataclass(frozen=True)
class DiagnosticTarget:
    """An element reference, optionally narrowed to a property path."""

    kind: ElementKind
    id: str
    path: tuple[PathSegment, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", tuple(self.path))
        validate_path(self.kind, self.path)

    def __str__(self) -> str:
        loc = f"{self.kind}:{self.id}"
        if self.path:
            loc += "/" + "/".join(str(p) for p in self.path)
        return loc

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": self.kind, "id": self.id}
        if self.path:
            out["path"] = list(self.path)
        return out


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    def to_dict(self) -> dict[str, Any]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


# -----------------------------------------------------------------------------
# Visual annotations (rendered by the overlay generator)
# -----------------------------------------------------------------------------


def _check_style(annotation: Any, allowed: tuple[str, ...]) -> None:
    if annotation.style not in allowed:
        raise ValueError(f"unknown {annotation.TYPE} style: {annotation.style!r}")


@dataclass(frozen=True)
class Highlight:
    """A bounded rectangle drawn over part of the canvas."""

    TYPE: ClassVar[str] = "highlight"

    bounds: Rect
    style: AnnotationStyle = "warning"
    opacity: float | None = None

    def __post_init__(self) -> None:
        _check_style(self, ANNOTATION_STYLES)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": self.TYPE, "bounds": self.bounds.to_dict(), "style": self.style}
        if self.opacity is not None:
            out["opacity"] = self.opacity
        return out


@dataclass(frozen=True)
class Guideline:
    """An axis-parallel line, unbounded unless `range` is given."""

    TYPE: ClassVar[str] = "guideline"

    orientation: Literal["horizontal", "vertical"]
    position: float
    range: tuple[float, float] | None = None
    style: GuidelineStyle = "align"

    def __post_init__(self) -> None:
        if self.orientation not in ("horizontal", "vertical"):
            raise ValueError(f"unknown guideline orientation: {self.orientation!r}")
        _check_style(self, GUIDELINE_STYLES)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "type": self.TYPE,
            "orientation": self.orientation,
            "position": self.position,
            "style": self.style,
        }
        if self.range is not None:
            out["range"] = list(self.range)
        return out


@dataclass(frozen=True)
class Label:
    TYPE: ClassVar[str] = "label"

    position: Coordinates
    text: str
    style: AnnotationStyle = "info"

    def __post_init__(self) -> None:
        _check_style(self, ANNOTATION_STYLES)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.TYPE, "position": list(self.position), "text": self.text, "style": self.style}


@dataclass(frozen=True)
class Marker:
    TYPE: ClassVar[str] = "marker"

    position: Coordinates
    style: AnnotationStyle = "error"

    def __post_init__(self) -> None:
        _check_style(self, ANNOTATION_STYLES)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.TYPE, "position": list(self.position), "style": self.style}


VisualAnnotation = Union[Highlight, Guideline, Label, Marker]
ANNOTATION_TYPES = (Highlight, Guideline, Label, Marker)


# -----------------------------------------------------------------------------
# Changes and fixes
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class SetChange:
    """Set the value at a property path."""

    TYPE: ClassVar[str] = "set"

    target: DiagnosticTarget
    value: Any

    def __post_init__(self) -> None:
        if not self.target.path:
            raise ValueError(f"set needs a property path, got bare target {self.target}")

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.TYPE, "target": self.target.to_dict(), "value": _plain(self.value)}


@dataclass(frozen=True)
class DeleteChange:
    """Delete a whole element (no path) or the value at a property path."""

    TYPE: ClassVar[str] = "delete"

    target: DiagnosticTarget

    def __post_init__(self) -> None:
        if self.target.kind == "canvas":
            raise ValueError("the canvas itself cannot be deleted")

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.TYPE, "target": self.target.to_dict()}


@dataclass(frozen=True)
class InsertChange:
    """Append an element to a document collection."""

    TYPE: ClassVar[str] = "insert"

    collection: Collection
    element: Node | Relation | Resource

    def __post_init__(self) -> None:
        expected = ELEMENT_TYPES.get(self.collection)
        if expected is None:
            raise ValueError(f"unknown collection: {self.collection!r}")
        if not isinstance(self.element, expected):
            raise ValueError(f"{self.collection} only holds {expected.__name__} elements")

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.TYPE, "collection": self.collection, "element": self.element.to_dict()}


@dataclass(frozen=True)
class MoveChange:
    TYPE: ClassVar[str] = "move"

    node_id: str
    to: Coordinates

    def __post_init__(self) -> None:
        object.__setattr__(self, "to", tuple(self.to))

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.TYPE, "nodeId": self.node_id, "to": list(self.to)}


@dataclass(frozen=True)
class ResizeChange:
    TYPE: ClassVar[str] = "resize"

    node_id: str
    to: Coordinates

    def __post_init__(self) -> None:
        object.__setattr__(self, "to", tuple(self.to))

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.TYPE, "nodeId": self.node_id, "to": list(self.to)}


Change = Union[SetChange, DeleteChange, InsertChange, MoveChange, ResizeChange]


@dataclass(frozen=True)
class Fix:
    """A machine-applicable repair: changes applied in order.

    `safe` is informational: it claims the repair does not alter meaning
    beyond the stated problem. The fix engine does not enforce it.
    """

    description: str
    changes: tuple[Change, ...]
    safe: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "changes", tuple(self.changes))

    def to_dict(self) -> dict[str, Any]:
        return {
            "description": self.description,
            "changes": [c.to_dict() for c in self.changes],
            "safe": self.safe,
        }


@dataclass(frozen=True)
class Related:
    target: DiagnosticTarget
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"target": self.target.to_dict(), "message": self.message}


@dataclass(frozen=True)
class Diagnostic:
    """A single issue reported by a rule.

    Rules leave `rule_id` empty; the runner stamps it together with the
    configured severity.
    """

    message: str
    targets: tuple[DiagnosticTarget, ...]
    severity: Severity = "error"
    rule_id: str = ""
    visual: tuple[VisualAnnotation, ...] = ()
    fix: Fix | None = None
    related: tuple[Related, ...] = ()

    def __post_init__(self) -> None:
        if not self.targets:
            raise ValueError("a diagnostic needs at least one target")
        object.__setattr__(self, "targets", tuple(self.targets))
        object.__setattr__(self, "visual", tuple(self.visual))
        object.__setattr__(self, "related", tuple(self.related))

    @property
    def fixable(self) -> bool:
        return self.fix is not None

    def __str__(self) -> str:
        return f"{self.severity.upper()}: [{self.rule_id}] {self.targets[0]} - {self.message}"

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "ruleId": self.rule_id,
            "severity": self.severity,
            "message": self.message,
            "targets": [t.to_dict() for t in self.targets],
        }
        if self.visual:
            out["visual"] = [v.to_dict() for v in self.visual]
        if self.fix is not None:
            out["fix"] = self.fix.to_dict()
        if self.related:
            out["related"] = [r.to_dict() for r in self.related]
        return out


def _plain(value: Any) -> Any:
    """JSON-friendly form of a change value."""
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, tuple):
        return [_plain(v) for v in value]
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value
