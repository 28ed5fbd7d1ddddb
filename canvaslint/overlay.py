"""Render diagnostics as an OCIF overlay document.

The overlay is an ordinary canvas document meant to be drawn on top of the
one that was checked. Element ids come from a single counter, so the same
diagnostics always produce the same overlay.
"""

from __future__ import annotations

from typing import Callable, Sequence

from .diagnostics import Diagnostic, Guideline, Highlight, Label, Marker, Rect, VisualAnnotation
from .models import (
    OCIF_SCHEMA_URI,
    OVAL,
    PATH,
    RECT,
    TEXT_STYLE,
    Document,
    Extension,
    Node,
    Representation,
    Resource,
)

ID_PREFIX = "canvaslint"

SEVERITY_COLORS = {
    "error": {"stroke": "#EF4444", "fill": "#EF444420"},  # red
    "warning": {"stroke": "#F59E0B", "fill": "#F59E0B20"},  # amber
    "info": {"stroke": "#3B82F6", "fill": "#3B82F620"},  # blue
    "hint": {"stroke": "#6B7280", "fill": "#6B728020"},  # gray
}

GUIDELINE_COLORS = {
    "snap": "#3B82F6",
    "align": "#10B981",
    "distribute": "#8B5CF6",
}

# Length of a guideline without an explicit range
GUIDELINE_LENGTH = 10000
LABEL_SIZE = (200, 30)
MARKER_SIZE = 16
DEFAULT_NODE_SIZE = (100, 100)

IdFactory = Callable[[str], str]


def create_overlay(diagnostics: Sequence[Diagnostic]) -> Document:
    """Convert diagnostics to an overlay document."""
    nodes: list[Node] = []
    resources: list[Resource] = []
    counter = 0

    def next_id(prefix: str) -> str:
        nonlocal counter
        value = f"{ID_PREFIX}-{prefix}-{counter}"
        counter += 1
        return value

    for diagnostic in diagnostics:
        if not diagnostic.visual:
            resources.append(_text_resource(next_id("msg"), f"[{diagnostic.rule_id}] {diagnostic.message}"))
            continue
        for annotation in diagnostic.visual:
            new_nodes, new_resources = _annotation_elements(annotation, diagnostic, next_id)
            nodes.extend(new_nodes)
            resources.extend(new_resources)

    return Document(
        ocif=OCIF_SCHEMA_URI,
        nodes=tuple(nodes),
        resources=tuple(resources),
        key_order=("ocif", "nodes", "resources"),
    )


def _annotation_elements(
    annotation: VisualAnnotation, diagnostic: Diagnostic, next_id: IdFactory
) -> tuple[list[Node], list[Resource]]:
    if isinstance(annotation, Highlight):
        return _highlight(annotation, diagnostic, next_id)
    if isinstance(annotation, Guideline):
        return _guideline(annotation, next_id)
    if isinstance(annotation, Label):
        return _label(annotation, next_id)
    if isinstance(annotation, Marker):
        return _marker(annotation, next_id)
    raise TypeError(f"unsupported annotation: {annotation!r}")


def _text_resource(resource_id: str, text: str) -> Resource:
    return Resource(
        id=resource_id,
        representations=(Representation(mime_type="text/plain", content=text, key_order=("mimeType", "content")),),
    )


def _highlight(annotation: Highlight, diagnostic: Diagnostic, next_id: IdFactory):
    colors = SEVERITY_COLORS[annotation.style]
    node_id = next_id("highlight")
    msg_id = next_id("msg")
    bounds = annotation.bounds

    shape = {
        "type": RECT,
        "strokeColor": colors["stroke"],
        "strokeWidth": 2,
        "fillColor": colors["fill"],
        "cornerRadius": 4,
    }
    if annotation.opacity is not None:
        shape["opacity"] = annotation.opacity

    node = Node(
        id=node_id,
        position=(bounds.x, bounds.y),
        size=(bounds.width, bounds.height),
        resource=msg_id,
        data=(Extension(shape),),
    )
    return [node], [_text_resource(msg_id, diagnostic.message)]


def _guideline(annotation: Guideline, next_id: IdFactory):
    node_id = next_id("guide")
    half = GUIDELINE_LENGTH / 2
    start, end = annotation.range if annotation.range is not None else (-half, half)

    if annotation.orientation == "horizontal":
        path = f"M {start} {annotation.position} L {end} {annotation.position}"
    else:
        path = f"M {annotation.position} {start} L {annotation.position} {end}"

    node = Node(
        id=node_id,
        data=(
            Extension(
                {
                    "type": PATH,
                    "path": path,
                    "strokeColor": GUIDELINE_COLORS[annotation.style],
                    "strokeWidth": 1,
                }
            ),
        ),
    )
    return [node], []


def _label(annotation: Label, next_id: IdFactory):
    node_id = next_id("label")
    msg_id = next_id("msg")
    colors = SEVERITY_COLORS[annotation.style]

    node = Node(
        id=node_id,
        position=tuple(annotation.position),
        size=LABEL_SIZE,
        resource=msg_id,
        data=(
            Extension(
                {
                    "type": RECT,
                    "fillColor": colors["fill"],
                    "strokeColor": colors["stroke"],
                    "strokeWidth": 1,
                    "cornerRadius": 4,
                }
            ),
            Extension({"type": TEXT_STYLE, "fontSize": 12, "color": colors["stroke"]}),
        ),
    )
    return [node], [_text_resource(msg_id, annotation.text)]


def _marker(annotation: Marker, next_id: IdFactory):
    node_id = next_id("marker")
    colors = SEVERITY_COLORS[annotation.style]
    half = MARKER_SIZE / 2
    x, y = annotation.position[0], annotation.position[1]

    node = Node(
        id=node_id,
        position=(x - half, y - half),
        size=(MARKER_SIZE, MARKER_SIZE),
        data=(
            Extension(
                {
                    "type": OVAL,
                    "fillColor": colors["fill"],
                    "strokeColor": colors["stroke"],
                    "strokeWidth": 2,
                }
            ),
        ),
    )
    return [node], []


def node_bounds(node: Node) -> Rect:
    """Bounding box of a node, for highlight annotations."""
    pos = node.position or (0, 0)
    size = node.size or DEFAULT_NODE_SIZE
    return Rect(x=pos[0], y=pos[1], width=size[0], height=size[1])
