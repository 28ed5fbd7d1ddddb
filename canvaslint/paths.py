"""Target resolution and change application.

Both operations are pure. Applying a change rebuilds only the touched
element and the collection holding it; every other entity is shared with
the input document.

A target that cannot be navigated (unknown id, missing key, index out of
range) is reported as an `Unresolved` value, never raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Mapping

from .diagnostics import (
    KIND_COLLECTIONS,
    Change,
    DeleteChange,
    DiagnosticTarget,
    InsertChange,
    MoveChange,
    PathSegment,
    ResizeChange,
    SetChange,
)
from .models import Document, Element, Extension, Representation

logger = logging.getLogger(__name__)

# Wire name -> dataclass attribute, for one-segment field paths
_FIELD_ATTRS = {
    "position": "position",
    "size": "size",
    "resource": "resource",
    "resourceFit": "resource_fit",
    "rotation": "rotation",
    "relation": "relation",
    "node": "node",
}
_REPRESENTATION_ATTRS = {"location": "location", "mimeType": "mime_type", "content": "content"}
_COORDINATE_FIELDS = frozenset({"position", "size"})


@dataclass(frozen=True)
class Unresolved:
    """A target that cannot be navigated in the current document."""

    target: str
    reason: str

    def __str__(self) -> str:
        return f"{self.target}: {self.reason}"


@dataclass(frozen=True)
class Resolved:
    element: Any  # the document itself for canvas targets
    index: int | None
    value: Any


class _PathError(Exception):
    """Internal signal for a failed navigation step."""


def find_element(document: Document, kind: str, element_id: str) -> tuple[int, Element] | None:
    """First element of `kind` with the id, and its collection index."""
    for index, element in enumerate(document.collection(KIND_COLLECTIONS[kind])):
        if element.id == element_id:
            return index, element
    return None


def resolve(document: Document, target: DiagnosticTarget) -> Resolved | Unresolved:
    """Look the target up by kind and id, then follow its property path."""
    if target.kind == "canvas":
        return Resolved(element=document, index=None, value=document)

    found = find_element(document, target.kind, target.id)
    if found is None:
        return Unresolved(str(target), f"no {target.kind} with id {target.id!r}")
    index, element = found
    if not target.path:
        return Resolved(element=element, index=index, value=element)

    try:
        value = _read(element, target.path)
    except _PathError as e:
        return Unresolved(str(target), str(e))
    return Resolved(element=element, index=index, value=value)


def _read(element: Element, path: tuple[PathSegment, ...]) -> Any:
    head = path[0]
    if head in ("data", "representations"):
        current: Any = getattr(element, head)
    else:
        current = getattr(element, _FIELD_ATTRS[head])
        if current is None:
            raise _PathError(f"field {head!r} is not set")

    for segment in path[1:]:
        if isinstance(segment, int):
            if not isinstance(current, (list, tuple)):
                raise _PathError(f"cannot index into {type(current).__name__}")
            if segment >= len(current):
                raise _PathError(f"index {segment} out of range ({len(current)} items)")
            current = current[segment]
        elif isinstance(current, Extension):
            if segment not in current.properties:
                raise _PathError(f"extension {current.type!r} has no key {segment!r}")
            current = current.properties[segment]
        elif isinstance(current, Representation):
            current = getattr(current, _REPRESENTATION_ATTRS[segment])
            if current is None:
                raise _PathError(f"representation field {segment!r} is not set")
        else:
            raise _PathError(f"cannot read key {segment!r} from {type(current).__name__}")
    return current


# -----------------------------------------------------------------------------
# Change application
# -----------------------------------------------------------------------------


def apply_change(document: Document, change: Change) -> Document | Unresolved:
    """Apply one change, returning a new document or why its target did not resolve."""
    if isinstance(change, SetChange):
        return _apply_path_change(document, change.target, "set", change.value)
    if isinstance(change, DeleteChange):
        if change.target.path:
            return _apply_path_change(document, change.target, "delete", None)
        return _delete_element(document, change.target)
    if isinstance(change, InsertChange):
        items = document.collection(change.collection) + (change.element,)
        return document.with_collection(change.collection, items)
    if isinstance(change, MoveChange):
        return _replace_node_field(document, change.node_id, "position", change.to)
    if isinstance(change, ResizeChange):
        return _replace_node_field(document, change.node_id, "size", change.to)
    raise TypeError(f"unsupported change: {change!r}")


def _replace_at(document: Document, kind: str, index: int, element: Element) -> Document:
    collection = KIND_COLLECTIONS[kind]
    items = list(document.collection(collection))
    items[index] = element
    return document.with_collection(collection, tuple(items))


def _delete_element(document: Document, target: DiagnosticTarget) -> Document:
    """Remove every element of the kind carrying the id.

    An element that is already gone satisfies the deletion, so the
    document is returned unchanged.
    """
    collection = KIND_COLLECTIONS[target.kind]
    items = document.collection(collection)
    kept = tuple(e for e in items if e.id != target.id)
    if len(kept) == len(items):
        logger.debug(f"{target} already absent; delete is a no-op")
        return document
    return document.with_collection(collection, kept)


def _replace_node_field(document: Document, node_id: str, attr: str, coords: tuple) -> Document | Unresolved:
    found = find_element(document, "node", node_id)
    if found is None:
        return Unresolved(f"node:{node_id}", f"no node with id {node_id!r}")
    index, node = found
    return _replace_at(document, "node", index, replace(node, **{attr: tuple(coords)}))


def _apply_path_change(document: Document, target: DiagnosticTarget, op: str, value: Any) -> Document | Unresolved:
    found = find_element(document, target.kind, target.id)
    if found is None:
        return Unresolved(str(target), f"no {target.kind} with id {target.id!r}")
    index, element = found
    try:
        updated = _update_element(element, target.path, op, value)
    except _PathError as e:
        return Unresolved(str(target), str(e))
    return _replace_at(document, target.kind, index, updated)


def _update_element(element: Element, path: tuple[PathSegment, ...], op: str, value: Any) -> Element:
    head, rest = path[0], path[1:]
    if head in ("data", "representations"):
        items = _update_sequence(getattr(element, head), rest, op, value, head)
        return replace(element, **{head: items})

    attr = _FIELD_ATTRS[head]
    if op == "set":
        if head in _COORDINATE_FIELDS and value is not None:
            value = tuple(value)
        return replace(element, **{attr: value})

    if getattr(element, attr) is None:
        raise _PathError(f"field {head!r} is not set")
    extra = {k: v for k, v in element.extra.items() if k != head}
    return replace(element, **{attr: None, "extra": extra})


def _update_sequence(items: tuple, path: tuple[PathSegment, ...], op: str, value: Any, kind: str) -> tuple:
    index, rest = path[0], path[1:]
    if index >= len(items):
        raise _PathError(f"{kind} index {index} out of range ({len(items)} items)")

    updated = list(items)
    if rest:
        updated[index] = _update_item(items[index], rest, op, value)
    elif op == "set":
        updated[index] = _coerce_item(kind, value)
    else:
        del updated[index]
    return tuple(updated)


def _coerce_item(kind: str, value: Any) -> Extension | Representation:
    if kind == "data":
        return value if isinstance(value, Extension) else Extension.from_dict(value)
    return value if isinstance(value, Representation) else Representation.from_dict(value)


def _update_item(item: Extension | Representation, path: tuple[PathSegment, ...], op: str, value: Any):
    key, rest = path[0], path[1:]

    if isinstance(item, Representation):
        attr = _REPRESENTATION_ATTRS[key]
        if op == "set":
            return replace(item, **{attr: value})
        if getattr(item, attr) is None:
            raise _PathError(f"representation field {key!r} is not set")
        extra = {k: v for k, v in item.extra.items() if k != key}
        return replace(item, **{attr: None, "extra": extra})

    if not rest:
        if op == "set":
            return item.with_value(key, _json_value(value))
        if key not in item.properties:
            raise _PathError(f"extension {item.type!r} has no key {key!r}")
        return item.without(key)

    current = item.properties.get(key)
    if not isinstance(current, list):
        raise _PathError(f"extension key {key!r} does not hold a list")
    position = rest[0]
    if position >= len(current):
        raise _PathError(f"{key} index {position} out of range ({len(current)} items)")
    updated = list(current)
    if op == "set":
        updated[position] = _json_value(value)
    else:
        del updated[position]
    return item.with_value(key, updated)


def _json_value(value: Any) -> Any:
    if isinstance(value, tuple):
        return [_json_value(v) for v in value]
    if isinstance(value, Mapping):
        return {k: _json_value(v) for k, v in value.items()}
    return value
