"""Data models for OCIF canvas documents.

Documents are immutable values. Every entity remembers the key order it was
decoded with, plus any keys canvaslint does not model, so an unmodified
document encodes back to the same JSON it was read from.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from typing import Any, ClassVar, Literal, Mapping

from .errors import DocumentError

OCIF_SCHEMA_URI = "https://canvasprotocol.org/ocif/v0.6"

# Relation extensions
EDGE = "@ocif/rel/edge"
GROUP = "@ocif/rel/group"
PARENT_CHILD = "@ocif/rel/parent-child"
HYPEREDGE = "@ocif/rel/hyperedge"

# Node shape extensions
RECT = "@ocif/node/rect"
OVAL = "@ocif/node/oval"
PATH = "@ocif/node/path"
TEXT_STYLE = "@ocif/node/textstyle"

Collection = Literal["nodes", "relations", "resources"]
Coordinates = tuple[float, ...]


def _ordered(known: Mapping[str, Any], extra: Mapping[str, Any], key_order: tuple[str, ...]) -> dict[str, Any]:
    """Merge modelled fields with passthrough keys, honouring the decoded key order.

    A modelled field set to None is absent unless the input carried an
    explicit null for it (kept in `extra`).
    """
    merged = dict(extra)
    merged.update({k: v for k, v in known.items() if v is not None})
    out = {k: merged[k] for k in key_order if k in merged}
    for k, v in merged.items():
        if k not in out:
            out[k] = v
    return out


def _require_id(data: Mapping[str, Any], what: str) -> str:
    value = data.get("id")
    if not isinstance(value, str):
        raise DocumentError(f"{what} is missing a string 'id': {dict(data)!r}")
    return value


def _coords(value: Any, what: str) -> Coordinates | None:
    if value is None:
        return None
    if not isinstance(value, (list, tuple)) or len(value) not in (2, 3):
        raise DocumentError(f"{what} must be a list of 2 or 3 numbers, got {value!r}")
    return tuple(value)


def _list(value: Any, what: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise DocumentError(f"{what} must be a list, got {type(value).__name__}")
    return value


def _passthrough(data: Mapping[str, Any], known: tuple[str, ...]) -> dict[str, Any]:
    """Keys the model does not own, plus explicit nulls for keys it does."""
    return {k: v for k, v in data.items() if k not in known or v is None}


# -----------------------------------------------------------------------------
# Extensions
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class Extension:
    """A typed, open data block attached to a node or relation.

    `properties` holds the whole block, `type` included, in wire order.
    """

    properties: Mapping[str, Any]

    @property
    def type(self) -> str:
        return self.properties["type"]

    def get(self, key: str, default: Any = None) -> Any:
        return self.properties.get(key, default)

    def with_value(self, key: str, value: Any) -> Extension:
        props = dict(self.properties)
        props[key] = value
        return Extension(props)

    def without(self, key: str) -> Extension:
        props = {k: v for k, v in self.properties.items() if k != key}
        return Extension(props)

    def typed(self) -> Any:
        """Return the registered typed view for this block, or the block itself."""
        view_cls = _EXTENSION_KINDS.get(self.type)
        if view_cls is None:
            return self
        return view_cls.from_extension(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Extension:
        if not isinstance(data, Mapping) or not isinstance(data.get("type"), str):
            raise DocumentError(f"extension is missing a string 'type': {data!r}")
        return cls(dict(data))

    def to_dict(self) -> dict[str, Any]:
        return dict(self.properties)


@dataclass(frozen=True)
class EdgeExtension:
    """Edge relation: connects two elements."""

    TYPE: ClassVar[str] = EDGE

    start: str | None
    end: str | None
    directed: bool = True
    rel: str | None = None

    @classmethod
    def from_extension(cls, ext: Extension) -> EdgeExtension:
        return cls(
            start=ext.get("start"),
            end=ext.get("end"),
            directed=bool(ext.get("directed", True)),
            rel=ext.get("rel"),
        )


@dataclass(frozen=True)
class GroupExtension:
    """Group relation: a set of member ids."""

    TYPE: ClassVar[str] = GROUP

    members: tuple[str, ...] = ()
    cascade_delete: bool = True

    @classmethod
    def from_extension(cls, ext: Extension) -> GroupExtension:
        return cls(
            members=tuple(ext.get("members") or ()),
            cascade_delete=bool(ext.get("cascadeDelete", True)),
        )


@dataclass(frozen=True)
class ParentChildExtension:
    """Parent-child relation. A missing parent means the canvas root."""

    TYPE: ClassVar[str] = PARENT_CHILD

    child: str | None
    parent: str | None = None
    inherit: bool = False
    cascade_delete: bool = True

    @classmethod
    def from_extension(cls, ext: Extension) -> ParentChildExtension:
        return cls(
            child=ext.get("child"),
            parent=ext.get("parent"),
            inherit=bool(ext.get("inherit", False)),
            cascade_delete=bool(ext.get("cascadeDelete", True)),
        )


@dataclass(frozen=True)
class HyperedgeExtension:
    """Hyperedge relation: connects any number of elements."""

    TYPE: ClassVar[str] = HYPEREDGE

    ends: tuple[str, ...] = ()

    @classmethod
    def from_extension(cls, ext: Extension) -> HyperedgeExtension:
        return cls(ends=tuple(ext.get("ends") or ()))


# Extension type -> typed view class (must provide `from_extension`)
_EXTENSION_KINDS: dict[str, type] = {
    EDGE: EdgeExtension,
    GROUP: GroupExtension,
    PARENT_CHILD: ParentChildExtension,
    HYPEREDGE: HyperedgeExtension,
}


def register_extension_kind(type_name: str, view_cls: type) -> None:
    """Register a typed accessor for an extension kind."""
    if not callable(getattr(view_cls, "from_extension", None)):
        raise TypeError(f"{view_cls.__name__} must define a from_extension() classmethod")
    _EXTENSION_KINDS[type_name] = view_cls


def extension_kinds() -> list[str]:
    return list(_EXTENSION_KINDS.keys())


# -----------------------------------------------------------------------------
# Graph entities
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class Node:
    """A positioned, sized visual element."""

    WIRE_KEYS: ClassVar[tuple[str, ...]] = (
        "id", "position", "size", "resource", "resourceFit", "rotation", "data", "relation",
    )

    id: str
    position: Coordinates | None = None
    size: Coordinates | None = None
    resource: str | None = None
    resource_fit: str | None = None
    rotation: float | None = None
    data: tuple[Extension, ...] = ()
    relation: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)
    key_order: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Node:
        node_id = _require_id(data, "node")
        return cls(
            id=node_id,
            position=_coords(data.get("position"), f"node {node_id!r} position"),
            size=_coords(data.get("size"), f"node {node_id!r} size"),
            resource=data.get("resource"),
            resource_fit=data.get("resourceFit"),
            rotation=data.get("rotation"),
            data=tuple(Extension.from_dict(e) for e in _list(data.get("data"), f"node {node_id!r} data")),
            relation=data.get("relation"),
            extra=_passthrough(data, cls.WIRE_KEYS),
            key_order=tuple(data.keys()),
        )

    def to_dict(self) -> dict[str, Any]:
        known = {
            "id": self.id,
            "position": list(self.position) if self.position is not None else None,
            "size": list(self.size) if self.size is not None else None,
            "resource": self.resource,
            "resourceFit": self.resource_fit,
            "rotation": self.rotation,
            "data": [e.to_dict() for e in self.data] if self.data or ("data" in self.key_order and "data" not in self.extra) else None,
            "relation": self.relation,
        }
        return _ordered(known, self.extra, self.key_order)


@dataclass(frozen=True)
class Relation:
    """A logical connection whose meaning lives in its extensions."""

    WIRE_KEYS: ClassVar[tuple[str, ...]] = ("id", "data", "node")

    id: str
    data: tuple[Extension, ...] = ()
    node: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)
    key_order: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Relation:
        relation_id = _require_id(data, "relation")
        return cls(
            id=relation_id,
            data=tuple(Extension.from_dict(e) for e in _list(data.get("data"), f"relation {relation_id!r} data")),
            node=data.get("node"),
            extra=_passthrough(data, cls.WIRE_KEYS),
            key_order=tuple(data.keys()),
        )

    def to_dict(self) -> dict[str, Any]:
        known = {
            "id": self.id,
            "data": [e.to_dict() for e in self.data] if self.data or ("data" in self.key_order and "data" not in self.extra) else None,
            "node": self.node,
        }
        return _ordered(known, self.extra, self.key_order)


@dataclass(frozen=True)
class Representation:
    """One concrete form of a resource: inline content or a location."""

    WIRE_KEYS: ClassVar[tuple[str, ...]] = ("location", "mimeType", "content")

    location: str | None = None
    mime_type: str | None = None
    content: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)
    key_order: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Representation:
        if not isinstance(data, Mapping):
            raise DocumentError(f"representation must be an object, got {data!r}")
        return cls(
            location=data.get("location"),
            mime_type=data.get("mimeType"),
            content=data.get("content"),
            extra=_passthrough(data, cls.WIRE_KEYS),
            key_order=tuple(data.keys()),
        )

    def to_dict(self) -> dict[str, Any]:
        known = {"location": self.location, "mimeType": self.mime_type, "content": self.content}
        return _ordered(known, self.extra, self.key_order)


@dataclass(frozen=True)
class Resource:
    """Content referenced by nodes."""

    WIRE_KEYS: ClassVar[tuple[str, ...]] = ("id", "representations")

    id: str
    representations: tuple[Representation, ...] = ()
    extra: Mapping[str, Any] = field(default_factory=dict)
    key_order: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Resource:
        resource_id = _require_id(data, "resource")
        reps = _list(data.get("representations"), f"resource {resource_id!r} representations")
        return cls(
            id=resource_id,
            representations=tuple(Representation.from_dict(r) for r in reps),
            extra=_passthrough(data, cls.WIRE_KEYS),
            key_order=tuple(data.keys()),
        )

    def to_dict(self) -> dict[str, Any]:
        reps = self.representations or ("representations" in self.key_order and "representations" not in self.extra)
        known = {"id": self.id, "representations": [r.to_dict() for r in self.representations] if reps else None}
        return _ordered(known, self.extra, self.key_order)


@dataclass(frozen=True)
class SchemaDecl:
    """A schema declaration: where an extension type's schema lives."""

    WIRE_KEYS: ClassVar[tuple[str, ...]] = ("uri", "schema", "location", "name")

    uri: str
    schema: Any = None
    location: str | None = None
    name: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)
    key_order: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SchemaDecl:
        if not isinstance(data, Mapping) or not isinstance(data.get("uri"), str):
            raise DocumentError(f"schema declaration is missing a string 'uri': {data!r}")
        return cls(
            uri=data["uri"],
            schema=data.get("schema"),
            location=data.get("location"),
            name=data.get("name"),
            extra=_passthrough(data, cls.WIRE_KEYS),
            key_order=tuple(data.keys()),
        )

    def to_dict(self) -> dict[str, Any]:
        known = {"uri": self.uri, "schema": self.schema, "location": self.location, "name": self.name}
        return _ordered(known, self.extra, self.key_order)


Element = Node | Relation | Resource

ELEMENT_TYPES: dict[Collection, type] = {
    "nodes": Node,
    "relations": Relation,
    "resources": Resource,
}


@dataclass(frozen=True)
class Document:
    """An OCIF canvas snapshot.

    Not required to be internally consistent: dangling references and
    duplicate ids are things rules check for, not decoding errors.
    Schema declarations are decoded but never checked.
    """

    WIRE_KEYS: ClassVar[tuple[str, ...]] = ("ocif", "nodes", "relations", "resources", "schemas")

    ocif: str = OCIF_SCHEMA_URI
    nodes: tuple[Node, ...] = ()
    relations: tuple[Relation, ...] = ()
    resources: tuple[Resource, ...] = ()
    schemas: tuple[SchemaDecl, ...] = ()
    extra: Mapping[str, Any] = field(default_factory=dict)
    key_order: tuple[str, ...] = ()

    def collection(self, name: Collection) -> tuple[Element, ...]:
        if name not in ELEMENT_TYPES:
            raise ValueError(f"unknown collection: {name!r}")
        return getattr(self, name)

    def with_collection(self, name: Collection, items: tuple[Element, ...]) -> Document:
        if name not in ELEMENT_TYPES:
            raise ValueError(f"unknown collection: {name!r}")
        return replace(self, **{name: tuple(items)})

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Document:
        if not isinstance(data, Mapping):
            raise DocumentError(f"document must be a JSON object, got {type(data).__name__}")
        schema_uri = data.get("ocif")
        if not isinstance(schema_uri, str):
            raise DocumentError("document is missing the 'ocif' schema uri")
        return cls(
            ocif=schema_uri,
            nodes=tuple(Node.from_dict(n) for n in _list(data.get("nodes"), "nodes")),
            relations=tuple(Relation.from_dict(r) for r in _list(data.get("relations"), "relations")),
            resources=tuple(Resource.from_dict(r) for r in _list(data.get("resources"), "resources")),
            schemas=tuple(SchemaDecl.from_dict(s) for s in _list(data.get("schemas"), "schemas")),
            extra=_passthrough(data, cls.WIRE_KEYS),
            key_order=tuple(data.keys()),
        )

    def to_dict(self) -> dict[str, Any]:
        def arr(name: str, items: tuple[Any, ...], encode) -> list[Any] | None:
            if not items and (name not in self.key_order or name in self.extra):
                return None
            return [encode(i) for i in items]

        known = {
            "ocif": self.ocif,
            "nodes": arr("nodes", self.nodes, lambda n: n.to_dict()),
            "relations": arr("relations", self.relations, lambda r: r.to_dict()),
            "resources": arr("resources", self.resources, lambda r: r.to_dict()),
            "schemas": arr("schemas", self.schemas, lambda s: s.to_dict()),
        }
        return _ordered(known, self.extra, self.key_order)


def load_document(text: str) -> Document:
    """Decode a document from OCIF JSON text."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise DocumentError(f"invalid JSON: {e}") from e
    return Document.from_dict(data)


def dump_document(document: Document, *, indent: int | None = 2) -> str:
    """Encode a document as OCIF JSON text.

    Key order, unknown keys and explicit nulls survive a decode and encode,
    so text written by this function (with the same `indent`) comes back
    unchanged. Other formatting is not kept: numbers are written the way
    Python prints them (`1.50` becomes `1.5`, `2e1` becomes `20.0`) and
    whitespace follows `indent`. `indent=None` writes compact JSON with no
    spaces after separators; see `detect_indent` to match a source file.
    """
    if indent is None:
        return json.dumps(document.to_dict(), separators=(",", ":"), ensure_ascii=False)
    return json.dumps(document.to_dict(), indent=indent, ensure_ascii=False)


def detect_indent(text: str) -> int | None:
    """Indent width used by JSON text, or None when it is written on one line."""
    for line in text.splitlines()[1:]:
        stripped = line.lstrip(" ")
        if stripped:
            return len(line) - len(stripped) or None
    return None
