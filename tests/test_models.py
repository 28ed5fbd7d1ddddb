from __future__ import annotations

import json

import pytest

from canvaslint import models
from canvaslint.errors import DocumentError
from canvaslint.models import (
    EDGE,
    GROUP,
    Document,
    EdgeExtension,
    Extension,
    GroupExtension,
    ParentChildExtension,
    detect_indent,
    dump_document,
    extension_kinds,
    load_document,
    register_extension_kind,
)


def _text(raw: dict) -> str:
    return json.dumps(raw, indent=2, ensure_ascii=False)


def test_round_trip_is_byte_for_byte() -> None:
    raw = {
        "ocif": "https://canvasprotocol.org/ocif/v0.6",
        "x-editor": {"zoom": 1.5},
        "nodes": [
            {
                "size": [80, 40],
                "id": "n1",
                "position": [100, 100.5, 2],
                "data": [{"type": "@ocif/node/rect", "strokeColor": "#000", "custom": [1, 2]}],
                "x-note": "kept",
            },
            {"id": "n2", "rotation": 45, "resourceFit": "contain", "relation": "g1"},
        ],
        "relations": [
            {"id": "g1", "data": [{"type": GROUP, "members": ["n1", "n2"]}], "node": "n2"},
        ],
        "resources": [
            {"id": "r1", "representations": [{"content": "Grüße", "mimeType": "text/plain", "x": 1}]},
        ],
        "schemas": [{"uri": "https://example.com/s.json", "name": "@example/s"}],
    }
    text = _text(raw)
    assert dump_document(load_document(text)) == text


def test_round_trip_keeps_explicit_nulls_and_empty_arrays() -> None:
    raw = {
        "ocif": "https://canvasprotocol.org/ocif/v0.6",
        "nodes": [{"id": "n1", "position": None, "data": []}],
        "relations": [],
        "resources": None,
    }
    text = _text(raw)
    assert dump_document(load_document(text)) == text


def test_absent_arrays_stay_absent() -> None:
    text = _text({"ocif": "https://canvasprotocol.org/ocif/v0.6", "nodes": [{"id": "n1"}]})
    assert dump_document(load_document(text)) == text


def test_indentation_follows_the_source_text() -> None:
    compact = '{"ocif":"x","nodes":[{"id":"a","position":[1.50,2e1]}]}'
    assert detect_indent(compact) is None
    assert dump_document(load_document(compact), indent=None) == '{"ocif":"x","nodes":[{"id":"a","position":[1.5,20.0]}]}'

    text = json.dumps({"ocif": "x", "nodes": [{"id": "a"}]}, indent=4)
    assert detect_indent(text) == 4
    assert dump_document(load_document(text), indent=4) == text


def test_fixture_canvas_decodes(fixture_canvas: Document) -> None:
    assert [n.id for n in fixture_canvas.nodes] == ["n1", "n2", "n3"]
    assert fixture_canvas.nodes[0].position == (100, 100)
    assert fixture_canvas.nodes[1].extra == {"x-note": {"pinned": True}}
    assert fixture_canvas.resources[0].representations[0].content == "Héllo canvas"
    assert fixture_canvas.extra == {"x-editor": {"zoom": 1.5}}
    (schema,) = fixture_canvas.schemas
    assert schema.uri == "https://example.com/schemas/note.json"
    assert schema.name == "@example/note"


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        "[]",
        '{"nodes": []}',
        '{"ocif": "x", "nodes": [{"position": [0, 0]}]}',
        '{"ocif": "x", "nodes": [{"id": "n1", "position": [0]}]}',
        '{"ocif": "x", "nodes": {"id": "n1"}}',
        '{"ocif": "x", "relations": [{"id": "r1", "data": [{"start": "a"}]}]}',
        '{"ocif": "x", "schemas": [{"name": "@example/s"}]}',
    ],
)
def test_malformed_documents_raise(text: str) -> None:
    with pytest.raises(DocumentError):
        load_document(text)


def test_extension_typed_views() -> None:
    edge = Extension({"type": EDGE, "start": "a", "end": "b", "directed": False})
    view = edge.typed()
    assert isinstance(view, EdgeExtension)
    assert (view.start, view.end, view.directed) == ("a", "b", False)

    group = Extension({"type": GROUP, "members": ["a", "b"]}).typed()
    assert isinstance(group, GroupExtension)
    assert group.members == ("a", "b")
    assert group.cascade_delete is True

    pc = Extension({"type": "@ocif/rel/parent-child", "child": "c"}).typed()
    assert isinstance(pc, ParentChildExtension)
    assert pc.parent is None

    unknown = Extension({"type": "@acme/rel/custom", "x": 1})
    assert unknown.typed() is unknown


def test_register_extension_kind(monkeypatch) -> None:
    monkeypatch.setattr(models, "_EXTENSION_KINDS", dict(models._EXTENSION_KINDS))

    class Pin:
        def __init__(self, label: str) -> None:
            self.label = label

        @classmethod
        def from_extension(cls, ext: Extension) -> "Pin":
            return cls(ext.get("label", ""))

    register_extension_kind("@test/node/pin", Pin)
    assert "@test/node/pin" in extension_kinds()
    view = Extension({"type": "@test/node/pin", "label": "here"}).typed()
    assert isinstance(view, Pin)
    assert view.label == "here"

    with pytest.raises(TypeError):
        register_extension_kind("@test/node/bad", object)


def test_extension_updates_return_new_blocks() -> None:
    ext = Extension({"type": GROUP, "members": ["a"]})
    updated = ext.with_value("members", ["a", "b"])
    assert ext.get("members") == ["a"]
    assert updated.get("members") == ["a", "b"]
    assert list(updated.without("members").properties) == ["type"]
