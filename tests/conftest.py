"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from canvaslint.models import Document, Extension, Node, Relation, Resource, load_document


@pytest.fixture
def fixture_canvas_path() -> Path:
    """Path to the sample canvas document."""
    return Path(__file__).parent / "fixtures" / "canvas.json"


@pytest.fixture
def fixture_canvas(fixture_canvas_path: Path) -> Document:
    """Load the sample canvas document."""
    return load_document(fixture_canvas_path.read_text(encoding="utf-8"))


def make_node(node_id: str, position=None, size=None, **kwargs) -> Node:
    return Node(
        id=node_id,
        position=tuple(position) if position is not None else None,
        size=tuple(size) if size is not None else None,
        **kwargs,
    )


def make_edge(relation_id: str, start: str, end: str) -> Relation:
    return Relation(id=relation_id, data=(Extension({"type": "@ocif/rel/edge", "start": start, "end": end}),))


def make_relation(relation_id: str, **props) -> Relation:
    return Relation(id=relation_id, data=(Extension(dict(props)),))


def make_document(nodes=(), relations=(), resources=()) -> Document:
    return Document(nodes=tuple(nodes), relations=tuple(relations), resources=tuple(resources))


def make_resource(resource_id: str, text: str = "hello") -> Resource:
    return Resource.from_dict(
        {"id": resource_id, "representations": [{"mimeType": "text/plain", "content": text}]}
    )
