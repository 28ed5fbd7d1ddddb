"""Read-only lookups over a document snapshot.

Every query is a direct scan of the relevant collection. Canvas documents
are small enough that building index structures is not worth the extra
state, so nothing here caches.
"""

from __future__ import annotations

from typing import Any, Mapping

from .models import Document, Extension, Node, Relation, Resource


class GraphIndex:
    """Lookup facade handed to rules as their context."""

    def __init__(self, document: Document, options: Mapping[str, Any] | None = None):
        self.document = document
        self.options: Mapping[str, Any] = dict(options or {})

    def get_node(self, node_id: str) -> Node | None:
        for node in self.document.nodes:
            if node.id == node_id:
                return node
        return None

    def get_relation(self, relation_id: str) -> Relation | None:
        for relation in self.document.relations:
            if relation.id == relation_id:
                return relation
        return None

    def get_resource(self, resource_id: str) -> Resource | None:
        for resource in self.document.resources:
            if resource.id == resource_id:
                return resource
        return None

    def has_extension(self, element: Node | Relation, type_name: str) -> bool:
        return any(ext.type == type_name for ext in element.data)

    def get_extension(self, element: Node | Relation, type_name: str) -> Any:
        """First extension of the given type, as its typed view when one is registered."""
        for ext in element.data:
            if ext.type == type_name:
                return ext.typed()
        return None

    def get_raw_extension(self, element: Node | Relation, type_name: str) -> Extension | None:
        for ext in element.data:
            if ext.type == type_name:
                return ext
        return None

    def all_ids(self) -> set[str]:
        """Every id used by a node, relation or resource."""
        ids: set[str] = set()
        ids.update(n.id for n in self.document.nodes)
        ids.update(r.id for r in self.document.relations)
        ids.update(r.id for r in self.document.resources)
        return ids

    def id_exists(self, element_id: str) -> bool:
        return (
            self.get_node(element_id) is not None
            or self.get_relation(element_id) is not None
            or self.get_resource(element_id) is not None
        )

    def option(self, key: str, default: Any = None) -> Any:
        return self.options.get(key, default)
