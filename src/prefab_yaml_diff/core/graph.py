"""
Hierarchy graph construction.

Rebuilds the GameObject/Transform tree of one file version from its flat
list of records.
"""

import logging
from typing import Optional

from prefab_yaml_diff.core.class_ids import (
    is_instance_kind,
    is_object_kind,
    is_transform_kind,
    transform_key,
)
from prefab_yaml_diff.core.unity_model import (
    ComponentInfo,
    GraphNode,
    Mapping,
    ObjectGraph,
    ObjectInfo,
    Record,
    Sequence,
    TreeNode,
    read_reference,
    read_scalar,
    reference_identity,
)

logger = logging.getLogger(__name__)

NESTED_PREFAB_LABEL = "(Nested Prefab)"


def _component_entry_identity(entry: TreeNode) -> int:
    """
    Extract the fileID from an entry of a GameObject's m_Component array.

    Handles both formats:
        - Old: {4: {fileID: 8}}
        - New: {component: {fileID: 8}}
    """
    if not isinstance(entry, Mapping):
        return 0
    if "component" in entry:
        return reference_identity(entry.get("component")) or 0
    for value in entry.values():
        identity = reference_identity(value)
        if identity:
            return identity
    return 0


class GraphBuilder:
    """Builds an ObjectGraph from parsed records."""

    def build(self, records: list[Record]) -> ObjectGraph:
        """
        Build the hierarchy graph.

        Args:
            records: Records of one file version

        Returns:
            ObjectGraph whose roots reach every transform node
        """
        graph = ObjectGraph()
        self._collect_objects_and_components(records, graph)
        self._build_transform_nodes(records, graph)
        self._wire_parent_child(records, graph)
        self._reconcile_roots(graph)
        return graph

    def _collect_objects_and_components(self, records: list[Record], graph: ObjectGraph) -> None:
        for record in records:
            if is_object_kind(record.kind):
                content = record.content
                name = read_scalar(content, "m_Name")
                obj = ObjectInfo(
                    identity=record.identity,
                    name=name if name is not None else f"GameObject({record.identity})",
                )
                components = content.get("m_Component") if content is not None else None
                if isinstance(components, Sequence):
                    for entry in components:
                        component_identity = _component_entry_identity(entry)
                        if component_identity:
                            obj.component_identities.append(component_identity)
                graph.objects[record.identity] = obj

            elif not record.is_placeholder and not is_instance_kind(record.kind):
                component = ComponentInfo(
                    identity=record.identity,
                    kind=record.kind,
                    type_name=record.type_name,
                    owner_object_identity=record.owner_object_identity or 0,
                )
                graph.components[record.identity] = component
                if component.owner_object_identity:
                    graph.component_to_object[record.identity] = component.owner_object_identity

    def _transform_content(self, record: Record) -> Optional[Mapping]:
        if not isinstance(record.tree, Mapping):
            return None
        # Use the key matching the class ID (Transform vs RectTransform)
        content = record.tree.get(transform_key(record.kind))
        if isinstance(content, Mapping):
            return content
        return record.content

    def _build_transform_nodes(self, records: list[Record], graph: ObjectGraph) -> None:
        for record in records:
            if not is_transform_kind(record.kind):
                continue

            if record.is_placeholder:
                self._add_placeholder_node(record, graph)
                continue

            content = self._transform_content(record)
            if content is None:
                logger.debug("Transform &%d has no readable body", record.identity)
                continue

            object_identity = record.owner_object_identity or read_reference(content, "m_GameObject")
            obj = graph.objects.get(object_identity) if object_identity else None
            if obj is None:
                logger.debug(
                    "Transform &%d references missing GameObject &%d",
                    record.identity,
                    object_identity,
                )
                continue

            node = GraphNode(
                display_name=obj.name,
                object_identity=object_identity,
                transform_identity=record.identity,
                component_identities=[
                    identity for identity in obj.component_identities if identity != record.identity
                ],
            )
            graph.transform_to_node[record.identity] = node
            graph.object_to_node[object_identity] = node

    def _add_placeholder_node(self, record: Record, graph: ObjectGraph) -> None:
        """Stripped transforms stand in for nested prefab objects; keep the tree connected."""
        owner = record.owner_object_identity or 0
        obj = graph.objects.get(owner) if owner else None
        node = GraphNode(
            display_name=obj.name if obj else NESTED_PREFAB_LABEL,
            object_identity=owner,
            transform_identity=record.identity,
        )
        graph.transform_to_node[record.identity] = node
        if owner:
            graph.object_to_node[owner] = node

    def _is_ancestor(self, graph: ObjectGraph, candidate: int, transform_identity: int) -> bool:
        """Whether ``candidate`` is ``transform_identity`` or one of its ancestors."""
        seen = set()
        current: Optional[int] = transform_identity
        while current is not None and current not in seen:
            if current == candidate:
                return True
            seen.add(current)
            current = graph.child_to_parent_transform.get(current)
        return False

    def _attach(self, graph: ObjectGraph, parent: GraphNode, child_identity: int) -> bool:
        child = graph.transform_to_node.get(child_identity)
        if child is None:
            logger.debug(
                "Transform &%d lists missing child &%d", parent.transform_identity, child_identity
            )
            return False
        if child_identity in graph.child_to_parent_transform:
            logger.debug("Transform &%d already has a parent", child_identity)
            return False
        if self._is_ancestor(graph, child_identity, parent.transform_identity):
            logger.debug(
                "Ignoring cyclic edge &%d -> &%d", parent.transform_identity, child_identity
            )
            return False
        parent.children.append(child)
        graph.child_to_parent_transform[child_identity] = parent.transform_identity
        return True

    def _wire_parent_child(self, records: list[Record], graph: ObjectGraph) -> None:
        root_ids: set[int] = {id(root) for root in graph.roots}
        fathers: list[tuple[int, int]] = []

        for record in records:
            if not is_transform_kind(record.kind) or record.is_placeholder:
                continue
            node = graph.transform_to_node.get(record.identity)
            if node is None:
                continue
            content = self._transform_content(record)
            if content is None:
                continue

            children = content.get("m_Children")
            if isinstance(children, Sequence):
                for entry in children:
                    child_identity = reference_identity(entry)
                    if child_identity:
                        self._attach(graph, node, child_identity)

            father_identity = read_reference(content, "m_Father")
            if father_identity:
                fathers.append((record.identity, father_identity))
            elif id(node) not in root_ids:
                graph.roots.append(node)
                root_ids.add(id(node))

        # Parents that do not list a child in m_Children still own it via m_Father
        for child_identity, father_identity in fathers:
            if child_identity in graph.child_to_parent_transform:
                continue
            parent = graph.transform_to_node.get(father_identity)
            if parent is None:
                logger.debug(
                    "Transform &%d references missing parent &%d", child_identity, father_identity
                )
                continue
            self._attach(graph, parent, child_identity)

    def _reconcile_roots(self, graph: ObjectGraph) -> None:
        # A transform without m_Father that some parent lists as a child is not a root
        graph.roots = [
            root for root in graph.roots
            if root.transform_identity not in graph.child_to_parent_transform
        ]

        # Any node never referenced as a child is a root (orphan safety net)
        root_ids = {id(root) for root in graph.roots}
        for transform_identity, node in graph.transform_to_node.items():
            if transform_identity in graph.child_to_parent_transform:
                continue
            if id(node) not in root_ids:
                graph.roots.append(node)
                root_ids.add(id(node))


def build_graph(records: list[Record]) -> ObjectGraph:
    """
    Convenience function to build a hierarchy graph.

    Args:
        records: Parsed records of one file version

    Returns:
        The reconstructed ObjectGraph
    """
    return GraphBuilder().build(records)
