"""
Unity data models for representing parsed records, the object hierarchy
and the differences between two versions of a file.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional, Union

from prefab_yaml_diff.core.class_ids import get_type_name, is_object_kind


# === Generic tree ===

@dataclass(frozen=True)
class Scalar:
    """A leaf value. Text is kept verbatim, numbers are never interpreted."""
    text: str

    def __repr__(self) -> str:
        return f"Scalar({self.text!r})"


@dataclass(frozen=True)
class Mapping:
    """An ordered mapping with unique keys."""
    items: tuple[tuple[str, "TreeNode"], ...] = ()
    _index: dict = field(
        default=None, init=False, repr=False, compare=False, hash=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "_index", dict(self.items))

    def get(self, key: str, default: Optional["TreeNode"] = None) -> Optional["TreeNode"]:
        return self._index.get(key, default)

    def keys(self) -> list[str]:
        return [key for key, _ in self.items]

    def values(self) -> list["TreeNode"]:
        return [value for _, value in self.items]

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class Sequence:
    """An ordered list of tree nodes."""
    elements: tuple["TreeNode", ...] = ()

    def __iter__(self) -> Iterator["TreeNode"]:
        return iter(self.elements)

    def __getitem__(self, index: int) -> "TreeNode":
        return self.elements[index]

    def __len__(self) -> int:
        return len(self.elements)


TreeNode = Union[Scalar, Mapping, Sequence]


def to_text(node: Optional[TreeNode]) -> Optional[str]:
    """
    Render a tree node for display.

    Examples:
        Scalar("5") -> 5
        {fileID: 11} mapping -> "{fileID: 11}"
        sequence of two scalars -> "[a, b]"
    """
    if node is None:
        return None
    if isinstance(node, Scalar):
        return node.text
    if isinstance(node, Mapping):
        inner = ", ".join(f"{key}: {to_text(value)}" for key, value in node.items)
        return "{" + inner + "}"
    return "[" + ", ".join(to_text(element) for element in node.elements) + "]"


def reference_identity(node: Optional[TreeNode]) -> Optional[int]:
    """Read ``fileID`` from an inline reference like ``{fileID: 123, guid: ...}``."""
    if not isinstance(node, Mapping):
        return None
    value = node.get("fileID")
    if not isinstance(value, Scalar):
        return None
    try:
        return int(value.text)
    except ValueError:
        return None


def read_reference(mapping: Optional[Mapping], key: str) -> int:
    """Identity referenced by ``mapping[key]``, or 0 when absent or malformed."""
    if mapping is None:
        return 0
    return reference_identity(mapping.get(key)) or 0


def read_scalar(mapping: Optional[Mapping], key: str) -> Optional[str]:
    """Scalar text stored under ``key``, or None."""
    if mapping is None:
        return None
    value = mapping.get(key)
    if isinstance(value, Scalar):
        return value.text
    return None


# === Records ===

@dataclass(frozen=True)
class RecordHeader:
    """Parsed ``--- !u!<kind> &<identity> [stripped]`` line."""
    kind: int
    identity: int
    is_placeholder: bool = False


@dataclass(frozen=True)
class Record:
    """One document of a Unity YAML file."""
    header: RecordHeader
    type_name: str  # "Transform", "MonoBehaviour", ...
    raw_text: str
    tree: Optional[TreeNode] = field(default=None, repr=False)
    owner_object_identity: Optional[int] = None  # m_GameObject of a component
    script_identity: Optional[str] = None  # m_Script guid of a MonoBehaviour

    @property
    def identity(self) -> int:
        return self.header.identity

    @property
    def kind(self) -> int:
        return self.header.kind

    @property
    def is_placeholder(self) -> bool:
        return self.header.is_placeholder

    @property
    def content(self) -> Optional[Mapping]:
        """
        The mapping under the record's top-level type key.

        For a Transform record with root key "Transform:", returns the
        mapping under that key. Falls back to the class ID table name and
        then to the only top-level value.
        """
        if not isinstance(self.tree, Mapping):
            return None
        for key in (self.type_name, get_type_name(self.kind)):
            value = self.tree.get(key)
            if isinstance(value, Mapping):
                return value
        if len(self.tree) == 1:
            only = self.tree.items[0][1]
            if isinstance(only, Mapping):
                return only
        return None

    def __repr__(self) -> str:
        return f"Record({self.type_name}, fileID={self.identity})"


# === Hierarchy graph ===

@dataclass
class ObjectInfo:
    """A GameObject record and the components it lists."""
    identity: int
    name: str
    component_identities: list[int] = field(default_factory=list)


@dataclass
class ComponentInfo:
    """A non-GameObject record attached to (or standing beside) an object."""
    identity: int
    kind: int
    type_name: str
    owner_object_identity: int = 0


@dataclass(eq=False)
class GraphNode:
    """One position in the transform hierarchy."""
    display_name: str
    object_identity: int
    transform_identity: int
    component_identities: list[int] = field(default_factory=list)
    children: list["GraphNode"] = field(default_factory=list)

    def iter_descendants(self) -> Iterator["GraphNode"]:
        """Iterate over all descendants (depth-first)."""
        for child in self.children:
            yield child
            yield from child.iter_descendants()

    def __repr__(self) -> str:
        return f"GraphNode({self.display_name!r}, transform={self.transform_identity})"


@dataclass
class ObjectGraph:
    """
    Reconstructed object hierarchy of one file version.

    Parents are looked up through ``child_to_parent_transform`` so that
    building a path costs O(depth).
    """
    roots: list[GraphNode] = field(default_factory=list)
    objects: dict[int, ObjectInfo] = field(default_factory=dict)
    components: dict[int, ComponentInfo] = field(default_factory=dict)
    component_to_object: dict[int, int] = field(default_factory=dict)
    transform_to_node: dict[int, GraphNode] = field(default_factory=dict)
    object_to_node: dict[int, GraphNode] = field(default_factory=dict)
    child_to_parent_transform: dict[int, int] = field(default_factory=dict)

    def iter_nodes(self) -> Iterator[GraphNode]:
        """Iterate over every node reachable from the roots."""
        for root in self.roots:
            yield root
            yield from root.iter_descendants()

    def node_for_record(self, identity: int) -> Optional[GraphNode]:
        """Find the hierarchy node a record (object, component or transform) belongs to."""
        object_identity = 0
        component = self.components.get(identity)
        if component and component.owner_object_identity:
            object_identity = component.owner_object_identity
        elif identity in self.objects:
            object_identity = identity

        node = self.object_to_node.get(object_identity) if object_identity else None
        if node is None:
            # Maybe the record is a transform
            node = self.transform_to_node.get(identity)
        return node

    def owner_name(self, identity: int) -> Optional[str]:
        """Name of the GameObject that owns (or is) the given record."""
        component = self.components.get(identity)
        if component:
            owner = self.objects.get(component.owner_object_identity)
            if owner:
                return owner.name
        obj = self.objects.get(identity)
        return obj.name if obj else None

    def path_to_root(self, node: GraphNode) -> list[str]:
        """Names from the root down to ``node``."""
        names = [node.display_name]
        seen = {node.transform_identity}
        transform_identity = node.transform_identity
        while True:
            parent_identity = self.child_to_parent_transform.get(transform_identity)
            if parent_identity is None or parent_identity in seen:
                break
            parent = self.transform_to_node.get(parent_identity)
            if parent is None:
                break
            names.append(parent.display_name)
            seen.add(parent_identity)
            transform_identity = parent_identity
        names.reverse()
        return names

    def hierarchy_path(self, identity: int, component_label: Optional[str] = None) -> str:
        """
        Get the hierarchy path of a record like 'Root/Child (Rigidbody)'.

        Args:
            identity: fileID of the record
            component_label: Type name appended in parentheses, None for
                object-level records

        Returns:
            The path, or just the label when the record is not in the hierarchy
        """
        node = self.node_for_record(identity)
        if node is None:
            return component_label or ""
        path = "/".join(self.path_to_root(node))
        return f"{path} ({component_label})" if component_label else path

    def transform_name(self, transform_identity: int) -> Optional[str]:
        node = self.transform_to_node.get(transform_identity)
        return node.display_name if node else None

    def transform_path(self, transform_identity: int) -> Optional[str]:
        node = self.transform_to_node.get(transform_identity)
        if node is None:
            return None
        return "/".join(self.path_to_root(node))

    def __repr__(self) -> str:
        return f"ObjectGraph(roots={len(self.roots)}, nodes={len(self.transform_to_node)})"


# === Diff related models ===

class ChangeKind(Enum):
    """Kind of a reported difference."""
    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"
    MOVED = "moved"

    def inverse(self) -> "ChangeKind":
        """The kind seen when old and new are swapped."""
        if self is ChangeKind.ADDED:
            return ChangeKind.REMOVED
        if self is ChangeKind.REMOVED:
            return ChangeKind.ADDED
        return self


@dataclass(frozen=True)
class Difference:
    """A single change between two versions."""
    change_kind: ChangeKind
    component_type: str
    field_path: str  # Path inside the record like "/m_LocalPosition/x"
    hierarchy_path: str  # Like "Player/Body (Transform)"
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    owner_object_name: Optional[str] = None
    is_whole_record_change: bool = False
    record_identity: Optional[int] = None
    kind: Optional[int] = None

    @property
    def is_object_level(self) -> bool:
        return self.kind is not None and is_object_kind(self.kind)


@dataclass
class DiffSummary:
    """Summary statistics for a diff."""
    added: int = 0
    removed: int = 0
    modified: int = 0
    moved: int = 0
    added_records: int = 0
    removed_records: int = 0

    @classmethod
    def from_differences(cls, differences: list[Difference]) -> "DiffSummary":
        summary = cls()
        for diff in differences:
            if diff.change_kind is ChangeKind.ADDED:
                summary.added += 1
                if diff.is_whole_record_change:
                    summary.added_records += 1
            elif diff.change_kind is ChangeKind.REMOVED:
                summary.removed += 1
                if diff.is_whole_record_change:
                    summary.removed_records += 1
            elif diff.change_kind is ChangeKind.MODIFIED:
                summary.modified += 1
            else:
                summary.moved += 1
        return summary

    @property
    def total(self) -> int:
        return self.added + self.removed + self.modified + self.moved


@dataclass
class DiffResult:
    """Result of comparing two versions of a Unity file."""
    old_graph: ObjectGraph
    new_graph: ObjectGraph
    differences: list[Difference] = field(default_factory=list)
    summary: DiffSummary = field(default_factory=DiffSummary)

    @property
    def has_differences(self) -> bool:
        return bool(self.differences)
