"""Core logic for parsing, hierarchy reconstruction and diffing."""

from prefab_yaml_diff.core.unity_model import (
    ChangeKind,
    ComponentInfo,
    Difference,
    DiffResult,
    DiffSummary,
    GraphNode,
    Mapping,
    ObjectGraph,
    ObjectInfo,
    Record,
    RecordHeader,
    Scalar,
    Sequence,
    TreeNode,
)
from prefab_yaml_diff.core.parser import (
    RecordParseError,
    RecordParser,
    parse_records,
)
from prefab_yaml_diff.core.graph import (
    GraphBuilder,
    build_graph,
)
from prefab_yaml_diff.core.tree_diff import (
    FieldChange,
    SequenceShape,
    classify_sequence,
    diff_trees,
)
from prefab_yaml_diff.core.noise import NoiseFilter
from prefab_yaml_diff.core.resolve import NameResolver
from prefab_yaml_diff.core.diff_engine import (
    DiffEngine,
    DiffOptions,
    compare_texts,
    diff_records,
    stable_key,
)

__all__ = [
    "ChangeKind",
    "ComponentInfo",
    "Difference",
    "DiffResult",
    "DiffSummary",
    "GraphNode",
    "Mapping",
    "ObjectGraph",
    "ObjectInfo",
    "Record",
    "RecordHeader",
    "Scalar",
    "Sequence",
    "TreeNode",
    "RecordParseError",
    "RecordParser",
    "parse_records",
    "GraphBuilder",
    "build_graph",
    "FieldChange",
    "SequenceShape",
    "classify_sequence",
    "diff_trees",
    "NoiseFilter",
    "NameResolver",
    "DiffEngine",
    "DiffOptions",
    "compare_texts",
    "diff_records",
    "stable_key",
]
