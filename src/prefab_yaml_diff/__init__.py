"""
prefab-yaml-diff: Structural diff for Unity YAML assets (prefabs, scenes).
"""

__version__ = "0.2.0"

from prefab_yaml_diff.core.diff_engine import DiffEngine, DiffOptions, compare_texts
from prefab_yaml_diff.core.unity_model import (
    ChangeKind,
    Difference,
    DiffResult,
    DiffSummary,
    ObjectGraph,
    Record,
)

__all__ = [
    "ChangeKind",
    "Difference",
    "DiffEngine",
    "DiffOptions",
    "DiffResult",
    "DiffSummary",
    "ObjectGraph",
    "Record",
    "compare_texts",
]
