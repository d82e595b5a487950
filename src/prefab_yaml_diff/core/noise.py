"""
Noise filtering for diff results.

Unity rewrites a lot of bookkeeping on every save (hide flags, prefab
instance links, serialized versions). Those changes are dropped so that
only user-visible state is reported.
"""

import re
from decimal import Decimal
from itertools import chain
from typing import Iterable, Optional

from prefab_yaml_diff.core.class_ids import is_object_kind
from prefab_yaml_diff.core.unity_model import ChangeKind, Difference, Record

NUMBER_PATTERN = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")
PLAIN_INTEGER_PATTERN = re.compile(r"-?\d+")


def are_numerically_equal(a: Optional[str], b: Optional[str]) -> bool:
    """Check if two values are the same number written differently ("0" vs "-0", "1.0" vs "1")."""
    if not a or not b:
        return False
    a, b = a.strip(), b.strip()
    if not NUMBER_PATTERN.fullmatch(a) or not NUMBER_PATTERN.fullmatch(b):
        return False
    return Decimal(a) == Decimal(b)


def is_plain_number(value: Optional[str]) -> bool:
    return bool(value) and PLAIN_INTEGER_PATTERN.fullmatch(value.strip()) is not None


def _matches_field(path: str, field_path: str) -> bool:
    """Segment-aware, case-insensitive prefix match ("/m_Father" does not match "/m_FatherX")."""
    path = path.casefold()
    field_path = field_path.casefold()
    return (
        path == field_path
        or path.startswith(field_path + "/")
        or path.startswith(field_path + "[")
    )


class NoiseFilter:
    """Drops serializer bookkeeping from a list of differences."""

    # Top-level fields that never carry user-visible state
    NOISY_FIELDS = (
        "/m_ObjectHideFlags",
        "/m_EditorHideFlags",
        "/m_CorrespondingSourceObject",
        "/m_PrefabInstance",
        "/m_PrefabAsset",
        "/serializedVersion",
        "/m_GameObject",
        "/m_Father",
        "/m_RootOrder",
        "/m_LocalEulerAnglesHint",
    )

    # PrefabInstance override bookkeeping and source prefab tracking
    NOISY_PREFIXES = (
        "/m_Modification/m_TransformParent",
        "/m_Modification/m_Modifications",
        "/m_Modification/m_RemovedComponents",
        "/m_Modification/m_RemovedGameObjects",
        "/m_Modification/m_AddedComponents",
        "/m_Modification/m_AddedGameObjects",
        "/m_SourcePrefab",
        "/m_ParentPrefab",
    )

    COMPONENT_LIST_FIELD = "/m_Component"

    def is_noisy_path(self, field_path: str) -> bool:
        return any(
            _matches_field(field_path, noisy)
            for noisy in chain(self.NOISY_FIELDS, self.NOISY_PREFIXES)
        )

    def is_component_list_only(self, record: Record) -> bool:
        """Whether an object record holds nothing but its m_Component list."""
        if not is_object_kind(record.kind):
            return False
        content = record.content
        if content is None:
            return False
        keys = {key for key in content.keys() if not self.is_noisy_path(f"/{key}")}
        return keys == {"m_Component"}

    def is_noise(self, diff: Difference) -> bool:
        path = diff.field_path
        if diff.is_whole_record_change or not path:
            return False

        # Component list changes are already reported per component
        if diff.is_object_level and _matches_field(path, self.COMPONENT_LIST_FIELD):
            return True

        if self.is_noisy_path(path):
            return True

        if diff.change_kind is ChangeKind.MODIFIED:
            if are_numerically_equal(diff.old_value, diff.new_value):
                return True
            # Internal ID churn inside a reference, e.g. /m_Materials[0]/fileID
            if path.endswith("/fileID") and is_plain_number(diff.old_value) and is_plain_number(diff.new_value):
                return True

        return False

    def apply(
        self,
        differences: list[Difference],
        redundant_records: Iterable[tuple[ChangeKind, int]] = (),
    ) -> list[Difference]:
        """
        Filter a list of differences.

        Args:
            differences: Differences to filter
            redundant_records: (change kind, identity) of whole-record
                changes to drop, see is_component_list_only()

        Returns:
            The differences that are not noise, in their original order
        """
        redundant = set(redundant_records)
        kept = []
        for diff in differences:
            if diff.is_whole_record_change and (diff.change_kind, diff.record_identity) in redundant:
                continue
            if self.is_noise(diff):
                continue
            kept.append(diff)
        return kept
