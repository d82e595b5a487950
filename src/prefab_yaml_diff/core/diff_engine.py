"""
Structural diff engine.

Pairs the records of two versions of a Unity file, compares paired trees
field by field and reports the result against the object hierarchy.
"""

import logging
import re
from collections import deque
from dataclasses import dataclass, replace
from typing import Optional

from prefab_yaml_diff.core.class_ids import (
    is_object_kind,
    is_script_kind,
    is_transform_kind,
)
from prefab_yaml_diff.core.graph import build_graph
from prefab_yaml_diff.core.noise import NoiseFilter
from prefab_yaml_diff.core.parser import parse_records
from prefab_yaml_diff.core.resolve import (
    NameResolver,
    decorate_differences,
    resolve_type_names,
)
from prefab_yaml_diff.core.tree_diff import diff_trees
from prefab_yaml_diff.core.unity_model import (
    ChangeKind,
    Difference,
    DiffResult,
    DiffSummary,
    ObjectGraph,
    Record,
)

logger = logging.getLogger(__name__)

WHOLE_RECORD_FIELD = "<document>"
CHILDREN_FIELD = "/m_Children["
HIERARCHY_COMPONENT = "Hierarchy"
PARENT_FIELD = "parent"
ROOT_LABEL = "(root)"

INLINE_FILE_ID = re.compile(r"fileID:\s*(-?\d+)")


@dataclass
class DiffOptions:
    """Post-processing switches for DiffEngine."""
    filter_noise: bool = True
    detect_moves: bool = True
    resolve_child_names: bool = True
    max_value_length: Optional[int] = 200  # None keeps values untrimmed


def stable_key(record: Record) -> Optional[tuple]:
    """
    Secondary key used to re-pair records whose fileID changed between saves.

    GameObjects have no stable key: names collide too often to be trusted.
    """
    if record.is_placeholder or is_object_kind(record.kind):
        return None

    owner = record.owner_object_identity or 0
    if is_transform_kind(record.kind):
        return ("transform", record.kind, owner) if owner else None

    if is_script_kind(record.kind) and record.script_identity:
        return ("script", owner, record.script_identity)

    return ("component", owner, record.kind, record.type_name)


def trim_value(value: Optional[str], max_length: int) -> Optional[str]:
    """Shorten multi-line or very long values for display."""
    if not value:
        return value
    newline = value.find("\n")
    if len(value) <= max_length and newline < 0:
        return value
    if 0 <= newline < max_length:
        return value[:newline] + "..."
    if len(value) > max_length:
        return value[: max(max_length - 3, 0)] + "..."
    return value.strip()


def _child_identity(value: Optional[str]) -> int:
    """fileID of a rendered reference like "{fileID: 12345}", or 0."""
    match = INLINE_FILE_ID.search(value or "")
    return int(match.group(1)) if match else 0


class DiffEngine:
    """Compares the records of two versions of a Unity file."""

    def __init__(self, options: Optional[DiffOptions] = None):
        self.options = options or DiffOptions()
        self._noise = NoiseFilter()

    def diff(
        self,
        old_records: list[Record],
        new_records: list[Record],
        old_graph: ObjectGraph,
        new_graph: ObjectGraph,
    ) -> list[Difference]:
        """
        Compute the differences between two record sets.

        Args:
            old_records: Records of the old version
            new_records: Records of the new version
            old_graph: Hierarchy graph built from old_records
            new_graph: Hierarchy graph built from new_records

        Returns:
            Field-level changes of paired records, followed by whole-record
            removals and additions, then detected moves
        """
        differences: list[Difference] = []
        paired_old: set[int] = set()
        paired_new: set[int] = set()

        new_by_id: dict[int, int] = {}
        for index, record in enumerate(new_records):
            new_by_id.setdefault(record.identity, index)

        # Stage 1: exact fileID matches
        for old_index, old_record in enumerate(old_records):
            new_index = new_by_id.get(old_record.identity)
            if new_index is None or new_index in paired_new:
                continue
            self._diff_pair(old_record, new_records[new_index], new_graph, differences)
            paired_old.add(old_index)
            paired_new.add(new_index)

        # Stage 2: re-identification of records whose fileID changed
        unpaired_by_key: dict[tuple, deque[int]] = {}
        for old_index, old_record in enumerate(old_records):
            if old_index in paired_old:
                continue
            key = stable_key(old_record)
            if key is not None:
                unpaired_by_key.setdefault(key, deque()).append(old_index)

        for new_index, new_record in enumerate(new_records):
            if new_index in paired_new:
                continue
            key = stable_key(new_record)
            candidates = unpaired_by_key.get(key) if key is not None else None
            if not candidates:
                continue
            old_index = candidates.popleft()
            logger.debug(
                "Re-identified &%d as &%d (%s)",
                old_records[old_index].identity,
                new_record.identity,
                new_record.type_name,
            )
            self._diff_pair(old_records[old_index], new_record, new_graph, differences)
            paired_old.add(old_index)
            paired_new.add(new_index)

        # Stage 3: remaining old records were removed
        removed = [
            record for index, record in enumerate(old_records) if index not in paired_old
        ]
        for record in removed:
            differences.append(self._whole_record(record, ChangeKind.REMOVED, old_graph))

        # Stage 4: remaining new records were added
        added = [
            record for index, record in enumerate(new_records) if index not in paired_new
        ]
        for record in added:
            differences.append(self._whole_record(record, ChangeKind.ADDED, new_graph))

        if self.options.filter_noise:
            redundant = [
                (ChangeKind.REMOVED, record.identity)
                for record in removed
                if self._noise.is_component_list_only(record)
            ] + [
                (ChangeKind.ADDED, record.identity)
                for record in added
                if self._noise.is_component_list_only(record)
            ]
            differences = self._noise.apply(differences, redundant)

        if self.options.detect_moves:
            differences = self._detect_moves(differences, old_graph, new_graph)

        if self.options.resolve_child_names:
            differences = self._resolve_child_names(differences, old_graph, new_graph)

        if self.options.max_value_length:
            limit = self.options.max_value_length
            differences = [
                replace(
                    diff,
                    old_value=trim_value(diff.old_value, limit),
                    new_value=trim_value(diff.new_value, limit),
                )
                for diff in differences
            ]

        return differences

    # --- Record-level diffing ---

    def _diff_pair(
        self,
        old_record: Record,
        new_record: Record,
        graph: ObjectGraph,
        out: list[Difference],
    ) -> None:
        # Stripped documents have no meaningful body to diff
        if old_record.is_placeholder or new_record.is_placeholder:
            return
        if old_record.tree is None or new_record.tree is None:
            logger.debug("Skipping &%d: body could not be parsed", new_record.identity)
            return

        old_content, new_content = old_record.content, new_record.content
        if old_content is None or new_content is None:
            old_content, new_content = old_record.tree, new_record.tree

        try:
            changes = diff_trees(old_content, new_content)
        except Exception:
            logger.exception(
                "Failed to diff !u!%d &%d", new_record.kind, new_record.identity
            )
            return
        if not changes:
            return

        label = None if is_object_kind(new_record.kind) else new_record.type_name
        hierarchy_path = graph.hierarchy_path(new_record.identity, label)
        owner_name = graph.owner_name(new_record.identity)

        for change in changes:
            out.append(
                Difference(
                    change_kind=change.change_kind,
                    component_type=new_record.type_name,
                    field_path=change.field_path,
                    hierarchy_path=hierarchy_path,
                    old_value=change.old_value,
                    new_value=change.new_value,
                    owner_object_name=owner_name,
                    record_identity=new_record.identity,
                    kind=new_record.kind,
                )
            )

    def _whole_record(
        self, record: Record, change_kind: ChangeKind, graph: ObjectGraph
    ) -> Difference:
        label = None if is_object_kind(record.kind) else record.type_name
        removed = change_kind is ChangeKind.REMOVED
        return Difference(
            change_kind=change_kind,
            component_type=record.type_name,
            field_path=WHOLE_RECORD_FIELD,
            hierarchy_path=graph.hierarchy_path(record.identity, label),
            old_value=record.raw_text if removed else None,
            new_value=None if removed else record.raw_text,
            owner_object_name=graph.owner_name(record.identity),
            is_whole_record_change=True,
            record_identity=record.identity,
            kind=record.kind,
        )

    # --- Move detection ---

    def _child_reference(self, diff: Difference) -> int:
        if diff.kind is None or not is_transform_kind(diff.kind):
            return 0
        if CHILDREN_FIELD not in diff.field_path:
            return 0
        if diff.change_kind is ChangeKind.ADDED:
            return _child_identity(diff.new_value)
        if diff.change_kind is ChangeKind.REMOVED:
            return _child_identity(diff.old_value)
        return 0

    def _detect_moves(
        self,
        differences: list[Difference],
        old_graph: ObjectGraph,
        new_graph: ObjectGraph,
    ) -> list[Difference]:
        """
        Replace a child removed from one parent's m_Children and added to
        another's with a single "moved" difference.
        """
        added: list[tuple[int, Difference, int]] = []
        removed: list[tuple[int, Difference, int]] = []
        for index, diff in enumerate(differences):
            child = self._child_reference(diff)
            if not child:
                continue
            if diff.change_kind is ChangeKind.ADDED:
                added.append((index, diff, child))
            else:
                removed.append((index, diff, child))

        if not added or not removed:
            return differences

        consumed: set[int] = set()
        moves: list[Difference] = []
        for add_index, add_diff, child in added:
            for remove_index, remove_diff, removed_child in removed:
                if remove_index in consumed or removed_child != child:
                    continue

                object_name = (
                    new_graph.transform_name(child)
                    or old_graph.transform_name(child)
                    or f"Object({child})"
                )
                moves.append(
                    Difference(
                        change_kind=ChangeKind.MOVED,
                        component_type=HIERARCHY_COMPONENT,
                        field_path=PARENT_FIELD,
                        hierarchy_path=new_graph.transform_path(child) or object_name,
                        old_value=remove_diff.owner_object_name or ROOT_LABEL,
                        new_value=add_diff.owner_object_name or ROOT_LABEL,
                        owner_object_name=object_name,
                        record_identity=child,
                    )
                )
                consumed.add(add_index)
                consumed.add(remove_index)
                break

        if not moves:
            return differences
        kept = [diff for index, diff in enumerate(differences) if index not in consumed]
        return kept + moves

    # --- Value decoration ---

    def _child_name(
        self, value: Optional[str], primary: ObjectGraph, secondary: ObjectGraph
    ) -> Optional[str]:
        child = _child_identity(value)
        if not child:
            return value
        return primary.transform_name(child) or secondary.transform_name(child) or value

    def _resolve_child_names(
        self,
        differences: list[Difference],
        old_graph: ObjectGraph,
        new_graph: ObjectGraph,
    ) -> list[Difference]:
        """Show m_Children entries as object names instead of {fileID: N}."""
        resolved = []
        for diff in differences:
            if diff.change_kind is not ChangeKind.MOVED and CHILDREN_FIELD in diff.field_path:
                diff = replace(
                    diff,
                    old_value=self._child_name(diff.old_value, old_graph, new_graph),
                    new_value=self._child_name(diff.new_value, new_graph, old_graph),
                )
            resolved.append(diff)
        return resolved


def diff_records(
    old_records: list[Record],
    new_records: list[Record],
    old_graph: ObjectGraph,
    new_graph: ObjectGraph,
    options: Optional[DiffOptions] = None,
) -> list[Difference]:
    """
    Convenience function to diff two record sets.

    Args:
        old_records: Records of the old version
        new_records: Records of the new version
        old_graph: Hierarchy graph of the old version
        new_graph: Hierarchy graph of the new version
        options: Post-processing options

    Returns:
        List of differences
    """
    return DiffEngine(options).diff(old_records, new_records, old_graph, new_graph)


def compare_texts(
    old_text: str,
    new_text: str,
    resolver: Optional[NameResolver] = None,
    options: Optional[DiffOptions] = None,
) -> DiffResult:
    """
    Run the whole pipeline on two versions of a Unity file.

    Args:
        old_text: Content of the old version
        new_text: Content of the new version
        resolver: Optional resolver for script and asset names
        options: Post-processing options

    Returns:
        DiffResult with both graphs, the differences and a summary
    """
    old_records = resolve_type_names(parse_records(old_text), resolver)
    new_records = resolve_type_names(parse_records(new_text), resolver)
    old_graph = build_graph(old_records)
    new_graph = build_graph(new_records)

    differences = DiffEngine(options).diff(old_records, new_records, old_graph, new_graph)
    differences = decorate_differences(differences, resolver)
    logger.info(
        "Compared %d old and %d new records: %d differences",
        len(old_records),
        len(new_records),
        len(differences),
    )
    return DiffResult(
        old_graph=old_graph,
        new_graph=new_graph,
        differences=differences,
        summary=DiffSummary.from_differences(differences),
    )
