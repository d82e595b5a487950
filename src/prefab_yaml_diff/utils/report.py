"""
Plain-text and JSON rendering of diff results for the command line.
"""

import json

from prefab_yaml_diff.core.unity_model import ChangeKind, Difference, DiffResult, DiffSummary
from prefab_yaml_diff.utils.naming import get_component_display_name, nicify_field_path

# Status symbols
DIFF_SYMBOLS = {
    ChangeKind.ADDED: "+",
    ChangeKind.REMOVED: "-",
    ChangeKind.MODIFIED: "~",
    ChangeKind.MOVED: ">",
}


def format_difference(diff: Difference) -> str:
    """
    Format one difference as a single line.

    Examples:
        ~ Player/Body (Transform) Local Position > X: 0 -> 10
        + Player/Gun (BoxCollider) <document>
        > Player/Gun parent: Body -> Hand
    """
    symbol = DIFF_SYMBOLS[diff.change_kind]
    location = diff.hierarchy_path or get_component_display_name(diff.component_type)

    if diff.is_whole_record_change:
        return f"{symbol} {location} {diff.field_path}"

    field = nicify_field_path(diff.field_path)
    if diff.change_kind is ChangeKind.ADDED:
        return f"{symbol} {location} {field}: {diff.new_value}"
    if diff.change_kind is ChangeKind.REMOVED:
        return f"{symbol} {location} {field}: {diff.old_value}"
    return f"{symbol} {location} {field}: {diff.old_value} -> {diff.new_value}"


def format_summary(summary: DiffSummary) -> str:
    """One-line summary like '3 differences (1 added, 0 removed, 2 modified, 0 moved)'."""
    noun = "difference" if summary.total == 1 else "differences"
    return (
        f"{summary.total} {noun} "
        f"({summary.added} added, {summary.removed} removed, "
        f"{summary.modified} modified, {summary.moved} moved)"
    )


def difference_to_dict(diff: Difference) -> dict:
    return {
        "change": diff.change_kind.value,
        "component_type": diff.component_type,
        "field_path": diff.field_path,
        "hierarchy_path": diff.hierarchy_path,
        "old_value": diff.old_value,
        "new_value": diff.new_value,
        "owner": diff.owner_object_name,
        "whole_record": diff.is_whole_record_change,
        "file_id": diff.record_identity,
        "class_id": diff.kind,
    }


def differences_to_json(result: DiffResult, indent: int = 2) -> str:
    """Serialize a diff result (differences and summary) to JSON."""
    summary = result.summary
    payload = {
        "summary": {
            "total": summary.total,
            "added": summary.added,
            "removed": summary.removed,
            "modified": summary.modified,
            "moved": summary.moved,
        },
        "differences": [difference_to_dict(diff) for diff in result.differences],
    }
    return json.dumps(payload, indent=indent, ensure_ascii=False)


def format_result(result: DiffResult) -> str:
    """Format a whole diff result as text, one difference per line."""
    lines = [format_difference(diff) for diff in result.differences]
    lines.append(format_summary(result.summary))
    return "\n".join(lines)
