"""
Recursive comparison of two record trees.

Field paths use ``/key`` for mapping members and ``[i]`` for sequence
elements, e.g. ``/m_LocalPosition/x`` or ``/m_Children[2]``. Elements matched
by name or by reference are addressed by their key instead of their index.
"""

from dataclasses import dataclass
from enum import Enum
from itertools import chain
from typing import Callable, Optional

from prefab_yaml_diff.core.unity_model import (
    ChangeKind,
    Mapping,
    Scalar,
    Sequence,
    TreeNode,
    read_scalar,
    to_text,
)


@dataclass(frozen=True)
class FieldChange:
    """A change found inside one record."""
    change_kind: ChangeKind
    field_path: str
    old_value: Optional[str] = None
    new_value: Optional[str] = None


class SequenceShape(Enum):
    """How the elements of a pair of sequences are matched."""
    REFERENCE = "reference"  # {fileID: N} entries, matched by identity
    NAMED = "named"  # mappings with a "name" field, matched by name
    OPAQUE = "opaque"  # matched by index


def _inline_reference_key(mapping: Mapping) -> Optional[str]:
    file_id = mapping.get("fileID")
    if not isinstance(file_id, Scalar):
        return None
    guid = read_scalar(mapping, "guid")
    return f"{file_id.text}:{guid}" if guid else file_id.text


def reference_key(node: TreeNode) -> Optional[str]:
    """
    Matching key of a reference-shaped element.

    Examples:
        {fileID: 11} -> "11"
        {fileID: 2100000, guid: abc, type: 2} -> "2100000:abc"
        {component: {fileID: 8}} -> "8"
    """
    if not isinstance(node, Mapping):
        return None
    key = _inline_reference_key(node)
    if key is not None:
        return key
    # Entries wrapping a reference, like m_Component items
    for value in node.values():
        if isinstance(value, Mapping):
            key = _inline_reference_key(value)
            if key is not None:
                return key
    return None


def element_name(node: TreeNode) -> Optional[str]:
    """Value of the ``name`` field of a settings-style entry."""
    if isinstance(node, Mapping):
        name = read_scalar(node, "name")
        if name:
            return name
    return None


def classify_sequence(old: Sequence, new: Sequence) -> SequenceShape:
    """
    Decide how two sequences are matched.

    Every element on both sides must share the shape; anything mixed falls
    back to index matching.
    """
    elements = list(chain(old, new))
    if not elements:
        return SequenceShape.OPAQUE
    if all(reference_key(element) is not None for element in elements):
        return SequenceShape.REFERENCE
    if all(element_name(element) is not None for element in elements):
        return SequenceShape.NAMED
    return SequenceShape.OPAQUE


ElementKey = tuple[str, int]


def _index_by_key(
    elements: Sequence, key_fn: Callable[[TreeNode], Optional[str]]
) -> dict[ElementKey, tuple[int, TreeNode]]:
    """Map each element to (key, occurrence) so repeated keys stay distinct."""
    indexed: dict[ElementKey, tuple[int, TreeNode]] = {}
    counts: dict[str, int] = {}
    for index, element in enumerate(elements):
        base = key_fn(element)
        occurrence = counts.get(base, 0)
        counts[base] = occurrence + 1
        indexed[(base, occurrence)] = (index, element)
    return indexed


def _key_label(key: ElementKey) -> str:
    """Path segment of a keyed element: "a", then "a#1", "a#2"... for repeats."""
    base, occurrence = key
    return base if occurrence == 0 else f"{base}#{occurrence}"


def _diff_by_reference(old: Sequence, new: Sequence, path: str, out: list[FieldChange]) -> None:
    """
    Match elements by reference.

    Added and removed elements are reported at their own index. Matched
    pairs are reported under their key, e.g. "/m_Materials/2100000:abc/type",
    so the path does not depend on which side is old.
    """
    old_by_key = _index_by_key(old, reference_key)
    new_by_key = _index_by_key(new, reference_key)

    for key, (index, new_element) in new_by_key.items():
        match = old_by_key.get(key)
        if match:
            _recurse(match[1], new_element, f"{path}/{_key_label(key)}", out)
        else:
            _recurse(None, new_element, f"{path}[{index}]", out)

    for key, (index, old_element) in old_by_key.items():
        if key not in new_by_key:
            _recurse(old_element, None, f"{path}[{index}]", out)


def _diff_by_name(old: Sequence, new: Sequence, path: str, out: list[FieldChange]) -> None:
    old_by_name = _index_by_key(old, element_name)
    new_by_name = _index_by_key(new, element_name)

    for key, (_, new_element) in new_by_name.items():
        match = old_by_name.get(key)
        _recurse(match[1] if match else None, new_element, f"{path}/{_key_label(key)}", out)

    for key, (_, old_element) in old_by_name.items():
        if key not in new_by_name:
            _recurse(old_element, None, f"{path}/{_key_label(key)}", out)


def _diff_by_index(old: Sequence, new: Sequence, path: str, out: list[FieldChange]) -> None:
    for index in range(max(len(old), len(new))):
        old_element = old[index] if index < len(old) else None
        new_element = new[index] if index < len(new) else None
        _recurse(old_element, new_element, f"{path}[{index}]", out)


def _recurse(
    old: Optional[TreeNode], new: Optional[TreeNode], path: str, out: list[FieldChange]
) -> None:
    if old is None and new is None:
        return
    if old is None:
        out.append(FieldChange(ChangeKind.ADDED, path, new_value=to_text(new)))
        return
    if new is None:
        out.append(FieldChange(ChangeKind.REMOVED, path, old_value=to_text(old)))
        return

    if type(old) is not type(new):
        out.append(FieldChange(ChangeKind.MODIFIED, path, to_text(old), to_text(new)))
        return

    if isinstance(old, Scalar):
        if old.text != new.text:
            out.append(FieldChange(ChangeKind.MODIFIED, path, old.text, new.text))
        return

    if isinstance(old, Mapping):
        for key, old_value in old.items:
            _recurse(old_value, new.get(key), f"{path}/{key}", out)
        for key, new_value in new.items:
            if key not in old:
                _recurse(None, new_value, f"{path}/{key}", out)
        return

    shape = classify_sequence(old, new)
    if shape is SequenceShape.REFERENCE:
        _diff_by_reference(old, new, path, out)
    elif shape is SequenceShape.NAMED:
        _diff_by_name(old, new, path, out)
    else:
        _diff_by_index(old, new, path, out)


def diff_trees(
    old: Optional[TreeNode], new: Optional[TreeNode], path: str = ""
) -> list[FieldChange]:
    """
    Compare two trees.

    Args:
        old: Tree of the old version, or None
        new: Tree of the new version, or None
        path: Field path of the compared nodes

    Returns:
        Changes in traversal order
    """
    changes: list[FieldChange] = []
    _recurse(old, new, path, changes)
    return changes
