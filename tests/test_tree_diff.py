"""Tests for the recursive tree comparison."""

import pytest

from prefab_yaml_diff.core.parser import parse_tree
from prefab_yaml_diff.core.tree_diff import (
    FieldChange,
    SequenceShape,
    classify_sequence,
    diff_trees,
    element_name,
    reference_key,
)
from prefab_yaml_diff.core.unity_model import ChangeKind, Scalar, Sequence


def content(body: str):
    """Parse an indented body under a dummy type key."""
    return parse_tree("Type:\n" + body).get("Type")


def signature(changes, invert=False):
    return sorted(
        ((c.change_kind.inverse() if invert else c.change_kind).value, c.field_path)
        for c in changes
    )


class TestReferenceKey:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("a: {fileID: 11}", "11"),
            ("a: {fileID: 2100000, guid: abc, type: 2}", "2100000:abc"),
            ("a: {component: {fileID: 8}}", "8"),
            ("a: {name: x}", None),
        ],
    )
    def test_reference_key(self, text, expected):
        assert reference_key(parse_tree(text).get("a")) == expected

    def test_scalar_has_no_key(self):
        assert reference_key(Scalar("11")) is None
        assert element_name(Scalar("11")) is None


class TestClassifySequence:
    """Tests for sequence shape classification."""

    def test_reference_array(self):
        old = content("  s:\n  - {fileID: 1}\n  - {fileID: 2}").get("s")
        new = content("  s:\n  - {fileID: 2}").get("s")
        assert classify_sequence(old, new) is SequenceShape.REFERENCE

    def test_named_array(self):
        old = content("  s:\n  - name: a\n    value: 1").get("s")
        new = content("  s:\n  - name: b\n    value: 2").get("s")
        assert classify_sequence(old, new) is SequenceShape.NAMED

    def test_mixed_array_is_opaque(self):
        """Test one unkeyed element forces index matching."""
        old = content("  s:\n  - {fileID: 1}\n  - 5").get("s")
        new = content("  s:\n  - {fileID: 1}").get("s")
        assert classify_sequence(old, new) is SequenceShape.OPAQUE

    def test_empty_arrays_are_opaque(self):
        assert classify_sequence(Sequence(), Sequence()) is SequenceShape.OPAQUE


class TestDiffTrees:
    """Tests for diff_trees."""

    def test_identical_trees(self):
        tree = content("  a: 1\n  b:\n    c: [1, 2]")
        assert diff_trees(tree, tree) == []

    def test_scalar_change(self):
        old = content("  speed: 5")
        new = content("  speed: 7")
        assert diff_trees(old, new) == [FieldChange(ChangeKind.MODIFIED, "/speed", "5", "7")]

    def test_nested_paths(self):
        old = content("  m_LocalPosition: {x: 0, y: 1, z: 2}")
        new = content("  m_LocalPosition: {x: 10, y: 1, z: 2}")
        changes = diff_trees(old, new)
        assert [c.field_path for c in changes] == ["/m_LocalPosition/x"]

    def test_added_and_removed_keys(self):
        old = content("  a: 1\n  b: 2")
        new = content("  a: 1\n  c: 3")
        changes = diff_trees(old, new)
        assert FieldChange(ChangeKind.REMOVED, "/b", old_value="2") in changes
        assert FieldChange(ChangeKind.ADDED, "/c", new_value="3") in changes
        assert len(changes) == 2

    def test_kind_mismatch_is_modified(self):
        old = content("  a: 1")
        new = content("  a: {fileID: 1}")
        assert diff_trees(old, new) == [
            FieldChange(ChangeKind.MODIFIED, "/a", "1", "{fileID: 1}")
        ]

    def test_reference_insertion_is_stable(self):
        """Test inserting at the front of a reference array reports only the insertion."""
        old = content("  m_Children:\n  - {fileID: 1}\n  - {fileID: 2}")
        new = content("  m_Children:\n  - {fileID: 3}\n  - {fileID: 1}\n  - {fileID: 2}")
        assert diff_trees(old, new) == [
            FieldChange(ChangeKind.ADDED, "/m_Children[0]", new_value="{fileID: 3}")
        ]

    def test_reference_removal_uses_old_index(self):
        old = content("  m_Children:\n  - {fileID: 1}\n  - {fileID: 2}")
        new = content("  m_Children:\n  - {fileID: 1}")
        assert diff_trees(old, new) == [
            FieldChange(ChangeKind.REMOVED, "/m_Children[1]", old_value="{fileID: 2}")
        ]

    def test_reference_reorder_has_no_changes(self):
        old = content("  m_Children:\n  - {fileID: 1}\n  - {fileID: 2}")
        new = content("  m_Children:\n  - {fileID: 2}\n  - {fileID: 1}")
        assert diff_trees(old, new) == []

    def test_duplicate_references(self):
        """Test repeated references are matched by occurrence."""
        old = content("  m_Materials:\n  - {fileID: 1}\n  - {fileID: 1}")
        new = content("  m_Materials:\n  - {fileID: 1}")
        changes = diff_trees(old, new)
        assert [c.change_kind for c in changes] == [ChangeKind.REMOVED]

    def test_named_reorder_has_no_changes(self):
        """Test reordering named entries is not reported."""
        old = content("  layers:\n  - name: a\n    value: 1\n  - name: b\n    value: 2")
        new = content("  layers:\n  - name: b\n    value: 2\n  - name: a\n    value: 1")
        assert diff_trees(old, new) == []

    def test_named_change_path(self):
        old = content("  layers:\n  - name: a\n    value: 1\n  - name: b\n    value: 2")
        new = content("  layers:\n  - name: b\n    value: 3\n  - name: a\n    value: 1")
        assert diff_trees(old, new) == [
            FieldChange(ChangeKind.MODIFIED, "/layers/b/value", "2", "3")
        ]

    def test_opaque_array_by_index(self):
        old = content("  values: [1, 2, 3]")
        new = content("  values: [1, 5]")
        changes = diff_trees(old, new)
        assert changes == [
            FieldChange(ChangeKind.MODIFIED, "/values[1]", "2", "5"),
            FieldChange(ChangeKind.REMOVED, "/values[2]", old_value="3"),
        ]

    def test_symmetry(self):
        """Test swapping the inputs swaps added and removed at the same paths."""
        old = content("  a: 1\n  refs:\n  - {fileID: 1}\n  list: [1]")
        new = content("  b: 2\n  refs:\n  - {fileID: 2}\n  list: [1, 2]")
        assert signature(diff_trees(old, new)) == signature(diff_trees(new, old), invert=True)

    def test_symmetry_with_shifted_reference(self):
        """Test a matched reference at a different index keeps one path both ways."""
        old = content("  refs:\n  - {fileID: 5, type: 2}")
        new = content("  refs:\n  - {fileID: 9}\n  - {fileID: 5, type: 3}")
        forward = diff_trees(old, new)
        backward = diff_trees(new, old)

        assert forward == [
            FieldChange(ChangeKind.ADDED, "/refs[0]", new_value="{fileID: 9}"),
            FieldChange(ChangeKind.MODIFIED, "/refs/5/type", "2", "3"),
        ]
        assert signature(forward) == signature(backward, invert=True)

    def test_named_key_like_generated_label(self):
        """Test a literal "a#1" name does not shadow the second "a"."""
        old = content(
            "  items:\n  - name: a\n    v: 1\n  - name: a\n    v: 2\n  - name: a#1\n    v: 3"
        )
        new = content(
            "  items:\n  - name: a\n    v: 1\n  - name: a\n    v: 9\n  - name: a#1\n    v: 3"
        )
        changes = diff_trees(old, new)
        assert [(c.change_kind, c.old_value, c.new_value) for c in changes] == [
            (ChangeKind.MODIFIED, "2", "9")
        ]

    def test_none_inputs(self):
        assert diff_trees(None, None) == []
        assert diff_trees(None, Scalar("1"), "/x") == [
            FieldChange(ChangeKind.ADDED, "/x", new_value="1")
        ]
