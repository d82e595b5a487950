"""Tests for the Unity YAML record parser."""

import logging

import pytest

from prefab_yaml_diff.core.parser import (
    RecordParseError,
    RecordParser,
    extract_top_key,
    parse_header,
    parse_records,
    parse_tree,
    split_documents,
)
from prefab_yaml_diff.core.unity_model import Mapping, Scalar, Sequence

PREFAB = """%YAML 1.1
%TAG !u! tag:unity3d.com,2011:
--- !u!1 &10
GameObject:
  m_ObjectHideFlags: 0
  m_Component:
  - component: {fileID: 11}
  - component: {fileID: 12}
  m_Name: O1
--- !u!4 &11
Transform:
  m_GameObject: {fileID: 10}
  m_LocalPosition: {x: 0.10, y: -0, z: 1e3}
  m_Children: []
  m_Father: {fileID: 0}
--- !u!114 &12
MonoBehaviour:
  m_GameObject: {fileID: 10}
  m_Script: {fileID: 11500000, guid: 0123456789abcdef0123456789abcdef, type: 3}
  speed: 5
"""


class TestSplitDocuments:
    """Tests for document splitting."""

    def test_directives_are_dropped(self):
        """Test %YAML and %TAG lines never reach a body."""
        documents = split_documents(PREFAB)
        assert [header for header, _ in documents] == [
            "--- !u!1 &10",
            "--- !u!4 &11",
            "--- !u!114 &12",
        ]
        assert all("%TAG" not in body for _, body in documents)

    def test_empty_body_is_skipped(self):
        """Test a header without body produces no document."""
        assert split_documents("--- !u!1 &1\n--- !u!4 &2\nTransform: {}\n") == [
            ("--- !u!4 &2", "Transform: {}")
        ]

    def test_empty_input(self):
        assert split_documents("") == []


class TestParseHeader:
    def test_regular_header(self):
        header = parse_header("--- !u!114 &-1234567890")
        assert header.kind == 114
        assert header.identity == -1234567890
        assert not header.is_placeholder

    def test_stripped_header(self):
        header = parse_header("--- !u!4 &5678 stripped")
        assert header.kind == 4
        assert header.identity == 5678
        assert header.is_placeholder

    def test_header_without_tag(self):
        header = parse_header("--- 4 &9")
        assert (header.kind, header.identity) == (4, 9)

    def test_invalid_header(self):
        with pytest.raises(RecordParseError):
            parse_header("--- !u!abc &x")


class TestParseTree:
    def test_scalars_are_verbatim(self):
        """Test numbers keep their original spelling."""
        tree = parse_tree("Transform:\n  m_LocalPosition: {x: 0.10, y: -0, z: 1e3}")
        position = tree.get("Transform").get("m_LocalPosition")
        assert position.get("x") == Scalar("0.10")
        assert position.get("y") == Scalar("-0")
        assert position.get("z") == Scalar("1e3")

    def test_duplicate_keys_last_wins(self):
        """Test the last duplicate value is kept at the first position."""
        tree = parse_tree("A:\n  x: 1\n  y: 2\n  x: 3")
        content = tree.get("A")
        assert content.keys() == ["x", "y"]
        assert content.get("x") == Scalar("3")

    def test_sequences(self):
        tree = parse_tree("A:\n  items:\n  - {fileID: 1}\n  - {fileID: 2}")
        items = tree.get("A").get("items")
        assert isinstance(items, Sequence)
        assert len(items) == 2
        assert isinstance(items[0], Mapping)

    def test_broken_body(self):
        with pytest.raises(RecordParseError):
            parse_tree("A:\n  b: [unclosed")

    def test_recursive_alias(self):
        with pytest.raises(RecordParseError):
            parse_tree("a: &x [*x]")

    def test_extract_top_key(self):
        assert extract_top_key("# comment\nMonoBehaviour:\n  a: 1") == "MonoBehaviour"
        assert extract_top_key("") == ""


class TestRecordParser:
    """Tests for RecordParser."""

    def test_parse_prefab(self):
        """Test records keep document order, owners and script GUIDs."""
        records = parse_records(PREFAB)
        assert [record.identity for record in records] == [10, 11, 12]
        assert [record.type_name for record in records] == [
            "GameObject",
            "Transform",
            "MonoBehaviour",
        ]
        assert records[0].owner_object_identity is None
        assert records[1].owner_object_identity == 10
        assert records[2].owner_object_identity == 10
        assert records[2].script_identity == "0123456789abcdef0123456789abcdef"
        assert records[2].content.get("speed") == Scalar("5")
        assert records[2].raw_text.startswith("--- !u!114 &12\nMonoBehaviour:")

    def test_empty_input(self):
        assert RecordParser().parse("") == []
        assert RecordParser().parse("   \n") == []

    def test_broken_body_keeps_record(self, caplog):
        """Test a document with invalid YAML is kept without a tree."""
        text = (
            "--- !u!114 &1\nMonoBehaviour:\n  a: [unclosed\n"
            "--- !u!4 &2\nTransform:\n  m_Father: {fileID: 0}\n"
        )
        with caplog.at_level(logging.WARNING, logger="prefab_yaml_diff"):
            records = parse_records(text)

        assert [record.identity for record in records] == [1, 2]
        assert records[0].tree is None
        assert records[0].type_name == "MonoBehaviour"
        assert records[1].tree is not None
        assert any("&1" in message for message in caplog.messages)

    def test_invalid_header_is_skipped(self, caplog):
        text = "--- !u!abc &x\nFoo: 1\n--- !u!4 &2\nTransform: {}\n"
        with caplog.at_level(logging.WARNING, logger="prefab_yaml_diff"):
            records = parse_records(text)
        assert [record.identity for record in records] == [2]
        assert any("Skipping document" in message for message in caplog.messages)

    def test_unknown_kind_uses_body_key(self):
        records = parse_records("--- !u!99999 &5\nCustomThing:\n  a: 1\n")
        assert records[0].type_name == "CustomThing"
        assert records[0].kind == 99999

    def test_placeholder_record(self):
        """Test stripped documents are placeholders with a best-effort owner."""
        text = (
            "--- !u!4 &50 stripped\n"
            "Transform:\n"
            "  m_CorrespondingSourceObject: {fileID: 5678, guid: abc123, type: 3}\n"
            "  m_PrefabInstance: {fileID: 9012}\n"
            "--- !u!1 &60 stripped\n"
            "GameObject:\n"
            "  m_CorrespondingSourceObject: {fileID: 1, guid: abc123, type: 3}\n"
            "--- !u!114 &70 stripped\n"
            "MonoBehaviour:\n"
            "  m_GameObject: {fileID: 60}\n"
        )
        records = parse_records(text)
        assert all(record.is_placeholder for record in records)
        assert records[0].owner_object_identity is None
        assert records[2].owner_object_identity == 60
