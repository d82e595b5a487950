"""
Unity YAML record parser.

Splits a Unity YAML file into its documents and converts each one into a
Record. Unity files are not valid YAML as a whole (custom ``!u!`` tags,
``stripped`` markers, duplicate keys), so every document is parsed on its
own and a broken document never stops the rest of the file from loading.
"""

import logging
import re
import textwrap
from typing import Optional

import yaml

from prefab_yaml_diff.core.class_ids import (
    get_type_name,
    is_script_kind,
    resolve_class_name,
)
from prefab_yaml_diff.core.unity_model import (
    Mapping,
    Record,
    RecordHeader,
    Scalar,
    Sequence,
    TreeNode,
    read_reference,
    read_scalar,
    to_text,
)

logger = logging.getLogger(__name__)

# --- !u!114 &-1234567890
# --- !u!4 &5678 stripped
HEADER_PATTERN = re.compile(r"^---\s+!u!(\d+)\s+&(-?\d+)(\s+stripped)?")

# Fallback for malformed headers without the !u! prefix
HEADER_NO_TAG_PATTERN = re.compile(r"^---\s+(\d+)\s+&(-?\d+)(\s+stripped)?")

# m_GameObject: {fileID: 12345}
OWNER_LINE_PATTERN = re.compile(r"^\s*m_GameObject:\s*\{[^}]*fileID:\s*(-?\d+)")


class RecordParseError(ValueError):
    """A record header or body could not be parsed."""


def _is_header_line(line: str) -> bool:
    if line.startswith("---"):
        return True
    stripped = line.lstrip()
    return bool(HEADER_PATTERN.match(stripped) or HEADER_NO_TAG_PATTERN.match(stripped))


def split_documents(raw_text: str) -> list[tuple[str, str]]:
    """
    Split a Unity YAML file into (header line, body) pairs.

    Directive lines (%YAML, %TAG) and anything before the first header are
    dropped. Documents with an empty body are skipped.
    """
    documents: list[tuple[str, str]] = []
    if not raw_text:
        return documents

    header: Optional[str] = None
    body_lines: list[str] = []

    def flush() -> None:
        if header is None:
            return
        body = textwrap.dedent("\n".join(body_lines)).strip()
        if body:
            documents.append((header, body))
        else:
            logger.debug("Skipping empty document: %s", header)

    for line in raw_text.splitlines():
        if _is_header_line(line):
            flush()
            header = line.strip()
            body_lines = []
            continue
        if line.startswith("%"):
            continue
        if header is not None:
            body_lines.append(line)

    flush()
    return documents


def parse_header(line: str) -> RecordHeader:
    """
    Parse a document header line.

    Raises:
        RecordParseError: if the line is not a Unity document header
    """
    pattern = HEADER_PATTERN if "!u!" in line else HEADER_NO_TAG_PATTERN
    match = pattern.match(line.strip())
    if not match:
        raise RecordParseError(f"Unrecognized document header: {line!r}")
    return RecordHeader(
        kind=int(match.group(1)),
        identity=int(match.group(2)),
        is_placeholder=match.group(3) is not None,
    )


def extract_top_key(body: str) -> str:
    """First top-level mapping key of a document body, or an empty string."""
    for line in body.splitlines():
        line = line.strip()
        if not line or line.startswith(("%", "---", "#")):
            continue
        colon = line.find(":")
        if colon > 0:
            return line[:colon].strip()
    return ""


def _convert(node: yaml.Node, active: set[int]) -> TreeNode:
    if isinstance(node, yaml.ScalarNode):
        return Scalar(node.value)

    if id(node) in active:
        raise RecordParseError("Recursive alias in document body")
    active.add(id(node))
    try:
        if isinstance(node, yaml.SequenceNode):
            return Sequence(tuple(_convert(item, active) for item in node.value))

        entries: dict[str, TreeNode] = {}
        for key_node, value_node in node.value:
            key = _convert(key_node, active)
            key_text = key.text if isinstance(key, Scalar) else to_text(key)
            # Duplicate keys: last occurrence wins, first position is kept
            entries[key_text] = _convert(value_node, active)
        return Mapping(tuple(entries.items()))
    finally:
        active.discard(id(node))


def parse_tree(body: str) -> TreeNode:
    """
    Parse a document body into a TreeNode.

    All scalars are kept as text; no type resolution is done.

    Raises:
        RecordParseError: if the body is not parseable
    """
    try:
        node = yaml.compose(body, Loader=yaml.BaseLoader)
    except yaml.YAMLError as exc:
        raise RecordParseError(str(exc)) from exc

    if node is None:
        raise RecordParseError("Document body is empty")

    try:
        return _convert(node, set())
    except RecursionError as exc:
        raise RecordParseError("Document body is nested too deeply") from exc


class RecordParser:
    """Parses Unity YAML text into a list of Records."""

    def parse(self, raw_text: str) -> list[Record]:
        """
        Parse every document of a Unity YAML file.

        Args:
            raw_text: Full file content

        Returns:
            Records in document order. Documents with an unrecognized header
            are skipped; documents with an unparseable body are kept without
            a tree.
        """
        records: list[Record] = []
        if not raw_text or not raw_text.strip():
            return records

        for header_line, body in split_documents(raw_text):
            try:
                header = parse_header(header_line)
            except RecordParseError as exc:
                logger.warning("Skipping document: %s", exc)
                continue
            records.append(self._parse_record(header, header_line, body))

        return records

    def _parse_record(self, header: RecordHeader, header_line: str, body: str) -> Record:
        raw_text = f"{header_line}\n{body}"
        type_name = resolve_class_name(extract_top_key(body)) or get_type_name(header.kind)

        if header.is_placeholder:
            return self._parse_placeholder(header, type_name, raw_text, body)

        try:
            tree = parse_tree(body)
        except RecordParseError as exc:
            logger.warning(
                "YAML parse error in !u!%d &%d: %s", header.kind, header.identity, exc
            )
            return Record(header=header, type_name=type_name, raw_text=raw_text)

        record = Record(header=header, type_name=type_name, raw_text=raw_text, tree=tree)
        content = record.content
        owner = read_reference(content, "m_GameObject")
        script = None
        if is_script_kind(header.kind):
            script_ref = content.get("m_Script") if content is not None else None
            if isinstance(script_ref, Mapping):
                script = read_scalar(script_ref, "guid")

        return Record(
            header=header,
            type_name=type_name,
            raw_text=raw_text,
            tree=tree,
            owner_object_identity=owner or None,
            script_identity=script or None,
        )

    def _parse_placeholder(
        self, header: RecordHeader, type_name: str, raw_text: str, body: str
    ) -> Record:
        """
        Stripped documents only carry references to the nested prefab, e.g.

            Transform:
              m_CorrespondingSourceObject: {fileID: 5678, guid: abc123, type: 3}
              m_PrefabInstance: {fileID: 9012}

        The owner is read line by line since the body may be incomplete.
        """
        owner = None
        for line in body.splitlines():
            match = OWNER_LINE_PATTERN.match(line)
            if match and int(match.group(1)) != 0:
                owner = int(match.group(1))
                break

        tree = None
        try:
            tree = parse_tree(body)
        except RecordParseError as exc:
            logger.debug("Partial parse of stripped &%d failed: %s", header.identity, exc)

        return Record(
            header=header,
            type_name=type_name,
            raw_text=raw_text,
            tree=tree,
            owner_object_identity=owner,
        )


def parse_records(raw_text: str) -> list[Record]:
    """
    Convenience function to parse Unity YAML text.

    Args:
        raw_text: Full file content

    Returns:
        List of parsed records
    """
    return RecordParser().parse(raw_text)
