"""
Decoration of records and differences with human-readable names.

Resolution itself is done by an external resolver (see
utils/guid_resolver.py). Without a resolver, raw GUIDs are shown.
"""

import re
from dataclasses import replace
from typing import Optional, Protocol

from prefab_yaml_diff.core.class_ids import is_script_kind
from prefab_yaml_diff.core.unity_model import Difference, Record

GUID_PATTERN = re.compile(r"\b[0-9A-Fa-f]{32}\b")


class NameResolver(Protocol):
    """Turns opaque asset GUIDs into display names."""

    def resolve_script(self, guid: str) -> Optional[str]:
        """Class name of the script with the given GUID."""
        ...

    def resolve_asset(self, guid: str) -> Optional[str]:
        """Display name of the asset with the given GUID."""
        ...


def resolve_type_names(records: list[Record], resolver: Optional[NameResolver]) -> list[Record]:
    """
    Replace the generic "MonoBehaviour" type name with the script name.

    Returns new Record values; the input records are left untouched.
    """
    if resolver is None:
        return list(records)

    resolved = []
    for record in records:
        if (
            is_script_kind(record.kind)
            and record.script_identity
            and record.type_name == "MonoBehaviour"
        ):
            name = resolver.resolve_script(record.script_identity)
            if name:
                record = replace(record, type_name=name)
        resolved.append(record)
    return resolved


def prettify_guids(text: Optional[str], resolver: Optional[NameResolver]) -> Optional[str]:
    """
    Annotate GUIDs found in a value.

    Examples:
        "{fileID: 11500000, guid: 0123...cdef, type: 3}"
        -> "{fileID: 11500000, guid: Player.cs (0123...cdef), type: 3}"
    """
    if not text or resolver is None:
        return text

    def _replace(match: re.Match) -> str:
        guid = match.group(0)
        name = resolver.resolve_asset(guid)
        return f"{name} ({guid})" if name else guid

    return GUID_PATTERN.sub(_replace, text)


def decorate_differences(
    differences: list[Difference], resolver: Optional[NameResolver]
) -> list[Difference]:
    """Apply prettify_guids() to the old and new values of each difference."""
    if resolver is None:
        return list(differences)
    return [
        replace(
            diff,
            old_value=prettify_guids(diff.old_value, resolver),
            new_value=prettify_guids(diff.new_value, resolver),
        )
        for diff in differences
    ]
