"""Utility functions and constants."""

from prefab_yaml_diff.utils.guid_resolver import GuidResolver
from prefab_yaml_diff.utils.log_handler import (
    MemoryLogHandler,
    capture_logs,
    setup_logging,
)
from prefab_yaml_diff.utils.naming import (
    nicify_variable_name,
    nicify_field_path,
    get_component_display_name,
    get_field_path_parts,
    COMPONENT_DISPLAY_NAMES,
)
from prefab_yaml_diff.utils.report import (
    DIFF_SYMBOLS,
    differences_to_json,
    format_difference,
    format_result,
    format_summary,
)

__all__ = [
    "GuidResolver",
    "MemoryLogHandler",
    "capture_logs",
    "setup_logging",
    "nicify_variable_name",
    "nicify_field_path",
    "get_component_display_name",
    "get_field_path_parts",
    "COMPONENT_DISPLAY_NAMES",
    "DIFF_SYMBOLS",
    "differences_to_json",
    "format_difference",
    "format_result",
    "format_summary",
]
