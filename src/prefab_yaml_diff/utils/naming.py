"""
Unity-style naming utilities.

Converts Unity internal property names to human-readable display names,
similar to Unity's ObjectNames.NicifyVariableName().
"""

import re
from functools import lru_cache
from typing import Optional

# Field path segment with an optional index suffix, like "m_Children[2]"
SEGMENT_PATTERN = re.compile(r"^(?P<name>[^\[]*)(?P<index>(?:\[[^\]]*\])*)$")

NAME_PREFIXES = ("m_", "k_", "s_", "_")


@lru_cache(maxsize=1024)
def nicify_variable_name(name: str) -> str:
    """
    Convert a Unity variable name to a nice display name.

    Examples:
        m_LocalPosition -> Local Position
        isKinematic -> Is Kinematic
        m_UIScale -> UI Scale
        serializedVersion -> Serialized Version
    """
    if not name:
        return ""

    original = name
    for prefix in NAME_PREFIXES:
        if name.startswith(prefix):
            name = name[len(prefix):]
            break
    if not name:
        return original

    # Short acronyms like "ID", "UI"
    if name.isupper() and len(name) <= 4:
        return name

    result = []
    for i, char in enumerate(name):
        if i > 0 and char.isupper():
            prev = name[i - 1]
            # "localPosition" -> "local Position", "UIScale" -> "UI Scale"
            starts_word = prev.islower() or (
                prev.isupper() and i + 1 < len(name) and name[i + 1].islower()
            )
            if starts_word:
                result.append(" ")
        result.append(char.upper() if i == 0 else char)
    return "".join(result)


def get_field_path_parts(path: str) -> list[str]:
    """
    Split a field path into its segments.

    Examples:
        "/m_LocalPosition/x" -> ["m_LocalPosition", "x"]
        "/m_Children[0]" -> ["m_Children[0]"]
    """
    return [part for part in path.split("/") if part]


def nicify_field_path(path: str) -> str:
    """
    Convert a field path to a nice display string.

    Examples:
        "/m_LocalPosition/x" -> "Local Position > X"
        "/m_Children[0]" -> "Children [0]"
    """
    nicified = []
    for part in get_field_path_parts(path):
        match = SEGMENT_PATTERN.match(part)
        name, index = (match.group("name"), match.group("index")) if match else (part, "")
        text = nicify_variable_name(name) if name else ""
        nicified.append(f"{text} {index}".strip() if index else text)
    return " > ".join(nicified)


# Component type display names
COMPONENT_DISPLAY_NAMES = {
    "RectTransform": "Rect Transform",
    "MonoBehaviour": "Script",
    "MeshRenderer": "Mesh Renderer",
    "MeshFilter": "Mesh Filter",
    "SkinnedMeshRenderer": "Skinned Mesh Renderer",
    "Rigidbody2D": "Rigidbody 2D",
    "CanvasRenderer": "Canvas Renderer",
    "ParticleSystemRenderer": "Particle System Renderer",
    "TextMeshProUGUI": "TextMeshPro - Text (UI)",
    "BoxCollider2D": "Box Collider 2D",
    "CircleCollider2D": "Circle Collider 2D",
    "PolygonCollider2D": "Polygon Collider 2D",
    "RectMask2D": "Rect Mask 2D",
}


def get_component_display_name(type_name: str, script_name: Optional[str] = None) -> str:
    """
    Get display name for a component type.

    Args:
        type_name: The component type name (e.g., "MonoBehaviour")
        script_name: Optional script name for MonoBehaviour components

    Returns:
        Display name for the component
    """
    if type_name == "MonoBehaviour" and script_name:
        return nicify_variable_name(script_name)
    return COMPONENT_DISPLAY_NAMES.get(type_name, nicify_variable_name(type_name))
