"""
Unity class ID table and record-kind predicates.

Every record header carries a numeric class ID (``--- !u!<id> &<fileID>``).
The class ID table is only a fallback for naming records whose body does not
start with a readable type key.
"""

import re

from unityflow.parser import CLASS_IDS as UNITYFLOW_CLASS_IDS

# Unity class IDs not in unityflow's mapping
# Reference: https://docs.unity3d.com/Manual/ClassIDReference.html
ADDITIONAL_CLASS_IDS = {
    50: "Rigidbody2D",
    55: "PhysicsManager",
    150: "PreloadData",
    156: "TerrainData",
    157: "LightmapSettings",
    218: "Terrain",
    226: "BillboardAsset",
    238: "NavMeshData",
    319: "AimConstraint",
    320: "PositionConstraint",
    321: "RotationConstraint",
    322: "ScaleConstraint",
    328: "VideoClip",
    329: "ParentConstraint",
    330: "LookAtConstraint",
    363: "OcclusionCullingData",
    1001: "PrefabInstance",
}

CLASS_IDS = {**ADDITIONAL_CLASS_IDS, **UNITYFLOW_CLASS_IDS}

GAME_OBJECT = 1
TRANSFORM = 4
MONO_BEHAVIOUR = 114
RECT_TRANSFORM = 224
PREFAB_INSTANCE = 1001

TRANSFORM_KINDS = frozenset({TRANSFORM, RECT_TRANSFORM})

# Placeholder labels produced by get_type_name() and by older tooling
UNKNOWN_PATTERN = re.compile(r"Unknown(?:Type)?\((\d+)\)")


def get_type_name(kind: int) -> str:
    """Return the type name for a class ID, or ``UnknownType(<id>)``."""
    return CLASS_IDS.get(kind, f"UnknownType({kind})")


def resolve_class_name(class_name: str) -> str:
    """Resolve class name, handling Unknown(ID) format."""
    match = UNKNOWN_PATTERN.fullmatch(class_name)
    if match:
        return CLASS_IDS.get(int(match.group(1)), class_name)
    return class_name


def is_object_kind(kind: int) -> bool:
    return kind == GAME_OBJECT


def is_transform_kind(kind: int) -> bool:
    """Transform and RectTransform are interchangeable for hierarchy purposes."""
    return kind in TRANSFORM_KINDS


def is_instance_kind(kind: int) -> bool:
    return kind == PREFAB_INSTANCE


def is_script_kind(kind: int) -> bool:
    return kind == MONO_BEHAVIOUR


def transform_key(kind: int) -> str:
    """Top-level body key used by a transform record of the given kind."""
    return "RectTransform" if kind == RECT_TRANSFORM else "Transform"
