"""Tests for GuidResolver."""

from pathlib import Path

import pytest

from prefab_yaml_diff.utils.guid_resolver import GuidResolver

SCRIPT_GUID = "0123456789abcdef0123456789abcdef"
MATERIAL_GUID = "fedcba9876543210fedcba9876543210"
PACKAGE_GUID = "00112233445566778899aabbccddeeff"


def write_meta(asset: Path, guid: str) -> None:
    asset.parent.mkdir(parents=True, exist_ok=True)
    asset.write_text("", encoding="utf-8")
    Path(f"{asset}.meta").write_text(
        f"fileFormatVersion: 2\nguid: {guid}\nMonoImporter:\n  serializedVersion: 2\n",
        encoding="utf-8",
    )


@pytest.fixture
def unity_project(tmp_path):
    """A minimal Unity project with a script, a material and a package asset."""
    (tmp_path / "ProjectSettings").mkdir()
    write_meta(tmp_path / "Assets" / "Scripts" / "Player.cs", SCRIPT_GUID)
    write_meta(tmp_path / "Assets" / "Materials" / "Red.mat", MATERIAL_GUID)
    write_meta(tmp_path / "Packages" / "com.example" / "Helper.cs", PACKAGE_GUID)
    (tmp_path / "Assets" / "Broken.asset.meta").write_text("no guid here", encoding="utf-8")
    return tmp_path


class TestFindProjectRoot:
    def test_from_nested_file(self, unity_project):
        prefab = unity_project / "Assets" / "Prefabs" / "Player.prefab"
        prefab.parent.mkdir(parents=True)
        prefab.write_text("", encoding="utf-8")
        assert GuidResolver.find_project_root(prefab) == unity_project.resolve()

    def test_outside_project(self, tmp_path):
        (tmp_path / "Assets").mkdir()  # No ProjectSettings
        assert GuidResolver.find_project_root(tmp_path / "Assets") is None


class TestGuidResolver:
    """Tests for GUID lookups."""

    def test_resolve_script(self, unity_project):
        resolver = GuidResolver(unity_project)
        assert resolver.resolve_script(SCRIPT_GUID) == "Player"
        assert resolver.resolve_script(PACKAGE_GUID) == "Helper"
        assert resolver.resolve_script(MATERIAL_GUID) is None

    def test_resolve_asset(self, unity_project):
        resolver = GuidResolver(unity_project)
        assert resolver.resolve_asset(MATERIAL_GUID) == "Red.mat"
        assert resolver.resolve_asset(SCRIPT_GUID) == "Player"
        assert resolver.resolve_path(MATERIAL_GUID) == unity_project / "Assets" / "Materials" / "Red.mat"

    def test_lookup_is_case_insensitive(self, unity_project):
        resolver = GuidResolver(unity_project)
        assert resolver.resolve(MATERIAL_GUID.upper()) == "Red.mat"

    def test_unknown_guid(self, unity_project):
        resolver = GuidResolver(unity_project)
        assert resolver.resolve("f" * 32) is None
        assert resolver.resolve("") is None

    def test_explicit_index(self, unity_project):
        """Test indexing up front fills the same tables lookups use."""
        resolver = GuidResolver(unity_project)
        resolver.index_project()
        assert resolver.resolve(MATERIAL_GUID) == "Red.mat"
        assert resolver.resolve_script(SCRIPT_GUID) is not None

    def test_without_project_root(self):
        resolver = GuidResolver()
        assert resolver.resolve(SCRIPT_GUID) is None
        assert resolver.resolve_path(SCRIPT_GUID) is None
