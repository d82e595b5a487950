"""
Unity GUID resolver for finding asset names from GUIDs.

Searches Unity project .meta files to resolve GUIDs to actual asset names.
Implements the NameResolver protocol used to decorate diff results.
"""

import logging
import os
import re
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class GuidResolver:
    """
    Resolves Unity GUIDs to asset names by searching .meta files.

    The project is indexed once, on the first lookup.
    """

    # Pattern to extract GUID from .meta file content
    GUID_PATTERN = re.compile(r"guid:\s*([a-fA-F0-9]{32})")

    # Folders of a Unity project that contain .meta files
    SEARCH_FOLDERS = ("Assets", "Packages")

    def __init__(self, project_root: Optional[Path] = None):
        """
        Initialize the resolver.

        Args:
            project_root: Unity project root path (containing Assets folder).
                         Without it every lookup returns None.
        """
        self._project_root = project_root
        self._names: dict[str, str] = {}  # guid -> asset name
        self._paths: dict[str, Path] = {}  # guid -> asset path
        self._indexed = False

    @staticmethod
    def find_project_root(file_path: Path) -> Optional[Path]:
        """
        Find Unity project root by searching upward for Assets folder.

        Args:
            file_path: Path to a file within the Unity project

        Returns:
            Path to project root (parent of Assets folder), or None if not found
        """
        current = Path(file_path).resolve()
        if current.is_file():
            current = current.parent

        while current != current.parent:
            # Unity project has both Assets and ProjectSettings folders
            if (current / "Assets").is_dir() and (current / "ProjectSettings").is_dir():
                return current
            current = current.parent

        return None

    @property
    def project_root(self) -> Optional[Path]:
        return self._project_root

    def _meta_files(self) -> list[Path]:
        meta_files: list[Path] = []
        for folder in self.SEARCH_FOLDERS:
            search_path = self._project_root / folder
            if not search_path.is_dir():
                continue
            # os.walk is faster than rglob on large projects
            for root, _, files in os.walk(search_path):
                for filename in files:
                    if filename.endswith(".meta"):
                        meta_files.append(Path(root) / filename)
        return meta_files

    def index_project(self) -> None:
        """Index .meta files for fast GUID lookup, reading them on a thread pool."""
        if not self._project_root:
            self._indexed = True
            return

        meta_files = self._meta_files()
        with ThreadPoolExecutor() as executor:
            for result in executor.map(self._process_meta_file, meta_files):
                if result:
                    guid, asset_name, asset_path = result
                    self._names[guid] = asset_name
                    self._paths[guid] = asset_path

        self._indexed = True
        logger.info("Indexed %d assets under %s", len(self._names), self._project_root)

    def _process_meta_file(self, meta_file: Path) -> Optional[tuple[str, str, Path]]:
        """Process a single .meta file and return (guid, asset_name, asset_path) or None."""
        guid = self._extract_guid_from_meta(meta_file)
        if not guid:
            return None

        asset_path = meta_file.with_suffix("")
        asset_name = asset_path.stem
        # Include extension for non-script assets
        if asset_path.suffix and asset_path.suffix != ".cs":
            asset_name = asset_path.name
        return guid, asset_name, asset_path

    def _extract_guid_from_meta(self, meta_path: Path) -> Optional[str]:
        """Extract GUID from a .meta file."""
        try:
            # GUID is always near the top
            with open(meta_path, encoding="utf-8") as f:
                content = f.read(500)
        except (OSError, UnicodeDecodeError) as exc:
            logger.debug("Cannot read %s: %s", meta_path, exc)
            return None

        match = self.GUID_PATTERN.search(content)
        return match.group(1).lower() if match else None

    def _ensure_indexed(self) -> None:
        if not self._indexed:
            self.index_project()

    def resolve(self, guid: str) -> Optional[str]:
        """
        Resolve a GUID to an asset name.

        Args:
            guid: The GUID to resolve (32 hex characters)

        Returns:
            Asset name if found, None otherwise
        """
        if not guid:
            return None
        self._ensure_indexed()
        return self._names.get(guid.lower())

    def resolve_path(self, guid: str) -> Optional[Path]:
        """Resolve a GUID to the full asset file path."""
        if not guid:
            return None
        self._ensure_indexed()
        return self._paths.get(guid.lower())

    def resolve_script(self, guid: str) -> Optional[str]:
        """Class name of a MonoScript, i.e. the .cs file stem."""
        path = self.resolve_path(guid)
        if path is None or path.suffix != ".cs":
            return None
        return path.stem

    def resolve_asset(self, guid: str) -> Optional[str]:
        return self.resolve(guid)
