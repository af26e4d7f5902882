"""
On-disk snapshot of one registry source.

Layout under the source root:
    registry.json        persisted catalog
    info.json            snapshot metadata (checksums, version, download_timestamp)
    registry.json.zip    transient archive, removed after unpacking
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List

import aiofiles
from pydantic import ValidationError

from registry_mirror.domain.errors import (
    CatalogParseError,
    RegistryIOError,
    SnapshotNotFoundError,
)
from registry_mirror.domain.models import SnapshotInfo

logger = logging.getLogger(__name__)

CATALOG_FILE = "registry.json"
INFO_FILE = "info.json"
ARCHIVE_FILE = "registry.json.zip"


def load_catalog(path: Path) -> List[Any]:
    """Parse a registry.json catalog, which must be a JSON array."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise CatalogParseError(f"Failed to parse {path}: {e}") from e
    if not isinstance(data, list):
        raise CatalogParseError(f"Expected a JSON array in {path}")
    return data


class LocalStore:
    """Reads and writes the snapshot files of a single registry source."""

    def __init__(self, root_dir: Path):
        self.root_dir = Path(root_dir)
        self.catalog_file = self.root_dir / CATALOG_FILE
        self.info_file = self.root_dir / INFO_FILE

    @property
    def archive_path(self) -> Path:
        return self.root_dir / ARCHIVE_FILE

    def ensure_root(self) -> None:
        if self.root_dir.is_dir():
            return
        logger.debug(f"Creating registry directory {self.root_dir}")
        try:
            self.root_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise RegistryIOError(f"Failed to create registry directory {self.root_dir}: {e}") from e

    def is_installed(self) -> bool:
        """A snapshot is usable only when both the catalog and its metadata exist."""
        return self.catalog_file.is_file() and self.info_file.is_file()

    def read_catalog(self) -> List[Any]:
        if not self.is_installed():
            return []
        return load_catalog(self.catalog_file)

    def read_info(self) -> SnapshotInfo:
        if not self.info_file.is_file():
            raise SnapshotNotFoundError(f"Snapshot metadata not found: {self.info_file}")
        try:
            return SnapshotInfo.model_validate_json(self.info_file.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ValidationError) as e:
            raise CatalogParseError(f"Failed to parse {self.info_file}: {e}") from e

    async def write_snapshot(self, catalog_bytes: bytes, info: SnapshotInfo) -> None:
        """
        Persist a new snapshot.

        The catalog is moved into place before the metadata is written, so an
        interruption can leave a new catalog next to old metadata but never
        new metadata next to an old catalog.
        """
        await self._write_file(self.catalog_file, catalog_bytes)
        await self._write_file(self.info_file, info.model_dump_json().encode("utf-8"))

    async def _write_file(self, path: Path, content: bytes) -> None:
        tmp_path = path.with_name(f"{path.name}.tmp")
        try:
            async with aiofiles.open(tmp_path, "wb") as f:
                await f.write(content)
            tmp_path.replace(path)
        except OSError as e:
            raise RegistryIOError(f"Failed to write {path}: {e}") from e
