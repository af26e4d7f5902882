"""
Registry source backed by a remote HTTP endpoint.

The remote publishes two resources under its base URL:
- info.json          {"checksums": {...}, "version": "..."}
- registry.json.zip  archive containing a single registry.json catalog

A new archive is downloaded only when the published version differs from
the installed snapshot.
"""
from __future__ import annotations

import asyncio
import hashlib
import io
import logging
import time
import zipfile
import zlib
from pathlib import Path
from typing import List, Optional

import aiofiles
import httpx
from pydantic import ValidationError

from registry_mirror.domain.errors import (
    CatalogParseError,
    DownloadError,
    RegistryError,
    RegistryIOError,
    UnpackError,
)
from registry_mirror.domain.models import RegistrySourceSpec, RemoteInfo, SnapshotInfo
from registry_mirror.services.fetcher import Fetcher
from registry_mirror.storage.local_store import ARCHIVE_FILE, CATALOG_FILE, INFO_FILE, LocalStore
from registry_mirror.storage.source_base import InstallResult, InstallStatus, RegistrySource

logger = logging.getLogger(__name__)

# Encrypted entries raise RuntimeError, unsupported compression NotImplementedError.
UNPACK_ERRORS = (
    zipfile.BadZipFile,
    KeyError,
    EOFError,
    zlib.error,
    RuntimeError,
    NotImplementedError,
    ValueError,
)


class HttpRegistrySource(RegistrySource):
    """Mirror of a registry published over HTTP."""

    def __init__(
        self,
        spec: RegistrySourceSpec,
        registry_prefix: Path,
        fetcher: Optional[Fetcher] = None,
    ):
        super().__init__(spec.id)
        self.spec = spec
        self.store = LocalStore(Path(registry_prefix) / "http" / spec.name)
        self.fetcher = fetcher or Fetcher()
        self._install_lock = asyncio.Lock()

    @property
    def root_dir(self) -> Path:
        return self.store.root_dir

    def is_installed(self) -> bool:
        return self.store.is_installed()

    def get_info(self) -> SnapshotInfo:
        return self.store.read_info()

    def _read_catalog(self) -> List[object]:
        return self.store.read_catalog()

    def get_display_label(self) -> str:
        if self.is_installed():
            return f"{self.spec.name} version: {self.get_info().version}"
        return f"{self.spec.name} [uninstalled]"

    async def install(self) -> InstallResult:
        """
        Synchronize the local snapshot with the remote registry.

        Failures are logged and reported through the result; the previously
        installed snapshot is left untouched unless every download and unpack
        step succeeded.
        """
        async with self._install_lock:
            try:
                updated = await self._sync()
            except RegistryError as e:
                logger.error(f"Failed to install registry {self}. {e}")
                return InstallResult(status=InstallStatus.FAILED, error=str(e))

        if not updated:
            return InstallResult(status=InstallStatus.UP_TO_DATE)
        return InstallResult(status=InstallStatus.UPDATED)

    async def _sync(self) -> bool:
        self.store.ensure_root()

        logger.debug(f"Downloading latest registry metadata for {self}")
        info = await self._fetch_remote_info()
        logger.debug(f"Resolved latest registry version for {self}: {info.version}")

        if self._installed_version() == info.version:
            logger.info(f"Registry {self} is up to date (version {info.version})")
            return False

        contents = await self._fetch_catalog()
        expected = info.checksums.get(CATALOG_FILE)
        if expected:
            actual = hashlib.sha256(contents).hexdigest()
            if actual.lower() != expected.lower():
                raise UnpackError(
                    f"Checksum mismatch for {CATALOG_FILE}: expected {expected}, got {actual}"
                )

        await self.store.write_snapshot(
            contents,
            SnapshotInfo(
                checksums=info.checksums,
                version=info.version,
                download_timestamp=int(time.time()),
            ),
        )
        logger.info(f"Installed registry {self} version {info.version}")

        # A catalog that was persisted but cannot be read is still a failed install.
        await asyncio.to_thread(self.reload)
        return True

    def _installed_version(self) -> Optional[str]:
        if not self.is_installed():
            return None
        try:
            return self.get_info().version
        except CatalogParseError as e:
            logger.warning(f"Ignoring unreadable snapshot metadata of {self}: {e}")
            return None

    async def _fetch_remote_info(self) -> RemoteInfo:
        url = f"{self.spec.url}/{INFO_FILE}"
        try:
            body = await self.fetcher.fetch(url)
            return RemoteInfo.model_validate_json(body)
        except (httpx.HTTPError, httpx.InvalidURL, ValidationError) as e:
            logger.debug(f"Fetching {url} failed: {e}")
            raise DownloadError("metadata", "Failed to download registry metadata.") from e

    async def _fetch_catalog(self) -> bytes:
        zip_file = self.store.archive_path
        url = f"{self.spec.url}/{ARCHIVE_FILE}"
        try:
            await self.fetcher.download(url, zip_file)
        except (httpx.HTTPError, httpx.InvalidURL, OSError) as e:
            logger.debug(f"Downloading {url} failed: {e}")
            raise DownloadError("archive", "Failed to download registry archive.") from e

        try:
            try:
                async with aiofiles.open(zip_file, "rb") as f:
                    buffer = await f.read()
            except OSError as e:
                raise RegistryIOError(f"Failed to read {zip_file}: {e}") from e
            try:
                return await asyncio.to_thread(_unzip, buffer, CATALOG_FILE)
            except UNPACK_ERRORS as e:
                raise UnpackError("Failed to unpack registry archive.") from e
        finally:
            try:
                zip_file.unlink(missing_ok=True)
            except OSError as e:
                logger.debug(f"Could not remove {zip_file}: {e}")

    def __str__(self) -> str:
        return f"HttpRegistrySource(url={self.spec.url})"


def _unzip(buffer: bytes, entry_name: str) -> bytes:
    with zipfile.ZipFile(io.BytesIO(buffer), "r") as zip_ref:
        return zip_ref.read(entry_name)
