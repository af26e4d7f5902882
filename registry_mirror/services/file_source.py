"""
Registry source backed by a local directory.

Useful for developing a registry: the directory holds a registry.json
catalog that is read in place, so installing only re-validates and reloads it.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from registry_mirror.domain.errors import RegistryError, RegistryIOError
from registry_mirror.domain.models import FileRegistrySourceSpec
from registry_mirror.storage.local_store import CATALOG_FILE, load_catalog
from registry_mirror.storage.source_base import InstallResult, InstallStatus, RegistrySource

logger = logging.getLogger(__name__)


class FileRegistrySource(RegistrySource):

    def __init__(self, spec: FileRegistrySourceSpec):
        super().__init__(spec.id)
        self.spec = spec
        self.root_dir = Path(spec.path).expanduser()
        self.catalog_file = self.root_dir / CATALOG_FILE

    def is_installed(self) -> bool:
        return self.catalog_file.is_file()

    def _read_catalog(self) -> List[object]:
        if not self.is_installed():
            return []
        return load_catalog(self.catalog_file)

    def get_display_label(self) -> str:
        if self.is_installed():
            return f"{self.spec.name} (local: {self.root_dir})"
        return f"{self.spec.name} [uninstalled]"

    async def install(self) -> InstallResult:
        try:
            if not self.is_installed():
                raise RegistryIOError(f"No {CATALOG_FILE} found in {self.root_dir}")
            self.reload()
        except RegistryError as e:
            logger.error(f"Failed to install registry {self}. {e}")
            return InstallResult(status=InstallStatus.FAILED, error=str(e))
        logger.info(f"Loaded {len(self._index or {})} packages from {self}")
        return InstallResult(status=InstallStatus.UPDATED)

    def __str__(self) -> str:
        return f"FileRegistrySource(path={self.root_dir})"
