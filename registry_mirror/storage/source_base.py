from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Optional

from pydantic import BaseModel

from registry_mirror.domain.entities import Package
from registry_mirror.domain.hydration import hydrate
from registry_mirror.domain.models import PackageSpec


class InstallStatus(str, Enum):
    UPDATED = "updated"
    UP_TO_DATE = "up_to_date"
    FAILED = "failed"


class InstallResult(BaseModel):
    """Outcome of installing a registry source."""

    status: InstallStatus
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status != InstallStatus.FAILED

    def __bool__(self) -> bool:
        return self.ok


InstallFn = Callable[[], Awaitable[InstallResult]]


class RegistrySource(ABC):
    """
    Abstract base class for a provider of package metadata.

    Concrete sources own a snapshot of their catalog and a lazily built,
    name-keyed index of packages. Queries never perform network I/O.
    """

    def __init__(self, source_id: str):
        self.id = source_id
        self._index: Optional[Dict[str, Package]] = None

    @abstractmethod
    def is_installed(self) -> bool:
        """Whether a usable snapshot is present locally."""
        pass

    @abstractmethod
    async def install(self) -> InstallResult:
        """Bring the local snapshot up to date. Never raises."""
        pass

    @abstractmethod
    def get_display_label(self) -> str:
        """Human-readable label including the installed version, if any."""
        pass

    @abstractmethod
    def _read_catalog(self) -> List[object]:
        """Return the raw catalog entries of the current snapshot."""
        pass

    def reload(self) -> Optional[Dict[str, Package]]:
        """
        Rebuild the package index from the persisted catalog.

        The new index replaces the old one in a single assignment.
        """
        if not self.is_installed():
            return None
        self._index = hydrate(self._index, self._read_catalog())
        return self._index

    def _get_index(self) -> Dict[str, Package]:
        if self._index is not None:
            return self._index
        return self.reload() or {}

    def get_package(self, name: str) -> Optional[Package]:
        return self._get_index().get(name)

    def get_all_package_names(self) -> List[str]:
        return list(self._get_index().keys())

    def get_all_package_specs(self) -> List[PackageSpec]:
        return [pkg.spec for pkg in self._get_index().values()]

    def get_installer(self) -> Optional[InstallFn]:
        return self.install
