from __future__ import annotations

from typing import Any, Dict, Optional

from registry_mirror.domain.models import PackageSpec


class Package:
    """
    A package known to a registry source.

    The spec is replaced whenever the catalog is reloaded. Everything else on
    the instance is runtime state that outlives reloads.
    """

    def __init__(self, spec: PackageSpec):
        self.spec = spec
        self.installed_version: Optional[str] = None
        self.state: Dict[str, Any] = {}

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def version(self) -> Optional[str]:
        return self.spec.version

    def to_dict(self) -> Dict[str, Any]:
        data = self.spec.model_dump(mode="json", by_alias=True, exclude_none=True)
        if self.installed_version is not None:
            data["installed_version"] = self.installed_version
        return data

    def __repr__(self) -> str:
        return f"Package(name={self.name!r}, version={self.version!r})"
