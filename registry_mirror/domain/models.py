from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_SCHEMA = "registry+v1"


class RegistrySourceSpec(BaseModel):
    """
    Configuration of one HTTP-backed registry source.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["http"] = "http"
    id: str = Field(description="Stable identifier of the source.")
    name: str = Field(description="Human-readable name, also used as the directory name.")
    url: str = Field(description="Base URL serving info.json and registry.json.zip.")


class FileRegistrySourceSpec(BaseModel):
    """
    Configuration of a registry source backed by a local directory.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["file"] = "file"
    id: str
    name: str
    path: str = Field(description="Directory holding a registry.json catalog.")


SourceSpec = Union[RegistrySourceSpec, FileRegistrySourceSpec]


class RegistriesConfig(BaseModel):
    """
    The configured registry sources.
    Persisted at: <DATA_DIR>/registries.yaml
    """

    refresh_interval_seconds: int = Field(
        default=86400,
        ge=60,
        description="How often all sources are re-installed in the background.",
    )
    sources: List[SourceSpec] = Field(default_factory=list)


class RemoteInfo(BaseModel):
    """Registry metadata as published at <url>/info.json."""

    checksums: Dict[str, str] = Field(default_factory=dict)
    version: str


class SnapshotInfo(RemoteInfo):
    """
    Metadata of the locally installed snapshot.
    Persisted at: <root>/info.json
    """

    download_timestamp: int = 0


class PackageSpec(BaseModel):
    """
    One catalog entry as published by the registry.

    Only the name is required. Fields this version does not know about are
    kept as extras so they survive a round trip.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str = Field(min_length=1)
    schema_: str = Field(default=DEFAULT_SCHEMA, alias="schema")
    version: Optional[str] = None
    description: Optional[str] = None
    homepage: Optional[str] = None
    licenses: List[str] = Field(default_factory=list)
    languages: List[str] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=list)
    source: Dict[str, Any] = Field(default_factory=dict)
