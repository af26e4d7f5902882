from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import ValidationError

from registry_mirror.domain.errors import CatalogParseError
from registry_mirror.domain.models import FileRegistrySourceSpec, RegistriesConfig, SourceSpec
from registry_mirror.services.fetcher import Fetcher
from registry_mirror.services.file_source import FileRegistrySource
from registry_mirror.services.http_source import HttpRegistrySource
from registry_mirror.storage.source_base import RegistrySource

logger = logging.getLogger(__name__)


def load_registries_config(path: Path) -> RegistriesConfig:
    """
    Load registries.yaml. A missing file means no sources are configured.
    """
    if not path.exists():
        logger.info(f"No registry configuration at {path}")
        return RegistriesConfig()

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        return RegistriesConfig.model_validate(raw)
    except (yaml.YAMLError, ValidationError) as e:
        raise CatalogParseError(f"Invalid registry configuration {path}: {e}") from e


def create_source(
    spec: SourceSpec,
    registry_prefix: Path,
    fetcher: Optional[Fetcher] = None,
) -> RegistrySource:
    if isinstance(spec, FileRegistrySourceSpec):
        return FileRegistrySource(spec)
    return HttpRegistrySource(spec, registry_prefix, fetcher=fetcher)


def create_sources(
    config: RegistriesConfig,
    registry_prefix: Path,
    fetcher: Optional[Fetcher] = None,
) -> List[RegistrySource]:
    sources = [create_source(spec, registry_prefix, fetcher) for spec in config.sources]
    ids = [s.id for s in sources]
    duplicates = sorted({i for i in ids if ids.count(i) > 1})
    if duplicates:
        raise CatalogParseError(f"Duplicate registry source ids: {', '.join(duplicates)}")
    return sources
