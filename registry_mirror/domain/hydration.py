"""
Turn raw catalog entries into the name-keyed package index.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional

from pydantic import ValidationError

from registry_mirror.domain.entities import Package
from registry_mirror.domain.models import DEFAULT_SCHEMA, PackageSpec

logger = logging.getLogger(__name__)

SUPPORTED_SCHEMAS = frozenset({DEFAULT_SCHEMA})


def map_registry_spec(raw: Any) -> Optional[PackageSpec]:
    """
    Validate one raw catalog entry.

    Returns None for entries that are malformed or use a schema this version
    does not understand; those are skipped rather than failing the catalog.
    """
    if not isinstance(raw, dict):
        logger.debug(f"Skipping non-object catalog entry: {raw!r}")
        return None

    try:
        spec = PackageSpec.model_validate(raw)
    except ValidationError as e:
        logger.debug(f"Skipping malformed catalog entry {raw.get('name')!r}: {e}")
        return None

    if spec.schema_ not in SUPPORTED_SCHEMAS:
        logger.debug(f"Skipping {spec.name}: unsupported schema {spec.schema_}")
        return None
    return spec


def hydrate_package(previous: Dict[str, Package], spec: PackageSpec) -> Package:
    pkg = previous.get(spec.name)
    if pkg is not None:
        # Reuse the instance so callers holding it see the new spec.
        pkg.spec = spec
        return pkg
    return Package(spec)


def hydrate(previous: Optional[Dict[str, Package]], raw_entries: Iterable[Any]) -> Dict[str, Package]:
    """
    Build a new index from raw catalog entries.

    Packages already present in ``previous`` are updated in place and keep
    their runtime state. Names missing from the new catalog are dropped.
    """
    previous = previous or {}
    index: Dict[str, Package] = {}
    for raw in raw_entries:
        spec = map_registry_spec(raw)
        if spec is None:
            continue
        index[spec.name] = hydrate_package(previous, spec)
    return index
