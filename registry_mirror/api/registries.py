from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, status

from registry_mirror.core.dependencies import get_sources
from registry_mirror.domain.errors import CatalogParseError
from registry_mirror.services.updater import RegistrySources, update_registries
from registry_mirror.storage.source_base import RegistrySource

logger = logging.getLogger(__name__)
router = APIRouter()


def _get_source(source_id: str, sources: RegistrySources) -> RegistrySource:
    source = sources.get(source_id)
    if source is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown registry {source_id}")
    return source


def _corrupt_cache(source: RegistrySource, e: CatalogParseError) -> HTTPException:
    logger.error(f"Local snapshot of {source} is unreadable: {e}")
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=f"Local snapshot of registry {source.id} is unreadable; reinstall it.",
    )


@router.get("/registries")
async def list_registries(sources: RegistrySources = Depends(get_sources)) -> List[Dict[str, Any]]:
    """
    All configured registries with their display label.
    """
    result = []
    for source in sources:
        try:
            label = source.get_display_label()
        except CatalogParseError as e:
            logger.warning(f"Could not read snapshot metadata of {source}: {e}")
            label = f"{source.id} [unreadable]"
        result.append({"id": source.id, "label": label, "installed": source.is_installed()})
    return result


@router.get("/registries/{source_id}/packages")
async def list_packages(source_id: str, sources: RegistrySources = Depends(get_sources)) -> List[str]:
    source = _get_source(source_id, sources)
    try:
        return sorted(source.get_all_package_names())
    except CatalogParseError as e:
        raise _corrupt_cache(source, e)


@router.get("/registries/{source_id}/packages/{name}")
async def get_package(
    source_id: str,
    name: str,
    sources: RegistrySources = Depends(get_sources),
) -> Dict[str, Any]:
    source = _get_source(source_id, sources)
    try:
        package = source.get_package(name)
    except CatalogParseError as e:
        raise _corrupt_cache(source, e)
    if package is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown package {name}")
    return package.to_dict()


@router.post("/registries/update")
async def update(sources: RegistrySources = Depends(get_sources)) -> Dict[str, Any]:
    """
    Install or refresh every configured registry.
    """
    results = await update_registries(sources)
    return {
        source_id: {"status": result.status.value, "error": result.error}
        for source_id, result in results.items()
    }
