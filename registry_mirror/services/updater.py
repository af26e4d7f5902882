"""
Install and periodically refresh a set of registry sources.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Dict, Iterable, List, Optional

from registry_mirror.storage.source_base import InstallResult, InstallStatus, RegistrySource

logger = logging.getLogger(__name__)


class RegistrySources:
    """Ordered collection of configured sources, addressable by id."""

    def __init__(self, sources: Iterable[RegistrySource] = ()):
        self._sources: Dict[str, RegistrySource] = {}
        for source in sources:
            self._sources[source.id] = source

    def get(self, source_id: str) -> Optional[RegistrySource]:
        return self._sources.get(source_id)

    def __iter__(self):
        return iter(self._sources.values())

    def __len__(self) -> int:
        return len(self._sources)


async def update_registries(sources: Iterable[RegistrySource]) -> Dict[str, InstallResult]:
    """
    Install every source concurrently.

    Sources share no state, so a failing source does not affect the others.
    """
    targets: List[RegistrySource] = []
    installers = []
    for source in sources:
        installer = source.get_installer()
        if installer is None:
            continue
        targets.append(source)
        installers.append(installer())

    results = await asyncio.gather(*installers, return_exceptions=True)
    summary: Dict[str, InstallResult] = {}
    for source, result in zip(targets, results):
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            logger.error(f"Installer of {source} raised: {result}", exc_info=result)
            result = InstallResult(status=InstallStatus.FAILED, error=str(result))
        summary[source.id] = result

    failed = [sid for sid, result in summary.items() if result.status == InstallStatus.FAILED]
    if failed:
        logger.warning(f"Registry update finished with failures: {', '.join(failed)}")
    else:
        logger.info(f"Updated {len(summary)} registries")
    return summary


async def refresh_loop(sources: RegistrySources, interval_seconds: int) -> None:
    """
    Re-install all sources every ``interval_seconds``.
    """
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await update_registries(sources)
        except Exception as e:
            logger.error(f"Error in registry refresh loop: {e}", exc_info=True)
