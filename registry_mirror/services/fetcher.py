"""
Fetch registry resources over HTTP.
"""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

import aiofiles
import httpx

logger = logging.getLogger(__name__)


class Fetcher:
    """
    Thin wrapper around httpx with a basic retry loop.

    A custom transport can be supplied, which is how tests serve canned
    responses without touching the network.
    """

    def __init__(
        self,
        timeout: float = 60.0,
        retries: int = 3,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self.retries = max(1, retries)
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            follow_redirects=True,
            timeout=self.timeout,
            transport=self.transport,
        )

    async def fetch(self, url: str) -> bytes:
        """Return the body of ``url``. Raises httpx.HTTPError on failure."""
        last_error: Optional[httpx.HTTPError] = None
        for attempt in range(1, self.retries + 1):
            try:
                async with self._client() as client:
                    response = await client.get(url)
                    response.raise_for_status()
                    return response.content
            except httpx.HTTPError as e:
                last_error = e
                if attempt < self.retries:
                    logger.debug(f"Fetching {url} failed (attempt {attempt}/{self.retries}): {e}. Retrying...")
                    await asyncio.sleep(1.0 * attempt)
        raise last_error

    async def download(self, url: str, out_file: Path) -> None:
        """
        Stream ``url`` into ``out_file``.

        A partially written file may be left behind on failure; the next
        download overwrites it.
        """
        last_error: Optional[httpx.HTTPError] = None
        for attempt in range(1, self.retries + 1):
            try:
                async with self._client() as client:
                    async with client.stream("GET", url) as response:
                        response.raise_for_status()
                        async with aiofiles.open(out_file, "wb") as f:
                            async for chunk in response.aiter_bytes():
                                await f.write(chunk)
                return
            except httpx.HTTPError as e:
                last_error = e
                if attempt < self.retries:
                    logger.debug(f"Downloading {url} failed (attempt {attempt}/{self.retries}): {e}. Retrying...")
                    await asyncio.sleep(1.0 * attempt)
        raise last_error
