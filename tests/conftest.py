import hashlib
import io
import json
import zipfile
from typing import List, Optional

import httpx
import pytest

from registry_mirror.domain.models import RegistrySourceSpec
from registry_mirror.services.fetcher import Fetcher
from registry_mirror.services.http_source import HttpRegistrySource


BASE_URL = "https://registry.test/core"


def make_archive(
    catalog: bytes,
    entry_name: str = "registry.json",
    compression: int = zipfile.ZIP_DEFLATED,
) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression) as zf:
        zf.writestr(entry_name, catalog)
    return buffer.getvalue()


def patch_zip_headers(archive: bytes, flag_bits: int = 0, compress_type: Optional[int] = None) -> bytes:
    """
    Rewrite the general purpose flags and compression method of every entry,
    in both the local file headers and the central directory.
    """
    data = bytearray(archive)
    for signature, flag_offset, method_offset in ((b"PK\x03\x04", 6, 8), (b"PK\x01\x02", 8, 10)):
        pos = data.find(signature)
        while pos != -1:
            flags = int.from_bytes(data[pos + flag_offset:pos + flag_offset + 2], "little") | flag_bits
            data[pos + flag_offset:pos + flag_offset + 2] = flags.to_bytes(2, "little")
            if compress_type is not None:
                data[pos + method_offset:pos + method_offset + 2] = compress_type.to_bytes(2, "little")
            pos = data.find(signature, pos + 4)
    return bytes(data)


class FakeRegistryRemote:
    """Serves info.json and registry.json.zip through an httpx.MockTransport."""

    def __init__(self, version: str = "1.0.0", entries: Optional[List[dict]] = None):
        self.version = version
        self.entries = entries if entries is not None else [
            {"name": "foo", "version": "1.0"},
            {"name": "bar", "version": "0.3.1"},
        ]
        self.requests: List[str] = []
        self.fail_info = False
        self.fail_archive = False
        self.archive_override: Optional[bytes] = None
        self.checksum_override: Optional[str] = None

    @property
    def catalog(self) -> bytes:
        return json.dumps(self.entries).encode("utf-8")

    def count(self, file_name: str) -> int:
        return sum(1 for path in self.requests if path.endswith(f"/{file_name}"))

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.requests.append(path)
        if path.endswith("/info.json"):
            if self.fail_info:
                return httpx.Response(500)
            checksum = self.checksum_override or hashlib.sha256(self.catalog).hexdigest()
            return httpx.Response(
                200,
                json={"checksums": {"registry.json": checksum}, "version": self.version},
            )
        if path.endswith("/registry.json.zip"):
            if self.fail_archive:
                return httpx.Response(503)
            content = self.archive_override if self.archive_override is not None else make_archive(self.catalog)
            return httpx.Response(200, content=content)
        return httpx.Response(404)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def remote() -> FakeRegistryRemote:
    return FakeRegistryRemote()


@pytest.fixture
def registry_prefix(tmp_path):
    return tmp_path / "registries"


@pytest.fixture
def source(remote, registry_prefix) -> HttpRegistrySource:
    spec = RegistrySourceSpec(id="core", name="core", url=BASE_URL)
    fetcher = Fetcher(retries=1, transport=remote.transport())
    return HttpRegistrySource(spec, registry_prefix, fetcher=fetcher)


@pytest.fixture
def archive_factory():
    return make_archive


@pytest.fixture
def header_patcher():
    return patch_zip_headers
