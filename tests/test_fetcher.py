import asyncio

import httpx
import pytest

from registry_mirror.services import fetcher as fetcher_module
from registry_mirror.services.fetcher import Fetcher


@pytest.fixture(autouse=True)
def no_backoff(monkeypatch):
    async def _no_sleep(_seconds):
        return None

    monkeypatch.setattr(fetcher_module.asyncio, "sleep", _no_sleep)


def _flaky_handler(failures):
    calls = []

    def handler(request):
        calls.append(request.url.path)
        if len(calls) <= failures:
            return httpx.Response(502)
        return httpx.Response(200, content=b"payload")

    return handler, calls


def test_fetch_returns_body():
    handler, calls = _flaky_handler(0)
    f = Fetcher(retries=1, transport=httpx.MockTransport(handler))
    assert asyncio.run(f.fetch("https://registry.test/info.json")) == b"payload"
    assert calls == ["/info.json"]


def test_fetch_retries_then_succeeds():
    handler, calls = _flaky_handler(2)
    f = Fetcher(retries=3, transport=httpx.MockTransport(handler))
    assert asyncio.run(f.fetch("https://registry.test/info.json")) == b"payload"
    assert len(calls) == 3


def test_fetch_gives_up_after_retries():
    handler, calls = _flaky_handler(5)
    f = Fetcher(retries=2, transport=httpx.MockTransport(handler))
    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(f.fetch("https://registry.test/info.json"))
    assert len(calls) == 2


def test_download_writes_file(tmp_path):
    handler, _ = _flaky_handler(1)
    out_file = tmp_path / "registry.json.zip"
    f = Fetcher(retries=2, transport=httpx.MockTransport(handler))
    asyncio.run(f.download("https://registry.test/registry.json.zip", out_file))
    assert out_file.read_bytes() == b"payload"


def test_download_overwrites_leftover_file(tmp_path):
    handler, _ = _flaky_handler(0)
    out_file = tmp_path / "registry.json.zip"
    out_file.write_bytes(b"partial leftover from an earlier attempt")
    f = Fetcher(retries=1, transport=httpx.MockTransport(handler))
    asyncio.run(f.download("https://registry.test/registry.json.zip", out_file))
    assert out_file.read_bytes() == b"payload"


def test_download_failure_raises(tmp_path):
    handler, _ = _flaky_handler(1)
    f = Fetcher(retries=1, transport=httpx.MockTransport(handler))
    with pytest.raises(httpx.HTTPError):
        asyncio.run(f.download("https://registry.test/registry.json.zip", tmp_path / "x.zip"))
