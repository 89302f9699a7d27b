from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from domain.models.team import Upload
from domain.exceptions import AssetUploadFailed
from infrastructure.adapters.storage.local_asset_store import LocalAssetStore
from infrastructure.adapters.storage.http_asset_store import HttpAssetStore


def test_local_store_writes_file_and_returns_url(tmp_path: Path) -> None:
    store = LocalAssetStore(root=str(tmp_path / "uploads"), base_url="/static/")

    url = store.store(Upload("../My Deck.pdf", "application/pdf", b"%PDF-1.7"))

    assert url.startswith("/static/")
    assert url.endswith("_My_Deck.pdf")
    written = list((tmp_path / "uploads").iterdir())
    assert len(written) == 1
    assert written[0].read_bytes() == b"%PDF-1.7"
    assert url.rsplit("/", 1)[1] == written[0].name


def test_local_store_failure_is_reported(tmp_path: Path) -> None:
    blocker = tmp_path / "taken"
    blocker.write_text("not a directory")
    store = LocalAssetStore(root=str(blocker))

    with pytest.raises(AssetUploadFailed):
        store.store(Upload("a.txt", "text/plain", b"a"))


def _http_store(handler) -> HttpAssetStore:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return HttpAssetStore(upload_url="https://upload.test/image/upload", client=client)


def test_http_store_posts_multipart_and_reads_secure_url() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["body"] = request.read()
        return httpx.Response(200, json={"secure_url": "https://cdn.test/logo.png", "url": "http://cdn.test/logo.png"})

    url = _http_store(handler).store(Upload("logo.png", "image/png", b"PNGDATA"))

    assert url == "https://cdn.test/logo.png"
    assert seen["method"] == "POST"
    assert b'name="file"; filename="logo.png"' in seen["body"]
    assert b"PNGDATA" in seen["body"]


def test_http_store_falls_back_to_url() -> None:
    store = _http_store(lambda request: httpx.Response(201, json={"url": "http://cdn.test/a"}))
    assert store.store(Upload("a.txt", "text/plain", b"a")) == "http://cdn.test/a"


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"error": "boom"}),
        httpx.Response(200, json={"public_id": "abc"}),
        httpx.Response(200, text="<html>"),
        httpx.Response(200, json=["https://cdn.test/a"]),
    ],
)
def test_http_store_failures(response) -> None:
    store = _http_store(lambda request: response)
    with pytest.raises(AssetUploadFailed):
        store.store(Upload("a.txt", "text/plain", b"a"))


def test_http_store_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(AssetUploadFailed):
        _http_store(handler).store(Upload("a.txt", "text/plain", b"a"))
