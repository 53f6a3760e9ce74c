"""Tests for the Figma REST client."""

from __future__ import annotations

import asyncio
from http.client import IncompleteRead
from pathlib import Path
from urllib.error import URLError

import pytest

from figpull import client as client_module
from figpull.client import FigmaClient, http_get
from figpull.downloader import IconDownloader
from figpull.errors import TransportError
from figpull.models import IconCandidate
from tests._fixtures.design_builder import design_payload, node, page
from tests._fixtures.fake_transport import FakeTransport


BASE = "https://api.figma.com/v1"


def test_client_requires_token(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("FIGMA_TOKEN", raising=False)
    monkeypatch.delenv("FIGPULL_FIGMA_TOKEN", raising=False)

    with pytest.raises(TransportError):
        FigmaClient()


def test_client_reads_token_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("FIGPULL_FIGMA_TOKEN", raising=False)
    monkeypatch.setenv("FIGMA_TOKEN", "env-token")

    client = FigmaClient(transport=FakeTransport({}))

    assert client.headers["X-Figma-Token"] == "env-token"


def test_fetch_document_sends_token_and_parses_payload() -> None:
    payload = design_payload(page("1:0", "Page", node("1:1", "Card")), name="Kit")
    transport = FakeTransport({f"{BASE}/files/ABC": payload})
    client = FigmaClient("secret", transport=transport, request_timeout=5)

    design = asyncio.run(client.fetch_document("ABC"))

    assert design.name == "Kit"
    assert [item.id for item in design.pages] == ["1:0"]
    url, headers, timeout = transport.calls[0]
    assert url == f"{BASE}/files/ABC"
    assert headers["X-Figma-Token"] == "secret"
    assert timeout == 5


def test_fetch_document_maps_http_errors() -> None:
    transport = FakeTransport(
        {f"{BASE}/files/": TransportError("status 403", status=403, body="Invalid token")}
    )
    client = FigmaClient("secret", transport=transport)

    with pytest.raises(TransportError) as excinfo:
        asyncio.run(client.fetch_document("ABC"))

    assert excinfo.value.status == 403
    assert "Failed to load Figma file: status 403" in str(excinfo.value)
    assert "Response: Invalid token" in str(excinfo.value)


def test_fetch_document_rejects_invalid_json() -> None:
    client = FigmaClient("secret", transport=FakeTransport({f"{BASE}/files/": b"<html>"}))

    with pytest.raises(TransportError, match="not valid JSON"):
        asyncio.run(client.fetch_document("ABC"))


def test_fetch_image_locators_builds_query_and_filters_nulls() -> None:
    transport = FakeTransport(
        {f"{BASE}/images/ABC": {"err": None, "images": {"1:1": "https://cdn/a.svg", "1:2": None}}}
    )
    client = FigmaClient("secret", transport=transport)

    locators = asyncio.run(
        client.fetch_image_locators("ABC", ["1:1", "1:2"], format="png", scale=2.0)
    )

    assert locators == {"1:1": "https://cdn/a.svg"}
    url = transport.calls[0][0]
    assert "ids=1%3A1%2C1%3A2" in url
    assert "format=png" in url
    assert "scale=2.0" in url


def test_fetch_image_locators_reports_api_error() -> None:
    transport = FakeTransport({f"{BASE}/images/": {"err": "Invalid node ids", "images": {}}})
    client = FigmaClient("secret", transport=transport)

    with pytest.raises(TransportError, match="Invalid node ids"):
        asyncio.run(client.fetch_image_locators("ABC", ["bad"]))


def test_fetch_image_locators_with_no_ids_skips_request() -> None:
    transport = FakeTransport({})
    client = FigmaClient("secret", transport=transport)

    assert asyncio.run(client.fetch_image_locators("ABC", [])) == {}
    assert transport.calls == []


def test_fetch_bytes_omits_api_token() -> None:
    transport = FakeTransport({"https://cdn/": b"<svg/>"})
    client = FigmaClient("secret", transport=transport)

    data = asyncio.run(client.fetch_bytes("https://cdn/a.svg", timeout=3))

    assert data == b"<svg/>"
    assert transport.calls == [("https://cdn/a.svg", {}, 3)]


def test_locator_lookup_binds_file_key() -> None:
    transport = FakeTransport({f"{BASE}/images/XYZ": {"images": {"1:1": "https://cdn/a.svg"}}})
    lookup = FigmaClient("secret", transport=transport).locator_lookup("XYZ")

    assert asyncio.run(lookup(["1:1"], "svg", 1.0)) == {"1:1": "https://cdn/a.svg"}


def test_http_get_maps_network_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    def _boom(*args, **kwargs):
        raise URLError("name resolution failed")

    monkeypatch.setattr(client_module, "urlopen", _boom)

    with pytest.raises(TransportError, match="network error"):
        http_get("https://api.figma.com/v1/files/ABC", {}, 1.0)


class _TruncatedResponse:
    def __enter__(self) -> "_TruncatedResponse":
        return self

    def __exit__(self, *exc_info: object) -> None:
        return None

    def read(self) -> bytes:
        raise IncompleteRead(b"<sv", 10)


def test_http_get_maps_truncated_bodies(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(client_module, "urlopen", lambda *args, **kwargs: _TruncatedResponse())

    with pytest.raises(TransportError, match="connection failed"):
        http_get("https://cdn.example/a.svg", {}, 1.0)


def test_http_get_maps_connection_resets(monkeypatch: pytest.MonkeyPatch) -> None:
    def _reset(*args, **kwargs):
        raise ConnectionResetError("peer reset")

    monkeypatch.setattr(client_module, "urlopen", _reset)

    with pytest.raises(TransportError):
        http_get("https://cdn.example/a.svg", {}, 1.0)


def test_http_get_rejects_malformed_locator() -> None:
    with pytest.raises(TransportError, match="invalid request URL"):
        http_get("not-a-url", {}, 1.0)


def test_truncated_downloads_count_as_item_failures(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(client_module, "urlopen", lambda *args, **kwargs: _TruncatedResponse())
    client = FigmaClient("secret")
    icons = [
        IconCandidate(
            node_id=f"1:{index}",
            name=f"icon{index}",
            original_name=f"Icon {index}",
            file_name=f"icon_{index}.svg",
            remote_locator=f"https://cdn.example/{index}.svg",
            format="svg",
        )
        for index in range(3)
    ]

    async def _no_sleep(delay: float) -> None:
        return None

    report = asyncio.run(IconDownloader(client.fetch_bytes, sleep=_no_sleep).download(icons, tmp_path))

    assert report.failed == ["icon_0.svg", "icon_1.svg", "icon_2.svg"]
    assert not report.aborted
