"""HTTP client for the Figma REST API."""

from __future__ import annotations

import asyncio
import json
import os
from functools import partial
from http.client import HTTPException
from typing import Callable, Dict, Mapping, Optional, Sequence
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlencode
from urllib.request import Request, urlopen

from .errors import TransportError
from .logging import get_logger
from .models import DesignFile

Transport = Callable[[str, Mapping[str, str], float], bytes]


class FigmaClient:
    """Fetches documents, image locators and image bytes from Figma.

    Requests are blocking ``urllib`` calls executed in the default executor so
    that callers can await them. ``transport`` replaces the HTTP layer (tests
    pass an in-memory fake).
    """

    DEFAULT_BASE_URL = "https://api.figma.com/v1"
    DEFAULT_TIMEOUT = 60.0
    ENV_TOKEN_KEYS = ("FIGPULL_FIGMA_TOKEN", "FIGMA_TOKEN")

    def __init__(
        self,
        token: str | None = None,
        *,
        base_url: str | None = None,
        request_timeout: Optional[float] = None,
        transport: Transport | None = None,
    ) -> None:
        resolved = token or _first_env_value(self.ENV_TOKEN_KEYS)
        if not resolved:
            raise TransportError(
                "A Figma access token is required. Pass --token or set FIGMA_TOKEN."
            )
        self.token = resolved
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.request_timeout = request_timeout or self.DEFAULT_TIMEOUT
        self._transport = transport or http_get
        self.logger = get_logger("client")

    @property
    def headers(self) -> Dict[str, str]:
        return {"X-Figma-Token": self.token, "Content-Type": "application/json"}

    async def fetch_document(self, file_key: str) -> DesignFile:
        url = f"{self.base_url}/files/{quote(file_key, safe='')}"
        self.logger.debug("Fetching document %s", file_key)
        payload = await self._get_json(url, context="Failed to load Figma file")
        return DesignFile.from_dict(payload)

    async def fetch_image_locators(
        self,
        file_key: str,
        node_ids: Sequence[str],
        *,
        format: str = "svg",
        scale: float = 1.0,
    ) -> Dict[str, str]:
        """Return node id -> rendered image URL for ``node_ids``."""
        if not node_ids:
            return {}
        query = urlencode({"ids": ",".join(node_ids), "format": format, "scale": scale})
        url = f"{self.base_url}/images/{quote(file_key, safe='')}?{query}"
        self.logger.debug("Requesting %d image locators for %s", len(node_ids), file_key)
        payload = await self._get_json(url, context="Failed to get images")
        error = payload.get("err")
        if isinstance(error, str) and error:
            raise TransportError(f"Failed to get images: {error}")
        images = payload.get("images")
        if not isinstance(images, dict):
            return {}
        return {
            str(node_id): locator
            for node_id, locator in images.items()
            if isinstance(locator, str)
        }

    async def fetch_bytes(self, locator: str, *, timeout: Optional[float] = None) -> bytes:
        # Image URLs are pre-signed; the API token is not sent to the CDN.
        return await self._request(
            locator,
            headers={},
            timeout=timeout or self.request_timeout,
            context="Failed to download image",
        )

    def locator_lookup(self, file_key: str):
        """Bind ``file_key`` for use as an icon collector lookup."""

        async def _lookup(node_ids: Sequence[str], format: str, scale: float) -> Dict[str, str]:
            return await self.fetch_image_locators(file_key, node_ids, format=format, scale=scale)

        return _lookup

    async def _get_json(self, url: str, *, context: str) -> Dict[str, object]:
        raw = await self._request(
            url, headers=self.headers, timeout=self.request_timeout, context=context
        )
        try:
            payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise TransportError(f"{context}: response was not valid JSON") from exc
        if not isinstance(payload, dict):
            raise TransportError(f"{context}: unexpected response payload")
        return payload

    async def _request(
        self, url: str, *, headers: Mapping[str, str], timeout: float, context: str
    ) -> bytes:
        loop = asyncio.get_running_loop()
        call = partial(self._transport, url, headers, timeout)
        try:
            return await loop.run_in_executor(None, call)
        except TransportError as exc:
            raise TransportError(
                f"{context}: {exc.args[0]}", status=exc.status, body=exc.body
            ) from exc


def http_get(url: str, headers: Mapping[str, str], timeout: float) -> bytes:
    """Perform a GET request, mapping failures onto :class:`TransportError`."""
    try:
        request = Request(url, headers=dict(headers), method="GET")
        with urlopen(request, timeout=timeout) as response:  # type: ignore[arg-type]
            return response.read()
    except HTTPError as exc:
        detail = exc.read().decode("utf-8", errors="ignore") if hasattr(exc, "read") else ""
        raise TransportError(
            f"status {exc.code}", status=exc.code, body=detail.strip() or None
        ) from exc
    except URLError as exc:
        raise TransportError(f"network error: {exc.reason}") from exc
    except TimeoutError as exc:
        raise TransportError("request timed out") from exc
    except (HTTPException, OSError) as exc:
        raise TransportError(f"connection failed: {exc!r}") from exc
    except ValueError as exc:
        raise TransportError(f"invalid request URL {url!r}: {exc}") from exc


def _first_env_value(keys: Sequence[str]) -> str | None:
    for key in keys:
        value = os.getenv(key)
        if value:
            return value
    return None


__all__ = ["FigmaClient", "Transport", "http_get"]
