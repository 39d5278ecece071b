"""HTTP document fetching for catalogs and libraries."""

from __future__ import annotations

import base64
import binascii
from typing import Any
from urllib.parse import unquote_to_bytes, urlparse

import httpx
from loguru import logger

from src.core.config import settings
from src.modules.libraries.domain.documents import parse_json_bytes
from src.modules.libraries.domain.exceptions import NetworkError, ParseError


def decode_data_uri(uri: str) -> bytes:
    """Decode the payload of a ``data:`` URI."""
    header, sep, payload = uri.partition(",")
    if not sep:
        raise ParseError("Malformed data URI")
    try:
        if header.lower().endswith(";base64"):
            return base64.b64decode(payload, validate=False)
        return unquote_to_bytes(payload)
    except (binascii.Error, ValueError) as exc:
        raise ParseError(f"Malformed data URI: {exc}") from exc


class HttpDocumentFetcher:
    """Fetch JSON documents over HTTP(S), decoding data URIs locally.

    No timeout is applied unless LIBRARY_FETCH_TIMEOUT_SEC is set: failures
    surface only when the transport rejects or errors.
    """

    def __init__(
        self,
        *,
        timeout_sec: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout_sec = (
            timeout_sec if timeout_sec is not None else settings.LIBRARY_FETCH_TIMEOUT_SEC
        )
        self.transport = transport

    async def fetch_json(self, url: str) -> Any:
        if urlparse(url).scheme.lower() == "data":
            return parse_json_bytes(decode_data_uri(url), origin="data URI")

        content = await self._fetch_bytes(url)
        return parse_json_bytes(content, origin=url)

    async def _fetch_bytes(self, url: str) -> bytes:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_sec,
                follow_redirects=True,
                transport=self.transport,
            ) as client:
                response = await client.get(
                    url,
                    headers={
                        "User-Agent": settings.FETCHER_USER_AGENT,
                        "Accept": "application/json, */*;q=0.8",
                    },
                )
                response.raise_for_status()
                return response.content
        except httpx.HTTPStatusError as exc:
            logger.warning(f"Fetch HTTP error for {url}: {exc.response.status_code}")
            raise NetworkError(f"HTTP {exc.response.status_code} for {url}") from exc
        except httpx.HTTPError as exc:
            logger.warning(f"Fetch failed for {url}: {exc}")
            raise NetworkError(f"Request failed for {url}: {exc}") from exc
