"""Thin async HTTP client for the float data server."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from floatcmd.api.errors import NetworkError, NetworkTimeoutError

if TYPE_CHECKING:
    from types import TracebackType

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class FloatDataClient:
    """Fetch directory listings and per-device text files over plain HTTP.

    No authentication is involved; every request is a single GET with no
    retry.  Failures are mapped onto :class:`NetworkError` so callers never
    have to know about ``httpx`` exception types.
    """

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    async def get_text(self, url: str) -> str:
        """GET *url* and return the decoded body.

        Raises:
            NetworkTimeoutError: The request timed out.
            NetworkError: Transport failure or an HTTP status >= 400.
        """
        logger.debug("GET %s", url)
        try:
            resp = await self._client.get(url)
        except httpx.TimeoutException as exc:
            raise NetworkTimeoutError(f"Timed out fetching {url}", url=url) from exc
        except httpx.HTTPError as exc:
            raise NetworkError(f"Failed to fetch {url}: {exc}", url=url) from exc

        if resp.status_code >= 400:
            raise NetworkError(
                f"HTTP {resp.status_code} fetching {url}",
                url=url,
                status_code=resp.status_code,
            )
        return resp.text

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> FloatDataClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()
