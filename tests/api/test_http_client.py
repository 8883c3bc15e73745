"""Tests for the float data HTTP client."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest

from floatcmd.api.client import FloatDataClient
from floatcmd.api.errors import FloatError, NetworkError, NetworkTimeoutError

if TYPE_CHECKING:
    from pytest_httpx import HTTPXMock

URL = "https://floats.example.org/SOM/N0001_all.txt"


class TestGetText:
    @pytest.mark.asyncio
    async def test_returns_body(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=URL, text="N0001 row\n")
        async with FloatDataClient() as client:
            assert await client.get_text(URL) == "N0001 row\n"

    @pytest.mark.asyncio
    async def test_http_error_status(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=URL, status_code=404)
        async with FloatDataClient() as client:
            with pytest.raises(NetworkError) as exc_info:
                await client.get_text(URL)
        assert exc_info.value.status_code == 404
        assert exc_info.value.url == URL
        assert "HTTP 404" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_connect_error(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_exception(httpx.ConnectError("refused"), url=URL)
        async with FloatDataClient() as client:
            with pytest.raises(NetworkError) as exc_info:
                await client.get_text(URL)
        assert exc_info.value.status_code is None
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_timeout(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_exception(httpx.ConnectTimeout("slow"), url=URL)
        async with FloatDataClient() as client:
            with pytest.raises(NetworkTimeoutError):
                await client.get_text(URL)

    @pytest.mark.asyncio
    async def test_follows_redirects(self, httpx_mock: HTTPXMock) -> None:
        moved = "https://mirror.example.org/N0001_all.txt"
        httpx_mock.add_response(url=URL, status_code=301, headers={"Location": moved})
        httpx_mock.add_response(url=moved, text="moved body")
        async with FloatDataClient() as client:
            assert await client.get_text(URL) == "moved body"


class TestErrorHierarchy:
    def test_all_errors_share_base(self) -> None:
        assert issubclass(NetworkTimeoutError, NetworkError)
        assert issubclass(NetworkError, FloatError)
