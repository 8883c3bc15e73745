"""Discover devices from the data server's directory listing."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from floatcmd.api.errors import NetworkError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from floatcmd.api.client import FloatDataClient

logger = logging.getLogger(__name__)

DEFAULT_FILE_SUFFIX = "_all"

_HREF_RE = re.compile(r"""href\s*=\s*(?:"([^"]*)"|'([^']*)')""", re.IGNORECASE)


def device_file_pattern(file_suffix: str = DEFAULT_FILE_SUFFIX) -> re.Pattern[str]:
    """Return the filename pattern for *file_suffix*.

    One uppercase letter, four digits, the suffix, then ``.txt``
    (e.g. ``N0001_all.txt``).
    """
    return re.compile(rf"^[A-Z]\d{{4}}{re.escape(file_suffix)}\.txt$")


def extract_hrefs(markup: str) -> list[str]:
    """Return every ``href`` attribute value in *markup*, in document order."""
    return [double or single for double, single in _HREF_RE.findall(markup)]


def match_device_files(hrefs: Iterable[str], pattern: re.Pattern[str]) -> list[str]:
    """Keep the ``.txt`` hrefs whose basename fully matches *pattern*.

    Order is preserved and duplicates are dropped.
    """
    seen: set[str] = set()
    matched: list[str] = []
    for href in hrefs:
        if not href.endswith(".txt"):
            continue
        name = href.rsplit("/", 1)[-1]
        if pattern.fullmatch(name) and name not in seen:
            seen.add(name)
            matched.append(name)
    return matched


def device_name_from_filename(filename: str, file_suffix: str = DEFAULT_FILE_SUFFIX) -> str:
    """Strip ``{suffix}.txt`` from *filename* (``N0001_all.txt`` -> ``N0001``)."""
    tail = f"{file_suffix}.txt"
    if filename.endswith(tail):
        return filename[: -len(tail)]
    return filename


class DirectoryScanner:
    """Lists device data files published under a directory URL.

    Parameters:
        client: HTTP client used for the single listing fetch.
        file_suffix: Per-file suffix before ``.txt`` (``_all`` or ``_030``).
        pattern: Optional override for the filename regex.
    """

    def __init__(
        self,
        client: FloatDataClient,
        *,
        file_suffix: str = DEFAULT_FILE_SUFFIX,
        pattern: str | re.Pattern[str] | None = None,
    ) -> None:
        self._client = client
        self._file_suffix = file_suffix
        if pattern is None:
            self._pattern = device_file_pattern(file_suffix)
        elif isinstance(pattern, str):
            self._pattern = re.compile(pattern)
        else:
            self._pattern = pattern

    @property
    def file_suffix(self) -> str:
        return self._file_suffix

    async def list_device_files(self, directory_url: str) -> list[str] | None:
        """Return matching filenames, or ``None`` if the listing fetch failed.

        An empty list means the listing was fetched but holds no device
        files; ``None`` means the fetch itself failed.
        """
        try:
            markup = await self._client.get_text(directory_url)
        except NetworkError as exc:
            logger.warning("Directory listing unavailable: %s", exc)
            return None

        files = match_device_files(extract_hrefs(markup), self._pattern)
        logger.debug("Found %d device files at %s", len(files), directory_url)
        return files

    async def list_devices(self, directory_url: str) -> list[str] | None:
        """Return device identifiers, or ``None`` if the listing fetch failed."""
        files = await self.list_device_files(directory_url)
        if files is None:
            return None
        return [device_name_from_filename(f, self._file_suffix) for f in files]
