"""HTTP fetcher for site search pages."""

from __future__ import annotations

import asyncio
from collections.abc import Callable

import httpx
from loguru import logger

from recipe_finder.config.schema import FetchConfig
from recipe_finder.search.buffer import GrowableBuffer, detect_initial_capacity
from recipe_finder.search.errors import FetchError


class Fetcher:
    """Single-GET page downloader backed by a GrowableBuffer."""

    def __init__(
        self,
        config: FetchConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        buffer_factory: Callable[[str], GrowableBuffer] | None = None,
    ):
        self.config = config or FetchConfig()
        self._transport = transport
        self._buffer_factory = buffer_factory or self._default_buffer
        self._initial_capacity: int | None = None

    async def fetch(self, url: str, *, label: str = "") -> str:
        """Download url and return the decoded body; raises FetchError on any failure."""
        buffer = self._buffer_factory(label)
        headers = {
            "User-Agent": self.config.user_agent,
            "Referer": url,
        }
        # timeout_s bounds the whole transfer, not each read.
        try:
            async with asyncio.timeout(self.config.timeout_s):
                async with httpx.AsyncClient(
                    transport=self._transport,
                    follow_redirects=self.config.follow_redirects,
                    timeout=self.config.timeout_s,
                    cookies=httpx.Cookies(),
                ) as client:
                    async with client.stream("GET", url, headers=headers) as response:
                        response.raise_for_status()
                        async for chunk in response.aiter_bytes():
                            if buffer.write(chunk) != len(chunk):
                                raise FetchError(
                                    f"response from {url} exceeded the download buffer"
                                )
                        encoding = response.encoding or "utf-8"
        except TimeoutError as e:
            buffer.clear()
            raise FetchError(f"fetch timed out for {url} after {self.config.timeout_s}s") from e
        except httpx.HTTPError as e:
            buffer.clear()
            raise FetchError(f"fetch failed for {url}: {e}") from e
        except FetchError:
            buffer.clear()
            raise

        try:
            body = buffer.text(encoding)
        except LookupError:
            body = buffer.text()
        logger.debug("Fetched {} bytes from {}", buffer.size, url)
        buffer.clear()
        return body

    def _default_buffer(self, label: str) -> GrowableBuffer:
        if self._initial_capacity is None:
            self._initial_capacity = detect_initial_capacity()
        return GrowableBuffer(self._initial_capacity, label=label)
