"""
Async client for the Monster Siren Records catalog API.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

import aiohttp
from pydantic import BaseModel, ValidationError

from msr_cli import __version__
from msr_cli.exceptions import (
    ApiError,
    DownloadError,
    MalformedResponseError,
    TransportError,
)
from msr_cli.models.catalog import Album, Song
from msr_cli.models.config import DEFAULT_BASE_URL, DEFAULT_REQUEST_TIMEOUT

log = logging.getLogger(__name__)

DOWNLOAD_CHUNK_SIZE = 262144  # 256 KB


class ApiEnvelope(BaseModel):
    """The wrapper every catalog JSON response arrives in."""

    code: int
    msg: str = ""
    data: Any = None


class MonsterSirenClient:
    """
    Thin async client for the catalog's JSON API and its asset CDN.

    Every JSON call unwraps the `{code, msg, data}` envelope. A non-zero code
    raises ApiError; a null `data` means the requested record does not exist.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        max_workers: int = 5,
    ):
        """
        Initializes the API client.

        Args:
            base_url: Root URL of the catalog site.
            request_timeout: Overall timeout, in seconds, applied to each call.
            max_workers: Concurrent download bound, used to size the connection pool.
        """
        self.base_url = base_url.rstrip("/")
        self.request_timeout = request_timeout
        self.max_workers = max_workers
        self._session: Optional[aiohttp.ClientSession] = None

    async def _initialize_session(self) -> aiohttp.ClientSession:
        """Ensures an active aiohttp session is available."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=self.max_workers * 2,
                ttl_dns_cache=300,
                enable_cleanup_closed=True,
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                headers={
                    "User-Agent": f"msr-cli/{__version__}",
                    "Accept": "*/*",
                    "Accept-Language": (
                        "zh-CN,zh;q=0.9,ja;q=0.8,en;q=0.7,en-GB;q=0.6,en-US;q=0.5"
                    ),
                    "Referer": f"{self.base_url}/",
                },
                timeout=aiohttp.ClientTimeout(total=self.request_timeout),
            )
        return self._session

    async def close(self) -> None:
        """Gracefully closes the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "MonsterSirenClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def api_call(self, endpoint: str) -> Any:
        """
        Performs a GET against `/api/<endpoint>` and returns the envelope's data.
        """
        session = await self._initialize_session()
        url = f"{self.base_url}/api/{endpoint}"

        try:
            async with session.get(url) as r:
                r.raise_for_status()
                payload = await r.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"Request to '{endpoint}' failed: {e}") from e
        except ValueError as e:
            raise MalformedResponseError(
                f"Response from '{endpoint}' is not valid JSON: {e}"
            ) from e

        try:
            envelope = ApiEnvelope.model_validate(payload)
        except ValidationError as e:
            raise MalformedResponseError(
                f"Unexpected response shape from '{endpoint}': {e}"
            ) from e

        if envelope.code != 0:
            raise ApiError(
                f"Catalog returned code {envelope.code} for '{endpoint}': "
                f"{envelope.msg or 'no message'}",
                code=envelope.code,
            )

        log.debug(f"API call to {endpoint} succeeded.")
        return envelope.data

    @staticmethod
    def _parse(model: type, data: Any, endpoint: str) -> Any:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise MalformedResponseError(
                f"Invalid {model.__name__} record from '{endpoint}': {e}"
            ) from e

    def _parse_list(self, model: type, items: Any, endpoint: str) -> List[Any]:
        if items is None:
            return []
        if not isinstance(items, list):
            raise MalformedResponseError(f"Expected a list from '{endpoint}'.")
        return [self._parse(model, item, endpoint) for item in items]

    # Public API Methods
    async def list_albums(self) -> List[Album]:
        data = await self.api_call("albums")
        return self._parse_list(Album, data, "albums")

    async def get_album_detail(self, album_id: str) -> Optional[Album]:
        endpoint = f"album/{album_id}/detail"
        data = await self.api_call(endpoint)
        return None if data is None else self._parse(Album, data, endpoint)

    async def get_song_detail(self, song_id: str) -> Optional[Song]:
        endpoint = f"song/{song_id}"
        data = await self.api_call(endpoint)
        return None if data is None else self._parse(Song, data, endpoint)

    async def list_songs(self) -> List[Song]:
        data: Optional[Dict[str, Any]] = await self.api_call("songs")
        if not data:
            return []
        if not isinstance(data, dict):
            raise MalformedResponseError("Expected an object from 'songs'.")
        return self._parse_list(Song, data.get("list"), "songs")

    @asynccontextmanager
    async def open_download_stream(
        self, url: str, chunk_size: int = DOWNLOAD_CHUNK_SIZE
    ) -> AsyncIterator[AsyncIterator[bytes]]:
        """
        Opens a streaming GET for an asset and yields an async iterator over its
        body. Raises DownloadError if the server does not answer with a 2xx.
        """
        session = await self._initialize_session()
        try:
            async with session.get(url, allow_redirects=True) as response:
                if not 200 <= response.status < 300:
                    raise DownloadError(
                        f"Failed to download from {url}: HTTP {response.status}"
                    )
                yield response.content.iter_chunked(chunk_size)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise DownloadError(f"Failed to download from {url}: {e}") from e
