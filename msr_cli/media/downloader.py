"""
Handles writing remote assets to disk with an atomic, skip-if-present protocol.
"""

import asyncio
import logging
import os
from pathlib import Path

import aiofiles

from msr_cli.exceptions import DownloadError
from msr_cli.models.stats import DownloadStats
from msr_cli.utils.path import temp_path_for

log = logging.getLogger(__name__)


class Downloader:
    """
    Downloads one URL to one local path.

    The body is streamed to `<name>.tmp` and renamed over the final name only
    once fully written, so a target file either does not exist or is complete.
    A target that already exists is never fetched again.
    """

    def __init__(self, client, stats: DownloadStats | None = None):
        self.client = client
        self.stats = stats

    async def download_file(self, url: str, directory: Path, filename: str) -> bool:
        """
        Downloads `url` to `directory/filename`.

        Returns:
            True if the file was downloaded, False if it already existed.

        Raises:
            DownloadError: If the request or the transfer failed.
            OSError: If the temporary file could not be prepared or renamed.
        """
        target = directory / filename
        if await asyncio.to_thread(target.exists):
            if self.stats:
                self.stats.files_skipped_exists += 1
            log.debug(f"Skipping '{filename}' (already exists)")
            return False

        temp_path = temp_path_for(target)
        if await asyncio.to_thread(temp_path.exists):
            log.debug(f"Removing stale partial download '{temp_path.name}'")
            await asyncio.to_thread(temp_path.unlink)

        bytes_written = 0
        try:
            async with self.client.open_download_stream(url) as chunks:
                async with aiofiles.open(temp_path, "wb") as f:
                    async for chunk in chunks:
                        await f.write(chunk)
                        bytes_written += len(chunk)
                    await f.flush()
        except DownloadError:
            await asyncio.to_thread(self._discard, temp_path)
            raise
        except Exception as e:
            await asyncio.to_thread(self._discard, temp_path)
            raise DownloadError(f"Failed to write '{filename}': {e}") from e

        await asyncio.to_thread(os.replace, temp_path, target)

        if self.stats:
            self.stats.files_downloaded += 1
            self.stats.total_size_downloaded += bytes_written
        log.debug(f"Downloaded '{filename}' ({bytes_written} bytes)")
        return True

    @staticmethod
    def _discard(path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
