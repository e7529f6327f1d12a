"""
The main orchestrator: walks the catalog's album list and drives the album
pipeline for each entry, one album at a time.
"""

import asyncio
import logging
import time
from pathlib import Path

from rich.markup import escape

from msr_cli.cli.progress_manager import ProgressManager
from msr_cli.exceptions import MsrCliError
from msr_cli.media import Downloader, Tagger
from msr_cli.models.config import DownloadConfig
from msr_cli.models.stats import DownloadStats
from msr_cli.utils.formatting import format_album_name
from msr_cli.utils.path import create_dir

from .album_processor import AlbumProcessor, ProcessOutcome

log = logging.getLogger(__name__)


class DownloadManager:
    """Orchestrates the download of the whole catalog."""

    def __init__(
        self,
        config: DownloadConfig,
        client,
        progress_manager: ProgressManager,
        tagger: Tagger | None = None,
    ):
        self.config = config
        self.client = client
        self.progress_manager = progress_manager
        self.stats = DownloadStats()
        self.start_time = time.monotonic()
        self.library_root = Path(config.output_dir)
        self.album_processor = AlbumProcessor(
            config,
            client,
            Downloader(client, self.stats),
            tagger or Tagger(embed_art=config.embed_cover),
            progress_manager,
            self.stats,
        )

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.start_time

    async def run(self) -> DownloadStats:
        """
        Downloads every album in the catalog.

        Failing to create the library root or to list the catalog aborts the
        run. Every other failure is confined to the album it happened in.
        """
        await asyncio.to_thread(create_dir, self.library_root)

        albums = await self.client.list_albums()
        total_albums = len(albums)
        self.stats.albums_total = total_albums

        self.progress_manager.log_message(f"Found {total_albums} albums to download")
        main_progress = self.progress_manager.track(
            total_albums,
            f"Downloading Monster Siren Records library, {total_albums} albums",
        )

        for index, summary in enumerate(albums):
            ordinal = total_albums - index
            await self._process_album(summary, ordinal)
            main_progress.advance()

        main_progress.finish("[bold green]Download completed![/bold green]")
        return self.stats

    async def _process_album(self, summary, ordinal: int) -> None:
        try:
            outcome = await self.album_processor.process(summary, ordinal)
        except (MsrCliError, OSError) as e:
            self.stats.albums_failed += 1
            self.progress_manager.log_message(
                f"[red]✗ Failed to process album {escape(f'[{summary.cid}]')} "
                f"{escape(summary.name)}: {escape(str(e))}[/red]",
                level="error",
            )
            log.debug("Full traceback:", exc_info=True)
            return

        if outcome is ProcessOutcome.UNAVAILABLE:
            self.stats.albums_unavailable += 1
            self.progress_manager.log_message(
                f"[yellow]⚠️  Cannot get details for album: "
                f"{escape(f'[{summary.cid}]')} {escape(summary.name)}[/yellow]",
                level="warning",
            )
            return

        self.stats.albums_completed += 1
        self.progress_manager.log_message(
            f"[green]✅  {format_album_name(summary.name)}[/green]"
        )
