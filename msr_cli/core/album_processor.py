"""
Handles the processing of a single album, from detail fetch to tagging.
"""

import asyncio
import logging
from enum import Enum
from pathlib import Path
from typing import List, Optional

from rich.markup import escape

from msr_cli.cli.progress_manager import ProgressManager
from msr_cli.core.info_writer import write_album_info
from msr_cli.exceptions import CatalogError, DownloadError, InvalidDataError, TaggingError
from msr_cli.media import Downloader, Tagger
from msr_cli.models.catalog import Album, Song
from msr_cli.models.config import DownloadConfig
from msr_cli.models.stats import DownloadStats
from msr_cli.utils.formatting import format_album_name
from msr_cli.utils.path import (
    album_dir_name,
    create_dir,
    find_existing,
    get_file_extension,
    track_filename,
)

log = logging.getLogger(__name__)

DEFAULT_AUDIO_EXT = ".mp3"
DEFAULT_COVER_EXT = ".jpg"
LYRIC_EXT = ".lrc"
ALBUM_COVER_STEM = "Album Cover"
DETAIL_COVER_STEM = "Cover"
# Looked up in order when choosing the image to embed into tags.
COVER_CANDIDATES = (
    "Album Cover.jpg",
    "Album Cover.png",
    "Cover.jpg",
    "Cover.png",
)


class ProcessOutcome(Enum):
    COMPLETED = "completed"
    UNAVAILABLE = "unavailable"


class AlbumProcessor:
    """
    Runs the per-album pipeline: fetch detail, enrich songs, lay out the
    directory, write the info sidecar, download covers and tracks, then tag.
    """

    def __init__(
        self,
        config: DownloadConfig,
        client,
        downloader: Downloader,
        tagger: Tagger,
        progress_manager: ProgressManager,
        stats: DownloadStats,
    ):
        self.config = config
        self.client = client
        self.downloader = downloader
        self.tagger = tagger
        self.progress_manager = progress_manager
        self.stats = stats
        self.library_root = Path(config.output_dir)

    async def process(self, summary: Album, ordinal: int) -> ProcessOutcome:
        """
        Processes one album from the catalog listing.

        Args:
            summary: The album as returned by the album list.
            ordinal: The album's directory number.

        Returns:
            UNAVAILABLE if the catalog has no detail for the album, in which
            case nothing was written; COMPLETED otherwise.
        """
        if not summary.is_valid():
            raise InvalidDataError(f"Album '{summary.name}' has no identifier.")

        detail = await self.client.get_album_detail(summary.cid)
        if detail is None:
            return ProcessOutcome.UNAVAILABLE

        album = detail.with_artist_fallback(summary)
        album = album.model_copy(update={"songs": await self._get_detailed_songs(album)})

        self.progress_manager.log_message(
            f">>> {format_album_name(album.name)}: downloading album tracks"
        )

        album_dir = self.library_root / album_dir_name(ordinal, album.name)
        await asyncio.to_thread(create_dir, album_dir)

        await write_album_info(album, album_dir)
        await self._download_album_covers(album, album_dir)
        await self._download_album_songs(album, album_dir)

        if self.config.tag_files:
            await self._apply_metadata_to_songs(album, album_dir)

        return ProcessOutcome.COMPLETED

    async def _get_detailed_songs(self, album: Album) -> List[Song]:
        """
        Replaces each song stub with its detail record, one request at a time.
        A stub is kept whenever its detail cannot be fetched.
        """
        detailed_songs = []
        for song in album.get_songs():
            if not song.is_valid():
                detailed_songs.append(song)
                continue

            try:
                detailed = await self.client.get_song_detail(song.cid)
            except CatalogError as e:
                self.stats.songs_detail_fallback += 1
                self.progress_manager.log_message(
                    f"[yellow]⚠ Failed to get song details for "
                    f"{escape(song.name)}: {escape(str(e))}[/yellow]",
                    level="warning",
                )
                detailed_songs.append(song)
                continue

            if detailed is None:
                self.stats.songs_detail_fallback += 1
                self.progress_manager.log_message(
                    f"[yellow]⚠ Song not found: {escape(song.name)}[/yellow]",
                    level="warning",
                )
                detailed_songs.append(song)
            else:
                detailed_songs.append(detailed)

        return detailed_songs

    async def _fetch_asset(self, url: str, directory: Path, filename: str) -> bool:
        """Downloads one file, logging instead of raising when it fails."""
        try:
            return await self.downloader.download_file(url, directory, filename)
        except (DownloadError, OSError) as e:
            self.stats.files_failed += 1
            self.progress_manager.log_message(
                f"  [red]✗ Failed:[/] {escape(filename)} ({escape(str(e))})",
                level="error",
            )
            return False

    async def _download_album_covers(self, album: Album, album_dir: Path) -> None:
        covers = (
            (album.cover_url, ALBUM_COVER_STEM, "album cover"),
            (album.cover_de_url, DETAIL_COVER_STEM, "detailed cover"),
        )
        for url, stem, label in covers:
            if not url:
                continue
            log.debug(f"{album.name}: downloading {label}")
            ext = get_file_extension(url) or DEFAULT_COVER_EXT
            await self._fetch_asset(url, album_dir, f"{stem}{ext}")

    def _audio_filename(self, song: Song, track_no: int) -> Optional[str]:
        if not song.source_url:
            return None
        ext = get_file_extension(song.source_url) or DEFAULT_AUDIO_EXT
        return track_filename(track_no, song.name, ext)

    async def _download_song(self, song: Song, track_no: int, album_dir: Path) -> None:
        if audio_filename := self._audio_filename(song, track_no):
            await self._fetch_asset(song.source_url, album_dir, audio_filename)

        if song.lyric_url:
            lyric_filename = track_filename(track_no, song.name, LYRIC_EXT)
            await self._fetch_asset(song.lyric_url, album_dir, lyric_filename)

    async def _download_album_songs(self, album: Album, album_dir: Path) -> None:
        """
        Downloads every valid song's audio and lyrics, with at most
        `max_workers` songs in flight. Returns once all of them have settled.
        """
        valid_songs = album.valid_songs()
        if not valid_songs:
            return

        song_progress = self.progress_manager.track(
            len(valid_songs),
            f"{escape(album.name)}: downloading {len(valid_songs)} tracks",
        )
        semaphore = asyncio.Semaphore(self.config.max_workers)

        async def worker(track_no: int, song: Song) -> None:
            async with semaphore:
                await self._download_song(song, track_no, album_dir)
            song_progress.advance()

        results = await asyncio.gather(
            *(worker(i, song) for i, song in enumerate(valid_songs, start=1)),
            return_exceptions=True,
        )
        song_progress.finish()

        for result in results:
            if isinstance(result, BaseException):
                raise result

    async def _apply_metadata_to_songs(self, album: Album, album_dir: Path) -> None:
        valid_songs = album.valid_songs()
        if not valid_songs:
            return

        log.debug(f"{album.name}: applying metadata to tracks")
        total_tracks = len(valid_songs)
        cover_path = await asyncio.to_thread(find_existing, album_dir, COVER_CANDIDATES)

        for track_no, song in enumerate(valid_songs, start=1):
            filename = self._audio_filename(song, track_no)
            if filename is None:
                continue
            file_path = album_dir / filename
            if not await asyncio.to_thread(file_path.is_file):
                continue

            try:
                await asyncio.to_thread(
                    self.tagger.tag_file,
                    file_path,
                    song,
                    album,
                    track_no,
                    total_tracks,
                    cover_path,
                )
                self.stats.files_tagged += 1
            except TaggingError as e:
                self.stats.tags_failed += 1
                self.progress_manager.log_message(
                    f"[yellow]⚠ Failed to apply metadata to "
                    f"{escape(filename)}: {escape(str(e))}[/yellow]",
                    level="warning",
                )
