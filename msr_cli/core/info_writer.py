"""
Writes the plain-text `info.txt` summary that sits beside an album's files.
"""

import asyncio
import logging
from pathlib import Path

import aiofiles

from msr_cli.models.catalog import Album
from msr_cli.utils.formatting import join_artists

log = logging.getLogger(__name__)

INFO_FILENAME = "info.txt"
MISSING_SONG_PLACEHOLDER = "<unknown: missing data>"


def render_album_info(album: Album) -> str:
    """
    Renders the sidecar text. Tracks are numbered over every song in album
    order, including songs too incomplete to download.
    """
    lines = [f"Album Name: {album.name}"]

    if album.belong is not None:
        lines.append(f"Album Belongs To: {album.belong}")

    if artistes := album.get_artistes():
        lines.append(f"Album Artists: {join_artists(artistes)}")

    if album.intro is not None:
        lines.append("Album Introduction:")
        lines.append(album.intro)
        lines.append("")

    lines.append("Track List:")
    for track_no, song in enumerate(album.get_songs(), start=1):
        if not song.is_valid():
            lines.append(f"- {track_no:02d}. {MISSING_SONG_PLACEHOLDER}")
            continue
        lines.append(f"- {track_no:02d}. {song.name}")
        if artists := song.get_artists():
            lines.append(f"  Artists: {join_artists(artists)}")

    return "\n".join(lines).rstrip()


async def write_album_info(album: Album, directory: Path) -> bool:
    """
    Writes `info.txt` into the album directory unless one is already there.

    Returns:
        True if the file was written, False if it already existed.
    """
    info_path = directory / INFO_FILENAME
    if await asyncio.to_thread(info_path.exists):
        return False

    async with aiofiles.open(info_path, "w", encoding="utf-8") as f:
        await f.write(render_album_info(album))
    log.debug(f"Wrote album info to '{info_path}'")
    return True
