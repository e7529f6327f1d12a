"""
Handles writing catalog metadata as tags to downloaded audio files.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import mutagen
import mutagen.id3 as id3
from mutagen.flac import FLAC, Picture

from msr_cli.exceptions import TaggingError
from msr_cli.models.catalog import Album, Song
from msr_cli.utils.formatting import join_artists

log = logging.getLogger(__name__)

# --- Constants ---
GENRE_LABELS = {
    "arknights": "Arknights",
}
UNKNOWN_GENRE = "Unknown Genre"

IMAGE_MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".bmp": "image/bmp",
}
DEFAULT_IMAGE_MIME = "image/jpeg"
FRONT_COVER = 3


def get_genre(belong: Optional[str]) -> Optional[str]:
    """Maps an album's belongs-to category onto a genre label."""
    if belong is None:
        return None
    return GENRE_LABELS.get(belong, UNKNOWN_GENRE)


def get_image_mime_type(image_path: Path) -> str:
    return IMAGE_MIME_TYPES.get(image_path.suffix.lower(), DEFAULT_IMAGE_MIME)


class Tagger:
    """Writes metadata tags to ID3-capable (MP3, WAV, AIFF) and FLAC files."""

    def __init__(self, embed_art: bool = True):
        self.embed_art = embed_art

    def tag_file(
        self,
        file_path: Path,
        song: Song,
        album: Album,
        track_number: int,
        track_total: int,
        cover_path: Optional[Path] = None,
    ) -> None:
        """
        Replaces every existing tag on `file_path` with the song's metadata and
        saves the file in place.

        Raises:
            TaggingError: If the file cannot be read, tagged or saved.
        """
        try:
            audio = mutagen.File(file_path)
        except (mutagen.MutagenError, OSError) as e:
            raise TaggingError(f"Failed to read '{file_path.name}': {e}") from e
        if audio is None:
            raise TaggingError(f"Unsupported audio format: '{file_path.name}'")

        tags = self._get_common_tags(song, album, track_number, track_total)
        cover = self._read_cover(cover_path) if self.embed_art else None

        try:
            if audio.tags is None:
                audio.add_tags()
            audio.tags.clear()

            if isinstance(audio, FLAC):
                self._tag_flac(audio, tags, cover)
                audio.save()
            elif isinstance(audio.tags, id3.ID3):
                self._tag_id3(audio.tags, tags, cover)
                audio.save(v2_version=3)
            else:
                raise TaggingError(
                    f"No supported tag container for '{file_path.name}' "
                    f"({type(audio).__name__})"
                )
        except (mutagen.MutagenError, OSError) as e:
            raise TaggingError(f"Failed to tag '{file_path.name}': {e}") from e

    def _get_common_tags(
        self, song: Song, album: Album, track_number: int, track_total: int
    ) -> Dict[str, Any]:
        """Gathers the tag values shared by every container format."""
        return {
            "title": song.name,
            "album": album.name,
            "artist": join_artists(song.get_artists()),
            "tracknumber": str(track_number),
            "tracktotal": str(track_total),
            "comment": album.intro,
            "genre": get_genre(album.belong),
        }

    def _read_cover(self, cover_path: Optional[Path]) -> Optional[tuple[str, bytes]]:
        if cover_path is None:
            return None
        try:
            data = cover_path.read_bytes()
        except OSError as e:
            log.debug(f"Cover '{cover_path}' is not readable, skipping embed: {e}")
            return None
        return get_image_mime_type(cover_path), data

    def _tag_flac(
        self, audio: FLAC, tags: Dict[str, Any], cover: Optional[tuple[str, bytes]]
    ) -> None:
        for key, value in tags.items():
            if value:
                audio[key.upper()] = [value]

        audio.clear_pictures()
        if cover:
            mime, data = cover
            pic = Picture()
            pic.type = FRONT_COVER
            pic.mime = mime
            pic.data = data
            audio.add_picture(pic)

    def _tag_id3(
        self, audio: id3.ID3, tags: Dict[str, Any], cover: Optional[tuple[str, bytes]]
    ) -> None:
        audio.add(id3.TIT2(encoding=3, text=tags["title"]))
        audio.add(id3.TALB(encoding=3, text=tags["album"]))
        if tags["artist"]:
            audio.add(id3.TPE1(encoding=3, text=tags["artist"]))
        audio.add(
            id3.TRCK(encoding=3, text=f"{tags['tracknumber']}/{tags['tracktotal']}")
        )
        if tags["comment"]:
            audio.add(id3.COMM(encoding=3, lang="eng", desc="", text=tags["comment"]))
        if tags["genre"]:
            audio.add(id3.TCON(encoding=3, text=tags["genre"]))

        if cover:
            mime, data = cover
            audio.add(
                id3.APIC(encoding=3, mime=mime, type=FRONT_COVER, desc="Cover", data=data)
            )
