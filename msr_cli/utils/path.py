"""
Utilities for handling file names, library paths and asset URLs.
"""

import os
from pathlib import Path
from typing import Iterable, Optional
from urllib.parse import urlparse

from pathvalidate import sanitize_filename

ALBUM_DIR_SEPARATOR = " - "
TEMP_SUFFIX = ".tmp"
MAX_NAME_BYTES = 255


def sanitize_name(name: str, max_len: int = MAX_NAME_BYTES) -> str:
    """
    Makes a catalog name safe to use as a single path component on any
    platform, cut to `max_len` bytes.
    """
    return sanitize_filename(name, replacement_text="_", max_len=max_len)


def name_budget(*affixes: str) -> int:
    """Bytes left for a name once the given affixes are added around it."""
    return MAX_NAME_BYTES - sum(len(affix.encode("utf-8")) for affix in affixes)


def replace_dot_suffix(name: str) -> str:
    """Replaces a trailing run of dots, which Windows drops, with one underscore."""
    if name.endswith("."):
        return name.rstrip(".") + "_"
    return name


def create_dir(directory_path: Path) -> None:
    """Creates a directory if it does not already exist."""
    directory_path.mkdir(parents=True, exist_ok=True)


def album_dir_name(ordinal: int, album_name: str) -> str:
    """Builds the '<NNN> - <album>' directory name for an album."""
    prefix = f"{ordinal:03d}{ALBUM_DIR_SEPARATOR}"
    name = sanitize_name(replace_dot_suffix(album_name), max_len=name_budget(prefix))
    return f"{prefix}{name}"


def get_file_extension(url: str) -> Optional[str]:
    """
    Returns the extension (with its leading dot) of the last path segment of a
    URL, ignoring any query string, or None if it has none.
    """
    path = urlparse(url).path
    ext = os.path.splitext(path)[1]
    return ext or None


def temp_path_for(target: Path) -> Path:
    """The in-progress path a download is written to before it is renamed."""
    return target.with_name(target.name + TEMP_SUFFIX)


def track_filename(track_number: int, song_name: str, ext: str) -> str:
    # Leaves room for the temporary suffix used while downloading.
    prefix = f"{track_number:02d}."
    name = sanitize_name(song_name, max_len=name_budget(prefix, ext, TEMP_SUFFIX))
    return f"{prefix}{name}{ext}"


def find_existing(directory: Path, names: Iterable[str]) -> Optional[Path]:
    """Returns the first of the given names that exists in the directory."""
    for name in names:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None
