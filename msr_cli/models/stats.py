"""
Dataclass for tracking download session statistics.
"""

from dataclasses import dataclass


@dataclass
class DownloadStats:
    """Counters for one library run."""

    albums_total: int = 0
    albums_completed: int = 0
    albums_unavailable: int = 0
    albums_failed: int = 0

    files_downloaded: int = 0
    files_skipped_exists: int = 0
    files_failed: int = 0
    total_size_downloaded: int = 0

    songs_detail_fallback: int = 0
    files_tagged: int = 0
    tags_failed: int = 0

    @property
    def albums_attempted(self) -> int:
        return self.albums_completed + self.albums_unavailable + self.albums_failed
