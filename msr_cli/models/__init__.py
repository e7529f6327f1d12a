"""
Data Models Layer.

This package contains the Pydantic models for catalog records and
configuration, plus the session statistics dataclass.
"""

from .catalog import Album, CatalogEntry, Song
from .config import DownloadConfig
from .stats import DownloadStats

__all__ = ["Album", "CatalogEntry", "DownloadConfig", "DownloadStats", "Song"]
