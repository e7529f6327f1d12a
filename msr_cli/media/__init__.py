"""
Media Processing Layer.

This package is responsible for all media file operations: downloading
assets to disk and writing metadata tags.
"""

from .downloader import Downloader
from .tagger import Tagger

__all__ = ["Downloader", "Tagger"]
