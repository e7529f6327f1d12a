"""
Core application engine for orchestrating the download process.

This package contains the primary logic. The `DownloadManager` walks the
catalog and delegates each album to the `AlbumProcessor`.
"""
