import io

import pytest
from rich.console import Console

from msr_cli.cli.progress_manager import ProgressManager
from msr_cli.core.album_processor import AlbumProcessor
from msr_cli.media import Downloader
from msr_cli.models.config import DownloadConfig
from msr_cli.models.stats import DownloadStats

from tests.fakes import FakeTagger


@pytest.fixture
def library_root(tmp_path):
    return tmp_path / "library"


@pytest.fixture
def config(library_root):
    return DownloadConfig(output_dir=str(library_root))


@pytest.fixture
def progress_manager():
    """A progress manager that renders into memory and is never started."""
    return ProgressManager(Console(file=io.StringIO(), force_terminal=False))


@pytest.fixture
def tagger():
    return FakeTagger()


@pytest.fixture
def make_processor(config, progress_manager, tagger, library_root):
    """Builds an AlbumProcessor around the given catalog."""

    def _make(catalog, processor_tagger=None):
        library_root.mkdir(parents=True, exist_ok=True)
        stats = DownloadStats()
        return AlbumProcessor(
            config,
            catalog,
            Downloader(catalog, stats),
            processor_tagger or tagger,
            progress_manager,
            stats,
        )

    return _make
