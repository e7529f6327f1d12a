import pytest

from msr_cli.exceptions import DownloadError
from msr_cli.media import Downloader
from msr_cli.models.stats import DownloadStats

from tests.fakes import BrokenBody, FakeCatalog, http_error

URL = "https://cdn.test/song.wav"


@pytest.fixture
def stats():
    return DownloadStats()


@pytest.mark.asyncio
async def test_download_writes_file_atomically(tmp_path, stats):
    catalog = FakeCatalog(assets={URL: b"0123456789"})
    downloader = Downloader(catalog, stats)

    assert await downloader.download_file(URL, tmp_path, "01.Song.wav")

    assert (tmp_path / "01.Song.wav").read_bytes() == b"0123456789"
    assert not (tmp_path / "01.Song.wav.tmp").exists()
    assert stats.files_downloaded == 1
    assert stats.total_size_downloaded == 10


@pytest.mark.asyncio
async def test_existing_file_is_not_requested(tmp_path, stats):
    (tmp_path / "01.Song.wav").write_bytes(b"already here")
    catalog = FakeCatalog()
    downloader = Downloader(catalog, stats)

    assert not await downloader.download_file(URL, tmp_path, "01.Song.wav")

    assert catalog.download_requests == []
    assert (tmp_path / "01.Song.wav").read_bytes() == b"already here"
    assert stats.files_skipped_exists == 1


@pytest.mark.asyncio
async def test_stale_partial_file_is_replaced(tmp_path, stats):
    (tmp_path / "01.Song.wav.tmp").write_bytes(b"stale partial body that is long")
    catalog = FakeCatalog(assets={URL: b"fresh"})

    await Downloader(catalog, stats).download_file(URL, tmp_path, "01.Song.wav")

    assert (tmp_path / "01.Song.wav").read_bytes() == b"fresh"
    assert not (tmp_path / "01.Song.wav.tmp").exists()


@pytest.mark.asyncio
async def test_interrupted_transfer_leaves_nothing_behind(tmp_path, stats):
    catalog = FakeCatalog(
        assets={URL: BrokenBody(b"partial", ConnectionResetError("connection reset"))}
    )

    with pytest.raises(DownloadError, match="connection reset"):
        await Downloader(catalog, stats).download_file(URL, tmp_path, "01.Song.wav")

    assert list(tmp_path.iterdir()) == []
    assert stats.files_downloaded == 0


@pytest.mark.asyncio
async def test_http_error_propagates_as_download_error(tmp_path, stats):
    catalog = FakeCatalog(assets={URL: http_error(URL, 404)})

    with pytest.raises(DownloadError, match="HTTP 404"):
        await Downloader(catalog, stats).download_file(URL, tmp_path, "01.Song.wav")

    assert not (tmp_path / "01.Song.wav").exists()


@pytest.mark.asyncio
async def test_download_works_without_stats(tmp_path):
    catalog = FakeCatalog(assets={URL: b"x"})

    assert await Downloader(catalog).download_file(URL, tmp_path, "a.wav")
