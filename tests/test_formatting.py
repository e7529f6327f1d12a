import io

import pytest
from rich.console import Console

from msr_cli.cli.formatters import print_albums_table, print_summary_panel
from msr_cli.models.catalog import Album
from msr_cli.models.stats import DownloadStats
from msr_cli.utils.formatting import format_album_name, format_duration, format_size


@pytest.mark.parametrize(
    "size, expected",
    [(0, "0 B"), (512, "512.0 B"), (1536, "1.5 KB"), (5 * 1024**3, "5.0 GB")],
)
def test_format_size(size, expected):
    assert format_size(size) == expected


@pytest.mark.parametrize(
    "seconds, expected",
    [(0, "0s"), (59.9, "59s"), (3600, "1h"), (9252, "2h 34m 12s")],
)
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected


def test_format_album_name_escapes_markup():
    assert format_album_name("[bold]x") == "[bold cyan]《\\[bold]x》[/bold cyan]"


def render(func, *args):
    buffer = io.StringIO()
    func(*args, Console(file=buffer, width=120, color_system=None))
    return buffer.getvalue()


def test_albums_table_shows_directory_numbers():
    albums = [Album(cid="b", name="Newer [EP]"), Album(cid="a", name="Older")]

    output = render(print_albums_table, albums)

    assert "002" in output and "001" in output
    assert "Newer [EP]" in output


def test_summary_panel_reports_failures():
    stats = DownloadStats(albums_total=3, albums_completed=1, albums_failed=2)

    output = render(print_summary_panel, stats, 61.0)

    assert "Albums Failed" in output
    assert "1m 1s" in output
