"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from msr_cli.models.catalog import Album, Song
from msr_cli.models.config import DownloadConfig
from msr_cli.models.stats import DownloadStats
from msr_cli.utils.formatting import format_duration, format_size, join_artists


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "TransportError": [
            "• Check your internet connection.",
            "• The catalog might be temporarily unavailable. Try again later.",
        ],
        "ApiError": [
            "• The catalog rejected the request.",
            "• Check the configured base_url with `msr-cli config`.",
        ],
        "MalformedResponseError": [
            "• The catalog API may have changed its response format.",
            "• Run the command with -v for detailed logs.",
        ],
        "ConfigurationError": [
            "• Fix or delete the configuration file and try again.",
            "• Run `msr-cli init --force` to write a fresh one.",
        ],
        "PermissionError": [
            "• The output directory is not writable.",
            "• Choose another location with --output.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -v for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(Text("\n".join(suggestions)))

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_config(config_path: Path, config: DownloadConfig, console: Console):
    """Displays the effective configuration."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()
    for key in sorted(DownloadConfig.get_ini_keys()):
        table.add_row(f"{key}:", str(getattr(config, key)))

    source = str(config_path) if config_path.is_file() else "defaults"
    console.print(
        Panel(
            table,
            title=f"Configuration ([dim]{source}[/dim])",
            border_style="cyan",
        )
    )


def print_albums_table(albums: list[Album], console: Console):
    """Lists catalog albums with the directory number each one will get."""
    table = Table(title=f"Albums ({len(albums)})", box=box.SIMPLE_HEAD)
    table.add_column("No.", justify="right", style="dim")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="white")
    table.add_column("Artists", style="green")

    total = len(albums)
    for index, album in enumerate(albums):
        table.add_row(
            f"{total - index:03d}",
            album.cid,
            escape(album.name),
            escape(join_artists(album.get_artistes())),
        )
    console.print(table)


def print_songs_table(songs: list[Song], console: Console):
    """Lists every song in the catalog."""
    table = Table(title=f"Songs ({len(songs)})", box=box.SIMPLE_HEAD)
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="white")
    table.add_column("Album", style="dim")
    table.add_column("Artists", style="green")

    for song in songs:
        table.add_row(
            song.cid,
            escape(song.name),
            song.album_cid or "",
            escape(join_artists(song.get_artists())),
        )
    console.print(table)


def print_summary_panel(stats: DownloadStats, duration_s: float, console: Console):
    """Displays the final summary of a library run."""
    stats_table = Table(show_header=False, box=None, padding=(0, 2))
    stats_table.add_column(style="bold cyan", justify="right", width=22)
    stats_table.add_column(style="white", justify="left")

    stats_table.add_row(
        "✓ Albums:",
        f"[bold green]{stats.albums_completed}[/bold green] / {stats.albums_total}",
    )
    if stats.albums_unavailable > 0:
        stats_table.add_row(
            "⚠ Albums Not Available:", f"[yellow]{stats.albums_unavailable}[/yellow]"
        )
    if stats.albums_failed > 0:
        stats_table.add_row(
            "✗ Albums Failed:", f"[bold red]{stats.albums_failed}[/bold red]"
        )

    stats_table.add_row("", "")
    stats_table.add_row(
        "✓ Files Downloaded:", f"[bold green]{stats.files_downloaded}[/bold green]"
    )
    if stats.files_skipped_exists > 0:
        stats_table.add_row(
            "○ Skipped:", f"[yellow]{stats.files_skipped_exists} (exists)[/yellow]"
        )
    if stats.files_failed > 0:
        stats_table.add_row("✗ Failed:", f"[bold red]{stats.files_failed}[/bold red]")
    if stats.files_tagged > 0 or stats.tags_failed > 0:
        tagged = f"[green]{stats.files_tagged}[/green]"
        if stats.tags_failed:
            tagged += f" ([red]{stats.tags_failed} failed[/red])"
        stats_table.add_row("Tagged:", tagged)
    if stats.songs_detail_fallback > 0:
        stats_table.add_row(
            "Partial Metadata:", f"[yellow]{stats.songs_detail_fallback} songs[/yellow]"
        )

    stats_table.add_row("", "")
    stats_table.add_row(
        "Total Size:", f"[cyan]{format_size(stats.total_size_downloaded)}[/cyan]"
    )
    avg_speed = stats.total_size_downloaded / duration_s if duration_s > 0 else 0
    stats_table.add_row(
        "Avg. Speed:", f"[magenta]{format_size(int(avg_speed))}/s[/magenta]"
    )
    stats_table.add_row("Time Elapsed:", f"[blue]{format_duration(duration_s)}[/blue]")

    console.print()
    console.print(
        Panel(
            stats_table,
            title="🎵 [bold]Download Complete![/bold]",
            border_style="green" if not stats.albums_failed else "yellow",
            box=box.DOUBLE,
            expand=False,
            padding=(1, 2),
        )
    )
    console.print()
