"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
import os
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from msr_cli import __version__
from msr_cli.api.client import MonsterSirenClient
from msr_cli.core.download_manager import DownloadManager
from msr_cli.exceptions import MsrCliError
from msr_cli.models.config import DownloadConfig
from msr_cli.storage.config_manager import ConfigManager

from .formatters import (
    format_error_with_suggestions,
    print_albums_table,
    print_config,
    print_songs_table,
    print_summary_panel,
)
from .progress_manager import ProgressManager

console = Console()

logging.basicConfig(
    level="WARNING",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("msr_cli")
log.setLevel("INFO")

app = typer.Typer(
    name="msr-cli",
    help=(
        "Download the complete Monster Siren Records library: audio, lyrics,"
        " covers and album notes, tagged and ready to play."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "msr-cli"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


def _load_config(cli_options: dict | None = None) -> DownloadConfig:
    try:
        return ConfigManager(CONFIG_FILE).load_config(cli_options)
    except MsrCliError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e


def _make_client(config: DownloadConfig) -> MonsterSirenClient:
    return MonsterSirenClient(
        base_url=config.base_url,
        request_timeout=config.request_timeout,
        max_workers=config.max_workers,
    )


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Show debug output (-vv to include library logs).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
):
    """Monster Siren Records downloader"""
    if version:
        console.print(f"[bold]msr-cli[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    if verbose >= 1:
        log.setLevel("DEBUG")
    if verbose >= 2:
        logging.getLogger().setLevel("DEBUG")

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def init(
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing configuration file."
    ),
):
    """Write a configuration file with the default settings."""
    if CONFIG_FILE.exists() and not force:
        if not typer.confirm("Configuration file already exists. Overwrite it?"):
            raise typer.Abort()

    config_manager = ConfigManager(CONFIG_FILE)
    try:
        config_manager.save_config(DownloadConfig())
    except MsrCliError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e
    console.print(f"[bold green]✓ Configuration saved to '{CONFIG_FILE}'[/bold green]")


@app.command(name="config")
def show_config():
    """Display the effective configuration."""
    print_config(CONFIG_FILE, _load_config(), console)


@app.command(name="download")
def download_command(
    output_dir: str | None = typer.Option(
        None,
        "-o",
        "--output",
        help="Library root directory (default: './Monster Siren Records').",
    ),
    workers: int | None = typer.Option(
        None,
        "-w",
        "--workers",
        help="Number of simultaneous track downloads per album (default 5).",
    ),
    tag_files: bool | None = typer.Option(
        None,
        "--tags/--no-tags",
        help="Write metadata tags into downloaded audio files.",
    ),
    embed_cover: bool | None = typer.Option(
        None,
        "--embed-cover/--no-embed-cover",
        help="Embed the album cover into the audio tags.",
    ),
):
    """Download the whole catalog. Files already on disk are skipped."""
    cli_options = {
        key: value
        for key, value in {
            "output_dir": output_dir,
            "max_workers": workers,
            "tag_files": tag_files,
            "embed_cover": embed_cover,
        }.items()
        if value is not None
    }
    config = _load_config(cli_options)

    async def _download_async():
        async with ProgressManager(console=console) as progress_manager:
            async with _make_client(config) as client:
                manager = DownloadManager(config, client, progress_manager)
                console.print(
                    f"[bold cyan]🎵 Monster Siren Downloader v{__version__}[/bold cyan]"
                )
                console.print("Starting Monster Siren Records music library download...")
                stats = await manager.run()
        print_summary_panel(stats, manager.elapsed, console)

    asyncio.run(_download_async())


@app.command()
def albums():
    """List every album in the catalog."""
    config = _load_config()

    async def _list_albums():
        async with _make_client(config) as client:
            return await client.list_albums()

    print_albums_table(asyncio.run(_list_albums()), console)


@app.command()
def songs():
    """List every song in the catalog."""
    config = _load_config()

    async def _list_songs():
        async with _make_client(config) as client:
            return await client.list_songs()

    print_songs_table(asyncio.run(_list_songs()), console)
