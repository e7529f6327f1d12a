"""
Main entry point for the msr-cli application.
This module handles top-level setup, exception handling, and CLI invocation.
"""

import asyncio
import logging
import os
import sys

import typer
from rich.console import Console

from msr_cli.cli.app import app
from msr_cli.cli.formatters import format_error_with_suggestions
from msr_cli.exceptions import MsrCliError


def main() -> None:
    """Main entry point function."""
    if os.name == "nt":
        try:
            sys.stdout.reconfigure(encoding="utf-8")
            sys.stderr.reconfigure(encoding="utf-8")
        except (TypeError, AttributeError):
            pass

    log = logging.getLogger("msr_cli")
    console = Console()

    try:
        app()
    except (typer.Exit, typer.Abort):
        pass
    except (KeyboardInterrupt, asyncio.CancelledError):
        console.print("\n[yellow]⚠️  Operation cancelled by user.[/yellow]")
        console.print("[dim]Partial downloads are discarded on the next run.[/dim]")
        sys.exit(130)
    except (MsrCliError, OSError) as e:
        console.print(f"\n{format_error_with_suggestions(e)}")
        log.debug("Full traceback:", exc_info=True)
        sys.exit(1)
    except Exception as e:
        console.print(f"\n{format_error_with_suggestions(e, {'type': 'Unexpected'})}")
        log.debug("Full traceback:", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
