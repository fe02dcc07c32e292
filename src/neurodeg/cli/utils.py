"""CLI helpers — console output, exit codes and configuration loading."""

from __future__ import annotations

import functools
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, NoReturn

from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

if TYPE_CHECKING:
    from neurodeg.core import AnalysisConfig

logger = logging.getLogger(__name__)

console = Console()

# Set by the --verbose flag on the top-level CLI group.
verbose: bool = False

EXIT_USER_ERROR = 1
EXIT_INTERNAL_ERROR = 2


def fail(message: str) -> NoReturn:
    """Print a red diagnostic and exit with the user-error code."""
    console.print(f"[red]Error:[/red] {message}")
    raise SystemExit(EXIT_USER_ERROR)


def require_file(path: Path, what: str) -> None:
    if not path.is_file():
        fail(f"{what} not found: {path}")


def load_config(path: str | None) -> AnalysisConfig:
    """Return the configuration at ``path``, or the defaults when None.

    An unreadable or invalid file ends the command with exit code 1.
    """
    from neurodeg.core import AnalysisConfig

    if path is None:
        return AnalysisConfig()
    try:
        return AnalysisConfig.from_yaml(Path(path))
    except ValueError as e:
        fail(f"Invalid configuration {path}: {e}")


def print_warnings(warnings: list[str]) -> None:
    if not warnings:
        return
    console.print()
    console.print(f"[yellow]Warnings ({len(warnings)}):[/yellow]")
    for w in warnings:
        console.print(f"  [dim]- {w}[/dim]")


def error_handler(func: Callable[..., Any]) -> Callable[..., Any]:
    """Map exceptions escaping a command onto exit codes.

    ``AnalysisError`` means bad input (exit 1). Anything else is a bug
    (exit 2); ``--verbose`` adds the traceback.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        from neurodeg.core.exceptions import AnalysisError

        try:
            return func(*args, **kwargs)
        except AnalysisError as e:
            fail(str(e))
        except (SystemExit, KeyboardInterrupt):
            raise
        except Exception as e:
            logger.debug("Unhandled error in %s", func.__name__, exc_info=True)
            console.print(f"[red]Internal error:[/red] {type(e).__name__}: {e}")
            if verbose:
                console.print_exception()
            else:
                console.print("[dim]Use --verbose for the full traceback.[/dim]")
            raise SystemExit(EXIT_INTERNAL_ERROR)

    return wrapper


def make_progress() -> Progress:
    """Progress bar sharing the module console."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    )
