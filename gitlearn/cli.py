"""Command-line entry point: an interactive git sandbox."""

import logging
from pathlib import Path
from typing import Iterable, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from .session import session
from .terminal import CLEAR, WELCOME, Terminal

app = typer.Typer(add_completion=False, help="Practice git branching and merging in a sandbox.")
console = Console()

EXIT_COMMANDS = ("exit", "quit")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _open(session_dir: Optional[Path]) -> Terminal:
    if session_dir is None:
        return Terminal(session())
    return Terminal(session("disk", path=str(session_dir)))


def _emit(lines: Iterable[str]) -> None:
    for line in lines:
        if line == CLEAR:
            console.clear()
            continue
        console.print(line, markup=False, highlight=False)


@app.command()
def shell(
    session_dir: Optional[Path] = typer.Option(
        None, "--session", "-s", file_okay=False, resolve_path=True,
        help="Directory that keeps the sandbox between runs.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every state transition."),
) -> None:
    """Start an interactive sandbox terminal."""
    _configure_logging(verbose)
    terminal = _open(session_dir)
    console.print(f"[bold green]{WELCOME}[/]")
    console.print("[dim]Type 'help' for commands, 'exit' to leave.[/]")
    try:
        while True:
            try:
                line = console.input("[bold blue]$[/] ")
            except (EOFError, KeyboardInterrupt):
                console.print()
                break
            if line.strip() in EXIT_COMMANDS:
                break
            _emit(terminal.run(line))
    finally:
        terminal.repository.store.close()


@app.command()
def run(
    script: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    session_dir: Optional[Path] = typer.Option(
        None, "--session", "-s", file_okay=False, resolve_path=True,
        help="Directory that keeps the sandbox between runs.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every state transition."),
) -> None:
    """Run a file of sandbox commands, echoing each one.

    Blank lines and lines starting with '#' are skipped.
    """
    _configure_logging(verbose)
    terminal = _open(session_dir)
    try:
        for raw in script.read_text().splitlines():
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            console.print(f"$ {line}", markup=False, highlight=False, style="bold")
            _emit(terminal.run(line))
    finally:
        terminal.repository.store.close()


def main() -> None:
    app()


if __name__ == "__main__":
    main()
