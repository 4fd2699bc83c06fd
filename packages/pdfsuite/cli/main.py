"""Command line interface for pdfsuite."""

from __future__ import annotations

import argparse
from typing import Sequence

from rich.console import Console

from ..core.exceptions import ProcessingError
from .commands import listing, run

COMMAND_MODULES = [run, listing]


def _create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pdfsuite", description="pdfsuite CLI")
    subparsers = parser.add_subparsers(dest="command")
    subparsers.required = True
    for module in COMMAND_MODULES:
        module.configure_parser(subparsers)
    return parser


def main(argv: Sequence[str] | None = None, console: Console | None = None) -> object:
    parser = _create_parser()
    args = parser.parse_args(argv)
    console = console or Console()
    try:
        return args.handler(args, console)
    except ProcessingError as exc:
        console.print(f"[bold red]✗ Error:[/bold red] {exc.message}")
        raise SystemExit(1) from exc


if __name__ == "__main__":  # pragma: no cover
    main()
