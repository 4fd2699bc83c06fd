"""CLI helper printing the tool catalog."""

from __future__ import annotations

from argparse import ArgumentParser, Namespace, _SubParsersAction

from rich.console import Console
from rich.table import Table

from ...catalog import CATALOG, CATEGORIES
from ...dispatcher import is_implemented


def configure_parser(subparsers: _SubParsersAction[ArgumentParser]) -> None:
    parser = subparsers.add_parser("list", help="List advertised tools")
    parser.add_argument("--category", choices=CATEGORIES, help="Only show one category")
    parser.add_argument("--implemented", action="store_true", help="Hide tools served by the fallback")
    parser.set_defaults(handler=_handle)


def _handle(args: Namespace, console: Console) -> int:
    table = Table(title="pdfsuite tools")
    table.add_column("Id", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Category", style="magenta")
    table.add_column("Implemented", justify="center")
    table.add_column("Description", style="dim")
    shown = 0
    for info in CATALOG:
        if args.category and info.category != args.category:
            continue
        implemented = is_implemented(info.id)
        if args.implemented and not implemented:
            continue
        table.add_row(info.id, info.name, info.category, "✓" if implemented else "", info.description)
        shown += 1
    console.print(table)
    return shown
