"""CLI helpers for running any tool against files on disk."""

from __future__ import annotations

import json
from argparse import ArgumentParser, Namespace, _SubParsersAction
from pathlib import Path
from typing import Any, Dict, List

from rich.console import Console

from ...core.exceptions import ValidationError
from ...core.types import InputFile
from ...core.utils import format_file_size, resolve_path
from ...dispatcher import dispatch


def configure_parser(subparsers: _SubParsersAction[ArgumentParser]) -> None:
    parser = subparsers.add_parser("run", help="Run a tool and write its outputs to a directory")
    parser.add_argument("tool_id", help="Tool identifier, e.g. merge or rotate-pdf")
    parser.add_argument("inputs", nargs="*", help="Input files")
    parser.add_argument("-o", "--output", default=".", help="Output directory (default: current directory)")
    parser.add_argument(
        "--option",
        dest="options",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Tool option, repeatable (e.g. --option rotation=180)",
    )
    parser.add_argument("--options-json", help="JSON file with tool options")
    parser.set_defaults(handler=_handle)


def parse_options(args: Namespace) -> Dict[str, Any]:
    options: Dict[str, Any] = {}
    if args.options_json:
        loaded = json.loads(resolve_path(args.options_json).read_text(encoding="utf-8"))
        if not isinstance(loaded, dict):
            raise ValidationError("--options-json must contain a JSON object")
        options.update(loaded)
    for item in args.options:
        key, separator, value = item.partition("=")
        if not separator or not key.strip():
            raise ValidationError(f"Invalid --option {item!r}; expected KEY=VALUE")
        options[key.strip()] = value
    return options


def _handle(args: Namespace, console: Console) -> List[Path]:
    files = [InputFile.from_path(resolve_path(path)) for path in args.inputs]
    results = dispatch(args.tool_id, files, parse_options(args))
    output_dir = resolve_path(args.output)
    output_dir.mkdir(parents=True, exist_ok=True)
    written: List[Path] = []
    for result in results:
        target = output_dir / Path(result.name).name
        target.write_bytes(result.data)
        written.append(target)
        console.print(f"  • {target.name} [dim]({format_file_size(result.size)})[/dim]")
    console.print(f"[bold green]✓ {args.tool_id} wrote {len(written)} file(s) to {output_dir}[/bold green]")
    return written
