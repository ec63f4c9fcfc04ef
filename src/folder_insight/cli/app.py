# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import asyncio
import logging
import time
from datetime import datetime
from pathlib import Path
from typing import List, NoReturn, Optional

import typer

from ..adapters.filesystem.local_fs import LocalFS
from ..config import (
    DEFAULT_EXTENSION_ROWS,
    DEFAULT_TOP,
    REPORT_FORMATS,
    parse_ignore,
)
from ..domain.errors import ConfigurationError, FolderInsightError, ScanRootError
from ..domain.models import ScanStats, TraversalPolicy
from ..services import ReportService, ScanService, TreeService, TreeLine
from ..services import format_bytes, percent
from ..services.tree_service import DEFAULT_TREE_DEPTH

from ..logging_config import setup_logging

setup_logging()

app = typer.Typer(
    help="Folder Insight CLI - size stats, extension breakdowns and largest files"
)

logger = logging.getLogger(__name__)


def _parse_fmt(fmt: str) -> str:
    """
    Normalise and validate --fmt.
    Raises Typer BadParameter if an unknown format is provided.
    """
    value = (fmt or "").strip().lower()
    if value not in REPORT_FORMATS:
        raise typer.BadParameter(
            f"Unknown format: {fmt}. Valid options: {', '.join(sorted(REPORT_FORMATS))}"
        )
    return value


def _build_policy(
    max_depth: Optional[int],
    ignore: Optional[str],
    follow_symlinks: bool,
    include_hidden: bool,
) -> TraversalPolicy:
    try:
        return TraversalPolicy(
            max_depth=max_depth,
            ignore_names=parse_ignore(ignore),
            follow_symlinks=follow_symlinks,
            include_hidden=include_hidden,
        )
    except ConfigurationError as e:
        raise typer.BadParameter(str(e))


def _fail(err: Exception) -> NoReturn:
    typer.echo(f"{typer.style('Error:', fg=typer.colors.RED)} {err}", err=True)
    raise typer.Exit(code=1)


def _print_report(stats: ScanStats, top: int) -> None:
    typer.secho("\nSummary", bold=True)
    typer.echo(f"{typer.style('Files:', fg=typer.colors.CYAN)} {stats.total_files:,}")
    typer.echo(
        f"{typer.style('Total size:', fg=typer.colors.CYAN)} "
        f"{format_bytes(stats.total_bytes)}"
    )

    typer.secho(f"\nBy Extension (top {DEFAULT_EXTENSION_ROWS})", bold=True)
    for t in stats.by_extension[:DEFAULT_EXTENSION_ROWS]:
        typer.echo(
            f"{t.ext:<10}  {format_bytes(t.bytes):>10}  "
            f"({percent(t.bytes, stats.total_bytes)})"
        )

    typer.secho(f"\nLargest Files (top {top})", bold=True)
    for i, rec in enumerate(stats.top_files[:top], start=1):
        typer.echo(f"{i:>2}. {format_bytes(rec.size):>10}  {rec.path}")


def _print_tree(lines: List[TreeLine]) -> None:
    for line in lines:
        name = typer.style(line.name, bold=True) if line.is_dir else line.name
        typer.echo(line.prefix + name)


def _resolve_out(out: Path, fmt: str) -> Path:
    # --out DIR -> DIR/folder-insight.<fmt>; anything else is a file path
    out = Path(out)
    if out.exists() and out.is_dir():
        return out / f"folder-insight.{fmt}"
    return out


@app.command()
def scan(
    path: Path = typer.Option(
        Path("."),
        "--path",
        "-p",
        help="Directory to scan",
    ),
    top: int = typer.Option(
        DEFAULT_TOP, "--top", min=0, help="Show top N largest files"
    ),
    tree: bool = typer.Option(False, "--tree", help="Print a simple tree view"),
    max_depth: Optional[int] = typer.Option(
        None,
        "--max-depth",
        min=0,
        help="Limit recursion depth (root is 0); --tree shows the same entries",
    ),
    ignore: Optional[str] = typer.Option(
        None,
        "--ignore",
        help="Comma-separated names to ignore (default: node_modules,.git)",
    ),
    follow_symlinks: bool = typer.Option(
        False, "--follow-symlinks", help="Follow symlinks (off by default)"
    ),
    include_hidden: bool = typer.Option(
        False, "--include-hidden", help="Include dot-files and dot-directories"
    ),
    out: Optional[Path] = typer.Option(
        None,
        "--out",
        "--output",
        help="Also write a machine-readable report here. If a directory is provided, "
        "the file will be named 'folder-insight.<fmt>' inside it.",
        resolve_path=True,
    ),
    fmt: str = typer.Option("json", "--fmt", help="Report format: json, ndjson, csv"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose logging"),
):
    """
    Scan a directory and print size stats, breakdowns, and largest files.
    """
    if verbose:
        setup_logging(verbose=True)
        logger.debug("Verbose logging enabled")

    fmt = _parse_fmt(fmt)
    policy = _build_policy(max_depth, ignore, follow_symlinks, include_hidden)
    target = str(path.expanduser().absolute())

    fs = LocalFS()
    scanner = ScanService(fs)
    reporter = ReportService()

    started = time.monotonic()
    try:
        outcome = asyncio.run(scanner.scan_detailed(target, policy))
    except FolderInsightError as e:
        _fail(e)
    stats = reporter.summarize(outcome.records)
    elapsed = time.monotonic() - started
    if outcome.skipped:
        logger.debug("Skipped entries: %s", dict(outcome.skipped))

    stamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    typer.secho(
        f"Folder Insight - {typer.style(target, fg=typer.colors.CYAN)} - {stamp}",
        bold=True,
    )
    _print_report(stats, top)

    if tree:
        typer.echo()
        typer.secho("Tree View", bold=True)
        # Tree levels count from 1 under the root; scan depth counts the root as 0.
        depth = max_depth + 1 if max_depth is not None else DEFAULT_TREE_DEPTH
        lines = asyncio.run(TreeService(fs).render(target, policy, max_depth=depth))
        _print_tree(lines)

    if out is not None:
        written = reporter.write_report(
            stats, _resolve_out(out, fmt), fmt=fmt, root=target, top=top
        )
        typer.echo(f"Wrote {fmt} report to {written}")

    typer.echo()
    typer.secho(f"Scan finished in {elapsed:.2f}s", dim=True)


@app.command("tree")
def tree_cmd(
    path: Path = typer.Option(Path("."), "--path", "-p", help="Directory to show"),
    max_depth: int = typer.Option(
        DEFAULT_TREE_DEPTH, "--max-depth", min=1, help="Levels below the root"
    ),
    ignore: Optional[str] = typer.Option(
        None, "--ignore", help="Comma-separated names to ignore"
    ),
    include_hidden: bool = typer.Option(
        False, "--include-hidden", help="Include dot-files and dot-directories"
    ),
):
    """
    Print only the tree view of a directory.
    """
    policy = _build_policy(None, ignore, False, include_hidden)
    target = path.expanduser().absolute()
    if not target.is_dir():
        _fail(ScanRootError(f'Unable to access "{target}": Not a directory'))
    lines = asyncio.run(TreeService(LocalFS()).render(target, policy, max_depth))
    _print_tree(lines)
