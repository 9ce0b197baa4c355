"""Command-line interface for gffkit.

This module provides the main entry point for the gffkit CLI tool.
It uses Click to define commands and rich for console output.

Commands:
    validate: Check that every line of a GFF3 file decodes
    normalize: Rewrite a GFF3 file in canonical form
    stats: Count records per feature type

Example:
    $ gffkit --help
    $ gffkit validate annotations.gff3
    $ gffkit normalize annotations.gff3 -o clean.gff3 --skip-invalid
    $ gffkit stats annotations.gff3
"""

import logging
import time
from collections import Counter
from pathlib import Path
from typing import Optional

import attrs
import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from gffkit import __version__
from gffkit.config import Config
from gffkit.io.gff import GFFError, Reader, Writer
from gffkit.io.tabular import TabularError
from gffkit.utils.logging import setup_logging

# Initialize rich console for pretty output
console = Console()

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="gffkit")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output.")
@click.option("-q", "--quiet", is_flag=True, help="Suppress non-error output.")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="TOML configuration file with [reader] and [writer] tables.",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool, quiet: bool, config_path: Optional[Path]) -> None:
    """gffkit: read, check and rewrite GFF3 annotation files."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet

    setup_logging(verbose=verbose, quiet=quiet)

    try:
        ctx.obj["config"] = Config.load(config_path)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise SystemExit(1)


# =============================================================================
# validate command
# =============================================================================


@main.command()
@click.argument("gff", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--max-errors",
    type=int,
    default=20,
    show_default=True,
    help="Maximum number of bad lines to print (all are counted).",
)
@click.pass_context
def validate(ctx: click.Context, gff: Path, max_errors: int) -> None:
    """Check that every line of GFF decodes into a record.

    Exits with status 1 if any line fails.

    \b
    Examples:
        $ gffkit validate annotations.gff3
        $ gffkit validate annotations.gff3.gz --max-errors 100
    """
    config: Config = ctx.obj["config"]
    quiet = ctx.obj.get("quiet", False)

    try:
        with Reader(gff, config=config.reader) as reader:
            for result in reader.results():
                if not result.ok and reader.errors <= max_errors:
                    console.print(f"[red]{escape(str(result.error))}[/red]")
    except (OSError, TabularError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise SystemExit(1)

    if reader.errors:
        console.print(
            f"[red]{escape(str(gff))}: {reader.errors} bad line(s), "
            f"{reader.records_read} valid record(s)[/red]"
        )
        raise SystemExit(1)

    if not quiet:
        console.print(f"[green]{escape(str(gff))}: {reader.records_read} valid record(s)[/green]")


# =============================================================================
# normalize command
# =============================================================================


@main.command()
@click.argument("gff", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-o",
    "--output",
    type=click.Path(path_type=Path),
    required=True,
    help="Output GFF3 file (.gz is compressed).",
)
@click.option(
    "--skip-invalid",
    is_flag=True,
    help="Drop lines that fail to decode instead of stopping.",
)
@click.option(
    "--keep-order",
    is_flag=True,
    help="Keep attribute insertion order instead of sorting by key.",
)
@click.pass_context
def normalize(
    ctx: click.Context,
    gff: Path,
    output: Path,
    skip_invalid: bool,
    keep_order: bool,
) -> None:
    """Rewrite GFF in canonical form.

    Score and strand placeholders are written as ".", attributes are
    sorted by key (unless --keep-order) and blank lines are dropped.

    \b
    Examples:
        $ gffkit normalize annotations.gff3 -o clean.gff3
        $ gffkit normalize raw.gff3 -o clean.gff3.gz --skip-invalid
    """
    config: Config = ctx.obj["config"]
    quiet = ctx.obj.get("quiet", False)

    writer_config = config.writer
    if keep_order:
        writer_config = attrs.evolve(writer_config, sort_attributes=False)

    skipped = 0
    start = time.perf_counter()
    try:
        with (
            Reader(gff, config=config.reader) as reader,
            Writer(output, config=writer_config) as writer,
        ):
            for result in reader.results():
                if result.ok:
                    writer.write(result.unwrap())
                elif skip_invalid:
                    skipped += 1
                    logger.warning(f"Skipping {result.error}")
                else:
                    console.print(f"[red]Error:[/red] {escape(str(result.error))}")
                    raise SystemExit(1)
    except (OSError, GFFError, TabularError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise SystemExit(1)

    logger.info(f"Normalized {gff} in {time.perf_counter() - start:.2f}s")

    if not quiet:
        console.print(f"[green]Wrote {writer.records_written} record(s) to:[/green] {escape(str(output))}")
        if skipped:
            console.print(f"[yellow]Skipped {skipped} bad line(s)[/yellow]")


# =============================================================================
# stats command
# =============================================================================


@main.command()
@click.argument("gff", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def stats(ctx: click.Context, gff: Path) -> None:
    """Count records per feature type in GFF.

    Lines that fail to decode are counted but otherwise ignored.
    """
    config: Config = ctx.obj["config"]

    counts: Counter[str] = Counter()
    try:
        with Reader(gff, config=config.reader) as reader:
            for record in reader.records(on_error="skip"):
                counts[record.feature_type] += 1
    except (OSError, TabularError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise SystemExit(1)

    table = Table(title=f"Feature types in {escape(gff.name)}")
    table.add_column("Feature type")
    table.add_column("Count", justify="right")
    for feature_type, count in counts.most_common():
        table.add_row(escape(feature_type), str(count))

    console.print(table)
    console.print(f"Records: {reader.records_read}")
    console.print(f"Bad lines: {reader.errors}")
