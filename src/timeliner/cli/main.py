"""Timeliner CLI entry point and commands."""

import sys
from datetime import datetime
from pathlib import Path
from typing import Literal

import click
from pydantic import ValidationError

from timeliner import __version__
from timeliner.cli.output import OutputFormat, OutputFormatter, output_json, summary_table
from timeliner.config import ArtifactConfigLoader
from timeliner.core.errors import TimelinerError, handle_error
from timeliner.core.logging import configure_logging, error, info, set_verbose
from timeliner.models.options import RunOptions
from timeliner.pipeline import run_timeline

EXIT_ERROR = 1


def _parse_tool_dirs(
    ctx: click.Context, param: click.Parameter, values: tuple[str, ...]
) -> dict[str, Path]:
    """Parse repeated TOOL=DIR options."""
    tool_dirs: dict[str, Path] = {}
    for value in values:
        tool, sep, directory = value.partition("=")
        if not sep or not tool.strip() or not directory.strip():
            raise click.BadParameter(f"expected TOOL=DIR, got '{value}'", ctx=ctx, param=param)
        tool_dirs[tool.strip()] = Path(directory.strip())
    return tool_dirs


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--verbose", "-v", is_flag=True, help="Log debug messages to stderr")
@click.option("--quiet", "-q", is_flag=True, help="Only log warnings and errors; no progress or summary")
@click.option(
    "--log-format",
    type=click.Choice(["text", "json"]),
    default="text",
    show_default=True,
    help="Format of stderr log lines",
)
@click.version_option(version=__version__, prog_name="timeliner")
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    log_format: Literal["text", "json"],
) -> None:
    """Forensic Timeliner: merge forensic tool exports into one timeline.

    Discovers CSV exports from EZTools, AXIOM, NirSoft and Hayabusa,
    normalizes their timestamps to UTC and writes a single sorted
    timeline as CSV, JSON or JSONL.
    """
    ctx.obj = {"quiet": quiet}
    set_verbose(verbose)
    configure_logging(log_format=log_format, quiet=quiet)


@cli.command()
@click.option(
    "--base-dir",
    "-b",
    type=click.Path(path_type=Path),
    required=True,
    help="Base evidence directory holding the tool exports",
)
@click.option(
    "--tool-dir",
    "tool_dirs",
    multiple=True,
    callback=_parse_tool_dirs,
    metavar="TOOL=DIR",
    help="Input directory for one tool (default: base directory)",
)
@click.option(
    "--output",
    "-o",
    "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Timeline output file (default: stdout)",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["csv", "json", "jsonl"]),
    default="csv",
    help="Timeline format (default: csv)",
)
@click.option(
    "--config",
    "-c",
    "config_paths",
    multiple=True,
    type=click.Path(path_type=Path),
    help="Extra artifact definition file or directory",
)
@click.option(
    "--no-builtin",
    is_flag=True,
    default=False,
    help="Skip the bundled artifact definitions",
)
@click.option("--tool", "-t", "tools", multiple=True, help="Only run artifacts of this tool")
@click.option("--artifact", "-a", "artifacts", multiple=True, help="Only run this artifact")
@click.option(
    "--start-date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Drop rows before this date (YYYY-MM-DD, inclusive)",
)
@click.option(
    "--end-date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Drop rows after this date (YYYY-MM-DD, inclusive)",
)
@click.option("--deduplicate", is_flag=True, default=False, help="Drop identical rows")
@click.option(
    "--workers",
    "-w",
    type=click.IntRange(1, 64),
    default=1,
    help="Artifacts processed in parallel (default: 1)",
)
@click.option(
    "--summary-json",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the run summary as JSON to this file",
)
@click.pass_context
def run(
    ctx: click.Context,
    base_dir: Path,
    tool_dirs: dict[str, Path],
    output_path: Path | None,
    output_format: str,
    config_paths: tuple[Path, ...],
    no_builtin: bool,
    tools: tuple[str, ...],
    artifacts: tuple[str, ...],
    start_date: datetime | None,
    end_date: datetime | None,
    deduplicate: bool,
    workers: int,
    summary_json: Path | None,
) -> None:
    """Build a timeline from the exports under a base directory.

    \b
    Examples:
      timeliner run --base-dir /cases/host01 -o timeline.csv
      timeliner run -b /cases/host01 --tool-dir Axiom=/exports/axiom -f jsonl
      timeliner run -b /cases/host01 --start-date 2023-06-01 --end-date 2023-06-30
    """
    try:
        options = RunOptions(
            base_dir=base_dir,
            tool_dirs=tool_dirs,
            output_format=output_format,
            start_date=start_date.date() if start_date else None,
            end_date=end_date.date() if end_date else None,
            deduplicate=deduplicate,
            workers=workers,
            tools=list(tools),
            artifacts=list(artifacts),
        )
    except ValidationError as e:
        raise click.UsageError("; ".join(err["msg"] for err in e.errors()), ctx=ctx)

    try:
        loader = ArtifactConfigLoader(config_paths=list(config_paths), include_builtin=not no_builtin)
        definitions = loader.load()
        info(f"Loaded {len(definitions)} artifact definitions", count=len(definitions))
        summary = run_timeline(
            definitions,
            options,
            output_path=output_path,
            show_progress=output_path is not None and not ctx.obj.get("quiet"),
        )
    except TimelinerError as e:
        handle_error(e)

    if summary_json is not None:
        with open(summary_json, "w", encoding="utf-8") as f:
            output_json(summary, file=f, indent=2)

    if not ctx.obj.get("quiet"):
        summary_table(summary)


@cli.command("artifacts")
@click.option(
    "--config",
    "-c",
    "config_paths",
    multiple=True,
    type=click.Path(path_type=Path),
    help="Extra artifact definition file or directory",
)
@click.option(
    "--no-builtin",
    is_flag=True,
    default=False,
    help="Skip the bundled artifact definitions",
)
@click.option(
    "--format",
    "-f",
    "format",
    type=click.Choice(["json", "jsonl", "human"]),
    default="human",
    help="Listing format (default: human)",
)
def list_artifacts(config_paths: tuple[Path, ...], no_builtin: bool, format: OutputFormat) -> None:
    """List configured artifact definitions."""
    formatter = OutputFormatter(format=format)
    try:
        loader = ArtifactConfigLoader(config_paths=list(config_paths), include_builtin=not no_builtin)
        definitions = loader.list_definitions()
    except TimelinerError as e:
        handle_error(e)

    formatter.records(definitions, title="Artifact Definitions")


def main() -> None:
    """Main entry point."""
    try:
        cli()
    except Exception as e:
        error(f"Unexpected error: {type(e).__name__}: {e}")
        sys.exit(EXIT_ERROR)


if __name__ == "__main__":
    main()
