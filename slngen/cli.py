"""slngen CLI - Generate Visual Studio solution files."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from slngen.config import GenerationConfig, GenerationResult, ProjectRecord
from slngen.errors import ManifestError
from slngen.pipeline import load_records, run_pipeline

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stderr)
        ],
        force=True,
    )


def _split_values(values: tuple[str, ...]) -> list[str]:
    """Flatten repeated options that may also hold ';' or ',' separated lists."""
    result = []
    for value in values:
        for part in value.replace(",", ";").split(";"):
            if part.strip():
                result.append(part.strip())
    return result


@click.group()
def cli() -> None:
    """slngen - Generate Visual Studio solution files from project files."""
    pass


def _run_with_progress(config: GenerationConfig, records: list[ProjectRecord]) -> GenerationResult:
    """Run the pipeline with Rich progress display."""
    from rich.console import Console
    from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
    from rich.table import Table

    console = Console()

    with Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Initialising...", total=None)

        def on_phase(name, label):
            progress.update(task, description=label)

        result = run_pipeline(config, records, progress_callback=on_phase)

    if result.errors:
        return result

    stats = result.stats
    metadata = result.metadata
    timings = metadata.get("phase_timings", {})

    title = Path(result.solution_path).name if result.solution_path else "solution"
    table = Table(title=f"slngen: {title}", show_edge=False)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Projects", str(stats.get("projects", 0)))
    table.add_row("Folders", str(stats.get("folders", 0)))
    table.add_row("Solution items", str(stats.get("solution_items", 0)))
    table.add_row("Configurations", ", ".join(stats.get("configurations", [])))
    table.add_row("Platforms", ", ".join(stats.get("platforms", [])))
    table.add_row("Exact matches", str(stats.get("exact_matches", 0)))
    table.add_row("Configuration fallbacks", str(stats.get("configuration_fallbacks", 0)))
    table.add_row("Platform fallbacks", str(stats.get("platform_fallbacks", 0)))
    table.add_row("Unmatched platforms", str(stats.get("unmatched_platforms", 0)))
    table.add_row("Build entries", str(stats.get("build_entries", 0)))
    table.add_row("Deploy entries", str(stats.get("deploy_entries", 0)))

    duration = metadata.get("duration_ms", 0)
    table.add_row("Duration", f"{duration:.1f}ms")

    console.print(table)

    if config.verbose and timings:
        timing_table = Table(title="Phase Timings", show_edge=False)
        timing_table.add_column("Phase", style="bold")
        timing_table.add_column("Time (ms)", justify="right")
        for phase, seconds in timings.items():
            timing_table.add_row(phase, f"{seconds * 1000:.1f}")
        console.print(timing_table)

    return result


@cli.command("generate")
@click.argument("inputs", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("-o", "--output", "output_path", default=None, help="Output .sln file path")
@click.option("--folders/--no-folders", default=False, help="Mirror the directory layout as solution folders")
@click.option("--collapse-folders", is_flag=True, help="Merge folders that hold a single child folder")
@click.option("-c", "--configuration", "configurations", multiple=True, help="Solution configuration(s)")
@click.option("-p", "--platform", "platforms", multiple=True, help="Solution platform(s)")
@click.option("--no-reuse", is_flag=True, help="Ignore identifiers from an existing solution file")
@click.option("--ignore-main-project", is_flag=True, help="Place the first project in folders too")
@click.option("--not-buildable", is_flag=True, help="Do not emit build lines for any project")
@click.option("--vs-version", default=None, help="Visual Studio version to write in the header")
@click.option("--verbose", is_flag=True, help="Show debug logging and per-phase timings")
@click.option("--quiet", is_flag=True, help="Suppress all output except errors")
def generate_cmd(
    inputs: tuple[str, ...],
    output_path: str | None,
    folders: bool,
    collapse_folders: bool,
    configurations: tuple[str, ...],
    platforms: tuple[str, ...],
    no_reuse: bool,
    ignore_main_project: bool,
    not_buildable: bool,
    vs_version: str | None,
    verbose: bool,
    quiet: bool,
) -> None:
    """Generate a solution from project files and/or JSON manifests."""
    setup_logging(verbose)

    config = GenerationConfig(
        output_path=output_path,
        use_folders=folders,
        collapse_folders=collapse_folders,
        configurations=_split_values(configurations),
        platforms=_split_values(platforms),
        reuse_existing=not no_reuse,
        ignore_main_project=ignore_main_project,
        is_buildable=not not_buildable,
        visual_studio_version=vs_version,
        verbose=verbose,
        quiet=quiet,
    )

    try:
        records = load_records(list(inputs))
    except ManifestError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)

    if quiet:
        result = run_pipeline(config, records)
    else:
        result = _run_with_progress(config, records)

    if result.errors:
        for error in result.errors:
            click.echo(f"Error: {error}", err=True)
        sys.exit(1)

    if not quiet:
        from rich.console import Console
        from rich.markup import escape
        if result.written:
            Console().print(f"[green]Solution written to:[/green] {escape(result.solution_path)}")
        else:
            Console().print("[yellow]No projects to add; nothing written.[/yellow]")


@cli.command("show")
@click.argument("solution", type=click.Path(exists=True, dir_okay=False))
@click.option("--folders", "include_folders", is_flag=True, help="List solution folders too")
def show_cmd(solution: str, include_folders: bool) -> None:
    """List the projects in an existing solution file."""
    from rich.console import Console
    from rich.markup import escape
    from rich.table import Table

    from slngen.dotnet.solution import parse_solution

    projects = parse_solution(solution, include_folders=include_folders)

    table = Table(title=Path(solution).name, show_edge=False)
    table.add_column("Name", style="bold")
    table.add_column("Path")
    table.add_column("Type")
    table.add_column("Id")
    for project in projects:
        table.add_row(escape(project.name), escape(project.path), project.type_guid, project.project_guid)

    Console().print(table)
    click.echo(f"{len(projects)} project(s)")


if __name__ == "__main__":
    cli()
