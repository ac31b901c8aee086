"""Command-line interface for allocprep."""

from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from allocprep.config.settings import ProjectConfig
    from allocprep.pipeline import PipelineResult

app = typer.Typer(
    name="allocprep",
    help="Normalize and validate client/worker/task allocation spreadsheets.",
    no_args_is_help=True,
)

console = Console()

ConfigOption = Annotated[
    Path,
    typer.Option(
        "--config",
        "-c",
        help="Path to configuration YAML file.",
        exists=True,
        dir_okay=False,
    ),
]


def _load(config: Path) -> "ProjectConfig":
    """Load the project config and set up logging from it."""
    from allocprep.config.loader import load_config
    from allocprep.utils.logging import configure_logging

    console.print(f"[blue]Loading configuration from {config}[/blue]")
    project_config = load_config(config)
    configure_logging(
        level=project_config.logging.level,
        json_output=project_config.logging.json_output,
    )
    return project_config


def _run(project_config: "ProjectConfig") -> "PipelineResult":
    from allocprep.pipeline import run_pipeline
    from allocprep.validation import ConsoleReporter

    result = run_pipeline(project_config)

    reporter = ConsoleReporter(console)
    reporter.print_transform_results(list(result.transforms.values()))
    console.print()
    reporter.print_findings(result.findings)
    return result


@app.command()
def validate(config: ConfigOption) -> None:
    """Transform and cross-validate the configured tables."""
    try:
        project_config = _load(config)
        console.print(f"[blue]Validating data set for {project_config.project}[/blue]")
        result = _run(project_config)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from e

    # Exit with appropriate code
    if result.has_problems:
        raise typer.Exit(code=1)


@app.command()
def export(
    config: ConfigOption,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output directory. Defaults to output/{project}/.",
            file_okay=False,
        ),
    ] = None,
    rules: Annotated[
        Path | None,
        typer.Option(
            "--rules",
            "-r",
            help="Rules JSON document to export alongside the tables.",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
) -> None:
    """
    Export cleaned tables and the rules document.

    Validation findings are reported but never block the export.
    """
    from allocprep.export import export_data_set
    from allocprep.models import EntityKind
    from allocprep.rules import load_rules

    try:
        project_config = _load(config)
        rules_document = load_rules(rules) if rules is not None else None
        result = _run(project_config)

        output_dir = output if output is not None else project_config.export_dir
        exported = export_data_set(
            result.records(EntityKind.CLIENT),
            result.records(EntityKind.WORKER),
            result.records(EntityKind.TASK),
            output_dir,
            rules=rules_document,
        )
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from e
    except Exception as e:
        console.print(f"[red]Export failed: {e}[/red]")
        raise typer.Exit(code=1) from e

    console.print()
    table = Table(title="Exported Files")
    table.add_column("Table", style="cyan")
    table.add_column("Records", justify="right", style="green")
    table.add_column("Path", style="dim")
    for name, path in exported.files.items():
        count = exported.counts.get(name)
        table.add_row(name, "-" if count is None else str(count), str(path))
    console.print(table)

    if result.findings:
        console.print(
            f"\n[yellow]Exported with {len(result.findings)} open validation findings[/yellow]"
        )
    console.print(f"\n[green]Saved to: {exported.output_dir}[/green]")


@app.command()
def version() -> None:
    """Show version information."""
    from allocprep import __version__

    console.print(f"allocprep version {__version__}")


if __name__ == "__main__":
    app()
