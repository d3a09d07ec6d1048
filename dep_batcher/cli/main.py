"""Main CLI interface for DepBatcher."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax

from ..core.orchestrator import ProjectScanner, ScanConfig, UpdateSchedule
from ..core.parsers import DependencyParser
from ..core.signatures import SIGNATURE_TABLES
from ..output.formatters import ConsoleFormatter, JSONFormatter, YAMLFormatter
from ..utils.logging import get_logger, setup_logging
from ..utils.path_utils import ManifestFinder

app = typer.Typer(
    name="depbatcher",
    help="Generate framework-aware dependency update configuration for multi-language projects",
    add_completion=False
)

console = Console()
logger = get_logger("CLI")

DEFAULT_OUTPUT = Path(".github") / "dependabot.yml"


@app.command()
def generate(
    path: Path = typer.Argument(
        Path("."),
        help="Path to the project directory to scan"
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file (default: <path>/.github/dependabot.yml)"
    ),
    schedule: str = typer.Option(
        "weekly",
        "--schedule",
        help="Update interval: daily, weekly or monthly"
    ),
    day: str = typer.Option(
        "monday",
        "--day",
        help="Day of the week to check for updates"
    ),
    time_of_day: str = typer.Option(
        "09:00",
        "--time",
        help="Time of day to check for updates (HH:MM)"
    ),
    no_groups: bool = typer.Option(
        False,
        "--no-groups",
        help="Emit update entries without framework groups"
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Print the configuration instead of writing it"
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print configuration and detection results as JSON"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging"
    ),
    performance: bool = typer.Option(
        False,
        "--performance",
        help="Show performance summary"
    ),
) -> None:
    """Scan a project and write its dependency update configuration."""

    setup_logging(verbose=verbose)

    try:
        config = ScanConfig(
            schedule=UpdateSchedule(interval=schedule, day=day, time=time_of_day),
            grouped=not no_groups,
        )
        scanner = ProjectScanner(config)
        project = scanner.scan(path)
    except ValueError as e:
        logger.error(f"Generate failed: {e}")
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if as_json:
        typer.echo(JSONFormatter().render(project))
        return

    console_formatter = ConsoleFormatter(console)
    console_formatter.format_detection(project)
    if verbose:
        console_formatter.format_groups(project)

    yaml_formatter = YAMLFormatter()
    if dry_run:
        console.print(Syntax(yaml_formatter.render(project), "yaml"))
    else:
        output_path = output or path / DEFAULT_OUTPUT
        try:
            yaml_formatter.save(project, output_path)
        except OSError as e:
            console_formatter.format_error(f"Could not write {output_path}", details=str(e))
            raise typer.Exit(1)
        console.print(f"[green]Configuration written to {output_path}[/green]")

    if performance:
        scanner.performance_monitor.print_summary(console)
        console_formatter.format_performance_summary(scanner.performance_monitor.get_summary())


@app.command()
def detect(
    path: Path = typer.Argument(
        Path("."),
        help="Path to the project directory to scan"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging"
    ),
) -> None:
    """Show the ecosystems and frameworks detected in a project."""

    setup_logging(verbose=verbose)

    try:
        project = ProjectScanner().scan(path)
    except ValueError as e:
        logger.error(f"Detect failed: {e}")
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    formatter = ConsoleFormatter(console)
    formatter.format_detection(project)
    formatter.format_groups(project)


@app.command()
def info() -> None:
    """Show DepBatcher information."""

    console.print(Panel.fit(
        "[bold blue]DepBatcher[/bold blue]\n"
        "Detects the frameworks a project depends on and generates\n"
        "grouped dependency update configuration",
        title="Information"
    ))

    ecosystems = DependencyParser.get_supported_ecosystems()
    console.print(f"\n[bold]Supported Ecosystems:[/bold] {', '.join(ecosystems)}")

    parsers = DependencyParser.get_supported_parser_types()
    console.print(f"[bold]Supported Parsers:[/bold] {', '.join(parsers)}")

    manifests = ManifestFinder().get_supported_manifests()
    console.print(f"[bold]Supported Manifests:[/bold] {', '.join(manifests)}")

    for ecosystem, table in SIGNATURE_TABLES.items():
        console.print(f"[bold]{ecosystem.value} frameworks:[/bold] {', '.join(table.signatures)}")


def main() -> None:
    """Main entry point for DepBatcher CLI."""
    app()


if __name__ == "__main__":
    main()
