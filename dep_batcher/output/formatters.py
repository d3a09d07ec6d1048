"""Output formatters for DepBatcher results."""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..core.orchestrator import ProjectConfig
from ..utils.logging import get_logger

YAML_HEADER = [
    "Dependabot configuration",
    "Auto-generated by depbatcher",
    "Multi-language framework-aware dependency grouping",
]

YAML_FOOTER = [
    "Dependencies are grouped by framework to reduce pull request volume",
    "and keep updates manageable across all languages.",
]


class ConsoleFormatter:
    """Rich console formatter for DepBatcher output."""

    def __init__(self, console: Optional[Console] = None) -> None:
        """Initialize the console formatter.

        Args:
            console: Rich console instance
        """
        self.console = console or Console()
        self.logger = get_logger("ConsoleFormatter")

    def format_detection(self, project: ProjectConfig) -> None:
        """Display the detection results of a scan.

        Args:
            project: Assembled project configuration
        """
        self.console.print(self._create_summary_panel(project))

        if not project.reports:
            self.console.print(Panel("No supported manifests found; only the CI entry is generated", style="yellow"))
        else:
            self.console.print(self._create_ecosystem_table(project))
            frameworks = self._create_frameworks_table(project)
            if frameworks.row_count:
                self.console.print(frameworks)

        if project.failures:
            self.console.print(self._create_failures_panel(project.failures))

    def format_groups(self, project: ProjectConfig) -> None:
        """Display the dependency groups of every update entry.

        Args:
            project: Assembled project configuration
        """
        table = Table(title="Dependency Groups")
        table.add_column("Ecosystem", style="cyan", no_wrap=True)
        table.add_column("Group", style="magenta")
        table.add_column("Patterns", style="white")
        table.add_column("Update Types", style="green")

        for update in project.updates:
            for name, group in (update.groups or {}).items():
                table.add_row(
                    update.ecosystem,
                    name,
                    Text(", ".join(group.patterns)),
                    ", ".join(group.update_types),
                )

        if table.row_count:
            self.console.print(table)
        else:
            self.console.print(Panel("No dependency groups generated", style="blue"))

    def _create_summary_panel(self, project: ProjectConfig) -> Panel:
        ecosystems = ", ".join(project.ecosystems) or "none"
        content = (
            f"Ecosystems: {ecosystems}\n"
            f"Primary ecosystem: {project.primary_ecosystem or 'none'}\n"
            f"Update entries: {len(project.updates)}\n"
            f"Dependency groups: {project.group_count}"
        )
        style = "yellow" if project.failures else "green"
        return Panel(content, title="Scan Summary", style=style)

    def _create_ecosystem_table(self, project: ProjectConfig) -> Table:
        """Create per-ecosystem table.

        Args:
            project: Assembled project configuration

        Returns:
            Rich table with one row per processed ecosystem
        """
        table = Table(title="Ecosystems")
        table.add_column("Ecosystem", style="cyan", no_wrap=True)
        table.add_column("Manifests", style="blue")
        table.add_column("Dependencies", style="green", justify="right")
        table.add_column("Primary", style="magenta")
        table.add_column("Frameworks", style="white")
        table.add_column("Groups", style="yellow", justify="right")

        for name, report in project.reports.items():
            table.add_row(
                name,
                ", ".join(path.name for path in report.manifests),
                str(report.dependency_count),
                report.detection.primary or "-",
                ", ".join(report.detection.framework_names()) or "-",
                str(len(report.groups)),
            )

        return table

    def _create_frameworks_table(self, project: ProjectConfig) -> Table:
        table = Table(title="Detected Frameworks")
        table.add_column("Ecosystem", style="cyan", no_wrap=True)
        table.add_column("Framework", style="magenta")
        table.add_column("Version", style="blue")
        table.add_column("Packages", style="white")

        for name, detection in project.ecosystems.items():
            for framework, match in detection.detected.items():
                label = f"{framework} (primary)" if framework == detection.primary else framework
                table.add_row(
                    name,
                    label,
                    match.version or "-",
                    Text(", ".join(match.packages)),
                )

        return table

    def _create_failures_panel(self, failures: Dict[str, str]) -> Panel:
        lines = [f"{ecosystem}: {reason}" for ecosystem, reason in failures.items()]
        return Panel(Text("\n".join(lines)), title="Skipped Ecosystems", style="red")

    def format_performance_summary(self, summary: Dict[str, Any]) -> None:
        """Format and display performance summary.

        Args:
            summary: Performance summary dictionary
        """
        if not summary:
            return

        table = Table(title="Performance Summary")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="green")

        for key, value in summary.items():
            if key == "metrics":
                continue
            if isinstance(value, float):
                table.add_row(key, f"{value:.4f}")
            else:
                table.add_row(key, str(value))

        self.console.print(table)

    def format_error(self, error: str, details: Optional[str] = None) -> None:
        """Format and display error message.

        Args:
            error: Error message
            details: Optional error details
        """
        content = f"[bold red]Error:[/bold red] {error}"
        if details:
            content += f"\n\n[dim]{details}[/dim]"

        self.console.print(Panel(content, style="red"))


class YAMLFormatter:
    """Renders the update configuration as a commented YAML document.

    The output depends only on the configuration, so two scans of the same
    project render byte-identical files.
    """

    def __init__(self, output_file: Optional[Path] = None) -> None:
        """Initialize the YAML formatter.

        Args:
            output_file: Optional output file path
        """
        self.output_file = output_file
        self.logger = get_logger("YAMLFormatter")

    def render_header(self, project: ProjectConfig) -> str:
        """Build the comment block that precedes the document.

        Args:
            project: Assembled project configuration

        Returns:
            Comment lines, each ending in a newline
        """
        lines: List[str] = list(YAML_HEADER)
        lines.append("")
        lines.append(f"Detected ecosystems: {', '.join(project.ecosystems) or 'none'}")
        lines.extend(project.summary_lines())
        lines.append("")
        lines.extend(YAML_FOOTER)
        return "".join(f"# {line}\n" if line else "#\n" for line in lines)

    def render(self, project: ProjectConfig) -> str:
        """Render the configuration as YAML text.

        Args:
            project: Assembled project configuration

        Returns:
            Header comments followed by the YAML document
        """
        body = yaml.safe_dump(
            project.to_dict(),
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
        return f"{self.render_header(project)}\n{body}"

    def save(self, project: ProjectConfig, output_file: Optional[Path] = None) -> Path:
        """Write the configuration, creating parent directories as needed.

        Args:
            project: Assembled project configuration
            output_file: Output file path (uses instance default if None)

        Returns:
            Path that was written
        """
        file_path = output_file or self.output_file
        if not file_path:
            raise ValueError("No output file specified")

        file_path = Path(file_path)
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_text(self.render(project), encoding="utf-8")
        except OSError as e:
            self.logger.error(f"Failed to write configuration to {file_path}: {e}")
            raise

        self.logger.info(f"Configuration written to {file_path}")
        return file_path


class JSONFormatter:
    """JSON formatter for DepBatcher output."""

    def __init__(self, output_file: Optional[Path] = None) -> None:
        """Initialize the JSON formatter.

        Args:
            output_file: Optional output file path
        """
        self.output_file = output_file
        self.logger = get_logger("JSONFormatter")

    def format_results(self, project: ProjectConfig) -> Dict[str, Any]:
        """Format the configuration and detection results as JSON data.

        Args:
            project: Assembled project configuration

        Returns:
            Formatted JSON data
        """
        ecosystems = {}
        for name, report in project.reports.items():
            data = report.detection.to_dict()
            data["manifests"] = [path.name for path in report.manifests]
            data["dependency_count"] = report.dependency_count
            data["groups"] = list(report.groups)
            ecosystems[name] = data

        return {
            "summary": {
                "ecosystems": list(project.ecosystems),
                "primary_ecosystem": project.primary_ecosystem,
                "update_entries": len(project.updates),
                "dependency_groups": project.group_count,
                "timestamp": datetime.now().isoformat(),
            },
            "ecosystems": ecosystems,
            "failures": dict(project.failures),
            "config": project.to_dict(),
        }

    def render(self, project: ProjectConfig) -> str:
        return json.dumps(self.format_results(project), indent=2, ensure_ascii=False)

    def save_results(self, results: Dict[str, Any], output_file: Optional[Path] = None) -> None:
        """Save results to JSON file.

        Args:
            results: Results dictionary
            output_file: Output file path (uses instance default if None)
        """
        file_path = output_file or self.output_file
        if not file_path:
            raise ValueError("No output file specified")

        try:
            Path(file_path).parent.mkdir(parents=True, exist_ok=True)
            with open(file_path, 'w', encoding='utf-8') as f:
                json.dump(results, f, indent=2, ensure_ascii=False)

            self.logger.info(f"Results saved to {file_path}")
        except OSError as e:
            self.logger.error(f"Failed to save results to {file_path}: {e}")
            raise

