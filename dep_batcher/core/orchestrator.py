"""Multi-ecosystem scan that assembles the dependency update configuration."""

import re
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from ..utils.logging import get_logger
from ..utils.path_utils import ManifestFile, ManifestFinder
from ..utils.performance import PerformanceMonitor, benchmark
from .detector import DetectionResult, FrameworkDetector
from .grouping import GroupMap, generate_ecosystem_groups
from .parsers import ManifestUnreadableError, ParsedDependencies, ParserRegistry
from .parsers import registry as default_registry
from .parsers.base import Ecosystem

INTERVALS = ("daily", "weekly", "monthly")
WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
TIME_PATTERN = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')

CONFIG_VERSION = 2
DEFAULT_PULL_REQUEST_LIMIT = 10
CI_ECOSYSTEM = "github-actions"


@dataclass
class UpdateSchedule:
    """When the update service should check for new versions."""

    interval: str = "weekly"
    day: str = "monday"
    time: str = "09:00"

    def __post_init__(self) -> None:
        """Validate the schedule."""
        self.interval = self.interval.lower()
        self.day = self.day.lower()
        if self.interval not in INTERVALS:
            raise ValueError(f"Interval must be one of {', '.join(INTERVALS)}: {self.interval}")
        if self.day not in WEEKDAYS:
            raise ValueError(f"Day must be a weekday name: {self.day}")
        if not TIME_PATTERN.match(self.time):
            raise ValueError(f"Time must use HH:MM format: {self.time}")

    def to_dict(self) -> Dict[str, str]:
        return {"interval": self.interval, "day": self.day, "time": self.time}


@dataclass(frozen=True)
class EcosystemSettings:
    """Fixed labels and commit-message settings of one update entry."""

    labels: Tuple[str, ...]
    commit_prefix: str
    include_scope: bool = False
    pull_request_limit: Optional[int] = DEFAULT_PULL_REQUEST_LIMIT


ECOSYSTEM_SETTINGS: Dict[Ecosystem, EcosystemSettings] = {
    Ecosystem.NPM: EcosystemSettings(("dependencies", "npm"), "deps(npm)", include_scope=True),
    Ecosystem.PIP: EcosystemSettings(("dependencies", "python"), "deps(python)"),
    Ecosystem.CARGO: EcosystemSettings(("dependencies", "rust"), "deps(rust)"),
    Ecosystem.BUNDLER: EcosystemSettings(("dependencies", "ruby"), "deps(ruby)"),
}

CI_SETTINGS = EcosystemSettings(("dependencies", CI_ECOSYSTEM), "deps(actions)", pull_request_limit=None)


@dataclass
class EcosystemConfig:
    """One entry of the update configuration."""

    ecosystem: str
    schedule: UpdateSchedule
    labels: List[str]
    commit_prefix: str
    directory: str = "/"
    open_pull_requests_limit: Optional[int] = DEFAULT_PULL_REQUEST_LIMIT
    include_scope: bool = False
    groups: Optional[GroupMap] = None

    @classmethod
    def from_settings(
        cls,
        ecosystem: str,
        settings: EcosystemSettings,
        schedule: UpdateSchedule,
        directory: str = "/",
        groups: Optional[GroupMap] = None,
    ) -> "EcosystemConfig":
        return cls(
            ecosystem=ecosystem,
            schedule=schedule,
            labels=list(settings.labels),
            commit_prefix=settings.commit_prefix,
            directory=directory,
            open_pull_requests_limit=settings.pull_request_limit,
            include_scope=settings.include_scope,
            # An empty group map is left out of the entry entirely
            groups=groups or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Render the entry in update-configuration form."""
        data: Dict[str, Any] = {
            "package-ecosystem": self.ecosystem,
            "directory": self.directory,
            "schedule": self.schedule.to_dict(),
        }
        if self.open_pull_requests_limit is not None:
            data["open-pull-requests-limit"] = self.open_pull_requests_limit
        data["labels"] = list(self.labels)

        commit_message = {"prefix": self.commit_prefix}
        if self.include_scope:
            commit_message["include"] = "scope"
        data["commit-message"] = commit_message

        if self.groups:
            data["groups"] = {name: group.to_dict() for name, group in self.groups.items()}
        return data


@dataclass
class EcosystemReport:
    """What was found for one ecosystem, for reporting."""

    ecosystem: Ecosystem
    manifests: List[Path]
    dependencies: Dict[str, str]
    detection: DetectionResult
    groups: GroupMap = field(default_factory=dict)

    @property
    def dependency_count(self) -> int:
        return len(self.dependencies)


@dataclass
class ProjectConfig:
    """The assembled update configuration plus per-ecosystem detection."""

    updates: List[EcosystemConfig] = field(default_factory=list)
    reports: Dict[str, EcosystemReport] = field(default_factory=dict)
    failures: Dict[str, str] = field(default_factory=dict)

    @property
    def ecosystems(self) -> Dict[str, DetectionResult]:
        """Detection result per processed ecosystem, in ecosystem order."""
        return {name: report.detection for name, report in self.reports.items()}

    @property
    def primary_ecosystem(self) -> Optional[str]:
        """Last ecosystem, in processing order, that has a primary framework."""
        primary = None
        for name, detection in self.ecosystems.items():
            if detection.primary:
                primary = name
        return primary

    @property
    def group_count(self) -> int:
        return sum(len(update.groups or {}) for update in self.updates)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": CONFIG_VERSION,
            "updates": [update.to_dict() for update in self.updates],
        }

    def summary_lines(self) -> List[str]:
        """Human-readable one-line summary per processed ecosystem."""
        lines = []
        for name, detection in self.ecosystems.items():
            frameworks = ", ".join(detection.framework_names())
            if frameworks:
                lines.append(f"{name}: {frameworks}")
        return lines


@dataclass
class ScanConfig:
    """Options for a project scan."""

    schedule: UpdateSchedule = field(default_factory=UpdateSchedule)
    grouped: bool = True
    directory: str = "/"
    max_workers: int = 4

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if not self.directory.startswith("/"):
            raise ValueError(f"Directory must be absolute within the repository: {self.directory}")


@dataclass
class _EcosystemOutcome:
    ecosystem: Ecosystem
    elapsed: float
    report: Optional[EcosystemReport] = None
    config: Optional[EcosystemConfig] = None
    error: Optional[str] = None


class ProjectScanner:
    """Scans a project root and builds its dependency update configuration.

    Each present ecosystem runs Reader -> Parser -> Detector -> Grouping as
    an independent task; results are joined and assembled in the fixed
    ecosystem order, followed by the CI pipeline entry.
    """

    def __init__(
        self,
        config: Optional[ScanConfig] = None,
        parser_registry: Optional[ParserRegistry] = None,
        finder: Optional[ManifestFinder] = None,
    ) -> None:
        """Initialize the scanner.

        Args:
            config: Scan options
            parser_registry: Parsers to use; defaults to the built-in registry
            finder: Manifest finder; defaults to the standard manifest names
        """
        self.config = config or ScanConfig()
        self.registry = parser_registry or default_registry
        self.finder = finder or ManifestFinder()
        self.detectors = {ecosystem: FrameworkDetector(ecosystem) for ecosystem in Ecosystem}
        self.performance_monitor = PerformanceMonitor()
        self.logger = get_logger("ProjectScanner")

    @benchmark
    def scan(self, project_root: Union[str, Path]) -> ProjectConfig:
        """Scan a project root.

        Args:
            project_root: Directory containing the manifests

        Returns:
            Assembled project configuration

        Raises:
            ValueError: If the project root is not an existing directory
        """
        root = Path(project_root)
        if not root.exists():
            raise ValueError(f"Project root does not exist: {root}")
        if not root.is_dir():
            raise ValueError(f"Project root is not a directory: {root}")

        with self.performance_monitor.measure("manifest discovery"):
            manifests = self.finder.find_all(root)

        if not manifests:
            self.logger.info(f"No manifests found in {root}; only the CI entry will be generated")

        outcomes = self._run_pipelines(manifests)
        return self._assemble(outcomes)

    def _run_pipelines(self, manifests: Dict[Ecosystem, List[ManifestFile]]) -> List[_EcosystemOutcome]:
        if not manifests:
            return []

        workers = min(self.config.max_workers, len(manifests))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                ecosystem: executor.submit(self._process_ecosystem, ecosystem, files)
                for ecosystem, files in manifests.items()
            }
            # Join in the fixed ecosystem order, whatever order tasks finish in
            return [futures[ecosystem].result() for ecosystem in Ecosystem if ecosystem in futures]

    def _assemble(self, outcomes: List[_EcosystemOutcome]) -> ProjectConfig:
        project = ProjectConfig()

        for outcome in outcomes:
            name = outcome.ecosystem.value
            self.performance_monitor.record(f"{name} pipeline", outcome.elapsed)

            if outcome.error is not None:
                project.failures[name] = outcome.error
                continue

            project.updates.append(outcome.config)
            project.reports[name] = outcome.report

        project.updates.append(EcosystemConfig.from_settings(
            CI_ECOSYSTEM, CI_SETTINGS, self.config.schedule, self.config.directory
        ))
        return project

    def _process_ecosystem(self, ecosystem: Ecosystem, manifests: List[ManifestFile]) -> _EcosystemOutcome:
        """Run one ecosystem's pipeline; touches no shared state."""
        start_time = time.perf_counter()

        try:
            parsed = self._read_dependencies(ecosystem, manifests)
            detection = self.detectors[ecosystem].detect(parsed.dependencies)
            groups = generate_ecosystem_groups(ecosystem, detection) if self.config.grouped else {}
        except ManifestUnreadableError as e:
            self.logger.error(f"Skipping {ecosystem.value}: {e}")
            return _EcosystemOutcome(ecosystem, time.perf_counter() - start_time, error=str(e))
        except Exception as e:
            # One ecosystem's failure must not abort the whole scan
            self.logger.error(f"Skipping {ecosystem.value}: unexpected {type(e).__name__}: {e}")
            return _EcosystemOutcome(
                ecosystem,
                time.perf_counter() - start_time,
                error=f"unexpected {type(e).__name__}: {e}",
            )

        config = EcosystemConfig.from_settings(
            ecosystem.value,
            ECOSYSTEM_SETTINGS[ecosystem],
            self.config.schedule,
            self.config.directory,
            groups,
        )
        report = EcosystemReport(
            ecosystem=ecosystem,
            manifests=[manifest.path for manifest in manifests],
            dependencies=parsed.dependencies,
            detection=detection,
            groups=groups,
        )
        return _EcosystemOutcome(ecosystem, time.perf_counter() - start_time, report=report, config=config)

    def _read_dependencies(self, ecosystem: Ecosystem, manifests: List[ManifestFile]) -> ParsedDependencies:
        """Parse and merge an ecosystem's manifests; later manifests win on collisions."""
        merged = ParsedDependencies(ecosystem=ecosystem.value)

        for manifest in manifests:
            if manifest.is_marker:
                self.logger.debug(f"{manifest.path.name} marks {ecosystem.value} as present; not parsed")
                continue

            parser = self.registry.get_parser(ecosystem.value, manifest.parser_type)
            if parser is None:
                self.logger.warning(f"No parser registered for {manifest.path.name}")
                continue

            merged.merge(parser.parse(manifest.path))

        return merged


def build_project_config(
    project_root: Union[str, Path],
    schedule: Optional[UpdateSchedule] = None,
    grouped: bool = True,
) -> ProjectConfig:
    """Convenience function to scan a project with default options.

    Args:
        project_root: Directory containing the manifests
        schedule: Update schedule; weekly on Monday at 09:00 by default
        grouped: False to emit ungrouped entries only

    Returns:
        Assembled project configuration
    """
    config = ScanConfig(schedule=schedule or UpdateSchedule(), grouped=grouped)
    return ProjectScanner(config).scan(project_root)
