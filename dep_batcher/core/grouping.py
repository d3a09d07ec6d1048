"""Framework-aware dependency grouping policies.

Core framework packages are batched for minor and patch updates, while
add-on ecosystem packages only batch patch updates. Each generator returns
the groups for one detected framework; the per-ecosystem tables below list
which generator applies to which framework, in merge order.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..utils.logging import get_logger
from .detector import DetectionResult, FrameworkMatch
from .parsers.base import Ecosystem

UPDATE_TYPES = ("major", "minor", "patch")
DEPENDENCY_TYPES = ("production", "development")

logger = get_logger("Grouping")


@dataclass
class GroupSpec:
    """A named bucket of package patterns sharing an update rule."""

    patterns: List[str]
    update_types: List[str] = field(default_factory=lambda: ["minor", "patch"])
    dependency_type: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the group."""
        if not self.patterns:
            raise ValueError("Group must have at least one pattern")
        unknown = [t for t in self.update_types if t not in UPDATE_TYPES]
        if unknown:
            raise ValueError(f"Unknown update types: {', '.join(unknown)}")
        if self.dependency_type is not None and self.dependency_type not in DEPENDENCY_TYPES:
            raise ValueError(f"Unknown dependency type: {self.dependency_type}")

    def to_dict(self) -> Dict[str, Any]:
        """Render the group in update-configuration form."""
        data: Dict[str, Any] = {
            "patterns": list(self.patterns),
            "update-types": list(self.update_types),
        }
        if self.dependency_type:
            data["dependency-type"] = self.dependency_type
        return data


GroupMap = Dict[str, GroupSpec]
GroupGenerator = Callable[[FrameworkMatch], GroupMap]


# npm


def generate_react_groups(_match: FrameworkMatch) -> GroupMap:
    """Generate dependency groups for the React ecosystem."""
    return {
        "react-core": GroupSpec(
            patterns=["react", "react-dom", "react-router*"],
            update_types=["minor", "patch"],
            dependency_type="production",
        ),
        "react-ecosystem": GroupSpec(
            patterns=["@tanstack/*", "zustand", "jotai", "swr", "@reduxjs/*"],
            update_types=["patch"],
            dependency_type="production",
        ),
        "react-ui": GroupSpec(
            patterns=["@mui/*", "@chakra-ui/*", "@radix-ui/*", "@headlessui/react"],
            update_types=["patch"],
        ),
        "react-forms": GroupSpec(
            patterns=["react-hook-form", "formik"],
            update_types=["minor", "patch"],
        ),
    }


def generate_vue_groups(_match: FrameworkMatch) -> GroupMap:
    """Generate dependency groups for the Vue ecosystem."""
    return {
        "vue-core": GroupSpec(
            patterns=["vue", "vue-router", "pinia"],
            update_types=["minor", "patch"],
            dependency_type="production",
        ),
        "vue-ecosystem": GroupSpec(patterns=["@vue/*", "@vueuse/*", "vueuse"], update_types=["patch"]),
        "vue-ui": GroupSpec(patterns=["vuetify", "element-plus"], update_types=["patch"]),
    }


def generate_angular_groups(_match: FrameworkMatch) -> GroupMap:
    """Generate dependency groups for the Angular ecosystem."""
    return {
        "angular-core": GroupSpec(
            patterns=["@angular/core", "@angular/common", "@angular/platform-*"],
            update_types=["minor", "patch"],
            dependency_type="production",
        ),
        "angular-ecosystem": GroupSpec(patterns=["@angular/*", "@ngrx/*", "@ngxs/*"], update_types=["patch"]),
        "angular-ui": GroupSpec(patterns=["@angular/material", "@ng-bootstrap/*"], update_types=["patch"]),
    }


def generate_testing_groups(_match: FrameworkMatch) -> GroupMap:
    """Generate dependency groups for JavaScript test tooling."""
    return {
        "testing-frameworks": GroupSpec(
            patterns=["jest", "vitest", "@testing-library/*", "playwright", "@playwright/*"],
            update_types=["minor", "patch"],
            dependency_type="development",
        ),
    }


def generate_build_tool_groups(_match: FrameworkMatch) -> GroupMap:
    """Generate dependency groups for bundlers and build orchestrators."""
    return {
        "build-tools": GroupSpec(
            patterns=["vite", "webpack", "turbo", "@nx/*", "esbuild", "rollup"],
            update_types=["patch"],
            dependency_type="development",
        ),
    }


def generate_storybook_groups(_match: FrameworkMatch) -> GroupMap:
    return {
        "storybook": GroupSpec(
            patterns=["@storybook/*"],
            update_types=["minor", "patch"],
            dependency_type="development",
        ),
    }


# pip


def generate_django_groups(_match: FrameworkMatch) -> GroupMap:
    return {
        "django-core": GroupSpec(patterns=["django", "djangorestframework"], update_types=["minor", "patch"]),
        "django-extensions": GroupSpec(patterns=["django-*"], update_types=["patch"]),
    }


def generate_flask_groups(_match: FrameworkMatch) -> GroupMap:
    return {
        "flask-core": GroupSpec(patterns=["flask", "flask-*"], update_types=["minor", "patch"]),
    }


def generate_fastapi_groups(_match: FrameworkMatch) -> GroupMap:
    return {
        "fastapi-core": GroupSpec(
            patterns=["fastapi", "uvicorn", "starlette", "pydantic"],
            update_types=["minor", "patch"],
        ),
    }


def generate_data_science_groups(_match: FrameworkMatch) -> GroupMap:
    """Generate groups for numerical, ML and plotting libraries."""
    return {
        "data-core": GroupSpec(patterns=["numpy", "pandas", "scipy"], update_types=["minor", "patch"]),
        "ml-frameworks": GroupSpec(
            patterns=["scikit-learn", "tensorflow", "torch", "pytorch"],
            update_types=["patch"],
        ),
        "visualization": GroupSpec(patterns=["matplotlib", "seaborn", "plotly"], update_types=["patch"]),
    }


def generate_python_testing_groups(_match: FrameworkMatch) -> GroupMap:
    return {
        "testing-frameworks": GroupSpec(patterns=["pytest", "pytest-*", "coverage"], update_types=["minor", "patch"]),
    }


# cargo


def generate_actix_groups(_match: FrameworkMatch) -> GroupMap:
    return {
        "actix-core": GroupSpec(patterns=["actix-web", "actix-rt"], update_types=["minor", "patch"]),
        "actix-ecosystem": GroupSpec(patterns=["actix-*"], update_types=["patch"]),
    }


def generate_async_runtime_groups(_match: FrameworkMatch) -> GroupMap:
    return {
        "async-runtime": GroupSpec(patterns=["tokio", "async-std", "futures"], update_types=["patch"]),
    }


def generate_serde_groups(_match: FrameworkMatch) -> GroupMap:
    return {
        "serde-ecosystem": GroupSpec(patterns=["serde", "serde_json", "serde_*"], update_types=["minor", "patch"]),
    }


# bundler


def generate_rails_groups(_match: FrameworkMatch) -> GroupMap:
    return {
        "rails-core": GroupSpec(patterns=["rails", "activerecord", "actionpack"], update_types=["minor", "patch"]),
        "rails-ecosystem": GroupSpec(patterns=["rails-*", "active*"], update_types=["patch"]),
    }


def generate_rspec_groups(_match: FrameworkMatch) -> GroupMap:
    return {
        "testing-frameworks": GroupSpec(
            patterns=["rspec", "rspec-*", "capybara", "factory_bot"],
            update_types=["minor", "patch"],
        ),
    }


# Frameworks without an entry here (svelte, web, rocket, sinatra...) are
# detected and reported but produce no groups.
GROUP_GENERATORS: Dict[Ecosystem, List[Tuple[str, GroupGenerator]]] = {
    Ecosystem.NPM: [
        ("react", generate_react_groups),
        ("vue", generate_vue_groups),
        ("angular", generate_angular_groups),
        ("testing", generate_testing_groups),
        ("build", generate_build_tool_groups),
        ("storybook", generate_storybook_groups),
    ],
    Ecosystem.PIP: [
        ("django", generate_django_groups),
        ("flask", generate_flask_groups),
        ("fastapi", generate_fastapi_groups),
        ("datascience", generate_data_science_groups),
        ("testing", generate_python_testing_groups),
    ],
    Ecosystem.CARGO: [
        ("actix", generate_actix_groups),
        ("async", generate_async_runtime_groups),
        ("serde", generate_serde_groups),
    ],
    Ecosystem.BUNDLER: [
        ("rails", generate_rails_groups),
        ("testing", generate_rspec_groups),
    ],
}


def merge_groups(target: GroupMap, incoming: GroupMap) -> GroupMap:
    """Merge ``incoming`` groups into ``target`` by name.

    On a name collision the incoming group's update rule wins and the two
    pattern lists are combined, earlier patterns first.

    Args:
        target: Groups collected so far; updated in place
        incoming: Groups from the next framework

    Returns:
        The updated ``target``
    """
    for name, group in incoming.items():
        existing = target.get(name)
        if existing is None:
            target[name] = group
            continue

        logger.debug(f"Group '{name}' defined by more than one framework; merging patterns")
        patterns = list(existing.patterns)
        patterns.extend(p for p in group.patterns if p not in patterns)
        target[name] = GroupSpec(
            patterns=patterns,
            update_types=list(group.update_types),
            dependency_type=group.dependency_type,
        )
    return target


def generate_ecosystem_groups(ecosystem: Ecosystem, detection: DetectionResult) -> GroupMap:
    """Generate all groups for one ecosystem's detected frameworks.

    Args:
        ecosystem: Ecosystem the detection belongs to
        detection: Frameworks detected in that ecosystem

    Returns:
        Group name to group spec; empty when no grouped framework was detected
    """
    groups: GroupMap = {}
    for framework, generator in GROUP_GENERATORS.get(ecosystem, []):
        match = detection.detected.get(framework)
        if match is None:
            continue
        merge_groups(groups, generator(match))
    return groups
