"""Structural architecture heuristics.

Rule-based detection used by the architecture pipeline: path-substring
pattern detection, tech stack inference from dependency manifests,
directory-level components and entry points, and a heuristic synthesis of
the final architecture assessment.
"""

import json
import logging
import re
from collections import Counter
from typing import Any

from reposcope.models.analysis import Complexity
from reposcope.models.architecture import (
    ArchitectureSynthesis,
    ArchitectureType,
    ComponentInfo,
    ComponentType,
    EntryPoint,
    EntryPointType,
    TechStack,
)
from reposcope.models.repository import FileCategory, FileInfo, FileStructure

logger = logging.getLogger(__name__)

LANGUAGE_BY_EXTENSION = {
    "js": "JavaScript",
    "ts": "TypeScript",
    "jsx": "JavaScript",
    "tsx": "TypeScript",
    "py": "Python",
    "java": "Java",
    "cs": "C#",
    "cpp": "C++",
    "c": "C",
    "go": "Go",
    "rs": "Rust",
    "php": "PHP",
    "rb": "Ruby",
    "swift": "Swift",
    "kt": "Kotlin",
    "scala": "Scala",
    "dart": "Dart",
}

SKIP_COMPONENT_DIRS = ("node_modules", ".git", "dist", "build", "logs", "tmp", "temp")

ENTRY_POINT_PATTERNS: list[tuple[re.Pattern[str], EntryPointType]] = [
    (re.compile(r"^main\.", re.IGNORECASE), EntryPointType.MAIN),
    (re.compile(r"^index\.", re.IGNORECASE), EntryPointType.MAIN),
    (re.compile(r"^app\.", re.IGNORECASE), EntryPointType.MAIN),
    (re.compile(r"^server\.", re.IGNORECASE), EntryPointType.API),
    (re.compile(r"^cli\.", re.IGNORECASE), EntryPointType.CLI),
    (re.compile(r"^bin/", re.IGNORECASE), EntryPointType.CLI),
    (re.compile(r"package\.json$", re.IGNORECASE), EntryPointType.MAIN),
    (re.compile(r"dockerfile$", re.IGNORECASE), EntryPointType.OTHER),
]

_ENTRY_POINT_DESCRIPTIONS = {
    EntryPointType.MAIN: "Main application entry point",
    EntryPointType.API: "API server entry point",
    EntryPointType.CLI: "Command line interface",
    EntryPointType.WEB: "Web application entry",
    EntryPointType.OTHER: "Entry point",
}


# =============================================================================
# Pattern detection
# =============================================================================


def detect_structural_patterns(files: list[FileInfo]) -> list[str]:
    """Detect architecture patterns from path substrings.

    Several patterns may be reported at once, in this order:
    MVC, Layered, Microservices, Component-Based.

    Args:
        files: Repository listing

    Returns:
        Pattern names
    """
    paths = [f.path.lower() for f in files]

    def any_path(*needles: str) -> bool:
        return any(needle in path for path in paths for needle in needles)

    patterns: list[str] = []

    if any_path("controller", "handlers") and any_path("model", "entity") and any_path(
        "view", "template"
    ):
        patterns.append("MVC")

    if any_path("service", "repository", "dao"):
        patterns.append("Layered")

    has_container_files = any(
        f.name.lower() in ("dockerfile", "docker-compose.yml") for f in files
    )
    has_nested_services = any(
        "service" in f.path.lower() and len(f.path.split("/")) > 2 for f in files
    )
    if has_container_files or has_nested_services:
        patterns.append("Microservices")

    if any_path("component", "module"):
        patterns.append("Component-Based")

    return patterns


# =============================================================================
# Tech stack
# =============================================================================


def _add(items: list[str], value: str) -> None:
    if value not in items:
        items.append(value)


def package_dependencies(package_data: dict[str, Any]) -> dict[str, Any]:
    """Merge dependencies and devDependencies, ignoring sections that are not objects."""
    merged: dict[str, Any] = {}
    for key in ("dependencies", "devDependencies"):
        section = package_data.get(key)
        if isinstance(section, dict):
            merged.update(section)
    return merged


def _analyze_package_json(content: str, stack: TechStack) -> None:
    try:
        package_data = json.loads(content)
    except json.JSONDecodeError as e:
        logger.warning("Failed to parse package.json: %s", e)
        return
    if not isinstance(package_data, dict):
        return

    stack.language = "JavaScript/TypeScript"
    stack.package_manager = "npm"

    dependencies = package_dependencies(package_data)
    rules = [
        ("react", stack.frameworks, "React"),
        ("vue", stack.frameworks, "Vue.js"),
        ("angular", stack.frameworks, "Angular"),
        ("express", stack.frameworks, "Express.js"),
        ("next", stack.frameworks, "Next.js"),
        ("nuxt", stack.frameworks, "Nuxt.js"),
        ("webpack", stack.tools, "Webpack"),
        ("vite", stack.tools, "Vite"),
        ("typescript", stack.tools, "TypeScript"),
        ("jest", stack.tools, "Jest"),
        ("mongodb", stack.databases, "MongoDB"),
        ("mysql", stack.databases, "MySQL"),
        ("postgres", stack.databases, "PostgreSQL"),
    ]
    for dependency in dependencies:
        for needle, target, label in rules:
            if needle in dependency:
                _add(target, label)


def _analyze_pom_xml(content: str, stack: TechStack) -> None:
    stack.language = "Java"
    stack.package_manager = "Maven"
    stack.build_system = "Maven"
    for needle, target, label in (
        ("spring-boot", stack.frameworks, "Spring Boot"),
        ("springframework", stack.frameworks, "Spring Framework"),
        ("hibernate", stack.frameworks, "Hibernate"),
        ("junit", stack.tools, "JUnit"),
        ("mysql", stack.databases, "MySQL"),
        ("postgresql", stack.databases, "PostgreSQL"),
    ):
        if needle in content:
            _add(target, label)


def _analyze_requirements(content: str, stack: TechStack) -> None:
    stack.language = "Python"
    stack.package_manager = "pip"
    for needle, target, label in (
        ("django", stack.frameworks, "Django"),
        ("flask", stack.frameworks, "Flask"),
        ("fastapi", stack.frameworks, "FastAPI"),
        ("pytest", stack.tools, "pytest"),
        ("sqlalchemy", stack.libraries, "SQLAlchemy"),
    ):
        if needle in content:
            _add(target, label)


def _analyze_gemfile(content: str, stack: TechStack) -> None:
    stack.language = "Ruby"
    stack.package_manager = "bundler"
    for needle, target, label in (
        ("rails", stack.frameworks, "Ruby on Rails"),
        ("sinatra", stack.frameworks, "Sinatra"),
        ("rspec", stack.tools, "RSpec"),
    ):
        if needle in content:
            _add(target, label)


def _analyze_cargo_toml(content: str, stack: TechStack) -> None:
    stack.language = "Rust"
    stack.package_manager = "cargo"
    stack.build_system = "cargo"
    for needle, label in (("actix-web", "Actix Web"), ("rocket", "Rocket"), ("tokio", "Tokio")):
        if needle in content:
            _add(stack.frameworks, label)


MANIFEST_ANALYZERS = [
    ("package.json", _analyze_package_json),
    ("pom.xml", _analyze_pom_xml),
    ("requirements.txt", _analyze_requirements),
    ("Gemfile", _analyze_gemfile),
    ("Cargo.toml", _analyze_cargo_toml),
]


def infer_language_from_files(files: list[FileInfo]) -> str:
    """Map the most common file extension to a language name."""
    counts = Counter(f.extension.lower() for f in files if f.extension)
    if not counts:
        return "Unknown"
    most_common, _ = counts.most_common(1)[0]
    return LANGUAGE_BY_EXTENSION.get(most_common, "Unknown")


def infer_tech_stack(files: list[FileInfo]) -> TechStack:
    """Infer the tech stack from dependency manifests, then file extensions.

    Only the first file with each manifest name is read, and only when its
    content was fetched.
    """
    stack = TechStack()

    for manifest_name, analyze in MANIFEST_ANALYZERS:
        manifest = next((f for f in files if f.name == manifest_name), None)
        if manifest is not None and manifest.content:
            analyze(manifest.content, stack)

    if stack.language == "Unknown":
        stack.language = infer_language_from_files(files)

    return stack


# =============================================================================
# Components and entry points
# =============================================================================


def _infer_component_type(dir_name: str, files: list[FileInfo]) -> ComponentType:
    lower_name = dir_name.lower()

    if "controller" in lower_name or "handler" in lower_name:
        return ComponentType.CONTROLLER
    if "service" in lower_name:
        return ComponentType.SERVICE
    if "model" in lower_name or "entity" in lower_name:
        return ComponentType.MODEL
    if "util" in lower_name or "helper" in lower_name:
        return ComponentType.UTILITY
    if "config" in lower_name:
        return ComponentType.CONFIG

    names = [f.name.lower() for f in files]
    if any("controller" in name for name in names):
        return ComponentType.CONTROLLER
    if any("service" in name for name in names):
        return ComponentType.SERVICE
    if any("model" in name for name in names):
        return ComponentType.MODEL

    return ComponentType.OTHER


def identify_components(files: list[FileInfo]) -> list[ComponentInfo]:
    """Treat each non-root directory holding more than one file as a component."""
    directories: dict[str, list[FileInfo]] = {}
    for file in files:
        if not file.is_file:
            continue
        directory = "/".join(file.path.split("/")[:-1]) or "root"
        directories.setdefault(directory, []).append(file)

    components = []
    for dir_path, dir_files in directories.items():
        if len(dir_files) <= 1 or dir_path == "root":
            continue
        if any(skip in dir_path for skip in SKIP_COMPONENT_DIRS):
            continue
        dir_name = dir_path.split("/")[-1] or dir_path
        components.append(
            ComponentInfo(
                name=dir_name,
                type=_infer_component_type(dir_name, dir_files),
                files=[f.path for f in dir_files],
            )
        )
    return components


def identify_entry_points(files: list[FileInfo]) -> list[EntryPoint]:
    """Match file paths and names against entry point patterns (first match wins)."""
    entry_points = []
    for file in files:
        if not file.is_file:
            continue
        for pattern, entry_type in ENTRY_POINT_PATTERNS:
            if pattern.search(file.path) or pattern.search(file.name):
                entry_points.append(
                    EntryPoint(
                        file=file.path,
                        type=entry_type,
                        description=f"{_ENTRY_POINT_DESCRIPTIONS[entry_type]}: {file.name}",
                    )
                )
                break
    return entry_points


# =============================================================================
# Heuristic synthesis
# =============================================================================

_LAYER_BY_COMPONENT = {
    ComponentType.CONTROLLER: "Presentation",
    ComponentType.SERVICE: "Business Logic",
    ComponentType.MODEL: "Data",
    ComponentType.CONFIG: "Configuration",
    ComponentType.UTILITY: "Shared Utilities",
}


def _rate_size(source_count: int) -> Complexity:
    if source_count > 200:
        return Complexity.HIGH
    if source_count > 50:
        return Complexity.MEDIUM
    return Complexity.LOW


def synthesize_architecture(
    patterns: list[str],
    tech_stack: TechStack,
    components: list[ComponentInfo],
    file_structure: FileStructure,
) -> ArchitectureSynthesis:
    """Build an architecture assessment from detected patterns and counts.

    Args:
        patterns: Detected pattern names
        tech_stack: Inferred tech stack
        components: Directory-level components
        file_structure: Categorized listing

    Returns:
        ArchitectureSynthesis of the same shape the LLM would produce
    """
    source_count = len(file_structure.in_category(FileCategory.SOURCE))

    if "Microservices" in patterns:
        arch_type = ArchitectureType.MICROSERVICES
    elif "Layered" in patterns or "MVC" in patterns:
        arch_type = ArchitectureType.LAYERED
    elif "Component-Based" in patterns:
        arch_type = ArchitectureType.MODULAR
    elif source_count > 0:
        arch_type = ArchitectureType.MONOLITH
    else:
        arch_type = ArchitectureType.UNKNOWN

    layers: list[str] = []
    for component in components:
        layer = _LAYER_BY_COMPONENT.get(component.type)
        if layer and layer not in layers:
            layers.append(layer)

    style = " + ".join(patterns) if patterns else "No recognizable structural pattern"
    if tech_stack.language != "Unknown":
        style = f"{style} ({tech_stack.language})"

    complexity = _rate_size(source_count)

    recommendations = ["Document module boundaries before starting the migration"]
    if not file_structure.in_category(FileCategory.TEST):
        recommendations.append("Add automated tests to protect behavior during migration")
    if arch_type == ArchitectureType.MONOLITH:
        recommendations.append("Identify seams for incremental extraction of services")
    if tech_stack.frameworks:
        recommendations.append(
            f"Review framework versions for upgrade paths: {', '.join(tech_stack.frameworks)}"
        )

    return ArchitectureSynthesis(
        type=arch_type,
        style=style,
        layers=layers,
        patterns=list(patterns),
        complexity=complexity,
        recommendations=recommendations,
        migration_complexity=complexity,
    )
