"""Architecture inference entities.

Holds the structural facts gathered deterministically (tech stack,
components, entry points) and the LLM-decoded answers of the architecture
pipeline (pattern report, architecture synthesis).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from reposcope.models.analysis import Complexity, utc_timestamp
from reposcope.models.decoding import (
    expect_mapping,
    get_enum,
    get_str,
    get_str_list,
    to_plain,
)
from reposcope.models.repository import Repository


class ArchitectureType(Enum):
    """Overall architecture classification."""

    MONOLITH = "monolith"
    MICROSERVICES = "microservices"
    LAYERED = "layered"
    MODULAR = "modular"
    UNKNOWN = "unknown"


class ComponentType(Enum):
    """Role of a directory-level component."""

    SERVICE = "service"
    CONTROLLER = "controller"
    MODEL = "model"
    UTILITY = "utility"
    CONFIG = "config"
    OTHER = "other"


class EntryPointType(Enum):
    """Kind of structural entry point."""

    MAIN = "main"
    API = "api"
    CLI = "cli"
    WEB = "web"
    OTHER = "other"


@dataclass
class TechStack:
    """Technology stack inferred from dependency manifests and extensions."""

    language: str = "Unknown"
    frameworks: list[str] = field(default_factory=list)
    libraries: list[str] = field(default_factory=list)
    databases: list[str] = field(default_factory=list)
    tools: list[str] = field(default_factory=list)
    build_system: str | None = None
    package_manager: str | None = None


@dataclass
class ComponentInfo:
    """A directory grouped as a logical component."""

    name: str
    type: ComponentType
    files: list[str] = field(default_factory=list)
    dependencies: list[str] = field(default_factory=list)
    description: str | None = None


@dataclass
class EntryPoint:
    """A file that starts the application or one of its surfaces."""

    file: str
    type: EntryPointType
    description: str | None = None


@dataclass
class PatternReport:
    """Architecture patterns detected in the file structure.

    Attributes:
        patterns: Pattern names (e.g., "MVC", "Layered")
        evidence: Short justifications, one per observation
    """

    patterns: list[str] = field(default_factory=list)
    evidence: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any, path: str = "$") -> "PatternReport":
        """Decode an LLM response."""
        data = expect_mapping(data, path)
        return cls(
            patterns=get_str_list(data, "patterns", path),
            evidence=get_str_list(data, "evidence", path, default=[]),
        )


@dataclass
class ArchitectureSynthesis:
    """Architecture assessment answered by the LLM (or synthesized heuristically)."""

    type: ArchitectureType
    style: str = ""
    layers: list[str] = field(default_factory=list)
    patterns: list[str] = field(default_factory=list)
    complexity: Complexity = Complexity.MEDIUM
    recommendations: list[str] = field(default_factory=list)
    migration_complexity: Complexity = Complexity.MEDIUM

    @classmethod
    def from_dict(cls, data: Any, path: str = "$") -> "ArchitectureSynthesis":
        """Decode an LLM response.

        ``type``, ``complexity`` and ``migration_complexity`` are required; the
        descriptive fields default to empty so the simplified schema decodes
        into the same type.
        """
        data = expect_mapping(data, path)
        return cls(
            type=get_enum(data, "type", ArchitectureType, path),
            style=get_str(data, "style", path, default=""),
            layers=get_str_list(data, "layers", path, default=[]),
            patterns=get_str_list(data, "patterns", path, default=[]),
            complexity=get_enum(data, "complexity", Complexity, path),
            recommendations=get_str_list(data, "recommendations", path, default=[]),
            migration_complexity=get_enum(data, "migration_complexity", Complexity, path),
        )


@dataclass
class ArchitectureInfo:
    """Combined architecture description."""

    type: ArchitectureType
    style: str
    layers: list[str]
    components: list[ComponentInfo]
    entry_points: list[EntryPoint]
    tech_stack: TechStack
    patterns: list[str]
    complexity: Complexity


@dataclass
class ArchitectureAnalysis:
    """Output of the architecture pipeline."""

    repository: Repository
    architecture: ArchitectureInfo
    recommendations: list[str] = field(default_factory=list)
    migration_complexity: Complexity = Complexity.MEDIUM
    timestamp: str = field(default_factory=utc_timestamp)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "repository": self.repository.to_dict(),
            "architecture": to_plain(self.architecture),
            "recommendations": self.recommendations,
            "migration_complexity": self.migration_complexity.value,
            "timestamp": self.timestamp,
        }
