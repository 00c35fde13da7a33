"""Analysis result entities.

This module contains entities shared by the pipelines:
- Complexity: low | medium | high rating used across results
- AnalysisStatus: lifecycle status of a run
- RepositorySummary: LLM-produced summary of a repository
- RepositoryAnalysis: output of the repository pipeline
- RunRecord: observable state of one end-to-end run
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from reposcope.models.decoding import (
    expect_mapping,
    get_enum,
    get_str,
    get_str_list,
    to_plain,
)
from reposcope.models.repository import FileStructure, Repository


class Complexity(Enum):
    """Three-step rating used for complexity, severity and volume fields."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AnalysisStatus(Enum):
    """Status of an analysis run."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


def utc_timestamp() -> str:
    """Return the current UTC time as an ISO 8601 string."""
    return datetime.now(UTC).isoformat()


@dataclass
class RepositorySummary:
    """Repository summary as answered by the LLM.

    Attributes:
        purpose: Main purpose of the repository
        main_technologies: Primary technologies used
        project_type: Kind of project (web app, library, CLI tool, ...)
        complexity: Overall complexity rating
        insights: Observations about structure and organization
    """

    purpose: str
    main_technologies: list[str] = field(default_factory=list)
    project_type: str = "unknown"
    complexity: Complexity = Complexity.MEDIUM
    insights: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any, path: str = "$") -> "RepositorySummary":
        """Decode an LLM response.

        Raises:
            SchemaMismatchError: If required fields are missing or mistyped
        """
        data = expect_mapping(data, path)
        return cls(
            purpose=get_str(data, "purpose", path),
            main_technologies=get_str_list(data, "main_technologies", path, default=[]),
            project_type=get_str(data, "project_type", path),
            complexity=get_enum(data, "complexity", Complexity, path),
            insights=get_str_list(data, "insights", path, default=[]),
        )


@dataclass
class RepositoryAnalysis:
    """Output of the repository pipeline."""

    repository: Repository
    file_structure: FileStructure
    summary: RepositorySummary
    timestamp: str = field(default_factory=utc_timestamp)

    @property
    def insights(self) -> list[str]:
        return self.summary.insights

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "repository": self.repository.to_dict(),
            "file_structure": self.file_structure.to_dict(),
            "summary": {
                "purpose": self.summary.purpose,
                "main_technologies": self.summary.main_technologies,
                "project_type": self.summary.project_type,
                "complexity": self.summary.complexity.value,
            },
            "insights": self.summary.insights,
            "timestamp": self.timestamp,
        }


@dataclass
class RunRecord:
    """Observable state of one end-to-end run.

    Updated by the coordinator after each pipeline so pollers can follow
    progress.

    Attributes:
        id: Opaque run identifier
        repository_url: Repository being analyzed
        status: Lifecycle status
        progress: Percentage 0-100
        current_step: Human-readable step description
        results: Pipeline results keyed by pipeline name
        error: First fatal error message (failed runs only)
        created_at: Creation timestamp
        completed_at: Terminal timestamp (completed or failed runs)
    """

    id: str
    repository_url: str
    status: AnalysisStatus = AnalysisStatus.PENDING
    progress: int = 0
    current_step: str = "initialized"
    results: dict[str, Any] = field(default_factory=dict)
    error: str | None = None
    created_at: str = field(default_factory=utc_timestamp)
    completed_at: str | None = None

    @property
    def is_finished(self) -> bool:
        """Check if the run reached a terminal status."""
        return self.status in (AnalysisStatus.COMPLETED, AnalysisStatus.FAILED)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "repository_url": self.repository_url,
            "status": self.status.value,
            "progress": self.progress,
            "current_step": self.current_step,
            "results": {name: to_plain(value) for name, value in self.results.items()},
            "error": self.error,
            "created_at": self.created_at,
            "completed_at": self.completed_at,
        }
