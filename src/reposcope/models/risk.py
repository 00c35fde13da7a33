"""Migration risk entities.

Covers per-file complexity metrics, dependency risks, migration blockers,
LLM-identified findings and the compiled risk assessment.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from reposcope.models.analysis import Complexity, utc_timestamp
from reposcope.models.decoding import (
    expect_mapping,
    get_enum,
    get_list_of,
    get_str,
    get_str_list,
    to_plain,
)
from reposcope.models.repository import Repository


class RiskLevel(Enum):
    """Four-step severity used for dependency and finding risks."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class BlockerSeverity(Enum):
    BLOCKER = "blocker"
    CRITICAL = "critical"
    MAJOR = "major"
    MINOR = "minor"


class BlockerType(Enum):
    DEPENDENCY = "dependency"
    ARCHITECTURE = "architecture"
    TECHNOLOGY = "technology"
    DATA = "data"
    OTHER = "other"


class IssueType(Enum):
    VULNERABLE = "vulnerable"
    DEPRECATED = "deprecated"
    OUTDATED = "outdated"
    UNMAINTAINED = "unmaintained"
    LICENSE = "license"


# =============================================================================
# Complexity
# =============================================================================


@dataclass
class FileComplexityMetric:
    """Heuristic complexity metrics for one file."""

    file: str
    lines_of_code: int
    complexity: int
    maintainability_index: float
    risk_level: Complexity
    issues: list[str] = field(default_factory=list)


@dataclass
class ComplexityHotspot:
    location: str
    severity: Complexity
    description: str
    metrics: dict[str, int] = field(default_factory=dict)
    type: str = "large_file"
    refactoring_suggestion: str = (
        "Consider breaking this file into smaller, more focused modules"
    )


@dataclass
class OverallComplexity:
    total_lines_of_code: int = 0
    average_file_size: float = 0.0
    largest_files: list[str] = field(default_factory=list)
    cyclomatic_complexity: float = 0.0
    maintainability_index: float = 100.0


@dataclass
class ComplexityMetrics:
    file_complexity: list[FileComplexityMetric] = field(default_factory=list)
    overall_complexity: OverallComplexity = field(default_factory=OverallComplexity)
    complexity_hotspots: list[ComplexityHotspot] = field(default_factory=list)


# =============================================================================
# Dependencies and blockers
# =============================================================================


@dataclass
class DependencyIssue:
    type: IssueType
    severity: RiskLevel
    description: str
    details: str = ""
    impact: str = ""


@dataclass
class DependencyRecommendation:
    action: str
    effort: str
    priority: RiskLevel
    description: str
    target_version: str | None = None


@dataclass
class DependencyRisk:
    """A third-party dependency matched by a risk rule."""

    name: str
    current_version: str
    risk_level: RiskLevel
    type: str = "runtime"
    issues: list[DependencyIssue] = field(default_factory=list)
    recommendations: list[DependencyRecommendation] = field(default_factory=list)

    @property
    def headline(self) -> str:
        """Description of the first issue, if any."""
        return self.issues[0].description if self.issues else ""


@dataclass
class BlockerResolution:
    effort: str
    time_estimate: str
    steps: list[str] = field(default_factory=list)
    alternatives: list[str] = field(default_factory=list)


@dataclass
class MigrationBlocker:
    """Something that must be resolved before migration can proceed."""

    id: str
    type: BlockerType
    severity: BlockerSeverity
    title: str
    description: str
    impact: str
    location: str
    resolution: BlockerResolution
    blocked_by: list[str] = field(default_factory=list)
    dependencies: list[str] = field(default_factory=list)


# =============================================================================
# LLM findings
# =============================================================================


@dataclass
class AdditionalRisk:
    type: str
    severity: RiskLevel
    title: str
    description: str
    location: str = ""
    recommendation: str = ""

    @classmethod
    def from_dict(cls, data: Any, path: str = "$") -> "AdditionalRisk":
        data = expect_mapping(data, path)
        return cls(
            type=get_str(data, "type", path),
            severity=get_enum(data, "severity", RiskLevel, path),
            title=get_str(data, "title", path),
            description=get_str(data, "description", path),
            location=get_str(data, "location", path, default=""),
            recommendation=get_str(data, "recommendation", path, default=""),
        )


@dataclass
class SecurityConcern:
    type: str
    severity: RiskLevel
    description: str
    location: str = ""
    mitigation: str = ""

    @classmethod
    def from_dict(cls, data: Any, path: str = "$") -> "SecurityConcern":
        data = expect_mapping(data, path)
        return cls(
            type=get_str(data, "type", path),
            severity=get_enum(data, "severity", RiskLevel, path),
            description=get_str(data, "description", path),
            location=get_str(data, "location", path, default=""),
            mitigation=get_str(data, "mitigation", path, default=""),
        )


@dataclass
class RiskFindings:
    """Answer of the AI risk analysis stage."""

    additional_risks: list[AdditionalRisk] = field(default_factory=list)
    security_concerns: list[SecurityConcern] = field(default_factory=list)
    quality_issues: list[str] = field(default_factory=list)
    performance_bottlenecks: list[str] = field(default_factory=list)
    architecture_anti_patterns: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any, path: str = "$") -> "RiskFindings":
        data = expect_mapping(data, path)
        return cls(
            additional_risks=get_list_of(data, "additional_risks", AdditionalRisk.from_dict, path),
            security_concerns=get_list_of(
                data, "security_concerns", SecurityConcern.from_dict, path, default=[]
            ),
            quality_issues=get_str_list(data, "quality_issues", path, default=[]),
            performance_bottlenecks=get_str_list(data, "performance_bottlenecks", path, default=[]),
            architecture_anti_patterns=get_str_list(
                data, "architecture_anti_patterns", path, default=[]
            ),
        )


# =============================================================================
# Compiled assessment
# =============================================================================


@dataclass
class RiskItem:
    id: str
    type: str
    severity: RiskLevel
    title: str
    description: str
    location: str
    impact: str
    recommendation: str
    effort: str = "medium"
    migration_impact: str = "minor"


@dataclass
class SecurityVulnerability:
    id: str
    type: str
    severity: RiskLevel
    title: str
    description: str
    location: str
    recommendation: str
    patch_available: bool = False
    fix_version: str | None = None
    references: list[str] = field(default_factory=list)


@dataclass
class RiskCategories:
    high_risk: list[RiskItem] = field(default_factory=list)
    medium_risk: list[RiskItem] = field(default_factory=list)
    low_risk: list[RiskItem] = field(default_factory=list)


@dataclass
class RiskAssessment:
    """Output of the risk pipeline."""

    repository: Repository
    risk_categories: RiskCategories
    vulnerabilities: list[SecurityVulnerability]
    complexity_metrics: ComplexityMetrics
    dependency_risks: list[DependencyRisk]
    migration_blockers: list[MigrationBlocker]
    overall_risk_score: float
    priority_actions: list[str] = field(default_factory=list)
    findings: RiskFindings = field(default_factory=RiskFindings)
    timestamp: str = field(default_factory=utc_timestamp)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "repository": self.repository.to_dict(),
            "risk_categories": to_plain(self.risk_categories),
            "vulnerabilities": to_plain(self.vulnerabilities),
            "complexity_metrics": to_plain(self.complexity_metrics),
            "dependency_risks": to_plain(self.dependency_risks),
            "migration_blockers": to_plain(self.migration_blockers),
            "overall_risk_score": self.overall_risk_score,
            "priority_actions": self.priority_actions,
            "quality_issues": self.findings.quality_issues,
            "performance_bottlenecks": self.findings.performance_bottlenecks,
            "architecture_anti_patterns": self.findings.architecture_anti_patterns,
            "timestamp": self.timestamp,
        }
