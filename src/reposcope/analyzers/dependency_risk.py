"""Rule-based dependency risk, migration blocker and risk scoring.

Known-problem package lists for npm, Maven and pip manifests, blocker
derivation, the weighted overall risk score, priority actions and the
heuristic substitute for LLM risk findings.
"""

import json
import logging
import re

from reposcope.analyzers.architecture import package_dependencies
from reposcope.models.analysis import Complexity
from reposcope.models.repository import FileCategory, FileStructure
from reposcope.models.risk import (
    AdditionalRisk,
    BlockerResolution,
    BlockerSeverity,
    BlockerType,
    ComplexityHotspot,
    ComplexityMetrics,
    DependencyIssue,
    DependencyRecommendation,
    DependencyRisk,
    IssueType,
    MigrationBlocker,
    RiskFindings,
    RiskLevel,
    SecurityConcern,
)

logger = logging.getLogger(__name__)

NPM_VULNERABLE = frozenset({"lodash", "moment", "request", "bower"})
NPM_DEPRECATED = frozenset({"gulp", "grunt"})
PYTHON_VULNERABLE = frozenset({"pillow", "requests", "urllib3"})

_LOG4J_ARTIFACT = re.compile(r"<artifactId>log4j.*</artifactId>")
_REQUIREMENT_SPLIT = re.compile(r"[=><]")

MAX_ARCHITECTURE_BLOCKERS = 3
MAX_PRIORITY_ACTIONS = 5


# =============================================================================
# Dependency risks
# =============================================================================


def assess_npm_dependency(name: str, version: str) -> DependencyRisk | None:
    """Match one npm dependency against the known-problem lists."""
    issues: list[DependencyIssue] = []
    recommendations: list[DependencyRecommendation] = []

    if name in NPM_VULNERABLE:
        issues.append(
            DependencyIssue(
                type=IssueType.VULNERABLE,
                severity=RiskLevel.MEDIUM,
                description=f"{name} has known security vulnerabilities",
                details=f"Package {name} has reported security issues in older versions",
                impact="Potential security vulnerabilities in application",
            )
        )
        recommendations.append(
            DependencyRecommendation(
                action="update",
                effort="medium",
                priority=RiskLevel.HIGH,
                description=f"Update {name} to latest secure version",
            )
        )

    if name in NPM_DEPRECATED:
        issues.append(
            DependencyIssue(
                type=IssueType.DEPRECATED,
                severity=RiskLevel.LOW,
                description=f"{name} is deprecated",
                details=f"Package {name} is no longer actively maintained",
                impact="May not receive security updates or bug fixes",
            )
        )

    if not issues:
        return None

    return DependencyRisk(
        name=name,
        current_version=version,
        risk_level=(
            RiskLevel.HIGH if any(i.severity == RiskLevel.HIGH for i in issues) else RiskLevel.MEDIUM
        ),
        issues=issues,
        recommendations=recommendations,
    )


def analyze_npm_dependencies(content: str) -> list[DependencyRisk]:
    package_data = json.loads(content)
    if not isinstance(package_data, dict):
        return []
    dependencies = package_dependencies(package_data)
    risks = []
    for name, version in dependencies.items():
        risk = assess_npm_dependency(name, str(version))
        if risk:
            risks.append(risk)
    return risks


def analyze_maven_dependencies(content: str) -> list[DependencyRisk]:
    """Flag Log4j artifacts as critical."""
    if not _LOG4J_ARTIFACT.search(content):
        return []
    return [
        DependencyRisk(
            name="log4j",
            current_version="unknown",
            risk_level=RiskLevel.CRITICAL,
            issues=[
                DependencyIssue(
                    type=IssueType.VULNERABLE,
                    severity=RiskLevel.CRITICAL,
                    description="Log4j has critical security vulnerabilities",
                    details="Log4j versions before 2.17.0 have critical RCE vulnerabilities",
                    impact="Remote code execution vulnerability",
                )
            ],
            recommendations=[
                DependencyRecommendation(
                    action="update",
                    effort="high",
                    priority=RiskLevel.CRITICAL,
                    description="Immediately update Log4j to version 2.17.0 or higher",
                    target_version="2.17.0+",
                )
            ],
        )
    ]


def analyze_python_dependencies(content: str) -> list[DependencyRisk]:
    risks = []
    for line in content.split("\n"):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        name = _REQUIREMENT_SPLIT.split(line, maxsplit=1)[0].strip()
        if name.lower() not in PYTHON_VULNERABLE:
            continue
        risks.append(
            DependencyRisk(
                name=name,
                current_version=line,
                risk_level=RiskLevel.MEDIUM,
                issues=[
                    DependencyIssue(
                        type=IssueType.VULNERABLE,
                        severity=RiskLevel.MEDIUM,
                        description=f"{name} may have security vulnerabilities",
                        details=f"Package {name} has had security issues in the past",
                        impact="Potential security vulnerabilities",
                    )
                ],
                recommendations=[
                    DependencyRecommendation(
                        action="update",
                        effort="low",
                        priority=RiskLevel.MEDIUM,
                        description=f"Update {name} to latest version",
                    )
                ],
            )
        )
    return risks


_MANIFEST_PARSERS = {
    "package.json": analyze_npm_dependencies,
    "pom.xml": analyze_maven_dependencies,
    "requirements.txt": analyze_python_dependencies,
}


def analyze_dependency_risks(file_structure: FileStructure) -> list[DependencyRisk]:
    """Scan dependency manifests with content for known risks.

    A manifest that fails to parse is logged and skipped.
    """
    risks: list[DependencyRisk] = []
    for file in file_structure.in_category(FileCategory.DEPENDENCY):
        parser = _MANIFEST_PARSERS.get(file.name)
        if not file.content or parser is None:
            continue
        try:
            risks.extend(parser(file.content))
        except ValueError as e:
            logger.warning("Failed to parse dependency file %s: %s", file.path, e)
    return risks


# =============================================================================
# Migration blockers, scoring and priorities
# =============================================================================


def slugify(text: str) -> str:
    return re.sub(r"\s+", "-", text).lower()


def identify_migration_blockers(
    dependency_risks: list[DependencyRisk],
    risk_factors: list[str],
) -> list[MigrationBlocker]:
    """Derive migration blockers.

    Critical dependency risks become blocker-severity blockers; the first
    three code flow risk factors become major architecture blockers.
    """
    blockers = []

    for dep in dependency_risks:
        if dep.risk_level != RiskLevel.CRITICAL:
            continue
        blockers.append(
            MigrationBlocker(
                id=f"dep-{dep.name}",
                type=BlockerType.DEPENDENCY,
                severity=BlockerSeverity.BLOCKER,
                title=f"Critical dependency: {dep.name}",
                description=dep.headline or "Critical dependency issue",
                impact="Migration cannot proceed without resolving this dependency",
                location=f"Dependencies: {dep.name}",
                resolution=BlockerResolution(
                    effort="high",
                    time_estimate="1-2 weeks",
                    steps=[r.description for r in dep.recommendations],
                ),
            )
        )

    for risk in risk_factors[:MAX_ARCHITECTURE_BLOCKERS]:
        blockers.append(
            MigrationBlocker(
                id=f"arch-{slugify(risk)}",
                type=BlockerType.ARCHITECTURE,
                severity=BlockerSeverity.MAJOR,
                title=f"Architecture Risk: {risk}",
                description=f"Architecture pattern presents migration challenges: {risk}",
                impact="May require significant refactoring during migration",
                location="Architecture",
                resolution=BlockerResolution(
                    effort="very_high",
                    time_estimate="2-4 weeks",
                    steps=["Analyze impact", "Plan refactoring", "Implement changes", "Test thoroughly"],
                    alternatives=["Gradual migration", "Strangler fig pattern"],
                ),
            )
        )

    return blockers


def calculate_overall_risk_score(
    average_complexity: float,
    dependency_risks: list[DependencyRisk],
    migration_blockers: list[MigrationBlocker],
) -> float:
    """Weighted risk score, capped at 100.

    min(avg complexity, 40) + 10 per critical dependency + 5 per high
    dependency + 15 per blocker-severity blocker + 10 per critical blocker.
    """
    score = min(average_complexity, 40)

    critical_deps = sum(1 for d in dependency_risks if d.risk_level == RiskLevel.CRITICAL)
    high_deps = sum(1 for d in dependency_risks if d.risk_level == RiskLevel.HIGH)
    score += critical_deps * 10 + high_deps * 5

    blockers = sum(1 for b in migration_blockers if b.severity == BlockerSeverity.BLOCKER)
    critical = sum(1 for b in migration_blockers if b.severity == BlockerSeverity.CRITICAL)
    score += blockers * 15 + critical * 10

    return min(score, 100)


def generate_priority_actions(
    dependency_risks: list[DependencyRisk],
    migration_blockers: list[MigrationBlocker],
    hotspots: list[ComplexityHotspot],
) -> list[str]:
    """Top actions: critical dependencies, then blockers, then hotspots."""
    actions = []

    critical_deps = [d for d in dependency_risks if d.risk_level == RiskLevel.CRITICAL]
    for dep in critical_deps[:3]:
        actions.append(f"URGENT: Update {dep.name} - {dep.headline}")

    blockers = [b for b in migration_blockers if b.severity == BlockerSeverity.BLOCKER]
    for blocker in blockers[:2]:
        actions.append(f"BLOCKER: {blocker.title}")

    high_hotspots = [h for h in hotspots if h.severity == Complexity.HIGH]
    for hotspot in high_hotspots[:2]:
        actions.append(f"REFACTOR: {hotspot.description}")

    return actions[:MAX_PRIORITY_ACTIONS]


# =============================================================================
# Heuristic findings
# =============================================================================

_SECRET_FILE_NAMES = frozenset({".env", "credentials.json", "id_rsa", "secrets.yml", "secrets.yaml"})


def heuristic_risk_findings(
    file_structure: FileStructure,
    complexity: ComplexityMetrics,
    dependency_risks: list[DependencyRisk],
    bottlenecks: list[str] | None = None,
    anti_patterns: list[str] | None = None,
) -> RiskFindings:
    """Derive risk findings without an LLM.

    Args:
        file_structure: Categorized listing
        complexity: Complexity metrics
        dependency_risks: Rule-based dependency risks
        bottlenecks: Data flow bottleneck descriptions from code flow
        anti_patterns: Architecture problems from code flow (e.g., cycles)

    Returns:
        RiskFindings of the same shape the LLM would produce
    """
    additional: list[AdditionalRisk] = []

    if file_structure.in_category(FileCategory.SOURCE) and not file_structure.in_category(
        FileCategory.TEST
    ):
        additional.append(
            AdditionalRisk(
                type="quality",
                severity=RiskLevel.HIGH,
                title="No automated tests",
                description="No test files were found; behavior changes will go unnoticed",
                location="Repository",
                recommendation="Add characterization tests before migrating",
            )
        )

    overall = complexity.overall_complexity
    if complexity.file_complexity and overall.maintainability_index < 50:
        additional.append(
            AdditionalRisk(
                type="maintainability",
                severity=RiskLevel.MEDIUM,
                title="Low maintainability",
                description=(
                    f"Average maintainability index is {overall.maintainability_index:.1f}"
                ),
                location="Repository",
                recommendation="Refactor the most complex files first",
            )
        )

    deprecated = [
        d.name for d in dependency_risks if any(i.type == IssueType.DEPRECATED for i in d.issues)
    ]
    if deprecated:
        additional.append(
            AdditionalRisk(
                type="dependency",
                severity=RiskLevel.LOW,
                title="Deprecated tooling",
                description=f"Deprecated packages in use: {', '.join(deprecated)}",
                location="Dependencies",
                recommendation="Replace deprecated tooling with maintained alternatives",
            )
        )

    security = [
        SecurityConcern(
            type="secret_exposure",
            severity=RiskLevel.HIGH,
            description=f"Potential secrets file committed: {f.name}",
            location=f.path,
            mitigation="Remove the file from version control and rotate any exposed secrets",
        )
        for f in file_structure.files
        if f.is_file and f.name.lower() in _SECRET_FILE_NAMES
    ]

    issue_counts: dict[str, int] = {}
    for metric in complexity.file_complexity:
        for issue in metric.issues:
            issue_counts[issue] = issue_counts.get(issue, 0) + 1
    quality = [f"{issue} ({count} files)" for issue, count in sorted(issue_counts.items())]

    return RiskFindings(
        additional_risks=additional,
        security_concerns=security,
        quality_issues=quality,
        performance_bottlenecks=list(bottlenecks or []),
        architecture_anti_patterns=list(anti_patterns or []),
    )
