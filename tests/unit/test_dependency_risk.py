"""Unit tests for dependency risks, migration blockers and risk scoring."""

import json

import pytest

from reposcope.analyzers.complexity import build_complexity_metrics
from reposcope.analyzers.dependency_risk import (
    analyze_dependency_risks,
    analyze_maven_dependencies,
    analyze_npm_dependencies,
    analyze_python_dependencies,
    calculate_overall_risk_score,
    generate_priority_actions,
    heuristic_risk_findings,
    identify_migration_blockers,
)
from reposcope.analyzers.file_utils import categorize_files
from reposcope.models.analysis import Complexity
from reposcope.models.repository import FileStructure
from reposcope.models.risk import (
    BlockerSeverity,
    BlockerType,
    ComplexityHotspot,
    DependencyRisk,
    IssueType,
    RiskLevel,
)
from tests.fixtures import make_file

POM_WITH_LOG4J = """\
<dependencies>
  <dependency>
    <groupId>org.apache.logging.log4j</groupId>
    <artifactId>log4j-core</artifactId>
    <version>2.14.0</version>
  </dependency>
</dependencies>
"""


def _critical_dependency() -> DependencyRisk:
    return analyze_maven_dependencies(POM_WITH_LOG4J)[0]


class TestNpmDependencies:
    """Tests for package.json rules."""

    def test_vulnerable_and_deprecated(self) -> None:
        content = json.dumps(
            {
                "dependencies": {"lodash": "4.17.0", "express": "^4"},
                "devDependencies": {"gulp": "^4.0.0"},
            }
        )

        risks = {r.name: r for r in analyze_npm_dependencies(content)}

        assert set(risks) == {"lodash", "gulp"}
        lodash = risks["lodash"]
        assert lodash.current_version == "4.17.0"
        assert lodash.risk_level == RiskLevel.MEDIUM
        assert lodash.issues[0].type == IssueType.VULNERABLE
        assert lodash.recommendations[0].action == "update"
        assert risks["gulp"].issues[0].type == IssueType.DEPRECATED
        assert risks["gulp"].recommendations == []

    def test_invalid_json_raises(self) -> None:
        with pytest.raises(ValueError):
            analyze_npm_dependencies("{not json")

    def test_non_object_dependency_sections_are_ignored(self) -> None:
        content = json.dumps({"dependencies": ["lodash"], "devDependencies": "gulp"})

        assert analyze_npm_dependencies(content) == []

    def test_list_section_beside_object_section(self) -> None:
        content = json.dumps({"dependencies": "lodash", "devDependencies": {"gulp": "^4.0.0"}})

        assert [r.name for r in analyze_npm_dependencies(content)] == ["gulp"]


class TestMavenAndPython:
    """Tests for pom.xml and requirements.txt rules."""

    def test_log4j_is_critical(self) -> None:
        risk = _critical_dependency()

        assert risk.name == "log4j"
        assert risk.risk_level == RiskLevel.CRITICAL
        assert risk.recommendations[0].target_version == "2.17.0+"

    def test_pom_without_log4j(self) -> None:
        assert analyze_maven_dependencies("<artifactId>junit</artifactId>") == []

    def test_requirements(self) -> None:
        content = "# pinned\nRequests==2.19.0\nflask>=2\nurllib3\n"

        risks = analyze_python_dependencies(content)

        assert [r.name for r in risks] == ["Requests", "urllib3"]
        assert risks[0].current_version == "Requests==2.19.0"

    def test_manifest_scan_skips_unparseable_files(self) -> None:
        files = [
            make_file("package.json", "{broken"),
            make_file("backend/requirements.txt", "pillow==8.0\n"),
            make_file("Gemfile", "gem 'rails'"),
        ]
        structure = FileStructure(
            total_files=len(files), total_directories=1, files=files, categories=categorize_files(files)
        )

        assert [r.name for r in analyze_dependency_risks(structure)] == ["pillow"]


class TestMigrationBlockers:
    """Tests for blocker derivation."""

    def test_critical_dependency_and_risk_factors(self) -> None:
        blockers = identify_migration_blockers(
            [_critical_dependency()],
            ["Circular dependencies detected", "Tight coupling", "Shared state", "Fourth"],
        )

        assert [b.id for b in blockers] == [
            "dep-log4j",
            "arch-circular-dependencies-detected",
            "arch-tight-coupling",
            "arch-shared-state",
        ]
        assert blockers[0].severity == BlockerSeverity.BLOCKER
        assert blockers[0].type == BlockerType.DEPENDENCY
        assert blockers[0].description == "Log4j has critical security vulnerabilities"
        assert blockers[1].severity == BlockerSeverity.MAJOR
        assert blockers[1].title == "Architecture Risk: Circular dependencies detected"

    def test_non_critical_dependencies_are_not_blockers(self) -> None:
        risks = analyze_npm_dependencies(json.dumps({"dependencies": {"lodash": "1"}}))

        assert identify_migration_blockers(risks, []) == []


class TestOverallRiskScore:
    """Tests for the weighted score."""

    def test_critical_dependency_and_blocker(self) -> None:
        """One critical dependency and one blocker with no complexity scores 25."""
        dependency = _critical_dependency()
        blockers = identify_migration_blockers([dependency], [])

        assert calculate_overall_risk_score(0, [dependency], blockers) == 25

    def test_complexity_is_capped_at_40(self) -> None:
        assert calculate_overall_risk_score(75.0, [], []) == 40

    def test_score_is_capped_at_100(self) -> None:
        dependency = _critical_dependency()
        blockers = identify_migration_blockers([dependency], []) * 5

        assert calculate_overall_risk_score(40, [dependency] * 3, blockers) == 100

    def test_major_blockers_do_not_score(self) -> None:
        blockers = identify_migration_blockers([], ["Tight coupling"])

        assert calculate_overall_risk_score(3.5, [], blockers) == 3.5


class TestPriorityActions:
    """Tests for the action list."""

    def test_order_and_limit(self) -> None:
        dependencies = [_critical_dependency()] * 4
        blockers = identify_migration_blockers(dependencies[:1], []) * 3
        hotspots = [
            ComplexityHotspot(location="a.js", severity=Complexity.HIGH, description="Hot a"),
        ]

        actions = generate_priority_actions(dependencies, blockers, hotspots)

        assert len(actions) == 5
        assert actions[:3] == [
            "URGENT: Update log4j - Log4j has critical security vulnerabilities"
        ] * 3
        assert actions[3:] == ["BLOCKER: Critical dependency: log4j"] * 2

    def test_hotspots_when_room(self) -> None:
        hotspots = [
            ComplexityHotspot(location="a.js", severity=Complexity.HIGH, description="Hot a"),
            ComplexityHotspot(location="b.js", severity=Complexity.MEDIUM, description="Warm b"),
        ]

        assert generate_priority_actions([], [], hotspots) == ["REFACTOR: Hot a"]


class TestHeuristicRiskFindings:
    """Tests for the LLM-free risk findings."""

    def test_sample_repository(self, sample_structure: FileStructure) -> None:
        dependencies = analyze_dependency_risks(sample_structure)

        findings = heuristic_risk_findings(
            sample_structure,
            build_complexity_metrics(sample_structure.files),
            dependencies,
            bottlenecks=["Single database"],
            anti_patterns=["Circular dependency: a -> b -> a"],
        )

        titles = [r.title for r in findings.additional_risks]
        assert "No automated tests" in titles
        assert "Deprecated tooling" in titles
        assert [c.location for c in findings.security_concerns] == [".env"]
        assert findings.security_concerns[0].type == "secret_exposure"
        assert findings.performance_bottlenecks == ["Single database"]
        assert findings.architecture_anti_patterns == ["Circular dependency: a -> b -> a"]

    def test_tests_present(self) -> None:
        files = [make_file("src/app.py", "x = 1\n"), make_file("tests/test_app.py", "def t(): pass\n")]
        structure = FileStructure(
            total_files=2, total_directories=2, files=files, categories=categorize_files(files)
        )

        findings = heuristic_risk_findings(structure, build_complexity_metrics(files), [])

        assert findings.additional_risks == []
        assert findings.security_concerns == []
        assert findings.quality_issues == []

    def test_quality_issues_are_counted(self) -> None:
        content = "// FIXME\n"
        files = [make_file("a.js", content), make_file("b.js", content)]
        structure = FileStructure(
            total_files=2, total_directories=0, files=files, categories=categorize_files(files)
        )

        findings = heuristic_risk_findings(structure, build_complexity_metrics(files), [])

        assert findings.quality_issues == ["Contains FIXME comments (2 files)"]
