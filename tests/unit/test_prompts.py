"""Unit tests for stage prompt builders."""

from reposcope.analyzers.complexity import build_complexity_metrics
from reposcope.analyzers.dependency_risk import analyze_dependency_risks
from reposcope.llm.prompts import (
    SCHEMAS,
    SYSTEM_PROMPTS,
    build_patterns_prompt,
    build_risk_prompt,
    build_summary_prompt,
    get_system_prompt,
)
from reposcope.models.analysis import Complexity, RepositoryAnalysis
from reposcope.models.architecture import (
    ArchitectureAnalysis,
    ArchitectureInfo,
    ArchitectureType,
    TechStack,
)
from reposcope.models.repository import FileStructure, Repository


class TestSummaryPrompt:
    """Tests for the repository summary prompt."""

    def test_rich_prompt_includes_samples(
        self, sample_repository: Repository, sample_structure: FileStructure
    ) -> None:
        prompt = build_summary_prompt(sample_repository, sample_structure)

        assert prompt.system_prompt == SYSTEM_PROMPTS["summary"]
        assert prompt.schema == SCHEMAS["summary"]
        assert "Repository: shop" in prompt.prompt
        assert "Sample File Contents:" in prompt.prompt
        assert "File: package.json" in prompt.prompt

    def test_simplified_prompt_is_smaller(
        self, sample_repository: Repository, sample_structure: FileStructure
    ) -> None:
        rich = build_summary_prompt(sample_repository, sample_structure)
        simplified = build_summary_prompt(sample_repository, sample_structure, simplified=True)

        assert len(simplified.prompt) < len(rich.prompt)
        assert simplified.schema == SCHEMAS["summary_simplified"]
        assert "Sample File Contents" not in simplified.prompt

    def test_prompt_is_deterministic(
        self, sample_repository: Repository, sample_structure: FileStructure
    ) -> None:
        first = build_summary_prompt(sample_repository, sample_structure)

        assert build_summary_prompt(sample_repository, sample_structure) == first


class TestPatternPrompts:
    """Tests for architecture pattern prompts."""

    def test_rich_lists_paths(self, repository_analysis: RepositoryAnalysis) -> None:
        prompt = build_patterns_prompt(repository_analysis)

        assert "- src/controllers/userController.js" in prompt.prompt
        assert prompt.system_prompt == get_system_prompt("patterns")

    def test_simplified_lists_top_level_only(self, repository_analysis: RepositoryAnalysis) -> None:
        prompt = build_patterns_prompt(repository_analysis, simplified=True)

        assert "Top-level entries: .env, README.md, package.json, src" in prompt.prompt
        assert "userController" not in prompt.prompt


class TestSchemas:
    """Every stage has a rich and a simplified schema."""

    def test_simplified_variants_exist(self) -> None:
        rich = {key for key in SCHEMAS if not key.endswith("_simplified")}

        assert {f"{key}_simplified" for key in rich} <= set(SCHEMAS)

    def test_system_prompt_for_every_schema(self) -> None:
        for key in SCHEMAS:
            assert key.removesuffix("_simplified") in SYSTEM_PROMPTS


class TestRiskPrompt:
    """Tests for the AI risk analysis prompt."""

    def test_dependency_risks_are_listed(self, repository_analysis: RepositoryAnalysis) -> None:
        structure = repository_analysis.file_structure
        architecture = ArchitectureAnalysis(
            repository=repository_analysis.repository,
            architecture=ArchitectureInfo(
                type=ArchitectureType.LAYERED,
                style="MVC",
                layers=[],
                components=[],
                entry_points=[],
                tech_stack=TechStack(language="JavaScript"),
                patterns=["MVC", "Layered"],
                complexity=Complexity.LOW,
            ),
        )

        prompt = build_risk_prompt(
            repository_analysis,
            architecture,
            build_complexity_metrics(structure.files),
            analyze_dependency_risks(structure),
        )

        assert prompt.system_prompt == SYSTEM_PROMPTS["risk"]
        assert "- lodash (4.17.0): medium" in prompt.prompt
        assert "Architecture Patterns: MVC, Layered" in prompt.prompt
