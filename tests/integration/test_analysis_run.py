"""Integration tests for a full analysis run.

Runs the real pipelines against an in-memory repository. The scripted LLM
answers the summary prompt and returns prose for everything else, so every
other LLM stage falls back to its heuristic.
"""

import asyncio

import pytest

from reposcope.analyzers.architecture import detect_structural_patterns
from reposcope.llm.client import StructuredLLMClient
from reposcope.llm.errors import ProviderError
from reposcope.llm.prompts import SYSTEM_PROMPTS
from reposcope.models.analysis import AnalysisStatus, RunRecord
from reposcope.models.code_flow import CodeEntryPointType
from reposcope.models.risk import IssueType
from reposcope.pipelines import (
    AnalysisCoordinator,
    ArchitecturePipeline,
    RepositoryPipeline,
    RunContext,
    StageState,
    run_stages,
)
from tests.fixtures import (
    SAMPLE_REPO_FILES,
    SAMPLE_REPO_URL,
    SUMMARY_REPLY,
    InMemoryContentProvider,
    ScriptedProvider,
)


def summary_only(prompt: str, system_prompt: str | None) -> str:
    if system_prompt and system_prompt.startswith(SYSTEM_PROMPTS["summary"]):
        return SUMMARY_REPLY
    return "I am not able to answer in JSON today."


@pytest.fixture
def scripted_llm() -> StructuredLLMClient:
    return StructuredLLMClient(ScriptedProvider(responder=summary_only))


def _run(llm: StructuredLLMClient, content: InMemoryContentProvider) -> RunRecord:
    coordinator = AnalysisCoordinator.create(llm, content)
    return asyncio.run(coordinator.run(SAMPLE_REPO_URL))


class TestFullRun:
    """End-to-end run with heuristic fallbacks."""

    @pytest.fixture
    def record(
        self, scripted_llm: StructuredLLMClient, content_provider: InMemoryContentProvider
    ) -> RunRecord:
        return _run(scripted_llm, content_provider)

    def test_run_completes(self, record: RunRecord) -> None:
        assert record.status == AnalysisStatus.COMPLETED
        assert record.progress == 100
        assert set(record.results) == {"repository", "architecture", "code_flow", "risk"}

    def test_repository_result(self, record: RunRecord) -> None:
        repository = record.results["repository"]

        assert repository.summary.purpose == "Online shop backend"
        assert repository.file_structure.total_files == len(SAMPLE_REPO_FILES)
        assert repository.file_structure.total_directories == 5
        package = next(f for f in repository.file_structure.files if f.path == "package.json")
        assert package.content == SAMPLE_REPO_FILES["package.json"]

    def test_architecture_from_heuristics(self, record: RunRecord) -> None:
        info = record.results["architecture"].architecture

        assert info.patterns[:2] == ["MVC", "Layered"]
        assert info.tech_stack.language == "JavaScript/TypeScript"
        assert "Express.js" in info.tech_stack.frameworks
        assert info.tech_stack.databases == ["MongoDB"]
        assert {c.name for c in info.components} == {"controllers", "models"}

    def test_code_flow_from_heuristics(self, record: RunRecord) -> None:
        code_flow = record.results["code_flow"]

        entry_files = [ep.file for ep in code_flow.code_flow.entry_points]
        assert entry_files == ["package.json", "src/index.js"]
        assert all(ep.type == CodeEntryPointType.MAIN for ep in code_flow.code_flow.entry_points)
        assert len(code_flow.code_flow.execution_paths) == 2
        assert [s.name for s in code_flow.data_flow.data_stores] == ["MongoDB"]
        assert code_flow.dependencies.dependency_tree
        assert code_flow.risk_factors == [
            "Complex interdependencies",
            "Potential technical debt",
            "Legacy code patterns",
        ]

    def test_risk_assessment(self, record: RunRecord) -> None:
        risk = record.results["risk"]

        risks = {d.name: d for d in risk.dependency_risks}
        assert set(risks) == {"lodash", "gulp"}
        assert risks["gulp"].issues[0].type == IssueType.DEPRECATED
        assert [v.id for v in risk.vulnerabilities] == ["vuln-lodash", "security-secret_exposure-1"]
        assert risk.vulnerabilities[1].location == ".env"
        assert [b.id for b in risk.migration_blockers] == [
            "arch-complex-interdependencies",
            "arch-potential-technical-debt",
            "arch-legacy-code-patterns",
        ]
        titles = [r.title for r in risk.findings.additional_risks]
        assert "No automated tests" in titles
        assert "Deprecated tooling" in titles
        assert 0 <= risk.overall_risk_score <= 100

    def test_record_serializes(self, record: RunRecord) -> None:
        data = record.to_dict()

        assert data["status"] == "completed"
        assert data["results"]["architecture"]["architecture"]["tech_stack"]["databases"] == [
            "MongoDB"
        ]


class TestStageSources:
    """Metadata records which tier produced each value."""

    def test_sources_per_stage(
        self, scripted_llm: StructuredLLMClient, content_provider: InMemoryContentProvider
    ) -> None:
        async def run() -> tuple[StageState, StageState]:
            ctx = RunContext()
            repository_state = await run_stages(
                ctx,
                "repository",
                RepositoryPipeline(scripted_llm, content_provider).stages(),
                StageState(metadata={"repository_url": SAMPLE_REPO_URL}),
            )
            architecture_state = await run_stages(
                ctx,
                "architecture",
                ArchitecturePipeline(scripted_llm).stages(),
                StageState(
                    metadata={
                        "repository_analysis": repository_state.require("repository_analysis")
                    }
                ),
            )
            return repository_state, architecture_state

        repository_state, architecture_state = asyncio.run(run())

        assert repository_state.get("generate_summary_source") == "llm"
        assert architecture_state.get("detect_patterns_source") == "heuristic"
        assert architecture_state.get("generate_analysis_source") == "heuristic"
        assert architecture_state.progress == 100

    def test_llm_patterns_are_used_when_valid(self, content_provider: InMemoryContentProvider) -> None:
        def responder(prompt: str, system_prompt: str | None) -> str:
            if system_prompt and system_prompt.startswith(SYSTEM_PROMPTS["patterns"]):
                return '```json\n{"patterns": ["Hexagonal"], "evidence": ["ports/"]}\n```'
            return summary_only(prompt, system_prompt)

        record = _run(StructuredLLMClient(ScriptedProvider(responder=responder)), content_provider)

        assert record.status == AnalysisStatus.COMPLETED
        assert record.results["architecture"].architecture.patterns == ["Hexagonal"]


class TestRunFailures:
    """Runs that cannot complete."""

    def test_llm_outage_fails_at_summary(
        self, content_provider: InMemoryContentProvider, no_sleep: list[float]
    ) -> None:
        provider = ScriptedProvider(responder=lambda p, s: ProviderError("service unavailable"))
        llm = StructuredLLMClient(provider, max_retries=1)

        record = _run(llm, content_provider)

        assert record.status == AnalysisStatus.FAILED
        assert record.error is not None
        assert record.error.startswith("Generate summary failed:")
        assert record.progress == 10
        assert record.results == {}
        # rich and simplified tiers, two attempts each
        assert len(provider.calls) == 4

    def test_no_provider_fails_at_summary(
        self, unavailable_llm: StructuredLLMClient, content_provider: InMemoryContentProvider
    ) -> None:
        record = _run(unavailable_llm, content_provider)

        assert record.status == AnalysisStatus.FAILED
        assert "No LLM provider available" in (record.error or "")

    def test_invalid_url_fails_at_fetch(self, scripted_llm: StructuredLLMClient) -> None:
        coordinator = AnalysisCoordinator.create(scripted_llm, InMemoryContentProvider({}))

        record = asyncio.run(coordinator.run("https://example.com/not-github"))

        assert record.status == AnalysisStatus.FAILED
        assert record.error is not None
        assert record.error.startswith("Fetch repository failed:")

    def test_unreadable_file_is_skipped(self, scripted_llm: StructuredLLMClient) -> None:
        content = InMemoryContentProvider(SAMPLE_REPO_FILES, failing_paths={"src/models/order.js"})

        record = _run(scripted_llm, content)

        assert record.status == AnalysisStatus.COMPLETED
        files = {f.path: f for f in record.results["repository"].file_structure.files}
        assert files["src/models/order.js"].content is None
        assert files["src/models/user.js"].content is not None

    def test_list_shaped_dependencies_do_not_fail_run(
        self, scripted_llm: StructuredLLMClient
    ) -> None:
        manifest = '{"name": "shop", "dependencies": ["express"]}'
        files = {**SAMPLE_REPO_FILES, "package.json": manifest}

        record = _run(scripted_llm, InMemoryContentProvider(files))

        assert record.status == AnalysisStatus.COMPLETED
        assert "Express.js" not in record.results["architecture"].architecture.tech_stack.frameworks
        assert record.results["risk"].dependency_risks == []


def test_heuristic_patterns_match_sample_layout(sample_files) -> None:
    """The sample repository is laid out as MVC with a service layer."""
    assert detect_structural_patterns(sample_files)[:2] == ["MVC", "Layered"]
