"""Run coordinator: sequences the four pipelines for one repository URL.

Dependency order is repository -> architecture -> code flow -> risk. The
run record is updated after each pipeline so a poller sees progress and
partial results; the first failure ends the run.
"""

import asyncio
import logging

from reposcope.analyzers.github import ContentProvider
from reposcope.config import RepoScopeConfig
from reposcope.llm.client import StructuredLLMClient, create_structured_client
from reposcope.models.analysis import AnalysisStatus, RunRecord, utc_timestamp
from reposcope.pipelines.architecture import ArchitecturePipeline
from reposcope.pipelines.code_flow import CodeFlowPipeline
from reposcope.pipelines.context import RunContext, new_run_id
from reposcope.pipelines.errors import PipelineFailure
from reposcope.pipelines.repository import RepositoryPipeline
from reposcope.pipelines.risk import RiskPipeline

logger = logging.getLogger(__name__)


class RunStore:
    """In-memory run records keyed by run id."""

    def __init__(self) -> None:
        self._runs: dict[str, RunRecord] = {}

    def create(self, repository_url: str) -> RunRecord:
        record = RunRecord(id=new_run_id(), repository_url=repository_url)
        self._runs[record.id] = record
        return record

    def get(self, run_id: str) -> RunRecord | None:
        return self._runs.get(run_id)

    def list(self) -> list[RunRecord]:
        """All records, newest first."""
        return sorted(self._runs.values(), key=lambda r: r.created_at, reverse=True)

    def delete(self, run_id: str) -> bool:
        """Remove a record. Returns False if it did not exist."""
        return self._runs.pop(run_id, None) is not None


class AnalysisCoordinator:
    """Runs the pipelines in order and tracks each run in a RunStore."""

    def __init__(
        self,
        repository: RepositoryPipeline,
        architecture: ArchitecturePipeline,
        code_flow: CodeFlowPipeline,
        risk: RiskPipeline,
        store: RunStore | None = None,
    ) -> None:
        self.repository = repository
        self.architecture = architecture
        self.code_flow = code_flow
        self.risk = risk
        self.store = store or RunStore()
        self._tasks: set[asyncio.Task[None]] = set()

    @classmethod
    def create(
        cls,
        llm: StructuredLLMClient,
        content: ContentProvider,
        config: RepoScopeConfig | None = None,
        store: RunStore | None = None,
    ) -> "AnalysisCoordinator":
        """Wire all four pipelines to one LLM client and content provider."""
        config = config or RepoScopeConfig()
        return cls(
            RepositoryPipeline(llm, content, config.github),
            ArchitecturePipeline(llm),
            CodeFlowPipeline(llm),
            RiskPipeline(llm),
            store=store,
        )

    @classmethod
    def from_config(
        cls,
        config: RepoScopeConfig,
        content: ContentProvider,
        store: RunStore | None = None,
    ) -> "AnalysisCoordinator":
        return cls.create(create_structured_client(config.llm), content, config, store)

    def start(self, repository_url: str) -> RunRecord:
        """Schedule a run in the background and return its record immediately.

        Must be called from a running event loop.
        """
        record = self.store.create(repository_url)
        task = asyncio.create_task(self._execute(record))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return record

    async def run(self, repository_url: str) -> RunRecord:
        """Run to completion and return the terminal record."""
        record = self.store.create(repository_url)
        await self._execute(record)
        return record

    @staticmethod
    def _advance(ctx: RunContext, record: RunRecord, progress: int, step: str) -> None:
        record.progress = progress
        record.current_step = step
        ctx.log(logging.INFO, step, progress=progress)

    async def _execute(self, record: RunRecord) -> None:
        ctx = RunContext(record.id)
        url = record.repository_url
        record.status = AnalysisStatus.RUNNING

        try:
            self._advance(ctx, record, 10, "Analyzing GitHub repository")
            repository = await self.repository.analyze(url, ctx)
            record.results["repository"] = repository
            self._advance(ctx, record, 50, "Repository analysis completed")

            self._advance(ctx, record, 60, "Inferring architecture patterns")
            architecture = await self.architecture.analyze(repository, ctx)
            record.results["architecture"] = architecture
            self._advance(ctx, record, 70, "Architecture inference completed")

            self._advance(ctx, record, 75, "Analyzing code flow and dependencies")
            code_flow = await self.code_flow.analyze(repository, architecture, ctx)
            record.results["code_flow"] = code_flow
            self._advance(ctx, record, 80, "Code flow analysis completed")

            self._advance(ctx, record, 90, "Assessing migration risks and vulnerabilities")
            risk = await self.risk.analyze(repository, architecture, code_flow, ctx)
            record.results["risk"] = risk
        except Exception as e:
            record.status = AnalysisStatus.FAILED
            record.error = str(e)
            record.completed_at = utc_timestamp()
            failure = e if isinstance(e, PipelineFailure) else None
            ctx.log(
                logging.ERROR,
                "Analysis failed: %s",
                e,
                stage=failure.stage if failure else None,
                pipeline=failure.pipeline if failure else None,
                error_type=type(e).__name__,
            )
            return

        record.status = AnalysisStatus.COMPLETED
        record.completed_at = utc_timestamp()
        self._advance(ctx, record, 100, "Analysis completed")
