"""Repository pipeline: fetch, list, categorize and summarize a GitHub repository.

Stages (progress checkpoint):
1. fetch_repository (25): parse the URL and fetch metadata
2. analyze_files (50): list the tree and fetch small text files concurrently
3. categorize_structure (75): group files by category, find main files
4. generate_summary (100): LLM summary (rich, then simplified); no heuristic
"""

import asyncio
import logging
from typing import Any

from reposcope.analyzers.file_utils import (
    categorize_files,
    identify_main_files,
    should_process_file,
)
from reposcope.analyzers.github import ContentProvider, GitHubError
from reposcope.config import GitHubSettings
from reposcope.llm.client import StructuredLLMClient
from reposcope.llm.prompts import build_summary_prompt
from reposcope.models.analysis import RepositoryAnalysis, RepositorySummary
from reposcope.models.repository import FileInfo, FileStructure, FileType
from reposcope.pipelines.context import RunContext
from reposcope.pipelines.stages import Stage, StageState, escalate, llm_attempt, run_stages

logger = logging.getLogger(__name__)


class RepositoryPipeline:
    """Builds a RepositoryAnalysis from a repository URL."""

    name = "repository"

    def __init__(
        self,
        llm: StructuredLLMClient,
        content: ContentProvider,
        settings: GitHubSettings | None = None,
    ) -> None:
        self.llm = llm
        self.content = content
        self.settings = settings or GitHubSettings()

    def stages(self) -> list[Stage]:
        return [
            Stage("fetch_repository", 25, self._fetch_repository),
            Stage("analyze_files", 50, self._analyze_files),
            Stage("categorize_structure", 75, self._categorize_structure),
            Stage("generate_summary", 100, self._generate_summary),
        ]

    async def analyze(
        self,
        repository_url: str,
        ctx: RunContext | None = None,
    ) -> RepositoryAnalysis:
        """Run all stages for ``repository_url``.

        Raises:
            PipelineFailure: If any stage fails
        """
        ctx = ctx or RunContext()
        initial = StageState(metadata={"repository_url": repository_url})
        state = await run_stages(ctx, self.name, self.stages(), initial)
        return state.require("repository_analysis")

    async def _fetch_repository(self, ctx: RunContext, state: StageState) -> dict[str, Any]:
        owner, repo = self.content.parse_repository_url(state.require("repository_url"))
        repository = await self.content.get_repository_info(owner, repo)
        logger.info("Fetched %s (%s)", repository.full_name, repository.language or "unknown")
        return {"owner": owner, "repo": repo, "repository": repository}

    async def _analyze_files(self, ctx: RunContext, state: StageState) -> dict[str, Any]:
        owner, repo = state.require("owner"), state.require("repo")
        branch = state.require("repository").branch

        listing = await self.content.get_all_files(
            owner, repo, branch, max_files=self.settings.max_files
        )
        directories = [f for f in listing if f.type == FileType.DIRECTORY]
        processable = [f for f in listing if should_process_file(f)]
        to_fetch = processable[: self.settings.max_content_files]

        semaphore = asyncio.Semaphore(self.settings.concurrency)

        async def fetch(file: FileInfo) -> FileInfo:
            if not file.size or file.size >= self.settings.max_content_bytes:
                return file
            async with semaphore:
                try:
                    content = await self.content.get_file_content(owner, repo, file.path, branch)
                except GitHubError as e:
                    logger.warning("Failed to get content for %s: %s", file.path, e)
                    return file
            return file.with_content(content)

        fetched = await asyncio.gather(*(fetch(f) for f in to_fetch))
        files = [*fetched, *processable[len(to_fetch) :]]

        logger.info(
            "Analyzed %d files (%d with content, %d skipped)",
            len(files),
            sum(1 for f in files if f.content),
            len(listing) - len(directories) - len(processable),
        )
        return {"files": files, "directories": directories}

    async def _categorize_structure(self, ctx: RunContext, state: StageState) -> dict[str, Any]:
        files: list[FileInfo] = state.require("files")
        directories: list[FileInfo] = state.require("directories")

        structure = FileStructure(
            total_files=len(files),
            total_directories=len(directories),
            files=[*files, *directories],
            categories=categorize_files(files),
            main_files=identify_main_files(files),
        )
        return {"file_structure": structure}

    async def _generate_summary(self, ctx: RunContext, state: StageState) -> dict[str, Any]:
        repository = state.require("repository")
        structure = state.require("file_structure")
        stage = "generate_summary"

        result = await escalate(
            ctx,
            stage,
            rich=llm_attempt(
                self.llm,
                lambda: build_summary_prompt(repository, structure),
                RepositorySummary.from_dict,
            ),
            simplified=llm_attempt(
                self.llm,
                lambda: build_summary_prompt(repository, structure, simplified=True),
                RepositorySummary.from_dict,
            ),
        )

        analysis = RepositoryAnalysis(
            repository=repository,
            file_structure=structure,
            summary=result.value,
        )
        return {"repository_analysis": analysis, **result.source(stage)}
