"""Shared pytest fixtures for RepoScope tests.

Fixtures are organized by category:
- LLM fixtures: scripted providers and structured clients without network
- Repository fixtures: listings, file structures and pipeline results
- Configuration fixtures: config dictionaries for the loader
"""

from pathlib import Path
from typing import Any

import pytest

from reposcope.analyzers.file_utils import categorize_files, identify_main_files
from reposcope.llm.client import StructuredLLMClient
from reposcope.models.analysis import Complexity, RepositoryAnalysis, RepositorySummary
from reposcope.models.repository import FileInfo, FileStructure, Repository
from tests.fixtures import (
    SAMPLE_REPO_FILES,
    InMemoryContentProvider,
    ScriptedProvider,
    make_file,
)

# =============================================================================
# LLM Fixtures
# =============================================================================


@pytest.fixture
def no_sleep(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    """Replace retry backoff sleeps with a recorder."""
    delays: list[float] = []

    async def fake_sleep(delay: float) -> None:
        delays.append(delay)

    monkeypatch.setattr("reposcope.llm.client.asyncio.sleep", fake_sleep)
    return delays


@pytest.fixture
def failing_llm(no_sleep: list[float]) -> StructuredLLMClient:
    """Structured client whose provider always fails."""
    return StructuredLLMClient(ScriptedProvider(), max_retries=0)


@pytest.fixture
def unavailable_llm() -> StructuredLLMClient:
    """Structured client with no provider slot at all."""
    return StructuredLLMClient(None)


# =============================================================================
# Repository Fixtures
# =============================================================================


@pytest.fixture
def sample_repository() -> Repository:
    return Repository(
        url="https://github.com/acme/shop",
        name="shop",
        owner="acme",
        description="Online shop backend",
        language="JavaScript",
    )


@pytest.fixture
def sample_files() -> list[FileInfo]:
    """Sample repository files with content."""
    return [make_file(path, content) for path, content in SAMPLE_REPO_FILES.items()]


@pytest.fixture
def sample_structure(sample_files: list[FileInfo]) -> FileStructure:
    return FileStructure(
        total_files=len(sample_files),
        total_directories=5,
        files=sample_files,
        categories=categorize_files(sample_files),
        main_files=identify_main_files(sample_files),
    )


@pytest.fixture
def repository_analysis(
    sample_repository: Repository, sample_structure: FileStructure
) -> RepositoryAnalysis:
    return RepositoryAnalysis(
        repository=sample_repository,
        file_structure=sample_structure,
        summary=RepositorySummary(
            purpose="Online shop backend",
            main_technologies=["JavaScript"],
            project_type="web application",
            complexity=Complexity.MEDIUM,
        ),
    )


@pytest.fixture
def content_provider(sample_repository: Repository) -> InMemoryContentProvider:
    return InMemoryContentProvider(SAMPLE_REPO_FILES, sample_repository)


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def full_config() -> dict[str, Any]:
    """Return a configuration dictionary with every section set."""
    return {
        "llm": {
            "primary": {
                "provider": "claude",
                "model": "claude-3-haiku-20240307",
                "api_key": "test-key",
            },
            "fallback": {
                "provider": "ollama",
                "model": "llama3.2",
                "api_base": "http://localhost:11434",
            },
            "max_retries": 3,
            "retry_backoff_seconds": 0.5,
            "max_prompt_chars": 50000,
        },
        "github": {
            "token": "ghp_test",
            "max_files": 200,
            "max_content_files": 100,
            "max_content_bytes": 5000,
            "timeout": 10,
            "concurrency": 4,
        },
    }


@pytest.fixture
def temp_config_dir(tmp_path: Path) -> Path:
    """Create a temporary .reposcope configuration directory."""
    config_dir = tmp_path / ".reposcope"
    config_dir.mkdir()
    return config_dir
