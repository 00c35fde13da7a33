"""Async GitHub contents API client.

Fetches repository metadata, the recursive file listing and individual file
contents over the REST API using httpx.
"""

import base64
import logging
import os
import re
from typing import Any, Protocol

import httpx

from reposcope.analyzers.file_utils import get_file_extension
from reposcope.models.repository import FileInfo, FileType, Repository

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.github.com"

_REPO_URL = re.compile(r"github\.com/([^/]+)/([^/]+)")


class GitHubError(Exception):
    """Exception raised when the GitHub API cannot be used."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class ContentProvider(Protocol):
    """What the repository pipeline needs from a content source."""

    def parse_repository_url(self, url: str) -> tuple[str, str]: ...

    async def get_repository_info(self, owner: str, repo: str) -> Repository: ...

    async def get_all_files(
        self,
        owner: str,
        repo: str,
        branch: str | None = None,
        max_files: int = 1000,
    ) -> list[FileInfo]: ...

    async def get_file_content(
        self,
        owner: str,
        repo: str,
        path: str,
        branch: str | None = None,
    ) -> str: ...


class GitHubClient:
    """Client for the GitHub REST contents API.

    Can be used as an async context manager; the underlying httpx client is
    closed on exit unless it was supplied by the caller.
    """

    def __init__(
        self,
        token: str | None = None,
        api_base: str = DEFAULT_API_BASE,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            token: Personal access token (defaults to $GITHUB_TOKEN)
            api_base: API root URL
            timeout: Request timeout in seconds
            http_client: Preconfigured httpx client (used as-is)
        """
        self.token = token or os.environ.get("GITHUB_TOKEN") or None
        self.api_base = api_base.rstrip("/")
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": "reposcope",
        }
        if self.token:
            headers["Authorization"] = f"token {self.token}"
        return headers

    @staticmethod
    def parse_repository_url(url: str) -> tuple[str, str]:
        """Split a GitHub URL into owner and repository name.

        Args:
            url: URL such as https://github.com/owner/repo(.git)

        Returns:
            Tuple of (owner, repo)

        Raises:
            GitHubError: If the URL is not a GitHub repository URL
        """
        match = _REPO_URL.search(url)
        if not match:
            raise GitHubError(f"Invalid GitHub repository URL: {url}")
        owner, repo = match.group(1), match.group(2)
        if repo.endswith(".git"):
            repo = repo[: -len(".git")]
        return owner, repo

    async def _get_json(self, path: str, params: dict[str, str] | None = None) -> Any:
        url = f"{self.api_base}{path}"
        try:
            response = await self._client.get(url, headers=self._headers(), params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise GitHubError(
                f"GitHub API returned {e.response.status_code} for {path}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise GitHubError(f"GitHub API request failed for {path}: {e}") from e
        try:
            return response.json()
        except ValueError as e:
            raise GitHubError(f"GitHub API returned invalid JSON for {path}: {e}") from e

    async def _get_object(self, path: str, params: dict[str, str] | None = None) -> dict[str, Any]:
        data = await self._get_json(path, params)
        if not isinstance(data, dict):
            raise GitHubError(
                f"GitHub API returned {type(data).__name__} for {path}, expected an object"
            )
        return data

    async def get_repository_info(self, owner: str, repo: str) -> Repository:
        """Fetch repository metadata.

        Raises:
            GitHubError: If the request fails
        """
        logger.info("Fetching repository info for %s/%s", owner, repo)
        data = await self._get_object(f"/repos/{owner}/{repo}")

        return Repository(
            url=data.get("html_url") or f"https://github.com/{owner}/{repo}",
            name=data.get("name") or repo,
            owner=(data.get("owner") or {}).get("login") or owner,
            branch=data.get("default_branch") or "main",
            description=data.get("description"),
            language=data.get("language"),
            stars=data.get("stargazers_count") or 0,
            forks=data.get("forks_count") or 0,
            last_updated=data.get("updated_at"),
        )

    async def get_repository_contents(
        self,
        owner: str,
        repo: str,
        path: str = "",
        branch: str | None = None,
    ) -> list[FileInfo]:
        """List one directory of the repository."""
        logger.debug("Fetching contents for %s/%s/%s", owner, repo, path)
        params = {"ref": branch} if branch else None
        data = await self._get_json(f"/repos/{owner}/{repo}/contents/{path}", params)
        items = data if isinstance(data, list) else [data]

        return [
            FileInfo(
                path=item["path"],
                name=item["name"],
                type=FileType.DIRECTORY if item.get("type") == "dir" else FileType.FILE,
                size=item.get("size"),
                extension=get_file_extension(item["name"]),
            )
            for item in items
        ]

    async def get_file_content(
        self,
        owner: str,
        repo: str,
        path: str,
        branch: str | None = None,
    ) -> str:
        """Fetch and decode a single file.

        Raises:
            GitHubError: If the request fails
        """
        params = {"ref": branch} if branch else None
        data = await self._get_object(f"/repos/{owner}/{repo}/contents/{path}", params)
        content = data.get("content") or ""

        if data.get("encoding") != "base64":
            return str(content)
        try:
            return base64.b64decode(content).decode("utf-8", errors="replace")
        except (TypeError, ValueError) as e:
            raise GitHubError(f"Invalid base64 content for {path}: {e}") from e

    async def get_all_files(
        self,
        owner: str,
        repo: str,
        branch: str | None = None,
        max_files: int = 1000,
    ) -> list[FileInfo]:
        """List the repository recursively, depth first, up to ``max_files`` entries.

        Directories that fail to list are skipped with a warning.
        """
        files: list[FileInfo] = []
        visited: set[str] = set()

        async def walk(path: str) -> None:
            if len(files) >= max_files or path in visited:
                return
            visited.add(path)

            try:
                contents = await self.get_repository_contents(owner, repo, path, branch)
            except GitHubError as e:
                logger.warning("Failed to process directory %r: %s", path, e)
                return

            for item in contents:
                if len(files) >= max_files:
                    break
                files.append(item)
                if item.type == FileType.DIRECTORY:
                    await walk(item.path)

        await walk("")
        logger.info("Listed %d entries in %s/%s", len(files), owner, repo)
        return files
