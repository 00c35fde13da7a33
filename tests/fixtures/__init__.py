"""Test doubles and sample data for RepoScope.

- ScriptedProvider: LLM provider answering from canned replies or a responder
- InMemoryContentProvider: content provider serving a dict of path -> text
- SAMPLE_REPO_FILES: a small Express-style web application
"""

import json
from collections.abc import Callable

from reposcope.analyzers.file_utils import get_file_extension
from reposcope.analyzers.github import GitHubClient, GitHubError
from reposcope.llm.client import LLMResponse
from reposcope.llm.errors import ProviderError
from reposcope.models.repository import FileInfo, FileType, Repository

Reply = str | Exception
Responder = Callable[[str, str | None], Reply]

SAMPLE_REPO_URL = "https://github.com/acme/shop"

SAMPLE_REPO_FILES: dict[str, str] = {
    "package.json": json.dumps(
        {
            "name": "shop",
            "dependencies": {"express": "^4.18.0", "lodash": "4.17.0", "mongodb": "^5.0.0"},
            "devDependencies": {"gulp": "^4.0.0"},
        }
    ),
    "README.md": "# Shop\n\nOnline shop backend.\n",
    ".env": "SESSION_SECRET=changeme\n",
    "src/index.js": (
        "const express = require('express');\n"
        "const app = express();\n"
        "function start() {\n"
        "  if (process.env.PORT) { app.listen(process.env.PORT); } else { app.listen(3000); }\n"
        "}\n"
        "start();\n"
    ),
    "src/controllers/userController.js": (
        "const users = require('../services/userService');\n"
        "function list(req, res) { res.json(users.all()); }\n"
        "module.exports = { list };\n"
    ),
    "src/controllers/orderController.js": (
        "function create(req, res) {\n"
        "  if (!req.body) { return res.status(400).end(); }\n"
        "  res.status(201).end();\n"
        "}\n"
        "module.exports = { create };\n"
    ),
    "src/models/user.js": "class User {}\nmodule.exports = User;\n",
    "src/models/order.js": "class Order {}\nmodule.exports = Order;\n",
    "src/views/user.html": "<h1>User</h1>\n",
    "src/services/userService.js": (
        "const User = require('../models/user');\n"
        "function all() { return []; }\n"
        "module.exports = { all };\n"
    ),
}

SUMMARY_REPLY = json.dumps(
    {
        "purpose": "Online shop backend",
        "main_technologies": ["JavaScript", "Express"],
        "project_type": "web application",
        "complexity": "medium",
        "insights": ["Controllers, models and views are separated"],
    }
)


def directories_of(paths: list[str]) -> list[str]:
    """Every parent directory of ``paths``, parents before children."""
    directories: list[str] = []
    for path in sorted(paths):
        parts = path.split("/")[:-1]
        for depth in range(1, len(parts) + 1):
            directory = "/".join(parts[:depth])
            if directory not in directories:
                directories.append(directory)
    return directories


def make_file(path: str, content: str | None = None, size: int | None = None) -> FileInfo:
    """Build a FileInfo the way the content provider lists it."""
    name = path.rsplit("/", 1)[-1]
    return FileInfo(
        path=path,
        name=name,
        size=size if size is not None else len(content or ""),
        extension=get_file_extension(name),
        content=content,
    )


class ScriptedProvider:
    """LLM provider that answers from a reply list or a responder function.

    Exceptions in the script are raised instead of returned. Every call is
    recorded as (prompt, system_prompt).
    """

    def __init__(
        self,
        replies: list[Reply] | None = None,
        responder: Responder | None = None,
    ) -> None:
        self.replies = list(replies or [])
        self.responder = responder
        self.calls: list[tuple[str, str | None]] = []

    async def complete(
        self,
        prompt: str,
        system_prompt: str | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        self.calls.append((prompt, system_prompt))
        if self.responder is not None:
            reply = self.responder(prompt, system_prompt)
        elif self.replies:
            reply = self.replies.pop(0)
        else:
            reply = ProviderError("No scripted reply left")
        if isinstance(reply, Exception):
            raise reply
        return LLMResponse(content=reply, model="scripted")


class InMemoryContentProvider:
    """Content provider backed by a dict of path -> file text."""

    def __init__(
        self,
        files: dict[str, str],
        repository: Repository | None = None,
        failing_paths: set[str] | None = None,
    ) -> None:
        self.files = dict(files)
        self.repository = repository or Repository(
            url=SAMPLE_REPO_URL,
            name="shop",
            owner="acme",
            description="Online shop backend",
            language="JavaScript",
        )
        self.failing_paths = set(failing_paths or ())
        self.content_requests: list[str] = []

    def parse_repository_url(self, url: str) -> tuple[str, str]:
        return GitHubClient.parse_repository_url(url)

    async def get_repository_info(self, owner: str, repo: str) -> Repository:
        return self.repository

    async def get_all_files(
        self,
        owner: str,
        repo: str,
        branch: str | None = None,
        max_files: int = 1000,
    ) -> list[FileInfo]:
        listing = [
            FileInfo(path=directory, name=directory.rsplit("/", 1)[-1], type=FileType.DIRECTORY)
            for directory in directories_of(list(self.files))
        ]
        listing.extend(make_file(path, size=len(text)) for path, text in self.files.items())
        return listing[:max_files]

    async def get_file_content(
        self,
        owner: str,
        repo: str,
        path: str,
        branch: str | None = None,
    ) -> str:
        self.content_requests.append(path)
        if path in self.failing_paths:
            raise GitHubError(f"GitHub API returned 404 for {path}", status_code=404)
        return self.files[path]
