"""Repository entities representing the GitHub repository being analyzed.

- Repository: metadata returned by the content provider
- FileInfo: a single entry of the recursive file listing
- FileCategory: coarse file classification
- FileStructure: categorized view of the listing
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FileCategory(Enum):
    """Coarse classification assigned to every file in the listing."""

    SOURCE = "source"
    CONFIG = "config"
    DOCUMENTATION = "documentation"
    TEST = "test"
    BUILD = "build"
    DEPENDENCY = "dependency"
    ASSET = "asset"
    OTHER = "other"


class FileType(Enum):
    """Entry kind in the repository listing."""

    FILE = "file"
    DIRECTORY = "directory"


@dataclass
class Repository:
    """GitHub repository being analyzed.

    Attributes:
        url: Repository web URL
        name: Repository name
        owner: Owner login
        branch: Default branch used for content fetches
        description: Repository description, if set
        language: Primary language reported by GitHub
        stars: Stargazer count
        forks: Fork count
        last_updated: ISO timestamp of the last update
    """

    url: str
    name: str
    owner: str
    branch: str = "main"
    description: str | None = None
    language: str | None = None
    stars: int = 0
    forks: int = 0
    last_updated: str | None = None

    def __post_init__(self) -> None:
        """Validate required identity fields."""
        if not self.name or not self.name.strip():
            raise ValueError("Repository name cannot be empty")
        if not self.owner or not self.owner.strip():
            raise ValueError("Repository owner cannot be empty")

    @property
    def full_name(self) -> str:
        """Return "owner/name"."""
        return f"{self.owner}/{self.name}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "url": self.url,
            "name": self.name,
            "owner": self.owner,
            "branch": self.branch,
            "description": self.description,
            "language": self.language,
            "stars": self.stars,
            "forks": self.forks,
            "last_updated": self.last_updated,
        }


@dataclass
class FileInfo:
    """Single entry in the repository listing.

    Attributes:
        path: Path relative to the repository root
        name: Base name
        type: File or directory
        size: Size in bytes as reported by the provider
        extension: Extension without the dot, if any
        content: Decoded text content (only fetched for small text files)
        category: Assigned category (set during categorization)
    """

    path: str
    name: str
    type: FileType = FileType.FILE
    size: int | None = None
    extension: str | None = None
    content: str | None = None
    category: FileCategory | None = None

    @property
    def is_file(self) -> bool:
        """Check if this entry is a regular file."""
        return self.type == FileType.FILE

    def with_content(self, content: str) -> "FileInfo":
        """Return a copy of this entry carrying ``content``."""
        return FileInfo(
            path=self.path,
            name=self.name,
            type=self.type,
            size=self.size,
            extension=self.extension,
            content=content,
            category=self.category,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization.

        Content is summarized by length to keep run records small.
        """
        return {
            "path": self.path,
            "name": self.name,
            "type": self.type.value,
            "size": self.size,
            "extension": self.extension,
            "content_length": len(self.content) if self.content is not None else None,
            "category": self.category.value if self.category else None,
        }


@dataclass
class FileStructure:
    """Categorized view of the repository listing.

    Attributes:
        total_files: Number of regular files
        total_directories: Number of directories
        files: Every listed entry (with content where fetched)
        categories: Files grouped by category (every category key present)
        main_files: Files matching main-file patterns
    """

    total_files: int
    total_directories: int
    files: list[FileInfo] = field(default_factory=list)
    categories: dict[FileCategory, list[FileInfo]] = field(default_factory=dict)
    main_files: list[FileInfo] = field(default_factory=list)

    def in_category(self, category: FileCategory) -> list[FileInfo]:
        """Return files in ``category`` (empty list if none)."""
        return self.categories.get(category, [])

    def category_counts(self) -> dict[str, int]:
        """Return file counts keyed by category value."""
        return {category.value: len(files) for category, files in self.categories.items()}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "total_files": self.total_files,
            "total_directories": self.total_directories,
            "category_counts": self.category_counts(),
            "main_files": [f.path for f in self.main_files],
            "files": [f.to_dict() for f in self.files],
        }
