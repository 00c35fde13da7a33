"""File categorization helpers for repository listings.

Assigns each file a FileCategory, picks out "main" files, and decides which
files are worth fetching content for.
"""

import re

from reposcope.models.repository import FileCategory, FileInfo

# Extension to category mapping
EXTENSION_CATEGORIES: dict[str, FileCategory] = {
    # Source files
    **{
        ext: FileCategory.SOURCE
        for ext in (
            "js", "ts", "jsx", "tsx", "py", "java", "cpp", "c", "cs", "go", "rs",
            "php", "rb", "swift", "kt", "scala", "dart", "vue",
        )
    },
    # Configuration files
    **{
        ext: FileCategory.CONFIG
        for ext in ("json", "yaml", "yml", "xml", "toml", "ini", "conf", "config", "env", "properties")
    },
    # Documentation
    **{ext: FileCategory.DOCUMENTATION for ext in ("md", "txt", "rst", "adoc")},
    # Test files
    "test": FileCategory.TEST,
    "spec": FileCategory.TEST,
    # Build files
    **{ext: FileCategory.BUILD for ext in ("dockerfile", "makefile", "gradle", "cmake")},
    # Assets
    **{
        ext: FileCategory.ASSET
        for ext in (
            "png", "jpg", "jpeg", "gif", "svg", "ico", "css", "scss", "sass", "less", "html", "htm",
        )
    },
}

# Special file names (matched case-insensitively)
SPECIAL_FILES: dict[str, FileCategory] = {
    **{
        name: FileCategory.DEPENDENCY
        for name in (
            "package.json", "package-lock.json", "yarn.lock", "pom.xml", "requirements.txt",
            "gemfile", "gemfile.lock", "composer.json", "composer.lock", "go.mod", "go.sum",
            "cargo.toml", "cargo.lock", "pubspec.yaml", "pubspec.lock",
        )
    },
    **{
        name: FileCategory.DOCUMENTATION
        for name in (
            "readme.md", "readme.txt", "readme", "changelog.md", "changelog", "license",
            "license.md", "contributing.md",
        )
    },
    **{
        name: FileCategory.BUILD
        for name in (
            "dockerfile", "docker-compose.yml", "docker-compose.yaml", "makefile",
            "build.gradle", "build.xml", "cmakelists.txt",
        )
    },
    **{
        name: FileCategory.CONFIG
        for name in (
            ".gitignore", ".eslintrc.js", ".eslintrc.json", ".prettierrc", "tsconfig.json",
            "webpack.config.js", "vite.config.js", "jest.config.js",
        )
    },
}

MAIN_FILE_PATTERNS = [
    re.compile(pattern)
    for pattern in (
        r"^main\.", r"^index\.", r"^app\.", r"^server\.", r"^start\.", r"^run\.",
        r"^entry\.", r"^bootstrap\.", r"^init\.", r"^setup\.", r"^config\.",
        r"^application\.", r"^program\.", r"^cli\.", r"^bin/", r"^src/main",
        r"^src/index", r"^src/app", r"package\.json$", r"pom\.xml$", r"build\.gradle$",
        r"dockerfile$", r"docker-compose\.ya?ml$", r"makefile$", r"readme\.md$", r"readme$",
    )
]

TEXT_EXTENSIONS = frozenset({
    "js", "ts", "jsx", "tsx", "py", "java", "cpp", "c", "cs", "go", "rs", "php", "rb",
    "swift", "kt", "scala", "dart", "vue", "json", "yaml", "yml", "xml", "toml", "ini",
    "conf", "config", "env", "properties", "md", "txt", "rst", "adoc", "css", "scss",
    "sass", "less", "html", "htm", "dockerfile", "makefile", "gradle", "cmake", "sql",
    "sh", "bat", "ps1", "r", "lua", "perl", "groovy", "clj", "ex", "elm", "hs",
})

SKIP_PATTERNS = [
    re.compile(pattern)
    for pattern in (
        r"node_modules", r"\.git", r"\.vscode", r"\.idea", r"\.vs", r"bin", r"obj",
        r"target", r"build", r"dist", r"out", r"\.min\.", r"\.bundle\.", r"\.map$",
        r"\.lock$", r"\.log$", r"\.tmp$", r"\.cache$",
    )
]

MAX_FILE_SIZE = 1024 * 1024


def get_file_extension(filename: str) -> str | None:
    """Return the extension without the dot, or None.

    >>> get_file_extension("app.test.js")
    'js'
    """
    index = filename.rfind(".")
    if index == -1 or index == len(filename) - 1:
        return None
    return filename[index + 1 :]


def is_text_file(filename: str) -> bool:
    """Check if a file name has a known text extension."""
    extension = get_file_extension(filename.lower())
    return extension in TEXT_EXTENSIONS if extension else False


def categorize_file(file: FileInfo) -> FileCategory:
    """Assign a category: special name, then test naming, then extension."""
    name = file.name.lower()

    if name in SPECIAL_FILES:
        return SPECIAL_FILES[name]

    if "test" in name or "spec" in name:
        return FileCategory.TEST

    if file.extension:
        return EXTENSION_CATEGORIES.get(file.extension.lower(), FileCategory.OTHER)

    return FileCategory.OTHER


def categorize_files(files: list[FileInfo]) -> dict[FileCategory, list[FileInfo]]:
    """Group regular files by category.

    Sets ``category`` on each file. Every category key is present in the
    result, with an empty list when no file falls into it.
    """
    categories: dict[FileCategory, list[FileInfo]] = {category: [] for category in FileCategory}
    for file in files:
        if not file.is_file:
            continue
        file.category = categorize_file(file)
        categories[file.category].append(file)
    return categories


def identify_main_files(files: list[FileInfo]) -> list[FileInfo]:
    """Return regular files whose path or name matches a main-file pattern."""
    main_files = []
    for file in files:
        if not file.is_file:
            continue
        path, name = file.path.lower(), file.name.lower()
        if any(p.search(path) or p.search(name) for p in MAIN_FILE_PATTERNS):
            main_files.append(file)
    return main_files


def should_process_file(file: FileInfo, max_file_size: int = MAX_FILE_SIZE) -> bool:
    """Decide whether a listed file should be kept for analysis.

    Skips directories, files over ``max_file_size``, non-text files and
    vendored or generated paths.
    """
    if not file.is_file:
        return False
    if file.size and file.size > max_file_size:
        return False
    if not is_text_file(file.name):
        return False
    return not any(pattern.search(file.path) for pattern in SKIP_PATTERNS)
