"""Unit tests for file categorization helpers."""

import pytest

from reposcope.analyzers.file_utils import (
    categorize_file,
    categorize_files,
    get_file_extension,
    identify_main_files,
    is_text_file,
    should_process_file,
)
from reposcope.models.repository import FileCategory, FileInfo, FileType
from tests.fixtures import make_file


class TestGetFileExtension:
    """Tests for extension extraction."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("app.test.js", "js"),
            ("Makefile", None),
            ("archive.", None),
            (".env", "env"),
        ],
    )
    def test_extension(self, name: str, expected: str | None) -> None:
        assert get_file_extension(name) == expected


class TestCategorizeFile:
    """Tests for single-file categorization."""

    @pytest.mark.parametrize(
        ("path", "category"),
        [
            ("package.json", FileCategory.DEPENDENCY),
            ("Gemfile", FileCategory.DEPENDENCY),
            ("README.md", FileCategory.DOCUMENTATION),
            ("Dockerfile", FileCategory.BUILD),
            ("tsconfig.json", FileCategory.CONFIG),
            ("src/user.test.js", FileCategory.TEST),
            ("spec/models/user_spec.rb", FileCategory.TEST),
            ("src/app.py", FileCategory.SOURCE),
            ("config/settings.yaml", FileCategory.CONFIG),
            ("docs/guide.rst", FileCategory.DOCUMENTATION),
            ("static/logo.png", FileCategory.ASSET),
            ("data/dump.bin", FileCategory.OTHER),
        ],
    )
    def test_category(self, path: str, category: FileCategory) -> None:
        assert categorize_file(make_file(path)) == category

    def test_special_names_are_case_insensitive(self) -> None:
        assert categorize_file(make_file("REQUIREMENTS.TXT")) == FileCategory.DEPENDENCY


class TestCategorizeFiles:
    """Tests for grouping a listing."""

    def test_every_category_present_and_directories_skipped(self) -> None:
        files = [
            make_file("src/app.py"),
            FileInfo(path="src", name="src", type=FileType.DIRECTORY),
        ]

        categories = categorize_files(files)

        assert set(categories) == set(FileCategory)
        assert [f.path for f in categories[FileCategory.SOURCE]] == ["src/app.py"]
        assert files[0].category == FileCategory.SOURCE
        assert files[1].category is None


class TestIdentifyMainFiles:
    """Tests for main-file detection."""

    def test_matches_names_and_paths(self) -> None:
        files = [
            make_file("src/index.js"),
            make_file("bin/run"),
            make_file("package.json"),
            make_file("src/utils/strings.js"),
        ]

        main = [f.path for f in identify_main_files(files)]

        assert main == ["src/index.js", "bin/run", "package.json"]


class TestShouldProcessFile:
    """Tests for the content-fetch filter."""

    def test_text_source_file(self) -> None:
        assert should_process_file(make_file("src/app.py", size=120)) is True

    def test_directory(self) -> None:
        assert should_process_file(FileInfo(path="src", name="src", type=FileType.DIRECTORY)) is False

    def test_oversized(self) -> None:
        assert should_process_file(make_file("src/app.py", size=2 * 1024 * 1024)) is False

    def test_binary(self) -> None:
        assert is_text_file("logo.png") is False
        assert should_process_file(make_file("static/logo.png", size=10)) is False

    @pytest.mark.parametrize(
        "path",
        ["node_modules/lodash/index.js", "dist/app.js", "static/app.min.js", "target/Main.java"],
    )
    def test_vendored_and_generated_paths(self, path: str) -> None:
        assert should_process_file(make_file(path, size=10)) is False

    def test_dockerfile_has_no_text_extension(self) -> None:
        """Extension-less files like Dockerfile are not fetched."""
        assert should_process_file(make_file("Dockerfile", size=10)) is False
