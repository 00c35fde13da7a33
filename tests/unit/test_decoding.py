"""Unit tests for typed decoding of LLM answers."""

import json

import pytest

from reposcope.models.analysis import Complexity, RepositorySummary
from reposcope.models.architecture import ArchitectureSynthesis, ArchitectureType, PatternReport
from reposcope.models.code_flow import CodeEntryPointType, EntryPointReport, ExecutionReport
from reposcope.models.decoding import (
    SchemaMismatchError,
    get_enum,
    get_int,
    get_str_list,
    to_plain,
)
from reposcope.models.risk import RiskFindings, RiskLevel


class TestFieldHelpers:
    """Tests for the individual field readers."""

    def test_enum_is_case_insensitive(self) -> None:
        assert get_enum({"c": " HIGH "}, "c", Complexity) == Complexity.HIGH

    def test_unknown_enum_value(self) -> None:
        with pytest.raises(SchemaMismatchError) as exc_info:
            get_enum({"c": "extreme"}, "c", Complexity, "$.summary")

        assert exc_info.value.path == "$.summary.c"
        assert "low | medium | high" in str(exc_info.value)

    def test_missing_field_uses_default(self) -> None:
        assert get_str_list({}, "items", default=[]) == []

    def test_null_counts_as_missing(self) -> None:
        with pytest.raises(SchemaMismatchError, match="missing required field"):
            get_str_list({"items": None}, "items")

    def test_non_string_list_item_rejected(self) -> None:
        with pytest.raises(SchemaMismatchError) as exc_info:
            get_str_list({"items": ["a", 2]}, "items")

        assert exc_info.value.path == "$.items[1]"

    def test_integral_float_accepted_as_int(self) -> None:
        assert get_int({"n": 7.0}, "n") == 7

    def test_bool_is_not_int(self) -> None:
        with pytest.raises(SchemaMismatchError):
            get_int({"n": True}, "n")


class TestModelDecoders:
    """Tests for from_dict on stage answers."""

    def test_repository_summary(self) -> None:
        summary = RepositorySummary.from_dict(
            {
                "purpose": "Online shop",
                "main_technologies": ["JavaScript"],
                "project_type": "web application",
                "complexity": "medium",
            }
        )

        assert summary.purpose == "Online shop"
        assert summary.complexity == Complexity.MEDIUM
        assert summary.insights == []

    def test_summary_requires_object(self) -> None:
        with pytest.raises(SchemaMismatchError, match="expected object"):
            RepositorySummary.from_dict(["not", "an", "object"])

    def test_pattern_report_requires_patterns(self) -> None:
        with pytest.raises(SchemaMismatchError) as exc_info:
            PatternReport.from_dict({"evidence": ["x"]})

        assert exc_info.value.path == "$.patterns"

    def test_architecture_synthesis(self) -> None:
        synthesis = ArchitectureSynthesis.from_dict(
            {
                "type": "layered",
                "style": "MVC",
                "complexity": "low",
                "migration_complexity": "medium",
            }
        )

        assert synthesis.type == ArchitectureType.LAYERED
        assert synthesis.layers == []
        assert synthesis.complexity == Complexity.LOW

    def test_nested_error_path(self) -> None:
        """Errors inside list items report the item path."""
        with pytest.raises(SchemaMismatchError) as exc_info:
            EntryPointReport.from_dict(
                {"entry_points": [{"file": "src/index.js", "function": "main", "type": "lambda"}]}
            )

        assert exc_info.value.path == "$.entry_points[0].type"

    def test_entry_point_report(self) -> None:
        report = EntryPointReport.from_dict(
            {
                "entry_points": [
                    {"file": "src/index.js", "function": "start", "type": "main"},
                ],
                "main_entry_point": "src/index.js",
            }
        )

        assert report.entry_points[0].type == CodeEntryPointType.MAIN
        assert report.main_entry_point == "src/index.js"

    def test_execution_report_defaults(self) -> None:
        report = ExecutionReport.from_dict({"execution_paths": []})

        assert report.cyclomatic_complexity == 0
        assert report.call_graphs == []

    def test_risk_findings(self) -> None:
        findings = RiskFindings.from_dict(
            {
                "additional_risks": [
                    {
                        "type": "security",
                        "severity": "critical",
                        "title": "Hardcoded credentials",
                        "description": "Password in config",
                    }
                ],
                "quality_issues": ["Long functions"],
            }
        )

        assert findings.additional_risks[0].severity == RiskLevel.CRITICAL
        assert findings.security_concerns == []
        assert findings.quality_issues == ["Long functions"]


class TestToPlain:
    """Tests for JSON-compatible conversion."""

    def test_enums_and_dataclasses(self) -> None:
        synthesis = ArchitectureSynthesis(
            type=ArchitectureType.MONOLITH,
            style="plain",
            complexity=Complexity.HIGH,
        )

        plain = to_plain({"result": synthesis, "levels": (Complexity.LOW,)})

        assert plain["result"]["type"] == "monolith"
        assert plain["levels"] == ["low"]
        json.dumps(plain)
