"""Unit tests for stage execution and tier escalation."""

import asyncio
from typing import Any

import pytest

from reposcope.llm.client import StructuredLLMClient
from reposcope.llm.errors import ProviderError
from reposcope.llm.prompts import StagePrompt
from reposcope.models.architecture import PatternReport
from reposcope.pipelines.context import RunContext
from reposcope.pipelines.errors import PipelineFailure, StageFailure, StateConflictError
from reposcope.pipelines.stages import (
    Stage,
    StageState,
    Tier,
    escalate,
    execute_stage,
    llm_attempt,
    run_stages,
)
from tests.fixtures import ScriptedProvider


def _prompt(text: str = "prompt") -> StagePrompt:
    return StagePrompt(prompt=text, schema="{patterns: string[]}", system_prompt="Architect")


class TestStageState:
    """Tests for the immutable state snapshot."""

    def test_metadata_is_read_only(self) -> None:
        state = StageState(metadata={"a": 1})

        with pytest.raises(TypeError):
            state.metadata["b"] = 2  # type: ignore[index]

    def test_advance_returns_new_snapshot(self) -> None:
        state = StageState(metadata={"a": 1})

        new_state = state.advance("second", 50, {"b": 2})

        assert new_state.stage == "second"
        assert new_state.progress == 50
        assert dict(new_state.metadata) == {"a": 1, "b": 2}
        assert "b" not in state.metadata

    def test_progress_cannot_decrease(self) -> None:
        state = StageState(progress=50)

        with pytest.raises(StateConflictError, match="progress back"):
            state.advance("late", 25, {})

    def test_undeclared_overwrite_rejected(self) -> None:
        state = StageState(metadata={"a": 1})

        with pytest.raises(StateConflictError, match="overwrite metadata: a"):
            state.advance("next", 10, {"a": 2})

    def test_declared_overwrite_allowed(self) -> None:
        state = StageState(metadata={"a": 1})

        assert state.advance("next", 10, {"a": 2}, frozenset({"a"})).require("a") == 2

    def test_require_missing_key(self) -> None:
        with pytest.raises(KeyError, match="files not available"):
            StageState().require("files")


class TestExecuteStage:
    """Tests for running a single stage."""

    def test_exception_becomes_state_error(self) -> None:
        async def broken(ctx: RunContext, state: StageState) -> dict[str, Any]:
            raise RuntimeError("network down")

        result = asyncio.run(
            execute_stage(RunContext(), Stage("fetch_repository", 25, broken), StageState())
        )

        assert not result.ok
        assert result.errors == ("Failed to fetch repository: network down",)
        assert result.state.errors == result.errors
        assert result.state.progress == 0

    def test_contribution_is_merged(self) -> None:
        async def produce(ctx: RunContext, state: StageState) -> dict[str, Any]:
            return {"count": state.require("seed") + 1}

        result = asyncio.run(
            execute_stage(
                RunContext(), Stage("count", 40, produce), StageState(metadata={"seed": 1})
            )
        )

        assert result.ok
        assert result.state.require("count") == 2
        assert result.state.progress == 40


class TestRunStages:
    """Tests for folding stages into a pipeline."""

    def test_stops_at_first_failure(self) -> None:
        ran: list[str] = []

        def stage(name: str, fail: bool = False):
            async def run(ctx: RunContext, state: StageState) -> dict[str, Any]:
                ran.append(name)
                if fail:
                    raise ValueError("bad input")
                return {name: True}

            return run

        stages = [
            Stage("first", 25, stage("first")),
            Stage("second_step", 50, stage("second_step", fail=True)),
            Stage("third", 75, stage("third")),
        ]

        with pytest.raises(PipelineFailure) as exc_info:
            asyncio.run(run_stages(RunContext(), "demo", stages))

        assert ran == ["first", "second_step"]
        assert exc_info.value.pipeline == "demo"
        assert exc_info.value.stage == "second_step"
        assert exc_info.value.errors == ["Failed to second step: bad input"]
        assert str(exc_info.value).startswith("Second step failed:")

    def test_progress_is_monotonic(self) -> None:
        seen: list[int] = []

        async def record(ctx: RunContext, state: StageState) -> dict[str, Any]:
            seen.append(state.progress)
            return {}

        stages = [Stage(f"s{p}", p, record) for p in (25, 50, 75, 100)]
        final = asyncio.run(run_stages(RunContext(), "demo", stages))

        assert seen == [0, 25, 50, 75]
        assert final.progress == 100


class TestEscalate:
    """Tests for rich, simplified and heuristic tiers."""

    def test_rich_tier_wins(self) -> None:
        client = StructuredLLMClient(ScriptedProvider(['{"patterns": ["MVC"]}']))

        result = asyncio.run(
            escalate(
                RunContext(),
                "detect_patterns",
                rich=llm_attempt(client, _prompt, PatternReport.from_dict),
                heuristic=lambda: PatternReport(patterns=["never"]),
            )
        )

        assert result.tier == Tier.LLM
        assert result.value.patterns == ["MVC"]
        assert result.source("detect_patterns") == {"detect_patterns_source": "llm"}

    def test_schema_mismatch_moves_to_simplified(self) -> None:
        provider = ScriptedProvider(['{"evidence": []}', '{"patterns": ["Layered"]}'])
        client = StructuredLLMClient(provider)

        result = asyncio.run(
            escalate(
                RunContext(),
                "detect_patterns",
                rich=llm_attempt(client, lambda: _prompt("rich"), PatternReport.from_dict),
                simplified=llm_attempt(client, lambda: _prompt("small"), PatternReport.from_dict),
            )
        )

        assert result.tier == Tier.LLM_SIMPLIFIED
        assert result.value.patterns == ["Layered"]
        assert [call[0] for call in provider.calls] == ["rich", "small"]
        assert "$.patterns" in result.failures[0]

    def test_heuristic_called_once_after_llm_tiers(self, no_sleep: list[float]) -> None:
        """Each LLM tier makes at most retries+1 calls, then the heuristic runs once."""
        provider = ScriptedProvider([ProviderError("down")] * 10)
        client = StructuredLLMClient(provider, max_retries=2)
        heuristic_calls: list[int] = []

        def heuristic() -> PatternReport:
            heuristic_calls.append(1)
            return PatternReport(patterns=["MVC"])

        result = asyncio.run(
            escalate(
                RunContext(),
                "detect_patterns",
                rich=llm_attempt(client, _prompt, PatternReport.from_dict),
                simplified=llm_attempt(client, _prompt, PatternReport.from_dict),
                heuristic=heuristic,
            )
        )

        assert result.tier == Tier.HEURISTIC
        assert heuristic_calls == [1]
        assert len(provider.calls) == 6
        assert len(result.failures) == 2

    def test_no_heuristic_raises_stage_failure(self) -> None:
        client = StructuredLLMClient(None)

        with pytest.raises(StageFailure) as exc_info:
            asyncio.run(
                escalate(
                    RunContext(),
                    "generate_summary",
                    rich=llm_attempt(client, _prompt, PatternReport.from_dict),
                    simplified=llm_attempt(client, _prompt, PatternReport.from_dict),
                )
            )

        assert exc_info.value.stage == "generate_summary"
        assert len(exc_info.value.failures) == 2
        assert "no heuristic" in str(exc_info.value)

    def test_failing_heuristic_raises_stage_failure(self) -> None:
        client = StructuredLLMClient(None)

        def heuristic() -> PatternReport:
            raise ZeroDivisionError("division by zero")

        with pytest.raises(StageFailure, match="Heuristic fallback failed: division by zero"):
            asyncio.run(
                escalate(
                    RunContext(),
                    "detect_patterns",
                    rich=llm_attempt(client, _prompt, PatternReport.from_dict),
                    heuristic=heuristic,
                )
            )

    def test_unexpected_errors_propagate(self) -> None:
        """Only LLM and schema errors trigger escalation."""

        async def broken() -> PatternReport:
            raise KeyError("repository_analysis")

        with pytest.raises(KeyError):
            asyncio.run(
                escalate(
                    RunContext(),
                    "detect_patterns",
                    rich=broken,
                    heuristic=lambda: PatternReport(patterns=[]),
                )
            )


class TestRunContext:
    """Tests for the per-run context."""

    def test_run_ids_are_unique(self) -> None:
        assert RunContext().run_id != RunContext().run_id

    def test_stage_records_carry_run_fields(self, caplog: pytest.LogCaptureFixture) -> None:
        ctx = RunContext("run-123")

        with caplog.at_level("INFO", logger="reposcope"):
            ctx.stage_started("analyze_files")

        record = next(r for r in caplog.records if "analyze_files" in r.getMessage())
        assert record.extra_data["run_id"] == "run-123"
        assert record.extra_data["stage"] == "analyze_files"
        assert record.extra_data["step"] == 1
        assert "elapsed" in record.extra_data
