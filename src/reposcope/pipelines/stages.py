"""Stage execution over immutable pipeline state.

A pipeline is an ordered list of ``Stage`` objects folded over a
``StageState``. Each stage returns a metadata contribution; the executor
merges it into a new snapshot, or records the stage's error in the state
instead of raising. The fold stops at the first stage with errors and raises
``PipelineFailure``.

LLM-backed stages call ``escalate`` to try rich LLM, simplified LLM and
heuristic tiers in order.
"""

import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Generic, TypeVar

from reposcope.llm.client import StructuredLLMClient
from reposcope.llm.errors import LLMError
from reposcope.llm.prompts import StagePrompt
from reposcope.models.decoding import SchemaMismatchError
from reposcope.pipelines.context import RunContext
from reposcope.pipelines.errors import PipelineFailure, StageFailure, StateConflictError

T = TypeVar("T")

# =============================================================================
# State
# =============================================================================


@dataclass(frozen=True)
class StageState:
    """Immutable snapshot of a pipeline after a stage.

    Attributes:
        stage: Name of the last stage that ran ("init" before any)
        progress: Percentage 0-100, never decreasing
        errors: Errors accumulated so far
        metadata: Read-only mapping of stage outputs
    """

    stage: str = "init"
    progress: int = 0
    errors: tuple[str, ...] = ()
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.metadata, MappingProxyType):
            object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    def get(self, key: str, default: Any = None) -> Any:
        return self.metadata.get(key, default)

    def require(self, key: str) -> Any:
        """Return ``metadata[key]``.

        Raises:
            KeyError: If an earlier stage did not produce ``key``
        """
        if key not in self.metadata:
            raise KeyError(f"{key} not available")
        return self.metadata[key]

    def advance(
        self,
        stage: str,
        progress: int,
        contribution: Mapping[str, Any],
        overwrites: frozenset[str] = frozenset(),
    ) -> "StageState":
        """Return a new snapshot with ``contribution`` merged in.

        Args:
            stage: Stage that produced the contribution
            progress: Checkpoint reached
            contribution: New metadata entries
            overwrites: Keys the stage may replace

        Raises:
            StateConflictError: If progress would decrease or an existing key
                would be overwritten without being declared
        """
        if progress < self.progress:
            raise StateConflictError(
                f"Stage {stage} would move progress back from {self.progress} to {progress}"
            )
        conflicts = sorted(k for k in contribution if k in self.metadata and k not in overwrites)
        if conflicts:
            raise StateConflictError(
                f"Stage {stage} would overwrite metadata: {', '.join(conflicts)}"
            )
        return replace(
            self,
            stage=stage,
            progress=progress,
            metadata={**self.metadata, **contribution},
        )

    def with_error(self, stage: str, message: str) -> "StageState":
        """Return a new snapshot recording ``message`` for ``stage``."""
        return replace(self, stage=stage, errors=(*self.errors, message))


StageFunction = Callable[[RunContext, StageState], Awaitable[Mapping[str, Any]]]


@dataclass(frozen=True)
class Stage:
    """One step of a pipeline.

    Attributes:
        name: Stage name (also used in error messages)
        progress: Checkpoint reached when the stage succeeds
        run: Coroutine function of (ctx, state) returning the stage's
            metadata contribution
        overwrites: Metadata keys the stage is allowed to replace
    """

    name: str
    progress: int
    run: StageFunction
    overwrites: frozenset[str] = frozenset()


@dataclass(frozen=True)
class StageResult:
    state: StageState
    contribution: Mapping[str, Any]
    errors: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors


# =============================================================================
# Execution
# =============================================================================


def _describe(stage: str) -> str:
    return stage.replace("_", " ")


async def execute_stage(ctx: RunContext, stage: Stage, state: StageState) -> StageResult:
    """Run one stage, capturing any exception as a state error.

    Args:
        ctx: Run context for logging
        stage: Stage to run
        state: Current snapshot

    Returns:
        StageResult with the new snapshot, or the old one plus the error
    """
    ctx.stage_started(stage.name)
    try:
        contribution = await stage.run(ctx, state)
        new_state = state.advance(stage.name, stage.progress, contribution, stage.overwrites)
    except Exception as e:
        message = f"Failed to {_describe(stage.name)}: {e}"
        ctx.stage_failed(stage.name, message)
        return StageResult(state.with_error(stage.name, message), {}, (message,))

    ctx.stage_finished(stage.name, stage.progress)
    return StageResult(new_state, contribution)


async def run_stages(
    ctx: RunContext,
    pipeline: str,
    stages: list[Stage],
    state: StageState | None = None,
) -> StageState:
    """Fold ``stages`` over ``state``.

    A stage only runs if every prior stage produced zero errors.

    Returns:
        Final snapshot

    Raises:
        PipelineFailure: Naming the first stage that recorded errors
    """
    if state is None:
        state = StageState()
    for stage in stages:
        result = await execute_stage(ctx, stage, state)
        if not result.ok:
            raise PipelineFailure(pipeline, stage.name, list(result.errors))
        state = result.state
    return state


# =============================================================================
# Escalation
# =============================================================================


class Tier(Enum):
    """Which tier produced a stage value."""

    LLM = "llm"
    LLM_SIMPLIFIED = "llm_simplified"
    HEURISTIC = "heuristic"


@dataclass(frozen=True)
class Escalated(Generic[T]):
    """A stage value and the tier that produced it.

    Attributes:
        value: Decoded (or heuristic) result
        tier: Producing tier
        failures: Messages from tiers that failed before it
    """

    value: T
    tier: Tier
    failures: tuple[str, ...] = ()

    def source(self, stage: str) -> dict[str, str]:
        """Metadata entry recording the producing tier."""
        return {f"{stage}_source": self.tier.value}


Attempt = Callable[[], Awaitable[T]]


def llm_attempt(
    client: StructuredLLMClient,
    build: Callable[[], StagePrompt],
    decode: Callable[[Any], T],
) -> Attempt[T]:
    """Bind a prompt builder and a decoder into one LLM tier."""

    async def attempt() -> T:
        request = build()
        raw = await client.generate_structured_response(
            request.prompt,
            request.schema,
            request.system_prompt,
        )
        return decode(raw)

    return attempt


async def escalate(
    ctx: RunContext,
    stage: str,
    rich: Attempt[T],
    simplified: Attempt[T] | None = None,
    heuristic: Callable[[], T] | None = None,
) -> Escalated[T]:
    """Try rich LLM, then simplified LLM, then the heuristic.

    ``LLMError`` and ``SchemaMismatchError`` move to the next tier; any other
    exception propagates. The heuristic is called at most once.

    Args:
        ctx: Run context for logging
        stage: Stage name
        rich: Full-context LLM tier
        simplified: Reduced-context LLM tier, if any
        heuristic: Deterministic substitute, if any

    Returns:
        Escalated value with its producing tier

    Raises:
        StageFailure: If the heuristic raises, or every available tier failed
    """
    failures: list[str] = []

    for tier, attempt in ((Tier.LLM, rich), (Tier.LLM_SIMPLIFIED, simplified)):
        if attempt is None:
            continue
        try:
            value = await attempt()
        except (LLMError, SchemaMismatchError) as e:
            ctx.tier_failed(stage, tier.value, e)
            failures.append(f"{tier.value}: {e}")
            continue
        return Escalated(value, tier, tuple(failures))

    if heuristic is None:
        raise StageFailure(stage, "LLM analysis failed and no heuristic is available", failures)

    try:
        value = heuristic()
    except Exception as e:
        raise StageFailure(stage, f"Heuristic fallback failed: {e}", failures) from e

    ctx.log(
        logging.WARNING,
        "Using heuristic result for %s",
        stage,
        stage=stage,
        tier=Tier.HEURISTIC.value,
    )
    return Escalated(value, Tier.HEURISTIC, tuple(failures))
