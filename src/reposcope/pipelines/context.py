"""Per-run context: run id, elapsed time and structured stage logging."""

import logging
import time
import uuid
from typing import Any

from reposcope.utils.logging import RepoScopeLogger, get_logger


def new_run_id() -> str:
    """Return an opaque run identifier."""
    return uuid.uuid4().hex


class RunContext:
    """State shared by all pipelines of one run.

    Every record it emits carries ``run_id``, ``stage`` and ``elapsed`` so
    concurrent runs can be told apart in JSON logs.
    """

    def __init__(self, run_id: str | None = None, logger: RepoScopeLogger | None = None) -> None:
        self.run_id = run_id or new_run_id()
        self.logger = logger or get_logger("reposcope.run")
        self.step = 0
        self._started = time.monotonic()

    def elapsed(self) -> float:
        """Seconds since the context was created."""
        return round(time.monotonic() - self._started, 3)

    def log(
        self,
        level: int,
        msg: str,
        *args: Any,
        stage: str | None = None,
        **fields: Any,
    ) -> None:
        self.logger.structured(
            level,
            msg,
            *args,
            run_id=self.run_id,
            stage=stage,
            elapsed=self.elapsed(),
            **fields,
        )

    def stage_started(self, stage: str) -> None:
        self.step += 1
        self.log(logging.INFO, "Stage %s started", stage, stage=stage, step=self.step)

    def stage_finished(self, stage: str, progress: int) -> None:
        self.log(logging.INFO, "Stage %s finished", stage, stage=stage, progress=progress)

    def stage_failed(self, stage: str, message: str) -> None:
        self.log(logging.ERROR, "Stage %s failed: %s", stage, message, stage=stage)

    def tier_failed(self, stage: str, tier: str, error: Exception) -> None:
        self.log(
            logging.WARNING,
            "%s tier failed for %s: %s",
            tier,
            stage,
            error,
            stage=stage,
            tier=tier,
            error_type=type(error).__name__,
        )
