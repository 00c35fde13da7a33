"""Pipeline error types."""


class StageFailure(Exception):
    """A stage could not produce a value through any of its tiers.

    Attributes:
        stage: Stage name
        failures: One message per failed tier, in escalation order
    """

    def __init__(self, stage: str, message: str, failures: list[str] | None = None) -> None:
        self.stage = stage
        self.failures = list(failures or [])
        detail = f" ({'; '.join(self.failures)})" if self.failures else ""
        super().__init__(f"{message}{detail}")


class StateConflictError(ValueError):
    """A stage tried to move state backwards or overwrite a metadata key."""


class PipelineFailure(Exception):
    """A pipeline stopped because a stage recorded errors.

    Attributes:
        pipeline: Pipeline name
        stage: Name of the failed stage
        errors: Errors recorded by that stage
    """

    def __init__(self, pipeline: str, stage: str, errors: list[str]) -> None:
        self.pipeline = pipeline
        self.stage = stage
        self.errors = list(errors)
        super().__init__(f"{stage.replace('_', ' ').capitalize()} failed: {', '.join(errors)}")
