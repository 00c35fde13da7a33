"""Analysis pipelines.

Each pipeline folds an ordered list of stages over an immutable StageState:
- RepositoryPipeline: GitHub metadata, file listing, categorization, summary
- ArchitecturePipeline: patterns, tech stack, components, synthesis
- CodeFlowPipeline: entry points, execution paths, dependencies, data flow
- RiskPipeline: complexity, dependency risks, blockers, findings, score

AnalysisCoordinator runs them in order for one repository URL.
"""

from reposcope.pipelines.architecture import ArchitecturePipeline
from reposcope.pipelines.code_flow import CodeFlowPipeline
from reposcope.pipelines.context import RunContext
from reposcope.pipelines.coordinator import AnalysisCoordinator, RunStore
from reposcope.pipelines.errors import PipelineFailure, StageFailure, StateConflictError
from reposcope.pipelines.repository import RepositoryPipeline
from reposcope.pipelines.risk import RiskPipeline
from reposcope.pipelines.stages import (
    Escalated,
    Stage,
    StageResult,
    StageState,
    Tier,
    escalate,
    execute_stage,
    run_stages,
)

__all__ = [
    "AnalysisCoordinator",
    "ArchitecturePipeline",
    "CodeFlowPipeline",
    "Escalated",
    "PipelineFailure",
    "RepositoryPipeline",
    "RiskPipeline",
    "RunContext",
    "RunStore",
    "Stage",
    "StageFailure",
    "StageResult",
    "StageState",
    "StateConflictError",
    "Tier",
    "escalate",
    "execute_stage",
    "run_stages",
]
