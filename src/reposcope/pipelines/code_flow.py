"""Code flow pipeline: entry points, execution paths, dependencies, data flow.

Stages (progress checkpoint):
1. analyze_entry_points (20)
2. analyze_execution_paths (40): skipped when there are no entry points
3. analyze_dependencies (60)
4. analyze_data_flow (80)
5. generate_recommendations (90)
6. finalize_analysis (100): assemble the result and the dependency tree

Stages 1 to 5 escalate rich LLM, simplified LLM, then the heuristics in
``reposcope.analyzers.code_flow``.
"""

import logging
from typing import Any

from reposcope.analyzers.code_flow import (
    build_dependency_tree,
    heuristic_data_flow,
    heuristic_dependencies,
    heuristic_entry_points,
    heuristic_execution_paths,
    heuristic_recommendations,
    merge_circular,
)
from reposcope.llm.client import StructuredLLMClient
from reposcope.llm.prompts import (
    build_data_flow_prompt,
    build_dependencies_prompt,
    build_entry_points_prompt,
    build_execution_paths_prompt,
    build_recommendations_prompt,
)
from reposcope.models.analysis import RepositoryAnalysis
from reposcope.models.architecture import ArchitectureAnalysis
from reposcope.models.code_flow import (
    CodeFlowAnalysis,
    CodeFlowInfo,
    DataFlowInfo,
    DependencyInfo,
    DependencyReport,
    EntryPointReport,
    ExecutionReport,
    RecommendationReport,
)
from reposcope.pipelines.context import RunContext
from reposcope.pipelines.stages import Stage, StageState, escalate, llm_attempt, run_stages

logger = logging.getLogger(__name__)

SKIPPED = "skipped"


class CodeFlowPipeline:
    """Builds a CodeFlowAnalysis from the repository and architecture results."""

    name = "code_flow"

    def __init__(self, llm: StructuredLLMClient) -> None:
        self.llm = llm

    def stages(self) -> list[Stage]:
        return [
            Stage("analyze_entry_points", 20, self._analyze_entry_points),
            Stage("analyze_execution_paths", 40, self._analyze_execution_paths),
            Stage("analyze_dependencies", 60, self._analyze_dependencies),
            Stage("analyze_data_flow", 80, self._analyze_data_flow),
            Stage("generate_recommendations", 90, self._generate_recommendations),
            Stage("finalize_analysis", 100, self._finalize_analysis),
        ]

    async def analyze(
        self,
        repository_analysis: RepositoryAnalysis,
        architecture_analysis: ArchitectureAnalysis,
        ctx: RunContext | None = None,
    ) -> CodeFlowAnalysis:
        """Run all stages.

        Raises:
            PipelineFailure: If any stage fails
        """
        ctx = ctx or RunContext()
        initial = StageState(
            metadata={
                "repository_analysis": repository_analysis,
                "architecture_analysis": architecture_analysis,
            }
        )
        state = await run_stages(ctx, self.name, self.stages(), initial)
        return state.require("code_flow_analysis")

    @staticmethod
    def _inputs(state: StageState) -> tuple[RepositoryAnalysis, ArchitectureAnalysis]:
        return state.require("repository_analysis"), state.require("architecture_analysis")

    async def _analyze_entry_points(self, ctx: RunContext, state: StageState) -> dict[str, Any]:
        analysis, architecture = self._inputs(state)
        stage = "analyze_entry_points"

        result = await escalate(
            ctx,
            stage,
            rich=llm_attempt(
                self.llm,
                lambda: build_entry_points_prompt(analysis, architecture),
                EntryPointReport.from_dict,
            ),
            simplified=llm_attempt(
                self.llm,
                lambda: build_entry_points_prompt(analysis, architecture, simplified=True),
                EntryPointReport.from_dict,
            ),
            heuristic=lambda: heuristic_entry_points(architecture),
        )
        logger.info("Found %d code entry points", len(result.value.entry_points))
        return {"entry_point_report": result.value, **result.source(stage)}

    async def _analyze_execution_paths(self, ctx: RunContext, state: StageState) -> dict[str, Any]:
        analysis, architecture = self._inputs(state)
        entry_points = state.require("entry_point_report").entry_points
        stage = "analyze_execution_paths"

        if not entry_points:
            logger.info("No entry points found, skipping execution path analysis")
            return {"execution_report": ExecutionReport(), f"{stage}_source": SKIPPED}

        result = await escalate(
            ctx,
            stage,
            rich=llm_attempt(
                self.llm,
                lambda: build_execution_paths_prompt(analysis, architecture, entry_points),
                ExecutionReport.from_dict,
            ),
            simplified=llm_attempt(
                self.llm,
                lambda: build_execution_paths_prompt(
                    analysis, architecture, entry_points, simplified=True
                ),
                ExecutionReport.from_dict,
            ),
            heuristic=lambda: heuristic_execution_paths(entry_points),
        )
        return {"execution_report": result.value, **result.source(stage)}

    async def _analyze_dependencies(self, ctx: RunContext, state: StageState) -> dict[str, Any]:
        analysis, architecture = self._inputs(state)
        stage = "analyze_dependencies"

        result = await escalate(
            ctx,
            stage,
            rich=llm_attempt(
                self.llm,
                lambda: build_dependencies_prompt(analysis, architecture),
                DependencyReport.from_dict,
            ),
            simplified=llm_attempt(
                self.llm,
                lambda: build_dependencies_prompt(analysis, architecture, simplified=True),
                DependencyReport.from_dict,
            ),
            heuristic=lambda: heuristic_dependencies(analysis.file_structure),
        )
        return {"dependency_report": result.value, **result.source(stage)}

    async def _analyze_data_flow(self, ctx: RunContext, state: StageState) -> dict[str, Any]:
        analysis, architecture = self._inputs(state)
        stage = "analyze_data_flow"

        result = await escalate(
            ctx,
            stage,
            rich=llm_attempt(
                self.llm,
                lambda: build_data_flow_prompt(analysis, architecture),
                DataFlowInfo.from_dict,
            ),
            simplified=llm_attempt(
                self.llm,
                lambda: build_data_flow_prompt(analysis, architecture, simplified=True),
                DataFlowInfo.from_dict,
            ),
            heuristic=lambda: heuristic_data_flow(
                architecture.architecture.tech_stack.databases
            ),
        )
        return {"data_flow": result.value, **result.source(stage)}

    async def _generate_recommendations(
        self, ctx: RunContext, state: StageState
    ) -> dict[str, Any]:
        analysis, architecture = self._inputs(state)
        entry_points = state.require("entry_point_report").entry_points
        execution: ExecutionReport = state.require("execution_report")
        dependencies: DependencyReport = state.require("dependency_report")
        data_flow: DataFlowInfo = state.require("data_flow")
        stage = "generate_recommendations"

        def build(simplified: bool = False):
            return lambda: build_recommendations_prompt(
                analysis,
                architecture,
                entry_point_count=len(entry_points),
                execution_path_count=len(execution.execution_paths),
                cyclomatic_complexity=execution.cyclomatic_complexity,
                circular_count=len(dependencies.circular),
                bottleneck_count=len(data_flow.bottlenecks),
                simplified=simplified,
            )

        result = await escalate(
            ctx,
            stage,
            rich=llm_attempt(self.llm, build(), RecommendationReport.from_dict),
            simplified=llm_attempt(self.llm, build(True), RecommendationReport.from_dict),
            heuristic=lambda: heuristic_recommendations(
                circular_count=len(dependencies.circular),
                entry_point_count=len(entry_points),
            ),
        )
        return {"recommendation_report": result.value, **result.source(stage)}

    async def _finalize_analysis(self, ctx: RunContext, state: StageState) -> dict[str, Any]:
        analysis, _ = self._inputs(state)
        entry_report: EntryPointReport = state.require("entry_point_report")
        execution: ExecutionReport = state.require("execution_report")
        dependencies: DependencyReport = state.require("dependency_report")
        recommendations: RecommendationReport = state.require("recommendation_report")

        tree, dropped = build_dependency_tree(dependencies.internal)

        result = CodeFlowAnalysis(
            repository=analysis.repository,
            code_flow=CodeFlowInfo(
                execution_paths=execution.execution_paths,
                entry_points=entry_report.entry_points,
                call_graphs=execution.call_graphs,
                module_interactions=execution.module_interactions,
                cyclomatic_complexity=execution.cyclomatic_complexity,
                flow_patterns=execution.flow_patterns,
            ),
            dependencies=DependencyInfo(
                internal=dependencies.internal,
                external=dependencies.external,
                circular=merge_circular(dependencies.circular, dropped),
                dependency_tree=tree,
                risk_level=dependencies.risk_level,
            ),
            data_flow=state.require("data_flow"),
            recommendations=recommendations.recommendations,
            complexity=recommendations.complexity,
            priority_actions=recommendations.priority_actions,
            risk_factors=recommendations.risk_factors,
        )
        return {"code_flow_analysis": result}
