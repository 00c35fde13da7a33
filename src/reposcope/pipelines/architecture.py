"""Architecture pipeline: patterns, tech stack, components and synthesis.

Stages (progress checkpoint):
1. detect_patterns (25): LLM, simplified LLM, then structural path rules
2. analyze_tech_stack (50): dependency manifest parsing
3. infer_components (75): directory grouping and entry-point patterns
4. generate_analysis (100): LLM, simplified LLM, then heuristic synthesis
"""

import logging
from typing import Any

from reposcope.analyzers.architecture import (
    detect_structural_patterns,
    identify_components,
    identify_entry_points,
    infer_tech_stack,
    synthesize_architecture,
)
from reposcope.llm.client import StructuredLLMClient
from reposcope.llm.prompts import build_architecture_prompt, build_patterns_prompt
from reposcope.models.analysis import RepositoryAnalysis
from reposcope.models.architecture import (
    ArchitectureAnalysis,
    ArchitectureInfo,
    ArchitectureSynthesis,
    PatternReport,
)
from reposcope.pipelines.context import RunContext
from reposcope.pipelines.stages import Stage, StageState, escalate, llm_attempt, run_stages

logger = logging.getLogger(__name__)


class ArchitecturePipeline:
    """Builds an ArchitectureAnalysis from a RepositoryAnalysis."""

    name = "architecture"

    def __init__(self, llm: StructuredLLMClient) -> None:
        self.llm = llm

    def stages(self) -> list[Stage]:
        return [
            Stage("detect_patterns", 25, self._detect_patterns),
            Stage("analyze_tech_stack", 50, self._analyze_tech_stack),
            Stage("infer_components", 75, self._infer_components),
            Stage("generate_analysis", 100, self._generate_analysis),
        ]

    async def analyze(
        self,
        repository_analysis: RepositoryAnalysis,
        ctx: RunContext | None = None,
    ) -> ArchitectureAnalysis:
        """Run all stages.

        Raises:
            PipelineFailure: If any stage fails
        """
        ctx = ctx or RunContext()
        initial = StageState(metadata={"repository_analysis": repository_analysis})
        state = await run_stages(ctx, self.name, self.stages(), initial)
        return state.require("architecture_analysis")

    async def _detect_patterns(self, ctx: RunContext, state: StageState) -> dict[str, Any]:
        analysis: RepositoryAnalysis = state.require("repository_analysis")
        stage = "detect_patterns"

        result = await escalate(
            ctx,
            stage,
            rich=llm_attempt(
                self.llm, lambda: build_patterns_prompt(analysis), PatternReport.from_dict
            ),
            simplified=llm_attempt(
                self.llm,
                lambda: build_patterns_prompt(analysis, simplified=True),
                PatternReport.from_dict,
            ),
            heuristic=lambda: PatternReport(
                patterns=detect_structural_patterns(analysis.file_structure.files),
                evidence=["Detected from directory and file naming conventions"],
            ),
        )

        logger.info("Detected patterns: %s", ", ".join(result.value.patterns) or "none")
        return {
            "detected_patterns": result.value.patterns,
            "pattern_evidence": result.value.evidence,
            **result.source(stage),
        }

    async def _analyze_tech_stack(self, ctx: RunContext, state: StageState) -> dict[str, Any]:
        analysis: RepositoryAnalysis = state.require("repository_analysis")
        tech_stack = infer_tech_stack(analysis.file_structure.files)
        if tech_stack.language == "Unknown" and analysis.repository.language:
            tech_stack.language = analysis.repository.language
        return {"tech_stack": tech_stack}

    async def _infer_components(self, ctx: RunContext, state: StageState) -> dict[str, Any]:
        files = state.require("repository_analysis").file_structure.files
        components = identify_components(files)
        entry_points = identify_entry_points(files)
        logger.info(
            "Identified %d components and %d entry points", len(components), len(entry_points)
        )
        return {"components": components, "entry_points": entry_points}

    async def _generate_analysis(self, ctx: RunContext, state: StageState) -> dict[str, Any]:
        analysis: RepositoryAnalysis = state.require("repository_analysis")
        patterns = state.require("detected_patterns")
        tech_stack = state.require("tech_stack")
        components = state.require("components")
        stage = "generate_analysis"

        def build(simplified: bool = False):
            return lambda: build_architecture_prompt(
                analysis, patterns, tech_stack, len(components), simplified=simplified
            )

        result = await escalate(
            ctx,
            stage,
            rich=llm_attempt(self.llm, build(), ArchitectureSynthesis.from_dict),
            simplified=llm_attempt(self.llm, build(True), ArchitectureSynthesis.from_dict),
            heuristic=lambda: synthesize_architecture(
                patterns, tech_stack, components, analysis.file_structure
            ),
        )
        synthesis = result.value

        architecture = ArchitectureAnalysis(
            repository=analysis.repository,
            architecture=ArchitectureInfo(
                type=synthesis.type,
                style=synthesis.style,
                layers=synthesis.layers,
                components=components,
                entry_points=state.require("entry_points"),
                tech_stack=tech_stack,
                patterns=synthesis.patterns or list(patterns),
                complexity=synthesis.complexity,
            ),
            recommendations=synthesis.recommendations,
            migration_complexity=synthesis.migration_complexity,
        )
        return {"architecture_analysis": architecture, **result.source(stage)}
