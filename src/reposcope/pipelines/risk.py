"""Risk pipeline: complexity, dependency risks, blockers and AI findings.

Stages (progress checkpoint):
1. analyze_complexity (25): per-file heuristic metrics and hotspots
2. analyze_dependency_risks (50): known-problem package rules
3. identify_migration_blockers (75): critical dependencies and code flow risks
4. ai_risk_analysis (90): LLM, simplified LLM, then heuristic findings
5. compile_assessment (100): risk items, vulnerabilities, score, actions
"""

import logging
from typing import Any

from reposcope.analyzers.complexity import build_complexity_metrics
from reposcope.analyzers.dependency_risk import (
    analyze_dependency_risks,
    calculate_overall_risk_score,
    generate_priority_actions,
    heuristic_risk_findings,
    identify_migration_blockers,
    slugify,
)
from reposcope.llm.client import StructuredLLMClient
from reposcope.llm.prompts import build_risk_prompt
from reposcope.models.analysis import RepositoryAnalysis
from reposcope.models.architecture import ArchitectureAnalysis
from reposcope.models.code_flow import CodeFlowAnalysis
from reposcope.models.risk import (
    ComplexityMetrics,
    DependencyRisk,
    IssueType,
    RiskAssessment,
    RiskCategories,
    RiskFindings,
    RiskItem,
    RiskLevel,
    SecurityVulnerability,
)
from reposcope.pipelines.context import RunContext
from reposcope.pipelines.stages import Stage, StageState, escalate, llm_attempt, run_stages

logger = logging.getLogger(__name__)


def build_risk_items(complexity: ComplexityMetrics, findings: RiskFindings) -> list[RiskItem]:
    """Complexity hotspots followed by LLM-identified risks."""
    items = [
        RiskItem(
            id=f"complexity-{hotspot.location.replace('/', '-')}",
            type="complexity",
            severity=RiskLevel(hotspot.severity.value),
            title=f"Complex file: {hotspot.location}",
            description=hotspot.description,
            location=hotspot.location,
            impact="High complexity makes modification and testing difficult",
            recommendation=hotspot.refactoring_suggestion,
            effort="high",
            migration_impact="significant",
        )
        for hotspot in complexity.complexity_hotspots
    ]
    items.extend(
        RiskItem(
            id=f"ai-risk-{slugify(risk.title)}",
            type=risk.type,
            severity=risk.severity,
            title=risk.title,
            description=risk.description,
            location=risk.location,
            impact=f"AI-identified risk: {risk.description}",
            recommendation=risk.recommendation,
        )
        for risk in findings.additional_risks
    )
    return items


def categorize_risks(items: list[RiskItem]) -> RiskCategories:
    return RiskCategories(
        high_risk=[i for i in items if i.severity in (RiskLevel.HIGH, RiskLevel.CRITICAL)],
        medium_risk=[i for i in items if i.severity == RiskLevel.MEDIUM],
        low_risk=[i for i in items if i.severity == RiskLevel.LOW],
    )


def build_vulnerabilities(
    dependency_risks: list[DependencyRisk],
    findings: RiskFindings,
) -> list[SecurityVulnerability]:
    """Vulnerable dependencies followed by security concerns."""
    vulnerabilities = []
    for dep in dependency_risks:
        if not any(issue.type == IssueType.VULNERABLE for issue in dep.issues):
            continue
        first_recommendation = dep.recommendations[0] if dep.recommendations else None
        vulnerabilities.append(
            SecurityVulnerability(
                id=f"vuln-{dep.name}",
                type="dependency",
                severity=dep.issues[0].severity,
                title=f"Vulnerable dependency: {dep.name}",
                description=dep.headline,
                location=f"Dependencies: {dep.name} {dep.current_version}",
                recommendation=(
                    first_recommendation.description
                    if first_recommendation
                    else "Update to secure version"
                ),
                patch_available=any(r.action == "update" for r in dep.recommendations),
                fix_version=first_recommendation.target_version if first_recommendation else None,
            )
        )

    for index, concern in enumerate(findings.security_concerns, start=1):
        vulnerabilities.append(
            SecurityVulnerability(
                id=f"security-{slugify(concern.type)}-{index}",
                type=concern.type,
                severity=concern.severity,
                title=f"Security concern: {concern.type}",
                description=concern.description,
                location=concern.location,
                recommendation=concern.mitigation,
            )
        )
    return vulnerabilities


class RiskPipeline:
    """Builds a RiskAssessment from the three earlier results."""

    name = "risk"

    def __init__(self, llm: StructuredLLMClient) -> None:
        self.llm = llm

    def stages(self) -> list[Stage]:
        return [
            Stage("analyze_complexity", 25, self._analyze_complexity),
            Stage("analyze_dependency_risks", 50, self._analyze_dependency_risks),
            Stage("identify_migration_blockers", 75, self._identify_migration_blockers),
            Stage("ai_risk_analysis", 90, self._ai_risk_analysis),
            Stage("compile_assessment", 100, self._compile_assessment),
        ]

    async def analyze(
        self,
        repository_analysis: RepositoryAnalysis,
        architecture_analysis: ArchitectureAnalysis,
        code_flow_analysis: CodeFlowAnalysis,
        ctx: RunContext | None = None,
    ) -> RiskAssessment:
        """Run all stages.

        Raises:
            PipelineFailure: If any stage fails
        """
        ctx = ctx or RunContext()
        initial = StageState(
            metadata={
                "repository_analysis": repository_analysis,
                "architecture_analysis": architecture_analysis,
                "code_flow_analysis": code_flow_analysis,
            }
        )
        state = await run_stages(ctx, self.name, self.stages(), initial)
        return state.require("risk_assessment")

    async def _analyze_complexity(self, ctx: RunContext, state: StageState) -> dict[str, Any]:
        files = state.require("repository_analysis").file_structure.files
        metrics = build_complexity_metrics(files)
        logger.info(
            "Analyzed complexity of %d files (%d hotspots)",
            len(metrics.file_complexity),
            len(metrics.complexity_hotspots),
        )
        return {"complexity_metrics": metrics}

    async def _analyze_dependency_risks(
        self, ctx: RunContext, state: StageState
    ) -> dict[str, Any]:
        structure = state.require("repository_analysis").file_structure
        risks = analyze_dependency_risks(structure)
        logger.info("Found %d dependency risks", len(risks))
        return {"dependency_risks": risks}

    async def _identify_migration_blockers(
        self, ctx: RunContext, state: StageState
    ) -> dict[str, Any]:
        code_flow: CodeFlowAnalysis = state.require("code_flow_analysis")
        blockers = identify_migration_blockers(
            state.require("dependency_risks"), code_flow.risk_factors
        )
        logger.info("Identified %d migration blockers", len(blockers))
        return {"migration_blockers": blockers}

    async def _ai_risk_analysis(self, ctx: RunContext, state: StageState) -> dict[str, Any]:
        analysis: RepositoryAnalysis = state.require("repository_analysis")
        architecture: ArchitectureAnalysis = state.require("architecture_analysis")
        code_flow: CodeFlowAnalysis = state.require("code_flow_analysis")
        complexity: ComplexityMetrics = state.require("complexity_metrics")
        dependency_risks: list[DependencyRisk] = state.require("dependency_risks")
        stage = "ai_risk_analysis"

        result = await escalate(
            ctx,
            stage,
            rich=llm_attempt(
                self.llm,
                lambda: build_risk_prompt(analysis, architecture, complexity, dependency_risks),
                RiskFindings.from_dict,
            ),
            simplified=llm_attempt(
                self.llm,
                lambda: build_risk_prompt(
                    analysis, architecture, complexity, dependency_risks, simplified=True
                ),
                RiskFindings.from_dict,
            ),
            heuristic=lambda: heuristic_risk_findings(
                analysis.file_structure,
                complexity,
                dependency_risks,
                bottlenecks=[b.description for b in code_flow.data_flow.bottlenecks],
                anti_patterns=[c.description for c in code_flow.dependencies.circular],
            ),
        )
        return {"risk_findings": result.value, **result.source(stage)}

    async def _compile_assessment(self, ctx: RunContext, state: StageState) -> dict[str, Any]:
        analysis: RepositoryAnalysis = state.require("repository_analysis")
        complexity: ComplexityMetrics = state.require("complexity_metrics")
        dependency_risks: list[DependencyRisk] = state.require("dependency_risks")
        blockers = state.require("migration_blockers")
        findings: RiskFindings = state.require("risk_findings")

        score = calculate_overall_risk_score(
            complexity.overall_complexity.cyclomatic_complexity, dependency_risks, blockers
        )
        assessment = RiskAssessment(
            repository=analysis.repository,
            risk_categories=categorize_risks(build_risk_items(complexity, findings)),
            vulnerabilities=build_vulnerabilities(dependency_risks, findings),
            complexity_metrics=complexity,
            dependency_risks=dependency_risks,
            migration_blockers=blockers,
            overall_risk_score=score,
            priority_actions=generate_priority_actions(
                dependency_risks, blockers, complexity.complexity_hotspots
            ),
            findings=findings,
        )
        logger.info("Overall risk score: %.1f", score)
        return {"risk_assessment": assessment}
