"""Heuristic code flow analysis.

Deterministic substitutes for the LLM stages of the code flow pipeline, plus
the dependency tree builder.
"""

import logging

from reposcope.models.analysis import Complexity
from reposcope.models.architecture import ArchitectureAnalysis, EntryPointType
from reposcope.models.code_flow import (
    AccessPattern,
    CircularDependency,
    CodeEntryPoint,
    CodeEntryPointType,
    DataFlowInfo,
    DataStore,
    DataStream,
    DataTransformation,
    DependencyReport,
    DependencyTreeNode,
    DependencyType,
    EntryPointReport,
    ExecutionPath,
    ExecutionPathType,
    ExecutionReport,
    ExecutionStep,
    InternalDependency,
    RecommendationReport,
    StepType,
    StoreType,
    Strength,
    StreamFrequency,
    TransformationType,
)
from reposcope.models.repository import FileCategory, FileStructure

logger = logging.getLogger(__name__)

MAX_CHAINED_FILES = 10

_CODE_ENTRY_TYPE = {
    EntryPointType.MAIN: CodeEntryPointType.MAIN,
    EntryPointType.API: CodeEntryPointType.API_ENDPOINT,
    EntryPointType.CLI: CodeEntryPointType.CLI_COMMAND,
    EntryPointType.WEB: CodeEntryPointType.API_ENDPOINT,
    EntryPointType.OTHER: CodeEntryPointType.OTHER,
}


def heuristic_entry_points(architecture: ArchitectureAnalysis) -> EntryPointReport:
    """Convert structural entry points from the architecture result."""
    entry_points = [
        CodeEntryPoint(
            file=ep.file,
            function=ep.file.rsplit("/", 1)[-1],
            type=_CODE_ENTRY_TYPE[ep.type],
            description=ep.description or "",
        )
        for ep in architecture.architecture.entry_points
    ]
    main = next(
        (ep.file for ep in entry_points if ep.type == CodeEntryPointType.MAIN),
        entry_points[0].file if entry_points else "",
    )
    return EntryPointReport(
        entry_points=entry_points,
        main_entry_point=main,
        analysis_notes="Entry points derived from file structure patterns",
    )


def heuristic_execution_paths(entry_points: list[CodeEntryPoint]) -> ExecutionReport:
    """One single-step path per entry point."""
    paths = [
        ExecutionPath(
            id=f"path_{index}",
            name=f"{ep.function} execution path",
            type=ExecutionPathType.MAIN if ep.type == CodeEntryPointType.MAIN else ExecutionPathType.OTHER,
            start_point=ep.file,
            end_point=ep.file,
            steps=[
                ExecutionStep(
                    id=f"step_{index}",
                    file=ep.file,
                    function=ep.function,
                    type=StepType.FUNCTION_CALL,
                    line_number=1,
                    description=f"Entry point: {ep.function}",
                )
            ],
            complexity=Complexity.MEDIUM,
            description=f"Basic execution path for {ep.function}",
        )
        for index, ep in enumerate(entry_points)
    ]
    return ExecutionReport(
        execution_paths=paths,
        cyclomatic_complexity=min(len(entry_points) * 2, 10),
        flow_patterns=["sequential"],
    )


def heuristic_dependencies(file_structure: FileStructure) -> DependencyReport:
    """Chain the first source files to each other, skipping self edges."""
    sources = file_structure.in_category(FileCategory.SOURCE)
    internal = []
    for index, file in enumerate(sources[:MAX_CHAINED_FILES]):
        target = sources[min(index + 1, len(sources) - 1)]
        if target.path == file.path:
            continue
        internal.append(
            InternalDependency(
                source=file.path,
                target=target.path,
                type=DependencyType.IMPORT,
                strength=Strength.MEDIUM,
            )
        )
    return DependencyReport(
        internal=internal,
        risk_level=Complexity.MEDIUM,
        analysis_notes="Minimal dependency analysis due to LLM limitations",
    )


def heuristic_data_flow(databases: list[str]) -> DataFlowInfo:
    """Single generic stream; stores from detected databases or one file store."""
    if databases:
        stores = [
            DataStore(
                name=database,
                type=StoreType.DATABASE,
                access_pattern=AccessPattern.READ_WRITE,
                data_types=["records"],
                connected_components=["main application"],
            )
            for database in databases
        ]
    else:
        stores = [
            DataStore(
                name="Main storage",
                type=StoreType.FILE,
                access_pattern=AccessPattern.READ_WRITE,
                data_types=["mixed"],
                connected_components=["main application"],
            )
        ]

    return DataFlowInfo(
        data_streams=[
            DataStream(
                id="stream_1",
                name="Basic data flow",
                source="input",
                destination="output",
                data_type="mixed",
                volume=Complexity.MEDIUM,
                frequency=StreamFrequency.BATCH,
                transformations=["basic processing"],
            )
        ],
        data_stores=stores,
        transformations=[
            DataTransformation(
                id="transform_1",
                name="Basic transformation",
                input="raw data",
                output="processed data",
                transformation_type=TransformationType.FORMAT,
                complexity=Complexity.MEDIUM,
                location="main module",
            )
        ],
        flow_patterns=["sequential", "batch processing"],
    )


def heuristic_recommendations(
    circular_count: int,
    entry_point_count: int,
) -> RecommendationReport:
    """Generic modernization advice; complexity from cycles and entry points."""
    if circular_count > 0:
        complexity = Complexity.HIGH
    elif entry_point_count > 5:
        complexity = Complexity.MEDIUM
    else:
        complexity = Complexity.LOW

    return RecommendationReport(
        recommendations=[
            "Review code organization and modular structure",
            "Consider implementing clearer separation of concerns",
            "Evaluate current dependency management practices",
            "Plan for gradual modernization of legacy components",
        ],
        complexity=complexity,
        priority_actions=[
            "Identify and resolve circular dependencies",
            "Improve code documentation",
            "Establish clear module boundaries",
        ],
        risk_factors=[
            "Complex interdependencies",
            "Potential technical debt",
            "Legacy code patterns",
        ],
    )


def build_dependency_tree(
    dependencies: list[InternalDependency],
) -> tuple[list[DependencyTreeNode], list[CircularDependency]]:
    """Build an acyclic dependency tree.

    An edge is dropped when its reverse was already added or when it is
    flagged circular. Each dropped edge is returned as a CircularDependency
    with ``detected_by="dependency_tree"`` so it is not lost.

    Args:
        dependencies: Internal file-to-file dependencies

    Returns:
        Tuple of (tree nodes in first-seen order, dropped edges)
    """
    nodes: dict[str, DependencyTreeNode] = {}
    for dep in dependencies:
        for name in (dep.source, dep.target):
            if name not in nodes:
                nodes[name] = DependencyTreeNode(name=name, is_circular=dep.is_circular)

    processed: set[tuple[str, str]] = set()
    dropped: list[CircularDependency] = []

    for dep in dependencies:
        reverse_seen = (dep.target, dep.source) in processed
        if reverse_seen or dep.is_circular:
            reason = "reverse edge already present" if reverse_seen else "flagged as circular"
            dropped.append(
                CircularDependency(
                    id=f"tree-{len(dropped) + 1}",
                    cycle=[dep.source, dep.target],
                    severity=Complexity.MEDIUM,
                    description=f"Edge {dep.source} -> {dep.target} omitted from tree ({reason})",
                    suggestions=["Break the cycle by extracting shared code into a separate module"],
                    detected_by="dependency_tree",
                )
            )
            continue
        nodes[dep.source].children.append(dep.target)
        processed.add((dep.source, dep.target))

    if dropped:
        logger.info("Dependency tree omitted %d circular edges", len(dropped))

    return list(nodes.values()), dropped


def _cycle_edges(cycle: list[str]) -> set[frozenset[str]]:
    # consecutive members, wrapping from the last back to the first
    return {
        frozenset((a, b)) for a, b in zip(cycle, [*cycle[1:], *cycle[:1]]) if a != b
    }


def merge_circular(
    reported: list[CircularDependency], dropped: list[CircularDependency]
) -> list[CircularDependency]:
    """Append tree-dropped edges whose file pair no reported cycle already covers."""
    covered: set[frozenset[str]] = set()
    for circular in reported:
        covered |= _cycle_edges(circular.cycle)

    merged = list(reported)
    for circular in dropped:
        pair = frozenset(circular.cycle)
        if pair in covered:
            continue
        covered.add(pair)
        merged.append(circular)
    return merged
