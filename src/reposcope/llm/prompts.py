"""LLM prompt templates for the analysis stages.

Every LLM-backed stage has a rich prompt and a simplified one. The simplified
variant sends less context and asks for a smaller JSON shape that still
decodes into the same result type, so the stage can retry cheaply before
falling back to heuristics.

Schemas are human-readable JSON descriptions; the structured client appends
them to the system prompt.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from reposcope.models.analysis import Complexity
from reposcope.models.architecture import ArchitectureType
from reposcope.models.code_flow import (
    AccessPattern,
    BottleneckType,
    CallType,
    CodeEntryPointType,
    DependencyType,
    ExecutionPathType,
    ExternalDependencyType,
    InteractionType,
    StepType,
    StoreType,
    StreamFrequency,
    Strength,
    TransformationType,
)
from reposcope.models.repository import FileCategory
from reposcope.models.risk import RiskLevel

if TYPE_CHECKING:
    from reposcope.models.analysis import RepositoryAnalysis
    from reposcope.models.architecture import ArchitectureAnalysis, TechStack
    from reposcope.models.code_flow import CodeEntryPoint
    from reposcope.models.repository import FileStructure, Repository
    from reposcope.models.risk import ComplexityMetrics, DependencyRisk


@dataclass(frozen=True)
class StagePrompt:
    """One fully built request for a stage attempt.

    Attributes:
        prompt: User prompt
        schema: JSON shape description sent with the system prompt
        system_prompt: Role instruction for the stage
    """

    prompt: str
    schema: str
    system_prompt: str


# =============================================================================
# System prompts
# =============================================================================

SYSTEM_PROMPTS = {
    "summary": (
        "You are an expert software architect analyzing a GitHub repository. "
        "Provide a comprehensive analysis based on the repository structure and files."
    ),
    "patterns": (
        "You are an expert software architect identifying architecture patterns "
        "from repository structure."
    ),
    "architecture": (
        "You are an expert software architect analyzing repository structure to infer "
        "architecture patterns and provide modernization recommendations."
    ),
    "entry_points": (
        "You are an expert code analyst specialized in identifying application "
        "entry points and execution flows."
    ),
    "execution_paths": (
        "You are an expert code analyst specialized in tracing execution paths and call graphs."
    ),
    "dependencies": (
        "You are an expert code analyst specialized in dependency analysis and "
        "circular dependency detection."
    ),
    "data_flow": (
        "You are an expert data flow analyst specialized in tracing data movement "
        "and transformations."
    ),
    "recommendations": (
        "You are an expert code analyst providing actionable recommendations for "
        "code flow optimization."
    ),
    "risk": (
        "You are an expert software architect and security specialist analyzing migration risks."
    ),
}


def get_system_prompt(stage: str) -> str:
    """Get the system prompt for a stage.

    Args:
        stage: Key in SYSTEM_PROMPTS

    Returns:
        System prompt string
    """
    return SYSTEM_PROMPTS[stage]


# =============================================================================
# Schemas
# =============================================================================

def _choices(enum_type: type[Enum]) -> str:
    return " | ".join(member.value for member in enum_type)


LEVEL = _choices(Complexity)
SEVERITY = _choices(RiskLevel)


def _schema(shape: dict[str, Any]) -> str:
    return json.dumps(shape)


SCHEMAS = {
    "summary": _schema(
        {
            "purpose": "string",
            "main_technologies": ["string"],
            "project_type": "string",
            "complexity": LEVEL,
            "insights": ["string"],
        }
    ),
    "summary_simplified": _schema(
        {"purpose": "string", "project_type": "string", "complexity": LEVEL}
    ),
    "patterns": _schema({"patterns": ["string"], "evidence": ["string"]}),
    "patterns_simplified": _schema({"patterns": ["string"]}),
    "architecture": _schema(
        {
            "type": _choices(ArchitectureType),
            "style": "string",
            "layers": ["string"],
            "patterns": ["string"],
            "complexity": LEVEL,
            "recommendations": ["string"],
            "migration_complexity": LEVEL,
        }
    ),
    "architecture_simplified": _schema(
        {
            "type": _choices(ArchitectureType),
            "complexity": LEVEL,
            "migration_complexity": LEVEL,
            "recommendations": ["string"],
        }
    ),
    "entry_points": _schema(
        {
            "entry_points": [
                {
                    "file": "string",
                    "function": "string",
                    "type": _choices(CodeEntryPointType),
                    "parameters": ["string"],
                    "return_type": "string",
                    "description": "string",
                    "calls_to": ["string"],
                }
            ],
            "main_entry_point": "string",
            "analysis_notes": "string",
        }
    ),
    "entry_points_simplified": _schema(
        {
            "entry_points": [
                {
                    "file": "string",
                    "function": "string",
                    "type": _choices(CodeEntryPointType),
                }
            ]
        }
    ),
    "execution_paths": _schema(
        {
            "execution_paths": [
                {
                    "id": "string",
                    "name": "string",
                    "type": _choices(ExecutionPathType),
                    "start_point": "string",
                    "end_point": "string",
                    "steps": [
                        {
                            "id": "string",
                            "file": "string",
                            "function": "string",
                            "type": _choices(StepType),
                            "line_number": "number",
                            "description": "string",
                            "dependencies": ["string"],
                        }
                    ],
                    "complexity": LEVEL,
                    "description": "string",
                }
            ],
            "call_graphs": [
                {
                    "function": "string",
                    "file": "string",
                    "calls": [
                        {
                            "function": "string",
                            "file": "string",
                            "type": _choices(CallType),
                            "frequency": LEVEL,
                        }
                    ],
                    "complexity": "number",
                }
            ],
            "module_interactions": [
                {
                    "source_module": "string",
                    "target_module": "string",
                    "interaction_type": _choices(InteractionType),
                    "strength": _choices(Strength),
                    "description": "string",
                }
            ],
            "cyclomatic_complexity": "number",
            "flow_patterns": ["string"],
        }
    ),
    "execution_paths_simplified": _schema(
        {
            "execution_paths": [
                {
                    "id": "string",
                    "name": "string",
                    "type": _choices(ExecutionPathType),
                    "start_point": "string",
                    "end_point": "string",
                    "complexity": LEVEL,
                }
            ],
            "cyclomatic_complexity": "number",
            "flow_patterns": ["string"],
        }
    ),
    "dependencies": _schema(
        {
            "internal": [
                {
                    "source": "string",
                    "target": "string",
                    "type": _choices(DependencyType),
                    "strength": _choices(Strength),
                    "is_circular": "boolean",
                }
            ],
            "external": [
                {
                    "name": "string",
                    "version": "string",
                    "type": _choices(ExternalDependencyType),
                    "usage_count": "number",
                    "risk_level": LEVEL,
                    "alternatives": ["string"],
                }
            ],
            "circular": [
                {
                    "id": "string",
                    "cycle": ["string"],
                    "severity": LEVEL,
                    "description": "string",
                    "suggestions": ["string"],
                }
            ],
            "risk_level": LEVEL,
            "analysis_notes": "string",
        }
    ),
    "dependencies_simplified": _schema(
        {
            "internal": [{"source": "string", "target": "string", "is_circular": "boolean"}],
            "external": [{"name": "string", "version": "string"}],
            "risk_level": LEVEL,
        }
    ),
    "data_flow": _schema(
        {
            "data_streams": [
                {
                    "id": "string",
                    "name": "string",
                    "source": "string",
                    "destination": "string",
                    "data_type": "string",
                    "volume": LEVEL,
                    "frequency": _choices(StreamFrequency),
                    "transformations": ["string"],
                }
            ],
            "data_stores": [
                {
                    "name": "string",
                    "type": _choices(StoreType),
                    "access_pattern": _choices(AccessPattern),
                    "data_types": ["string"],
                    "connected_components": ["string"],
                }
            ],
            "transformations": [
                {
                    "id": "string",
                    "name": "string",
                    "input": "string",
                    "output": "string",
                    "transformation_type": _choices(TransformationType),
                    "complexity": LEVEL,
                    "location": "string",
                }
            ],
            "flow_patterns": ["string"],
            "bottlenecks": [
                {
                    "id": "string",
                    "location": "string",
                    "type": _choices(BottleneckType),
                    "severity": LEVEL,
                    "description": "string",
                    "suggestions": ["string"],
                }
            ],
        }
    ),
    "data_flow_simplified": _schema(
        {
            "data_streams": [
                {"id": "string", "name": "string", "source": "string", "destination": "string"}
            ],
            "data_stores": [
                {"name": "string", "type": _choices(StoreType)}
            ],
            "flow_patterns": ["string"],
        }
    ),
    "recommendations": _schema(
        {
            "recommendations": ["string"],
            "complexity": LEVEL,
            "priority_actions": ["string"],
            "risk_factors": ["string"],
        }
    ),
    "recommendations_simplified": _schema(
        {"recommendations": ["string"], "complexity": LEVEL}
    ),
    "risk": _schema(
        {
            "additional_risks": [
                {
                    "type": "string",
                    "severity": SEVERITY,
                    "title": "string",
                    "description": "string",
                    "location": "string",
                    "recommendation": "string",
                }
            ],
            "security_concerns": [
                {
                    "type": "string",
                    "severity": SEVERITY,
                    "description": "string",
                    "location": "string",
                    "mitigation": "string",
                }
            ],
            "quality_issues": ["string"],
            "performance_bottlenecks": ["string"],
            "architecture_anti_patterns": ["string"],
        }
    ),
    "risk_simplified": _schema(
        {
            "additional_risks": [
                {"type": "string", "severity": SEVERITY, "title": "string", "description": "string"}
            ],
            "quality_issues": ["string"],
        }
    ),
}


def _join(items: list[str], empty: str = "None") -> str:
    return ", ".join(items) if items else empty


def _build(stage: str, prompt: str, simplified: bool) -> StagePrompt:
    key = f"{stage}_simplified" if simplified else stage
    return StagePrompt(
        prompt=prompt.strip() + "\n",
        schema=SCHEMAS[key],
        system_prompt=SYSTEM_PROMPTS[stage],
    )


# =============================================================================
# Repository pipeline
# =============================================================================

SAMPLE_FILE_COUNT = 5
SAMPLE_FILE_CHARS = 2000


def build_summary_prompt(
    repository: "Repository",
    file_structure: "FileStructure",
    simplified: bool = False,
) -> StagePrompt:
    """Build the repository summary prompt.

    The rich variant includes the first five files with content (truncated to
    2000 characters each); the simplified one sends metadata and counts only.

    Args:
        repository: Repository metadata
        file_structure: Categorized file listing
        simplified: Build the smaller variant

    Returns:
        StagePrompt for the summary stage
    """
    category_summary = ", ".join(
        f"{name}: {count} files" for name, count in file_structure.category_counts().items()
    )
    header = (
        f"Repository: {repository.name}\n"
        f"Description: {repository.description or 'No description provided'}\n"
        f"Primary Language: {repository.language or 'Unknown'}\n"
    )

    if simplified:
        return _build(
            "summary",
            "Summarize this GitHub repository briefly.\n\n"
            + header
            + f"Total files: {file_structure.total_files}\n"
            f"Categories: {category_summary}\n\n"
            "Provide the main purpose, the project type and the complexity level (low, medium, high).",
            simplified=True,
        )

    main_files = "\n".join(f"- {f.name} ({f.path})" for f in file_structure.main_files)
    samples = "\n\n".join(
        f"File: {f.path}\n{f.content[:SAMPLE_FILE_CHARS]}..."
        for f in [f for f in file_structure.files if f.content][:SAMPLE_FILE_COUNT]
    )

    prompt = (
        "Analyze this GitHub repository:\n\n"
        + header
        + f"Stars: {repository.stars}\n"
        f"Forks: {repository.forks}\n\n"
        "File Structure:\n"
        f"- Total files: {file_structure.total_files}\n"
        f"- Total directories: {file_structure.total_directories}\n"
        f"- Categories: {category_summary}\n\n"
        f"Main Files:\n{main_files}\n\n"
        f"Sample File Contents:\n{samples}\n\n"
        "Based on this information, provide:\n"
        "1. The main purpose of this repository\n"
        "2. The primary technologies used\n"
        "3. The type of project (web app, library, CLI tool, etc.)\n"
        "4. The complexity level (low, medium, high)\n"
        "5. Key insights about the codebase structure and organization"
    )
    return _build("summary", prompt, simplified=False)


# =============================================================================
# Architecture pipeline
# =============================================================================

PATTERN_PATH_SAMPLE = 200


def build_patterns_prompt(
    analysis: "RepositoryAnalysis",
    simplified: bool = False,
) -> StagePrompt:
    """Build the architecture pattern detection prompt.

    Sends the directory layout (paths only) so the model can spot layering
    conventions; the simplified variant sends top-level directories only.
    """
    structure = analysis.file_structure
    if simplified:
        top_level = sorted({f.path.split("/", 1)[0] for f in structure.files})
        prompt = (
            f"Repository: {analysis.repository.name}\n"
            f"Top-level entries: {_join(top_level)}\n\n"
            "List the architecture patterns (e.g., MVC, Layered, Microservices, "
            "Component-Based) this layout follows."
        )
        return _build("patterns", prompt, simplified=True)

    paths = "\n".join(f"- {f.path}" for f in structure.files[:PATTERN_PATH_SAMPLE])
    prompt = (
        "Identify the architecture patterns used by this repository:\n\n"
        f"Repository: {analysis.repository.name}\n"
        f"Language: {analysis.repository.language or 'Unknown'}\n"
        f"Project Type: {analysis.summary.project_type}\n\n"
        f"Paths ({min(len(structure.files), PATTERN_PATH_SAMPLE)} of {len(structure.files)}):\n"
        f"{paths}\n\n"
        "Report each pattern by its common name (MVC, Layered, Microservices, "
        "Component-Based, Event-Driven, Hexagonal, ...) and give one line of evidence "
        "per pattern naming the paths that show it."
    )
    return _build("patterns", prompt, simplified=False)


def build_architecture_prompt(
    analysis: "RepositoryAnalysis",
    patterns: list[str],
    tech_stack: "TechStack",
    component_count: int,
    simplified: bool = False,
) -> StagePrompt:
    """Build the architecture synthesis prompt."""
    repository = analysis.repository
    structure = analysis.file_structure
    header = (
        f"Repository: {repository.name}\n"
        f"Language: {repository.language or 'Unknown'}\n"
        f"Project Type: {analysis.summary.project_type}\n"
        f"Detected Patterns: {_join(patterns)}\n"
    )

    if simplified:
        prompt = (
            "Classify the architecture of this repository:\n\n"
            + header
            + f"Source files: {len(structure.in_category(FileCategory.SOURCE))}\n\n"
            "Give the architecture type, its complexity, the migration complexity "
            "and a few modernization recommendations."
        )
        return _build("architecture", prompt, simplified=True)

    prompt = (
        "Analyze the architecture of this repository:\n\n"
        + header
        + f"Description: {repository.description or 'No description provided'}\n"
        f"Complexity: {analysis.summary.complexity.value}\n\n"
        "Tech Stack:\n"
        f"- Language: {tech_stack.language}\n"
        f"- Frameworks: {_join(tech_stack.frameworks)}\n"
        f"- Databases: {_join(tech_stack.databases)}\n"
        f"- Tools: {_join(tech_stack.tools)}\n\n"
        "File Structure:\n"
        f"- Total files: {structure.total_files}\n"
        f"- Source files: {len(structure.in_category(FileCategory.SOURCE))}\n"
        f"- Config files: {len(structure.in_category(FileCategory.CONFIG))}\n"
        f"- Test files: {len(structure.in_category(FileCategory.TEST))}\n\n"
        f"Components: {component_count} identified\n\n"
        "Based on this analysis, determine:\n"
        "1. Architecture type (monolith, microservices, layered, modular, unknown)\n"
        "2. Architectural style description\n"
        "3. Application layers present\n"
        "4. Design patterns used\n"
        "5. Overall complexity assessment\n"
        "6. Modernization recommendations\n"
        "7. Migration complexity assessment\n\n"
        "Provide specific, actionable recommendations for legacy modernization."
    )
    return _build("architecture", prompt, simplified=False)


# =============================================================================
# Code flow pipeline
# =============================================================================

KEY_SOURCE_FILES = 10
SIMPLIFIED_ENTRY_POINTS = 5


def _code_flow_header(analysis: "RepositoryAnalysis", architecture: "ArchitectureAnalysis") -> str:
    return (
        f"Repository: {analysis.repository.name}\n"
        f"Language: {analysis.repository.language or 'Unknown'}\n"
        f"Project Type: {analysis.summary.project_type}\n"
        f"Architecture Type: {architecture.architecture.type.value}\n"
    )


def build_entry_points_prompt(
    analysis: "RepositoryAnalysis",
    architecture: "ArchitectureAnalysis",
    simplified: bool = False,
) -> StagePrompt:
    sources = analysis.file_structure.in_category(FileCategory.SOURCE)
    header = _code_flow_header(analysis, architecture)

    if simplified:
        listed = "\n".join(f"- {f.path}" for f in sources[:SIMPLIFIED_ENTRY_POINTS])
        prompt = (
            "List the main entry points of this repository:\n\n"
            + header
            + f"\nKey source files:\n{listed}\n\n"
            "Give the file, function and entry point type for each."
        )
        return _build("entry_points", prompt, simplified=True)

    stack = architecture.architecture.tech_stack
    listed = "\n".join(f"- {f.path} ({f.extension})" for f in sources[:KEY_SOURCE_FILES])
    prompt = (
        "Analyze the code entry points for this repository:\n\n"
        + header
        + f"\nTotal source files: {len(sources)}\n\n"
        f"Key source files:\n{listed}\n\n"
        f"Frameworks: {_join(stack.frameworks)}\n"
        f"Libraries: {_join(stack.libraries)}\n\n"
        "Identify main entry points, API endpoints, event handlers, CLI commands and "
        "any other significant entry points. For each one give its file and function, "
        "its type, parameters and return type, the functions it calls and a brief "
        "description of its role.\n\n"
        "Focus on the most critical entry points that control application flow."
    )
    return _build("entry_points", prompt, simplified=False)


def build_execution_paths_prompt(
    analysis: "RepositoryAnalysis",
    architecture: "ArchitectureAnalysis",
    entry_points: list["CodeEntryPoint"],
    simplified: bool = False,
) -> StagePrompt:
    header = _code_flow_header(analysis, architecture)
    selected = entry_points[:SIMPLIFIED_ENTRY_POINTS] if simplified else entry_points
    listed = "\n".join(f"- {ep.function} in {ep.file} ({ep.type.value})" for ep in selected)

    if simplified:
        prompt = (
            "Analyze execution paths for this repository (simplified):\n\n"
            + header
            + f"\nEntry Points ({len(entry_points)}):\n{listed}\n\n"
            "Provide the main execution flows from the entry points with a simple "
            "complexity assessment and the common flow patterns. Keep it concise."
        )
        return _build("execution_paths", prompt, simplified=True)

    prompt = (
        "Analyze execution paths and call graphs for this repository:\n\n"
        + header
        + f"Complexity: {analysis.summary.complexity.value}\n\n"
        f"Identified Entry Points:\n{listed}\n\n"
        f"Architecture Layers: {_join(architecture.architecture.layers)}\n\n"
        "Trace the major execution flows from the entry points, the call graph "
        "(who calls whom, call type and frequency), module interactions, overall "
        "cyclomatic complexity and common flow patterns.\n\n"
        "For each execution path give its start and end points and the key steps "
        "with file and function locations."
    )
    return _build("execution_paths", prompt, simplified=False)


def build_dependencies_prompt(
    analysis: "RepositoryAnalysis",
    architecture: "ArchitectureAnalysis",
    simplified: bool = False,
) -> StagePrompt:
    structure = analysis.file_structure
    header = _code_flow_header(analysis, architecture)
    counts = (
        f"Total Files: {structure.total_files}\n"
        f"Source files: {len(structure.in_category(FileCategory.SOURCE))}\n"
        f"Config files: {len(structure.in_category(FileCategory.CONFIG))}\n"
    )

    if simplified:
        prompt = (
            "Analyze dependencies for this repository (simplified):\n\n"
            + header
            + counts
            + "\nList key internal file dependencies, major external dependencies "
            "and the overall risk level. Flag circular internal dependencies."
        )
        return _build("dependencies", prompt, simplified=True)

    stack = architecture.architecture.tech_stack
    sources = "\n".join(f"- {f.path}" for f in structure.in_category(FileCategory.SOURCE)[:50])
    prompt = (
        "Analyze dependencies for this repository:\n\n"
        + header
        + counts
        + f"Frameworks: {_join(stack.frameworks)}\n"
        f"Libraries: {_join(stack.libraries)}\n\n"
        f"Source files:\n{sources}\n\n"
        "Identify internal file-to-file dependencies (type and coupling strength), "
        "external packages (version, usage, risk, alternatives) and circular "
        "dependencies with suggestions for breaking each cycle. Give an overall "
        "dependency risk level.\n\n"
        "Focus on dependency issues that could impact modernization efforts."
    )
    return _build("dependencies", prompt, simplified=False)


def build_data_flow_prompt(
    analysis: "RepositoryAnalysis",
    architecture: "ArchitectureAnalysis",
    simplified: bool = False,
) -> StagePrompt:
    header = _code_flow_header(analysis, architecture)

    if simplified:
        prompt = (
            "Analyze data flow for this repository (simplified):\n\n"
            + header
            + "\nList the main data streams, the data stores and the flow patterns. "
            "Keep it concise."
        )
        return _build("data_flow", prompt, simplified=True)

    info = architecture.architecture
    prompt = (
        "Analyze data flow for this repository:\n\n"
        + header
        + f"Components: {len(info.components)}\n"
        f"Tech Stack: {info.tech_stack.language}, {_join(info.tech_stack.frameworks)}\n"
        f"Databases: {_join(info.tech_stack.databases)}\n\n"
        "Identify data streams (source, destination, type, volume, frequency), data "
        "stores (type, access pattern, connected components), transformations "
        "(input, output, kind, complexity), flow patterns and bottlenecks.\n\n"
        "Focus on data flow issues that could impact performance and scalability."
    )
    return _build("data_flow", prompt, simplified=False)


def build_recommendations_prompt(
    analysis: "RepositoryAnalysis",
    architecture: "ArchitectureAnalysis",
    entry_point_count: int,
    execution_path_count: int,
    cyclomatic_complexity: int,
    circular_count: int,
    bottleneck_count: int,
    simplified: bool = False,
) -> StagePrompt:
    header = _code_flow_header(analysis, architecture)
    info = architecture.architecture

    if simplified:
        prompt = (
            "Generate code flow recommendations for this repository (simplified):\n\n"
            + header
            + f"\nEntry Points: {entry_point_count}\n"
            f"Circular Dependencies: {circular_count}\n"
            f"Complexity: {info.complexity.value}\n\n"
            "Provide practical recommendations and an overall complexity rating."
        )
        return _build("recommendations", prompt, simplified=True)

    prompt = (
        "Generate code flow optimization recommendations for this repository:\n\n"
        + header
        + "\nCode Flow Analysis Results:\n"
        f"- Entry Points: {entry_point_count}\n"
        f"- Execution Paths: {execution_path_count}\n"
        f"- Cyclomatic Complexity: {cyclomatic_complexity}\n"
        f"- Circular Dependencies: {circular_count}\n"
        f"- Data Bottlenecks: {bottleneck_count}\n\n"
        "Architecture Context:\n"
        f"- Complexity: {info.complexity.value}\n"
        f"- Patterns: {_join(info.patterns)}\n"
        f"- Components: {len(info.components)}\n\n"
        "Provide actionable recommendations for code flow optimization, dependency "
        "management, data flow efficiency and architecture improvements. Give a "
        "prioritized list of actions and the risk factors that could affect a "
        "migration.\n\n"
        "Provide recommendations that support legacy modernization goals."
    )
    return _build("recommendations", prompt, simplified=False)


# =============================================================================
# Risk pipeline
# =============================================================================

RISK_HOTSPOT_SAMPLE = 5


def build_risk_prompt(
    analysis: "RepositoryAnalysis",
    architecture: "ArchitectureAnalysis",
    complexity: "ComplexityMetrics",
    dependency_risks: list["DependencyRisk"],
    simplified: bool = False,
) -> StagePrompt:
    """Build the AI risk analysis prompt.

    Args:
        analysis: Repository analysis
        architecture: Architecture analysis
        complexity: Heuristic complexity metrics
        dependency_risks: Rule-based dependency risks
        simplified: Build the smaller variant

    Returns:
        StagePrompt for the risk stage
    """
    overall = complexity.overall_complexity
    header = (
        f"Repository: {analysis.repository.name}\n"
        f"Language: {analysis.repository.language or 'Unknown'}\n"
        f"Architecture: {architecture.architecture.type.value}\n"
        f"Total Lines of Code: {overall.total_lines_of_code}\n"
        f"Average Complexity: {overall.cyclomatic_complexity:.1f}\n"
    )

    if simplified:
        prompt = (
            "Identify the main migration risks for this repository:\n\n"
            + header
            + f"Dependency risks: {len(dependency_risks)}\n\n"
            "List additional risks with their severity and the main code quality issues."
        )
        return _build("risk", prompt, simplified=True)

    hotspots = "\n".join(
        f"- {h.location}: {h.description}"
        for h in complexity.complexity_hotspots[:RISK_HOTSPOT_SAMPLE]
    )
    deps = "\n".join(
        f"- {d.name} ({d.current_version}): {d.risk_level.value} - {d.headline}"
        for d in dependency_risks
    )
    prompt = (
        "Analyze migration risks for this repository:\n\n"
        + header
        + f"Maintainability Index: {overall.maintainability_index:.1f}\n"
        f"Migration Complexity: {architecture.migration_complexity.value}\n\n"
        f"Complexity Hotspots:\n{hotspots or 'None'}\n\n"
        f"Dependency Risks:\n{deps or 'None'}\n\n"
        f"Architecture Patterns: {_join(architecture.architecture.patterns)}\n\n"
        "Identify additional migration risks not covered above, security concerns "
        "with mitigations, code quality issues, performance bottlenecks and "
        "architecture anti-patterns."
    )
    return _build("risk", prompt, simplified=False)
