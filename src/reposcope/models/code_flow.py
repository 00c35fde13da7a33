"""Code flow entities.

Typed results for the code flow pipeline: entry points, execution paths and
call graphs, internal/external/circular dependencies, data flow and
recommendations. Each LLM-facing report has a ``from_dict`` decoder that
validates field presence, types and enumerated values.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from reposcope.models.analysis import Complexity, utc_timestamp
from reposcope.models.decoding import (
    expect_mapping,
    get_bool,
    get_enum,
    get_int,
    get_list_of,
    get_str,
    get_str_list,
    to_plain,
)
from reposcope.models.repository import Repository


class CodeEntryPointType(Enum):
    MAIN = "main"
    API_ENDPOINT = "api_endpoint"
    EVENT_HANDLER = "event_handler"
    CLI_COMMAND = "cli_command"
    OTHER = "other"


class ExecutionPathType(Enum):
    MAIN = "main"
    API = "api"
    EVENT = "event"
    BATCH = "batch"
    OTHER = "other"


class StepType(Enum):
    FUNCTION_CALL = "function_call"
    METHOD_CALL = "method_call"
    CONDITION = "condition"
    LOOP = "loop"
    RETURN = "return"
    OTHER = "other"


class CallType(Enum):
    DIRECT = "direct"
    INDIRECT = "indirect"
    CONDITIONAL = "conditional"
    ASYNC = "async"


class InteractionType(Enum):
    IMPORT = "import"
    API_CALL = "api_call"
    EVENT = "event"
    DATA_FLOW = "data_flow"
    OTHER = "other"


class Strength(Enum):
    WEAK = "weak"
    MEDIUM = "medium"
    STRONG = "strong"


class DependencyType(Enum):
    IMPORT = "import"
    REQUIRE = "require"
    INCLUDE = "include"
    REFERENCE = "reference"


class ExternalDependencyType(Enum):
    RUNTIME = "runtime"
    DEVELOPMENT = "development"
    PEER = "peer"
    OPTIONAL = "optional"


class StreamFrequency(Enum):
    REALTIME = "realtime"
    BATCH = "batch"
    EVENT = "event"
    SCHEDULED = "scheduled"


class StoreType(Enum):
    DATABASE = "database"
    CACHE = "cache"
    FILE = "file"
    MEMORY = "memory"
    API = "api"
    OTHER = "other"


class AccessPattern(Enum):
    READ = "read"
    WRITE = "write"
    READ_WRITE = "read_write"


class TransformationType(Enum):
    FILTER = "filter"
    MAP = "map"
    REDUCE = "reduce"
    AGGREGATE = "aggregate"
    FORMAT = "format"
    VALIDATE = "validate"


class BottleneckType(Enum):
    PROCESSING = "processing"
    IO = "io"
    NETWORK = "network"
    MEMORY = "memory"
    OTHER = "other"


# =============================================================================
# Entry points
# =============================================================================


@dataclass
class CodeEntryPoint:
    """Function-level entry point into the application."""

    file: str
    function: str
    type: CodeEntryPointType
    parameters: list[str] = field(default_factory=list)
    return_type: str = ""
    description: str = ""
    calls_to: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any, path: str = "$") -> "CodeEntryPoint":
        data = expect_mapping(data, path)
        return cls(
            file=get_str(data, "file", path),
            function=get_str(data, "function", path),
            type=get_enum(data, "type", CodeEntryPointType, path),
            parameters=get_str_list(data, "parameters", path, default=[]),
            return_type=get_str(data, "return_type", path, default=""),
            description=get_str(data, "description", path, default=""),
            calls_to=get_str_list(data, "calls_to", path, default=[]),
        )


@dataclass
class EntryPointReport:
    """Answer of the entry point stage."""

    entry_points: list[CodeEntryPoint] = field(default_factory=list)
    main_entry_point: str = ""
    analysis_notes: str = ""

    @classmethod
    def from_dict(cls, data: Any, path: str = "$") -> "EntryPointReport":
        data = expect_mapping(data, path)
        return cls(
            entry_points=get_list_of(data, "entry_points", CodeEntryPoint.from_dict, path),
            main_entry_point=get_str(data, "main_entry_point", path, default=""),
            analysis_notes=get_str(data, "analysis_notes", path, default=""),
        )


# =============================================================================
# Execution paths
# =============================================================================


@dataclass
class ExecutionStep:
    id: str
    file: str
    function: str
    type: StepType
    line_number: int = 1
    description: str = ""
    dependencies: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any, path: str = "$") -> "ExecutionStep":
        data = expect_mapping(data, path)
        return cls(
            id=get_str(data, "id", path),
            file=get_str(data, "file", path),
            function=get_str(data, "function", path),
            type=get_enum(data, "type", StepType, path),
            line_number=get_int(data, "line_number", path, default=1),
            description=get_str(data, "description", path, default=""),
            dependencies=get_str_list(data, "dependencies", path, default=[]),
        )


@dataclass
class ExecutionPath:
    """A traced flow from an entry point to its end."""

    id: str
    name: str
    type: ExecutionPathType
    start_point: str
    end_point: str
    steps: list[ExecutionStep] = field(default_factory=list)
    complexity: Complexity = Complexity.MEDIUM
    description: str = ""

    @classmethod
    def from_dict(cls, data: Any, path: str = "$") -> "ExecutionPath":
        data = expect_mapping(data, path)
        return cls(
            id=get_str(data, "id", path),
            name=get_str(data, "name", path),
            type=get_enum(data, "type", ExecutionPathType, path),
            start_point=get_str(data, "start_point", path),
            end_point=get_str(data, "end_point", path),
            steps=get_list_of(data, "steps", ExecutionStep.from_dict, path, default=[]),
            complexity=get_enum(data, "complexity", Complexity, path),
            description=get_str(data, "description", path, default=""),
        )


@dataclass
class CallEdge:
    function: str
    file: str
    type: CallType = CallType.DIRECT
    frequency: Complexity = Complexity.MEDIUM

    @classmethod
    def from_dict(cls, data: Any, path: str = "$") -> "CallEdge":
        data = expect_mapping(data, path)
        return cls(
            function=get_str(data, "function", path),
            file=get_str(data, "file", path),
            type=get_enum(data, "type", CallType, path, default=CallType.DIRECT),
            frequency=get_enum(data, "frequency", Complexity, path, default=Complexity.MEDIUM),
        )


@dataclass
class CallGraph:
    function: str
    file: str
    calls: list[CallEdge] = field(default_factory=list)
    called_by: list[CallEdge] = field(default_factory=list)
    complexity: int = 1

    @classmethod
    def from_dict(cls, data: Any, path: str = "$") -> "CallGraph":
        data = expect_mapping(data, path)
        return cls(
            function=get_str(data, "function", path),
            file=get_str(data, "file", path),
            calls=get_list_of(data, "calls", CallEdge.from_dict, path, default=[]),
            called_by=get_list_of(data, "called_by", CallEdge.from_dict, path, default=[]),
            complexity=get_int(data, "complexity", path, default=1),
        )


@dataclass
class ModuleInteraction:
    source_module: str
    target_module: str
    interaction_type: InteractionType
    strength: Strength = Strength.MEDIUM
    description: str = ""

    @classmethod
    def from_dict(cls, data: Any, path: str = "$") -> "ModuleInteraction":
        data = expect_mapping(data, path)
        return cls(
            source_module=get_str(data, "source_module", path),
            target_module=get_str(data, "target_module", path),
            interaction_type=get_enum(data, "interaction_type", InteractionType, path),
            strength=get_enum(data, "strength", Strength, path, default=Strength.MEDIUM),
            description=get_str(data, "description", path, default=""),
        )


@dataclass
class ExecutionReport:
    """Answer of the execution path stage."""

    execution_paths: list[ExecutionPath] = field(default_factory=list)
    call_graphs: list[CallGraph] = field(default_factory=list)
    module_interactions: list[ModuleInteraction] = field(default_factory=list)
    cyclomatic_complexity: int = 0
    flow_patterns: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any, path: str = "$") -> "ExecutionReport":
        data = expect_mapping(data, path)
        return cls(
            execution_paths=get_list_of(data, "execution_paths", ExecutionPath.from_dict, path),
            call_graphs=get_list_of(data, "call_graphs", CallGraph.from_dict, path, default=[]),
            module_interactions=get_list_of(
                data, "module_interactions", ModuleInteraction.from_dict, path, default=[]
            ),
            cyclomatic_complexity=get_int(data, "cyclomatic_complexity", path, default=0),
            flow_patterns=get_str_list(data, "flow_patterns", path, default=[]),
        )


# =============================================================================
# Dependencies
# =============================================================================


@dataclass
class InternalDependency:
    """File-to-file dependency inside the repository."""

    source: str
    target: str
    type: DependencyType = DependencyType.IMPORT
    strength: Strength = Strength.MEDIUM
    is_circular: bool = False

    @classmethod
    def from_dict(cls, data: Any, path: str = "$") -> "InternalDependency":
        data = expect_mapping(data, path)
        return cls(
            source=get_str(data, "source", path),
            target=get_str(data, "target", path),
            type=get_enum(data, "type", DependencyType, path, default=DependencyType.IMPORT),
            strength=get_enum(data, "strength", Strength, path, default=Strength.MEDIUM),
            is_circular=get_bool(data, "is_circular", path, default=False),
        )


@dataclass
class ExternalDependency:
    name: str
    version: str = ""
    type: ExternalDependencyType = ExternalDependencyType.RUNTIME
    usage_count: int = 0
    risk_level: Complexity = Complexity.LOW
    alternatives: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any, path: str = "$") -> "ExternalDependency":
        data = expect_mapping(data, path)
        return cls(
            name=get_str(data, "name", path),
            version=get_str(data, "version", path, default=""),
            type=get_enum(
                data, "type", ExternalDependencyType, path, default=ExternalDependencyType.RUNTIME
            ),
            usage_count=get_int(data, "usage_count", path, default=0),
            risk_level=get_enum(data, "risk_level", Complexity, path, default=Complexity.LOW),
            alternatives=get_str_list(data, "alternatives", path, default=[]),
        )


@dataclass
class CircularDependency:
    """A dependency cycle.

    Attributes:
        id: Identifier
        cycle: Files forming the cycle, in order
        severity: Severity rating
        description: What the cycle is
        suggestions: How to break it
        detected_by: "analysis" when reported by the dependency stage,
            "dependency_tree" when an edge was dropped while building the tree
    """

    id: str
    cycle: list[str]
    severity: Complexity = Complexity.MEDIUM
    description: str = ""
    suggestions: list[str] = field(default_factory=list)
    detected_by: str = "analysis"

    @classmethod
    def from_dict(cls, data: Any, path: str = "$") -> "CircularDependency":
        data = expect_mapping(data, path)
        return cls(
            id=get_str(data, "id", path),
            cycle=get_str_list(data, "cycle", path),
            severity=get_enum(data, "severity", Complexity, path, default=Complexity.MEDIUM),
            description=get_str(data, "description", path, default=""),
            suggestions=get_str_list(data, "suggestions", path, default=[]),
        )


@dataclass
class DependencyReport:
    """Answer of the dependency stage."""

    internal: list[InternalDependency] = field(default_factory=list)
    external: list[ExternalDependency] = field(default_factory=list)
    circular: list[CircularDependency] = field(default_factory=list)
    risk_level: Complexity = Complexity.MEDIUM
    analysis_notes: str = ""

    @classmethod
    def from_dict(cls, data: Any, path: str = "$") -> "DependencyReport":
        data = expect_mapping(data, path)
        return cls(
            internal=get_list_of(data, "internal", InternalDependency.from_dict, path),
            external=get_list_of(data, "external", ExternalDependency.from_dict, path, default=[]),
            circular=get_list_of(data, "circular", CircularDependency.from_dict, path, default=[]),
            risk_level=get_enum(data, "risk_level", Complexity, path),
            analysis_notes=get_str(data, "analysis_notes", path, default=""),
        )


@dataclass
class DependencyTreeNode:
    """Node of the acyclic dependency tree.

    Children are referenced by name so the structure never contains cycles.
    """

    name: str
    children: list[str] = field(default_factory=list)
    is_circular: bool = False
    type: str = "file"


@dataclass
class DependencyInfo:
    internal: list[InternalDependency]
    external: list[ExternalDependency]
    circular: list[CircularDependency]
    dependency_tree: list[DependencyTreeNode]
    risk_level: Complexity


# =============================================================================
# Data flow
# =============================================================================


@dataclass
class DataStream:
    id: str
    name: str
    source: str
    destination: str
    data_type: str = "mixed"
    volume: Complexity = Complexity.MEDIUM
    frequency: StreamFrequency = StreamFrequency.BATCH
    transformations: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any, path: str = "$") -> "DataStream":
        data = expect_mapping(data, path)
        return cls(
            id=get_str(data, "id", path),
            name=get_str(data, "name", path),
            source=get_str(data, "source", path),
            destination=get_str(data, "destination", path),
            data_type=get_str(data, "data_type", path, default="mixed"),
            volume=get_enum(data, "volume", Complexity, path, default=Complexity.MEDIUM),
            frequency=get_enum(
                data, "frequency", StreamFrequency, path, default=StreamFrequency.BATCH
            ),
            transformations=get_str_list(data, "transformations", path, default=[]),
        )


@dataclass
class DataStore:
    name: str
    type: StoreType
    access_pattern: AccessPattern = AccessPattern.READ_WRITE
    data_types: list[str] = field(default_factory=list)
    connected_components: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any, path: str = "$") -> "DataStore":
        data = expect_mapping(data, path)
        return cls(
            name=get_str(data, "name", path),
            type=get_enum(data, "type", StoreType, path),
            access_pattern=get_enum(
                data, "access_pattern", AccessPattern, path, default=AccessPattern.READ_WRITE
            ),
            data_types=get_str_list(data, "data_types", path, default=[]),
            connected_components=get_str_list(data, "connected_components", path, default=[]),
        )


@dataclass
class DataTransformation:
    id: str
    name: str
    input: str
    output: str
    transformation_type: TransformationType
    complexity: Complexity = Complexity.MEDIUM
    location: str = ""

    @classmethod
    def from_dict(cls, data: Any, path: str = "$") -> "DataTransformation":
        data = expect_mapping(data, path)
        return cls(
            id=get_str(data, "id", path),
            name=get_str(data, "name", path),
            input=get_str(data, "input", path),
            output=get_str(data, "output", path),
            transformation_type=get_enum(data, "transformation_type", TransformationType, path),
            complexity=get_enum(data, "complexity", Complexity, path, default=Complexity.MEDIUM),
            location=get_str(data, "location", path, default=""),
        )


@dataclass
class DataBottleneck:
    id: str
    location: str
    type: BottleneckType
    severity: Complexity = Complexity.MEDIUM
    description: str = ""
    suggestions: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any, path: str = "$") -> "DataBottleneck":
        data = expect_mapping(data, path)
        return cls(
            id=get_str(data, "id", path),
            location=get_str(data, "location", path),
            type=get_enum(data, "type", BottleneckType, path),
            severity=get_enum(data, "severity", Complexity, path, default=Complexity.MEDIUM),
            description=get_str(data, "description", path, default=""),
            suggestions=get_str_list(data, "suggestions", path, default=[]),
        )


@dataclass
class DataFlowInfo:
    """Answer of the data flow stage."""

    data_streams: list[DataStream] = field(default_factory=list)
    data_stores: list[DataStore] = field(default_factory=list)
    transformations: list[DataTransformation] = field(default_factory=list)
    flow_patterns: list[str] = field(default_factory=list)
    bottlenecks: list[DataBottleneck] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any, path: str = "$") -> "DataFlowInfo":
        data = expect_mapping(data, path)
        return cls(
            data_streams=get_list_of(data, "data_streams", DataStream.from_dict, path),
            data_stores=get_list_of(data, "data_stores", DataStore.from_dict, path),
            transformations=get_list_of(
                data, "transformations", DataTransformation.from_dict, path, default=[]
            ),
            flow_patterns=get_str_list(data, "flow_patterns", path, default=[]),
            bottlenecks=get_list_of(data, "bottlenecks", DataBottleneck.from_dict, path, default=[]),
        )


# =============================================================================
# Recommendations and final result
# =============================================================================


@dataclass
class RecommendationReport:
    """Answer of the recommendation stage."""

    recommendations: list[str]
    complexity: Complexity
    priority_actions: list[str] = field(default_factory=list)
    risk_factors: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any, path: str = "$") -> "RecommendationReport":
        data = expect_mapping(data, path)
        return cls(
            recommendations=get_str_list(data, "recommendations", path),
            complexity=get_enum(data, "complexity", Complexity, path),
            priority_actions=get_str_list(data, "priority_actions", path, default=[]),
            risk_factors=get_str_list(data, "risk_factors", path, default=[]),
        )


@dataclass
class CodeFlowInfo:
    execution_paths: list[ExecutionPath]
    entry_points: list[CodeEntryPoint]
    call_graphs: list[CallGraph]
    module_interactions: list[ModuleInteraction]
    cyclomatic_complexity: int
    flow_patterns: list[str]


@dataclass
class CodeFlowAnalysis:
    """Output of the code flow pipeline."""

    repository: Repository
    code_flow: CodeFlowInfo
    dependencies: DependencyInfo
    data_flow: DataFlowInfo
    recommendations: list[str] = field(default_factory=list)
    complexity: Complexity = Complexity.MEDIUM
    priority_actions: list[str] = field(default_factory=list)
    risk_factors: list[str] = field(default_factory=list)
    timestamp: str = field(default_factory=utc_timestamp)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "repository": self.repository.to_dict(),
            "code_flow": to_plain(self.code_flow),
            "dependencies": to_plain(self.dependencies),
            "data_flow": to_plain(self.data_flow),
            "recommendations": self.recommendations,
            "complexity": self.complexity.value,
            "priority_actions": self.priority_actions,
            "risk_factors": self.risk_factors,
            "timestamp": self.timestamp,
        }
