"""RepoScope data models.

This module exports the core entities used throughout the application:
- Repository, FileInfo, FileStructure: Repository being analyzed
- RepositoryAnalysis: Output of the repository pipeline
- ArchitectureAnalysis: Output of the architecture pipeline
- CodeFlowAnalysis: Output of the code flow pipeline
- RiskAssessment: Output of the risk pipeline
- RunRecord: Observable state of one run
- SchemaMismatchError: Raised when LLM JSON does not match the expected shape
"""

from reposcope.models.analysis import (
    AnalysisStatus,
    Complexity,
    RepositoryAnalysis,
    RepositorySummary,
    RunRecord,
)
from reposcope.models.architecture import ArchitectureAnalysis, ArchitectureType
from reposcope.models.code_flow import CodeFlowAnalysis
from reposcope.models.decoding import SchemaMismatchError
from reposcope.models.llm_config import LLMConfig, LLMSettings
from reposcope.models.repository import FileCategory, FileInfo, FileStructure, FileType, Repository
from reposcope.models.risk import RiskAssessment, RiskLevel

__all__ = [
    "AnalysisStatus",
    "ArchitectureAnalysis",
    "ArchitectureType",
    "CodeFlowAnalysis",
    "Complexity",
    "FileCategory",
    "FileInfo",
    "FileStructure",
    "FileType",
    "LLMConfig",
    "LLMSettings",
    "Repository",
    "RepositoryAnalysis",
    "RepositorySummary",
    "RiskAssessment",
    "RiskLevel",
    "RunRecord",
    "SchemaMismatchError",
]
