"""Heuristic file complexity metrics.

Keyword-counting approximation of cyclomatic complexity, a simplified
maintainability index, per-file issues and repository-level aggregates.
"""

import math
import re

from reposcope.models.analysis import Complexity
from reposcope.models.repository import FileInfo
from reposcope.models.risk import (
    ComplexityHotspot,
    ComplexityMetrics,
    FileComplexityMetric,
    OverallComplexity,
)

_CONDITIONALS = re.compile(r"\b(if|else|while|for|switch|case|catch|&&|\|\|)\b")
_DEFINITIONS = re.compile(r"\b(function|def|class|method|public|private)\b")
_TODO = re.compile(r"\btodo\b", re.IGNORECASE)
_FIXME = re.compile(r"\bfixme\b", re.IGNORECASE)
_DEBUG_PRINTS = re.compile(r"console\.log|System\.out\.print|print\(")

MAX_COMPLEXITY = 100
MAX_HOTSPOTS = 10


def calculate_complexity(content: str) -> int:
    """Count control-flow and definition keywords, plus a base of 1, capped at 100."""
    conditionals = len(_CONDITIONALS.findall(content))
    definitions = len(_DEFINITIONS.findall(content))
    return min(conditionals + definitions + 1, MAX_COMPLEXITY)


def calculate_maintainability_index(lines_of_code: int, complexity: int) -> float:
    """Simplified maintainability index (0-100, higher is better)."""
    return max(0.0, 100 - math.log(lines_of_code) * 2 - complexity * 3)


def determine_risk_level(lines_of_code: int, complexity: int) -> Complexity:
    if lines_of_code > 1000 or complexity > 20:
        return Complexity.HIGH
    if lines_of_code > 500 or complexity > 10:
        return Complexity.MEDIUM
    return Complexity.LOW


def identify_file_issues(file: FileInfo, content: str) -> list[str]:
    """Flag size and code-smell issues in one file."""
    issues = []
    if file.size and file.size > 10000:
        issues.append("Large file size")
    if len(content.split("\n")) > 500:
        issues.append("High line count")
    if len(_TODO.findall(content)) > 5:
        issues.append("Many TODO comments")
    if _FIXME.search(content):
        issues.append("Contains FIXME comments")
    if len(_DEBUG_PRINTS.findall(content)) > 5:
        issues.append("Many debug statements")
    return issues


def calculate_file_complexity(files: list[FileInfo]) -> list[FileComplexityMetric]:
    """Compute metrics for every regular file with content.

    Returns:
        Metrics sorted by complexity, highest first
    """
    metrics = []
    for file in files:
        if not file.is_file or not file.content:
            continue
        content = file.content
        lines_of_code = len(content.split("\n"))
        complexity = calculate_complexity(content)
        metrics.append(
            FileComplexityMetric(
                file=file.path,
                lines_of_code=lines_of_code,
                complexity=complexity,
                maintainability_index=calculate_maintainability_index(lines_of_code, complexity),
                risk_level=determine_risk_level(lines_of_code, complexity),
                issues=identify_file_issues(file, content),
            )
        )
    metrics.sort(key=lambda m: m.complexity, reverse=True)
    return metrics


def build_complexity_metrics(files: list[FileInfo]) -> ComplexityMetrics:
    """Aggregate per-file metrics and pick high-risk hotspots."""
    file_metrics = calculate_file_complexity(files)
    count = len(file_metrics)
    total_loc = sum(m.lines_of_code for m in file_metrics)

    overall = OverallComplexity(
        total_lines_of_code=total_loc,
        average_file_size=total_loc / count if count else 0.0,
        largest_files=[m.file for m in file_metrics[:5]],
        cyclomatic_complexity=sum(m.complexity for m in file_metrics) / count if count else 0.0,
        maintainability_index=(
            sum(m.maintainability_index for m in file_metrics) / count if count else 100.0
        ),
    )

    hotspots = [
        ComplexityHotspot(
            location=m.file,
            severity=Complexity.HIGH,
            metrics={"lines_of_code": m.lines_of_code, "complexity": m.complexity},
            description=(
                f"High complexity file with {m.lines_of_code} lines "
                f"and complexity {m.complexity}"
            ),
        )
        for m in file_metrics
        if m.risk_level == Complexity.HIGH
    ][:MAX_HOTSPOTS]

    return ComplexityMetrics(
        file_complexity=file_metrics,
        overall_complexity=overall,
        complexity_hotspots=hotspots,
    )
