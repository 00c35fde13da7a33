"""RepoScope analyzers - deterministic analysis and content access.

These run without an LLM. Pipelines use them directly for rule-based stages
and as the heuristic tier when LLM stages fail.

Analyzers:
- GitHub client: repository metadata, recursive listing and file contents
- File utils: categorization, main-file detection and processing filters
- Architecture: structural patterns, tech stack, components, entry points
- Complexity: per-file metrics and hotspots
- Dependency risk: manifest rules, migration blockers, risk score
- Code flow: heuristic entry points, paths, dependencies, data flow
"""

from reposcope.analyzers.github import ContentProvider, GitHubClient, GitHubError

__all__ = [
    "ContentProvider",
    "GitHubClient",
    "GitHubError",
]
