"""RepoScope - LLM-assisted repository analysis for legacy migration.

RepoScope fetches a GitHub repository's file tree and runs four analysis
pipelines over it: repository summary, architecture inference, code flow and
migration risk. Each pipeline is a fixed sequence of stages that ask an LLM
for JSON-shaped answers.

Core principles:
- Structured Responses: LLM text is always decoded into typed results or rejected
- Graceful Degradation: rich prompt, then simplified prompt, then deterministic heuristic
- Forward Data Flow: each pipeline consumes only the results of earlier pipelines
- In-Memory Runs: run state lives in the process and is never persisted
"""

__version__ = "0.1.0"
__author__ = "RepoScope Contributors"
