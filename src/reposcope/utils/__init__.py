"""RepoScope utility modules.

- logging: Standardized logging with human/verbose/JSON modes
- preflight: LLM provider slot and credential checks
"""

from reposcope.utils.logging import get_logger, setup_logging

__all__ = [
    "get_logger",
    "setup_logging",
]
