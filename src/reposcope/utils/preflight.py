"""Preflight validation for `reposcope check`.

Reports which LLM provider slots initialize from the current configuration
and whether GitHub requests will be authenticated. Nothing is sent to a
provider; only slot construction is exercised.
"""

import os
from dataclasses import dataclass, field
from typing import Any

from reposcope.config import RepoScopeConfig
from reposcope.llm.client import create_structured_client


@dataclass
class SlotCheck:
    """Result of initializing one provider slot.

    Attributes:
        slot: Slot name (primary, fallback)
        available: Whether the slot initialized
        provider: Provider/model label if configured
        message: Status message (initialization error when unavailable)
    """

    slot: str
    available: bool
    provider: str | None = None
    message: str = ""


@dataclass
class PreflightResult:
    """Result of preflight validation.

    Attributes:
        success: Whether at least one provider slot initialized
        checks: Individual slot results
        errors: Error messages
        warnings: Warning messages
    """

    success: bool = False
    checks: list[SlotCheck] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_check(self, check: SlotCheck) -> None:
        """Add a slot check result."""
        self.checks.append(check)
        if check.available:
            self.success = True
        elif check.message:
            self.warnings.append(f"LLM {check.slot} slot unavailable: {check.message}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "success": self.success,
            "checks": [
                {
                    "slot": c.slot,
                    "available": c.available,
                    "provider": c.provider,
                    "message": c.message,
                }
                for c in self.checks
            ],
            "errors": self.errors,
            "warnings": self.warnings,
        }


def _slot_label(raw: dict[str, Any] | None) -> str | None:
    if not raw:
        return None
    return f"{raw.get('provider', '?')}/{raw.get('model', '?')}"


def run_preflight(config: RepoScopeConfig) -> PreflightResult:
    """Check provider slots and GitHub credentials.

    Args:
        config: Loaded configuration

    Returns:
        PreflightResult; ``success`` is False when no slot initializes
    """
    result = PreflightResult()
    client = create_structured_client(config.llm)
    available = client.available_slots()

    for slot, raw in (("primary", config.llm.primary), ("fallback", config.llm.fallback)):
        if raw is None:
            continue
        result.add_check(
            SlotCheck(
                slot=slot,
                available=slot in available,
                provider=_slot_label(raw),
                message=client.init_errors.get(slot, "initialized"),
            )
        )

    if not result.success:
        result.errors.append("No LLM provider slot could be initialized")

    if not (config.github.token or os.environ.get("GITHUB_TOKEN")):
        result.warnings.append(
            "No GitHub token configured; unauthenticated requests are rate limited to 60/hour"
        )

    return result
