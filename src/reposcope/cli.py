"""RepoScope CLI interface.

Commands:
- analyze: Run the four analysis pipelines against a GitHub repository
- check: Report which LLM provider slots initialize
- init: Initialize RepoScope configuration

Global options:
- --config: Path to configuration file
- --verbose: Enable verbose output with timestamps
- --quiet: Suppress info messages
- --ci: JSON log lines
- --version: Show version and exit
"""

import asyncio
import json
from pathlib import Path
from typing import Annotated

import typer

from reposcope import __version__
from reposcope.analyzers.github import GitHubClient
from reposcope.config import (
    CONFIG_DIR,
    CONFIG_FILE,
    RepoScopeConfig,
    create_default_config,
    load_config,
)
from reposcope.models.analysis import AnalysisStatus, RunRecord
from reposcope.pipelines.coordinator import AnalysisCoordinator
from reposcope.utils.logging import configure_from_cli, get_logger
from reposcope.utils.preflight import run_preflight

app = typer.Typer(
    name="reposcope",
    help="LLM-assisted architecture, code flow and migration risk analysis of GitHub repositories",
    add_completion=False,
    no_args_is_help=True,
)

# Global state
_config: RepoScopeConfig | None = None
_logger = get_logger()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"reposcope {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output with timestamps",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress info messages (warnings and errors only)",
        ),
    ] = False,
    ci: Annotated[
        bool,
        typer.Option(
            "--ci",
            help="Enable CI mode with JSON log lines",
        ),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """RepoScope - GitHub repository analysis.

    Infers architecture, code flow and migration risks of a repository,
    using an LLM where it can and deterministic heuristics where it cannot.
    """
    global _config

    configure_from_cli(verbose=verbose, quiet=quiet, ci=ci)

    try:
        _config = load_config(config_path=config)
        if _config.config_path:
            _logger.debug(f"Loaded config from: {_config.config_path}")
    except FileNotFoundError as e:
        _logger.error(str(e))
        raise typer.Exit(1)
    except Exception as e:
        _logger.error(f"Failed to load config: {e}")
        raise typer.Exit(1)


def _current_config() -> RepoScopeConfig:
    return _config or RepoScopeConfig()


# =============================================================================
# analyze command
# =============================================================================


async def _run_analysis(config: RepoScopeConfig, repository_url: str) -> RunRecord:
    async with GitHubClient(
        token=config.github.token,
        api_base=config.github.api_base,
        timeout=config.github.timeout,
    ) as github:
        coordinator = AnalysisCoordinator.from_config(config, github)
        return await coordinator.run(repository_url)


def _print_summary(record: RunRecord) -> None:
    results = record.results
    repository = results.get("repository")
    architecture = results.get("architecture")
    code_flow = results.get("code_flow")
    risk = results.get("risk")

    typer.echo(f"\nRepository: {record.repository_url}")
    if repository:
        summary = repository.summary
        typer.echo(f"  Purpose: {summary.purpose}")
        typer.echo(f"  Type: {summary.project_type} ({summary.complexity.value} complexity)")
        typer.echo(f"  Files: {repository.file_structure.total_files}")

    if architecture:
        info = architecture.architecture
        typer.echo(f"\nArchitecture: {info.type.value} ({info.style})")
        typer.echo(f"  Language: {info.tech_stack.language}")
        typer.echo(f"  Components: {len(info.components)}")
        if info.patterns:
            typer.echo(f"  Patterns: {', '.join(info.patterns)}")

    if code_flow:
        typer.echo("\nCode flow:")
        typer.echo(f"  Entry points: {len(code_flow.code_flow.entry_points)}")
        typer.echo(f"  Execution paths: {len(code_flow.code_flow.execution_paths)}")
        typer.echo(f"  Circular dependencies: {len(code_flow.dependencies.circular)}")

    if risk:
        typer.echo(f"\nOverall risk score: {risk.overall_risk_score:.1f}/100")
        typer.echo(f"  Vulnerabilities: {len(risk.vulnerabilities)}")
        typer.echo(f"  Migration blockers: {len(risk.migration_blockers)}")
        if risk.priority_actions:
            typer.echo("  Priority actions:")
            for action in risk.priority_actions:
                typer.echo(f"   • {action}")

    typer.echo()


@app.command()
def analyze(
    repository_url: Annotated[
        str,
        typer.Argument(help="GitHub repository URL (https://github.com/owner/repo)"),
    ],
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Write the JSON run record to this file",
            dir_okay=False,
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Print the JSON run record instead of a summary",
        ),
    ] = False,
) -> None:
    """Analyze a GitHub repository.

    Exit codes:
        0: Analysis completed
        1: Analysis failed
    """
    config = _current_config()
    _logger.info(f"Analyzing {repository_url}")

    record = asyncio.run(_run_analysis(config, repository_url))
    document = json.dumps(record.to_dict(), indent=2)

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(document)
        _logger.info(f"Wrote run record: {output}")

    if json_output:
        typer.echo(document)
    elif record.status == AnalysisStatus.COMPLETED:
        _print_summary(record)

    if record.status == AnalysisStatus.FAILED:
        _logger.error(f"Analysis failed: {record.error}")
        raise typer.Exit(1)


# =============================================================================
# check command
# =============================================================================


@app.command()
def check(
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output results as JSON",
        ),
    ] = False,
) -> None:
    """Validate LLM provider configuration.

    Exit codes:
        0: At least one provider slot initializes
        1: No provider slot initializes
    """
    result = run_preflight(_current_config())

    if json_output:
        typer.echo(json.dumps(result.to_dict(), indent=2))
    else:
        typer.echo("\n🔍 Preflight Check Results\n")
        for slot_check in result.checks:
            status = "✅" if slot_check.available else "❌"
            provider = f" ({slot_check.provider})" if slot_check.provider else ""
            typer.echo(f"  {status} {slot_check.slot}{provider}")
            if not slot_check.available:
                typer.echo(f"     └─ {slot_check.message}")
        typer.echo()

        for warning in result.warnings:
            typer.echo(f"⚠️  {warning}")

        if result.errors:
            typer.echo("❌ Preflight check FAILED")
            for error in result.errors:
                typer.echo(f"   • {error}")
        else:
            typer.echo("✅ Preflight check passed")

    if not result.success:
        raise typer.Exit(1)


# =============================================================================
# init command
# =============================================================================


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            help="Overwrite existing config",
        ),
    ] = False,
) -> None:
    """Initialize RepoScope configuration.

    Creates .reposcope/config.yaml with a commented default configuration.
    """
    config_dir = Path(CONFIG_DIR)
    config_dir.mkdir(exist_ok=True)
    config_file = config_dir / CONFIG_FILE

    if config_file.exists() and not force:
        _logger.error(f"Config already exists: {config_file}")
        _logger.info("Use --force to overwrite")
        raise typer.Exit(1)

    config_file.write_text(create_default_config())
    _logger.info(f"Created config: {config_file}")

    typer.echo("\n✅ RepoScope configuration initialized")
    typer.echo(f"   Config: {config_file}")


if __name__ == "__main__":
    app()
