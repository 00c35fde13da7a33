"""Entry point for running RepoScope as a module.

Usage:
    python -m reposcope [command] [options]

Example:
    python -m reposcope analyze https://github.com/owner/repo
    python -m reposcope check
"""

from reposcope.cli import app

if __name__ == "__main__":
    app()
