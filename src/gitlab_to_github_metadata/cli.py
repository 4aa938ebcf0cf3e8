"""
Command-line interface for the GitLab to GitHub metadata migration tool.
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import asdict
from typing import TYPE_CHECKING

from .config import DEFAULT_SETTINGS_PATH, load_settings
from .exceptions import MigrationError
from .migrator import GitlabToGithubMigrator
from .utils import setup_logging

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .models import MigrationStats

logger: logging.Logger = logging.getLogger(__name__)


def parse_arguments(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Migrate GitLab milestones, labels, issues and merge requests to a GitHub repository"
    )

    _ = parser.add_argument(
        "settings",
        nargs="?",
        default=DEFAULT_SETTINGS_PATH,
        help=f"Path to the YAML settings file (default: {DEFAULT_SETTINGS_PATH})",
    )

    _ = parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    return parser.parse_args(argv)


def _print_summary(stats: MigrationStats) -> None:
    """Print migration statistics and the errors that were tolerated."""
    print("\n" + "=" * 50)
    print("MIGRATION SUMMARY")
    print("=" * 50)

    for key, value in asdict(stats).items():
        if key == "errors":
            continue
        print(f"{key.replace('_', ' ').capitalize()}: {value}")

    if stats.errors:
        print(f"\nErrors ({len(stats.errors)}):")
        for error in stats.errors:
            print(f"  - {error}")

    print("=" * 50)


def main(argv: Sequence[str] | None = None) -> None:
    """Main entry point."""
    args = parse_arguments(argv)

    verbose: bool = getattr(args, "verbose", False)
    setup_logging(verbose=verbose)

    try:
        settings = load_settings(args.settings)
        migrator = GitlabToGithubMigrator(settings)

        # Without a project, help the user pick one
        if settings.gitlab.project_id is None:
            migrator.list_projects()
            return

        stats = migrator.migrate()

    except MigrationError as e:
        logger.error(f"Migration failed: {e}")
        sys.exit(1)

    _print_summary(stats)
