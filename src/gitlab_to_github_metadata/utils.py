"""
Utility functions for the GitLab to GitHub metadata migration tool.
"""

from __future__ import annotations

import logging

_BANNER: str = "===================================="


def setup_logging(*, verbose: bool = False) -> None:
    """Configure logging for the migration process."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(), logging.FileHandler("migration.log", mode="a")],
    )


def inform(msg: str) -> None:
    """Print a section heading so the user can follow the migration phases."""
    print(_BANNER)
    print(msg)
    print(_BANNER)
