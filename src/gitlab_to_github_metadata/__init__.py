"""
GitLab to GitHub Metadata Migration Tool

Migrates milestones, labels, issues with their comments and merge requests
from a GitLab project to a GitHub repository, keeping issue numbers aligned
and annotating everything with its original author.
"""

from __future__ import annotations

from .cli import main
from .config import Settings, load_settings
from .exceptions import ConfigurationError, DestinationReadError, MigrationError, SourceReadError
from .migrator import GitlabToGithubMigrator
from .models import MigrationStats
from .text_transformer import TextTransformer
from .utils import setup_logging

# Package version
__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "DestinationReadError",
    "GitlabToGithubMigrator",
    "MigrationError",
    "MigrationStats",
    "Settings",
    "SourceReadError",
    "TextTransformer",
    "load_settings",
    "main",
    "setup_logging",
]
