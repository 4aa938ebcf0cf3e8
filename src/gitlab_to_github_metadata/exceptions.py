"""
Custom exception classes for the GitLab to GitHub metadata migration tool.
"""

from __future__ import annotations


class MigrationError(Exception):
    """Base exception for migration errors."""


class ConfigurationError(MigrationError):
    """Raised when the settings file is missing or incomplete."""


class SourceReadError(MigrationError):
    """Raised when a GitLab collection cannot be listed."""


class DestinationReadError(MigrationError):
    """Raised when a GitHub collection needed for reconciliation cannot be listed."""
