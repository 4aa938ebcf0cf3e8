"""Conversion of GitLab issue, merge request and comment bodies for GitHub.

The GitHub API creates everything as the migration user, so every converted
body starts with a line naming the original GitLab author and date. User
mentions and cross-project issue references are then rewritten through the
configured user and project maps.
"""

from __future__ import annotations

import datetime as dt
import logging
import re
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Mapping

logger: logging.Logger = logging.getLogger(__name__)


class AttributedItem(Protocol):
    """Anything carrying GitLab authorship: issues, notes and merge requests."""

    @property
    def author(self) -> str | None: ...

    @property
    def created_at(self) -> str | None: ...


def format_date(iso_timestamp: str) -> str:
    """Format an ISO 8601 timestamp like "Jan 15, 2024, 10:30" (UTC, 24-hour clock).

    Returns the original value if it cannot be parsed.
    """
    try:
        timestamp = dt.datetime.fromisoformat(iso_timestamp)
    except (ValueError, TypeError):
        return iso_timestamp

    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone(dt.UTC)
    return f"{timestamp:%b} {timestamp.day}, {timestamp.year}, {timestamp:%H:%M}"


def add_migration_line(body: str, item: AttributedItem, source_name: str = "GitLab") -> str:
    """Prefix body with a line stating who created the item in GitLab and when.

    Items without author or creation date (placeholders) are returned unchanged.
    """
    if not item.author or not item.created_at:
        return body
    return f"In {source_name} by @{item.author} on {format_date(item.created_at)}\n\n{body}"


def build_reference_pattern(usermap: Mapping[str, str], projectmap: Mapping[str, str]) -> re.Pattern[str] | None:
    """Build one regular expression matching mapped "@user" and "group/project#" tokens.

    Longer keys are tried first so that "@john.doe" wins over "@john". A user
    mention must not continue with further username characters, and a project
    reference must not be the tail of a longer path.

    Returns:
        The compiled pattern, or None if both maps are empty
    """
    alternatives: list[str] = []
    if usermap:
        users = "|".join(re.escape(name) for name in sorted(usermap, key=len, reverse=True))
        alternatives.append(rf"@(?P<user>{users})(?![\w-]|\.\w)")
    if projectmap:
        projects = "|".join(re.escape(path) for path in sorted(projectmap, key=len, reverse=True))
        alternatives.append(rf"(?<![\w./-])(?P<project>{projects})#")

    if not alternatives:
        return None
    return re.compile("|".join(alternatives))


class TextTransformer:
    """Converts GitLab markdown bodies for GitHub.

    The reference pattern is built once from the user and project maps.
    """

    _usermap: dict[str, str]
    _projectmap: dict[str, str]
    _pattern: re.Pattern[str] | None

    def __init__(
        self,
        usermap: Mapping[str, str] | None = None,
        projectmap: Mapping[str, str] | None = None,
        *,
        source_name: str = "GitLab",
    ) -> None:
        self._usermap = dict(usermap or {})
        self._projectmap = dict(projectmap or {})
        self._pattern = build_reference_pattern(self._usermap, self._projectmap)
        self.source_name: str = source_name

    def _replace(self, match: re.Match[str]) -> str:
        user = match.group("user") if self._usermap else None
        if user is not None:
            return f"@{self._usermap[user]}"
        project = match.group("project") if self._projectmap else None
        if project is not None:
            return f"{self._projectmap[project]}#"
        return match.group(0)

    def rewrite_references(self, text: str) -> str:
        """Rewrite mapped user mentions and cross-project references."""
        if self._pattern is None:
            return text
        return self._pattern.sub(self._replace, text)

    def transform(self, body: str | None, item: AttributedItem) -> str:
        """Convert an issue, merge request or comment body.

        Items without author or creation date are returned unchanged.
        """
        body = body or ""
        if not item.author or not item.created_at:
            return body

        converted = add_migration_line(body, item, self.source_name)
        return self.rewrite_references(converted)
