"""Transfer of GitLab notes as GitHub comments."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from github import GithubException

from .note_filter import classify_note

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from .models import MigrationStats, SourceNote
    from .text_transformer import TextTransformer

logger: logging.Logger = logging.getLogger(__name__)


def post_comments(
    notes: Iterable[SourceNote],
    create_comment: Callable[[str], object],
    transformer: TextTransformer,
    stats: MigrationStats,
    *,
    context: str,
) -> None:
    """Post notes one after another through create_comment.

    State-change notes are dropped. A comment that fails to post is logged
    and recorded; the remaining notes are still posted.

    Args:
        notes: Notes sorted in the order they should appear
        create_comment: Posts one comment body to GitHub
        transformer: Converts note bodies for GitHub
        stats: Statistics to update
        context: Context for log messages (e.g., "issue #5")
    """
    for note in notes:
        category = classify_note(note.body)
        if category is not None:
            logger.debug(f"Skipping {category.value} note {note.id} of {context}")
            stats.notes_skipped += 1
            continue

        body = transformer.transform(note.body, note)
        try:
            create_comment(body)
        except GithubException as e:
            msg = f"Could not create comment for note {note.id} of {context}: {e}"
            logger.error(msg)
            stats.errors.append(msg)
            continue

        stats.comments_created += 1
