"""Classification of GitLab notes that only narrate state changes.

GitLab records state changes (closing, relabeling, reassigning, ...) as notes
on the issue. GitHub tracks that state itself, so these notes are not copied.
A note is matched against a table of patterns per category; the patterns are
searched anywhere in the note body.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Final


class SyntheticNoteCategory(Enum):
    """Kinds of GitLab notes that narrate a state change."""

    STATUS_CHANGE = "status_change"
    MILESTONE_CHANGE = "milestone_change"
    LABEL_CHANGE = "label_change"
    REASSIGNMENT = "reassignment"
    CROSS_REFERENCE = "cross_reference"


# "Status changed to closed by commit ..." names the closing commit and is kept
SYNTHETIC_NOTE_PATTERNS: Final[dict[SyntheticNoteCategory, tuple[re.Pattern[str], ...]]] = {
    SyntheticNoteCategory.STATUS_CHANGE: (re.compile(r"Status changed to (?!closed by commit)"),),
    SyntheticNoteCategory.MILESTONE_CHANGE: (
        re.compile(r"changed milestone to "),
        re.compile(r"Milestone changed to "),
    ),
    SyntheticNoteCategory.LABEL_CHANGE: (
        re.compile(r"added .* labels"),
        re.compile(r"Added ~.* label"),
    ),
    SyntheticNoteCategory.REASSIGNMENT: (re.compile(r"Reassigned to "),),
    SyntheticNoteCategory.CROSS_REFERENCE: (re.compile(r"mentioned in issue"),),
}


def classify_note(body: str) -> SyntheticNoteCategory | None:
    """Return the category of a state-change note, or None for a regular comment."""
    for category, patterns in SYNTHETIC_NOTE_PATTERNS.items():
        if any(pattern.search(body) for pattern in patterns):
            return category
    return None


def is_synthetic_note(body: str) -> bool:
    """Check whether a note only narrates a state change and must not be copied."""
    return classify_note(body) is not None
