"""Normalized GitLab data exchanged between the migration phases.

python-gitlab objects expose attributes only when the API returned them, so
each model is built through a ``from_gitlab`` constructor that reads the
attributes it needs with sensible defaults. The migration phases and the text
transformer only ever see these models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Final

PLACEHOLDER_TITLE: Final[str] = "placeholder issue for issue which does not exist and was probably deleted in GitLab"
PLACEHOLDER_BODY: Final[str] = "This is to ensure the issue numbers in GitLab and GitHub are the same"

ATTACHMENT_LABEL_NAME: Final[str] = "has attachment"
ATTACHMENT_LABEL_COLOR: Final[str] = "#fbca04"


def _username(user: Any) -> str | None:  # noqa: ANN401 - gitlab returns plain dicts
    if isinstance(user, dict):
        return user.get("username")
    return None


@dataclass
class SourceMilestone:
    """A GitLab milestone."""

    id: int
    title: str
    description: str = ""
    state: str = "active"
    due_date: str | None = None  # "YYYY-MM-DD"

    @classmethod
    def from_gitlab(cls, milestone: Any) -> SourceMilestone:  # noqa: ANN401
        return cls(
            id=milestone.id,
            title=milestone.title,
            description=getattr(milestone, "description", None) or "",
            state=getattr(milestone, "state", "active"),
            due_date=getattr(milestone, "due_date", None),
        )


@dataclass
class SourceLabel:
    """A GitLab label. GitLab colors carry a leading '#'."""

    name: str
    color: str
    description: str = ""

    @classmethod
    def from_gitlab(cls, label: Any) -> SourceLabel:  # noqa: ANN401
        return cls(
            name=label.name,
            color=label.color,
            description=getattr(label, "description", None) or "",
        )


@dataclass
class SourceIssue:
    """A GitLab issue, or a placeholder standing in for a deleted one.

    Placeholders have no author and no creation date, which keeps the text
    transformer from adding an attribution line to them.
    """

    iid: int
    title: str
    description: str
    state: str
    id: int | None = None
    author: str | None = None
    created_at: str | None = None
    assignee: str | None = None
    milestone: str | None = None  # milestone title
    labels: list[str] = field(default_factory=list)
    is_placeholder: bool = False

    @classmethod
    def from_gitlab(cls, issue: Any) -> SourceIssue:  # noqa: ANN401
        milestone = getattr(issue, "milestone", None)
        return cls(
            iid=issue.iid,
            id=issue.id,
            title=issue.title,
            description=getattr(issue, "description", None) or "",
            state=issue.state,
            author=_username(getattr(issue, "author", None)),
            created_at=getattr(issue, "created_at", None),
            assignee=_username(getattr(issue, "assignee", None)),
            milestone=milestone.get("title") if isinstance(milestone, dict) else None,
            labels=list(getattr(issue, "labels", None) or []),
        )

    @classmethod
    def placeholder(cls, iid: int) -> SourceIssue:
        """Closed stand-in for the deleted GitLab issue with the given iid."""
        return cls(
            iid=iid,
            title=PLACEHOLDER_TITLE,
            description=PLACEHOLDER_BODY,
            state="closed",
            is_placeholder=True,
        )


@dataclass
class SourceNote:
    """A comment on a GitLab issue or merge request."""

    id: int
    body: str
    author: str | None = None
    created_at: str | None = None

    @classmethod
    def from_gitlab(cls, note: Any) -> SourceNote:  # noqa: ANN401
        return cls(
            id=note.id,
            body=getattr(note, "body", None) or "",
            author=_username(getattr(note, "author", None)),
            created_at=getattr(note, "created_at", None),
        )


@dataclass
class SourceMergeRequest:
    """A GitLab merge request."""

    id: int
    iid: int
    title: str
    description: str
    state: str  # opened, merged, closed or locked
    source_branch: str
    target_branch: str
    sha: str | None = None  # head commit
    merge_commit_sha: str | None = None
    base_sha: str | None = None  # from diff_refs, only present on single merge requests
    author: str | None = None
    created_at: str | None = None

    @classmethod
    def from_gitlab(cls, merge_request: Any) -> SourceMergeRequest:  # noqa: ANN401
        diff_refs = getattr(merge_request, "diff_refs", None)
        return cls(
            id=merge_request.id,
            iid=merge_request.iid,
            title=merge_request.title,
            description=getattr(merge_request, "description", None) or "",
            state=merge_request.state,
            source_branch=merge_request.source_branch,
            target_branch=merge_request.target_branch,
            sha=getattr(merge_request, "sha", None),
            merge_commit_sha=getattr(merge_request, "merge_commit_sha", None),
            base_sha=diff_refs.get("base_sha") if isinstance(diff_refs, dict) else None,
            author=_username(getattr(merge_request, "author", None)),
            created_at=getattr(merge_request, "created_at", None),
        )


@dataclass
class MigrationStats:
    """Statistics collected during migration."""

    milestones_created: int = 0
    labels_created: int = 0
    issues_created: int = 0
    placeholders_created: int = 0
    comments_created: int = 0
    notes_skipped: int = 0
    branches_created: int = 0  # includes branches left over from an earlier run
    pull_requests_created: int = 0
    merge_requests_skipped: int = 0
    already_existing: int = 0
    closed: int = 0
    errors: list[str] = field(default_factory=list)
