from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from gitlab import Gitlab
from gitlab.exceptions import GitlabError

from .exceptions import SourceReadError
from .models import SourceIssue, SourceLabel, SourceMergeRequest, SourceMilestone, SourceNote

if TYPE_CHECKING:
    from gitlab.v4.objects import Project as GitlabProject

# Module-wide logger
logger: logging.Logger = logging.getLogger(__name__)


def get_client(url: str, token: str | None = None) -> Gitlab:
    """Get a GitLab client for the instance at url using the token."""
    return Gitlab(url=url, private_token=token)


def get_project(client: Gitlab, project_id: int) -> GitlabProject:
    """Get a project handle without fetching it."""
    return client.projects.get(project_id, lazy=True)


def list_projects(client: Gitlab) -> list[Any]:
    """List all projects the authenticated user is a member of."""
    try:
        return client.projects.list(membership=True, get_all=True)
    except GitlabError as e:
        msg = f"Could not fetch GitLab projects: {e}"
        raise SourceReadError(msg) from e


def get_milestones(project: GitlabProject) -> list[SourceMilestone]:
    """Get all milestones of the project, oldest first."""
    try:
        milestones = [SourceMilestone.from_gitlab(m) for m in project.milestones.list(get_all=True)]
    except GitlabError as e:
        msg = f"Could not fetch GitLab milestones: {e}"
        raise SourceReadError(msg) from e
    milestones.sort(key=lambda m: m.id)
    return milestones


def get_labels(project: GitlabProject) -> list[SourceLabel]:
    try:
        return [SourceLabel.from_gitlab(label) for label in project.labels.list(get_all=True)]
    except GitlabError as e:
        msg = f"Could not fetch GitLab labels: {e}"
        raise SourceReadError(msg) from e


def get_issues(project: GitlabProject) -> list[SourceIssue]:
    """Get all issues of the project sorted by iid."""
    try:
        issues = [SourceIssue.from_gitlab(i) for i in project.issues.list(get_all=True, state="all")]
    except GitlabError as e:
        msg = f"Could not fetch GitLab issues: {e}"
        raise SourceReadError(msg) from e
    issues.sort(key=lambda i: i.iid)
    return issues


def get_merge_requests(project: GitlabProject) -> list[SourceMergeRequest]:
    """Get all merge requests of the project, oldest first."""
    try:
        merge_requests = [
            SourceMergeRequest.from_gitlab(mr) for mr in project.mergerequests.list(get_all=True, state="all")
        ]
    except GitlabError as e:
        msg = f"Could not fetch GitLab merge requests: {e}"
        raise SourceReadError(msg) from e
    merge_requests.sort(key=lambda mr: mr.id)
    return merge_requests


def _sorted_notes(notes: list[Any]) -> list[SourceNote]:
    result = [SourceNote.from_gitlab(note) for note in notes]
    result.sort(key=lambda n: n.id)
    return result


def get_issue_notes(project: GitlabProject, issue_iid: int) -> list[SourceNote]:
    """Get all notes of an issue sorted by id. GitlabError propagates to the caller."""
    issue = project.issues.get(issue_iid, lazy=True)
    return _sorted_notes(issue.notes.list(get_all=True))


def get_merge_request_notes(project: GitlabProject, mr_iid: int) -> list[SourceNote]:
    """Get all notes of a merge request sorted by id. GitlabError propagates to the caller."""
    merge_request = project.mergerequests.get(mr_iid, lazy=True)
    return _sorted_notes(merge_request.notes.list(get_all=True))


def get_commit_parents(project: GitlabProject, sha: str) -> list[str]:
    """Get the parent commit shas of a commit."""
    commit = project.commits.get(sha)
    return list(commit.parent_ids)


def get_merge_request_base_sha(project: GitlabProject, mr_iid: int) -> str | None:
    """Get the base commit of a merge request's diff.

    Listed merge requests carry no diff_refs, so the merge request is fetched
    on its own. GitlabError propagates to the caller.
    """
    merge_request = project.mergerequests.get(mr_iid)
    diff_refs = getattr(merge_request, "diff_refs", None)
    return diff_refs.get("base_sha") if isinstance(diff_refs, dict) else None
