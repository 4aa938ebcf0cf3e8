"""
Issue and comment migration from GitLab to GitHub.

GitHub numbers issues in creation order, so GitLab issues are created
strictly one after another, sorted by iid. Gaps left by deleted GitLab issues
are filled with closed placeholder issues to keep the numbers aligned. This
only works as long as the GitHub repository had no issues created out of
order.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Final

from github import GithubException
from gitlab.exceptions import GitlabError

from . import github_utils as ghu
from . import gitlab_utils as glu
from .comments import post_comments
from .models import ATTACHMENT_LABEL_NAME, SourceIssue
from .reconciler import find_existing, titles_match
from .utils import inform

if TYPE_CHECKING:
    from collections.abc import Mapping

    from github.Issue import Issue as GithubIssue
    from github.Milestone import Milestone as GithubMilestone
    from github.Repository import Repository as GithubRepository
    from gitlab.v4.objects import Project as GitlabProject

    from .models import MigrationStats
    from .text_transformer import TextTransformer

logger: logging.Logger = logging.getLogger(__name__)

# Markdown links to GitLab uploads contain this path
UPLOADS_MARKER: Final[str] = "/uploads/"


def fill_gaps(issues: list[SourceIssue]) -> list[SourceIssue]:
    """Insert a placeholder for every iid missing from issues.

    Args:
        issues: GitLab issues sorted by iid

    Returns:
        A new list in which position n holds the issue with iid n + 1
    """
    filled: list[SourceIssue] = []
    for issue in issues:
        while issue.iid > len(filled) + 1:
            expected_iid = len(filled) + 1
            filled.append(SourceIssue.placeholder(expected_iid))
            print(f"Added placeholder issue for GitLab issue #{expected_iid}")
        filled.append(issue)
    return filled


def map_assignee(assignee: str | None, github_username: str, usermap: Mapping[str, str]) -> list[str]:
    """Map a GitLab assignee to GitHub assignees.

    Only the migration user and users present in the user map can be carried
    over; any other assignee is dropped.
    """
    if not assignee:
        return []
    if assignee == github_username:
        return [github_username]
    if assignee in usermap:
        return [usermap[assignee]]
    return []


def find_existing_issue(issue: SourceIssue, existing_issues: list[GithubIssue]) -> GithubIssue | None:
    """Find the GitHub issue a GitLab issue was migrated to.

    All placeholders share one title, so a placeholder only counts as migrated
    if the GitHub issue with its number is a placeholder too.
    """
    if not issue.is_placeholder:
        return find_existing(issue.title, existing_issues)
    for github_issue in existing_issues:
        if github_issue.number == issue.iid and titles_match(issue.title, github_issue.title):
            return github_issue
    return None


def issue_labels(issue: SourceIssue, body: str) -> list[str]:
    """GitLab labels of the issue, plus the attachment label if body links an upload."""
    labels = list(issue.labels)
    if UPLOADS_MARKER in body and ATTACHMENT_LABEL_NAME not in labels:
        labels.append(ATTACHMENT_LABEL_NAME)
    return labels


class IssueMigrator:
    """Creates GitLab issues and their comments in GitHub."""

    def __init__(
        self,
        gitlab_project: GitlabProject,
        github_repo: GithubRepository,
        transformer: TextTransformer,
        stats: MigrationStats,
        *,
        github_username: str,
        usermap: Mapping[str, str] | None = None,
        per_page: int = ghu.DEFAULT_PER_PAGE,
    ) -> None:
        self.gitlab_project: GitlabProject = gitlab_project
        self.github_repo: GithubRepository = github_repo
        self.transformer: TextTransformer = transformer
        self.stats: MigrationStats = stats
        self.github_username: str = github_username
        self.usermap: dict[str, str] = dict(usermap or {})
        self.per_page: int = per_page

    def migrate(self) -> None:
        """Create every GitLab issue missing from GitHub, in iid order.

        Issues that already exist (by title) only get their closed state fixed.

        Raises:
            SourceReadError: If the GitLab issues cannot be listed
            DestinationReadError: If the GitHub milestones or issues cannot be listed
        """
        milestones = ghu.get_all_milestones(self.github_repo)
        issues = glu.get_issues(self.gitlab_project)
        existing_issues = [
            i for i in ghu.get_all_issues(self.github_repo, self.per_page) if i.pull_request is None
        ]

        inform(f"Transferring {len(issues)} Issues")

        for issue in fill_gaps(issues):
            existing = find_existing_issue(issue, existing_issues)
            if existing is None:
                print(f"Creating: {issue.iid} - {issue.title}")
                try:
                    self.create_issue_and_comments(issue, milestones)
                except (GithubException, GitlabError) as e:
                    msg = f"Could not create issue: {issue.iid} - {issue.title}: {e}"
                    logger.error(msg)
                    self.stats.errors.append(msg)
                continue

            print(f"Already exists: {issue.iid} - {issue.title}")
            self.stats.already_existing += 1
            try:
                self.update_issue_state(existing, issue)
            except GithubException as e:
                msg = f"Could not close issue #{existing.number} ({issue.iid} - {issue.title}): {e}"
                logger.error(msg)
                self.stats.errors.append(msg)

    def build_issue_params(self, issue: SourceIssue, milestones: list[GithubMilestone]) -> dict[str, Any]:
        """Build create_issue() arguments for a GitLab issue."""
        body = self.transformer.transform(issue.description, issue)
        params: dict[str, Any] = {
            "title": issue.title.strip(),
            "body": body,
            "labels": issue_labels(issue, body),
        }

        assignees = map_assignee(issue.assignee, self.github_username, self.usermap)
        if assignees:
            params["assignees"] = assignees

        if issue.milestone:
            milestone = find_existing(issue.milestone, milestones)
            if milestone is not None:
                params["milestone"] = milestone
            else:
                logger.warning(f"Milestone '{issue.milestone}' of issue #{issue.iid} not found in GitHub")

        return params

    def create_issue_and_comments(self, issue: SourceIssue, milestones: list[GithubMilestone]) -> GithubIssue:
        """Create the GitHub issue, copy its comments and close it if needed."""
        github_issue = self.github_repo.create_issue(**self.build_issue_params(issue, milestones))

        if issue.is_placeholder:
            self.stats.placeholders_created += 1
        else:
            self.stats.issues_created += 1
            self.create_issue_comments(github_issue, issue)

        logger.debug(f"Created issue #{github_issue.number}: {issue.title}")
        try:
            self.update_issue_state(github_issue, issue)
        except GithubException as e:
            msg = f"Could not close issue #{github_issue.number} ({issue.iid} - {issue.title}): {e}"
            logger.error(msg)
            self.stats.errors.append(msg)
        return github_issue

    def create_issue_comments(self, github_issue: GithubIssue, issue: SourceIssue) -> None:
        """Copy the notes of a GitLab issue as GitHub comments, oldest first."""
        try:
            notes = glu.get_issue_notes(self.gitlab_project, issue.iid)
        except GitlabError as e:
            msg = f"Could not fetch notes for GitLab issue #{issue.iid}: {e}"
            logger.error(msg)
            self.stats.errors.append(msg)
            return

        post_comments(
            notes,
            github_issue.create_comment,
            self.transformer,
            self.stats,
            context=f"issue #{issue.iid}",
        )

    def update_issue_state(self, github_issue: GithubIssue, issue: SourceIssue) -> None:
        """Close the GitHub issue if the GitLab issue is closed.

        GitHub issues start open, so only closing is ever needed; a closed
        GitHub issue is never reopened.
        """
        if issue.state != "closed" or github_issue.state == "closed":
            return

        github_issue.edit(state="closed")
        self.stats.closed += 1
        logger.debug(f"Closed issue #{github_issue.number}")
