"""
Migration of GitLab merge requests to GitHub pull requests.

A GitHub pull request needs two branches. For each merge request two
dedicated branches are created: a head branch at the merge request's head
commit and a base branch at the commit the merge request was merged into.
The base commit is found as the parent of the merge commit that is not the
head commit, which assumes an ordinary two-parent merge commit (what GitLab
creates when merging through its interface).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final

from github import GithubException
from gitlab.exceptions import GitlabError

from . import github_utils as ghu
from . import gitlab_utils as glu
from .comments import post_comments
from .reconciler import find_existing
from .utils import inform

if TYPE_CHECKING:
    from github.Issue import Issue as GithubIssue
    from github.PullRequest import PullRequest as GithubPullRequest
    from github.Repository import Repository as GithubRepository
    from gitlab.v4.objects import Project as GitlabProject

    from .models import MigrationStats, SourceMergeRequest
    from .text_transformer import TextTransformer

logger: logging.Logger = logging.getLogger(__name__)

# Closed and locked merge requests may point at commits that no longer exist
ELIGIBLE_STATES: Final[frozenset[str]] = frozenset({"merged", "opened", "open"})


def branch_names(merge_request: SourceMergeRequest) -> tuple[str, str]:
    """Return the (base, head) branch names for a merge request."""
    base_ref = f"MR{merge_request.iid}-{merge_request.target_branch}-base"
    head_ref = f"MR{merge_request.iid}-{merge_request.source_branch}-head"
    return base_ref, head_ref


def resolve_base_sha(parent_ids: list[str], head_sha: str | None) -> str | None:
    """Pick the merge commit parent that is not the head commit.

    Returns None unless exactly one such parent exists (octopus merges and
    fast-forwards are not supported).
    """
    other_parents = [sha for sha in parent_ids if sha != head_sha]
    return other_parents[0] if len(other_parents) == 1 else None


class MergeRequestMigrator:
    """Creates GitLab merge requests as GitHub pull requests."""

    def __init__(
        self,
        gitlab_project: GitlabProject,
        github_repo: GithubRepository,
        transformer: TextTransformer,
        stats: MigrationStats,
        *,
        per_page: int = ghu.DEFAULT_PER_PAGE,
    ) -> None:
        self.gitlab_project: GitlabProject = gitlab_project
        self.github_repo: GithubRepository = github_repo
        self.transformer: TextTransformer = transformer
        self.stats: MigrationStats = stats
        self.per_page: int = per_page

    def migrate(self) -> None:
        """Create a pull request for every merged or open merge request missing from GitHub.

        Raises:
            SourceReadError: If the GitLab merge requests cannot be listed
            DestinationReadError: If the GitHub pull requests cannot be listed
        """
        merge_requests = glu.get_merge_requests(self.gitlab_project)
        existing_pulls = ghu.get_all_pull_requests(self.github_repo, self.per_page)

        inform(f"Transferring {len(merge_requests)} Merge Requests")

        for merge_request in merge_requests:
            if merge_request.state not in ELIGIBLE_STATES:
                print(f"Skipping !{merge_request.iid} - {merge_request.title} ({merge_request.state})")
                self.stats.merge_requests_skipped += 1
                continue

            existing = find_existing(merge_request.title, existing_pulls)
            if existing is not None:
                print(f"Already exists as PR #{existing.number} (!{merge_request.iid} - {merge_request.title})")
                self.stats.already_existing += 1
                try:
                    self.update_pull_request_state(existing, merge_request)
                except GithubException as e:
                    msg = f"Could not close PR #{existing.number} (!{merge_request.iid}): {e}"
                    logger.error(msg)
                    self.stats.errors.append(msg)
                continue

            print(f"Creating PR from !{merge_request.iid} - {merge_request.title}")
            try:
                self.create_pull_request_and_comments(merge_request)
            except (GithubException, GitlabError) as e:
                msg = f"Could not create PR from !{merge_request.iid} - {merge_request.title}: {e}"
                logger.error(msg)
                self.stats.errors.append(msg)

    def resolve_base_commit(self, merge_request: SourceMergeRequest) -> str | None:
        """Find the commit the merge request was merged into.

        Open merge requests have no merge commit yet and use the base of
        their diff instead.
        """
        if not merge_request.merge_commit_sha:
            if merge_request.base_sha:
                return merge_request.base_sha
            try:
                return glu.get_merge_request_base_sha(self.gitlab_project, merge_request.iid)
            except GitlabError as e:
                logger.error(f"Could not fetch diff base of !{merge_request.iid}: {e}")
                return None

        try:
            parent_ids = glu.get_commit_parents(self.gitlab_project, merge_request.merge_commit_sha)
        except GitlabError as e:
            logger.error(f"Could not fetch merge commit {merge_request.merge_commit_sha} of !{merge_request.iid}: {e}")
            return None

        base_sha = resolve_base_sha(parent_ids, merge_request.sha)
        if base_sha is None:
            logger.warning(
                f"Merge commit {merge_request.merge_commit_sha} of !{merge_request.iid} "
                f"has parents {parent_ids}; cannot determine the base commit"
            )
        return base_sha

    def create_pull_request_and_comments(self, merge_request: SourceMergeRequest) -> GithubPullRequest:
        """Create both branches and the pull request, then copy comments and state."""
        base_ref, head_ref = branch_names(merge_request)

        # Failures are logged; the pull request is attempted with whatever branches exist
        for ref, sha in ((head_ref, merge_request.sha), (base_ref, self.resolve_base_commit(merge_request))):
            if ghu.create_branch(self.github_repo, ref, sha):
                self.stats.branches_created += 1

        pull = self.github_repo.create_pull(
            base=base_ref,
            head=head_ref,
            title=merge_request.title.strip(),
            body=self.transformer.transform(merge_request.description, merge_request),
        )
        self.stats.pull_requests_created += 1
        logger.debug(f"Created PR #{pull.number} from !{merge_request.iid}")

        self.create_pull_request_comments(pull, merge_request)
        self.update_pull_request_state(pull, merge_request)
        return pull

    def create_pull_request_comments(self, pull: GithubPullRequest, merge_request: SourceMergeRequest) -> None:
        """Copy the notes of a merge request as pull request comments, oldest first."""
        try:
            notes = glu.get_merge_request_notes(self.gitlab_project, merge_request.iid)
        except GitlabError as e:
            msg = f"Could not fetch notes for GitLab merge request !{merge_request.iid}: {e}"
            logger.error(msg)
            self.stats.errors.append(msg)
            return

        post_comments(
            notes,
            pull.create_issue_comment,
            self.transformer,
            self.stats,
            context=f"merge request !{merge_request.iid}",
        )

    def update_pull_request_state(
        self, pull: GithubPullRequest | GithubIssue, merge_request: SourceMergeRequest
    ) -> None:
        """Close the pull request of a merged merge request.

        The GitHub API cannot record a merge that happened elsewhere, so a
        merged merge request ends up as a closed pull request.
        """
        if merge_request.state != "merged" or pull.state == "closed":
            return

        pull.edit(state="closed")
        self.stats.closed += 1
        logger.debug(f"Closed PR #{pull.number}")
