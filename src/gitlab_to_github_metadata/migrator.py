"""
Main migration class for GitLab to GitHub metadata migration.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from github import GithubException

from . import github_utils as ghu
from . import gitlab_utils as glu
from .exceptions import DestinationReadError, MigrationError
from .issues import IssueMigrator
from .labels import migrate_labels
from .merge_requests import MergeRequestMigrator
from .milestones import migrate_milestones
from .models import MigrationStats
from .text_transformer import TextTransformer

if TYPE_CHECKING:
    import github.Repository
    from github import Github
    from gitlab import Gitlab
    from gitlab.v4.objects import Project as GitlabProject

    from .config import Settings

# Module-wide logger
logger: logging.Logger = logging.getLogger(__name__)


class GitlabToGithubMigrator:
    """Main migration class.

    Runs the migration phases strictly in order: milestones, labels, issues,
    merge requests. Issues refer to milestones and labels, so these must
    exist first. Every GitHub write completes before the next one starts.
    """

    def __init__(self, settings: Settings, *, per_page: int = ghu.DEFAULT_PER_PAGE) -> None:
        self.settings: Settings = settings
        self.per_page: int = per_page

        self.gitlab_client: Gitlab = glu.get_client(settings.gitlab.url, settings.gitlab.token)
        self.transformer: TextTransformer = TextTransformer(settings.usermap, settings.projectmap)

        self._github_client: Github | None = None
        self._github_repo: github.Repository.Repository | None = None
        self._gitlab_project: GitlabProject | None = None

        logger.info(f"Initialized migrator for GitLab {settings.gitlab.url} -> GitHub {settings.github.full_name}")

    @property
    def github_client(self) -> Github:
        # Created on first use: listing GitLab projects needs no GitHub token
        if self._github_client is None:
            self._github_client = ghu.get_client(
                self.settings.github.token,
                self.settings.github.base_url,
                per_page=self.per_page,
            )
        return self._github_client

    @property
    def github_repo(self) -> github.Repository.Repository:
        if self._github_repo is None:
            self._github_repo = ghu.get_repo(self.github_client, self.settings.github.owner, self.settings.github.repo)
        return self._github_repo

    @property
    def gitlab_project(self) -> GitlabProject:
        if self._gitlab_project is None:
            project_id = self.settings.gitlab.project_id
            if project_id is None:
                msg = "No GitLab project selected. Set gitlab.projectId in the settings file."
                raise MigrationError(msg)
            self._gitlab_project = glu.get_project(self.gitlab_client, project_id)
        return self._gitlab_project

    def list_projects(self) -> list[Any]:
        """Print all GitLab projects the user is a member of, so one can be selected."""
        projects = glu.list_projects(self.gitlab_client)

        for project in projects:
            print(f"{project.id}\t{project.name}\t--\t{project.description or ''}")

        print("\n")
        print(
            "Select which project ID should be transported to GitHub. "
            "Edit the settings file accordingly (gitlab.projectId)."
        )
        print("\n")
        return projects

    def print_rate_limit(self) -> None:
        try:
            remaining, limit = ghu.get_rate_limit(self.github_client)
        except GithubException as e:
            msg = f"Could not read the GitHub rate limit: {e}"
            raise DestinationReadError(msg) from e
        print(f"  Rate Limit: {remaining} / {limit}")

    def migrate(self) -> MigrationStats:
        """Execute the complete migration.

        Returns:
            Statistics of the run, including the per-item errors that were tolerated

        Raises:
            MigrationError: If a collection needed to decide what to create cannot be read
        """
        stats = MigrationStats()

        print("====================================")
        print("Beginning GitLab to GitHub Migration")
        self.print_rate_limit()
        print("====================================")

        migrate_milestones(self.gitlab_project, self.github_repo, stats)

        migrate_labels(
            self.gitlab_project,
            self.github_repo,
            stats,
            use_lower_case=self.settings.conversion.use_lower_case_labels,
        )

        IssueMigrator(
            self.gitlab_project,
            self.github_repo,
            self.transformer,
            stats,
            github_username=self.settings.github.username,
            usermap=self.settings.usermap,
            per_page=self.per_page,
        ).migrate()

        MergeRequestMigrator(
            self.gitlab_project,
            self.github_repo,
            self.transformer,
            stats,
            per_page=self.per_page,
        ).migrate()

        print("\n\nTransfer complete!\n\n")
        try:
            self.print_rate_limit()
        except DestinationReadError as e:
            logger.warning(str(e))

        logger.info(f"Migration finished with {len(stats.errors)} errors")
        return stats
