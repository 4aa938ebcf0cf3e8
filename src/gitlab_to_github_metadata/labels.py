"""
Label migration from GitLab to GitHub.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from github import GithubException

from . import github_utils as ghu
from . import gitlab_utils as glu
from .models import ATTACHMENT_LABEL_COLOR, ATTACHMENT_LABEL_NAME, SourceLabel
from .utils import inform

if TYPE_CHECKING:
    from github.Repository import Repository as GithubRepository
    from gitlab.v4.objects import Project as GitlabProject

    from .models import MigrationStats

logger: logging.Logger = logging.getLogger(__name__)


def migrate_labels(
    gitlab_project: GitlabProject,
    github_repo: GithubRepository,
    stats: MigrationStats,
    *,
    use_lower_case: bool = True,
    attachment_label: bool = True,
) -> None:
    """Create the GitLab labels missing from GitHub.

    Label names are compared exactly, after optional lower-casing. Failing to
    create a single label is not fatal: lower-casing can make two GitLab
    labels collide, and the second one is then rejected by GitHub.

    Args:
        gitlab_project: The GitLab project to migrate labels from
        github_repo: The GitHub repository to migrate labels to
        stats: Statistics to update
        use_lower_case: Lower-case label names before comparing and creating
        attachment_label: Also create the label flagging issues with attachments

    Raises:
        SourceReadError: If the GitLab labels cannot be listed
        DestinationReadError: If the GitHub labels cannot be listed
    """
    labels = glu.get_labels(gitlab_project)
    existing_names = set(ghu.get_all_label_names(github_repo))

    inform("Transferring Labels")

    if attachment_label:
        labels.append(SourceLabel(name=ATTACHMENT_LABEL_NAME, color=ATTACHMENT_LABEL_COLOR))

    for label in labels:
        # GitHub prefers lowercase label names
        name = label.name.lower() if use_lower_case else label.name

        if name in existing_names:
            print(f"Already exists: {name}")
            stats.already_existing += 1
            continue

        print(f"Creating: {name}")
        try:
            github_repo.create_label(
                name=name,
                color=label.color.lstrip("#"),
                description=label.description,
            )
        except GithubException as e:
            if ghu.is_already_exists_error(e):
                logger.info(f"Label already exists: {name}")
            else:
                msg = f"Could not create label {name}: {e}"
                logger.error(msg)
                stats.errors.append(msg)
            continue

        stats.labels_created += 1
        logger.debug(f"Created label: {label.name} -> {name}")
