"""
Milestone migration from GitLab to GitHub.
"""

from __future__ import annotations

import datetime as dt
import logging
from typing import TYPE_CHECKING, Any

from github import GithubException

from . import github_utils as ghu
from . import gitlab_utils as glu
from .reconciler import already_migrated
from .utils import inform

if TYPE_CHECKING:
    from github.Repository import Repository as GithubRepository
    from gitlab.v4.objects import Project as GitlabProject

    from .models import MigrationStats, SourceMilestone

logger: logging.Logger = logging.getLogger(__name__)


def due_on(due_date: str) -> dt.datetime:
    """Convert a GitLab due date ("YYYY-MM-DD") to midnight UTC of that day."""
    return dt.datetime.strptime(due_date, "%Y-%m-%d").replace(tzinfo=dt.UTC)


def milestone_params(milestone: SourceMilestone) -> dict[str, Any]:
    """Build create_milestone() arguments for a GitLab milestone.

    GitLab "active" milestones become open, every other state closed.
    """
    params: dict[str, Any] = {
        "title": milestone.title,
        "state": "open" if milestone.state == "active" else "closed",
        "description": milestone.description,
    }
    if milestone.due_date:
        params["due_on"] = due_on(milestone.due_date)
    return params


def migrate_milestones(
    gitlab_project: GitlabProject,
    github_repo: GithubRepository,
    stats: MigrationStats,
) -> None:
    """Create the GitLab milestones missing from GitHub, oldest first.

    Milestones that already exist (by title) are left untouched.

    Raises:
        SourceReadError: If the GitLab milestones cannot be listed
        DestinationReadError: If the GitHub milestones cannot be listed
    """
    milestones = glu.get_milestones(gitlab_project)
    existing_milestones = ghu.get_all_milestones(github_repo)

    inform("Transferring Milestones")

    for milestone in milestones:
        if already_migrated(milestone.title, existing_milestones):
            print(f"Already exists: {milestone.title}")
            stats.already_existing += 1
            continue

        print(f"Creating: {milestone.title}")
        try:
            github_repo.create_milestone(**milestone_params(milestone))
        except GithubException as e:
            msg = f"Could not create milestone {milestone.title}: {e}"
            logger.error(msg)
            stats.errors.append(msg)
            continue

        stats.milestones_created += 1
        logger.debug(f"Created milestone: {milestone.title}")
