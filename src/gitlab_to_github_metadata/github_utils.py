from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final

from github import Auth, Github, GithubException

from .config import DEFAULT_GITHUB_API_URL
from .exceptions import DestinationReadError

if TYPE_CHECKING:
    from github.Issue import Issue
    from github.Milestone import Milestone
    from github.Repository import Repository

# Module-wide logger
logger: logging.Logger = logging.getLogger(__name__)

DEFAULT_PER_PAGE: Final[int] = 100


def get_client(token: str, base_url: str = DEFAULT_GITHUB_API_URL, per_page: int = DEFAULT_PER_PAGE) -> Github:
    """Get a GitHub client using the token."""
    return Github(auth=Auth.Token(token), base_url=base_url, per_page=per_page)


def get_repo(client: Github, owner: str, repo: str) -> Repository:
    try:
        return client.get_repo(f"{owner}/{repo}")
    except GithubException as e:
        msg = f"Could not access GitHub repository {owner}/{repo}: {e}"
        raise DestinationReadError(msg) from e


def get_rate_limit(client: Github) -> tuple[int, int]:
    """Return the (remaining, limit) request quota of the authenticated user."""
    return client.rate_limiting


def is_already_exists_error(exc: GithubException) -> bool:
    """Check if a GithubException is a 422 error reporting an existing resource.

    Labels report this through ``errors[].code == "already_exists"``, git refs
    through the message "Reference already exists".
    """
    if exc.status != 422 or not isinstance(exc.data, dict):
        return False
    message = exc.data.get("message")
    if isinstance(message, str) and "already exists" in message:
        return True
    errors: object = exc.data.get("errors")
    if not isinstance(errors, list):
        return False
    return any(isinstance(e, dict) and e.get("code") == "already_exists" for e in errors)


def get_all_milestones(repo: Repository) -> list[Milestone]:
    """Get all milestones (open and closed) of the repository.

    Raises:
        DestinationReadError: If the milestones cannot be listed
    """
    try:
        return list(repo.get_milestones(state="all"))
    except GithubException as e:
        msg = f"Could not access all GitHub milestones: {e}"
        raise DestinationReadError(msg) from e


def get_all_label_names(repo: Repository) -> list[str]:
    """Get the names of all labels of the repository.

    Raises:
        DestinationReadError: If the labels cannot be listed
    """
    try:
        return [label.name for label in repo.get_labels()]
    except GithubException as e:
        msg = f"Could not access all GitHub label names: {e}"
        raise DestinationReadError(msg) from e


def get_all_issues(repo: Repository, per_page: int = DEFAULT_PER_PAGE) -> list[Issue]:
    """Get all issues and pull requests of the repository, page by page.

    Stops at the first empty page or at a page shorter than per_page, which
    must match the page size the client was created with.

    Raises:
        DestinationReadError: If a page cannot be fetched
    """
    all_issues: list[Issue] = []
    paginated = repo.get_issues(state="all")
    page = 0
    try:
        while True:
            issues = paginated.get_page(page)
            if not issues:
                break
            all_issues.extend(issues)
            if len(issues) < per_page:
                break
            page += 1
    except GithubException as e:
        msg = f"Could not access all GitHub issues: {e}"
        raise DestinationReadError(msg) from e
    return all_issues


def get_all_pull_requests(repo: Repository, per_page: int = DEFAULT_PER_PAGE) -> list[Issue]:
    """Get all pull requests of the repository as issues.

    GitHub lists pull requests among the issues; they are the ones carrying
    a pull_request field.

    Raises:
        DestinationReadError: If the issues cannot be listed
    """
    try:
        issues = get_all_issues(repo, per_page)
    except DestinationReadError as e:
        msg = f"Could not access all GitHub pull requests: {e}"
        raise DestinationReadError(msg) from e
    return [issue for issue in issues if issue.pull_request is not None]


def create_branch(repo: Repository, name: str, sha: str | None) -> bool:
    """Create branch name pointing at sha.

    An already existing branch is reported and tolerated. Other failures are
    logged and not raised.

    Returns:
        True if the branch exists afterwards, False otherwise
    """
    if not sha:
        logger.error(f"Could not create branch '{name}': no commit to point it at")
        return False

    try:
        repo.create_git_ref(ref=f"refs/heads/{name}", sha=sha)
    except GithubException as e:
        if is_already_exists_error(e):
            logger.info(f"Branch '{name}' already exists")
            return True
        logger.error(f"Could not create branch '{name}' at {sha}: {e}")
        return False

    logger.debug(f"Created branch '{name}' at {sha}")
    return True
