"""Settings file loading and validation.

Settings are read once at startup from a YAML file into immutable dataclasses
and then handed to every component that needs them.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Final

import yaml

from .exceptions import ConfigurationError

logger: logging.Logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH: Final[str] = "settings.yaml"
SAMPLE_SETTINGS_PATH: Final[str] = "settings.sample.yaml"
DEFAULT_GITHUB_API_URL: Final[str] = "https://api.github.com"

_GITLAB_TOKEN_ENV_VAR: Final[str] = "GITLAB_TOKEN"  # noqa: S105
_GITHUB_TOKEN_ENV_VAR: Final[str] = "GITHUB_TOKEN"  # noqa: S105

# Values shipped in the sample settings file
_SAMPLE_GITLAB_URL: Final[str] = "http://gitlab.mycompany.com/"


@dataclass(frozen=True)
class GitLabSettings:
    """Connection to the source GitLab instance."""

    url: str
    token: str
    project_id: int | None = None


@dataclass(frozen=True)
class GitHubSettings:
    """Connection to the destination GitHub repository."""

    owner: str
    repo: str
    username: str
    token: str
    base_url: str = DEFAULT_GITHUB_API_URL

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class ConversionSettings:
    """Options controlling how GitLab data is converted."""

    use_lower_case_labels: bool = True


@dataclass(frozen=True)
class Settings:
    """Complete migration settings."""

    gitlab: GitLabSettings
    github: GitHubSettings
    conversion: ConversionSettings = field(default_factory=ConversionSettings)
    usermap: dict[str, str] = field(default_factory=dict)
    projectmap: dict[str, str] = field(default_factory=dict)


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        msg = f"Section '{name}' of the settings file must be a mapping"
        raise ConfigurationError(msg)
    return section


def _string_mapping(data: dict[str, Any], name: str) -> dict[str, str]:
    mapping = _section(data, name)
    return {str(key): str(value) for key, value in mapping.items() if value}


def _is_unset(value: str | None) -> bool:
    """Treat empty values and untouched "{{...}}" sample placeholders as missing."""
    return not value or (value.startswith("{{") and value.endswith("}}"))


def _parse_project_id(value: Any) -> int | None:  # noqa: ANN401
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        msg = f"gitlab.projectId must be a number, got {value!r}"
        raise ConfigurationError(msg) from e


def parse_settings(data: dict[str, Any]) -> Settings:
    """Build and validate Settings from the parsed settings file contents.

    Tokens missing from the file are taken from the GITLAB_TOKEN and
    GITHUB_TOKEN environment variables.

    Raises:
        ConfigurationError: If a required value is missing
    """
    gitlab_section = _section(data, "gitlab")
    github_section = _section(data, "github")
    conversion_section = _section(data, "conversion")

    gitlab_url = str(gitlab_section.get("url") or "")
    if not gitlab_url or gitlab_url == _SAMPLE_GITLAB_URL:
        msg = "You have to enter your GitLab url in the settings file."
        raise ConfigurationError(msg)

    gitlab_token = str(gitlab_section.get("token") or os.environ.get(_GITLAB_TOKEN_ENV_VAR) or "")
    if _is_unset(gitlab_token):
        msg = "You have to enter your GitLab private token in the settings file."
        raise ConfigurationError(msg)

    project_id = _parse_project_id(gitlab_section.get("projectId"))

    github = GitHubSettings(
        owner=str(github_section.get("owner") or ""),
        repo=str(github_section.get("repo") or ""),
        username=str(github_section.get("username") or ""),
        token=str(github_section.get("token") or os.environ.get(_GITHUB_TOKEN_ENV_VAR) or ""),
        base_url=str(github_section.get("baseUrl") or DEFAULT_GITHUB_API_URL),
    )

    # GitHub values are only needed once a project has been chosen
    if project_id is not None:
        missing = [
            f"github.{key}"
            for key, value in (
                ("owner", github.owner),
                ("repo", github.repo),
                ("username", github.username),
                ("token", github.token),
            )
            if _is_unset(value)
        ]
        if missing:
            msg = f"Missing required settings: {', '.join(missing)}"
            raise ConfigurationError(msg)

    return Settings(
        gitlab=GitLabSettings(url=gitlab_url, token=gitlab_token, project_id=project_id),
        github=github,
        conversion=ConversionSettings(
            use_lower_case_labels=bool(conversion_section.get("useLowerCaseLabels", True)),
        ),
        usermap=_string_mapping(data, "usermap"),
        projectmap=_string_mapping(data, "projectmap"),
    )


def load_settings(path: str | Path = DEFAULT_SETTINGS_PATH) -> Settings:
    """Load settings from a YAML file.

    Raises:
        ConfigurationError: If the file is missing, unreadable or incomplete
    """
    settings_path = Path(path)
    if not settings_path.is_file():
        msg = f"Settings file {settings_path} not found. Please copy {SAMPLE_SETTINGS_PATH} to {settings_path}."
        raise ConfigurationError(msg)

    try:
        data = yaml.safe_load(settings_path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        msg = f"Could not read settings file {settings_path}: {e}"
        raise ConfigurationError(msg) from e

    if not isinstance(data, dict):
        msg = f"Settings file {settings_path} must contain a mapping"
        raise ConfigurationError(msg)

    settings = parse_settings(data)
    logger.debug(f"Loaded settings from {settings_path}")
    return settings
