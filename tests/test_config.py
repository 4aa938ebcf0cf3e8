"""Tests for settings loading and validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml

from gitlab_to_github_metadata.config import DEFAULT_GITHUB_API_URL, load_settings, parse_settings
from gitlab_to_github_metadata.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def _no_token_env_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GITLAB_TOKEN", raising=False)
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)


def _settings_data(**overrides: Any) -> dict[str, Any]:  # noqa: ANN401
    data: dict[str, Any] = {
        "gitlab": {"url": "https://gitlab.example.com", "token": "gl-token", "projectId": 42},
        "github": {"owner": "Org", "repo": "project", "username": "migrator", "token": "gh-token"},
        "usermap": {"alice": "alice-gh"},
        "projectmap": {"group/project": "Org/Project"},
    }
    data.update(overrides)
    return data


def _write(tmp_path: Path, data: object) -> Path:
    path = tmp_path / "settings.yaml"
    path.write_text(yaml.safe_dump(data))
    return path


@pytest.mark.unit
class TestParseSettings:
    def test_complete_settings(self) -> None:
        settings = parse_settings(_settings_data())
        assert settings.gitlab.url == "https://gitlab.example.com"
        assert settings.gitlab.project_id == 42
        assert settings.github.full_name == "Org/project"
        assert settings.github.base_url == DEFAULT_GITHUB_API_URL
        assert settings.conversion.use_lower_case_labels is True
        assert settings.usermap == {"alice": "alice-gh"}
        assert settings.projectmap == {"group/project": "Org/Project"}

    def test_custom_base_url_and_conversion(self) -> None:
        data = _settings_data(conversion={"useLowerCaseLabels": False})
        data["github"]["baseUrl"] = "https://github.example.com/api/v3"
        settings = parse_settings(data)
        assert settings.github.base_url == "https://github.example.com/api/v3"
        assert settings.conversion.use_lower_case_labels is False

    def test_maps_default_to_empty(self) -> None:
        data = _settings_data()
        del data["usermap"]
        data["projectmap"] = None
        settings = parse_settings(data)
        assert settings.usermap == {}
        assert settings.projectmap == {}

    def test_missing_gitlab_url(self) -> None:
        data = _settings_data()
        del data["gitlab"]["url"]
        with pytest.raises(ConfigurationError, match="GitLab url"):
            parse_settings(data)

    def test_sample_gitlab_url_rejected(self) -> None:
        data = _settings_data()
        data["gitlab"]["url"] = "http://gitlab.mycompany.com/"
        with pytest.raises(ConfigurationError, match="GitLab url"):
            parse_settings(data)

    def test_sample_gitlab_token_rejected(self) -> None:
        data = _settings_data()
        data["gitlab"]["token"] = "{{gitlab private token}}"
        with pytest.raises(ConfigurationError, match="GitLab private token"):
            parse_settings(data)

    def test_tokens_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GITLAB_TOKEN", "env-gl")
        monkeypatch.setenv("GITHUB_TOKEN", "env-gh")
        data = _settings_data()
        del data["gitlab"]["token"]
        del data["github"]["token"]
        settings = parse_settings(data)
        assert settings.gitlab.token == "env-gl"
        assert settings.github.token == "env-gh"

    def test_file_token_wins_over_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GITLAB_TOKEN", "env-gl")
        assert parse_settings(_settings_data()).gitlab.token == "gl-token"

    def test_github_values_not_needed_without_project(self) -> None:
        data = _settings_data(github={})
        data["gitlab"]["projectId"] = None
        settings = parse_settings(data)
        assert settings.gitlab.project_id is None

    def test_github_values_required_with_project(self) -> None:
        data = _settings_data(github={"owner": "Org", "repo": "{{repo}}"})
        with pytest.raises(ConfigurationError, match=r"github\.repo, github\.username, github\.token"):
            parse_settings(data)

    def test_invalid_project_id(self) -> None:
        data = _settings_data()
        data["gitlab"]["projectId"] = "abc"
        with pytest.raises(ConfigurationError, match="projectId must be a number"):
            parse_settings(data)

    def test_section_must_be_mapping(self) -> None:
        with pytest.raises(ConfigurationError, match="Section 'gitlab'"):
            parse_settings({"gitlab": ["url"]})


@pytest.mark.unit
class TestLoadSettings:
    def test_load_from_file(self, tmp_path: Path) -> None:
        settings = load_settings(_write(tmp_path, _settings_data()))
        assert settings.gitlab.project_id == 42

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="Please copy settings.sample.yaml"):
            load_settings(tmp_path / "settings.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text("gitlab: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Could not read settings file"):
            load_settings(path)

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="must contain a mapping"):
            load_settings(_write(tmp_path, ["a", "b"]))

    def test_sample_settings_file_must_be_edited(self) -> None:
        sample = Path(__file__).parent.parent / "settings.sample.yaml"
        with pytest.raises(ConfigurationError, match="GitLab url"):
            load_settings(sample)
