"""Shared test configuration and fixtures."""

import os
from pathlib import Path
from typing import List, Optional, Sequence
from unittest.mock import AsyncMock, Mock

import pytest

from prreview.config import ConfigManager
from prreview.integrations.build import BuildRunner
from prreview.integrations.github import GitHubClient
from prreview.integrations.prompts import Selector
from prreview.models import (
    CheckoutResult,
    Config,
    Credentials,
    PullRequestSummary,
    RepositoryIdentity,
    SelectionResult,
)


class ScriptedSelector(Selector):
    """Selector answering from a script instead of the terminal.

    ``choices`` holds pull request numbers to pick, or None to cancel.
    ``merges`` holds the answers to the merge confirmations.
    """

    def __init__(self, choices: List[Optional[int]], merges: Optional[List[bool]] = None):
        self.choices = list(choices)
        self.merges = list(merges or [])
        self.menus: List[List[int]] = []
        self.confirmations: List[int] = []

    def select_pull_request(self, pull_requests: Sequence[PullRequestSummary]) -> SelectionResult:
        if not pull_requests:
            raise ValueError("Cannot select from an empty list of pull requests")
        self.menus.append([pr.number for pr in pull_requests])
        number = self.choices.pop(0)
        if number is None:
            return SelectionResult.cancel()
        return SelectionResult.chosen(next(pr for pr in pull_requests if pr.number == number))

    def confirm_merge(self, pull_request: PullRequestSummary) -> bool:
        self.confirmations.append(pull_request.number)
        return self.merges.pop(0) if self.merges else False


@pytest.fixture
def temp_home(tmp_path):
    """Create a temporary home directory for tests."""
    return tmp_path


@pytest.fixture
def isolated_config_manager(temp_home, monkeypatch):
    """Create an isolated ConfigManager that doesn't touch real config files."""
    monkeypatch.setattr(Path, "home", lambda: temp_home)
    monkeypatch.setattr("prreview.config.get_git_root", lambda cwd=None: None)
    work_dir = temp_home / "work"
    work_dir.mkdir(exist_ok=True)
    monkeypatch.chdir(work_dir)

    manager = ConfigManager()
    manager._user_config_path = temp_home / ".prreview" / "config.yaml"
    manager._project_config_path = None
    manager._config = None

    return manager


@pytest.fixture(autouse=True)
def mock_global_config_manager(isolated_config_manager, monkeypatch):
    """Automatically replace the global config_manager for all tests."""
    import prreview.config
    import prreview.cli

    for name in list(os.environ):
        if name.startswith("PRREVIEW_"):
            monkeypatch.delenv(name)

    monkeypatch.setattr(prreview.config, "config_manager", isolated_config_manager)
    monkeypatch.setattr(prreview.cli, "config_manager", isolated_config_manager)

    return isolated_config_manager


@pytest.fixture
def repository():
    """Repository under review."""
    return RepositoryIdentity(owner="octo", name="widgets")


@pytest.fixture
def credentials():
    return Credentials(identity="octo", secret="hunter2")


@pytest.fixture
def pr_payload():
    """Raw pull request as returned by GET /repos/{owner}/{repo}/pulls."""
    return {
        "number": 42,
        "title": "Fix bug",
        "user": {"login": "alice"},
        "head": {
            "ref": "fix-42",
            "repo": {
                "clone_url": "https://example.com/alice/repo.git",
                "owner": {"login": "alice"},
                "name": "repo",
            },
        },
    }


@pytest.fixture
def sample_pr(pr_payload):
    return PullRequestSummary.from_api(pr_payload)


@pytest.fixture
def other_pr():
    return PullRequestSummary(
        number=7,
        title="Add feature",
        author_login="bob",
        head_ref="feature-7",
        head_clone_url="https://example.com/bob/widgets.git",
        head_owner_login="bob",
        head_repo_name="widgets",
    )


@pytest.fixture
def config():
    """Configuration with a token so no credential prompt is shown."""
    return Config.model_validate({"github": {"username": "octo", "token": "hunter2"}})


@pytest.fixture
def mock_client():
    """GitHub client double."""
    return Mock(spec=GitHubClient)


@pytest.fixture
def mock_runner(tmp_path):
    """Build runner double whose steps all succeed."""
    runner = Mock(spec=BuildRunner)

    async def clone(pull_request, base_dir):
        return CheckoutResult(
            pull_request=pull_request,
            local_path=Path(base_dir) / "pull-requests" / str(pull_request.number),
            branch=pull_request.head_ref,
        )

    runner.clone = AsyncMock(side_effect=clone)
    runner.install_dependencies = AsyncMock(return_value=None)
    runner.run_tests = AsyncMock(return_value=None)
    return runner


@pytest.fixture
def runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner
    return CliRunner()
