"""Tests for data models."""

import pytest
from pydantic import ValidationError

from prreview.models import (
    Config,
    Credentials,
    OutcomeReason,
    PullRequestSummary,
    RepositoryIdentity,
    ReviewOutcome,
    SelectionResult,
)


class TestPullRequestSummary:
    """Test decoding of listed pull requests."""

    def test_from_api(self, pr_payload):
        pr = PullRequestSummary.from_api(pr_payload)

        assert pr.number == 42
        assert pr.title == "Fix bug"
        assert pr.author_login == "alice"
        assert pr.head_ref == "fix-42"
        assert pr.head_clone_url == "https://example.com/alice/repo.git"
        assert pr.head_owner_login == "alice"
        assert pr.head_repo_name == "repo"

    def test_label(self, sample_pr):
        assert sample_pr.label == "(42) alice: Fix bug"

    def test_deleted_head_repository_is_rejected(self, pr_payload):
        pr_payload["head"]["repo"] = None

        with pytest.raises(ValueError, match="#42"):
            PullRequestSummary.from_api(pr_payload)

    def test_missing_user_is_rejected(self, pr_payload):
        del pr_payload["user"]

        with pytest.raises(ValueError):
            PullRequestSummary.from_api(pr_payload)

    def test_immutable(self, sample_pr):
        with pytest.raises(ValidationError):
            sample_pr.number = 43


class TestSelectionResult:
    """Test the choice-or-cancel result."""

    def test_chosen(self, sample_pr):
        result = SelectionResult.chosen(sample_pr)
        assert result.pull_request == sample_pr
        assert result.cancelled is False

    def test_cancel(self):
        result = SelectionResult.cancel()
        assert result.pull_request is None
        assert result.cancelled is True

    def test_neither_is_invalid(self):
        with pytest.raises(ValidationError):
            SelectionResult()

    def test_both_is_invalid(self, sample_pr):
        with pytest.raises(ValidationError):
            SelectionResult(pull_request=sample_pr, cancelled=True)


def test_repository_full_name():
    assert RepositoryIdentity(owner="octo", name="widgets").full_name == "octo/widgets"


def test_credentials_secret_is_masked(credentials):
    assert "hunter2" not in repr(credentials)
    assert "hunter2" not in str(credentials)
    assert credentials.secret.get_secret_value() == "hunter2"


def test_outcome_messages():
    assert "No pull requests found" in ReviewOutcome(reason=OutcomeReason.NO_PULL_REQUESTS).message
    assert ReviewOutcome(reason=OutcomeReason.CANCELLED).message == "Cancelled."


class TestConfigModel:
    """Test configuration defaults and validation."""

    def test_defaults(self):
        config = Config()
        assert config.github.api_url == "https://api.github.com"
        assert config.github.remote == "origin"
        assert config.github.user_agent.startswith("prreview/")
        assert config.review.checkout_dir == "pull-requests"
        assert config.review.install_command == "npm install"
        assert config.review.test_command == "npm test"

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            Config.model_validate({"github": {"timeout": 0}})

    def test_blank_command_rejected(self):
        with pytest.raises(ValidationError):
            Config.model_validate({"review": {"test_command": "  "}})
