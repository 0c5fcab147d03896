"""Data models for the prreview tool."""

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator, model_validator

from prreview import __version__


class RepositoryIdentity(BaseModel):
    """Repository under review, resolved from the local git remote."""

    model_config = ConfigDict(frozen=True)

    owner: str = Field(description="Repository owner")
    name: str = Field(description="Repository name")

    @property
    def full_name(self) -> str:
        """Get full repository name (owner/name)."""
        return f"{self.owner}/{self.name}"


class Credentials(BaseModel):
    """Login pair used to authenticate API requests for one run."""

    model_config = ConfigDict(frozen=True)

    identity: str = Field(description="GitHub username")
    secret: SecretStr = Field(description="Password or personal access token")


class PullRequestSummary(BaseModel):
    """Open pull request as listed by the GitHub API."""

    model_config = ConfigDict(frozen=True)

    number: int = Field(description="Pull request number")
    title: str = Field(description="Pull request title")
    author_login: str = Field(description="Login of the pull request author")
    head_ref: str = Field(description="Head branch name")
    head_clone_url: str = Field(description="Clone URL of the head repository")
    head_owner_login: str = Field(description="Owner of the head repository")
    head_repo_name: str = Field(description="Name of the head repository")

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "PullRequestSummary":
        """Build a summary from one element of ``GET /repos/{owner}/{repo}/pulls``.

        Raises:
            ValueError: If a required field is missing (e.g. the head fork was deleted)
        """
        try:
            head = data["head"]
            head_repo = head["repo"]
            return cls(
                number=data["number"],
                title=data["title"],
                author_login=data["user"]["login"],
                head_ref=head["ref"],
                head_clone_url=head_repo["clone_url"],
                head_owner_login=head_repo["owner"]["login"],
                head_repo_name=head_repo["name"],
            )
        except (KeyError, TypeError) as e:
            number = data.get("number", "?") if isinstance(data, dict) else "?"
            raise ValueError(f"Pull request #{number} is missing field {e}") from e

    @property
    def label(self) -> str:
        """Menu label for this pull request."""
        return f"({self.number}) {self.author_login}: {self.title}"


class SelectionResult(BaseModel):
    """Outcome of the pull request menu: a choice or a cancellation."""

    pull_request: PullRequestSummary | None = Field(default=None, description="Chosen pull request")
    cancelled: bool = Field(default=False, description="Maintainer chose cancel")

    @model_validator(mode="after")
    def check_exactly_one(self) -> "SelectionResult":
        """Either a pull request was chosen or the menu was cancelled, never both."""
        if (self.pull_request is None) == (not self.cancelled):
            raise ValueError("SelectionResult needs exactly one of pull_request or cancelled")
        return self

    @classmethod
    def chosen(cls, pull_request: PullRequestSummary) -> "SelectionResult":
        return cls(pull_request=pull_request)

    @classmethod
    def cancel(cls) -> "SelectionResult":
        return cls(cancelled=True)


class CheckoutResult(BaseModel):
    """Local checkout of a pull request's head branch."""

    pull_request: PullRequestSummary = Field(description="Checked out pull request")
    local_path: Path = Field(description="Clone directory")
    branch: str = Field(description="Checked out branch")


class OutcomeReason(str, Enum):
    """Why a review run ended normally."""

    NO_PULL_REQUESTS = "no_pull_requests"
    CANCELLED = "cancelled"


class ReviewOutcome(BaseModel):
    """Result of a review run that ended without error."""

    reason: OutcomeReason = Field(description="Terminal transition taken")
    reviewed: list[int] = Field(default_factory=list, description="Pull requests that passed tests")
    merged: list[int] = Field(default_factory=list, description="Pull requests merged")

    @property
    def message(self) -> str:
        if self.reason == OutcomeReason.NO_PULL_REQUESTS:
            return "No pull requests found. Exiting"
        return "Cancelled."


class GitHubConfig(BaseModel):
    """GitHub configuration settings."""

    api_url: str = Field(default="https://api.github.com", description="GitHub API base URL")
    host: str = Field(default="github", description="Text the origin remote URL must contain")
    remote: str = Field(default="origin", description="Git remote naming the repository")
    username: str | None = Field(default=None, description="GitHub username (prompted if unset)")
    token: str | None = Field(default=None, description="GitHub token (prompted if unset)")
    user_agent: str = Field(
        default=f"prreview/{__version__}", description="User-Agent sent with API requests"
    )
    proxy: str | None = Field(
        default=None, description="Outbound proxy (defaults to HTTPS_PROXY/HTTP_PROXY)"
    )
    timeout: int = Field(default=30, description="API request timeout (seconds)")

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        """Validate timeout is positive."""
        if v <= 0:
            raise ValueError("Timeout must be positive")
        return v


class ReviewConfig(BaseModel):
    """Checkout and build settings."""

    checkout_dir: str = Field(
        default="pull-requests", description="Directory (under the working dir) for clones"
    )
    install_command: str = Field(default="npm install", description="Dependency install command")
    test_command: str = Field(default="npm test", description="Test command")

    @field_validator("install_command", "test_command", "checkout_dir")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Value cannot be empty")
        return v


class Config(BaseModel):
    """Main configuration model."""

    version: str = Field(default="1.0", description="Config version")
    github: GitHubConfig = Field(default_factory=GitHubConfig, description="GitHub settings")
    review: ReviewConfig = Field(default_factory=ReviewConfig, description="Review settings")

    model_config = {"extra": "allow"}
