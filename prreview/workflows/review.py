"""
Review-and-merge workflow orchestration for the prreview tool.

Drives one review session:
- resolve the repository from the local git remote and authenticate once
- list open pull requests and let the maintainer pick one
- clone it, install its dependencies and run its tests
- merge it on confirmation, then list again

The session ends normally when no pull requests remain or the maintainer
cancels; any failing step ends it with a ReviewWorkflowError.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Union

from ..integrations.build import BuildRunner, ProcessError
from ..integrations.git import RepositoryConfigurationError, resolve_repository
from ..integrations.github import GitHubClient, GitHubTransportError, proxy_from_environment
from ..integrations.prompts import Selector, prompt_credentials
from ..models import (
    CheckoutResult,
    Config,
    Credentials,
    GitHubConfig,
    OutcomeReason,
    PullRequestSummary,
    RepositoryIdentity,
    ReviewOutcome,
)
from ..utils.logger import get_logger

logger = get_logger(__name__)


class ReviewState(Enum):
    """States of the review session."""

    RESOLVE_IDENTITY = "resolve_identity"
    AUTHENTICATE = "authenticate"
    LIST_PULL_REQUESTS = "list_pull_requests"
    SELECT = "select"
    CLONE = "clone"
    INSTALL = "install"
    TEST = "test"
    CONFIRM_MERGE = "confirm_merge"
    MERGE = "merge"
    LOOP = "loop"
    DONE = "done"
    ABORTED = "aborted"
    FAILED = "failed"


@dataclass
class RunContext:
    """State shared by every iteration of one review session."""

    repository: RepositoryIdentity
    client: GitHubClient
    checkout: Optional[CheckoutResult] = None

    def reset_iteration(self) -> None:
        """Drop pull-request-scoped data before the next iteration."""
        self.checkout = None


class ReviewWorkflowError(Exception):
    """A review step failed and the session cannot continue."""

    def __init__(self, step: str, message: str, returncode: Optional[int] = None):
        super().__init__(message)
        self.step = step
        self.returncode = returncode


def authenticate(
    github: GitHubConfig,
    repository: RepositoryIdentity,
    credentials_prompt: Callable[[Optional[str]], Credentials] = prompt_credentials,
    client_factory: Callable[..., GitHubClient] = GitHubClient,
) -> GitHubClient:
    """Collect credentials once and build the API client for the session.

    A configured token skips the prompt; the username then defaults to the
    repository owner.
    """
    if github.token:
        credentials = Credentials(
            identity=github.username or repository.owner,
            secret=github.token,
        )
        logger.debug("Using GitHub credentials from configuration")
    else:
        credentials = credentials_prompt(github.username or repository.owner)

    return client_factory(
        credentials,
        user_agent=github.user_agent,
        api_url=github.api_url,
        proxy=github.proxy or proxy_from_environment(),
        timeout=github.timeout,
    )


class ReviewWorkflow:
    """Review session state machine.

    Identity and client are resolved once and reused for every iteration.
    """

    def __init__(
        self,
        config: Config,
        selector: Selector,
        runner: Optional[BuildRunner] = None,
        working_dir: Optional[Union[str, Path]] = None,
        credentials_prompt: Callable[[Optional[str]], Credentials] = prompt_credentials,
        client_factory: Callable[..., GitHubClient] = GitHubClient,
    ):
        self.config = config
        self.selector = selector
        self.runner = runner or BuildRunner(config.review)
        self.working_dir = Path(working_dir) if working_dir else Path.cwd()
        self.credentials_prompt = credentials_prompt
        self.client_factory = client_factory
        self.state = ReviewState.RESOLVE_IDENTITY
        self.history: List[ReviewState] = []
        self.context: Optional[RunContext] = None

    async def run(self) -> ReviewOutcome:
        """Run the session until it is done.

        Returns:
            Outcome describing why the session ended

        Raises:
            ReviewWorkflowError: If any step fails
        """
        self._enter(ReviewState.RESOLVE_IDENTITY)
        repository = self._resolve_identity()

        self._enter(ReviewState.AUTHENTICATE)
        self.context = RunContext(repository=repository, client=self._authenticate(repository))

        reviewed: List[int] = []
        merged: List[int] = []

        while True:
            self._enter(ReviewState.LIST_PULL_REQUESTS)
            pull_requests = await self._list_pull_requests()
            if not pull_requests:
                return self._finish(OutcomeReason.NO_PULL_REQUESTS, reviewed, merged)

            self._enter(ReviewState.SELECT)
            selection = self.selector.select_pull_request(pull_requests)
            if selection.cancelled:
                return self._finish(OutcomeReason.CANCELLED, reviewed, merged)
            pull_request = selection.pull_request

            self._enter(ReviewState.CLONE)
            self.context.checkout = await self._process_step(
                self.runner.clone(pull_request, self.working_dir)
            )
            checkout_path = self.context.checkout.local_path

            self._enter(ReviewState.INSTALL)
            await self._process_step(self.runner.install_dependencies(checkout_path))

            self._enter(ReviewState.TEST)
            await self._process_step(self.runner.run_tests(checkout_path))
            reviewed.append(pull_request.number)
            logger.info(f"Tests passed for #{pull_request.number}")

            self._enter(ReviewState.CONFIRM_MERGE)
            if self.selector.confirm_merge(pull_request):
                self._enter(ReviewState.MERGE)
                await self._merge(pull_request)
                merged.append(pull_request.number)
            else:
                logger.info(f"Skipping merge of #{pull_request.number}")

            self._enter(ReviewState.LOOP)
            self.context.reset_iteration()

    def _enter(self, state: ReviewState) -> None:
        self.state = state
        self.history.append(state)
        logger.debug(f"Review state: {state.value}")

    def _fail(
        self,
        state: ReviewState,
        step: str,
        message: str,
        returncode: Optional[int] = None,
    ) -> ReviewWorkflowError:
        self._enter(state)
        return ReviewWorkflowError(step, message, returncode)

    def _finish(
        self,
        reason: OutcomeReason,
        reviewed: List[int],
        merged: List[int],
    ) -> ReviewOutcome:
        self._enter(ReviewState.DONE)
        if self.context is not None:
            self.context.reset_iteration()
        outcome = ReviewOutcome(reason=reason, reviewed=reviewed, merged=merged)
        logger.debug(f"Review session done: {reason.value}")
        return outcome

    def _resolve_identity(self) -> RepositoryIdentity:
        github = self.config.github
        try:
            repository = resolve_repository(self.working_dir, remote=github.remote, host=github.host)
        except RepositoryConfigurationError as e:
            raise self._fail(ReviewState.ABORTED, "resolveIdentity", str(e)) from e

        logger.info(f"Reviewing pull requests of {repository.full_name}")
        return repository

    def _authenticate(self, repository: RepositoryIdentity) -> GitHubClient:
        return authenticate(
            self.config.github,
            repository,
            credentials_prompt=self.credentials_prompt,
            client_factory=self.client_factory,
        )

    async def _list_pull_requests(self) -> List[PullRequestSummary]:
        try:
            return await asyncio.to_thread(
                self.context.client.list_pull_requests, self.context.repository
            )
        except GitHubTransportError as e:
            raise self._fail(ReviewState.ABORTED, "listPullRequests", str(e)) from e

    async def _process_step(self, operation):
        try:
            return await operation
        except ProcessError as e:
            raise self._fail(ReviewState.FAILED, e.step, str(e), e.returncode) from e

    async def _merge(self, pull_request: PullRequestSummary) -> None:
        try:
            await asyncio.to_thread(self.context.client.merge_pull_request, pull_request)
        except GitHubTransportError as e:
            raise self._fail(ReviewState.FAILED, "mergePullRequest", str(e)) from e
        logger.info(f"Merged #{pull_request.number}")

