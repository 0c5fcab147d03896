"""GitHub REST API client."""

import os
from typing import Any, List, Optional

import requests

from prreview.models import Credentials, PullRequestSummary, RepositoryIdentity
from prreview.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_API_URL = "https://api.github.com"
PROXY_ENV_VARS = ("HTTPS_PROXY", "https_proxy", "HTTP_PROXY", "http_proxy")


class GitHubIntegrationError(Exception):
    """GitHub integration error."""
    pass


class GitHubTransportError(GitHubIntegrationError):
    """A request did not produce a usable response."""
    pass


class GitHubConnectionError(GitHubTransportError):
    """The API could not be reached."""
    pass


class GitHubStatusError(GitHubTransportError):
    """The API answered with a non-success status code."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class GitHubResponseError(GitHubTransportError):
    """The API answered with a body that is not the expected JSON."""
    pass


def proxy_from_environment() -> Optional[str]:
    """Return the outbound proxy configured in the process environment, if any."""
    for name in PROXY_ENV_VARS:
        value = os.environ.get(name)
        if value:
            return value
    return None


class GitHubClient:
    """Authenticated client for the subset of the GitHub API used for reviews.

    The client holds only connection configuration, so one instance serves
    every request of a run.
    """

    def __init__(
        self,
        credentials: Credentials,
        user_agent: str,
        api_url: str = DEFAULT_API_URL,
        proxy: Optional[str] = None,
        timeout: float = 30,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._session = requests.Session()
        self._session.auth = (credentials.identity, credentials.secret.get_secret_value())
        self._session.headers.update(
            {
                "Accept": "application/vnd.github+json",
                "User-Agent": user_agent,
            }
        )
        if proxy:
            self._session.proxies.update({"http": proxy, "https": proxy})
            logger.debug("Routing GitHub requests through configured proxy")

    def _request(self, method: str, path: str) -> Any:
        url = f"{self.api_url}{path}"
        logger.debug(f"{method} {path}")
        try:
            resp = self._session.request(method, url, timeout=self.timeout)
        except requests.RequestException as e:
            raise GitHubConnectionError(f"{method} {path} failed: {e}") from e

        if not 200 <= resp.status_code < 300:
            msg = resp.text
            try:
                data = resp.json()
                if isinstance(data, dict) and "message" in data:
                    msg = data["message"]
            except ValueError:
                pass
            raise GitHubStatusError(
                f"Invalid response from GitHub for {method} {path}: {resp.status_code} {msg}".rstrip(),
                resp.status_code,
            )

        if resp.status_code == 204 or not resp.content:
            return None

        try:
            return resp.json()
        except ValueError as e:
            raise GitHubResponseError(f"Malformed JSON from {method} {path}: {e}") from e

    def get(self, path: str) -> Any:
        """Issue an authenticated GET and return the decoded JSON body.

        Raises:
            GitHubTransportError: On connection failure, non-2xx status or malformed body
        """
        return self._request("GET", path)

    def put(self, path: str) -> Any:
        """Issue an authenticated PUT without a body and return the decoded JSON body.

        Raises:
            GitHubTransportError: On connection failure, non-2xx status or malformed body
        """
        return self._request("PUT", path)

    def list_pull_requests(self, repository: RepositoryIdentity) -> List[PullRequestSummary]:
        """List open pull requests of a repository.

        Raises:
            GitHubTransportError: If the listing cannot be fetched or decoded
        """
        path = f"/repos/{repository.owner}/{repository.name}/pulls"
        data = self.get(path)
        if not isinstance(data, list):
            raise GitHubResponseError(f"Expected a list from GET {path}, got {type(data).__name__}")

        try:
            pull_requests = [PullRequestSummary.from_api(item) for item in data]
        except ValueError as e:
            raise GitHubResponseError(f"Malformed pull request in GET {path}: {e}") from e

        logger.debug(f"Found {len(pull_requests)} open pull requests in {repository.full_name}")
        return pull_requests

    def merge_pull_request(self, pull_request: PullRequestSummary) -> Any:
        """Merge a pull request, addressed through its head repository.

        Raises:
            GitHubTransportError: If the merge request fails
        """
        path = (
            f"/repos/{pull_request.head_owner_login}/{pull_request.head_repo_name}"
            f"/pulls/{pull_request.number}/merge"
        )
        logger.info(f"Merging pull request #{pull_request.number}")
        return self.put(path)
