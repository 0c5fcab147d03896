"""Repository identity from the local git remote configuration."""

from pathlib import Path
from typing import Union
from urllib.parse import urlparse

from prreview.models import RepositoryIdentity
from prreview.utils.logger import get_logger
from prreview.utils.shell import run_command, ShellError

logger = get_logger(__name__)


class GitIntegrationError(Exception):
    """Git integration error."""
    pass


class RepositoryConfigurationError(GitIntegrationError):
    """The working directory does not name a usable remote repository."""
    pass


def get_remote_url(working_dir: Union[str, Path], remote: str = "origin") -> str:
    """Read the URL of a git remote.

    Raises:
        RepositoryConfigurationError: If the remote does not exist
    """
    try:
        result = run_command(
            ["git", "config", "--get", f"remote.{remote}.url"],
            cwd=working_dir,
        )
    except ShellError as e:
        raise RepositoryConfigurationError(f"Could not read git configuration: {e}")

    url = result.stdout.strip()
    if not result.success or not url:
        raise RepositoryConfigurationError(f"remote {remote} must exist in {working_dir}")
    return url


def parse_remote_url(url: str) -> RepositoryIdentity:
    """Extract owner and repository name from a remote URL.

    Accepts URLs with a scheme (``https://github.com/owner/repo.git``) and
    scp-style addresses (``git@github.com:owner/repo.git``).

    Raises:
        RepositoryConfigurationError: If the URL has no owner/name path
    """
    if "://" in url:
        path = urlparse(url).path
    elif ":" in url:
        path = url.split(":", 1)[1]
    else:
        path = ""

    segments = [segment for segment in path.split("/") if segment]
    if len(segments) < 2:
        raise RepositoryConfigurationError(f"Cannot find owner and repository in remote URL: {url}")

    owner, name = segments[0], segments[1]
    if name.endswith(".git"):
        name = name[: -len(".git")]
    if not name:
        raise RepositoryConfigurationError(f"Cannot find repository name in remote URL: {url}")

    return RepositoryIdentity(owner=owner, name=name)


def resolve_repository(
    working_dir: Union[str, Path],
    remote: str = "origin",
    host: str = "github",
) -> RepositoryIdentity:
    """Determine the repository under review from the working directory's remote.

    Args:
        working_dir: Directory whose git configuration is read
        remote: Remote name to look up
        host: Text the remote URL must contain (the hosting platform's domain)

    Returns:
        Repository identity

    Raises:
        RepositoryConfigurationError: If the remote is absent or does not point at the host
    """
    url = get_remote_url(working_dir, remote)
    if host not in url:
        raise RepositoryConfigurationError(f"remote {remote} for {host} not found (url: {url})")

    identity = parse_remote_url(url)
    logger.debug(f"Resolved repository {identity.full_name} from remote {remote}")
    return identity
