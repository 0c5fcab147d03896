"""Checkout of pull request branches and running their install/test commands."""

from pathlib import Path
from typing import List, Optional, Union

from prreview.models import CheckoutResult, PullRequestSummary, ReviewConfig
from prreview.utils.logger import get_logger
from prreview.utils.shell import run_command_async, ShellError

logger = get_logger(__name__)

CLONE_STEP = "clone"
INSTALL_STEP = "installDependencies"
TEST_STEP = "runTests"


class BuildError(Exception):
    """Checkout or build error."""
    pass


class ProcessError(BuildError):
    """A child process of a build step failed."""

    def __init__(self, step: str, returncode: int, message: Optional[str] = None):
        """Initialize process error.

        Args:
            step: Name of the failing step
            returncode: Exit code of the child process (-1 when it never ran)
            message: Error message
        """
        super().__init__(message or f"{step} failed with exit code {returncode}")
        self.step = step
        self.returncode = returncode


class BuildRunner:
    """Clones pull requests and runs their install and test commands.

    Child processes inherit the terminal, so their output is shown live.
    """

    def __init__(self, config: Optional[ReviewConfig] = None):
        self.config = config or ReviewConfig()

    def checkout_path(self, pull_request: PullRequestSummary, base_dir: Union[str, Path]) -> Path:
        """Clone destination for a pull request: ``<base_dir>/<checkout_dir>/<number>``."""
        return Path(base_dir).resolve() / self.config.checkout_dir / str(pull_request.number)

    async def clone(self, pull_request: PullRequestSummary, base_dir: Union[str, Path]) -> CheckoutResult:
        """Clone the head branch of a pull request.

        Raises:
            ProcessError: If the destination is already populated or git fails
        """
        path = self.checkout_path(pull_request, base_dir)
        branch = pull_request.head_ref

        if path.exists() and (not path.is_dir() or any(path.iterdir())):
            raise ProcessError(
                CLONE_STEP,
                -1,
                f"{CLONE_STEP} failed: {path} already exists and is not an empty directory",
            )

        logger.info(f"Cloning {pull_request.title} from {branch} to {path}")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ProcessError(
                CLONE_STEP,
                -1,
                f"{CLONE_STEP} failed: cannot create {path.parent}: {e}",
            ) from e
        await self._run(
            CLONE_STEP,
            ["git", "clone", pull_request.head_clone_url, "-b", branch, str(path)],
        )
        return CheckoutResult(pull_request=pull_request, local_path=path, branch=branch)

    async def install_dependencies(self, path: Union[str, Path]) -> None:
        """Run the install command in a checkout.

        Raises:
            ProcessError: If the command exits non-zero
        """
        logger.info(f"Installing dependencies: {self.config.install_command}")
        await self._run(INSTALL_STEP, self.config.install_command, cwd=path)

    async def run_tests(self, path: Union[str, Path]) -> None:
        """Run the test command in a checkout.

        Raises:
            ProcessError: If the command exits non-zero
        """
        logger.info(f"Running tests: {self.config.test_command}")
        await self._run(TEST_STEP, self.config.test_command, cwd=path)

    async def _run(
        self,
        step: str,
        command: Union[str, List[str]],
        cwd: Optional[Union[str, Path]] = None,
    ) -> None:
        try:
            result = await run_command_async(command, cwd=cwd, capture_output=False)
        except ShellError as e:
            raise ProcessError(step, e.returncode, f"{step} failed: {e}") from e

        if not result.success:
            raise ProcessError(step, result.returncode)
