"""Interactive terminal prompts: credentials, pull request menu, merge confirmation."""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from prreview.models import Credentials, PullRequestSummary, SelectionResult


class Selector(ABC):
    """Front end the review workflow asks for decisions.

    Only two capabilities are needed, so scripted front ends can stand in for
    the terminal.
    """

    @abstractmethod
    def select_pull_request(self, pull_requests: Sequence[PullRequestSummary]) -> SelectionResult:
        """Pick one pull request or cancel.

        Raises:
            ValueError: If ``pull_requests`` is empty
        """

    @abstractmethod
    def confirm_merge(self, pull_request: PullRequestSummary) -> bool:
        """Ask whether to merge; answering with the default means no."""


class ConsoleSelector(Selector):
    """Selector backed by rich output and click prompts."""

    CANCEL_LABEL = "cancel"

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def render_menu(self, pull_requests: Sequence[PullRequestSummary]) -> Table:
        table = Table(title="Open pull requests", show_header=False)
        table.add_column("#", style="cyan", justify="right")
        table.add_column("Pull request")
        for index, pull_request in enumerate(pull_requests, start=1):
            table.add_row(str(index), escape(pull_request.label))
        table.add_row(str(len(pull_requests) + 1), self.CANCEL_LABEL, style="dim")
        return table

    def select_pull_request(self, pull_requests: Sequence[PullRequestSummary]) -> SelectionResult:
        if not pull_requests:
            raise ValueError("Cannot select from an empty list of pull requests")

        cancel_index = len(pull_requests) + 1
        self.console.print(self.render_menu(pull_requests))
        choice = click.prompt(
            "Select a pull request",
            type=click.IntRange(1, cancel_index),
        )
        if choice == cancel_index:
            return SelectionResult.cancel()
        return SelectionResult.chosen(pull_requests[choice - 1])

    def confirm_merge(self, pull_request: PullRequestSummary) -> bool:
        return click.confirm(
            f"Would you like to merge #{pull_request.number} now?",
            default=False,
        )


def prompt_credentials(default_identity: Optional[str] = None) -> Credentials:
    """Ask for the GitHub login pair; the secret is not echoed."""
    identity = click.prompt("GitHub username", default=default_identity)
    secret = click.prompt("GitHub password or token", hide_input=True)
    return Credentials(identity=identity, secret=secret)
