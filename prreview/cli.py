"""Click CLI interface for the prreview tool."""

import asyncio
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from prreview import __version__
from prreview.config import ConfigError, config_manager
from prreview.integrations.git import RepositoryConfigurationError, resolve_repository
from prreview.integrations.github import GitHubTransportError
from prreview.integrations.prompts import ConsoleSelector
from prreview.models import Config
from prreview.utils.logger import enable_verbose_logging, get_logger
from prreview.workflows.review import ReviewWorkflow, ReviewWorkflowError, authenticate

logger = get_logger(__name__)
console = Console()


def _load_config(install_command: Optional[str] = None, test_command: Optional[str] = None) -> Config:
    config = config_manager.get_config()
    overrides = {}
    if install_command:
        overrides["install_command"] = install_command
    if test_command:
        overrides["test_command"] = test_command
    if overrides:
        config = config.model_copy(
            update={"review": config.review.model_copy(update=overrides)}
        )
    return config


def _format_workflow_error(error: ReviewWorkflowError) -> str:
    message = f"Step '{error.step}' failed"
    if error.returncode is not None:
        message += f" with exit code {error.returncode}"
    return f"{message}: {error}"


@click.group(invoke_without_command=True)
@click.option("--version", is_flag=True, help="Show version and exit")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx: click.Context, version: bool, verbose: bool) -> None:
    """prreview - review, test and merge open pull requests one at a time."""
    if version:
        click.echo(f"prreview version {__version__}")
        sys.exit(0)

    if verbose:
        enable_verbose_logging()

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.option(
    "--directory", "-C",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Repository directory (defaults to the current directory)",
)
@click.option("--install-command", default=None, help="Override the dependency install command")
@click.option("--test-command", default=None, help="Override the test command")
def review(
    directory: Optional[Path],
    install_command: Optional[str],
    test_command: Optional[str],
) -> None:
    """Review open pull requests: pick one, clone, install, test, merge.

    Repeats until no pull requests remain or you choose cancel.
    """
    try:
        config = _load_config(install_command, test_command)
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    workflow = ReviewWorkflow(config, ConsoleSelector(console), working_dir=directory)

    try:
        outcome = asyncio.run(workflow.run())
    except ReviewWorkflowError as e:
        logger.debug(f"Review session ended in state {workflow.state.value}")
        console.print(f"[red]Error:[/red] {_format_workflow_error(e)}")
        sys.exit(1)

    console.print(outcome.message)
    if outcome.merged:
        merged = ", ".join(f"#{number}" for number in outcome.merged)
        console.print(f"[green]✓[/green] Merged: {merged}")


@cli.command("list")
@click.option(
    "--directory", "-C",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Repository directory (defaults to the current directory)",
)
def list_pull_requests(directory: Optional[Path]) -> None:
    """List open pull requests of the current repository."""
    try:
        config = _load_config()
        github = config.github
        repository = resolve_repository(
            directory or Path.cwd(), remote=github.remote, host=github.host
        )
        client = authenticate(github, repository)
        pull_requests = client.list_pull_requests(repository)
    except (ConfigError, RepositoryConfigurationError, GitHubTransportError) as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    if not pull_requests:
        console.print(f"No open pull requests in {repository.full_name}")
        return

    table = Table(title=f"Open pull requests in {repository.full_name}")
    table.add_column("Number", style="cyan", justify="right")
    table.add_column("Author", style="magenta")
    table.add_column("Title")
    table.add_column("Head", style="green")

    for pull_request in pull_requests:
        table.add_row(
            f"#{pull_request.number}",
            escape(pull_request.author_login),
            escape(pull_request.title),
            escape(f"{pull_request.head_owner_login}:{pull_request.head_ref}"),
        )

    console.print(table)


@cli.command()
def init() -> None:
    """Initialize prreview configuration for the current project."""
    try:
        user_config_path = Path.home() / ".prreview" / "config.yaml"
        if not user_config_path.exists():
            config_manager.create_default_config(user_level=True)
            console.print(f"[green]✓[/green] User configuration created: {user_config_path}")

        project_config_path = config_manager.create_default_config(user_level=False)
        console.print(f"[green]✓[/green] Project configuration initialized: {project_config_path}")

        console.print("\n[bold]Next steps:[/bold]")
        console.print("1. Set the install and test commands: [cyan]prreview config set review.test_command 'npm test' --project[/cyan]")
        console.print("2. Run [cyan]prreview review[/cyan] inside your repository")

    except ConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)


@cli.group()
def config() -> None:
    """Configuration management."""
    pass


@config.command("get")
@click.argument("key")
def config_get(key: str) -> None:
    """Get configuration value by key.

    KEY: Dot-separated configuration key (e.g., 'review.test_command')
    """
    try:
        value = config_manager.get_config_value(key)
        console.print(f"{key}: {value}")
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)


@config.command("set")
@click.argument("key")
@click.argument("value")
@click.option(
    "--project", "-p", is_flag=True,
    help="Set in project config instead of user config"
)
def config_set(key: str, value: str, project: bool) -> None:
    """Set configuration value.

    KEY: Dot-separated configuration key (e.g., 'github.timeout')
    VALUE: Value to set
    """
    parsed_value = value
    if value.lower() in ("true", "false"):
        parsed_value = value.lower() == "true"
    elif value.isdigit():
        parsed_value = int(value)

    try:
        config_manager.set_config_value(key, parsed_value, user_level=not project)
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    config_type = "project" if project else "user"
    shown = "***" if key.endswith("token") else parsed_value
    console.print(f"[green]✓[/green] {config_type.title()} config updated: {key} = {shown}")


@config.command("list")
def config_list() -> None:
    """List all configuration files and their status."""
    table = Table(title="Configuration Files")
    table.add_column("Type", style="cyan")
    table.add_column("Path")
    table.add_column("Status")

    for config_type, path in config_manager.list_config_files().items():
        if path:
            table.add_row(config_type.title(), str(path), "[green]✓ Found[/green]")
        else:
            table.add_row(config_type.title(), "-", "[dim]Not found[/dim]")

    console.print(table)


if __name__ == "__main__":
    cli()
