"""Command-line interface: thin commands that delegate to the use case."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import click

from git_fallback.infrastructure.config import get_settings
from git_fallback.interface.dependencies import get_use_case
from git_fallback.interface.error_handlers import handle_errors
from git_fallback.services.git_operations import GitOperationsUseCase


@click.group()
@click.option(
    "-C",
    "--workdir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Run as if started in this directory.",
)
@click.option("--no-native", is_flag=True, help="Skip the local git executable; use the API only.")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Override LOG_LEVEL.",
)
@click.pass_context
@handle_errors
def cli(ctx: click.Context, workdir: Path, no_native: bool, log_level: str | None) -> None:
    """Git commands with a GitHub API fallback for when git cannot answer."""
    settings = get_settings()
    logging.basicConfig(
        level=(log_level or settings.log_level).upper(),
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )
    if log_level:
        logging.getLogger().setLevel(log_level.upper())
    if no_native:
        settings = settings.model_copy(update={"use_native_git": False})
    ctx.obj = get_use_case(settings, workdir.resolve())


def _use_case(ctx: click.Context) -> GitOperationsUseCase:
    return ctx.find_object(GitOperationsUseCase)


@cli.command()
@click.argument("commit")
@click.pass_context
@handle_errors
def reset(ctx: click.Context, commit: str) -> None:
    """Make the working tree match COMMIT."""
    asyncio.run(_use_case(ctx).reset(commit))


@cli.command("diff-numstat")
@click.argument("base")
@click.argument("commit")
@click.pass_context
@handle_errors
def diff_numstat(ctx: click.Context, base: str, commit: str) -> None:
    """Per-file added/deleted line counts between BASE and COMMIT."""
    click.echo(asyncio.run(_use_case(ctx).diff_numstat(base, commit)), nl=False)


@cli.command("get-file")
@click.argument("commit")
@click.argument("path")
@click.pass_context
@handle_errors
def get_file(ctx: click.Context, commit: str, path: str) -> None:
    """Write the content of PATH at COMMIT to stdout."""
    content = asyncio.run(_use_case(ctx).get_file(commit, path))
    stdout = click.get_binary_stream("stdout")
    stdout.write(content)
    stdout.flush()


@cli.command()
@click.argument("commit")
@click.pass_context
@handle_errors
def log(ctx: click.Context, commit: str) -> None:
    """Hashes of COMMIT and its ancestors, one per line."""
    click.echo(asyncio.run(_use_case(ctx).log(commit)), nl=False)


@cli.command("show-date")
@click.argument("commit")
@click.pass_context
@handle_errors
def show_date(ctx: click.Context, commit: str) -> None:
    """Author date of COMMIT."""
    click.echo(asyncio.run(_use_case(ctx).show_date(commit)), nl=False)


@cli.command("create-reference")
@click.argument("branch")
@click.argument("commit")
@click.pass_context
@handle_errors
def create_reference(ctx: click.Context, branch: str, commit: str) -> None:
    """Create BRANCH on the remote pointing at COMMIT."""
    click.echo(asyncio.run(_use_case(ctx).create_reference(branch, commit)), nl=False)


@cli.command("pr-merge-commit")
@click.argument("number", type=int)
@click.pass_context
@handle_errors
def pr_merge_commit(ctx: click.Context, number: int) -> None:
    """Merge commit hash of pull request NUMBER."""
    click.echo(asyncio.run(_use_case(ctx).pr_merge_commit(number)), nl=False)


@cli.command("rev-parse")
@click.argument("rev")
@click.pass_context
@handle_errors
def rev_parse(ctx: click.Context, rev: str) -> None:
    """Full hash of REV."""
    click.echo(asyncio.run(_use_case(ctx).rev_parse(rev)), nl=False)
