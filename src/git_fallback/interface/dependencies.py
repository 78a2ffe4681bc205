"""Dependency wiring: settings → native wrapper, remote sessions, use case."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import httpx

from git_fallback.domain.exceptions import (
    ConfigurationError,
    NotAGitRepositoryError,
    UnsupportedHostError,
)
from git_fallback.domain.ports.object_client import RemoteObjectClient
from git_fallback.infrastructure.config import Settings
from git_fallback.infrastructure.git_config import find_work_tree, locate_repository
from git_fallback.infrastructure.github_rest_adapter import GitHubRestAdapter
from git_fallback.infrastructure.native_git import NativeGit
from git_fallback.services.git_operations import GitOperationsUseCase, RemoteOpener

logger = logging.getLogger(__name__)


def remote_opener(settings: Settings, workdir: Path) -> RemoteOpener:
    """Return a factory of remote sessions for the repository at *workdir*.

    Nothing is checked until a session is actually opened, so commands that
    succeed natively need neither a token nor a supported host.
    """

    @asynccontextmanager
    async def _open() -> AsyncIterator[RemoteObjectClient]:
        identity = locate_repository(workdir).identity
        if identity.host != settings.github_host.lower():
            raise UnsupportedHostError(f"{identity.host} is not supported")
        if settings.auth_token is None:
            raise ConfigurationError("AUTH_TOKEN must be defined to use the GitHub API")

        logger.info("Using the GitHub API for %s", identity.full_name)
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(settings.http_timeout_seconds)
        ) as http_client:
            yield GitHubRestAdapter(
                client=http_client,
                identity=identity,
                token=settings.auth_token.get_secret_value(),
                api_url=settings.github_api_url,
                rate_limit_margin=settings.rate_limit_margin_seconds,
            )

    return _open


def get_use_case(settings: Settings, workdir: Path) -> GitOperationsUseCase:
    """Build the use case with injected adapters.

    Commands run from the top of the work tree containing *workdir*, so
    ``reset`` rewrites the whole checkout even when started in a subdirectory.
    Outside a repository *workdir* is kept and the remote session reports it.
    """
    try:
        root = find_work_tree(workdir)
    except NotAGitRepositoryError:
        logger.debug("%s is not inside a work tree", workdir)
        root = workdir

    native = NativeGit(root, settings.git_binary) if settings.use_native_git else None
    return GitOperationsUseCase(
        native=native,
        open_remote=remote_opener(settings, root),
        workdir=root,
        log_max_commits=settings.log_max_commits,
        numstat_max_depth=settings.numstat_max_depth,
        cleanup_ref=settings.cleanup_ref,
    )
