"""Repository locator: resolves the work tree and remote identity with GitPython."""

from __future__ import annotations

import logging
import os
from pathlib import Path

# The API fallback must still locate the repository when no git executable is installed.
os.environ.setdefault("GIT_PYTHON_REFRESH", "quiet")

from git import Repo  # noqa: E402
from git.exc import InvalidGitRepositoryError, NoSuchPathError  # noqa: E402

from git_fallback.domain.exceptions import (  # noqa: E402
    InvalidRemoteUrlError,
    NotAGitRepositoryError,
)
from git_fallback.domain.value_objects import RepoIdentity, RepoLocation  # noqa: E402

logger = logging.getLogger(__name__)


def _open_repo(start: Path) -> Repo:
    """Open the repository containing *start*; ``.git`` files (submodules, worktrees) are followed."""
    try:
        return Repo(start, search_parent_directories=True)
    except (InvalidGitRepositoryError, NoSuchPathError) as exc:
        raise NotAGitRepositoryError(
            "not a git repository (or any of the parent directories): .git"
        ) from exc


def _work_tree(repo: Repo) -> Path:
    if repo.working_tree_dir is None:
        raise NotAGitRepositoryError(f"{repo.git_dir} is a bare repository")
    return Path(repo.working_tree_dir).resolve()


def remote_urls(repo: Repo) -> dict[str, str]:
    """Map remote name → url for every remote that has one."""
    urls: dict[str, str] = {}
    for remote in repo.remotes:
        if remote.config_reader.has_option("url"):
            urls[remote.name] = str(remote.config_reader.get("url")).strip()
    return urls


def find_work_tree(start: Path) -> Path:
    """Return the top-level directory of the work tree containing *start*."""
    with _open_repo(start) as repo:
        return _work_tree(repo)


def locate_repository(start: Path, remote: str = "origin") -> RepoLocation:
    """Resolve the work tree and ``(host, owner, repo)`` that *start* belongs to.

    Uses *remote* when it is configured, otherwise the first remote that has
    a URL.
    """
    with _open_repo(start) as repo:
        root = _work_tree(repo)
        urls = remote_urls(repo)
        if not urls:
            raise InvalidRemoteUrlError(f"{repo.git_dir} has no remote URL")

        name = remote if remote in urls else next(iter(urls))
        identity = RepoIdentity.from_remote_url(urls[name])
    logger.debug("Remote %r resolves to %s/%s", name, identity.host, identity.full_name)
    return RepoLocation(root=root, identity=identity)
