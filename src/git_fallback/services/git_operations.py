"""Git operations use case: native fast path first, remote API as fallback.

Each public method mirrors one CLI command.  The local ``git`` executable is
tried first; when it is disabled or fails, a remote session is opened (which
is where a missing token or an unsupported host surfaces) and the
commit-graph services do the work instead.
"""

from __future__ import annotations

import logging
from contextlib import AbstractAsyncContextManager
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, TypeVar

from git_fallback.domain.exceptions import (
    MergeCommitUnavailableError,
    NativeGitError,
    NotFoundError,
    TransportError,
)
from git_fallback.domain.ports.object_client import RemoteObjectClient
from git_fallback.infrastructure.native_git import NativeGit
from git_fallback.services.ancestry_walker import (
    DEFAULT_MAX_DEPTH,
    DEFAULT_MAX_EDGES,
    AncestryWalker,
)
from git_fallback.services.numstat_aggregator import NumstatAggregator
from git_fallback.services.tree_materializer import TreeMaterializer

logger = logging.getLogger(__name__)

T = TypeVar("T")

RemoteOpener = Callable[[], AbstractAsyncContextManager[RemoteObjectClient]]


class GitOperationsUseCase:
    """Runs git commands against one working directory.

    Parameters
    ----------
    native:
        Wrapper around the local ``git`` executable, or ``None`` to always use
        the API.
    open_remote:
        Zero-argument factory returning an async context manager that yields
        a :class:`RemoteObjectClient` for the repository.
    workdir:
        Root of the working tree that ``reset`` rewrites.
    log_max_commits:
        Ancestor budget of the API ``log``.
    numstat_max_depth:
        Level budget of the base-commit search behind ``diff_numstat``.
    cleanup_ref:
        Revision whose tracked files are deleted before an API ``reset``.
    """

    def __init__(
        self,
        native: NativeGit | None,
        open_remote: RemoteOpener,
        workdir: Path,
        *,
        log_max_commits: int = DEFAULT_MAX_EDGES,
        numstat_max_depth: int = DEFAULT_MAX_DEPTH,
        cleanup_ref: str = "HEAD",
    ) -> None:
        self._native = native
        self._open_remote = open_remote
        self._workdir = workdir
        self._log_max = log_max_commits
        self._max_depth = numstat_max_depth
        self._cleanup_ref = cleanup_ref

    # ── Commands with a native fast path ────────────────────────────────

    async def reset(self, commit: str) -> None:
        """Make the working tree match *commit*."""
        if self._try_native("reset --hard", lambda n: n.reset_hard(commit)) is not None:
            return
        if self._try_native("fetch + checkout", lambda n: n.fetch_checkout(commit)) is not None:
            return

        async with self._open_remote() as client:
            self._remove_tracked_files()
            await TreeMaterializer(client).materialize(commit, self._workdir)

    async def diff_numstat(self, base: str, commit: str) -> str:
        """``additions<TAB>deletions<TAB>path`` lines for the range *base*..*commit*."""
        out = self._try_native("diff --numstat", lambda n: n.diff_numstat(base, commit))
        if out is not None:
            return out

        aggregator = NumstatAggregator()
        async with self._open_remote() as client:
            await AncestryWalker(client).search_base(
                commit, base, aggregator.add_commit, max_depth=self._max_depth
            )
        return _lines(aggregator.render())

    async def log(self, commit: str) -> str:
        """One hash per line: *commit* then its ancestors."""
        out = self._try_native("log", lambda n: n.log(commit, self._log_max))
        if out is not None:
            return out

        async with self._open_remote() as client:
            hashes = await AncestryWalker(client).bounded_log(commit, self._log_max)
        return _lines(hashes)

    async def show_date(self, commit: str) -> str:
        """Author date of *commit* as ``YYYY-MM-DD HH:MM:SS +ZZZZ``."""
        out = self._try_native("show --format=%ai", lambda n: n.show_date(commit))
        if out is not None:
            return out

        async with self._open_remote() as client:
            detail = await client.get_commit(commit)
        if not detail.author_date:
            raise NotFoundError(f"show_date {commit}: author not found in commit")
        return _lines([format_git_date(detail.author_date)])

    async def rev_parse(self, rev: str) -> str:
        """Full hash of *rev*."""
        out = self._try_native("rev-parse", lambda n: n.rev_parse(rev))
        if out is not None:
            return out

        async with self._open_remote() as client:
            detail = await client.get_commit(rev)
        return _lines([detail.sha])

    # ── API-only commands ───────────────────────────────────────────────

    async def get_file(self, commit: str, path: str) -> bytes:
        """Raw content of *path* at *commit*."""
        async with self._open_remote() as client:
            return await TreeMaterializer(client).read_file(commit, path)

    async def create_reference(self, branch: str, commit: str) -> str:
        """Create branch *branch* at *commit* on the remote."""
        async with self._open_remote() as client:
            ref = await client.create_branch(branch, commit)
        logger.info("Created %s at %s", ref.ref, ref.sha)
        return _lines([ref.render()])

    async def pr_merge_commit(self, number: int) -> str:
        """Merge commit hash of pull request *number*."""
        async with self._open_remote() as client:
            pr = await client.get_pull_request(number)
        if not pr.merge_commit_sha:
            raise MergeCommitUnavailableError(
                f"pull request #{number} ({pr.state}) has no merge commit"
            )
        return _lines([pr.merge_commit_sha])

    # ── Helpers ─────────────────────────────────────────────────────────

    def _try_native(self, description: str, action: Callable[[NativeGit], T]) -> T | None:
        """Run *action* on the native wrapper; ``None`` means "fall back to the API"."""
        if self._native is None:
            return None
        try:
            return action(self._native)
        except NativeGitError as exc:
            logger.info("git %s failed, falling back to the API: %s", description, exc)
            return None

    def _remove_tracked_files(self) -> None:
        """Delete files tracked at the cleanup ref; failures are ignored."""
        if self._native is None:
            return
        try:
            tracked = self._native.tracked_files(self._cleanup_ref)
        except NativeGitError as exc:
            logger.info("Cannot list tracked files at %s, skipping cleanup: %s", self._cleanup_ref, exc)
            return

        removed = 0
        for name in tracked:
            try:
                (self._workdir / name).unlink()
                removed += 1
            except OSError:
                logger.debug("Could not remove %s", name)
        logger.info("Removed %d of %d tracked files", removed, len(tracked))


def format_git_date(iso_date: str) -> str:
    """Render an ISO 8601 timestamp the way ``git show --format=%ai`` does."""
    try:
        moment = datetime.fromisoformat(iso_date.replace("Z", "+00:00"))
    except ValueError as exc:
        raise TransportError(f"unparseable commit date: {iso_date!r}") from exc
    return moment.strftime("%Y-%m-%d %H:%M:%S %z")


def _lines(items: Iterable[str]) -> str:
    return "".join(f"{item}\n" for item in items)
