"""Port for the remote object client, defined by the domain and implemented by infrastructure."""

from __future__ import annotations

from typing import Protocol

from git_fallback.domain.entities import (
    Blob,
    CommitDetail,
    PullRequest,
    Reference,
    TreeEntry,
)


class RemoteObjectClient(Protocol):
    """Abstract contract for reading the commit/tree/blob graph of one repository.

    Implementations retry rate-limited calls themselves; callers only ever
    see terminal errors.
    """

    async def get_commit(self, ref: str) -> CommitDetail:
        """Return the commit *ref* resolves to, with parents and file changes."""
        ...

    async def get_tree(self, commit: str) -> list[TreeEntry]:
        """Return the full recursive tree listing of *commit*."""
        ...

    async def get_blob(self, sha: str) -> Blob:
        """Return the (still encoded) blob with id *sha*."""
        ...

    async def create_branch(self, name: str, commit: str) -> Reference:
        """Create ``refs/heads/<name>`` pointing at *commit*."""
        ...

    async def get_pull_request(self, number: int) -> PullRequest:
        """Return metadata for pull request *number*."""
        ...
