"""Breadth-first traversal of the commit parent graph over the remote API.

Two walks share the same frontier expansion:

* :meth:`AncestryWalker.bounded_log` lists ancestry hashes in discovery
  order, the substitute for ``git log --format=%H -N``.
* :meth:`AncestryWalker.search_base` visits every commit from a starting
  point back to a designated base commit, the substitute for the commit
  range ``git diff BASE START`` spans.

Both keep a visited set keyed by hash, so a commit reachable through several
paths (diamond merges) is fetched and reported once.
"""

from __future__ import annotations

import logging
from typing import Callable

from git_fallback.domain.entities import CommitDetail
from git_fallback.domain.exceptions import BaseNotFoundError
from git_fallback.domain.ports.object_client import RemoteObjectClient

logger = logging.getLogger(__name__)

DEFAULT_MAX_EDGES = 100
DEFAULT_MAX_DEPTH = 100

Visitor = Callable[[CommitDetail], None]


class AncestryWalker:
    """Walks parent edges of one repository through a :class:`RemoteObjectClient`."""

    def __init__(self, client: RemoteObjectClient) -> None:
        self._client = client

    async def bounded_log(self, start: str, max_edges: int = DEFAULT_MAX_EDGES) -> list[str]:
        """Return *start* followed by up to *max_edges* distinct ancestor hashes.

        Order is breadth-first emission order: a commit's parents are emitted
        when the commit is fetched, level by level. The first line is the full
        hash *start* resolves to rather than *start* as typed, the way
        ``git log --format=%H`` prints it.
        """
        head = await self._client.get_commit(start)
        emitted = [head.sha]
        visited = {head.sha}
        frontier = [head]
        edges = 0

        while frontier and edges < max_edges:
            next_frontier: list[str] = []
            for commit in frontier:
                for parent in commit.parents:
                    if parent.sha in visited:
                        continue
                    visited.add(parent.sha)
                    emitted.append(parent.sha)
                    edges += 1
                    if edges >= max_edges:
                        logger.debug("Log budget of %d edges exhausted", max_edges)
                        return emitted
                    next_frontier.append(parent.sha)
            frontier = [await self._client.get_commit(sha) for sha in next_frontier]

        return emitted

    async def search_base(
        self,
        start: str,
        base: str,
        visit: Visitor,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> CommitDetail:
        """Visit commits from *start* until a parent edge reaches *base*.

        *visit* is called once per commit dequeued, and once more for the
        base commit itself when it is found.  Returns the base commit.
        Raises :class:`BaseNotFoundError` if the frontier empties or
        *max_depth* levels are processed without reaching *base*.
        """
        base_commit = await self._client.get_commit(base)
        head = await self._client.get_commit(start)
        if head.sha == base_commit.sha:
            return base_commit

        visited = {head.sha}
        frontier = [head]
        depth = 0

        while frontier and depth < max_depth:
            next_frontier: list[str] = []
            for commit in frontier:
                visit(commit)
                for parent in commit.parents:
                    if parent.sha == base_commit.sha:
                        logger.debug("Reached base %s from %s at depth %d", base, start, depth)
                        visit(base_commit)
                        return base_commit
                    if parent.sha in visited:
                        continue
                    visited.add(parent.sha)
                    next_frontier.append(parent.sha)
            depth += 1
            frontier = [await self._client.get_commit(sha) for sha in next_frontier]

        raise BaseNotFoundError(
            f"base commit {base} not reachable from {start} within {max_depth} levels"
        )
