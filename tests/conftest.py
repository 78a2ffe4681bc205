"""Shared fixtures: an in-memory object client over a synthetic commit graph."""

from __future__ import annotations

import base64
from collections import Counter
from pathlib import Path

import pytest

from git_fallback.domain.entities import (
    Blob,
    CommitDetail,
    CommitRef,
    FileChange,
    ObjectKind,
    PullRequest,
    Reference,
    TreeEntry,
)
from git_fallback.domain.exceptions import AlreadyExistsError, InvalidObjectError, NotFoundError


def commit(sha: str, *parents: str, files: tuple[FileChange, ...] = (), date: str | None = None) -> CommitDetail:
    return CommitDetail(
        sha=sha,
        parents=tuple(CommitRef(p) for p in parents),
        author="Dev",
        author_date=date,
        files=files,
    )


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


class FakeObjectClient:
    """RemoteObjectClient backed by dicts; counts every call."""

    def __init__(
        self,
        commits: list[CommitDetail] | None = None,
        trees: dict[str, list[TreeEntry]] | None = None,
        blobs: dict[str, Blob] | None = None,
        pulls: dict[int, PullRequest] | None = None,
    ) -> None:
        self.commits = {c.sha: c for c in commits or []}
        self.trees = trees or {}
        self.blobs = blobs or {}
        self.pulls = pulls or {}
        self.refs: dict[str, str] = {}
        self.commit_calls: Counter[str] = Counter()
        self.blob_calls: list[str] = []

    async def get_commit(self, ref: str) -> CommitDetail:
        self.commit_calls[ref] += 1
        try:
            return self.commits[ref]
        except KeyError:
            raise NotFoundError(f"get_commit {ref}: not found") from None

    async def get_tree(self, commit: str) -> list[TreeEntry]:
        try:
            return self.trees[commit]
        except KeyError:
            raise NotFoundError(f"get_tree {commit}: not found") from None

    async def get_blob(self, sha: str) -> Blob:
        self.blob_calls.append(sha)
        try:
            return self.blobs[sha]
        except KeyError:
            raise NotFoundError(f"get_blob {sha}: not found") from None

    async def create_branch(self, name: str, commit: str) -> Reference:
        ref = f"refs/heads/{name}"
        if ref in self.refs:
            raise AlreadyExistsError(f"{ref} already exists")
        if commit not in self.commits:
            raise InvalidObjectError(f"{commit} does not exist")
        self.refs[ref] = commit
        return Reference(ref=ref, sha=commit)

    async def get_pull_request(self, number: int) -> PullRequest:
        try:
            return self.pulls[number]
        except KeyError:
            raise NotFoundError(f"pull #{number}: not found") from None


def file_entry(path: str, sha: str, mode: str = "100644") -> TreeEntry:
    return TreeEntry(path=path, sha=sha, kind=ObjectKind.BLOB, mode=mode)


def tree_entry(path: str, sha: str = "t0") -> TreeEntry:
    return TreeEntry(path=path, sha=sha, kind=ObjectKind.TREE, mode="040000")


def make_git_dir(git_dir: Path, config: str) -> Path:
    """Lay out the minimum of a git directory that repository discovery accepts."""
    (git_dir / "objects").mkdir(parents=True)
    (git_dir / "refs" / "heads").mkdir(parents=True)
    (git_dir / "HEAD").write_text("ref: refs/heads/main\n")
    (git_dir / "config").write_text(config)
    return git_dir


def remote_config(url: str, name: str = "origin") -> str:
    return f'[core]\n\tbare = false\n[remote "{name}"]\n\turl = {url}\n'


@pytest.fixture
def linear_client() -> FakeObjectClient:
    """C3 <- C2 <- C1."""
    return FakeObjectClient(
        commits=[
            commit("C3", "C2", files=(FileChange("x.txt", 2, 0),)),
            commit("C2", "C1", files=(FileChange("x.txt", 3, 1),)),
            commit("C1", files=(FileChange("x.txt", 10, 0), FileChange("y.txt", 1, 0))),
        ]
    )


@pytest.fixture
def diamond_client() -> FakeObjectClient:
    r"""
        M
       / \
      L   R
       \ /
        B
        |
        A
    """
    return FakeObjectClient(
        commits=[
            commit("M", "L", "R", files=(FileChange("merge.txt", 1, 0),)),
            commit("L", "B", files=(FileChange("left.txt", 4, 2),)),
            commit("R", "B", files=(FileChange("right.txt", 5, 0), FileChange("left.txt", 1, 1))),
            commit("B", "A", files=(FileChange("base.txt", 7, 3),)),
            commit("A", files=(FileChange("root.txt", 100, 0),)),
        ]
    )
