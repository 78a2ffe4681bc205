"""Domain entities: pure data structures with no external dependencies."""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from enum import Enum

from git_fallback.domain.exceptions import TransportError, UnsupportedEncodingError


class ObjectKind(str, Enum):
    """Kind of an entry in a recursive tree listing."""

    BLOB = "blob"
    TREE = "tree"
    COMMIT = "commit"  # submodule gitlink


@dataclass(frozen=True, slots=True)
class CommitRef:
    """A commit known only by its hash."""

    sha: str


@dataclass(frozen=True, slots=True)
class FileChange:
    """One commit's line counts for a single path."""

    path: str
    additions: int
    deletions: int


@dataclass(frozen=True, slots=True)
class CommitDetail:
    """A fetched commit: parents, author and its own per-file changes."""

    sha: str
    parents: tuple[CommitRef, ...] = ()
    author: str | None = None
    author_date: str | None = None  # ISO 8601 as sent by the API
    files: tuple[FileChange, ...] = ()


@dataclass(frozen=True, slots=True)
class TreeEntry:
    """A single node from a recursive tree listing."""

    path: str
    sha: str
    kind: ObjectKind
    mode: str = "100644"

    @property
    def is_file(self) -> bool:
        return self.kind is ObjectKind.BLOB

    @property
    def is_executable(self) -> bool:
        return self.mode == "100755"


@dataclass(frozen=True, slots=True)
class Blob:
    """Encoded file content as transmitted by the API."""

    sha: str
    encoding: str
    content: str

    def decode(self) -> bytes:
        """Return the raw bytes of the blob.

        Only ``base64`` is understood; anything else raises
        :class:`UnsupportedEncodingError`.
        """
        if self.encoding != "base64":
            raise UnsupportedEncodingError(
                f"blob {self.sha}: unsupported encoding: {self.encoding}"
            )
        try:
            # The API wraps base64 payloads at 60 columns.
            return base64.b64decode(self.content)
        except (binascii.Error, ValueError) as exc:
            raise TransportError(f"blob {self.sha}: malformed base64 content") from exc


@dataclass(frozen=True, slots=True)
class FileStat:
    """Accumulated additions/deletions for one path."""

    path: str
    additions: int = 0
    deletions: int = 0

    def merge(self, change: FileChange) -> FileStat:
        return FileStat(
            path=self.path,
            additions=self.additions + change.additions,
            deletions=self.deletions + change.deletions,
        )

    def render(self) -> str:
        """``additions<TAB>deletions<TAB>path``, as ``git diff --numstat`` prints."""
        return f"{self.additions}\t{self.deletions}\t{self.path}"


@dataclass(frozen=True, slots=True)
class Reference:
    """A git reference as returned after creation."""

    ref: str
    sha: str

    def render(self) -> str:
        return f"{self.ref} {self.sha}"


@dataclass(frozen=True, slots=True)
class PullRequest:
    """The subset of pull-request metadata the CLI needs."""

    number: int
    state: str
    merged: bool = False
    merge_commit_sha: str | None = None
