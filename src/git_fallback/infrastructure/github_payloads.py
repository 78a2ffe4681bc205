"""Pydantic models for the GitHub REST payloads the adapter consumes.

Only the fields we read are declared; everything else is ignored.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

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


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore")


class ShaPayload(_Payload):
    sha: str


class GitActorPayload(_Payload):
    name: str | None = None
    email: str | None = None
    date: str | None = None


class GitCommitPayload(_Payload):
    author: GitActorPayload | None = None


class CommitFilePayload(_Payload):
    filename: str
    additions: int = Field(default=0, ge=0)
    deletions: int = Field(default=0, ge=0)


class RepoCommitPayload(_Payload):
    """``GET /repos/{owner}/{repo}/commits/{ref}``."""

    sha: str
    commit: GitCommitPayload = Field(default_factory=GitCommitPayload)
    parents: list[ShaPayload] = []
    files: list[CommitFilePayload] = []

    def to_entity(self) -> CommitDetail:
        author = self.commit.author
        return CommitDetail(
            sha=self.sha,
            parents=tuple(CommitRef(p.sha) for p in self.parents),
            author=author.name if author else None,
            author_date=author.date if author else None,
            files=tuple(
                FileChange(path=f.filename, additions=f.additions, deletions=f.deletions)
                for f in self.files
            ),
        )


class TreeItemPayload(_Payload):
    path: str
    sha: str
    type: ObjectKind = ObjectKind.BLOB
    mode: str = "100644"


class TreePayload(_Payload):
    """``GET /repos/{owner}/{repo}/git/trees/{sha}?recursive=1``."""

    sha: str
    tree: list[TreeItemPayload] = []
    truncated: bool = False

    def to_entities(self) -> list[TreeEntry]:
        return [
            TreeEntry(path=item.path, sha=item.sha, kind=item.type, mode=item.mode)
            for item in self.tree
        ]


class BlobPayload(_Payload):
    """``GET /repos/{owner}/{repo}/git/blobs/{sha}``."""

    sha: str
    content: str = ""
    encoding: str = "base64"

    def to_entity(self) -> Blob:
        return Blob(sha=self.sha, encoding=self.encoding, content=self.content)


class ReferencePayload(_Payload):
    """``POST /repos/{owner}/{repo}/git/refs``."""

    ref: str
    object: ShaPayload

    def to_entity(self) -> Reference:
        return Reference(ref=self.ref, sha=self.object.sha)


class PullRequestPayload(_Payload):
    """``GET /repos/{owner}/{repo}/pulls/{number}``."""

    number: int
    state: str = "open"
    merged: bool = False
    merge_commit_sha: str | None = None

    def to_entity(self) -> PullRequest:
        return PullRequest(
            number=self.number,
            state=self.state,
            merged=self.merged,
            merge_commit_sha=self.merge_commit_sha,
        )
