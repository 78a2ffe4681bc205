"""Value objects: self-validating domain primitives."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlsplit

from git_fallback.domain.exceptions import InvalidRemoteUrlError

# git@github.com:owner/repo.git
_SCP_LIKE_RE = re.compile(
    r"^(?:[A-Za-z0-9\-_.]+@)?(?P<host>[A-Za-z0-9\-_.]+):(?P<path>(?!//)[^\\]+)$"
)


@dataclass(frozen=True, slots=True)
class RepoIdentity:
    """The ``(host, owner, repo)`` triple the remote client operates on.

    Parsed from a remote URL in any of the forms git accepts for hosted
    repositories::

        https://github.com/psf/requests.git
        ssh://git@github.com/psf/requests.git
        git@github.com:psf/requests.git
    """

    host: str
    owner: str
    repo: str

    @classmethod
    def from_remote_url(cls, url: str) -> RepoIdentity:
        """Parse and validate a remote URL string."""
        url = url.strip()
        if "://" in url:
            parts = urlsplit(url)
            host = parts.hostname or ""
            path = parts.path
        else:
            match = _SCP_LIKE_RE.match(url)
            if not match:
                raise InvalidRemoteUrlError(f"Invalid remote URL: '{url}'")
            host = match["host"]
            path = match["path"]

        segments = [s for s in path.split("/") if s]
        if not host or len(segments) < 2:
            raise InvalidRemoteUrlError(
                f"Invalid remote URL: '{url}'. Expected <host>/<owner>/<repo>"
            )
        owner, repo = segments[0], segments[1]
        if repo.endswith(".git"):
            repo = repo[: -len(".git")]
        if not repo:
            raise InvalidRemoteUrlError(f"Invalid remote URL: '{url}'")
        return cls(host=host.lower(), owner=owner, repo=repo)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True, slots=True)
class RepoLocation:
    """Where a repository's work tree lives and which remote repository it mirrors."""

    root: Path
    identity: RepoIdentity
