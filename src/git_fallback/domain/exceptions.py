"""Domain exception hierarchy.

Each exception maps to a specific process exit code at the interface layer.
Inner layers raise these; the CLI error handler translates them.
"""

from __future__ import annotations


class GitFallbackError(Exception):
    """Base exception for the entire application."""


# ── Configuration / local repository ────────────────────────────────────────


class ConfigurationError(GitFallbackError):
    """A required setting (usually the access token) is missing or invalid."""


class NotAGitRepositoryError(GitFallbackError):
    """No ``.git/config`` was found from the working directory upwards."""


class InvalidRemoteUrlError(GitFallbackError):
    """The configured remote URL cannot be split into host/owner/repo."""


class UnsupportedHostError(GitFallbackError):
    """The remote is hosted somewhere the API fallback does not speak to."""


class NativeGitError(GitFallbackError):
    """The local ``git`` executable is missing or the command failed."""


# ── Remote API errors ───────────────────────────────────────────────────────


class NotFoundError(GitFallbackError):
    """A commit, tree, blob or pull request does not exist (404)."""


class FileNotInTreeError(NotFoundError):
    """The requested path is not a file in the commit's tree."""


class MergeCommitUnavailableError(NotFoundError):
    """The pull request has no merge commit."""


class AccessDeniedError(GitFallbackError):
    """The token was rejected or lacks access to the repository (401 / 403)."""


class RateLimitedError(GitFallbackError):
    """GitHub API rate limit hit; retried internally and never surfaced."""

    def __init__(self, message: str, reset_at: float) -> None:
        super().__init__(message)
        self.reset_at = reset_at


class TransportError(GitFallbackError):
    """Network failure, unexpected status or unparseable payload."""


class AlreadyExistsError(GitFallbackError):
    """The branch reference being created already exists."""


class InvalidObjectError(GitFallbackError):
    """The reference target does not resolve to an object."""


# ── Core algorithm errors ───────────────────────────────────────────────────


class UnsupportedEncodingError(GitFallbackError):
    """A blob was transmitted in an encoding other than base64."""


class BaseNotFoundError(GitFallbackError):
    """The base commit was not reached within the search budget."""


class MaterializationError(GitFallbackError):
    """Writing a tree entry to the working directory failed."""
