"""GitHub REST API adapter: implements the RemoteObjectClient port."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from git_fallback.domain.entities import (
    Blob,
    CommitDetail,
    PullRequest,
    Reference,
    TreeEntry,
)
from git_fallback.domain.exceptions import (
    AccessDeniedError,
    AlreadyExistsError,
    InvalidObjectError,
    NotFoundError,
    RateLimitedError,
    TransportError,
)
from git_fallback.domain.value_objects import RepoIdentity
from git_fallback.infrastructure.github_payloads import (
    BlobPayload,
    PullRequestPayload,
    ReferencePayload,
    RepoCommitPayload,
    TreePayload,
)
from git_fallback.infrastructure.rate_limit import (
    DEFAULT_MARGIN_SECONDS,
    Clock,
    Sleep,
    retry_on_rate_limit,
)

logger = logging.getLogger(__name__)

_GITHUB_API = "https://api.github.com"

P = TypeVar("P", bound=BaseModel)


class GitHubRestAdapter:
    """Concrete RemoteObjectClient backed by the GitHub v3 REST API.

    Every request goes through :func:`retry_on_rate_limit`, so rate-limit
    responses are waited out and re-issued; all other failures are translated
    into domain exceptions carrying the operation and identifiers involved.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        identity: RepoIdentity,
        token: str,
        *,
        api_url: str = _GITHUB_API,
        rate_limit_margin: float = DEFAULT_MARGIN_SECONDS,
        sleep: Sleep = asyncio.sleep,
        clock: Clock = time.time,
    ) -> None:
        self._client = client
        self._identity = identity
        self._api_url = api_url.rstrip("/")
        self._margin = rate_limit_margin
        self._sleep = sleep
        self._clock = clock
        self._api_headers: dict[str, str] = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": "git-fallback/1.0",
            "Authorization": f"Bearer {token}",
        }

    @property
    def identity(self) -> RepoIdentity:
        return self._identity

    @property
    def _repo_path(self) -> str:
        return f"/repos/{self._identity.owner}/{self._identity.repo}"

    # ── Port implementation ─────────────────────────────────────────────

    async def get_commit(self, ref: str) -> CommitDetail:
        """GET /repos/{owner}/{repo}/commits/{ref} → CommitDetail."""
        operation = f"get_commit {self._identity.full_name}@{ref}"
        resp = await self._api_request("GET", f"{self._repo_path}/commits/{ref}", operation)
        return _parse(RepoCommitPayload, resp, operation).to_entity()

    async def get_tree(self, commit: str) -> list[TreeEntry]:
        """GET /repos/{owner}/{repo}/git/trees/{commit}?recursive=1 → [TreeEntry]."""
        operation = f"get_tree {self._identity.full_name}@{commit}"
        resp = await self._api_request(
            "GET",
            f"{self._repo_path}/git/trees/{commit}",
            operation,
            params={"recursive": "1"},
        )
        payload = _parse(TreePayload, resp, operation)
        if payload.truncated:
            logger.warning(
                "%s: tree listing was truncated by the API; %d entries returned",
                operation,
                len(payload.tree),
            )
        return payload.to_entities()

    async def get_blob(self, sha: str) -> Blob:
        """GET /repos/{owner}/{repo}/git/blobs/{sha} → Blob."""
        operation = f"get_blob {self._identity.full_name}@{sha}"
        resp = await self._api_request("GET", f"{self._repo_path}/git/blobs/{sha}", operation)
        return _parse(BlobPayload, resp, operation).to_entity()

    async def create_branch(self, name: str, commit: str) -> Reference:
        """POST /repos/{owner}/{repo}/git/refs → Reference."""
        ref = f"refs/heads/{name}"
        operation = f"create_branch {self._identity.full_name} {ref} -> {commit}"
        resp = await self._api_request(
            "POST",
            f"{self._repo_path}/git/refs",
            operation,
            json={"ref": ref, "sha": commit},
            accept=(422,),
        )
        if resp.status_code == 422:
            message = _error_message(resp)
            if "already exists" in message.lower():
                raise AlreadyExistsError(f"{operation}: reference already exists")
            raise InvalidObjectError(f"{operation}: {message or 'invalid object'}")
        return _parse(ReferencePayload, resp, operation).to_entity()

    async def get_pull_request(self, number: int) -> PullRequest:
        """GET /repos/{owner}/{repo}/pulls/{number} → PullRequest."""
        operation = f"get_pull_request {self._identity.full_name}#{number}"
        resp = await self._api_request("GET", f"{self._repo_path}/pulls/{number}", operation)
        return _parse(PullRequestPayload, resp, operation).to_entity()

    # ── Transport ───────────────────────────────────────────────────────

    async def _api_request(
        self,
        method: str,
        endpoint: str,
        operation: str,
        *,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
        accept: tuple[int, ...] = (),
    ) -> httpx.Response:
        """Perform a GitHub API request, retrying while rate limited."""

        async def _once() -> httpx.Response:
            return await self._send(method, endpoint, operation, params, json, accept)

        return await retry_on_rate_limit(
            operation, _once, margin=self._margin, sleep=self._sleep, clock=self._clock
        )

    async def _send(
        self,
        method: str,
        endpoint: str,
        operation: str,
        params: dict[str, str] | None,
        json: dict[str, Any] | None,
        accept: tuple[int, ...],
    ) -> httpx.Response:
        """Issue one request and translate the response into domain errors."""
        url = f"{self._api_url}{endpoint}"
        logger.debug("%s %s", method, url)
        try:
            resp = await self._client.request(
                method, url, headers=self._api_headers, params=params, json=json
            )
        except httpx.HTTPError as exc:
            raise TransportError(f"{operation}: network error fetching {url}: {exc}") from exc

        if resp.is_success or resp.status_code in accept:
            return resp

        reset_at = self._rate_limit_reset(resp)
        if reset_at is not None:
            raise RateLimitedError(
                f"{operation}: GitHub API rate limit exceeded (HTTP {resp.status_code})",
                reset_at=reset_at,
            )

        if resp.status_code == 404:
            raise NotFoundError(f"{operation}: not found")

        if resp.status_code in (401, 403):
            raise AccessDeniedError(
                f"{operation}: access denied (HTTP {resp.status_code}). "
                "Check that AUTH_TOKEN is valid and can read the repository."
            )

        detail = _error_message(resp)
        raise TransportError(
            f"{operation}: GitHub API returned HTTP {resp.status_code}"
            + (f": {detail}" if detail else "")
        )

    def _rate_limit_reset(self, resp: httpx.Response) -> float | None:
        """Return the epoch time the limit resets, or None if *resp* is not a rate limit."""
        if resp.status_code not in (403, 429):
            return None

        remaining = resp.headers.get("x-ratelimit-remaining", "")
        retry_after = resp.headers.get("retry-after")
        if resp.status_code == 403 and remaining != "0" and retry_after is None:
            return None

        if remaining == "0":
            try:
                return float(int(resp.headers.get("x-ratelimit-reset", "")))
            except ValueError:
                pass
        if retry_after is not None:
            try:
                return self._clock() + float(retry_after)
            except ValueError:
                pass
        return self._clock()


def _parse(model: type[P], resp: httpx.Response, operation: str) -> P:
    try:
        return model.model_validate(resp.json())
    except (ValueError, ValidationError) as exc:
        raise TransportError(f"{operation}: unexpected response payload: {exc}") from exc


def _error_message(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return resp.text.strip()
    if isinstance(data, dict):
        return str(data.get("message", ""))
    return ""
