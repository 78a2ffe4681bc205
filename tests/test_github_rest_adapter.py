"""Tests for the GitHub REST adapter, driven through httpx.MockTransport."""

from __future__ import annotations

import json

import httpx
import pytest

from conftest import b64
from git_fallback.domain.entities import ObjectKind
from git_fallback.domain.exceptions import (
    AccessDeniedError,
    AlreadyExistsError,
    InvalidObjectError,
    NotFoundError,
    TransportError,
)
from git_fallback.domain.value_objects import RepoIdentity
from git_fallback.infrastructure.github_rest_adapter import GitHubRestAdapter

IDENTITY = RepoIdentity(host="github.com", owner="acme", repo="widgets")
NOW = 1_700_000_000.0


class FakeSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def make_adapter(handler, sleep: FakeSleep | None = None) -> tuple[GitHubRestAdapter, list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def recording(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(recording))
    adapter = GitHubRestAdapter(
        client,
        IDENTITY,
        token="t0ken",
        sleep=sleep or FakeSleep(),
        clock=lambda: NOW,
    )
    return adapter, seen


COMMIT_PAYLOAD = {
    "sha": "abc123",
    "commit": {"author": {"name": "Dev", "email": "dev@example.com", "date": "2024-05-01T10:20:30Z"}},
    "parents": [{"sha": "p1", "url": "..."}, {"sha": "p2", "url": "..."}],
    "files": [
        {"filename": "x.txt", "additions": 3, "deletions": 1, "status": "modified"},
        {"filename": "img.png", "additions": 0, "deletions": 0, "status": "added"},
    ],
}


@pytest.mark.asyncio
async def test_get_commit_parses_payload():
    adapter, seen = make_adapter(lambda r: httpx.Response(200, json=COMMIT_PAYLOAD))

    detail = await adapter.get_commit("abc")

    assert seen[0].url.path == "/repos/acme/widgets/commits/abc"
    assert seen[0].headers["Authorization"] == "Bearer t0ken"
    assert detail.sha == "abc123"
    assert [p.sha for p in detail.parents] == ["p1", "p2"]
    assert detail.author == "Dev"
    assert detail.author_date == "2024-05-01T10:20:30Z"
    assert [(f.path, f.additions, f.deletions) for f in detail.files] == [
        ("x.txt", 3, 1),
        ("img.png", 0, 0),
    ]


@pytest.mark.asyncio
async def test_get_tree_is_recursive():
    payload = {
        "sha": "tree1",
        "truncated": False,
        "tree": [
            {"path": "a", "mode": "040000", "type": "tree", "sha": "t1"},
            {"path": "a/b.txt", "mode": "100644", "type": "blob", "sha": "b1", "size": 2},
            {"path": "vendor/lib", "mode": "160000", "type": "commit", "sha": "s1"},
        ],
    }
    adapter, seen = make_adapter(lambda r: httpx.Response(200, json=payload))

    entries = await adapter.get_tree("abc")

    assert seen[0].url.path == "/repos/acme/widgets/git/trees/abc"
    assert seen[0].url.params["recursive"] == "1"
    assert [(e.path, e.kind) for e in entries] == [
        ("a", ObjectKind.TREE),
        ("a/b.txt", ObjectKind.BLOB),
        ("vendor/lib", ObjectKind.COMMIT),
    ]
    assert [e.is_file for e in entries] == [False, True, False]


@pytest.mark.asyncio
async def test_get_blob_decodes_wrapped_base64():
    content = b64(b"x" * 100)
    wrapped = "\n".join(content[i : i + 60] for i in range(0, len(content), 60)) + "\n"
    adapter, _ = make_adapter(
        lambda r: httpx.Response(200, json={"sha": "b1", "encoding": "base64", "content": wrapped})
    )

    blob = await adapter.get_blob("b1")

    assert blob.decode() == b"x" * 100


@pytest.mark.asyncio
async def test_not_found():
    adapter, _ = make_adapter(lambda r: httpx.Response(404, json={"message": "Not Found"}))

    with pytest.raises(NotFoundError, match="get_commit acme/widgets@deadbeef"):
        await adapter.get_commit("deadbeef")


@pytest.mark.asyncio
async def test_access_denied_is_not_retried():
    sleep = FakeSleep()
    adapter, seen = make_adapter(
        lambda r: httpx.Response(403, headers={"x-ratelimit-remaining": "42"}, json={"message": "Forbidden"}),
        sleep,
    )

    with pytest.raises(AccessDeniedError):
        await adapter.get_blob("b1")
    assert len(seen) == 1
    assert sleep.calls == []


@pytest.mark.asyncio
async def test_server_error_is_transport_error():
    adapter, seen = make_adapter(lambda r: httpx.Response(502, text="bad gateway"))

    with pytest.raises(TransportError, match="HTTP 502"):
        await adapter.get_tree("abc")
    assert len(seen) == 1


@pytest.mark.asyncio
async def test_network_error_is_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("boom", request=request)

    adapter, _ = make_adapter(handler)

    with pytest.raises(TransportError, match="network error"):
        await adapter.get_commit("abc")


@pytest.mark.asyncio
async def test_malformed_payload_is_transport_error():
    adapter, _ = make_adapter(lambda r: httpx.Response(200, json={"unexpected": True}))

    with pytest.raises(TransportError, match="unexpected response payload"):
        await adapter.get_commit("abc")


class TestRateLimit:
    @pytest.mark.asyncio
    async def test_waits_until_reset_plus_margin_then_reissues(self):
        reset_at = int(NOW) + 120
        responses = iter(
            [
                httpx.Response(
                    403,
                    headers={"x-ratelimit-remaining": "0", "x-ratelimit-reset": str(reset_at)},
                    json={"message": "API rate limit exceeded"},
                ),
                httpx.Response(200, json=COMMIT_PAYLOAD),
            ]
        )
        sleep = FakeSleep()
        adapter, seen = make_adapter(lambda r: next(responses), sleep)

        detail = await adapter.get_commit("abc")

        assert detail.sha == "abc123"
        assert sleep.calls == [reset_at - NOW + 30]
        assert len(seen) == 2
        assert seen[0].method == seen[1].method
        assert seen[0].url == seen[1].url

    @pytest.mark.asyncio
    async def test_429_with_retry_after(self):
        responses = iter(
            [
                httpx.Response(429, headers={"retry-after": "5"}),
                httpx.Response(429, headers={"retry-after": "5"}),
                httpx.Response(200, json={"sha": "b1", "encoding": "base64", "content": "aGk="}),
            ]
        )
        sleep = FakeSleep()
        adapter, seen = make_adapter(lambda r: next(responses), sleep)

        blob = await adapter.get_blob("b1")

        assert blob.decode() == b"hi"
        assert sleep.calls == [35.0, 35.0]
        assert len(seen) == 3

    @pytest.mark.asyncio
    async def test_reset_in_the_past_still_waits_margin_only(self):
        responses = iter(
            [
                httpx.Response(
                    403,
                    headers={"x-ratelimit-remaining": "0", "x-ratelimit-reset": str(int(NOW) - 600)},
                ),
                httpx.Response(200, json=COMMIT_PAYLOAD),
            ]
        )
        sleep = FakeSleep()
        adapter, _ = make_adapter(lambda r: next(responses), sleep)

        await adapter.get_commit("abc")

        assert sleep.calls == [0.0]

    @pytest.mark.asyncio
    async def test_create_branch_retry_reissues_same_body(self):
        responses = iter(
            [
                httpx.Response(429, headers={"x-ratelimit-remaining": "0", "x-ratelimit-reset": str(int(NOW))}),
                httpx.Response(201, json={"ref": "refs/heads/feature", "object": {"sha": "abc123", "type": "commit"}}),
            ]
        )
        adapter, seen = make_adapter(lambda r: next(responses))

        await adapter.create_branch("feature", "abc123")

        assert [json.loads(r.content) for r in seen] == [
            {"ref": "refs/heads/feature", "sha": "abc123"},
            {"ref": "refs/heads/feature", "sha": "abc123"},
        ]


class TestCreateBranch:
    @pytest.mark.asyncio
    async def test_created(self):
        adapter, seen = make_adapter(
            lambda r: httpx.Response(
                201, json={"ref": "refs/heads/feature", "object": {"sha": "abc123", "type": "commit"}}
            )
        )

        ref = await adapter.create_branch("feature", "abc123")

        assert seen[0].method == "POST"
        assert seen[0].url.path == "/repos/acme/widgets/git/refs"
        assert ref.ref == "refs/heads/feature"
        assert ref.sha == "abc123"
        assert ref.render() == "refs/heads/feature abc123"

    @pytest.mark.asyncio
    async def test_already_exists(self):
        adapter, _ = make_adapter(
            lambda r: httpx.Response(422, json={"message": "Reference already exists"})
        )

        with pytest.raises(AlreadyExistsError):
            await adapter.create_branch("main", "abc123")

    @pytest.mark.asyncio
    async def test_invalid_object(self):
        adapter, _ = make_adapter(
            lambda r: httpx.Response(422, json={"message": "Object does not exist"})
        )

        with pytest.raises(InvalidObjectError, match="Object does not exist"):
            await adapter.create_branch("feature", "0000000")


@pytest.mark.asyncio
async def test_get_pull_request():
    adapter, seen = make_adapter(
        lambda r: httpx.Response(
            200, json={"number": 7, "state": "closed", "merged": True, "merge_commit_sha": "m7"}
        )
    )

    pr = await adapter.get_pull_request(7)

    assert seen[0].url.path == "/repos/acme/widgets/pulls/7"
    assert pr.merge_commit_sha == "m7"
    assert pr.merged is True
