"""Test fixtures including a scripted GitHub API stub."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest


class GitHubStub:
    """Scripted stand-in for the GitHub REST API.

    Usage:
        stub = GitHubStub(status_code=201, body={"id": 1})
        reporter = StatusReporter(..., transport=stub.transport)
        ...
        assert stub.payloads[0]["state"] == "pending"
    """

    def __init__(
        self,
        status_code: int = 201,
        body: Any = None,
        exc: Exception | None = None,
    ) -> None:
        self.status_code = status_code
        self.body = {"id": 1} if body is None else body
        self.exc = exc
        self.requests: list[httpx.Request] = []

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        if isinstance(self.body, bytes):
            return httpx.Response(self.status_code, content=self.body)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)

    @property
    def payloads(self) -> list[dict[str, Any]]:
        return [json.loads(r.content) for r in self.requests if r.content]

    @property
    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]


@pytest.fixture
def github() -> GitHubStub:
    """A GitHub stub that accepts every request."""
    return GitHubStub()
