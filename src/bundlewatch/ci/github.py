"""GitHubClient — httpx-based GitHub REST client for commit statuses."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

import httpx

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT = 5.0


@dataclass(frozen=True, slots=True)
class GitHubConfig:
    """GitHub connection configuration for a single repository."""

    token: str
    repo_owner: str
    repo_name: str
    api_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT

    @property
    def repository(self) -> str:
        return f"{self.repo_owner}/{self.repo_name}"


def _decode(resp: httpx.Response) -> dict[str, Any]:
    """Decode a successful response; empty or non-JSON bodies give ``{}``."""
    if not resp.content:
        return {}
    try:
        data = resp.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {"data": data}


def resolve_github_config() -> GitHubConfig | None:
    """Resolve GitHub config from environment variables."""
    token = os.environ.get("GITHUB_TOKEN", "")
    repo = os.environ.get("GITHUB_REPOSITORY", "")
    if not token or "/" not in repo:
        return None
    owner, name = repo.split("/", 1)
    api_url = os.environ.get("GITHUB_API_URL") or DEFAULT_API_URL
    return GitHubConfig(token=token, repo_owner=owner, repo_name=name, api_url=api_url)


class GitHubClient:
    """Lightweight GitHub API client using httpx.

    Use as an async context manager to reuse a single connection pool::

        async with GitHubClient(config) as client:
            await client.create_status(sha, state="pending", description="...", context="...")

    Individual methods also work outside the context manager (they create
    a short-lived client per call).
    """

    def __init__(
        self,
        config: GitHubConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._headers = {
            "Authorization": f"token {config.token}",
            "Accept": "application/vnd.github+json",
        }
        self._client: httpx.AsyncClient | None = None

    @property
    def config(self) -> GitHubConfig:
        return self._config

    async def __aenter__(self) -> GitHubClient:
        self._client = self._new_client()
        return self

    async def __aexit__(self, *exc: object) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers=self._headers,
            timeout=self._config.timeout,
            transport=self._transport,
        )

    def _url(self, path: str) -> str:
        return f"{self._config.api_url.rstrip('/')}/repos/{self._config.repository}{path}"

    async def _request(
        self, method: str, path: str, *, json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        url = self._url(path)
        if self._client is not None:
            resp = await self._client.request(method, url, json=json)
        else:
            async with self._new_client() as c:
                resp = await c.request(method, url, json=json)
        resp.raise_for_status()
        return resp

    # -- Public API -------------------------------------------------------

    async def create_status(
        self,
        commit_sha: str,
        *,
        state: str,
        description: str,
        context: str,
        target_url: str | None = None,
    ) -> dict[str, Any]:
        """Create a commit status. ``target_url`` is omitted when not given."""
        data: dict[str, Any] = {"state": state, "description": description, "context": context}
        if target_url is not None:
            data["target_url"] = target_url
        resp = await self._request("POST", f"/statuses/{commit_sha}", json=data)
        return _decode(resp)

    async def post_issue_comment(self, issue_number: int, body: str) -> dict[str, Any]:
        """Post a comment on an issue or PR."""
        resp = await self._request(
            "POST", f"/issues/{issue_number}/comments", json={"body": body},
        )
        return _decode(resp)

    async def get_commit(self, commit_sha: str) -> dict[str, Any]:
        """Get a single commit."""
        resp = await self._request("GET", f"/commits/{commit_sha}")
        return _decode(resp)
