"""AccessGuard — gate route handlers behind a repository access check."""

from __future__ import annotations

from collections.abc import Callable, Coroutine, Mapping
from dataclasses import dataclass
from typing import Any

from fastapi import Request

from bundlewatch.server.access import AccessChecker, access_error
from bundlewatch.server.errors import ServiceError

NOT_ALLOWED = "Not allowed"


@dataclass(frozen=True, slots=True)
class AccessRequest:
    """Credentials and coordinates presented in a request body."""

    commit_sha: str | None = None
    repo_name: str | None = None
    repo_owner: str | None = None
    github_access_token: str | None = None

    @classmethod
    def from_body(cls, body: Any) -> AccessRequest:
        if not isinstance(body, Mapping):
            return cls()
        return cls(
            commit_sha=body.get("commitSha"),
            repo_name=body.get("repoName"),
            repo_owner=body.get("repoOwner"),
            github_access_token=body.get("githubAccessToken"),
        )


async def check_repo_access(access: AccessRequest, checker: AccessChecker) -> None:
    """Raise ServiceError unless ``checker`` allows the request."""
    result = await checker(
        access.repo_owner,
        access.repo_name,
        access.commit_sha,
        access.github_access_token,
    )
    if not result:
        raise ServiceError(401, NOT_ALLOWED)
    error = access_error(result)
    if error:
        raise ServiceError(500, error)


def require_repo_access() -> Callable[[Request], Coroutine[Any, Any, AccessRequest]]:
    """Build a FastAPI dependency that runs the app's access checker.

    Usage::

        @app.post("/status")
        async def status(access: AccessRequest = Depends(require_repo_access())):
            ...
    """

    async def dependency(request: Request) -> AccessRequest:
        access = AccessRequest.from_body(await request.json())
        await check_repo_access(access, request.app.state.access_checker)
        return access

    return dependency
