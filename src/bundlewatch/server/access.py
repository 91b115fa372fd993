"""Default access check: can a token read a commit of a repository?"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import httpx

from bundlewatch.ci.github import DEFAULT_API_URL, DEFAULT_TIMEOUT, GitHubClient, GitHubConfig

logger = logging.getLogger(__name__)

# False (denied), a mapping/object carrying "error", or any other truthy value.
AccessResult = Any
AccessChecker = Callable[
    [str | None, str | None, str | None, str | None], Awaitable[AccessResult]
]

_DENIED_STATUSES = frozenset({401, 403, 404})


def access_error(result: AccessResult) -> str | None:
    """Return the error message carried by an access result, if any."""
    if isinstance(result, Mapping):
        error = result.get("error")
    else:
        error = getattr(result, "error", None)
    return str(error) if error else None


async def can_token_access_repo(
    repo_owner: str | None,
    repo_name: str | None,
    commit_sha: str | None,
    github_access_token: str | None,
    *,
    github_uri: str = DEFAULT_API_URL,
    timeout: float = DEFAULT_TIMEOUT,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AccessResult:
    """Look the commit up with the caller's token.

    Transport errors propagate to the caller.
    """
    if not (repo_owner and repo_name and commit_sha and github_access_token):
        return False

    client = GitHubClient(
        GitHubConfig(
            token=github_access_token,
            repo_owner=repo_owner,
            repo_name=repo_name,
            api_url=github_uri,
            timeout=timeout,
        ),
        transport=transport,
    )
    try:
        await client.get_commit(commit_sha)
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code
        if status in _DENIED_STATUSES:
            logger.info(
                "Token cannot access %s/%s@%s (HTTP_%s)",
                repo_owner, repo_name, commit_sha[:7], status,
            )
            return False
        return {"error": f"GitHub HTTP_{status}"}
    return True
