"""StatusReporter — GitHub commit status reporting for a check run."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from bundlewatch.ci.github import DEFAULT_API_URL, DEFAULT_TIMEOUT, GitHubClient, GitHubConfig

logger = logging.getLogger(__name__)

CONTEXT_PREFIX = "bundlewatch"
TRUNCATE_TO_LENGTH = 35
MAX_REPORTED_CONTEXTS = 5
# Comments always land on this issue.
COMMENT_ISSUE_NUMBER = 26


def context_for_file_path(file_path: str | None) -> str:
    """Build the status context label for an optional file path.

    Long paths keep their tail: ``"bundlewatch *" + file_path[-37:]``.
    """
    context = CONTEXT_PREFIX
    if file_path:
        if len(file_path) > TRUNCATE_TO_LENGTH:
            context += " *" + file_path[-(TRUNCATE_TO_LENGTH + 2):]
        else:
            context += " " + file_path
    return context


@dataclass(slots=True)
class ReportedContexts:
    """Contexts reported during one check run, bounded at ``limit``."""

    limit: int = MAX_REPORTED_CONTEXTS
    seen: set[str] = field(default_factory=set)

    def __contains__(self, context: object) -> bool:
        return context in self.seen

    def __len__(self) -> int:
        return len(self.seen)

    def admit(self, context: str) -> bool:
        """Record ``context``; False if it is new and the limit is reached."""
        if context not in self.seen and len(self.seen) >= self.limit:
            return False
        self.seen.add(context)
        return True


def _response_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return ""
    if isinstance(data, dict):
        return str(data.get("message") or "")
    return ""


class StatusReporter:
    """Posts commit statuses for one check run.

    Reporting never raises: HTTP and transport failures are logged and the
    call returns ``None``.
    """

    def __init__(
        self,
        *,
        repo_owner: str | None,
        repo_name: str | None,
        commit_sha: str | None,
        github_access_token: str | None,
        github_uri: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        max_contexts: int = MAX_REPORTED_CONTEXTS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.repo_owner = repo_owner
        self.repo_name = repo_name
        self.commit_sha = commit_sha
        self.github_uri = github_uri
        self.github_access_token = github_access_token
        self.contexts = ReportedContexts(limit=max_contexts)
        self._client = GitHubClient(
            GitHubConfig(
                token=github_access_token or "",
                repo_owner=repo_owner or "",
                repo_name=repo_name or "",
                api_url=github_uri,
                timeout=timeout,
            ),
            transport=transport,
        )

    async def __aenter__(self) -> StatusReporter:
        await self._client.__aenter__()
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self._client.__aexit__(*exc)

    @property
    def repo(self) -> str:
        return f"{self.repo_owner}/{self.repo_name}"

    @property
    def enabled(self) -> bool:
        return bool(
            self.github_access_token
            and self.repo_owner
            and self.repo_name
            and self.commit_sha
        )

    async def update(
        self,
        message: str,
        url: str | None,
        status: str,
        file_path: str | None = None,
    ) -> dict[str, Any] | None:
        if not self.enabled:
            return {}

        context = context_for_file_path(file_path)
        if not self.contexts.admit(context):
            logger.warning(
                "Max reported statuses reached, github status will not be reported (%s)",
                context,
            )
            return None

        try:
            return await self._client.create_status(
                self.commit_sha,
                state=status,
                description=message,
                context=context,
                target_url=url,
            )
        except Exception as exc:
            self._log_failure(exc)
            return None

    async def create_issue_comment(self, body: str) -> dict[str, Any] | None:
        try:
            return await self._client.post_issue_comment(COMMENT_ISSUE_NUMBER, body)
        except Exception as exc:
            self._log_failure(exc)
            return None

    async def start(self, message: str) -> dict[str, Any] | None:
        return await self.update(message, None, "pending")

    async def pass_(self, message: str, url: str | None = None) -> dict[str, Any] | None:
        return await self.update(message, url, "success")

    async def fail(
        self, message: str, url: str | None = None, file_path: str | None = None,
    ) -> dict[str, Any] | None:
        return await self.update(message, url, "failure", file_path)

    async def error(self, message: str) -> dict[str, Any] | None:
        return await self.update(message, None, "error")

    def _log_failure(self, exc: Exception) -> None:
        if isinstance(exc, httpx.HTTPStatusError):
            logger.error(
                "GitHub HTTP_%s :: %s",
                exc.response.status_code,
                _response_message(exc.response),
            )
        else:
            logger.error("GitHub request for %s failed: %r", self.repo, exc)
