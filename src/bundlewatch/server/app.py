"""FastAPI application: health check and protected status reporting."""

from __future__ import annotations

import functools
import logging
from typing import Any

from fastapi import Depends, FastAPI, Request

from bundlewatch import __version__
from bundlewatch.ci.reporter import StatusReporter, context_for_file_path
from bundlewatch.core.config import ServiceConfig, resolve_service_config
from bundlewatch.server.access import AccessChecker, can_token_access_repo
from bundlewatch.server.errors import ServiceError, install_error_handlers
from bundlewatch.server.guard import AccessRequest, require_repo_access

logger = logging.getLogger(__name__)


async def _report(reporter: StatusReporter, body: dict[str, Any]) -> dict[str, Any] | None:
    message = body.get("message") or ""
    url = body.get("url")
    match body.get("state"):
        case "pending":
            return await reporter.start(message)
        case "success":
            return await reporter.pass_(message, url)
        case "failure":
            return await reporter.fail(message, url, body.get("filePath"))
        case "error":
            return await reporter.error(message)
        case state:
            raise ServiceError(400, f"Unknown state: {state}")


def create_app(
    config: ServiceConfig | None = None,
    access_checker: AccessChecker | None = None,
) -> FastAPI:
    """Build the service application.

    ``access_checker`` defaults to a GitHub commit lookup against
    ``config.github_uri``.
    """
    config = config or resolve_service_config()
    app = FastAPI(title="bundlewatch-service", version=__version__)
    app.state.config = config
    app.state.access_checker = access_checker or functools.partial(
        can_token_access_repo,
        github_uri=config.github_uri,
        timeout=config.request_timeout,
    )
    install_error_handlers(app)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/status")
    async def report_status(
        request: Request,
        access: AccessRequest = Depends(require_repo_access()),
    ) -> dict[str, Any]:
        body = await request.json()
        reporter = StatusReporter(
            repo_owner=access.repo_owner,
            repo_name=access.repo_name,
            commit_sha=access.commit_sha,
            github_access_token=access.github_access_token,
            github_uri=config.github_uri,
            timeout=config.request_timeout,
            max_contexts=config.max_contexts,
        )
        async with reporter:
            result = await _report(reporter, body)
        logger.debug("Reported %s for %s@%s", body.get("state"), reporter.repo, access.commit_sha)

        file_path = body.get("filePath") if body.get("state") == "failure" else None
        return {
            "context": context_for_file_path(file_path),
            "reported": result is not None,
        }

    return app
