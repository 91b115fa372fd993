"""Tests for the HTTP application."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from bundlewatch.ci.reporter import StatusReporter
from bundlewatch.core.config import ServiceConfig
from bundlewatch.server.app import create_app

ACCESS = {
    "commitSha": "abc1234",
    "repoName": "app",
    "repoOwner": "octo",
    "githubAccessToken": "ghp_test",
}


@pytest.fixture
def checker() -> AsyncMock:
    return AsyncMock(return_value=True)


@pytest.fixture
def client(checker: AsyncMock) -> TestClient:
    config = ServiceConfig(github_uri="https://github.test", max_contexts=2)
    return TestClient(create_app(config, access_checker=checker))


class TestHealth:
    def test_health_is_unprotected(self, client: TestClient, checker: AsyncMock) -> None:
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}
        checker.assert_not_awaited()


class TestReportStatus:
    def test_pending(self, client: TestClient) -> None:
        update = AsyncMock(return_value={"id": 1})
        with patch.object(StatusReporter, "update", update):
            resp = client.post("/status", json={**ACCESS, "state": "pending", "message": "Checking"})

        assert resp.status_code == 200
        assert resp.json() == {"context": "bundlewatch", "reported": True}
        update.assert_awaited_once_with("Checking", None, "pending")

    def test_failure_with_file_path(self, client: TestClient) -> None:
        update = AsyncMock(return_value={"id": 1})
        body = {
            **ACCESS,
            "state": "failure",
            "message": "Too big",
            "url": "https://bundlewatch.test/r/1",
            "filePath": "dist/app.js",
        }
        with patch.object(StatusReporter, "update", update):
            resp = client.post("/status", json=body)

        assert resp.json() == {"context": "bundlewatch dist/app.js", "reported": True}
        update.assert_awaited_once_with(
            "Too big", "https://bundlewatch.test/r/1", "failure", "dist/app.js",
        )

    def test_dropped_status_reported_false(self, client: TestClient) -> None:
        with patch.object(StatusReporter, "update", AsyncMock(return_value=None)):
            resp = client.post("/status", json={**ACCESS, "state": "error", "message": "boom"})
        assert resp.status_code == 200
        assert resp.json()["reported"] is False

    def test_reporter_uses_service_config(self, client: TestClient) -> None:
        created: list[StatusReporter] = []
        original_init = StatusReporter.__init__

        def spy_init(self, **kwargs):
            original_init(self, **kwargs)
            created.append(self)

        with patch.object(StatusReporter, "__init__", spy_init), \
                patch.object(StatusReporter, "update", AsyncMock(return_value={})):
            client.post("/status", json={**ACCESS, "state": "success", "message": "ok"})

        reporter = created[0]
        assert reporter.github_uri == "https://github.test"
        assert reporter.contexts.limit == 2
        assert reporter.repo == "octo/app"
        assert reporter.commit_sha == "abc1234"

    def test_unknown_state(self, client: TestClient) -> None:
        resp = client.post("/status", json={**ACCESS, "state": "skipped", "message": "?"})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Unknown state: skipped"}

    def test_denied_request_never_reports(self, client: TestClient, checker: AsyncMock) -> None:
        checker.return_value = False
        update = AsyncMock()
        with patch.object(StatusReporter, "update", update):
            resp = client.post("/status", json={**ACCESS, "state": "pending", "message": "x"})

        assert resp.status_code == 401
        assert resp.json() == {"error": "Not allowed"}
        update.assert_not_awaited()
