"""CLI entry point for bundlewatch-service."""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable
from typing import Any

import click
from rich.logging import RichHandler

from bundlewatch.ci.github import resolve_github_config
from bundlewatch.ci.reporter import StatusReporter


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )


def _repo_options(f: Callable[..., Any]) -> Callable[..., Any]:
    """Repository coordinates, defaulting from the GitHub Actions environment."""
    f = click.option("--token", envvar="GITHUB_TOKEN", default=None, help="GitHub access token")(f)
    f = click.option("--repo", default=None, help="Repository as owner/name")(f)
    f = click.option("--github-uri", default=None, help="GitHub API base URI")(f)
    return f


def _commit_option(f: Callable[..., Any]) -> Callable[..., Any]:
    return click.option("--sha", envvar="GITHUB_SHA", default=None, help="Commit SHA")(f)


def _build_reporter(
    repo: str | None, sha: str | None, token: str | None, github_uri: str | None,
) -> StatusReporter:
    from bundlewatch.core.config import resolve_service_config

    config = resolve_service_config()
    env = resolve_github_config()
    if repo is None and env is not None:
        repo = env.repository
    owner, _, name = (repo or "").partition("/")
    # Explicit option > GITHUB_API_URL > service config
    github_uri = github_uri or os.environ.get("GITHUB_API_URL") or config.github_uri
    return StatusReporter(
        repo_owner=owner or None,
        repo_name=name or None,
        commit_sha=sha,
        github_access_token=token,
        github_uri=github_uri,
        timeout=config.request_timeout,
        max_contexts=config.max_contexts,
    )


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def cli(verbose: bool) -> None:
    """Bundlewatch service -- GitHub commit statuses and access checks.

    \b
    Usage:
      bundlewatch-service status pending --message "Checking..."
      bundlewatch-service status failure --message "Too big" --file-path dist/app.js
      bundlewatch-service serve --port 8080
    """
    _configure_logging(verbose)


@cli.command("status")
@click.argument("state", type=click.Choice(["pending", "success", "failure", "error"]))
@click.option("--message", "-m", required=True, help="Status description")
@click.option("--url", default=None, help="Details URL (success/failure)")
@click.option("--file-path", default=None, help="File the failure refers to")
@_commit_option
@_repo_options
def status_cmd(
    state: str,
    message: str,
    url: str | None,
    file_path: str | None,
    github_uri: str | None,
    repo: str | None,
    sha: str | None,
    token: str | None,
) -> None:
    """Post a commit status."""
    reporter = _build_reporter(repo, sha, token, github_uri)
    if not reporter.enabled:
        click.echo("GitHub reporting disabled: token, repository and commit are required", err=True)
        raise SystemExit(1)

    async def _run():
        async with reporter:
            if state == "pending":
                return await reporter.start(message)
            if state == "success":
                return await reporter.pass_(message, url)
            if state == "failure":
                return await reporter.fail(message, url, file_path)
            return await reporter.error(message)

    if asyncio.run(_run()) is None:
        click.echo("Status was not reported", err=True)
        raise SystemExit(1)
    click.echo(f"Reported {state} for {reporter.repo}@{sha[:7]}")


@cli.command("comment")
@click.argument("body")
@_repo_options
def comment_cmd(
    body: str,
    github_uri: str | None,
    repo: str | None,
    token: str | None,
) -> None:
    """Post an issue comment."""
    reporter = _build_reporter(repo, None, token, github_uri)
    if not (reporter.github_access_token and reporter.repo_owner and reporter.repo_name):
        click.echo("Commenting disabled: token and repository (owner/name) are required", err=True)
        raise SystemExit(1)
    if asyncio.run(reporter.create_issue_comment(body)) is None:
        click.echo("Comment was not posted", err=True)
        raise SystemExit(1)
    click.echo(f"Commented on {reporter.repo}")


@cli.command("serve")
@click.option("--host", default=None, help="Bind address")
@click.option("--port", type=int, default=None, help="Bind port")
def serve_cmd(host: str | None, port: int | None) -> None:
    """Run the HTTP service."""
    import uvicorn

    from bundlewatch.core.config import resolve_service_config
    from bundlewatch.server.app import create_app

    config = resolve_service_config()
    uvicorn.run(
        create_app(config),
        host=host or config.host,
        port=port or config.port,
        log_config=None,
    )


@cli.command("config")
def config_cmd() -> None:
    """Show the resolved service configuration."""
    from dataclasses import asdict

    from bundlewatch.core.config import resolve_service_config

    for k, v in asdict(resolve_service_config()).items():
        click.echo(f"  {k}: {v}")

    env = resolve_github_config()
    click.echo("\nGitHub environment:")
    if env:
        click.echo(f"  repository: {env.repository}")
        click.echo(f"  api_url: {env.api_url}")
        click.echo(f"  token: {env.token[:8]}...")
    else:
        click.echo("  (GITHUB_TOKEN / GITHUB_REPOSITORY not set)")


def main() -> None:
    """Entry point."""
    cli()


if __name__ == "__main__":
    main()
