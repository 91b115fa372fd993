"""Bundlewatch service — GitHub commit statuses and repository access checks.

Usage:
    from bundlewatch import StatusReporter

    async with StatusReporter(
        repo_owner="octo", repo_name="app", commit_sha=sha, github_access_token=token,
    ) as reporter:
        await reporter.start("Checking bundle sizes...")
        await reporter.pass_("All bundles within limits", url=details_url)
"""

__version__ = "0.3.0"

from bundlewatch.ci.github import GitHubClient, GitHubConfig, resolve_github_config  # noqa: E402
from bundlewatch.ci.reporter import StatusReporter, context_for_file_path  # noqa: E402

__all__ = [
    "GitHubClient",
    "GitHubConfig",
    "StatusReporter",
    "context_for_file_path",
    "resolve_github_config",
]
