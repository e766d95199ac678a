"""Draft pull request pipeline steps between preflight and the CLI."""

import asyncio
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from draftpr import git
from draftpr.errors import IssueFetchFailed, PullRequestCreationFailed, TrackerError
from draftpr.models import CreatedPullRequest, Issue
from draftpr.plugins import collect_plugin_values
from draftpr.providers.base import TrackerProvider
from draftpr.sequence import predict_sequence_number


def fetch_issue(provider: TrackerProvider, identifier: str) -> Issue:
    try:
        return provider.get_issue(int(identifier))
    except TrackerError as exc:
        raise IssueFetchFailed(f"Could not pull issue #{identifier}: {exc}") from exc


async def gather_extras(
    provider: TrackerProvider,
    plugin_dir: Path,
    flags: Mapping[str, str],
) -> tuple[int, dict[str, Any]]:
    """Predict the deploy-preview number and run plugins concurrently."""
    sequence, plugin_values = await asyncio.gather(
        predict_sequence_number(provider),
        collect_plugin_values(plugin_dir, flags),
    )
    return sequence, plugin_values


def pull_request_title(identifier: str, issue: Issue) -> str:
    """Title the PR with the identifier as written in the branch, leading zeros included."""
    return f"{identifier}: {issue.title}"


def publish(
    provider: TrackerProvider,
    branch: str,
    remote: str,
    title: str,
    body: str,
    assignee: str,
    base: str | None = None,
) -> CreatedPullRequest:
    """Push the branch, then open the draft PR. A failed create leaves the push in place."""
    git.push_branch(branch, remote)
    try:
        return provider.create_pull_request(title=title, body=body, head=branch, base=base, assignee=assignee)
    except TrackerError as exc:
        raise PullRequestCreationFailed(f"Could not create draft PR: {exc}") from exc
