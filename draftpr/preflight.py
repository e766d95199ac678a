"""Checks that run before anything touches the tracker's data."""

from draftpr import git
from draftpr.providers.base import TrackerProvider


def run_preflight(provider: TrackerProvider) -> None:
    """Tool installed, logged in, working tree clean. Raises the first failing check."""
    provider.check_auth()
    git.ensure_clean_tree()
