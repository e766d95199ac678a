"""Thin wrappers around the git CLI. Each failure raises the matching DraftError."""

import subprocess

from draftpr.errors import DirtyWorkingTree, NoRemoteOrBranch, PushFailed


def _git(*args: str) -> subprocess.CompletedProcess:
    return subprocess.run(["git", *args], capture_output=True, text=True)


def count_pending_changes() -> int:
    """Return the number of non-empty lines in `git status --porcelain`."""
    result = _git("status", "--porcelain")
    if result.returncode != 0:
        raise NoRemoteOrBranch(f"Uncommitted changes check failed. Are you inside a git project? {result.stderr.strip()}")
    return len([line for line in result.stdout.splitlines() if line.strip()])


def ensure_clean_tree() -> None:
    pending = count_pending_changes()
    if pending > 0:
        raise DirtyWorkingTree(f"You have {pending} uncommitted changes. Please commit your changes first.")


def current_branch() -> str:
    result = _git("rev-parse", "--abbrev-ref", "HEAD")
    branch = result.stdout.strip() if result.returncode == 0 else ""
    if not branch:
        raise NoRemoteOrBranch("Branch not found. Are you inside a git project?")
    if branch == "HEAD":
        raise NoRemoteOrBranch("HEAD is detached. Check out a branch first.")
    return branch


def remote_url(remote: str) -> str:
    result = _git("remote", "get-url", remote)
    if result.returncode != 0 or not result.stdout.strip():
        raise NoRemoteOrBranch(f"Remote '{remote}' not found. Add it with: git remote add {remote} <url>")
    return result.stdout.strip()


def push_branch(branch: str, remote: str) -> None:
    """Push branch upstream so the remote tracks the local branch."""
    result = _git("push", "-u", remote, branch)
    if result.returncode != 0:
        raise PushFailed(f"Error when pushing branch to remote: {result.stderr.strip()}")
