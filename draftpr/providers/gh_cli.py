"""GitHub provider backed by the gh CLI."""

import json
import shutil
import subprocess

from draftpr.errors import NotAuthenticated, ToolMissing, TrackerError
from draftpr.models import CreatedPullRequest, Issue
from draftpr.providers.base import TrackerProvider
from draftpr.settings import DraftSettings

_LATEST_QUERY = ["--search", "sort:created-desc", "--state", "all", "--limit", "1"]


def parse_leading_number(output: str) -> int:
    """Parse the number column off the first line of `gh issue list` / `gh pr list`.

    Empty output means the repository has no issues (or pulls) yet.
    """
    tokens = output.split()
    if not tokens:
        return 0
    try:
        return int(tokens[0].lstrip("#"))
    except ValueError as exc:
        raise TrackerError(f"Unexpected gh list output: {output.strip()[:80]!r}") from exc


class GhCliProvider(TrackerProvider):
    def __init__(self, settings: DraftSettings) -> None:
        self._host = settings.github_host
        self._repo = settings.github_repo

    def _gh(self, *args: str) -> str:
        cmd = ["gh", *args]
        if self._repo:
            cmd += ["--repo", self._repo]
        result = subprocess.run(cmd, capture_output=True, text=True)
        if result.returncode != 0:
            raise TrackerError(result.stderr.strip() or f"gh {' '.join(args[:2])} failed")
        return result.stdout

    def check_auth(self) -> None:
        if shutil.which("gh") is None:
            raise ToolMissing("Please install GitHub CLI: https://cli.github.com")
        result = subprocess.run(["gh", "auth", "status", "-h", self._host], capture_output=True, text=True)
        if result.returncode != 0:
            raise NotAuthenticated("Please log in to GitHub CLI: gh auth login")

    def get_issue(self, number: int) -> Issue:
        stdout = self._gh("issue", "view", str(number), "--json", "title,body,url")
        try:
            data = json.loads(stdout)
        except json.JSONDecodeError as exc:
            raise TrackerError(f"gh issue view returned invalid JSON: {exc}") from exc
        return Issue(
            number=number,
            title=data["title"],
            description=data.get("body"),
            url=data.get("url"),
        )

    def latest_issue_number(self) -> int:
        return parse_leading_number(self._gh("issue", "list", *_LATEST_QUERY))

    def latest_pull_number(self) -> int:
        return parse_leading_number(self._gh("pr", "list", *_LATEST_QUERY))

    def create_pull_request(
        self,
        title: str,
        body: str,
        head: str,
        base: str | None,
        assignee: str,
    ) -> CreatedPullRequest:
        # gh infers the head from the current branch; --repo would force an explicit --head
        args = ["pr", "create", "--draft", "--assignee", assignee, "--title", title, "--body", body]
        if base:
            args += ["--base", base]
        if self._repo:
            args += ["--head", head]
        stdout = self._gh(*args)
        url = stdout.strip().splitlines()[-1] if stdout.strip() else ""
        number = url.rstrip("/").rsplit("/", 1)[-1]
        return CreatedPullRequest(
            url=url,
            title=title,
            number=int(number) if number.isdigit() else None,
        )
