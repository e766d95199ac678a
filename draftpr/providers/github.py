"""GitHub REST API v3 provider."""

import re
import subprocess

import httpx

from draftpr.errors import NotAuthenticated, TrackerError
from draftpr.models import CreatedPullRequest, Issue
from draftpr.providers.base import TrackerProvider
from draftpr.settings import DraftSettings

BASE_URL = "https://api.github.com"

_GITHUB_REMOTE = re.compile(r"github\.com[:/](?P<owner>[^/]+)/(?P<repo>[^/]+?)(?:\.git)?/?$")

_LATEST_PARAMS = {"state": "all", "sort": "created", "direction": "desc", "per_page": "1"}


def _repo_from_git_remote(remote: str = "origin") -> str | None:
    """Return owner/repo parsed from a github.com git remote, or None."""
    result = subprocess.run(["git", "remote", "get-url", remote], capture_output=True, text=True)
    if result.returncode != 0 or not isinstance(result.stdout, str):
        return None
    match = _GITHUB_REMOTE.search(result.stdout.strip())
    if not match:
        return None
    return f"{match['owner']}/{match['repo']}"


class GitHubApiProvider(TrackerProvider):
    def __init__(self, settings: DraftSettings) -> None:
        self._settings = settings
        self._token: str | None = None
        self._repo: str | None = settings.github_repo

    def _resolve_token(self) -> str:
        if self._settings.github_token:
            return self._settings.github_token.get_secret_value()
        try:
            result = subprocess.run(["gh", "auth", "token"], capture_output=True, text=True)
        except FileNotFoundError:
            result = None
        if result is None or result.returncode != 0 or not result.stdout.strip():
            raise NotAuthenticated(
                "No GitHub credentials. Set DRAFTPR_GITHUB_TOKEN or log in to GitHub CLI: gh auth login"
            )
        return result.stdout.strip()

    def check_auth(self) -> None:
        self._token = self._resolve_token()

    @property
    def _headers(self) -> dict[str, str]:
        if self._token is None:
            self.check_auth()
        return {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    @property
    def repo(self) -> str:
        if not self._repo:
            self._repo = _repo_from_git_remote(self._settings.remote)
        if not self._repo:
            raise TrackerError(
                "Cannot resolve the GitHub repository: no github.com remote found. "
                "Set DRAFTPR_GITHUB_REPO or github_repo in your config profile."
            )
        return self._repo

    def _request(self, method: str, path: str, params: dict | None = None, body: dict | None = None) -> dict | list:
        try:
            response = httpx.request(
                method,
                f"{BASE_URL}{path}",
                headers=self._headers,
                params=params or {},
                json=body,
                timeout=30,
            )
        except httpx.HTTPError as exc:
            raise TrackerError(f"GitHub API request failed: {exc}") from exc
        if response.status_code == 401:
            raise TrackerError("GitHub API returned 401. Check DRAFTPR_GITHUB_TOKEN or run: gh auth login")
        if response.is_error:
            detail = f"GitHub API returned {response.status_code} for {method} {path}"
            if "json" in response.headers.get("content-type", ""):
                payload = response.json()
                if isinstance(payload, dict) and payload.get("message"):
                    detail = f"{detail}: {payload['message']}"
            raise TrackerError(detail)
        return response.json()

    def _get(self, path: str, params: dict | None = None) -> dict | list:
        return self._request("GET", path, params=params)

    def _post(self, path: str, body: dict) -> dict:
        return self._request("POST", path, body=body)  # type: ignore[return-value]

    def _latest_number(self, path: str) -> int:
        nodes = self._get(path, params=_LATEST_PARAMS)
        if not nodes:
            return 0
        return int(nodes[0]["number"])  # type: ignore[index]

    def get_issue(self, number: int) -> Issue:
        node = self._get(f"/repos/{self.repo}/issues/{number}")
        return Issue(
            number=node["number"],  # type: ignore[index]
            title=node["title"],  # type: ignore[index]
            description=node.get("body"),  # type: ignore[union-attr]
            url=node.get("html_url"),  # type: ignore[union-attr]
        )

    def latest_issue_number(self) -> int:
        # /issues also lists pull requests; harmless since the max is taken anyway
        return self._latest_number(f"/repos/{self.repo}/issues")

    def latest_pull_number(self) -> int:
        return self._latest_number(f"/repos/{self.repo}/pulls")

    def _resolve_assignee(self, assignee: str) -> str:
        if assignee != "@me":
            return assignee
        return self._get("/user")["login"]  # type: ignore[index]

    def create_pull_request(
        self,
        title: str,
        body: str,
        head: str,
        base: str | None,
        assignee: str,
    ) -> CreatedPullRequest:
        if not base:
            base = self._get(f"/repos/{self.repo}")["default_branch"]  # type: ignore[index]
        node = self._post(
            f"/repos/{self.repo}/pulls",
            {"title": title, "body": body, "head": head, "base": base, "draft": True},
        )
        if assignee:
            self._post(
                f"/repos/{self.repo}/issues/{node['number']}/assignees",
                {"assignees": [self._resolve_assignee(assignee)]},
            )
        return CreatedPullRequest(url=node["html_url"], title=node["title"], number=node["number"])
