"""Tests for GitHubApiProvider using pytest-httpx."""

from unittest.mock import MagicMock, patch

import httpx
import pytest
from pytest_httpx import HTTPXMock

from draftpr.errors import NotAuthenticated, TrackerError
from draftpr.providers.github import BASE_URL, GitHubApiProvider, _repo_from_git_remote
from draftpr.settings import DraftSettings

REPO_URL = f"{BASE_URL}/repos/acme/site"
LATEST_QUERY = "?state=all&sort=created&direction=desc&per_page=1"


def _settings(**kwargs) -> DraftSettings:
    defaults = {"backend": "api", "github_token": "ghp_test", "github_repo": "acme/site"}
    defaults.update(kwargs)
    return DraftSettings(**defaults)  # type: ignore[call-arg]


_ISSUE_NODE = {
    "id": 987654321,
    "number": 123,
    "title": "Fix bug",
    "body": "desc",
    "html_url": "https://github.com/acme/site/issues/123",
    "state": "open",
}


class TestResolveToken:
    def test_configured_token(self) -> None:
        provider = GitHubApiProvider(_settings(github_token="ghp_mytoken"))
        provider.check_auth()
        assert provider._token == "ghp_mytoken"

    def test_gh_cli_token(self) -> None:
        result = MagicMock(returncode=0, stdout="gho_from_cli\n")
        with patch("subprocess.run", return_value=result):
            provider = GitHubApiProvider(_settings(github_token=None))
            provider.check_auth()
        assert provider._token == "gho_from_cli"

    def test_gh_not_logged_in(self) -> None:
        result = MagicMock(returncode=1, stdout="")
        with patch("subprocess.run", return_value=result):
            with pytest.raises(NotAuthenticated, match="No GitHub credentials"):
                GitHubApiProvider(_settings(github_token=None)).check_auth()

    def test_gh_not_installed(self) -> None:
        with patch("subprocess.run", side_effect=FileNotFoundError("gh")):
            with pytest.raises(NotAuthenticated):
                GitHubApiProvider(_settings(github_token=None)).check_auth()


class TestRepoFromGitRemote:
    def test_https_github_url(self) -> None:
        m = MagicMock(returncode=0, stdout="https://github.com/acme/site.git\n")
        with patch("subprocess.run", return_value=m):
            assert _repo_from_git_remote() == "acme/site"

    def test_ssh_github_url(self) -> None:
        m = MagicMock(returncode=0, stdout="git@github.com:acme/site.git\n")
        with patch("subprocess.run", return_value=m):
            assert _repo_from_git_remote() == "acme/site"

    def test_non_github_remote_returns_none(self) -> None:
        m = MagicMock(returncode=0, stdout="https://gitlab.com/acme/site.git\n")
        with patch("subprocess.run", return_value=m):
            assert _repo_from_git_remote() is None

    def test_no_remote_returns_none(self) -> None:
        m = MagicMock(returncode=128, stdout="")
        with patch("subprocess.run", return_value=m):
            assert _repo_from_git_remote() is None

    def test_repo_inferred_from_configured_remote(self) -> None:
        m = MagicMock(returncode=0, stdout="git@github.com:acme/docs.git\n")
        with patch("subprocess.run", return_value=m) as mock_run:
            assert GitHubApiProvider(_settings(github_repo=None, remote="upstream")).repo == "acme/docs"
        assert mock_run.call_args.args[0] == ["git", "remote", "get-url", "upstream"]

    def test_no_repo_raises(self) -> None:
        m = MagicMock(returncode=128, stdout="")
        with patch("subprocess.run", return_value=m):
            with pytest.raises(TrackerError, match="Cannot resolve the GitHub repository"):
                GitHubApiProvider(_settings(github_repo=None)).repo


class TestGetIssue:
    def test_returns_issue(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=f"{REPO_URL}/issues/123", json=_ISSUE_NODE)
        issue = GitHubApiProvider(_settings()).get_issue(123)
        assert issue.number == 123
        assert issue.title == "Fix bug"
        assert issue.description == "desc"
        assert issue.url == "https://github.com/acme/site/issues/123"

    def test_sends_token(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=f"{REPO_URL}/issues/123", json=_ISSUE_NODE)
        GitHubApiProvider(_settings()).get_issue(123)
        request = httpx_mock.get_request()
        assert request is not None
        assert request.headers["Authorization"] == "Bearer ghp_test"

    def test_null_body(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=f"{REPO_URL}/issues/123", json={**_ISSUE_NODE, "body": None})
        assert GitHubApiProvider(_settings()).get_issue(123).description is None

    def test_404_raises(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=f"{REPO_URL}/issues/9", status_code=404, json={"message": "Not Found"})
        with pytest.raises(TrackerError, match="404.*Not Found"):
            GitHubApiProvider(_settings()).get_issue(9)

    def test_401_raises_with_message(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=f"{REPO_URL}/issues/123", status_code=401, json={"message": "Bad credentials"})
        with pytest.raises(TrackerError, match="401"):
            GitHubApiProvider(_settings()).get_issue(123)

    def test_transport_error(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_exception(httpx.ConnectError("connection refused"))
        with pytest.raises(TrackerError, match="request failed"):
            GitHubApiProvider(_settings()).get_issue(123)


class TestLatestNumbers:
    def test_latest_issue(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=f"{REPO_URL}/issues{LATEST_QUERY}", json=[{"number": 41}])
        assert GitHubApiProvider(_settings()).latest_issue_number() == 41

    def test_latest_pull(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=f"{REPO_URL}/pulls{LATEST_QUERY}", json=[{"number": 49}])
        assert GitHubApiProvider(_settings()).latest_pull_number() == 49

    def test_empty_repo(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=f"{REPO_URL}/pulls{LATEST_QUERY}", json=[])
        assert GitHubApiProvider(_settings()).latest_pull_number() == 0


class TestCreatePullRequest:
    def test_creates_draft_and_assigns_me(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=REPO_URL, json={"default_branch": "main"})
        httpx_mock.add_response(
            url=f"{REPO_URL}/pulls",
            method="POST",
            json={"number": 50, "title": "123: Fix bug", "html_url": "https://github.com/acme/site/pull/50"},
        )
        httpx_mock.add_response(url=f"{BASE_URL}/user", json={"login": "octocat"})
        httpx_mock.add_response(url=f"{REPO_URL}/issues/50/assignees", method="POST", json={})

        created = GitHubApiProvider(_settings()).create_pull_request(
            title="123: Fix bug", body="body", head="issue-123-fix", base=None, assignee="@me"
        )

        assert created.number == 50
        assert created.url == "https://github.com/acme/site/pull/50"
        pull_request = httpx_mock.get_request(url=f"{REPO_URL}/pulls", method="POST")
        assert pull_request is not None
        assert b'"draft":true' in pull_request.content.replace(b" ", b"")
        assert b'"base":"main"' in pull_request.content.replace(b" ", b"")
        assignees = httpx_mock.get_request(url=f"{REPO_URL}/issues/50/assignees")
        assert assignees is not None
        assert b"octocat" in assignees.content

    def test_configured_base_and_named_assignee(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(
            url=f"{REPO_URL}/pulls",
            method="POST",
            json={"number": 7, "title": "t", "html_url": "https://github.com/acme/site/pull/7"},
        )
        httpx_mock.add_response(url=f"{REPO_URL}/issues/7/assignees", method="POST", json={})

        GitHubApiProvider(_settings()).create_pull_request(
            title="t", body="b", head="7-x", base="develop", assignee="hubot"
        )

        pull_request = httpx_mock.get_request(url=f"{REPO_URL}/pulls")
        assert pull_request is not None
        assert b'"base":"develop"' in pull_request.content.replace(b" ", b"")

    def test_create_failure(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(
            url=f"{REPO_URL}/pulls",
            method="POST",
            status_code=422,
            json={"message": "Validation Failed"},
        )
        with pytest.raises(TrackerError, match="422"):
            GitHubApiProvider(_settings()).create_pull_request(
                title="t", body="b", head="h", base="main", assignee="@me"
            )
