"""Abstract base class for issue tracker providers."""

from abc import ABC, abstractmethod

from draftpr.models import CreatedPullRequest, Issue


class TrackerProvider(ABC):
    @abstractmethod
    def check_auth(self) -> None:
        """Raise ToolMissing or NotAuthenticated when the tracker cannot be used."""

    @abstractmethod
    def get_issue(self, number: int) -> Issue: ...

    @abstractmethod
    def latest_issue_number(self) -> int: ...

    @abstractmethod
    def latest_pull_number(self) -> int: ...

    @abstractmethod
    def create_pull_request(
        self,
        title: str,
        body: str,
        head: str,
        base: str | None,
        assignee: str,
    ) -> CreatedPullRequest: ...
