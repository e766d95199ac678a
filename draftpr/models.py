"""Shared pydantic models — the contract between providers and the draft pipeline."""

from pydantic import BaseModel, ConfigDict


class Issue(BaseModel):
    model_config = ConfigDict(frozen=True)

    number: int
    title: str
    description: str | None = None  # markdown/HTML, passed through unescaped
    url: str | None = None


class CreatedPullRequest(BaseModel):
    """Returned by create_pull_request — just what the caller prints."""

    model_config = ConfigDict(frozen=True)

    url: str
    title: str
    number: int | None = None  # gh only prints the URL
