"""Deploy-preview number prediction.

Netlify numbers deploy previews after the pull request, and GitHub shares one counter
between issues and pull requests, so the next PR gets max(latest issue, latest PR) + 1.
This is a guess: anyone opening an issue or PR before we do takes the number.
"""

import asyncio

from draftpr.errors import SequencePredictionFailed, TrackerError
from draftpr.providers.base import TrackerProvider


def next_sequence_number(latest_issue: int, latest_pull: int) -> int:
    return max(latest_issue, latest_pull) + 1


async def predict_sequence_number(provider: TrackerProvider) -> int:
    try:
        latest_issue, latest_pull = await asyncio.gather(
            asyncio.to_thread(provider.latest_issue_number),
            asyncio.to_thread(provider.latest_pull_number),
        )
    except TrackerError as exc:
        raise SequencePredictionFailed(f"Error fetching most recent issues and pulls: {exc}") from exc
    return next_sequence_number(latest_issue, latest_pull)
