"""Issue number extraction from branch names."""

import re

from draftpr.errors import NoIdentifierFound

_DIGITS = re.compile(r"[0-9]+")


def extract_identifier(branch: str) -> str:
    """Return the first run of digits in the branch name.

    feature/42-login    → 42
    feature/42-retry-v2 → 42 (later runs are ignored)
    """
    match = _DIGITS.search(branch)
    if not match:
        raise NoIdentifierFound(
            "It doesn't look like you follow a branch naming convention. Try using a number in your branch name."
        )
    return match.group(0)
