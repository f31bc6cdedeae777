"""
Version numbering and status transitions.

State machine:

    draft --publish--> published --archive--> archived --unarchive--> published

There is no archive transition from draft. Version numbers are "major.minor";
a definition starts with the pre-release seed "0.1" and drafts cloned from an
existing version carry the "draft" placeholder until they are published.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from enum import Enum

from src.core.errors import InvalidStatusTransition, InvalidVersionNumber
from src.db.models.training import VersionStatus

SEED_VERSION = "0.1"
FIRST_RELEASE = "1.0"
DRAFT_PLACEHOLDER = "draft"

_VERSION_PATTERN = re.compile(r"^(\d+)\.(\d+)$")


class VersionIncrement(str, Enum):
    """Which component of the version number a publish bumps."""

    MINOR = "minor"
    MAJOR = "major"


class VersionAction(str, Enum):
    PUBLISH = "publish"
    ARCHIVE = "archive"
    UNARCHIVE = "unarchive"


TRANSITIONS: dict[VersionAction, dict[VersionStatus, VersionStatus]] = {
    VersionAction.PUBLISH: {VersionStatus.DRAFT: VersionStatus.PUBLISHED},
    VersionAction.ARCHIVE: {VersionStatus.PUBLISHED: VersionStatus.ARCHIVED},
    VersionAction.UNARCHIVE: {VersionStatus.ARCHIVED: VersionStatus.PUBLISHED},
}


def parse_version(version_number: str) -> tuple[int, int] | None:
    """Parse "major.minor"; None for placeholders and free-form custom numbers."""
    match = _VERSION_PATTERN.match(version_number.strip())
    if match is None:
        return None
    return int(match.group(1)), int(match.group(2))


def highest_version(version_numbers: Iterable[str]) -> str | None:
    """Highest numeric "major.minor" among the given numbers, if any."""
    parsed = [(parse_version(number), number) for number in version_numbers]
    numeric = [(key, number) for key, number in parsed if key is not None]
    if not numeric:
        return None
    return max(numeric, key=lambda item: item[0])[1]


def next_version_number(
    current: str | None,
    increment: VersionIncrement | str = VersionIncrement.MINOR,
    custom_version: str | None = None,
) -> str:
    """
    Compute the number a draft receives when it is published.

    Args:
        current: Highest existing version number of the definition
            (None when the draft is the only version)
        increment: "minor" or "major"
        custom_version: Caller-supplied number used verbatim

    Returns:
        The final version number

    Raises:
        InvalidVersionNumber: Blank or reserved custom number, unknown
            increment, or a non-numeric current version
    """
    if custom_version is not None:
        custom = custom_version.strip()
        if not custom:
            raise InvalidVersionNumber("Custom version number cannot be blank")
        if custom == DRAFT_PLACEHOLDER:
            raise InvalidVersionNumber(f"'{DRAFT_PLACEHOLDER}' is reserved for unpublished drafts")
        return custom

    try:
        kind = VersionIncrement(increment)
    except ValueError as e:
        raise InvalidVersionNumber(f"Unknown increment '{increment}' (use minor or major)") from e

    # The seed is a pre-release baseline, not a real major.minor pair
    if current is None or current == SEED_VERSION:
        return FIRST_RELEASE

    parsed = parse_version(current)
    if parsed is None:
        raise InvalidVersionNumber(f"Cannot increment non-numeric version '{current}'")

    major, minor = parsed
    if kind == VersionIncrement.MAJOR:
        return f"{major + 1}.0"
    return f"{major}.{minor + 1}"


def transition(status: VersionStatus | str, action: VersionAction | str) -> VersionStatus:
    """Return the status reached by applying ``action``, or raise."""
    current = VersionStatus(status)
    verb = VersionAction(action)
    target = TRANSITIONS[verb].get(current)
    if target is None:
        raise InvalidStatusTransition(current.value, verb.value)
    return target
