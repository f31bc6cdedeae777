"""
Unit tests for version numbering and the status state machine.
"""
import pytest

from src.core.errors import InvalidStatusTransition, InvalidVersionNumber, LifecycleError
from src.db.models.training import VersionStatus
from src.versions.lifecycle import (
    VersionAction,
    VersionIncrement,
    highest_version,
    next_version_number,
    parse_version,
    transition,
)


class TestNextVersionNumber:
    @pytest.mark.parametrize("increment", ["minor", "major"])
    def test_first_publish_is_always_1_0(self, increment):
        assert next_version_number(None, increment) == "1.0"
        assert next_version_number("0.1", increment) == "1.0"

    def test_minor_increment(self):
        assert next_version_number("1.0", VersionIncrement.MINOR) == "1.1"
        assert next_version_number("2.9", "minor") == "2.10"

    def test_major_increment(self):
        assert next_version_number("1.0", VersionIncrement.MAJOR) == "2.0"
        assert next_version_number("3.7", "major") == "4.0"

    def test_custom_version_used_verbatim(self):
        assert next_version_number("1.0", "minor", custom_version=" 2024.1-rc ") == "2024.1-rc"

    def test_blank_custom_version_rejected(self):
        with pytest.raises(InvalidVersionNumber):
            next_version_number("1.0", "minor", custom_version="   ")

    def test_unknown_increment_rejected(self):
        with pytest.raises(InvalidVersionNumber):
            next_version_number("1.0", "patch")

    def test_non_numeric_current_rejected(self):
        with pytest.raises(InvalidVersionNumber):
            next_version_number("beta", "minor")

    def test_placeholder_is_not_a_custom_version(self):
        with pytest.raises(InvalidVersionNumber, match="reserved"):
            next_version_number("1.0", "minor", custom_version=" draft ")

    def test_number_errors_are_lifecycle_errors(self):
        with pytest.raises(LifecycleError):
            next_version_number(None, "minor", custom_version="")


class TestVersionParsing:
    def test_parse_version(self):
        assert parse_version("1.10") == (1, 10)
        assert parse_version("draft") is None
        assert parse_version("1.0.3") is None

    def test_highest_version_compares_numerically(self):
        assert highest_version(["1.9", "1.10", "0.1"]) == "1.10"

    def test_highest_version_ignores_placeholders(self):
        assert highest_version(["draft", "2.0", "custom"]) == "2.0"
        assert highest_version(["draft"]) is None
        assert highest_version([]) is None


class TestTransitions:
    def test_allowed_transitions(self):
        assert transition("draft", "publish") == VersionStatus.PUBLISHED
        assert transition(VersionStatus.PUBLISHED, VersionAction.ARCHIVE) == VersionStatus.ARCHIVED
        assert transition("archived", "unarchive") == VersionStatus.PUBLISHED

    @pytest.mark.parametrize(
        "status,action",
        [
            ("draft", "archive"),
            ("draft", "unarchive"),
            ("published", "publish"),
            ("published", "unarchive"),
            ("archived", "archive"),
            ("archived", "publish"),
        ],
    )
    def test_rejected_transitions(self, status, action):
        with pytest.raises(InvalidStatusTransition) as exc:
            transition(status, action)
        assert exc.value.current == status
        assert exc.value.action == action
