"""
Error taxonomy for the training flow engine.

Model errors are raised synchronously at construction time. Lifecycle errors
abort a version-store operation after rolling back its transaction; none of
them are retried automatically. GenerationError never escapes the generation
pipeline: it is caught there and answered with the fallback generator.
"""
from __future__ import annotations


class TrainingFlowError(Exception):
    """Base class for all engine errors."""


# ========================================
# Flow model
# ========================================


class InvalidBlockType(TrainingFlowError):
    """Raised when a step block type is not information, goto or question."""

    def __init__(self, block_type: object):
        self.block_type = block_type
        super().__init__(f"Invalid block type: {block_type!r}")


class InvalidStepConfig(TrainingFlowError):
    """Raised when a block config has the wrong shape for its type."""


# ========================================
# Version lifecycle
# ========================================


class LifecycleError(TrainingFlowError):
    """Base class for version store failures."""


class NotFound(LifecycleError):
    """Raised when a definition or version does not exist."""


class NoDraftFound(LifecycleError):
    """Raised when publishing a definition that has no draft version."""

    def __init__(self, definition_id: object):
        self.definition_id = definition_id
        super().__init__(
            f"No draft version found to publish for definition {definition_id}. "
            "Save your changes first."
        )


class DuplicateVersion(LifecycleError):
    """Raised when a version number already exists for a definition."""

    def __init__(self, definition_id: object, version_number: str):
        self.definition_id = definition_id
        self.version_number = version_number
        super().__init__(
            f"Version {version_number} already exists for definition {definition_id}"
        )


class InvalidVersionNumber(LifecycleError):
    """Raised when a version number cannot be used or derived (blank, reserved, non-numeric)."""


class InvalidStatusTransition(LifecycleError):
    """Raised when a status change is not allowed by the version state machine."""

    def __init__(self, current: str, action: str):
        self.current = current
        self.action = action
        super().__init__(f"Cannot {action} a version with status '{current}'")


# ========================================
# Validation
# ========================================


class ValidationFailed(TrainingFlowError):
    """
    A flow validation result that contains errors.

    Never raised by the validator itself; callers that gate publishing on
    quality opt in through ValidationResult.raise_for_errors().
    """

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__(f"Flow has {len(self.errors)} validation error(s): " + "; ".join(self.errors))


# ========================================
# Generation
# ========================================


class GenerationError(TrainingFlowError):
    """Network, timeout or response-contract failure of a text-generation call."""
