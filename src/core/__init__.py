"""
Core Module - Shared error taxonomy.

All domain modules (flows, versions, validation, generation) raise errors
from src.core.errors so callers can catch TrainingFlowError at one seam.
"""

from src.core.errors import (
    DuplicateVersion,
    GenerationError,
    InvalidBlockType,
    InvalidStatusTransition,
    InvalidVersionNumber,
    InvalidStepConfig,
    LifecycleError,
    NoDraftFound,
    NotFound,
    TrainingFlowError,
    ValidationFailed,
)

__all__ = [
    "TrainingFlowError",
    # Flow model
    "InvalidBlockType",
    "InvalidStepConfig",
    # Version lifecycle
    "LifecycleError",
    "NotFound",
    "NoDraftFound",
    "DuplicateVersion",
    "InvalidStatusTransition",
    "InvalidVersionNumber",
    # Validation / generation
    "ValidationFailed",
    "GenerationError",
]
