# SQLAlchemy models
from .base import Base
from .training import (
    TrainingDefinitionRecord,
    TrainingDefinitionVersionRecord,
    VersionStatus,
)

__all__ = [
    "Base",
    # Training definitions
    "TrainingDefinitionRecord",
    "TrainingDefinitionVersionRecord",
    "VersionStatus",
]
