"""
Version Store & Lifecycle.

Usage:
    from src.db.database import session_scope
    from src.versions import VersionStore

    with session_scope() as session:
        store = VersionStore(session)
        definition, draft = store.create_definition("Forklift pre-shift check", created_by="admin")
        published = store.publish(definition.id, increment="minor")   # -> "1.0"
"""

from .lifecycle import (
    DRAFT_PLACEHOLDER,
    FIRST_RELEASE,
    SEED_VERSION,
    VersionAction,
    VersionIncrement,
    highest_version,
    next_version_number,
    parse_version,
    transition,
)
from .models import DefinitionSummary, TrainingDefinition, TrainingDefinitionVersion
from .store import VersionStore

__all__ = [
    "VersionStore",
    "TrainingDefinition",
    "TrainingDefinitionVersion",
    "DefinitionSummary",
    "VersionAction",
    "VersionIncrement",
    "DRAFT_PLACEHOLDER",
    "FIRST_RELEASE",
    "SEED_VERSION",
    "highest_version",
    "next_version_number",
    "parse_version",
    "transition",
]
