"""
Training definition and version tables.

TrainingDefinitionRecord is the authoring-level entity; it owns any number of
TrainingDefinitionVersionRecord rows for its whole lifetime.

steps_json holds the flow in its serialized StepBlock shape:

    [
        {"id": "step-1", "type": "information", "order": 0,
         "config": {"content": "Lockout procedure overview"}},
        {"id": "step-2", "type": "question", "order": 1,
         "config": {"question_text": "...", "question_type": "multiple_choice",
                    "options": ["...", "..."], "correct_option": 0,
                    "points": 10, "mandatory": true}}
    ]

The (training_definition_id, version_number) pair is unique. Publishing
relies on that constraint, not only on a read-before-write check, so two
concurrent publishes can never produce the same version number.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from sqlalchemy import JSON, ForeignKey, Text, UniqueConstraint, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

STEPS_JSON_TYPE = JSON().with_variant(JSONB(), "postgresql")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class VersionStatus(str, Enum):
    """Lifecycle status of a training definition version."""

    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class TrainingDefinitionRecord(Base):
    """A training flow as authored: title, description and its versions."""

    __tablename__ = "training_definitions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    created_by: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=_utcnow, onupdate=_utcnow)

    # Relationships
    versions: Mapped[list[TrainingDefinitionVersionRecord]] = relationship(
        back_populates="definition",
        cascade="all, delete-orphan",
        order_by="TrainingDefinitionVersionRecord.created_at.desc()",
    )


class TrainingDefinitionVersionRecord(Base):
    """One snapshot of a definition's steps; mutable only while a draft."""

    __tablename__ = "training_definition_versions"
    __table_args__ = (
        UniqueConstraint(
            "training_definition_id",
            "version_number",
            name="uq_training_definition_version_number",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    training_definition_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("training_definitions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    version_number: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False, default=VersionStatus.DRAFT.value)
    version_notes: Mapped[str | None] = mapped_column(Text)
    steps_json: Mapped[list[dict[str, Any]]] = mapped_column(STEPS_JSON_TYPE, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(default=_utcnow)
    published_at: Mapped[datetime | None] = mapped_column()

    # Relationships
    definition: Mapped[TrainingDefinitionRecord] = relationship(back_populates="versions")

    def __repr__(self) -> str:
        return (
            f"<TrainingDefinitionVersionRecord {self.training_definition_id} "
            f"v{self.version_number} {self.status}>"
        )
