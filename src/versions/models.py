"""Detached domain views of training definitions and their versions."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime

from src.db.models.training import (
    TrainingDefinitionRecord,
    TrainingDefinitionVersionRecord,
    VersionStatus,
)
from src.flows.editing import parse_steps
from src.flows.models import StepBlock


@dataclass
class TrainingDefinition:
    id: uuid.UUID
    title: str
    description: str | None
    created_by: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: TrainingDefinitionRecord) -> TrainingDefinition:
        return cls(
            id=record.id,
            title=record.title,
            description=record.description,
            created_by=record.created_by,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


@dataclass
class TrainingDefinitionVersion:
    id: uuid.UUID
    training_definition_id: uuid.UUID
    version_number: str
    status: VersionStatus
    steps: list[StepBlock] = field(default_factory=list)
    version_notes: str | None = None
    created_at: datetime | None = None
    published_at: datetime | None = None

    @classmethod
    def from_record(cls, record: TrainingDefinitionVersionRecord) -> TrainingDefinitionVersion:
        return cls(
            id=record.id,
            training_definition_id=record.training_definition_id,
            version_number=record.version_number,
            status=VersionStatus(record.status),
            steps=parse_steps(record.steps_json),
            version_notes=record.version_notes,
            created_at=record.created_at,
            published_at=record.published_at,
        )


@dataclass
class DefinitionSummary:
    """A definition together with its most recently created version."""

    definition: TrainingDefinition
    latest_version: TrainingDefinitionVersion | None
