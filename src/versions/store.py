"""
Version Store for training definitions.

The store is the only writer of a version's status, version_number and
published_at. Each public operation runs in its own transaction: it commits
on success, and on any failure it rolls back and re-raises, so lifecycle
errors (NoDraftFound, DuplicateVersion, NotFound, InvalidStatusTransition,
InvalidVersionNumber) never leave partial writes behind. Nothing is retried
automatically.
"""
from __future__ import annotations

import copy
import uuid
from collections.abc import Generator
from contextlib import contextmanager
from datetime import datetime, timezone

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.core.errors import DuplicateVersion, InvalidStatusTransition, NoDraftFound, NotFound
from src.db.models.training import (
    TrainingDefinitionRecord,
    TrainingDefinitionVersionRecord,
    VersionStatus,
)
from src.flows.models import StepBlock, flow_to_json

from .lifecycle import (
    DRAFT_PLACEHOLDER,
    SEED_VERSION,
    VersionAction,
    VersionIncrement,
    highest_version,
    next_version_number,
    transition,
)
from .models import DefinitionSummary, TrainingDefinition, TrainingDefinitionVersion


def _as_uuid(value: uuid.UUID | str, kind: str) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError as e:
        raise NotFound(f"{kind} {value} not found") from e


class VersionStore:
    """
    Persistence and lifecycle operations for training definition versions.

    Handles:
    - Definition creation with the "0.1" seed draft
    - Draft editing
    - Publishing (version number derivation + uniqueness)
    - Archive / unarchive
    - New drafts cloned from existing versions
    """

    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def _transaction(self) -> Generator[None, None, None]:
        try:
            yield
            self.session.commit()
        except Exception:  # Intentionally broad - rollback on any error before re-raising
            self.session.rollback()
            raise

    # ========================================
    # Lookups
    # ========================================

    def _definition_record(self, definition_id: uuid.UUID | str) -> TrainingDefinitionRecord:
        record = self.session.get(TrainingDefinitionRecord, _as_uuid(definition_id, "Definition"))
        if record is None:
            raise NotFound(f"Definition {definition_id} not found")
        return record

    def _version_record(self, version_id: uuid.UUID | str) -> TrainingDefinitionVersionRecord:
        record = self.session.get(TrainingDefinitionVersionRecord, _as_uuid(version_id, "Version"))
        if record is None:
            raise NotFound(f"Version {version_id} not found")
        return record

    def _version_records(self, definition_id: uuid.UUID) -> list[TrainingDefinitionVersionRecord]:
        result = self.session.execute(
            select(TrainingDefinitionVersionRecord)
            .where(TrainingDefinitionVersionRecord.training_definition_id == definition_id)
            .order_by(TrainingDefinitionVersionRecord.created_at.desc())
        )
        return list(result.scalars().all())

    def _version_exists(self, definition_id: uuid.UUID, version_number: str) -> bool:
        result = self.session.execute(
            select(TrainingDefinitionVersionRecord.id)
            .where(TrainingDefinitionVersionRecord.training_definition_id == definition_id)
            .where(TrainingDefinitionVersionRecord.version_number == version_number)
        )
        return result.first() is not None

    def get_definition(self, definition_id: uuid.UUID | str) -> TrainingDefinition:
        """Get a definition by ID."""
        return TrainingDefinition.from_record(self._definition_record(definition_id))

    def list_definitions(self) -> list[DefinitionSummary]:
        """List all definitions, newest first, each with its latest version."""
        result = self.session.execute(
            select(TrainingDefinitionRecord).order_by(TrainingDefinitionRecord.created_at.desc())
        )
        summaries = []
        for record in result.scalars().all():
            versions = self._version_records(record.id)
            summaries.append(
                DefinitionSummary(
                    definition=TrainingDefinition.from_record(record),
                    latest_version=TrainingDefinitionVersion.from_record(versions[0]) if versions else None,
                )
            )
        return summaries

    def list_versions(self, definition_id: uuid.UUID | str) -> list[TrainingDefinitionVersion]:
        """All versions of a definition, most recently created first."""
        record = self._definition_record(definition_id)
        return [TrainingDefinitionVersion.from_record(v) for v in self._version_records(record.id)]

    def get_version(self, version_id: uuid.UUID | str) -> TrainingDefinitionVersion:
        """Get a version by ID."""
        return TrainingDefinitionVersion.from_record(self._version_record(version_id))

    def get_version_by_number(
        self,
        definition_id: uuid.UUID | str,
        version_number: str,
    ) -> TrainingDefinitionVersion | None:
        """Get a definition's version by its version number."""
        result = self.session.execute(
            select(TrainingDefinitionVersionRecord)
            .where(
                TrainingDefinitionVersionRecord.training_definition_id
                == _as_uuid(definition_id, "Definition")
            )
            .where(TrainingDefinitionVersionRecord.version_number == version_number)
        )
        record = result.scalar_one_or_none()
        return TrainingDefinitionVersion.from_record(record) if record else None

    def latest_draft(self, definition_id: uuid.UUID | str) -> TrainingDefinitionVersion | None:
        """The definition's most recently created draft, if any."""
        record = self._definition_record(definition_id)
        for version in self._version_records(record.id):
            if version.status == VersionStatus.DRAFT.value:
                return TrainingDefinitionVersion.from_record(version)
        return None

    # ========================================
    # Authoring
    # ========================================

    def _apply_metadata(
        self,
        definition_id: uuid.UUID,
        title: str | None,
        description: str | None,
    ) -> None:
        if title is None and description is None:
            return
        definition = self._definition_record(definition_id)
        if title is not None:
            definition.title = title.strip()
        if description is not None:
            definition.description = description.strip() or None
        definition.updated_at = datetime.now(timezone.utc)

    def create_definition(
        self,
        title: str,
        created_by: str,
        description: str | None = None,
        steps: list[StepBlock] | None = None,
    ) -> tuple[TrainingDefinition, TrainingDefinitionVersion]:
        """
        Create a definition and its first version.

        The first version is always "0.1" with status draft.

        Returns:
            Tuple of (definition, seed draft version)
        """
        with self._transaction():
            definition = TrainingDefinitionRecord(
                title=title.strip(),
                description=(description or "").strip() or None,
                created_by=created_by,
            )
            self.session.add(definition)
            self.session.flush()

            version = TrainingDefinitionVersionRecord(
                training_definition_id=definition.id,
                version_number=SEED_VERSION,
                status=VersionStatus.DRAFT.value,
                steps_json=flow_to_json(steps or []),
            )
            self.session.add(version)
            self.session.flush()

            result = (TrainingDefinition.from_record(definition), TrainingDefinitionVersion.from_record(version))

        logger.info(f"Created training definition {result[0].id} ({result[0].title!r})")
        return result

    def save_draft(
        self,
        version_id: uuid.UUID | str,
        steps: list[StepBlock],
        title: str | None = None,
        description: str | None = None,
    ) -> TrainingDefinitionVersion:
        """
        Store edited steps on a draft (and optionally retitle its definition).

        Drafts may be saved in any state of completeness; validation issues
        never block saving. Published and archived versions are immutable.
        """
        with self._transaction():
            version = self._version_record(version_id)
            if version.status != VersionStatus.DRAFT.value:
                raise InvalidStatusTransition(version.status, "edit")

            version.steps_json = flow_to_json(steps)
            self._apply_metadata(version.training_definition_id, title, description)

            self.session.flush()
            saved = TrainingDefinitionVersion.from_record(version)

        logger.debug(f"Saved draft {saved.id} with {len(steps)} steps")
        return saved

    # ========================================
    # Lifecycle
    # ========================================

    def publish(
        self,
        definition_id: uuid.UUID | str,
        increment: VersionIncrement | str = VersionIncrement.MINOR,
        custom_version: str | None = None,
        version_notes: str | None = None,
    ) -> TrainingDefinitionVersion:
        """
        Publish a definition's draft, updating the draft row in place.

        Args:
            definition_id: Definition whose draft is published
            increment: "minor" or "major" bump of the highest existing number
            custom_version: Exact version number to use instead
            version_notes: Release notes stored on the version

        Returns:
            The published version

        Raises:
            NotFound: Unknown definition
            NoDraftFound: The definition has no draft
            DuplicateVersion: The target number already exists; the draft is left unchanged
            InvalidVersionNumber: Blank or reserved custom number, or unknown increment
        """
        with self._transaction():
            definition = self._definition_record(definition_id)
            records = self._version_records(definition.id)

            drafts = [r for r in records if r.status == VersionStatus.DRAFT.value]
            if not drafts:
                raise NoDraftFound(definition.id)
            draft = drafts[0]  # most recently created

            # Existing numbers include the draft's own ("0.1" seed or "draft" placeholder)
            custom = (custom_version or "").strip()
            if custom and self._version_exists(definition.id, custom):
                raise DuplicateVersion(definition.id, custom)

            current = highest_version(r.version_number for r in records if r.id != draft.id)
            final_version = next_version_number(current, increment, custom_version)

            if self._version_exists(definition.id, final_version):
                raise DuplicateVersion(definition.id, final_version)

            draft.status = transition(draft.status, VersionAction.PUBLISH).value
            draft.version_number = final_version
            draft.version_notes = (version_notes or "").strip() or None
            draft.published_at = datetime.now(timezone.utc)

            try:
                self.session.flush()
            except IntegrityError as e:
                # Another writer took the number between the check and the update
                raise DuplicateVersion(definition.id, final_version) from e

            published = TrainingDefinitionVersion.from_record(draft)

        logger.info(f"Published definition {published.training_definition_id} as version {final_version}")
        return published

    def _set_status(self, version_id: uuid.UUID | str, action: VersionAction) -> TrainingDefinitionVersion:
        with self._transaction():
            version = self._version_record(version_id)
            version.status = transition(version.status, action).value
            self.session.flush()
            updated = TrainingDefinitionVersion.from_record(version)

        logger.info(f"Version {updated.version_number} of {updated.training_definition_id} is now {updated.status.value}")
        return updated

    def archive(self, version_id: uuid.UUID | str) -> TrainingDefinitionVersion:
        """Archive a published version (no version number change)."""
        return self._set_status(version_id, VersionAction.ARCHIVE)

    def unarchive(self, version_id: uuid.UUID | str) -> TrainingDefinitionVersion:
        """Return an archived version to published."""
        return self._set_status(version_id, VersionAction.UNARCHIVE)

    def create_draft(
        self,
        definition_id: uuid.UUID | str,
        steps: list[StepBlock],
        version_notes: str | None = None,
        title: str | None = None,
        description: str | None = None,
    ) -> TrainingDefinitionVersion:
        """
        Add a new placeholder draft holding the given steps.

        A title or description is written to the definition in the same
        transaction as the draft.
        """
        with self._transaction():
            definition = self._definition_record(definition_id)
            if self._version_exists(definition.id, DRAFT_PLACEHOLDER):
                raise DuplicateVersion(definition.id, DRAFT_PLACEHOLDER)

            draft = TrainingDefinitionVersionRecord(
                training_definition_id=definition.id,
                version_number=DRAFT_PLACEHOLDER,
                status=VersionStatus.DRAFT.value,
                steps_json=flow_to_json(steps),
                version_notes=(version_notes or "").strip() or None,
            )
            self.session.add(draft)
            self._apply_metadata(definition.id, title, description)
            try:
                self.session.flush()
            except IntegrityError as e:
                raise DuplicateVersion(definition.id, DRAFT_PLACEHOLDER) from e

            created = TrainingDefinitionVersion.from_record(draft)

        logger.info(f"Created draft {created.id} for definition {definition_id} with {len(steps)} steps")
        return created

    def create_draft_from(self, version_id: uuid.UUID | str) -> TrainingDefinitionVersion:
        """
        Start a new draft from an existing (normally published) version.

        The steps are deep-copied; the new row carries the "draft" placeholder
        number until it is published. A definition holds at most one
        placeholder draft, so a second clone raises DuplicateVersion.
        """
        with self._transaction():
            source = self._version_record(version_id)
            definition_id = source.training_definition_id
            source_number = source.version_number

            if self._version_exists(definition_id, DRAFT_PLACEHOLDER):
                raise DuplicateVersion(definition_id, DRAFT_PLACEHOLDER)

            draft = TrainingDefinitionVersionRecord(
                training_definition_id=definition_id,
                version_number=DRAFT_PLACEHOLDER,
                status=VersionStatus.DRAFT.value,
                steps_json=copy.deepcopy(source.steps_json),
                version_notes=f"Created from version {source_number}",
            )
            self.session.add(draft)
            try:
                self.session.flush()
            except IntegrityError as e:
                raise DuplicateVersion(definition_id, DRAFT_PLACEHOLDER) from e

            created = TrainingDefinitionVersion.from_record(draft)

        logger.info(f"Created draft {created.id} from version {source_number}")
        return created
