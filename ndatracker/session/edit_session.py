"""
Edit session state machine.

The session owns the working draft and decides what a commit means:

    IDLE ──edit──▶ DRAFTING ──commit──▶ IDLE            (create)
    any ──select(id)──▶ EDITING(id) ──commit──▶ IDLE    (update)
    EDITING/DRAFTING ──cancel──▶ IDLE
    IDLE/DRAFTING/EDITING ──drop_file──▶ EXTRACTING ──▶ previous state

EXTRACTING overlays the state that was active when the file was dropped;
that state is kept in ``resume_state`` and restored when the extraction
finishes or fails.
"""

import logging
from enum import Enum
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from ..exceptions import (
    ExtractionError,
    ExtractionSupersededError,
    NotFoundError,
    ValidationError,
)
from ..extraction import ExtractionPipeline
from ..models import DRAFT_FIELDS, ContractRecord, Draft, UploadedFile
from ..storage import ContractRecordStore
from ..utils.logging import log_event, operation_context, track
from ..utils.result import (
    Result,
    Success,
    conflict_error,
    extraction_error,
    not_found_error,
    superseded_error,
    validation_error,
)


class SessionState(str, Enum):
    IDLE = "idle"
    DRAFTING = "drafting"
    EDITING = "editing"
    EXTRACTING = "extracting"


COMMITTABLE_STATES = (SessionState.DRAFTING, SessionState.EDITING)


class EditSession:
    """
    Coordinates the working draft between extraction, user edits and the store.

    Usage:
        session = EditSession(store, pipeline)
        await session.drop_file(UploadedFile(name="Acme-NDA.pdf", content=data))
        session.edit(notes="Signed copy on file")
        result = await session.commit()
    """

    def __init__(self, store: ContractRecordStore, pipeline: ExtractionPipeline):
        self.store = store
        self.pipeline = pipeline

        self._state = SessionState.IDLE
        self._resume_state: Optional[SessionState] = None
        self._editing_id: Optional[str] = None
        self._draft = Draft()
        self._drop_generation = 0

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def resume_state(self) -> Optional[SessionState]:
        """State to return to once the pending extraction settles."""
        return self._resume_state

    @property
    def editing_id(self) -> Optional[str]:
        return self._editing_id

    @property
    def draft(self) -> Draft:
        return self._draft

    @property
    def can_commit(self) -> bool:
        return self._state in COMMITTABLE_STATES and self._draft.has_title()

    def _transition(self, new_state: SessionState) -> None:
        if new_state is self._state:
            return
        log_event(
            "session_state_changed",
            {"from_state": self._state.value, "to_state": new_state.value},
            level=logging.DEBUG,
        )
        self._state = new_state

    def _reset(self) -> None:
        self._draft = Draft()
        self._editing_id = None
        self._resume_state = None
        self._transition(SessionState.IDLE)

    def _settle(self) -> None:
        """Leave EXTRACTING for the state the drop started from."""
        resume = self._resume_state or SessionState.IDLE
        self._resume_state = None
        self._transition(resume)

    def _abort_extraction(self) -> None:
        if self._state is not SessionState.EXTRACTING:
            return
        self._drop_generation += 1
        self.pipeline.cancel()
        self._settle()

    # User actions

    def edit(self, **fields) -> Draft:
        """
        Change fields of the working draft.

        Raises:
            ValidationError: On unknown fields, unparseable dates, or while an
                extraction is pending. The draft is left unchanged.
        """
        if self._state is SessionState.EXTRACTING:
            raise ValidationError("Draft cannot be edited while extraction is pending")

        unknown = set(fields) - set(DRAFT_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown contract fields: {', '.join(sorted(unknown))}")

        try:
            draft = Draft.model_validate({**self._draft.field_values(), **fields})
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid contract fields: {e}") from e

        self._draft = draft
        if self._state is SessionState.IDLE and not draft.is_empty():
            self._transition(SessionState.DRAFTING)
        elif self._state is SessionState.DRAFTING and draft.is_empty():
            self._transition(SessionState.IDLE)
        return draft

    def select(self, record_id: str) -> ContractRecord:
        """
        Load a persisted record into the draft for editing.

        Raises:
            NotFoundError: If the store has no such record
        """
        record = self.store.get(record_id)
        self._abort_extraction()

        self._editing_id = record.id
        self._draft = record.to_draft()
        self._resume_state = None
        self._transition(SessionState.EDITING)
        return record

    def cancel(self) -> None:
        """Discard the working draft and any pending extraction."""
        self._abort_extraction()
        self._reset()

    @track(operation="session_commit", include_args=False)
    async def commit(self) -> Result:
        """
        Create or update a record from the working draft.

        Returns:
            Success(record) after a commit, otherwise a Failure with the
            session left exactly as it was.
        """
        if self._state not in COMMITTABLE_STATES:
            log_event(
                "commit_rejected",
                {"reason": f"nothing to commit in state {self._state.value}"},
                level=logging.DEBUG,
            )
            return conflict_error(
                "Nothing to commit", {"state": self._state.value}
            )

        if not self._draft.has_title():
            log_event(
                "commit_rejected", {"reason": "blank title"}, level=logging.DEBUG
            )
            return validation_error("Contract title is required")

        try:
            if self._state is SessionState.EDITING:
                record = await self.store.update(
                    record_id=self._editing_id, draft=self._draft
                )
            else:
                record = await self.store.create(self._draft)
        except NotFoundError as e:
            return not_found_error(str(e), {"record_id": e.record_id})

        self._reset()
        return Success(record)

    @track(operation="session_drop_file", include_args=False)
    async def drop_file(self, file: UploadedFile) -> Result:
        """
        Extract a draft from a dropped file and make it the working draft.

        The extracted draft replaces every field of the working draft. A drop
        that is superseded by a later drop, a select or a cancel changes
        nothing; neither does a failed extraction.
        """
        if self._state is not SessionState.EXTRACTING:
            self._resume_state = self._state
        self._drop_generation += 1
        generation = self._drop_generation
        self._transition(SessionState.EXTRACTING)

        try:
            with operation_context(drop_generation=generation):
                draft = await self.pipeline.extract(file)
        except ExtractionSupersededError as e:
            if generation == self._drop_generation:
                self._settle()
            return superseded_error(str(e), {"file_name": file.name})
        except ExtractionError as e:
            if generation == self._drop_generation:
                self._settle()
            return extraction_error(str(e), {"file_name": file.name})

        if generation != self._drop_generation:
            return superseded_error(
                f"Drop of {file.name} was superseded", {"file_name": file.name}
            )

        self._draft = draft
        if self._resume_state is not SessionState.EDITING:
            self._resume_state = (
                SessionState.IDLE if draft.is_empty() else SessionState.DRAFTING
            )
        self._settle()
        return Success(draft)

    async def delete(self, record_id: str) -> bool:
        """
        Delete a record; if it is the one being edited, drop back to IDLE.

        Returns:
            True if a record was removed
        """
        removed = await self.store.delete(record_id=record_id)
        if record_id == self._editing_id:
            self._abort_extraction()
            self._reset()
        return removed
