import asyncio
import logging
from datetime import date

import pytest

from ndatracker.exceptions import ExtractionError, NotFoundError, ValidationError
from ndatracker.extraction import ExtractionPipeline
from ndatracker.models import UploadedFile
from ndatracker.session import EditSession, SessionState
from tests.factories import ContractFactory
from tests.mocks import GatedExtractionBackend, wait_until


def _upload(name: str) -> UploadedFile:
    return UploadedFile(name=name, content=b"data")


async def _start_drop(session: EditSession, backend, name: str) -> asyncio.Task:
    task = asyncio.create_task(session.drop_file(_upload(name)))
    await wait_until(lambda: name in backend.started)
    return task


class TestDrafting:

    @pytest.mark.asyncio
    async def test_starts_idle(self, session):
        assert session.state is SessionState.IDLE
        assert session.draft.is_empty()
        assert session.can_commit is False

    @pytest.mark.asyncio
    async def test_edit_starts_a_draft(self, session):
        draft = session.edit(title="Globex NDA")

        assert session.state is SessionState.DRAFTING
        assert draft.title == "Globex NDA"
        assert session.can_commit is True

    @pytest.mark.asyncio
    async def test_clearing_every_field_returns_to_idle(self, session):
        session.edit(title="Globex NDA")

        session.edit(title="")

        assert session.state is SessionState.IDLE

    @pytest.mark.asyncio
    async def test_edit_parses_iso_dates(self, session):
        draft = session.edit(title="Globex NDA", expiry_date="2025-03-01")

        assert draft.expiry_date == date(2025, 3, 1)

    @pytest.mark.asyncio
    async def test_unknown_field_is_rejected(self, session):
        session.edit(title="Globex NDA")

        with pytest.raises(ValidationError, match="signatory"):
            session.edit(signatory="Jane")

        assert session.draft.title == "Globex NDA"

    @pytest.mark.asyncio
    async def test_invalid_date_leaves_draft_unchanged(self, session):
        session.edit(title="Globex NDA")

        with pytest.raises(ValidationError):
            session.edit(expiry_date="next spring")

        assert session.draft.expiry_date is None

    @pytest.mark.asyncio
    async def test_cancel_discards_draft(self, session):
        session.edit(title="Globex NDA")

        session.cancel()

        assert session.state is SessionState.IDLE
        assert session.draft.is_empty()


class TestCommit:

    @pytest.mark.asyncio
    async def test_commit_creates_record(self, session, store):
        session.edit(title="Globex NDA", counterparty="Globex Corp.")

        result = await session.commit()

        assert result.is_success()
        record = result.unwrap()
        assert store.list() == (record,)
        assert record.counterparty == "Globex Corp."
        assert session.state is SessionState.IDLE
        assert session.draft.is_empty()

    @pytest.mark.asyncio
    async def test_nothing_to_commit_when_idle(self, session, store):
        result = await session.commit()

        assert result.is_failure()
        assert result.error_type == "ConflictError"
        assert len(store) == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("title", ["", "   "])
    async def test_blank_title_is_rejected(self, session, store, title):
        session.edit(title=title, notes="Signed copy on file")

        result = await session.commit()

        assert result.error_type == "ValidationError"
        assert result.status_code == 400
        assert session.state is SessionState.DRAFTING
        assert session.draft.notes == "Signed copy on file"
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_commit_while_extracting_is_rejected(
        self, gated_session, gated_backend, store
    ):
        pending = await _start_drop(gated_session, gated_backend, "Acme-NDA.pdf")

        result = await gated_session.commit()

        assert result.error_type == "ConflictError"
        assert len(store) == 0
        gated_backend.release("Acme-NDA.pdf")
        await pending


class TestEditingExisting:

    @pytest.mark.asyncio
    async def test_select_loads_record(self, session, store):
        record = await store.create(ContractFactory.draft())

        session.select(record.id)

        assert session.state is SessionState.EDITING
        assert session.editing_id == record.id
        assert session.draft.field_values() == record.field_values()

    @pytest.mark.asyncio
    async def test_select_replaces_unsaved_draft(self, session, store):
        record = await store.create(ContractFactory.draft())
        session.edit(title="Unsaved")

        session.select(record.id)

        assert session.draft.title == record.title

    @pytest.mark.asyncio
    async def test_select_unknown_raises(self, session):
        session.edit(title="Unsaved")

        with pytest.raises(NotFoundError):
            session.select("missing")

        assert session.state is SessionState.DRAFTING
        assert session.draft.title == "Unsaved"

    @pytest.mark.asyncio
    async def test_commit_updates_in_place(self, session, store):
        first = await store.create(ContractFactory.draft(title="First"))
        second = await store.create(ContractFactory.draft(title="Second"))
        session.select(first.id)
        session.edit(notes="Renewal under discussion")

        result = await session.commit()

        updated = result.unwrap()
        assert updated.id == first.id
        assert updated.date_added == first.date_added
        assert store.list() == (updated, second)
        assert session.state is SessionState.IDLE

    @pytest.mark.asyncio
    async def test_cancel_leaves_record_untouched(self, session, store):
        record = await store.create(ContractFactory.draft())
        session.select(record.id)
        session.edit(title="Changed")

        session.cancel()

        assert store.get(record.id) == record
        assert session.state is SessionState.IDLE

    @pytest.mark.asyncio
    async def test_commit_after_record_vanished(self, session, store):
        record = await store.create(ContractFactory.draft())
        session.select(record.id)
        await store.delete(record.id)

        result = await session.commit()

        assert result.error_type == "NotFoundError"
        assert session.state is SessionState.EDITING

    @pytest.mark.asyncio
    async def test_deleting_edited_record_resets(self, session, store):
        record = await store.create(ContractFactory.draft())
        session.select(record.id)

        assert await session.delete(record.id) is True

        assert session.state is SessionState.IDLE
        assert session.editing_id is None
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_deleting_other_record_keeps_editing(self, session, store):
        edited = await store.create(ContractFactory.draft(title="Edited"))
        other = await store.create(ContractFactory.draft(title="Other"))
        session.select(edited.id)

        assert await session.delete(other.id) is True

        assert session.state is SessionState.EDITING
        assert session.editing_id == edited.id


class TestDropFile:

    @pytest.mark.asyncio
    async def test_drop_prefills_new_draft(self, session, store):
        result = await session.drop_file(_upload("Acme-NDA.pdf"))

        assert result.is_success()
        assert session.state is SessionState.DRAFTING
        assert session.draft.title == "Acme-NDA"
        assert session.draft.counterparty == "Acme Inc."

        record = (await session.commit()).unwrap()
        assert record.expiry_date == date(2026, 1, 5)
        assert store.list() == (record,)

    @pytest.mark.asyncio
    async def test_drop_replaces_manual_edits(self, session):
        session.edit(title="Manual", notes="typed by hand")

        await session.drop_file(_upload("Acme-NDA.pdf"))

        assert session.draft.title == "Acme-NDA"
        assert session.draft.notes == ""

    @pytest.mark.asyncio
    async def test_drop_while_editing_keeps_target(self, session, store):
        record = await store.create(ContractFactory.draft(title="Old title"))
        session.select(record.id)

        await session.drop_file(_upload("Acme-NDA.pdf"))

        assert session.state is SessionState.EDITING
        updated = (await session.commit()).unwrap()
        assert updated.id == record.id
        assert updated.title == "Acme-NDA"
        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_state_while_extracting(self, gated_session, gated_backend):
        gated_session.edit(title="Manual")
        pending = await _start_drop(gated_session, gated_backend, "Acme-NDA.pdf")

        assert gated_session.state is SessionState.EXTRACTING
        assert gated_session.resume_state is SessionState.DRAFTING
        assert gated_session.can_commit is False
        with pytest.raises(ValidationError):
            gated_session.edit(notes="too early")

        gated_backend.release("Acme-NDA.pdf")
        await pending
        assert gated_session.state is SessionState.DRAFTING
        assert gated_session.resume_state is None

    @pytest.mark.asyncio
    async def test_only_latest_drop_is_applied(self, gated_session, gated_backend):
        first = await _start_drop(gated_session, gated_backend, "first.pdf")
        second = await _start_drop(gated_session, gated_backend, "second.pdf")
        gated_backend.release("second.pdf")

        second_result = await second
        first_result = await first

        assert second_result.is_success()
        assert first_result.error_type == "ExtractionSuperseded"
        assert gated_session.state is SessionState.DRAFTING
        assert gated_session.draft.title == "second"

    @pytest.mark.asyncio
    async def test_late_superseded_result_is_ignored(self, store):
        backend = GatedExtractionBackend(ignore_cancel=True)
        session = EditSession(store, ExtractionPipeline(backend))

        first = await _start_drop(session, backend, "first.pdf")
        second = await _start_drop(session, backend, "second.pdf")
        backend.release("second.pdf")
        await second
        backend.release("first.pdf")

        assert (await first).is_failure()
        assert session.draft.title == "second"
        assert session.state is SessionState.DRAFTING

    @pytest.mark.asyncio
    async def test_failed_extraction_keeps_draft(self, gated_session, gated_backend):
        gated_session.edit(title="Manual", notes="keep me")
        gated_backend.fail("scan.pdf", ExtractionError("unreadable scan"))

        result = await gated_session.drop_file(_upload("scan.pdf"))

        assert result.error_type == "ExtractionError"
        assert result.recoverable is True
        assert gated_session.state is SessionState.DRAFTING
        assert gated_session.draft.title == "Manual"
        assert gated_session.draft.notes == "keep me"

    @pytest.mark.asyncio
    async def test_failed_extraction_from_idle_returns_to_idle(
        self, gated_session, gated_backend
    ):
        gated_backend.fail("scan.pdf", RuntimeError("crash"))

        result = await gated_session.drop_file(_upload("scan.pdf"))

        assert result.error_type == "ExtractionError"
        assert gated_session.state is SessionState.IDLE

    @pytest.mark.asyncio
    async def test_select_during_extraction_wins(
        self, gated_session, gated_backend, store
    ):
        record = await store.create(ContractFactory.draft(title="Existing"))
        pending = await _start_drop(gated_session, gated_backend, "Acme-NDA.pdf")

        gated_session.select(record.id)
        gated_backend.release("Acme-NDA.pdf")
        result = await pending

        assert result.error_type == "ExtractionSuperseded"
        assert gated_session.state is SessionState.EDITING
        assert gated_session.draft.title == "Existing"

    @pytest.mark.asyncio
    async def test_cancel_during_extraction(self, gated_session, gated_backend):
        pending = await _start_drop(gated_session, gated_backend, "Acme-NDA.pdf")

        gated_session.cancel()
        result = await pending

        assert result.is_failure()
        assert gated_session.state is SessionState.IDLE
        assert gated_session.draft.is_empty()


class TestStoreCallLogging:

    @staticmethod
    def _started_args(caplog, operation):
        return [
            record.structured_data
            for record in caplog.records
            if getattr(record, "structured_data", {}).get("event") == "operation_started"
            and record.structured_data.get("operation") == operation
        ]

    @pytest.mark.asyncio
    async def test_update_logs_record_id(self, session, store, caplog):
        caplog.set_level(logging.DEBUG, logger="ndatracker")
        record = await store.create(ContractFactory.draft())
        session.select(record.id)
        session.edit(notes="Countersigned")

        await session.commit()

        started = self._started_args(caplog, "contract_update")
        assert [event["arg_record_id"] for event in started] == [record.id]

    @pytest.mark.asyncio
    async def test_delete_logs_record_id(self, session, store, caplog):
        caplog.set_level(logging.DEBUG, logger="ndatracker")
        record = await store.create(ContractFactory.draft())

        await session.delete(record.id)

        started = self._started_args(caplog, "contract_delete")
        assert [event["arg_record_id"] for event in started] == [record.id]
