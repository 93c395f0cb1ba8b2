"""
Edward Backend — Upsert Engine Tests
======================================

What we test:
    ✅ Missing row is inserted and its surrogate key returned
    ✅ Same payload twice: one row, same key, second call unchanged
    ✅ Static update vs computed update
    ✅ Concurrent insert of the same natural key turns into an update
    ✅ Missing arguments raise InvalidArgumentsError
"""

from unittest.mock import patch

import pytest
from sqlalchemy import func, select

from edward.exceptions import InvalidArgumentsError
from edward.models.document import Document
from edward.models.order import OrderRecord
from edward.services import upsert as upsert_module
from edward.services.upsert import UpsertOutcome, upsert


def _document_key(user_id, guid="doc-9"):
    return {"guid": guid, "user_id": user_id}


class TestUpsertInsertAndUpdate:

    @pytest.mark.asyncio
    async def test_inserts_missing_row(self, db_session, premium_user):
        key = _document_key(premium_user.id)

        result = await upsert(
            db_session, Document, where=key, insert={**key, "name": "Draft"}, update={"name": "x"}
        )

        assert result.outcome is UpsertOutcome.INSERTED
        assert result.changed
        stored = await db_session.get(Document, result.id)
        assert stored.name == "Draft"

    @pytest.mark.asyncio
    async def test_identical_payload_twice_is_unchanged(self, db_session, premium_user):
        key = _document_key(premium_user.id)

        def changes(stored):
            return {"name": "Draft"} if stored.name != "Draft" else None

        first = await upsert(db_session, Document, where=key, insert={**key, "name": "Draft"}, get_update=changes)
        second = await upsert(db_session, Document, where=key, insert={**key, "name": "Draft"}, get_update=changes)

        assert first.outcome is UpsertOutcome.INSERTED
        assert second.outcome is UpsertOutcome.UNCHANGED
        assert not second.changed
        assert second.id == first.id

        count = await db_session.scalar(select(func.count()).select_from(Document))
        assert count == 1

    @pytest.mark.asyncio
    async def test_static_update_applies_to_existing_row(self, db_session, premium_user):
        key = _document_key(premium_user.id)
        first = await upsert(db_session, Document, where=key, insert={**key, "name": "Draft"}, update={"name": "Final"})

        second = await upsert(db_session, Document, where=key, insert={**key, "name": "Draft"}, update={"name": "Final"})

        assert second.outcome is UpsertOutcome.UPDATED
        assert second.id == first.id
        stored = await db_session.get(Document, first.id)
        assert stored.name == "Final"

    @pytest.mark.asyncio
    async def test_empty_static_update_writes_nothing(self, db_session, premium_user):
        key = _document_key(premium_user.id)
        await upsert(db_session, Document, where=key, insert={**key, "name": "Draft"}, update={})

        result = await upsert(db_session, Document, where=key, insert={**key, "name": "Draft"}, update={})

        assert result.outcome is UpsertOutcome.UNCHANGED

    @pytest.mark.asyncio
    async def test_update_receives_stored_row(self, db_session, premium_user):
        where = {"kind": "chapter", "owner_guid": "doc-1", "user_id": premium_user.id}
        await upsert(db_session, OrderRecord, where=where, insert={**where, "order": ["a"]}, update={})

        seen = []

        def append_b(record):
            seen.append(list(record.order))
            return {"order": record.order + ["b"]}

        result = await upsert(db_session, OrderRecord, where=where, insert={**where, "order": ["a"]}, get_update=append_b)

        assert result.outcome is UpsertOutcome.UPDATED
        assert seen == [["a"]]
        record = await db_session.get(OrderRecord, result.id)
        assert record.order == ["a", "b"]


class TestUpsertConcurrentInsert:

    @pytest.mark.asyncio
    async def test_conflicting_insert_becomes_update(self, db_session, premium_user):
        """A row inserted between lookup and insert is updated, not duplicated."""
        key = _document_key(premium_user.id)
        existing = await upsert(db_session, Document, where=key, insert={**key, "name": "Theirs"}, update={})

        real_find = upsert_module._find
        calls = []

        async def find_missing_once(db, model, where):
            calls.append(where)
            if len(calls) == 1:
                return None
            return await real_find(db, model, where)

        with patch("edward.services.upsert._find", side_effect=find_missing_once):
            result = await upsert(
                db_session, Document, where=key, insert={**key, "name": "Mine"}, update={"name": "Mine"}
            )

        assert len(calls) == 2
        assert result.outcome is UpsertOutcome.UPDATED
        assert result.id == existing.id
        count = await db_session.scalar(select(func.count()).select_from(Document))
        assert count == 1


class TestUpsertArguments:

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"where": None, "insert": {"guid": "x"}, "update": {}},
            {"where": {"guid": "x"}, "insert": None, "update": {}},
            {"where": {"guid": "x"}, "insert": {"guid": "x"}},
        ],
    )
    async def test_missing_arguments_raise(self, db_session, kwargs):
        with pytest.raises(InvalidArgumentsError):
            await upsert(db_session, Document, **kwargs)

    @pytest.mark.asyncio
    async def test_missing_model_raises(self, db_session):
        with pytest.raises(InvalidArgumentsError):
            await upsert(db_session, None, where={"guid": "x"}, insert={"guid": "x"}, update={})
