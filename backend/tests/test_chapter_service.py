"""
Edward Backend — Chapter Service Tests
========================================

What we test:
    ✅ Update inserts the chapter and lists it in the order
    ✅ Identical update twice: one row, one order entry, unchanged outcome
    ✅ Topic bindings are inserted, updated on change and merged on fetch
    ✅ A change to binding content alone reports an updated chapter
    ✅ Unknown master topic rejects the update before any write
    ✅ Fetch heals an order that is missing a chapter
    ✅ Delete removes the chapter, its bindings and its order entry only
"""

import pytest
from sqlalchemy import func, select

from edward.exceptions import NotFoundError, UnknownTopicError
from edward.models.chapter import Chapter, ChapterTopic
from edward.schemas.chapter import ChapterPayload, ChapterTopicPayload
from edward.schemas.document import DocumentPayload
from edward.schemas.topic import TopicPayload
from edward.services.chapter_service import chapter_orders, chapter_service
from edward.services.document_service import document_service
from edward.services.topic_service import topic_service
from edward.services.upsert import UpsertOutcome


def _chapter(guid, title="Chapter", topics=None, content=None):
    return ChapterPayload(
        id=guid,
        title=title,
        content=content if content is not None else {"ops": [{"insert": f"{title}\n"}]},
        topics={
            topic_id: ChapterTopicPayload(id=topic_id, content=topic_content)
            for topic_id, topic_content in (topics or {}).items()
        },
    )


async def _count(db, model):
    return await db.scalar(select(func.count()).select_from(model))


class TestUpdateChapter:

    @pytest.mark.asyncio
    async def test_insert_adds_to_order(self, storage, document):
        result = await chapter_service.update_chapter(storage, "doc-1", _chapter("c1"))

        assert result.outcome is UpsertOutcome.INSERTED
        order = await chapter_orders.get_order(storage.db, storage.user_id, "doc-1")
        assert order == ["c1"]

    @pytest.mark.asyncio
    async def test_identical_update_is_idempotent(self, storage, document):
        payload = _chapter("c1", title="Opening")

        first = await chapter_service.update_chapter(storage, "doc-1", payload)
        second = await chapter_service.update_chapter(storage, "doc-1", payload)

        assert second.outcome is UpsertOutcome.UNCHANGED
        assert second.id == first.id
        assert await _count(storage.db, Chapter) == 1
        assert await chapter_orders.get_order(storage.db, storage.user_id, "doc-1") == ["c1"]

    @pytest.mark.asyncio
    async def test_changed_content_updates(self, storage, document):
        await chapter_service.update_chapter(storage, "doc-1", _chapter("c1", content={"ops": []}))

        result = await chapter_service.update_chapter(
            storage, "doc-1", _chapter("c1", content={"ops": [{"insert": "new\n"}]})
        )

        assert result.outcome is UpsertOutcome.UPDATED
        chapters = await chapter_service.get_chapters(storage, "doc-1")
        assert chapters[0].content == {"ops": [{"insert": "new\n"}]}

    @pytest.mark.asyncio
    async def test_unknown_document_is_not_found(self, storage, document):
        with pytest.raises(NotFoundError):
            await chapter_service.update_chapter(storage, "no-such-doc", _chapter("c1"))


class TestTopicBindings:

    @pytest.mark.asyncio
    async def test_bindings_saved_and_merged_on_fetch(self, storage, document):
        await topic_service.update_topic(storage, "doc-1", TopicPayload(id="t1", title="Setting"))

        await chapter_service.update_chapter(
            storage, "doc-1", _chapter("c1", topics={"t1": {"ops": [{"insert": "Rain\n"}]}})
        )

        chapters = await chapter_service.get_chapters(storage, "doc-1")
        binding = chapters[0].topics["t1"]
        assert binding.title == "Setting"
        assert binding.content == {"ops": [{"insert": "Rain\n"}]}

    @pytest.mark.asyncio
    async def test_bound_topic_content_is_updated(self, storage, document):
        await topic_service.update_topic(storage, "doc-1", TopicPayload(id="t1", title="Setting"))
        await chapter_service.update_chapter(storage, "doc-1", _chapter("c1", topics={"t1": "old"}))

        await chapter_service.update_chapter(storage, "doc-1", _chapter("c1", topics={"t1": "new"}))

        assert await _count(storage.db, ChapterTopic) == 1
        chapters = await chapter_service.get_chapters(storage, "doc-1")
        assert chapters[0].topics["t1"].content == "new"

    @pytest.mark.asyncio
    async def test_binding_only_change_reports_updated(self, storage, document):
        await topic_service.update_topic(storage, "doc-1", TopicPayload(id="t1", title="Setting"))
        await topic_service.update_topic(storage, "doc-1", TopicPayload(id="t2", title="Mood"))
        await chapter_service.update_chapter(storage, "doc-1", _chapter("c1", topics={"t1": "x"}))

        changed = await chapter_service.update_chapter(storage, "doc-1", _chapter("c1", topics={"t1": "y"}))
        bound = await chapter_service.update_chapter(
            storage, "doc-1", _chapter("c1", topics={"t1": "y", "t2": "z"})
        )
        repeated = await chapter_service.update_chapter(
            storage, "doc-1", _chapter("c1", topics={"t1": "y", "t2": "z"})
        )

        assert changed.outcome is UpsertOutcome.UPDATED
        assert bound.outcome is UpsertOutcome.UPDATED
        assert repeated.outcome is UpsertOutcome.UNCHANGED
        assert changed.id == bound.id == repeated.id

    @pytest.mark.asyncio
    async def test_unknown_topic_rejected_without_writes(self, storage, document):
        await topic_service.update_topic(storage, "doc-1", TopicPayload(id="t1", title="Setting"))

        with pytest.raises(UnknownTopicError) as exc_info:
            await chapter_service.update_chapter(
                storage, "doc-1", _chapter("c1", topics={"t1": "ok", "ghost": "bad"})
            )

        assert exc_info.value.topic_ids == ["ghost"]
        assert await _count(storage.db, ChapterTopic) == 0
        assert await _count(storage.db, Chapter) == 0

    @pytest.mark.asyncio
    async def test_topic_from_other_document_is_unknown(self, storage, document):
        await document_service.add_document(storage, DocumentPayload(id="doc-2", name="Other"))
        await topic_service.update_topic(storage, "doc-2", TopicPayload(id="t-other"))

        with pytest.raises(UnknownTopicError):
            await chapter_service.update_chapter(storage, "doc-1", _chapter("c1", topics={"t-other": "x"}))


class TestGetChapters:

    @pytest.mark.asyncio
    async def test_directly_inserted_chapter_is_appended(self, storage, document):
        await chapter_service.update_chapter(storage, "doc-1", _chapter("a"))
        await chapter_service.update_chapter(storage, "doc-1", _chapter("b"))
        storage.db.add(Chapter(guid="c", document_id=document.id, user_id=storage.user_id, title="c"))
        await storage.db.flush()

        chapters = await chapter_service.get_chapters(storage, "doc-1")

        assert [c.id for c in chapters] == ["a", "b", "c"]
        assert await chapter_orders.get_order(storage.db, storage.user_id, "doc-1") == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_fetch_follows_rearranged_order(self, storage, document):
        await chapter_service.update_chapter(storage, "doc-1", _chapter("a"))
        await chapter_service.update_chapter(storage, "doc-1", _chapter("b"))

        await chapter_service.arrange_chapters(storage, "doc-1", ["b", "a"])
        chapters = await chapter_service.get_chapters(storage, "doc-1")

        assert [c.id for c in chapters] == ["b", "a"]

    @pytest.mark.asyncio
    async def test_empty_document(self, storage, document):
        assert await chapter_service.get_chapters(storage, "doc-1") == []


class TestDeleteChapter:

    @pytest.mark.asyncio
    async def test_delete_removes_bindings_and_order_entry(self, storage, document):
        await topic_service.update_topic(storage, "doc-1", TopicPayload(id="t1"))
        await chapter_service.update_chapter(storage, "doc-1", _chapter("a", topics={"t1": "x"}))
        await chapter_service.update_chapter(storage, "doc-1", _chapter("b", topics={"t1": "y"}))

        await chapter_service.delete_chapter(storage, "doc-1", "a")

        assert await chapter_orders.get_order(storage.db, storage.user_id, "doc-1") == ["b"]
        assert await _count(storage.db, ChapterTopic) == 1
        chapters = await chapter_service.get_chapters(storage, "doc-1")
        assert [c.id for c in chapters] == ["b"]
        assert chapters[0].topics["t1"].content == "y"

    @pytest.mark.asyncio
    async def test_delete_missing_chapter_is_tolerated(self, storage, document):
        await chapter_service.update_chapter(storage, "doc-1", _chapter("a"))

        await chapter_service.delete_chapter(storage, "doc-1", "nope")

        assert await chapter_orders.get_order(storage.db, storage.user_id, "doc-1") == ["a"]
