"""
Edward Backend — Chapter Service
==================================

What:  Chapter upsert, ordered fetch with topic bindings, rearrange and delete.
Why:   Chapters are the busiest content type: every keystroke pause in the
       editor submits the whole chapter, topics included.

Update Flow (POST /api/chapter/update):
    1. Resolve the document by guid
    2. Check every submitted topic id against the document's master topics
       (any unknown id rejects the whole update before anything is written)
    3. Upsert the chapter; content is compared by value and skipped if equal
    4. Insert new topic bindings, update changed ones
    5. Make sure the chapter order lists the chapter

Fetch Flow (GET /api/chapters/{document_id}):
    1. Load chapters, heal the chapter order against them
    2. Load all bindings of those chapters in one joined query
    3. Merge bindings onto chapters keyed by master topic guid
    4. Sort by the healed order
"""

import logging
from collections import defaultdict
from typing import Dict, List

from sqlalchemy import delete, select

from edward.database import utcnow
from edward.exceptions import UnknownTopicError
from edward.models.chapter import Chapter, ChapterTopic, MasterTopic
from edward.models.document import Document
from edward.models.order import OrderKind
from edward.schemas.chapter import (
    ChapterPayload,
    ChapterResponse,
    ChapterTopicPayload,
    ChapterTopicResponse,
)
from edward.services.ordering import OrderReconciler, sort_by_order
from edward.services.storage import ServerStorage
from edward.services.upsert import UpsertOutcome, UpsertResult, upsert

logger = logging.getLogger(__name__)

chapter_orders = OrderReconciler(OrderKind.CHAPTER)


class ChapterService:
    """
    Business logic for chapters. Stateless; every method takes the request's
    storage handle.
    """

    async def get_chapters(self, storage: ServerStorage, document_guid: str) -> List[ChapterResponse]:
        """Return the document's chapters in order, each with its topic bindings merged in."""
        db, user_id = storage.db, storage.user_id
        document = await storage.document(document_guid)

        result = await db.execute(
            select(Chapter)
            .where(Chapter.user_id == user_id, Chapter.document_id == document.id)
            .order_by(Chapter.id)
        )
        chapters = list(result.scalars().all())

        order = await chapter_orders.heal(db, user_id, document_guid, [c.guid for c in chapters])
        topics_by_chapter = await self._load_bindings(storage, [c.id for c in chapters])

        responses = [
            ChapterResponse(
                id=chapter.guid,
                title=chapter.title,
                archived=chapter.archived,
                content=chapter.content,
                topics=topics_by_chapter.get(chapter.id, {}),
            )
            for chapter in chapters
        ]
        return sort_by_order(responses, order, key=lambda chapter: chapter.id)

    async def _load_bindings(
        self, storage: ServerStorage, chapter_ids: List[int]
    ) -> Dict[int, Dict[str, ChapterTopicResponse]]:
        if not chapter_ids:
            return {}

        result = await storage.db.execute(
            select(
                ChapterTopic.chapter_id,
                ChapterTopic.content,
                MasterTopic.guid,
                MasterTopic.title,
                MasterTopic.archived,
            )
            .join(MasterTopic, ChapterTopic.master_topic_id == MasterTopic.id)
            .where(
                ChapterTopic.user_id == storage.user_id,
                ChapterTopic.chapter_id.in_(chapter_ids),
            )
        )

        grouped: Dict[int, Dict[str, ChapterTopicResponse]] = defaultdict(dict)
        for chapter_id, content, guid, title, archived in result.all():
            grouped[chapter_id][guid] = ChapterTopicResponse(
                id=guid, title=title, archived=archived, content=content
            )
        return grouped

    async def update_chapter(
        self, storage: ServerStorage, document_guid: str, chapter: ChapterPayload
    ) -> UpsertResult:
        """
        Create or update a chapter and its topic bindings.

        Raises:
            NotFoundError: the document does not exist for this user.
            UnknownTopicError: a submitted topic id is not a master topic of the document.
        """
        db, user_id = storage.db, storage.user_id
        document = await storage.document(document_guid)

        master_topics = await self._master_topics(storage, document)
        unknown = set(chapter.topics) - set(master_topics)
        if unknown:
            logger.warning(
                "Chapter %s references %d unknown master topic(s)", chapter.id, len(unknown)
            )
            raise UnknownTopicError(unknown, context={"document": document_guid, "chapter": chapter.id})

        def changes(stored: Chapter) -> dict:
            update = {}
            if stored.title != chapter.title:
                update["title"] = chapter.title
            if stored.archived != chapter.archived:
                update["archived"] = chapter.archived
            if stored.content != chapter.content:
                update["content"] = chapter.content
            return update

        result = await upsert(
            db,
            Chapter,
            where={"guid": chapter.id, "document_id": document.id, "user_id": user_id},
            insert={
                "guid": chapter.id,
                "document_id": document.id,
                "user_id": user_id,
                "title": chapter.title,
                "archived": chapter.archived,
                "content": chapter.content,
            },
            get_update=changes,
        )

        bindings_changed = await self._save_bindings(storage, result.id, chapter.topics, master_topics)
        order_changed = await chapter_orders.ensure_member(db, user_id, document_guid, chapter.id)
        if result.outcome is UpsertOutcome.UNCHANGED and (bindings_changed or order_changed):
            result = UpsertResult(id=result.id, outcome=UpsertOutcome.UPDATED)

        logger.info("Chapter %s %s", chapter.id, result.outcome.value)
        return result

    async def _master_topics(self, storage: ServerStorage, document: Document) -> Dict[str, MasterTopic]:
        result = await storage.db.execute(
            select(MasterTopic).where(
                MasterTopic.user_id == storage.user_id,
                MasterTopic.document_id == document.id,
            )
        )
        return {topic.guid: topic for topic in result.scalars().all()}

    async def _save_bindings(
        self,
        storage: ServerStorage,
        chapter_id: int,
        topics: Dict[str, ChapterTopicPayload],
        master_topics: Dict[str, MasterTopic],
    ) -> bool:
        """Insert bindings for newly bound topics; update bound ones whose content changed.

        Returns True when any binding was written.
        """
        if not topics:
            return False

        db = storage.db
        result = await db.execute(
            select(ChapterTopic).where(
                ChapterTopic.user_id == storage.user_id,
                ChapterTopic.chapter_id == chapter_id,
            )
        )
        bound = {binding.master_topic_id: binding for binding in result.scalars().all()}

        new_ids = [guid for guid in topics if master_topics[guid].id not in bound]
        bound_ids = [guid for guid in topics if master_topics[guid].id in bound]
        changed = False

        for guid in new_ids:
            key = {
                "user_id": storage.user_id,
                "chapter_id": chapter_id,
                "master_topic_id": master_topics[guid].id,
            }
            content = topics[guid].content
            # A concurrent save of the same binding becomes an update
            saved = await upsert(
                db,
                ChapterTopic,
                where=key,
                insert={**key, "content": content},
                get_update=lambda stored, content=content: (
                    {"content": content} if stored.content != content else None
                ),
            )
            changed = changed or saved.changed

        for guid in bound_ids:
            binding = bound[master_topics[guid].id]
            if binding.content != topics[guid].content:
                binding.content = topics[guid].content
                binding.updated_at = utcnow()
                changed = True

        await db.flush()
        return changed

    async def arrange_chapters(
        self, storage: ServerStorage, document_guid: str, chapter_ids: List[str]
    ) -> List[str]:
        """Overwrite the chapter order; raises InvalidOrderError unless it is a permutation."""
        await storage.document(document_guid)
        return await chapter_orders.rearrange(storage.db, storage.user_id, document_guid, chapter_ids)

    async def delete_chapter(self, storage: ServerStorage, document_guid: str, chapter_guid: str) -> None:
        """Delete a chapter, its topic bindings, and its place in the order."""
        db, user_id = storage.db, storage.user_id
        document = await storage.document(document_guid)

        chapter_ids = select(Chapter.id).where(
            Chapter.guid == chapter_guid,
            Chapter.document_id == document.id,
            Chapter.user_id == user_id,
        )
        await db.execute(
            delete(ChapterTopic).where(
                ChapterTopic.user_id == user_id,
                ChapterTopic.chapter_id.in_(chapter_ids),
            )
        )
        await db.execute(
            delete(Chapter).where(
                Chapter.guid == chapter_guid,
                Chapter.document_id == document.id,
                Chapter.user_id == user_id,
            )
        )
        await chapter_orders.remove(db, user_id, document_guid, chapter_guid)
        logger.info("Chapter %s deleted from document %s", chapter_guid, document_guid)

    async def delete_for_document(self, storage: ServerStorage, document: Document) -> None:
        """Remove every chapter and binding of a document that is being deleted."""
        db, user_id = storage.db, storage.user_id
        chapter_ids = select(Chapter.id).where(
            Chapter.document_id == document.id,
            Chapter.user_id == user_id,
        )
        await db.execute(
            delete(ChapterTopic).where(
                ChapterTopic.user_id == user_id,
                ChapterTopic.chapter_id.in_(chapter_ids),
            )
        )
        await db.execute(
            delete(Chapter).where(Chapter.document_id == document.id, Chapter.user_id == user_id)
        )
        await chapter_orders.discard(db, user_id, document.guid)


chapter_service = ChapterService()
