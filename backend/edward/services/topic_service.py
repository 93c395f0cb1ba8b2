"""
Edward Backend — Master Topic Service
=======================================

What:  Upsert, ordered fetch, rearrange and delete for a document's master
       topics.
Why:   Deleting a master topic must also remove every chapter's content for
       that topic, or chapters would keep bindings to a topic that no longer
       exists.
"""

import logging
from typing import List

from sqlalchemy import delete, select

from edward.models.chapter import ChapterTopic, MasterTopic
from edward.models.document import Document
from edward.models.order import OrderKind
from edward.schemas.topic import TopicPayload, TopicResponse
from edward.services.ordering import OrderReconciler, sort_by_order
from edward.services.storage import ServerStorage
from edward.services.upsert import UpsertResult, upsert

logger = logging.getLogger(__name__)

topic_orders = OrderReconciler(OrderKind.TOPIC)


class TopicService:

    async def get_topics(self, storage: ServerStorage, document_guid: str) -> List[TopicResponse]:
        db, user_id = storage.db, storage.user_id
        document = await storage.document(document_guid)

        result = await db.execute(
            select(MasterTopic)
            .where(MasterTopic.user_id == user_id, MasterTopic.document_id == document.id)
            .order_by(MasterTopic.id)
        )
        topics = list(result.scalars().all())
        order = await topic_orders.heal(db, user_id, document_guid, [t.guid for t in topics])

        responses = [
            TopicResponse(id=topic.guid, title=topic.title, archived=topic.archived)
            for topic in topics
        ]
        return sort_by_order(responses, order, key=lambda topic: topic.id)

    async def update_topic(
        self, storage: ServerStorage, document_guid: str, topic: TopicPayload
    ) -> UpsertResult:
        db, user_id = storage.db, storage.user_id
        document = await storage.document(document_guid)

        def changes(stored: MasterTopic) -> dict:
            update = {}
            if stored.title != topic.title:
                update["title"] = topic.title
            if stored.archived != topic.archived:
                update["archived"] = topic.archived
            return update

        result = await upsert(
            db,
            MasterTopic,
            where={"guid": topic.id, "document_id": document.id, "user_id": user_id},
            insert={
                "guid": topic.id,
                "document_id": document.id,
                "user_id": user_id,
                "title": topic.title,
                "archived": topic.archived,
            },
            get_update=changes,
        )
        await topic_orders.ensure_member(db, user_id, document_guid, topic.id)

        logger.info("Master topic %s %s", topic.id, result.outcome.value)
        return result

    async def arrange_topics(
        self, storage: ServerStorage, document_guid: str, topic_ids: List[str]
    ) -> List[str]:
        await storage.document(document_guid)
        return await topic_orders.rearrange(storage.db, storage.user_id, document_guid, topic_ids)

    async def delete_topic(self, storage: ServerStorage, document_guid: str, topic_guid: str) -> None:
        """Delete a master topic and every chapter binding that points at it."""
        db, user_id = storage.db, storage.user_id
        document = await storage.document(document_guid)

        topic_ids = select(MasterTopic.id).where(
            MasterTopic.guid == topic_guid,
            MasterTopic.document_id == document.id,
            MasterTopic.user_id == user_id,
        )
        await db.execute(
            delete(ChapterTopic).where(
                ChapterTopic.user_id == user_id,
                ChapterTopic.master_topic_id.in_(topic_ids),
            )
        )
        await db.execute(
            delete(MasterTopic).where(
                MasterTopic.guid == topic_guid,
                MasterTopic.document_id == document.id,
                MasterTopic.user_id == user_id,
            )
        )
        await topic_orders.remove(db, user_id, document_guid, topic_guid)
        logger.info("Master topic %s deleted from document %s", topic_guid, document_guid)

    async def delete_for_document(self, storage: ServerStorage, document: Document) -> None:
        # Chapter bindings are already gone; ChapterService.delete_for_document runs first
        await storage.db.execute(
            delete(MasterTopic).where(
                MasterTopic.document_id == document.id,
                MasterTopic.user_id == storage.user_id,
            )
        )
        await topic_orders.discard(storage.db, storage.user_id, document.guid)


topic_service = TopicService()
