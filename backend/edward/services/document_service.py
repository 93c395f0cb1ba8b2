"""
Edward Backend — Document Service
===================================

What:  The document list, document add/rename/delete and the bulk first save
       of a freshly set-up document.
Why:   A document owns everything else. Deleting one has to clear chapters,
       bindings, topics, plans, sections, workshops and every order record
       keyed by the document or by one of its plans; all of it runs inside the
       request transaction so a failure leaves the document intact.

Delete order:
    chapters (+ bindings) → master topics → plans (+ sections) → workshops → document
"""

import logging
from typing import List

from sqlalchemy import delete, select

from edward.models.document import Document
from edward.schemas.document import DocumentContentRequest, DocumentPayload, DocumentResponse
from edward.services.chapter_service import chapter_service
from edward.services.plan_service import plan_service
from edward.services.storage import ServerStorage
from edward.services.topic_service import topic_service
from edward.services.upsert import UpsertResult, upsert
from edward.services.workshop_service import workshop_service

logger = logging.getLogger(__name__)


class DocumentService:
    """Business logic for documents and whole-document operations."""

    async def list_documents(self, storage: ServerStorage) -> List[DocumentResponse]:
        """All of the caller's documents, oldest first."""
        result = await storage.db.execute(
            select(Document).where(Document.user_id == storage.user_id).order_by(Document.id)
        )
        return [
            DocumentResponse(id=document.guid, name=document.name)
            for document in result.scalars().all()
        ]

    async def add_document(self, storage: ServerStorage, document: DocumentPayload) -> UpsertResult:
        """Create a document; re-adding an existing guid only renames it."""
        key = {"guid": document.id, "user_id": storage.user_id}
        result = await upsert(
            storage.db,
            Document,
            where=key,
            insert={**key, "name": document.name},
            get_update=lambda stored: {"name": document.name} if stored.name != document.name else None,
        )
        logger.info("Document %s %s", document.id, result.outcome.value)
        return result

    async def update_document(self, storage: ServerStorage, document: DocumentPayload) -> UpsertResult:
        """
        Rename an existing document.

        Raises:
            NotFoundError: no document with that guid belongs to the caller.
        """
        await storage.document(document.id)
        return await upsert(
            storage.db,
            Document,
            where={"guid": document.id, "user_id": storage.user_id},
            insert={"guid": document.id, "user_id": storage.user_id, "name": document.name},
            get_update=lambda stored: {"name": document.name} if stored.name != document.name else None,
        )

    async def delete_document(self, storage: ServerStorage, document_guid: str) -> None:
        """Delete a document and everything it contains."""
        document = await storage.document(document_guid)

        await chapter_service.delete_for_document(storage, document)
        await topic_service.delete_for_document(storage, document)
        await plan_service.delete_for_document(storage, document)
        await workshop_service.delete_for_document(storage, document)

        await storage.db.execute(
            delete(Document).where(Document.id == document.id, Document.user_id == storage.user_id)
        )
        logger.info("Document %s deleted with all content", document_guid)

    async def save_all_content(self, storage: ServerStorage, content: DocumentContentRequest) -> int:
        """
        Save a new document's topics, plans (with sections) and chapters.

        Topics go first so chapter bindings can reference them. Returns the
        number of rows that were inserted or updated.

        Raises:
            NotFoundError: the document has not been added yet.
            UnknownTopicError: a chapter binds a topic absent from the document.
        """
        document_guid = content.file_id
        await storage.document(document_guid)
        changed = 0

        for topic in content.topics:
            result = await topic_service.update_topic(storage, document_guid, topic)
            changed += result.changed

        for plan in content.plans:
            result = await plan_service.update_plan(storage, document_guid, plan)
            changed += result.changed
            for section in plan.sections:
                result = await plan_service.update_section(storage, document_guid, plan.id, section)
                changed += result.changed

        for chapter in content.chapters:
            result = await chapter_service.update_chapter(storage, document_guid, chapter)
            changed += result.changed

        logger.info("Saved all content of document %s (%d rows changed)", document_guid, changed)
        return changed


document_service = DocumentService()
