"""
Edward Backend — Workshop Service
===================================

What:  Batch upsert, fetch and delete for a document's workshops.
Why:   The editor saves every workshop touched in one go (a finished plot
       worksheet produces several rows), so updates arrive as a list.
       Workshops order themselves by their own `position` field; there is
       no order record to reconcile.
"""

import logging
from typing import List

from sqlalchemy import delete, select

from edward.models.document import Document
from edward.models.workshop import Workshop
from edward.schemas.workshop import WorkshopPayload, WorkshopResponse
from edward.services.storage import ServerStorage
from edward.services.upsert import UpsertResult, upsert

logger = logging.getLogger(__name__)


class WorkshopService:

    async def get_workshops(self, storage: ServerStorage, document_guid: str) -> List[WorkshopResponse]:
        document = await storage.document(document_guid)
        result = await storage.db.execute(
            select(Workshop)
            .where(Workshop.user_id == storage.user_id, Workshop.document_id == document.id)
            .order_by(Workshop.workshop_name, Workshop.position, Workshop.date, Workshop.id)
        )
        return [
            WorkshopResponse(
                id=workshop.guid,
                title=workshop.title,
                workshop_name=workshop.workshop_name,
                order=workshop.position,
                content=workshop.content,
                date=workshop.date,
                archived=workshop.archived,
            )
            for workshop in result.scalars().all()
        ]

    async def update_workshops(
        self,
        storage: ServerStorage,
        document_guid: str,
        workshops: List[WorkshopPayload],
    ) -> List[UpsertResult]:
        """Upsert each workshop in submission order; one result per workshop."""
        document = await storage.document(document_guid)
        results = []
        for workshop in workshops:
            results.append(await self._upsert_workshop(storage, document, workshop))

        changed = sum(1 for result in results if result.changed)
        logger.info(
            "Saved %d workshop(s) for document %s (%d changed)",
            len(results), document_guid, changed,
        )
        return results

    async def _upsert_workshop(
        self, storage: ServerStorage, document: Document, workshop: WorkshopPayload
    ) -> UpsertResult:
        fields = {
            "title": workshop.title,
            "workshop_name": workshop.workshop_name,
            "position": workshop.order,
            "content": workshop.content,
            "date": workshop.date,
            "archived": workshop.archived,
        }

        def changes(stored: Workshop) -> dict:
            update = {}
            for name, value in fields.items():
                current = getattr(stored, name)
                # SQLite drops tzinfo on read; compare dates on their naive value
                if name == "date" and current is not None and value is not None:
                    if current.replace(tzinfo=None) == value.replace(tzinfo=None):
                        continue
                if current != value:
                    update[name] = value
            return update

        key = {"guid": workshop.id, "document_id": document.id, "user_id": storage.user_id}
        return await upsert(
            storage.db,
            Workshop,
            where=key,
            insert={**key, **fields},
            get_update=changes,
        )

    async def delete_workshop(self, storage: ServerStorage, document_guid: str, workshop_guid: str) -> None:
        document = await storage.document(document_guid)
        await storage.db.execute(
            delete(Workshop).where(
                Workshop.guid == workshop_guid,
                Workshop.document_id == document.id,
                Workshop.user_id == storage.user_id,
            )
        )
        logger.info("Workshop %s deleted from document %s", workshop_guid, document_guid)

    async def delete_for_document(self, storage: ServerStorage, document: Document) -> None:
        await storage.db.execute(
            delete(Workshop).where(
                Workshop.document_id == document.id,
                Workshop.user_id == storage.user_id,
            )
        )


workshop_service = WorkshopService()
