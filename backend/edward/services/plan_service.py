"""
Edward Backend — Plan & Section Service
=========================================

What:  Plans (ordered within a document) and sections (ordered within a plan).
Why:   Two levels of order records: the plan order is keyed by the document
       guid, each section order by document and plan guid together, since a
       plan guid is only unique within its document. A fetch heals both levels.

Fetch Flow (GET /api/plans/{document_id}):
    1. Load plans, heal the plan order
    2. Load sections of all plans in one query, grouped by plan
    3. Heal each plan's section order, sort its sections
    4. Sort plans by the plan order
"""

import logging
from collections import defaultdict
from typing import Dict, List

from sqlalchemy import delete, select

from edward.models.document import Document
from edward.models.order import OrderKind
from edward.models.plan import Plan, Section
from edward.schemas.plan import PlanPayload, PlanResponse, SectionPayload, SectionResponse
from edward.services.ordering import OrderReconciler, sort_by_order
from edward.services.storage import ServerStorage
from edward.services.upsert import UpsertResult, upsert

logger = logging.getLogger(__name__)

plan_orders = OrderReconciler(OrderKind.PLAN)
section_orders = OrderReconciler(OrderKind.SECTION)


def section_owner(document_guid: str, plan_guid: str) -> str:
    """Owner key of a plan's section order."""
    return f"{document_guid}/{plan_guid}"


class PlanService:
    """Business logic for plans and their sections."""

    # ── Plans ─────────────────────────────────────────────────────────────

    async def get_plans(self, storage: ServerStorage, document_guid: str) -> List[PlanResponse]:
        """Return the document's plans in order, each with its sections in order."""
        db, user_id = storage.db, storage.user_id
        document = await storage.document(document_guid)

        result = await db.execute(
            select(Plan)
            .where(Plan.user_id == user_id, Plan.document_id == document.id)
            .order_by(Plan.id)
        )
        plans = list(result.scalars().all())
        plan_order = await plan_orders.heal(db, user_id, document_guid, [p.guid for p in plans])

        sections_by_plan: Dict[int, List[Section]] = defaultdict(list)
        if plans:
            result = await db.execute(
                select(Section)
                .where(Section.user_id == user_id, Section.plan_id.in_([p.id for p in plans]))
                .order_by(Section.id)
            )
            for section in result.scalars().all():
                sections_by_plan[section.plan_id].append(section)

        responses = []
        for plan in plans:
            sections = sections_by_plan.get(plan.id, [])
            section_order = await section_orders.heal(
                db, user_id, section_owner(document_guid, plan.guid), [s.guid for s in sections]
            )
            section_responses = [self._section_response(s) for s in sections]
            responses.append(
                PlanResponse(
                    id=plan.guid,
                    title=plan.title,
                    archived=plan.archived,
                    sections=sort_by_order(section_responses, section_order, key=lambda s: s.id),
                )
            )

        return sort_by_order(responses, plan_order, key=lambda p: p.id)

    @staticmethod
    def _section_response(section: Section) -> SectionResponse:
        return SectionResponse(
            id=section.guid,
            title=section.title,
            archived=section.archived,
            content=section.content,
            tags=list(section.tags or []),
        )

    async def update_plan(
        self, storage: ServerStorage, document_guid: str, plan: PlanPayload
    ) -> UpsertResult:
        """Create or update a plan's own fields. Sections are saved separately."""
        db, user_id = storage.db, storage.user_id
        document = await storage.document(document_guid)

        def changes(stored: Plan) -> dict:
            update = {}
            if stored.title != plan.title:
                update["title"] = plan.title
            if stored.archived != plan.archived:
                update["archived"] = plan.archived
            return update

        result = await upsert(
            db,
            Plan,
            where={"guid": plan.id, "document_id": document.id, "user_id": user_id},
            insert={
                "guid": plan.id,
                "document_id": document.id,
                "user_id": user_id,
                "title": plan.title,
                "archived": plan.archived,
            },
            get_update=changes,
        )
        await plan_orders.ensure_member(db, user_id, document_guid, plan.id)

        logger.info("Plan %s %s", plan.id, result.outcome.value)
        return result

    async def arrange_plans(
        self, storage: ServerStorage, document_guid: str, plan_ids: List[str]
    ) -> List[str]:
        await storage.document(document_guid)
        return await plan_orders.rearrange(storage.db, storage.user_id, document_guid, plan_ids)

    async def delete_plan(self, storage: ServerStorage, document_guid: str, plan_guid: str) -> None:
        """Delete a plan with all of its sections and both order entries."""
        db, user_id = storage.db, storage.user_id
        document = await storage.document(document_guid)

        plan_ids = select(Plan.id).where(
            Plan.guid == plan_guid,
            Plan.document_id == document.id,
            Plan.user_id == user_id,
        )
        await db.execute(
            delete(Section).where(Section.user_id == user_id, Section.plan_id.in_(plan_ids))
        )
        await db.execute(
            delete(Plan).where(
                Plan.guid == plan_guid,
                Plan.document_id == document.id,
                Plan.user_id == user_id,
            )
        )
        await section_orders.discard(db, user_id, section_owner(document_guid, plan_guid))
        await plan_orders.remove(db, user_id, document_guid, plan_guid)
        logger.info("Plan %s deleted from document %s", plan_guid, document_guid)

    async def delete_for_document(self, storage: ServerStorage, document: Document) -> None:
        db, user_id = storage.db, storage.user_id
        result = await db.execute(
            select(Plan.guid).where(Plan.document_id == document.id, Plan.user_id == user_id)
        )
        for plan_guid in result.scalars().all():
            await section_orders.discard(db, user_id, section_owner(document.guid, plan_guid))

        plan_ids = select(Plan.id).where(Plan.document_id == document.id, Plan.user_id == user_id)
        await db.execute(
            delete(Section).where(Section.user_id == user_id, Section.plan_id.in_(plan_ids))
        )
        await db.execute(
            delete(Plan).where(Plan.document_id == document.id, Plan.user_id == user_id)
        )
        await plan_orders.discard(db, user_id, document.guid)

    # ── Sections ──────────────────────────────────────────────────────────

    async def update_section(
        self,
        storage: ServerStorage,
        document_guid: str,
        plan_guid: str,
        section: SectionPayload,
    ) -> UpsertResult:
        """Create or update a section of a plan; content and tags compared by value."""
        db, user_id = storage.db, storage.user_id
        document = await storage.document(document_guid)
        plan = await storage.plan(document, plan_guid)

        def changes(stored: Section) -> dict:
            update = {}
            if stored.title != section.title:
                update["title"] = section.title
            if stored.archived != section.archived:
                update["archived"] = section.archived
            if stored.content != section.content:
                update["content"] = section.content
            if list(stored.tags or []) != section.tags:
                update["tags"] = section.tags
            return update

        result = await upsert(
            db,
            Section,
            where={"guid": section.id, "plan_id": plan.id, "user_id": user_id},
            insert={
                "guid": section.id,
                "plan_id": plan.id,
                "user_id": user_id,
                "title": section.title,
                "archived": section.archived,
                "content": section.content,
                "tags": section.tags,
            },
            get_update=changes,
        )
        await section_orders.ensure_member(
            db, user_id, section_owner(document_guid, plan_guid), section.id
        )

        logger.info("Section %s %s", section.id, result.outcome.value)
        return result

    async def arrange_sections(
        self,
        storage: ServerStorage,
        document_guid: str,
        plan_guid: str,
        section_ids: List[str],
    ) -> List[str]:
        document = await storage.document(document_guid)
        await storage.plan(document, plan_guid)
        return await section_orders.rearrange(
            storage.db, storage.user_id, section_owner(document_guid, plan_guid), section_ids
        )

    async def delete_section(
        self,
        storage: ServerStorage,
        document_guid: str,
        plan_guid: str,
        section_guid: str,
    ) -> None:
        db, user_id = storage.db, storage.user_id
        document = await storage.document(document_guid)
        plan = await storage.plan(document, plan_guid)

        await db.execute(
            delete(Section).where(
                Section.guid == section_guid,
                Section.plan_id == plan.id,
                Section.user_id == user_id,
            )
        )
        await section_orders.remove(
            db, user_id, section_owner(document_guid, plan_guid), section_guid
        )
        logger.info("Section %s deleted from plan %s", section_guid, plan_guid)


plan_service = PlanService()
