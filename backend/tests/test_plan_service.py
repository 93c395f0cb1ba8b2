"""
Edward Backend — Plan & Section Service Tests
===============================================

What we test:
    ✅ Plans and sections are fetched nested, each level in its own order
    ✅ Section orders are keyed by document and plan guid, healed on fetch
    ✅ Plan rearrange accepts permutations only and keeps the order on rejection
    ✅ Section tags and content are compared by value
    ✅ Deleting a plan removes its sections and both order entries
    ✅ Section operations on an unknown plan raise NotFoundError
"""

import pytest
from sqlalchemy import func, select

from edward.exceptions import InvalidOrderError, NotFoundError
from edward.models.plan import Section
from edward.schemas.document import DocumentPayload
from edward.schemas.plan import PlanPayload, SectionPayload
from edward.services.document_service import document_service
from edward.services.plan_service import plan_orders, plan_service, section_orders, section_owner
from edward.services.upsert import UpsertOutcome

P1_SECTIONS = section_owner("doc-1", "p1")


async def _add_plan(storage, guid, *section_guids, document_guid="doc-1"):
    await plan_service.update_plan(storage, document_guid, PlanPayload(id=guid, title=guid.upper()))
    for section_guid in section_guids:
        await plan_service.update_section(
            storage, document_guid, guid, SectionPayload(id=section_guid, title=section_guid, tags=["draft"])
        )


class TestGetPlans:

    @pytest.mark.asyncio
    async def test_nested_and_ordered(self, storage, document):
        await _add_plan(storage, "p1", "s1", "s2")
        await _add_plan(storage, "p2", "s3")

        await plan_service.arrange_plans(storage, "doc-1", ["p2", "p1"])
        await plan_service.arrange_sections(storage, "doc-1", "p1", ["s2", "s1"])
        plans = await plan_service.get_plans(storage, "doc-1")

        assert [p.id for p in plans] == ["p2", "p1"]
        assert [s.id for s in plans[1].sections] == ["s2", "s1"]
        assert [s.id for s in plans[0].sections] == ["s3"]
        assert plans[1].sections[0].tags == ["draft"]

    @pytest.mark.asyncio
    async def test_heals_missing_section(self, storage, document):
        await _add_plan(storage, "p1", "s1")
        plan = await storage.plan(document, "p1")
        storage.db.add(Section(guid="s-direct", plan_id=plan.id, user_id=storage.user_id, title="x"))
        await storage.db.flush()

        plans = await plan_service.get_plans(storage, "doc-1")

        assert [s.id for s in plans[0].sections] == ["s1", "s-direct"]
        assert await section_orders.get_order(storage.db, storage.user_id, P1_SECTIONS) == ["s1", "s-direct"]


class TestUpdateSection:

    @pytest.mark.asyncio
    async def test_same_section_twice_is_unchanged(self, storage, document):
        await _add_plan(storage, "p1")
        payload = SectionPayload(id="s1", title="Beat", content={"ops": []}, tags=["a", "b"])

        await plan_service.update_section(storage, "doc-1", "p1", payload)
        result = await plan_service.update_section(storage, "doc-1", "p1", payload)

        assert result.outcome is UpsertOutcome.UNCHANGED
        assert await section_orders.get_order(storage.db, storage.user_id, P1_SECTIONS) == ["s1"]

    @pytest.mark.asyncio
    async def test_tag_change_updates(self, storage, document):
        await _add_plan(storage, "p1", "s1")

        result = await plan_service.update_section(
            storage, "doc-1", "p1", SectionPayload(id="s1", title="s1", tags=["final"])
        )

        assert result.outcome is UpsertOutcome.UPDATED
        plans = await plan_service.get_plans(storage, "doc-1")
        assert plans[0].sections[0].tags == ["final"]

    @pytest.mark.asyncio
    async def test_unknown_plan_is_not_found(self, storage, document):
        with pytest.raises(NotFoundError):
            await plan_service.update_section(storage, "doc-1", "ghost", SectionPayload(id="s1"))


class TestArrange:

    @pytest.mark.asyncio
    async def test_plan_permutation_is_stored(self, storage, document):
        await _add_plan(storage, "p1")
        await _add_plan(storage, "p2")

        await plan_service.arrange_plans(storage, "doc-1", ["p2", "p1"])

        plans = await plan_service.get_plans(storage, "doc-1")
        assert [p.id for p in plans] == ["p2", "p1"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("candidate", [["p1"], ["p1", "p9"], ["p1", "p2", "p2"]])
    async def test_rejected_plan_order_is_unchanged(self, storage, document, candidate):
        await _add_plan(storage, "p1")
        await _add_plan(storage, "p2")

        with pytest.raises(InvalidOrderError):
            await plan_service.arrange_plans(storage, "doc-1", candidate)

        assert await plan_orders.get_order(storage.db, storage.user_id, "doc-1") == ["p1", "p2"]

    @pytest.mark.asyncio
    async def test_rejected_section_order_is_unchanged(self, storage, document):
        await _add_plan(storage, "p1", "s1", "s2")

        with pytest.raises(InvalidOrderError):
            await plan_service.arrange_sections(storage, "doc-1", "p1", ["s1"])

        assert await section_orders.get_order(storage.db, storage.user_id, P1_SECTIONS) == ["s1", "s2"]


class TestDelete:

    @pytest.mark.asyncio
    async def test_delete_plan_cascades(self, storage, document):
        await _add_plan(storage, "p1", "s1", "s2")
        await _add_plan(storage, "p2", "s3")

        await plan_service.delete_plan(storage, "doc-1", "p1")

        assert await plan_orders.get_order(storage.db, storage.user_id, "doc-1") == ["p2"]
        assert await section_orders.get_record(storage.db, storage.user_id, P1_SECTIONS) is None
        remaining = await storage.db.scalar(select(func.count()).select_from(Section))
        assert remaining == 1

    @pytest.mark.asyncio
    async def test_delete_section(self, storage, document):
        await _add_plan(storage, "p1", "s1", "s2")

        await plan_service.delete_section(storage, "doc-1", "p1", "s1")

        plans = await plan_service.get_plans(storage, "doc-1")
        assert [s.id for s in plans[0].sections] == ["s2"]
        assert await section_orders.get_order(storage.db, storage.user_id, P1_SECTIONS) == ["s2"]


class TestSharedPlanGuid:

    @pytest.mark.asyncio
    async def test_same_plan_guid_in_two_documents_keeps_separate_orders(self, storage, document):
        await document_service.add_document(storage, DocumentPayload(id="doc-2", name="Sequel"))
        await _add_plan(storage, "p1", "s1", "s2")
        await _add_plan(storage, "p1", "t1", document_guid="doc-2")

        doc2_plans = await plan_service.get_plans(storage, "doc-2")
        await plan_service.arrange_sections(storage, "doc-1", "p1", ["s2", "s1"])
        doc1_plans = await plan_service.get_plans(storage, "doc-1")

        assert [s.id for s in doc2_plans[0].sections] == ["t1"]
        assert [s.id for s in doc1_plans[0].sections] == ["s2", "s1"]
        assert await section_orders.get_order(
            storage.db, storage.user_id, section_owner("doc-2", "p1")
        ) == ["t1"]

    @pytest.mark.asyncio
    async def test_deleting_one_plan_leaves_the_other_documents_sections(self, storage, document):
        await document_service.add_document(storage, DocumentPayload(id="doc-2", name="Sequel"))
        await _add_plan(storage, "p1", "s1")
        await _add_plan(storage, "p1", "t1", document_guid="doc-2")

        await plan_service.delete_plan(storage, "doc-1", "p1")

        plans = await plan_service.get_plans(storage, "doc-2")
        assert [s.id for s in plans[0].sections] == ["t1"]
        assert await section_orders.get_order(
            storage.db, storage.user_id, section_owner("doc-2", "p1")
        ) == ["t1"]
