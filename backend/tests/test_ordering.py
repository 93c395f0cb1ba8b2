"""
Edward Backend — Order Reconciler Tests
=========================================

What we test:
    ✅ contain_same_elements / sort_by_order / reconcile_order (pure)
    ✅ heal appends missing live guids and persists the repair
    ✅ heal leaves a healthy order alone and prunes stale guids
    ✅ ensure_member creates or appends, never duplicates
    ✅ rearrange accepts permutations only; rejected orders stay unchanged
    ✅ remove splices one guid; absent guid or record is a no-op
"""

from unittest.mock import AsyncMock, patch

import pytest

from edward.exceptions import InvalidOrderError, NotFoundError
from edward.models.order import OrderKind
from edward.services.ordering import (
    OrderReconciler,
    contain_same_elements,
    reconcile_order,
    sort_by_order,
)

orders = OrderReconciler(OrderKind.CHAPTER)


class TestContainSameElements:

    def test_permutation(self):
        assert contain_same_elements(["a", "b", "c"], ["c", "a", "b"])

    def test_different_length(self):
        assert not contain_same_elements(["a", "b"], ["a", "b", "b"])

    def test_different_elements(self):
        assert not contain_same_elements(["a", "b"], ["a", "c"])

    def test_non_lists(self):
        assert not contain_same_elements(["a"], "a")
        assert not contain_same_elements(None, [])

    def test_empty(self):
        assert contain_same_elements([], [])


class TestSortByOrder:

    def test_sorts_by_position(self):
        items = [{"id": "c"}, {"id": "a"}, {"id": "b"}]
        result = sort_by_order(items, ["a", "b", "c"], key=lambda item: item["id"])
        assert [item["id"] for item in result] == ["a", "b", "c"]

    def test_missing_ids_sort_first_in_discovery_order(self):
        items = [{"id": "a"}, {"id": "x"}, {"id": "b"}, {"id": "y"}]
        result = sort_by_order(items, ["b", "a"], key=lambda item: item["id"])
        assert [item["id"] for item in result] == ["x", "y", "b", "a"]


class TestReconcileOrder:

    def test_appends_missing(self):
        assert reconcile_order(["a", "b"], ["a", "b", "c"]) == ["a", "b", "c"]

    def test_prunes_stale_and_duplicates(self):
        assert reconcile_order(["a", "gone", "b", "a"], ["b", "a"]) == ["a", "b"]

    def test_keeps_healthy_order(self):
        assert reconcile_order(["b", "a"], ["a", "b"]) == ["b", "a"]


class TestHeal:

    @pytest.mark.asyncio
    async def test_appends_directly_inserted_item_and_persists(self, db_session, premium_user):
        uid = premium_user.id
        await orders.ensure_member(db_session, uid, "doc-1", "a")
        await orders.ensure_member(db_session, uid, "doc-1", "b")

        healed = await orders.heal(db_session, uid, "doc-1", ["a", "b", "c"])

        assert healed == ["a", "b", "c"]
        assert await orders.get_order(db_session, uid, "doc-1") == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_creates_record_for_unordered_container(self, db_session, premium_user):
        healed = await orders.heal(db_session, premium_user.id, "doc-1", ["x", "y"])

        assert healed == ["x", "y"]
        assert await orders.get_order(db_session, premium_user.id, "doc-1") == ["x", "y"]

    @pytest.mark.asyncio
    async def test_empty_container_without_record_writes_nothing(self, db_session, premium_user):
        healed = await orders.heal(db_session, premium_user.id, "doc-1", [])

        assert healed == []
        assert await orders.get_record(db_session, premium_user.id, "doc-1") is None

    @pytest.mark.asyncio
    async def test_healthy_order_is_not_rewritten(self, db_session, premium_user):
        uid = premium_user.id
        await orders.ensure_member(db_session, uid, "doc-1", "a")

        with patch("edward.services.ordering.upsert", new=AsyncMock()) as mock_upsert:
            healed = await orders.heal(db_session, uid, "doc-1", ["a"])

        assert healed == ["a"]
        mock_upsert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_prunes_deleted_items(self, db_session, premium_user):
        uid = premium_user.id
        for guid in ("a", "b", "c"):
            await orders.ensure_member(db_session, uid, "doc-1", guid)

        healed = await orders.heal(db_session, uid, "doc-1", ["a", "c"])

        assert healed == ["a", "c"]

    @pytest.mark.asyncio
    async def test_owners_and_kinds_are_separate(self, db_session, premium_user):
        uid = premium_user.id
        await orders.ensure_member(db_session, uid, "doc-1", "a")
        await OrderReconciler(OrderKind.TOPIC).ensure_member(db_session, uid, "doc-1", "t")
        await orders.ensure_member(db_session, uid, "doc-2", "z")

        assert await orders.get_order(db_session, uid, "doc-1") == ["a"]
        assert await OrderReconciler(OrderKind.TOPIC).get_order(db_session, uid, "doc-1") == ["t"]


class TestEnsureMember:

    @pytest.mark.asyncio
    async def test_no_duplicates(self, db_session, premium_user):
        uid = premium_user.id
        created = await orders.ensure_member(db_session, uid, "doc-1", "a")
        repeated = await orders.ensure_member(db_session, uid, "doc-1", "a")
        appended = await orders.ensure_member(db_session, uid, "doc-1", "b")

        assert (created, repeated, appended) == (True, False, True)
        assert await orders.get_order(db_session, uid, "doc-1") == ["a", "b"]


class TestRearrange:

    @pytest.mark.asyncio
    async def test_permutation_is_stored(self, db_session, premium_user):
        uid = premium_user.id
        await orders.ensure_member(db_session, uid, "doc-1", "a")
        await orders.ensure_member(db_session, uid, "doc-1", "b")

        await orders.rearrange(db_session, uid, "doc-1", ["b", "a"])

        assert await orders.heal(db_session, uid, "doc-1", ["a", "b"]) == ["b", "a"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "candidate",
        [["a"], ["a", "b", "c"], ["a", "c"], ["a", "a"], None, "ab", [1, 2], [{"a": 1}, "b"], {"a": 0, "b": 1}],
    )
    async def test_rejects_non_permutation(self, db_session, premium_user, candidate):
        uid = premium_user.id
        await orders.ensure_member(db_session, uid, "doc-1", "a")
        await orders.ensure_member(db_session, uid, "doc-1", "b")

        with pytest.raises(InvalidOrderError) as exc_info:
            await orders.rearrange(db_session, uid, "doc-1", candidate)

        assert exc_info.value.message == "Cannot rearrange chapters: an invalid chapter array was received."
        assert await orders.get_order(db_session, uid, "doc-1") == ["a", "b"]

    @pytest.mark.asyncio
    async def test_missing_record_is_not_found(self, db_session, premium_user):
        with pytest.raises(NotFoundError):
            await orders.rearrange(db_session, premium_user.id, "doc-1", [])


class TestRemove:

    @pytest.mark.asyncio
    async def test_removes_only_that_guid(self, db_session, premium_user):
        uid = premium_user.id
        for guid in ("a", "b", "c"):
            await orders.ensure_member(db_session, uid, "doc-1", guid)

        await orders.remove(db_session, uid, "doc-1", "b")

        assert await orders.get_order(db_session, uid, "doc-1") == ["a", "c"]

    @pytest.mark.asyncio
    async def test_absent_guid_and_record_are_noops(self, db_session, premium_user):
        uid = premium_user.id
        await orders.remove(db_session, uid, "doc-1", "a")
        await orders.ensure_member(db_session, uid, "doc-1", "a")

        await orders.remove(db_session, uid, "doc-1", "zzz")

        assert await orders.get_order(db_session, uid, "doc-1") == ["a"]

    @pytest.mark.asyncio
    async def test_discard_drops_record(self, db_session, premium_user):
        uid = premium_user.id
        await orders.ensure_member(db_session, uid, "doc-1", "a")

        await orders.discard(db_session, uid, "doc-1")

        assert await orders.get_record(db_session, uid, "doc-1") is None
