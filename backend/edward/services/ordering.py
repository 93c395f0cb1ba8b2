"""
Edward Backend — Order Reconciler
===================================

What:  Keeps each container's order record in step with the entities that
       actually live in the container.
Why:   Entities can be created or deleted through paths that never touch the
       order (bulk imports, an interrupted request, an older client). The
       order must never lose a live entity, so every read repairs it.

Operations:
    heal            read-and-repair: prune stale/duplicate guids, append live
                    guids missing from the order, persist if anything changed
    ensure_member   insert path: create the record as [guid] or append guid
    rearrange       overwrite the order with a permutation of itself
    remove          delete path: splice one guid out (absence is fine)
    discard         container deleted: drop the whole record

Sorting:
    sort_by_order orders entities by the index of their guid in the order.
    A guid that is still missing sorts first (index -1) and keeps its
    discovery position relative to other missing guids.
"""

import logging
from typing import Any, Callable, Iterable, List, Optional, Sequence, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from edward.exceptions import InvalidOrderError, NotFoundError
from edward.models.order import OrderRecord
from edward.services.upsert import upsert

logger = logging.getLogger(__name__)

T = TypeVar("T")


def contain_same_elements(first: Any, second: Any) -> bool:
    """
    True when both values are lists of equal length holding the same guids.

    Order lists never contain duplicates once healed, so set equality plus a
    length check is a permutation check for every list this API stores.
    """
    if not isinstance(first, list) or not isinstance(second, list):
        return False
    if len(first) != len(second):
        return False
    return set(first) == set(second)


def sort_by_order(items: Iterable[T], order: Sequence[str], key: Callable[[T], str]) -> List[T]:
    """Stable sort of `items` by the position of `key(item)` within `order`."""
    positions = {guid: index for index, guid in enumerate(order)}
    return sorted(items, key=lambda item: positions.get(key(item), -1))


def reconcile_order(order: Sequence[str], live_guids: Sequence[str]) -> List[str]:
    """
    Return `order` with stale and duplicate guids removed and missing live
    guids appended in the order they were discovered.
    """
    live = set(live_guids)
    healed: List[str] = []
    seen = set()
    for guid in order:
        if guid in live and guid not in seen:
            healed.append(guid)
            seen.add(guid)
    for guid in live_guids:
        if guid not in seen:
            healed.append(guid)
            seen.add(guid)
    return healed


class OrderReconciler:
    """
    Order-record operations for one kind of container.

    One instance per kind (chapter, topic, plan, section); instances hold no
    per-request state and take the session and owner on every call.
    """

    def __init__(self, kind: str):
        self.kind = kind

    def _where(self, user_id: int, owner_guid: str) -> dict:
        return {"kind": self.kind, "owner_guid": owner_guid, "user_id": user_id}

    async def get_record(
        self, db: AsyncSession, user_id: int, owner_guid: str
    ) -> Optional[OrderRecord]:
        result = await db.execute(
            select(OrderRecord).where(
                OrderRecord.kind == self.kind,
                OrderRecord.owner_guid == owner_guid,
                OrderRecord.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_order(self, db: AsyncSession, user_id: int, owner_guid: str) -> List[str]:
        record = await self.get_record(db, user_id, owner_guid)
        return list(record.order or []) if record else []

    async def heal(
        self,
        db: AsyncSession,
        user_id: int,
        owner_guid: str,
        live_guids: Sequence[str],
    ) -> List[str]:
        """
        Repair the stored order against the live guids and return it.

        The repaired order is written back only when it differs from what was
        stored, so a healthy container costs a single read.
        """
        record = await self.get_record(db, user_id, owner_guid)
        stored = list(record.order or []) if record else []
        healed = reconcile_order(stored, live_guids)

        if healed == stored and record is not None:
            return healed
        if record is None and not healed:
            return healed

        missing = [guid for guid in healed if guid not in stored]
        if missing:
            logger.info(
                "Order %s/%s was missing %d live item(s); appending",
                self.kind, owner_guid, len(missing),
            )

        await upsert(
            db,
            OrderRecord,
            where=self._where(user_id, owner_guid),
            insert={**self._where(user_id, owner_guid), "order": healed},
            update={"order": healed},
        )
        return healed

    async def ensure_member(
        self, db: AsyncSession, user_id: int, owner_guid: str, guid: str
    ) -> bool:
        """Make sure an order record exists for the container and lists `guid`.

        Returns True when the record was created or extended.
        """

        def append_if_missing(record: OrderRecord) -> Optional[dict]:
            order = list(record.order or [])
            if guid in order:
                return None
            order.append(guid)
            return {"order": order}

        result = await upsert(
            db,
            OrderRecord,
            where=self._where(user_id, owner_guid),
            insert={**self._where(user_id, owner_guid), "order": [guid]},
            get_update=append_if_missing,
        )
        return result.changed

    async def rearrange(
        self,
        db: AsyncSession,
        user_id: int,
        owner_guid: str,
        candidate: Any,
    ) -> List[str]:
        """
        Replace the stored order with `candidate`, which must be a permutation of it.

        `candidate` arrives from the client as-is; anything other than a list
        of guid strings is rejected like any other bad permutation.

        Raises:
            NotFoundError: the container has no order record yet.
            InvalidOrderError: `candidate` is not a permutation of the stored order.
        """
        record = await self.get_record(db, user_id, owner_guid)
        if record is None:
            raise NotFoundError(resource=f"{self.kind} order", resource_id=owner_guid)

        if isinstance(candidate, tuple):
            candidate = list(candidate)
        is_guid_list = isinstance(candidate, list) and all(isinstance(guid, str) for guid in candidate)
        if not is_guid_list or not contain_same_elements(list(record.order or []), candidate):
            logger.warning("Rejected %s rearrange for %s", self.kind, owner_guid)
            raise InvalidOrderError(kind=self.kind, context={"owner_guid": owner_guid})

        await upsert(
            db,
            OrderRecord,
            where=self._where(user_id, owner_guid),
            insert={**self._where(user_id, owner_guid), "order": candidate},
            update={"order": candidate},
        )
        return candidate

    async def remove(
        self, db: AsyncSession, user_id: int, owner_guid: str, guid: str
    ) -> None:
        """Splice `guid` out of the order. Missing record or guid is a no-op."""
        record = await self.get_record(db, user_id, owner_guid)
        if record is None:
            return

        order = list(record.order or [])
        if guid not in order:
            return

        order = [existing for existing in order if existing != guid]
        await upsert(
            db,
            OrderRecord,
            where=self._where(user_id, owner_guid),
            insert={**self._where(user_id, owner_guid), "order": order},
            update={"order": order},
        )

    async def discard(self, db: AsyncSession, user_id: int, owner_guid: str) -> None:
        await db.execute(
            delete(OrderRecord).where(
                OrderRecord.kind == self.kind,
                OrderRecord.owner_guid == owner_guid,
                OrderRecord.user_id == user_id,
            )
        )
