"""
Edward Backend — Upsert Engine
================================

What:  Conditional create-or-update keyed on a natural-key predicate.
Why:   The editor autosaves constantly and replays saves after reconnecting,
       so every write endpoint must be idempotent: the same payload submitted
       twice produces one row and, the second time, no write at all.
How:   1. Look the row up by its natural key.
       2. Missing → INSERT ... ON CONFLICT (natural key) DO NOTHING RETURNING id.
          If another request inserted the same key first, nothing is returned;
          the row is read again and the update path runs instead.
       3. Present → compute the update (static dict or `get_update(row)`),
          apply it only if it is non-empty.

Outcomes:
    INSERTED   new row, new surrogate key
    UPDATED    existing row changed, existing key
    UNCHANGED  computed update was empty, existing key, nothing written

The natural key is the model's `__natural_key__` tuple, which must match a
unique constraint on the table.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

from sqlalchemy import insert as sa_insert, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from edward.database import utcnow
from edward.exceptions import DatabaseError, InvalidArgumentsError

logger = logging.getLogger(__name__)

UpdateFactory = Callable[[Any], Optional[Mapping[str, Any]]]


class UpsertOutcome(str, enum.Enum):
    INSERTED = "inserted"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class UpsertResult:
    """Surrogate key of the affected row and which branch was taken."""

    id: int
    outcome: UpsertOutcome

    @property
    def changed(self) -> bool:
        return self.outcome is not UpsertOutcome.UNCHANGED


def _conflict_insert(dialect_name: str, model: Any, values: Mapping[str, Any]):
    table = model.__table__
    natural_key = list(getattr(model, "__natural_key__", ()))

    if dialect_name == "postgresql" and natural_key:
        stmt = pg_insert(table).values(**values).on_conflict_do_nothing(
            index_elements=natural_key
        )
    elif dialect_name == "sqlite" and natural_key:
        stmt = sqlite_insert(table).values(**values).on_conflict_do_nothing(
            index_elements=natural_key
        )
    else:
        # No portable conflict clause; the unique constraint still rejects
        # the loser of a race, which then surfaces as a database error.
        stmt = sa_insert(table).values(**values)

    return stmt.returning(table.c.id)


async def _find(db: AsyncSession, model: Any, where: Mapping[str, Any]):
    conditions = [getattr(model, column) == value for column, value in where.items()]
    result = await db.execute(select(model).where(*conditions).limit(1))
    return result.scalar_one_or_none()


async def upsert(
    db: AsyncSession,
    model: Any,
    *,
    where: Optional[Mapping[str, Any]] = None,
    insert: Optional[Mapping[str, Any]] = None,
    update: Optional[Mapping[str, Any]] = None,
    get_update: Optional[UpdateFactory] = None,
) -> UpsertResult:
    """
    Insert the row identified by `where`, or update it if it already exists.

    Args:
        db:         Request-scoped session; nothing is committed here.
        model:      ORM class declaring `__natural_key__`.
        where:      Natural-key predicate as {attribute: value}.
        insert:     Column values for a brand new row.
        update:     Static changes for an existing row.
        get_update: Called with the stored row; returns the changes to apply,
                    or an empty/None value when nothing differs.

    Returns:
        UpsertResult with the row's surrogate key and the outcome.

    Raises:
        InvalidArgumentsError: model, where, insert, or both update forms missing.
        DatabaseError: the conflict branch found no row to update.
    """
    if model is None or not where or not insert or (update is None and get_update is None):
        raise InvalidArgumentsError(
            context={
                "model": getattr(model, "__name__", None),
                "has_where": bool(where),
                "has_insert": bool(insert),
            }
        )

    row = await _find(db, model, where)

    if row is None:
        dialect_name = db.get_bind().dialect.name
        result = await db.execute(_conflict_insert(dialect_name, model, insert))
        new_id = result.scalar_one_or_none()
        if new_id is not None:
            logger.debug("Inserted %s id=%s", model.__name__, new_id)
            return UpsertResult(id=new_id, outcome=UpsertOutcome.INSERTED)

        # Lost the race to a concurrent insert of the same natural key
        logger.info("Concurrent insert detected for %s %s; updating instead", model.__name__, dict(where))
        row = await _find(db, model, where)
        if row is None:
            raise DatabaseError(
                message="Could not save the item. Please try again.",
                context={"model": model.__name__, "where": dict(where)},
            )

    changes: Dict[str, Any] = dict(update if update is not None else (get_update(row) or {}))
    if not changes:
        return UpsertResult(id=row.id, outcome=UpsertOutcome.UNCHANGED)

    if hasattr(model, "updated_at"):
        changes.setdefault("updated_at", utcnow())

    for attribute, value in changes.items():
        setattr(row, attribute, value)
    await db.flush()

    return UpsertResult(id=row.id, outcome=UpsertOutcome.UPDATED)
