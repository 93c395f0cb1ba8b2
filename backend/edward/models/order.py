"""
Edward Backend — Order Record Model
=====================================

What:  The `order_records` table: one ordered list of entity guids per
       (kind, container, owner).
Why:   Entities are stored unordered; the display order of chapters, topics,
       plans and sections lives here as a JSON array so that a drag-and-drop
       rearrange is a single-row write.

Kinds:
    chapter  owner_guid = document guid
    topic    owner_guid = document guid
    plan     owner_guid = document guid
    section  owner_guid = "<document guid>/<plan guid>" (plan guids are only
             unique within a document)

The list may briefly hold guids of deleted entities or miss freshly created
ones; the reconciler repairs both on the next read.
"""

from typing import List

from sqlalchemy import JSON, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from edward.database import Base
from edward.models.mixins import TimestampMixin


class OrderKind:
    CHAPTER = "chapter"
    TOPIC = "topic"
    PLAN = "plan"
    SECTION = "section"


class OrderRecord(Base, TimestampMixin):
    __tablename__ = "order_records"
    __natural_key__ = ("kind", "owner_guid", "user_id")

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    kind: Mapped[str] = mapped_column(String(20), nullable=False)
    owner_guid: Mapped[str] = mapped_column(String(160), nullable=False)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    order: Mapped[List[str]] = mapped_column("order", JSON, nullable=False, default=list)

    __table_args__ = (
        UniqueConstraint("kind", "owner_guid", "user_id", name="uq_order_records_natural_key"),
    )

    def __repr__(self) -> str:
        return (
            f"<OrderRecord(kind='{self.kind}', owner_guid='{self.owner_guid}', "
            f"size={len(self.order or [])})>"
        )
