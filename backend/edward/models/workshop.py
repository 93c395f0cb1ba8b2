"""
Edward Backend — Workshop Model
=================================

What:  The `workshops` table. A workshop is a guided writing exercise
       (free writing, plot worksheet...) saved against a document.
Why:   Workshops are grouped by `workshop_name` and ordered by `position`
       within that group, so they carry their own numeric order and do not
       use an order record.
"""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from edward.database import Base
from edward.models.mixins import TimestampMixin


class Workshop(Base, TimestampMixin):
    __tablename__ = "workshops"
    __natural_key__ = ("guid", "document_id", "user_id")

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    guid: Mapped[str] = mapped_column(String(64), nullable=False)
    document_id: Mapped[int] = mapped_column(
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    workshop_name: Mapped[str] = mapped_column(String(100), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    content: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint("guid", "document_id", "user_id", name="uq_workshops_natural_key"),
    )

    def __repr__(self) -> str:
        return f"<Workshop(id={self.id}, name='{self.workshop_name}')>"
