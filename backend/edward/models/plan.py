"""
Edward Backend — Plan & Section Models
========================================

What:  ORM models for plans (document-level outlines) and their sections.
Why:   Sections are ordered within their plan the same way chapters are
       ordered within a document, so a plan is itself an order container.
"""

from typing import Any, List, Optional

from sqlalchemy import JSON, Boolean, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from edward.database import Base
from edward.models.mixins import TimestampMixin


class Plan(Base, TimestampMixin):
    __tablename__ = "plans"
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
    archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint("guid", "document_id", "user_id", name="uq_plans_natural_key"),
    )

    def __repr__(self) -> str:
        return f"<Plan(id={self.id}, guid='{self.guid}')>"


class Section(Base, TimestampMixin):
    """A section of a plan. Tags are free-form strings chosen by the author."""

    __tablename__ = "sections"
    __natural_key__ = ("guid", "plan_id", "user_id")

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    guid: Mapped[str] = mapped_column(String(64), nullable=False)
    plan_id: Mapped[int] = mapped_column(
        ForeignKey("plans.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    content: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    tags: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint("guid", "plan_id", "user_id", name="uq_sections_natural_key"),
    )

    def __repr__(self) -> str:
        return f"<Section(id={self.id}, guid='{self.guid}')>"
