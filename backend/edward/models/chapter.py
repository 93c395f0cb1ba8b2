"""
Edward Backend — Chapter & Topic Models
=========================================

What:  ORM models for chapters, master topics and the chapter-topic bindings
       that join them.
Why:   A master topic is defined once per document ("Characters",
       "Setting"...). Each chapter may carry its own content for any of the
       document's master topics; that per-chapter content is a binding row.

Table Relationships:
    documents 1──* chapters 1──* chapter_topics *──1 master_topics *──1 documents

    A binding's master topic always belongs to the same document as its
    chapter. The chapter service checks this before writing any binding.
"""

from typing import Any, Optional

from sqlalchemy import JSON, Boolean, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from edward.database import Base
from edward.models.mixins import TimestampMixin


class Chapter(Base, TimestampMixin):
    """
    A chapter within a document.

    `content` is the editor's opaque delta payload. It is compared by value
    before writing so that autosaves with unchanged text cost nothing.
    """

    __tablename__ = "chapters"
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
    content: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint("guid", "document_id", "user_id", name="uq_chapters_natural_key"),
    )

    def __repr__(self) -> str:
        return f"<Chapter(id={self.id}, guid='{self.guid}')>"


class MasterTopic(Base, TimestampMixin):
    """A document-level topic definition that chapters bind content to."""

    __tablename__ = "master_topics"
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
        UniqueConstraint("guid", "document_id", "user_id", name="uq_master_topics_natural_key"),
    )

    def __repr__(self) -> str:
        return f"<MasterTopic(id={self.id}, guid='{self.guid}')>"


class ChapterTopic(Base, TimestampMixin):
    """Per-chapter content for one master topic (a topic binding)."""

    __tablename__ = "chapter_topics"
    __natural_key__ = ("user_id", "chapter_id", "master_topic_id")

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    chapter_id: Mapped[int] = mapped_column(
        ForeignKey("chapters.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    master_topic_id: Mapped[int] = mapped_column(
        ForeignKey("master_topics.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    content: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "user_id", "chapter_id", "master_topic_id",
            name="uq_chapter_topics_natural_key",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<ChapterTopic(chapter_id={self.chapter_id}, "
            f"master_topic_id={self.master_topic_id})>"
        )
