"""
Edward Backend — Document Model
=================================

What:  The `documents` table. A document is the container for chapters,
       master topics, plans and workshops.
Why:   Content tables reference the document by surrogate key, but clients
       only ever know its guid; services resolve guid → id per request.
"""

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from edward.database import Base
from edward.models.mixins import TimestampMixin


class Document(Base, TimestampMixin):
    """
    A user's document.

    Natural key: (guid, user_id). Two users may hold the same guid without
    seeing each other's data.
    """

    __tablename__ = "documents"
    __natural_key__ = ("guid", "user_id")

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    guid: Mapped[str] = mapped_column(String(64), nullable=False)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    __table_args__ = (
        UniqueConstraint("guid", "user_id", name="uq_documents_guid_user"),
    )

    def __repr__(self) -> str:
        return f"<Document(id={self.id}, guid='{self.guid}')>"
