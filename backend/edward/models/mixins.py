"""
Shared column groups for Edward's owner-scoped tables.

Every content table carries the same pair of UTC timestamps. Updates set
``updated_at`` explicitly so that a no-op upsert leaves the row untouched.
"""

from datetime import datetime

from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, mapped_column

from edward.database import utcnow


class TimestampMixin:
    """created_at / updated_at columns, both timezone-aware UTC."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
