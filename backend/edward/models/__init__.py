"""
Edward Backend — ORM Models
=============================

Importing this package registers every table with `Base.metadata`, which
Alembic and the test fixtures rely on.
"""

from edward.models.user import AccountType, User
from edward.models.document import Document
from edward.models.chapter import Chapter, ChapterTopic, MasterTopic
from edward.models.plan import Plan, Section
from edward.models.workshop import Workshop
from edward.models.order import OrderKind, OrderRecord

__all__ = [
    "AccountType",
    "User",
    "Document",
    "Chapter",
    "ChapterTopic",
    "MasterTopic",
    "Plan",
    "Section",
    "Workshop",
    "OrderKind",
    "OrderRecord",
]
