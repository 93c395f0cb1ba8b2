"""
Edward Backend — Application Package Initializer
==================================================

Server side of the Edward writing app: stores premium users' documents
(chapters, master topics, plans with sections, workshops) and keeps each
container's user-defined order consistent with its contents.

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← upsert, ordering, cascades
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← one AsyncSession per request
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
