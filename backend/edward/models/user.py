"""
Edward Backend — User Model
=============================

What:  The `users` table, reduced to what the content API needs.
Why:   The identity collaborator authenticates callers; this service only
       loads the user by id to learn the account tier, which decides whether
       documents live on the server or on the client.
"""

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from edward.database import Base
from edward.models.mixins import TimestampMixin


class AccountType:
    """Account tier names plus the copy shown to users for each tier."""

    DEMO = "DEMO"
    LIMITED = "LIMITED"
    PREMIUM = "PREMIUM"
    GOLD = "GOLD"
    ADMIN = "ADMIN"

    LOCAL_STORAGE_MESSAGE = (
        "All data is stored on your computer's hard drive and may be lost if "
        "your browsing data is cleared. Most computers have a maximum storage "
        "limit of 10MB (about 5,000 pages)."
    )

    DESCRIPTIONS = {
        DEMO: ("Demo Account", LOCAL_STORAGE_MESSAGE),
        LIMITED: ("Limited Account", LOCAL_STORAGE_MESSAGE),
        PREMIUM: (
            "Premium Account",
            "Your data is stored on our servers. Your storage limit is 20MB "
            "(about 10,000 pages).",
        ),
        GOLD: (
            "Gold Account",
            "Your data is stored on our servers. Your storage limit is 250MB "
            "(about 125,000 pages).",
        ),
        ADMIN: ("Admin Account", "You know who you are."),
    }

    PREMIUM_TYPES = frozenset({PREMIUM, GOLD, ADMIN})

    @classmethod
    def names(cls) -> list:
        return list(cls.DESCRIPTIONS)


class User(Base, TimestampMixin):
    """A registered account. Rows are created by the identity service."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    account_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=AccountType.LIMITED,
    )
    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    @property
    def is_premium(self) -> bool:
        return self.account_type in AccountType.PREMIUM_TYPES

    def __repr__(self) -> str:
        return f"<User(id={self.id}, account_type='{self.account_type}')>"
