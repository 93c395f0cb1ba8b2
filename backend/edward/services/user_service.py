"""
Edward Backend — User Service
===============================

What:  Reports the caller's account tier and applies tier changes.
Why:   The client builds its storage backend from `storage` in the current
       user response; switching tier switches where content lives.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from edward.database import utcnow
from edward.exceptions import ValidationError
from edward.models.user import AccountType, User
from edward.schemas.user import AccountTypeResponse, UserResponse
from edward.services.storage import storage_mode_for

logger = logging.getLogger(__name__)


class UserService:

    def get_current_user(self, user: User) -> UserResponse:
        display_name, description = AccountType.DESCRIPTIONS.get(
            user.account_type, (user.account_type, "")
        )
        return UserResponse(
            account_type=AccountTypeResponse(
                name=user.account_type,
                display_name=display_name,
                description=description,
            ),
            email=user.email,
            is_premium=user.is_premium,
            verified=user.verified,
            storage=storage_mode_for(user.account_type),
        )

    async def upgrade_account(
        self, db: AsyncSession, user: User, old_account_type: str, new_account_type: str
    ) -> UserResponse:
        """
        Move the user from `old_account_type` to `new_account_type`.

        The caller states the tier it believes the user has; a stale client
        is rejected instead of silently overwriting a newer change.

        Raises:
            ValidationError: unknown tier name, or old tier does not match.
        """
        names = AccountType.names()
        if old_account_type not in names or new_account_type not in names:
            raise ValidationError(
                f"One of received account types is not valid. "
                f"Received: {old_account_type}, {new_account_type}",
                field="accountType",
            )

        if user.account_type != old_account_type:
            raise ValidationError(
                "Received oldAccountType does not match the user's actual account type.",
                field="oldAccountType",
            )

        user.account_type = new_account_type
        user.updated_at = utcnow()
        await db.flush()

        logger.info("User %s moved from %s to %s", user.id, old_account_type, new_account_type)
        return self.get_current_user(user)


user_service = UserService()
