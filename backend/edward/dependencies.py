"""
Edward Backend — Request Dependencies
=======================================

What:  FastAPI dependencies that turn a request into an identified caller and
       a storage handle.
Why:   Authentication happens upstream; the identity proxy forwards the user
       id in a trusted header (settings.identity_header). Routes never read
       headers themselves.

Dependency chain:
    get_db_session → get_current_user → get_server_storage
"""

import logging

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from edward.config import settings
from edward.database import get_db_session
from edward.exceptions import AuthenticationError, PremiumRequiredError
from edward.models.user import User
from edward.services.storage import ServerStorage

logger = logging.getLogger(__name__)


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> User:
    """Load the caller named by the identity header or raise AuthenticationError."""
    raw_id = request.headers.get(settings.identity_header)
    if not raw_id:
        raise AuthenticationError()

    try:
        user_id = int(raw_id)
    except ValueError:
        raise AuthenticationError(context={"identity": raw_id})

    user = await db.get(User, user_id)
    if user is None:
        raise AuthenticationError(context={"user_id": user_id})

    request.state.user_id = user.id
    return user


async def get_server_storage(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ServerStorage:
    """Storage handle for premium callers; everyone else stores content locally."""
    if not user.is_premium:
        logger.info("User %s (%s) denied server storage", user.id, user.account_type)
        raise PremiumRequiredError(account_type=user.account_type)
    return ServerStorage(db=db, user_id=user.id)
