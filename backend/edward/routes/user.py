"""
Edward Backend — User Route Handlers
======================================

What:  GET /api/user/current and POST /api/user/upgrade.
Why:   These are the only content-API routes open to every tier; the client
       calls /current first to decide between server and local storage.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from edward.database import get_db_session
from edward.dependencies import get_current_user
from edward.models.user import User
from edward.schemas.common import ErrorResponse
from edward.schemas.user import UpgradeRequest, UserResponse
from edward.services.user_service import user_service

router = APIRouter(prefix="/api/user", tags=["User"])


@router.get(
    "/current",
    response_model=UserResponse,
    response_model_by_alias=True,
    responses={401: {"description": "Missing or unknown user", "model": ErrorResponse}},
    summary="Describe the current user and their storage mode",
)
async def current_user(user: User = Depends(get_current_user)) -> UserResponse:
    return user_service.get_current_user(user)


@router.post(
    "/upgrade",
    response_model=UserResponse,
    response_model_by_alias=True,
    responses={
        400: {"description": "Unknown tier or stale old tier", "model": ErrorResponse},
        401: {"description": "Missing or unknown user", "model": ErrorResponse},
    },
    summary="Change the current user's account tier",
)
async def upgrade(
    body: UpgradeRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await user_service.upgrade_account(
        db, user, body.old_account_type, body.new_account_type
    )
