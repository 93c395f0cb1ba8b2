"""
Edward Backend — Plan & Section Route Handlers
================================================

What:  GET /api/plans/{document_id}, POST /api/plan/update|arrange|delete and
       POST /api/section/update|arrange|delete.
Why:   Sections only exist inside a plan, so every section request names
       its plan (`planId`) as well as the document (`fileId`).
"""

import logging
from typing import List

from fastapi import APIRouter, Depends

from edward.dependencies import get_server_storage
from edward.schemas.common import ErrorResponse, MessageResponse
from edward.schemas.plan import (
    PlanArrangeRequest,
    PlanDeleteRequest,
    PlanResponse,
    PlanUpdateRequest,
    SectionArrangeRequest,
    SectionDeleteRequest,
    SectionUpdateRequest,
)
from edward.services.plan_service import plan_service
from edward.services.storage import ServerStorage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Plans"])

_ERRORS = {
    401: {"description": "Missing or unknown user", "model": ErrorResponse},
    403: {"description": "Account does not use server storage", "model": ErrorResponse},
    404: {"description": "Document or plan not found", "model": ErrorResponse},
}
_ARRANGE_ERRORS = {**_ERRORS, 400: {"description": "Not a permutation of the order", "model": ErrorResponse}}


# ── Plans ─────────────────────────────────────────────────────────────────

@router.get(
    "/plans/{document_id}",
    response_model=List[PlanResponse],
    responses=_ERRORS,
    summary="List a document's plans with their sections",
    description=(
        "Returns plans sorted by the plan order, each carrying its sections "
        "sorted by that plan's section order. Both levels are repaired on read."
    ),
)
async def get_plans(
    document_id: str,
    storage: ServerStorage = Depends(get_server_storage),
) -> List[PlanResponse]:
    return await plan_service.get_plans(storage, document_id)


@router.post(
    "/plan/update",
    response_model=MessageResponse,
    responses=_ERRORS,
    summary="Create or update a plan",
)
async def update_plan(
    body: PlanUpdateRequest,
    storage: ServerStorage = Depends(get_server_storage),
) -> MessageResponse:
    result = await plan_service.update_plan(storage, body.file_id, body.plan)
    return MessageResponse(message="Plan saved.", id=body.plan.id, outcome=result.outcome.value)


@router.post(
    "/plan/arrange",
    response_model=MessageResponse,
    responses=_ARRANGE_ERRORS,
    summary="Rearrange a document's plans",
)
async def arrange_plans(
    body: PlanArrangeRequest,
    storage: ServerStorage = Depends(get_server_storage),
) -> MessageResponse:
    await plan_service.arrange_plans(storage, body.file_id, body.plan_ids)
    return MessageResponse(message="Plans rearranged.")


@router.post(
    "/plan/delete",
    response_model=MessageResponse,
    responses=_ERRORS,
    summary="Delete a plan and its sections",
)
async def delete_plan(
    body: PlanDeleteRequest,
    storage: ServerStorage = Depends(get_server_storage),
) -> MessageResponse:
    await plan_service.delete_plan(storage, body.file_id, body.plan_id)
    return MessageResponse(message="Plan deleted.", id=body.plan_id)


# ── Sections ──────────────────────────────────────────────────────────────

@router.post(
    "/section/update",
    response_model=MessageResponse,
    responses=_ERRORS,
    summary="Create or update a section of a plan",
)
async def update_section(
    body: SectionUpdateRequest,
    storage: ServerStorage = Depends(get_server_storage),
) -> MessageResponse:
    result = await plan_service.update_section(storage, body.file_id, body.plan_id, body.section)
    return MessageResponse(message="Section saved.", id=body.section.id, outcome=result.outcome.value)


@router.post(
    "/section/arrange",
    response_model=MessageResponse,
    responses=_ARRANGE_ERRORS,
    summary="Rearrange the sections of a plan",
)
async def arrange_sections(
    body: SectionArrangeRequest,
    storage: ServerStorage = Depends(get_server_storage),
) -> MessageResponse:
    await plan_service.arrange_sections(storage, body.file_id, body.plan_id, body.section_ids)
    return MessageResponse(message="Sections rearranged.")


@router.post(
    "/section/delete",
    response_model=MessageResponse,
    responses=_ERRORS,
    summary="Delete a section",
)
async def delete_section(
    body: SectionDeleteRequest,
    storage: ServerStorage = Depends(get_server_storage),
) -> MessageResponse:
    await plan_service.delete_section(storage, body.file_id, body.plan_id, body.section_id)
    return MessageResponse(message="Section deleted.", id=body.section_id)
