"""Edward Backend — Workshop Route Handlers."""

from typing import List

from fastapi import APIRouter, Depends

from edward.dependencies import get_server_storage
from edward.schemas.common import ErrorResponse, MessageResponse
from edward.schemas.workshop import WorkshopDeleteRequest, WorkshopResponse, WorkshopUpdateRequest
from edward.services.storage import ServerStorage
from edward.services.workshop_service import workshop_service

router = APIRouter(prefix="/api", tags=["Workshops"])

_ERRORS = {
    401: {"description": "Missing or unknown user", "model": ErrorResponse},
    403: {"description": "Account does not use server storage", "model": ErrorResponse},
    404: {"description": "Document not found", "model": ErrorResponse},
}


@router.get(
    "/workshops/{document_id}",
    response_model=List[WorkshopResponse],
    responses=_ERRORS,
    summary="List a document's workshops",
    description="Workshops are grouped by workshop name and sorted by their order field.",
)
async def get_workshops(
    document_id: str,
    storage: ServerStorage = Depends(get_server_storage),
) -> List[WorkshopResponse]:
    return await workshop_service.get_workshops(storage, document_id)


@router.post(
    "/workshop/update",
    response_model=MessageResponse,
    responses=_ERRORS,
    summary="Create or update a batch of workshops",
)
async def update_workshops(
    body: WorkshopUpdateRequest,
    storage: ServerStorage = Depends(get_server_storage),
) -> MessageResponse:
    results = await workshop_service.update_workshops(storage, body.file_id, body.workshops)
    changed = sum(1 for result in results if result.changed)
    return MessageResponse(message=f"{len(results)} workshop(s) saved, {changed} changed.")


@router.post(
    "/workshop/delete",
    response_model=MessageResponse,
    responses=_ERRORS,
    summary="Delete a workshop",
)
async def delete_workshop(
    body: WorkshopDeleteRequest,
    storage: ServerStorage = Depends(get_server_storage),
) -> MessageResponse:
    await workshop_service.delete_workshop(storage, body.file_id, body.workshop_id)
    return MessageResponse(message="Workshop deleted.", id=body.workshop_id)
