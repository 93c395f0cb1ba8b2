"""
Edward Backend — Chapter Route Handlers
=========================================

What:  GET /api/chapters/{document_id} and POST /api/chapter/update|arrange|delete.
Why:   The chapter editor's autosave, drag-and-drop reordering and delete
       button all land here.
How:   Routes stay thin: resolve the storage handle, call ChapterService,
       wrap the result.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends

from edward.dependencies import get_server_storage
from edward.schemas.chapter import (
    ChapterArrangeRequest,
    ChapterDeleteRequest,
    ChapterResponse,
    ChapterUpdateRequest,
)
from edward.schemas.common import ErrorResponse, MessageResponse
from edward.services.chapter_service import chapter_service
from edward.services.storage import ServerStorage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Chapters"])

_ERRORS = {
    401: {"description": "Missing or unknown user", "model": ErrorResponse},
    403: {"description": "Account does not use server storage", "model": ErrorResponse},
    404: {"description": "Document not found", "model": ErrorResponse},
}


@router.get(
    "/chapters/{document_id}",
    response_model=List[ChapterResponse],
    responses=_ERRORS,
    summary="List a document's chapters in order",
    description=(
        "Returns every chapter of the document with its topic content merged in, "
        "sorted by the stored chapter order. Chapters missing from the order are "
        "appended to it and the repaired order is saved."
    ),
)
async def get_chapters(
    document_id: str,
    storage: ServerStorage = Depends(get_server_storage),
) -> List[ChapterResponse]:
    return await chapter_service.get_chapters(storage, document_id)


@router.post(
    "/chapter/update",
    response_model=MessageResponse,
    responses={**_ERRORS, 400: {"description": "Unknown master topic", "model": ErrorResponse}},
    summary="Create or update a chapter",
)
async def update_chapter(
    body: ChapterUpdateRequest,
    storage: ServerStorage = Depends(get_server_storage),
) -> MessageResponse:
    """
    Save a chapter and its topic content.

    Re-submitting an identical chapter writes nothing and reports `unchanged`.
    """
    result = await chapter_service.update_chapter(storage, body.file_id, body.chapter)
    return MessageResponse(
        message="Chapter saved.",
        id=body.chapter.id,
        outcome=result.outcome.value,
    )


@router.post(
    "/chapter/arrange",
    response_model=MessageResponse,
    responses={**_ERRORS, 400: {"description": "Not a permutation of the order", "model": ErrorResponse}},
    summary="Rearrange a document's chapters",
)
async def arrange_chapters(
    body: ChapterArrangeRequest,
    storage: ServerStorage = Depends(get_server_storage),
) -> MessageResponse:
    await chapter_service.arrange_chapters(storage, body.file_id, body.chapter_ids)
    return MessageResponse(message="Chapters rearranged.")


@router.post(
    "/chapter/delete",
    response_model=MessageResponse,
    responses=_ERRORS,
    summary="Delete a chapter",
)
async def delete_chapter(
    body: ChapterDeleteRequest,
    storage: ServerStorage = Depends(get_server_storage),
) -> MessageResponse:
    await chapter_service.delete_chapter(storage, body.file_id, body.chapter_id)
    return MessageResponse(message="Chapter deleted.", id=body.chapter_id)
