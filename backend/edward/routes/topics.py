"""Edward Backend — Master Topic Route Handlers."""

from typing import List

from fastapi import APIRouter, Depends

from edward.dependencies import get_server_storage
from edward.schemas.common import ErrorResponse, MessageResponse
from edward.schemas.topic import (
    TopicArrangeRequest,
    TopicDeleteRequest,
    TopicResponse,
    TopicUpdateRequest,
)
from edward.services.storage import ServerStorage
from edward.services.topic_service import topic_service

router = APIRouter(prefix="/api", tags=["Topics"])

_ERRORS = {
    401: {"description": "Missing or unknown user", "model": ErrorResponse},
    403: {"description": "Account does not use server storage", "model": ErrorResponse},
    404: {"description": "Document not found", "model": ErrorResponse},
}


@router.get(
    "/topics/{document_id}",
    response_model=List[TopicResponse],
    responses=_ERRORS,
    summary="List a document's master topics in order",
)
async def get_topics(
    document_id: str,
    storage: ServerStorage = Depends(get_server_storage),
) -> List[TopicResponse]:
    return await topic_service.get_topics(storage, document_id)


@router.post(
    "/topic/update",
    response_model=MessageResponse,
    responses=_ERRORS,
    summary="Create or update a master topic",
)
async def update_topic(
    body: TopicUpdateRequest,
    storage: ServerStorage = Depends(get_server_storage),
) -> MessageResponse:
    result = await topic_service.update_topic(storage, body.file_id, body.topic)
    return MessageResponse(message="Topic saved.", id=body.topic.id, outcome=result.outcome.value)


@router.post(
    "/topic/arrange",
    response_model=MessageResponse,
    responses={**_ERRORS, 400: {"description": "Not a permutation of the order", "model": ErrorResponse}},
    summary="Rearrange a document's master topics",
)
async def arrange_topics(
    body: TopicArrangeRequest,
    storage: ServerStorage = Depends(get_server_storage),
) -> MessageResponse:
    await topic_service.arrange_topics(storage, body.file_id, body.topic_ids)
    return MessageResponse(message="Topics rearranged.")


@router.post(
    "/topic/delete",
    response_model=MessageResponse,
    responses=_ERRORS,
    summary="Delete a master topic and its chapter content",
)
async def delete_topic(
    body: TopicDeleteRequest,
    storage: ServerStorage = Depends(get_server_storage),
) -> MessageResponse:
    await topic_service.delete_topic(storage, body.file_id, body.topic_id)
    return MessageResponse(message="Topic deleted.", id=body.topic_id)
