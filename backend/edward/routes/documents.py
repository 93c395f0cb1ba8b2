"""
Edward Backend — Document Route Handlers
==========================================

What:  GET /api/documents and POST /api/document/add|update|delete|content.
Why:   The document picker lists and manages documents; the set-up wizard
       posts a new document's initial content in one request.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends

from edward.dependencies import get_server_storage
from edward.schemas.common import ErrorResponse, MessageResponse
from edward.schemas.document import (
    DocumentContentRequest,
    DocumentDeleteRequest,
    DocumentPayload,
    DocumentResponse,
)
from edward.services.document_service import document_service
from edward.services.storage import ServerStorage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Documents"])

_AUTH_ERRORS = {
    401: {"description": "Missing or unknown user", "model": ErrorResponse},
    403: {"description": "Account does not use server storage", "model": ErrorResponse},
}
_ERRORS = {**_AUTH_ERRORS, 404: {"description": "Document not found", "model": ErrorResponse}}


@router.get(
    "/documents",
    response_model=List[DocumentResponse],
    responses=_AUTH_ERRORS,
    summary="List the caller's documents",
)
async def list_documents(
    storage: ServerStorage = Depends(get_server_storage),
) -> List[DocumentResponse]:
    return await document_service.list_documents(storage)


@router.post(
    "/document/add",
    response_model=MessageResponse,
    responses=_AUTH_ERRORS,
    summary="Add a document",
)
async def add_document(
    body: DocumentPayload,
    storage: ServerStorage = Depends(get_server_storage),
) -> MessageResponse:
    result = await document_service.add_document(storage, body)
    return MessageResponse(message="Document added.", id=body.id, outcome=result.outcome.value)


@router.post(
    "/document/update",
    response_model=MessageResponse,
    responses=_ERRORS,
    summary="Rename a document",
)
async def update_document(
    body: DocumentPayload,
    storage: ServerStorage = Depends(get_server_storage),
) -> MessageResponse:
    result = await document_service.update_document(storage, body)
    return MessageResponse(message="Document updated.", id=body.id, outcome=result.outcome.value)


@router.post(
    "/document/delete",
    response_model=MessageResponse,
    responses=_ERRORS,
    summary="Delete a document and all of its content",
)
async def delete_document(
    body: DocumentDeleteRequest,
    storage: ServerStorage = Depends(get_server_storage),
) -> MessageResponse:
    await document_service.delete_document(storage, body.id)
    return MessageResponse(message="Document deleted.", id=body.id)


@router.post(
    "/document/content",
    response_model=MessageResponse,
    responses={**_ERRORS, 400: {"description": "Unknown master topic", "model": ErrorResponse}},
    summary="Save a new document's initial content",
    description=(
        "Saves topics, then plans with their sections, then chapters, in one "
        "transaction. Any failure leaves none of the content saved."
    ),
)
async def save_all_content(
    body: DocumentContentRequest,
    storage: ServerStorage = Depends(get_server_storage),
) -> MessageResponse:
    changed = await document_service.save_all_content(storage, body)
    return MessageResponse(message=f"Document content saved ({changed} changes).", id=body.file_id)
