"""
Edward Backend — Document Schemas
===================================

What:  Request/response models for the document list and document set-up.
Why:   Field aliases match the browser client's camelCase payloads
       (`fileId`, `chapterIds`); Python code uses snake_case names.
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field

from edward.schemas.chapter import ChapterPayload
from edward.schemas.plan import PlanPayload
from edward.schemas.topic import TopicPayload


class DocumentResponse(BaseModel):
    id: str = Field(description="Document guid")
    name: str = Field(description="Document name")


class DocumentPayload(BaseModel):
    """Body of POST /api/document/add and /api/document/update."""
    id: str = Field(min_length=1, max_length=64, description="Client-generated document guid")
    name: str = Field(default="", max_length=255)


class DocumentDeleteRequest(BaseModel):
    id: str = Field(min_length=1, max_length=64)


class DocumentContentRequest(BaseModel):
    """
    First save of a freshly set-up document.

    Topics are saved before chapters so chapter topic bindings can reference
    them; plans carry their sections inline.
    """
    model_config = ConfigDict(populate_by_name=True)

    file_id: str = Field(alias="fileId", min_length=1, max_length=64)
    chapters: List[ChapterPayload] = Field(default_factory=list)
    plans: List[PlanPayload] = Field(default_factory=list)
    topics: List[TopicPayload] = Field(default_factory=list)
