"""
Edward Backend — Chapter Schemas
==================================

What:  Request/response models for chapters and their topic bindings.

Chapter payload shape (as sent by the editor):
    {
        "id": "<chapter guid>",
        "title": "Chapter 1",
        "archived": false,
        "content": {"ops": [...]},
        "topics": {
            "<master topic guid>": {"id": "<master topic guid>", "content": {...}}
        }
    }
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ChapterTopicPayload(BaseModel):
    id: Optional[str] = Field(default=None, description="Master topic guid (repeats the dict key)")
    content: Optional[Any] = Field(default=None, description="Editor delta for this topic")


class ChapterPayload(BaseModel):
    id: str = Field(min_length=1, max_length=64, description="Chapter guid")
    title: str = Field(default="", max_length=255)
    archived: bool = False
    content: Optional[Any] = None
    topics: Dict[str, ChapterTopicPayload] = Field(default_factory=dict)


class ChapterTopicResponse(BaseModel):
    id: str = Field(description="Master topic guid")
    title: str
    archived: bool
    content: Optional[Any] = None


class ChapterResponse(BaseModel):
    id: str = Field(description="Chapter guid")
    title: str
    archived: bool
    content: Optional[Any] = None
    topics: Dict[str, ChapterTopicResponse] = Field(default_factory=dict)


class ChapterUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_id: str = Field(alias="fileId", min_length=1, max_length=64)
    chapter: ChapterPayload


class ChapterArrangeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_id: str = Field(alias="fileId", min_length=1, max_length=64)
    # Validated against the stored order; a malformed list is an invalid order
    chapter_ids: Any = Field(alias="chapterIds", description="Chapter guids in their new order")


class ChapterDeleteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_id: str = Field(alias="fileId", min_length=1, max_length=64)
    chapter_id: str = Field(alias="chapterId", min_length=1, max_length=64)
