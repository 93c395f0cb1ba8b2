"""Edward Backend — Master Topic Schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TopicPayload(BaseModel):
    id: str = Field(min_length=1, max_length=64, description="Master topic guid")
    title: str = Field(default="", max_length=255)
    archived: bool = False


class TopicResponse(BaseModel):
    id: str
    title: str
    archived: bool


class TopicUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_id: str = Field(alias="fileId", min_length=1, max_length=64)
    topic: TopicPayload


class TopicArrangeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_id: str = Field(alias="fileId", min_length=1, max_length=64)
    topic_ids: Any = Field(alias="topicIds", description="Master topic guids in their new order")


class TopicDeleteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_id: str = Field(alias="fileId", min_length=1, max_length=64)
    topic_id: str = Field(alias="topicId", min_length=1, max_length=64)
