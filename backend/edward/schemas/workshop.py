"""Edward Backend — Workshop Schemas."""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class WorkshopPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(min_length=1, max_length=64, description="Workshop guid")
    title: str = Field(default="", max_length=255)
    workshop_name: str = Field(alias="workshopName", min_length=1, max_length=100)
    order: int = Field(default=0, ge=0, description="Position within the workshop")
    content: Optional[Any] = None
    date: Optional[datetime] = None
    archived: bool = False


class WorkshopResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    workshop_name: str = Field(alias="workshopName")
    order: int
    content: Optional[Any] = None
    date: Optional[datetime] = None
    archived: bool


class WorkshopUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_id: str = Field(alias="fileId", min_length=1, max_length=64)
    workshops: List[WorkshopPayload] = Field(min_length=1)


class WorkshopDeleteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_id: str = Field(alias="fileId", min_length=1, max_length=64)
    workshop_id: str = Field(alias="workshopId", min_length=1, max_length=64)
