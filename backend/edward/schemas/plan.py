"""
Edward Backend — Plan & Section Schemas
=========================================

What:  Request/response models for plans and the sections nested in them.
Why:   GET /api/plans returns each plan with its sections already ordered,
       so the client never sorts on its own.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SectionPayload(BaseModel):
    id: str = Field(min_length=1, max_length=64, description="Section guid")
    title: str = Field(default="", max_length=255)
    archived: bool = False
    content: Optional[Any] = None
    tags: List[str] = Field(default_factory=list)


class SectionResponse(BaseModel):
    id: str
    title: str
    archived: bool
    content: Optional[Any] = None
    tags: List[str] = Field(default_factory=list)


class PlanPayload(BaseModel):
    id: str = Field(min_length=1, max_length=64, description="Plan guid")
    title: str = Field(default="", max_length=255)
    archived: bool = False
    sections: List[SectionPayload] = Field(
        default_factory=list,
        description="Only read by the document content endpoint",
    )


class PlanResponse(BaseModel):
    id: str
    title: str
    archived: bool
    sections: List[SectionResponse] = Field(default_factory=list)


class PlanUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_id: str = Field(alias="fileId", min_length=1, max_length=64)
    plan: PlanPayload


class PlanArrangeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_id: str = Field(alias="fileId", min_length=1, max_length=64)
    plan_ids: Any = Field(alias="planIds", description="Plan guids in their new order")


class PlanDeleteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_id: str = Field(alias="fileId", min_length=1, max_length=64)
    plan_id: str = Field(alias="planId", min_length=1, max_length=64)


class SectionUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_id: str = Field(alias="fileId", min_length=1, max_length=64)
    plan_id: str = Field(alias="planId", min_length=1, max_length=64)
    section: SectionPayload


class SectionArrangeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_id: str = Field(alias="fileId", min_length=1, max_length=64)
    plan_id: str = Field(alias="planId", min_length=1, max_length=64)
    section_ids: Any = Field(alias="sectionIds", description="Section guids in their new order")


class SectionDeleteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_id: str = Field(alias="fileId", min_length=1, max_length=64)
    plan_id: str = Field(alias="planId", min_length=1, max_length=64)
    section_id: str = Field(alias="sectionId", min_length=1, max_length=64)
