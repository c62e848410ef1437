"""Notice board schemas."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from labelvault.models.notice import NoticeType
from .base import BaseSchema, UpdateSchema


class NoticeResponse(BaseSchema):
    id: str
    title: str
    message: str
    type: str
    author_id: str
    author_name: str
    author_designation: Optional[str] = None
    target_audience: str
    timestamp: datetime


class NoticeCreateRequest(BaseSchema):
    title: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    type: NoticeType = NoticeType.GENERAL_ANNOUNCEMENT
    target_audience: str = Field("All", max_length=50)


class NoticeUpdateRequest(UpdateSchema):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    message: Optional[str] = Field(None, min_length=1)
    type: Optional[NoticeType] = None
    target_audience: Optional[str] = Field(None, max_length=50)
