from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List
from datetime import datetime, date as date_type

from chronicle.models.log_entry import LogStatus


class Attachment(BaseModel):
    name: str
    url: str


class LogCreate(BaseModel):
    week: int = Field(..., ge=1)
    title: str = Field(..., min_length=1, max_length=500)
    content: str = Field(..., min_length=1)
    attachments: List[Attachment] = []
    date: Optional[date_type] = None


class LogUpdate(BaseModel):
    week: Optional[int] = Field(None, ge=1)
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    content: Optional[str] = Field(None, min_length=1)
    attachments: Optional[List[Attachment]] = None
    date: Optional[date_type] = None


class LogStatusUpdate(BaseModel):
    status: LogStatus
    feedback: Optional[str] = None


class LogComment(BaseModel):
    comment: Optional[str] = None


class LogResponse(BaseModel):
    id: str
    student_id: str
    date: date_type
    week: int
    title: str
    content: str
    attachments: List[Attachment] = []
    status: LogStatus
    feedback: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
