from pydantic import BaseModel, Field, ConfigDict, model_validator
from typing import Optional
from datetime import datetime, date

from chronicle.models.admin import SystemEventType, BrandingTheme


class SystemEventResponse(BaseModel):
    id: str
    type: SystemEventType
    message: str
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)


class AnnouncementCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    content: str = Field(..., min_length=1)


class AnnouncementResponse(BaseModel):
    id: str
    title: str
    content: str
    created_at: datetime
    active: bool

    model_config = ConfigDict(from_attributes=True)


class ProgramCycleCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class ProgramCycleResponse(BaseModel):
    id: str
    name: str
    start_date: date
    end_date: date

    model_config = ConfigDict(from_attributes=True)


class BrandingUpdate(BaseModel):
    logo_url: Optional[str] = None
    theme: BrandingTheme = BrandingTheme.DEFAULT


class BrandingResponse(BaseModel):
    logo_url: Optional[str] = None
    theme: BrandingTheme = BrandingTheme.DEFAULT

    model_config = ConfigDict(from_attributes=True)
