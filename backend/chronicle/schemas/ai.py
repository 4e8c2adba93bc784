from pydantic import BaseModel, Field
from typing import Optional


class AnalyzeLogRequest(BaseModel):
    content: str = Field(..., min_length=1)


class LogAnalysis(BaseModel):
    summary: str
    quality_score: str
    feedback_suggestion: str


class AnalyzeLogResponse(BaseModel):
    analysis: Optional[LogAnalysis] = None


class GenerateLogRequest(BaseModel):
    week: int = Field(..., ge=1)
    title: str = Field(..., min_length=1)
    notes: str = Field(..., min_length=1)


class GeneratedText(BaseModel):
    content: str
