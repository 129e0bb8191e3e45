from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

InterviewType = Literal["phone", "video", "onsite", "technical"]
InterviewStatus = Literal["scheduled", "completed", "cancelled"]
Recommendation = Literal["strong_hire", "hire", "no_hire", "strong_no_hire"]


class InterviewCreate(BaseModel):
    scheduled_at: datetime
    type: InterviewType = "video"
    duration_minutes: int = Field(default=60, ge=5, le=480)
    location: str | None = None
    notes: str | None = None
    interviewer_ids: list[str] = Field(default_factory=list)


class InterviewUpdate(BaseModel):
    scheduled_at: datetime | None = None
    type: InterviewType | None = None
    status: InterviewStatus | None = None
    duration_minutes: int | None = Field(default=None, ge=5, le=480)
    location: str | None = None
    notes: str | None = None
    interviewer_ids: list[str] | None = None


class FeedbackCreate(BaseModel):
    rating: int = Field(ge=1, le=5)
    recommendation: Recommendation
    comments: str | None = None


class FeedbackEntry(BaseModel):
    interviewer_id: str
    interviewer_name: str
    rating: int
    recommendation: str
    comments: str | None = None
    created_at: str


class InterviewResponse(BaseModel):
    id: str
    application_id: str
    job_id: str
    job_title: str
    candidate_id: str
    candidate_name: str
    scheduled_at: str
    type: str
    status: str
    duration_minutes: int
    location: str | None
    notes: str | None
    interviewer_ids: list[str]
    feedback: list[FeedbackEntry]
    created_at: str
    updated_at: str


class InterviewListResponse(BaseModel):
    interviews: list[InterviewResponse]
    total: int
