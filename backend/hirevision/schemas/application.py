from typing import Literal

from pydantic import BaseModel

ApplicationStatus = Literal["applied", "screening", "interview", "offer", "hired", "rejected"]


class ApplicationCreate(BaseModel):
    cover_letter: str | None = None
    resume_key: str | None = None


class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus


class ApplicationResponse(BaseModel):
    id: str
    job_id: str
    job_title: str
    candidate_id: str
    candidate_name: str
    status: str
    cover_letter: str | None
    resume_key: str | None
    fit_score: int | None
    fit_reasoning: str | None
    created_at: str
    updated_at: str


class ApplicationListResponse(BaseModel):
    applications: list[ApplicationResponse]
    total: int
