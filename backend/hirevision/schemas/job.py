from typing import Literal

from pydantic import BaseModel, Field

JobStatus = Literal["open", "paused", "closed"]


class JobCreate(BaseModel):
    title: str = Field(min_length=1)
    company: str | None = None
    department: str | None = None
    description: str = Field(min_length=1)
    requirements: str | None = None
    responsibilities: str | None = None
    skills: list[str] = []
    salary_range: str | None = None
    location: str | None = None
    is_remote: bool = False
    employment_type: str | None = None
    experience_required: str | None = None


class JobUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1)
    company: str | None = None
    department: str | None = None
    description: str | None = Field(default=None, min_length=1)
    requirements: str | None = None
    responsibilities: str | None = None
    skills: list[str] | None = None
    salary_range: str | None = None
    location: str | None = None
    is_remote: bool | None = None
    employment_type: str | None = None
    experience_required: str | None = None
    status: JobStatus | None = None


class JobResponse(BaseModel):
    id: str
    organization_id: str
    created_by: str | None
    title: str
    company: str | None
    department: str | None
    description: str
    requirements: str | None
    responsibilities: str | None
    skills: list[str]
    salary_range: str | None
    location: str | None
    is_remote: bool
    employment_type: str | None
    experience_required: str | None
    status: str
    created_at: str
    updated_at: str
    application_count: int = 0


class JobListResponse(BaseModel):
    jobs: list[JobResponse]
    total: int
    page: int
    per_page: int


class JobMatchResponse(BaseModel):
    jobs: list[JobResponse]
    scores: dict[str, int]  # only jobs the model scored
