from pydantic import BaseModel, Field


class UserResponse(BaseModel):
    id: str
    email: str
    display_name: str
    role: str
    organization_id: str | None
    headline: str | None
    bio: str | None
    location: str | None
    skills: list[str] = []
    years_of_experience: int | None
    avatar_url: str | None
    resume_key: str | None
    has_resume_text: bool = False
    created_at: str
    updated_at: str


class UserUpdate(BaseModel):
    display_name: str | None = Field(default=None, min_length=1)
    headline: str | None = None
    bio: str | None = None
    location: str | None = None
    skills: list[str] | None = None
    years_of_experience: int | None = Field(default=None, ge=0, le=70)
    avatar_url: str | None = None


class UserListResponse(BaseModel):
    users: list[UserResponse]
    total: int
