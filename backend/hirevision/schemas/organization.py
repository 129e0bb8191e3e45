from pydantic import BaseModel, Field


class OrganizationCreate(BaseModel):
    name: str = Field(min_length=1)
    domains: list[str] = []


class OrganizationResponse(BaseModel):
    id: str
    name: str
    domains: list[str]
    member_count: int = 0
    created_at: str


class MemberAdd(BaseModel):
    email: str = Field(min_length=3)
