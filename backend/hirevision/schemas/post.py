from typing import Literal

from pydantic import BaseModel, Field


class Comment(BaseModel):
    user_id: str
    user_name: str
    comment: str
    created_at: str


class CommentCreate(BaseModel):
    comment: str = Field(min_length=1)


class PostResponse(BaseModel):
    id: str
    author_id: str
    author_name: str
    author_username: str
    author_avatar: str | None
    content: str
    image_key: str | None
    hashtags: list[str]
    likes: list[str]
    like_count: int
    comments: list[Comment]
    created_at: str


class PostListResponse(BaseModel):
    posts: list[PostResponse]
    total: int


class ConnectionCreate(BaseModel):
    receiver_id: str


class ConnectionUpdate(BaseModel):
    status: Literal["accepted", "declined"]


class ConnectionResponse(BaseModel):
    id: str
    requester_id: str
    receiver_id: str
    status: str
    created_at: str


class ConnectionListResponse(BaseModel):
    connections: list[ConnectionResponse]
    total: int
