from typing import Literal

from pydantic import BaseModel, Field


class ConversationCreate(BaseModel):
    participant_id: str


class Participant(BaseModel):
    id: str
    name: str
    role: str
    avatar: str | None = None


class ConversationResponse(BaseModel):
    id: str
    participants: list[Participant]
    participant_ids: list[str]
    last_message: str
    last_message_at: str
    unread_count: int  # for the calling user
    created_at: str


class ConversationListResponse(BaseModel):
    conversations: list[ConversationResponse]
    total: int


class MessageCreate(BaseModel):
    content: str = Field(min_length=1)
    type: Literal["text", "image", "file"] = "text"


class MessageResponse(BaseModel):
    id: str
    conversation_id: str
    sender_id: str
    sender_name: str
    sender_role: str
    receiver_id: str
    type: str
    content: str
    is_read: bool
    created_at: str


class MessageListResponse(BaseModel):
    messages: list[MessageResponse]
    total: int
