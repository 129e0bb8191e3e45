from typing import Any

from pydantic import BaseModel


class Envelope(BaseModel):
    success: bool = True
    data: Any = None
    fallback: bool | None = None
    warning: str | None = None


class MessageResponse(BaseModel):
    message: str
