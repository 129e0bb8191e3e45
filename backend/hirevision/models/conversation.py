from sqlalchemy import JSON, Boolean, Column, ForeignKey, Text
from sqlalchemy.orm import relationship
from hirevision.database import Base


class Conversation(Base):
    __tablename__ = "conversations"

    id = Column(Text, primary_key=True)
    participants = Column(JSON, nullable=False, default=list)
    participant_ids = Column(JSON, nullable=False, default=list)
    last_message = Column(Text, nullable=False, default="")
    last_message_at = Column(Text, nullable=False)
    unread_count = Column(JSON, nullable=False, default=dict)  # user id -> count
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)

    messages = relationship("Message", back_populates="conversation", cascade="all, delete-orphan")


class Message(Base):
    __tablename__ = "messages"

    id = Column(Text, primary_key=True)
    conversation_id = Column(Text, ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False)
    sender_id = Column(Text, nullable=False)
    sender_name = Column(Text, nullable=False)
    sender_role = Column(Text, nullable=False)
    receiver_id = Column(Text, nullable=False)
    type = Column(Text, nullable=False, default="text")
    content = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(Text, nullable=False)

    conversation = relationship("Conversation", back_populates="messages")
