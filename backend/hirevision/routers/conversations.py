import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.orm import Session

from hirevision.database import get_db
from hirevision.dependencies import get_current_user
from hirevision.models.conversation import Conversation, Message
from hirevision.models.user import User
from hirevision.schemas.common import MessageResponse as StatusMessage
from hirevision.schemas.conversation import (
    ConversationCreate,
    ConversationListResponse,
    ConversationResponse,
    MessageCreate,
    MessageListResponse,
    MessageResponse,
)
from hirevision.utils.timestamps import utc_now

router = APIRouter(
    prefix="/conversations",
    tags=["conversations"],
    dependencies=[Depends(get_current_user)],
)

_HAS_PARTICIPANT = text(
    "EXISTS (SELECT 1 FROM json_each(conversations.participant_ids) WHERE json_each.value = :uid)"
)


def _conversation_to_response(conv: Conversation, user_id: str) -> ConversationResponse:
    return ConversationResponse(
        id=conv.id,
        participants=conv.participants,
        participant_ids=conv.participant_ids,
        last_message=conv.last_message,
        last_message_at=conv.last_message_at,
        unread_count=(conv.unread_count or {}).get(user_id, 0),
        created_at=conv.created_at,
    )


def _message_to_response(msg: Message) -> MessageResponse:
    return MessageResponse(
        id=msg.id,
        conversation_id=msg.conversation_id,
        sender_id=msg.sender_id,
        sender_name=msg.sender_name,
        sender_role=msg.sender_role,
        receiver_id=msg.receiver_id,
        type=msg.type,
        content=msg.content,
        is_read=bool(msg.is_read),
        created_at=msg.created_at,
    )


def _participant(user: User) -> dict:
    return {"id": user.id, "name": user.display_name, "role": user.role, "avatar": user.avatar_url}


def _get_own_conversation(conversation_id: str, user: User, db: Session) -> Conversation:
    conv = db.get(Conversation, conversation_id)
    if not conv:
        raise HTTPException(status_code=404, detail="Conversation not found")
    if user.id not in (conv.participant_ids or []):
        raise HTTPException(status_code=403, detail="You are not a participant in this conversation")
    return conv


@router.post("", response_model=ConversationResponse, status_code=201)
async def start_conversation(
    req: ConversationCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if req.participant_id == user.id:
        raise HTTPException(status_code=400, detail="Cannot start a conversation with yourself")
    other = db.get(User, req.participant_id)
    if not other:
        raise HTTPException(status_code=404, detail="User not found")

    existing = (
        db.query(Conversation)
        .filter(_HAS_PARTICIPANT.bindparams(uid=user.id))
        .all()
    )
    for conv in existing:
        if other.id in conv.participant_ids:
            return _conversation_to_response(conv, user.id)

    now = utc_now()
    conv = Conversation(
        id=str(uuid.uuid4()),
        participants=[_participant(user), _participant(other)],
        participant_ids=[user.id, other.id],
        last_message="",
        last_message_at=now,
        unread_count={user.id: 0, other.id: 0},
        created_at=now,
        updated_at=now,
    )
    db.add(conv)
    db.commit()
    db.refresh(conv)
    return _conversation_to_response(conv, user.id)


@router.get("", response_model=ConversationListResponse)
async def list_conversations(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    convs = (
        db.query(Conversation)
        .filter(_HAS_PARTICIPANT.bindparams(uid=user.id))
        .order_by(Conversation.last_message_at.desc())
        .all()
    )
    return ConversationListResponse(
        conversations=[_conversation_to_response(c, user.id) for c in convs],
        total=len(convs),
    )


@router.get("/{conversation_id}/messages", response_model=MessageListResponse)
async def list_messages(
    conversation_id: str,
    after: str | None = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Messages in send order. ``after`` is the id of the last message the
    client already has; only newer ones are returned."""
    _get_own_conversation(conversation_id, user, db)
    query = db.query(Message).filter(Message.conversation_id == conversation_id)
    if after:
        query = query.filter(
            text("messages.rowid > (SELECT rowid FROM messages WHERE id = :after)").bindparams(after=after)
        )
    messages = query.order_by(text("messages.rowid")).all()
    return MessageListResponse(messages=[_message_to_response(m) for m in messages], total=len(messages))


@router.post("/{conversation_id}/messages", response_model=MessageResponse, status_code=201)
async def send_message(
    conversation_id: str,
    req: MessageCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    conv = _get_own_conversation(conversation_id, user, db)
    receiver_id = next(pid for pid in conv.participant_ids if pid != user.id)

    now = utc_now()
    msg = Message(
        id=str(uuid.uuid4()),
        conversation_id=conv.id,
        sender_id=user.id,
        sender_name=user.display_name,
        sender_role=user.role,
        receiver_id=receiver_id,
        type=req.type,
        content=req.content,
        is_read=False,
        created_at=now,
    )
    db.add(msg)

    counts = dict(conv.unread_count or {})
    counts[receiver_id] = counts.get(receiver_id, 0) + 1
    conv.unread_count = counts
    conv.last_message = req.content
    conv.last_message_at = now
    conv.updated_at = now
    db.commit()
    db.refresh(msg)
    return _message_to_response(msg)


@router.post("/{conversation_id}/read", response_model=StatusMessage)
async def mark_read(
    conversation_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    conv = _get_own_conversation(conversation_id, user, db)
    (
        db.query(Message)
        .filter(
            Message.conversation_id == conv.id,
            Message.receiver_id == user.id,
            Message.is_read.is_(False),
        )
        .update({Message.is_read: True}, synchronize_session=False)
    )
    conv.unread_count = {**(conv.unread_count or {}), user.id: 0}
    conv.updated_at = utc_now()
    db.commit()
    return StatusMessage(message="Conversation marked as read")
