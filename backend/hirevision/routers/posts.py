import logging
import time
import uuid

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hirevision.config import settings
from hirevision.database import get_db
from hirevision.dependencies import get_current_user
from hirevision.flows.community import moderate_content, suggest_hashtags
from hirevision.models.post import Connection, Post
from hirevision.models.user import User
from hirevision.schemas.post import (
    CommentCreate,
    ConnectionCreate,
    ConnectionListResponse,
    ConnectionResponse,
    ConnectionUpdate,
    PostListResponse,
    PostResponse,
)
from hirevision.services.llm_service import llm_service
from hirevision.services.storage_service import get_storage
from hirevision.utils.filesystem import storage_key
from hirevision.utils.timestamps import utc_now

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/posts",
    tags=["community"],
    dependencies=[Depends(get_current_user)],
)

connections_router = APIRouter(
    prefix="/connections",
    tags=["community"],
    dependencies=[Depends(get_current_user)],
)


def _post_to_response(post: Post) -> PostResponse:
    likes = post.likes or []
    return PostResponse(
        id=post.id,
        author_id=post.author_id,
        author_name=post.author_name,
        author_username=post.author_username,
        author_avatar=post.author_avatar,
        content=post.content,
        image_key=post.image_key,
        hashtags=post.hashtags or [],
        likes=likes,
        like_count=len(likes),
        comments=post.comments or [],
        created_at=post.created_at,
    )


def _connection_to_response(conn: Connection) -> ConnectionResponse:
    return ConnectionResponse(
        id=conn.id,
        requester_id=conn.requester_id,
        receiver_id=conn.receiver_id,
        status=conn.status,
        created_at=conn.created_at,
    )


def _get_post_or_404(post_id: str, db: Session) -> Post:
    post = db.get(Post, post_id)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    return post


def _page(query, page: int, per_page: int) -> PostListResponse:
    total = query.count()
    posts = query.order_by(Post.created_at.desc()).offset((page - 1) * per_page).limit(per_page).all()
    return PostListResponse(posts=[_post_to_response(p) for p in posts], total=total)


@router.post("", response_model=PostResponse, status_code=201)
async def create_post(
    content: str = Form(..., min_length=1),
    image: UploadFile | None = File(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    content = content.strip()
    if not content:
        raise HTTPException(status_code=400, detail="Post content cannot be empty")

    hashtags: list[str] = []
    if llm_service.is_configured:
        moderation = await moderate_content(content)
        if moderation.output["is_flagged"]:
            categories = ", ".join(moderation.output["blocked_categories"])
            raise HTTPException(
                status_code=422,
                detail=f"Post violates community guidelines ({categories})",
            )
        hashtags = await suggest_hashtags(content)
    else:
        logger.info("AI not configured; post created without moderation or hashtags")

    image_key = None
    if image is not None and image.filename:
        if not (image.content_type or "").startswith("image/"):
            raise HTTPException(status_code=400, detail="Attachment must be an image")
        data = await image.read()
        if len(data) > settings.max_upload_bytes:
            raise HTTPException(status_code=413, detail="Image is too large")
        image_key = storage_key("posts", user.id, f"{int(time.time())}_{image.filename}")
        await get_storage().put(image_key, data, image.content_type)

    post = Post(
        id=str(uuid.uuid4()),
        author_id=user.id,
        author_name=user.display_name,
        author_username="".join(user.display_name.lower().split()),
        author_avatar=user.avatar_url,
        content=content,
        image_key=image_key,
        hashtags=hashtags,
        likes=[],
        comments=[],
        created_at=utc_now(),
    )
    db.add(post)
    db.commit()
    db.refresh(post)
    return _post_to_response(post)


@router.get("/explore", response_model=PostListResponse)
async def explore_posts(
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return _page(db.query(Post), page, per_page)


@router.get("/following", response_model=PostListResponse)
async def following_posts(
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    following_ids = [
        c.receiver_id
        for c in db.query(Connection).filter_by(requester_id=user.id, status="accepted").all()
    ]
    if not following_ids:
        return PostListResponse(posts=[], total=0)
    return _page(db.query(Post).filter(Post.author_id.in_(following_ids)), page, per_page)


@router.post("/{post_id}/like", response_model=PostResponse)
async def toggle_like(
    post_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    post = _get_post_or_404(post_id, db)
    likes = list(post.likes or [])
    if user.id in likes:
        likes.remove(user.id)
    else:
        likes.append(user.id)
    post.likes = likes
    db.commit()
    db.refresh(post)
    return _post_to_response(post)


@router.post("/{post_id}/comments", response_model=PostResponse, status_code=201)
async def add_comment(
    post_id: str,
    req: CommentCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    post = _get_post_or_404(post_id, db)
    comment = {
        "user_id": user.id,
        "user_name": user.display_name,
        "comment": req.comment,
        "created_at": utc_now(),
    }
    post.comments = [*(post.comments or []), comment]
    db.commit()
    db.refresh(post)
    return _post_to_response(post)


@connections_router.post("", response_model=ConnectionResponse, status_code=201)
async def request_connection(
    req: ConnectionCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if req.receiver_id == user.id:
        raise HTTPException(status_code=400, detail="Cannot connect with yourself")
    if not db.get(User, req.receiver_id):
        raise HTTPException(status_code=404, detail="User not found")

    conn = Connection(
        id=str(uuid.uuid4()),
        requester_id=user.id,
        receiver_id=req.receiver_id,
        status="pending",
        created_at=utc_now(),
    )
    db.add(conn)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=409, detail="Connection already requested") from exc
    db.refresh(conn)
    return _connection_to_response(conn)


@connections_router.put("/{connection_id}", response_model=ConnectionResponse)
async def respond_to_connection(
    connection_id: str,
    req: ConnectionUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    conn = db.get(Connection, connection_id)
    if not conn:
        raise HTTPException(status_code=404, detail="Connection not found")
    if conn.receiver_id != user.id:
        raise HTTPException(status_code=403, detail="Only the receiver can respond to a connection request")
    conn.status = req.status
    db.commit()
    db.refresh(conn)
    return _connection_to_response(conn)


@connections_router.get("", response_model=ConnectionListResponse)
async def list_connections(
    status: str | None = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    query = db.query(Connection).filter(
        or_(Connection.requester_id == user.id, Connection.receiver_id == user.id)
    )
    if status:
        query = query.filter(Connection.status == status)
    conns = query.order_by(Connection.created_at.desc()).all()
    return ConnectionListResponse(connections=[_connection_to_response(c) for c in conns], total=len(conns))
