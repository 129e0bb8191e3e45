from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from hirevision.database import get_db
from hirevision.dependencies import get_current_user
from hirevision.models.user import User
from hirevision.schemas.user import UserListResponse, UserResponse, UserUpdate
from hirevision.utils.timestamps import utc_now

router = APIRouter(
    prefix="/users",
    tags=["users"],
    dependencies=[Depends(get_current_user)],
)


def user_to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        display_name=user.display_name,
        role=user.role,
        organization_id=user.organization_id,
        headline=user.headline,
        bio=user.bio,
        location=user.location,
        skills=user.skills or [],
        years_of_experience=user.years_of_experience,
        avatar_url=user.avatar_url,
        resume_key=user.resume_key,
        has_resume_text=bool(user.resume_text),
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def public_profile(user: User) -> dict:
    """Profile fields safe to hand to the model."""
    return {
        "name": user.display_name,
        "role": user.role,
        "headline": user.headline,
        "location": user.location,
        "skills": user.skills or [],
        "years_of_experience": user.years_of_experience,
        "bio": user.bio,
    }


@router.get("", response_model=UserListResponse)
async def list_users(
    role: str | None = None,
    skill: str | None = None,
    db: Session = Depends(get_db),
):
    query = db.query(User)
    if role:
        query = query.filter(User.role == role)
    users = query.order_by(User.display_name).all()
    if skill:
        # skills is a JSON column; match case-insensitively in Python
        wanted = skill.lower()
        users = [u for u in users if any(s.lower() == wanted for s in (u.skills or []))]
    return UserListResponse(users=[user_to_response(u) for u in users], total=len(users))


@router.put("/me", response_model=UserResponse)
async def update_me(
    req: UserUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    for key, value in req.model_dump(exclude_unset=True).items():
        if key == "display_name" and value is None:
            continue
        if key == "skills" and value is not None:
            value = [s.strip() for s in value if s.strip()]
        setattr(user, key, value)
    user.updated_at = utc_now()
    db.commit()
    db.refresh(user)
    return user_to_response(user)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, db: Session = Depends(get_db)):
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user_to_response(user)
