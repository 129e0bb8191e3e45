from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from hirevision.database import get_db
from hirevision.models.user import User
from hirevision.services.auth_service import auth_service


def bearer_token(authorization: str | None = Header(None)) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing bearer token")
    return authorization[7:]


async def get_current_user(
    token: str = Depends(bearer_token),
    db: Session = Depends(get_db),
) -> User:
    user_id = auth_service.resolve_token(token)
    if user_id is None:
        raise HTTPException(status_code=401, detail="Session expired or invalid token")
    user = db.get(User, user_id)
    if user is None:
        auth_service.logout(token)
        raise HTTPException(status_code=401, detail="Session expired or invalid token")
    return user


def require_role(*roles: str):
    async def checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise HTTPException(status_code=403, detail=f"Requires role: {' or '.join(roles)}")
        return user

    return checker
