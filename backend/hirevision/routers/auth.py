import logging
import math
from typing import Literal
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from hirevision.config import settings
from hirevision.database import get_db
from hirevision.dependencies import bearer_token, get_current_user
from hirevision.models.user import User
from hirevision.routers.users import user_to_response
from hirevision.schemas.auth import LoginRequest, RegisterRequest, SSOCallbackRequest, TokenResponse
from hirevision.schemas.common import Envelope, MessageResponse
from hirevision.schemas.user import UserResponse
from hirevision.services import sso_service
from hirevision.services.auth_service import AuthError, auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=UserResponse, status_code=201)
async def register(req: RegisterRequest, db: Session = Depends(get_db)):
    try:
        user = auth_service.register(
            db,
            email=req.email,
            password=req.password,
            display_name=req.display_name,
            role=req.role,
            organization_name=req.organization_name,
        )
    except AuthError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return user_to_response(user)


@router.post("/login", response_model=TokenResponse)
async def login(req: LoginRequest, db: Session = Depends(get_db)):
    result = auth_service.login(db, req.email, req.password)
    if result is None:
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if result.get("error") == "too_many_attempts":
        retry_after = math.ceil(result["retry_after_seconds"])
        raise HTTPException(
            status_code=429,
            detail=f"Too many failed attempts. Try again in {retry_after} seconds.",
            headers={"Retry-After": str(retry_after)},
        )
    return TokenResponse(**result)


@router.post("/logout", response_model=MessageResponse)
async def logout(token: str = Depends(bearer_token)):
    auth_service.logout(token)
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=UserResponse)
async def me(user: User = Depends(get_current_user)):
    return user_to_response(user)


@router.get("/sso/authorize", response_model=Envelope, response_model_exclude_none=True)
async def sso_authorize(provider: Literal["google", "microsoft", "github"] = "google"):
    state = auth_service.issue_sso_state()
    url = sso_service.authorization_url(provider, state)
    return Envelope(data={"authorization_url": url, "state": state})


@router.post("/sso/callback", response_model=Envelope, response_model_exclude_none=True)
async def sso_callback(req: SSOCallbackRequest, db: Session = Depends(get_db)):
    if not auth_service.consume_sso_state(req.state):
        raise HTTPException(status_code=400, detail="Invalid or expired SSO state")
    profile = await sso_service.exchange_code(req.code)
    user, session = auth_service.sso_login(db, profile)
    return Envelope(data={**session, "user": user_to_response(user).model_dump()})


@router.get("/sso/callback")
async def sso_callback_redirect(
    code: str | None = None,
    state: str | None = None,
    db: Session = Depends(get_db),
):
    def to_login(error: str) -> RedirectResponse:
        return RedirectResponse(f"{settings.frontend_url}/login?{urlencode({'error': error})}")

    if not code:
        return to_login("no_code")
    if not sso_service.is_configured():
        return to_login("not_configured")
    if not auth_service.consume_sso_state(state):
        return to_login("invalid_state")
    try:
        profile = await sso_service.exchange_code(code)
    except sso_service.SSOError:
        return to_login("token_failed")

    _, session = auth_service.sso_login(db, profile)
    return RedirectResponse(f"{settings.frontend_url}/dashboard?{urlencode({'token': session['token']})}")
