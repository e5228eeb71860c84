# backend/routers/auth_routes.py
from typing import Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

import config
from auth import SessionUser, get_optional_user
from database import get_session
from models import User
from services import oauth_service

router = APIRouter(prefix="/auth", tags=["auth"])

COOKIE_OPTIONS = {"httponly": True, "secure": True, "samesite": "none", "path": "/"}

class GoogleCodeRequest(BaseModel):
    code: Optional[str] = None

def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        config.SESSION_COOKIE_NAME, token, max_age=config.SESSION_TTL_MINUTES * 60, **COOKIE_OPTIONS
    )

@router.post("/google")
async def google_login(
    response: Response,
    body: Optional[GoogleCodeRequest] = None,
    session: AsyncSession = Depends(get_session),
):
    code = body.code if body else None
    session_token, profile = await oauth_service.exchange_code_for_session(session, code)
    set_session_cookie(response, session_token)
    return {"ok": True, "user": profile}

@router.get("/me")
async def get_me(
    current_user: Optional[SessionUser] = Depends(get_optional_user),
    session: AsyncSession = Depends(get_session),
):
    if current_user is None:
        return {"ok": False}
    user = await session.get(User, current_user.id)
    if user is None:
        return {"ok": False}
    return {"ok": True, "user": user.public_profile()}

@router.post("/logout")
async def logout(response: Response):
    response.delete_cookie(config.SESSION_COOKIE_NAME, **COOKIE_OPTIONS)
    return {"ok": True}
