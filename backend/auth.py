# backend/auth.py
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from authlib.integrations.starlette_client import OAuth
from fastapi import Request
from jose import JWTError, jwt

import config
from errors import InvalidOrExpiredToken, MissingToken

oauth = OAuth()
oauth.register(
    name='google', client_id=config.GOOGLE_CLIENT_ID, client_secret=config.GOOGLE_CLIENT_SECRET,
    server_metadata_url=config.GOOGLE_METADATA_URL,
    client_kwargs={'scope': 'openid email profile https://www.googleapis.com/auth/calendar.events'}
)

ALGORITHM = "HS256"


@dataclass(frozen=True)
class SessionUser:
    id: int
    email: str


def create_session_token(user_id: int, email: str, issued_at: Optional[datetime] = None) -> str:
    issued_at = issued_at or datetime.now(timezone.utc)
    expire = issued_at + timedelta(minutes=config.SESSION_TTL_MINUTES)
    to_encode = {"id": user_id, "email": email, "iat": issued_at, "exp": expire}
    return jwt.encode(to_encode, config.JWT_SECRET, algorithm=ALGORITHM)


def verify_session_token(token: str) -> SessionUser:
    """Decode a session token or raise InvalidOrExpiredToken.

    python-jose checks the signature and the ``exp`` claim; a token without a
    usable ``id`` claim is treated the same as a forged one.
    """
    try:
        payload = jwt.decode(token, config.JWT_SECRET, algorithms=[ALGORITHM])
    except JWTError:
        raise InvalidOrExpiredToken()
    user_id = payload.get("id")
    if isinstance(user_id, bool) or not isinstance(user_id, int):
        raise InvalidOrExpiredToken()
    return SessionUser(id=user_id, email=payload.get("email") or "")


def extract_token(request: Request) -> Optional[str]:
    token = request.cookies.get(config.SESSION_COOKIE_NAME)
    if token:
        return token
    auth_header = request.headers.get("Authorization")
    if auth_header:
        parts = auth_header.split(" ")
        if len(parts) == 2 and parts[1]:
            return parts[1]
    return None


async def get_optional_user(request: Request) -> Optional[SessionUser]:
    token = extract_token(request)
    if not token:
        return None
    try:
        return verify_session_token(token)
    except InvalidOrExpiredToken:
        return None


async def get_current_user(request: Request) -> SessionUser:
    token = extract_token(request)
    if not token:
        raise MissingToken()
    return verify_session_token(token)
