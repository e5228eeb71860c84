# backend/services/oauth_service.py
"""Google authorization-code exchange and local user upsert."""
import logging
from typing import Optional, Tuple

import httpx
from authlib.common.errors import AuthlibBaseError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

import config
from auth import create_session_token, oauth
from errors import (
    IdentityProviderError,
    IncompleteIdentity,
    InvalidIdentityToken,
    MissingCode,
    ServerMisconfigured,
    TokenExchangeFailed,
)
from models import User

logger = logging.getLogger(__name__)


async def fetch_provider_tokens(code: str) -> dict:
    assert oauth.google is not None
    return await oauth.google.fetch_access_token(code=code, redirect_uri=config.GOOGLE_REDIRECT_URI)


async def verify_identity_token(token: dict) -> Optional[dict]:
    """Checks the ID token signature against Google's JWKS and the audience against our client id."""
    assert oauth.google is not None
    claims = await oauth.google.parse_id_token(token, nonce=None)
    return dict(claims) if claims else None


async def find_or_create_user(session: AsyncSession, claims: dict, refresh_token: Optional[str]) -> User:
    statement = select(User).where(User.googleId == claims["sub"])
    result = await session.execute(statement)
    db_user = result.scalar_one_or_none()

    if db_user:
        db_user.email_address = claims["email"]
        db_user.name = claims.get("name")
        db_user.image = claims.get("picture")
        db_user.verified = True
        # Google only returns a refresh token on first consent; keep the stored one otherwise.
        if refresh_token:
            db_user.refreshToken = refresh_token
    else:
        db_user = User(
            googleId=claims["sub"], email_address=claims["email"], name=claims.get("name"),
            image=claims.get("picture"), verified=True, refreshToken=refresh_token or "",
        )
    session.add(db_user)
    await session.commit()
    await session.refresh(db_user)
    return db_user


async def exchange_code_for_session(session: AsyncSession, code: Optional[str]) -> Tuple[str, dict]:
    """Redeem a Google auth code and mint a session token for the matching local user.

    Returns ``(session_token, public_profile)``. Provider and network failures
    surface as IdentityProviderError (401); a bad or reused code is the usual
    cause, not a server fault.
    """
    if not code:
        raise MissingCode()
    if not config.GOOGLE_CLIENT_SECRET:
        logger.error("GOOGLE_CLIENT_SECRET is not configured")
        raise ServerMisconfigured()

    try:
        token = await fetch_provider_tokens(code)
    except (AuthlibBaseError, httpx.HTTPError, ValueError) as e:
        logger.warning("Google code exchange failed: %s", e)
        raise IdentityProviderError()

    if not token or not token.get("id_token"):
        raise TokenExchangeFailed()

    try:
        claims = await verify_identity_token(token)
    except (AuthlibBaseError, httpx.HTTPError, ValueError) as e:
        logger.warning("Google ID token rejected: %s", e)
        raise InvalidIdentityToken()
    if not claims:
        raise InvalidIdentityToken()

    if not claims.get("sub") or not claims.get("email"):
        raise IncompleteIdentity()

    user = await find_or_create_user(session, claims, token.get("refresh_token"))
    session_token = create_session_token(user.id, user.email_address)
    logger.info("User %s signed in", user.id)
    return session_token, user.public_profile()
