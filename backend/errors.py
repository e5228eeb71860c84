# backend/errors.py
"""Failure kinds raised by the session and OAuth code paths.

Each one is an ``HTTPException`` so FastAPI renders it through the same
``{"error": ...}`` handler as the route-level errors.
"""
from typing import Optional

from fastapi import HTTPException, status


class AppError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Unexpected server error."
    response_headers: Optional[dict] = None

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            status_code=self.status_code, detail=message or self.message, headers=self.response_headers
        )


class MissingToken(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Missing token"
    response_headers = {"WWW-Authenticate": "Bearer"}


class InvalidOrExpiredToken(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid or expired token"
    response_headers = {"WWW-Authenticate": "Bearer"}


class MissingCode(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Missing Google auth code"


class ServerMisconfigured(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Server misconfiguration"


class TokenExchangeFailed(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Failed to get ID token"


class InvalidIdentityToken(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid Google token"


class IncompleteIdentity(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Missing Google user info"


class IdentityProviderError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Google authentication failed"
