# backend/guards.py
"""Ownership checks shared by the scoped attendance routes.

``require_owned`` builds a FastAPI dependency from a loader and an owner
accessor, so each route declares which resource it guards instead of
repeating the lookup and comparison inline.
"""
from typing import Any, Awaitable, Callable, Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from auth import SessionUser, get_current_user
from database import get_session
from models import Course

Loader = Callable[[AsyncSession, int], Awaitable[Optional[Any]]]


def parse_id(raw: Optional[str], label: str) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        value = 0
    if value <= 0:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid {label} ID.")
    return value


def ensure_caller(current_user: SessionUser, user_id: int, message: str) -> None:
    if current_user.id != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=message)


def require_owned(
    loader: Loader,
    owner_of: Callable[[Any], int],
    *,
    id_param: str,
    label: str,
) -> Callable[..., Awaitable[Any]]:
    """Dependency factory: load ``id_param`` and check it belongs to the path user and the caller."""

    async def dependency(
        request: Request,
        current_user: SessionUser = Depends(get_current_user),
        session: AsyncSession = Depends(get_session),
    ):
        user_id = parse_id(request.path_params.get("userId"), "user")
        resource_id = parse_id(request.path_params.get(id_param), label.lower())

        resource = await loader(session, resource_id)
        if resource is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found.")
        if owner_of(resource) != user_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"{label} does not belong to the provided user ID.",
            )
        ensure_caller(current_user, user_id, f"You do not have permission to access this {label.lower()}.")
        return resource

    return dependency


async def require_self(request: Request, current_user: SessionUser = Depends(get_current_user)) -> int:
    """Path user must be the authenticated caller; returns the parsed user id."""
    user_id = parse_id(request.path_params.get("userId"), "user")
    ensure_caller(current_user, user_id, "You do not have permission to access this resource.")
    return user_id


async def load_course(session: AsyncSession, course_id: int) -> Optional[Course]:
    return await session.get(Course, course_id)


owned_course = require_owned(load_course, lambda course: course.userId, id_param="courseId", label="Course")
