# backend/routers/attendance.py
import logging
from typing import Any, List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator
from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from database import get_session
from guards import owned_course, parse_id, require_self
from models import Course, User
from services import calendar_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/attendance", tags=["attendance"])

COUNT_DEFAULTS = {"Totaldays": 35, "present": 0, "absent": 0, "cancelled": 0, "criteria": 75}
# Checked in this order when deciding which status an update recorded.
ATTENDANCE_COUNTERS = (("present", "Present"), ("absent", "Absent"), ("cancelled", "Cancelled"))
LIST_LIMIT = 100


def coerce_count(value: Any, default: int) -> int:
    """Lenient number parsing: anything unusable (or negative) falls back to ``default``.

    Zero is kept for the counters but not for fields whose default is non-zero.
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        number = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default
    if number < 0 or (number == 0 and default):
        return default
    return number


# --- Pydantic Models ---
class CourseFields(BaseModel):
    model_config = ConfigDict(extra="ignore")

    @field_validator("Totaldays", "present", "absent", "cancelled", "criteria", mode="before", check_fields=False)
    @classmethod
    def _coerce_counts(cls, value: Any, info: ValidationInfo) -> int:
        return coerce_count(value, COUNT_DEFAULTS[info.field_name])

    @field_validator("timeofcourse", mode="before", check_fields=False)
    @classmethod
    def _coerce_time(cls, value: Any) -> str:
        if not value:
            return ""
        return value if isinstance(value, str) else str(value)

    @field_validator("days", mode="before", check_fields=False)
    @classmethod
    def _coerce_days(cls, value: Any) -> list:
        return value if isinstance(value, list) else []


class CourseCreate(CourseFields):
    IndivCourse: Any = None
    timeofcourse: str = ""
    Totaldays: int = 35
    present: int = 0
    absent: int = 0
    cancelled: int = 0
    criteria: int = 75
    days: List[Any] = []


class CourseUpdate(CourseFields):
    IndivCourse: Any = None
    timeofcourse: Optional[str] = None
    Totaldays: Optional[int] = None
    present: Optional[int] = None
    absent: Optional[int] = None
    cancelled: Optional[int] = None
    criteria: Optional[int] = None
    days: Optional[List[Any]] = None


def clean_course_name(value: Any, message: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)
    return value.strip()


def attendance_status(previous: dict, course: Course) -> Optional[str]:
    for field, label in ATTENDANCE_COUNTERS:
        if getattr(course, field) > previous[field]:
            return label
    return None


def duplicate_name_error() -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Course with that name already exists.")


async def find_course_by_name(session: AsyncSession, user_id: int, name: str) -> Optional[Course]:
    statement = select(Course).where(Course.userId == user_id, Course.IndivCourse == name)
    result = await session.execute(statement)
    return result.scalars().first()


async def commit_or_fail(session: AsyncSession) -> None:
    """Commit; IntegrityError propagates after rollback, other storage errors become a 500."""
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise
    except SQLAlchemyError:
        await session.rollback()
        logger.exception("Database error while saving courses")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Unexpected server error.")


# --- API Routes ---
@router.post("/{userId}", status_code=status.HTTP_201_CREATED)
async def create_course(
    userId: str,
    body: Optional[CourseCreate] = None,
    session: AsyncSession = Depends(get_session),
):
    user_id = parse_id(userId, "user")
    if body is None:
        body = CourseCreate()
    name = clean_course_name(body.IndivCourse, "Course name is required and must be a non-empty string.")
    if await find_course_by_name(session, user_id, name):
        raise duplicate_name_error()

    course = Course(userId=user_id, IndivCourse=name, **body.model_dump(exclude={"IndivCourse"}))
    session.add(course)
    try:
        await commit_or_fail(session)
    except IntegrityError:
        # Lost a race with a concurrent create of the same name.
        if await find_course_by_name(session, user_id, name):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Course name must be unique for each user.")
        logger.exception("Could not create course for user %s", user_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Unexpected server error.")
    await session.refresh(course)
    return {"ok": True, "data": course}


@router.get("/{userId}")
async def list_courses(userId: str, session: AsyncSession = Depends(get_session)):
    user_id = parse_id(userId, "user")
    statement = select(Course).where(Course.userId == user_id).order_by(Course.id).limit(LIST_LIMIT)
    result = await session.execute(statement)
    return {"ok": True, "data": result.scalars().all()}


@router.delete("/{userId}")
async def delete_all_courses(user_id: int = Depends(require_self), session: AsyncSession = Depends(get_session)):
    await session.execute(delete(Course).where(Course.userId == user_id))
    await commit_or_fail(session)
    logger.info("Deleted all courses for user %s", user_id)
    return {"ok": True}


@router.post("/{userId}/reset")
async def reset_all_courses(user_id: int = Depends(require_self), session: AsyncSession = Depends(get_session)):
    await session.execute(
        update(Course).where(Course.userId == user_id).values(present=0, absent=0, cancelled=0)
    )
    await commit_or_fail(session)
    return {"ok": True}


@router.get("/{userId}/{courseId}")
async def get_course(course: Course = Depends(owned_course)):
    return {"ok": True, "data": course}


@router.put("/{userId}/{courseId}")
async def update_course(
    background_tasks: BackgroundTasks,
    body: Optional[CourseUpdate] = None,
    course: Course = Depends(owned_course),
    session: AsyncSession = Depends(get_session),
):
    changes = body.model_dump(exclude_unset=True) if body is not None else {}
    if "IndivCourse" in changes:
        name = clean_course_name(changes["IndivCourse"], "Course name must be a non-empty string.")
        if name != course.IndivCourse:
            existing = await find_course_by_name(session, course.userId, name)
            if existing and existing.id != course.id:
                raise duplicate_name_error()
        changes["IndivCourse"] = name

    previous = {field: getattr(course, field) for field, _ in ATTENDANCE_COUNTERS}
    for field, value in changes.items():
        setattr(course, field, value)
    session.add(course)
    try:
        await commit_or_fail(session)
    except IntegrityError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Course name must be unique for each user.")
    await session.refresh(course)

    marked = attendance_status(previous, course)
    if marked:
        user = await session.get(User, course.userId)
        background_tasks.add_task(calendar_service.notify_attendance, user, course.IndivCourse, marked)
    return {"ok": True, "data": course}


@router.delete("/{userId}/{courseId}")
async def delete_course(course: Course = Depends(owned_course), session: AsyncSession = Depends(get_session)):
    await session.delete(course)
    await commit_or_fail(session)
    return {"ok": True}


@router.post("/{userId}/{courseId}/reset")
async def reset_course(course: Course = Depends(owned_course), session: AsyncSession = Depends(get_session)):
    course.present = 0
    course.absent = 0
    course.cancelled = 0
    session.add(course)
    await commit_or_fail(session)
    await session.refresh(course)
    return {"ok": True, "data": course}
