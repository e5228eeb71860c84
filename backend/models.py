# backend/models.py
from typing import Any, List, Optional

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import Field, SQLModel

class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    googleId: str = Field(unique=True, index=True)
    email_address: str
    name: Optional[str] = Field(default=None)
    image: Optional[str] = Field(default=None, max_length=512)
    verified: bool = Field(default=False)
    refreshToken: str = Field(default="", max_length=2048)

    def public_profile(self) -> dict:
        """Profile fields that are safe to hand to the browser."""
        return {
            "id": self.id,
            "email_address": self.email_address,
            "name": self.name,
            "image": self.image,
            "verified": self.verified,
        }

class Course(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("userId", "IndivCourse", name="uq_course_user_name"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    userId: int = Field(foreign_key="user.id", index=True)
    IndivCourse: str
    timeofcourse: str = Field(default="")
    Totaldays: int = Field(default=35)
    present: int = Field(default=0)
    absent: int = Field(default=0)
    cancelled: int = Field(default=0)
    criteria: int = Field(default=75)
    days: List[Any] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
