"""User model definitions."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String
from backend.database import Base

STUDENT = 'student'
ALUMNI = 'alumni'
USER_TYPES = (STUDENT, ALUMNI)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_identity_key() -> str:
    return str(uuid.uuid4())


def parse_identity_key(value: str | None) -> str | None:
    """Return the canonical form of ``value`` or ``None`` if it is not an identity key."""
    if not value:
        return None
    try:
        return str(uuid.UUID(value.strip()))
    except (AttributeError, ValueError):
        return None


class User(Base):
    """Represents a registered student or alumni account."""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_identity_key)
    username = Column(String, unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    name = Column(String, nullable=False)
    phone_no = Column(String)
    linked_in_url = Column(String)
    user_type = Column(String)  # student/alumni
    college_name = Column(String)
    course_name = Column(String)
    company_name = Column(String)
    location = Column(String)
    area_of_expertise = Column(String)
    avatar_url = Column(String)
    avatar_public_id = Column(String)
    refresh_token = Column(String)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
