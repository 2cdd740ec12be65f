"""Follow edge model definitions."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from backend.database import Base, FOLLOW_PAIR_INDEX
from backend.models.user import utcnow


class Follow(Base):
    """A directed follow edge from ``follow_from`` to ``follow_to``."""
    __tablename__ = "follows"
    __table_args__ = (
        UniqueConstraint('follow_from', 'follow_to', name=FOLLOW_PAIR_INDEX),
    )

    id = Column(Integer, primary_key=True)
    follow_from = Column(String(36), ForeignKey("users.id"), nullable=False)
    follow_to = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
