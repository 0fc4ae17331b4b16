from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Integer, Text, ForeignKey, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from contest_portal.core.database import Base


class CompetitionStatus(str, enum.Enum):
    """Advisory competition status, set explicitly by administrators"""
    DRAFT = "draft"
    OPEN = "open"
    CLOSED = "closed"
    IN_PROGRESS = "in_progress"
    ENDED = "ended"
    CANCELLED = "cancelled"


class Competition(Base):
    """Competition catalog entry"""
    __tablename__ = "competitions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    type = Column(String(50), nullable=False, default="other", index=True)
    cover_image = Column(Text, nullable=True)

    # Time windows
    registration_start = Column(DateTime, nullable=False)
    registration_end = Column(DateTime, nullable=False)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)

    # 0 means unlimited
    max_participants = Column(Integer, nullable=False, default=0)
    # Audit counter: incremented once per approval, never decremented
    current_participants = Column(Integer, nullable=False, default=0)

    requirements = Column(JSON, nullable=True)
    rules = Column(JSON, nullable=True)
    awards = Column(JSON, nullable=True)

    status = Column(
        SQLEnum(CompetitionStatus, values_callable=lambda obj: [e.value for e in obj]),
        default=CompetitionStatus.DRAFT,
        nullable=False,
        index=True,
    )
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    creator = relationship("User", foreign_keys=[created_by])
    registrations = relationship(
        "Registration",
        back_populates="competition",
        cascade="all, delete-orphan",
    )
    # Awards keep their record when the competition goes; the link is cleared
    award_entries = relationship("Award", back_populates="competition")

    def is_registration_open(self, now: datetime) -> bool:
        return self.registration_start <= now <= self.registration_end

    def __repr__(self):
        return f"<Competition {self.id} {self.title}>"
