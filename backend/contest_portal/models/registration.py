from sqlalchemy import Column, DateTime, Enum as SQLEnum, Integer, Text, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from contest_portal.core.database import Base


class RegistrationStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class Registration(Base):
    """A user's claim to take part in one competition"""
    __tablename__ = "registrations"
    __table_args__ = (
        UniqueConstraint("user_id", "competition_id", name="uq_registration_user_competition"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    competition_id = Column(
        Integer, ForeignKey("competitions.id", ondelete="CASCADE"), nullable=False, index=True
    )

    status = Column(
        SQLEnum(RegistrationStatus, values_callable=lambda obj: [e.value for e in obj]),
        default=RegistrationStatus.PENDING,
        nullable=False,
        index=True,
    )
    registration_data = Column(JSON, nullable=True)
    # List of {url, originalName, filename, mime, size, uploadedAt}
    attachments = Column(JSON, nullable=True)

    # Review metadata
    reviewed_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    reviewed_at = Column(DateTime, nullable=True)
    review_notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="registrations", foreign_keys=[user_id])
    competition = relationship("Competition", back_populates="registrations")
    reviewer = relationship("User", foreign_keys=[reviewed_by])

    def __repr__(self):
        return f"<Registration {self.id} user={self.user_id} competition={self.competition_id}>"
