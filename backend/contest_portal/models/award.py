from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Integer, Text, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from contest_portal.core.database import Base


class AwardLevel(str, enum.Enum):
    SCHOOL = "school"
    PROVINCIAL = "provincial"
    NATIONAL = "national"
    COLLEGE = "college"


# Levels a user may submit for review; college awards are issued by administrators
SELF_SUBMITTED_LEVELS = (AwardLevel.SCHOOL, AwardLevel.PROVINCIAL, AwardLevel.NATIONAL)


class AwardStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Award(Base):
    """An award claim submitted by a user or issued by an administrator"""
    __tablename__ = "awards"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    competition_id = Column(
        Integer, ForeignKey("competitions.id", ondelete="SET NULL"), nullable=True, index=True
    )

    award_level = Column(
        SQLEnum(AwardLevel, values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
        index=True,
    )
    award_name = Column(String(255), nullable=False)
    award_rank = Column(String(100), nullable=True)
    award_time = Column(DateTime, nullable=False)
    certificate_image = Column(Text, nullable=True)
    certificate_number = Column(String(50), unique=True, nullable=True)
    description = Column(Text, nullable=True)

    status = Column(
        SQLEnum(AwardStatus, values_callable=lambda obj: [e.value for e in obj]),
        default=AwardStatus.PENDING,
        nullable=False,
        index=True,
    )

    issued_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    reviewed_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    reviewed_at = Column(DateTime, nullable=True)
    review_notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="awards", foreign_keys=[user_id])
    competition = relationship("Competition", back_populates="award_entries")

    @property
    def is_reviewable(self) -> bool:
        return self.award_level != AwardLevel.COLLEGE

    def __repr__(self):
        return f"<Award {self.id} {self.award_level} {self.award_name}>"
