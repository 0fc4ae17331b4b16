from sqlalchemy import Column, String, DateTime, Integer, Text, ForeignKey, Boolean
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from contest_portal.core.database import Base


class NotificationType(str, enum.Enum):
    REGISTRATION_REVIEW = "registration_review"
    AWARD_REVIEW = "award_review"
    CERTIFICATE_ISSUED = "certificate_issued"


class Notification(Base):
    """Persisted notification; the real-time push is a best-effort copy"""
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(50), nullable=False)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    is_read = Column(Boolean, default=False, nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="notifications")

    def __repr__(self):
        return f"<Notification {self.id} user={self.user_id} {self.type}>"
