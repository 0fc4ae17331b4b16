from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Integer, Text
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from contest_portal.core.database import Base


class UserRole(str, enum.Enum):
    """User roles"""
    USER = "user"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class UserStatus(str, enum.Enum):
    """Account status - only active accounts may log in"""
    ACTIVE = "active"
    DISABLED = "disabled"


REVIEWER_ROLES = (UserRole.ADMIN, UserRole.SUPER_ADMIN)


class User(Base):
    """User model"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    student_id = Column(String(50), unique=True, index=True, nullable=True)
    phone = Column(String(20), index=True, nullable=True)
    hashed_password = Column(String(255), nullable=False)

    # Profile fields
    real_name = Column(String(100), nullable=True)
    avatar = Column(Text, nullable=True)

    role = Column(
        SQLEnum(UserRole, values_callable=lambda obj: [e.value for e in obj]),
        default=UserRole.USER,
        nullable=False,
    )
    status = Column(
        SQLEnum(UserStatus, values_callable=lambda obj: [e.value for e in obj]),
        default=UserStatus.ACTIVE,
        nullable=False,
    )

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    registrations = relationship(
        "Registration",
        back_populates="user",
        foreign_keys="Registration.user_id",
        cascade="all, delete-orphan",
    )
    awards = relationship(
        "Award",
        back_populates="user",
        foreign_keys="Award.user_id",
        cascade="all, delete-orphan",
    )
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE

    @property
    def is_reviewer(self) -> bool:
        return self.role in REVIEWER_ROLES

    @property
    def display_name(self) -> str:
        return self.real_name or self.username or f"user-{self.id}"

    def __repr__(self):
        return f"<User {self.username}>"
