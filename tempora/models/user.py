from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base
from .enums import UserType


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    fname = Column(String, nullable=True)
    lname = Column(String, nullable=True)
    hashed_password = Column(String, nullable=True)
    type = Column(String, nullable=False, default=UserType.USER.value)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    schedules = relationship(
        "Schedule",
        back_populates="owner",
        cascade="all, delete-orphan",
        order_by="Schedule.id",
    )

    @property
    def name(self) -> str:
        """Display name: first/last name, falling back to the email local part"""
        full_name = " ".join(part for part in (self.fname, self.lname) if part)
        return full_name or self.email.split("@")[0]

    @property
    def is_admin(self) -> bool:
        return self.type == UserType.ADMIN.value

    @classmethod
    def find_by_email(cls, db_session, email: str):
        """Find user by email (case-insensitive)"""
        return (
            db_session.query(cls).filter(func.lower(cls.email) == email.lower()).first()
        )

    def to_dict(self):
        """Convert user to dictionary for API responses"""
        return {
            "id": self.id,
            "email": self.email,
            "fname": self.fname,
            "lname": self.lname,
            "name": self.name,
            "type": self.type,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def to_public_dict(self):
        """Subset safe to show to other users"""
        return {
            "id": self.id,
            "email": self.email,
            "fname": self.fname,
            "lname": self.lname,
            "name": self.name,
        }
