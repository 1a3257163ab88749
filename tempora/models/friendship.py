from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base
from .enums import FriendshipStatus


class Friendship(Base):
    """Stored once per pair: user_id1 sent the request, user_id2 received it"""

    __tablename__ = "friendships"

    user_id1 = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    user_id2 = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    status = Column(String, nullable=False, default=FriendshipStatus.PENDING.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    user1 = relationship("User", foreign_keys=[user_id1])
    user2 = relationship("User", foreign_keys=[user_id2])

    @property
    def key(self) -> str:
        return f"{self.user_id1}-{self.user_id2}"

    def other_user(self, user_id: int):
        return self.user2 if self.user_id1 == user_id else self.user1

    def to_dict(self):
        return {
            "id": self.key,
            "user_id1": self.user_id1,
            "user_id2": self.user_id2,
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
