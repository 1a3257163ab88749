from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    ForeignKey,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base
from ..utils.date_helpers import DateHelpers
from .enums import RepeatFrequency


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text)
    repeated = Column(String, nullable=False, default=RepeatFrequency.NEVER.value)
    repeat_until = Column(DateTime, nullable=True)

    schedule_id = Column(
        Integer,
        ForeignKey("schedules.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    schedule = relationship("Schedule", back_populates="events")
    time_slots = relationship(
        "EventTimeSlot",
        back_populates="event",
        cascade="all, delete-orphan",
        order_by="EventTimeSlot.position",
    )

    @property
    def first_start(self):
        return self.time_slots[0].start if self.time_slots else None

    def to_dict(self):
        """Convert event to dictionary for API and tool responses"""
        return {
            "id": self.id,
            "scheduleId": self.schedule_id,
            "scheduleName": self.schedule.name if self.schedule else None,
            "name": self.name,
            "description": self.description,
            "timeSlots": [slot.to_dict() for slot in self.time_slots],
            "repeated": self.repeated,
            "repeatUntil": DateHelpers.to_iso(self.repeat_until),
        }


class EventTimeSlot(Base):
    """One start/end pair of an event; all slots share the event's recurrence"""

    __tablename__ = "event_time_slots"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(
        Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position = Column(Integer, nullable=False, default=0)

    # Naive UTC
    start = Column(DateTime, nullable=False)
    end = Column(DateTime, nullable=False)

    event = relationship("Event", back_populates="time_slots")

    @property
    def duration_minutes(self) -> int:
        return DateHelpers.duration_minutes(self.start, self.end)

    def to_dict(self):
        return {
            "start": DateHelpers.to_iso(self.start),
            "end": DateHelpers.to_iso(self.end),
            "durationMinutes": self.duration_minutes,
        }
