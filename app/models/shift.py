import enum
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Enum, Float, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from app.db.base import Base, generate_id


class ShiftType(str, enum.Enum):
    REGULAR = "regular"
    OVERTIME = "overtime"
    HOLIDAY = "holiday"
    NIGHT = "night"
    WEEKEND = "weekend"


class Shift(Base):
    __tablename__ = "shifts"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    client_id = Column(String(36), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)

    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    shift_type = Column(
        Enum(ShiftType, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ShiftType.REGULAR,
    )

    hourly_rate = Column(Float, nullable=False)
    total_hours = Column(Float, nullable=False, default=0)
    earnings = Column(Float, nullable=False, default=0)
    hst_amount = Column(Float, nullable=False, default=0)

    notes = Column(Text, nullable=True)
    location = Column(String, nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    # Claim flag: true while exactly one invoice holds this shift
    is_invoiced = Column(Boolean, nullable=False, default=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    client = relationship("Client")
