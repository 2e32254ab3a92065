from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from app.db.base import Base, generate_id


class Mileage(Base):
    __tablename__ = "mileages"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    client_id = Column(String(36), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)

    date = Column(DateTime, nullable=False)
    distance = Column(Float, nullable=False)
    rate_per_km = Column(Float, nullable=False)
    amount = Column(Float, nullable=False, default=0)

    description = Column(Text, nullable=True)
    from_location = Column(String, nullable=True)
    to_location = Column(String, nullable=True)

    is_invoiced = Column(Boolean, nullable=False, default=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    client = relationship("Client")
