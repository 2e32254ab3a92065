from datetime import datetime

from sqlalchemy import Column, DateTime, Float, String
from sqlalchemy.orm import relationship

from app.core.config import settings
from app.db.base import Base, generate_id


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_id)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    hashed_password = Column(String, nullable=False)

    # Profile defaults applied when shifts and mileage entries are created
    hourly_rate = Column(Float, nullable=True)
    hst_percentage = Column(Float, default=settings.DEFAULT_HST_PERCENTAGE)
    mileage_rate = Column(Float, default=settings.DEFAULT_MILEAGE_RATE)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    clients = relationship("Client", back_populates="user", cascade="all, delete-orphan")
