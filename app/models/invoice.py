import enum
from datetime import datetime

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from app.db.base import Base, generate_id


class InvoiceStatus(str, enum.Enum):
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


invoice_shifts = Table(
    "invoice_shifts",
    Base.metadata,
    Column("invoice_id", String(36), ForeignKey("invoices.id", ondelete="CASCADE"), primary_key=True),
    Column("shift_id", String(36), ForeignKey("shifts.id", ondelete="CASCADE"), primary_key=True),
)

invoice_mileages = Table(
    "invoice_mileages",
    Base.metadata,
    Column("invoice_id", String(36), ForeignKey("invoices.id", ondelete="CASCADE"), primary_key=True),
    Column("mileage_id", String(36), ForeignKey("mileages.id", ondelete="CASCADE"), primary_key=True),
)


class Invoice(Base):
    __tablename__ = "invoices"
    __table_args__ = (
        UniqueConstraint("user_id", "invoice_number", name="uq_invoices_user_number"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    client_id = Column(String(36), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)

    invoice_number = Column(String, nullable=False)
    issue_date = Column(DateTime, nullable=False)
    due_date = Column(DateTime, nullable=True)

    status = Column(
        Enum(InvoiceStatus, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=InvoiceStatus.DRAFT,
    )

    # Derived from the claimed shifts and mileages, never edited directly
    hours_total = Column(Float, nullable=False, default=0)
    earnings_total = Column(Float, nullable=False, default=0)
    mileage_total = Column(Float, nullable=False, default=0)
    hst_total = Column(Float, nullable=False, default=0)
    grand_total = Column(Float, nullable=False, default=0)

    notes = Column(Text, nullable=True)
    payment_notes = Column(Text, nullable=True)
    payment_proof_filename = Column(String, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    client = relationship("Client")
    shifts = relationship("Shift", secondary=invoice_shifts, order_by="Shift.start_time")
    mileages = relationship("Mileage", secondary=invoice_mileages, order_by="Mileage.date")


class InvoiceSequence(Base):
    """Per-user invoice number counter."""

    __tablename__ = "invoice_sequences"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    current_value = Column(Integer, nullable=False, default=0)
