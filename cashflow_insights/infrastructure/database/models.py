"""SQLAlchemy ORM models for stored transactions"""

import uuid

from sqlalchemy import Column, Date, DateTime, Float, Text, Time
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class TransactionRecord(Base):
    """Stored financial transaction; amounts are unsigned, ``type`` carries the direction"""

    __tablename__ = "transactions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    name = Column(Text, nullable=False)
    type = Column(Text, nullable=False)  # DEPOSIT | EXPENSE | INVESTMENT | INCOME | WITHDRAWAL
    amount = Column(Float, nullable=False)
    category = Column(Text, nullable=True)
    payment_method = Column(Text, nullable=True)
    date = Column(Date, nullable=False, index=True)
    time = Column(Time, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
