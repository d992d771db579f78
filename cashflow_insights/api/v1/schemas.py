"""Pydantic schemas for API request validation"""

from datetime import date, time
from typing import List, Optional

from pydantic import BaseModel, Field

from cashflow_insights.domain.models import Category, PaymentMethod, Transaction, TransactionType


class TransactionIn(BaseModel):
    """Single transaction supplied by the caller"""

    id: str = Field(..., min_length=1, description="Opaque transaction identifier")
    date: date
    amount: float = Field(..., description="Signed amount; negative for money leaving the account")
    merchant: str = Field(..., description="Counterparty name")
    payment_method: PaymentMethod = PaymentMethod.OTHER
    category: Optional[Category] = None
    transaction_type: Optional[TransactionType] = None
    notes: Optional[str] = None
    time_of_day: Optional[time] = None

    def to_domain(self) -> Transaction:
        return Transaction(
            id=self.id,
            date=self.date,
            amount=self.amount,
            merchant=self.merchant,
            payment_method=self.payment_method,
            category=self.category,
            transaction_type=self.transaction_type,
            notes=self.notes,
            time_of_day=self.time_of_day,
        )


class TargetPeriod(BaseModel):
    """Calendar month to analyze"""

    year: int
    month: int


class ReportRequest(BaseModel):
    """Request body for POST /v1/report"""

    transactions: List[TransactionIn]
    balance: float = 0.0
    target_period: Optional[TargetPeriod] = None
    today: Optional[date] = Field(None, description="Reference date for projections, defaults to the server date")
