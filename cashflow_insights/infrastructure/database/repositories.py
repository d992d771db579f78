"""Read-only data access for stored transactions"""

from typing import List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from cashflow_insights.domain.exceptions import TransactionSourceError
from cashflow_insights.domain.models import Category, PaymentMethod, Transaction, TransactionType
from cashflow_insights.infrastructure.database.models import TransactionRecord

NEGATIVE_TYPES = (TransactionType.EXPENSE, TransactionType.WITHDRAWAL, TransactionType.INVESTMENT)


def _enum_or_none(enum_cls, value: Optional[str]):
    if value is None:
        return None
    try:
        return enum_cls(value.upper())
    except ValueError:
        return None


def to_domain(record: TransactionRecord) -> Transaction:
    """
    Convert a stored row into an engine transaction.

    Stored amounts are unsigned; EXPENSE, WITHDRAWAL and INVESTMENT become
    negative, DEPOSIT and INCOME positive. Unknown categories fall back to
    keyword categorization, unknown payment methods to OTHER.
    """
    transaction_type = _enum_or_none(TransactionType, record.type)
    amount = abs(record.amount)
    if transaction_type in NEGATIVE_TYPES:
        amount = -amount

    return Transaction(
        id=str(record.id),
        date=record.date,
        amount=amount,
        merchant=record.name,
        payment_method=_enum_or_none(PaymentMethod, record.payment_method) or PaymentMethod.OTHER,
        category=_enum_or_none(Category, record.category),
        transaction_type=transaction_type,
        notes=record.notes,
        time_of_day=record.time,
    )


def derive_balance(transactions: Sequence[Transaction]) -> float:
    """Deposits and income minus expenses, withdrawals and investments"""
    return sum(t.amount for t in transactions)


class TransactionRepository:
    """Repository for stored transactions"""

    def __init__(self, db: Session):
        self.db = db

    def get_records_by_user(self, user_id: str) -> List[TransactionRecord]:
        """Fetch every stored transaction for a user, oldest first"""
        return (
            self.db.query(TransactionRecord)
            .filter(TransactionRecord.user_id == user_id)
            .order_by(TransactionRecord.date.asc(), TransactionRecord.time.asc())
            .all()
        )

    def get_transactions_by_user(self, user_id: str) -> List[Transaction]:
        """Load a user's history as engine transactions"""
        try:
            records = self.get_records_by_user(user_id)
        except SQLAlchemyError as e:
            raise TransactionSourceError(f"Failed to load transactions for {user_id}: {e}") from e
        return [to_domain(record) for record in records]
