"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from cashflow_insights.infrastructure.database.repositories import TransactionRepository
from cashflow_insights.infrastructure.database.session import get_db


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_transaction_repository(db: Session = Depends(get_db)) -> TransactionRepository:
    """Provide a transaction repository bound to the request session"""
    return TransactionRepository(db)
