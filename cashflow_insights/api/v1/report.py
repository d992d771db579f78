"""Financial report endpoints"""

import logging
import time
from datetime import date
from typing import Optional, Sequence, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from starlette.responses import Response

from cashflow_insights.api.dependencies import get_request_id, get_transaction_repository
from cashflow_insights.api.v1.schemas import ReportRequest
from cashflow_insights.config import settings
from cashflow_insights.domain.exceptions import InvalidPeriodError, TransactionSourceError
from cashflow_insights.domain.models import FinancialReport, Transaction
from cashflow_insights.domain.report import generate_report
from cashflow_insights.domain.serialization import report_to_json
from cashflow_insights.infrastructure.database.repositories import TransactionRepository, derive_balance
from cashflow_insights.infrastructure.observability.logging import log_report
from cashflow_insights.infrastructure.observability.metrics import (
    record_report,
    transaction_source_failures_counter,
)

router = APIRouter()


def _run_report(
    transactions: Sequence[Transaction],
    balance: float,
    target_period: Optional[Tuple[int, int]],
    today: Optional[date],
    request_id: str,
    user_id: str,
) -> Response:
    start_time = time.time()

    try:
        report: FinancialReport = generate_report(
            transactions,
            balance,
            target_period,
            today=today,
            top_n=settings.top_n_limit,
            reduction_percentages=settings.reduction_percentages,
        )
    except InvalidPeriodError as e:
        logging.warning(f"Invalid period: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    record_report(report)
    log_report(
        request_id,
        user_id,
        report.summary.transaction_count,
        len(report.anomalies),
        report.projection.confidence.value,
        duration_ms,
    )

    return Response(content=report_to_json(report), media_type="application/json")


@router.post("/report")
def create_report(request_body: ReportRequest, request: Request):
    """
    Build a financial report from transactions supplied in the request body.

    Returns:
        Serialized FinancialReport
    """
    request_id = get_request_id(request)
    target = request_body.target_period
    return _run_report(
        [t.to_domain() for t in request_body.transactions],
        request_body.balance,
        (target.year, target.month) if target else None,
        request_body.today,
        request_id,
        user_id="anonymous",
    )


@router.get("/report/{user_id}")
def get_user_report(
    user_id: str,
    request: Request,
    year: Optional[int] = Query(None, description="Year of the month to analyze"),
    month: Optional[int] = Query(None, description="Month to analyze (1-12)"),
    balance: Optional[float] = Query(None, description="Current balance; derived from history when omitted"),
    today: Optional[date] = Query(None, description="Reference date for projections"),
    repository: TransactionRepository = Depends(get_transaction_repository),
):
    """
    Build a financial report from the user's stored transactions.

    Omitting year and month analyzes the whole history.
    """
    request_id = get_request_id(request)

    if (year is None) != (month is None):
        raise HTTPException(status_code=422, detail="year and month must be provided together")

    try:
        transactions = repository.get_transactions_by_user(user_id)
    except TransactionSourceError as e:
        transaction_source_failures_counter.inc()
        logging.error(f"Transaction source error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Transaction storage unavailable")

    return _run_report(
        transactions,
        balance if balance is not None else derive_balance(transactions),
        (year, month) if year is not None else None,
        today,
        request_id,
        user_id=user_id,
    )
