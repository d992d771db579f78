"""Traditional anomaly detection - statistical outliers, suspicious records and
classification inconsistencies"""

import math
from typing import List, Sequence

from cashflow_insights.domain.classification import is_suspicious
from cashflow_insights.domain.heuristics import (
    DEFAULT_HEURISTICS,
    Heuristics,
    contains_any,
    normalize_merchant,
)
from cashflow_insights.domain.models import Anomaly, ClassifiedTransaction, Confidence
from cashflow_insights.domain.temporal import NIGHT, period_of_day

MIN_STATISTICAL_SAMPLE = 5
STDEV_MULTIPLIER = 3
INCOME_SHARE_THRESHOLD = 0.20
NIGHT_MIN_AMOUNT = 100

SUSPICIOUS_REASON = "suspicious transaction (atypical merchant or amount)"


def calculate_standard_deviation(values: Sequence[float]) -> float:
    """Population standard deviation; 0 for an empty sample"""
    if not values:
        return 0.0
    mean = sum(values) / len(values)
    return math.sqrt(sum((value - mean) ** 2 for value in values) / len(values))


def _outlier_threshold(amounts: Sequence[float]) -> float | None:
    if len(amounts) < MIN_STATISTICAL_SAMPLE:
        return None
    mean = sum(amounts) / len(amounts)
    return mean + STDEV_MULTIPLIER * calculate_standard_deviation(amounts)


def _anomaly(txn: ClassifiedTransaction, reason: str, confidence: Confidence, explanation: str) -> Anomaly:
    return Anomaly(
        transaction_id=txn.id,
        merchant=txn.merchant,
        amount=txn.amount,
        reason=reason,
        confidence=confidence,
        explanation=explanation,
    )


def _expense_anomalies(
    expenses: Sequence[ClassifiedTransaction],
    total_income: float,
    heuristics: Heuristics,
) -> List[Anomaly]:
    anomalies = []
    threshold = _outlier_threshold([t.abs_amount for t in expenses])

    for txn in expenses:
        amount = txn.abs_amount
        high_deviation = threshold is not None and amount > threshold
        high_share = total_income > 0 and amount > total_income * INCOME_SHARE_THRESHOLD
        suspicious = is_suspicious(txn.transaction, heuristics)

        if suspicious:
            reason, confidence = SUSPICIOUS_REASON, Confidence.HIGH
        elif high_deviation and high_share:
            reason = "amount far above the usual expense and a large share of income"
            confidence = Confidence.HIGH
        elif high_deviation:
            reason, confidence = "amount far above the usual expense", Confidence.MEDIUM
        elif high_share:
            reason, confidence = "amount is a large share of period income", Confidence.MEDIUM
        else:
            continue

        anomalies.append(
            _anomaly(
                txn,
                reason,
                confidence,
                f'Transaction of {amount:.2f} at "{txn.merchant}" on {txn.date.isoformat()}',
            )
        )
    return anomalies


def _income_anomalies(
    incomes: Sequence[ClassifiedTransaction],
    heuristics: Heuristics,
) -> List[Anomaly]:
    anomalies = []
    threshold = _outlier_threshold([t.abs_amount for t in incomes])

    for txn in incomes:
        amount = txn.abs_amount
        if is_suspicious(txn.transaction, heuristics):
            reason, confidence = SUSPICIOUS_REASON, Confidence.HIGH
        elif threshold is not None and amount > threshold:
            reason, confidence = "amount far above the usual income", Confidence.MEDIUM
        else:
            continue

        anomalies.append(
            _anomaly(
                txn,
                reason,
                confidence,
                f'Income of {amount:.2f} from "{txn.merchant}" on {txn.date.isoformat()}',
            )
        )
    return anomalies


def _inconsistency_anomalies(
    transactions: Sequence[ClassifiedTransaction],
    heuristics: Heuristics,
) -> List[Anomaly]:
    anomalies = []
    for txn in transactions:
        merchant = normalize_merchant(txn.merchant)

        if txn.amount < 0 and contains_any(merchant, heuristics.salary_keywords):
            anomalies.append(
                _anomaly(
                    txn,
                    "salary recorded as an expense",
                    Confidence.HIGH,
                    f"Salary of {txn.abs_amount:.2f} carries a negative amount - possible classification error",
                )
            )

        if txn.amount > 0 and contains_any(merchant, heuristics.purchase_keywords):
            anomalies.append(
                _anomaly(
                    txn,
                    "expense recorded as income",
                    Confidence.MEDIUM,
                    f"Purchase/payment of {txn.amount:.2f} carries a positive amount - possible classification error",
                )
            )
    return anomalies


def detect_anomalies(
    transactions: Sequence[ClassifiedTransaction],
    total_income: float,
    heuristics: Heuristics = DEFAULT_HEURISTICS,
) -> List[Anomaly]:
    """
    Traditional pass.

    Flags:
    - expenses above mean + 3 stdev (>= 5 samples), above 20% of income, or suspicious
    - incomes above mean + 3 stdev (>= 5 samples) or suspicious
    - salary keywords on negative amounts, purchase keywords on positive amounts
    """
    if not transactions:
        return []

    expenses = [t for t in transactions if not t.is_income]
    incomes = [t for t in transactions if t.is_income]

    anomalies = _expense_anomalies(expenses, total_income, heuristics)
    anomalies.extend(_income_anomalies(incomes, heuristics))
    anomalies.extend(_inconsistency_anomalies(transactions, heuristics))
    return anomalies


def detect_time_anomalies(transactions: Sequence[ClassifiedTransaction]) -> List[Anomaly]:
    """Large expenses in the night period (0h-6h); records without a time are ignored"""
    timed = [t for t in transactions if not t.is_income and t.time_of_day is not None]
    if not timed:
        return []

    mean = sum(t.abs_amount for t in timed) / len(timed)

    anomalies = []
    for txn in timed:
        if period_of_day(txn.time_of_day) != NIGHT:
            continue
        amount = txn.abs_amount
        if amount > NIGHT_MIN_AMOUNT and amount > mean * 2:
            anomalies.append(
                _anomaly(
                    txn,
                    "large transaction during the night",
                    Confidence.MEDIUM,
                    f"Transaction of {amount:.2f} at {txn.time_of_day.strftime('%H:%M')} "
                    "- unusual hour for a large expense",
                )
            )
    return anomalies
