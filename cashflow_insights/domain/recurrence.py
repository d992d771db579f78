"""Recurring transaction detection and monthly impact"""

from collections import defaultdict
from typing import Dict, List, Sequence

from cashflow_insights.domain.heuristics import (
    DEFAULT_HEURISTICS,
    Heuristics,
    contains_any,
    normalize_merchant,
)
from cashflow_insights.domain.models import (
    ClassifiedTransaction,
    Confidence,
    RecurringImpact,
    RecurringImpactItem,
    RecurringSplit,
    RecurringTransaction,
)
from cashflow_insights.utils.date_utils import days_between

AMOUNT_TOLERANCE = 0.10  # +-10% of the group mean
INTERVAL_TOLERANCE_DAYS = 3
WEEKS_PER_MONTH = 4.33


def detect_recurring(transactions: Sequence[ClassifiedTransaction]) -> List[RecurringTransaction]:
    """
    Find merchants with periodic, similar-sized transactions.

    Confidence:
    - high: amounts and intervals both consistent, >= 3 occurrences
    - medium: either consistent, >= 2 occurrences
    - low: never reported
    """
    if len(transactions) < 2:
        return []

    groups: Dict[str, List[ClassifiedTransaction]] = defaultdict(list)
    for txn in transactions:
        groups[normalize_merchant(txn.merchant)].append(txn)

    recurring = []
    for group in groups.values():
        if len(group) < 2:
            continue

        ordered = sorted(group, key=lambda t: t.date)
        amounts = [t.abs_amount for t in ordered]
        average_amount = sum(amounts) / len(amounts)
        amount_consistent = all(
            abs(amount - average_amount) <= average_amount * AMOUNT_TOLERANCE for amount in amounts
        )

        intervals = [
            days_between(previous.date, current.date)
            for previous, current in zip(ordered, ordered[1:])
        ]
        average_interval = sum(intervals) / len(intervals)
        interval_consistent = all(
            abs(interval - average_interval) <= INTERVAL_TOLERANCE_DAYS for interval in intervals
        )

        if amount_consistent and interval_consistent and len(ordered) >= 3:
            confidence = Confidence.HIGH
        elif amount_consistent or interval_consistent:
            confidence = Confidence.MEDIUM
        else:
            continue

        recurring.append(
            RecurringTransaction(
                merchant=ordered[0].merchant,  # original spelling of the first occurrence
                average_amount=average_amount,
                frequency_days=round(average_interval),
                last_transaction_date=ordered[-1].date,
                total_transactions=len(ordered),
                confidence=confidence,
            )
        )

    return recurring


def analyze_recurring_patterns(
    recurring: Sequence[RecurringTransaction],
    heuristics: Heuristics = DEFAULT_HEURISTICS,
) -> RecurringSplit:
    """Split recurring items into fixed income, fixed expenses and variable expenses"""
    fixed_income = []
    fixed_expenses = []
    variable_expenses = []

    for item in recurring:
        if contains_any(normalize_merchant(item.merchant), heuristics.fixed_income_keywords):
            fixed_income.append(item)
        elif item.frequency_days <= 35 and item.confidence == Confidence.HIGH:
            fixed_expenses.append(item)
        else:
            variable_expenses.append(item)

    return RecurringSplit(
        fixed_income=fixed_income,
        fixed_expenses=fixed_expenses,
        variable_expenses=variable_expenses,
    )


def monthly_equivalent(item: RecurringTransaction) -> float:
    """Normalize a recurring amount to one month using its frequency bucket"""
    if item.frequency_days <= 7:
        return item.average_amount * WEEKS_PER_MONTH
    if item.frequency_days <= 35:
        return item.average_amount
    if item.frequency_days <= 90:
        return item.average_amount / 3
    return item.average_amount / 12


def calculate_recurring_impact(recurring: Sequence[RecurringTransaction]) -> RecurringImpact:
    breakdown = []
    monthly_total = 0.0
    for item in recurring:
        monthly_amount = monthly_equivalent(item)
        monthly_total += monthly_amount
        breakdown.append(
            RecurringImpactItem(
                merchant=item.merchant,
                monthly_amount=monthly_amount,
                yearly_amount=monthly_amount * 12,
            )
        )

    return RecurringImpact(
        monthly_total=monthly_total,
        yearly_projection=monthly_total * 12,
        breakdown=breakdown,
    )
