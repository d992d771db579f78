"""Month-over-month comparison"""

from typing import List, Optional, Sequence

from cashflow_insights.domain.models import (
    ClassifiedTransaction,
    MonthlyComparison,
    PeriodTotals,
    Transaction,
    Variation,
)
from cashflow_insights.utils.date_utils import in_month

SIGNIFICANT_SWING_PERCENT = 50
NO_PREVIOUS_DATA_NOTE = "Previous period had no data"


def filter_by_month(transactions: Sequence[Transaction], year: int, month: int) -> List[Transaction]:
    return [t for t in transactions if in_month(t.date, year, month)]


def period_totals(transactions: Sequence[ClassifiedTransaction]) -> PeriodTotals:
    income = sum(t.abs_amount for t in transactions if t.is_income)
    expenses = sum(t.abs_amount for t in transactions if not t.is_income)
    count = len(transactions)
    return PeriodTotals(
        income=income,
        expenses=expenses,
        transactions=count,
        average_per_transaction=(income + expenses) / count if count > 0 else 0.0,
    )


def percent_variation(current: float, previous: float) -> Optional[float]:
    """Percent change, or None when there is no previous value to compare against"""
    if previous == 0:
        return None
    return ((current - previous) / previous) * 100


def _swing_note(label: str, variation: Optional[float]) -> Optional[str]:
    if variation is None:
        return None
    if variation > SIGNIFICANT_SWING_PERCENT:
        return f"{label} increased significantly (+{variation:.1f}%)"
    if variation < -SIGNIFICANT_SWING_PERCENT:
        return f"{label} decreased significantly ({variation:.1f}%)"
    return None


def compare_periods(
    current: Sequence[ClassifiedTransaction],
    previous: Sequence[ClassifiedTransaction],
) -> MonthlyComparison:
    """
    Diff two already-filtered periods.

    A metric whose previous value is zero has an undefined (None) variation and
    a note explaining why; nothing here raises on empty input.
    """
    current_totals = period_totals(current)
    previous_totals = period_totals(previous)

    variation = Variation(
        income_percent=percent_variation(current_totals.income, previous_totals.income),
        expenses_percent=percent_variation(current_totals.expenses, previous_totals.expenses),
        transactions_percent=percent_variation(current_totals.transactions, previous_totals.transactions),
        average_percent=percent_variation(
            current_totals.average_per_transaction, previous_totals.average_per_transaction
        ),
    )

    notes = []
    if previous_totals.transactions == 0:
        notes.append(NO_PREVIOUS_DATA_NOTE)
    else:
        if previous_totals.income == 0:
            notes.append("Previous period had no income recorded")
        if previous_totals.expenses == 0:
            notes.append("Previous period had no expenses recorded")

    for label, value in (("Income", variation.income_percent), ("Expenses", variation.expenses_percent)):
        note = _swing_note(label, value)
        if note:
            notes.append(note)

    return MonthlyComparison(
        current_period=current_totals,
        previous_period=previous_totals,
        variation=variation,
        notes=notes,
    )


def comparison_insights(comparison: MonthlyComparison) -> List[str]:
    """Plain sentences describing the direction of each change"""
    insights = []
    current = comparison.current_period
    previous = comparison.previous_period
    variation = comparison.variation

    if variation.income_percent is not None:
        if variation.income_percent > 0:
            insights.append(f"Your income grew {variation.income_percent:.1f}% compared to the previous period")
        elif variation.income_percent < 0:
            insights.append(f"Your income fell {abs(variation.income_percent):.1f}% compared to the previous period")
    elif previous.income == 0 and current.income > 0:
        insights.append("You started recording income this period")

    if variation.expenses_percent is not None:
        if variation.expenses_percent > 0:
            insights.append(f"Your expenses grew {variation.expenses_percent:.1f}% compared to the previous period")
        elif variation.expenses_percent < 0:
            insights.append(
                f"Your expenses fell {abs(variation.expenses_percent):.1f}% compared to the previous period"
            )
    elif previous.expenses == 0 and current.expenses > 0:
        insights.append("You started recording expenses this period")

    if variation.transactions_percent is not None:
        if variation.transactions_percent > 0:
            insights.append(f"You made {variation.transactions_percent:.1f}% more transactions this period")
        elif variation.transactions_percent < 0:
            insights.append(f"You made {abs(variation.transactions_percent):.1f}% fewer transactions this period")

    current_net = current.income - current.expenses
    previous_net = previous.income - previous.expenses
    if previous_net != 0:
        change = ((current_net - previous_net) / abs(previous_net)) * 100
        if change > 0:
            insights.append(f"Your net balance improved {change:.1f}% compared to the previous period")
        elif change < 0:
            insights.append(f"Your net balance worsened {abs(change):.1f}% compared to the previous period")

    return insights
