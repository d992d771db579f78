"""Baseline end-of-month projection and savings arithmetic"""

from datetime import date
from typing import List, Sequence

from cashflow_insights.domain.models import (
    Category,
    CategoryBreakdown,
    ClassifiedTransaction,
    Confidence,
    Projection,
    ReductionImpact,
    SavingsPlan,
    SavingsReduction,
)
from cashflow_insights.utils.date_utils import days_in_month, in_month

DEFAULT_REDUCTION_PERCENTAGES = (10, 20, 30)
REDUCTION_TOP_CATEGORIES = 5
MAX_CATEGORY_CUT_PERCENT = 50


def projection_confidence(days_elapsed: int, transaction_count: int) -> Confidence:
    """
    - high: >= 15 days elapsed and >= 10 transactions
    - medium: >= 7 days elapsed and >= 5 transactions
    - low: otherwise
    """
    if days_elapsed >= 15 and transaction_count >= 10:
        return Confidence.HIGH
    if days_elapsed >= 7 and transaction_count >= 5:
        return Confidence.MEDIUM
    return Confidence.LOW


def month_to_date(transactions: Sequence[ClassifiedTransaction], reference_date: date) -> List[ClassifiedTransaction]:
    return [t for t in transactions if in_month(t.date, reference_date.year, reference_date.month)]


def generate_projection(
    transactions: Sequence[ClassifiedTransaction],
    balance: float,
    reference_date: date,
) -> Projection:
    """
    Linear extrapolation of the reference month.

    Days remaining include the reference day itself; daily averages divide the
    month-to-date totals by the day of month.
    """
    current = month_to_date(transactions, reference_date)
    days_remaining = days_in_month(reference_date.year, reference_date.month) - reference_date.day + 1
    days_elapsed = reference_date.day

    income = sum(t.abs_amount for t in current if t.is_income)
    expenses = sum(t.abs_amount for t in current if not t.is_income)
    daily_income = income / days_elapsed if days_elapsed > 0 else 0.0
    daily_expense = expenses / days_elapsed if days_elapsed > 0 else 0.0

    return Projection(
        final_balance_projection=balance + daily_income * days_remaining - daily_expense * days_remaining,
        days_remaining=days_remaining,
        average_daily_expense=daily_expense,
        average_daily_income=daily_income,
        reduction_impact=[],
        confidence=projection_confidence(days_elapsed, len(current)),
    )


def _expense_categories(categories: Sequence[CategoryBreakdown]) -> List[CategoryBreakdown]:
    candidates = [c for c in categories if c.category != Category.SALARY and c.expense_amount > 0]
    return sorted(candidates, key=lambda c: c.expense_amount, reverse=True)


def calculate_reduction_impact(
    categories: Sequence[CategoryBreakdown],
    reduction_percentages: Sequence[float] = DEFAULT_REDUCTION_PERCENTAGES,
) -> List[ReductionImpact]:
    """Savings from cutting each of the five largest expense categories by each percentage"""
    impacts = []
    for category in _expense_categories(categories)[:REDUCTION_TOP_CATEGORIES]:
        for percent in reduction_percentages:
            impacts.append(
                ReductionImpact(
                    category=category.category,
                    reduction_percent=percent,
                    projected_savings=category.expense_amount * percent / 100,
                )
            )
    return impacts


def calculate_savings_potential(categories: Sequence[CategoryBreakdown], target_savings: float) -> SavingsPlan:
    """Greedy plan: cut the largest categories first, never more than half of any one"""
    reductions = []
    total_potential = 0.0
    remaining = target_savings

    for category in _expense_categories(categories):
        if remaining <= 0:
            break
        percent = min(MAX_CATEGORY_CUT_PERCENT, (remaining / category.expense_amount) * 100)
        savings = category.expense_amount * percent / 100
        reductions.append(SavingsReduction(category=category.category, reduction_percent=percent, savings=savings))
        total_potential += savings
        remaining -= savings

    return SavingsPlan(
        achievable=remaining <= 0,
        required_reductions=reductions,
        total_potential=total_potential,
    )


def projection_insights(projection: Projection) -> List[str]:
    insights = []

    if projection.final_balance_projection < 0:
        insights.append(
            f"Projection points to a negative balance of {abs(projection.final_balance_projection):.2f} "
            "at the end of the month"
        )
    elif projection.final_balance_projection > 0:
        insights.append(
            f"Projection points to a positive balance of {projection.final_balance_projection:.2f} "
            "at the end of the month"
        )

    if projection.average_daily_expense > 100:
        insights.append(f"You are spending {projection.average_daily_expense:.2f} per day on average")
    if projection.average_daily_income > 0:
        insights.append(f"You are receiving {projection.average_daily_income:.2f} per day on average")

    if projection.days_remaining > 0:
        daily_net = projection.average_daily_income - projection.average_daily_expense
        if daily_net > 0:
            insights.append(
                f"With {projection.days_remaining} days left you could save {daily_net * projection.days_remaining:.2f}"
            )
        elif daily_net < 0:
            insights.append(
                f"With {projection.days_remaining} days left you may spend "
                f"{abs(daily_net) * projection.days_remaining:.2f} more than you receive"
            )

    if projection.confidence == Confidence.LOW:
        insights.append("Low-confidence projection - little data available")
    elif projection.confidence == Confidence.HIGH:
        insights.append("High-confidence projection - based on consistent data")

    return insights
