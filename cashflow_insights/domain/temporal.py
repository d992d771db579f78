"""Temporal and payment-method aggregation of classified transactions"""

from datetime import time
from typing import Dict, List, Optional, Sequence

from cashflow_insights.domain.models import (
    BucketBreakdown,
    ClassifiedTransaction,
    PaymentMethod,
    PaymentMethodBreakdown,
    TimePatterns,
)
from cashflow_insights.utils.date_utils import WEEKDAY_NAMES

# (name, start hour inclusive, end hour exclusive)
DAY_PERIODS = (
    ("night", 0, 6),
    ("morning", 6, 12),
    ("afternoon", 12, 18),
    ("evening", 18, 24),
)
NIGHT = "night"
WEEKEND = ("Saturday", "Sunday")


def period_of_day(moment: time) -> str:
    for name, start, end in DAY_PERIODS:
        if start <= moment.hour < end:
            return name
    return NIGHT


def _buckets(names: Sequence[str], totals: Dict[str, List[float]]) -> List[BucketBreakdown]:
    breakdown = []
    for name in names:
        amounts = totals[name]
        total = sum(amounts)
        breakdown.append(
            BucketBreakdown(
                bucket=name,
                total_amount=total,
                transaction_count=len(amounts),
                average_amount=total / len(amounts) if amounts else 0.0,
            )
        )
    return breakdown


def analyze_by_weekday(transactions: Sequence[ClassifiedTransaction]) -> List[BucketBreakdown]:
    """Seven buckets, Monday first, always present even when empty"""
    totals: Dict[str, List[float]] = {name: [] for name in WEEKDAY_NAMES}
    for txn in transactions:
        totals[WEEKDAY_NAMES[txn.date.weekday()]].append(txn.abs_amount)
    return _buckets(WEEKDAY_NAMES, totals)


def analyze_by_period(transactions: Sequence[ClassifiedTransaction]) -> List[BucketBreakdown]:
    """Four time-of-day buckets; records without a time of day are not bucketed"""
    names = [name for name, _, _ in DAY_PERIODS]
    totals: Dict[str, List[float]] = {name: [] for name in names}
    for txn in transactions:
        if txn.time_of_day is None:
            continue
        totals[period_of_day(txn.time_of_day)].append(txn.abs_amount)
    return _buckets(names, totals)


def analyze_by_payment_method(
    transactions: Sequence[ClassifiedTransaction],
) -> List[PaymentMethodBreakdown]:
    """Totals per payment method in first-seen order, with shares of the period"""
    totals: Dict[PaymentMethod, List[float]] = {}
    for txn in transactions:
        totals.setdefault(txn.payment_method, []).append(txn.abs_amount)

    grand_total = sum(sum(amounts) for amounts in totals.values())
    grand_count = sum(len(amounts) for amounts in totals.values())

    breakdown = []
    for method, amounts in totals.items():
        total = sum(amounts)
        breakdown.append(
            PaymentMethodBreakdown(
                method=method,
                total_amount=total,
                transaction_count=len(amounts),
                percentage_of_total=(total / grand_total) * 100 if grand_total > 0 else 0.0,
                percentage_of_transactions=(len(amounts) / grand_count) * 100 if grand_count > 0 else 0.0,
            )
        )
    return breakdown


def _extremes(buckets: Sequence[BucketBreakdown]) -> tuple[Optional[BucketBreakdown], Optional[BucketBreakdown]]:
    active = [b for b in buckets if b.transaction_count > 0]
    if not active:
        return None, None
    ordered = sorted(active, key=lambda b: b.total_amount, reverse=True)
    return ordered[0], ordered[-1]


def detect_time_patterns(
    by_weekday: Sequence[BucketBreakdown],
    by_period: Sequence[BucketBreakdown],
) -> TimePatterns:
    """Highest/lowest buckets, weekend split, and notable concentration observations"""
    observations = []

    highest_day, lowest_day = _extremes(by_weekday)
    if highest_day and lowest_day and highest_day.total_amount > 0 and lowest_day.total_amount > 0:
        ratio = highest_day.total_amount / lowest_day.total_amount
        if ratio > 2:
            observations.append(
                f"You spend {ratio:.1f}x more on {highest_day.bucket}s than on {lowest_day.bucket}s"
            )

    highest_period, lowest_period = _extremes(by_period)
    if highest_period and lowest_period and highest_period.total_amount > 0 and lowest_period.total_amount > 0:
        ratio = highest_period.total_amount / lowest_period.total_amount
        if ratio > 2:
            observations.append(
                f"You spend {ratio:.1f}x more in the {highest_period.bucket} than in the {lowest_period.bucket}"
            )

    period_total = sum(b.total_amount for b in by_period)
    night = next((b for b in by_period if b.bucket == NIGHT), None)
    if night and night.total_amount > 0 and period_total > 0:
        night_share = (night.total_amount / period_total) * 100
        if night_share > 10:
            observations.append(
                f"{night_share:.1f}% of your money is spent at night, an unusual time for spending"
            )

    weekend = [b for b in by_weekday if b.bucket in WEEKEND]
    weekdays = [b for b in by_weekday if b.bucket not in WEEKEND]

    return TimePatterns(
        highest_spending_day=highest_day.bucket if highest_day else "",
        lowest_spending_day=lowest_day.bucket if lowest_day else "",
        highest_spending_period=highest_period.bucket if highest_period else "",
        lowest_spending_period=lowest_period.bucket if lowest_period else "",
        weekend_total=sum(b.total_amount for b in weekend),
        weekday_total=sum(b.total_amount for b in weekdays),
        weekend_count=sum(b.transaction_count for b in weekend),
        weekday_count=sum(b.transaction_count for b in weekdays),
        observations=observations,
    )
