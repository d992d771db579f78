"""Advanced anomaly detection - spending patterns, category alerts and
income-relative, frequency, cumulative and discretionary-spending passes"""

import math
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from cashflow_insights.domain.heuristics import (
    DEFAULT_HEURISTICS,
    Heuristics,
    contains_any,
    normalize_merchant,
)
from cashflow_insights.domain.models import (
    Anomaly,
    Category,
    CategoryAlert,
    ClassifiedTransaction,
    Confidence,
    Severity,
    SpendingPattern,
    Trend,
)
from cashflow_insights.utils.date_utils import days_between

ALERT_CATEGORIES = (
    Category.FOOD,
    Category.ENTERTAINMENT,
    Category.SHOPPING,
    Category.HEALTH,
    Category.TRANSPORTATION,
    Category.EDUCATION,
    Category.SUBSCRIPTIONS,
    Category.OTHER,
)
PROBLEMATIC_CATEGORIES = (Category.ENTERTAINMENT, Category.SHOPPING, Category.FOOD)

CATEGORY_SUGGESTIONS: Dict[Category, str] = {
    Category.FOOD: "Plan weekly meals and cook at home more often",
    Category.ENTERTAINMENT: "Review streaming services and outings you rarely use",
    Category.SHOPPING: "Wait 24 hours before non-essential purchases",
    Category.HEALTH: "Compare pharmacy prices and check what your health plan covers",
    Category.TRANSPORTATION: "Consider public transport or ride sharing for routine trips",
    Category.EDUCATION: "Look for free or discounted course alternatives",
    Category.SUBSCRIPTIONS: "Cancel subscriptions you have not used in the last month",
    Category.OTHER: "Categorize these transactions to understand where the money goes",
}

TREND_CHANGE_PERCENT = 20
LARGE_SHARE_OF_INCOME = 0.25
PROBLEMATIC_AMOUNT = 200
HIGH_FREQUENCY = 10
RISING_FREQUENCY = 5
CUMULATIVE_SHARE_OF_INCOME = 0.40
DISCRETIONARY_MAX_COUNT = 10
DISCRETIONARY_MAX_TOTAL = 200
DISCRETIONARY_MIN_TREND_SAMPLE = 4
DISCRETIONARY_TREND_PERCENT = 30


@dataclass(frozen=True)
class AdvancedAnalysis:
    anomalies: List[Anomaly]
    category_alerts: List[CategoryAlert]
    spending_patterns: List[SpendingPattern]
    discretionary: List[Anomaly]


def _expenses(transactions: Sequence[ClassifiedTransaction]) -> List[ClassifiedTransaction]:
    return [t for t in transactions if not t.is_income]


def _latest(transactions: Sequence[ClassifiedTransaction]) -> ClassifiedTransaction:
    return max(transactions, key=lambda t: t.date)


def half_split_change(amounts: Sequence[float]) -> float | None:
    """
    Percent change between the average of the first and second half of an
    ordered series. The middle element of an odd-length series belongs to both
    halves. None when the first half averages zero.
    """
    if len(amounts) < 2:
        return None
    first_half = amounts[: math.ceil(len(amounts) / 2)]
    second_half = amounts[len(amounts) // 2:]
    first_avg = sum(first_half) / len(first_half)
    second_avg = sum(second_half) / len(second_half)
    if first_avg == 0:
        return None
    return ((second_avg - first_avg) / first_avg) * 100


def analyze_spending_patterns(transactions: Sequence[ClassifiedTransaction]) -> List[SpendingPattern]:
    """Per (category, merchant) frequency, totals and trend, largest total first"""
    groups: Dict[Tuple[Category, str], List[ClassifiedTransaction]] = defaultdict(list)
    for txn in _expenses(transactions):
        groups[(txn.category, normalize_merchant(txn.merchant))].append(txn)

    patterns = []
    for (category, _), group in groups.items():
        if len(group) < 2:
            continue

        ordered = sorted(group, key=lambda t: t.date)
        amounts = [t.abs_amount for t in ordered]
        total = sum(amounts)
        span_days = max(1, days_between(ordered[0].date, ordered[-1].date))

        change = half_split_change(amounts)
        if change is not None and change > TREND_CHANGE_PERCENT:
            trend = Trend.INCREASING
        elif change is not None and change < -TREND_CHANGE_PERCENT:
            trend = Trend.DECREASING
        else:
            trend = Trend.STABLE

        patterns.append(
            SpendingPattern(
                category=category,
                merchant=ordered[0].merchant,
                frequency=(len(ordered) / span_days) * 30,
                average_amount=total / len(ordered),
                total_amount=total,
                last_occurrence=ordered[-1].date,
                trend=trend,
            )
        )

    return sorted(patterns, key=lambda p: p.total_amount, reverse=True)


def _totals_by_category(
    transactions: Sequence[ClassifiedTransaction],
) -> Tuple[Dict[Category, float], Dict[Category, int]]:
    totals: Dict[Category, float] = defaultdict(float)
    counts: Dict[Category, int] = defaultdict(int)
    for txn in transactions:
        totals[txn.category] += txn.abs_amount
        counts[txn.category] += 1
    return totals, counts


def _percent_increase(current: float, previous: float) -> float:
    if previous > 0:
        return ((current - previous) / previous) * 100
    return 100.0


def grade_category_change(
    income_share: float,
    increase_percent: float,
    frequency_increase_percent: float,
) -> Severity | None:
    """
    Severity ladder, first match wins:
    - critical: > 30% of income or > 100% increase
    - high: > 20% of income or > 50% increase
    - medium: > 25% increase or > 50% frequency increase
    - low: > 10% increase
    """
    if income_share > 30 or increase_percent > 100:
        return Severity.CRITICAL
    if income_share > 20 or increase_percent > 50:
        return Severity.HIGH
    if increase_percent > 25 or frequency_increase_percent > 50:
        return Severity.MEDIUM
    if increase_percent > 10:
        return Severity.LOW
    return None


def _alert_message(category: Category, severity: Severity, spending: float, share: float, increase: float) -> str:
    name = category.value
    if severity == Severity.CRITICAL:
        return f"Excessive spending on {name}: {spending:.2f} ({share:.1f}% of income, +{increase:.1f}%)"
    if severity == Severity.HIGH:
        return f"Significant increase on {name}: {spending:.2f} (+{increase:.1f}%)"
    if severity == Severity.MEDIUM:
        return f"Moderate increase on {name}: {spending:.2f} (+{increase:.1f}%)"
    return f"Small increase on {name}: {spending:.2f} (+{increase:.1f}%)"


def _alert_suggestions(category: Category, severity: Severity) -> List[str]:
    suggestions = [CATEGORY_SUGGESTIONS[category]]
    if severity == Severity.CRITICAL:
        suggestions += [
            "Consider cutting back on this category",
            "Check whether every expense here is necessary",
        ]
    elif severity == Severity.HIGH:
        suggestions += [
            "Monitor your spending in this category",
            "Set a monthly limit for this category",
        ]
    elif severity == Severity.MEDIUM:
        suggestions.append("Keep an eye on how this category evolves")
    else:
        suggestions.append("Keep monitoring")
    return suggestions


def evaluate_category_alerts(
    current: Sequence[ClassifiedTransaction],
    previous: Sequence[ClassifiedTransaction],
    total_income: float,
) -> List[CategoryAlert]:
    """
    Grade every watched category, low severity included.

    With an empty previous period there is no baseline: increases are
    reported as 0 and only the income-share criteria apply. A category absent
    from a non-empty previous period counts as a 100% increase.
    """
    current_expenses = _expenses(current)
    previous_expenses = _expenses(previous)
    current_totals, current_counts = _totals_by_category(current_expenses)
    previous_totals, previous_counts = _totals_by_category(previous_expenses)
    has_baseline = bool(previous_expenses)

    alerts = []
    for category in ALERT_CATEGORIES:
        spending = current_totals.get(category, 0.0)
        if spending == 0:
            continue
        previous_spending = previous_totals.get(category, 0.0)

        if has_baseline:
            increase = _percent_increase(spending, previous_spending)
            frequency_increase = _percent_increase(
                current_counts.get(category, 0), previous_counts.get(category, 0)
            )
        else:
            increase = frequency_increase = 0.0

        income_share = (spending / total_income) * 100 if total_income > 0 else 0.0
        severity = grade_category_change(income_share, increase, frequency_increase)
        if severity is None:
            continue

        alerts.append(
            CategoryAlert(
                category=category,
                current_spending=spending,
                previous_period_spending=previous_spending,
                increase_percent=increase,
                frequency_increase_percent=frequency_increase,
                severity=severity,
                message=_alert_message(category, severity, spending, income_share, increase),
                suggestions=_alert_suggestions(category, severity),
            )
        )

    return sorted(alerts, key=lambda a: a.severity.rank, reverse=True)


def detect_category_alerts(
    current: Sequence[ClassifiedTransaction],
    previous: Sequence[ClassifiedTransaction],
    total_income: float,
) -> List[CategoryAlert]:
    """Emitted alerts only: medium severity and above, most severe first"""
    return [
        alert
        for alert in evaluate_category_alerts(current, previous, total_income)
        if alert.severity != Severity.LOW
    ]


def detect_income_relative_anomalies(
    transactions: Sequence[ClassifiedTransaction],
    total_income: float,
) -> List[Anomaly]:
    """Single expenses above 25% of income, and large spends in problematic categories"""
    anomalies = []
    for txn in _expenses(transactions):
        amount = txn.abs_amount

        if total_income > 0 and amount > total_income * LARGE_SHARE_OF_INCOME:
            share = (amount / total_income) * 100
            anomalies.append(
                Anomaly(
                    transaction_id=txn.id,
                    merchant=txn.merchant,
                    amount=txn.amount,
                    reason=f"Expense is {share:.1f}% of period income",
                    confidence=Confidence.HIGH,
                    explanation=f'Transaction of {amount:.2f} at "{txn.merchant}" takes a very large share of your income',
                )
            )

        if txn.category in PROBLEMATIC_CATEGORIES and amount > PROBLEMATIC_AMOUNT:
            anomalies.append(
                Anomaly(
                    transaction_id=txn.id,
                    merchant=txn.merchant,
                    amount=txn.amount,
                    reason=f"Large spend on {txn.category.value}",
                    confidence=Confidence.MEDIUM,
                    explanation=f"Transaction of {amount:.2f} in {txn.category.value} - check whether it was necessary",
                )
            )
    return anomalies


def _pattern_members(
    transactions: Sequence[ClassifiedTransaction],
    pattern: SpendingPattern,
) -> List[ClassifiedTransaction]:
    merchant = normalize_merchant(pattern.merchant)
    return [
        t
        for t in _expenses(transactions)
        if t.category == pattern.category and normalize_merchant(t.merchant) == merchant
    ]


def detect_frequency_anomalies(
    transactions: Sequence[ClassifiedTransaction],
    patterns: Sequence[SpendingPattern],
) -> List[Anomaly]:
    anomalies = []
    for pattern in patterns:
        members = _pattern_members(transactions, pattern)
        if not members:
            continue
        latest = _latest(members)

        if pattern.frequency > HIGH_FREQUENCY:
            anomalies.append(
                Anomaly(
                    transaction_id=latest.id,
                    merchant=pattern.merchant,
                    amount=latest.amount,
                    reason=f"Very high frequency: {pattern.frequency:.1f} times per month",
                    confidence=Confidence.HIGH,
                    explanation=(
                        f'You spend at "{pattern.merchant}" {pattern.frequency:.1f} times per month '
                        "- consider going less often"
                    ),
                )
            )

        if pattern.trend == Trend.INCREASING and pattern.frequency > RISING_FREQUENCY:
            anomalies.append(
                Anomaly(
                    transaction_id=latest.id,
                    merchant=pattern.merchant,
                    amount=latest.amount,
                    reason="Worrying increasing trend",
                    confidence=Confidence.MEDIUM,
                    explanation=f'Spending at "{pattern.merchant}" keeps growing - consider setting a limit',
                )
            )
    return anomalies


def detect_cumulative_anomalies(
    transactions: Sequence[ClassifiedTransaction],
    total_income: float,
) -> List[Anomaly]:
    """Categories whose summed spend exceeds 40% of income"""
    if total_income <= 0:
        return []

    groups: Dict[Category, List[ClassifiedTransaction]] = defaultdict(list)
    for txn in _expenses(transactions):
        groups[txn.category].append(txn)

    anomalies = []
    for category, group in groups.items():
        total = sum(t.abs_amount for t in group)
        share = (total / total_income) * 100
        if share <= CUMULATIVE_SHARE_OF_INCOME * 100:
            continue
        latest = _latest(group)
        anomalies.append(
            Anomaly(
                transaction_id=latest.id,
                merchant=latest.merchant,
                amount=latest.amount,
                reason=f"Accumulated spending on {category.value} is {share:.1f}% of income",
                confidence=Confidence.HIGH,
                explanation=f"Total spent on {category.value} this period: {total:.2f}, a very large share of your income",
            )
        )
    return anomalies


def detect_discretionary_spending_anomalies(
    transactions: Sequence[ClassifiedTransaction],
    heuristics: Heuristics = DEFAULT_HEURISTICS,
) -> List[Anomaly]:
    """Sweets, snacks and food delivery: frequency, total and rising trend"""
    matches = sorted(
        (
            t
            for t in _expenses(transactions)
            if contains_any(normalize_merchant(t.merchant), heuristics.discretionary_food_keywords)
        ),
        key=lambda t: t.date,
    )
    if not matches:
        return []

    latest = matches[-1]
    total = sum(t.abs_amount for t in matches)
    count = len(matches)
    anomalies = []

    if count > DISCRETIONARY_MAX_COUNT:
        anomalies.append(
            Anomaly(
                transaction_id=latest.id,
                merchant=latest.merchant,
                amount=latest.amount,
                reason=f"High frequency of discretionary food spending: {count} times this period",
                confidence=Confidence.HIGH,
                explanation=f"You bought sweets, snacks or delivery {count} times this period, totalling {total:.2f}",
            )
        )

    if total > DISCRETIONARY_MAX_TOTAL:
        anomalies.append(
            Anomaly(
                transaction_id=latest.id,
                merchant=latest.merchant,
                amount=latest.amount,
                reason=f"High total on discretionary food spending: {total:.2f}",
                confidence=Confidence.MEDIUM,
                explanation=f"You spent {total:.2f} on sweets, snacks or delivery this period - consider reducing it",
            )
        )

    if count >= DISCRETIONARY_MIN_TREND_SAMPLE:
        change = half_split_change([t.abs_amount for t in matches])
        if change is not None and change > DISCRETIONARY_TREND_PERCENT:
            anomalies.append(
                Anomaly(
                    transaction_id=latest.id,
                    merchant=latest.merchant,
                    amount=latest.amount,
                    reason=f"Increasing trend in discretionary food spending: +{change:.1f}%",
                    confidence=Confidence.MEDIUM,
                    explanation="Your spending on sweets, snacks or delivery is growing - consider a monthly limit",
                )
            )

    return anomalies


def detect_advanced_anomalies(
    transactions: Sequence[ClassifiedTransaction],
    total_income: float,
    previous_transactions: Sequence[ClassifiedTransaction] = (),
    heuristics: Heuristics = DEFAULT_HEURISTICS,
) -> AdvancedAnalysis:
    """Run every advanced pass; each pass appends independently so duplicates are expected"""
    if not transactions:
        return AdvancedAnalysis(anomalies=[], category_alerts=[], spending_patterns=[], discretionary=[])

    patterns = analyze_spending_patterns(transactions)

    anomalies = detect_income_relative_anomalies(transactions, total_income)
    anomalies.extend(detect_frequency_anomalies(transactions, patterns))
    anomalies.extend(detect_cumulative_anomalies(transactions, total_income))
    discretionary = detect_discretionary_spending_anomalies(transactions, heuristics)
    anomalies.extend(discretionary)

    return AdvancedAnalysis(
        anomalies=anomalies,
        category_alerts=detect_category_alerts(transactions, previous_transactions, total_income),
        spending_patterns=patterns,
        discretionary=discretionary,
    )
