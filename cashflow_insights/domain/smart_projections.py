"""Pattern-aware projection layered on top of the baseline"""

from collections import defaultdict
from dataclasses import replace
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple

from cashflow_insights.domain.advanced_anomalies import half_split_change
from cashflow_insights.domain.anomalies import calculate_standard_deviation
from cashflow_insights.domain.heuristics import DEFAULT_HEURISTICS, Heuristics, normalize_merchant
from cashflow_insights.domain.models import (
    AlternativeScenario,
    ClassifiedTransaction,
    Confidence,
    ConfidenceFactor,
    FactorImpact,
    HistoricalPattern,
    PatternType,
    Projection,
    SeasonalAdjustment,
    SmartProjection,
)
from cashflow_insights.domain.projections import generate_projection, month_to_date
from cashflow_insights.utils.date_utils import MONTH_NAMES, WEEKDAY_NAMES, days_between

MIN_HISTORY = 10

SALARY_MIN_OCCURRENCES = 3
SALARY_MAX_STDEV = 5
SALARY_INTERVAL_RANGE = (20, 35)  # exclusive bounds, days
SALARY_IMPACT = 0.8
WEEKLY_MIN_AVERAGE = 50
WEEKLY_IMPACT = 0.3
MONTHLY_MIN_MONTHS = 3
MONTHLY_TREND_PERCENT = 20
MONTHLY_IMPACT = 0.5
SEASONAL_DEVIATION_PERCENT = 30
SEASONAL_IMPACT = 0.4

SALARY_INCOME_WEIGHT = 0.5
MONTHLY_EXPENSE_WEIGHT = 0.3
SCENARIO_EXPENSE_SWING = 0.2
NEXT_INCOME_DAYS = 30


def _expenses(transactions: Sequence[ClassifiedTransaction]) -> List[ClassifiedTransaction]:
    return [t for t in transactions if not t.is_income]


def detect_salary_cycle(transactions: Sequence[ClassifiedTransaction]) -> Optional[HistoricalPattern]:
    """
    First income source arriving on a regular cycle.

    Regular means inter-arrival stdev < 5 days and a mean interval strictly
    between 20 and 35 days, over at least 3 occurrences.
    """
    groups: Dict[str, List[ClassifiedTransaction]] = defaultdict(list)
    for txn in transactions:
        if txn.is_income:
            groups[normalize_merchant(txn.merchant)].append(txn)

    low, high = SALARY_INTERVAL_RANGE
    for group in groups.values():
        if len(group) < SALARY_MIN_OCCURRENCES:
            continue

        ordered = sorted(group, key=lambda t: t.date)
        intervals = [days_between(a.date, b.date) for a, b in zip(ordered, ordered[1:])]
        mean_interval = sum(intervals) / len(intervals)
        stdev = calculate_standard_deviation(intervals)
        if not (stdev < SALARY_MAX_STDEV and low < mean_interval < high):
            continue

        if len(intervals) >= 5 and stdev < 3:
            confidence = Confidence.HIGH
        elif len(intervals) >= 3:
            confidence = Confidence.MEDIUM
        else:
            confidence = Confidence.LOW

        average = sum(t.abs_amount for t in ordered) / len(ordered)
        return HistoricalPattern(
            pattern_type=PatternType.SALARY_CYCLE,
            description=f"Regular income from {ordered[0].merchant} every {mean_interval:.0f} days",
            confidence=confidence,
            impact=SALARY_IMPACT,
            examples=[
                f"Last income: {ordered[-1].date.isoformat()}",
                f"Next income expected in {mean_interval:.0f} days",
                f"Average amount: {average:.2f}",
            ],
        )
    return None


def detect_weekly_pattern(transactions: Sequence[ClassifiedTransaction]) -> Optional[HistoricalPattern]:
    amounts: Dict[int, List[float]] = defaultdict(list)
    for txn in _expenses(transactions):
        amounts[txn.date.weekday()].append(txn.abs_amount)

    examples = []
    for weekday in sorted(amounts):
        average = sum(amounts[weekday]) / len(amounts[weekday])
        if average > WEEKLY_MIN_AVERAGE:
            examples.append(f"{WEEKDAY_NAMES[weekday]}: {average:.2f}")

    if not examples:
        return None
    return HistoricalPattern(
        pattern_type=PatternType.WEEKLY,
        description="Spending pattern by day of week identified",
        confidence=Confidence.MEDIUM,
        impact=WEEKLY_IMPACT,
        examples=examples,
    )


def detect_monthly_pattern(transactions: Sequence[ClassifiedTransaction]) -> Optional[HistoricalPattern]:
    totals: Dict[Tuple[int, int], float] = defaultdict(float)
    for txn in _expenses(transactions):
        totals[(txn.date.year, txn.date.month)] += txn.abs_amount

    if len(totals) < MONTHLY_MIN_MONTHS:
        return None

    monthly = [totals[key] for key in sorted(totals)]
    trend = half_split_change(monthly)
    if trend is None:
        return None
    recent_average = sum(monthly[len(monthly) // 2:]) / len(monthly[len(monthly) // 2:])

    if abs(trend) > MONTHLY_TREND_PERCENT:
        direction = "increasing" if trend > 0 else "decreasing"
        description = f"Monthly spending is {direction} by {abs(trend):.1f}%"
        confidence = Confidence.HIGH
    else:
        description = "Stable monthly spending"
        confidence = Confidence.MEDIUM

    return HistoricalPattern(
        pattern_type=PatternType.MONTHLY,
        description=description,
        confidence=confidence,
        impact=MONTHLY_IMPACT,
        examples=[
            f"Recent monthly average: {recent_average:.2f}",
            f"Trend: {trend:+.1f}%",
            f"Months analyzed: {len(monthly)}",
        ],
    )


def detect_seasonal_pattern(transactions: Sequence[ClassifiedTransaction]) -> Optional[HistoricalPattern]:
    """Calendar months whose average transaction deviates more than 30% from the overall average"""
    amounts: Dict[int, List[float]] = defaultdict(list)
    for txn in _expenses(transactions):
        amounts[txn.date.month].append(txn.abs_amount)
    if not amounts:
        return None

    averages = {month: sum(values) / len(values) for month, values in amounts.items()}
    overall = sum(averages.values()) / len(averages)
    if overall == 0:
        return None

    examples = []
    for month in sorted(averages):
        deviation = ((averages[month] - overall) / overall) * 100
        if abs(deviation) > SEASONAL_DEVIATION_PERCENT:
            examples.append(f"{MONTH_NAMES[month - 1]}: {deviation:+.1f}%")

    if not examples:
        return None
    return HistoricalPattern(
        pattern_type=PatternType.SEASONAL,
        description="Seasonal spending patterns identified",
        confidence=Confidence.MEDIUM,
        impact=SEASONAL_IMPACT,
        examples=examples,
    )


def analyze_historical_patterns(transactions: Sequence[ClassifiedTransaction]) -> List[HistoricalPattern]:
    if len(transactions) < MIN_HISTORY:
        return []
    detectors = (detect_salary_cycle, detect_weekly_pattern, detect_monthly_pattern, detect_seasonal_pattern)
    return [pattern for pattern in (detector(transactions) for detector in detectors) if pattern]


def seasonal_adjustments(month: int, heuristics: Heuristics = DEFAULT_HEURISTICS) -> List[SeasonalAdjustment]:
    entry = heuristics.seasonal_factor(month)
    if entry is None:
        return []
    factor, reason = entry
    return [SeasonalAdjustment(month=month, adjustment_factor=factor, reason=reason, confidence=Confidence.MEDIUM)]


def apply_pattern_adjustments(
    baseline: Projection,
    balance: float,
    patterns: Sequence[HistoricalPattern],
    adjustments: Sequence[SeasonalAdjustment],
) -> Projection:
    """Scale the daily averages and recompute the final balance from them"""
    daily_income = baseline.average_daily_income
    daily_expense = baseline.average_daily_expense

    for adjustment in adjustments:
        daily_income *= adjustment.adjustment_factor
        daily_expense *= adjustment.adjustment_factor

    for pattern in patterns:
        if pattern.pattern_type == PatternType.SALARY_CYCLE:
            daily_income *= 1 + pattern.impact * SALARY_INCOME_WEIGHT
        elif pattern.pattern_type == PatternType.MONTHLY:
            daily_expense *= 1 + pattern.impact * MONTHLY_EXPENSE_WEIGHT

    days = baseline.days_remaining
    return replace(
        baseline,
        average_daily_income=daily_income,
        average_daily_expense=daily_expense,
        final_balance_projection=balance + daily_income * days - daily_expense * days,
    )


def calculate_confidence_factors(
    transactions: Sequence[ClassifiedTransaction],
    patterns: Sequence[HistoricalPattern],
    reference_date: date,
) -> List[ConfidenceFactor]:
    factors = []

    count = len(transactions)
    if count >= 30:
        factors.append(
            ConfidenceFactor(
                factor="Sufficient data",
                impact=FactorImpact.POSITIVE,
                description=f"{count} transactions available",
                weight=0.3,
            )
        )
    elif count < 10:
        factors.append(
            ConfidenceFactor(
                factor="Little data",
                impact=FactorImpact.NEGATIVE,
                description=f"Only {count} transactions available",
                weight=0.4,
            )
        )

    strong_patterns = sum(1 for p in patterns if p.confidence == Confidence.HIGH)
    if strong_patterns > 0:
        factors.append(
            ConfidenceFactor(
                factor="Patterns identified",
                impact=FactorImpact.POSITIVE,
                description=f"{strong_patterns} high-confidence pattern(s)",
                weight=0.3,
            )
        )

    current_month = month_to_date(transactions, reference_date)
    if len(current_month) >= 10:
        factors.append(
            ConfidenceFactor(
                factor="Current month data",
                impact=FactorImpact.POSITIVE,
                description=f"{len(current_month)} transactions in the current month",
                weight=0.2,
            )
        )

    return factors


def overall_confidence(factors: Sequence[ConfidenceFactor]) -> Confidence:
    """score = (positive - negative) / total weight; > 0.3 high, > -0.1 medium, else low"""
    total = sum(f.weight for f in factors)
    if not factors or total == 0:
        return Confidence.LOW

    positive = sum(f.weight for f in factors if f.impact == FactorImpact.POSITIVE)
    negative = sum(f.weight for f in factors if f.impact == FactorImpact.NEGATIVE)
    score = (positive - negative) / total

    if score > 0.3:
        return Confidence.HIGH
    if score > -0.1:
        return Confidence.MEDIUM
    return Confidence.LOW


def generate_alternative_scenarios(
    projection: Projection,
    patterns: Sequence[HistoricalPattern],
) -> List[AlternativeScenario]:
    remaining_expense = projection.average_daily_expense * projection.days_remaining
    scenarios = [
        AlternativeScenario(
            name="Optimistic",
            description="20% less spending, income unchanged",
            projected_balance=projection.final_balance_projection + remaining_expense * SCENARIO_EXPENSE_SWING,
            probability=0.3,
            assumptions=["Unnecessary spending is cut", "Income stays the same"],
        ),
        AlternativeScenario(
            name="Pessimistic",
            description="20% more spending, income unchanged",
            projected_balance=projection.final_balance_projection - remaining_expense * SCENARIO_EXPENSE_SWING,
            probability=0.2,
            assumptions=["Unexpected expenses appear", "Income stays the same"],
        ),
    ]

    if any(p.pattern_type == PatternType.SALARY_CYCLE for p in patterns):
        scenarios.append(
            AlternativeScenario(
                name="Next income",
                description="Includes the next expected income",
                projected_balance=projection.final_balance_projection
                + projection.average_daily_income * NEXT_INCOME_DAYS,
                probability=0.7,
                assumptions=["Income arrives following its historical cycle", "Spending stays at the current pace"],
            )
        )
    return scenarios


def generate_smart_projection(
    transactions: Sequence[ClassifiedTransaction],
    balance: float,
    reference_date: date,
    history: Optional[Sequence[ClassifiedTransaction]] = None,
    heuristics: Heuristics = DEFAULT_HEURISTICS,
) -> SmartProjection:
    """
    Baseline projection adjusted by historical patterns and the seasonal table.

    ``transactions`` is the analyzed period; ``history`` (defaults to the same
    set) feeds pattern detection so multi-month cycles can be seen when a single
    month is analyzed.
    """
    history = transactions if history is None else history

    baseline = generate_projection(transactions, balance, reference_date)
    patterns = analyze_historical_patterns(history)
    adjustments = seasonal_adjustments(reference_date.month, heuristics)
    adjusted = apply_pattern_adjustments(baseline, balance, patterns, adjustments)
    factors = calculate_confidence_factors(transactions, patterns, reference_date)

    return SmartProjection(
        final_balance_projection=adjusted.final_balance_projection,
        days_remaining=adjusted.days_remaining,
        average_daily_expense=adjusted.average_daily_expense,
        average_daily_income=adjusted.average_daily_income,
        reduction_impact=[],
        confidence=overall_confidence(factors),
        historical_patterns=patterns,
        seasonal_adjustments=adjustments,
        confidence_factors=factors,
        alternative_scenarios=generate_alternative_scenarios(adjusted, patterns),
    )
