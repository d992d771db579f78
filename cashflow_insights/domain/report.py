"""Report assembly - runs every analysis pass and merges the results"""

from collections import defaultdict
from dataclasses import replace
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple

from cashflow_insights.domain.advanced_anomalies import detect_advanced_anomalies
from cashflow_insights.domain.anomalies import detect_anomalies, detect_time_anomalies
from cashflow_insights.domain.classification import classify_all
from cashflow_insights.domain.comparison import compare_periods, comparison_insights, filter_by_month
from cashflow_insights.domain.exceptions import InvalidPeriodError
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
    CategoryBreakdown,
    ClassifiedTransaction,
    Confidence,
    FinancialReport,
    Insight,
    MonthlyComparison,
    PatternType,
    PeriodTotals,
    RecurringImpact,
    RecurringTransaction,
    ReportSummary,
    Severity,
    SmartProjection,
    SpendingPattern,
    TimePatterns,
    TopGroup,
    Transaction,
    TransactionType,
    Variation,
)
from cashflow_insights.domain.projections import (
    DEFAULT_REDUCTION_PERCENTAGES,
    calculate_reduction_impact,
    projection_insights,
)
from cashflow_insights.domain.recurrence import calculate_recurring_impact, detect_recurring
from cashflow_insights.domain.smart_projections import generate_smart_projection
from cashflow_insights.domain.temporal import (
    analyze_by_payment_method,
    analyze_by_period,
    analyze_by_weekday,
    detect_time_patterns,
)
from cashflow_insights.utils.date_utils import days_in_month, in_month, month_range, previous_month

DEFAULT_TOP_N = 10
OTHER_MERCHANTS = "Other merchants"
HIGH_FREQUENCY_PATTERN = 8
OTHER_CATEGORY_SHARE = 30

_CONFIDENCE_ORDER = {Confidence.HIGH: 0, Confidence.MEDIUM: 1, Confidence.LOW: 2}


def top_groups(transactions: Sequence[ClassifiedTransaction], limit: int = DEFAULT_TOP_N) -> List[TopGroup]:
    """
    Per-merchant totals, largest first.

    Merchants beyond ``limit`` are rolled up into one trailing group so the
    list always sums to the total of ``transactions``.
    """
    groups: Dict[str, List[ClassifiedTransaction]] = defaultdict(list)
    for txn in transactions:
        groups[normalize_merchant(txn.merchant)].append(txn)

    ranked = sorted(groups.values(), key=lambda g: sum(t.abs_amount for t in g), reverse=True)
    head, tail = ranked[:limit], ranked[limit:]

    result = [_top_group(group[0].merchant, group) for group in head]
    if tail:
        result.append(_top_group(OTHER_MERCHANTS, [t for group in tail for t in group]))
    return result


def _top_group(merchant: str, group: Sequence[ClassifiedTransaction]) -> TopGroup:
    total = sum(t.abs_amount for t in group)
    largest = max(group, key=lambda t: t.abs_amount)
    return TopGroup(
        merchant=merchant,
        total=total,
        count=len(group),
        average=total / len(group),
        largest_date=largest.date,
    )


def analyze_categories(
    transactions: Sequence[ClassifiedTransaction],
    total_income: float,
    total_expenses: float,
) -> List[CategoryBreakdown]:
    groups: Dict[Category, List[ClassifiedTransaction]] = defaultdict(list)
    for txn in transactions:
        groups[txn.category].append(txn)

    grand_total = total_income + total_expenses
    breakdown = []
    for category, group in groups.items():
        total = sum(t.abs_amount for t in group)
        income = sum(t.abs_amount for t in group if t.is_income)
        expense = total - income
        breakdown.append(
            CategoryBreakdown(
                category=category,
                total_amount=total,
                expense_amount=expense,
                transaction_count=len(group),
                percentage_of_total=(total / grand_total) * 100 if grand_total > 0 else 0.0,
                percentage_of_income=(income / total_income) * 100 if total_income > 0 else 0.0,
                percentage_of_expenses=(expense / total_expenses) * 100 if total_expenses > 0 else 0.0,
            )
        )
    return sorted(breakdown, key=lambda c: c.total_amount, reverse=True)


def _alert_insight(alert: CategoryAlert) -> Insight:
    return Insight(
        text=alert.message,
        confidence=Confidence.HIGH if alert.severity == Severity.CRITICAL else Confidence.MEDIUM,
        explanation=(
            f"{alert.increase_percent:+.1f}% on {alert.category.value} - " + "; ".join(alert.suggestions)
        ),
    )


def build_insights(
    top_expenses: Sequence[TopGroup],
    categories: Sequence[CategoryBreakdown],
    anomalies: Sequence[Anomaly],
    discretionary: Sequence[Anomaly],
    category_alerts: Sequence[CategoryAlert],
    spending_patterns: Sequence[SpendingPattern],
    recurring: Sequence[RecurringTransaction],
    comparison: Optional[MonthlyComparison],
    projection: SmartProjection,
    time_patterns: TimePatterns,
    heuristics: Heuristics = DEFAULT_HEURISTICS,
) -> List[Insight]:
    """Template insights ordered by confidence, high first; ties keep template order"""
    insights: List[Insight] = []

    for group in top_expenses:
        if contains_any(normalize_merchant(group.merchant), heuristics.income_keywords):
            insights.append(
                Insight(
                    text=f'"{group.merchant}" looks like income but was counted as an expense',
                    confidence=Confidence.HIGH,
                    explanation="The merchant contains an income keyword - likely misclassification",
                )
            )

    insights.extend(
        _alert_insight(alert)
        for alert in category_alerts
        if alert.severity in (Severity.CRITICAL, Severity.HIGH)
    )

    if discretionary:
        insights.append(
            Insight(
                text=f"{len(discretionary)} alert(s) about spending on sweets, snacks or delivery",
                confidence=Confidence.HIGH,
                explanation="Consider buying non-essential food less often",
            )
        )

    frequent = [p for p in spending_patterns if p.frequency > HIGH_FREQUENCY_PATTERN]
    if frequent:
        insights.append(
            Insight(
                text=f"{len(frequent)} high-frequency spending pattern(s) detected",
                confidence=Confidence.MEDIUM,
                explanation="Some merchants are visited very often - consider setting limits",
            )
        )

    if projection.confidence == Confidence.HIGH:
        if projection.final_balance_projection < 0:
            insights.append(
                Insight(
                    text="Smart projection points to a negative balance at the end of the month",
                    confidence=Confidence.HIGH,
                    explanation="Based on historical patterns and seasonal adjustments",
                )
            )
        optimistic = next((s for s in projection.alternative_scenarios if s.name == "Optimistic"), None)
        if optimistic:
            insights.append(
                Insight(
                    text=f"Optimistic scenario: balance of {optimistic.projected_balance:.2f}",
                    confidence=Confidence.MEDIUM,
                    explanation="With 20% less unnecessary spending",
                )
            )

    salary = next(
        (p for p in projection.historical_patterns if p.pattern_type == PatternType.SALARY_CYCLE), None
    )
    if salary:
        insights.append(
            Insight(
                text=f"Regular income pattern identified: {salary.description}",
                confidence=salary.confidence,
                explanation="A consistent income cycle was detected",
            )
        )

    strong_anomalies = [a for a in anomalies if a.confidence == Confidence.HIGH]
    if strong_anomalies:
        insights.append(
            Insight(
                text=f"{len(strong_anomalies)} anomalous transaction finding(s) detected",
                confidence=Confidence.HIGH,
                explanation="Transactions with atypical amounts or patterns were identified",
            )
        )

    other = next((c for c in categories if c.category == Category.OTHER), None)
    if other and other.percentage_of_total > OTHER_CATEGORY_SHARE:
        insights.append(
            Insight(
                text=f'{other.percentage_of_total:.1f}% of the money moved is in the "other" category',
                confidence=Confidence.MEDIUM,
                explanation="Many transactions are uncategorized - consider better categorization",
            )
        )

    strong_recurring = [r for r in recurring if r.confidence == Confidence.HIGH]
    if strong_recurring:
        insights.append(
            Insight(
                text=f"{len(strong_recurring)} recurring transaction(s) identified",
                confidence=Confidence.HIGH,
                explanation="Recurring spending patterns were detected",
            )
        )

    if comparison is not None:
        insights.extend(
            Insight(text=text, confidence=Confidence.MEDIUM, explanation="Compared with the previous period")
            for text in comparison_insights(comparison)
        )

    insights.extend(
        Insight(text=text, confidence=Confidence.MEDIUM, explanation="Based on when your spending happens")
        for text in time_patterns.observations
    )

    insights.extend(
        Insight(text=text, confidence=projection.confidence, explanation="Based on the month-to-date pace")
        for text in projection_insights(projection)
    )

    return sorted(insights, key=lambda i: _CONFIDENCE_ORDER[i.confidence])


def resolve_reference_date(target_period: Optional[Tuple[int, int]], today: date) -> date:
    """``today`` when it falls inside the target month (or no target), else the target's last day"""
    if target_period is None:
        return today
    year, month = target_period
    if in_month(today, year, month):
        return today
    return date(year, month, days_in_month(year, month))


def _validate_period(target_period: Optional[Tuple[int, int]]) -> None:
    if target_period is None:
        return
    year, month = target_period
    if not 1 <= month <= 12:
        raise InvalidPeriodError(f"Month must be between 1 and 12, got {month}")
    if not 1 <= year <= 9999:
        raise InvalidPeriodError(f"Year out of range: {year}")


def empty_report() -> FinancialReport:
    """Well-formed report with zero totals, empty lists and low confidence"""
    zero = PeriodTotals(income=0.0, expenses=0.0, transactions=0, average_per_transaction=0.0)
    return FinancialReport(
        summary=ReportSummary(
            total_balance=0.0,
            total_income=0.0,
            total_expenses=0.0,
            total_investments=0.0,
            transaction_count=0,
        ),
        top_income=[],
        top_expenses=[],
        categories=[],
        by_weekday=[],
        by_period=[],
        by_payment_method=[],
        time_patterns=TimePatterns(
            highest_spending_day="",
            lowest_spending_day="",
            highest_spending_period="",
            lowest_spending_period="",
            weekend_total=0.0,
            weekday_total=0.0,
            weekend_count=0,
            weekday_count=0,
            observations=[],
        ),
        recurring=[],
        recurring_impact=RecurringImpact(monthly_total=0.0, yearly_projection=0.0, breakdown=[]),
        anomalies=[],
        category_alerts=[],
        spending_patterns=[],
        comparison=MonthlyComparison(
            current_period=zero,
            previous_period=zero,
            variation=Variation(
                income_percent=None,
                expenses_percent=None,
                transactions_percent=None,
                average_percent=None,
            ),
            notes=[],
        ),
        projection=SmartProjection(
            final_balance_projection=0.0,
            days_remaining=0,
            average_daily_expense=0.0,
            average_daily_income=0.0,
            reduction_impact=[],
            confidence=Confidence.LOW,
        ),
        insights=[],
        transactions=[],
    )


def generate_report(
    transactions: Sequence[Transaction],
    balance: float,
    target_period: Optional[Tuple[int, int]] = None,
    *,
    today: Optional[date] = None,
    heuristics: Optional[Heuristics] = None,
    top_n: int = DEFAULT_TOP_N,
    reduction_percentages: Sequence[float] = DEFAULT_REDUCTION_PERCENTAGES,
) -> FinancialReport:
    """
    Build the full financial report for one user.

    Args:
        transactions: Raw records, any order
        balance: Current account balance
        target_period: (year, month) to analyze; None analyzes the whole history
            and leaves the previous period empty
        today: Reference date for projections; the only clock input, inject it
            for deterministic output
        heuristics: Keyword and seasonal tables, DEFAULT_HEURISTICS when omitted

    Raises:
        InvalidPeriodError: target month outside 1-12
    """
    _validate_period(target_period)
    if not transactions:
        return empty_report()

    heuristics = heuristics or DEFAULT_HEURISTICS
    today = today or date.today()
    reference_date = resolve_reference_date(target_period, today)

    if target_period is not None:
        year, month = target_period
        current_raw = filter_by_month(transactions, year, month)
        previous_raw = filter_by_month(transactions, *previous_month(year, month))
        period_end = month_range(year, month)[1]
        history_raw = [t for t in transactions if t.date <= period_end]
    else:
        current_raw = list(transactions)
        previous_raw = []
        history_raw = list(transactions)

    current = classify_all(current_raw, heuristics)
    previous = classify_all(previous_raw, heuristics)
    history = classify_all(history_raw, heuristics)

    incomes = [t for t in current if t.is_income]
    expenses = [t for t in current if not t.is_income]
    total_income = sum(t.abs_amount for t in incomes)
    total_expenses = sum(t.abs_amount for t in expenses)
    total_investments = sum(
        t.abs_amount for t in current if t.transaction.transaction_type == TransactionType.INVESTMENT
    )

    top_expenses = top_groups(expenses, top_n)
    categories = analyze_categories(current, total_income, total_expenses)

    advanced = detect_advanced_anomalies(current, total_income, previous, heuristics)
    anomalies = [
        *detect_anomalies(current, total_income, heuristics),
        *detect_time_anomalies(current),
        *advanced.anomalies,
    ]

    recurring = detect_recurring(current)
    by_weekday = analyze_by_weekday(current)
    by_period = analyze_by_period(current)
    time_patterns = detect_time_patterns(by_weekday, by_period)
    comparison = compare_periods(current, previous)

    projection = replace(
        generate_smart_projection(current, balance, reference_date, history=history, heuristics=heuristics),
        reduction_impact=calculate_reduction_impact(categories, reduction_percentages),
    )

    insights = build_insights(
        top_expenses=top_expenses,
        categories=categories,
        anomalies=anomalies,
        discretionary=advanced.discretionary,
        category_alerts=advanced.category_alerts,
        spending_patterns=advanced.spending_patterns,
        recurring=recurring,
        comparison=comparison if target_period is not None else None,
        projection=projection,
        time_patterns=time_patterns,
        heuristics=heuristics,
    )

    return FinancialReport(
        summary=ReportSummary(
            total_balance=balance,
            total_income=total_income,
            total_expenses=total_expenses,
            total_investments=total_investments,
            transaction_count=len(current),
        ),
        top_income=top_groups(incomes, top_n),
        top_expenses=top_expenses,
        categories=categories,
        by_weekday=by_weekday,
        by_period=by_period,
        by_payment_method=analyze_by_payment_method(current),
        time_patterns=time_patterns,
        recurring=recurring,
        recurring_impact=calculate_recurring_impact(recurring),
        anomalies=anomalies,
        category_alerts=advanced.category_alerts,
        spending_patterns=advanced.spending_patterns,
        comparison=comparison,
        projection=projection,
        insights=insights,
        transactions=list(current_raw),
    )
