"""Unit tests for the pattern-aware projection"""

from datetime import date

import pytest

from cashflow_insights.domain.classification import classify_all
from cashflow_insights.domain.models import (
    Confidence,
    ConfidenceFactor,
    FactorImpact,
    HistoricalPattern,
    PatternType,
    Projection,
    SeasonalAdjustment,
)
from cashflow_insights.domain.smart_projections import (
    analyze_historical_patterns,
    apply_pattern_adjustments,
    detect_monthly_pattern,
    detect_salary_cycle,
    detect_seasonal_pattern,
    detect_weekly_pattern,
    generate_alternative_scenarios,
    generate_smart_projection,
    overall_confidence,
    seasonal_adjustments,
)


@pytest.fixture
def salary_history(make_transaction):
    return classify_all(
        [make_transaction(5000, "ACME Salary", date(2024, month, 5)) for month in range(1, 7)]
    )


@pytest.fixture
def growing_expenses(make_transaction):
    amounts = {1: 100, 2: 100, 3: 300, 4: 300}
    return classify_all(
        [make_transaction(-amount, "Groceries", date(2024, month, 12)) for month, amount in amounts.items()]
    )


def _projection(final: float = 1000, income: float = 100, expense: float = 50, days: int = 10) -> Projection:
    return Projection(
        final_balance_projection=final,
        days_remaining=days,
        average_daily_expense=expense,
        average_daily_income=income,
        reduction_impact=[],
        confidence=Confidence.MEDIUM,
    )


def _pattern(pattern_type: PatternType, impact: float) -> HistoricalPattern:
    return HistoricalPattern(
        pattern_type=pattern_type,
        description="",
        confidence=Confidence.HIGH,
        impact=impact,
    )


def test_salary_cycle_detected(salary_history):
    pattern = detect_salary_cycle(salary_history)

    assert pattern is not None
    assert pattern.pattern_type == PatternType.SALARY_CYCLE
    assert pattern.confidence == Confidence.HIGH
    assert pattern.impact == 0.8
    assert "every 30 days" in pattern.description


def test_salary_cycle_needs_regular_intervals(make_transaction):
    irregular = classify_all(
        [
            make_transaction(1000, "Freelance", date(2024, 1, 2)),
            make_transaction(1000, "Freelance", date(2024, 1, 9)),
            make_transaction(1000, "Freelance", date(2024, 3, 20)),
        ]
    )

    assert detect_salary_cycle(irregular) is None


def test_monthly_pattern_trend(growing_expenses):
    pattern = detect_monthly_pattern(growing_expenses)

    assert pattern.confidence == Confidence.HIGH
    assert "increasing by 200.0%" in pattern.description
    assert detect_monthly_pattern(growing_expenses[:2]) is None


def test_seasonal_pattern(growing_expenses):
    pattern = detect_seasonal_pattern(growing_expenses)

    assert pattern.pattern_type == PatternType.SEASONAL
    assert pattern.examples == ["January: -50.0%", "February: -50.0%", "March: +50.0%", "April: +50.0%"]


def test_weekly_pattern(growing_expenses, make_transaction):
    assert detect_weekly_pattern(growing_expenses) is not None
    small = classify_all([make_transaction(-10, "Kiosk")])
    assert detect_weekly_pattern(small) is None


def test_patterns_need_ten_transactions(salary_history, growing_expenses):
    assert analyze_historical_patterns(salary_history) == []

    patterns = analyze_historical_patterns(salary_history + growing_expenses)

    assert [p.pattern_type for p in patterns] == [
        PatternType.SALARY_CYCLE,
        PatternType.WEEKLY,
        PatternType.MONTHLY,
        PatternType.SEASONAL,
    ]


def test_seasonal_adjustment_table():
    december = seasonal_adjustments(12)

    assert december[0].adjustment_factor == 1.4
    assert seasonal_adjustments(13) == []


def test_apply_pattern_adjustments():
    adjustments = [SeasonalAdjustment(month=4, adjustment_factor=1.2, reason="", confidence=Confidence.MEDIUM)]
    patterns = [_pattern(PatternType.SALARY_CYCLE, 0.8), _pattern(PatternType.MONTHLY, 0.5)]

    adjusted = apply_pattern_adjustments(_projection(), 0, patterns, adjustments)

    assert adjusted.average_daily_income == pytest.approx(168)
    assert adjusted.average_daily_expense == pytest.approx(69)
    assert adjusted.final_balance_projection == pytest.approx(990)


@pytest.mark.parametrize(
    "weights,expected",
    [
        ([], Confidence.LOW),
        ([(FactorImpact.POSITIVE, 0.3)], Confidence.HIGH),
        ([(FactorImpact.NEGATIVE, 0.4)], Confidence.LOW),
        ([(FactorImpact.POSITIVE, 0.3), (FactorImpact.NEGATIVE, 0.4)], Confidence.LOW),
        ([(FactorImpact.POSITIVE, 0.3), (FactorImpact.POSITIVE, 0.3), (FactorImpact.NEGATIVE, 0.4)], Confidence.MEDIUM),
    ],
)
def test_overall_confidence(weights, expected):
    factors = [ConfidenceFactor(factor="f", impact=impact, description="", weight=w) for impact, w in weights]

    assert overall_confidence(factors) == expected


def test_alternative_scenarios():
    without_salary = generate_alternative_scenarios(_projection(), [])
    with_salary = generate_alternative_scenarios(_projection(), [_pattern(PatternType.SALARY_CYCLE, 0.8)])

    assert [s.name for s in without_salary] == ["Optimistic", "Pessimistic"]
    assert [s.projected_balance for s in without_salary] == pytest.approx([1100, 900])
    assert with_salary[-1].name == "Next income"
    assert with_salary[-1].projected_balance == pytest.approx(4000)


def test_smart_projection_with_little_data_is_low_confidence(make_transaction):
    transactions = classify_all([make_transaction(-10, "Shop", date(2024, 3, day)) for day in range(1, 10)])

    projection = generate_smart_projection(transactions, 100, date(2024, 3, 20))

    assert projection.confidence == Confidence.LOW
    assert projection.historical_patterns == []
    assert projection.seasonal_adjustments[0].adjustment_factor == 1.0
    assert [s.name for s in projection.alternative_scenarios] == ["Optimistic", "Pessimistic"]


def test_smart_projection_uses_history(salary_history, growing_expenses):
    june = [t for t in salary_history if t.date.month == 6]

    projection = generate_smart_projection(
        june, 0, date(2024, 6, 15), history=salary_history + growing_expenses
    )

    assert any(p.pattern_type == PatternType.SALARY_CYCLE for p in projection.historical_patterns)
    assert projection.alternative_scenarios[-1].name == "Next income"
