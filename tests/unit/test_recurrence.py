"""Unit tests for recurring transaction detection"""

from datetime import date, timedelta

from cashflow_insights.domain.classification import classify_all
from cashflow_insights.domain.models import Confidence, RecurringTransaction
from cashflow_insights.domain.recurrence import (
    analyze_recurring_patterns,
    calculate_recurring_impact,
    detect_recurring,
    monthly_equivalent,
)


def _recurring(merchant: str, amount: float, every: int, confidence=Confidence.HIGH) -> RecurringTransaction:
    return RecurringTransaction(
        merchant=merchant,
        average_amount=amount,
        frequency_days=every,
        last_transaction_date=date(2024, 3, 1),
        total_transactions=3,
        confidence=confidence,
    )


def test_monthly_subscription_is_high_confidence(monthly_subscription):
    """Four charges 30 +- 2 days apart at ~99.90 are a high-confidence recurrence"""
    recurring = detect_recurring(classify_all(monthly_subscription))

    assert len(recurring) == 1
    item = recurring[0]
    assert item.merchant == "StreamPlus"
    assert item.confidence == Confidence.HIGH
    assert item.frequency_days == 30
    assert item.total_transactions == 4
    assert abs(item.average_amount - 99.925) < 0.001
    assert item.last_transaction_date == date(2024, 4, 2)


def test_single_transaction_merchant_never_recurring(make_transaction):
    transactions = [
        make_transaction(-50, "Lonely Shop", date(2024, 3, 1)),
        make_transaction(-20, "Other Shop", date(2024, 3, 2)),
    ]

    assert detect_recurring(classify_all(transactions)) == []


def test_two_consistent_occurrences_are_medium(make_transaction):
    """High confidence needs three occurrences"""
    transactions = [
        make_transaction(-40, "Gym", date(2024, 1, 10)),
        make_transaction(-40, "Gym", date(2024, 2, 10)),
    ]

    recurring = detect_recurring(classify_all(transactions))

    assert [r.confidence for r in recurring] == [Confidence.MEDIUM]


def test_merchant_names_are_normalized(make_transaction):
    transactions = [
        make_transaction(-40, "Gym ", date(2024, 1, 10)),
        make_transaction(-40, "gym", date(2024, 2, 10)),
        make_transaction(-40, "GYM", date(2024, 3, 10)),
    ]

    recurring = detect_recurring(classify_all(transactions))

    assert len(recurring) == 1
    assert recurring[0].total_transactions == 3


def test_inconsistent_amounts_and_intervals_are_excluded(make_transaction):
    start = date(2024, 1, 1)
    transactions = [
        make_transaction(-10, "Random", start),
        make_transaction(-300, "Random", start + timedelta(days=2)),
        make_transaction(-45, "Random", start + timedelta(days=40)),
    ]

    assert detect_recurring(classify_all(transactions)) == []


def test_empty_input():
    assert detect_recurring([]) == []


def test_analyze_recurring_patterns_splits_by_kind():
    split = analyze_recurring_patterns(
        [
            _recurring("ACME Salary", 5000, 30),
            _recurring("Rent", 1200, 30),
            _recurring("Insurance", 600, 180),
            _recurring("Gym", 40, 30, Confidence.MEDIUM),
        ]
    )

    assert [r.merchant for r in split.fixed_income] == ["ACME Salary"]
    assert [r.merchant for r in split.fixed_expenses] == ["Rent"]
    assert [r.merchant for r in split.variable_expenses] == ["Insurance", "Gym"]


def test_monthly_equivalent_buckets():
    assert abs(monthly_equivalent(_recurring("Weekly", 10, 7)) - 43.3) < 1e-9
    assert monthly_equivalent(_recurring("Monthly", 10, 30)) == 10
    assert abs(monthly_equivalent(_recurring("Quarterly", 30, 90)) - 10) < 1e-9
    assert abs(monthly_equivalent(_recurring("Yearly", 120, 365)) - 10) < 1e-9


def test_recurring_impact_totals():
    impact = calculate_recurring_impact([_recurring("A", 100, 30), _recurring("B", 300, 90)])

    assert abs(impact.monthly_total - 200) < 1e-9
    assert abs(impact.yearly_projection - 2400) < 1e-9
    assert [item.merchant for item in impact.breakdown] == ["A", "B"]
    assert abs(impact.breakdown[1].yearly_amount - 1200) < 1e-9
