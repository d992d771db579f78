"""Unit tests for report assembly and serialization"""

from datetime import date, time

import pytest

from cashflow_insights.domain.anomalies import SUSPICIOUS_REASON
from cashflow_insights.domain.classification import classify_all
from cashflow_insights.domain.comparison import NO_PREVIOUS_DATA_NOTE
from cashflow_insights.domain.exceptions import InvalidPeriodError
from cashflow_insights.domain.models import Category, Confidence, Severity, TransactionType
from cashflow_insights.domain.report import (
    OTHER_MERCHANTS,
    empty_report,
    generate_report,
    resolve_reference_date,
    top_groups,
)
from cashflow_insights.domain.serialization import report_to_json, serialize_report

MARCH = (2024, 3)
TODAY = date(2024, 3, 20)


@pytest.fixture
def scenario_report(scenario_transactions):
    return generate_report(scenario_transactions, 2000, MARCH, today=TODAY)


def test_scenario_totals(scenario_report):
    summary = scenario_report.summary

    assert summary.total_income == 15000
    assert summary.total_expenses == 7116
    assert summary.total_balance == 2000
    assert summary.transaction_count == 5


def test_scenario_top_lists(scenario_report):
    assert [g.merchant for g in scenario_report.top_income] == ["Salary Co", "Freelance"]
    assert [g.merchant for g in scenario_report.top_expenses] == ["Gacha", "Market", "Netflix"]
    assert "Salary Co" not in [g.merchant for g in scenario_report.top_expenses]


def test_scenario_flags_gacha(scenario_report):
    gacha = [a for a in scenario_report.anomalies if a.merchant == "Gacha"]

    assert any(a.reason == SUSPICIOUS_REASON and a.confidence == Confidence.HIGH for a in gacha)
    assert any("44.4% of period income" in a.reason for a in gacha)
    assert any("Accumulated spending on OTHER" in a.reason for a in gacha)


def test_scenario_category_alert_and_comparison(scenario_report):
    assert [(a.category, a.severity) for a in scenario_report.category_alerts] == [
        (Category.OTHER, Severity.CRITICAL)
    ]
    assert NO_PREVIOUS_DATA_NOTE in scenario_report.comparison.notes
    assert scenario_report.comparison.variation.expenses_percent is None


def test_insights_are_ordered_by_confidence(scenario_report):
    rank = {Confidence.HIGH: 0, Confidence.MEDIUM: 1, Confidence.LOW: 2}
    ranks = [rank[i.confidence] for i in scenario_report.insights]

    assert scenario_report.insights
    assert ranks == sorted(ranks)


def test_reduction_impact_targets_expense_categories(scenario_report):
    impacts = scenario_report.projection.reduction_impact

    assert impacts[0].category == Category.OTHER
    assert impacts[0].projected_savings == pytest.approx(666.6)
    assert Category.SALARY not in {i.category for i in impacts}


def test_top_lists_sum_to_totals(make_transaction):
    transactions = [make_transaction(-(i + 1) * 10, f"Shop {i}") for i in range(12)]
    transactions.append(make_transaction(-5, "shop 0 "))

    report = generate_report(transactions, 0, MARCH, today=TODAY)
    groups = report.top_expenses

    assert len(groups) == 11
    assert groups[-1].merchant == OTHER_MERCHANTS
    assert sum(g.total for g in groups) == pytest.approx(report.summary.total_expenses)
    assert sum(g.count for g in groups) == 13


def test_top_groups_merge_normalized_merchants(make_transaction):
    groups = top_groups(
        classify_all(
            [
                make_transaction(-10, "Cafe", date(2024, 3, 1)),
                make_transaction(-30, " cafe", date(2024, 3, 2)),
            ]
        )
    )

    assert len(groups) == 1
    assert groups[0].count == 2
    assert groups[0].average == 20
    assert groups[0].largest_date == date(2024, 3, 2)


def test_empty_input_yields_empty_report():
    report = generate_report([], 500, MARCH, today=TODAY)

    assert report == empty_report()
    assert report.summary.transaction_count == 0
    assert report.projection.confidence == Confidence.LOW
    assert report.insights == []


def test_invalid_month_raises():
    with pytest.raises(InvalidPeriodError):
        generate_report([], 0, (2024, 13))
    with pytest.raises(InvalidPeriodError):
        generate_report([], 0, (2024, 0))


def test_period_filtering_and_previous_month(make_transaction):
    transactions = [
        make_transaction(-100, "Lunch", date(2024, 2, 10), category=Category.FOOD),
        make_transaction(-300, "Lunch", date(2024, 3, 10), category=Category.FOOD),
        make_transaction(-999, "Future", date(2024, 4, 1)),
    ]

    report = generate_report(transactions, 0, MARCH, today=TODAY)

    assert [t.merchant for t in report.transactions] == ["Lunch"]
    assert report.comparison.previous_period.expenses == 100
    assert report.comparison.variation.expenses_percent == pytest.approx(200)
    assert report.category_alerts[0].severity == Severity.CRITICAL


def test_whole_history_without_target(make_transaction):
    transactions = [
        make_transaction(-100, "Lunch", date(2024, 2, 10)),
        make_transaction(-300, "Lunch", date(2024, 3, 10)),
    ]

    report = generate_report(transactions, 0, today=TODAY)

    assert report.summary.transaction_count == 2
    assert report.comparison.previous_period.transactions == 0


def test_investments_are_totalled(make_transaction):
    transactions = [
        make_transaction(-1000, "Broker", transaction_type=TransactionType.INVESTMENT),
        make_transaction(-50, "Shop"),
    ]

    report = generate_report(transactions, 0, MARCH, today=TODAY)

    assert report.summary.total_investments == 1000


def test_resolve_reference_date():
    assert resolve_reference_date(None, TODAY) == TODAY
    assert resolve_reference_date(MARCH, TODAY) == TODAY
    assert resolve_reference_date((2024, 2), TODAY) == date(2024, 2, 29)


def test_report_generation_is_deterministic(scenario_transactions):
    first = generate_report(scenario_transactions, 2000, MARCH, today=TODAY)
    second = generate_report(scenario_transactions, 2000, MARCH, today=TODAY)

    assert first == second
    assert report_to_json(first) == report_to_json(second)


def test_serialized_report_shape(scenario_report):
    data = serialize_report(scenario_report)

    assert data["summary"]["total_income"] == 15000
    assert data["transactions"][0]["date"] == "2024-03-05"
    assert data["transactions"][0]["transaction_type"] == "DEPOSIT"
    assert data["comparison"]["variation"]["income_percent"] is None
    assert data["projection"]["confidence"] in ("high", "medium", "low")


def test_time_of_day_is_serialized(make_transaction):
    report = generate_report([make_transaction(-20, "Cafe", at=time(8, 15))], 0, MARCH, today=TODAY)

    assert serialize_report(report)["transactions"][0]["time_of_day"] == "08:15:00"
