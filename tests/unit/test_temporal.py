"""Unit tests for weekday, period and payment-method aggregation"""

from datetime import date, time

from cashflow_insights.domain.classification import classify_all
from cashflow_insights.domain.models import PaymentMethod
from cashflow_insights.domain.temporal import (
    analyze_by_payment_method,
    analyze_by_period,
    analyze_by_weekday,
    detect_time_patterns,
    period_of_day,
)


def test_period_boundaries():
    assert period_of_day(time(0, 0)) == "night"
    assert period_of_day(time(5, 59)) == "night"
    assert period_of_day(time(6, 0)) == "morning"
    assert period_of_day(time(12, 0)) == "afternoon"
    assert period_of_day(time(18, 0)) == "evening"
    assert period_of_day(time(23, 59)) == "evening"


def test_weekday_buckets_always_present(make_transaction):
    # 2024-03-04 is a Monday
    transactions = [
        make_transaction(-30, "Cafe", date(2024, 3, 4)),
        make_transaction(-70, "Cafe", date(2024, 3, 11)),
        make_transaction(-10, "Cafe", date(2024, 3, 9)),
    ]

    buckets = analyze_by_weekday(classify_all(transactions))

    assert buckets[0].bucket == "Monday"
    assert len(buckets) == 7
    monday = buckets[0]
    assert monday.total_amount == 100
    assert monday.transaction_count == 2
    assert monday.average_amount == 50
    assert buckets[5].bucket == "Saturday" and buckets[5].total_amount == 10
    assert buckets[2].transaction_count == 0 and buckets[2].average_amount == 0


def test_period_buckets_skip_untimed_records(make_transaction):
    transactions = [
        make_transaction(-30, "Cafe", at=time(8, 30)),
        make_transaction(-50, "Bar", at=time(22, 15)),
        make_transaction(-99, "No clock"),
    ]

    buckets = {b.bucket: b for b in analyze_by_period(classify_all(transactions))}

    assert buckets["morning"].total_amount == 30
    assert buckets["evening"].total_amount == 50
    assert sum(b.transaction_count for b in buckets.values()) == 2


def test_payment_method_shares(make_transaction):
    transactions = [
        make_transaction(-75, "Shop", payment_method=PaymentMethod.CREDIT_CARD),
        make_transaction(-25, "Shop", payment_method=PaymentMethod.PIX),
        make_transaction(-25, "Shop", payment_method=PaymentMethod.PIX),
        make_transaction(-25, "Shop", payment_method=PaymentMethod.PIX),
    ]

    breakdown = {b.method: b for b in analyze_by_payment_method(classify_all(transactions))}

    assert breakdown[PaymentMethod.CREDIT_CARD].percentage_of_total == 50
    assert breakdown[PaymentMethod.PIX].percentage_of_transactions == 75
    assert breakdown[PaymentMethod.PIX].transaction_count == 3


def test_empty_input_aggregates_safely():
    assert all(b.total_amount == 0 for b in analyze_by_weekday([]))
    assert all(b.transaction_count == 0 for b in analyze_by_period([]))
    assert analyze_by_payment_method([]) == []


def test_time_patterns_observations(make_transaction):
    transactions = [
        make_transaction(-500, "Club", date(2024, 3, 9), at=time(2, 0)),   # Saturday night
        make_transaction(-100, "Cafe", date(2024, 3, 4), at=time(9, 0)),   # Monday morning
        make_transaction(-100, "Cafe", date(2024, 3, 5), at=time(14, 0)),  # Tuesday afternoon
        make_transaction(-100, "Cafe", date(2024, 3, 6), at=time(19, 0)),  # Wednesday evening
        make_transaction(-100, "Cafe", date(2024, 3, 7), at=time(10, 0)),
        make_transaction(-100, "Cafe", date(2024, 3, 8), at=time(11, 0)),
        make_transaction(-100, "Cafe", date(2024, 3, 10), at=time(12, 30)),
    ]
    classified = classify_all(transactions)

    patterns = detect_time_patterns(analyze_by_weekday(classified), analyze_by_period(classified))

    assert patterns.highest_spending_day == "Saturday"
    assert patterns.highest_spending_period == "night"
    assert patterns.weekend_total == 600
    assert patterns.weekday_total == 500
    assert patterns.weekend_count == 2
    assert any("at night" in note for note in patterns.observations)
    assert any("Saturdays" in note for note in patterns.observations)


def test_time_patterns_ignore_empty_buckets(make_transaction):
    """Untimed records leave every period empty, so no period is named"""
    transactions = [make_transaction(-20 * (i + 1), "Shop", date(2024, 3, 4 + i)) for i in range(5)]
    classified = classify_all(transactions)

    patterns = detect_time_patterns(analyze_by_weekday(classified), analyze_by_period(classified))

    assert patterns.highest_spending_period == ""
    assert patterns.lowest_spending_period == ""
    assert patterns.highest_spending_day == "Friday"
    assert patterns.lowest_spending_day == "Monday"


def test_time_patterns_without_records():
    patterns = detect_time_patterns(analyze_by_weekday([]), analyze_by_period([]))

    assert patterns.highest_spending_day == ""
    assert patterns.lowest_spending_day == ""
    assert patterns.observations == []
