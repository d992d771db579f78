"""Prometheus metrics for report volume, anomaly findings and storage health"""

from prometheus_client import Counter, Histogram

from cashflow_insights.domain.models import FinancialReport

# Report metrics
report_counter = Counter(
    "cashflow_report_total",
    "Total financial reports generated",
    ["confidence"],  # projection confidence: high | medium | low
)

anomaly_counter = Counter(
    "cashflow_anomaly_total",
    "Anomalies emitted in generated reports",
    ["confidence"],
)

category_alert_counter = Counter(
    "cashflow_category_alert_total",
    "Category alerts emitted in generated reports",
    ["severity"],  # medium | high | critical
)

# Storage metrics
transaction_source_failures_counter = Counter(
    "transaction_source_failures_total",
    "Failed transaction loads from storage",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_report(report: FinancialReport) -> None:
    """Record report metrics for monitoring projection quality and finding volume"""
    report_counter.labels(confidence=report.projection.confidence.value).inc()

    for anomaly in report.anomalies:
        anomaly_counter.labels(confidence=anomaly.confidence.value).inc()

    for alert in report.category_alerts:
        category_alert_counter.labels(severity=alert.severity.value).inc()
