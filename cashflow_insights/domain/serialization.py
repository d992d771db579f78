"""JSON rendering of financial reports"""

from typing import Any, Dict

from pydantic import TypeAdapter

from cashflow_insights.domain.models import FinancialReport

_report_adapter = TypeAdapter(FinancialReport)


def serialize_report(report: FinancialReport) -> Dict[str, Any]:
    """JSON-compatible dict: dates as ISO strings, enums as their values, undefined variations as None"""
    return _report_adapter.dump_python(report, mode="json")


def report_to_json(report: FinancialReport) -> bytes:
    """Deterministic JSON bytes; identical reports always render identically"""
    return _report_adapter.dump_json(report)
