"""Domain models - immutable dataclasses for transactions and report artifacts"""

from dataclasses import dataclass, field
from datetime import date, time
from enum import Enum
from typing import List, Optional


class Confidence(str, Enum):
    """Qualitative certainty grade"""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Severity(str, Enum):
    """Category alert severity, ordered low -> critical"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.LOW: 1,
    Severity.MEDIUM: 2,
    Severity.HIGH: 3,
    Severity.CRITICAL: 4,
}


class Trend(str, Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class PatternType(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    SEASONAL = "seasonal"
    SALARY_CYCLE = "salary_cycle"


class FactorImpact(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class TransactionType(str, Enum):
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    EXPENSE = "EXPENSE"
    INCOME = "INCOME"
    INVESTMENT = "INVESTMENT"


class PaymentMethod(str, Enum):
    CASH = "CASH"
    CREDIT_CARD = "CREDIT_CARD"
    DEBIT_CARD = "DEBIT_CARD"
    PIX = "PIX"
    BANK_TRANSFER = "BANK_TRANSFER"
    BANK_SLIP = "BANK_SLIP"
    OTHER = "OTHER"


class Category(str, Enum):
    """Fixed category taxonomy; OTHER doubles as the 'uncategorized' placeholder"""

    SALARY = "SALARY"
    FOOD = "FOOD"
    TRANSPORTATION = "TRANSPORTATION"
    HEALTH = "HEALTH"
    ENTERTAINMENT = "ENTERTAINMENT"
    HOUSING = "HOUSING"
    UTILITY = "UTILITY"
    EDUCATION = "EDUCATION"
    INVESTMENT = "INVESTMENT"
    SHOPPING = "SHOPPING"
    SUBSCRIPTIONS = "SUBSCRIPTIONS"
    OTHER = "OTHER"


@dataclass(frozen=True)
class Transaction:
    """Raw transaction record supplied by the persistence layer"""

    id: str
    date: date
    amount: float  # sign may contradict the merchant/type evidence
    merchant: str
    payment_method: PaymentMethod = PaymentMethod.OTHER
    category: Optional[Category] = None
    transaction_type: Optional[TransactionType] = None
    notes: Optional[str] = None
    time_of_day: Optional[time] = None  # only set when the source recorded one


@dataclass(frozen=True)
class ClassificationResult:
    is_income: bool
    confidence: Confidence
    reason: str
    conflict_flag: bool = False


@dataclass(frozen=True)
class ClassifiedTransaction:
    """Transaction plus its classification and resolved category"""

    transaction: Transaction
    classification: ClassificationResult
    category: Category

    @property
    def id(self) -> str:
        return self.transaction.id

    @property
    def date(self) -> date:
        return self.transaction.date

    @property
    def time_of_day(self) -> Optional[time]:
        return self.transaction.time_of_day

    @property
    def amount(self) -> float:
        return self.transaction.amount

    @property
    def abs_amount(self) -> float:
        return abs(self.transaction.amount)

    @property
    def merchant(self) -> str:
        return self.transaction.merchant

    @property
    def payment_method(self) -> PaymentMethod:
        return self.transaction.payment_method

    @property
    def is_income(self) -> bool:
        return self.classification.is_income


@dataclass(frozen=True)
class Anomaly:
    transaction_id: str
    merchant: str
    amount: float
    reason: str
    confidence: Confidence
    explanation: str


@dataclass(frozen=True)
class CategoryAlert:
    category: Category
    current_spending: float
    previous_period_spending: float
    increase_percent: float
    frequency_increase_percent: float
    severity: Severity
    message: str
    suggestions: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class SpendingPattern:
    category: Category
    merchant: str
    frequency: float  # occurrences per 30 days
    average_amount: float
    total_amount: float
    last_occurrence: date
    trend: Trend


@dataclass(frozen=True)
class RecurringTransaction:
    merchant: str
    average_amount: float
    frequency_days: int
    last_transaction_date: date
    total_transactions: int
    confidence: Confidence


@dataclass(frozen=True)
class RecurringSplit:
    fixed_income: List[RecurringTransaction]
    fixed_expenses: List[RecurringTransaction]
    variable_expenses: List[RecurringTransaction]


@dataclass(frozen=True)
class RecurringImpactItem:
    merchant: str
    monthly_amount: float
    yearly_amount: float


@dataclass(frozen=True)
class RecurringImpact:
    monthly_total: float
    yearly_projection: float
    breakdown: List[RecurringImpactItem]


@dataclass(frozen=True)
class TopGroup:
    """Per-merchant aggregate for the top income/expense lists"""

    merchant: str
    total: float
    count: int
    average: float
    largest_date: date


@dataclass(frozen=True)
class CategoryBreakdown:
    category: Category
    total_amount: float
    expense_amount: float  # share of total_amount from expense-classified records
    transaction_count: int
    percentage_of_total: float
    percentage_of_income: float
    percentage_of_expenses: float


@dataclass(frozen=True)
class BucketBreakdown:
    """Aggregate for one weekday or time-of-day bucket"""

    bucket: str
    total_amount: float
    transaction_count: int
    average_amount: float


@dataclass(frozen=True)
class PaymentMethodBreakdown:
    method: PaymentMethod
    total_amount: float
    transaction_count: int
    percentage_of_total: float
    percentage_of_transactions: float


@dataclass(frozen=True)
class TimePatterns:
    highest_spending_day: str
    lowest_spending_day: str
    highest_spending_period: str
    lowest_spending_period: str
    weekend_total: float
    weekday_total: float
    weekend_count: int
    weekday_count: int
    observations: List[str]


@dataclass(frozen=True)
class PeriodTotals:
    income: float
    expenses: float
    transactions: int
    average_per_transaction: float


@dataclass(frozen=True)
class Variation:
    """Percent change per metric; None means undefined (previous value was zero)"""

    income_percent: Optional[float]
    expenses_percent: Optional[float]
    transactions_percent: Optional[float]
    average_percent: Optional[float]


@dataclass(frozen=True)
class MonthlyComparison:
    current_period: PeriodTotals
    previous_period: PeriodTotals
    variation: Variation
    notes: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ReductionImpact:
    category: Category
    reduction_percent: float
    projected_savings: float


@dataclass(frozen=True)
class SavingsReduction:
    category: Category
    reduction_percent: float
    savings: float


@dataclass(frozen=True)
class SavingsPlan:
    achievable: bool
    required_reductions: List[SavingsReduction]
    total_potential: float


@dataclass(frozen=True)
class HistoricalPattern:
    pattern_type: PatternType
    description: str
    confidence: Confidence
    impact: float  # 0-1 weight applied to the projection
    examples: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class SeasonalAdjustment:
    month: int
    adjustment_factor: float
    reason: str
    confidence: Confidence


@dataclass(frozen=True)
class ConfidenceFactor:
    factor: str
    impact: FactorImpact
    description: str
    weight: float


@dataclass(frozen=True)
class AlternativeScenario:
    name: str
    description: str
    projected_balance: float
    probability: float
    assumptions: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class Projection:
    final_balance_projection: float
    days_remaining: int
    average_daily_expense: float
    average_daily_income: float
    reduction_impact: List[ReductionImpact]
    confidence: Confidence


@dataclass(frozen=True)
class SmartProjection(Projection):
    historical_patterns: List[HistoricalPattern] = field(default_factory=list)
    seasonal_adjustments: List[SeasonalAdjustment] = field(default_factory=list)
    confidence_factors: List[ConfidenceFactor] = field(default_factory=list)
    alternative_scenarios: List[AlternativeScenario] = field(default_factory=list)


@dataclass(frozen=True)
class Insight:
    text: str
    confidence: Confidence
    explanation: str


@dataclass(frozen=True)
class ReportSummary:
    total_balance: float
    total_income: float
    total_expenses: float
    total_investments: float
    transaction_count: int


@dataclass(frozen=True)
class FinancialReport:
    """Single artifact handed to the narration layer"""

    summary: ReportSummary
    top_income: List[TopGroup]
    top_expenses: List[TopGroup]
    categories: List[CategoryBreakdown]
    by_weekday: List[BucketBreakdown]
    by_period: List[BucketBreakdown]
    by_payment_method: List[PaymentMethodBreakdown]
    time_patterns: TimePatterns
    recurring: List[RecurringTransaction]
    recurring_impact: RecurringImpact
    anomalies: List[Anomaly]
    category_alerts: List[CategoryAlert]
    spending_patterns: List[SpendingPattern]
    comparison: MonthlyComparison
    projection: SmartProjection
    insights: List[Insight]
    transactions: List[Transaction]
