"""Transaction classification - income vs expense, category and suspicion flags"""

from typing import Iterable, List

from cashflow_insights.domain.heuristics import (
    DEFAULT_HEURISTICS,
    Heuristics,
    contains_any,
    normalize_merchant,
)
from cashflow_insights.domain.models import (
    Category,
    ClassificationResult,
    ClassifiedTransaction,
    Confidence,
    Transaction,
    TransactionType,
)

INCOME_TYPES = (TransactionType.DEPOSIT, TransactionType.INCOME)
EXPENSE_TYPES = (TransactionType.EXPENSE, TransactionType.WITHDRAWAL)


def classify(
    transaction: Transaction,
    heuristics: Heuristics = DEFAULT_HEURISTICS,
) -> ClassificationResult:
    """
    Decide whether a record is income or expense.

    Rule order (first match wins):
    1. Merchant contains an income keyword -> income, high
    2. Merchant contains a refund keyword -> income, medium
    3. Merchant contains an expense keyword -> expense, high
    4. transaction_type is DEPOSIT/INCOME or EXPENSE/WITHDRAWAL -> high
    5. Amount sign -> low

    A sign that contradicts merchant or type evidence sets conflict_flag but
    never overrides the evidence.
    """
    merchant = normalize_merchant(transaction.merchant)
    amount = transaction.amount

    if contains_any(merchant, heuristics.income_keywords):
        reason = f'Merchant contains an income keyword: "{transaction.merchant}"'
        return _with_conflict(True, Confidence.HIGH, reason, amount < 0, "merchant")

    if contains_any(merchant, heuristics.refund_keywords):
        reason = f'Merchant contains a refund keyword: "{transaction.merchant}"'
        return _with_conflict(True, Confidence.MEDIUM, reason, amount < 0, "merchant")

    if contains_any(merchant, heuristics.expense_keywords):
        reason = f'Merchant contains an expense keyword: "{transaction.merchant}"'
        return _with_conflict(False, Confidence.HIGH, reason, amount > 0, "merchant")

    transaction_type = transaction.transaction_type
    if transaction_type in INCOME_TYPES:
        reason = f"Transaction type: {transaction_type.value}"
        return _with_conflict(True, Confidence.HIGH, reason, amount < 0, "type")
    if transaction_type in EXPENSE_TYPES:
        reason = f"Transaction type: {transaction_type.value}"
        return _with_conflict(False, Confidence.HIGH, reason, amount > 0, "type")

    sign = "positive" if amount > 0 else "negative"
    return ClassificationResult(
        is_income=amount > 0,
        confidence=Confidence.LOW,
        reason=f"Classified by amount sign: {sign}",
    )


def _with_conflict(
    is_income: bool,
    confidence: Confidence,
    reason: str,
    conflicting: bool,
    evidence: str,
) -> ClassificationResult:
    if conflicting:
        direction = "income" if is_income else "expense"
        sign = "negative" if is_income else "positive"
        reason += f" (conflict: amount is {sign} but {evidence} indicates {direction})"
    return ClassificationResult(
        is_income=is_income,
        confidence=confidence,
        reason=reason,
        conflict_flag=conflicting,
    )


def categorize(
    transaction: Transaction,
    classification: ClassificationResult,
    heuristics: Heuristics = DEFAULT_HEURISTICS,
) -> Category:
    """Keep an explicit category, otherwise match the merchant against the keyword table"""
    if transaction.category is not None and transaction.category != Category.OTHER:
        return transaction.category

    merchant = normalize_merchant(transaction.merchant)
    for keyword, category in heuristics.category_keywords:
        if keyword in merchant:
            return category

    return Category.OTHER


def is_suspicious(
    transaction: Transaction,
    heuristics: Heuristics = DEFAULT_HEURISTICS,
) -> bool:
    """Gambling-like merchant, a 'meme' amount, or a large round multiple of 1000"""
    merchant = normalize_merchant(transaction.merchant)
    if contains_any(merchant, heuristics.suspicious_keywords):
        return True

    amount = abs(transaction.amount)
    if amount in heuristics.suspicious_amounts:
        return True
    return amount > 10_000 and amount % 1000 == 0


def classify_all(
    transactions: Iterable[Transaction],
    heuristics: Heuristics = DEFAULT_HEURISTICS,
) -> List[ClassifiedTransaction]:
    """Classify and categorize every record, preserving input order"""
    classified = []
    for transaction in transactions:
        classification = classify(transaction, heuristics)
        classified.append(
            ClassifiedTransaction(
                transaction=transaction,
                classification=classification,
                category=categorize(transaction, classification, heuristics),
            )
        )
    return classified
