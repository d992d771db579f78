"""Keyword tables and seasonal factors used by the analytics passes.

Everything here is configuration data, not control flow: callers may build a
different ``Heuristics`` (e.g. tuned for another locale) and inject it into
any pass. Tables are tuples so iteration order is the match priority.
"""

from dataclasses import dataclass
from typing import Tuple

from cashflow_insights.domain.models import Category


@dataclass(frozen=True)
class Heuristics:
    """Immutable keyword and factor tables"""

    income_keywords: Tuple[str, ...]
    expense_keywords: Tuple[str, ...]
    refund_keywords: Tuple[str, ...]
    suspicious_keywords: Tuple[str, ...]
    suspicious_amounts: Tuple[float, ...]
    category_keywords: Tuple[Tuple[str, Category], ...]
    fixed_income_keywords: Tuple[str, ...]
    salary_keywords: Tuple[str, ...]
    purchase_keywords: Tuple[str, ...]
    discretionary_food_keywords: Tuple[str, ...]
    seasonal_factors: Tuple[Tuple[int, float, str], ...]  # (month, factor, reason)

    def seasonal_factor(self, month: int) -> Tuple[float, str] | None:
        for table_month, factor, reason in self.seasonal_factors:
            if table_month == month:
                return factor, reason
        return None


def normalize_merchant(merchant: str) -> str:
    """Lowercase and trim a counterparty name for keyword matching"""
    return (merchant or "").strip().lower()


def contains_any(text: str, keywords: Tuple[str, ...]) -> bool:
    return any(keyword in text for keyword in keywords)


DEFAULT_HEURISTICS = Heuristics(
    income_keywords=(
        "salary", "salário", "salario", "payroll", "deposit", "depósito",
        "invoice received", "fatura recebida", "recebimento",
        "transfer received", "transferência recebida", "rendimento",
        "dividends", "dividendos", "bonus", "bônus", "commission", "comissão",
        "freelance", "freela", "sale", "venda", "receita", "income",
        "payment received", "pagamento recebido",
    ),
    expense_keywords=(
        "purchase", "compra", "payment", "pagamento", "charge", "cobrança",
        "debit", "débito", "withdrawal", "saque", "transfer sent",
        "transferência enviada", "expense", "gasto", "despesa",
        "automatic charge", "cobrança automática",
    ),
    refund_keywords=(
        "refund", "reembolso", "estorno", "devolução", "return",
        "cancellation", "cancelamento", "reversal", "reversão",
    ),
    suspicious_keywords=(
        "gacha", "game", "jogo", "casino", "aposta", "bet", "loteria",
        "lottery", "bingo", "poker", "blackjack",
    ),
    suspicious_amounts=(666, 6666, 7777, 8888, 9999),
    category_keywords=(
        ("salary", Category.SALARY),
        ("salário", Category.SALARY),
        ("payroll", Category.SALARY),
        ("supermarket", Category.FOOD),
        ("supermercado", Category.FOOD),
        ("market", Category.FOOD),
        ("mercado", Category.FOOD),
        ("restaurant", Category.FOOD),
        ("restaurante", Category.FOOD),
        ("lanchonete", Category.FOOD),
        ("bakery", Category.FOOD),
        ("uber", Category.TRANSPORTATION),
        ("taxi", Category.TRANSPORTATION),
        ("fuel", Category.TRANSPORTATION),
        ("gasolina", Category.TRANSPORTATION),
        ("combustível", Category.TRANSPORTATION),
        ("pharmacy", Category.HEALTH),
        ("farmácia", Category.HEALTH),
        ("farmacia", Category.HEALTH),
        ("hospital", Category.HEALTH),
        ("clinic", Category.HEALTH),
        ("clínica", Category.HEALTH),
        ("netflix", Category.ENTERTAINMENT),
        ("spotify", Category.ENTERTAINMENT),
        ("cinema", Category.ENTERTAINMENT),
        ("rent", Category.HOUSING),
        ("aluguel", Category.HOUSING),
        ("condomínio", Category.HOUSING),
        ("condominio", Category.HOUSING),
        ("electricity", Category.UTILITY),
        ("energia", Category.UTILITY),
        ("water", Category.UTILITY),
        ("água", Category.UTILITY),
        ("agua", Category.UTILITY),
        ("internet", Category.UTILITY),
        ("phone", Category.UTILITY),
        ("telefone", Category.UTILITY),
        ("course", Category.EDUCATION),
        ("curso", Category.EDUCATION),
        ("faculdade", Category.EDUCATION),
        ("university", Category.EDUCATION),
        ("universidade", Category.EDUCATION),
        ("cdb", Category.INVESTMENT),
        ("tesouro", Category.INVESTMENT),
        ("renda fixa", Category.INVESTMENT),
        ("renda variável", Category.INVESTMENT),
        ("fundo", Category.INVESTMENT),
        ("investment", Category.INVESTMENT),
        ("investimento", Category.INVESTMENT),
        ("ações", Category.INVESTMENT),
        ("acoes", Category.INVESTMENT),
        ("bolsa", Category.INVESTMENT),
        ("broker", Category.INVESTMENT),
        ("corretora", Category.INVESTMENT),
        ("poupança", Category.INVESTMENT),
        ("poupanca", Category.INVESTMENT),
        ("lci", Category.INVESTMENT),
        ("lca", Category.INVESTMENT),
        ("debêntures", Category.INVESTMENT),
        ("debentures", Category.INVESTMENT),
    ),
    fixed_income_keywords=(
        "salary", "salário", "salario", "payroll", "rendimento",
        "dividends", "dividendos",
    ),
    salary_keywords=("salary", "salário", "salario"),
    purchase_keywords=("purchase", "compra", "payment", "pagamento"),
    discretionary_food_keywords=(
        "doce", "sweet", "candy", "chocolate", "balas", "bombons",
        "sorvete", "ice cream", "açúcar", "açucar", "confeitaria",
        "padaria", "lanchonete", "fast food", "mcdonalds", "burger king",
        "subway", "kfc", "pizza", "delivery", "ifood", "uber eats", "rappi",
    ),
    seasonal_factors=(
        (1, 1.1, "January - holidays and start-of-year expenses"),
        (2, 0.9, "February - shortest month, lower spending"),
        (3, 1.0, "March - regular month"),
        (4, 1.2, "April - Easter and public holidays"),
        (5, 1.1, "May - Mother's Day"),
        (6, 1.3, "June - mid-year festivities"),
        (7, 1.1, "July - school holidays"),
        (8, 1.0, "August - regular month"),
        (9, 1.1, "September - Father's Day"),
        (10, 1.0, "October - regular month"),
        (11, 1.2, "November - Black Friday"),
        (12, 1.4, "December - Christmas and year-end"),
    ),
)
