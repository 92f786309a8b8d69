"""
Closed taxonomy for extracted transactions.

The extractor validates against these enumerations and never extends them.
"""

from enum import Enum


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class TransactionCategory(str, Enum):
    FOOD = "food"
    TRANSPORT = "transport"
    ENTERTAINMENT = "entertainment"
    HEALTH = "health"
    EDUCATION = "education"
    SHOPPING = "shopping"
    BILLS = "bills"
    SALARY = "salary"
    INVESTMENT = "investment"
    OTHER = "other"


# Labels shown to the sender
CATEGORY_LABELS = {
    TransactionCategory.FOOD: "Alimentação",
    TransactionCategory.TRANSPORT: "Transporte",
    TransactionCategory.ENTERTAINMENT: "Entretenimento",
    TransactionCategory.HEALTH: "Saúde",
    TransactionCategory.EDUCATION: "Educação",
    TransactionCategory.SHOPPING: "Compras",
    TransactionCategory.BILLS: "Contas",
    TransactionCategory.SALARY: "Salário",
    TransactionCategory.INVESTMENT: "Investimento",
    TransactionCategory.OTHER: "Outros",
}

TYPE_LABELS = {
    TransactionType.INCOME: "Receita",
    TransactionType.EXPENSE: "Despesa",
}

CATEGORY_VALUES = [c.value for c in TransactionCategory]
TYPE_VALUES = [t.value for t in TransactionType]


def category_label(category: str) -> str:
    try:
        return CATEGORY_LABELS[TransactionCategory(category)]
    except ValueError:
        return category


def type_label(transaction_type: str) -> str:
    try:
        return TYPE_LABELS[TransactionType(transaction_type)]
    except ValueError:
        return transaction_type
