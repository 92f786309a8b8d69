"""
Prompts for the financial advisor
"""

from typing import List

from app.modules.transactions.dto import TransactionResponse

# Number of recent transactions given to the model as context
CONTEXT_TRANSACTIONS = 50


def build_context(transactions: List[TransactionResponse]) -> str:
    if not transactions:
        return "Nenhuma transação encontrada."

    lines = "\n".join(t.to_human_message() for t in transactions)
    return (
        f"Dados financeiros do usuário (últimas {CONTEXT_TRANSACTIONS} transações):\n"
        f"{lines}"
    )


def build_advisor_prompt(question: str, transactions: List[TransactionResponse]) -> str:
    """
    Build the consultant prompt for a user's question.

    Args:
        question: The user's question, already stripped
        transactions: Most recent transactions of the user, newest first

    Returns:
        Prompt asking for a practical answer in Portuguese
    """
    return f"""You are a financial consultant specialised in personal finance for Brazilian users.
Analyse the user's financial data and answer the question clearly and usefully.

{build_context(transactions)}

User question: {question}

Give a practical, personalised answer based on the data above, in Brazilian Portuguese.
If there is not enough data, give general advice about the topic asked."""
