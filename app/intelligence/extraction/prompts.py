"""
Prompts for transaction extraction
"""

import json

from app.intelligence.categorization.constants import CATEGORY_VALUES, TYPE_VALUES

EXAMPLES = [
    (
        "Gasto R$ 50 com almoço",
        {"isTransaction": True, "type": "expense", "amount": 50, "category": "food", "description": "Almoço"},
    ),
    (
        "Recebi R$ 2000 salário",
        {"isTransaction": True, "type": "income", "amount": 2000, "category": "salary", "description": "Salário"},
    ),
    (
        "Paguei R$ 120 conta de luz",
        {"isTransaction": True, "type": "expense", "amount": 120, "category": "bills", "description": "Conta de luz"},
    ),
    (
        "Oi, tudo bem?",
        {"isTransaction": False, "response": "Olá! Me conte seus gastos ou receitas e eu registro para você."},
    ),
]


def build_transaction_prompt(message: str) -> str:
    """
    Build the single completion prompt used to classify a WhatsApp message.

    Args:
        message: Normalized message text

    Returns:
        Prompt asking for exactly one JSON object with an ``isTransaction`` flag
    """
    categories = "|".join(CATEGORY_VALUES)
    types = '" or "'.join(TYPE_VALUES)
    examples_text = "\n".join(
        f'- "{text}" = {json.dumps(output, ensure_ascii=False)}'
        for text, output in EXAMPLES
    )

    return f"""You are a financial assistant that extracts transaction data from WhatsApp messages.

Analyse the following message and decide whether it describes a financial transaction:
"{message}"

If it IS a financial transaction, answer ONLY with a valid JSON object in this format:
{{
  "isTransaction": true,
  "type": "{types}",
  "amount": numeric_value_greater_than_zero,
  "category": "{categories}",
  "description": "short_clear_description_of_the_transaction"
}}

If it is NOT a financial transaction, answer with a JSON object in this format:
{{
  "isTransaction": false,
  "response": "helpful_reply_about_personal_finance_or_a_greeting"
}}

Rules:
- "category" MUST be exactly one of: {", ".join(CATEGORY_VALUES)}. Use "other" when nothing fits.
- "type" MUST be "income" for money received and "expense" for money spent.
- "amount" is a plain number without currency symbols or thousands separators.
- Reply in the language of the message.

Examples:
{examples_text}

IMPORTANT: Answer ONLY with valid JSON, no additional text."""
