from decimal import Decimal

from app.intelligence.categorization.constants import category_label, type_label

EXAMPLE_PHRASES = """• "Gasto R$ 50 com almoço"
• "Recebi R$ 2000 salário"
• "Paguei R$ 120 conta de luz\""""

GREETING_MESSAGE = f"""🤖 Olá! Sou seu assistente financeiro via WhatsApp!

Para registrar transações, envie mensagens como:
{EXAMPLE_PHRASES}

Posso ajudar com dúvidas sobre finanças pessoais também! 💰"""


# Fixed clarification replies, keyed by Malformed reason
CLARIFICATION_MESSAGES = {
    "empty": f"""🤖 Não recebi nenhum texto na sua mensagem.

Para registrar uma transação, envie algo como:
{EXAMPLE_PHRASES}""",
    "unparseable": f"""🤖 Não consegui entender sua mensagem.

Para registrar transações, envie mensagens como:
{EXAMPLE_PHRASES}

Posso ajudar com dúvidas sobre finanças pessoais também! 💰""",
    "invalid-field": f"""🤖 Identifiquei uma possível transação, mas algum dado ficou inválido (valor, tipo ou categoria).

Informe o valor e o que foi, por exemplo:
{EXAMPLE_PHRASES}""",
    "endpoint-unavailable": """🤖 No momento estou com dificuldades técnicas para processar sua mensagem. Tente novamente em alguns instantes.

Para registrar transações, envie mensagens como:
• "Gasto R$ 50 com almoço"
• "Recebi R$ 2000 salário\"""",
}

# Error messages for users
ERROR_MESSAGES = {
    "GENERIC": "🤖 Desculpe, ocorreu um erro ao processar sua mensagem. Tente novamente em alguns instantes.",
}


def format_brl(amount: Decimal) -> str:
    """Format an amount as Brazilian currency: 2000 -> 'R$ 2.000,00'."""
    text = f"{amount:,.2f}"
    return "R$ " + text.replace(",", "_").replace(".", ",").replace("_", ".")


def clarification(reason: str) -> str:
    return CLARIFICATION_MESSAGES.get(reason, CLARIFICATION_MESSAGES["unparseable"])


def transaction_confirmation(
    transaction_type: str, amount: Decimal, category: str, description: str
) -> str:
    return f"""✅ *Transação registrada com sucesso!*

💰 *Valor:* {format_brl(amount)}
📊 *Tipo:* {type_label(transaction_type)}
🏷️ *Categoria:* {category_label(category)}
📝 *Descrição:* {description or "-"}

_Transação processada automaticamente pela IA._"""


def unregistered_transaction(
    transaction_type: str, amount: Decimal, category: str
) -> str:
    return f"""🤖 *Transação identificada!*

Para registrar automaticamente suas transações, você precisa se cadastrar no sistema com este número de WhatsApp.

💰 *Transação detectada:*
- Valor: {format_brl(amount)}
- Tipo: {type_label(transaction_type)}
- Categoria: {category_label(category)}

Entre em contato com o administrador para vincular seu número."""
