# Registers every mapped class on Base.metadata (used by Alembic and create_all)

from app.core.db.base import Base
from app.modules.users.models import User
from app.modules.messages.models import WhatsAppMessage
from app.modules.transactions.models import Transaction
from app.modules.advisor.models import AiAnalysis

__all__ = ["Base", "User", "WhatsAppMessage", "Transaction", "AiAnalysis"]
