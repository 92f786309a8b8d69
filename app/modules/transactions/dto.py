from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field

from app.core.constants.whatsapp_responses import format_brl
from app.intelligence.categorization.constants import (
    TransactionCategory,
    TransactionType,
    category_label,
    type_label,
)


class GetTransactionsModel(BaseModel):
    user_id: int = Field(..., description="ID of the owner")
    type: Optional[TransactionType] = Field(None, description="Filter by direction")
    category: Optional[TransactionCategory] = Field(None, description="Filter by category")
    limit: int = Field(50, ge=1, le=500, description="Maximum number of rows")
    offset: int = Field(0, ge=0, description="Rows to skip")


class DeleteTransactionModel(BaseModel):
    id: int = Field(..., description="Transaction to delete")
    user_id: int = Field(..., description="Owner requesting the deletion")


class TransactionResponse(BaseModel):
    id: int = Field(..., description="Unique identifier for the transaction")
    user_id: int = Field(..., description="ID of the user who owns this transaction")
    amount: Decimal = Field(..., description="Amount with two decimal places")
    type: str = Field(..., description="income or expense")
    category: str = Field(..., description="Category from the closed enumeration")
    description: Optional[str] = Field(None, description="Free-text description")
    processed_by_ai: bool = Field(..., description="True when extracted from a message")
    whatsapp_message_id: Optional[int] = Field(None, description="Inbound message that produced it")
    created_at: datetime = Field(..., description="When the record was created")

    def to_human_message(self) -> str:
        """One-line summary used by the advisor context."""
        text = f"{type_label(self.type)}: {format_brl(self.amount)} - {category_label(self.category)}"
        return f"{text} - {self.description or 'Sem descrição'}"

    class Config:
        from_attributes = True
