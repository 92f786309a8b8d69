from decimal import Decimal
from typing import TYPE_CHECKING, Optional
from sqlalchemy import Boolean, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.db.base import BaseModel

if TYPE_CHECKING:
    from app.modules.users.models import User


class Transaction(BaseModel):
    __tablename__ = "transactions"
    __table_args__ = (
        Index("idx_transactions_user_created", "user_id", "created_at"),
        Index("idx_transactions_deleted_at", "deleted_at"),
    )

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    type: Mapped[str] = mapped_column(String(16), nullable=False, comment="income or expense")

    category: Mapped[str] = mapped_column(String(32), nullable=False)

    description: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    processed_by_ai: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False, comment="Machine-extracted provenance flag"
    )

    # At most one transaction per inbound message
    whatsapp_message_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("whatsapp_messages.id"), nullable=True, unique=True
    )

    user: Mapped["User"] = relationship(
        "User", back_populates="transactions", lazy="raise"
    )

    def __repr__(self) -> str:
        return f"<Transaction(type={self.type}, amount={self.amount}, user_id='{self.user_id}')>"
