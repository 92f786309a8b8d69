from __future__ import annotations
from sqlalchemy import String, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import List, Optional, Dict, Any, TYPE_CHECKING

from app.core.db.base import BaseModel

if TYPE_CHECKING:
    from app.modules.transactions.models import Transaction


class User(BaseModel):
    """Account that owns transactions; matched to senders by WhatsApp number"""

    __tablename__ = "users"

    whatsapp_number: Mapped[str] = mapped_column(
        String,
        unique=True,
        nullable=False,
        index=True,
        comment="Sender identifier as delivered by the WhatsApp gateway",
    )

    name: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    meta: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)

    transactions: Mapped[List["Transaction"]] = relationship(
        "Transaction",
        back_populates="user",
        lazy="raise",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<User(whatsapp_number='{self.whatsapp_number}', name='{self.name}')>"
