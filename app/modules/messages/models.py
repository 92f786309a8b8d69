from datetime import datetime
from typing import Optional
from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.core.db.base import BaseModel
from app.utils.datetime import utc_now


class WhatsAppMessage(BaseModel):
    """Inbound message log; the inbound fields never change after insert."""

    __tablename__ = "whatsapp_messages"

    external_id: Mapped[str] = mapped_column(
        String,
        unique=True,
        nullable=False,
        index=True,
        comment="Channel message ID (or generated UUID) for re-delivery detection",
    )

    user_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id"), nullable=True, index=True
    )

    user_phone: Mapped[str] = mapped_column(String, nullable=False, index=True)

    message_content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    message_type: Mapped[str] = mapped_column(String(32), nullable=False, default="text")

    media_url: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    received_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    ai_response: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    processed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    outcome: Mapped[Optional[str]] = mapped_column(
        String(64),
        nullable=True,
        comment="transaction, advisory, unregistered or malformed:<reason>",
    )

    def __repr__(self) -> str:
        return f"<WhatsAppMessage(external_id='{self.external_id}', processed={self.processed})>"
