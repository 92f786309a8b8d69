import logging
from typing import List, Optional, Tuple

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import DatabaseError
from app.modules.messages.dto import LogInboundMessageDto
from app.modules.messages.models import WhatsAppMessage
from app.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class MessagesService:
    def __init__(self):
        self.logger = logger

    async def get_by_external_id(
        self, db: AsyncSession, external_id: str
    ) -> Optional[WhatsAppMessage]:
        result = await db.execute(
            select(WhatsAppMessage).where(WhatsAppMessage.external_id == external_id)
        )
        return result.scalar_one_or_none()

    async def get_by_id(self, db: AsyncSession, message_id: int) -> Optional[WhatsAppMessage]:
        """Read the row from the database, bypassing stale identity-map state"""
        result = await db.execute(
            select(WhatsAppMessage)
            .where(WhatsAppMessage.id == message_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def log_inbound(
        self, db: AsyncSession, data: LogInboundMessageDto
    ) -> Tuple[WhatsAppMessage, bool]:
        """Insert the inbound message once; re-deliveries return the existing row.

        Returns the row and whether it was newly created.
        """
        existing = await self.get_by_external_id(db, data.external_id)
        if existing:
            self.logger.info(f"Re-delivery of message {data.external_id}")
            return existing, False

        message = WhatsAppMessage(
            external_id=data.external_id,
            user_id=data.user_id,
            user_phone=data.user_phone,
            message_content=data.message_content,
            message_type=data.message_type,
            media_url=data.media_url,
            received_at=data.received_at or utc_now(),
            processed=False,
        )
        db.add(message)
        try:
            await db.commit()
        except IntegrityError:
            # Concurrent delivery of the same external id won the insert
            await db.rollback()
            existing = await self.get_by_external_id(db, data.external_id)
            if existing is None:
                raise DatabaseError("log inbound message: integrity error")
            return existing, False
        except Exception as e:
            await db.rollback()
            self.logger.error(f"Database error while logging message: {str(e)}")
            raise DatabaseError(f"log inbound message: {str(e)}")

        await db.refresh(message)
        return message, True

    async def mark_processed(
        self, db: AsyncSession, message_id: int, reply: str, outcome: str
    ) -> bool:
        """Attach the reply and flip processed, only if not processed yet.

        Does not commit; returns False when another run already finished it.
        """
        result = await db.execute(
            update(WhatsAppMessage)
            .where(
                WhatsAppMessage.id == message_id,
                WhatsAppMessage.processed.is_(False),
            )
            .values(ai_response=reply, processed=True, outcome=outcome)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def list_for_user(
        self, db: AsyncSession, user_id: int, limit: int = 50, offset: int = 0
    ) -> List[WhatsAppMessage]:
        result = await db.execute(
            select(WhatsAppMessage)
            .where(WhatsAppMessage.user_id == user_id)
            .order_by(WhatsAppMessage.received_at.desc(), WhatsAppMessage.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all())
