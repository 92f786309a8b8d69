"""
Persistence & reply composition for extraction results.

This is the only stage of the pipeline that writes to the store. Each call
moves one inbound message into a terminal state; repeated calls for the same
message return the reply stored by the first one.
"""

import logging
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

import app.core.constants.whatsapp_responses as message_constants
from app.core.exceptions import DatabaseError
from app.intelligence.extraction.types import (
    Advisory,
    ExtractionResult,
    TransactionCandidate,
)
from app.modules.messages.models import WhatsAppMessage
from app.modules.messages.service import MessagesService
from app.modules.transactions.models import Transaction
from app.modules.transactions.service import TransactionsService

logger = logging.getLogger(__name__)

OUTCOME_TRANSACTION = "transaction"
OUTCOME_ADVISORY = "advisory"
OUTCOME_UNREGISTERED = "unregistered"


def compose_reply(
    result: ExtractionResult, owner_id: Optional[int]
) -> Tuple[str, str]:
    """Return (reply text, outcome) for a result."""
    if isinstance(result, TransactionCandidate):
        if owner_id is None:
            reply = message_constants.unregistered_transaction(
                result.type.value, result.amount, result.category.value
            )
            return reply, OUTCOME_UNREGISTERED
        reply = message_constants.transaction_confirmation(
            result.type.value,
            result.amount,
            result.category.value,
            result.description,
        )
        return reply, OUTCOME_TRANSACTION
    if isinstance(result, Advisory):
        return result.response_text, OUTCOME_ADVISORY
    return message_constants.clarification(result.reason.value), result.outcome


class TransactionCommitter:
    def __init__(
        self,
        transactions_service: TransactionsService,
        messages_service: MessagesService,
    ):
        self.transactions_service = transactions_service
        self.messages_service = messages_service

    async def commit(
        self,
        db: AsyncSession,
        owner_id: Optional[int],
        message: WhatsAppMessage,
        result: ExtractionResult,
    ) -> Tuple[str, str]:
        """Persist the outcome of one inbound message.

        Returns (reply, outcome) as stored on the log row, which may come from
        an earlier run of the same message.

        Raises DatabaseError when the store fails; the message then stays
        unprocessed so the pipeline can be re-run.
        """
        message_id = message.id
        try:
            current = await self._load(db, message_id)
            if current.processed:
                logger.info(f"Message {message_id} already processed, returning stored reply")
                return current.ai_response or "", current.outcome or ""

            reply, outcome = compose_reply(result, owner_id)

            if isinstance(result, TransactionCandidate) and owner_id is not None:
                return await self._commit_transaction(db, owner_id, message_id, result, reply)

            if not await self.messages_service.mark_processed(db, message_id, reply, outcome):
                await db.rollback()
                return await self._stored_reply(db, message_id)
            await db.commit()
            logger.info(f"Message {message_id} committed as {outcome}")
            return reply, outcome

        except DatabaseError:
            raise
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Database error while committing message {message_id}: {str(e)}")
            raise DatabaseError(f"commit message: {str(e)}")

    async def _commit_transaction(
        self,
        db: AsyncSession,
        owner_id: int,
        message_id: int,
        candidate: TransactionCandidate,
        reply: str,
    ) -> Tuple[str, str]:
        existing = await self.transactions_service.get_by_message_id(db, message_id)
        if existing:
            return await self._reply_for_existing(db, message_id, existing)

        try:
            self.transactions_service.add_extracted(db, owner_id, message_id, candidate)
            await db.flush()
        except IntegrityError:
            # A concurrent run inserted the transaction for this message first
            await db.rollback()
            existing = await self.transactions_service.get_by_message_id(db, message_id)
            if existing is None:
                raise DatabaseError("commit transaction: integrity error")
            return await self._reply_for_existing(db, message_id, existing)

        if not await self.messages_service.mark_processed(
            db, message_id, reply, OUTCOME_TRANSACTION
        ):
            await db.rollback()
            return await self._stored_reply(db, message_id)

        await db.commit()
        logger.info(
            f"Message {message_id} committed as transaction "
            f"({candidate.type.value} {candidate.amount} {candidate.category.value})"
        )
        return reply, OUTCOME_TRANSACTION

    async def _reply_for_existing(
        self, db: AsyncSession, message_id: int, transaction: Transaction
    ) -> Tuple[str, str]:
        current = await self._load(db, message_id)
        if current.processed and current.ai_response:
            return current.ai_response, current.outcome or ""

        reply = message_constants.transaction_confirmation(
            transaction.type,
            transaction.amount,
            transaction.category,
            transaction.description or "",
        )
        if await self.messages_service.mark_processed(
            db, message_id, reply, OUTCOME_TRANSACTION
        ):
            await db.commit()
            return reply, OUTCOME_TRANSACTION
        await db.rollback()
        return await self._stored_reply(db, message_id)

    async def _stored_reply(self, db: AsyncSession, message_id: int) -> Tuple[str, str]:
        current = await self._load(db, message_id)
        return current.ai_response or "", current.outcome or ""

    async def _load(self, db: AsyncSession, message_id: int) -> WhatsAppMessage:
        current = await self.messages_service.get_by_id(db, message_id)
        if current is None:
            raise DatabaseError(f"message {message_id} not found")
        return current
