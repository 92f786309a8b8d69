import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import DatabaseError, TransactionNotFoundError
from app.intelligence.extraction.types import TransactionCandidate
from app.modules.transactions.dto import (
    DeleteTransactionModel,
    GetTransactionsModel,
    TransactionResponse,
)
from app.modules.transactions.models import Transaction
from app.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class TransactionsService:
    def __init__(self):
        self.logger = logger

    async def get_by_message_id(
        self, db: AsyncSession, whatsapp_message_id: int
    ) -> Optional[Transaction]:
        """Find the transaction produced by an inbound message, if any"""
        result = await db.execute(
            select(Transaction).where(
                Transaction.whatsapp_message_id == whatsapp_message_id
            )
        )
        return result.scalar_one_or_none()

    def add_extracted(
        self,
        db: AsyncSession,
        user_id: int,
        whatsapp_message_id: int,
        candidate: TransactionCandidate,
    ) -> Transaction:
        """Stage a machine-extracted transaction; the caller commits"""
        transaction = Transaction(
            user_id=user_id,
            amount=candidate.amount,
            type=candidate.type.value,
            category=candidate.category.value,
            description=candidate.description,
            processed_by_ai=True,
            whatsapp_message_id=whatsapp_message_id,
        )
        db.add(transaction)
        return transaction

    async def get_transactions(
        self, db: AsyncSession, data: GetTransactionsModel
    ) -> list[TransactionResponse]:
        self.logger.debug(f"TransactionsService.get_transactions called with data: {data}")
        query = select(Transaction).where(
            Transaction.user_id == data.user_id,
            Transaction.deleted_at.is_(None),
        )
        if data.type:
            query = query.where(Transaction.type == data.type.value)
        if data.category:
            query = query.where(Transaction.category == data.category.value)

        query = (
            query.order_by(Transaction.created_at.desc(), Transaction.id.desc())
            .offset(data.offset)
            .limit(data.limit)
        )
        result = await db.execute(query)
        return [
            TransactionResponse.model_validate(transaction)
            for transaction in result.scalars().all()
        ]

    async def delete_transaction(
        self, db: AsyncSession, data: DeleteTransactionModel
    ) -> None:
        """Soft delete an owned transaction by setting deleted_at"""
        self.logger.info(f"Deleting transaction with ID: {data.id}")

        try:
            transaction = await db.scalar(
                select(Transaction).where(
                    Transaction.id == data.id,
                    Transaction.user_id == data.user_id,
                    Transaction.deleted_at.is_(None),
                )
            )
            if transaction is None:
                self.logger.warning(
                    f"Transaction with ID {data.id} not found or already deleted"
                )
                raise TransactionNotFoundError(data.id)

            transaction.deleted_at = utc_now()
            await db.commit()
        except TransactionNotFoundError:
            raise
        except Exception as e:
            await db.rollback()
            self.logger.error(f"Database error during transaction deletion: {str(e)}")
            raise DatabaseError(f"delete transaction: {str(e)}")
