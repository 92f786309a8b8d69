from typing import List, Optional

from fastapi import APIRouter, Query

from app.core.dependencies import DatabaseDep, TransactionServiceDep
from app.intelligence.categorization.constants import (
    TransactionCategory,
    TransactionType,
)
from app.modules.transactions.dto import (
    DeleteTransactionModel,
    GetTransactionsModel,
    TransactionResponse,
)

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.get("/", response_model=List[TransactionResponse])
async def list_transactions(
    db: DatabaseDep,
    transaction_service: TransactionServiceDep,
    user_id: int = Query(..., gt=0),
    type: Optional[TransactionType] = Query(None),
    category: Optional[TransactionCategory] = Query(None),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
) -> List[TransactionResponse]:
    """List a user's transactions, newest first"""
    return await transaction_service.get_transactions(
        db,
        GetTransactionsModel(
            user_id=user_id, type=type, category=category, limit=limit, offset=offset
        ),
    )


@router.delete("/{transaction_id}")
async def delete_transaction(
    transaction_id: int,
    db: DatabaseDep,
    transaction_service: TransactionServiceDep,
    user_id: int = Query(..., gt=0),
) -> dict[str, str]:
    """Delete one of the user's transactions"""
    await transaction_service.delete_transaction(
        db, DeleteTransactionModel(id=transaction_id, user_id=user_id)
    )
    return {"status": "deleted"}
