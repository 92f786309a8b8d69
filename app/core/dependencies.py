"""
Centralized dependency management
Singletons for stateless services, per-request for DB sessions
"""

from functools import lru_cache
from typing import AsyncGenerator, Annotated
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import Depends


from app.core.config import config
from app.core.db.engine import AsyncSessionLocal, get_db_util
from app.core.orchestrator import MessageOrchestrator
from app.integrations.llm.service import LLMService
from app.integrations.whatsapp.service import WhatsAppService
from app.intelligence.extraction.extractor import Extractor
from app.modules.advisor.service import FinancialAdvisorService
from app.modules.messages.service import MessagesService
from app.modules.transactions.service import TransactionsService
from app.modules.users.service import UsersService
from app.pipeline.committer import TransactionCommitter


# ============================================================================
# PER-REQUEST DEPENDENCIES (New instance per request)
# ============================================================================


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Database session - NEW per request
    Automatically commits/rollbacks and closes
    """
    async for session in get_db_util():
        yield session


# ============================================================================
# SINGLETON DEPENDENCIES (One instance for entire app lifetime)
# ============================================================================


@lru_cache()
def get_llm_service():
    """LLM service - SINGLETON (stateless)"""
    return LLMService()


@lru_cache()
def get_whatsapp_service():
    """WhatsApp client - SINGLETON"""
    return WhatsAppService(orchestrator=get_orchestrator())


# ============================================================================
# SERVICE LAYER (Singletons that accept DB session)
# ============================================================================


@lru_cache()
def get_user_service():
    """User service - SINGLETON"""
    return UsersService()


@lru_cache()
def get_messages_service():
    """Message log service - SINGLETON"""
    return MessagesService()


@lru_cache()
def get_transaction_service():
    """
    Transaction service - SINGLETON
    Takes DB session as method parameter, not in constructor
    """
    return TransactionsService()


@lru_cache()
def get_advisor_service():
    """Financial advisor - SINGLETON"""
    return FinancialAdvisorService(
        llm_service=get_llm_service(),
        transactions_service=get_transaction_service(),
        users_service=get_user_service(),
    )


# ============================================================================
# PIPELINE (Singletons)
# ============================================================================


@lru_cache()
def get_extractor():
    """Transaction extractor - SINGLETON"""
    return Extractor(
        llm_service=get_llm_service(),
        retry_delay=config.llm_retry_delay,
        max_advisory_length=config.max_advisory_length,
    )


@lru_cache()
def get_committer():
    """Persistence & reply composer - SINGLETON"""
    return TransactionCommitter(
        transactions_service=get_transaction_service(),
        messages_service=get_messages_service(),
    )


@lru_cache()
def get_orchestrator():
    """
    Message orchestrator - SINGLETON
    Opens its own sessions, one per unit of work
    """
    return MessageOrchestrator(
        session_factory=AsyncSessionLocal,
        users_service=get_user_service(),
        messages_service=get_messages_service(),
        extractor=get_extractor(),
        committer=get_committer(),
        max_message_length=config.max_message_length,
    )


# ============================================================================
# FASTAPI DEPENDENCY TYPE ALIASES
# ============================================================================

# Database dependencies
DatabaseDep = Annotated[AsyncSession, Depends(get_db)]

# Service dependencies
WhatsAppServiceDep = Annotated[WhatsAppService, Depends(get_whatsapp_service)]
UserServiceDep = Annotated[UsersService, Depends(get_user_service)]
MessagesServiceDep = Annotated[MessagesService, Depends(get_messages_service)]
TransactionServiceDep = Annotated[TransactionsService, Depends(get_transaction_service)]
AdvisorServiceDep = Annotated[FinancialAdvisorService, Depends(get_advisor_service)]
