"""
Shared fixtures.

Every test gets a fresh SQLite file database; the completion endpoint is
replaced by a scripted fake so no test leaves the process.
"""

from typing import List, Optional, Union

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.core.db.models import Base
from app.core.exceptions import LLMServiceError
from app.core.orchestrator import MessageOrchestrator
from app.integrations.llm.service import LLMResponse
from app.intelligence.extraction.extractor import Extractor
from app.modules.messages.service import MessagesService
from app.modules.transactions.service import TransactionsService
from app.modules.users.dto import CreateUserDto
from app.modules.users.service import UsersService
from app.pipeline.committer import TransactionCommitter

Scripted = Union[str, Exception]


class FakeLLMService:
    """Returns scripted completions in order; exceptions are raised."""

    def __init__(self, responses: Optional[List[Scripted]] = None):
        self.responses = list(responses or [])
        self.prompts: List[str] = []

    @property
    def calls(self) -> int:
        return len(self.prompts)

    def script(self, *responses: Scripted) -> None:
        self.responses.extend(responses)

    async def complete(self, prompt: str, **kwargs) -> LLMResponse:
        self.prompts.append(prompt)
        if not self.responses:
            raise LLMServiceError("no scripted response left")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return LLMResponse(content=item, model="fake")


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def llm():
    return FakeLLMService()


@pytest.fixture
def users_service():
    return UsersService()


@pytest.fixture
def messages_service():
    return MessagesService()


@pytest.fixture
def transactions_service():
    return TransactionsService()


@pytest.fixture
def extractor(llm):
    return Extractor(llm_service=llm, retry_delay=0, max_advisory_length=1000)


@pytest.fixture
def committer(transactions_service, messages_service):
    return TransactionCommitter(
        transactions_service=transactions_service,
        messages_service=messages_service,
    )


@pytest.fixture
def orchestrator(session_factory, users_service, messages_service, extractor, committer):
    return MessageOrchestrator(
        session_factory=session_factory,
        users_service=users_service,
        messages_service=messages_service,
        extractor=extractor,
        committer=committer,
        max_message_length=2000,
    )


@pytest.fixture
async def user(db, users_service):
    result = await users_service.find_or_create(
        db, CreateUserDto(whatsapp_number="5511999990000", name="Ana")
    )
    return result["user"]
