import uuid
from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from app.core.constants.whatsapp_responses import clarification
from app.core.exceptions import DatabaseError
from app.intelligence.categorization.constants import TransactionCategory, TransactionType
from app.intelligence.extraction.types import (
    Advisory,
    Malformed,
    MalformedReason,
    TransactionCandidate,
)
from app.modules.messages.dto import LogInboundMessageDto
from app.modules.transactions.models import Transaction

CANDIDATE = TransactionCandidate(
    type=TransactionType.EXPENSE,
    amount=Decimal("50.00"),
    category=TransactionCategory.FOOD,
    description="Almoço",
)


async def log_message(session_factory, messages_service, user_id, text="Gasto R$ 50 com almoço"):
    async with session_factory() as db:
        message, _ = await messages_service.log_inbound(
            db,
            LogInboundMessageDto(
                external_id=str(uuid.uuid4()),
                user_id=user_id,
                user_phone="5511999990000",
                message_content=text,
            ),
        )
    return message


async def count_transactions(session_factory) -> int:
    async with session_factory() as db:
        return await db.scalar(select(func.count()).select_from(Transaction))


class TestCommitTransaction:
    async def test_creates_record_and_marks_processed(
        self, session_factory, committer, messages_service, user
    ):
        message = await log_message(session_factory, messages_service, user.id)

        async with session_factory() as db:
            reply, outcome = await committer.commit(db, user.id, message, CANDIDATE)

        assert outcome == "transaction"
        assert "Transação registrada com sucesso" in reply
        assert "R$ 50,00" in reply
        assert "Despesa" in reply
        assert "Alimentação" in reply
        assert "Almoço" in reply

        async with session_factory() as db:
            stored = await messages_service.get_by_id(db, message.id)
            transaction = await db.scalar(select(Transaction))
        assert stored.processed is True
        assert stored.ai_response == reply
        assert stored.outcome == "transaction"
        assert transaction.amount == Decimal("50.00")
        assert transaction.whatsapp_message_id == message.id
        assert transaction.processed_by_ai is True
        assert transaction.user_id == user.id

    async def test_second_commit_is_a_no_op(
        self, session_factory, committer, messages_service, user
    ):
        message = await log_message(session_factory, messages_service, user.id)

        async with session_factory() as db:
            first = await committer.commit(db, user.id, message, CANDIDATE)
        async with session_factory() as db:
            second = await committer.commit(db, user.id, message, CANDIDATE)

        assert first == second
        assert await count_transactions(session_factory) == 1

    async def test_later_result_does_not_override_stored_reply(
        self, session_factory, committer, messages_service, user
    ):
        message = await log_message(session_factory, messages_service, user.id)

        async with session_factory() as db:
            first = await committer.commit(db, user.id, message, CANDIDATE)
        async with session_factory() as db:
            second = await committer.commit(db, user.id, message, Advisory(response_text="Oi"))

        assert second == first
        async with session_factory() as db:
            stored = await messages_service.get_by_id(db, message.id)
        assert stored.outcome == "transaction"

    async def test_unregistered_sender_gets_no_record(
        self, session_factory, committer, messages_service
    ):
        message = await log_message(session_factory, messages_service, None)

        async with session_factory() as db:
            reply, outcome = await committer.commit(db, None, message, CANDIDATE)

        assert outcome == "unregistered"
        assert "cadastrar" in reply
        assert "R$ 50,00" in reply
        assert await count_transactions(session_factory) == 0
        async with session_factory() as db:
            stored = await messages_service.get_by_id(db, message.id)
        assert stored.processed is True
        assert stored.outcome == "unregistered"


class TestCommitNonTransactions:
    async def test_advisory(self, session_factory, committer, messages_service, user):
        message = await log_message(session_factory, messages_service, user.id, "Oi")

        async with session_factory() as db:
            reply, outcome = await committer.commit(db, user.id, message, Advisory(response_text="Olá!"))

        assert reply == "Olá!"
        assert outcome == "advisory"
        assert await count_transactions(session_factory) == 0
        async with session_factory() as db:
            stored = await messages_service.get_by_id(db, message.id)
        assert stored.outcome == "advisory"
        assert stored.ai_response == "Olá!"

    async def test_malformed_uses_clarification_template(
        self, session_factory, committer, messages_service, user
    ):
        message = await log_message(session_factory, messages_service, user.id, "???")
        result = Malformed(reason=MalformedReason.UNPARSEABLE, raw_text="garbage")

        async with session_factory() as db:
            reply, outcome = await committer.commit(db, user.id, message, result)

        assert reply == clarification("unparseable")
        assert outcome == "malformed:unparseable"
        assert "garbage" not in reply
        async with session_factory() as db:
            stored = await messages_service.get_by_id(db, message.id)
        assert stored.processed is True
        assert stored.outcome == "malformed:unparseable"

    async def test_advisory_stored_first_wins_over_candidate(
        self, session_factory, committer, messages_service, user
    ):
        message = await log_message(session_factory, messages_service, user.id, "Oi")

        async with session_factory() as db:
            await committer.commit(db, user.id, message, Advisory(response_text="Olá!"))
        async with session_factory() as db:
            reply, outcome = await committer.commit(db, user.id, message, CANDIDATE)

        assert (reply, outcome) == ("Olá!", "advisory")
        assert await count_transactions(session_factory) == 0


class TestCommitStoreFailure:
    async def test_failed_update_rolls_back_and_raises(
        self, session_factory, committer, messages_service, user, monkeypatch
    ):
        message = await log_message(session_factory, messages_service, user.id)

        async def broken_update(*args, **kwargs):
            raise OperationalError("UPDATE whatsapp_messages", {}, Exception("disk I/O error"))

        monkeypatch.setattr(messages_service, "mark_processed", broken_update)

        async with session_factory() as db:
            with pytest.raises(DatabaseError):
                await committer.commit(db, user.id, message, CANDIDATE)

        assert await count_transactions(session_factory) == 0
        async with session_factory() as db:
            stored = await messages_service.get_by_id(db, message.id)
        assert stored.processed is False
        assert stored.ai_response is None
