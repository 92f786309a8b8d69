import asyncio
import logging
import time
import uuid
from typing import Awaitable, Callable, Optional, Set, Tuple

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

import app.core.constants.whatsapp_responses as message_constants
from app.integrations.whatsapp.schema import InboundEvent, ProcessMessageResult
from app.intelligence.extraction.extractor import Extractor
from app.intelligence.extraction.types import (
    ExtractionResult,
    Malformed,
    MalformedReason,
)
from app.intelligence.normalizer import normalize
from app.modules.messages.dto import LogInboundMessageDto
from app.modules.messages.models import WhatsAppMessage
from app.modules.messages.service import MessagesService
from app.modules.users.service import UsersService
from app.pipeline.committer import OUTCOME_TRANSACTION, TransactionCommitter
from app.utils.datetime import parse_epoch

logger = logging.getLogger(__name__)

ReplySender = Callable[[str, str], Awaitable[object]]


class MessageOrchestrator:
    """Runs normalize -> extract -> commit for each inbound WhatsApp message.

    Every message is processed in its own task. Callers await it through
    ``asyncio.shield`` so a dropped HTTP request does not abandon a message
    half way; the task still reaches a terminal state.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        users_service: UsersService,
        messages_service: MessagesService,
        extractor: Extractor,
        committer: TransactionCommitter,
        max_message_length: Optional[int] = None,
    ):
        self.logger = logger
        self.session_factory = session_factory
        self.users_service = users_service
        self.messages_service = messages_service
        self.extractor = extractor
        self.committer = committer
        self.max_message_length = max_message_length
        self._pending: Set[asyncio.Task] = set()

    # =============================================================================
    # MAIN ENTRY POINT
    # =============================================================================

    async def handle_inbound(
        self, event: InboundEvent, on_reply: Optional[ReplySender] = None
    ) -> ProcessMessageResult:
        """Process one inbound event and return the reply for the sender."""
        task = asyncio.create_task(self._process(event, on_reply))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return await asyncio.shield(task)

    async def shutdown(self, timeout: float = 30.0) -> None:
        """Wait for in-flight messages to reach a terminal state."""
        if not self._pending:
            return
        self.logger.info(f"Waiting for {len(self._pending)} in-flight message(s)")
        await asyncio.wait(set(self._pending), timeout=timeout)

    # =============================================================================
    # PIPELINE
    # =============================================================================

    async def _process(
        self, event: InboundEvent, on_reply: Optional[ReplySender]
    ) -> ProcessMessageResult:
        start_time = time.time()

        try:
            owner_id, message = await self._receive(event)
        except Exception as e:
            self.logger.error(f"Error logging inbound message: {str(e)}", exc_info=True)
            return await self._fail(event, on_reply)

        if message.processed:
            return ProcessMessageResult(
                messages=[message.ai_response or ""],
                status="success",
                transaction_created=message.outcome == OUTCOME_TRANSACTION,
                user_registered=owner_id is not None,
            )

        result = await self._classify(event.message)

        try:
            async with self.session_factory() as db:
                reply, outcome = await self.committer.commit(db, owner_id, message, result)
        except Exception as e:
            # The log row stays unprocessed so a re-delivery can finish it
            self.logger.error(f"Error committing message {message.id}: {str(e)}", exc_info=True)
            return await self._fail(event, on_reply, user_registered=owner_id is not None)

        if on_reply is not None:
            await self._send_reply(on_reply, event.from_, reply)

        latency_ms = (time.time() - start_time) * 1000
        self.logger.info(
            f"Message {message.external_id} from {event.from_} handled in {latency_ms:.2f}ms"
        )

        return ProcessMessageResult(
            messages=[reply],
            status="success",
            transaction_created=outcome == OUTCOME_TRANSACTION,
            user_registered=owner_id is not None,
        )

    async def _receive(self, event: InboundEvent) -> Tuple[Optional[int], WhatsAppMessage]:
        """Resolve the owner and log the inbound message (once per external id)."""
        async with self.session_factory() as db:
            owner = await self.users_service.get_user_by_whatsapp_number(db, event.from_)
            owner_id = owner.id if owner else None
            if owner_id is None:
                self.logger.info(f"No user registered for number {event.from_}")

            message, created = await self.messages_service.log_inbound(
                db,
                LogInboundMessageDto(
                    external_id=event.message_id or str(uuid.uuid4()),
                    user_id=owner_id,
                    user_phone=event.from_,
                    message_content=event.message or "",
                    message_type=event.type,
                    media_url=event.media_url,
                    received_at=parse_epoch(event.timestamp),
                ),
            )
            if created:
                self.logger.info(f"📨 Incoming WhatsApp message from {event.from_}")
            return owner_id, message

    async def _classify(self, raw_text: Optional[str]) -> ExtractionResult:
        normalized = normalize(raw_text, self.max_message_length)
        if isinstance(normalized, Malformed):
            # Never spend a model call on empty input
            return normalized

        try:
            return await self.extractor.extract(normalized)
        except Exception as e:
            self.logger.error(f"Unexpected extraction error: {str(e)}", exc_info=True)
            return Malformed(reason=MalformedReason.ENDPOINT_UNAVAILABLE)

    async def _send_reply(self, on_reply: ReplySender, recipient: str, reply: str) -> None:
        try:
            await on_reply(recipient, reply)
        except Exception as e:
            # A send failure never changes the message outcome
            self.logger.error(f"Failed to send reply to {recipient}: {str(e)}")

    async def _fail(
        self,
        event: InboundEvent,
        on_reply: Optional[ReplySender],
        user_registered: bool = False,
    ) -> ProcessMessageResult:
        result = self._error_result(user_registered=user_registered)
        if on_reply is not None:
            await self._send_reply(on_reply, event.from_, result.messages[0])
        return result

    def _error_result(self, user_registered: bool = False) -> ProcessMessageResult:
        return ProcessMessageResult(
            status="error",
            messages=[message_constants.ERROR_MESSAGES["GENERIC"]],
            user_registered=user_registered,
        )
