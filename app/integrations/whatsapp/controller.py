import logging
from fastapi import APIRouter, Query
from typing import List

from app.core.dependencies import (
    DatabaseDep,
    MessagesServiceDep,
    WhatsAppServiceDep,
)
from app.integrations.whatsapp.schema import InboundEvent, WebhookResponse
from app.modules.messages.dto import MessageLogResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/whatsapp", tags=["whatsapp"])


@router.post("/webhook", response_model=WebhookResponse)
async def handle_webhook(
    event: InboundEvent,
    whatsapp_service: WhatsAppServiceDep,
) -> WebhookResponse:
    """Handle an incoming WhatsApp message"""
    logger.info("Webhook payload received")
    return await whatsapp_service.handle_event(event)


@router.get("/messages", response_model=List[MessageLogResponse])
async def list_messages(
    db: DatabaseDep,
    messages_service: MessagesServiceDep,
    user_id: int = Query(..., gt=0),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
) -> List[MessageLogResponse]:
    """List a user's WhatsApp message log, newest first"""
    messages = await messages_service.list_for_user(db, user_id, limit=limit, offset=offset)
    return [MessageLogResponse.model_validate(m) for m in messages]
