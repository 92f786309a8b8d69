import httpx
import logging
from typing import Dict, Any, Optional

from app.core.config import config
from app.core.exceptions import WhatsAppAPIError, ValidationError
from app.core.orchestrator import MessageOrchestrator
from app.integrations.whatsapp.schema import InboundEvent, WebhookResponse


logger = logging.getLogger(__name__)


class WhatsAppService:
    def __init__(
        self,
        orchestrator: MessageOrchestrator,
        send_replies: Optional[bool] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.access_token = config.wa_access_token
        self.phone_number_id = config.wa_phone_number_id
        self.send_replies = config.wa_send_replies if send_replies is None else send_replies
        self.orchestrator = orchestrator
        self.transport = transport

    async def handle_event(self, event: InboundEvent) -> WebhookResponse:
        """Process an inbound gateway event and build the webhook response"""
        display_text = event.message or "(no text)"
        if len(display_text) > 50:
            display_text = display_text[:50] + "..."
        logger.info(f"Webhook event from {event.from_} ({event.type}): '{display_text}'")

        result = await self.orchestrator.handle_inbound(
            event, on_reply=self.send_text if self.send_replies else None
        )

        return WebhookResponse(
            success=result.status == "success",
            response=result.messages[0] if result.messages else "",
            transactionCreated=result.transaction_created,
            userRegistered=result.user_registered,
        )

    async def send_text(
        self, to: str, text: str, preview_url: bool = False
    ) -> Dict[str, Any]:
        """Send text message via WhatsApp Cloud API"""
        if not to or not to.strip():
            raise ValidationError("Recipient phone number is required")

        if not text or not text.strip():
            raise ValidationError("Message text is required")

        url = f"https://graph.facebook.com/v23.0/{self.phone_number_id}/messages"

        payload = {
            "messaging_product": "whatsapp",
            "recipient_type": "individual",
            "to": to,
            "type": "text",
            "text": {
                "preview_url": preview_url,
                "body": text,
            },
        }

        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                response = await client.post(
                    url,
                    json=payload,
                    headers={
                        "Content-Type": "application/json",
                        "Authorization": f"Bearer {self.access_token}",
                    },
                )
        except httpx.RequestError as e:
            logger.error(f"Network error sending WhatsApp message: {str(e)}")
            raise WhatsAppAPIError(f"Network error: {str(e)}")

        if not response.is_success:
            try:
                error_data = response.json()
            except ValueError:
                error_data = {"error": {"message": response.text}}
            error_message = error_data.get("error", {}).get("message", "Unknown error")
            logger.error(f"Failed to send WhatsApp message: {error_data}")
            raise WhatsAppAPIError(f"Failed to send message: {error_message}")

        logger.info(f"WhatsApp message sent successfully to {to}")
        return response.json()
