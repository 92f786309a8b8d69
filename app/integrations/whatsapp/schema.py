from pydantic import BaseModel, Field
from typing import List, Optional, Literal


class InboundEvent(BaseModel):
    """Message pushed by the WhatsApp gateway."""

    from_: str = Field(alias="from", min_length=1, description="Sender phone number / id")
    message: Optional[str] = Field("", description="Raw text body")
    type: str = Field("text", description="text, image, audio, document, ...")
    media_url: Optional[str] = Field(None, alias="mediaUrl")
    # Gateway message id, used to recognise re-deliveries
    message_id: Optional[str] = Field(None, alias="messageId")
    timestamp: Optional[str | int] = None

    class Config:
        populate_by_name = True
        extra = "allow"  # Gateways send extra fields


class ProcessMessageResult(BaseModel):
    messages: List[str]  # What to send back to the user
    status: Literal["success", "error"]
    transaction_created: bool = False
    user_registered: bool = False


class WebhookResponse(BaseModel):
    success: bool
    response: str
    transactionCreated: bool
    userRegistered: bool
