from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class LogInboundMessageDto(BaseModel):
    external_id: str = Field(..., description="Channel message ID or generated UUID")
    user_id: Optional[int] = Field(None, description="Owner, when the sender is registered")
    user_phone: str = Field(..., description="Sender identifier")
    message_content: str = Field("", description="Raw text body as received")
    message_type: str = Field("text", description="Channel message type")
    media_url: Optional[str] = Field(None, description="Optional media reference")
    received_at: Optional[datetime] = Field(None, description="When the gateway received the message")


class MessageLogResponse(BaseModel):
    id: int
    external_id: str
    user_id: Optional[int] = None
    user_phone: str
    message_content: str
    message_type: str
    media_url: Optional[str] = None
    received_at: datetime
    ai_response: Optional[str] = None
    processed: bool
    outcome: Optional[str] = None

    class Config:
        from_attributes = True
