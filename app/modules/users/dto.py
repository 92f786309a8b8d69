from pydantic import BaseModel, Field
from typing import Optional, Dict, Any
from datetime import datetime


class CreateUserDto(BaseModel):
    whatsapp_number: str = Field(..., min_length=1, description="WhatsApp number the user sends messages from")
    name: Optional[str] = Field(None, description="User's full name")
    meta: Optional[Dict[str, Any]] = Field(None, description="Additional metadata about the user")


class UserResponseDto(BaseModel):
    id: int = Field(..., description="Unique identifier for the user")
    whatsapp_number: str = Field(..., description="WhatsApp number of the user")
    name: Optional[str] = Field(None, description="User's full name")
    meta: Optional[Dict[str, Any]] = Field(None, description="Additional metadata about the user")
    created_at: datetime = Field(..., description="When the user account was created")
    updated_at: Optional[datetime] = Field(None, description="When the user account was last updated")

    class Config:
        from_attributes = True
