from decimal import Decimal
from enum import Enum
from typing import Literal, NewType, Optional, Union

from pydantic import BaseModel, Field

from app.intelligence.categorization.constants import (
    TransactionCategory,
    TransactionType,
)

# Whitespace-trimmed, control-character-free, non-empty message text
NormalizedText = NewType("NormalizedText", str)


class MalformedReason(str, Enum):
    EMPTY = "empty"
    UNPARSEABLE = "unparseable"
    INVALID_FIELD = "invalid-field"
    ENDPOINT_UNAVAILABLE = "endpoint-unavailable"


class TransactionCandidate(BaseModel):
    kind: Literal["transaction"] = "transaction"
    type: TransactionType = Field(..., description="Direction of the money flow")
    amount: Decimal = Field(..., gt=0, decimal_places=2, description="Positive amount, two decimal places")
    category: TransactionCategory = Field(..., description="One of the closed categories")
    description: str = Field("", description="Free-text description from the model")


class Advisory(BaseModel):
    kind: Literal["advisory"] = "advisory"
    response_text: str = Field(..., description="Non-transactional reply for the sender")


class Malformed(BaseModel):
    kind: Literal["malformed"] = "malformed"
    reason: MalformedReason
    field: Optional[str] = Field(None, description="Offending field for invalid-field results")
    # Diagnostics only, never shown to the sender
    raw_text: Optional[str] = None

    @property
    def outcome(self) -> str:
        return f"malformed:{self.reason.value}"


ExtractionResult = Union[TransactionCandidate, Advisory, Malformed]
