"""
Parsing of raw completion text into an ExtractionResult.

The model gives no schema guarantee, so every field is validated before a
TransactionCandidate is built; anything else falls through to Malformed.
"""

import json
import logging
import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, Optional

from app.core.config import config
import app.core.constants.whatsapp_responses as message_constants
from app.intelligence.categorization.constants import (
    TransactionCategory,
    TransactionType,
)
from app.intelligence.extraction.types import (
    Advisory,
    ExtractionResult,
    Malformed,
    MalformedReason,
    TransactionCandidate,
)

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
# Numeric(12, 2) column limit
MAX_AMOUNT = Decimal("9999999999.99")
MAX_DESCRIPTION_LENGTH = 500

_decoder = json.JSONDecoder()


class InvalidFieldError(ValueError):
    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


def find_json_object(text: str) -> Optional[Dict[str, Any]]:
    """Return the first JSON object embedded in ``text``, ignoring surrounding prose."""
    idx = text.find("{")
    while idx != -1:
        try:
            value, _ = _decoder.raw_decode(text, idx)
        except json.JSONDecodeError:
            value = None
        if isinstance(value, dict):
            return value
        idx = text.find("{", idx + 1)
    return None


def parse_amount(value: Any) -> Decimal:
    """Convert a model-supplied amount into a positive two-place Decimal."""
    if isinstance(value, bool) or value is None:
        raise InvalidFieldError("amount", f"amount is not a number: {value!r}")

    if isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidFieldError("amount", f"amount is not finite: {value!r}")
        # repr keeps the shortest round-tripping form (49.999 stays 49.999)
        raw = repr(value)
    elif isinstance(value, (int, str)):
        raw = str(value).strip()
    else:
        raise InvalidFieldError("amount", f"amount is not a number: {value!r}")

    try:
        amount = Decimal(raw)
    except InvalidOperation:
        raise InvalidFieldError("amount", f"amount is not a number: {value!r}")

    if not amount.is_finite():
        raise InvalidFieldError("amount", f"amount is not finite: {value!r}")

    if amount > MAX_AMOUNT:
        raise InvalidFieldError("amount", f"amount is too large: {value!r}")

    amount = amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    if amount <= 0:
        raise InvalidFieldError("amount", f"amount must be greater than zero: {value!r}")
    return amount


def parse_type(value: Any) -> TransactionType:
    if not isinstance(value, str):
        raise InvalidFieldError("type", f"type is not a string: {value!r}")
    try:
        return TransactionType(value.strip().lower())
    except ValueError:
        raise InvalidFieldError("type", f"unknown transaction type: {value!r}")


def parse_category(value: Any) -> TransactionCategory:
    if not isinstance(value, str):
        raise InvalidFieldError("category", f"category is not a string: {value!r}")
    try:
        return TransactionCategory(value.strip().lower())
    except ValueError:
        raise InvalidFieldError("category", f"unknown category: {value!r}")


def parse_description(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise InvalidFieldError("description", f"description is not a string: {value!r}")
    return value.strip()[:MAX_DESCRIPTION_LENGTH]


def parse_completion(
    raw_text: str, max_advisory_length: Optional[int] = None
) -> ExtractionResult:
    """Turn the completion text into Transaction, Advisory or Malformed."""
    data = find_json_object(raw_text or "")
    if data is None or not isinstance(data.get("isTransaction"), bool):
        logger.warning(f"Unparseable completion: {raw_text!r}")
        return Malformed(reason=MalformedReason.UNPARSEABLE, raw_text=raw_text)

    if not data["isTransaction"]:
        limit = max_advisory_length or config.max_advisory_length
        response = data.get("response")
        if not isinstance(response, str) or not response.strip():
            response = message_constants.GREETING_MESSAGE
        return Advisory(response_text=response[:limit])

    try:
        return TransactionCandidate(
            type=parse_type(data.get("type")),
            amount=parse_amount(data.get("amount")),
            category=parse_category(data.get("category")),
            description=parse_description(data.get("description")),
        )
    except InvalidFieldError as e:
        logger.warning(f"Invalid field in completion: {e}")
        return Malformed(
            reason=MalformedReason.INVALID_FIELD, field=e.field, raw_text=raw_text
        )
