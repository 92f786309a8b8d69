import re
from typing import Optional, Union

from app.core.config import config
from app.intelligence.extraction.types import (
    Malformed,
    MalformedReason,
    NormalizedText,
)

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f-\x9f]+")
_WHITESPACE = re.compile(r"\s+")


def normalize(
    raw_text: Optional[str], max_length: Optional[int] = None
) -> Union[NormalizedText, Malformed]:
    """Clean an inbound message body before it reaches the extractor.

    Returns ``Malformed(reason=empty)`` for blank input so callers can skip
    the completion call entirely.
    """
    if raw_text is None:
        return Malformed(reason=MalformedReason.EMPTY)

    text = _CONTROL_CHARS.sub(" ", raw_text)
    text = _WHITESPACE.sub(" ", text).strip()

    if not text:
        return Malformed(reason=MalformedReason.EMPTY)

    limit = max_length if max_length is not None else config.max_message_length
    if limit and len(text) > limit:
        text = text[:limit].rstrip()

    return NormalizedText(text)
