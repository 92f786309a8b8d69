import asyncio
import logging
from typing import Optional

from app.core.config import config
from app.core.exceptions import LLMServiceError
from app.integrations.llm.service import LLMService
from app.intelligence.extraction.parser import parse_completion
from app.intelligence.extraction.prompts import build_transaction_prompt
from app.intelligence.extraction.types import (
    ExtractionResult,
    Malformed,
    MalformedReason,
    NormalizedText,
)

logger = logging.getLogger(__name__)

# One retry on top of the first call
MAX_ATTEMPTS = 2


class Extractor:
    """Classifies a normalized message into a transaction, an advisory or Malformed.

    Read-only with respect to the data store.
    """

    def __init__(
        self,
        llm_service: LLMService,
        retry_delay: Optional[float] = None,
        max_advisory_length: Optional[int] = None,
    ):
        self.llm_service = llm_service
        self.retry_delay = config.llm_retry_delay if retry_delay is None else retry_delay
        self.max_advisory_length = max_advisory_length or config.max_advisory_length

    async def extract(self, text: NormalizedText) -> ExtractionResult:
        prompt = build_transaction_prompt(text)

        for attempt in range(1, MAX_ATTEMPTS + 1):
            try:
                response = await self.llm_service.complete(
                    prompt=prompt,
                    max_tokens=500,
                    temperature=0,
                    call_stack="extraction",
                )
            except LLMServiceError as e:
                logger.warning(
                    f"Completion failed (attempt {attempt}/{MAX_ATTEMPTS}): {e.detail}"
                )
                if attempt < MAX_ATTEMPTS:
                    await asyncio.sleep(self.retry_delay)
                continue

            result = parse_completion(response.content, self.max_advisory_length)
            logger.info(f"Extraction result: {result.kind}")
            return result

        return Malformed(reason=MalformedReason.ENDPOINT_UNAVAILABLE)
