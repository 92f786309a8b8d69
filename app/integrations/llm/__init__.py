from .service import LLMService, LLMResponse
from app.core.exceptions import LLMServiceError

__all__ = ["LLMService", "LLMResponse", "LLMServiceError"]
