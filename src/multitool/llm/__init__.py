from .base import DebugCallback, LLMProvider
from .factory import create_llm_provider
from .models import ChatMessage, LLMResponse, StreamingResponse
from .providers import GeminiProvider

__all__ = [
    "ChatMessage",
    "DebugCallback",
    "GeminiProvider",
    "LLMProvider",
    "LLMResponse",
    "StreamingResponse",
    "create_llm_provider",
]
