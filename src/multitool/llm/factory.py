from typing import Any

from .base import LLMProvider
from .providers import GeminiProvider


def create_llm_provider(provider: str, **config: Any) -> LLMProvider:
    """Create an LLM provider instance.

    Args:
        provider: Provider type (currently only 'gemini')
        **config: Provider-specific configuration
            For Gemini:
                - api_key: str (required unless a client is passed)
                - model: str (default: 'gemini-2.5-flash')
                - max_retries: int (default: 3)
                - client: genai.Client | None

    Returns:
        Initialized LLM provider instance

    Raises:
        ValueError: If provider type is not supported
        TypeError: If required configuration is missing

    Examples:
        >>> provider = create_llm_provider(
        ...     "gemini",
        ...     api_key="...",
        ...     model="gemini-2.5-flash"
        ... )
    """
    provider_lower = provider.lower()

    if provider_lower in ("gemini", "google"):
        if "api_key" not in config and "client" not in config:
            raise TypeError("Gemini provider requires 'api_key' in config")
        return GeminiProvider(**config)

    raise ValueError(
        f"Unsupported provider: {provider}. "
        f"Supported providers: 'gemini'"
    )
