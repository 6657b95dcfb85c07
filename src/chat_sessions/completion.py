from typing import Protocol, runtime_checkable

from chat_sessions.sessions.models import RequestMessage, ResponseMessage


class CompletionError(Exception):
    """The completion endpoint failed or returned no usable choice."""


@runtime_checkable
class CompletionClient(Protocol):
    async def complete(
        self,
        messages: list[RequestMessage],
        model: str,
    ) -> ResponseMessage:
        """Send the ordered conversation to `model` and return its single reply.

        Raises CompletionError on transport/API failure or an empty response.
        """
        ...


def create_completion_client(
    provider_name: str,
    api_key: str,
    *,
    max_tokens: int = 100,
    temperature: float = 0.5,
) -> CompletionClient:
    """Factory: create a CompletionClient by provider name."""
    name = provider_name.strip().lower()
    if name == "openai":
        from chat_sessions.providers.openai_provider import OpenAICompletionClient
        return OpenAICompletionClient(api_key, max_tokens=max_tokens, temperature=temperature)
    if name == "anthropic":
        from chat_sessions.providers.anthropic_provider import AnthropicCompletionClient
        return AnthropicCompletionClient(api_key, max_tokens=max_tokens, temperature=temperature)
    raise ValueError(f"Unknown provider: {provider_name!r}. Supported: 'openai', 'anthropic'")
