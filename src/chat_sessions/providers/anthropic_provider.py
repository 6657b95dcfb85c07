import anthropic
from loguru import logger
from tenacity import retry

from chat_sessions.completion import CompletionError
from chat_sessions.providers.common import default_retry_kwargs
from chat_sessions.sessions.models import RequestMessage, ResponseMessage, Role


def _split_system(messages: list[RequestMessage]) -> tuple[str, list[dict]]:
    """Anthropic takes system instructions as a separate parameter."""
    system_parts: list[str] = []
    out: list[dict] = []
    for msg in messages:
        if msg.role == Role.SYSTEM:
            system_parts.append(msg.get_content())
            continue
        out.append({"role": msg.role.value, "content": msg.get_content()})
    return "\n".join(p for p in system_parts if p), out


class AnthropicCompletionClient:
    def __init__(self, api_key: str, *, max_tokens: int = 100, temperature: float = 0.5):
        self._client = anthropic.AsyncAnthropic(api_key=api_key)
        self._max_tokens = max_tokens
        self._temperature = temperature

    async def complete(
        self,
        messages: list[RequestMessage],
        model: str,
    ) -> ResponseMessage:
        system_prompt, anthropic_messages = _split_system(messages)
        logger.debug(
            f"API request: model={model}, max_tokens={self._max_tokens}, "
            f"messages={len(anthropic_messages)}"
        )
        try:
            response = await self._create(model, system_prompt, anthropic_messages)
        except anthropic.AnthropicError as ex:
            raise CompletionError(f"{type(ex).__name__}: {ex}") from ex

        text_blocks = [block.text for block in (response.content or []) if block.type == "text"]
        if not text_blocks:
            raise CompletionError("Response had an empty choice field")

        usage = response.usage
        logger.debug(
            f"API response: stop_reason={response.stop_reason}, "
            f"input_tokens={usage.input_tokens}, output_tokens={usage.output_tokens}"
        )
        return ResponseMessage(role=Role(response.role), content="".join(text_blocks))

    @retry(**default_retry_kwargs((
        anthropic.RateLimitError,
        anthropic.APIConnectionError,
        anthropic.APITimeoutError,
    )))
    async def _create(self, model: str, system_prompt: str, anthropic_messages: list[dict]):
        kwargs: dict = dict(
            model=model,
            max_tokens=self._max_tokens,
            temperature=self._temperature,
            messages=anthropic_messages,
        )
        if system_prompt:
            kwargs["system"] = system_prompt
        return await self._client.messages.create(**kwargs)
