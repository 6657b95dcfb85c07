import openai
from loguru import logger
from tenacity import retry

from chat_sessions.completion import CompletionError
from chat_sessions.providers.common import default_retry_kwargs
from chat_sessions.sessions.models import RequestMessage, ResponseMessage

DEFAULT_CHAT_MODEL = "gpt-3.5-turbo"


def _to_openai_messages(messages: list[RequestMessage]) -> list[dict]:
    """Convert request messages to OpenAI chat format."""
    return [msg.to_dict() for msg in messages]


class OpenAICompletionClient:
    def __init__(self, api_key: str, *, max_tokens: int = 100, temperature: float = 0.5):
        self._client = openai.AsyncOpenAI(api_key=api_key)
        self._max_tokens = max_tokens
        self._temperature = temperature

    async def complete(
        self,
        messages: list[RequestMessage],
        model: str,
    ) -> ResponseMessage:
        oai_messages = _to_openai_messages(messages)
        model = model or DEFAULT_CHAT_MODEL
        logger.debug(
            f"API request: model={model}, max_tokens={self._max_tokens}, "
            f"messages={len(oai_messages)}"
        )
        try:
            response = await self._create(model, oai_messages)
        except openai.OpenAIError as ex:
            raise CompletionError(f"{type(ex).__name__}: {ex}") from ex

        if not response.choices:
            raise CompletionError("Response had an empty choice field")

        choice = response.choices[0]
        message = choice.message
        logger.debug(
            f"API response: finish_reason={choice.finish_reason}, "
            f"text_len={len(message.content or '')}"
        )
        return ResponseMessage.from_dict(message)

    @retry(**default_retry_kwargs((
        openai.RateLimitError,
        openai.APIConnectionError,
        openai.APITimeoutError,
    )))
    async def _create(self, model: str, oai_messages: list[dict]):
        return await self._client.chat.completions.create(
            model=model,
            max_tokens=self._max_tokens,
            temperature=self._temperature,
            messages=oai_messages,
        )
