from __future__ import annotations

from dataclasses import dataclass

from chat_sessions.app_config import AppConfig, RuntimeEnv
from chat_sessions.completion import CompletionClient, create_completion_client
from chat_sessions.logging_config import setup_logging
from chat_sessions.sessions import SessionStore


@dataclass
class AppRuntime:
    store: SessionStore
    client: CompletionClient
    log_descriptions: list[str]


def bootstrap_runtime(app: AppConfig, env: RuntimeEnv) -> AppRuntime:
    log_descriptions = setup_logging(level=app.log_level, consumers=app.log_consumers)

    client = create_completion_client(
        app.provider_name,
        env.provider_api_key,
        max_tokens=app.max_tokens,
        temperature=app.temperature,
    )
    store = SessionStore(client, default_model=app.model)

    return AppRuntime(store=store, client=client, log_descriptions=log_descriptions)
