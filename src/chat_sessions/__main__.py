import asyncio
import sys

from dotenv import load_dotenv
from loguru import logger

from chat_sessions.app_config import load_json_config, parse_app_config, resolve_runtime_env
from chat_sessions.bootstrap import bootstrap_runtime
from chat_sessions.chat_shell import ChatShell


async def main() -> None:
    load_dotenv()

    app = parse_app_config(load_json_config())
    env = resolve_runtime_env(app.provider_name)
    runtime = bootstrap_runtime(app, env)

    if not env.provider_api_key:
        logger.error(f"{env.provider_env_var} environment variable is required.")
        sys.exit(1)

    shell = ChatShell(runtime.store, default_title=app.default_title)

    print("chat-sessions (type 'exit' to quit, '/help' for commands)")
    print(f"Provider: {app.provider_name} | Model: {app.model}")
    if runtime.log_descriptions:
        print(f"Logging: {', '.join(runtime.log_descriptions)}")
    print()

    while True:
        try:
            user_input = input("you> ")
        except (EOFError, KeyboardInterrupt):
            break

        trimmed = user_input.strip()
        if trimmed in ("exit", "quit"):
            break
        if not trimmed:
            continue

        try:
            await shell.run(trimmed)
            print()
        except Exception as ex:
            logger.error(f"Unhandled error: {ex}")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
