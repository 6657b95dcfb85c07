import sys
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from loguru import logger

_CONSOLE_FORMAT = "<level>{level:<8}</level> | <cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | {name}:{function}:{line} - {message}"


@runtime_checkable
class LogSink(Protocol):
    def register(self, level: str) -> int: ...
    def describe(self, level: str) -> str: ...


class ConsoleLogSink:
    """Logs to stderr so they never interleave with the chat transcript on stdout."""

    def register(self, level: str) -> int:
        return logger.add(sys.stderr, level=level, format=_CONSOLE_FORMAT)

    def describe(self, level: str) -> str:
        return f"console (stderr, {level})"


class FileLogSink:
    def __init__(self, path: str = "chat.log", rotation: str = "5 MB", retention: int = 3):
        self._path = path
        self._rotation = rotation
        self._retention = retention

    def register(self, level: str) -> int:
        Path(self._path).parent.mkdir(parents=True, exist_ok=True)
        return logger.add(
            self._path,
            level=level,
            format=_FILE_FORMAT,
            rotation=self._rotation,
            retention=self._retention,
        )

    def describe(self, level: str) -> str:
        return f"file ({self._path}, {level})"


_SINK_TYPES: dict[str, type] = {
    "console": ConsoleLogSink,
    "file": FileLogSink,
}

_DEFAULT_SINKS = [{"type": "console", "level": "WARNING"}]


def setup_logging(level: str = "INFO", consumers: list[dict[str, Any]] | None = None) -> list[str]:
    """Replace loguru's default handler with the configured sinks.

    Each entry is ``{"type": ..., "level": ..., **sink_kwargs}``; entries
    without a level use `level`. Returns a description per registered sink.
    """
    logger.remove()

    descriptions: list[str] = []
    for entry in consumers if consumers is not None else _DEFAULT_SINKS:
        sink_type = entry.get("type", "")
        cls = _SINK_TYPES.get(sink_type)
        if cls is None:
            logger.warning(f"Unknown log consumer type: {sink_type!r}")
            continue

        kwargs = {k: v for k, v in entry.items() if k not in ("type", "level")}
        sink_level = entry.get("level", level)
        sink = cls(**kwargs)
        sink.register(sink_level)
        descriptions.append(sink.describe(sink_level))

    return descriptions
