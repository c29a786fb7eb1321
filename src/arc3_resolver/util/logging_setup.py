from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path

import structlog

TS_PLACEHOLDER = "{ts}"
TS_FORMAT = "%Y%m%d-%H%M%S"


def resolve_log_path(file_path: str | None, now: datetime | None = None) -> str | None:
    """Stamp a log file path with the start time.

    ``{ts}`` in the path is replaced; otherwise the stamp goes before the suffix.
    """
    if not file_path:
        return None
    stamp = (now or datetime.now(tz=UTC)).strftime(TS_FORMAT)
    if TS_PLACEHOLDER in file_path:
        return file_path.replace(TS_PLACEHOLDER, stamp)
    path = Path(file_path)
    return str(path.with_name(f"{path.stem}-{stamp}{path.suffix}"))


def _renderer(style: str):
    if (style or "").lower() == "console":
        return structlog.dev.ConsoleRenderer(colors=False)
    return structlog.processors.JSONRenderer()


def configure_logging(
    level: str,
    style: str = "json",
    console: bool = True,
    file_path: str | None = None,
) -> None:
    level_name = level.upper()
    numeric_level = logging.getLevelNamesMapping().get(level_name, logging.INFO)
    handlers: list[logging.Handler] = []
    if console:
        handlers.append(logging.StreamHandler())
    resolved_path = resolve_log_path(file_path)
    if resolved_path:
        path = Path(resolved_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))
    if not handlers:
        handlers.append(logging.NullHandler())

    logging.basicConfig(
        level=numeric_level,
        format="%(message)s",
        handlers=handlers,
        force=True,
    )
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _renderer(style),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
