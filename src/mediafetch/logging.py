from __future__ import annotations

import logging
import os
import re
import sys
from typing import Any, TextIO

import structlog
from structlog.types import Processor

# Free-tier provider keys travel in query strings.
API_KEY_RE = re.compile(r"(?i)\b(apikey|api_key|key|token)=([^&\s\"']+)")

_log_file: TextIO | None = None


def redact_text(value: str) -> str:
    return API_KEY_RE.sub(lambda m: f"{m.group(1)}=[REDACTED]", value)


def _redact(value: Any) -> Any:
    if isinstance(value, str):
        return redact_text(value)
    if isinstance(value, dict):
        return {key: _redact(val) for key, val in value.items()}
    if isinstance(value, (list, tuple)):
        return type(value)(_redact(item) for item in value)
    return value


def _redact_processor(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    return _redact(event_dict)


def _rename_logger(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    name = event_dict.pop("logger_name", None)
    if name:
        event_dict.setdefault("logger", name)
    return event_dict


def _write_file(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    if _log_file is not None:
        line = structlog.processors.JSONRenderer(default=str)(
            logger, method_name, dict(event_dict)
        )
        _log_file.write(f"{line}\n")
        _log_file.flush()
    return event_dict


def get_logger(name: str | None = None) -> Any:
    if name:
        return structlog.get_logger(logger_name=name)
    return structlog.get_logger()


def _min_level(debug: bool) -> int:
    if debug:
        return logging.DEBUG
    name = os.environ.get("MEDIAFETCH_LOG_LEVEL", "info").strip().upper()
    level = logging.getLevelNamesMapping().get(name)
    return level if level is not None else logging.INFO


def _open_log_file() -> None:
    global _log_file
    if _log_file is not None:
        _log_file.close()
        _log_file = None
    path = os.environ.get("MEDIAFETCH_LOG_FILE")
    if path:
        _log_file = open(path, "a", encoding="utf-8")


def setup_logging(
    *, debug: bool = False, cache_logger_on_first_use: bool = True
) -> None:
    """Configure structlog from ``MEDIAFETCH_LOG_*`` variables.

    Logs go to stderr since stdout carries command results. ``MEDIAFETCH_LOG_FILE``
    adds a JSON lines copy of every event.
    """
    _open_log_file()

    as_json = os.environ.get("MEDIAFETCH_LOG_FORMAT", "").strip().lower() == "json"
    color = os.environ.get("MEDIAFETCH_LOG_COLOR")
    colors = (
        sys.stderr.isatty()
        if color is None
        else color.strip().lower() in {"1", "true", "yes", "on"}
    )

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.add_log_level,
        _rename_logger,
        _redact_processor,
        _write_file,
    ]
    if as_json:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(default=str),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=colors))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(_min_level(debug)),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=cache_logger_on_first_use,
    )
