"""
Structured logging configuration using structlog.

JSON lines by default, coloured console output when running at DEBUG. Every
event passes through a scrubber that removes configured credentials, so a
provider error that echoes a key or an RPC URL never reaches the log stream.
"""

import logging
import sys
from typing import Any, Iterable, MutableMapping, Optional

import structlog

from .config import settings
from .core.formatter import redact


def scrub_secrets(secrets: Iterable[str]) -> structlog.types.Processor:
    """Build a processor that redacts credentials from string event values."""
    values = [s for s in secrets if s]

    def processor(_logger: Any, _method: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
        for key, value in event_dict.items():
            if isinstance(value, str):
                event_dict[key] = redact(value, values)
        return event_dict

    return processor


def setup_logging(log_level: Optional[str] = None) -> None:
    """Configure structlog and route stdlib logging through it.

    Args:
        log_level: Override log level (default: from settings.log_level)
    """
    level = getattr(logging, (log_level or settings.log_level).upper(), logging.INFO)
    is_dev = level == logging.DEBUG

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        # Tracebacks are rendered to text before scrubbing
        structlog.processors.format_exc_info,
        scrub_secrets(settings.secret_values()),
    ]

    if is_dev:
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    # Request URLs carry wallet addresses and, for some RPC endpoints, keys
    for name in ("uvicorn.access", "httpcore", "httpx", "web3", "urllib3"):
        logging.getLogger(name).setLevel(logging.WARNING)
