"""structlog setup for the service entry points."""

from __future__ import annotations

import logging

import structlog


def configure_logging(debug: bool = False, json: bool = False) -> None:
    """Configure structlog's processor chain.

    Args:
        debug: Emit debug events (per-hop and per-candidate detail)
        json: Render one JSON object per line instead of the console format
    """
    log_level = logging.DEBUG if debug else logging.INFO

    processors: list[structlog.types.Processor] = [
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if json:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        # ConsoleRenderer formats exceptions itself
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )


__all__ = ["configure_logging"]
