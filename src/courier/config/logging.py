"""Log routing for courier.

Everything courier emits lives under the ``courier`` logger tree:

- ``courier.registry.*``, ``courier.plugins.*``, ``courier.services.*``,
  ``courier.domain.*``: stdlib loggers for registration, plugin loading,
  bootstrap and cancellation.
- ``courier.requests``: structlog events from the request logging behavior
  (``request.started`` / ``request.completed`` / ``request.failed``).
- ``courier.telemetry``: ``span.complete`` events from the tracing behavior.

Both kinds of record end up in a single stderr handler, rendered either
for a terminal or as one JSON object per line (``--log-json``).
"""

from __future__ import annotations

import logging
import sys

import structlog

HANDLER_NAME = "courier"


def _shared_processors() -> list[structlog.types.Processor]:
    # Applied to structlog events and, via foreign_pre_chain, to stdlib records.
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(log_json: bool) -> structlog.types.Processor:
    if log_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def _install_handler(formatter: logging.Formatter) -> None:
    """Put courier's stderr handler on the root logger, replacing an earlier one."""
    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
        root.removeHandler(existing)
    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(formatter)
    root.addHandler(handler)
    root.setLevel(logging.WARNING)


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
) -> None:
    """Route the ``courier`` logger tree to stderr.

    Safe to call more than once; the previous courier handler is replaced.
    Handlers installed by the host application are left alone. Loggers
    outside ``courier`` stay at WARNING regardless of *verbose*.

    Args:
        verbose: Let DEBUG records from ``courier.*`` through, which
            includes every ``request.started`` event.
        log_json: Render JSON lines instead of console output.
    """
    processors = _shared_processors()
    structlog.configure(
        processors=[*processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
    _install_handler(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_json),
            ],
        )
    )
    logging.getLogger("courier").setLevel(logging.DEBUG if verbose else logging.WARNING)
