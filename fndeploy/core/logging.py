"""Structured logging via structlog.

Configures structlog once per process. Pipeline modules keep using
``logging.getLogger(__name__)``; the stdlib bridge routes those records
through the same renderer.

Renderer selection:
  debug=True:  `ConsoleRenderer` with colours for interactive use.
  debug=False: `JSONRenderer` for CI logs.

ContextVar injection:
  The orchestrator binds the slug being deployed via `bind_slug()`, so
  every log line emitted while a function is bundled or uploaded carries
  a `slug` field without passing it around.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

import structlog

_slug_var: ContextVar[str] = ContextVar("slug", default="")


def get_slug() -> str:
    """Return the slug currently being deployed, or empty string."""
    return _slug_var.get()


@contextmanager
def bind_slug(slug: str) -> Iterator[None]:
    """Bind `slug` to the logging context for the duration of the block."""
    token = _slug_var.set(slug)
    try:
        yield
    finally:
        _slug_var.reset(token)


def _inject_context_vars(
    logger: logging.Logger,
    method: str,
    event_dict: dict,
) -> dict:
    """Structlog processor: inject the current slug from its ContextVar."""
    slug = get_slug()
    if slug:
        event_dict["slug"] = slug
    return event_dict


def configure_structlog(debug: bool = False) -> None:
    """Configure structlog and the stdlib bridge.

    Safe to call more than once; the last call wins.
    """
    shared_processors: list = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        _inject_context_vars,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if debug:
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if debug else logging.INFO
        ),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Bridge stdlib logging → structlog so pipeline modules and httpx
    # produce the same structured output.
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(logging.DEBUG if debug else logging.INFO)
    # httpx logs every request at INFO; keep that for debug runs only.
    logging.getLogger("httpx").setLevel(logging.DEBUG if debug else logging.WARNING)
