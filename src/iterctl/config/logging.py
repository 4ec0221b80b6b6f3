"""Log routing for iterctl: structlog in front of stdlib logging.

Everything goes to stderr; stdout carries only command results. By default
records are rendered for humans, with ``--log-json`` as one JSON object per
line for log shippers.

Modules log with ``logging.getLogger(__name__)``. Their records run through
the same processors as structlog loggers, so the ``project`` bound by the
sync service appears on every line emitted while that project is processed.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import MutableMapping
from typing import Any

import structlog

NOISY_LOGGERS = ("urllib3", "requests")
SECRET_KEYS = frozenset({"personal_access_token", "authorization", "auth"})

_HANDLER_NAME = "iterctl"


def _redact_secrets(
    _logger: Any, _method: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    for key in SECRET_KEYS.intersection(event_dict):
        event_dict[key] = "***"
    return event_dict


def _pre_chain() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        _redact_secrets,
    ]


def _final_processors(log_json: bool) -> list[structlog.types.Processor]:
    strip_meta = structlog.stdlib.ProcessorFormatter.remove_processors_meta
    if log_json:
        return [
            strip_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [strip_meta, structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Route iterctl logging to stderr.

    Safe to call more than once; the previous iterctl handler is replaced.

    Args:
        verbose: Let ``iterctl`` loggers emit DEBUG records (INFO otherwise).
        log_json: Render JSON lines instead of the console format.
    """
    pre_chain = _pre_chain()
    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=_final_processors(log_json),
        )
    )

    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger("iterctl").setLevel(logging.DEBUG if verbose else logging.INFO)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
