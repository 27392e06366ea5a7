"""
structlog setup for the gate API.

Every event carries the service name and environment; request and gate
context is bound per request by GateRequestMiddleware. Admin PINs never
reach the log output.
"""

import logging
import sys
import structlog
from passgate.core.config import get_settings

SENSITIVE_KEYS = frozenset({"admin_pin", "pin"})
_HANDLER_MARK = "_passgate_handler"


def redact_sensitive(logger, method_name, event_dict):
    for key in SENSITIVE_KEYS & event_dict.keys():
        event_dict[key] = "***"
    return event_dict


def _service_stamp(app_name: str, environment: str):
    def add_service(logger, method_name, event_dict):
        event_dict.setdefault("service", app_name)
        event_dict.setdefault("env", environment)
        return event_dict
    return add_service


def _renderer(environment: str):
    if environment == "production":
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]


def setup_logging() -> None:
    """Configure structlog over stdlib logging. Safe to call more than once."""
    settings = get_settings()

    pre_chain = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _service_stamp(settings.APP_NAME, settings.ENVIRONMENT),
        redact_sensitive,
    ]

    structlog.configure(
        processors=pre_chain + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=pre_chain,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *_renderer(settings.ENVIRONMENT),
        ],
    ))
    setattr(handler, _HANDLER_MARK, True)

    root = logging.getLogger()
    root.handlers = [h for h in root.handlers if not getattr(h, _HANDLER_MARK, False)]
    root.addHandler(handler)
    root.setLevel(settings.LOG_LEVEL.upper())

    # SQL echo and access lines duplicate the request log
    for noisy in ("uvicorn.access", "sqlalchemy.engine"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def bind_scan_context(**values) -> None:
    """Attach gate scan fields (booking, operator) to every later log line of this request."""
    structlog.contextvars.bind_contextvars(**{k: v for k, v in values.items() if v is not None})


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
