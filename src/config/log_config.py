"""structlog + stdlib logging wiring.

Every record, whether emitted through ``structlog.get_logger`` or a plain
stdlib logger (Django, Celery), passes the same processor chain and is
rendered as one JSON object per line (or coloured key/value pairs when
``json_output`` is off, for local development).
"""

import re
from typing import Any, Dict

import structlog

MASK = "***MASKED***"

SENSITIVE_PATTERN = re.compile(
    r"\b(\d{3}\.?\d{3}\.?\d{3}-?\d{2})\b"  # CPF
    r"|\b(\d{2}\.?\d{3}\.?\d{3}/?\d{4}-?\d{2})\b"  # CNPJ
    r"|(password|passwd|secret|token|authorization)"
    r"""([=:]\s*["']?)([^\s,}"']+)""",
    re.IGNORECASE,
)


def _mask(value: Any) -> Any:
    if isinstance(value, str):
        return SENSITIVE_PATTERN.sub(MASK, value)
    if isinstance(value, dict):
        return {key: _mask(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return type(value)(_mask(item) for item in value)
    return value


def mask_sensitive_data(_, __, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Mask CPF, CNPJ, passwords and tokens anywhere in the event values."""
    return {key: _mask(value) for key, value in event_dict.items()}


SHARED_PROCESSORS = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    mask_sensitive_data,
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]


def configure_structlog() -> None:
    structlog.configure(
        processors=[
            *SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def build_logging(level: str = "INFO", json_output: bool = True) -> Dict[str, Any]:
    """Django ``LOGGING`` dict routing stdlib records through structlog."""
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {
                "()": structlog.stdlib.ProcessorFormatter,
                "processors": [
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    structlog.processors.format_exc_info,
                    renderer,
                ],
                "foreign_pre_chain": SHARED_PROCESSORS,
            },
        },
        "handlers": {
            "console": {"class": "logging.StreamHandler", "formatter": "structured"},
        },
        "root": {"handlers": ["console"], "level": level},
        "loggers": {
            "django": {"handlers": ["console"], "level": "INFO", "propagate": False},
            "django.server": {
                "handlers": ["console"],
                "level": "WARNING",
                "propagate": False,
            },
            "celery": {"handlers": ["console"], "level": "INFO", "propagate": False},
        },
    }
