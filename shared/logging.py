"""
Structured JSON logging for the User Access API.

Loggers are named ``<service>.<component>``. Every event carries the service
name, the current request and user ids, and the OpenTelemetry trace ids when
a span is recording.
"""

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any, Dict, List, Optional

import structlog
from opentelemetry import trace

EventDict = Dict[str, Any]

_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
_user_id: ContextVar[Optional[str]] = ContextVar("user_id", default=None)


def _add_service(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    service, _, component = event_dict.get("logger", "").partition(".")
    if component:
        event_dict["service"] = service
    return event_dict


def _add_trace_ids(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    span_context = trace.get_current_span().get_span_context()
    if span_context.is_valid:
        event_dict["trace_id"] = format(span_context.trace_id, "032x")
        event_dict["span_id"] = format(span_context.span_id, "016x")
    return event_dict


def _add_request_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    request_id = _request_id.get()
    if request_id:
        event_dict.setdefault("request_id", request_id)

    user_id = _user_id.get()
    if user_id:
        event_dict.setdefault("user_id", user_id)

    return event_dict


def build_processors() -> List[Any]:
    """Processor chain ending in the JSON renderer."""
    return [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _add_service,
        _add_trace_ids,
        _add_request_context,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ]


def configure_logging(service_name: str, log_level: str = "info") -> None:
    """Route structlog through stdlib logging as one JSON object per line."""
    structlog.configure(
        processors=build_processors(),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )
    logging.getLogger(service_name).setLevel(getattr(logging, log_level.upper()))


def set_request_id(request_id: Optional[str] = None) -> str:
    """Bind the request id for the current request, generating one if absent."""
    request_id = request_id or str(uuid.uuid4())
    _request_id.set(request_id)
    return request_id


def set_user_context(user_id: Optional[str] = None) -> None:
    if user_id:
        _user_id.set(user_id)


def clear_context() -> None:
    _request_id.set(None)
    _user_id.set(None)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
